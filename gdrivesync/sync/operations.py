"""Remote create/update operations for local files."""

from ..api import DriveClient
from ..models import DriveFile
from .comparator import SyncAction, SyncDecision
from .scanner import LocalFile


class SyncOperations:
    """Upload operations with a common interface."""

    def __init__(self, client: DriveClient):
        """Initialize sync operations.

        Args:
            client: Google Drive API client
        """
        self.client = client

    def create(self, local_file: LocalFile, parent_id: str) -> DriveFile:
        """Upload a local file as a new file in the folder."""
        return self.client.create_file(
            file_path=local_file.path,
            parent_id=parent_id,
            name=local_file.name,
        )

    def update(self, local_file: LocalFile, remote_file: DriveFile) -> DriveFile:
        """Replace the content of an existing remote file."""
        return self.client.update_file(
            file_id=remote_file.id,
            file_path=local_file.path,
        )

    def execute(self, decision: SyncDecision, parent_id: str) -> DriveFile:
        """Carry out a sync decision."""
        if decision.action == SyncAction.UPDATE and decision.remote_file:
            return self.update(decision.local_file, decision.remote_file)
        return self.create(decision.local_file, parent_id)

