"""Name-based matching of local files against the remote folder."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models import DriveFile
from .scanner import LocalFile

logger = logging.getLogger(__name__)


class SyncAction(str, Enum):
    """Actions that can be taken for a local file."""

    CREATE = "create"
    """Upload as a new remote file"""

    UPDATE = "update"
    """Replace the content of the remote file with the same name"""


@dataclass
class SyncDecision:
    """Represents a decision about how to sync a file."""

    action: SyncAction
    """Action to take"""

    reason: str
    """Human-readable reason for this decision"""

    local_file: LocalFile
    """Local file to upload"""

    remote_file: Optional[DriveFile] = None
    """Matching remote file (for updates)"""

    @property
    def relative_path(self) -> str:
        return self.local_file.relative_path

    @property
    def name(self) -> str:
        return self.local_file.name


class FileComparator:
    """Decides between create and update for each local file."""

    def compare_files(
        self,
        local_files: list[LocalFile],
        remote_index: dict[str, DriveFile],
    ) -> list[SyncDecision]:
        """Compare local files with the remote name index.

        Remote files are matched by base name, so local files in different
        directories can target the same remote file. Only the last of them
        in scan order is kept; the others are logged and skipped.

        Args:
            local_files: Files found by the local scan
            remote_index: Mapping of remote file name to DriveFile

        Returns:
            One SyncDecision per distinct base name
        """
        by_name: dict[str, LocalFile] = {}
        for local_file in local_files:
            previous = by_name.get(local_file.name)
            if previous is not None:
                logger.warning(
                    f"Skipping {previous.relative_path}: "
                    f"{local_file.relative_path} has the same name"
                )
            by_name[local_file.name] = local_file

        return [
            self.decide(local_file, remote_index) for local_file in by_name.values()
        ]

    def decide(
        self, local_file: LocalFile, remote_index: dict[str, DriveFile]
    ) -> SyncDecision:
        remote_file = remote_index.get(local_file.name)
        if remote_file is not None:
            return SyncDecision(
                action=SyncAction.UPDATE,
                reason="Exists remotely",
                local_file=local_file,
                remote_file=remote_file,
            )
        return SyncDecision(
            action=SyncAction.CREATE,
            reason="New local file",
            local_file=local_file,
        )
