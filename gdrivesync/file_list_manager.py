"""Manager for listing remote folders with automatic pagination."""

import logging

from .api import DriveClient
from .models import DriveFile
from .utils import DEFAULT_PAGE_SIZE, escape_query_value

logger = logging.getLogger(__name__)


class FileListManager:
    """Fetches the complete contents of a Drive folder."""

    def __init__(self, client: DriveClient, page_size: int = DEFAULT_PAGE_SIZE):
        """Initialize the file list manager.

        Args:
            client: Google Drive API client
            page_size: Number of entries requested per page
        """
        self.client = client
        self.page_size = page_size

    def get_all_in_folder(self, folder_id: str) -> list[DriveFile]:
        """Get all non-trashed children of a folder.

        Follows ``nextPageToken`` until the listing is exhausted. API
        errors propagate to the caller.

        Args:
            folder_id: Drive folder ID

        Returns:
            List of files and folders directly inside the folder
        """
        query = f"'{escape_query_value(folder_id)}' in parents and trashed=false"
        all_files: list[DriveFile] = []
        page_token = None
        page = 0

        while True:
            page += 1
            result = self.client.list_files(
                query=query,
                page_size=self.page_size,
                page_token=page_token,
            )
            all_files.extend(result.files)
            logger.debug(
                f"Folder {folder_id}: page {page} returned {len(result.files)} entries"
            )
            if not result.next_page_token:
                break
            page_token = result.next_page_token

        return all_files

    def build_name_index(self, folder_id: str) -> dict[str, DriveFile]:
        """Map file names to remote files for a folder.

        Folders are left out so a local file never matches a folder of the
        same name. When several files share a name the first one listed
        wins.

        Args:
            folder_id: Drive folder ID

        Returns:
            Dictionary mapping file name to DriveFile
        """
        index: dict[str, DriveFile] = {}
        for drive_file in self.get_all_in_folder(folder_id):
            if drive_file.is_folder:
                continue
            if drive_file.name in index:
                logger.debug(
                    f"Duplicate remote name '{drive_file.name}' "
                    f"(keeping {index[drive_file.name].id}, ignoring {drive_file.id})"
                )
                continue
            index[drive_file.name] = drive_file
        return index
