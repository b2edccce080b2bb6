"""Tests for FileListManager."""

from unittest.mock import Mock, call

import pytest

from gdrivesync.api import DriveClient
from gdrivesync.exceptions import DriveAPIError
from gdrivesync.file_list_manager import FileListManager
from gdrivesync.models import FOLDER_MIME_TYPE, DriveFile, FileListResult


@pytest.fixture
def mock_client():
    return Mock(spec=DriveClient)


class TestGetAllInFolder:
    def test_single_page(self, mock_client):
        mock_client.list_files.return_value = FileListResult(
            files=[DriveFile(id="1", name="a.txt")]
        )

        files = FileListManager(mock_client).get_all_in_folder("folder1")

        assert [f.id for f in files] == ["1"]
        mock_client.list_files.assert_called_once_with(
            query="'folder1' in parents and trashed=false",
            page_size=1000,
            page_token=None,
        )

    def test_follows_page_tokens(self, mock_client):
        mock_client.list_files.side_effect = [
            FileListResult(files=[DriveFile(id="1", name="a")], next_page_token="p2"),
            FileListResult(files=[DriveFile(id="2", name="b")], next_page_token="p3"),
            FileListResult(files=[DriveFile(id="3", name="c")]),
        ]

        files = FileListManager(mock_client, page_size=1).get_all_in_folder("f")

        assert [f.id for f in files] == ["1", "2", "3"]
        tokens = [c.kwargs["page_token"] for c in mock_client.list_files.call_args_list]
        assert tokens == [None, "p2", "p3"]

    def test_errors_propagate(self, mock_client):
        mock_client.list_files.side_effect = DriveAPIError("boom")
        with pytest.raises(DriveAPIError):
            FileListManager(mock_client).get_all_in_folder("f")


class TestBuildNameIndex:
    def test_skips_folders(self, mock_client):
        mock_client.list_files.return_value = FileListResult(
            files=[
                DriveFile(id="d", name="photos", mime_type=FOLDER_MIME_TYPE),
                DriveFile(id="f", name="photo.jpg", mime_type="image/jpeg"),
            ]
        )

        index = FileListManager(mock_client).build_name_index("f")

        assert set(index) == {"photo.jpg"}

    def test_first_duplicate_wins(self, mock_client):
        mock_client.list_files.return_value = FileListResult(
            files=[
                DriveFile(id="first", name="dup.txt"),
                DriveFile(id="second", name="dup.txt"),
            ]
        )

        index = FileListManager(mock_client).build_name_index("f")

        assert index["dup.txt"].id == "first"

    def test_lists_folder_once(self, mock_client):
        mock_client.list_files.return_value = FileListResult(files=[])
        FileListManager(mock_client).build_name_index("folder1")
        assert mock_client.list_files.call_args_list == [
            call(
                query="'folder1' in parents and trashed=false",
                page_size=1000,
                page_token=None,
            )
        ]
