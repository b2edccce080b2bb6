"""Data models for Google Drive API responses."""

from dataclasses import dataclass, field
from typing import Any, Optional

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


@dataclass
class DriveFile:
    """A file or folder stored in Google Drive."""

    id: str
    name: str
    mime_type: str = "application/octet-stream"
    size: int = 0
    modified_time: Optional[str] = None
    parents: list[str] = field(default_factory=list)
    trashed: bool = False

    @property
    def is_folder(self) -> bool:
        """Whether this entry is a Drive folder."""
        return self.mime_type == FOLDER_MIME_TYPE

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "DriveFile":
        """Create a DriveFile from a ``files`` resource.

        Drive reports ``size`` as a string and omits it for folders and
        Google Docs, so it is normalized to an int here.
        """
        try:
            size = int(data.get("size") or 0)
        except (TypeError, ValueError):
            size = 0
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            mime_type=data.get("mimeType", "application/octet-stream"),
            size=size,
            modified_time=data.get("modifiedTime"),
            parents=list(data.get("parents") or []),
            trashed=bool(data.get("trashed", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "mimeType": self.mime_type,
            "size": self.size,
            "modifiedTime": self.modified_time,
            "parents": self.parents,
        }


@dataclass
class FileListResult:
    """One page of a ``files.list`` response."""

    files: list[DriveFile]
    next_page_token: Optional[str] = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "FileListResult":
        return cls(
            files=[DriveFile.from_api_response(f) for f in data.get("files", [])],
            next_page_token=data.get("nextPageToken") or None,
        )
