"""Exceptions raised by gdrivesync."""


class DriveAPIError(Exception):
    """Base exception for all Google Drive errors."""


class DriveAuthenticationError(DriveAPIError):
    """Credentials were rejected or the OAuth flow failed."""


class DrivePermissionError(DriveAPIError):
    """Access to the requested resource is forbidden."""


class DriveNotFoundError(DriveAPIError):
    """The requested remote resource does not exist."""


class DriveRateLimitError(DriveAPIError):
    """The API rejected the request because of rate limiting."""


class DriveNetworkError(DriveAPIError):
    """The request could not be sent or no response was received."""


class DriveInvalidResponseError(DriveAPIError):
    """The API returned a response that could not be parsed."""


class DriveConfigError(DriveAPIError):
    """Required configuration (credentials, folder id, ...) is missing."""


class DriveFileNotFoundError(DriveAPIError):
    """A local file that should be uploaded does not exist."""

    def __init__(self, file_path: str):
        self.file_path = file_path
        super().__init__(f"Local file not found: {file_path}")


class DriveUploadError(DriveAPIError):
    """An upload session could not be started or completed."""
