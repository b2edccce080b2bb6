"""gdrivesync - one-way sync of a local folder to Google Drive."""

from .api import DriveClient
from .auth import OAuthClientConfig, OAuthSession, TokenStore
from .config import Config, SyncSettings
from .exceptions import (
    DriveAPIError,
    DriveAuthenticationError,
    DriveConfigError,
    DriveFileNotFoundError,
    DriveInvalidResponseError,
    DriveNetworkError,
    DriveNotFoundError,
    DrivePermissionError,
    DriveRateLimitError,
    DriveUploadError,
)
from .models import DriveFile

__version__ = "0.1.0"

__all__ = [
    "DriveClient",
    "DriveFile",
    "Config",
    "SyncSettings",
    "OAuthClientConfig",
    "OAuthSession",
    "TokenStore",
    "DriveAPIError",
    "DriveAuthenticationError",
    "DriveConfigError",
    "DriveFileNotFoundError",
    "DriveInvalidResponseError",
    "DriveNetworkError",
    "DriveNotFoundError",
    "DrivePermissionError",
    "DriveRateLimitError",
    "DriveUploadError",
]
