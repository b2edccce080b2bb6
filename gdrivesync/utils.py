"""Utility functions for gdrivesync."""

import mimetypes
from pathlib import Path

# =============================================================================
# Constants
# =============================================================================

# Fallback MIME type for uploaded content
DEFAULT_MIME_TYPE: str = "application/octet-stream"

# Page size used when listing a remote folder (Drive allows up to 1000)
DEFAULT_PAGE_SIZE: int = 1000

# Port of the local OAuth redirect listener
DEFAULT_REDIRECT_PORT: int = 8080


# =============================================================================
# File utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


def detect_mime_type(file_path: Path) -> str:
    """Guess the MIME type of a file from its name.

    Returns 'application/octet-stream' when the type is unknown.
    """
    mime_type, _ = mimetypes.guess_type(str(file_path))
    return mime_type or DEFAULT_MIME_TYPE


def escape_query_value(value: str) -> str:
    """Escape a string literal for the Drive ``q`` query language.

    Examples:
        >>> escape_query_value("it's")
        "it\\\\'s"
    """
    return value.replace("\\", "\\\\").replace("'", "\\'")
