"""Directory scanning utilities for sync operations."""

import fnmatch
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class LocalFile:
    """Represents a local file with metadata."""

    path: Path
    """Absolute path to the file"""

    relative_path: str
    """Relative path (using forward slashes for cross-platform compatibility)"""

    size: int
    """File size in bytes"""

    mtime: float
    """Last modification time (Unix timestamp)"""

    @property
    def name(self) -> str:
        """Base name, used as the remote file name."""
        return self.path.name

    @classmethod
    def from_path(cls, file_path: Path, base_path: Path) -> "LocalFile":
        """Create LocalFile from a path.

        Args:
            file_path: Absolute path to the file
            base_path: Base path for calculating relative paths

        Returns:
            LocalFile instance
        """
        stat = file_path.stat()
        return cls(
            path=file_path,
            relative_path=file_path.relative_to(base_path).as_posix(),
            size=stat.st_size,
            mtime=stat.st_mtime,
        )


class DirectoryScanner:
    """Walks a local directory tree and collects regular files.

    Examples:
        >>> scanner = DirectoryScanner(ignore_patterns=["*.tmp", "cache/*"])
        >>> files = scanner.scan_local(Path("/sync/folder"))
    """

    def __init__(
        self,
        ignore_patterns: Optional[list[str]] = None,
        exclude_dot_files: bool = False,
    ):
        """Initialize directory scanner.

        Args:
            ignore_patterns: Glob patterns matched against the relative path
                and the base name (e.g., ["*.log", "temp/*"])
            exclude_dot_files: Whether to skip files/folders starting with dot
        """
        self.ignore_patterns = ignore_patterns or []
        self.exclude_dot_files = exclude_dot_files

    def should_ignore(self, path: Path, base_path: Path) -> bool:
        """Check if a path should be ignored based on patterns."""
        if self.exclude_dot_files and path.name.startswith("."):
            return True

        relative_path = path.relative_to(base_path).as_posix()
        for pattern in self.ignore_patterns:
            if fnmatch.fnmatch(relative_path, pattern) or fnmatch.fnmatch(
                path.name, pattern
            ):
                logger.debug(f"Ignoring {relative_path} (matches {pattern})")
                return True
        return False

    def scan_local(self, directory: Path) -> list[LocalFile]:
        """Recursively scan a local directory.

        Every regular file below ``directory`` is returned exactly once, in
        sorted order. Symlinked directories are not descended into.
        Unreadable subdirectories and files are logged and skipped.

        Args:
            directory: Directory to scan

        Returns:
            List of LocalFile objects

        Raises:
            FileNotFoundError: If the directory does not exist
            NotADirectoryError: If the path is not a directory
            PermissionError: If the directory itself cannot be read
        """
        if not directory.exists():
            raise FileNotFoundError(f"Local path does not exist: {directory}")
        if not directory.is_dir():
            raise NotADirectoryError(f"Local path is not a directory: {directory}")

        base_path = directory
        # Fail loudly when the root itself is unreadable
        entries = sorted(directory.iterdir())
        return self._scan_entries(entries, base_path)

    def _scan_entries(self, entries: list[Path], base_path: Path) -> list[LocalFile]:
        files: list[LocalFile] = []

        for item in entries:
            if self.should_ignore(item, base_path):
                continue

            if item.is_dir():
                if item.is_symlink():
                    logger.debug(f"Not following symlinked directory {item}")
                    continue
                try:
                    children = sorted(item.iterdir())
                except OSError as e:
                    logger.warning(f"Skipping unreadable directory {item}: {e}")
                    continue
                files.extend(self._scan_entries(children, base_path))
            elif item.is_file():
                try:
                    files.append(LocalFile.from_path(item, base_path))
                except OSError as e:
                    logger.warning(f"Skipping unreadable file {item}: {e}")
            else:
                logger.debug(f"Skipping special file {item}")

        return files
