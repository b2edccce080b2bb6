"""Sync engine for gdrivesync - one-way local to Google Drive uploads."""

from .comparator import FileComparator, SyncAction, SyncDecision
from .engine import SyncEngine
from .operations import SyncOperations
from .scanner import DirectoryScanner, LocalFile

__all__ = [
    "SyncEngine",
    "SyncOperations",
    "DirectoryScanner",
    "FileComparator",
    "SyncAction",
    "SyncDecision",
    "LocalFile",
]
