"""Core sync engine for uploading a local folder to Google Drive."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional

from ..api import DriveClient
from ..config import SyncSettings
from ..file_list_manager import FileListManager
from ..output import OutputFormatter
from .comparator import FileComparator, SyncAction, SyncDecision
from .operations import SyncOperations
from .scanner import DirectoryScanner, LocalFile

logger = logging.getLogger(__name__)


class SyncEngine:
    """Orchestrates a one-way local-to-Drive sync."""

    def __init__(
        self,
        client: DriveClient,
        output: Optional[OutputFormatter] = None,
    ):
        """Initialize sync engine.

        Args:
            client: Google Drive API client
            output: Output formatter for displaying progress/status
        """
        self.client = client
        self.output = output or OutputFormatter()
        self.operations = SyncOperations(client)
        self.comparator = FileComparator()

    def sync_folder(self, settings: SyncSettings) -> dict:
        """Upload every file below the local folder to the Drive folder.

        Files whose name already exists in the Drive folder are updated,
        all others are created. Uploads run concurrently and all of them
        finish before this method returns.

        Args:
            settings: Parameters of this sync run

        Returns:
            Dictionary with "total", "created", "updated" and "errors" counts

        Raises:
            FileNotFoundError, NotADirectoryError, PermissionError: If the
                local folder cannot be walked
            DriveAPIError: If the remote folder cannot be listed
        """
        scanner = DirectoryScanner(
            ignore_patterns=settings.exclude_patterns,
            exclude_dot_files=settings.exclude_dot_files,
        )
        local_files = scanner.scan_local(settings.local_path)
        logger.debug(f"Found {len(local_files)} local files in {settings.local_path}")

        remote_index = FileListManager(self.client).build_name_index(
            settings.folder_id
        )
        logger.debug(
            f"Found {len(remote_index)} remote files in folder {settings.folder_id}"
        )

        decisions = self.comparator.compare_files(local_files, remote_index)
        stats = self._create_empty_stats(len(decisions))

        if not decisions:
            self.output.info("No local files to sync.")
            return stats

        if settings.dry_run:
            self._display_sync_plan(decisions)
            for decision in decisions:
                self._count(stats, decision.action)
            return stats

        self._execute_decisions_parallel(
            decisions, settings.folder_id, settings.workers, stats
        )
        self._display_summary(stats)
        return stats

    def upload_file(self, local_file: LocalFile, parent_id: str) -> SyncAction:
        """Create or update a single file.

        The name is looked up with a folder query instead of listing the
        whole folder.

        Returns:
            The action that was carried out
        """
        existing = self.client.find_file(local_file.name, parent_id)
        remote_index = {existing.name: existing} if existing else {}
        decision = self.comparator.decide(local_file, remote_index)
        self._execute_single_decision(decision, parent_id)
        return decision.action

    def _create_empty_stats(self, total: int) -> dict:
        return {"total": total, "created": 0, "updated": 0, "errors": 0}

    @staticmethod
    def _count(stats: dict, action: SyncAction) -> None:
        if action == SyncAction.UPDATE:
            stats["updated"] += 1
        else:
            stats["created"] += 1

    def _display_sync_plan(self, decisions: list[SyncDecision]) -> None:
        """Show what a sync would do without uploading anything."""
        for decision in decisions:
            verb = "update" if decision.action == SyncAction.UPDATE else "upload"
            self.output.info(f"Would {verb}: {decision.relative_path}")
        self.output.warning("Dry run mode - no files were uploaded.")

    def _execute_single_decision(self, decision: SyncDecision, parent_id: str) -> None:
        if decision.action == SyncAction.UPDATE:
            message = f"Updating {decision.name} on Google Drive..."
        else:
            message = f"Uploading {decision.name} to Google Drive..."
        self.output.progress_message(message)
        self.operations.execute(decision, parent_id)

    def _execute_decisions_parallel(
        self,
        decisions: list[SyncDecision],
        parent_id: str,
        max_workers: int,
        stats: dict,
    ) -> None:
        """Execute decisions on a thread pool and wait for all of them.

        Args:
            decisions: Decisions to execute
            parent_id: Destination folder ID
            max_workers: Pool size; 0 starts one worker per decision
            stats: Counters updated in place
        """
        workers = max_workers if max_workers > 0 else len(decisions)
        workers = min(workers, len(decisions))
        logger.debug(f"Executing {len(decisions)} uploads with {workers} workers")

        def execute_with_timing(decision: SyncDecision) -> float:
            start = time.time()
            self._execute_single_decision(decision, parent_id)
            return time.time() - start

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(execute_with_timing, decision): decision
                for decision in decisions
            }

            for future in as_completed(futures):
                decision = futures[future]
                try:
                    elapsed = future.result()
                except Exception as e:
                    logger.debug(f"Failed {decision.relative_path}", exc_info=True)
                    self.output.error(f"Error syncing {decision.relative_path}: {e}")
                    stats["errors"] += 1
                    continue

                logger.debug(f"Completed {decision.relative_path} in {elapsed:.2f}s")
                self._count(stats, decision.action)

    def _display_summary(self, stats: dict) -> None:
        items = [
            ("Uploaded", f"{stats['created']} files"),
            ("Updated", f"{stats['updated']} files"),
        ]
        if stats["errors"] > 0:
            items.append(("Failed", f"{stats['errors']} files"))
        self.output.print_summary("Sync Complete", items)

