"""
Dependency downloader implementation.

Provisions every planned dependency concurrently and waits for all of them
before returning.
"""

import logging
import pathlib
from typing import Dict, List, Optional

from scripthost.dependency_config import (
    DependencyConfigManager,
    DependencyState,
    DownloadPlan,
    DownloadStatus,
    ResolvedDependency,
)
from scripthost.dependency_downloader.fetcher import ArtifactFetcher
from scripthost.messages import ConsoleMessageType, ConsoleReporter
from scripthost.runtime import Scheduler, TaskGroup
from scripthost.scripthost_exceptions import ChecksumMismatchError, FetchError
from scripthost.scripthost_logger import ScripthostLogger


class DependencyDownloader:
    """
    Downloads and verifies dependencies.

    Provisioning is best-effort: each dependency succeeds or fails on its own
    and the run always completes.
    """

    def __init__(
        self,
        config_manager: DependencyConfigManager,
        logger: ScripthostLogger,
        fetcher: Optional[ArtifactFetcher] = None,
        scheduler: Optional[Scheduler] = None,
        reporter: Optional[ConsoleReporter] = None,
    ):
        """
        Initialize the dependency downloader.

        Args:
            config_manager: The DependencyConfigManager with download plans
            logger: Logger for progress and error messages
            fetcher: Fetcher used for single artifacts, built from the host
                configuration when omitted
            scheduler: Scheduler that places fetch tasks on background threads
            reporter: Console reporter, built on ``logger`` when omitted
        """
        self.config_manager = config_manager
        self.logger = logger
        self.reporter = reporter or ConsoleReporter(logger)
        self.fetcher = fetcher or ArtifactFetcher(
            self.reporter, timeout=config_manager.scripthost_config.fetch_timeout
        )
        self.scheduler = scheduler or Scheduler()

    def provision_all(self) -> List[ResolvedDependency]:
        """
        Fetch every pending dependency in parallel and wait for all of them.

        Returns:
            Exactly the dependencies that are available locally once every
            fetch has finished
        """
        for key, message in self.config_manager.invalid_records.items():
            self.reporter.send_by_key(
                ConsoleMessageType.ERROR,
                "maven-dependency-download-error",
                "<key>", key,
                "<message>", message,
            )

        pending = self.config_manager.get_pending_downloads()

        if not pending:
            self.logger.log(
                "No pending downloads",
                logging.INFO,
            )
            return self.config_manager.get_resolved_dependencies()

        self.logger.log(
            f"Starting download of {len(pending)} dependencies",
            logging.INFO,
        )

        group = TaskGroup(self.scheduler, self.config_manager.scripthost_config.max_workers)
        for plan in pending:
            group.spawn(plan.dependency_key, self.download_dependency, plan)

        for outcome in group.join():
            if not outcome.succeeded:
                # download_dependency handles its own failures; this only
                # catches errors raised while recording them.
                self.logger.log(
                    f"Download task {outcome.key} ended abnormally: {outcome.error!r}",
                    logging.ERROR,
                )

        return self.config_manager.get_resolved_dependencies()

    def download_all_pending(self) -> bool:
        """
        Returns:
            True if every dependency record was provisioned, False if any failed
        """
        self.provision_all()
        return not self.get_failed_dependencies()

    def download_dependency(self, plan: DownloadPlan) -> bool:
        """
        Provision a single dependency.

        Args:
            plan: The download plan to execute

        Returns:
            True if the dependency is available locally, False otherwise
        """
        try:
            self.config_manager.mark_download_started(plan)
            resolved = self.fetcher.fetch(plan.dependency, plan.destination_path)
            self.config_manager.mark_download_completed(plan, success=True, downloaded_path=resolved.local_file)
            return True

        except ChecksumMismatchError as e:
            # The fetcher has already reported both digests.
            self.config_manager.mark_download_completed(plan, success=False, error_message=e.message)
            return False

        except Exception as e:
            message = e.message if isinstance(e, FetchError) else str(e)
            self.reporter.send_by_key(
                ConsoleMessageType.ERROR,
                "maven-dependency-download-error",
                "<key>", plan.dependency_key,
                "<message>", message,
            )
            self.config_manager.mark_download_completed(plan, success=False, error_message=message)
            return False

    def resolved_paths(self) -> List[pathlib.Path]:
        """Local files of every resolved dependency, in document order."""
        return [resolved.local_file for resolved in self.config_manager.get_resolved_dependencies()]

    def get_downloaded_dependencies(self) -> Dict[str, DependencyState]:
        """
        Returns:
            Dictionary mapping dependency keys to their states
        """
        states = self.config_manager.get_dependency_states()
        return {key: state for key, state in states.items() if state.is_downloaded()}

    def get_failed_dependencies(self) -> Dict[str, DependencyState]:
        """
        Returns:
            Dictionary mapping dependency keys to the states of failed entries
        """
        states = self.config_manager.get_dependency_states()
        return {
            key: state
            for key, state in states.items()
            if state.download_status == DownloadStatus.FAILED
        }

    def get_download_summary(self) -> Dict[str, int]:
        """
        Get a summary of download results.

        Returns:
            Dictionary with counts of successful, failed, and pending downloads
        """
        states = self.config_manager.get_dependency_states()
        pending = self.config_manager.get_pending_downloads()

        completed = sum(1 for state in states.values() if state.is_downloaded())
        failed = sum(
            1
            for state in states.values()
            if state.download_status == DownloadStatus.FAILED
        )

        return {
            "completed": completed,
            "failed": failed,
            "pending": len(pending),
            "total": completed + failed + len(pending),
        }

    def close(self) -> None:
        self.fetcher.close()
