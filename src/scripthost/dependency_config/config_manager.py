"""
Dependency configuration manager.

Turns the dependency records of the host document into download plans and
tracks the state of every dependency while downloads run concurrently.
"""

import pathlib
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from scripthost.dependency_models import MavenDependenciesConfig, MavenDependency
from scripthost.scripthost_config import ScripthostConfig


class DownloadStatus:
    """Enumeration of download statuses."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class ResolvedDependency:
    """
    A descriptor plus the local artifact backing it.

    ``local_file`` is None when provisioning failed; such a dependency is not
    available for loading.
    """

    dependency: MavenDependency
    local_file: Optional[pathlib.Path] = None

    def is_resolved(self) -> bool:
        return self.local_file is not None


class DownloadPlan:
    """
    A plan to download a specific dependency.

    Captures all information needed to fetch and verify one artifact.
    """

    def __init__(
            self,
            dependency_key: str,
            dependency: MavenDependency,
            destination_path: pathlib.Path,
            status: str = DownloadStatus.PENDING,
    ):
        """
        Initialize a download plan.

        Args:
            dependency_key: Unique key for the dependency
            dependency: The MavenDependency descriptor
            destination_path: Canonical local path of the artifact
            status: Current download status
        """
        self.dependency_key = dependency_key
        self.dependency = dependency
        self.url = dependency.download_url
        self.checksum_url = dependency.checksum_url
        self.destination_path = destination_path
        self.status = status
        self.error_message: Optional[str] = None

    def __repr__(self) -> str:
        return (
            f"DownloadPlan(key={self.dependency_key}, "
            f"status={self.status}, url={self.url})"
        )


class DependencyState:
    """
    Current state of a dependency.

    Tracks whether a dependency has been provisioned and where it's located.
    """

    def __init__(
            self,
            dependency_key: str,
            download_status: str,
            dependency: Optional[MavenDependency] = None,
            downloaded_path: Optional[pathlib.Path] = None,
            error_message: Optional[str] = None,
    ):
        self.dependency_key = dependency_key
        self.download_status = download_status
        self.dependency = dependency
        self.downloaded_path = downloaded_path
        self.error_message = error_message

    def is_downloaded(self) -> bool:
        """Check if the dependency has been successfully provisioned."""
        return self.download_status == DownloadStatus.COMPLETED

    def __repr__(self) -> str:
        return (
            f"DependencyState(key={self.dependency_key}, "
            f"status={self.download_status}, path={self.downloaded_path})"
        )


class DependencyConfigManager:
    """
    Manages dependency records and download decisions.

    Plans and states are updated from several download threads at once, so
    every mutation goes through ``_lock``.
    """

    def __init__(
        self,
        dependency_records: Mapping[str, Any],
        scripthost_config: ScripthostConfig,
        base_download_path: Optional[str] = None,
    ):
        """
        Initialize the dependency config manager.

        Args:
            dependency_records: Mapping of entry key to flat dependency record
            scripthost_config: Host configuration
            base_download_path: Root folder of the artifact layout, defaults to
                the configured libs folder
        """
        self.dependencies_config = MavenDependenciesConfig(dependencies=dict(dependency_records))
        self.scripthost_config = scripthost_config
        self.base_download_path = pathlib.Path(base_download_path or scripthost_config.libs_folder)
        self.download_plans: Dict[str, DownloadPlan] = {}
        self.dependency_states: Dict[str, DependencyState] = {}
        self.invalid_records: Dict[str, str] = {}
        self._lock = threading.Lock()

    def create_download_plan(self) -> None:
        """
        Create one download plan per valid dependency record.

        Records that fail validation get a FAILED state straight away and are
        listed in ``invalid_records``.
        """
        dependencies, invalid = self.dependencies_config.get_dependencies()

        with self._lock:
            self.download_plans = {}
            self.dependency_states = {}
            self.invalid_records = invalid

            for key, message in invalid.items():
                self.dependency_states[key] = DependencyState(
                    dependency_key=key,
                    download_status=DownloadStatus.FAILED,
                    error_message=message,
                )

            for dependency in dependencies:
                self.download_plans[dependency.key] = DownloadPlan(
                    dependency_key=dependency.key,
                    dependency=dependency,
                    destination_path=self._get_destination_path(dependency),
                )
                self.dependency_states[dependency.key] = DependencyState(
                    dependency_key=dependency.key,
                    download_status=DownloadStatus.PENDING,
                    dependency=dependency,
                )

    def _get_destination_path(self, dependency: MavenDependency) -> pathlib.Path:
        """
        Determine the canonical destination path for a dependency.

        ``<root>/<group/with/slashes>/<artifact>/<version>/<artifact>-<version>.<ext>``
        """
        return self.base_download_path.joinpath(*dependency.relative_path.split("/"))

    def get_download_plans(self) -> Dict[str, DownloadPlan]:
        with self._lock:
            return dict(self.download_plans)

    def get_pending_downloads(self) -> List[DownloadPlan]:
        """
        Get all pending downloads.

        Returns:
            List of DownloadPlan objects with PENDING status, in document order
        """
        with self._lock:
            return [p for p in self.download_plans.values() if p.status == DownloadStatus.PENDING]

    def mark_download_started(self, plan: DownloadPlan) -> None:
        with self._lock:
            plan.status = DownloadStatus.IN_PROGRESS
            self.dependency_states[plan.dependency_key].download_status = DownloadStatus.IN_PROGRESS

    def mark_download_completed(
        self,
        plan: DownloadPlan,
        success: bool = True,
        downloaded_path: Optional[pathlib.Path] = None,
        error_message: Optional[str] = None,
    ) -> None:
        """
        Mark a download plan as completed or failed.

        Args:
            plan: The download plan to mark
            success: Whether the dependency was provisioned
            downloaded_path: Local file backing the dependency, defaults to the
                plan's destination
            error_message: Cause of the failure
        """
        with self._lock:
            plan.status = DownloadStatus.COMPLETED if success else DownloadStatus.FAILED
            plan.error_message = None if success else (error_message or "Download failed")

            self.dependency_states[plan.dependency_key] = DependencyState(
                dependency_key=plan.dependency_key,
                download_status=plan.status,
                dependency=plan.dependency,
                downloaded_path=(downloaded_path or plan.destination_path) if success else None,
                error_message=plan.error_message,
            )

    def get_dependency_states(self) -> Dict[str, DependencyState]:
        """
        Returns:
            Snapshot of the states of all dependencies, keyed by entry key
        """
        with self._lock:
            return dict(self.dependency_states)

    def get_dependency_state(self, dep_key: str) -> Optional[DependencyState]:
        with self._lock:
            return self.dependency_states.get(dep_key)

    def get_resolved_dependencies(self) -> List[ResolvedDependency]:
        """
        Returns:
            Exactly the dependencies whose artifact is available locally
        """
        with self._lock:
            return [
                ResolvedDependency(dependency=state.dependency, local_file=state.downloaded_path)
                for state in self.dependency_states.values()
                if state.is_downloaded() and state.dependency is not None
            ]
