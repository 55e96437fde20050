"""
Host runner for scripthost.

Wires the dependency provisioner and the lifecycle coordinator together for a
workspace described by a ``scripthost.toml`` file:

```toml
[host]
data_folder = "data"           # relative to the workspace root
fetch_timeout = 30.0
placeholder_enabled = false

[dependencies.gson]
groupId = "com.google.code.gson"
artifactId = "gson"
version = "2.10.1"
repository = "https://repo1.maven.org/maven2/"

[plugins.greeter]
author = "someone"
version = "1.0.0"
description = "Says hello"
```

Example usage:
```python
with HostRunner("/path/to/workspace") as runner:
    runner.reload()
    print(runner.status())
```
"""

import logging
import os
import pathlib
from typing import Any, Dict, List, Optional

import httpx

from scripthost.dependency_config import DependencyConfigManager, ResolvedDependency
from scripthost.dependency_downloader import ArtifactFetcher, DependencyDownloader
from scripthost.extensions import (
    ExecutorFactory,
    HostInterop,
    LifecycleCoordinator,
    TomlConfigurationSource,
    python_executor_factory,
)
from scripthost.extensions.discovery import HOST_DOCUMENT, load_host_document
from scripthost.messages import ConsoleReporter
from scripthost.runtime import PrimaryThread, Scheduler
from scripthost.scripthost_config import ScripthostConfig
from scripthost.scripthost_exceptions import ConfigurationError
from scripthost.scripthost_logger import ScripthostLogger


class HostRunner:
    """
    Runs the extensions of one workspace.

    This class handles:
    - Loading and validating ``scripthost.toml`` at initialization
    - Provisioning declared dependencies before any extension loads
    - Registering, reloading and unloading extensions on the primary thread
    """

    def __init__(
        self,
        workspace_root: Optional[str] = None,
        logger: Optional[ScripthostLogger] = None,
        interop: Optional[HostInterop] = None,
        executor_factory: Optional[ExecutorFactory] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the runner.

        Args:
            workspace_root: Directory holding ``scripthost.toml``. If None, uses current directory.
            logger: Logger, a default ScripthostLogger when omitted
            interop: Host subsystems, in-memory registries when omitted
            executor_factory: Builds executors for source files, Python modules when omitted
            client: HTTP client for downloads

        Raises:
            ConfigurationError: If ``scripthost.toml`` is missing or invalid
        """
        self.workspace_root = workspace_root or os.getcwd()
        self.logger = logger or ScripthostLogger()
        self.reporter = ConsoleReporter(self.logger)
        self.document_path = os.path.join(self.workspace_root, HOST_DOCUMENT)
        self.config = self._load_config()

        self.primary = PrimaryThread(self.logger)
        self.scheduler = Scheduler(self.primary)
        self.source = TomlConfigurationSource(
            self.document_path, self.config.scripts_folder, self.config.source_suffix
        )
        self.interop = interop or HostInterop.in_memory(self.config.placeholder_enabled)
        self.config_manager: Optional[DependencyConfigManager] = None
        self.downloader: Optional[DependencyDownloader] = None
        self._client = client

        self.coordinator = LifecycleCoordinator(
            self.source,
            self.interop,
            executor_factory or python_executor_factory(self.resolved_paths),
            self.logger,
            scheduler=self.scheduler,
            reporter=self.reporter,
        )

    def _load_config(self) -> ScripthostConfig:
        document = load_host_document(self.document_path)
        host_section = document.get("host", {})
        if not isinstance(host_section, dict):
            raise ConfigurationError(f"[host] in {self.document_path} must be a table")

        config = ScripthostConfig.from_dict(host_section, data_folder=self.workspace_root)
        self.logger.log(
            f"Loaded host configuration from {self.document_path}: libs in {config.libs_folder}, "
            f"scripts in {config.scripts_folder}",
            logging.INFO,
        )
        return config

    def start(self) -> List[str]:
        """
        Provision dependencies, then register every extension.

        Returns:
            Names of the extensions that loaded
        """
        self.primary.start()
        self.provision_dependencies()
        return self.coordinator.register()

    def provision_dependencies(self) -> List[ResolvedDependency]:
        """
        Download and verify every declared dependency, blocking until all
        downloads have finished.
        """
        self.config_manager = DependencyConfigManager(
            dependency_records=self.source.dependency_records(),
            scripthost_config=self.config,
        )
        self.config_manager.create_download_plan()

        if self.downloader is not None:
            self.downloader.close()
        fetcher = ArtifactFetcher(self.reporter, client=self._client, timeout=self.config.fetch_timeout)
        self.downloader = DependencyDownloader(
            self.config_manager,
            self.logger,
            fetcher=fetcher,
            scheduler=self.scheduler,
            reporter=self.reporter,
        )
        resolved = self.downloader.provision_all()

        summary = self.downloader.get_download_summary()
        if summary["failed"]:
            self.logger.log(
                "Some dependencies could not be provisioned. Check logs for details.",
                logging.ERROR,
            )
        self.logger.log(
            f"Download summary: {summary['completed']} completed, "
            f"{summary['failed']} failed, {summary['pending']} pending",
            logging.INFO,
        )
        return resolved

    def resolved_paths(self) -> List[pathlib.Path]:
        if self.downloader is None:
            return []
        return self.downloader.resolved_paths()

    def reload(self) -> List[str]:
        """Reload every extension. Dependencies are not provisioned again."""
        return self.coordinator.reload()

    def status(self) -> Dict[str, Any]:
        status = self.coordinator.status()
        status["dependencies"] = self.downloader.get_download_summary() if self.downloader else {}
        return status

    def stop(self) -> None:
        """Unload every extension and stop the primary thread."""
        try:
            if self.primary.is_running():
                self.coordinator.unload()
        finally:
            if self.downloader is not None:
                self.downloader.close()
            self.primary.stop()

    def __enter__(self) -> "HostRunner":
        try:
            self.start()
        except BaseException:
            self.stop()
            raise
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.stop()
