"""
Lifecycle coordinator.

Drives discover -> load -> hooks -> unload -> reload for every extension on
the host. All work that touches host subsystems is placed on the primary
context through the scheduler.
"""

from __future__ import annotations

import logging
import pathlib
import threading
from typing import Any, Dict, List, Optional

from scripthost.extensions.discovery import ConfigurationSource, discover_units
from scripthost.extensions.executor import (
    HOOK_ON_LOAD,
    HOOK_ON_RELOAD,
    HOOK_ON_UNLOAD,
    ExecutorFactory,
    HostApi,
    ScriptExecutor,
)
from scripthost.extensions.interop import HostInterop
from scripthost.extensions.models import (
    ExtensionFailure,
    ExtensionUnit,
    InteropKind,
    InteropRegistration,
    LifecycleState,
    teardown_stages,
)
from scripthost.extensions.registry import ExtensionRegistry
from scripthost.messages import ConsoleMessageType, ConsoleReporter
from scripthost.runtime import Scheduler
from scripthost.scripthost_exceptions import LifecycleError
from scripthost.scripthost_logger import ScripthostLogger


class LifecycleCoordinator:
    """
    Loads, unloads and reloads all extensions of the host.

    Per-extension failures are reported and recorded in ``failures``; they
    never abort the operation. A configuration that cannot be read aborts
    ``register`` with a ConfigurationError.
    """

    def __init__(
        self,
        source: ConfigurationSource,
        interop: HostInterop,
        executor_factory: ExecutorFactory,
        logger: ScripthostLogger,
        registry: Optional[ExtensionRegistry] = None,
        scheduler: Optional[Scheduler] = None,
        reporter: Optional[ConsoleReporter] = None,
    ) -> None:
        self.source = source
        self.interop = interop
        self.executor_factory = executor_factory
        self.logger = logger
        self.registry = registry or ExtensionRegistry()
        self.scheduler = scheduler or Scheduler()
        self.reporter = reporter or ConsoleReporter(logger)
        self.units: List[ExtensionUnit] = []
        self.failures: List[ExtensionFailure] = []
        self._state = LifecycleState.UNLOADED
        self._lock = threading.RLock()

    @property
    def state(self) -> LifecycleState:
        return self._state

    def register(self) -> List[str]:
        """
        Discover extensions and load each of them (UNLOADED -> LOADED).

        Returns:
            Names of the extensions that loaded

        Raises:
            LifecycleError: If extensions are already loaded
            ConfigurationError: If the configuration cannot be read
        """
        return self.scheduler.run_sync_on_primary(self._register)

    def unload(self) -> None:
        """Unload every extension and tear down its registrations (LOADED -> UNLOADED)."""
        self.scheduler.run_sync_on_primary(self._unload)

    def reload(self) -> List[str]:
        """
        Invoke ``onReload`` on every extension, unload everything, then
        register again. Blocks until done.
        """
        return self.scheduler.run_sync_on_primary(self._reload)

    def status(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "state": self._state.value,
                "extensions": self.registry.extension_names(),
                "registrations": {kind.value: self.registry.count(kind) for kind in InteropKind},
                "failures": [failure.extension_name for failure in self.failures],
            }

    def _register(self) -> List[str]:
        with self._lock:
            if self._state is not LifecycleState.UNLOADED:
                raise LifecycleError(f"Cannot register extensions while {self._state.value}")
            self.failures = []
            self._discover_and_load()
            return self.registry.extension_names()

    def _unload(self) -> None:
        with self._lock:
            if self._state is LifecycleState.UNLOADED:
                self.logger.log("No extensions loaded, nothing to unload", logging.INFO)
                return
            if self._state is not LifecycleState.LOADED:
                raise LifecycleError(f"Cannot unload extensions while {self._state.value}")

            self._state = LifecycleState.UNLOADING
            try:
                self._unload_all()
            finally:
                self._state = LifecycleState.UNLOADED

    def _reload(self) -> List[str]:
        with self._lock:
            if self._state not in (LifecycleState.LOADED, LifecycleState.UNLOADED):
                raise LifecycleError(f"Cannot reload extensions while {self._state.value}")
            self.failures = []

            if self._state is LifecycleState.LOADED:
                self._state = LifecycleState.RELOADING
                try:
                    self._invoke_all(HOOK_ON_RELOAD)
                    self._unload_all()
                finally:
                    self._state = LifecycleState.UNLOADED

            self._discover_and_load()
            return self.registry.extension_names()

    def _discover_and_load(self) -> None:
        """
        Discover and load every extension. If discovery itself fails, whatever
        was loaded so far is torn down and the host is left UNLOADED.
        """
        self._state = LifecycleState.DISCOVERING
        try:
            self._load_units()
        except BaseException:
            self._teardown()
            self._state = LifecycleState.UNLOADED
            raise
        self._state = LifecycleState.LOADED

    def _load_units(self) -> None:
        units, invalid = discover_units(self.source)

        for folder, message in invalid.items():
            self.reporter.send_by_key(
                ConsoleMessageType.ERROR, "extension-unit-invalid", "<folder>", folder, "<message>", message
            )
            self.failures.append(ExtensionFailure(extension_name=folder, stage="discover", message=message))

        self.units = units
        for unit in units:
            self.reporter.send_by_key(
                ConsoleMessageType.NORMAL,
                "extension-unit-discovered",
                "<name>", unit.name,
                "<folder>", unit.folder,
                "<source_count>", str(len(unit.source_files)),
            )
            for source_file in unit.source_files:
                self._load_script(unit, source_file)

    def _load_script(self, unit: ExtensionUnit, source_file: pathlib.Path) -> None:
        name = f"{unit.folder}/{source_file.name}"
        executor: Optional[ScriptExecutor] = None
        try:
            host_api = HostApi(name, self.registry, self.interop)
            executor = self.executor_factory(unit, source_file, name, host_api)
            self.registry.add_executor(executor)
            executor.invoke(HOOK_ON_LOAD)
        except KeyboardInterrupt:
            self._discard(name, executor)
            raise
        except BaseException as e:
            self._discard(name, executor)
            self.reporter.send_by_key(
                ConsoleMessageType.ERROR, "script-register-error", "<script_name>", name, "<message>", str(e)
            )
            self.failures.append(ExtensionFailure(extension_name=name, stage="load", message=str(e)))
            return

        self.reporter.send_by_key(ConsoleMessageType.NORMAL, "script-registered", "<script_name>", name)

    def _discard(self, name: str, executor: Optional[ScriptExecutor]) -> None:
        """Roll back everything a failed extension managed to register."""
        registrations = self.registry.clear(name)
        for kind in teardown_stages(self.interop.placeholders_available()):
            self._unregister([r for r in registrations if r.kind is kind])
        self.interop.contexts.pop(name, None)

        if executor is not None:
            if self.registry.get_executor(name) is executor:
                self.registry.remove_executor(name)
            self._destroy(executor)

    def _unload_all(self) -> None:
        self._invoke_all(HOOK_ON_UNLOAD)
        self._teardown()

    def _teardown(self) -> None:
        for kind in teardown_stages(self.interop.placeholders_available()):
            registrations = self.registry.registrations_of_kind(kind)
            self._unregister(registrations)
            self.reporter.send_by_key(
                ConsoleMessageType.NORMAL,
                "interop-unregistered",
                "<count>", str(len(registrations)),
                "<kind>", kind.value,
            )

        for executor in self.registry.executors():
            self.registry.remove_executor(executor.name)
            self._destroy(executor)

        self.interop.contexts.clear()
        self.registry.clear_all()
        self.units = []

    def _unregister(self, registrations: List[InteropRegistration]) -> None:
        for registration in registrations:
            try:
                self.interop.subsystem(registration.kind).unregister(registration.handle)
            except Exception as e:
                self.reporter.send_by_key(
                    ConsoleMessageType.ERROR,
                    "interop-unregister-error",
                    "<kind>", registration.kind.value,
                    "<handle>", repr(registration.handle),
                    "<script_name>", registration.owner,
                    "<message>", str(e),
                )

    def _invoke_all(self, hook_name: str) -> None:
        for executor in self.registry.executors():
            if not executor.is_valid():
                continue
            try:
                executor.invoke(hook_name)
            except KeyboardInterrupt:
                raise
            except BaseException as e:
                self.reporter.send_by_key(
                    ConsoleMessageType.ERROR,
                    "script-hook-error",
                    "<hook>", hook_name,
                    "<script_name>", executor.name,
                    "<message>", str(e),
                )
                self.failures.append(ExtensionFailure(extension_name=executor.name, stage=hook_name, message=str(e)))

    def _destroy(self, executor: ScriptExecutor) -> None:
        try:
            executor.destroy()
        except Exception as e:
            self.logger.log(f"Destroying script {executor.name} failed: {e}", logging.WARNING)
