"""
Script executors.

The lifecycle coordinator only needs ``ScriptExecutor``: a name, a way to
invoke named hooks and a validity check. ``PythonScriptExecutor`` is the
default implementation, running a Python source file as a module.
"""

from __future__ import annotations

import importlib.util
import pathlib
import sys
import threading
import uuid
from collections.abc import Callable, Sequence
from types import ModuleType
from typing import Any, Protocol, runtime_checkable

from scripthost.extensions.interop import HostInterop
from scripthost.extensions.models import ExtensionUnit, InteropKind
from scripthost.extensions.registry import ExtensionRegistry
from scripthost.scripthost_exceptions import InteropError, ScripthostException

HOOK_ON_LOAD = "onLoad"
HOOK_ON_UNLOAD = "onUnload"
HOOK_ON_RELOAD = "onReload"

_HOOK_ALIASES = {
    HOOK_ON_LOAD: "on_load",
    HOOK_ON_UNLOAD: "on_unload",
    HOOK_ON_RELOAD: "on_reload",
}

# sys.path is process-global; loads that extend it must not interleave.
_SYS_PATH_LOCK = threading.Lock()


@runtime_checkable
class ScriptExecutor(Protocol):
    """What the coordinator needs from a loaded extension."""

    name: str

    def invoke(self, hook_name: str) -> Any: ...

    def is_valid(self) -> bool: ...

    def destroy(self) -> None: ...


class HostApi:
    """API passed to an extension for registering into the host."""

    def __init__(self, owner: str, registry: ExtensionRegistry, interop: HostInterop) -> None:
        self._owner = owner
        self._registry = registry
        self._interop = interop

    @property
    def owner(self) -> str:
        return self._owner

    def register_command(self, handle: Any) -> Any:
        """Register a command with the host."""
        return self._register(InteropKind.COMMAND, handle)

    def register_listener(self, handle: Any) -> Any:
        """Register an event listener with the host."""
        return self._register(InteropKind.LISTENER, handle)

    def register_easy_listener(self, handle: Any) -> Any:
        """Register an easy listener, which the host layers over a plain listener."""
        return self._register(InteropKind.EASY_LISTENER, handle)

    def register_placeholder(self, handle: Any) -> Any:
        """Register a placeholder resolver. Fails when the placeholder subsystem is absent."""
        if not self._interop.placeholders_available():
            raise InteropError("The placeholder subsystem is not available on this host")
        return self._register(InteropKind.PLACEHOLDER, handle)

    def set_context(self, key: str, value: Any) -> None:
        """Store a value in this extension's context; cleared on unload."""
        self._interop.contexts.setdefault(self._owner, {})[key] = value
        self._registry.record_registration(self._owner, InteropKind.CONTEXT, key)

    def get_context(self, key: str, default: Any = None) -> Any:
        return self._interop.contexts.get(self._owner, {}).get(key, default)

    def _register(self, kind: InteropKind, handle: Any) -> Any:
        self._interop.subsystem(kind).register(handle)
        self._registry.record_registration(self._owner, kind, handle)
        return handle


ExecutorFactory = Callable[[ExtensionUnit, pathlib.Path, str, HostApi], ScriptExecutor]


class PythonScriptExecutor:
    """
    Runs one Python source file as an isolated module.

    The module sees the host API as the global ``host``. Hooks are module-level
    functions named ``on_load``/``on_unload``/``on_reload`` (or the camelCase
    hook name itself). Artifacts on ``search_paths`` are importable while the
    module body executes.
    """

    def __init__(
        self,
        source_file: pathlib.Path,
        name: str,
        host_api: HostApi,
        search_paths: Sequence[pathlib.Path] = (),
    ) -> None:
        self.name = name
        self.source_file = source_file
        self._module_name = f"scripthost_ext_{uuid.uuid4().hex}"
        self._module: ModuleType | None = self._load(host_api, search_paths)

    def _load(self, host_api: HostApi, search_paths: Sequence[pathlib.Path]) -> ModuleType:
        spec = importlib.util.spec_from_file_location(self._module_name, self.source_file)
        if spec is None or spec.loader is None:
            raise ScripthostException(f"Cannot load {self.source_file} as a Python module")

        module = importlib.util.module_from_spec(spec)
        module.host = host_api
        sys.modules[self._module_name] = module

        extra = [str(path) for path in search_paths]
        with _SYS_PATH_LOCK:
            added = [path for path in extra if path not in sys.path]
            sys.path[:0] = added
            try:
                spec.loader.exec_module(module)
            except BaseException:
                sys.modules.pop(self._module_name, None)
                raise
            finally:
                for path in added:
                    if path in sys.path:
                        sys.path.remove(path)
        return module

    def invoke(self, hook_name: str) -> Any:
        """Call the hook if the module defines it; otherwise do nothing."""
        if self._module is None:
            raise ScripthostException(f"Script {self.name} has been destroyed")

        hook = getattr(self._module, hook_name, None) or getattr(self._module, _HOOK_ALIASES.get(hook_name, ""), None)
        if hook is None or not callable(hook):
            return None
        return hook()

    def is_valid(self) -> bool:
        return self._module is not None

    def destroy(self) -> None:
        sys.modules.pop(self._module_name, None)
        self._module = None


def python_executor_factory(search_paths: Callable[[], Sequence[pathlib.Path]] | Sequence[pathlib.Path] = ()) -> ExecutorFactory:
    """
    Build an ``ExecutorFactory`` creating ``PythonScriptExecutor`` instances.

    ``search_paths`` may be a callable so that the resolved artifact set is read
    at load time, after provisioning.
    """

    def factory(unit: ExtensionUnit, source_file: pathlib.Path, name: str, host_api: HostApi) -> ScriptExecutor:
        paths = search_paths() if callable(search_paths) else search_paths
        return PythonScriptExecutor(source_file, name, host_api, paths)

    return factory
