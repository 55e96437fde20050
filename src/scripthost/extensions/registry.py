"""Per-extension bookkeeping of executors and interop registrations."""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from scripthost.extensions.models import InteropKind, InteropRegistration
from scripthost.scripthost_exceptions import LifecycleError

if TYPE_CHECKING:
    from scripthost.extensions.executor import ScriptExecutor


class ExtensionRegistry:
    """
    Tracks loaded extensions and every registration they made.

    Registrations may be recorded from several threads at once. The registry
    keeps insertion order and never deduplicates.
    """

    def __init__(self) -> None:
        self._executors: Dict[str, ScriptExecutor] = {}
        self._registrations: Dict[str, List[InteropRegistration]] = defaultdict(list)
        self._lock = threading.RLock()

    def add_executor(self, executor: ScriptExecutor) -> None:
        with self._lock:
            if executor.name in self._executors:
                raise LifecycleError(f"Extension {executor.name} is already registered")
            self._executors[executor.name] = executor

    def remove_executor(self, name: str) -> Optional[ScriptExecutor]:
        with self._lock:
            return self._executors.pop(name, None)

    def get_executor(self, name: str) -> Optional[ScriptExecutor]:
        with self._lock:
            return self._executors.get(name)

    def executors(self) -> List[ScriptExecutor]:
        """Loaded executors in registration order."""
        with self._lock:
            return list(self._executors.values())

    def extension_names(self) -> List[str]:
        with self._lock:
            return list(self._executors)

    def record_registration(self, extension: str, kind: InteropKind, handle: Any) -> InteropRegistration:
        registration = InteropRegistration(kind=kind, owner=extension, handle=handle)
        with self._lock:
            self._registrations[extension].append(registration)
        return registration

    def registrations_for(self, extension: str) -> List[InteropRegistration]:
        with self._lock:
            return list(self._registrations.get(extension, ()))

    def registrations_of_kind(self, kind: InteropKind) -> List[InteropRegistration]:
        """All registrations of ``kind`` across extensions, in extension then recording order."""
        with self._lock:
            return [
                registration
                for registrations in self._registrations.values()
                for registration in registrations
                if registration.kind is kind
            ]

    def count(self, kind: Optional[InteropKind] = None) -> int:
        with self._lock:
            return sum(
                1
                for registrations in self._registrations.values()
                for registration in registrations
                if kind is None or registration.kind is kind
            )

    def clear(self, extension: str) -> List[InteropRegistration]:
        """Forget every registration of ``extension`` and return them."""
        with self._lock:
            return self._registrations.pop(extension, [])

    def clear_all(self) -> None:
        with self._lock:
            self._registrations.clear()
            self._executors.clear()
