"""
Host interop subsystems.

The host exposes four registries (commands, listeners, easy listeners and
placeholders). ``InteropRegistry`` is an in-memory implementation of the
protocol; ``EasyListenerRegistry`` layers easy listeners on top of a listener
registry the way the host does.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Protocol, Union, runtime_checkable

from scripthost.extensions.models import InteropKind
from scripthost.scripthost_exceptions import InteropError


@runtime_checkable
class HostSubsystem(Protocol):
    """A host registry the coordinator can register into and unregister from."""

    def register(self, handle: Any) -> None: ...

    def unregister(self, handle: Any) -> None: ...

    def active_handles(self) -> List[Any]: ...


class InteropRegistry:
    """In-memory host registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._handles: List[Any] = []
        self._lock = threading.Lock()

    def register(self, handle: Any) -> None:
        with self._lock:
            self._handles.append(handle)

    def unregister(self, handle: Any) -> None:
        with self._lock:
            for index, active in enumerate(self._handles):
                if active is handle:
                    del self._handles[index]
                    return
        raise InteropError(f"{handle!r} is not registered in {self.name}")

    def is_registered(self, handle: Any) -> bool:
        with self._lock:
            return any(active is handle for active in self._handles)

    def active_handles(self) -> List[Any]:
        with self._lock:
            return list(self._handles)

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)


@dataclass(frozen=True)
class EasyListenerAdapter:
    """Listener registered on behalf of an easy listener."""

    easy_listener: Any


class EasyListenerRegistry(InteropRegistry):
    """
    Easy listeners, each backed by an adapter in the listener registry.

    Unregistering an easy listener whose adapter is already gone raises, since
    the adapter would be left pointing at a dead registration.
    """

    def __init__(self, listeners: InteropRegistry, name: str = "easy_listeners") -> None:
        super().__init__(name)
        self.listeners = listeners
        self._adapters: Dict[int, EasyListenerAdapter] = {}

    def register(self, handle: Any) -> None:
        adapter = EasyListenerAdapter(handle)
        self.listeners.register(adapter)
        self._adapters[id(handle)] = adapter
        super().register(handle)

    def unregister(self, handle: Any) -> None:
        adapter = self._adapters.get(id(handle))
        if adapter is None or not self.listeners.is_registered(adapter):
            raise InteropError(f"Listener backing easy listener {handle!r} is already gone")
        self.listeners.unregister(adapter)
        del self._adapters[id(handle)]
        super().unregister(handle)


@dataclass
class HostInterop:
    """
    The host subsystems an extension can register into.

    ``placeholder_enabled`` may be a callable so that availability of the
    placeholder subsystem is checked at the time of use.
    """

    commands: HostSubsystem
    listeners: HostSubsystem
    easy_listeners: HostSubsystem
    placeholders: HostSubsystem
    placeholder_enabled: Union[bool, Callable[[], bool]] = False
    contexts: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def in_memory(cls, placeholder_enabled: Union[bool, Callable[[], bool]] = False) -> "HostInterop":
        listeners = InteropRegistry("listeners")
        return cls(
            commands=InteropRegistry("commands"),
            listeners=listeners,
            easy_listeners=EasyListenerRegistry(listeners),
            placeholders=InteropRegistry("placeholders"),
            placeholder_enabled=placeholder_enabled,
        )

    def placeholders_available(self) -> bool:
        enabled = self.placeholder_enabled
        return bool(enabled() if callable(enabled) else enabled)

    def subsystem(self, kind: InteropKind) -> HostSubsystem:
        if kind is InteropKind.COMMAND:
            return self.commands
        if kind is InteropKind.LISTENER:
            return self.listeners
        if kind is InteropKind.EASY_LISTENER:
            return self.easy_listeners
        if kind is InteropKind.PLACEHOLDER:
            return self.placeholders
        raise InteropError(f"{kind.value} is not a host subsystem")
