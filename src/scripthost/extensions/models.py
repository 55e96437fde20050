"""Extension lifecycle models."""

from __future__ import annotations

import pathlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Tuple


class InteropKind(Enum):
    """Host subsystems an extension can register into."""

    COMMAND = "command"
    PLACEHOLDER = "placeholder"
    EASY_LISTENER = "easy_listener"
    LISTENER = "listener"
    CONTEXT = "context"


# Easy listeners are adapters over the listener subsystem, so they must go
# before plain listeners.
TEARDOWN_ORDER: Tuple[InteropKind, ...] = (
    InteropKind.COMMAND,
    InteropKind.PLACEHOLDER,
    InteropKind.EASY_LISTENER,
    InteropKind.LISTENER,
)


def teardown_stages(placeholder_enabled: bool) -> Tuple[InteropKind, ...]:
    """The interop kinds to unregister, in order, for the current host."""
    return tuple(
        kind for kind in TEARDOWN_ORDER if placeholder_enabled or kind is not InteropKind.PLACEHOLDER
    )


class LifecycleState(Enum):
    """Host-wide lifecycle state."""

    UNLOADED = "unloaded"
    DISCOVERING = "discovering"
    LOADED = "loaded"
    UNLOADING = "unloading"
    RELOADING = "reloading"


@dataclass(frozen=True)
class InteropRegistration:
    """One registration of an extension into a host subsystem."""

    kind: InteropKind
    owner: str
    handle: Any


@dataclass(frozen=True)
class ExtensionUnit:
    """A configured extension folder and the source files found in it."""

    folder: str
    name: str
    author: str | None = None
    version: str | None = None
    description: str | None = None
    source_files: Tuple[pathlib.Path, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ExtensionFailure:
    """Captured per-extension failure."""

    extension_name: str
    stage: str
    message: str
