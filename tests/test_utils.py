"""
Shared helpers for the scripthost tests.
"""

import hashlib
import threading
import time
from typing import Any, Callable, Dict, List, Optional

import httpx

from scripthost.extensions import HostInterop, InteropRegistry, EasyListenerRegistry
from scripthost.extensions.executor import HostApi
from scripthost.extensions.interop import EasyListenerAdapter


def sha512_hex(payload: bytes) -> str:
    return hashlib.sha512(payload).hexdigest()


class FakeRepository:
    """
    An in-memory Maven repository served through ``httpx.MockTransport``.

    ``artifacts`` maps full artifact URLs to payloads. The checksum of every
    artifact is served at ``<url>.sha512`` unless overridden in ``checksums``.
    """

    def __init__(
        self,
        artifacts: Dict[str, bytes],
        checksums: Optional[Dict[str, str]] = None,
        delay: float = 0.0,
        failing: Optional[Dict[str, int]] = None,
        hanging: Optional[List[str]] = None,
    ):
        self.artifacts = artifacts
        self.checksums = checksums or {}
        self.delay = delay
        self.failing = failing or {}
        self.hanging = hanging or []
        self.requests: List[str] = []
        self._lock = threading.Lock()

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        with self._lock:
            self.requests.append(url)

        if url in self.hanging:
            raise httpx.ReadTimeout("timed out", request=request)
        if url in self.failing:
            return httpx.Response(self.failing[url])

        if url.endswith(".sha512"):
            artifact_url = url[: -len(".sha512")]
            if artifact_url in self.checksums:
                return httpx.Response(200, text=self.checksums[artifact_url])
            if artifact_url in self.artifacts:
                return httpx.Response(200, text=sha512_hex(self.artifacts[artifact_url]))
            return httpx.Response(404)

        if url not in self.artifacts:
            return httpx.Response(404)
        if self.delay:
            time.sleep(self.delay)
        return httpx.Response(200, content=self.artifacts[url])

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


class RecordingRegistry(InteropRegistry):
    """In-memory registry that appends every unregister call to a shared log."""

    def __init__(self, name: str, log: List[str]):
        super().__init__(name)
        self.log = log

    def unregister(self, handle: Any) -> None:
        if not isinstance(handle, EasyListenerAdapter):
            self.log.append(f"{self.name}:{handle}")
        super().unregister(handle)


class RecordingEasyListenerRegistry(EasyListenerRegistry):
    def __init__(self, listeners: InteropRegistry, log: List[str]):
        super().__init__(listeners)
        self.log = log

    def unregister(self, handle: Any) -> None:
        self.log.append(f"{self.name}:{handle}")
        super().unregister(handle)


def recording_interop(log: List[str], placeholder_enabled: bool = True) -> HostInterop:
    """
    Host subsystems whose unregister calls are recorded in ``log``.

    Listener adapters created for easy listeners are not logged since their
    handle is an adapter object, only the easy listener itself is.
    """
    listeners = RecordingRegistry("listeners", log)
    return HostInterop(
        commands=RecordingRegistry("commands", log),
        listeners=listeners,
        easy_listeners=RecordingEasyListenerRegistry(listeners, log),
        placeholders=RecordingRegistry("placeholders", log),
        placeholder_enabled=placeholder_enabled,
    )


class FakeExecutor:
    """
    Script executor driven by plain callables.

    ``hooks`` maps hook names to callables receiving the host API.
    """

    def __init__(self, name: str, host_api: HostApi, hooks: Optional[Dict[str, Callable[[HostApi], Any]]] = None):
        self.name = name
        self.host_api = host_api
        self.hooks = hooks or {}
        self.invoked: List[str] = []
        self.destroyed = False

    def invoke(self, hook_name: str) -> Any:
        self.invoked.append(hook_name)
        hook = self.hooks.get(hook_name)
        if hook is None:
            return None
        return hook(self.host_api)

    def is_valid(self) -> bool:
        return not self.destroyed

    def destroy(self) -> None:
        self.destroyed = True
