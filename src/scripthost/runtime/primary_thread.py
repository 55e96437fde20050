"""
The primary execution context.

Host subsystems (commands, listeners, placeholders) may only be mutated from
one thread. ``PrimaryThread`` owns that thread and runs submitted callables
on it one at a time, in submission order.
"""

import logging
import queue
import threading
from concurrent.futures import Future
from typing import Any, Callable, Optional

from scripthost.scripthost_exceptions import ScripthostException
from scripthost.scripthost_logger import ScripthostLogger

_STOP = object()


class PrimaryThread:
    """
    A single worker thread draining a FIFO of tasks.
    """

    def __init__(self, logger: ScripthostLogger, name: str = "scripthost-primary"):
        self.logger = logger
        self.name = name
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def start(self) -> None:
        with self._lock:
            if self._thread is not None:
                return
            self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
            self._thread.start()

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def is_current(self) -> bool:
        """True when called from the primary thread itself."""
        return self._thread is not None and threading.current_thread() is self._thread

    def submit(self, fn: Callable[..., Any], *args: Any) -> "Future[Any]":
        """
        Queue ``fn(*args)`` for execution on the primary thread.

        Raises:
            ScripthostException: If the thread has not been started
        """
        if not self.is_running():
            raise ScripthostException(f"Primary thread {self.name} is not running")

        future: "Future[Any]" = Future()
        self._queue.put((future, fn, args))
        return future

    def stop(self, timeout: Optional[float] = None) -> None:
        """Finish queued tasks, then end the thread."""
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._queue.put(_STOP)
            self._thread = None

        if threading.current_thread() is not thread:
            thread.join(timeout)

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                break

            future, fn, args = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                future.set_result(fn(*args))
            except BaseException as e:
                self.logger.log(f"Task on {self.name} failed: {e!r}", logging.DEBUG)
                future.set_exception(e)
