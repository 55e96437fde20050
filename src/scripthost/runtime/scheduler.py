"""
Execution scheduler.

One entry point with two axes: *where* a task runs (``SchedulerPlacement``)
and whether the caller waits for it (``SchedulerMode``). Every call returns a
``concurrent.futures.Future``; in SYNC mode it is already done.
"""

import threading
from concurrent.futures import Future
from enum import Enum
from typing import Any, Callable, Optional

from scripthost.runtime.primary_thread import PrimaryThread


class SchedulerPlacement(Enum):
    """Where a task runs."""

    CURRENT = "current"
    PRIMARY = "primary"
    NEW_THREAD = "new_thread"


class SchedulerMode(Enum):
    """Whether the caller blocks until the task finishes."""

    SYNC = "sync"
    ASYNC = "async"


def _run_into(future: "Future[Any]", fn: Callable[..., Any], args: tuple) -> None:
    if not future.set_running_or_notify_cancel():
        return
    try:
        future.set_result(fn(*args))
    except BaseException as e:
        future.set_exception(e)


class Scheduler:
    """
    Runs callables on the current thread, the primary thread or a new thread.

    Without a ``PrimaryThread`` the thread that built the scheduler is taken
    to be the primary context and PRIMARY placement runs inline.
    """

    def __init__(self, primary: Optional[PrimaryThread] = None, thread_name_prefix: str = "scripthost-worker"):
        self.primary = primary
        self.thread_name_prefix = thread_name_prefix
        self._counter = 0
        self._counter_lock = threading.Lock()

    def run(
        self,
        fn: Callable[..., Any],
        *args: Any,
        placement: SchedulerPlacement = SchedulerPlacement.CURRENT,
        mode: SchedulerMode = SchedulerMode.SYNC,
    ) -> "Future[Any]":
        """
        Schedule ``fn(*args)``.

        CURRENT placement always completes before returning, whatever the mode.
        PRIMARY placement from the primary thread itself runs inline so that
        a SYNC request never waits on its own queue.
        """
        if placement is SchedulerPlacement.NEW_THREAD:
            future = self._start_thread(fn, args)
        elif placement is SchedulerPlacement.PRIMARY and self.primary is not None and not self.primary.is_current():
            future = self.primary.submit(fn, *args)
        else:
            future = Future()
            _run_into(future, fn, args)

        if mode is SchedulerMode.SYNC:
            # Block without raising; callers read the outcome from the future.
            future.exception()
        return future

    def run_sync_on_primary(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run ``fn`` on the primary context, wait, and return its result or raise its error."""
        return self.run(fn, *args, placement=SchedulerPlacement.PRIMARY, mode=SchedulerMode.SYNC).result()

    def _start_thread(self, fn: Callable[..., Any], args: tuple) -> "Future[Any]":
        with self._counter_lock:
            self._counter += 1
            name = f"{self.thread_name_prefix}-{self._counter}"

        future: "Future[Any]" = Future()
        thread = threading.Thread(target=_run_into, args=(future, fn, args), name=name, daemon=True)
        thread.start()
        return future
