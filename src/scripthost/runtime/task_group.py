"""
A task group that joins on all of its members.

Every member runs on its own background thread and its outcome (result or
exception) is collected individually. ``join`` is the barrier: it returns only
after every member has finished, and a failing member never cancels or
blocks its siblings.
"""

import threading
from concurrent.futures import Future, wait
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from scripthost.runtime.scheduler import Scheduler, SchedulerMode, SchedulerPlacement


@dataclass
class TaskOutcome:
    """Outcome of one member of a task group."""

    key: str
    result: Any = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class TaskGroup:
    """
    Fan-out/fan-in over background threads.

    ``max_workers`` bounds how many members run at the same time; None means
    one thread per member.
    """

    def __init__(self, scheduler: Scheduler, max_workers: Optional[int] = None):
        self.scheduler = scheduler
        self._slots = threading.BoundedSemaphore(max_workers) if max_workers else None
        self._futures: Dict[str, "Future[Any]"] = {}

    def spawn(self, key: str, fn: Callable[..., Any], *args: Any) -> None:
        if key in self._futures:
            raise ValueError(f"Task {key!r} already spawned in this group")
        self._futures[key] = self.scheduler.run(
            self._guarded,
            fn,
            args,
            placement=SchedulerPlacement.NEW_THREAD,
            mode=SchedulerMode.ASYNC,
        )

    def _guarded(self, fn: Callable[..., Any], args: tuple) -> Any:
        if self._slots is None:
            return fn(*args)
        with self._slots:
            return fn(*args)

    def join(self) -> List[TaskOutcome]:
        """
        Wait for every member, then return their outcomes in spawn order.
        """
        wait(list(self._futures.values()))

        outcomes = []
        for key, future in self._futures.items():
            error = future.exception()
            outcomes.append(TaskOutcome(key=key, result=None if error else future.result(), error=error))
        return outcomes
