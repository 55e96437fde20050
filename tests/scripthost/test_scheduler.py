"""
Tests for execution placement.
"""

import threading
import time

import pytest

from scripthost.runtime import PrimaryThread, Scheduler, SchedulerMode, SchedulerPlacement, TaskGroup
from scripthost.scripthost_exceptions import ScripthostException
from scripthost.scripthost_logger import ScripthostLogger


@pytest.fixture
def primary():
    thread = PrimaryThread(ScripthostLogger(), name="test-primary")
    thread.start()
    yield thread
    thread.stop(timeout=5)


class TestScheduler:
    """Tests for Scheduler.run."""

    def test_current_placement_runs_inline(self):
        scheduler = Scheduler()
        future = scheduler.run(threading.current_thread, placement=SchedulerPlacement.CURRENT, mode=SchedulerMode.ASYNC)
        assert future.done()
        assert future.result() is threading.current_thread()

    def test_primary_placement_runs_on_primary_thread(self, primary):
        scheduler = Scheduler(primary)
        name = scheduler.run_sync_on_primary(lambda: threading.current_thread().name)
        assert name == "test-primary"

    def test_primary_placement_without_primary_thread_runs_inline(self):
        scheduler = Scheduler()
        assert scheduler.run_sync_on_primary(threading.current_thread) is threading.current_thread()

    def test_nested_primary_request_does_not_deadlock(self, primary):
        scheduler = Scheduler(primary)

        def outer():
            return scheduler.run_sync_on_primary(lambda: threading.current_thread().name)

        assert scheduler.run_sync_on_primary(outer) == "test-primary"

    def test_sync_mode_blocks_until_done(self):
        scheduler = Scheduler()
        future = scheduler.run(time.sleep, 0.1, placement=SchedulerPlacement.NEW_THREAD, mode=SchedulerMode.SYNC)
        assert future.done()

    def test_async_new_thread_returns_immediately(self):
        scheduler = Scheduler()
        release = threading.Event()
        future = scheduler.run(release.wait, 5, placement=SchedulerPlacement.NEW_THREAD, mode=SchedulerMode.ASYNC)
        assert not future.done()
        release.set()
        assert future.result(timeout=5) is True

    def test_errors_surface_through_future(self, primary):
        scheduler = Scheduler(primary)

        def fail():
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            scheduler.run_sync_on_primary(fail)

    def test_primary_thread_must_be_started(self):
        scheduler = Scheduler(PrimaryThread(ScripthostLogger()))
        with pytest.raises(ScripthostException):
            scheduler.run_sync_on_primary(lambda: None)

    def test_primary_thread_runs_tasks_in_order(self, primary):
        seen = []
        futures = [primary.submit(seen.append, i) for i in range(20)]
        for future in futures:
            future.result(timeout=5)
        assert seen == list(range(20))


class TestTaskGroup:
    """Tests for the join-on-all task group."""

    def test_join_collects_every_outcome(self):
        group = TaskGroup(Scheduler())

        def fail():
            raise RuntimeError("boom")

        group.spawn("ok", lambda: 1)
        group.spawn("fail", fail)
        group.spawn("slow", lambda: time.sleep(0.2) or 3)

        outcomes = {outcome.key: outcome for outcome in group.join()}

        assert outcomes["ok"].result == 1
        assert not outcomes["fail"].succeeded
        assert str(outcomes["fail"].error) == "boom"
        assert outcomes["slow"].result == 3

    def test_members_run_on_background_threads(self):
        group = TaskGroup(Scheduler())
        group.spawn("a", lambda: threading.current_thread().name)
        [outcome] = group.join()
        assert outcome.result != threading.current_thread().name

    def test_duplicate_key_rejected(self):
        group = TaskGroup(Scheduler())
        group.spawn("a", lambda: None)
        with pytest.raises(ValueError):
            group.spawn("a", lambda: None)
        group.join()
