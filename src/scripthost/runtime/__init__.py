"""
Execution placement for the script host: the primary thread, the scheduler
and the task group used for concurrent downloads.
"""

from .primary_thread import PrimaryThread
from .scheduler import Scheduler, SchedulerMode, SchedulerPlacement
from .task_group import TaskGroup, TaskOutcome

__all__ = [
    "PrimaryThread",
    "Scheduler",
    "SchedulerMode",
    "SchedulerPlacement",
    "TaskGroup",
    "TaskOutcome",
]
