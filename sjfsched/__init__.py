"""
sjfsched - Preemptive Shortest-Job-First process manager.

Runs a bounded set of worker processes one at a time, always giving the
CPU to the worker with the least remaining declared runtime.
"""

from sjfsched.core.commands import CommandProcessor
from sjfsched.core.errors import SchedulerError
from sjfsched.core.reaper import ExitReaper
from sjfsched.core.scheduler import SjfScheduler
from sjfsched.core.service import ManagerService
from sjfsched.core.table import ProcessTable, SlotStatus

__all__ = [
    "SjfScheduler",
    "ProcessTable",
    "SlotStatus",
    "ExitReaper",
    "CommandProcessor",
    "ManagerService",
    "SchedulerError",
]
