"""Core process manager components."""

from sjfsched.core.commands import CommandProcessor
from sjfsched.core.reaper import ExitReaper
from sjfsched.core.scheduler import SjfScheduler
from sjfsched.core.service import ManagerService
from sjfsched.core.table import MAX_PROCESSES, ProcessTable, SlotStatus, WorkerSlot

__all__ = [
    "CommandProcessor",
    "ExitReaper",
    "ManagerService",
    "ProcessTable",
    "SjfScheduler",
    "SlotStatus",
    "WorkerSlot",
    "MAX_PROCESSES",
]
