#!/usr/bin/env python3
"""
Fixed-capacity process table.

Each slot records one managed worker: its OS pid, its scheduling status
and its remaining runtime budget in seconds. Slots are never reset to
UNUSED once used; a TERMINATED slot is reclaimed by the next run.
"""

import subprocess
from enum import Enum
from typing import List, Optional, Tuple

from sjfsched.core.errors import TableFull

MAX_PROCESSES = 64


class SlotStatus(Enum):
    """Worker slot states; values are the codes printed by ``list``."""

    RUNNING = 0
    READY = 1
    STOPPED = 2
    TERMINATED = 3
    UNUSED = 4


class WorkerSlot:
    """One entry of the process table."""

    def __init__(self):
        self.pid: Optional[int] = None
        self.status = SlotStatus.UNUSED
        self.remaining_runtime = 0
        self.process: Optional[subprocess.Popen] = None

    def assign(
        self,
        pid: int,
        remaining_runtime: int,
        process: Optional[subprocess.Popen] = None,
    ):
        """Take ownership of a freshly spawned worker, starting as READY."""
        self.pid = pid
        self.status = SlotStatus.READY
        self.remaining_runtime = remaining_runtime
        self.process = process

    def __repr__(self):
        return (
            f"WorkerSlot(pid={self.pid}, status={self.status.name}, "
            f"remaining_runtime={self.remaining_runtime})"
        )


class ProcessTable:
    """
    Ordered array of worker slots with stable indices.

    The table never spawns or signals processes; it only answers
    allocation and lookup questions.
    """

    def __init__(self, capacity: int = MAX_PROCESSES):
        """
        Initialize the table with every slot UNUSED.

        :param capacity: Number of slots (default: MAX_PROCESSES)
        """
        if capacity < 1:
            raise ValueError("Process table capacity must be at least 1")
        self.slots: List[WorkerSlot] = [WorkerSlot() for _ in range(capacity)]

    def __len__(self):
        return len(self.slots)

    def __getitem__(self, index: int) -> WorkerSlot:
        return self.slots[index]

    @property
    def capacity(self) -> int:
        return len(self.slots)

    def _first_with_status(self, status: SlotStatus) -> Optional[int]:
        for index, slot in enumerate(self.slots):
            if slot.status is status:
                return index
        return None

    def allocate_slot(self) -> int:
        """
        Pick the slot for a new worker.

        The first UNUSED slot wins; failing that the first TERMINATED slot
        is reclaimed.

        :return: Slot index
        :raises TableFull: If every slot holds a live worker
        """
        index = self._first_with_status(SlotStatus.UNUSED)
        if index is None:
            index = self._first_with_status(SlotStatus.TERMINATED)
        if index is None:
            raise TableFull("Maximum number of processes reached")
        return index

    def find_by_worker_id(self, pid: int) -> Optional[int]:
        """
        Find the slot holding a worker pid.

        A live slot wins over a TERMINATED one left by an earlier worker
        with the same pid.

        :param pid: OS process id
        :return: Slot index or None if no slot holds that pid
        """
        terminated = None
        for index, slot in enumerate(self.slots):
            if slot.status is SlotStatus.UNUSED or slot.pid != pid:
                continue
            if slot.status is not SlotStatus.TERMINATED:
                return index
            if terminated is None:
                terminated = index
        return terminated

    def list_workers(self) -> List[Tuple[int, SlotStatus]]:
        """
        Snapshot of every used slot in slot order.

        :return: List of (pid, status); empty when no worker was ever run
        """
        return [
            (slot.pid, slot.status)
            for slot in self.slots
            if slot.status is not SlotStatus.UNUSED
        ]

    def indices_with_status(self, *statuses: SlotStatus) -> List[int]:
        """Indices of all slots whose status is one of ``statuses``."""
        return [
            index
            for index, slot in enumerate(self.slots)
            if slot.status in statuses
        ]
