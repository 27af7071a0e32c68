#!/usr/bin/env python3
"""
Preemptive Shortest-Job-First scheduler.

At most one worker runs at a time. Whenever the running worker becomes
unavailable, or a new READY candidate appears, the scheduler suspends
the running worker, charges it for the time it ran, and dispatches the
READY worker with the smallest remaining runtime.

Remaining runtime is not clamped: a worker that overran its budget has
a negative value and is therefore the most eligible candidate.
"""

import threading
from typing import Optional

from decologr import Logger as log

from sjfsched.core.clock import RuntimeClock
from sjfsched.core.process_control import ProcessController
from sjfsched.core.table import ProcessTable, SlotStatus, WorkerSlot


class SjfScheduler:
    """
    Owns the process table, the running slot and the dispatch clock.

    Every mutation happens under ``lock``; the command processor and the
    exit reaper take it around multi-step operations.
    """

    def __init__(
        self,
        table: Optional[ProcessTable] = None,
        clock: Optional[RuntimeClock] = None,
        controller: Optional[ProcessController] = None,
    ):
        """
        Initialize the scheduler.

        :param table: Process table (default: empty table of MAX_PROCESSES slots)
        :param clock: Dispatch clock (default: monotonic whole-second clock)
        :param controller: OS process control (default: real signals)
        """
        self.table = table or ProcessTable()
        self.clock = clock or RuntimeClock()
        self.controller = controller or ProcessController()
        self.running_index: Optional[int] = None
        self.lock = threading.RLock()

    @property
    def running_slot(self) -> Optional[WorkerSlot]:
        if self.running_index is None:
            return None
        return self.table[self.running_index]

    def fold_running(self) -> int:
        """
        Charge the running slot for the time elapsed since dispatch.

        :return: Seconds subtracted (0 when idle or no time has passed)
        """
        with self.lock:
            slot = self.running_slot
            if slot is None:
                return 0
            return self.clock.fold(slot)

    def release_running(self):
        """Fold accounting for the running slot and mark the table idle."""
        with self.lock:
            self.fold_running()
            self.running_index = None

    def select_next(self) -> Optional[int]:
        """
        Pick the READY slot with the strictly smallest remaining runtime.

        Ties go to the lowest slot index.

        :return: Slot index or None if nothing is READY
        """
        with self.lock:
            min_index = None
            min_runtime = None
            for index, slot in enumerate(self.table.slots):
                if slot.status is not SlotStatus.READY:
                    continue
                if min_runtime is None or slot.remaining_runtime < min_runtime:
                    min_runtime = slot.remaining_runtime
                    min_index = index
            return min_index

    def dispatch(self, index: int):
        """
        Make ``index`` the running slot and let its process continue.

        The slot stays RUNNING even if the continue request fails.

        :param index: Slot index of a READY slot
        :raises SignalFailed: If the worker could not be continued
        """
        with self.lock:
            slot = self.table[index]
            slot.status = SlotStatus.RUNNING
            self.running_index = index
            self.controller.resume(slot.pid)
            self.clock.start()
            log.debug(
                f"Dispatched worker {slot.pid} "
                f"(remaining runtime {slot.remaining_runtime}s)"
            )

    def schedule(self) -> Optional[int]:
        """
        Run one scheduling pass.

        The running worker, if any, is paused, charged and put back to
        READY; then the shortest READY worker is dispatched. A failed pause
        aborts the pass before anything is changed.

        :return: Index of the dispatched slot, or None when idle
        :raises SignalFailed: If pausing or continuing a worker failed
        """
        with self.lock:
            slot = self.running_slot
            if slot is not None:
                self.controller.pause(slot.pid)
                self.fold_running()
                slot.status = SlotStatus.READY
                self.running_index = None

            index = self.select_next()
            if index is None:
                return None
            self.dispatch(index)
            return index

    def check_invariants(self):
        """
        Verify the single-runner invariant.

        :raises AssertionError: If the table and running_index disagree
        """
        with self.lock:
            running = self.table.indices_with_status(SlotStatus.RUNNING)
            if len(running) > 1:
                raise AssertionError(f"More than one running slot: {running}")
            expected = running[0] if running else None
            if self.running_index != expected:
                raise AssertionError(
                    f"running_index {self.running_index} does not match "
                    f"running slots {running}"
                )
