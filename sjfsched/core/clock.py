#!/usr/bin/env python3
"""
Dispatch clock for the running worker.

Elapsed time is folded into the running slot's remaining runtime in
whole seconds, and the dispatch stamp moves forward each time it is.
"""

import time
from typing import Callable, Optional

from sjfsched.core.table import WorkerSlot


def _whole_seconds() -> int:
    return int(time.monotonic())


class RuntimeClock:
    """Tracks when the running slot was last dispatched."""

    def __init__(self, time_func: Optional[Callable[[], float]] = None):
        """
        Initialize the clock.

        :param time_func: Source of the current time in seconds
            (default: monotonic clock truncated to whole seconds)
        """
        self.time_func = time_func or _whole_seconds
        self.dispatch_start_time = self.time_func()

    def now(self) -> float:
        return self.time_func()

    def start(self):
        """Stamp the dispatch time of a newly running slot."""
        self.dispatch_start_time = self.time_func()

    def fold(self, slot: WorkerSlot) -> int:
        """
        Subtract the time elapsed since dispatch from ``slot``.

        A no-op when no time has passed, so folding twice in a row is safe.

        :param slot: The running slot
        :return: Seconds subtracted
        """
        current_time = self.time_func()
        elapsed = int(current_time - self.dispatch_start_time)
        if elapsed <= 0:
            return 0
        slot.remaining_runtime -= elapsed
        self.dispatch_start_time = current_time
        return elapsed
