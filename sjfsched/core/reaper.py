#!/usr/bin/env python3
"""
Exit reaper for managed workers.

The SIGCHLD handler only collects exited pids with their wait statuses
and queues them; the control loop calls ``drain()`` to apply them to the
process table, so the table is never touched from signal context.
"""

import os
import queue
import signal
from typing import List, Optional, Tuple

from decologr import Logger as log

from sjfsched.core.errors import SetupFailed
from sjfsched.core.scheduler import SjfScheduler
from sjfsched.core.table import SlotStatus


class ExitReaper:
    """Turns child exit notifications into TERMINATED slots."""

    def __init__(self, scheduler: SjfScheduler):
        """
        Initialize the reaper.

        :param scheduler: Scheduler whose table receives the exit events
        """
        self.scheduler = scheduler
        self.exits: "queue.SimpleQueue[Tuple[int, int]]" = queue.SimpleQueue()
        self._previous_handler = None
        self.installed = False

    def install(self):
        """
        Register the SIGCHLD handler.

        :raises SetupFailed: If the handler cannot be installed
        """
        try:
            self._previous_handler = signal.signal(
                signal.SIGCHLD, self._handle_sigchld
            )
        except (AttributeError, ValueError, OSError) as ex:
            raise SetupFailed(f"Cannot install SIGCHLD handler: {ex}") from ex
        self.installed = True
        log.debug("SIGCHLD handler installed")

    def uninstall(self):
        """Restore the handler that was active before ``install()``."""
        if not self.installed:
            return
        signal.signal(signal.SIGCHLD, self._previous_handler or signal.SIG_DFL)
        self.installed = False
        self._previous_handler = None

    def _handle_sigchld(self, signum, frame):
        for exited in self.collect_exited():
            self.exits.put(exited)

    @staticmethod
    def collect_exited() -> List[Tuple[int, int]]:
        """
        Reap every child that has exited so far without blocking.

        :return: (pid, wait status) of the reaped children
        """
        exited = []
        while True:
            try:
                pid, status = os.waitpid(-1, os.WNOHANG)
            except ChildProcessError:
                break
            if pid == 0:
                break
            exited.append((pid, status))
        return exited

    def notify_exit(self, pid: int, status: int = 0):
        """Queue an exit event for ``pid``."""
        self.exits.put((pid, status))

    def _pending(self) -> List[Tuple[int, int]]:
        exited = []
        while True:
            try:
                exited.append(self.exits.get_nowait())
            except queue.Empty:
                return exited

    def reap(self, pid: int, status: int = 0) -> Optional[int]:
        """
        Mark the slot of an exited worker TERMINATED.

        If it was the running slot its elapsed time is charged and the
        table goes idle; the control loop reschedules on its next pass.
        The wait status is handed to the process controller in every case.

        :param pid: Exited worker pid
        :param status: Raw status from os.waitpid
        :return: Slot index, or None if the pid is not managed
        """
        scheduler = self.scheduler
        with scheduler.lock:
            scheduler.controller.reaped(pid, status)
            index = scheduler.table.find_by_worker_id(pid)
            if index is None:
                log.debug(f"Ignoring exit of unmanaged process {pid}")
                return None
            scheduler.table[index].status = SlotStatus.TERMINATED
            if index == scheduler.running_index:
                scheduler.release_running()
            log.debug(f"Worker {pid} exited")
            return index

    def drain(self) -> List[int]:
        """
        Apply every queued exit event.

        :return: Pids that matched a managed slot
        """
        reaped = []
        for pid, status in self._pending():
            if self.reap(pid, status) is not None:
                reaped.append(pid)
        return reaped
