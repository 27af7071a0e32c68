#!/usr/bin/env python3
"""
OS process control for managed workers.

Spawns worker processes and delivers the pause, continue and terminate
requests the scheduler and command processor issue.
"""

import os
import signal
import subprocess
from typing import Dict, Optional, Sequence

from decologr import Logger as log

from sjfsched.core.errors import SignalFailed, SpawnFailed


class ProcessController:
    """Thin wrapper around subprocess and os.kill for worker processes."""

    def __init__(self):
        # Popen handles of spawned workers whose exit has not been reaped yet
        self.children: Dict[int, subprocess.Popen] = {}

    def spawn(self, argv: Sequence[str]) -> subprocess.Popen:
        """
        Start a worker process.

        The executable is looked up on PATH when it has no directory part,
        like execvp. Exit statuses are collected by the exit reaper and
        handed back through ``reaped()``.

        :param argv: Executable followed by its arguments
        :return: Popen handle of the new worker
        :raises SpawnFailed: If the process could not be created
        """
        if not argv:
            raise SpawnFailed("No executable given")
        try:
            process = subprocess.Popen(list(argv))
        except (OSError, ValueError) as ex:
            raise SpawnFailed(f"Execution failed for {argv[0]}: {ex}") from ex
        self.children[process.pid] = process
        log.info(f"Spawned worker {process.pid}: {' '.join(argv)}")
        return process

    def reaped(self, pid: int, status: int) -> Optional[subprocess.Popen]:
        """
        Record the wait status of a child reaped outside its Popen handle.

        The handle gets its returncode, so subprocess never waits on the
        pid again once it is recycled by the OS.

        :param pid: Reaped pid
        :param status: Raw status from os.waitpid
        :return: The worker's Popen handle, or None if it was not spawned here
        """
        process = self.children.pop(pid, None)
        if process is not None and process.returncode is None:
            try:
                process.returncode = os.waitstatus_to_exitcode(status)
            except ValueError:
                process.returncode = status
        return process

    def _send(self, pid: int, signum: signal.Signals, action: str):
        try:
            os.kill(pid, signum)
        except OSError as ex:
            log.debug(f"Failed to {action} worker {pid}: {ex}")
            raise SignalFailed(f"Failed to {action} process {pid}: {ex}") from ex

    def pause(self, pid: int):
        """Suspend a worker (SIGSTOP)."""
        self._send(pid, signal.SIGSTOP, "pause")

    def resume(self, pid: int):
        """Let a suspended worker continue (SIGCONT)."""
        self._send(pid, signal.SIGCONT, "resume")

    def terminate(self, pid: int, paused: bool = False):
        """
        Ask a worker to terminate (SIGTERM).

        A paused worker only acts on SIGTERM once continued, so SIGCONT
        follows when ``paused`` is set. A paused worker that ignores
        SIGTERM therefore keeps running at the OS level next to the
        RUNNING one until it exits.

        :param pid: Worker pid
        :param paused: True if the worker is currently SIGSTOPped
        """
        self._send(pid, signal.SIGTERM, "terminate")
        if not paused:
            return
        try:
            os.kill(pid, signal.SIGCONT)
        except ProcessLookupError:
            pass
