#!/usr/bin/env python3
"""
Command processor for the process manager.

Implements run, stop, resume, kill, list and exit on top of the
scheduler. The typed methods raise SchedulerError subclasses;
``execute()`` is the boundary that turns a token list into a call and
any error into one diagnostic line.
"""

import sys
from typing import List, Optional, Sequence, TextIO, Tuple

from decologr import Logger as log

from sjfsched.core.errors import (
    InvalidArgument,
    InvalidState,
    NotFound,
    SchedulerError,
    SignalFailed,
)
from sjfsched.core.scheduler import SjfScheduler
from sjfsched.core.table import SlotStatus

NO_PROCESSES_MESSAGE = "No processes to list."
EXIT_MESSAGE = "Exiting the process manager!"


class CommandProcessor:
    """Applies user commands to a scheduler."""

    def __init__(
        self,
        scheduler: SjfScheduler,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
    ):
        """
        Initialize the command processor.

        :param scheduler: Scheduler owning the process table
        :param out: Stream for command output (default: stdout)
        :param err: Stream for diagnostics (default: stderr)
        """
        self.scheduler = scheduler
        self.out = out or sys.stdout
        self.err = err or sys.stderr

    def _lookup(self, pid: int) -> int:
        index = self.scheduler.table.find_by_worker_id(pid)
        if index is None:
            raise NotFound(f"Process {pid} not found.")
        return index

    def run_worker(self, argv: Sequence[str], budget: int) -> int:
        """
        Spawn a worker and let the scheduler decide whether it runs.

        With the table idle the new worker starts RUNNING; otherwise it is
        paused straight away and queued READY.

        :param argv: Executable followed by its arguments
        :param budget: Declared runtime in seconds, must be positive
        :return: Pid of the new worker
        """
        if not argv:
            raise InvalidArgument("Invalid arguments for run")
        if budget <= 0:
            raise InvalidArgument(
                "Invalid remaining runtime for run, provide a number > 0"
            )
        scheduler = self.scheduler
        with scheduler.lock:
            index = scheduler.table.allocate_slot()
            process = scheduler.controller.spawn(argv)
            slot = scheduler.table[index]
            slot.assign(process.pid, budget, process)

            if scheduler.running_index is None:
                scheduler.clock.start()
                slot.status = SlotStatus.RUNNING
                scheduler.running_index = index
            else:
                scheduler.controller.pause(slot.pid)

            scheduler.schedule()
            return slot.pid

    def stop_worker(self, pid: int):
        """
        Suspend a RUNNING or READY worker.

        Stopping the running worker hands the CPU to the next candidate.
        """
        scheduler = self.scheduler
        with scheduler.lock:
            index = self._lookup(pid)
            slot = scheduler.table[index]
            if slot.status not in (SlotStatus.RUNNING, SlotStatus.READY):
                raise InvalidState(f"Process {pid} is not running.")
            scheduler.controller.pause(pid)
            slot.status = SlotStatus.STOPPED
            if index == scheduler.running_index:
                scheduler.release_running()
                scheduler.schedule()

    def resume_worker(self, pid: int):
        """Queue a STOPPED worker as READY and reschedule."""
        scheduler = self.scheduler
        with scheduler.lock:
            index = self._lookup(pid)
            slot = scheduler.table[index]
            if slot.status is not SlotStatus.STOPPED:
                raise InvalidState(
                    f"Process {pid} was not in STOPPED status, "
                    "in order to resume it."
                )
            slot.status = SlotStatus.READY
            scheduler.schedule()

    def kill_worker(self, pid: int):
        """Terminate a worker that has not terminated yet."""
        scheduler = self.scheduler
        with scheduler.lock:
            index = self._lookup(pid)
            slot = scheduler.table[index]
            if slot.status is SlotStatus.TERMINATED:
                raise InvalidState(f"Process {pid} is already terminated.")
            scheduler.controller.terminate(
                pid, paused=slot.status is not SlotStatus.RUNNING
            )
            slot.status = SlotStatus.TERMINATED
            log.info(f"Killed worker {pid}")
            if index == scheduler.running_index:
                scheduler.release_running()
                scheduler.schedule()
            else:
                scheduler.fold_running()

    def list_workers(self) -> List[Tuple[int, SlotStatus]]:
        """
        Snapshot of every known worker.

        :return: List of (pid, status) in slot order
        """
        with self.scheduler.lock:
            self.scheduler.fold_running()
            return self.scheduler.table.list_workers()

    def shutdown(self) -> List[int]:
        """
        Terminate every live worker and mark all of them TERMINATED.

        Signal failures are logged and do not stop the shutdown.

        :return: Pids that could not be signalled
        """
        scheduler = self.scheduler
        failed = []
        with scheduler.lock:
            scheduler.release_running()
            for slot in scheduler.table.slots:
                if slot.status in (SlotStatus.UNUSED, SlotStatus.TERMINATED):
                    continue
                try:
                    scheduler.controller.terminate(
                        slot.pid, paused=slot.status is not SlotStatus.RUNNING
                    )
                except SignalFailed as ex:
                    log.warning(f"{ex}... continuing exit")
                    failed.append(slot.pid)
                slot.status = SlotStatus.TERMINATED
        return failed

    @staticmethod
    def _parse_pid(args: Sequence[str]) -> int:
        try:
            pid = int(args[0])
        except (IndexError, ValueError):
            pid = 0
        if pid <= 0:
            raise InvalidArgument("The process ID must be a positive integer.")
        return pid

    @staticmethod
    def _parse_run(args: Sequence[str]) -> Tuple[List[str], int]:
        if len(args) < 2:
            raise InvalidArgument(
                "Invalid arguments for run, expected <path> [args...] <runtime>"
            )
        try:
            budget = int(args[-1])
        except ValueError:
            budget = 0
        if budget <= 0:
            raise InvalidArgument(
                "Invalid remaining runtime for run, provide a number > 0"
            )
        return list(args[:-1]), budget

    def _print_list(self):
        workers = self.list_workers()
        if not workers:
            print(NO_PROCESSES_MESSAGE, file=self.out, flush=True)
            return
        for pid, status in workers:
            print(f"{pid}, {status.value}", file=self.out)
        self.out.flush()

    def execute(self, tokens: Sequence[str]) -> bool:
        """
        Execute one tokenized command record.

        Rejected commands write exactly one line to the error stream and
        leave the manager running.

        :param tokens: Command name followed by its arguments
        :return: True if the command was ``exit``
        """
        if not tokens:
            return False
        name, args = tokens[0], list(tokens[1:])
        try:
            if name == "run":
                argv, budget = self._parse_run(args)
                self.run_worker(argv, budget)
            elif name == "stop":
                self.stop_worker(self._parse_pid(args))
            elif name == "resume":
                self.resume_worker(self._parse_pid(args))
            elif name == "kill":
                self.kill_worker(self._parse_pid(args))
            elif name == "list":
                self._print_list()
            elif name == "exit":
                self.shutdown()
                print(EXIT_MESSAGE, file=self.out, flush=True)
                return True
            else:
                raise InvalidArgument(f"Unknown command: {name}")
        except SchedulerError as ex:
            log.debug(f"Command {name!r} rejected: {ex}")
            print(ex, file=self.err, flush=True)
        return False
