#!/usr/bin/env python3
"""
Control loop of the process manager.

One thread owns the process table. Each pass reaps exited workers,
executes at most one pending command, then either charges the running
worker for elapsed time or, when idle, asks the scheduler for work.
"""

import math
import time
from typing import Any, Optional

from decologr import Logger as log, log_exception

from sjfsched.core.commands import CommandProcessor
from sjfsched.core.errors import SchedulerError
from sjfsched.core.reaper import ExitReaper
from sjfsched.core.scheduler import SjfScheduler

DEFAULT_POLL_INTERVAL = 0.1


class ManagerService:
    """
    Drives the scheduler from a command source until ``exit``.

    Usage:
        source = ConsoleCommandSource()
        source.start()
        ManagerService(source).start()
    """

    def __init__(
        self,
        source: Any,
        scheduler: Optional[SjfScheduler] = None,
        processor: Optional[CommandProcessor] = None,
        reaper: Optional[ExitReaper] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        """
        Initialize the service.

        :param source: Object whose poll() returns the next token list or None
            without blocking
        :param scheduler: Scheduler instance (default: creates new instance)
        :param processor: Command processor (default: one bound to the scheduler)
        :param reaper: Exit reaper (default: one bound to the scheduler)
        :param poll_interval: Sleep between loop passes in seconds
        :raises ValueError: If poll_interval is negative or not finite
        """
        if poll_interval < 0 or not math.isfinite(poll_interval):
            raise ValueError(f"Invalid poll interval: {poll_interval}")
        self.source = source
        self.scheduler = scheduler or SjfScheduler()
        self.processor = processor or CommandProcessor(self.scheduler)
        self.reaper = reaper or ExitReaper(self.scheduler)
        self.poll_interval = poll_interval
        self.running = False

    def run_once(self) -> bool:
        """
        Perform one loop pass.

        :return: False once ``exit`` has been executed
        """
        self.reaper.drain()

        tokens = self.source.poll()
        if tokens and self.processor.execute(tokens):
            self.running = False
            return False

        if self.scheduler.running_index is not None:
            self.scheduler.fold_running()
        else:
            try:
                self.scheduler.schedule()
            except SchedulerError as ex:
                log.warning(f"Scheduling failed: {ex}")
                print(ex, file=self.processor.err, flush=True)
        return True

    def start(self):
        """
        Install the exit reaper and loop until ``exit``.

        :raises SetupFailed: If the exit notification path cannot be installed
        """
        if self.running:
            log.warning("Process manager already running")
            return

        self.reaper.install()
        self.running = True
        log.info("Process manager started")

        try:
            while self.running:
                try:
                    if not self.run_once():
                        break
                except Exception as ex:
                    log_exception(ex, "Error in process manager loop")
                time.sleep(self.poll_interval)
        except KeyboardInterrupt:
            log.info("Received interrupt signal")
            self.processor.execute(["exit"])
            raise
        finally:
            self.stop()

    def stop(self):
        """Stop looping and restore the previous SIGCHLD handler."""
        self.running = False
        self.reaper.uninstall()
        log.info("Process manager stopped")
