#!/usr/bin/env python3
"""
Errors raised by the process manager.

Every per-command failure is a SchedulerError subclass. The command
processor turns them into a single diagnostic line; only SetupFailed
is fatal.
"""


class SchedulerError(Exception):
    """Base class for all process manager errors."""


class InvalidArgument(SchedulerError):
    """Malformed or missing command arguments."""


class NotFound(SchedulerError):
    """The referenced worker id is not in the process table."""


class InvalidState(SchedulerError):
    """The command does not apply to the worker's current status."""


class TableFull(SchedulerError):
    """No unused or reclaimable slot is left in the process table."""


class SpawnFailed(SchedulerError):
    """The worker process could not be created."""


class SignalFailed(SchedulerError):
    """A pause, continue or terminate request could not be delivered."""


class SetupFailed(SchedulerError):
    """The exit-notification path could not be installed at startup."""
