"""Shared fixtures: a hand-driven clock and a process controller that records signals."""

import io

import pytest

from sjfsched.core.clock import RuntimeClock
from sjfsched.core.commands import CommandProcessor
from sjfsched.core.errors import SignalFailed, SpawnFailed
from sjfsched.core.scheduler import SjfScheduler
from sjfsched.core.table import ProcessTable, SlotStatus

FIRST_FAKE_PID = 1001


class FakeTime:
    """Time source that only moves when told to."""

    def __init__(self, start=100):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeProcess:
    def __init__(self, pid, argv):
        self.pid = pid
        self.args = argv


class FakeController:
    """Records every request instead of touching real processes."""

    def __init__(self):
        self.next_pid = FIRST_FAKE_PID
        self.spawned = []
        self.calls = []
        self.dead = set()
        self.spawn_error = None
        self.terminated_paused = {}
        self.reaped_calls = []

    def spawn(self, argv):
        if self.spawn_error is not None:
            raise SpawnFailed(self.spawn_error)
        process = FakeProcess(self.next_pid, list(argv))
        self.next_pid += 1
        self.spawned.append(list(argv))
        return process

    def _signal(self, action, pid):
        if pid in self.dead:
            raise SignalFailed(f"Failed to {action} process {pid}: gone")
        self.calls.append((action, pid))

    def pause(self, pid):
        self._signal("pause", pid)

    def resume(self, pid):
        self._signal("resume", pid)

    def terminate(self, pid, paused=False):
        self._signal("terminate", pid)
        self.terminated_paused[pid] = paused

    def reaped(self, pid, status):
        self.reaped_calls.append((pid, status))

    def signals_to(self, pid):
        return [action for action, target in self.calls if target == pid]


@pytest.fixture
def fake_time():
    return FakeTime()


@pytest.fixture
def controller():
    return FakeController()


@pytest.fixture
def scheduler(fake_time, controller):
    return SjfScheduler(
        table=ProcessTable(capacity=8),
        clock=RuntimeClock(time_func=fake_time),
        controller=controller,
    )


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def err():
    return io.StringIO()


@pytest.fixture
def processor(scheduler, out, err):
    return CommandProcessor(scheduler, out=out, err=err)


def add_slot(scheduler, pid, runtime, status=SlotStatus.READY):
    """Place a worker straight into the table, bypassing spawn."""
    index = scheduler.table.allocate_slot()
    slot = scheduler.table[index]
    slot.assign(pid, runtime)
    slot.status = status
    if status is SlotStatus.RUNNING:
        scheduler.running_index = index
        scheduler.clock.start()
    return index


@pytest.fixture
def place(scheduler):
    """Fixture form of add_slot bound to the test's scheduler."""

    def _place(pid, runtime, status=SlotStatus.READY):
        return add_slot(scheduler, pid, runtime, status)

    return _place
