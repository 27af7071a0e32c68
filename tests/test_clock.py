"""Tests for runtime accounting of the running slot."""

from sjfsched.core.clock import RuntimeClock
from sjfsched.core.table import WorkerSlot


def running_slot(runtime):
    slot = WorkerSlot()
    slot.assign(42, runtime)
    return slot


class TestFold:
    """Verify folding elapsed time into remaining runtime."""

    def test_elapsed_time_is_subtracted(self, fake_time) -> None:
        """Three seconds after dispatch, three seconds are charged."""
        clock = RuntimeClock(time_func=fake_time)
        slot = running_slot(10)
        clock.start()
        fake_time.advance(3)
        assert clock.fold(slot) == 3
        assert slot.remaining_runtime == 7

    def test_fold_resets_dispatch_time(self, fake_time) -> None:
        """Time already charged is not charged again."""
        clock = RuntimeClock(time_func=fake_time)
        slot = running_slot(10)
        clock.start()
        fake_time.advance(2)
        clock.fold(slot)
        fake_time.advance(1)
        clock.fold(slot)
        assert slot.remaining_runtime == 7

    def test_double_fold_is_idempotent(self, fake_time) -> None:
        """Folding twice with no time passing changes nothing."""
        clock = RuntimeClock(time_func=fake_time)
        slot = running_slot(10)
        clock.start()
        fake_time.advance(4)
        clock.fold(slot)
        assert clock.fold(slot) == 0
        assert slot.remaining_runtime == 6

    def test_time_going_backwards_is_ignored(self, fake_time) -> None:
        """Non-positive elapsed time is a no-op."""
        clock = RuntimeClock(time_func=fake_time)
        slot = running_slot(10)
        clock.start()
        fake_time.advance(-5)
        assert clock.fold(slot) == 0
        assert slot.remaining_runtime == 10

    def test_overrun_goes_negative(self, fake_time) -> None:
        """Remaining runtime is not clamped at zero."""
        clock = RuntimeClock(time_func=fake_time)
        slot = running_slot(2)
        clock.start()
        fake_time.advance(5)
        clock.fold(slot)
        assert slot.remaining_runtime == -3

    def test_default_time_source_is_whole_seconds(self) -> None:
        """The default clock ticks in whole seconds."""
        assert isinstance(RuntimeClock().now(), int)
