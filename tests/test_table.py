"""Tests for the process table and its slot replacement policy."""

import pytest

from sjfsched.core.errors import TableFull
from sjfsched.core.table import MAX_PROCESSES, ProcessTable, SlotStatus


def fill(table, statuses):
    for pid, status in enumerate(statuses, start=500):
        slot = table[table.allocate_slot()]
        slot.assign(pid, 10)
        slot.status = status


class TestTableCreation:
    """Verify a fresh table."""

    def test_default_capacity(self) -> None:
        """The default table holds MAX_PROCESSES slots."""
        assert ProcessTable().capacity == MAX_PROCESSES == 64

    def test_all_slots_start_unused(self) -> None:
        """Every slot of a new table is UNUSED."""
        table = ProcessTable(capacity=4)
        assert all(slot.status is SlotStatus.UNUSED for slot in table.slots)

    def test_empty_listing(self) -> None:
        """Listing an untouched table yields nothing."""
        assert ProcessTable(capacity=4).list_workers() == []

    def test_zero_capacity_rejected(self) -> None:
        """A table needs at least one slot."""
        with pytest.raises(ValueError):
            ProcessTable(capacity=0)


class TestAllocation:
    """Verify the replacement policy."""

    def test_first_unused_slot_wins(self) -> None:
        """Allocation returns the lowest UNUSED index."""
        table = ProcessTable(capacity=4)
        fill(table, [SlotStatus.TERMINATED])
        assert table.allocate_slot() == 1

    def test_terminated_slot_reclaimed_when_full(self) -> None:
        """With no UNUSED slot left, the lowest TERMINATED slot is reused."""
        table = ProcessTable(capacity=3)
        fill(table, [SlotStatus.READY, SlotStatus.TERMINATED, SlotStatus.TERMINATED])
        assert table.allocate_slot() == 1

    def test_table_of_terminated_reuses_index_zero(self) -> None:
        """A table full of TERMINATED slots reuses slot 0."""
        table = ProcessTable(capacity=3)
        fill(table, [SlotStatus.TERMINATED] * 3)
        assert table.allocate_slot() == 0

    def test_full_of_live_workers_raises(self) -> None:
        """RUNNING, READY and STOPPED slots are never reclaimed."""
        table = ProcessTable(capacity=3)
        fill(table, [SlotStatus.RUNNING, SlotStatus.READY, SlotStatus.STOPPED])
        with pytest.raises(TableFull):
            table.allocate_slot()


class TestLookup:
    """Verify pid lookup and listing."""

    def test_find_existing_pid(self) -> None:
        """A managed pid maps to its slot index."""
        table = ProcessTable(capacity=4)
        fill(table, [SlotStatus.READY, SlotStatus.STOPPED])
        assert table.find_by_worker_id(501) == 1

    def test_unknown_pid(self) -> None:
        """An unmanaged pid yields None."""
        table = ProcessTable(capacity=4)
        fill(table, [SlotStatus.READY])
        assert table.find_by_worker_id(9999) is None

    def test_live_slot_preferred_over_stale_one(self) -> None:
        """A reused pid resolves to the live slot, not the old TERMINATED one."""
        table = ProcessTable(capacity=4)
        fill(table, [SlotStatus.TERMINATED])
        slot = table[table.allocate_slot()]
        slot.assign(500, 5)
        assert table.find_by_worker_id(500) == 1

    def test_listing_in_slot_order(self) -> None:
        """Listing skips UNUSED slots and keeps index order."""
        table = ProcessTable(capacity=5)
        fill(table, [SlotStatus.RUNNING, SlotStatus.TERMINATED, SlotStatus.READY])
        assert table.list_workers() == [
            (500, SlotStatus.RUNNING),
            (501, SlotStatus.TERMINATED),
            (502, SlotStatus.READY),
        ]

    def test_status_codes(self) -> None:
        """Status values are the codes shown by list."""
        assert [s.value for s in SlotStatus] == [0, 1, 2, 3, 4]
