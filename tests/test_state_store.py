from __future__ import annotations

from parkwatch.models.snapshot import LotInfo, LotSnapshot
from parkwatch.state.store import SnapshotStore


def test_get_returns_initial_snapshot() -> None:
    store = SnapshotStore(lambda: LotSnapshot.initial(3))

    snapshot = store.get()
    assert snapshot.total_slots == 3
    assert snapshot.available_slots == 3
    assert snapshot.slot_occupancy == [0, 0, 0]


def test_replace_swaps_and_returns_previous() -> None:
    store = SnapshotStore(lambda: LotSnapshot.initial(3))
    first = store.get()
    second = first.model_copy(update={"revenue_total": 10})

    previous = store.replace(second)

    assert previous is first
    assert store.get() is second


def test_reset_rebuilds_from_factory_and_keeps_info() -> None:
    info = LotInfo(name="North lot", readers=("gate",), pricing="flat")
    store = SnapshotStore(lambda: LotSnapshot.initial(4, info))
    store.replace(
        store.get().model_copy(
            update={"revenue_total": 40, "transaction_count": 2, "slot_occupancy": [1, 1, 0, 0], "available_slots": 2}
        )
    )

    snapshot = store.reset()

    assert snapshot is store.get()
    assert snapshot.slot_occupancy == [0, 0, 0, 0]
    assert snapshot.available_slots == 4
    assert snapshot.revenue_total == 0
    assert snapshot.transaction_count == 0
    assert snapshot.log == []
    assert snapshot.vehicles == []
    assert snapshot.info == info
