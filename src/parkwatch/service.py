"""Lot service: the single writer of the lot snapshot.

Ties the reducer, log ring, store and broadcast gateway together.  Every
method is synchronous, so within one event loop two events can never
interleave and every subscriber sees snapshots in the order they were
committed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from parkwatch.broadcast import BroadcastGateway
from parkwatch.config import ParkwatchConfig
from parkwatch.models.snapshot import LotInfo, LotSnapshot
from parkwatch.state.events import LotEvent
from parkwatch.state.log_ring import LogRing
from parkwatch.state.reducer import Reduction, reduce_event
from parkwatch.state.store import SnapshotStore

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LotService:
    """Applies rig events to the lot snapshot and broadcasts the result."""

    def __init__(
        self,
        config: ParkwatchConfig | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
        gateway: BroadcastGateway | None = None,
    ) -> None:
        self._config = config or ParkwatchConfig()
        self._clock = clock
        self._info = LotInfo(
            name=self._config.lot_name,
            readers=self._config.readers,
            pricing=self._config.pricing,
        )
        self._ring = LogRing(
            trim_trigger=self._config.log_trim_trigger,
            retain=self._config.log_retain,
        )
        self._store = SnapshotStore(self._initial_snapshot)
        self._gateway = gateway or BroadcastGateway(queue_size=self._config.subscriber_queue_size)

    @property
    def config(self) -> ParkwatchConfig:
        return self._config

    @property
    def gateway(self) -> BroadcastGateway:
        return self._gateway

    def _initial_snapshot(self) -> LotSnapshot:
        return LotSnapshot.initial(self._config.total_slots, self._info)

    def snapshot(self) -> LotSnapshot:
        return self._store.get()

    def handle(self, event: LotEvent) -> LotSnapshot:
        """Reduce *event*, commit, record its log line and broadcast.

        Every accepted event is broadcast, no-ops included, so viewers can
        treat each push as an acknowledgement from the rig.
        """
        _logger.debug("Handling %s event id=%s result=%s", event.kind, event.vehicle_id, event.result)
        reduction: Reduction = reduce_event(
            self._store.get(),
            event,
            now=self._clock(),
            policy=self._config.availability_policy,
        )
        committed = reduction.snapshot
        if reduction.entry is not None:
            committed = committed.model_copy(update={"log": self._ring.prepend(committed.log, reduction.entry)})
        self._store.replace(committed)
        self._gateway.publish(committed)
        return committed

    def reset(self) -> LotSnapshot:
        """Return to the starting configuration and broadcast it."""
        snapshot = self._store.reset()
        _logger.info("Lot state reset (%d slots)", snapshot.total_slots)
        self._gateway.publish(snapshot)
        return snapshot

    def health(self) -> dict[str, Any]:
        snapshot = self._store.get()
        return {
            "status": "OK",
            "timestamp": self._clock().isoformat(),
            "vehicles": len(snapshot.vehicles),
            "available": snapshot.available_slots,
            "subscribers": self._gateway.subscriber_count,
        }
