"""Event-to-snapshot reducer.

:func:`reduce_event` maps ``(snapshot, event)`` to the next snapshot and an
optional log entry.  All decoding and precondition checks run against the
input snapshot first; only then is a deep copy mutated, so a fault can
never leave a half-updated snapshot behind.  The input is never modified;
log-only events return it as-is alongside their entry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from parkwatch.ingestion.decode import (
    ENTRY_TIME_PREFIX,
    EXIT_TIME_PREFIX,
    decode_available,
    decode_payment,
    decode_slot_number,
    decode_time_token,
)
from parkwatch.ingestion.normalize import slot_index
from parkwatch.models.log_entry import LogCategory, LogEntry
from parkwatch.models.session import SessionStatus, VehicleSession
from parkwatch.models.snapshot import LotSnapshot
from parkwatch.state.events import EventKind, LotEvent
from parkwatch.state.policy import AvailabilityPolicy, recompute_available, resolve_hint

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Reduction:
    """Result of applying one event.

    ``entry`` is ``None`` when the event produced no human-readable line.
    ``changed`` is ``False`` for no-ops (unknown kind, precondition miss,
    malformed payload).
    """

    snapshot: LotSnapshot
    entry: LogEntry | None = None
    changed: bool = True


_Handler = Callable[[LotSnapshot, LotEvent, datetime, AvailabilityPolicy], Reduction]


def _noop(snapshot: LotSnapshot) -> Reduction:
    return Reduction(snapshot=snapshot, entry=None, changed=False)


def _entry(now: datetime, message: str, category: LogCategory) -> LogEntry:
    return LogEntry(timestamp=now, message=message, category=category)


def _copy(snapshot: LotSnapshot) -> LotSnapshot:
    return snapshot.model_copy(deep=True)


def _set_slot(snapshot: LotSnapshot, event: LotEvent, occupied: bool, now: datetime) -> Reduction:
    idx = slot_index(event.vehicle_id, snapshot.total_slots)
    if idx is None:
        _logger.warning("Ignoring %s for out-of-range slot id=%r", event.kind, event.vehicle_id)
        return _noop(snapshot)

    nxt = _copy(snapshot)
    nxt.slot_occupancy[idx] = 1 if occupied else 0
    nxt.available_slots = recompute_available(nxt.total_slots, nxt.slot_occupancy)
    state_text = "OCCUPIED" if occupied else "FREE"
    return Reduction(nxt, _entry(now, f"Slot {idx + 1} -> {state_text}", LogCategory.SLOT))


def _on_slot_change(snapshot: LotSnapshot, event: LotEvent, now: datetime, _policy: AvailabilityPolicy) -> Reduction:
    occupied = (event.result or "").strip().upper() == "OCCUPIED"
    return _set_slot(snapshot, event, occupied, now)


def _on_slot_occupied(snapshot: LotSnapshot, event: LotEvent, now: datetime, _policy: AvailabilityPolicy) -> Reduction:
    return _set_slot(snapshot, event, True, now)


def _on_slot_freed(snapshot: LotSnapshot, event: LotEvent, now: datetime, _policy: AvailabilityPolicy) -> Reduction:
    return _set_slot(snapshot, event, False, now)


def _apply_hint(snapshot: LotSnapshot, event: LotEvent, policy: AvailabilityPolicy) -> None:
    if event.available is None:
        return
    if policy is not AvailabilityPolicy.SENSOR:
        _logger.debug("Advisory available=%s from %s not applied", event.available, event.kind)
        return
    snapshot.available_slots = resolve_hint(
        policy=policy,
        current=snapshot.available_slots,
        hint=event.available,
        total_slots=snapshot.total_slots,
    )


def _on_vehicle_entry(snapshot: LotSnapshot, event: LotEvent, now: datetime, policy: AvailabilityPolicy) -> Reduction:
    if not event.vehicle_id:
        _logger.warning("vehicle_entry without a card id")
        return _noop(snapshot)
    nxt = _copy(snapshot)
    if nxt.parked_session(event.vehicle_id) is None:
        nxt.vehicles.append(VehicleSession(identity=event.vehicle_id, entry_time=now))
    else:
        _logger.debug("Vehicle %s already parked; entry is idempotent", event.vehicle_id)
    _apply_hint(nxt, event, policy)

    message = f"ENTRY: vehicle {event.vehicle_id} entered the lot"
    if event.result:
        message = f"{message} - {event.result}"
    return Reduction(nxt, _entry(now, message, LogCategory.ENTRY))


def _on_vehicle_reentry(snapshot: LotSnapshot, event: LotEvent, now: datetime, policy: AvailabilityPolicy) -> Reduction:
    if not event.vehicle_id:
        _logger.warning("vehicle_reentry without a card id")
        return _noop(snapshot)
    nxt = _copy(snapshot)
    session = nxt.parked_session(event.vehicle_id) or nxt.latest_session(event.vehicle_id)
    if session is None:
        nxt.vehicles.append(VehicleSession(identity=event.vehicle_id, entry_time=now))
    else:
        session.status = SessionStatus.PARKED
        session.entry_time = now
        session.exit_time = None
        session.assigned_slot = 0
    _apply_hint(nxt, event, policy)
    return Reduction(nxt, _entry(now, f"RE-ENTRY: vehicle {event.vehicle_id} re-entered the lot", LogCategory.ENTRY))


def _time_event(snapshot: LotSnapshot, event: LotEvent, now: datetime, *, prefix: str, verb: str) -> Reduction:
    token = decode_time_token(event.result, prefix)
    if token is None:
        _logger.warning("Malformed %s result for %s: %r", event.kind, event.vehicle_id, event.result)
        return _noop(snapshot)
    return Reduction(snapshot, _entry(now, f"Vehicle {event.vehicle_id} {verb} at {token}", LogCategory.TIME))


def _on_entry_time(snapshot: LotSnapshot, event: LotEvent, now: datetime, _policy: AvailabilityPolicy) -> Reduction:
    return _time_event(snapshot, event, now, prefix=ENTRY_TIME_PREFIX, verb="entered")


def _on_exit_time(snapshot: LotSnapshot, event: LotEvent, now: datetime, _policy: AvailabilityPolicy) -> Reduction:
    return _time_event(snapshot, event, now, prefix=EXIT_TIME_PREFIX, verb="left")


def _on_vehicle_parked(snapshot: LotSnapshot, event: LotEvent, now: datetime, _policy: AvailabilityPolicy) -> Reduction:
    if snapshot.parked_session(event.vehicle_id) is None:
        _logger.warning("vehicle_parked for untracked vehicle %s", event.vehicle_id)
        return _noop(snapshot)
    slot = decode_slot_number(event.result)
    if slot is None or not 1 <= slot <= snapshot.total_slots:
        _logger.warning("Malformed vehicle_parked slot for %s: %r", event.vehicle_id, event.result)
        return _noop(snapshot)

    nxt = _copy(snapshot)
    session = nxt.parked_session(event.vehicle_id)
    assert session is not None  # noqa: S101
    session.assigned_slot = slot
    return Reduction(nxt, _entry(now, f"PARKED: vehicle {event.vehicle_id} in slot {slot}", LogCategory.PARKING))


def _on_vehicle_left_slot(snapshot: LotSnapshot, event: LotEvent, now: datetime, _policy: AvailabilityPolicy) -> Reduction:
    if snapshot.parked_session(event.vehicle_id) is None:
        _logger.warning("vehicle_left_slot for untracked vehicle %s", event.vehicle_id)
        return _noop(snapshot)

    nxt = _copy(snapshot)
    session = nxt.parked_session(event.vehicle_id)
    assert session is not None  # noqa: S101
    previous = session.assigned_slot
    session.assigned_slot = 0
    where = f"slot {previous}" if previous else "its slot"
    return Reduction(nxt, _entry(now, f"MOVING: vehicle {event.vehicle_id} left {where}", LogCategory.MOVEMENT))


def _on_vehicle_exiting(snapshot: LotSnapshot, event: LotEvent, now: datetime, _policy: AvailabilityPolicy) -> Reduction:
    return Reduction(snapshot, _entry(now, f"EXIT: vehicle {event.vehicle_id} is leaving the lot", LogCategory.EXITING))


def _on_payment_info(snapshot: LotSnapshot, event: LotEvent, now: datetime, policy: AvailabilityPolicy) -> Reduction:
    if snapshot.parked_session(event.vehicle_id) is None:
        _logger.warning("payment_info for untracked vehicle %s", event.vehicle_id)
        return _noop(snapshot)
    payment = decode_payment(event.result)
    if payment is None:
        # The vehicle stays parked: nothing is committed unless the fee decodes.
        _logger.warning("Malformed payment_info for %s: %r", event.vehicle_id, event.result)
        return _noop(snapshot)

    nxt = _copy(snapshot)
    session = nxt.parked_session(event.vehicle_id)
    assert session is not None  # noqa: S101
    session.status = SessionStatus.EXITED
    session.exit_time = now
    session.last_fee = payment.fee
    session.duration = payment.duration_text
    nxt.revenue_total += payment.fee
    nxt.transaction_count += 1
    _apply_hint(nxt, event, policy)

    message = f"PAYMENT: vehicle {event.vehicle_id} - {payment.duration_text} - fee {payment.fee}K VND"
    return Reduction(nxt, _entry(now, message, LogCategory.PAYMENT))


def _on_slots_update(snapshot: LotSnapshot, event: LotEvent, _now: datetime, policy: AvailabilityPolicy) -> Reduction:
    count = decode_available(event.result)
    if count is None:
        _logger.warning("Malformed slots_update result: %r", event.result)
        return _noop(snapshot)
    if policy is not AvailabilityPolicy.SENSOR:
        _logger.info(
            "Rig reports %s available; occupancy says %s (advisory, not applied)",
            count,
            snapshot.available_slots,
        )
        return _noop(snapshot)

    nxt = _copy(snapshot)
    nxt.available_slots = resolve_hint(policy=policy, current=nxt.available_slots, hint=count, total_slots=nxt.total_slots)
    return Reduction(nxt, None)


_HANDLERS: dict[EventKind, _Handler] = {
    EventKind.SLOT_CHANGE: _on_slot_change,
    EventKind.SLOT_OCCUPIED: _on_slot_occupied,
    EventKind.SLOT_FREED: _on_slot_freed,
    EventKind.VEHICLE_ENTRY: _on_vehicle_entry,
    EventKind.VEHICLE_REENTRY: _on_vehicle_reentry,
    EventKind.ENTRY_TIME: _on_entry_time,
    EventKind.EXIT_TIME: _on_exit_time,
    EventKind.VEHICLE_PARKED: _on_vehicle_parked,
    EventKind.VEHICLE_LEFT_SLOT: _on_vehicle_left_slot,
    EventKind.VEHICLE_EXITING: _on_vehicle_exiting,
    EventKind.PAYMENT_INFO: _on_payment_info,
    EventKind.SLOTS_UPDATE: _on_slots_update,
}


def reduce_event(
    snapshot: LotSnapshot,
    event: LotEvent,
    *,
    now: datetime,
    policy: AvailabilityPolicy = AvailabilityPolicy.OCCUPANCY,
) -> Reduction:
    """Apply *event* to *snapshot* and return the next snapshot.

    Unknown kinds are accepted as no-ops.  Precondition misses and
    undecodable results are no-ops with a WARNING record.
    """
    kind = event.known_kind
    if kind is None:
        _logger.debug("Ignoring unknown event kind %r", event.kind)
        return _noop(snapshot)
    return _HANDLERS[kind](snapshot, event, now, policy)
