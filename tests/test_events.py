from __future__ import annotations

import pytest

from parkwatch.exceptions import ParkwatchPayloadError
from parkwatch.state.events import EventKind, IngestionSource, LotEvent


def test_from_payload_maps_wire_names() -> None:
    event = LotEvent.from_payload({"type": "payment_info", "id": "CARD1", "result": "FEE_15_TIME_30m", "available": "3"})

    assert event.kind == "payment_info"
    assert event.known_kind is EventKind.PAYMENT_INFO
    assert event.vehicle_id == "CARD1"
    assert event.result == "FEE_15_TIME_30m"
    assert event.available == 3
    assert event.source is IngestionSource.HTTP


def test_numeric_slot_id_is_stringified() -> None:
    event = LotEvent.from_payload({"type": "slot_occupied", "id": 3})
    assert event.vehicle_id == "3"


def test_unknown_kind_is_accepted() -> None:
    event = LotEvent.from_payload({"type": "door_opened"})

    assert event.kind == "door_opened"
    assert event.known_kind is None
    assert event.vehicle_id == ""


@pytest.mark.parametrize("payload", [None, [], "slot_change", {}, {"type": ""}, {"type": "   "}, {"id": "CARD1"}])
def test_missing_discriminator_rejected(payload: object) -> None:
    with pytest.raises(ParkwatchPayloadError):
        LotEvent.from_payload(payload)


def test_extra_fields_ignored_and_source_forced() -> None:
    event = LotEvent.from_payload(
        {"type": "vehicle_exiting", "id": "CARD9", "source": "spoofed", "rssi": -40},
        source=IngestionSource.MQTT,
    )
    assert event.source is IngestionSource.MQTT


def test_events_are_frozen() -> None:
    event = LotEvent.from_payload({"type": "vehicle_entry", "id": "CARD1"})
    with pytest.raises(ValueError):
        event.vehicle_id = "CARD2"  # type: ignore[misc]
