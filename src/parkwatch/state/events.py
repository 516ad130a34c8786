"""Normalized lot events.

Every ingestion path (HTTP, MQTT) converts its input into a
:class:`LotEvent`.  Only the reducer interprets them.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from parkwatch.exceptions import ParkwatchPayloadError
from parkwatch.ingestion.normalize import safe_int, safe_str


class EventKind(StrEnum):
    SLOT_CHANGE = "slot_change"
    SLOT_OCCUPIED = "slot_occupied"
    SLOT_FREED = "slot_freed"
    VEHICLE_ENTRY = "vehicle_entry"
    VEHICLE_REENTRY = "vehicle_reentry"
    ENTRY_TIME = "entry_time"
    EXIT_TIME = "exit_time"
    VEHICLE_PARKED = "vehicle_parked"
    VEHICLE_LEFT_SLOT = "vehicle_left_slot"
    VEHICLE_EXITING = "vehicle_exiting"
    PAYMENT_INFO = "payment_info"
    SLOTS_UPDATE = "slots_update"


class IngestionSource(StrEnum):
    HTTP = "http"
    MQTT = "mqtt"


class LotEvent(BaseModel):
    """A tagged rig event.

    ``kind`` stays a plain string so unknown kinds can be accepted and
    ignored; use :attr:`known_kind` to dispatch.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    kind: str = Field(..., alias="type", description="Event discriminator")
    vehicle_id: str = Field(default="", alias="id", description="Card UID or slot number")
    result: str | None = Field(default=None, description="Encoded result string")
    available: int | None = Field(default=None, description="Available-count asserted by the rig")
    source: IngestionSource = IngestionSource.HTTP

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value: Any) -> str:
        kind = safe_str(value)
        if kind is None:
            raise ValueError("type must be non-empty")
        return kind

    @field_validator("vehicle_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        # The rig sends slot numbers as JSON numbers.
        return safe_str(value) or ""

    @field_validator("result", mode="before")
    @classmethod
    def _coerce_result(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("available", mode="before")
    @classmethod
    def _coerce_available(cls, value: Any) -> int | None:
        return safe_int(value)

    @property
    def known_kind(self) -> EventKind | None:
        try:
            return EventKind(self.kind)
        except ValueError:
            return None

    @classmethod
    def from_payload(cls, payload: Any, *, source: IngestionSource = IngestionSource.HTTP) -> LotEvent:
        """Validate a decoded JSON body.

        Raises
        ------
        ParkwatchPayloadError
            If *payload* is not an object, lacks ``type``, or fails validation.
        """
        if not isinstance(payload, dict) or not safe_str(payload.get("type")):
            raise ParkwatchPayloadError("bad payload", payload=payload)
        try:
            return cls.model_validate({**payload, "source": source})
        except ValidationError as exc:
            raise ParkwatchPayloadError(f"bad payload: {exc.error_count()} validation error(s)", payload=payload) from exc
