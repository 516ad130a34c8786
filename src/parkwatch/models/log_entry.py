"""Human-readable lot history entries."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import ConfigDict, Field

from parkwatch.models._base import ParkwatchBaseModel


class LogCategory(StrEnum):
    SLOT = "slot"
    ENTRY = "entry"
    TIME = "time"
    PARKING = "parking"
    MOVEMENT = "movement"
    EXITING = "exiting"
    PAYMENT = "payment"


class LogEntry(ParkwatchBaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(alias="time")
    message: str = Field(alias="msg")
    category: LogCategory = Field(alias="type")
