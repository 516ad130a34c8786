"""Vehicle session model."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from parkwatch.models._base import ParkwatchBaseModel


class SessionStatus(StrEnum):
    PARKED = "parked"
    EXITED = "exited"


class VehicleSession(ParkwatchBaseModel):
    """A tracked vehicle's parked/exited lifecycle, keyed by tag identity.

    Identities are not unique across time: a card that exited and came back
    may own several sessions, but at most one of them is ``parked``.
    """

    identity: str = Field(alias="cardUID")
    status: SessionStatus = SessionStatus.PARKED
    entry_time: datetime | None = Field(default=None, alias="entryTime")
    exit_time: datetime | None = Field(default=None, alias="exitTime")
    assigned_slot: int = Field(default=0, alias="slot", ge=0)
    last_fee: int | None = Field(default=None, alias="fee")
    duration: str | None = None

    @property
    def is_parked(self) -> bool:
        return self.status is SessionStatus.PARKED
