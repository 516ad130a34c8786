"""Lot snapshot aggregate."""

from __future__ import annotations

from pydantic import ConfigDict, Field, model_validator

from parkwatch.models._base import ParkwatchBaseModel
from parkwatch.models.log_entry import LogEntry
from parkwatch.models.session import VehicleSession


class LotInfo(ParkwatchBaseModel):
    """Static descriptive metadata, fixed at start and kept across resets."""

    model_config = ConfigDict(frozen=True)

    name: str = "Smart Parking"
    readers: tuple[str, ...] = ()
    pricing: str = ""


class LotSnapshot(ParkwatchBaseModel):
    """The complete current lot state as a single value.

    Parameters
    ----------
    total_slots : int
        Fixed capacity (wire: ``total``).
    available_slots : int
        Free slots, ``0 <= available <= total`` (wire: ``available``).
    slot_occupancy : list of int
        ``1`` occupied / ``0`` free; index ``i`` is slot ``i + 1`` (wire: ``slots``).
    log : list of LogEntry
        Newest first (wire: ``logs``).
    vehicles : list of VehicleSession
        Insertion order; sessions are never removed.
    revenue_total : int
        Sum of collected fees (wire: ``revenue``).
    transaction_count : int
        Number of completed payments (wire: ``totalTransactions``).
    info : LotInfo
        Static metadata (wire: ``config``).
    """

    total_slots: int = Field(alias="total", gt=0)
    available_slots: int = Field(alias="available", ge=0)
    slot_occupancy: list[int] = Field(alias="slots")
    log: list[LogEntry] = Field(default_factory=list, alias="logs")
    vehicles: list[VehicleSession] = Field(default_factory=list)
    revenue_total: int = Field(default=0, alias="revenue", ge=0)
    transaction_count: int = Field(default=0, alias="totalTransactions", ge=0)
    info: LotInfo = Field(default_factory=LotInfo, alias="config")

    @model_validator(mode="after")
    def _check_occupancy(self) -> LotSnapshot:
        if len(self.slot_occupancy) != self.total_slots:
            raise ValueError(f"slots must have {self.total_slots} entries, got {len(self.slot_occupancy)}")
        if any(value not in (0, 1) for value in self.slot_occupancy):
            raise ValueError("slots entries must be 0 or 1")
        if self.available_slots > self.total_slots:
            raise ValueError("available cannot exceed total")
        return self

    @classmethod
    def initial(cls, total_slots: int, info: LotInfo | None = None) -> LotSnapshot:
        """All slots free, empty history, zero revenue."""
        return cls(
            total_slots=total_slots,
            available_slots=total_slots,
            slot_occupancy=[0] * total_slots,
            info=info or LotInfo(),
        )

    @property
    def occupied_count(self) -> int:
        return sum(self.slot_occupancy)

    def parked_session(self, identity: str) -> VehicleSession | None:
        """The single ``parked`` session for *identity*, if any."""
        for session in self.vehicles:
            if session.identity == identity and session.is_parked:
                return session
        return None

    def latest_session(self, identity: str) -> VehicleSession | None:
        for session in reversed(self.vehicles):
            if session.identity == identity:
                return session
        return None
