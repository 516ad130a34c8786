"""Data models for the lot snapshot."""

from parkwatch.models._base import ParkwatchBaseModel
from parkwatch.models.log_entry import LogCategory, LogEntry
from parkwatch.models.session import SessionStatus, VehicleSession
from parkwatch.models.snapshot import LotInfo, LotSnapshot

__all__ = [
    "LogCategory",
    "LogEntry",
    "LotInfo",
    "LotSnapshot",
    "ParkwatchBaseModel",
    "SessionStatus",
    "VehicleSession",
]
