"""parkwatch - Live parking lot state service for RFID/sensor rigs."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("parkwatch")
except PackageNotFoundError:
    __version__ = "0+local"
from parkwatch.broadcast import BroadcastGateway, Subscription
from parkwatch.config import ParkwatchConfig
from parkwatch.exceptions import ParkwatchConfigError, ParkwatchError, ParkwatchPayloadError
from parkwatch.models import (
    LogCategory,
    LogEntry,
    LotInfo,
    LotSnapshot,
    SessionStatus,
    VehicleSession,
)
from parkwatch.service import LotService
from parkwatch.state.events import EventKind, IngestionSource, LotEvent
from parkwatch.state.log_ring import LogRing
from parkwatch.state.policy import AvailabilityPolicy
from parkwatch.state.reducer import Reduction, reduce_event
from parkwatch.state.store import SnapshotStore

__all__ = [
    "__version__",
    "AvailabilityPolicy",
    "BroadcastGateway",
    "EventKind",
    "IngestionSource",
    "LogCategory",
    "LogEntry",
    "LogRing",
    "LotEvent",
    "LotInfo",
    "LotService",
    "LotSnapshot",
    "ParkwatchConfig",
    "ParkwatchConfigError",
    "ParkwatchError",
    "ParkwatchPayloadError",
    "Reduction",
    "SessionStatus",
    "SnapshotStore",
    "Subscription",
    "VehicleSession",
    "reduce_event",
]
