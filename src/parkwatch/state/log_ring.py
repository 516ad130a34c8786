"""Bounded newest-first lot history."""

from __future__ import annotations

from parkwatch._constants import LOG_RETAIN, LOG_TRIM_TRIGGER
from parkwatch.exceptions import ParkwatchConfigError
from parkwatch.models.log_entry import LogEntry


class LogRing:
    """Prepend-only log with a two-threshold trim.

    The list grows freely up to ``trim_trigger`` entries.  The first prepend
    that pushes it past the trigger flushes it down to the ``retain`` newest
    entries, so the history oscillates between ``retain`` and
    ``trim_trigger`` rather than sliding at a fixed size.
    """

    def __init__(self, *, trim_trigger: int = LOG_TRIM_TRIGGER, retain: int = LOG_RETAIN) -> None:
        if retain <= 0 or retain > trim_trigger:
            raise ParkwatchConfigError(f"retain must be in 1..{trim_trigger}, got {retain}")
        self._trim_trigger = trim_trigger
        self._retain = retain

    @property
    def trim_trigger(self) -> int:
        return self._trim_trigger

    @property
    def retain(self) -> int:
        return self._retain

    def prepend(self, entries: list[LogEntry], entry: LogEntry) -> list[LogEntry]:
        """Return a new list with *entry* first, trimmed if over the trigger."""
        updated = [entry, *entries]
        if len(updated) > self._trim_trigger:
            return updated[: self._retain]
        return updated
