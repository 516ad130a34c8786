"""Single-writer snapshot cell.

This is the only component that holds the current lot snapshot.  It keeps no
history; the lot log inside the snapshot is the only record of the past.
"""

from __future__ import annotations

from collections.abc import Callable

from parkwatch.models.snapshot import LotSnapshot


class SnapshotStore:
    """Holds the current :class:`LotSnapshot`.

    ``factory`` builds the starting configuration and is called once at
    construction and again on every :meth:`reset`.
    """

    def __init__(self, factory: Callable[[], LotSnapshot]) -> None:
        self._factory = factory
        self._current = factory()

    def get(self) -> LotSnapshot:
        return self._current

    def replace(self, snapshot: LotSnapshot) -> LotSnapshot:
        """Swap in *snapshot* and return the one it replaced."""
        previous = self._current
        self._current = snapshot
        return previous

    def reset(self) -> LotSnapshot:
        """Reinitialize to the starting configuration and return it."""
        self._current = self._factory()
        return self._current
