"""Availability source-of-truth policy.

The rig reports free-space information two ways: slot sensors toggle
individual slots, while the gate controller also asserts an absolute
available count (``available`` on entry/payment events and ``slots_update``).
A deployment picks exactly one of them to own ``available``.
"""

from __future__ import annotations

from enum import StrEnum


class AvailabilityPolicy(StrEnum):
    OCCUPANCY = "occupancy"
    """``available`` is always ``total - sum(occupancy)``; asserted counts are advisory."""

    SENSOR = "sensor"
    """Asserted counts overwrite ``available`` directly (rig-compatible mode)."""


def recompute_available(total_slots: int, occupancy: list[int]) -> int:
    """Free slots derived from the occupancy array."""
    return max(0, total_slots - sum(occupancy))


def resolve_hint(
    *,
    policy: AvailabilityPolicy,
    current: int,
    hint: int | None,
    total_slots: int,
) -> int:
    """Return the ``available`` value after an externally asserted count.

    Under :attr:`AvailabilityPolicy.OCCUPANCY` the hint never wins.  Under
    :attr:`AvailabilityPolicy.SENSOR` it overwrites, clamped into
    ``[0, total_slots]``.  ``0`` is a real count, not a missing value.
    """
    if hint is None or policy is not AvailabilityPolicy.SENSOR:
        return current
    return min(max(hint, 0), total_slots)
