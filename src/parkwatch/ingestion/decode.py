"""Decoders for the rig's encoded ``result`` strings.

Several event kinds pack data into a prefixed string, e.g.
``FEE_15_TIME_30m`` or ``AVAILABLE_3``.  Each decoder performs a strict
full-string match and returns ``None`` on anything it does not recognise;
none of them raise.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_PAYMENT_RE = re.compile(r"FEE_(\d+)_TIME_(.+)")
_AVAILABLE_RE = re.compile(r"AVAILABLE_(\d+)")
_SLOT_RE = re.compile(r"(?:PARKED_)?(?:SLOT_)?(\d+)")
_DURATION_HM_RE = re.compile(r"(?:(\d+)\s*h)?\s*(?:(\d+)\s*m(?:in)?)?", re.IGNORECASE)
_DURATION_CLOCK_RE = re.compile(r"(\d+):([0-5]\d)")

ENTRY_TIME_PREFIX = "ENTRY_TIME_"
EXIT_TIME_PREFIX = "EXIT_TIME_"


@dataclass(frozen=True, slots=True)
class PaymentResult:
    """Decoded ``FEE_<fee>_TIME_<duration>`` payload."""

    fee: int
    duration_text: str
    duration_minutes: int | None


def parse_duration_minutes(text: str) -> int | None:
    """Convert ``30m``, ``1h5m``, ``2h`` or ``01:30`` to minutes."""
    token = text.strip()
    if not token:
        return None
    clock = _DURATION_CLOCK_RE.fullmatch(token)
    if clock:
        return int(clock.group(1)) * 60 + int(clock.group(2))
    match = _DURATION_HM_RE.fullmatch(token)
    if match is None or (match.group(1) is None and match.group(2) is None):
        return None
    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    return hours * 60 + minutes


def decode_payment(text: str | None) -> PaymentResult | None:
    if not text:
        return None
    match = _PAYMENT_RE.fullmatch(text.strip())
    if match is None:
        return None
    duration_text = match.group(2).strip()
    if not duration_text:
        return None
    return PaymentResult(
        fee=int(match.group(1)),
        duration_text=duration_text,
        duration_minutes=parse_duration_minutes(duration_text),
    )


def decode_time_token(text: str | None, prefix: str) -> str | None:
    """Return the time token after *prefix* (e.g. ``ENTRY_TIME_08:30`` -> ``08:30``)."""
    if not text:
        return None
    value = text.strip()
    if not value.startswith(prefix):
        return None
    token = value[len(prefix):].strip()
    return token or None


def decode_available(text: str | None) -> int | None:
    if not text:
        return None
    match = _AVAILABLE_RE.fullmatch(text.strip())
    if match is None:
        return None
    return int(match.group(1))


def decode_slot_number(text: str | None) -> int | None:
    """Slot number from ``SLOT_3``, ``PARKED_SLOT_3`` or a bare ``3``."""
    if not text:
        return None
    match = _SLOT_RE.fullmatch(text.strip().upper())
    if match is None:
        return None
    return int(match.group(1))
