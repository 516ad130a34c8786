"""Normalization helpers.

Centralizes defensive parsing of loosely typed rig fields.
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_str(value: Any) -> str | None:
    """Stringify scalars; empty and whitespace-only text become ``None``."""
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text if text else None


def slot_index(value: Any, total_slots: int) -> int | None:
    """Convert a 1-based slot id to a 0-based index, or ``None`` if out of range.

    Fractional ids such as ``"3.9"`` are rejected rather than truncated.
    """
    parsed = safe_float(value)
    if parsed is None or not parsed.is_integer():
        return None
    number = int(parsed)
    if not 1 <= number <= total_slots:
        return None
    return number - 1
