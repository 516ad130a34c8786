from __future__ import annotations

import pytest

from parkwatch.ingestion.decode import (
    ENTRY_TIME_PREFIX,
    decode_available,
    decode_payment,
    decode_slot_number,
    decode_time_token,
    parse_duration_minutes,
)
from parkwatch.ingestion.normalize import safe_float, safe_int, slot_index


def test_payment_decodes_fee_and_duration() -> None:
    payment = decode_payment("FEE_15_TIME_30m")

    assert payment is not None
    assert payment.fee == 15
    assert payment.duration_text == "30m"
    assert payment.duration_minutes == 30


@pytest.mark.parametrize("text", ["garbage", "FEE__TIME_30m", "FEE_15_TIME_", "FEE_x_TIME_5m", "", None, "xFEE_1_TIME_2m"])
def test_payment_rejects_non_matching_text(text: str | None) -> None:
    assert decode_payment(text) is None


def test_payment_keeps_unrecognised_duration_text() -> None:
    payment = decode_payment("FEE_20_TIME_about an hour")

    assert payment is not None
    assert payment.fee == 20
    assert payment.duration_text == "about an hour"
    assert payment.duration_minutes is None


@pytest.mark.parametrize(
    ("text", "minutes"),
    [("30m", 30), ("1h5m", 65), ("2h", 120), ("01:30", 90), ("45min", 45), ("", None), ("soon", None)],
)
def test_duration_minutes(text: str, minutes: int | None) -> None:
    assert parse_duration_minutes(text) == minutes


def test_time_token_requires_prefix() -> None:
    assert decode_time_token("ENTRY_TIME_08:30", ENTRY_TIME_PREFIX) == "08:30"
    assert decode_time_token("EXIT_TIME_08:30", ENTRY_TIME_PREFIX) is None
    assert decode_time_token("ENTRY_TIME_", ENTRY_TIME_PREFIX) is None
    assert decode_time_token(None, ENTRY_TIME_PREFIX) is None


def test_available_count() -> None:
    assert decode_available("AVAILABLE_3") == 3
    assert decode_available("AVAILABLE_0") == 0
    assert decode_available("AVAILABLE_") is None
    assert decode_available("3") is None


@pytest.mark.parametrize(("text", "slot"), [("SLOT_2", 2), ("PARKED_SLOT_4", 4), ("3", 3), ("slot_5", 5), ("SLOT_", None)])
def test_slot_number(text: str, slot: int | None) -> None:
    assert decode_slot_number(text) == slot


def test_slot_index_bounds() -> None:
    assert slot_index("1", 5) == 0
    assert slot_index(5, 5) == 4
    assert slot_index("0", 5) is None
    assert slot_index("6", 5) is None
    assert slot_index("abc", 5) is None


def test_safe_int_handles_junk() -> None:
    assert safe_int("7") == 7
    assert safe_int("7.9") == 7
    assert safe_int(None) is None
    assert safe_int("nan") is None
    assert safe_int(True) is None


@pytest.mark.parametrize("value", ["3.9", 2.5, "1e400", 10**400])
def test_slot_index_rejects_fractional_and_huge_ids(value: object) -> None:
    assert slot_index(value, 5) is None


def test_slot_index_accepts_integral_float() -> None:
    assert slot_index(3.0, 5) == 2
    assert slot_index("4.0", 5) == 3


def test_safe_float_rejects_ints_too_large_for_float() -> None:
    assert safe_float(10**400) is None
    assert safe_int(-(10**400)) is None
