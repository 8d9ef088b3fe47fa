"""Amount parsing and rendering."""

from __future__ import annotations

from decimal import Decimal

import pytest

from crowdfund_client.errors import InvalidAmount
from crowdfund_client.units import (
    BASE_UNITS_PER_TOKEN,
    format_amount,
    to_base_units,
    to_decimal_string,
)


# ── to_base_units ─────────────────────────────────────────────────


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1", BASE_UNITS_PER_TOKEN),
        ("1.5", 15 * 10**17),
        ("0.25", 25 * 10**16),
        (".5", 5 * 10**17),
        ("12.", 12 * BASE_UNITS_PER_TOKEN),
        (" 250 ", 250 * BASE_UNITS_PER_TOKEN),
        ("0.000000000000000001", 1),
    ],
)
def test_to_base_units_accepts_plain_decimals(text, expected):
    assert to_base_units(text) == expected


@pytest.mark.parametrize(
    "text",
    ["", "   ", ".", "0", "0.0", "-1", "+1", "1e18", "abc", "1.2.3", "1,5"],
)
def test_to_base_units_rejects(text):
    with pytest.raises(InvalidAmount):
        to_base_units(text)


def test_to_base_units_rejects_non_string():
    with pytest.raises(InvalidAmount):
        to_base_units(5)


def test_excess_precision():
    """Digits past 18 places are only tolerated when they are zeros."""
    assert to_base_units("1." + "0" * 18 + "000") == BASE_UNITS_PER_TOKEN
    with pytest.raises(InvalidAmount, match="decimal places"):
        to_base_units("0." + "0" * 18 + "1")


def test_invalid_amount_is_value_error():
    with pytest.raises(ValueError):
        to_base_units("nope")


# ── to_decimal_string ─────────────────────────────────────────────


def test_to_decimal_string():
    assert to_decimal_string(BASE_UNITS_PER_TOKEN) == "1.0"
    assert to_decimal_string(0) == "0.0"
    assert to_decimal_string(25 * 10**16) == "0.25"
    assert to_decimal_string(1) == "0.000000000000000001"
    assert to_decimal_string(-15 * 10**17) == "-1.5"


def test_large_amounts_keep_precision():
    amount = 123_456_789 * BASE_UNITS_PER_TOKEN + 1
    assert to_decimal_string(amount) == "123456789.000000000000000001"
    assert to_base_units(to_decimal_string(amount)) == amount


def test_format_amount():
    assert format_amount(250 * BASE_UNITS_PER_TOKEN, "CFT") == "250.0 CFT"


@pytest.mark.parametrize(
    "text",
    ["1", "12.", ".5", "0.000000000000000001", "123456789.5", "1000000.250000", "7.123456789012345678"],
)
def test_decimal_round_trip(text):
    """Rendering parsed base units gives back the same number."""
    assert Decimal(to_decimal_string(to_base_units(text))) == Decimal(text)
