"""Conversion between token base units and human decimal strings."""

from __future__ import annotations

import re

from crowdfund_client.errors import InvalidAmount

DECIMALS = 18
BASE_UNITS_PER_TOKEN = 10**DECIMALS

# Plain decimals only: "12", "12.5", ".5", "12." (no sign, no exponent)
_DECIMAL_RE = re.compile(r"^(\d*)(?:\.(\d*))?$")


def to_base_units(value: str) -> int:
    """Parse a positive decimal string into integer base units.

    Raises InvalidAmount for empty, signed, exponent, non-numeric or zero
    input, and for fractional digits beyond DECIMALS that are not zero.
    """
    if not isinstance(value, str):
        raise InvalidAmount(repr(value), "expected a string")

    text = value.strip()
    match = _DECIMAL_RE.match(text)
    if not text or match is None:
        raise InvalidAmount(value)

    whole, frac = match.group(1), match.group(2) or ""
    if not whole and not frac:
        raise InvalidAmount(value)

    if len(frac) > DECIMALS:
        if frac[DECIMALS:].strip("0"):
            raise InvalidAmount(value, f"more than {DECIMALS} decimal places")
        frac = frac[:DECIMALS]

    amount = int(whole or "0") * BASE_UNITS_PER_TOKEN + int(frac.ljust(DECIMALS, "0") or "0")
    if amount <= 0:
        raise InvalidAmount(value, "must be greater than zero")
    return amount


def to_decimal_string(amount: int) -> str:
    """Render base units as a decimal string without losing precision.

    Whole values keep a ".0" suffix; trailing fractional zeros are dropped.
    """
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(int(amount)), BASE_UNITS_PER_TOKEN)
    frac_str = str(frac).rjust(DECIMALS, "0").rstrip("0") or "0"
    return f"{sign}{whole}.{frac_str}"


def format_amount(amount: int, symbol: str) -> str:
    return f"{to_decimal_string(amount)} {symbol}"
