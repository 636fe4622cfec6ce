"""Monetary helpers shared by the parser, scheduler and wallet operations"""

import math
from decimal import Decimal, ROUND_HALF_UP

MAX_AMOUNT = 1_000_000

_CENTS = Decimal("0.01")


def round2(value: float) -> float:
    """
    Round to 2 decimal places, half away from zero.

    Built from repr(value) so 1.005 rounds to 1.01 the way a currency display
    would, instead of following the binary float underneath.
    Non-finite values come back unchanged.
    """
    if not math.isfinite(value):
        return value
    return float(Decimal(repr(value)).quantize(_CENTS, rounding=ROUND_HALF_UP))


def parse_amount(raw: str) -> float | None:
    """
    Parse a decimal string that may use ',' as separator ("12,50" -> 12.5).

    Digit runs too long for a float come back as None.
    """
    value = float(raw.strip().replace(",", "."))
    return value if math.isfinite(value) else None


def is_valid_amount(amount: float | None) -> bool:
    """Accepted range is the open interval (0, 1_000_000)"""
    return amount is not None and 0 < amount < MAX_AMOUNT
