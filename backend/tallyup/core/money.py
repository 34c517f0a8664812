"""
Money helpers shared by the split, balance and settlement services.

Amounts are ``Decimal`` values in a 2-decimal currency unit.
"""
from decimal import Decimal, InvalidOperation, ROUND_FLOOR, ROUND_HALF_UP
from typing import Any, Iterable, Optional

CENT = Decimal("0.01")
ZERO = Decimal("0")

# Balances, remainders and share sums within this distance of each other are equal.
SETTLEMENT_EPSILON = Decimal("0.01")

# Largest amount a Numeric(15, 2) column holds.
MAX_AMOUNT = Decimal("9999999999999.99")


def to_decimal(value: Any) -> Optional[Decimal]:
    """Convert a numeric value to Decimal, or None if it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    if not result.is_finite():
        return None
    return result


def to_amount(value: Any) -> Optional[Decimal]:
    """Like to_decimal, but also None for amounts beyond MAX_AMOUNT either way."""
    result = to_decimal(value)
    if result is None or abs(result) > MAX_AMOUNT:
        return None
    return result


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def floor_money(value: Decimal) -> Decimal:
    """Round down to cents."""
    return value.quantize(CENT, rounding=ROUND_FLOOR)


def sum_money(values: Iterable[Decimal]) -> Decimal:
    """Sum Decimals, starting from an exact zero."""
    return sum(values, ZERO)


def is_negligible(value: Decimal) -> bool:
    """True when the amount is below the settlement tolerance."""
    return abs(value) < SETTLEMENT_EPSILON
