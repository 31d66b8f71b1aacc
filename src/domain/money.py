"""Money Arithmetic

Cent-exact arithmetic on Decimal amounts. Every operation rounds its money
operands to the smallest currency unit before combining them and rounds the
result again, so repeated operations never drift by more than one cent.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Number) -> Decimal:
    """Convert a numeric input to Decimal without binary float artefacts"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # str() gives the shortest repr, so 0.1 becomes Decimal("0.1")
        return Decimal(str(value))
    try:
        return Decimal(value)
    except InvalidOperation as e:
        raise ValueError(f"Not a numeric amount: {value!r}") from e


def round_money(value: Number) -> Decimal:
    """Round half away from zero to the cent, so round(-x) == -round(x)"""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def add(a: Number, b: Number) -> Decimal:
    return round_money(round_money(a) + round_money(b))


def sub(a: Number, b: Number) -> Decimal:
    return round_money(round_money(a) - round_money(b))


def mul(amount: Number, factor: Number) -> Decimal:
    """Multiply a money amount by a plain factor (quantity, rate)

    The factor is not a money value and keeps its full precision.
    """
    return round_money(round_money(amount) * to_decimal(factor))


def div(amount: Number, divisor: Number) -> Decimal:
    """Divide a money amount; division by zero yields 0"""
    divisor = to_decimal(divisor)
    if divisor == 0:
        return ZERO
    return round_money(round_money(amount) / divisor)


def percent_of(amount: Number, rate: Number) -> Decimal:
    """``rate`` percent of ``amount`` (e.g. percent_of(350, 4) == 14.00)"""
    return round_money(to_decimal(amount) * to_decimal(rate) / Decimal(100))


def is_cent_exact(value: Decimal) -> bool:
    return value == value.quantize(CENT)
