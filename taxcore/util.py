"""Numeric helpers shared by every form.

Absent values are ``None``. Running totals use ``sum_fields`` (absent
counts as zero) while display lines use ``first_present`` so that a
blank box stays blank instead of turning into ``0``.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, TypeVar, Union

Number = Union[int, float, Decimal]
T = TypeVar("T")

_WHOLE = Decimal("1")


def to_decimal(value: Number) -> Decimal:
    """Convert to Decimal going through ``str`` so 0.1 stays 0.1."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value: Number) -> int:
    """Round to the nearest whole dollar, ties away from zero.

    ``round()`` uses banker's rounding (``round(727.5) == 728`` but
    ``round(726.5) == 726``), which does not match the worksheets.
    """
    return int(to_decimal(value).quantize(_WHOLE, rounding=ROUND_HALF_UP))


def sum_fields(values: Iterable[Optional[Number]]) -> float:
    """Sum the present values, treating absent ones as zero."""
    total = 0.0
    for v in values:
        if v is not None:
            total += v
    return total


def first_present(values: Iterable[Optional[T]]) -> Optional[T]:
    """Return the first value that is not absent, or ``None``."""
    for v in values:
        if v is not None:
            return v
    return None


def sum_present(values: Iterable[Optional[Number]]) -> Optional[float]:
    """Sum the present values; absent if every value is absent."""
    present = [v for v in values if v is not None]
    if not present:
        return None
    return sum_fields(present)


def dollars(amount: Optional[Number]) -> str:
    """Format as whole dollars (IRS convention: round to nearest dollar)."""
    if amount is None:
        return ""
    return str(round_half_up(amount))
