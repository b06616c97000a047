"""Proportional allocation of an aggregate limit across sub-items.

Used wherever a cap applies to a total but each column of the form
must show its own share, e.g. limiting the deductible rental loss of
several Schedule E properties to the amount Form 8582 allows, or
spreading Form 4972's death-benefit exclusion across distributions.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Union

from .util import Number, round_half_up, to_decimal


@dataclass(frozen=True)
class AllocationEntry:
    """A signed amount; only eligible entries are scaled."""
    amount: float
    eligible: bool = True


Entry = Union[AllocationEntry, None]


def _ratio(entries: Sequence[Entry], cap: Number) -> Decimal:
    total = sum(
        (abs(to_decimal(e.amount)) for e in entries if e is not None and e.eligible),
        Decimal(0),
    )
    if total == 0:
        return Decimal(0)
    cap = max(Decimal(0), to_decimal(cap))
    return min(cap, total) / total


def allocation_ratio(entries: Sequence[Entry], cap: Number) -> float:
    """Fraction of the eligible magnitude that survives the cap.

    Zero when nothing is eligible, so callers never divide by zero.
    """
    return float(_ratio(entries, cap))


def allocate_limited(entries: Sequence[Entry], cap: Number) -> List[Optional[float]]:
    """Scale eligible entries so their total magnitude is at most ``cap``.

    Each eligible amount becomes ``round(amount * ratio)`` with its sign
    kept; ineligible amounts pass through unchanged and absent (``None``)
    entries stay absent. Output index ``i`` always corresponds to input
    index ``i``. Because entries are rounded independently the scaled
    total can exceed ``cap`` by at most one dollar per entry.
    """
    ratio = _ratio(entries, cap)
    result: List[Optional[float]] = []
    for e in entries:
        if e is None:
            result.append(None)
        elif not e.eligible:
            result.append(e.amount)
        else:
            result.append(round_half_up(to_decimal(e.amount) * ratio))
    return result


def limit_losses(amounts: Sequence[Optional[Number]], cap: Number) -> List[Optional[float]]:
    """Limit the losses in ``amounts`` to ``cap`` in total.

    Negative amounts are eligible; income and absent columns pass through.
    """
    entries = [
        None if a is None else AllocationEntry(a, eligible=a < 0)
        for a in amounts
    ]
    return allocate_limited(entries, cap)
