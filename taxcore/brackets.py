"""Progressive bracket tax evaluation.

One evaluator serves the federal rate schedule, the 1986 rates used by
Form 4972's 10-year averaging and every state's marginal-rate schedule.
Tables come in three shapes and are normalized to ``(lower, upper, rate)``
triples before any tax is computed:

    BracketTable.from_pairs([(11_925, 0.10), (float("inf"), 0.12)])
    BracketTable.from_bounds([1000, 2000], [0.02, 0.03, 0.04])
    BracketTable.from_triples([(0, 48_475, 0.0), (48_475, float("inf"), 0.0195)])
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Sequence, Tuple

from .errors import InvalidBracketTable
from .util import Number, round_half_up, to_decimal

INFINITY = float("inf")


@dataclass(frozen=True)
class Bracket:
    """One marginal-rate band: income in (lower, upper] is taxed at rate."""
    lower: float
    upper: float
    rate: float

    @property
    def label(self) -> str:
        if self.upper == INFINITY:
            return f"${self.lower:,.0f}+"
        return f"${self.lower:,.0f} - ${self.upper:,.0f}"


@dataclass(frozen=True)
class BracketTable:
    """Ordered, contiguous marginal-rate schedule ending in an open bracket.

    Construction validates the table, so a malformed schedule fails when
    the parameters are loaded rather than in the middle of a return.
    """
    brackets: Tuple[Bracket, ...]

    def __post_init__(self):
        if not self.brackets:
            raise InvalidBracketTable("Bracket table is empty")
        previous_upper = 0.0
        for i, b in enumerate(self.brackets):
            if b.rate < 0:
                raise InvalidBracketTable(f"Bracket {i} has negative rate {b.rate}")
            if b.lower != previous_upper:
                raise InvalidBracketTable(
                    f"Bracket {i} starts at {b.lower}, expected {previous_upper}"
                )
            if b.upper <= b.lower:
                raise InvalidBracketTable(
                    f"Bracket {i} bounds are not increasing ({b.lower} -> {b.upper})"
                )
            previous_upper = b.upper
        if previous_upper != INFINITY:
            raise InvalidBracketTable(
                f"Last bracket must be unbounded, got upper bound {previous_upper}"
            )

    # -- constructors -------------------------------------------------

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[Number, Number]]) -> "BracketTable":
        """Build from ``(upper_limit, rate)`` pairs, the last limit infinite."""
        brackets = []
        previous = 0.0
        for upper, rate in pairs:
            brackets.append(Bracket(previous, float(upper), float(rate)))
            previous = float(upper)
        return cls(tuple(brackets))

    @classmethod
    def from_bounds(cls, bounds: Sequence[Number], rates: Sequence[Number]) -> "BracketTable":
        """Build from cumulative upper bounds with a parallel rate list.

        ``rates`` may have one more entry than ``bounds`` (the last rate
        applies above the last bound) or the same length when the last
        bound is already infinite.
        """
        bounds = [float(b) for b in bounds]
        if len(rates) == len(bounds) + 1:
            bounds.append(INFINITY)
        elif len(rates) != len(bounds):
            raise InvalidBracketTable(
                f"{len(bounds)} bounds do not match {len(rates)} rates"
            )
        return cls.from_pairs(zip(bounds, rates))

    @classmethod
    def from_triples(cls, triples: Iterable[Tuple[Number, Number, Number]]) -> "BracketTable":
        """Build from explicit ``(min, max, rate)`` triples."""
        return cls(tuple(
            Bracket(float(lo), float(hi), float(rate)) for lo, hi, rate in triples
        ))

    @classmethod
    def from_config(cls, raw) -> "BracketTable":
        """Build from a parsed YAML value in any of the supported shapes.

        Accepted: ``{"bounds": [...], "rates": [...]}``, a list of
        ``{"min", "max", "rate"}`` mappings, or a list of
        ``[upper, rate]`` pairs. A ``null`` or ``.inf`` bound is infinite.
        """
        if isinstance(raw, dict):
            if "bounds" not in raw or "rates" not in raw:
                raise InvalidBracketTable(f"Expected 'bounds' and 'rates', got {sorted(raw)}")
            return cls.from_bounds([_bound(b) for b in raw["bounds"]], raw["rates"])
        if not isinstance(raw, list) or not raw:
            raise InvalidBracketTable(f"Unsupported bracket table: {raw!r}")
        if isinstance(raw[0], dict):
            return cls.from_triples(
                (_bound(b.get("min", 0)), _bound(b.get("max")), b["rate"]) for b in raw
            )
        return cls.from_pairs((_bound(upper), rate) for upper, rate in raw)

    # -- evaluation ---------------------------------------------------

    @property
    def upper_bounds(self) -> List[float]:
        return [b.upper for b in self.brackets]

    @property
    def rates(self) -> List[float]:
        return [b.rate for b in self.brackets]

    def exact_tax(self, amount: Number) -> Decimal:
        """Unrounded tax on ``amount``."""
        amount = to_decimal(amount)
        total = Decimal(0)
        if amount <= 0:
            return total

        previous_limit = Decimal(0)
        for bracket in self.brackets:
            upper = to_decimal(bracket.upper)
            bracket_income = max(Decimal(0), min(amount, upper) - previous_limit)
            total += bracket_income * to_decimal(bracket.rate)
            previous_limit = upper
            if amount <= previous_limit:
                break
        return total

    def tax(self, amount: Number) -> int:
        """Tax on ``amount`` rounded to whole dollars (half up)."""
        return round_half_up(self.exact_tax(amount))

    def breakdown(self, amount: Number) -> List[dict]:
        """Per-bracket income and tax for reports."""
        rows = []
        if amount is None or amount <= 0:
            return rows
        for bracket in self.brackets:
            if amount <= bracket.lower:
                break
            bracket_income = min(amount, bracket.upper) - bracket.lower
            rows.append({
                "bracket": bracket.label,
                "rate": bracket.rate,
                "income": bracket_income,
                "tax": bracket_income * bracket.rate,
            })
        return rows

    def marginal_rate(self, amount: Number) -> float:
        """Rate applied to the next dollar above ``amount``."""
        for bracket in self.brackets:
            if amount < bracket.upper:
                return bracket.rate
        return self.brackets[-1].rate


def tax_from_brackets(amount: Number, table: BracketTable) -> int:
    """Convenience wrapper: ``table.tax(amount)``."""
    return table.tax(amount)


def _bound(value) -> float:
    if value is None:
        return INFINITY
    return float(value)
