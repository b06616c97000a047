"""Schedule E (Supplemental Income and Loss).

Part I reports rental real estate, three properties per page; Part II
reports partnership K-1 income. Losses are limited by Form 8582 when
that form is needed.
"""

from datetime import date
from typing import List, Optional

from ..lines import line
from ..models import RentalProperty
from ..util import sum_fields
from . import register
from .base import Attachment, Field

# Residential rental property depreciation: 27.5 years straight-line
RESIDENTIAL_DEPRECIATION_YEARS = 27.5

# Property columns on one page of Schedule E
COLUMNS = 3

# Lines 5-19 in form order; line 18 (depreciation) is computed.
EXPENSE_LINES = [
    ("l5", "advertising"),
    ("l6", "auto_and_travel"),
    ("l7", "cleaning_and_maintenance"),
    ("l8", "commissions"),
    ("l9", "insurance"),
    ("l10", "legal_and_professional"),
    ("l11", "management_fees"),
    ("l12", "mortgage_interest"),
    ("l13", None),  # Other interest
    ("l14", "repairs"),
    ("l15", "supplies"),
    ("l16", "property_tax"),
    ("l17", "utilities"),
    ("l18", None),  # Depreciation
    ("l19", "other_expenses"),
]


class DepreciationCalculator:
    """Calculate depreciation for rental properties using straight-line method."""

    @staticmethod
    def calculate_annual_depreciation(
        depreciable_basis: float,
        useful_life_years: float = RESIDENTIAL_DEPRECIATION_YEARS,
        months_in_service: int = 12,
    ) -> float:
        """
        Calculate annual depreciation using straight-line method.

        In the first year depreciation is prorated by the number of months
        the property was in service.

        Args:
            depreciable_basis: Cost basis minus land value.
            useful_life_years: Recovery period (27.5 for residential rental).
            months_in_service: Months the property was available for rent
                               in the tax year (0-12).

        Returns:
            Annual depreciation amount.
        """
        if depreciable_basis <= 0 or useful_life_years <= 0:
            return 0.0
        return depreciable_basis / useful_life_years * (months_in_service / 12.0)

    @staticmethod
    def calculate_months_in_service(purchase_date: date, tax_year: int) -> int:
        """Months in service during ``tax_year`` (purchase month counts in full)."""
        if purchase_date.year > tax_year:
            return 0
        if purchase_date.year < tax_year:
            return 12
        return max(0, min(12, 12 - purchase_date.month + 1))


@register("f1040se.pdf", field_counts={2024: 80, 2025: 80})
class ScheduleE(Attachment):
    tag = "f1040se"
    sequence_index = 13

    def is_needed(self) -> bool:
        """Any activity to report, or a Form 8582 result to carry in."""
        if self.properties() or self.partnerships():
            return True
        return self.f1040.f8582.is_needed()

    def properties(self) -> List[RentalProperty]:
        return list(self.info.rental_properties)

    def partnerships(self) -> list:
        return list(self.info.passive_k1s)

    # Per-property amounts (every property, not only the first page)

    @staticmethod
    def rental_ratio(prop: RentalProperty) -> float:
        """Share of expenses attributable to rental use."""
        total_days = prop.days_rented + prop.personal_use_days
        if total_days <= 0 or prop.personal_use_days <= 0:
            return 1.0
        return prop.days_rented / total_days

    def expense(self, prop: RentalProperty, attr: Optional[str]) -> float:
        if attr is None:
            return 0.0
        return getattr(prop, attr) * self.rental_ratio(prop)

    def depreciation(self, prop: RentalProperty) -> float:
        if prop.depreciable_basis <= 0:
            return 0.0
        if prop.purchase_date is not None:
            months = DepreciationCalculator.calculate_months_in_service(
                prop.purchase_date, self.info.tax_year)
        else:
            months = 12  # Assume full year if no date provided
        annual = DepreciationCalculator.calculate_annual_depreciation(
            prop.depreciable_basis, months_in_service=months)
        return annual * self.rental_ratio(prop)

    @line
    def l3(self) -> List[float]:
        """Rents received."""
        return [p.rental_income for p in self.properties()]

    @line
    def l18(self) -> List[float]:
        """Depreciation expense."""
        return [self.depreciation(p) for p in self.properties()]

    @line
    def l20(self) -> List[float]:
        """Total expenses (lines 5 through 19)."""
        return [
            sum_fields(self.expense(p, attr) for _, attr in EXPENSE_LINES) + dep
            for p, dep in zip(self.properties(), self.l18())
        ]

    @line
    def l21(self) -> List[float]:
        """Income or loss per property, before the passive loss limitation."""
        return [rents - expenses for rents, expenses in zip(self.l3(), self.l20())]

    def rental_net(self) -> List[float]:
        return self.l21()

    @line
    def l22(self) -> List[Optional[float]]:
        """Deductible rental loss after limitation (Form 8582); income passes through."""
        if not self.f1040.f8582.is_needed():
            return [v if v < 0 else None for v in self.l21()]
        allowed = self.f1040.f8582.allowed_rental()
        return [v if v is not None and v < 0 else None for v in allowed]

    # Totals

    @line
    def l23a(self) -> float:
        """Total rents received."""
        return sum_fields(self.l3())

    @line
    def l23c(self) -> float:
        """Total mortgage interest."""
        return sum_fields(self.expense(p, "mortgage_interest") for p in self.properties())

    @line
    def l23d(self) -> float:
        """Total depreciation."""
        return sum_fields(self.l18())

    @line
    def l23e(self) -> float:
        """Total expenses."""
        return sum_fields(self.l20())

    @line
    def l24(self) -> float:
        """Income: positive amounts from line 21."""
        return sum_fields(v for v in self.l21() if v > 0)

    @line
    def l25(self) -> float:
        """Losses: line 22 plus allowed prior-year rental losses (negative)."""
        allowed_prior = None
        if self.f1040.f8582.is_needed():
            allowed_prior = self.f1040.f8582.allowed_prior_rental()
        return sum_fields(self.l22()) + sum_fields([allowed_prior])

    @line
    def l26(self) -> float:
        """Total rental real estate income or loss."""
        return self.l24() + self.l25()

    # Part II

    @line
    def l32(self) -> Optional[float]:
        """Total partnership income or loss, after the passive loss limitation."""
        amounts = [k.ordinary_business_income for k in self.partnerships()]
        allowed_prior = None
        if self.f1040.f8582.is_needed():
            passive = self.f1040.f8582.allowed_other()
            passive_iter = iter(passive)
            amounts = [
                next(passive_iter) if k.is_passive else k.ordinary_business_income
                for k in self.partnerships()
            ]
            allowed_prior = self.f1040.f8582.allowed_prior_other()
        if not amounts and allowed_prior is None:
            return None
        return sum_fields(amounts) + sum_fields([allowed_prior])

    @line
    def l41(self) -> float:
        """Total income or loss (to Schedule 1, line 5)."""
        return sum_fields([self.l26(), self.l32()])

    # Serialization

    def _columns(self, values) -> List[Optional[Field]]:
        """First page of columns, padded with blanks."""
        values = list(values)[:COLUMNS]
        return values + [None] * (COLUMNS - len(values))

    def _nonzero_columns(self, values) -> List[Optional[float]]:
        return self._columns(v if v else None for v in values)

    def fields(self) -> List[Field]:
        props = self.properties()
        result: List[Field] = self.header_fields()
        for i in range(COLUMNS):
            p = props[i] if i < len(props) else None
            result += [
                p.address if p else None,
                p.property_type if p else None,
                p.days_rented if p else None,
                p.personal_use_days if p else None,
            ]
        result += self._columns(self.l3())
        for name, attr in EXPENSE_LINES:
            if name == "l18":
                result += self._nonzero_columns(self.l18())
            else:
                result += self._nonzero_columns(self.expense(p, attr) for p in props)
        result += self._columns(self.l20())
        result += self._columns(self.l21())
        result += self._columns(self.l22())
        result += [
            self.l23a(),
            self.l23c(),
            self.l23d(),
            self.l23e(),
            self.l24(),
            self.l25(),
            self.l26(),
            self.l32(),
            self.l41(),
        ]
        return result
