"""Data models for tax return information.

``TaxInformation`` is the immutable snapshot every form reads. All
models are frozen and collections are tuples, so one instance can be
shared by reference across every form of a run.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Tuple


class FilingStatus(Enum):
    """Tax filing status options."""
    SINGLE = "single"
    MARRIED_FILING_JOINTLY = "married_filing_jointly"
    MARRIED_FILING_SEPARATELY = "married_filing_separately"
    HEAD_OF_HOUSEHOLD = "head_of_household"
    WIDOW = "widow"

    @classmethod
    def parse(cls, value: str) -> "FilingStatus":
        """Accept enum values plus the short spellings used in profiles."""
        key = (value or "").strip().lower()
        return _STATUS_ALIASES.get(key) or cls(key)


_STATUS_ALIASES = {
    "s": FilingStatus.SINGLE,
    "mfj": FilingStatus.MARRIED_FILING_JOINTLY,
    "married_jointly": FilingStatus.MARRIED_FILING_JOINTLY,
    "mfs": FilingStatus.MARRIED_FILING_SEPARATELY,
    "married_separately": FilingStatus.MARRIED_FILING_SEPARATELY,
    "hoh": FilingStatus.HEAD_OF_HOUSEHOLD,
    "w": FilingStatus.WIDOW,
    "qualifying_surviving_spouse": FilingStatus.WIDOW,
}


@dataclass(frozen=True)
class Person:
    """A taxpayer or spouse."""
    first_name: str
    last_name: str = ""
    ssn: Optional[str] = None
    date_of_birth: Optional[date] = None
    is_blind: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def age_at_end_of(self, tax_year: int) -> Optional[int]:
        """Age on December 31, counting a January 1 birthday as the day before."""
        if self.date_of_birth is None:
            return None
        as_of = date(tax_year + 1, 1, 1)
        born = self.date_of_birth
        return as_of.year - born.year - ((as_of.month, as_of.day) < (born.month, born.day))


@dataclass(frozen=True)
class Dependent:
    """A dependent claimed on the return."""
    name: str
    age: int = 0
    relationship: str = ""
    ssn: Optional[str] = None


@dataclass(frozen=True)
class TaxpayerInfo:
    """Basic taxpayer information."""
    primary: Person
    filing_status: FilingStatus = FilingStatus.SINGLE
    spouse: Optional[Person] = None
    dependents: Tuple[Dependent, ...] = ()
    state_of_residence: Optional[str] = None  # Two-letter code
    address_line1: str = ""
    address_line2: str = ""


@dataclass(frozen=True)
class W2Data:
    """W-2 form data for wage and salary information."""
    employer_name: str
    employer_ein: Optional[str] = None
    wages: float = 0.0  # Box 1: Wages, tips, other compensation
    federal_withheld: float = 0.0  # Box 2: Federal income tax withheld
    state: Optional[str] = None  # Box 15
    state_wages: float = 0.0  # Box 16
    state_withheld: float = 0.0  # Box 17


@dataclass(frozen=True)
class Form1099Int:
    """1099-INT form data for interest income."""
    payer_name: str
    interest_income: float = 0.0  # Box 1
    federal_withheld: float = 0.0  # Box 4


@dataclass(frozen=True)
class Form1099Div:
    """1099-DIV form data for dividend income."""
    payer_name: str
    ordinary_dividends: float = 0.0  # Box 1a
    qualified_dividends: float = 0.0  # Box 1b
    federal_withheld: float = 0.0  # Box 4


@dataclass(frozen=True)
class RentalProperty:
    """A rental real estate activity reported on Schedule E."""
    address: str
    property_type: str = "Single Family"
    rental_income: float = 0.0  # Line 3: rents received
    advertising: float = 0.0
    auto_and_travel: float = 0.0
    cleaning_and_maintenance: float = 0.0
    commissions: float = 0.0
    insurance: float = 0.0
    legal_and_professional: float = 0.0
    management_fees: float = 0.0
    mortgage_interest: float = 0.0
    repairs: float = 0.0
    supplies: float = 0.0
    property_tax: float = 0.0
    utilities: float = 0.0
    other_expenses: float = 0.0
    purchase_price: float = 0.0
    land_value: float = 0.0
    purchase_date: Optional[date] = None
    days_rented: int = 365
    personal_use_days: int = 0
    active_participation: bool = True

    @property
    def total_expenses(self) -> float:
        """Lines 5-19, before depreciation."""
        return (
            self.advertising +
            self.auto_and_travel +
            self.cleaning_and_maintenance +
            self.commissions +
            self.insurance +
            self.legal_and_professional +
            self.management_fees +
            self.mortgage_interest +
            self.repairs +
            self.supplies +
            self.property_tax +
            self.utilities +
            self.other_expenses
        )

    @property
    def depreciable_basis(self) -> float:
        return max(0.0, self.purchase_price - self.land_value)


@dataclass(frozen=True)
class PassiveK1:
    """Schedule K-1 (Form 1065) ordinary income from a partnership."""
    partnership_name: str
    ordinary_business_income: float = 0.0  # Box 1, signed
    is_passive: bool = True


class PassiveActivityType(Enum):
    """Kind of activity a passive credit comes from."""
    RENTAL_REAL_ESTATE = "rental_real_estate"
    OTHER_RENTAL = "other_rental"
    OTHER_PASSIVE = "other_passive"


@dataclass(frozen=True)
class PassiveActivityCredit:
    """A credit from a passive activity, limited on Form 8582-CR."""
    activity_name: str
    activity_type: PassiveActivityType = PassiveActivityType.OTHER_PASSIVE
    credit_type: str = "other_business"  # low_income_housing, rehabilitation, foreign_tax
    current_year_credit: float = 0.0
    prior_year_unallowed: float = 0.0
    active_participation: bool = False

    @property
    def total(self) -> float:
        return self.current_year_credit + self.prior_year_unallowed


@dataclass(frozen=True)
class LumpSumDistribution:
    """Form 1099-R lump-sum distribution eligible for Form 4972."""
    payer_name: str
    participant_birth_year: int
    total_distribution: float = 0.0  # Box 2a
    capital_gain_portion: Optional[float] = None  # Box 3
    ordinary_income_portion: Optional[float] = None
    current_actuarial_value: Optional[float] = None  # Box 8
    federal_estate_tax_attributable: Optional[float] = None
    death_benefit_exclusion: Optional[float] = None  # Beneficiary claim
    elect_capital_gain_treatment: bool = False
    elect_10_year_averaging: bool = False
    date_received: Optional[date] = None


@dataclass(frozen=True)
class EstimatedTaxPayment:
    """A quarterly estimated tax payment."""
    amount: float
    jurisdiction: str = "US"  # "US" or a two-letter state code
    payment_date: Optional[date] = None


@dataclass(frozen=True)
class TaxInformation:
    """Everything the forms of one filing run read. Never mutated."""
    tax_year: int
    taxpayer: TaxpayerInfo
    w2s: Tuple[W2Data, ...] = ()
    f1099_ints: Tuple[Form1099Int, ...] = ()
    f1099_divs: Tuple[Form1099Div, ...] = ()
    rental_properties: Tuple[RentalProperty, ...] = ()
    passive_k1s: Tuple[PassiveK1, ...] = ()
    passive_activity_credits: Tuple[PassiveActivityCredit, ...] = ()
    lump_sum_distributions: Tuple[LumpSumDistribution, ...] = ()
    estimated_payments: Tuple[EstimatedTaxPayment, ...] = ()
    pal_carryover_rental: Optional[float] = None  # Prior-year unallowed rental loss (positive)
    pal_carryover_other: Optional[float] = None  # Prior-year unallowed other passive loss

    @property
    def filing_status(self) -> FilingStatus:
        return self.taxpayer.filing_status

    def estimated_payments_for(self, jurisdiction: str) -> Optional[float]:
        """Total estimated payments to ``jurisdiction``; absent if none were made."""
        payments = [p.amount for p in self.estimated_payments if p.jurisdiction == jurisdiction]
        if not payments:
            return None
        return sum(payments)
