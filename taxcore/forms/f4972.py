"""Form 4972 - Tax on Lump-Sum Distributions.

Available only when the plan participant was born before January 2, 1936.
Part II taxes the pre-1974 capital gain portion at a flat 20%; Part III
figures 10-year averaging with the 1986 single-filer rate table.
"""

from typing import List, Optional

from ..allocation import AllocationEntry, allocate_limited
from ..lines import line
from ..models import LumpSumDistribution
from ..util import first_present, round_half_up, sum_fields, sum_present, to_decimal
from . import register
from .base import Attachment, Field


@register("f4972.pdf", field_counts={2024: 26, 2025: 26})
class F4972(Attachment):
    tag = "f4972"
    sequence_index = 28

    @property
    def constants(self):
        return self.f1040.parameters.lump_sum

    def distributions(self) -> List[LumpSumDistribution]:
        return list(self.info.lump_sum_distributions)

    def eligible_distributions(self) -> List[LumpSumDistribution]:
        cutoff = self.constants.birth_year_cutoff
        return [d for d in self.distributions() if d.participant_birth_year < cutoff]

    def averaging_distributions(self) -> List[LumpSumDistribution]:
        return [d for d in self.eligible_distributions() if d.elect_10_year_averaging]

    def is_needed(self) -> bool:
        return len(self.eligible_distributions()) > 0

    # Part I - eligibility

    @line
    def l1(self) -> bool:
        """Lump-sum distribution from a qualified plan."""
        return len(self.eligible_distributions()) > 0

    @line
    def l2(self) -> bool:
        """Participant born before January 2, 1936."""
        return len(self.eligible_distributions()) > 0

    @line
    def l3(self) -> bool:
        """Participant in the plan for at least 5 years."""
        return self.l2()

    @line
    def l4(self) -> bool:
        """Form 4972 used after 1986 for this participant."""
        return False

    @line
    def l5(self) -> bool:
        """Received as beneficiary of a deceased employee."""
        return any(d.death_benefit_exclusion for d in self.eligible_distributions())

    # Part II - 20% capital gain election

    @line
    def l6(self) -> float:
        return sum_fields(
            d.capital_gain_portion
            for d in self.eligible_distributions()
            if d.elect_capital_gain_treatment
        )

    @line
    def l7(self) -> int:
        return round_half_up(to_decimal(self.l6()) * to_decimal(self.constants.capital_gain_rate))

    # Part III - 10-year averaging

    @line
    def l8(self) -> float:
        """Ordinary income part (box 2a minus box 3 when not given)."""
        return sum_fields(
            first_present([
                d.ordinary_income_portion,
                d.total_distribution - sum_fields([d.capital_gain_portion]),
            ])
            for d in self.averaging_distributions()
        )

    def death_benefit_exclusions(self) -> List[Optional[float]]:
        """Claimed exclusions per averaging distribution, limited in total."""
        entries = [
            AllocationEntry(d.death_benefit_exclusion) if d.death_benefit_exclusion else None
            for d in self.averaging_distributions()
        ]
        return allocate_limited(entries, self.constants.death_benefit_exclusion_limit)

    @line
    def l9(self) -> Optional[float]:
        """Death benefit exclusion."""
        return sum_present(self.death_benefit_exclusions())

    @line
    def l10(self) -> float:
        """Total taxable amount."""
        return max(0.0, self.l8() - sum_fields([self.l9()]))

    @line
    def l11(self) -> Optional[float]:
        """Current actuarial value of any annuity."""
        return sum_present(d.current_actuarial_value for d in self.averaging_distributions())

    @line
    def l12(self) -> float:
        return self.l10() + sum_fields([self.l11()])

    def _one_tenth(self, amount: float) -> int:
        return round_half_up(to_decimal(amount) / self.constants.averaging_years)

    @line
    def l13(self) -> int:
        return self._one_tenth(self.l12())

    @line
    def l14(self) -> int:
        """Tax on line 13 from the 1986 rate table."""
        return self.constants.averaging_brackets.tax(self.l13())

    @line
    def l15(self) -> int:
        return self.l14() * self.constants.averaging_years

    @line
    def l16(self) -> Optional[int]:
        if self.l11() is None:
            return None
        return self._one_tenth(self.l11())

    @line
    def l17(self) -> Optional[int]:
        if self.l16() is None:
            return None
        return self.constants.averaging_brackets.tax(self.l16())

    @line
    def l18(self) -> Optional[int]:
        if self.l17() is None:
            return None
        return self.l17() * self.constants.averaging_years

    @line
    def l19(self) -> float:
        return max(0, self.l15() - sum_fields([self.l18()]))

    @line
    def l20(self) -> Optional[float]:
        """Federal estate tax attributable to the distribution."""
        return sum_present(
            d.federal_estate_tax_attributable for d in self.averaging_distributions()
        )

    @line
    def l21(self) -> float:
        """Tax from 10-year averaging."""
        return max(0, self.l19() - sum_fields([self.l20()]))

    # Part IV

    @line
    def l22(self) -> int:
        return self.l7()

    @line
    def l23(self) -> float:
        return self.l21()

    @line
    def l24(self) -> float:
        return self.l22() + self.l23()

    def tax(self) -> int:
        """Tax on lump-sum distributions (to Schedule 2)."""
        return max(0, round_half_up(self.l24()))

    def fields(self) -> List[Field]:
        return self.header_fields() + [
            self.l1(),
            self.l2(),
            self.l3(),
            self.l4(),
            self.l5(),
            self.l6(),
            self.l7(),
            self.l8(),
            self.l9(),
            self.l10(),
            self.l11(),
            self.l12(),
            self.l13(),
            self.l14(),
            self.l15(),
            self.l16(),
            self.l17(),
            self.l18(),
            self.l19(),
            self.l20(),
            self.l21(),
            self.l22(),
            self.l23(),
            self.l24(),
        ]
