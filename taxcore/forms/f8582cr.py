"""Form 8582-CR - Passive Activity Credit Limitations.

Credits from passive activities (low-income housing, rehabilitation,
foreign tax, other business credits) are allowed only up to the tax on
net passive income. Rental real estate with active participation also
gets what is left of the Form 8582 special allowance, phased out by
modified AGI the same way. Disallowed credits carry forward.
"""

from typing import List, Optional

from ..lines import line
from ..models import PassiveActivityCredit, PassiveActivityType
from ..util import round_half_up, sum_fields, sum_present
from . import register
from .base import Attachment, Field


@register("f8582cr.pdf", field_counts={2024: 21, 2025: 21})
class F8582CR(Attachment):
    tag = "f8582cr"
    sequence_index = 89

    @property
    def limits(self):
        return self.f1040.parameters.passive_activity

    def credits(self) -> List[PassiveActivityCredit]:
        return list(self.info.passive_activity_credits)

    def rental_credits(self) -> List[PassiveActivityCredit]:
        """Rental real estate credits with active participation."""
        return [c for c in self.credits() if _special_allowance_eligible(c)]

    def other_credits(self) -> List[PassiveActivityCredit]:
        return [c for c in self.credits() if not _special_allowance_eligible(c)]

    def is_needed(self) -> bool:
        return len(self.credits()) > 0

    # Part I - passive activity credits

    @line
    def l1a(self) -> Optional[float]:
        """Worksheet 1: rental real estate with active participation."""
        return sum_present(c.total for c in self.rental_credits())

    @line
    def l1b(self) -> Optional[float]:
        """Worksheet 2: all other passive activities."""
        return sum_present(c.total for c in self.other_credits())

    @line
    def l1c(self) -> Optional[float]:
        return sum_present([self.l1a(), self.l1b()])

    @line
    def l2(self) -> int:
        """Tax attributable to net passive income."""
        passive_income = max(0.0, self.f1040.f8582.l3())
        if passive_income == 0:
            return 0
        table = self.f1040.parameters.brackets_for(self.f1040.filing_status)
        taxable = self.f1040.l15()
        return table.tax(taxable) - table.tax(max(0.0, taxable - passive_income))

    @line
    def l3(self) -> float:
        return min(sum_fields([self.l1c()]), self.l2())

    # Part II - special allowance for rental real estate credits

    @line
    def l4(self) -> float:
        return sum_fields([self.l1a()])

    @line
    def l5(self) -> float:
        return self.l3()

    @line
    def l6(self) -> float:
        return max(0.0, self.l4() - self.l5())

    @line
    def l7(self) -> float:
        """Modified AGI, as on Form 8582 line 5."""
        return self.f1040.f8582.l5()

    @line
    def l8(self) -> float:
        return self.limits.phase_out_complete[self.f1040.filing_status]

    @line
    def l9(self) -> float:
        return max(0.0, self.l8() - self.l7())

    @line
    def l10(self) -> float:
        """Half of line 9, no more than the special allowance."""
        allowance = self.limits.special_allowance[self.f1040.filing_status]
        return min(round_half_up(self.l9() * self.limits.phase_out_rate), allowance)

    @line
    def l11(self) -> float:
        return min(self.l6(), self.l10())

    @line
    def l12(self) -> float:
        """Special allowance already used for losses (Form 8582 line 11)."""
        return self.f1040.f8582.l11()

    @line
    def l13(self) -> float:
        return max(0.0, self.l10() - self.l12())

    @line
    def l14(self) -> float:
        return min(self.l11(), self.l13())

    # Part III - passive activity credit allowed

    @line
    def l35(self) -> float:
        return self.l3()

    @line
    def l36(self) -> float:
        return self.l14()

    @line
    def l37(self) -> float:
        """Passive activity credit allowed."""
        return self.l35() + self.l36()

    def allowed_credit(self) -> float:
        return self.l37()

    def disallowed_carryforward(self) -> float:
        return max(0.0, sum_fields([self.l1c()]) - self.l37())

    def fields(self) -> List[Field]:
        return self.header_fields() + [
            self.l1a(),
            self.l1b(),
            self.l1c(),
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
            self.l35(),
            self.l36(),
            self.l37(),
        ]


def _special_allowance_eligible(credit: PassiveActivityCredit) -> bool:
    return (credit.activity_type == PassiveActivityType.RENTAL_REAL_ESTATE
            and credit.active_participation)
