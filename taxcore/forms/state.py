"""Resident state income tax return.

One generic return driven by the state's parameter file: start from
federal AGI (or federal taxable income), subtract the standard deduction
and exemptions, apply the state's bracket table, then any surtax and
exemption credits.
"""

import logging
import re
from typing import List, Optional

from ..config_loader import (
    STATES_NO_INCOME_TAX, JurisdictionParameters, load_parameters, supported_states,
)
from ..lines import line
from ..util import round_half_up, sum_fields, sum_present, to_decimal
from . import register
from .base import Field, date_text

logger = logging.getLogger(__name__)


@register("{tag}.pdf", field_counts={2024: 20, 2025: 20})
class StateReturn:
    tag = "state"
    sequence_index = 0

    def __init__(self, f1040, parameters: JurisdictionParameters):
        self.f1040 = f1040
        self.parameters = parameters
        self.state = parameters.jurisdiction
        form = re.sub(r"[^0-9a-z]", "", parameters.form_name.lower())
        prefix = self.state.lower()
        if form.startswith(prefix):
            form = form[len(prefix):]
        self.tag = f"{prefix}{form}"

    def __repr__(self) -> str:
        return f"<StateReturn tag={self.tag!r}>"

    @property
    def info(self):
        return self.f1040.info

    @property
    def filing_status(self):
        return self.info.filing_status

    def is_needed(self) -> bool:
        return self.l4() > 0 or self.l12() is not None or self.l13() is not None

    @line
    def date_of_birth(self):
        return date_text(self.info.taxpayer.primary.date_of_birth)

    @line
    def l1(self) -> float:
        """Federal starting point (AGI or taxable income)."""
        if self.parameters.starting_point == "taxable_income":
            return self.f1040.l15()
        return self.f1040.l11()

    @line
    def l2(self) -> Optional[float]:
        """State additions. None are modeled."""
        return None

    @line
    def l3(self) -> Optional[float]:
        """State subtractions. None are modeled."""
        return None

    @line
    def l4(self) -> float:
        """State adjusted gross income."""
        return self.l1() + sum_fields([self.l2()]) - sum_fields([self.l3()])

    @line
    def l5(self) -> Optional[float]:
        """Standard deduction."""
        deduction = self.parameters.standard_deduction[self.filing_status]
        return deduction or None

    @line
    def l6(self) -> Optional[float]:
        """Personal and dependent exemptions."""
        personal = self.parameters.personal_exemption.get(self.filing_status, 0.0)
        dependents = self.parameters.dependent_exemption * len(self.info.taxpayer.dependents)
        return (personal + dependents) or None

    @line
    def l7(self) -> float:
        """Taxable income."""
        return max(0.0, self.l4() - sum_fields([self.l5(), self.l6()]))

    @line
    def l8(self) -> int:
        return self.parameters.brackets_for(self.filing_status).tax(self.l7())

    @line
    def l9(self) -> Optional[int]:
        """Surtax on taxable income above the threshold."""
        surtax = self.parameters.surtax
        if surtax is None or self.l7() <= surtax.threshold:
            return None
        return round_half_up(to_decimal(self.l7() - surtax.threshold) * to_decimal(surtax.rate))

    @line
    def l10(self) -> Optional[float]:
        """Exemption credits."""
        personal = self.parameters.exemption_credit.get(self.filing_status, 0.0)
        dependents = (self.parameters.dependent_exemption_credit *
                      len(self.info.taxpayer.dependents))
        return (personal + dependents) or None

    @line
    def l11(self) -> float:
        """Total tax."""
        return max(0.0, self.l8() + sum_fields([self.l9()]) - sum_fields([self.l10()]))

    @line
    def l12(self) -> Optional[float]:
        """State income tax withheld on W-2s issued for this state."""
        return sum_present(
            w.state_withheld for w in self.info.w2s
            if (w.state or "").upper() == self.state and w.state_withheld
        )

    @line
    def l13(self) -> Optional[float]:
        """Estimated payments to this state."""
        return self.info.estimated_payments_for(self.state)

    @line
    def l14(self) -> float:
        return sum_fields([self.l12(), self.l13()])

    @line
    def l15(self) -> Optional[float]:
        """Amount you owe."""
        owed = self.l11() - self.l14()
        return owed if owed > 0 else None

    @line
    def l16(self) -> Optional[float]:
        """Overpaid (refund)."""
        overpaid = self.l14() - self.l11()
        return overpaid if overpaid > 0 else None

    def refund_or_owed(self) -> int:
        return round_half_up(self.l14() - self.l11())

    def fields(self) -> List[Field]:
        primary = self.info.taxpayer.primary
        return [
            primary.first_name,
            primary.last_name,
            primary.ssn,
            self.date_of_birth(),
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
        ]


def make_state_return(f1040) -> Optional[StateReturn]:
    """State return for the taxpayer's state of residence, if one is filed."""
    state = (f1040.info.taxpayer.state_of_residence or "").upper()
    year = f1040.info.tax_year
    if not state:
        return None
    if state in STATES_NO_INCOME_TAX:
        logger.debug("%s has no state income tax", state)
        return None
    if state not in supported_states(year):
        logger.warning("No %s parameters for %d; skipping state return", state, year)
        return None
    return StateReturn(f1040, load_parameters(state, year))
