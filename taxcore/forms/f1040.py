"""Form 1040 - U.S. Individual Income Tax Return.

The root of every filing run. Attachments are created here and receive
this return as their parent; they read its lines through it.
"""

from typing import List, Optional

from ..config_loader import JurisdictionParameters, load_parameters
from ..lines import line
from ..models import FilingStatus, TaxInformation
from ..util import round_half_up, sum_fields, sum_present
from . import register
from .base import Field
from .f4972 import F4972
from .f8582 import F8582
from .f8582cr import F8582CR
from .schedule_e import ScheduleE


@register("f1040.pdf", field_counts={2024: 38, 2025: 38})
class F1040:
    tag = "f1040"
    sequence_index = 0

    def __init__(self, info: TaxInformation,
                 parameters: Optional[JurisdictionParameters] = None):
        self.info = info
        self.parameters = parameters or load_parameters("US", info.tax_year)
        self.schedule_e = ScheduleE(self)
        self.f8582 = F8582(self)
        self.f8582cr = F8582CR(self)
        self.f4972 = F4972(self)

    def __repr__(self) -> str:
        return f"<F1040 {self.info.tax_year} {self.info.taxpayer.primary.full_name!r}>"

    @property
    def filing_status(self) -> FilingStatus:
        return self.info.filing_status

    def names_string(self) -> str:
        """Name(s) shown on return."""
        tp = self.info.taxpayer
        if tp.spouse is not None and self.filing_status == FilingStatus.MARRIED_FILING_JOINTLY:
            if tp.spouse.last_name == tp.primary.last_name:
                return f"{tp.primary.first_name} & {tp.spouse.first_name} {tp.primary.last_name}"
            return f"{tp.primary.full_name} & {tp.spouse.full_name}"
        return tp.primary.full_name

    def all_attachments(self) -> list:
        return [self.schedule_e, self.f8582, self.f8582cr, self.f4972]

    def attachments(self) -> list:
        """Needed attachments in filing order."""
        needed = [f for f in self.all_attachments() if f.is_needed()]
        return sorted(needed, key=lambda f: f.sequence_index)

    def is_needed(self) -> bool:
        return True

    # Income

    @line
    def l1z(self) -> float:
        """Total wages (W-2 box 1)."""
        return sum_fields(w.wages for w in self.info.w2s)

    @line
    def l2b(self) -> Optional[float]:
        """Taxable interest."""
        return sum_present(f.interest_income for f in self.info.f1099_ints)

    @line
    def l3a(self) -> Optional[float]:
        """Qualified dividends."""
        return sum_present(f.qualified_dividends for f in self.info.f1099_divs)

    @line
    def l3b(self) -> Optional[float]:
        """Ordinary dividends."""
        return sum_present(f.ordinary_dividends for f in self.info.f1099_divs)

    @line
    def income_before_passive(self) -> float:
        """Income that does not depend on the passive loss limitation.

        Form 8582 line 5 (modified AGI) reads this rather than line 11,
        which would include the limited Schedule E amounts.
        """
        return sum_fields([self.l1z(), self.l2b(), self.l3b()])

    @line
    def l8(self) -> Optional[float]:
        """Additional income from Schedule 1 (Schedule E, line 41)."""
        if not self.schedule_e.is_needed():
            return None
        return self.schedule_e.l41()

    @line
    def l9(self) -> float:
        return sum_fields([self.income_before_passive(), self.l8()])

    @line
    def l10(self) -> Optional[float]:
        """Adjustments to income (Schedule 1, Part II). None are modeled."""
        return None

    @line
    def l11(self) -> float:
        """Adjusted gross income."""
        return self.l9() - sum_fields([self.l10()])

    @line
    def l12(self) -> float:
        """Standard deduction, including the age 65 / blind additions."""
        status = self.filing_status
        deduction = self.parameters.standard_deduction[status]
        additional = self.parameters.additional_standard_deduction.get(status, 0.0)
        return deduction + additional * self.additional_deduction_count()

    def additional_deduction_count(self) -> int:
        year = self.info.tax_year
        tp = self.info.taxpayer
        people = [tp.primary]
        if tp.spouse is not None and self.filing_status == FilingStatus.MARRIED_FILING_JOINTLY:
            people.append(tp.spouse)
        count = 0
        for person in people:
            age = person.age_at_end_of(year)
            if age is not None and age >= 65:
                count += 1
            if person.is_blind:
                count += 1
        return count

    @line
    def l13(self) -> Optional[float]:
        """Qualified business income deduction. Not modeled."""
        return None

    @line
    def l14(self) -> float:
        return sum_fields([self.l12(), self.l13()])

    @line
    def l15(self) -> float:
        """Taxable income."""
        return max(0.0, self.l11() - self.l14())

    # Tax and payments

    @line
    def l16(self) -> int:
        return self.parameters.brackets_for(self.filing_status).tax(self.l15())

    @line
    def l17(self) -> Optional[int]:
        """Schedule 2 additional tax: Form 4972 tax on lump-sum distributions."""
        if not self.f4972.is_needed():
            return None
        return self.f4972.tax()

    @line
    def l18(self) -> float:
        return sum_fields([self.l16(), self.l17()])

    @line
    def l22(self) -> float:
        return self.l18()

    @line
    def l24(self) -> float:
        """Total tax."""
        return self.l22()

    @line
    def l25a(self) -> Optional[float]:
        """Federal income tax withheld from W-2s."""
        return sum_present(w.federal_withheld for w in self.info.w2s)

    @line
    def l25b(self) -> Optional[float]:
        """Federal income tax withheld from 1099s."""
        withheld = [f.federal_withheld for f in self.info.f1099_ints]
        withheld += [f.federal_withheld for f in self.info.f1099_divs]
        return sum_present(w for w in withheld if w)

    @line
    def l25d(self) -> float:
        return sum_fields([self.l25a(), self.l25b()])

    @line
    def l26(self) -> Optional[float]:
        """Estimated tax payments."""
        return self.info.estimated_payments_for("US")

    @line
    def l33(self) -> float:
        """Total payments."""
        return sum_fields([self.l25d(), self.l26()])

    @line
    def l34(self) -> Optional[float]:
        """Amount overpaid."""
        overpaid = self.l33() - self.l24()
        return overpaid if overpaid > 0 else None

    @line
    def l35a(self) -> Optional[float]:
        """Amount refunded."""
        return self.l34()

    @line
    def l37(self) -> Optional[float]:
        """Amount you owe."""
        owed = self.l24() - self.l33()
        return owed if owed > 0 else None

    def refund_or_owed(self) -> int:
        """Positive when a refund is due, negative when tax is owed."""
        return round_half_up(self.l33() - self.l24())

    def fields(self) -> List[Field]:
        tp = self.info.taxpayer
        spouse = tp.spouse
        status = self.filing_status
        return [
            tp.primary.first_name,
            tp.primary.last_name,
            tp.primary.ssn,
            spouse.first_name if spouse else None,
            spouse.last_name if spouse else None,
            spouse.ssn if spouse else None,
            tp.address_line1,
            tp.address_line2,
            status == FilingStatus.SINGLE,
            status == FilingStatus.MARRIED_FILING_JOINTLY,
            status == FilingStatus.MARRIED_FILING_SEPARATELY,
            status == FilingStatus.HEAD_OF_HOUSEHOLD,
            status == FilingStatus.WIDOW,
            self.l1z(),
            self.l2b(),
            self.l3a(),
            self.l3b(),
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
            self.l22(),
            self.l24(),
            self.l25a(),
            self.l25b(),
            self.l25d(),
            self.l26(),
            self.l33(),
            self.l34(),
            self.l35a(),
            self.l37(),
        ]
