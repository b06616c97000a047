"""Form 8582 - Passive Activity Loss Limitations.

Passive losses offset passive income. Rental real estate with active
participation also gets a special allowance ($25,000, or $12,500 for
married filing separately) that phases out at 50 cents per dollar of
modified AGI, reaching zero at $150,000 ($75,000 MFS). Losses that are
not allowed are suspended and carried forward.

The allowed total (line 16) is spread over the loss activities in
proportion to their size; Schedule E reports the results.
"""

from typing import List, Optional

from ..allocation import limit_losses
from ..lines import line
from ..util import round_half_up, sum_fields
from . import register
from .base import Attachment, Field


@register("f8582.pdf", field_counts={2024: 24, 2025: 24})
class F8582(Attachment):
    tag = "f8582"
    sequence_index = 88

    def is_needed(self) -> bool:
        return self.l13() + self.l14() > 0

    @property
    def limits(self):
        return self.f1040.parameters.passive_activity

    # Activities

    def rental_activities(self) -> List[float]:
        """Schedule E net per property with active participation."""
        props = self.f1040.schedule_e.properties()
        nets = self.f1040.schedule_e.rental_net()
        return [net for p, net in zip(props, nets) if p.active_participation]

    def other_activities(self) -> List[float]:
        """Rentals without active participation plus passive K-1s."""
        props = self.f1040.schedule_e.properties()
        nets = self.f1040.schedule_e.rental_net()
        rentals = [net for p, net in zip(props, nets) if not p.active_participation]
        k1s = [k.ordinary_business_income for k in self.info.passive_k1s if k.is_passive]
        return rentals + k1s

    # Part I

    @line
    def l1a(self) -> float:
        """Rental activities with net income."""
        return sum_fields(v for v in self.rental_activities() if v > 0)

    @line
    def l1b(self) -> float:
        """Rental activities with net loss (as a positive amount)."""
        return -sum_fields(v for v in self.rental_activities() if v < 0)

    @line
    def l1c(self) -> float:
        """Prior-year unallowed rental losses."""
        return sum_fields([self.info.pal_carryover_rental])

    @line
    def l1d(self) -> float:
        return self.l1a() - self.l1b() - self.l1c()

    @line
    def l2a(self) -> float:
        return sum_fields(v for v in self.other_activities() if v > 0)

    @line
    def l2b(self) -> float:
        return -sum_fields(v for v in self.other_activities() if v < 0)

    @line
    def l2c(self) -> float:
        return sum_fields([self.info.pal_carryover_other])

    @line
    def l2d(self) -> float:
        return self.l2a() - self.l2b() - self.l2c()

    @line
    def l3(self) -> float:
        return self.l1d() + self.l2d()

    # Part II - special allowance for rental real estate

    @line
    def l4(self) -> float:
        """Smaller of the loss on line 1d or the loss on line 3."""
        if self.l3() >= 0 or self.l1d() >= 0:
            return 0.0
        return min(abs(self.l1d()), abs(self.l3()))

    @line
    def l5(self) -> float:
        """Modified adjusted gross income."""
        return self.f1040.income_before_passive()

    @line
    def l6(self) -> float:
        return self.limits.phase_out_complete[self.f1040.filing_status]

    @line
    def l7(self) -> float:
        return max(0.0, self.l6() - self.l5())

    @line
    def l8(self) -> int:
        return round_half_up(self.l7() * self.limits.phase_out_rate)

    @line
    def l9(self) -> float:
        return self.limits.special_allowance[self.f1040.filing_status]

    @line
    def l10(self) -> float:
        return min(self.l8(), self.l9())

    @line
    def l11(self) -> float:
        """Special allowance."""
        return min(self.l4(), self.l10())

    # Part III - total losses allowed

    @line
    def l12(self) -> float:
        return self.l1a() + self.l2a()

    @line
    def l13(self) -> float:
        return self.l1b() + self.l2b()

    @line
    def l14(self) -> float:
        return self.l1c() + self.l2c()

    @line
    def l15(self) -> float:
        return self.l12() + self.l11()

    @line
    def l16(self) -> float:
        """Total losses allowed from all passive activities."""
        return min(self.l13() + self.l14(), self.l15())

    def total_loss_allowed(self) -> float:
        return self.l16()

    def suspended_loss(self) -> float:
        """Unallowed loss carried forward to next year."""
        return max(0.0, self.l13() + self.l14() - self.l16())

    # Allocation of the allowed loss

    @line
    def allowed_amounts(self) -> List[Optional[float]]:
        """Allowed amount per activity, in Schedule E order.

        Layout: every rental property, then every passive K-1, then the
        prior-year rental and other carryovers (absent when none).
        """
        sched_e = self.f1040.schedule_e
        amounts: List[Optional[float]] = list(sched_e.rental_net())
        amounts += [k.ordinary_business_income for k in self.info.passive_k1s if k.is_passive]
        amounts += [_as_loss(self.info.pal_carryover_rental),
                    _as_loss(self.info.pal_carryover_other)]
        return limit_losses(amounts, self.l16())

    def allowed_rental(self) -> List[Optional[float]]:
        return self.allowed_amounts()[:len(self.f1040.schedule_e.properties())]

    def allowed_other(self) -> List[Optional[float]]:
        start = len(self.f1040.schedule_e.properties())
        return self.allowed_amounts()[start:-2]

    def allowed_prior_rental(self) -> Optional[float]:
        return self.allowed_amounts()[-2]

    def allowed_prior_other(self) -> Optional[float]:
        return self.allowed_amounts()[-1]

    def fields(self) -> List[Field]:
        return self.header_fields() + [
            self.l1a(),
            self.l1b(),
            self.l1c(),
            self.l1d(),
            self.l2a(),
            self.l2b(),
            self.l2c(),
            self.l2d(),
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


def _as_loss(carryover: Optional[float]) -> Optional[float]:
    if not carryover:
        return None
    return -abs(carryover)
