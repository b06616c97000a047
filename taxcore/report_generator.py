"""Tax Summary Report Generator.

Plain-text reports that follow the line structure of each needed form:
- Federal Form 1040
- Schedule E (Rental Income and Partnerships)
- Form 8582 (Passive Activity Loss Limitations)
- Form 8582-CR (Passive Activity Credit Limitations)
- Form 4972 (Lump-Sum Distributions)
- The resident state return
"""

from .forms import needed_forms
from .forms.f1040 import F1040
from .forms.f4972 import F4972
from .forms.f8582 import F8582
from .forms.f8582cr import F8582CR
from .forms.schedule_e import ScheduleE
from .forms.state import StateReturn


def fmt(amount) -> str:
    """Format amount as currency; absent amounts are blank."""
    if amount is None:
        return ""
    if amount < 0:
        return f"-${abs(amount):,.2f}"
    return f"${amount:,.2f}"


def _sep(char: str = "=", length: int = 72) -> str:
    return char * length


def _line(label: str, amount, width: int = 55) -> str:
    """Format a single line item."""
    text = amount if isinstance(amount, str) else fmt(amount)
    return f"  {label:<{width}} {text:>15}"


def _header(title: str, char: str = "-") -> list:
    return ["", _sep(char, 72), f"  {title}", _sep(char, 72)]


def generate_federal_report(f1040: F1040) -> str:
    """Generate a report mimicking Form 1040."""
    lines = _header(
        f"FORM 1040 - U.S. Individual Income Tax Return (Tax Year {f1040.info.tax_year})", "=")
    lines.append(f"  {f1040.names_string()}  ({f1040.filing_status.value.replace('_', ' ')})")

    lines.append("\n  INCOME")
    lines.append("  " + "-" * 68)
    lines.append(_line("1z.  Wages", f1040.l1z()))
    lines.append(_line("2b.  Taxable Interest", f1040.l2b()))
    lines.append(_line("3a.  Qualified Dividends", f1040.l3a()))
    lines.append(_line("3b.  Ordinary Dividends", f1040.l3b()))
    lines.append(_line("8.   Additional Income (Schedule 1)", f1040.l8()))
    lines.append(_line("9.   Total Income", f1040.l9()))
    lines.append(_line("11.  Adjusted Gross Income (AGI)", f1040.l11()))

    lines.append("\n  DEDUCTIONS")
    lines.append("  " + "-" * 68)
    lines.append(_line("12.  Standard Deduction", f1040.l12()))
    lines.append(_line("15.  Taxable Income", f1040.l15()))

    lines.append("\n  TAX AND PAYMENTS")
    lines.append("  " + "-" * 68)
    lines.append(_line("16.  Tax", f1040.l16()))
    table = f1040.parameters.brackets_for(f1040.filing_status)
    for row in table.breakdown(f1040.l15()):
        lines.append(f"       {row['bracket']:<30} @ {row['rate']:>6.2%}  {fmt(row['tax']):>15}")
    lines.append(_line("     Marginal Rate", f"{table.marginal_rate(f1040.l15()):.0%}"))
    lines.append(_line("17.  Additional Tax (Form 4972)", f1040.l17()))
    lines.append(_line("24.  Total Tax", f1040.l24()))
    lines.append(_line("25d. Federal Tax Withheld", f1040.l25d()))
    lines.append(_line("26.  Estimated Tax Payments", f1040.l26()))
    lines.append(_line("33.  Total Payments", f1040.l33()))
    lines.append("  " + "-" * 68)
    if f1040.l34() is not None:
        lines.append(_line(">>> 34. REFUND", f1040.l34()))
    else:
        lines.append(_line(">>> 37. AMOUNT YOU OWE", f1040.l37() or 0.0))
    return "\n".join(lines)


def generate_schedule_e_report(sched_e: ScheduleE) -> str:
    """Generate Schedule E (Supplemental Income) report."""
    lines = _header("SCHEDULE E - Supplemental Income and Loss")

    rows = zip(sched_e.properties(), sched_e.l3(), sched_e.l18(), sched_e.l21(), sched_e.l22())
    for i, (prop, rents, depreciation, net, deductible) in enumerate(rows, 1):
        lines.append(f"\n  Property {i}: {prop.address}")
        lines.append("  " + "-" * 68)
        lines.append(_line("  Gross Rents Received", rents))
        lines.append(_line("  Operating Expenses", prop.total_expenses))
        lines.append(_line("  Depreciation (27.5-yr straight-line)", depreciation))
        lines.append("  " + "-" * 68)
        lines.append(_line("  Net Rental Income (Loss)", net))
        if deductible is not None and deductible != net:
            lines.append(_line("  Deductible Loss (after Form 8582)", deductible))

    lines.append("\n  " + "-" * 68)
    lines.append(_line("26. Total Rental Real Estate Income (Loss)", sched_e.l26()))
    if sched_e.l32() is not None:
        lines.append(_line("32. Total Partnership Income (Loss)", sched_e.l32()))
    lines.append(_line("41. Total Income (Loss)", sched_e.l41()))
    return "\n".join(lines)


def generate_f8582_report(f8582: F8582) -> str:
    """Generate Form 8582 (Passive Activity Loss Limitations) report."""
    lines = _header("FORM 8582 - Passive Activity Loss Limitations")
    lines.append(_line("1d. Rental Real Estate (net)", f8582.l1d()))
    lines.append(_line("2d. Other Passive Activities (net)", f8582.l2d()))
    lines.append(_line("3.  Combined", f8582.l3()))
    lines.append(_line("5.  Modified AGI", f8582.l5()))
    lines.append(_line("11. Special Allowance", f8582.l11()))
    lines.append(_line("16. Total Losses Allowed", f8582.total_loss_allowed()))
    lines.append(_line("    Suspended Loss (carryover to next year)", f8582.suspended_loss()))
    return "\n".join(lines)


def generate_f8582cr_report(f8582cr: F8582CR) -> str:
    """Generate Form 8582-CR (Passive Activity Credit Limitations) report."""
    lines = _header("FORM 8582-CR - Passive Activity Credit Limitations")
    lines.append(_line("1c. Passive Activity Credits", f8582cr.l1c()))
    lines.append(_line("2.  Tax Attributable to Net Passive Income", f8582cr.l2()))
    lines.append(_line("14. Special Allowance for Rental Credits", f8582cr.l14()))
    lines.append(_line("37. Credit Allowed", f8582cr.allowed_credit()))
    lines.append(_line("    Disallowed Credit (carryover to next year)", f8582cr.disallowed_carryforward()))
    return "\n".join(lines)


def generate_f4972_report(f4972: F4972) -> str:
    """Generate Form 4972 (Tax on Lump-Sum Distributions) report."""
    lines = _header("FORM 4972 - Tax on Lump-Sum Distributions")
    lines.append(_line("6.  Capital Gain Part", f4972.l6()))
    lines.append(_line("7.  Tax at 20%", f4972.l7()))
    lines.append(_line("10. Total Taxable Amount", f4972.l10()))
    lines.append(_line("13. One-tenth of Adjusted Total", f4972.l13()))
    lines.append(_line("21. Tax from 10-Year Averaging", f4972.l21()))
    lines.append("  " + "-" * 68)
    lines.append(_line(">>> 24. TAX ON LUMP-SUM DISTRIBUTIONS", f4972.l24()))
    return "\n".join(lines)


def generate_state_report(state: StateReturn) -> str:
    """Generate a report for the resident state return."""
    params = state.parameters
    lines = _header(f"{state.state} FORM {params.form_name} - State Income Tax Return", "=")
    start = "Federal Taxable Income" if params.starting_point == "taxable_income" else "Federal AGI"
    lines.append(_line(f"Starting Point ({start})", state.l1()))
    lines.append(_line("State AGI", state.l4()))
    lines.append(_line("Standard Deduction", state.l5()))
    lines.append(_line("Exemptions", state.l6()))
    lines.append(_line("Taxable Income", state.l7()))
    lines.append(_line("Tax", state.l8()))
    if state.l9() is not None:
        lines.append(_line("Surtax", state.l9()))
    if state.l10() is not None:
        lines.append(_line("Exemption Credits", -state.l10()))
    lines.append(_line("Total Tax", state.l11()))
    lines.append(_line("Payments and Withholding", state.l14()))
    lines.append("  " + "-" * 68)
    if state.l16() is not None:
        lines.append(_line(">>> REFUND", state.l16()))
    else:
        lines.append(_line(">>> AMOUNT YOU OWE", state.l15() or 0.0))
    return "\n".join(lines)


_REPORTS = {
    F1040: generate_federal_report,
    ScheduleE: generate_schedule_e_report,
    F8582: generate_f8582_report,
    F8582CR: generate_f8582cr_report,
    F4972: generate_f4972_report,
    StateReturn: generate_state_report,
}


def generate_full_report(f1040: F1040) -> str:
    """Report every needed form in filing order."""
    sections = []
    for form in needed_forms(f1040):
        report = _REPORTS.get(type(form))
        if report is not None:
            sections.append(report(form))

    sections.append("")
    sections.append(_sep("=", 72))
    sections.append("  FORMS TO FILE: " + ", ".join(f.tag for f in needed_forms(f1040)))
    sections.append(_sep("=", 72))
    return "\n".join(sections)
