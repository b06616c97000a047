"""Tests for field serialization, the PDF pairing, the report and the CLI."""

import dataclasses
from datetime import date

import pytest

from taxcore.errors import FieldContractError
from taxcore.fields import check_field_contract, serialize, to_pdf_value
from taxcore.forms import F1040, get_spec, spec_for
from taxcore.forms.state import make_state_return
from taxcore.main import main
from taxcore.models import (
    FilingStatus, PassiveActivityCredit, Person, RentalProperty, TaxInformation, TaxpayerInfo,
    W2Data,
)
from taxcore.pdf_filler import TemplateField, get_template_path, pair_fields, template_fields
from taxcore.report_generator import fmt, generate_full_report, generate_schedule_e_report


def make_info(state=None):
    return TaxInformation(
        tax_year=2025,
        taxpayer=TaxpayerInfo(
            primary=Person("Alex", "Doe", ssn="123-45-6789"),
            filing_status=FilingStatus.SINGLE,
            state_of_residence=state,
        ),
        w2s=(W2Data("Example Corp", wages=100000, federal_withheld=15000),),
    )


def test_to_pdf_value():
    assert to_pdf_value(None) == ""
    assert to_pdf_value(True) == "/1"
    assert to_pdf_value(False) == "/Off"
    assert to_pdf_value(True, on_value="/2") == "/2"
    assert to_pdf_value(1234.5) == "1235"
    assert to_pdf_value(-2.5) == "-3"
    assert to_pdf_value(0) == "0"
    assert to_pdf_value(date(2025, 4, 15)) == "04/15/2025"
    assert to_pdf_value("Alex") == "Alex"


def test_serialize_1040():
    values = serialize(F1040(make_info()))
    assert values[:3] == ["Alex", "Doe", "123-45-6789"]
    assert values[8] == "/1"  # Single
    assert "13614" in values


def test_check_field_contract():
    f1040 = F1040(make_info())
    assert len(check_field_contract(f1040, 2025)) == 38


def test_field_contract_mismatch():
    class Short(F1040):
        def fields(self):
            return super().fields()[:-1]

    with pytest.raises(FieldContractError):
        check_field_contract(Short(make_info()), 2025)


def test_no_contract_for_year():
    with pytest.raises(FieldContractError):
        check_field_contract(F1040(make_info()), 2025 - 10)


def test_unknown_form_spec():
    with pytest.raises(ValueError):
        get_spec("f9999")


def test_state_template_uses_tag():
    ca = make_state_return(F1040(make_info("CA")))
    assert spec_for(ca).template_for(ca) == "ca540.pdf"


def test_pair_fields_by_position():
    fields = [TemplateField("name"), TemplateField("single", True, "/1"),
              TemplateField("joint", True, "/2"), TemplateField("wages")]
    paired = pair_fields(fields, ["Alex", False, True, 1000.4])
    assert paired == {"name": "Alex", "single": "/Off", "joint": "/2", "wages": "1000"}


def test_pair_fields_length_mismatch():
    with pytest.raises(FieldContractError):
        pair_fields([TemplateField("a")], ["x", "y"])


class FakeReader:
    def __init__(self, fields):
        self._fields = fields

    def get_fields(self):
        return self._fields


def test_template_fields_skip_parents_and_read_checkbox_states():
    reader = FakeReader({
        "topmostSubform[0]": {},
        "f1_01[0]": {"/FT": "/Tx"},
        "c1_1[0]": {"/FT": "/Btn", "/_States_": ["/Off", "/2"]},
    })
    assert template_fields(reader) == [
        TemplateField("f1_01[0]"),
        TemplateField("c1_1[0]", is_checkbox=True, on_value="/2"),
    ]
    assert template_fields(FakeReader(None)) == []


def test_missing_template(tmp_path):
    with pytest.raises(FileNotFoundError):
        get_template_path(F1040(make_info()), 2025, templates_dir=tmp_path)


def test_template_path(tmp_path):
    (tmp_path / "2025").mkdir()
    (tmp_path / "2025" / "f1040.pdf").write_bytes(b"%PDF-1.7\n")
    assert get_template_path(F1040(make_info()), 2025, tmp_path) == tmp_path / "2025" / "f1040.pdf"


def test_fmt():
    assert fmt(None) == ""
    assert fmt(1234.5) == "$1,234.50"
    assert fmt(-10) == "-$10.00"


def test_full_report():
    report = generate_full_report(F1040(make_info("CA")))
    assert "FORM 1040" in report
    assert "CA FORM 540" in report
    assert "Marginal Rate" in report
    assert "FORMS TO FILE: f1040, ca540" in report


def test_cli_runs_profile(tmp_path, capsys):
    profile = tmp_path / "profile.yaml"
    profile.write_text(
        "tax_year: 2025\n"
        "taxpayer:\n  first_name: Alex\n  state_of_residence: MD\n"
        "w2:\n  - employer_name: Example Corp\n    wages: 100000\n    federal_withheld: 15000\n"
    )
    assert main(["--config", str(profile)]) == 0
    out = capsys.readouterr().out
    assert "MD FORM 502" in out
    assert "REFUND" in out


def test_cli_missing_profile(tmp_path, capsys):
    assert main(["--config", str(tmp_path / "missing.yaml")]) == 1
    assert "no taxpayer profile" in capsys.readouterr().err


def test_cli_filing_status_override(tmp_path, capsys):
    profile = tmp_path / "profile.yaml"
    profile.write_text("taxpayer:\n  first_name: Alex\nw2:\n  - employer_name: X\n    wages: 50000\n")
    assert main(["--config", str(profile), "--filing-status", "head_of_household"]) == 0
    assert "head of household" in capsys.readouterr().out


def test_cli_reports_configuration_errors(tmp_path, capsys):
    profile = tmp_path / "profile.yaml"
    profile.write_text("tax_year: 1999\ntaxpayer:\n  first_name: Alex\n")
    assert main(["--config", str(profile)]) == 1
    assert "No parameters for US 1999" in capsys.readouterr().err


def test_cli_dumps_fields(tmp_path, capsys):
    profile = tmp_path / "profile.yaml"
    profile.write_text("taxpayer:\n  first_name: Alex\nw2:\n  - employer_name: X\n    wages: 50000\n")
    assert main(["--config", str(profile), "--fields"]) == 0
    out = capsys.readouterr().out
    assert "\nf1040\n" in out
    assert "    0  Alex" in out


def test_schedule_e_report_lists_properties():
    rental = RentalProperty("1 Oak Ave", rental_income=24000, insurance=1200, property_tax=4800)
    info = dataclasses.replace(make_info(), rental_properties=(rental,))
    report = generate_schedule_e_report(F1040(info).schedule_e)
    assert "Property 1: 1 Oak Ave" in report
    assert "$6,000.00" in report  # operating expenses
    assert "$18,000.00" in report  # net, no depreciation without a purchase price


def test_report_includes_passive_credit_limitation():
    credit = PassiveActivityCredit("Example Fund LP", current_year_credit=800)
    info = dataclasses.replace(make_info(), passive_activity_credits=(credit,))
    report = generate_full_report(F1040(info))
    assert "FORM 8582-CR" in report
    assert "FORMS TO FILE: f1040, f8582cr" in report
