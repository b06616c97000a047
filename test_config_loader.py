import os
import tempfile
import unittest
from datetime import date

from taxcore.config_loader import (
    JurisdictionParameters, load_parameters, load_profile, parse_parameters, profile_from_dict,
    supported_states,
)
from taxcore.errors import ConfigurationError
from taxcore.forms import F1040
from taxcore.forms.state import make_state_return
from taxcore.models import FilingStatus, PassiveActivityType


class TestJurisdictionParameters(unittest.TestCase):

    def test_federal_2025(self):
        params = load_parameters("US", 2025)
        self.assertEqual(params.jurisdiction, "US")
        self.assertEqual(params.standard_deduction[FilingStatus.MARRIED_FILING_JOINTLY], 30000)
        # Widow shares the joint table
        self.assertEqual(params.brackets_for(FilingStatus.WIDOW),
                         params.brackets_for(FilingStatus.MARRIED_FILING_JOINTLY))
        self.assertEqual(params.passive_activity.special_allowance[
            FilingStatus.MARRIED_FILING_SEPARATELY], 12500)
        self.assertEqual(params.lump_sum.birth_year_cutoff, 1936)

    def test_years_load_side_by_side(self):
        p2024 = load_parameters("US", 2024)
        p2025 = load_parameters("US", 2025)
        self.assertEqual(p2024.standard_deduction[FilingStatus.SINGLE], 14600)
        self.assertEqual(p2025.standard_deduction[FilingStatus.SINGLE], 15000)

    def test_load_is_cached(self):
        self.assertIs(load_parameters("CA", 2025), load_parameters("CA", 2025))

    def test_parameters_are_read_only(self):
        params = load_parameters("MD", 2025)
        with self.assertRaises(TypeError):
            params.standard_deduction[FilingStatus.SINGLE] = 0

    def test_missing_file(self):
        with self.assertRaises(ConfigurationError):
            load_parameters("ZZ", 2025)

    def test_supported_states(self):
        self.assertEqual(supported_states(2025), ["CA", "MD", "ND"])
        self.assertEqual(supported_states(2024), ["CA"])
        self.assertEqual(supported_states(1999), [])

    def test_default_key_fills_statuses(self):
        params = load_parameters("ND", 2025)
        for status in FilingStatus:
            self.assertEqual(params.standard_deduction[status], 0)

    def test_unknown_status_rejected(self):
        raw = {
            "jurisdiction": "XX", "tax_year": 2025,
            "brackets": {"default": [[float("inf"), 0.05]]},
            "standard_deduction": {"default": 0, "married": 1},
        }
        with self.assertRaises(ConfigurationError):
            parse_parameters(raw)

    def test_invalid_brackets_rejected(self):
        raw = {
            "jurisdiction": "XX", "tax_year": 2025,
            "brackets": {"default": {"bounds": [2000, 1000], "rates": [0.01, 0.02, 0.03]}},
            "standard_deduction": {"default": 0},
        }
        with self.assertRaises(ConfigurationError):
            parse_parameters(raw)

    def test_optional_tables_default_to_empty(self):
        params = JurisdictionParameters(
            jurisdiction="XX", tax_year=2025, form_name="1",
            brackets={}, standard_deduction={},
        )
        self.assertEqual(dict(params.personal_exemption), {})
        self.assertEqual(dict(params.additional_standard_deduction), {})
        self.assertEqual(dict(params.exemption_credit), {})
        with self.assertRaises(TypeError):
            params.exemption_credit[FilingStatus.SINGLE] = 1

    def test_missing_key_rejected(self):
        with self.assertRaises(ConfigurationError):
            parse_parameters({"jurisdiction": "XX", "tax_year": 2025})


class TestProfile(unittest.TestCase):

    def test_profile_from_dict(self):
        info = profile_from_dict({
            "tax_year": 2024,
            "taxpayer": {
                "first_name": "Alex",
                "last_name": "Doe",
                "filing_status": "mfj",
                "date_of_birth": "04/12/1980",
                "state_of_residence": "ca",
                "spouse": {"first_name": "Sam", "last_name": "Doe"},
                "dependents": ["Kid Doe", {"name": "Kid Two", "age": 3}],
            },
            "w2": [{"employer_name": "Example Corp", "wages": 1000, "state": "CA"}],
            "rental_properties": [{"address": "1 Oak Ave", "purchase_date": "2019-06-01"}],
            "estimated_payments": [{"amount": 500, "jurisdiction": "CA"}],
            "pal_carryover_rental": 4000,
        })
        self.assertEqual(info.tax_year, 2024)
        self.assertEqual(info.filing_status, FilingStatus.MARRIED_FILING_JOINTLY)
        self.assertEqual(info.taxpayer.primary.date_of_birth, date(1980, 4, 12))
        self.assertEqual(info.taxpayer.state_of_residence, "CA")
        self.assertEqual(info.taxpayer.spouse.first_name, "Sam")
        self.assertEqual(len(info.taxpayer.dependents), 2)
        self.assertEqual(info.w2s[0].wages, 1000)
        self.assertEqual(info.rental_properties[0].purchase_date, date(2019, 6, 1))
        self.assertEqual(info.estimated_payments_for("CA"), 500)
        self.assertIsNone(info.estimated_payments_for("US"))
        self.assertEqual(info.pal_carryover_rental, 4000.0)
        self.assertIsNone(info.pal_carryover_other)

    def test_state_codes_are_upper_cased(self):
        info = profile_from_dict({
            "taxpayer": {"first_name": "Alex", "state_of_residence": "ca"},
            "w2": [{"employer_name": "Example Corp", "wages": 50000,
                    "state": "ca", "state_withheld": 2000}],
            "estimated_payments": [{"amount": 300, "jurisdiction": "ca"}],
        })
        self.assertEqual(info.w2s[0].state, "CA")
        self.assertEqual(info.estimated_payments_for("CA"), 300)
        ca = make_state_return(F1040(info))
        self.assertEqual(ca.l12(), 2000)

    def test_passive_activity_credits(self):
        info = profile_from_dict({
            "taxpayer": {"first_name": "Alex"},
            "passive_activity_credits": [
                {"activity_name": "Oak Ave", "activity_type": "rental_real_estate",
                 "credit_type": "low_income_housing", "current_year_credit": 1200,
                 "active_participation": True},
                {"activity_name": "Example Fund LP", "current_year_credit": 300},
            ],
        })
        first, second = info.passive_activity_credits
        self.assertEqual(first.activity_type, PassiveActivityType.RENTAL_REAL_ESTATE)
        self.assertTrue(first.active_participation)
        self.assertEqual(second.activity_type, PassiveActivityType.OTHER_PASSIVE)
        self.assertEqual(second.total, 300)

    def test_unknown_credit_activity_type_is_configuration_error(self):
        with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as f:
            f.write("taxpayer:\n  first_name: Alex\n"
                    "passive_activity_credits:\n  - activity_name: X\n    activity_type: farm\n")
            path = f.name
        try:
            with self.assertRaises(ConfigurationError):
                load_profile(path)
        finally:
            os.unlink(path)

    def test_unparseable_date_is_absent(self):
        info = profile_from_dict({"taxpayer": {"first_name": "A", "date_of_birth": "someday"}})
        self.assertIsNone(info.taxpayer.primary.date_of_birth)

    def test_missing_profile_returns_none(self):
        self.assertIsNone(load_profile("/nonexistent/tax_profile.yaml"))

    def test_load_profile_file(self):
        with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as f:
            f.write("tax_year: 2025\ntaxpayer:\n  first_name: Alex\n  filing_status: hoh\n")
            path = f.name
        try:
            info = load_profile(path)
        finally:
            os.unlink(path)
        self.assertEqual(info.filing_status, FilingStatus.HEAD_OF_HOUSEHOLD)

    def test_unknown_profile_key_is_configuration_error(self):
        with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as f:
            f.write("taxpayer:\n  first_name: Alex\nw2:\n  - employer_name: X\n    bonus: 5\n")
            path = f.name
        try:
            with self.assertRaises(ConfigurationError):
                load_profile(path)
        finally:
            os.unlink(path)


if __name__ == "__main__":
    unittest.main()
