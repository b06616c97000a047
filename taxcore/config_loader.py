"""Load jurisdiction parameter tables and taxpayer profiles from YAML.

Parameter files live in ``taxcore/data/<tax_year>/<jurisdiction>.yaml``
and are loaded once per (jurisdiction, tax year) into frozen
``JurisdictionParameters`` records. Several years and jurisdictions can
be loaded side by side.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .brackets import BracketTable
from .errors import ConfigurationError, TaxCoreError
from .models import (
    Dependent, EstimatedTaxPayment, FilingStatus, Form1099Div, Form1099Int,
    LumpSumDistribution, PassiveActivityCredit, PassiveActivityType, PassiveK1, Person,
    RentalProperty, TaxInformation, TaxpayerInfo, W2Data,
)

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"

# States with no general state income tax (wages); no state return is produced.
STATES_NO_INCOME_TAX = {"AK", "FL", "NV", "NH", "SD", "TN", "TX", "WA", "WY"}

_EMPTY: Mapping = MappingProxyType({})


@dataclass(frozen=True)
class Surtax:
    """Flat additional tax on taxable income above a threshold."""
    threshold: float
    rate: float


@dataclass(frozen=True)
class PassiveActivityLimits:
    """Form 8582 special allowance for rental real estate."""
    special_allowance: Mapping[FilingStatus, float]
    phase_out_complete: Mapping[FilingStatus, float]
    phase_out_rate: float


@dataclass(frozen=True)
class LumpSumParameters:
    """Form 4972 constants."""
    birth_year_cutoff: int
    capital_gain_rate: float
    averaging_years: int
    death_benefit_exclusion_limit: float
    averaging_brackets: BracketTable


@dataclass(frozen=True)
class JurisdictionParameters:
    """Immutable parameter record for one jurisdiction and tax year."""
    jurisdiction: str
    tax_year: int
    form_name: str
    brackets: Mapping[FilingStatus, BracketTable]
    standard_deduction: Mapping[FilingStatus, float]
    starting_point: str = "agi"  # "agi" or "taxable_income"
    additional_standard_deduction: Mapping[FilingStatus, float] = field(default_factory=lambda: _EMPTY)
    personal_exemption: Mapping[FilingStatus, float] = field(default_factory=lambda: _EMPTY)
    dependent_exemption: float = 0.0
    exemption_credit: Mapping[FilingStatus, float] = field(default_factory=lambda: _EMPTY)
    dependent_exemption_credit: float = 0.0
    surtax: Optional[Surtax] = None
    passive_activity: Optional[PassiveActivityLimits] = None
    lump_sum: Optional[LumpSumParameters] = None

    def brackets_for(self, status: FilingStatus) -> BracketTable:
        return self.brackets[status]


def parameter_path(jurisdiction: str, tax_year: int) -> Path:
    return DATA_DIR / str(tax_year) / f"{jurisdiction.lower()}.yaml"


@lru_cache(maxsize=None)
def load_parameters(jurisdiction: str, tax_year: int) -> JurisdictionParameters:
    """Load and validate the parameters for ``jurisdiction`` in ``tax_year``.

    Raises:
        ConfigurationError: the file is missing or malformed (including
            an invalid bracket table).
    """
    path = parameter_path(jurisdiction, tax_year)
    if not path.exists():
        raise ConfigurationError(
            f"No parameters for {jurisdiction.upper()} {tax_year}: {path} not found"
        )
    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Error reading {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{path} does not contain a mapping")

    logger.debug("Loaded parameters from %s", path)
    try:
        return parse_parameters(raw)
    except TaxCoreError as e:
        raise ConfigurationError(f"{path}: {e}") from e


def parse_parameters(raw: Dict[str, Any]) -> JurisdictionParameters:
    """Build a parameter record from an already-parsed YAML mapping."""
    try:
        brackets = _by_status(raw["brackets"], "brackets", BracketTable.from_config)
        standard_deduction = _by_status(raw["standard_deduction"], "standard_deduction", float)
        starting_point = raw.get("starting_point", "agi")
        if starting_point not in ("agi", "taxable_income"):
            raise ConfigurationError(f"Unknown starting_point: {starting_point!r}")

        surtax = None
        if raw.get("surtax"):
            surtax = Surtax(float(raw["surtax"]["threshold"]), float(raw["surtax"]["rate"]))

        passive = None
        if raw.get("passive_activity"):
            pa = raw["passive_activity"]
            passive = PassiveActivityLimits(
                special_allowance=_by_status(pa["special_allowance"], "special_allowance", float),
                phase_out_complete=_by_status(pa["phase_out_complete"], "phase_out_complete", float),
                phase_out_rate=float(pa["phase_out_rate"]),
            )

        lump_sum = None
        if raw.get("lump_sum"):
            ls = raw["lump_sum"]
            lump_sum = LumpSumParameters(
                birth_year_cutoff=int(ls["birth_year_cutoff"]),
                capital_gain_rate=float(ls["capital_gain_rate"]),
                averaging_years=int(ls["averaging_years"]),
                death_benefit_exclusion_limit=float(ls["death_benefit_exclusion_limit"]),
                averaging_brackets=BracketTable.from_config(ls["averaging_brackets"]),
            )

        return JurisdictionParameters(
            jurisdiction=str(raw["jurisdiction"]).upper(),
            tax_year=int(raw["tax_year"]),
            form_name=str(raw.get("form_name", "")),
            brackets=brackets,
            standard_deduction=standard_deduction,
            starting_point=starting_point,
            additional_standard_deduction=_optional_by_status(
                raw, "additional_standard_deduction"),
            personal_exemption=_optional_by_status(raw, "personal_exemption"),
            dependent_exemption=float(raw.get("dependent_exemption", 0.0)),
            exemption_credit=_optional_by_status(raw, "exemption_credit"),
            dependent_exemption_credit=float(raw.get("dependent_exemption_credit", 0.0)),
            surtax=surtax,
            passive_activity=passive,
            lump_sum=lump_sum,
        )
    except KeyError as e:
        raise ConfigurationError(f"Missing required key: {e}") from e
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid parameter value: {e}") from e


def _by_status(raw, name: str, convert) -> Mapping[FilingStatus, Any]:
    """Map a ``{status: value}`` block onto every filing status.

    A ``default`` key fills statuses that are not listed explicitly.
    """
    if not isinstance(raw, dict):
        raise ConfigurationError(f"'{name}' must be keyed by filing status")
    unknown = set(raw) - {s.value for s in FilingStatus} - {"default"}
    if unknown:
        raise ConfigurationError(f"'{name}' has unknown filing statuses: {sorted(unknown)}")
    result = {}
    for status in FilingStatus:
        value = raw.get(status.value, raw.get("default"))
        if value is None:
            raise ConfigurationError(f"'{name}' has no entry for {status.value}")
        result[status] = convert(value)
    return MappingProxyType(result)


def _optional_by_status(raw: Dict[str, Any], name: str) -> Mapping[FilingStatus, float]:
    if raw.get(name) is None:
        return _EMPTY
    return _by_status(raw[name], name, float)


def supported_states(tax_year: int) -> List[str]:
    """Two-letter codes of states with a parameter file for ``tax_year``."""
    year_dir = DATA_DIR / str(tax_year)
    if not year_dir.is_dir():
        return []
    return sorted(
        p.stem.upper() for p in year_dir.glob("*.yaml") if p.stem.lower() != "us"
    )


# ---------------------------------------------------------------------------
# Taxpayer profile
# ---------------------------------------------------------------------------

def load_profile(path: str) -> Optional[TaxInformation]:
    """
    Load a taxpayer profile from a YAML file.

    Args:
        path: Path to the YAML profile.

    Returns:
        TaxInformation if successful, None if the file is missing or empty.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning("Profile not found: %s", path)
        return None

    if not raw:
        logger.warning("Profile is empty: %s", path)
        return None

    try:
        info = profile_from_dict(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid profile {path}: {e}") from e

    # Security warning if SSN fields are present
    tp = info.taxpayer
    has_ssn = (
        tp.primary.ssn
        or (tp.spouse is not None and tp.spouse.ssn)
        or any(d.ssn for d in tp.dependents)
    )
    if has_ssn:
        logger.warning(
            "Profile %s contains SSN data. Ensure it is gitignored and not shared.", path
        )
    return info


def profile_from_dict(raw: Dict[str, Any]) -> TaxInformation:
    """Build a TaxInformation from a parsed profile mapping."""
    taxpayer = raw.get("taxpayer", {}) or {}
    spouse_raw = taxpayer.get("spouse")

    deps = []
    for d in taxpayer.get("dependents", []) or []:
        if isinstance(d, str):
            deps.append(Dependent(name=d))
        elif isinstance(d, dict):
            deps.append(Dependent(
                name=d.get("name", ""),
                age=int(d.get("age", 0)),
                relationship=d.get("relationship", ""),
                ssn=d.get("ssn"),
            ))

    state = (raw.get("state_of_residence") or taxpayer.get("state_of_residence") or "")
    state = state.strip().upper() or None
    if state is not None and len(state) != 2:
        logger.warning("Ignoring invalid state of residence: %r", state)
        state = None

    info = TaxpayerInfo(
        primary=_person(taxpayer),
        filing_status=FilingStatus.parse(taxpayer.get("filing_status", "single")),
        spouse=_person(spouse_raw) if spouse_raw else None,
        dependents=tuple(deps),
        state_of_residence=state,
        address_line1=taxpayer.get("address_line1", ""),
        address_line2=taxpayer.get("address_line2", ""),
    )

    return TaxInformation(
        tax_year=int(raw.get("tax_year", 2025)),
        taxpayer=info,
        w2s=tuple(W2Data(**_with_code(w, "state")) for w in raw.get("w2", []) or []),
        f1099_ints=tuple(Form1099Int(**f) for f in raw.get("1099_int", []) or []),
        f1099_divs=tuple(Form1099Div(**f) for f in raw.get("1099_div", []) or []),
        rental_properties=tuple(
            RentalProperty(**_with_date(rp, "purchase_date"))
            for rp in raw.get("rental_properties", []) or []
        ),
        passive_k1s=tuple(PassiveK1(**k) for k in raw.get("passive_k1", []) or []),
        passive_activity_credits=tuple(
            _passive_credit(c) for c in raw.get("passive_activity_credits", []) or []
        ),
        lump_sum_distributions=tuple(
            LumpSumDistribution(**_with_date(d, "date_received"))
            for d in raw.get("lump_sum_distributions", []) or []
        ),
        estimated_payments=tuple(
            EstimatedTaxPayment(**_with_code(_with_date(p, "payment_date"), "jurisdiction"))
            for p in raw.get("estimated_payments", []) or []
        ),
        pal_carryover_rental=_optional_float(raw.get("pal_carryover_rental")),
        pal_carryover_other=_optional_float(raw.get("pal_carryover_other")),
    )


def _person(raw: Dict[str, Any]) -> Person:
    return Person(
        first_name=raw.get("first_name", raw.get("name", "Taxpayer")),
        last_name=raw.get("last_name", ""),
        ssn=raw.get("ssn"),
        date_of_birth=_parse_date(raw.get("date_of_birth")),
        is_blind=bool(raw.get("is_blind", False)),
    )


def _with_date(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    if key not in raw:
        return raw
    return {**raw, key: _parse_date(raw[key])}


def _with_code(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Upper-case a state or jurisdiction code."""
    if not raw.get(key):
        return raw
    return {**raw, key: str(raw[key]).strip().upper()}


def _passive_credit(raw: Dict[str, Any]) -> PassiveActivityCredit:
    if "activity_type" not in raw:
        return PassiveActivityCredit(**raw)
    return PassiveActivityCredit(**{**raw, "activity_type": PassiveActivityType(raw["activity_type"])})


def _parse_date(value) -> Optional[date]:
    """Accept YAML dates, ISO strings (YYYY-MM-DD) or MM/DD/YYYY."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    for fmt in ("%Y-%m-%d", "%m/%d/%Y"):
        try:
            return datetime.strptime(str(value), fmt).date()
        except ValueError:
            continue
    logger.warning("Ignoring unparseable date: %r", value)
    return None


def _optional_float(value) -> Optional[float]:
    if value is None:
        return None
    return float(value)
