"""Form registry.

Each form module registers its class with the PDF template it fills and
the field contract (number of positional fields) per tax year:

    @register("f4972.pdf", field_counts={2024: 26, 2025: 26})
    class F4972(Attachment):
        tag = "f4972"
        sequence_index = 28
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Type

from ..errors import FieldContractError
from .base import Attachment, Field, Form  # noqa: F401

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormSpec:
    """Registry entry: the form class, its template and field contracts."""
    form_class: Type
    template_file: str  # may contain "{tag}"
    field_counts: Mapping[int, int]

    @property
    def name(self) -> str:
        return self.form_class.tag

    def template_for(self, form) -> str:
        return self.template_file.format(tag=form.tag)


# Registry: class tag -> FormSpec
_REGISTRY: Dict[str, FormSpec] = {}


def register(template_file: str, field_counts: Mapping[int, int]):
    """Class decorator to register a form."""
    def decorator(cls):
        _REGISTRY[cls.tag] = FormSpec(cls, template_file, dict(field_counts))
        return cls
    return decorator


def get_spec(name: str) -> FormSpec:
    """Get the registry entry for a form tag."""
    if name not in _REGISTRY:
        raise ValueError(f"Unknown form: {name}. Available: {list(_REGISTRY.keys())}")
    return _REGISTRY[name]


def spec_for(form) -> FormSpec:
    """Registry entry for a form instance (state returns share one entry)."""
    for spec in _REGISTRY.values():
        if isinstance(form, spec.form_class):
            return spec
    raise ValueError(f"Form {form!r} is not registered")


def available_forms() -> List[str]:
    """Return list of registered form names."""
    return list(_REGISTRY.keys())


def field_count(form, tax_year: int) -> int:
    """Number of positional fields the template for ``form`` expects."""
    spec = spec_for(form)
    if tax_year not in spec.field_counts:
        raise FieldContractError(
            f"No field contract for {form.tag} in {tax_year}; "
            f"known years: {sorted(spec.field_counts)}"
        )
    return spec.field_counts[tax_year]


# Import all form modules to trigger registration
from . import f1040  # noqa: E402, F401
from . import schedule_e  # noqa: E402, F401
from . import f8582  # noqa: E402, F401
from . import f8582cr  # noqa: E402, F401
from . import f4972  # noqa: E402, F401
from . import state  # noqa: E402, F401

from .f1040 import F1040  # noqa: E402
from .state import StateReturn, make_state_return  # noqa: E402


def all_forms(f1040: F1040) -> List[Form]:
    """Every form of the run, needed or not, federal first."""
    forms: List[Form] = [f1040, *f1040.all_attachments()]
    state_return = make_state_return(f1040)
    if state_return is not None:
        forms.append(state_return)
    return forms


def needed_forms(f1040: F1040) -> List[Form]:
    """Forms to file, in filing order.

    ``is_needed()`` is evaluated once per form. Federal forms are ordered
    by ``sequence_index``; the state return follows them.
    """
    federal, states = [], []
    for form in all_forms(f1040):
        if not form.is_needed():
            logger.debug("Skipping %s: not needed", form.tag)
            continue
        (states if isinstance(form, StateReturn) else federal).append(form)
    federal.sort(key=lambda f: f.sequence_index)
    states.sort(key=lambda f: f.sequence_index)
    return federal + states
