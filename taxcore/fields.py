"""Turn form field lists into PDF field values.

A form's ``fields()`` is a flat list paired by position with the
fillable fields of its template. Numbers print as whole dollars, absent
values as blank text and checkboxes as their on/off state names.
"""

from datetime import date
from typing import List

from .errors import FieldContractError
from .forms import field_count
from .forms.base import Field, Form
from .util import dollars

CHECKBOX_ON = "/1"
CHECKBOX_OFF = "/Off"


def to_pdf_value(value: Field, on_value: str = CHECKBOX_ON) -> str:
    """PDF text for one field value."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return on_value if value else CHECKBOX_OFF
    if isinstance(value, (int, float)):
        return dollars(value)
    if isinstance(value, date):
        return value.strftime("%m/%d/%Y")
    return str(value)


def serialize(form: Form) -> List[str]:
    """``form.fields()`` as PDF text, in template order."""
    return [to_pdf_value(v) for v in form.fields()]


def check_field_contract(form: Form, tax_year: int) -> List[Field]:
    """Return ``form.fields()`` after checking it matches the template's field count.

    Raises:
        FieldContractError: the form produced a different number of
            fields than its template declares for ``tax_year``.
    """
    values = form.fields()
    expected = field_count(form, tax_year)
    if len(values) != expected:
        raise FieldContractError(
            f"{form.tag} produced {len(values)} fields; "
            f"the {tax_year} template has {expected}"
        )
    return values
