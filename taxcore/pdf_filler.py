"""PDF form filler - writes filled IRS and state tax form PDFs.

Uses pypdf to fill AcroForm fields in the official fillable PDF
templates. A form's ``fields()`` list is paired by position with the
template's terminal fields, so the count must match exactly.

Usage:
    from taxcore.pdf_filler import generate_all_forms
    generate_all_forms(f1040, output_dir="output/2025")
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from pypdf import PdfReader, PdfWriter

from .errors import FieldContractError
from .fields import CHECKBOX_ON, check_field_contract, to_pdf_value
from .forms import needed_forms, spec_for
from .forms.base import Field, Form

logger = logging.getLogger(__name__)

# Base directory for PDF templates (relative to the working directory)
TEMPLATES_DIR = Path("pdf_templates")


@dataclass(frozen=True)
class TemplateField:
    """One fillable field of a template, in document order."""
    name: str
    is_checkbox: bool = False
    on_value: str = CHECKBOX_ON


def get_template_path(form: Form, tax_year: int,
                      templates_dir: Optional[Path] = None) -> Path:
    """Resolve the blank template: ``<templates_dir>/<year>/<file>``."""
    base = Path(templates_dir) if templates_dir is not None else TEMPLATES_DIR
    template_file = spec_for(form).template_for(form)
    path = base / str(tax_year) / template_file
    if not path.exists():
        raise FileNotFoundError(
            f"PDF template not found for {form.tag} ({template_file}). "
            f"Place the fillable PDF at: {path}"
        )
    return path


def template_fields(reader: PdfReader) -> List[TemplateField]:
    """Terminal form fields of a template, in document order."""
    result = []
    for name, field_obj in (reader.get_fields() or {}).items():
        field_type = field_obj.get("/FT")
        if field_type is None:
            continue  # Non-terminal parent node
        if field_type == "/Btn":
            states = [str(s) for s in field_obj.get("/_States_", [])]
            on = next((s for s in states if s != "/Off"), CHECKBOX_ON)
            result.append(TemplateField(name, is_checkbox=True, on_value=on))
        else:
            result.append(TemplateField(name))
    return result


def pair_fields(fields: Sequence[TemplateField], values: Sequence[Field]) -> Dict[str, str]:
    """Pair template fields with values by position.

    Raises:
        FieldContractError: the two sequences differ in length.
    """
    if len(fields) != len(values):
        raise FieldContractError(
            f"Template has {len(fields)} fields but {len(values)} values were produced"
        )
    return {
        f.name: to_pdf_value(v, on_value=f.on_value) if f.is_checkbox else to_pdf_value(v)
        for f, v in zip(fields, values)
    }


def fill_form(form: Form, tax_year: int,
              templates_dir: Optional[Path] = None) -> PdfWriter:
    """Fill the template for ``form`` and return the writer."""
    values = check_field_contract(form, tax_year)
    template_path = get_template_path(form, tax_year, templates_dir)
    reader = PdfReader(str(template_path))
    field_values = pair_fields(template_fields(reader), values)

    writer = PdfWriter()
    writer.append(reader)
    for page in writer.pages:
        writer.update_page_form_field_values(page, field_values, auto_regenerate=False)
    return writer


def fill_and_save(form: Form, tax_year: int, output_path: str,
                  templates_dir: Optional[Path] = None) -> None:
    """Fill a PDF form and save to disk."""
    writer = fill_form(form, tax_year, templates_dir)
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "wb") as f:
        writer.write(f)


def generate_all_forms(
    f1040,
    output_dir: str = "",
    templates_dir: Optional[Path] = None,
) -> Dict[str, str]:
    """Generate every needed form for the return.

    Args:
        f1040: The computed Form 1040 (root of the run)
        output_dir: Directory to write PDFs (default: output/<year>/)
        templates_dir: Template root (default: pdf_templates/)

    Returns:
        Dict mapping form tag -> output file path for forms that were generated
    """
    tax_year = f1040.info.tax_year
    if not output_dir:
        output_dir = str(Path("output") / str(tax_year))
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    generated = {}
    errors = []

    for form in needed_forms(f1040):
        try:
            template = get_template_path(form, tax_year, templates_dir)
        except FileNotFoundError as e:
            errors.append((form.tag, str(e)))
            continue

        out_file = output_path / f"filled_{template.name}"
        fill_and_save(form, tax_year, str(out_file), templates_dir)
        logger.info("Filled %s -> %s", form.tag, out_file)
        generated[form.tag] = str(out_file)

    # Print summary
    if generated:
        print(f"\nGenerated {len(generated)} PDF form(s) in {output_dir}:")
        for name, path in generated.items():
            print(f"  {name}: {Path(path).name}")

    if errors:
        print(f"\nMissing templates ({len(errors)}):")
        for name, err in errors:
            print(f"  {name}: {err}")

    return generated
