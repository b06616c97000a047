#!/usr/bin/env python3
"""Discover AcroForm fields in a fillable PDF, in positional order.

Usage:
    python tools/discover_fields.py <pdf_path> [--form TAG --year YEAR]
    python tools/discover_fields.py pdf_templates/2025/f8582.pdf --form f8582 --year 2025

Prints each terminal field's position, name and type. The position is
the index a form's ``fields()`` value must have to land in that field.
With ``--form`` the template's field count is compared with the count
the form is registered with.
"""

import argparse
import sys
from pathlib import Path

from pypdf import PdfReader

from taxcore.forms import get_spec
from taxcore.pdf_filler import template_fields


def discover_fields(pdf_path: str) -> int:
    """Print the terminal fields of a PDF; return how many there are."""
    path = Path(pdf_path)
    if not path.exists():
        print(f"Error: File not found: {pdf_path}")
        sys.exit(1)

    fields = template_fields(PdfReader(str(path)))
    if not fields:
        print(f"No AcroForm fields found in {path.name}.")
        print("This PDF may use XFA forms (not supported by pypdf).")
        return 0

    print(f"Found {len(fields)} fields in {path.name}:")
    print("-" * 80)
    print(f"{'#':<5} {'Field Name':<60} {'Type':<12} {'On'}")
    print("-" * 80)
    for i, f in enumerate(fields):
        kind = "Checkbox" if f.is_checkbox else "Text"
        print(f"{i:<5} {f.name:<60} {kind:<12} {f.on_value if f.is_checkbox else ''}")
    print("-" * 80)
    print(f"\nTotal: {len(fields)} fields")
    return len(fields)


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("pdf_path")
    parser.add_argument("--form", help="Registered form tag to compare against")
    parser.add_argument("--year", type=int, help="Tax year of the field contract")
    args = parser.parse_args()

    count = discover_fields(args.pdf_path)
    if args.form:
        expected = get_spec(args.form).field_counts.get(args.year)
        if expected is None:
            print(f"{args.form} has no field contract for {args.year}")
            sys.exit(1)
        if expected != count:
            print(f"MISMATCH: {args.form} is registered with {expected} fields")
            sys.exit(1)
        print(f"OK: {args.form} {args.year} field contract matches ({count})")


if __name__ == "__main__":
    main()
