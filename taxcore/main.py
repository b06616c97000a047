"""Command-line entry point: compute a return from a YAML profile.

    taxcore --config config/tax_profile.yaml
    taxcore --config config/tax_profile.yaml --pdf --pdf-output output/2025
"""

import argparse
import dataclasses
import logging
import sys

from .config_loader import load_profile
from .errors import TaxCoreError
from .fields import serialize
from .forms import F1040, needed_forms
from .lines import evaluation_cache
from .models import FilingStatus
from .report_generator import generate_full_report

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "config/tax_profile.yaml"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compute a federal and resident state income tax return"
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG,
        help=f"Path to YAML taxpayer profile (default: {DEFAULT_CONFIG})"
    )
    parser.add_argument(
        "--pdf", action="store_true",
        help="Generate filled PDF tax forms (requires templates in pdf_templates/)"
    )
    parser.add_argument(
        "--pdf-output",
        default=None,
        help="Output directory for PDF forms (default: output/<year>/)"
    )
    parser.add_argument(
        "--templates",
        default=None,
        help="Template root directory (default: pdf_templates/)"
    )
    parser.add_argument(
        "--fields", action="store_true",
        help="Print each needed form's positional PDF field values"
    )
    parser.add_argument(
        "--filing-status",
        choices=[s.value for s in FilingStatus],
        default=None,
        help="Override the profile's filing status"
    )
    parser.add_argument(
        "--tax-year",
        type=int, default=None,
        help="Override the profile's tax year"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging"
    )
    return parser


def print_fields(f1040) -> None:
    """Dump the positional field values of every needed form."""
    for form in needed_forms(f1040):
        print(f"\n{form.tag}")
        for i, value in enumerate(serialize(form)):
            print(f"  {i:>3}  {value}")


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        info = load_profile(args.config)
        if info is None:
            print(f"Error: no taxpayer profile found at {args.config}", file=sys.stderr)
            return 1

        # CLI overrides take precedence over the profile
        if args.filing_status:
            taxpayer = dataclasses.replace(
                info.taxpayer, filing_status=FilingStatus(args.filing_status))
            info = dataclasses.replace(info, taxpayer=taxpayer)
        if args.tax_year:
            info = dataclasses.replace(info, tax_year=args.tax_year)

        with evaluation_cache():
            f1040 = F1040(info)
            print(generate_full_report(f1040))
            if args.fields:
                print_fields(f1040)
            if args.pdf:
                from .pdf_filler import generate_all_forms
                generate_all_forms(
                    f1040,
                    output_dir=args.pdf_output or "",
                    templates_dir=args.templates,
                )
    except TaxCoreError as e:
        logger.debug("Run failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
