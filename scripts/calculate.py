"""Calculate SA income tax from the command line and print the audit trail.

Usage:
    python scripts/calculate.py 850000 --retirement 100000 --age 35 --paye 200000
"""

import argparse
import logging
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sa_tax.calculators.audit import format_rand, narrate_calculation
from sa_tax.calculators.errors import InvalidInputError
from sa_tax.calculators.income_tax import calculate_income_tax
from sa_tax.calculators.tax_data import DEFAULT_TAX_YEAR, get_policy
from sa_tax.models import TaxCalculationInput

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def _amount(value: str) -> Decimal:
    """Parse a Rand amount for argparse."""
    try:
        return Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}") from None


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Calculate SA personal income tax.")
    parser.add_argument("gross_income", type=_amount, help="Gross annual remuneration (IRP5 3601)")
    parser.add_argument("--retirement", type=_amount, default=Decimal("0"), help="Retirement fund contributions")
    parser.add_argument("--medical", type=_amount, default=Decimal("0"), help="Medical scheme contributions")
    parser.add_argument("--medical-credits", type=_amount, default=Decimal("0"), help="Dependant medical tax credits")
    parser.add_argument("--uif", type=_amount, default=Decimal("0"), help="UIF employee contributions")
    parser.add_argument("--age", type=int, default=None)
    parser.add_argument("--paye", type=_amount, default=None, help="PAYE withheld (IRP5 4102)")
    parser.add_argument("--tax-year", default=DEFAULT_TAX_YEAR)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run one calculation and print each audit step."""
    args = parse_args(argv)
    tax_input = TaxCalculationInput(
        gross_income=args.gross_income,
        retirement_contrib=args.retirement,
        medical_contrib=args.medical,
        medical_credits=args.medical_credits,
        uif_contrib=args.uif,
        age=args.age,
    )

    try:
        policy = get_policy(args.tax_year)
        result = calculate_income_tax(tax_input, policy)
        steps = narrate_calculation(tax_input, result, args.paye)
    except InvalidInputError as exc:
        logger.error("%s", exc)
        return 1

    print(f"Tax year {result.tax_year}")
    for step in steps:
        print(f"{step.step}. {step.title}: {format_rand(step.result)}")
        print(f"   {step.calculation}")
        print(f"   {step.formula} [{step.reference}]")
    print(f"Marginal rate {result.marginal_rate}%, effective rate {result.effective_rate}%")
    return 0


if __name__ == "__main__":
    sys.exit(main())
