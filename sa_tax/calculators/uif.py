"""UIF employee contribution calculator."""

from decimal import Decimal
from typing import Any

from sa_tax.calculators.errors import InvalidInputError
from sa_tax.calculators.income_tax import to_cents
from sa_tax.calculators.tax_data import TaxYearPolicy


def calculate_uif(gross_income: Decimal, policy: TaxYearPolicy) -> dict[str, Any]:
    """Calculate the employee's Unemployment Insurance Fund contribution.

    The rate applies to monthly remuneration and the monthly contribution is
    capped at the UIF ceiling.

    Args:
        gross_income: Gross annual remuneration (must be >= 0).
        policy: Tax-year table.

    Returns:
        Dict with monthly and annual contribution, rate, monthly_cap, tax_year.
    """
    if gross_income < 0:
        raise InvalidInputError("Gross income must be non-negative.")

    uif = policy.uif
    monthly_gross = gross_income / 12
    monthly = min(monthly_gross * uif.rate, uif.monthly_cap)
    annual = monthly * 12

    return {
        "gross_income": to_cents(gross_income),
        "monthly_contribution": to_cents(monthly),
        "annual_contribution": to_cents(annual),
        "rate": uif.rate,
        "monthly_cap": uif.monthly_cap,
        "capped": monthly_gross * uif.rate > uif.monthly_cap,
        "tax_year": policy.tax_year,
    }
