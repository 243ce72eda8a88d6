"""Retirement contribution optimiser: composes the income tax calculator."""

from decimal import Decimal
from typing import Any

from sa_tax.calculators.income_tax import calculate_income_tax, max_retirement_deduction, to_cents
from sa_tax.calculators.tax_data import TaxYearPolicy
from sa_tax.models import TaxCalculationInput

_ZERO = Decimal("0")


def calculate_tax_savings(
    current: TaxCalculationInput,
    optimised: TaxCalculationInput,
    policy: TaxYearPolicy,
) -> Decimal:
    """Tax saved by moving from the current to the optimised inputs."""
    current_result = calculate_income_tax(current, policy)
    optimised_result = calculate_income_tax(optimised, policy)
    return current_result.total_tax - optimised_result.total_tax


def optimise_retirement(tax_input: TaxCalculationInput, policy: TaxYearPolicy) -> dict[str, Any]:
    """Compare current tax with contributions topped up to the section 11F cap.

    Args:
        tax_input: The taxpayer's current position.
        policy: Tax-year table.

    Returns:
        Dict with current and optimised results, the extra contribution
        needed and the tax saved. "optimised" is None when the taxpayer
        already contributes at or above the cap.
    """
    current = calculate_income_tax(tax_input, policy)
    max_deduction = to_cents(max_retirement_deduction(tax_input.gross_income, policy))
    headroom = max(_ZERO, max_deduction - tax_input.retirement_contrib)

    result: dict[str, Any] = {
        "tax_year": policy.tax_year,
        "max_retirement_deduction": max_deduction,
        "additional_contribution": to_cents(headroom),
        "current": current,
        "optimised": None,
        "savings": _ZERO,
    }
    if headroom <= 0:
        return result

    topped_up = tax_input.model_copy(update={"retirement_contrib": max_deduction})
    optimised = calculate_income_tax(topped_up, policy)
    result["optimised"] = optimised
    result["savings"] = calculate_tax_savings(tax_input, topped_up, policy)
    return result
