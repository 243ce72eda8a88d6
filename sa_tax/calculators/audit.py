"""Audit trail narration for calculation reports.

Turns an input/result pair into ordered, human-readable steps with the
formula and SARS reference behind each figure. Every number shown comes from
the TaxCalculationResult; nothing here recalculates tax.
"""

from decimal import Decimal

from sa_tax.calculators.income_tax import SECONDARY_REBATE_AGE, TERTIARY_REBATE_AGE, bracket_label
from sa_tax.calculators.refund import assess_refund
from sa_tax.calculators.tax_data import TaxBracket
from sa_tax.models import AuditStep, BracketSlice, TaxCalculationInput, TaxCalculationResult


def format_rand(amount: Decimal) -> str:
    """Format an amount as ZAR, e.g. R1,234.50 or -R200.00."""
    sign = "-" if amount < 0 else ""
    return f"{sign}R{abs(amount):,.2f}"


def _format_rate(rate: Decimal) -> str:
    return f"{(rate * 100).normalize():f}%"


def describe_brackets(breakdown: tuple[BracketSlice, ...]) -> str:
    """One-line summary of the bracket slices, e.g. "R237,100.00 @ 18% + ..."."""
    if not breakdown:
        return "R0.00 @ 0%"
    return " + ".join(
        f"{format_rand(part.taxable_amount)} @ {_format_rate(part.rate)}" for part in breakdown
    )


def _rebate_formula(age: int | None) -> str:
    formula = "Primary"
    if age is not None and age >= SECONDARY_REBATE_AGE:
        formula += f" + Secondary ({SECONDARY_REBATE_AGE}+)"
    if age is not None and age >= TERTIARY_REBATE_AGE:
        formula += f" + Tertiary ({TERTIARY_REBATE_AGE}+)"
    return formula


def _retirement_formula(result: TaxCalculationResult) -> str:
    return (
        f"Min(Contribution, Min({_format_rate(result.retirement_deduction_rate)} x Gross, "
        f"{format_rand(result.retirement_deduction_cap)}))"
    )


def _marginal_note(result: TaxCalculationResult) -> str:
    note = f"Marginal rate {result.marginal_rate}%"
    if result.breakdown:
        top = result.breakdown[-1]
        note += f" in the {bracket_label(TaxBracket(top.lower, top.upper, top.rate))} bracket"
    return note


def narrate_calculation(
    tax_input: TaxCalculationInput,
    result: TaxCalculationResult,
    paye_withheld: Decimal | None = None,
) -> list[AuditStep]:
    """Build the audit steps for a completed calculation.

    Args:
        tax_input: The input the result was calculated from.
        result: The engine's result.
        paye_withheld: Optional PAYE withheld; adds a refund/amount due step.

    Returns:
        Steps in order: gross income, retirement deduction, taxable income,
        income tax, rebates and credits, final liability (then refund).
    """
    steps = [
        AuditStep(
            step=1,
            title="Gross Remuneration",
            calculation=format_rand(result.gross_income),
            formula="Total remuneration from employment",
            result=result.gross_income,
            reference="IRP5 code 3601 - Gross remuneration",
        ),
        AuditStep(
            step=2,
            title="Retirement Fund Deduction",
            calculation=(
                f"{format_rand(tax_input.retirement_contrib)} contributed, "
                f"{format_rand(result.retirement_deduction)} deductible"
            ),
            formula=_retirement_formula(result),
            result=result.retirement_deduction,
            reference="Section 11F - Retirement fund contributions",
            notes="Contributions above the cap are not deductible and are not carried forward",
        ),
        AuditStep(
            step=3,
            title="Taxable Income",
            calculation=(
                f"{format_rand(result.gross_income)} - {format_rand(result.retirement_deduction)}"
            ),
            formula="Gross Income - Retirement Deduction",
            result=result.taxable_income,
            reference="Income Tax Act section 1 - Definition of taxable income",
            notes="Medical scheme contributions give tax credits, not deductions",
        ),
        AuditStep(
            step=4,
            title="Income Tax (Before Rebates)",
            calculation=describe_brackets(result.breakdown),
            formula="Progressive tax brackets applied to taxable income",
            result=result.income_tax,
            reference=f"Income Tax Act - Rates of tax for {result.tax_year}",
            notes=_marginal_note(result),
        ),
        AuditStep(
            step=5,
            title="Rebates and Medical Tax Credits",
            calculation=(
                f"{format_rand(result.primary_rebate)} + {format_rand(result.medical_tax_credits)}"
            ),
            formula=f"Rebates ({_rebate_formula(tax_input.age)}) + Medical scheme fees tax credit",
            result=result.primary_rebate + result.medical_tax_credits,
            reference="Section 6 - Rebates; Section 6A - Medical scheme fees tax credit",
        ),
        AuditStep(
            step=6,
            title="Final Tax Liability",
            calculation=(
                f"Max(0, {format_rand(result.income_tax)} - {format_rand(result.primary_rebate)}"
                f" - {format_rand(result.medical_tax_credits)})"
            ),
            formula="Max(0, Income Tax - Rebates - Medical Credits)",
            result=result.total_tax,
            reference="Income Tax Act - Normal tax payable",
            notes=f"Effective rate {result.effective_rate}% of gross income",
        ),
    ]

    if paye_withheld is not None:
        assessment = assess_refund(result, paye_withheld)
        steps.append(AuditStep(
            step=7,
            title="Tax Refund / Amount Due",
            calculation=f"{format_rand(assessment.paye_withheld)} - {format_rand(result.total_tax)}",
            formula="PAYE Withheld - Tax Liability",
            result=assessment.refund_or_owing,
            reference="IRP5 code 4102 - PAYE withheld",
            notes="Refund due" if assessment.is_refund else "Additional tax payable",
        ))

    return steps
