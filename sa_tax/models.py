"""Pydantic models for calculation inputs, results and report data."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict

_ZERO = Decimal("0")


class TaxCalculationInput(BaseModel):
    """Annual income and contributions for one taxpayer, in Rand.

    Produced by manual entry, IRP5 extraction or API callers. Values are not
    range-checked here; the engine raises InvalidInputError instead.
    """

    model_config = ConfigDict(frozen=True)

    gross_income: Decimal
    retirement_contrib: Decimal = _ZERO
    medical_contrib: Decimal = _ZERO
    medical_credits: Decimal = _ZERO  # extra credits supplied by the caller
    uif_contrib: Decimal = _ZERO
    age: int | None = None  # None = under 65


class BracketSlice(BaseModel):
    """Portion of taxable income taxed within one bracket."""

    model_config = ConfigDict(frozen=True)

    lower: Decimal
    upper: Decimal | None = None
    rate: Decimal
    taxable_amount: Decimal
    tax: Decimal


class TaxCalculationResult(BaseModel):
    """Outcome of a calculation. Rates are percentages."""

    model_config = ConfigDict(frozen=True)

    tax_year: str
    gross_income: Decimal
    retirement_deduction: Decimal
    taxable_income: Decimal
    income_tax: Decimal
    primary_rebate: Decimal  # sum of all applicable rebate tiers
    medical_tax_credits: Decimal
    total_tax: Decimal
    marginal_rate: Decimal
    effective_rate: Decimal
    breakdown: tuple[BracketSlice, ...] = ()
    retirement_deduction_rate: Decimal = _ZERO  # fraction of gross, from the policy used
    retirement_deduction_cap: Decimal = _ZERO


class RefundAssessment(BaseModel):
    """PAYE withheld set against the final liability."""

    model_config = ConfigDict(frozen=True)

    paye_withheld: Decimal
    total_tax: Decimal
    refund_or_owing: Decimal
    is_refund: bool
    refund_amount: Decimal
    amount_owed: Decimal
    paye_shortfall: Decimal


class AuditStep(BaseModel):
    """One narrated line of the calculation audit trail."""

    model_config = ConfigDict(frozen=True)

    step: int
    title: str
    calculation: str
    formula: str
    result: Decimal
    reference: str
    notes: str | None = None
