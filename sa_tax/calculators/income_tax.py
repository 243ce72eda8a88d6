"""Income tax calculator: retirement deduction, brackets, rebates, credits."""

from decimal import ROUND_HALF_UP, Decimal

from sa_tax.calculators.errors import InvalidInputError
from sa_tax.calculators.tax_data import TaxBracket, TaxYearPolicy
from sa_tax.models import BracketSlice, TaxCalculationInput, TaxCalculationResult

SECONDARY_REBATE_AGE = 65
TERTIARY_REBATE_AGE = 75

_CENTS = Decimal("0.01")
_ZERO = Decimal("0")
_HUNDRED = Decimal("100")

_MONEY_FIELDS = (
    "gross_income",
    "retirement_contrib",
    "medical_contrib",
    "medical_credits",
    "uif_contrib",
)


def to_cents(amount: Decimal) -> Decimal:
    """Round a Rand amount (or percentage) half-up to two decimals."""
    return amount.quantize(_CENTS, rounding=ROUND_HALF_UP)


def validate_input(tax_input: TaxCalculationInput) -> None:
    """Reject negative amounts and negative ages.

    Raises:
        InvalidInputError: Naming the first offending field.
    """
    for field in _MONEY_FIELDS:
        value = getattr(tax_input, field)
        if not value.is_finite():
            raise InvalidInputError(f"{field} must be a finite number.")
        if value < 0:
            raise InvalidInputError(f"{field} must be non-negative, got {value}.")
    if tax_input.age is not None and tax_input.age < 0:
        raise InvalidInputError(f"age must be non-negative, got {tax_input.age}.")


def max_retirement_deduction(gross_income: Decimal, policy: TaxYearPolicy) -> Decimal:
    """Most retirement contribution that may reduce taxable income."""
    cap = policy.retirement
    return min(gross_income * cap.deduction_rate, cap.deduction_cap)


def apply_brackets(
    taxable_income: Decimal,
    brackets: tuple[TaxBracket, ...],
) -> tuple[Decimal, list[BracketSlice], Decimal]:
    """Tax income progressively, bracket by bracket.

    Returns:
        (tax, per-bracket breakdown, marginal rate as a fraction). The
        marginal rate is 0 when there is no taxable income.
    """
    tax = _ZERO
    marginal = _ZERO
    breakdown: list[BracketSlice] = []

    for bracket in brackets:
        if taxable_income <= bracket.lower:
            break

        top = taxable_income if bracket.upper is None else min(taxable_income, bracket.upper)
        portion = top - bracket.lower
        portion_tax = portion * bracket.rate

        breakdown.append(BracketSlice(
            lower=bracket.lower,
            upper=bracket.upper,
            rate=bracket.rate,
            taxable_amount=portion,
            tax=to_cents(portion_tax),
        ))
        tax += portion_tax
        marginal = bracket.rate

    return tax, breakdown, marginal


def total_rebates(age: int | None, policy: TaxYearPolicy) -> Decimal:
    """Primary rebate plus every age tier the taxpayer qualifies for."""
    rebates = policy.rebates
    amount = rebates.primary
    if age is not None and age >= SECONDARY_REBATE_AGE:
        amount += rebates.secondary
    if age is not None and age >= TERTIARY_REBATE_AGE:
        amount += rebates.tertiary
    return amount


def medical_tax_credits(tax_input: TaxCalculationInput, policy: TaxYearPolicy) -> Decimal:
    """Annual main-member credit for scheme members plus caller-supplied credits.

    Dependant credits are not derived here; callers pass them in
    medical_credits (see dependant_medical_credits). A full household
    estimate would count the main member twice.
    """
    credits = tax_input.medical_credits
    if tax_input.medical_contrib > 0:
        credits += policy.medical_credits.main_member * 12
    return credits


def calculate_income_tax(
    tax_input: TaxCalculationInput,
    policy: TaxYearPolicy,
) -> TaxCalculationResult:
    """Calculate SA personal income tax for one year of assessment.

    Args:
        tax_input: Gross income, contributions and age.
        policy: Tax-year table from tax_data.get_policy().

    Returns:
        TaxCalculationResult with amounts rounded to cents.

    Raises:
        InvalidInputError: If any amount or the age is negative.
    """
    validate_input(tax_input)

    gross = tax_input.gross_income
    retirement_deduction = min(tax_input.retirement_contrib, max_retirement_deduction(gross, policy))
    taxable_income = max(_ZERO, gross - retirement_deduction)

    income_tax, breakdown, marginal = apply_brackets(taxable_income, policy.brackets)
    rebates = total_rebates(tax_input.age, policy)
    credits = medical_tax_credits(tax_input, policy)

    total_tax = max(_ZERO, to_cents(income_tax) - rebates - credits)
    effective_rate = total_tax / gross * _HUNDRED if gross > 0 else _ZERO

    return TaxCalculationResult(
        tax_year=policy.tax_year,
        gross_income=to_cents(gross),
        retirement_deduction=to_cents(retirement_deduction),
        taxable_income=to_cents(taxable_income),
        income_tax=to_cents(income_tax),
        primary_rebate=to_cents(rebates),
        medical_tax_credits=to_cents(credits),
        total_tax=to_cents(total_tax),
        marginal_rate=to_cents(marginal * _HUNDRED),
        effective_rate=to_cents(effective_rate),
        breakdown=tuple(breakdown),
        retirement_deduction_rate=policy.retirement.deduction_rate,
        retirement_deduction_cap=policy.retirement.deduction_cap,
    )


def find_bracket(income: Decimal, policy: TaxYearPolicy) -> TaxBracket:
    """Bracket whose range holds the given income (upper bound inclusive)."""
    if income < 0:
        raise InvalidInputError(f"Income must be non-negative, got {income}.")
    for bracket in policy.brackets:
        if bracket.upper is None or income <= bracket.upper:
            return bracket
    return policy.brackets[-1]


def bracket_label(bracket: TaxBracket) -> str:
    """Render a bracket range, e.g. "R237,100 - R370,500" or "R1,817,000+"."""
    if bracket.upper is None:
        return f"R{bracket.lower:,.0f}+"
    return f"R{bracket.lower:,.0f} - R{bracket.upper:,.0f}"
