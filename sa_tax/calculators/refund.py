"""Refund or amount owing against PAYE withheld."""

from decimal import Decimal

from sa_tax.calculators.errors import InvalidInputError
from sa_tax.calculators.income_tax import to_cents
from sa_tax.models import RefundAssessment, TaxCalculationResult

_ZERO = Decimal("0")


def assess_refund(result: TaxCalculationResult, paye_withheld: Decimal) -> RefundAssessment:
    """Set PAYE withheld (IRP5 code 4102) against the calculated liability.

    Uses result.total_tax as-is so the assessment always matches the
    figure shown in the audit trail.
    """
    if paye_withheld < 0:
        raise InvalidInputError(f"paye_withheld must be non-negative, got {paye_withheld}.")

    net = paye_withheld - result.total_tax
    is_refund = net > 0

    return RefundAssessment(
        paye_withheld=to_cents(paye_withheld),
        total_tax=result.total_tax,
        refund_or_owing=to_cents(net),
        is_refund=is_refund,
        refund_amount=to_cents(net) if is_refund else _ZERO,
        amount_owed=to_cents(-net) if net < 0 else _ZERO,
        paye_shortfall=to_cents(max(_ZERO, result.total_tax - paye_withheld)),
    )
