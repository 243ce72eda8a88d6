"""API routes for the SA tax calculator."""

import logging
from decimal import Decimal
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from sa_tax.calculators.audit import narrate_calculation
from sa_tax.calculators.income_tax import bracket_label, calculate_income_tax, find_bracket
from sa_tax.calculators.medical_credits import dependant_medical_credits, estimate_medical_credits
from sa_tax.calculators.optimizer import optimise_retirement
from sa_tax.calculators.refund import assess_refund
from sa_tax.calculators.tax_data import DEFAULT_TAX_YEAR, TAX_YEARS, get_policy
from sa_tax.calculators.uif import calculate_uif
from sa_tax.models import AuditStep, RefundAssessment, TaxCalculationInput, TaxCalculationResult

logger = logging.getLogger(__name__)

router = APIRouter()


class CalculateRequest(TaxCalculationInput):
    """Request body for the /calculate endpoint."""

    tax_year: str = DEFAULT_TAX_YEAR
    paye_withheld: Decimal | None = None


class CalculateResponse(BaseModel):
    """Response from the /calculate endpoint."""

    result: TaxCalculationResult
    assessment: RefundAssessment | None = None
    audit_steps: list[AuditStep]


class UifRequest(BaseModel):
    """Request body for the /uif endpoint."""

    gross_income: Decimal
    tax_year: str = DEFAULT_TAX_YEAR


class MedicalCreditsRequest(BaseModel):
    """Request body for the /medical-credits endpoint."""

    main_members: int = 1
    dependants: int = 0
    tax_year: str = DEFAULT_TAX_YEAR


class OptimiseRequest(TaxCalculationInput):
    """Request body for the /optimise/retirement endpoint."""

    tax_year: str = DEFAULT_TAX_YEAR


@router.get("/health")
async def health() -> dict[str, Any]:
    """Health check with the loaded tax years."""
    return {"status": "ok", "tax_years": sorted(TAX_YEARS), "default_tax_year": DEFAULT_TAX_YEAR}


@router.get("/tax-years")
async def list_tax_years() -> list[dict[str, Any]]:
    """List available tax years and their assessment periods."""
    return [
        {
            "tax_year": policy.tax_year,
            "start_date": policy.start_date.isoformat(),
            "end_date": policy.end_date.isoformat(),
            "is_default": policy.tax_year == DEFAULT_TAX_YEAR,
        }
        for policy in sorted(TAX_YEARS.values(), key=lambda p: p.start_date)
    ]


@router.get("/tax-years/{tax_year}")
async def tax_year_detail(tax_year: str) -> dict[str, Any]:
    """Brackets, rebates, credits and caps for one tax year."""
    policy = get_policy(tax_year)
    return {
        "tax_year": policy.tax_year,
        "start_date": policy.start_date.isoformat(),
        "end_date": policy.end_date.isoformat(),
        "brackets": [
            {**bracket._asdict(), "label": bracket_label(bracket)} for bracket in policy.brackets
        ],
        "rebates": policy.rebates._asdict(),
        "medical_credits": policy.medical_credits._asdict(),
        "retirement": policy.retirement._asdict(),
        "uif": policy.uif._asdict(),
    }


@router.get("/tax-years/{tax_year}/bracket")
async def bracket_for_income(tax_year: str, income: Decimal) -> dict[str, Any]:
    """The bracket a taxable income falls in."""
    bracket = find_bracket(income, get_policy(tax_year))
    return {
        "tax_year": tax_year,
        "income": income,
        **bracket._asdict(),
        "label": bracket_label(bracket),
    }


@router.post("/calculate", response_model=CalculateResponse)
async def calculate(body: CalculateRequest) -> CalculateResponse:
    """Calculate income tax, the audit trail and, with PAYE, the refund."""
    policy = get_policy(body.tax_year)
    tax_input = TaxCalculationInput(**body.model_dump(exclude={"tax_year", "paye_withheld"}))
    result = calculate_income_tax(tax_input, policy)
    logger.info("Calculated %s: taxable=%s total_tax=%s", policy.tax_year, result.taxable_income, result.total_tax)

    assessment = None
    if body.paye_withheld is not None:
        assessment = assess_refund(result, body.paye_withheld)

    return CalculateResponse(
        result=result,
        assessment=assessment,
        audit_steps=narrate_calculation(tax_input, result, body.paye_withheld),
    )


@router.post("/uif")
async def uif(body: UifRequest) -> dict[str, Any]:
    """Employee UIF contribution for an annual gross income."""
    return calculate_uif(body.gross_income, get_policy(body.tax_year))


@router.post("/medical-credits")
async def medical_credits(body: MedicalCreditsRequest) -> dict[str, Any]:
    """Estimated annual medical scheme fees tax credit."""
    policy = get_policy(body.tax_year)
    annual = estimate_medical_credits(policy, body.main_members, body.dependants)
    return {
        "tax_year": policy.tax_year,
        "main_members": body.main_members,
        "dependants": body.dependants,
        "annual_credit": annual,
        "monthly_credit": annual / 12,
        "dependant_credit": dependant_medical_credits(policy, body.dependants),
    }


@router.post("/optimise/retirement")
async def optimise(body: OptimiseRequest) -> dict[str, Any]:
    """Tax saved by topping retirement contributions up to the cap."""
    tax_input = TaxCalculationInput(**body.model_dump(exclude={"tax_year"}))
    return optimise_retirement(tax_input, get_policy(body.tax_year))
