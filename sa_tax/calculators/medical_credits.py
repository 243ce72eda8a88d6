"""Medical scheme fees tax credit estimate."""

from decimal import Decimal

from sa_tax.calculators.errors import InvalidInputError
from sa_tax.calculators.tax_data import TaxYearPolicy


def estimate_medical_credits(
    policy: TaxYearPolicy,
    main_members: int = 1,
    dependants: int = 0,
) -> Decimal:
    """Annual section 6A credit for a scheme's members and dependants.

    The first dependant earns the same monthly credit as the main member;
    each further dependant earns the lower additional-dependant credit.
    """
    if main_members < 0 or dependants < 0:
        raise InvalidInputError("Member and dependant counts must be non-negative.")

    rates = policy.medical_credits
    monthly = (
        main_members * rates.main_member
        + min(dependants, 1) * rates.first_dependant
        + max(0, dependants - 1) * rates.additional_dependant
    )
    return monthly * 12


def dependant_medical_credits(policy: TaxYearPolicy, dependants: int) -> Decimal:
    """Annual credit for dependants only, for TaxCalculationInput.medical_credits.

    The engine already grants the main-member credit when medical_contrib is
    positive, so this leaves it out.
    """
    return estimate_medical_credits(policy, main_members=0, dependants=dependants)
