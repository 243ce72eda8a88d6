"""SA tax-year policy tables: brackets, rebates, medical credits, caps.

Figures live in config/tax_years/<label>.yaml, one file per year of
assessment. Every file is parsed and validated once at import; a malformed
table raises PolicyConfigurationError before any calculation can run.
"""

import logging
from collections.abc import Mapping
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from types import MappingProxyType
from typing import Any, NamedTuple

from config import load_yaml_config
from config.settings import settings
from sa_tax.calculators.errors import InvalidInputError, PolicyConfigurationError

logger = logging.getLogger(__name__)


class TaxBracket(NamedTuple):
    """A single income tax bracket."""

    lower: Decimal  # exclusive, except 0
    upper: Decimal | None  # inclusive; None = no cap
    rate: Decimal


class Rebates(NamedTuple):
    """Age-based rebates (section 6)."""

    primary: Decimal
    secondary: Decimal  # 65+
    tertiary: Decimal  # 75+


class MedicalCredits(NamedTuple):
    """Monthly medical scheme fees tax credit amounts (section 6A)."""

    main_member: Decimal
    first_dependant: Decimal
    additional_dependant: Decimal


class RetirementCap(NamedTuple):
    """Section 11F limit on deductible retirement fund contributions."""

    deduction_rate: Decimal
    deduction_cap: Decimal


class UifLimits(NamedTuple):
    """Employee UIF contribution rate and monthly ceiling."""

    rate: Decimal
    monthly_cap: Decimal


class TaxYearPolicy(NamedTuple):
    """All tax parameters for a single SA year of assessment."""

    tax_year: str
    start_date: date
    end_date: date
    brackets: tuple[TaxBracket, ...]
    rebates: Rebates
    medical_credits: MedicalCredits
    retirement: RetirementCap
    uif: UifLimits


def _decimal(value: Any, field: str, tax_year: str) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise PolicyConfigurationError(f"{tax_year}: {field} must be a number, got {value!r}")
    try:
        amount = Decimal(str(value))
    except InvalidOperation as exc:
        raise PolicyConfigurationError(
            f"{tax_year}: {field} must be a number, got {value!r}"
        ) from exc
    if not amount.is_finite() or amount < 0:
        raise PolicyConfigurationError(f"{tax_year}: {field} must be non-negative, got {value!r}")
    return amount


def _section(raw: dict[str, Any], name: str, tax_year: str) -> dict[str, Any]:
    section = raw.get(name)
    if not isinstance(section, dict):
        raise PolicyConfigurationError(f"{tax_year}: missing '{name}' section")
    return section


def _rate(value: Any, field: str, tax_year: str) -> Decimal:
    rate = _decimal(value, field, tax_year)
    if rate > 1:
        raise PolicyConfigurationError(f"{tax_year}: {field} must be a fraction <= 1, got {value!r}")
    return rate


def validate_brackets(brackets: tuple[TaxBracket, ...], tax_year: str) -> None:
    """Check brackets partition [0, inf) with no gaps or overlaps.

    Raises:
        PolicyConfigurationError: On an empty table, a first bracket not
            starting at 0, a gap/overlap between neighbours, a closed top
            bracket, an open bracket before the last, or a falling rate.
    """
    if not brackets:
        raise PolicyConfigurationError(f"{tax_year}: no tax brackets defined")

    if brackets[0].lower != 0:
        raise PolicyConfigurationError(
            f"{tax_year}: first bracket must start at 0, starts at {brackets[0].lower}"
        )

    for index, bracket in enumerate(brackets):
        is_last = index == len(brackets) - 1
        if bracket.upper is None:
            if not is_last:
                raise PolicyConfigurationError(
                    f"{tax_year}: only the top bracket may be open-ended (bracket {index})"
                )
            continue
        if is_last:
            raise PolicyConfigurationError(
                f"{tax_year}: top bracket must be open-ended, ends at {bracket.upper}"
            )
        if bracket.upper <= bracket.lower:
            raise PolicyConfigurationError(
                f"{tax_year}: bracket {index} upper {bracket.upper} <= lower {bracket.lower}"
            )

        following = brackets[index + 1]
        if following.lower > bracket.upper:
            raise PolicyConfigurationError(
                f"{tax_year}: gap between {bracket.upper} and {following.lower}"
            )
        if following.lower < bracket.upper:
            raise PolicyConfigurationError(
                f"{tax_year}: brackets overlap at {following.lower} (previous ends {bracket.upper})"
            )
        if following.rate < bracket.rate:
            raise PolicyConfigurationError(
                f"{tax_year}: rate falls from {bracket.rate} to {following.rate} at {following.lower}"
            )


def parse_policy(raw: dict[str, Any], tax_year: str | None = None) -> TaxYearPolicy:
    """Build a validated TaxYearPolicy from a decoded YAML mapping.

    Args:
        raw: Mapping with brackets, rebates, medical_credits, retirement, uif.
        tax_year: Label to use when the mapping has no tax_year key.

    Returns:
        The immutable policy.

    Raises:
        PolicyConfigurationError: If any section is missing or malformed.
    """
    label = str(raw.get("tax_year") or tax_year or "")
    if not label:
        raise PolicyConfigurationError("Tax year policy has no tax_year label")

    start_date = raw.get("start_date")
    end_date = raw.get("end_date")
    if not isinstance(start_date, date) or not isinstance(end_date, date):
        raise PolicyConfigurationError(f"{label}: start_date and end_date must be dates")
    if end_date <= start_date:
        raise PolicyConfigurationError(f"{label}: end_date {end_date} is not after {start_date}")

    raw_brackets = raw.get("brackets")
    if not isinstance(raw_brackets, list):
        raise PolicyConfigurationError(f"{label}: 'brackets' must be a list")

    brackets: list[TaxBracket] = []
    for index, item in enumerate(raw_brackets):
        if not isinstance(item, dict) or "lower" not in item or "rate" not in item:
            raise PolicyConfigurationError(f"{label}: bracket {index} needs lower, upper and rate")
        upper = item.get("upper")
        brackets.append(TaxBracket(
            lower=_decimal(item["lower"], f"brackets[{index}].lower", label),
            upper=_decimal(upper, f"brackets[{index}].upper", label) if upper is not None else None,
            rate=_rate(item["rate"], f"brackets[{index}].rate", label),
        ))
    validate_brackets(tuple(brackets), label)

    rebates = _section(raw, "rebates", label)
    medical = _section(raw, "medical_credits", label)
    retirement = _section(raw, "retirement", label)
    uif = _section(raw, "uif", label)

    return TaxYearPolicy(
        tax_year=label,
        start_date=start_date,
        end_date=end_date,
        brackets=tuple(brackets),
        rebates=Rebates(
            primary=_decimal(rebates.get("primary"), "rebates.primary", label),
            secondary=_decimal(rebates.get("secondary"), "rebates.secondary", label),
            tertiary=_decimal(rebates.get("tertiary"), "rebates.tertiary", label),
        ),
        medical_credits=MedicalCredits(
            main_member=_decimal(medical.get("main_member"), "medical_credits.main_member", label),
            first_dependant=_decimal(
                medical.get("first_dependant"), "medical_credits.first_dependant", label
            ),
            additional_dependant=_decimal(
                medical.get("additional_dependant"), "medical_credits.additional_dependant", label
            ),
        ),
        retirement=RetirementCap(
            deduction_rate=_rate(retirement.get("deduction_rate"), "retirement.deduction_rate", label),
            deduction_cap=_decimal(retirement.get("deduction_cap"), "retirement.deduction_cap", label),
        ),
        uif=UifLimits(
            rate=_rate(uif.get("rate"), "uif.rate", label),
            monthly_cap=_decimal(uif.get("monthly_cap"), "uif.monthly_cap", label),
        ),
    )


def load_tax_years(directory: Path | None = None) -> Mapping[str, TaxYearPolicy]:
    """Load and validate every <label>.yaml policy file in a directory.

    Returns:
        Read-only mapping of tax-year label to policy.
    """
    directory = directory or settings.tax_years_path
    paths = sorted(directory.glob("*.yaml"))
    if not paths:
        raise PolicyConfigurationError(f"No tax year policy files found in {directory}")

    policies: dict[str, TaxYearPolicy] = {}
    for path in paths:
        raw = load_yaml_config(path.name, config_dir=directory)
        policy = parse_policy(raw, tax_year=path.stem)
        if policy.tax_year in policies:
            raise PolicyConfigurationError(f"Duplicate policy for tax year {policy.tax_year}")
        policies[policy.tax_year] = policy
        logger.debug("Loaded tax year %s (%d brackets)", policy.tax_year, len(policy.brackets))

    return MappingProxyType(policies)


TAX_YEARS: Mapping[str, TaxYearPolicy] = load_tax_years()

DEFAULT_TAX_YEAR = settings.default_tax_year

if DEFAULT_TAX_YEAR not in TAX_YEARS:
    raise PolicyConfigurationError(
        f"Default tax year {DEFAULT_TAX_YEAR} has no policy. Available: {', '.join(sorted(TAX_YEARS))}"
    )


def get_policy(tax_year: str = DEFAULT_TAX_YEAR) -> TaxYearPolicy:
    """Look up the policy for a tax year label, e.g. "2025-26".

    Raises:
        InvalidInputError: If no policy exists for the label.
    """
    if tax_year not in TAX_YEARS:
        raise InvalidInputError(
            f"Unknown tax year: {tax_year}. Available: {', '.join(sorted(TAX_YEARS))}"
        )
    return TAX_YEARS[tax_year]
