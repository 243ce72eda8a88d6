"""Shared test fixtures."""

from collections.abc import Callable
from datetime import date
from typing import Any

import pytest

from sa_tax.calculators.tax_data import TaxYearPolicy, get_policy, parse_policy


def _make_raw_policy(**overrides: Any) -> dict[str, Any]:
    """Decoded-YAML style mapping for a small three-bracket tax year."""
    raw: dict[str, Any] = {
        "tax_year": "illustrative",
        "start_date": date(2025, 3, 1),
        "end_date": date(2026, 2, 28),
        "brackets": [
            {"lower": 0, "upper": 237100, "rate": "0.18"},
            {"lower": 237100, "upper": 370500, "rate": "0.26"},
            {"lower": 370500, "upper": None, "rate": "0.31"},
        ],
        "rebates": {"primary": 17235, "secondary": 9444, "tertiary": 3145},
        "medical_credits": {"main_member": 364, "first_dependant": 364, "additional_dependant": 246},
        "retirement": {"deduction_rate": "0.275", "deduction_cap": 350000},
        "uif": {"rate": "0.01", "monthly_cap": "177.12"},
    }
    raw.update(overrides)
    return raw


@pytest.fixture
def policy() -> TaxYearPolicy:
    """The shipped 2025-26 policy."""
    return get_policy("2025-26")


@pytest.fixture
def illustrative_policy() -> TaxYearPolicy:
    """Three brackets: 0-237,100 @ 18%, to 370,500 @ 26%, rest @ 31%."""
    return parse_policy(_make_raw_policy())


@pytest.fixture
def make_raw_policy() -> Callable[..., dict[str, Any]]:
    """Factory for raw policy mappings with selected keys overridden."""
    return _make_raw_policy
