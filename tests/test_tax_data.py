"""Tests for loading and validating tax-year policy tables."""

from collections.abc import Callable
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest
import yaml

from sa_tax.calculators.errors import PolicyConfigurationError
from sa_tax.calculators.tax_data import (
    DEFAULT_TAX_YEAR,
    TAX_YEARS,
    load_tax_years,
    parse_policy,
)

RawPolicy = Callable[..., dict[str, Any]]


class TestShippedTables:
    def test_all_years_loaded(self) -> None:
        assert set(TAX_YEARS) == {"2022-23", "2023-24", "2024-25", "2025-26"}

    def test_default_year(self) -> None:
        assert DEFAULT_TAX_YEAR == "2025-26"

    def test_2025_26_figures(self) -> None:
        policy = TAX_YEARS["2025-26"]
        assert policy.start_date == date(2025, 3, 1)
        assert policy.end_date == date(2026, 2, 28)
        assert len(policy.brackets) == 7
        assert policy.brackets[0].rate == Decimal("0.18")
        assert policy.brackets[-1].upper is None
        assert policy.rebates.primary == Decimal("17235")
        assert policy.medical_credits.main_member == Decimal("364")
        assert policy.retirement.deduction_rate == Decimal("0.275")
        assert policy.retirement.deduction_cap == Decimal("350000")
        assert policy.uif.monthly_cap == Decimal("177.12")

    def test_registry_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            TAX_YEARS["2030-31"] = TAX_YEARS["2025-26"]  # type: ignore[index]


class TestBracketValidation:
    def test_valid_table(self, make_raw_policy: RawPolicy) -> None:
        policy = parse_policy(make_raw_policy())
        assert policy.tax_year == "illustrative"
        assert len(policy.brackets) == 3

    def test_gap_rejected(self, make_raw_policy: RawPolicy) -> None:
        raw = make_raw_policy(brackets=[
            {"lower": 0, "upper": 237100, "rate": "0.18"},
            {"lower": 237101, "upper": None, "rate": "0.26"},
        ])
        with pytest.raises(PolicyConfigurationError, match="gap"):
            parse_policy(raw)

    def test_overlap_rejected(self, make_raw_policy: RawPolicy) -> None:
        raw = make_raw_policy(brackets=[
            {"lower": 0, "upper": 237100, "rate": "0.18"},
            {"lower": 200000, "upper": None, "rate": "0.26"},
        ])
        with pytest.raises(PolicyConfigurationError, match="overlap"):
            parse_policy(raw)

    def test_falling_rate_rejected(self, make_raw_policy: RawPolicy) -> None:
        raw = make_raw_policy(brackets=[
            {"lower": 0, "upper": 237100, "rate": "0.26"},
            {"lower": 237100, "upper": None, "rate": "0.18"},
        ])
        with pytest.raises(PolicyConfigurationError, match="rate falls"):
            parse_policy(raw)

    def test_closed_top_bracket_rejected(self, make_raw_policy: RawPolicy) -> None:
        raw = make_raw_policy(brackets=[
            {"lower": 0, "upper": 237100, "rate": "0.18"},
            {"lower": 237100, "upper": 370500, "rate": "0.26"},
        ])
        with pytest.raises(PolicyConfigurationError, match="open-ended"):
            parse_policy(raw)

    def test_open_bracket_before_last_rejected(self, make_raw_policy: RawPolicy) -> None:
        raw = make_raw_policy(brackets=[
            {"lower": 0, "upper": None, "rate": "0.18"},
            {"lower": 237100, "upper": None, "rate": "0.26"},
        ])
        with pytest.raises(PolicyConfigurationError, match="only the top bracket"):
            parse_policy(raw)

    def test_first_bracket_must_start_at_zero(self, make_raw_policy: RawPolicy) -> None:
        raw = make_raw_policy(brackets=[{"lower": 1000, "upper": None, "rate": "0.18"}])
        with pytest.raises(PolicyConfigurationError, match="start at 0"):
            parse_policy(raw)

    def test_empty_table_rejected(self, make_raw_policy: RawPolicy) -> None:
        with pytest.raises(PolicyConfigurationError, match="no tax brackets"):
            parse_policy(make_raw_policy(brackets=[]))

    def test_inverted_bracket_rejected(self, make_raw_policy: RawPolicy) -> None:
        raw = make_raw_policy(brackets=[
            {"lower": 0, "upper": 0, "rate": "0.18"},
            {"lower": 0, "upper": None, "rate": "0.26"},
        ])
        with pytest.raises(PolicyConfigurationError, match="upper"):
            parse_policy(raw)

    def test_rate_above_one_rejected(self, make_raw_policy: RawPolicy) -> None:
        raw = make_raw_policy(brackets=[{"lower": 0, "upper": None, "rate": 18}])
        with pytest.raises(PolicyConfigurationError, match="fraction"):
            parse_policy(raw)


class TestPolicySections:
    def test_missing_section(self, make_raw_policy: RawPolicy) -> None:
        raw = make_raw_policy()
        del raw["rebates"]
        with pytest.raises(PolicyConfigurationError, match="rebates"):
            parse_policy(raw)

    def test_negative_amount(self, make_raw_policy: RawPolicy) -> None:
        raw = make_raw_policy(rebates={"primary": -1, "secondary": 0, "tertiary": 0})
        with pytest.raises(PolicyConfigurationError, match="rebates.primary"):
            parse_policy(raw)

    def test_non_numeric_amount(self, make_raw_policy: RawPolicy) -> None:
        raw = make_raw_policy(uif={"rate": "one percent", "monthly_cap": "177.12"})
        with pytest.raises(PolicyConfigurationError, match="uif.rate"):
            parse_policy(raw)

    def test_end_before_start(self, make_raw_policy: RawPolicy) -> None:
        raw = make_raw_policy(start_date=date(2026, 3, 1), end_date=date(2025, 2, 28))
        with pytest.raises(PolicyConfigurationError, match="not after"):
            parse_policy(raw)


class TestLoadTaxYears:
    def test_loads_directory(self, tmp_path: Path, make_raw_policy: RawPolicy) -> None:
        raw = make_raw_policy(tax_year="2030-31")
        (tmp_path / "2030-31.yaml").write_text(yaml.safe_dump(raw))
        policies = load_tax_years(tmp_path)
        assert list(policies) == ["2030-31"]
        assert policies["2030-31"].rebates.tertiary == Decimal("3145")

    def test_label_falls_back_to_filename(self, tmp_path: Path, make_raw_policy: RawPolicy) -> None:
        raw = make_raw_policy()
        del raw["tax_year"]
        (tmp_path / "2031-32.yaml").write_text(yaml.safe_dump(raw))
        assert "2031-32" in load_tax_years(tmp_path)

    def test_empty_directory(self, tmp_path: Path) -> None:
        with pytest.raises(PolicyConfigurationError, match="No tax year policy files"):
            load_tax_years(tmp_path)

    def test_malformed_file_fails_fast(self, tmp_path: Path, make_raw_policy: RawPolicy) -> None:
        raw = make_raw_policy(brackets=[
            {"lower": 0, "upper": 100, "rate": "0.18"},
            {"lower": 150, "upper": None, "rate": "0.26"},
        ])
        (tmp_path / "broken.yaml").write_text(yaml.safe_dump(raw))
        with pytest.raises(PolicyConfigurationError):
            load_tax_years(tmp_path)
