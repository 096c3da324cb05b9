"""Shared test fixtures."""

from decimal import Decimal

import pytest

from src.calculators.tax_data import FiscalYearRates, get_rate_table


@pytest.fixture
def rates_2025() -> FiscalYearRates:
    return get_rate_table("2025")


@pytest.fixture
def rates_2024() -> FiscalYearRates:
    return get_rate_table("2024")


@pytest.fixture
def rates_vat_125(rates_2025: FiscalYearRates) -> FiscalYearRates:
    """2025 table with the 12.5% VAT rate used by stored calculation records."""
    return rates_2025._replace(vat=rates_2025.vat._replace(standard_rate=Decimal("0.125")))
