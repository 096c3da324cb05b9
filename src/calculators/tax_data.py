"""Guyana rate tables: PAYE brackets, NIS rates and ceilings, VAT categories.

One frozen table per fiscal year, declared in config/rates.yaml and loaded
once at import. Switching fiscal year means selecting a different table;
fields are never patched, so a calculation cannot mix two years' rates.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Literal, NamedTuple

from config import load_yaml_config
from config.settings import settings

logger = logging.getLogger(__name__)

NisFrequency = Literal["weekly", "monthly"]


class InvalidRateTableError(ValueError):
    """A rate table in the configuration breaks a structural invariant."""


class UnknownFiscalYearError(KeyError):
    """No rate table is configured for the requested fiscal year."""


class TaxBracket(NamedTuple):
    """A single PAYE bracket."""

    lower: Decimal
    upper: Decimal | None  # None = no cap
    rate: Decimal


class NisRates(NamedTuple):
    """NIS contribution rates and insurable-earnings ceilings."""

    employee_rate: Decimal
    employer_rate: Decimal
    weekly_ceiling: Decimal
    monthly_ceiling: Decimal

    def ceiling_for(self, frequency: str) -> Decimal:
        if frequency == "weekly":
            return self.weekly_ceiling
        if frequency == "monthly":
            return self.monthly_ceiling
        raise ValueError(f"Unknown NIS frequency: {frequency}. Must be one of: monthly, weekly")


class VatConfig(NamedTuple):
    """VAT standard rate, registration threshold and category membership."""

    standard_rate: Decimal
    registration_threshold: Decimal
    zero_rated_categories: frozenset[str]
    exempt_categories: frozenset[str]


class CorporateTaxConfig(NamedTuple):
    """Parameters for the simplified quarterly corporate tax estimate."""

    threshold: Decimal
    lower_rate: Decimal
    upper_rate: Decimal
    form_rate: Decimal


class FiscalYearRates(NamedTuple):
    """All rate parameters for a single fiscal year."""

    fiscal_year: str
    currency: str
    minor_unit: Decimal
    brackets: tuple[TaxBracket, ...]
    nis: NisRates
    vat: VatConfig
    corporate_tax: CorporateTaxConfig


def _dec(value: Any) -> Decimal:
    # str() first so YAML floats never leak binary rounding into a rate
    return Decimal(str(value))


def _check_rate(year: str, name: str, rate: Decimal) -> None:
    if not Decimal("0") <= rate <= Decimal("1"):
        raise InvalidRateTableError(f"{year}: {name} must be within [0, 1], got {rate}")


def _parse_brackets(year: str, raw: list[dict[str, Any]], minor_unit: Decimal) -> tuple[TaxBracket, ...]:
    if not raw:
        raise InvalidRateTableError(f"{year}: PAYE bracket table is empty")

    brackets = tuple(
        TaxBracket(
            lower=_dec(item["lower"]),
            upper=_dec(item["upper"]) if item.get("upper") is not None else None,
            rate=_dec(item["rate"]),
        )
        for item in raw
    )

    if brackets[0].lower != 0:
        raise InvalidRateTableError(f"{year}: first PAYE bracket must start at 0")
    if brackets[-1].upper is not None:
        raise InvalidRateTableError(f"{year}: last PAYE bracket must be unbounded")

    for i, bracket in enumerate(brackets):
        _check_rate(year, f"PAYE bracket {i} rate", bracket.rate)
        if i == 0:
            continue
        prev = brackets[i - 1]
        if prev.upper is None:
            raise InvalidRateTableError(f"{year}: only the last PAYE bracket may be unbounded")
        if bracket.lower not in (prev.upper, prev.upper + minor_unit):
            raise InvalidRateTableError(
                f"{year}: PAYE bracket {i} starts at {bracket.lower}, "
                f"not contiguous with previous upper bound {prev.upper}"
            )
        if bracket.rate < prev.rate:
            raise InvalidRateTableError(f"{year}: PAYE bracket rates must not decrease")

    return brackets


def _parse_year(year: str, raw: dict[str, Any]) -> FiscalYearRates:
    try:
        minor_unit = _dec(raw.get("minor_unit", "1"))
        brackets = _parse_brackets(year, raw["paye"]["brackets"], minor_unit)

        nis_raw = raw["nis"]
        nis = NisRates(
            employee_rate=_dec(nis_raw["employee_rate"]),
            employer_rate=_dec(nis_raw["employer_rate"]),
            weekly_ceiling=_dec(nis_raw["weekly_ceiling"]),
            monthly_ceiling=_dec(nis_raw["monthly_ceiling"]),
        )

        vat_raw = raw["vat"]
        vat = VatConfig(
            standard_rate=_dec(vat_raw["standard_rate"]),
            registration_threshold=_dec(vat_raw["registration_threshold"]),
            zero_rated_categories=frozenset(vat_raw.get("zero_rated_categories") or ()),
            exempt_categories=frozenset(vat_raw.get("exempt_categories") or ()),
        )

        corp_raw = raw["corporate_tax"]
        corporate_tax = CorporateTaxConfig(
            threshold=_dec(corp_raw["threshold"]),
            lower_rate=_dec(corp_raw["lower_rate"]),
            upper_rate=_dec(corp_raw["upper_rate"]),
            form_rate=_dec(corp_raw["form_rate"]),
        )
    except KeyError as exc:
        raise InvalidRateTableError(f"{year}: missing required key {exc}") from exc
    except (TypeError, AttributeError, InvalidOperation) as exc:
        # a section that is null, a scalar, or holds a non-numeric amount
        raise InvalidRateTableError(f"{year}: malformed rate table: {exc!r}") from exc

    _check_rate(year, "NIS employee rate", nis.employee_rate)
    _check_rate(year, "NIS employer rate", nis.employer_rate)
    _check_rate(year, "VAT standard rate", vat.standard_rate)
    for name in ("lower_rate", "upper_rate", "form_rate"):
        _check_rate(year, f"corporate tax {name}", getattr(corporate_tax, name))

    return FiscalYearRates(
        fiscal_year=year,
        currency=str(raw.get("currency", "GYD")),
        minor_unit=minor_unit,
        brackets=brackets,
        nis=nis,
        vat=vat,
        corporate_tax=corporate_tax,
    )


def load_rate_tables(raw: dict[str, Any]) -> dict[str, FiscalYearRates]:
    """Parse and validate fiscal-year tables from their YAML structure.

    Args:
        raw: Mapping of fiscal year label to table definition.

    Returns:
        Dict of fiscal year label to FiscalYearRates.

    Raises:
        InvalidRateTableError: A table is missing keys or breaks an invariant.
    """
    return {str(year): _parse_year(str(year), data) for year, data in raw.items()}


def check_default_year(tables: dict[str, FiscalYearRates], year: str) -> str:
    """Fail at startup if the configured default year has no table."""
    if year not in tables:
        available = ", ".join(sorted(tables))
        raise InvalidRateTableError(
            f"Default fiscal year {year} has no rate table. Available: {available}"
        )
    return year


RATE_TABLES: dict[str, FiscalYearRates] = load_rate_tables(load_yaml_config(settings.rates_file))
logger.info("Loaded rate tables for fiscal years: %s", ", ".join(sorted(RATE_TABLES)))

DEFAULT_FISCAL_YEAR = check_default_year(RATE_TABLES, settings.default_fiscal_year)


def get_rate_table(fiscal_year: str | None = None) -> FiscalYearRates:
    """Return the rate table for a fiscal year, or the default year's table.

    Raises:
        UnknownFiscalYearError: No table is configured for the year.
    """
    year = fiscal_year or DEFAULT_FISCAL_YEAR
    try:
        return RATE_TABLES[year]
    except KeyError as exc:
        available = ", ".join(sorted(RATE_TABLES))
        raise UnknownFiscalYearError(f"Unknown fiscal year: {year}. Available: {available}") from exc
