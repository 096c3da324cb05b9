"""VAT calculator: standard, zero-rated and exempt supplies."""

from collections.abc import Iterable
from decimal import Decimal
from typing import NamedTuple

from src.calculators.models import VatItemsSummary, VatRegistrationStatus, VatResult, VatReturn
from src.calculators.money import round_currency, to_decimal
from src.calculators.tax_data import FiscalYearRates, VatConfig, get_rate_table

_ZERO = Decimal("0")
_VOLUNTARY_REGISTRATION_SHARE = Decimal("0.8")


class VatItem(NamedTuple):
    """One line item for calculate_vat_items."""

    amount: Decimal | int
    category: str = "STANDARD"
    is_export: bool = False
    vat_inclusive: bool = False


class VatClassification(NamedTuple):
    is_zero_rated: bool
    is_exempt: bool
    rate: Decimal


def classify(category: str, is_export: bool, vat: VatConfig) -> VatClassification:
    """Resolve the VAT rate for a category.

    Zero-rating is checked first, so a category listed as both zero-rated
    and exempt is reported as zero-rated only. Categories in neither list
    fall through to the standard rate.
    """
    if is_export or category in vat.zero_rated_categories:
        return VatClassification(is_zero_rated=True, is_exempt=False, rate=_ZERO)
    if category in vat.exempt_categories:
        return VatClassification(is_zero_rated=False, is_exempt=True, rate=_ZERO)
    return VatClassification(is_zero_rated=False, is_exempt=False, rate=vat.standard_rate)


def calculate_vat(
    net_amount: Decimal | int,
    category: str = "STANDARD",
    is_export: bool = False,
    vat_inclusive: bool = False,
    rates: FiscalYearRates | None = None,
) -> VatResult:
    """Calculate VAT on a single transaction.

    Args:
        net_amount: The net amount, or the gross amount when vat_inclusive.
        category: Supply category, e.g. "STANDARD" or "BASIC_FOOD_ITEMS".
        is_export: Exports are zero-rated regardless of category.
        vat_inclusive: Extract VAT from the amount instead of adding it.
        rates: Fiscal-year table; defaults to the configured year.

    Returns:
        VatResult with net, VAT and gross amounts each rounded on their own.
    """
    rates = rates or get_rate_table()
    amount = to_decimal(net_amount)
    classification = classify(category, is_export, rates.vat)
    vat_rate = classification.rate

    if vat_inclusive:
        gross = amount
        net = amount / (1 + vat_rate)
        vat_amount = gross - net
    else:
        net = amount
        vat_amount = amount * vat_rate
        gross = amount + vat_amount

    return VatResult(
        net_amount=round_currency(net, rates.minor_unit),
        vat_amount=round_currency(vat_amount, rates.minor_unit),
        gross_amount=round_currency(gross, rates.minor_unit),
        vat_rate=vat_rate,
        category=category,
        is_exempt=classification.is_exempt,
        is_zero_rated=classification.is_zero_rated,
        fiscal_year=rates.fiscal_year,
    )


def vat_registration_required(annual_revenue: Decimal | int, rates: FiscalYearRates | None = None) -> bool:
    rates = rates or get_rate_table()
    return to_decimal(annual_revenue) >= rates.vat.registration_threshold


def check_vat_registration(
    annual_revenue: Decimal | int,
    rates: FiscalYearRates | None = None,
) -> VatRegistrationStatus:
    """Registration status with a recommendation for the business owner."""
    rates = rates or get_rate_table()
    revenue = to_decimal(annual_revenue)
    threshold = rates.vat.registration_threshold
    required = revenue >= threshold

    if required:
        recommendation = "Must register for VAT immediately. Registration is mandatory."
    elif revenue >= threshold * _VOLUNTARY_REGISTRATION_SHARE:
        recommendation = "Consider voluntary VAT registration as you are approaching the threshold."
    else:
        recommendation = "VAT registration not required at current turnover level."

    return VatRegistrationStatus(
        requires_registration=required,
        annual_revenue=revenue,
        threshold=threshold,
        excess_amount=max(_ZERO, revenue - threshold),
        recommendation=recommendation,
    )


def calculate_vat_items(
    items: Iterable[VatItem],
    rates: FiscalYearRates | None = None,
) -> VatItemsSummary:
    """Calculate VAT per line item and total the rounded results."""
    rates = rates or get_rate_table()
    results = tuple(
        calculate_vat(item.amount, item.category, item.is_export, item.vat_inclusive, rates)
        for item in items
    )

    standard_vat = _ZERO
    zero_rated = _ZERO
    exempt = _ZERO
    for result in results:
        if result.is_zero_rated:
            zero_rated += result.net_amount
        elif result.is_exempt:
            exempt += result.net_amount
        else:
            standard_vat += result.vat_amount

    return VatItemsSummary(
        items=results,
        gross_total=sum((r.gross_amount for r in results), _ZERO),
        net_total=sum((r.net_amount for r in results), _ZERO),
        vat_total=sum((r.vat_amount for r in results), _ZERO),
        standard_rated_vat=standard_vat,
        zero_rated_amount=zero_rated,
        exempt_amount=exempt,
    )


def calculate_vat_return(
    sales: Iterable[VatResult],
    purchases: Iterable[VatResult] = (),
    previous_balance: Decimal | int = 0,
    rates: FiscalYearRates | None = None,
) -> VatReturn:
    """Net output VAT against input VAT for a filing period.

    Sales include exports, which contribute turnover but no output VAT.
    Purchases include imports. A positive previous_balance is VAT carried
    forward as owed; a negative one is a credit from the last period. When
    net VAT is negative the period is a refund and nothing is due.

    Late-filing penalties depend on the filing date and are left to the
    caller.

    Args:
        sales: VAT results for the period's sales and exports.
        purchases: VAT results for the period's purchases and imports.
        previous_balance: Balance carried from the previous period.
        rates: Fiscal-year table; defaults to the configured year.
    """
    rates = rates or get_rate_table()
    sold = tuple(sales)
    bought = tuple(purchases)
    balance = round_currency(to_decimal(previous_balance), rates.minor_unit)

    output_vat = sum((s.vat_amount for s in sold), _ZERO)
    input_vat = sum((p.vat_amount for p in bought), _ZERO)
    net_vat = output_vat - input_vat + balance

    return VatReturn(
        output_vat=output_vat,
        input_vat=input_vat,
        previous_balance=balance,
        net_vat=net_vat,
        turnover=sum((s.net_amount for s in sold), _ZERO),
        purchases=sum((p.net_amount for p in bought), _ZERO),
        sales_count=len(sold),
        purchase_count=len(bought),
        is_refund_due=net_vat < 0,
        total_due=max(_ZERO, net_vat),
        fiscal_year=rates.fiscal_year,
    )
