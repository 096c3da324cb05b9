"""PAYE income tax calculator: bracket-by-bracket breakdown on monthly salary."""

from collections.abc import Sequence
from decimal import Decimal

from src.calculators.models import (
    Allowances,
    AnnualPayeLiability,
    PayeBracketTax,
    PayeResult,
    TaxSavings,
)
from src.calculators.money import round_currency, to_decimal
from src.calculators.tax_data import FiscalYearRates, TaxBracket, get_rate_table

_ZERO = Decimal("0")
_RATE_PLACES = Decimal("0.0001")
_MONTHS_PER_YEAR = 12


def _bracket_label(bracket: TaxBracket, currency: str) -> str:
    if bracket.upper is None:
        return f"Over {currency} {bracket.lower:,}"
    return f"{currency} {bracket.lower:,} - {bracket.upper:,}"


def marginal_rate(taxable_income: Decimal, brackets: Sequence[TaxBracket]) -> Decimal:
    """Rate applied to the next unit of income.

    A boundary amount belongs to the lower bracket, matching the tax walk.
    """
    for bracket in brackets:
        if bracket.upper is None or taxable_income <= bracket.upper:
            return bracket.rate
    return brackets[-1].rate


def _tax_from_brackets(
    taxable_income: Decimal,
    brackets: Sequence[TaxBracket],
    currency: str,
) -> tuple[Decimal, tuple[PayeBracketTax, ...]]:
    """Unrounded tax and per-bracket breakdown for a taxable amount."""
    breakdown: list[PayeBracketTax] = []
    total_tax = _ZERO

    for bracket in brackets:
        if taxable_income <= bracket.lower:
            break

        above_lower = taxable_income - bracket.lower
        if bracket.upper is None:
            taxable = above_lower
        else:
            taxable = min(above_lower, bracket.upper - bracket.lower)

        if taxable <= 0:
            break

        tax = taxable * bracket.rate
        total_tax += tax
        breakdown.append(
            PayeBracketTax(
                bracket=_bracket_label(bracket, currency),
                taxable_amount=taxable,
                rate=bracket.rate,
                tax=tax,
            )
        )

    return total_tax, tuple(breakdown)


def annual_brackets(brackets: Sequence[TaxBracket]) -> tuple[TaxBracket, ...]:
    """Scale monthly brackets to a full year."""
    return tuple(
        TaxBracket(
            lower=b.lower * _MONTHS_PER_YEAR,
            upper=b.upper * _MONTHS_PER_YEAR if b.upper is not None else None,
            rate=b.rate,
        )
        for b in brackets
    )


def calculate_paye(
    gross_salary: Decimal | int,
    allowances: Allowances | None = None,
    rates: FiscalYearRates | None = None,
) -> PayeResult:
    """Calculate monthly PAYE with a per-bracket breakdown.

    Tax is summed unrounded across brackets and rounded once at the end.
    Allowances larger than the salary clamp taxable income to zero.

    Only computed amounts (paye_tax, net_salary) are rounded to the minor
    unit. gross_salary, total_allowances, taxable_income and the breakdown
    pass the caller's amounts through unchanged, so whole-unit input gives
    whole-unit output and fractional input is echoed as given.

    Args:
        gross_salary: Monthly gross salary (>= 0).
        allowances: Personal, dependent, pension and insurance allowances.
        rates: Fiscal-year table; defaults to the configured year.

    Returns:
        PayeResult with taxable income, rounded tax, net salary and breakdown.
    """
    rates = rates or get_rate_table()
    allowances = allowances or Allowances()
    gross = to_decimal(gross_salary)

    total_allowances = allowances.total
    taxable_income = max(_ZERO, gross - total_allowances)

    total_tax, breakdown = _tax_from_brackets(taxable_income, rates.brackets, rates.currency)
    paye_tax = round_currency(total_tax, rates.minor_unit)
    effective = (paye_tax / taxable_income).quantize(_RATE_PLACES) if taxable_income > 0 else _ZERO

    return PayeResult(
        gross_salary=gross,
        total_allowances=total_allowances,
        taxable_income=taxable_income,
        paye_tax=paye_tax,
        net_salary=round_currency(gross - paye_tax, rates.minor_unit),
        breakdown=breakdown,
        effective_rate=effective,
        marginal_rate=marginal_rate(taxable_income, rates.brackets),
        fiscal_year=rates.fiscal_year,
    )


def calculate_tax_savings(
    gross_salary: Decimal | int,
    current_allowances: Allowances | None = None,
    additional_allowance: Decimal | int = 0,
    rates: FiscalYearRates | None = None,
) -> TaxSavings:
    """PAYE saved by claiming an additional allowance.

    The extra amount is added to the personal allowance; any of the four
    components would give the same result since only the total is taxed.
    """
    current_allowances = current_allowances or Allowances()
    extra = to_decimal(additional_allowance)

    current = calculate_paye(gross_salary, current_allowances, rates)
    claimed = current_allowances.model_copy(update={"personal": current_allowances.personal + extra})
    new = calculate_paye(gross_salary, claimed, rates)

    savings = current.paye_tax - new.paye_tax
    reduction = (savings / extra).quantize(_RATE_PLACES) if extra > 0 else _ZERO

    return TaxSavings(
        current_tax=current.paye_tax,
        new_tax=new.paye_tax,
        savings=savings,
        effective_reduction=reduction,
    )


def calculate_annual_paye_liability(
    annual_gross_income: Decimal | int,
    allowable_deductions: Decimal | int = 0,
    tax_credits: Decimal | int = 0,
    previous_tax_paid: Decimal | int = 0,
    rates: FiscalYearRates | None = None,
) -> AnnualPayeLiability:
    """PAYE still owed for a full year, for the annual return.

    The monthly brackets are scaled by twelve and the year's tax is rounded
    once. Credits and tax already withheld are subtracted afterwards; the
    amount owed never goes below zero, and an overpayment is not reported
    as a refund here.

    Args:
        annual_gross_income: Gross income for the year (>= 0).
        allowable_deductions: Deductions for the year, applied before tax.
        tax_credits: Credits offset against the year's tax.
        previous_tax_paid: PAYE already withheld during the year.
        rates: Fiscal-year table; defaults to the configured year.
    """
    rates = rates or get_rate_table()
    gross = to_decimal(annual_gross_income)
    deductions = to_decimal(allowable_deductions)
    credits = to_decimal(tax_credits)
    paid = to_decimal(previous_tax_paid)

    brackets = annual_brackets(rates.brackets)
    taxable_income = max(_ZERO, gross - deductions)
    total_tax, breakdown = _tax_from_brackets(taxable_income, brackets, rates.currency)
    annual_tax = round_currency(total_tax, rates.minor_unit)
    net_tax_owed = max(_ZERO, annual_tax - credits - paid)
    effective = (annual_tax / taxable_income).quantize(_RATE_PLACES) if taxable_income > 0 else _ZERO

    return AnnualPayeLiability(
        annual_gross_income=gross,
        allowable_deductions=deductions,
        annual_taxable_income=taxable_income,
        annual_tax=annual_tax,
        tax_credits=credits,
        previous_tax_paid=paid,
        net_tax_owed=round_currency(net_tax_owed, rates.minor_unit),
        net_annual_income=round_currency(gross - net_tax_owed, rates.minor_unit),
        breakdown=breakdown,
        effective_rate=effective,
        marginal_rate=marginal_rate(taxable_income, brackets),
        fiscal_year=rates.fiscal_year,
    )
