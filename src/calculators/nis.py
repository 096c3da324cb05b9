"""NIS (National Insurance Scheme) contribution calculator."""

from collections.abc import Iterable
from decimal import Decimal
from typing import NamedTuple

from src.calculators.models import AnnualNisSummary, NisResult, PayrollNisCost
from src.calculators.money import round_currency, to_decimal
from src.calculators.tax_data import FiscalYearRates, NisFrequency, get_rate_table

_WEEKS_PER_YEAR = 52


class NisPayRecord(NamedTuple):
    """Gross wages for one pay period."""

    gross_wages: Decimal | int
    frequency: NisFrequency = "monthly"


def calculate_nis(
    gross_wages: Decimal | int,
    frequency: NisFrequency = "monthly",
    employee_only: bool = False,
    rates: FiscalYearRates | None = None,
) -> NisResult:
    """Calculate employee and employer NIS contributions.

    Wages above the ceiling for the pay frequency are not insurable. Each
    contribution is rounded from the capped wages on its own, never split
    out of a rounded total.

    Args:
        gross_wages: Gross wages for the pay period (>= 0).
        frequency: "weekly" or "monthly".
        employee_only: Skip the employer portion.
        rates: Fiscal-year table; defaults to the configured year.

    Raises:
        ValueError: Unknown frequency.
    """
    rates = rates or get_rate_table()
    gross = to_decimal(gross_wages)

    capped = min(gross, rates.nis.ceiling_for(frequency))
    employee = round_currency(capped * rates.nis.employee_rate, rates.minor_unit)
    if employee_only:
        employer = Decimal("0")
    else:
        employer = round_currency(capped * rates.nis.employer_rate, rates.minor_unit)

    return NisResult(
        gross_wages=gross,
        capped_wages=capped,
        employee_contribution=employee,
        employer_contribution=employer,
        total_contribution=employee + employer,
        frequency=frequency,
        fiscal_year=rates.fiscal_year,
    )


def calculate_self_employed_nis(
    gross_wages: Decimal | int,
    frequency: NisFrequency = "monthly",
    rates: FiscalYearRates | None = None,
) -> NisResult:
    """NIS for a self-employed person, who pays both portions themselves."""
    result = calculate_nis(gross_wages, frequency, rates=rates)
    combined = result.employee_contribution + result.employer_contribution
    return result.model_copy(
        update={
            "employee_contribution": combined,
            "employer_contribution": Decimal("0"),
            "total_contribution": combined,
        }
    )


def calculate_total_payroll_nis(
    gross_wages: Decimal | int,
    frequency: NisFrequency = "monthly",
    rates: FiscalYearRates | None = None,
) -> PayrollNisCost:
    """Employer's total NIS cost and the employee's wages after NIS."""
    result = calculate_nis(gross_wages, frequency, rates=rates)
    return PayrollNisCost(
        employee_contribution=result.employee_contribution,
        employer_contribution=result.employer_contribution,
        total_cost=result.total_contribution,
        employee_net_income=result.gross_wages - result.employee_contribution,
    )


def calculate_annual_nis_summary(
    records: Iterable[NisPayRecord | tuple[Decimal | int, NisFrequency]],
    rates: FiscalYearRates | None = None,
) -> AnnualNisSummary:
    """Total a year of pay periods for the NIS annual return.

    Each record is one actual pay period, so the period figures are summed
    as they are rather than annualised. Contributions come from the
    already-rounded per-period results; only the weekly average is rounded
    here. A period counts as exceeding the ceiling when its gross wages are
    above the ceiling for its frequency.

    Args:
        records: (gross_wages, frequency) per pay period; weekly and monthly
            periods may be mixed.
        rates: Fiscal-year table; defaults to the configured year.
    """
    rates = rates or get_rate_table()
    zero = Decimal("0")

    periods = 0
    gross_total = zero
    insurable_total = zero
    employee_total = zero
    employer_total = zero
    exceeding = 0

    for gross_wages, frequency in records:
        result = calculate_nis(gross_wages, frequency, rates=rates)
        periods += 1
        gross_total += result.gross_wages
        insurable_total += result.capped_wages
        employee_total += result.employee_contribution
        employer_total += result.employer_contribution
        if result.gross_wages > result.capped_wages:
            exceeding += 1

    return AnnualNisSummary(
        pay_periods=periods,
        total_gross_wages=gross_total,
        total_insurable_wages=insurable_total,
        total_employee_contributions=employee_total,
        total_employer_contributions=employer_total,
        total_contributions=employee_total + employer_total,
        average_weekly_wages=round_currency(gross_total / _WEEKS_PER_YEAR, rates.minor_unit),
        periods_exceeding_ceiling=exceeding,
        fiscal_year=rates.fiscal_year,
    )
