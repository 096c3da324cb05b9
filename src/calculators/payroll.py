"""Payroll calculator: composites PAYE and monthly NIS for one employee."""

from decimal import Decimal

from src.calculators.models import Allowances, EmployerCosts, PayrollResult
from src.calculators.money import round_currency, to_decimal
from src.calculators.nis import calculate_nis
from src.calculators.paye import calculate_paye
from src.calculators.tax_data import FiscalYearRates, get_rate_table


def calculate_payroll(
    gross_salary: Decimal | int,
    allowances: Allowances | None = None,
    rates: FiscalYearRates | None = None,
) -> PayrollResult:
    """Calculate monthly payroll deductions and employer cost.

    PAYE and NIS are computed independently on the same gross salary;
    allowances reduce PAYE only. Both sub-results are already rounded, so
    combining them adds no further rounding error.

    Args:
        gross_salary: Monthly gross salary (>= 0).
        allowances: PAYE allowances.
        rates: Fiscal-year table; defaults to the configured year.

    Returns:
        PayrollResult with both sub-results, deductions, net pay and employer cost.
    """
    rates = rates or get_rate_table()
    gross = to_decimal(gross_salary)

    paye = calculate_paye(gross, allowances, rates)
    nis = calculate_nis(gross, "monthly", rates=rates)

    total_deductions = paye.paye_tax + nis.employee_contribution

    return PayrollResult(
        gross=gross,
        paye=paye,
        nis=nis,
        total_deductions=total_deductions,
        net_pay=round_currency(gross - total_deductions, rates.minor_unit),
        employer_costs=EmployerCosts(
            salary=gross,
            nis_contribution=nis.employer_contribution,
            total=gross + nis.employer_contribution,
        ),
    )
