"""Business-level compliance estimates: quarterly tax and GRA form data."""

import logging
from collections.abc import Sequence
from decimal import Decimal
from typing import Protocol

from src.calculators.models import (
    GraBusinessSummary,
    GraFormattedReturn,
    GraFormData,
    GraPayrollSummary,
    GraVatSummary,
    PayrollResult,
    QuarterlyTaxResult,
    VatResult,
)
from src.calculators.money import round_currency, to_decimal
from src.calculators.tax_data import CorporateTaxConfig, FiscalYearRates, get_rate_table
from src.calculators.vat import vat_registration_required

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_QUARTERS_PER_YEAR = 4


class CorporateTaxPolicy(Protocol):
    """Chooses the corporate tax rate applied to a quarter's profit."""

    def rate_for(self, revenue: Decimal) -> Decimal: ...


class SimplifiedCorporateTaxPolicy:
    """Two-rate estimate keyed on quarterly revenue.

    Not statutory law: real rates depend on business type. Swap in another
    CorporateTaxPolicy for sector-specific estimates.
    """

    def __init__(self, config: CorporateTaxConfig) -> None:
        self._config = config

    def rate_for(self, revenue: Decimal) -> Decimal:
        if revenue >= self._config.threshold:
            return self._config.upper_rate
        return self._config.lower_rate


def calculate_quarterly_tax(
    quarterly_revenue: Decimal | int,
    quarterly_expenses: Decimal | int,
    payroll_tax_paid: Decimal | int = 0,
    vat_collected: Decimal | int = 0,
    vat_paid: Decimal | int = 0,
    rates: FiscalYearRates | None = None,
    policy: CorporateTaxPolicy | None = None,
) -> QuarterlyTaxResult:
    """Estimate a business's tax obligation for one quarter.

    A VAT credit (more paid than collected) is reported in vat_balance but
    does not reduce the quarter's total below the corporate tax.

    Args:
        quarterly_revenue: Revenue for the quarter.
        quarterly_expenses: Deductible expenses for the quarter.
        payroll_tax_paid: PAYE already remitted, reported as-is.
        vat_collected: Output VAT charged on sales.
        vat_paid: Input VAT paid on purchases.
        rates: Fiscal-year table; defaults to the configured year.
        policy: Corporate rate policy; defaults to the simplified two-rate policy.
    """
    rates = rates or get_rate_table()
    policy = policy or SimplifiedCorporateTaxPolicy(rates.corporate_tax)

    revenue = to_decimal(quarterly_revenue)
    expenses = to_decimal(quarterly_expenses)

    rate = policy.rate_for(revenue)
    taxable_profit = max(_ZERO, revenue - expenses)
    corporate_tax = taxable_profit * rate
    vat_balance = to_decimal(vat_collected) - to_decimal(vat_paid)

    return QuarterlyTaxResult(
        revenue=revenue,
        expenses=expenses,
        taxable_profit=taxable_profit,
        corporate_tax=round_currency(corporate_tax, rates.minor_unit),
        corporate_tax_rate=rate,
        vat_balance=round_currency(vat_balance, rates.minor_unit),
        payroll_tax_paid=to_decimal(payroll_tax_paid),
        total_quarterly_tax=round_currency(corporate_tax + max(_ZERO, vat_balance), rates.minor_unit),
    )


def generate_gra_tax_form_data(
    client_id: str,
    period: str,
    payroll_calculations: Sequence[PayrollResult] = (),
    business_revenue: Decimal | int = 0,
    business_expenses: Decimal | int = 0,
    vat_transactions: Sequence[VatResult] = (),
    rates: FiscalYearRates | None = None,
) -> GraFormData:
    """Summarise payroll and VAT results into GRA return figures.

    Only sums; every input result is already rounded. Empty sequences
    produce zero totals.

    Args:
        client_id: Client TIN, echoed as the form's TIN.
        period: Filing period label, e.g. "2025-Q1".
        payroll_calculations: One PayrollResult per employee.
        business_revenue: Revenue for the quarter.
        business_expenses: Expenses for the quarter.
        vat_transactions: VAT results for the quarter's sales.
        rates: Fiscal-year table; defaults to the configured year.
    """
    rates = rates or get_rate_table()
    revenue = to_decimal(business_revenue)
    expenses = to_decimal(business_expenses)
    profit = revenue - expenses

    total_payroll = sum((p.gross for p in payroll_calculations), _ZERO)
    total_paye = sum((p.paye.paye_tax for p in payroll_calculations), _ZERO)
    total_nis_employee = sum((p.nis.employee_contribution for p in payroll_calculations), _ZERO)
    total_nis_employer = sum((p.nis.employer_contribution for p in payroll_calculations), _ZERO)
    total_vat_collected = sum((v.vat_amount for v in vat_transactions if v.vat_amount > 0), _ZERO)

    logger.debug(
        "GRA form %s %s: %d employees, %d VAT transactions",
        client_id,
        period,
        len(payroll_calculations),
        len(vat_transactions),
    )

    return GraFormData(
        client_id=client_id,
        period=period,
        payroll_summary=GraPayrollSummary(
            total_payroll=total_payroll,
            total_employees=len(payroll_calculations),
            total_paye_tax=total_paye,
            total_nis_employee=total_nis_employee,
            total_nis_employer=total_nis_employer,
        ),
        business_summary=GraBusinessSummary(revenue=revenue, expenses=expenses, profit=profit),
        vat_summary=GraVatSummary(
            total_vat_collected=total_vat_collected,
            total_transactions=len(vat_transactions),
            registration_required=vat_registration_required(revenue * _QUARTERS_PER_YEAR, rates),
        ),
        formatted_for_gra=GraFormattedReturn(
            tin=client_id,
            period=period,
            income=revenue,
            deductions=expenses,
            tax_payable=round_currency(max(_ZERO, profit) * rates.corporate_tax.form_rate, rates.minor_unit),
            vat_payable=round_currency(total_vat_collected, rates.minor_unit),
            nis_contributions=round_currency(total_nis_employee + total_nis_employer, rates.minor_unit),
            paye_tax=round_currency(total_paye, rates.minor_unit),
        ),
    )
