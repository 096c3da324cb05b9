"""Immutable result objects returned by the calculators.

Attributes are snake_case; the JSON contract consumed by the practice
management app is camelCase, so every model aliases its fields and is
dumped with ``by_alias=True``.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from src.calculators.tax_data import NisFrequency


def as_number(value: Decimal) -> int | float:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


# Decimal in Python, a plain JSON number on the wire
Number = Annotated[Decimal, PlainSerializer(as_number, return_type=int | float, when_used="json")]

_ZERO = Decimal("0")


class CalculationModel(BaseModel):
    """Frozen base with camelCase aliases."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Allowances(CalculationModel):
    """Monthly amounts deducted from gross salary before PAYE."""

    personal: Number = Field(default=_ZERO, ge=0)
    dependent: Number = Field(default=_ZERO, ge=0)
    pension: Number = Field(default=_ZERO, ge=0)
    insurance: Number = Field(default=_ZERO, ge=0)

    @property
    def total(self) -> Decimal:
        return self.personal + self.dependent + self.pension + self.insurance


# --- PAYE ---


class PayeBracketTax(CalculationModel):
    """Tax charged within one bracket (unrounded)."""

    bracket: str
    taxable_amount: Number
    rate: Number
    tax: Number


class PayeResult(CalculationModel):
    gross_salary: Number
    total_allowances: Number
    taxable_income: Number
    paye_tax: Number
    net_salary: Number
    breakdown: tuple[PayeBracketTax, ...] = ()
    effective_rate: Number = _ZERO
    marginal_rate: Number = _ZERO
    fiscal_year: str


class AnnualPayeLiability(CalculationModel):
    """Year-end PAYE after tax credits and tax already withheld."""

    annual_gross_income: Number
    allowable_deductions: Number
    annual_taxable_income: Number
    annual_tax: Number
    tax_credits: Number
    previous_tax_paid: Number
    net_tax_owed: Number
    net_annual_income: Number
    breakdown: tuple[PayeBracketTax, ...] = ()
    effective_rate: Number = _ZERO
    marginal_rate: Number = _ZERO
    fiscal_year: str


class TaxSavings(CalculationModel):
    """PAYE before and after claiming an additional allowance."""

    current_tax: Number
    new_tax: Number
    savings: Number
    effective_reduction: Number


# --- NIS ---


class NisResult(CalculationModel):
    gross_wages: Number
    capped_wages: Number
    employee_contribution: Number
    employer_contribution: Number
    total_contribution: Number
    frequency: NisFrequency
    fiscal_year: str


class PayrollNisCost(CalculationModel):
    employee_contribution: Number
    employer_contribution: Number
    total_cost: Number
    employee_net_income: Number


class AnnualNisSummary(CalculationModel):
    """Contribution totals over a year of pay periods."""

    pay_periods: int = 0
    total_gross_wages: Number = _ZERO
    total_insurable_wages: Number = _ZERO
    total_employee_contributions: Number = _ZERO
    total_employer_contributions: Number = _ZERO
    total_contributions: Number = _ZERO
    average_weekly_wages: Number = _ZERO
    periods_exceeding_ceiling: int = 0
    fiscal_year: str


# --- VAT ---


class VatResult(CalculationModel):
    net_amount: Number
    vat_amount: Number
    gross_amount: Number
    vat_rate: Number
    category: str
    is_exempt: bool
    is_zero_rated: bool
    fiscal_year: str


class VatRegistrationStatus(CalculationModel):
    requires_registration: bool
    annual_revenue: Number
    threshold: Number
    excess_amount: Number
    recommendation: str


class VatItemsSummary(CalculationModel):
    """Per-line VAT results with totals over the rounded line amounts."""

    items: tuple[VatResult, ...] = ()
    gross_total: Number = _ZERO
    net_total: Number = _ZERO
    vat_total: Number = _ZERO
    standard_rated_vat: Number = _ZERO
    zero_rated_amount: Number = _ZERO
    exempt_amount: Number = _ZERO


class VatReturn(CalculationModel):
    """Output VAT netted against input VAT for one filing period."""

    output_vat: Number
    input_vat: Number
    previous_balance: Number
    net_vat: Number
    turnover: Number
    purchases: Number
    sales_count: int
    purchase_count: int
    is_refund_due: bool
    total_due: Number
    fiscal_year: str


# --- Payroll ---


class EmployerCosts(CalculationModel):
    salary: Number
    nis_contribution: Number
    total: Number


class PayrollResult(CalculationModel):
    gross: Number
    paye: PayeResult
    nis: NisResult
    total_deductions: Number
    net_pay: Number
    employer_costs: EmployerCosts


# --- Compliance ---


class QuarterlyTaxResult(CalculationModel):
    revenue: Number
    expenses: Number
    taxable_profit: Number
    corporate_tax: Number
    corporate_tax_rate: Number
    vat_balance: Number
    payroll_tax_paid: Number
    total_quarterly_tax: Number


class GraPayrollSummary(CalculationModel):
    total_payroll: Number = _ZERO
    total_employees: int = 0
    total_paye_tax: Number = _ZERO
    total_nis_employee: Number = _ZERO
    total_nis_employer: Number = _ZERO


class GraBusinessSummary(CalculationModel):
    revenue: Number
    expenses: Number
    profit: Number


class GraVatSummary(CalculationModel):
    total_vat_collected: Number = _ZERO
    total_transactions: int = 0
    registration_required: bool = False


class GraFormattedReturn(CalculationModel):
    """Figures laid out the way the GRA e-services portal expects them."""

    tin: str
    period: str
    income: Number
    deductions: Number
    tax_payable: Number
    vat_payable: Number
    nis_contributions: Number
    paye_tax: Number


class GraFormData(CalculationModel):
    client_id: str
    period: str
    payroll_summary: GraPayrollSummary
    business_summary: GraBusinessSummary
    vat_summary: GraVatSummary
    formatted_for_gra: GraFormattedReturn
