"""API routes for the Guyana tax calculators.

Request models reject negative amounts and unknown frequencies before the
calculators run; the calculators themselves assume validated input.
"""

import logging
from decimal import Decimal
from typing import Any, Literal

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import Field

from src.calculators.compliance import calculate_quarterly_tax, generate_gra_tax_form_data
from src.calculators.models import (
    Allowances,
    AnnualNisSummary,
    AnnualPayeLiability,
    CalculationModel,
    GraFormData,
    NisResult,
    PayeResult,
    PayrollResult,
    QuarterlyTaxResult,
    VatRegistrationStatus,
    VatResult,
    VatReturn,
    as_number,
)
from src.calculators.nis import calculate_annual_nis_summary, calculate_nis
from src.calculators.paye import calculate_annual_paye_liability, calculate_paye
from src.calculators.payroll import calculate_payroll
from src.calculators.tax_data import (
    RATE_TABLES,
    FiscalYearRates,
    UnknownFiscalYearError,
    get_rate_table,
)
from src.calculators.vat import calculate_vat, calculate_vat_return, check_vat_registration

logger = logging.getLogger(__name__)

router = APIRouter()

_ZERO = Decimal("0")


# --- Request bodies ---


class FiscalYearRequest(CalculationModel):
    fiscal_year: str | None = None


class EmployeeSalary(CalculationModel):
    """Monthly salary with the allowances that reduce PAYE."""

    monthly_gross_salary: Decimal = Field(ge=0)
    personal_allowances: Decimal = Field(default=_ZERO, ge=0)
    dependent_allowances: Decimal = Field(default=_ZERO, ge=0)
    pension_contributions: Decimal = Field(default=_ZERO, ge=0)
    insurance_premiums: Decimal = Field(default=_ZERO, ge=0)

    def allowances(self) -> Allowances:
        return Allowances(
            personal=self.personal_allowances,
            dependent=self.dependent_allowances,
            pension=self.pension_contributions,
            insurance=self.insurance_premiums,
        )


class VatTransaction(CalculationModel):
    net_amount: Decimal = Field(ge=0)
    category: str = "STANDARD"
    is_export: bool = False
    vat_inclusive: bool = False


class PayeRequest(EmployeeSalary, FiscalYearRequest):
    """Request body for /tax/paye and /tax/payroll."""


class NisRequest(FiscalYearRequest):
    gross_wages: Decimal = Field(ge=0)
    frequency: Literal["weekly", "monthly"]
    employee_only: bool = False


class VatRequest(VatTransaction, FiscalYearRequest):
    """Request body for /tax/vat."""


class VatRegistrationRequest(FiscalYearRequest):
    annual_revenue: Decimal = Field(ge=0)


class QuarterlyTaxRequest(FiscalYearRequest):
    quarterly_revenue: Decimal = Field(ge=0)
    quarterly_expenses: Decimal = Field(ge=0)
    payroll_tax_paid: Decimal = Field(default=_ZERO, ge=0)
    vat_collected: Decimal = Field(default=_ZERO, ge=0)
    vat_paid: Decimal = Field(default=_ZERO, ge=0)


class AnnualPayeRequest(FiscalYearRequest):
    annual_gross_income: Decimal = Field(ge=0)
    allowable_deductions: Decimal = Field(default=_ZERO, ge=0)
    tax_credits: Decimal = Field(default=_ZERO, ge=0)
    previous_tax_paid: Decimal = Field(default=_ZERO, ge=0)


class NisPeriod(CalculationModel):
    gross_wages: Decimal = Field(ge=0)
    frequency: Literal["weekly", "monthly"] = "monthly"


class AnnualNisRequest(FiscalYearRequest):
    periods: list[NisPeriod] = []


class VatReturnRequest(FiscalYearRequest):
    """Sales and purchases for one period; previous_balance may be a credit."""

    sales: list[VatTransaction] = []
    purchases: list[VatTransaction] = []
    previous_balance: Decimal = _ZERO


class GraFormRequest(FiscalYearRequest):
    """Raw employee salaries and sales; calculated before aggregation."""

    client_id: str = Field(min_length=1)
    period: str = Field(min_length=1)
    business_revenue: Decimal = Field(ge=0)
    business_expenses: Decimal = Field(ge=0)
    employees: list[EmployeeSalary] = []
    vat_transactions: list[VatTransaction] = []


# --- Helpers ---


def _unknown_year(exc: UnknownFiscalYearError) -> JSONResponse:
    message = exc.args[0]
    logger.warning("Rejected request: %s", message)
    return JSONResponse({"error": message}, status_code=404)


def _rates_payload(rates: FiscalYearRates) -> dict[str, Any]:
    corporate = rates.corporate_tax
    return {
        "fiscalYear": rates.fiscal_year,
        "currency": rates.currency,
        "minorUnit": as_number(rates.minor_unit),
        "payeBrackets": [
            {
                "lower": as_number(b.lower),
                "upper": as_number(b.upper) if b.upper is not None else None,
                "rate": as_number(b.rate),
            }
            for b in rates.brackets
        ],
        "nis": {
            "employeeRate": as_number(rates.nis.employee_rate),
            "employerRate": as_number(rates.nis.employer_rate),
            "weeklyCeiling": as_number(rates.nis.weekly_ceiling),
            "monthlyCeiling": as_number(rates.nis.monthly_ceiling),
        },
        "vat": {
            "standardRate": as_number(rates.vat.standard_rate),
            "registrationThreshold": as_number(rates.vat.registration_threshold),
            "zeroRatedCategories": sorted(rates.vat.zero_rated_categories),
            "exemptCategories": sorted(rates.vat.exempt_categories),
        },
        "corporateTax": {
            "threshold": as_number(corporate.threshold),
            "lowerRate": as_number(corporate.lower_rate),
            "upperRate": as_number(corporate.upper_rate),
            "formRate": as_number(corporate.form_rate),
        },
    }


# --- Routes ---


@router.get("/health")
async def health() -> dict[str, object]:
    """Health check listing the configured fiscal years."""
    return {"status": "ok", "fiscal_years": sorted(RATE_TABLES)}


@router.get("/tax/rates/{fiscal_year}")
async def rates(fiscal_year: str) -> Any:
    """Return the rate table for a fiscal year."""
    try:
        table = get_rate_table(fiscal_year)
    except UnknownFiscalYearError as exc:
        return _unknown_year(exc)
    return _rates_payload(table)


@router.post("/tax/paye", response_model=PayeResult)
async def paye(body: PayeRequest) -> Any:
    """Calculate monthly PAYE."""
    try:
        table = get_rate_table(body.fiscal_year)
    except UnknownFiscalYearError as exc:
        return _unknown_year(exc)
    return calculate_paye(body.monthly_gross_salary, body.allowances(), table)


@router.post("/tax/paye/annual", response_model=AnnualPayeLiability)
async def paye_annual(body: AnnualPayeRequest) -> Any:
    """Calculate the PAYE still owed for a full year."""
    try:
        table = get_rate_table(body.fiscal_year)
    except UnknownFiscalYearError as exc:
        return _unknown_year(exc)
    return calculate_annual_paye_liability(
        body.annual_gross_income,
        body.allowable_deductions,
        body.tax_credits,
        body.previous_tax_paid,
        table,
    )


@router.post("/tax/nis", response_model=NisResult)
async def nis(body: NisRequest) -> Any:
    """Calculate NIS contributions."""
    try:
        table = get_rate_table(body.fiscal_year)
    except UnknownFiscalYearError as exc:
        return _unknown_year(exc)
    return calculate_nis(body.gross_wages, body.frequency, body.employee_only, table)


@router.post("/tax/nis/annual", response_model=AnnualNisSummary)
async def nis_annual(body: AnnualNisRequest) -> Any:
    """Total a year of pay periods for the NIS annual return."""
    try:
        table = get_rate_table(body.fiscal_year)
    except UnknownFiscalYearError as exc:
        return _unknown_year(exc)
    return calculate_annual_nis_summary(((p.gross_wages, p.frequency) for p in body.periods), table)


@router.post("/tax/vat", response_model=VatResult)
async def vat(body: VatRequest) -> Any:
    """Calculate VAT on one transaction."""
    try:
        table = get_rate_table(body.fiscal_year)
    except UnknownFiscalYearError as exc:
        return _unknown_year(exc)
    return calculate_vat(body.net_amount, body.category, body.is_export, body.vat_inclusive, table)


@router.post("/tax/vat/registration", response_model=VatRegistrationStatus)
async def vat_registration(body: VatRegistrationRequest) -> Any:
    """Check whether annual revenue requires VAT registration."""
    try:
        table = get_rate_table(body.fiscal_year)
    except UnknownFiscalYearError as exc:
        return _unknown_year(exc)
    return check_vat_registration(body.annual_revenue, table)


@router.post("/tax/vat/return", response_model=VatReturn)
async def vat_return(body: VatReturnRequest) -> Any:
    """Net a period's output VAT against its input VAT."""
    try:
        table = get_rate_table(body.fiscal_year)
    except UnknownFiscalYearError as exc:
        return _unknown_year(exc)

    def _calculate(t: VatTransaction) -> VatResult:
        return calculate_vat(t.net_amount, t.category, t.is_export, t.vat_inclusive, table)

    return calculate_vat_return(
        [_calculate(t) for t in body.sales],
        [_calculate(t) for t in body.purchases],
        body.previous_balance,
        table,
    )


@router.post("/tax/payroll", response_model=PayrollResult)
async def payroll(body: PayeRequest) -> Any:
    """Calculate PAYE, NIS, net pay and employer cost for one employee."""
    try:
        table = get_rate_table(body.fiscal_year)
    except UnknownFiscalYearError as exc:
        return _unknown_year(exc)
    return calculate_payroll(body.monthly_gross_salary, body.allowances(), table)


@router.post("/tax/quarterly", response_model=QuarterlyTaxResult)
async def quarterly(body: QuarterlyTaxRequest) -> Any:
    """Estimate a business's quarterly tax obligation."""
    try:
        table = get_rate_table(body.fiscal_year)
    except UnknownFiscalYearError as exc:
        return _unknown_year(exc)
    return calculate_quarterly_tax(
        body.quarterly_revenue,
        body.quarterly_expenses,
        body.payroll_tax_paid,
        body.vat_collected,
        body.vat_paid,
        rates=table,
    )


@router.post("/tax/gra-form", response_model=GraFormData)
async def gra_form(body: GraFormRequest) -> Any:
    """Build GRA return figures from raw salaries and sales."""
    try:
        table = get_rate_table(body.fiscal_year)
    except UnknownFiscalYearError as exc:
        return _unknown_year(exc)

    payrolls = [calculate_payroll(e.monthly_gross_salary, e.allowances(), table) for e in body.employees]
    sales = [
        calculate_vat(t.net_amount, t.category, t.is_export, t.vat_inclusive, table)
        for t in body.vat_transactions
    ]
    return generate_gra_tax_form_data(
        client_id=body.client_id,
        period=body.period,
        payroll_calculations=payrolls,
        business_revenue=body.business_revenue,
        business_expenses=body.business_expenses,
        vat_transactions=sales,
        rates=table,
    )
