"""Report the configured fiscal-year rate tables.

Loading the tables validates them, so this doubles as a check after
editing config/rates.yaml.

Usage:
    python scripts/rates_report.py
    python scripts/rates_report.py --year 2025
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.calculators.tax_data import (
    RATE_TABLES,
    FiscalYearRates,
    UnknownFiscalYearError,
    get_rate_table,
)

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Report Guyana tax rate tables")
    parser.add_argument("--year", help="Report a single fiscal year instead of all")
    return parser.parse_args()


def report(rates: FiscalYearRates) -> None:
    logger.info("Fiscal year %s (%s, minor unit %s)", rates.fiscal_year, rates.currency, rates.minor_unit)
    for bracket in rates.brackets:
        upper = f"{bracket.upper:,}" if bracket.upper is not None else "no cap"
        logger.info("  PAYE %s - %s @ %s%%", f"{bracket.lower:,}", upper, bracket.rate * 100)
    logger.info(
        "  NIS employee %s%% employer %s%%, ceilings weekly %s monthly %s",
        rates.nis.employee_rate * 100,
        rates.nis.employer_rate * 100,
        f"{rates.nis.weekly_ceiling:,}",
        f"{rates.nis.monthly_ceiling:,}",
    )
    logger.info(
        "  VAT %s%%, registration from %s, %d zero-rated and %d exempt categories",
        rates.vat.standard_rate * 100,
        f"{rates.vat.registration_threshold:,}",
        len(rates.vat.zero_rated_categories),
        len(rates.vat.exempt_categories),
    )


def main() -> int:
    args = parse_args()
    if args.year:
        try:
            tables = [get_rate_table(args.year)]
        except UnknownFiscalYearError as exc:
            logger.error("%s", exc.args[0])
            return 1
    else:
        tables = [RATE_TABLES[year] for year in sorted(RATE_TABLES)]

    for rates in tables:
        report(rates)
    return 0


if __name__ == "__main__":
    sys.exit(main())
