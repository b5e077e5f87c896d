"""Income tax calculation."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from finplan.domain.config import TaxBracket, TaxTables
from finplan.domain.entities import Jurisdiction, TaxBreakdown
from finplan.domain.money import CENTS, Money


def bracket_tax(income: Decimal, brackets: tuple[TaxBracket, ...]) -> Decimal:
    """Tax owed on income under a progressive bracket table.

    Published base amounts can sit slightly below the tax owed at the top of
    the previous tier. Tax is held at that level until the higher tier
    catches up, so more income never means less tax.
    """
    if income <= 0:
        return Decimal(0)
    floor = Decimal(0)
    for bracket in brackets:
        if bracket.contains(income):
            return max(bracket.tax_at(income), floor)
        floor = max(floor, bracket.tax_at(bracket.upper_bound))
    return max(brackets[-1].tax_at(income), floor)


class TaxCalculator:
    """Computes federal, provincial and payroll deductions for an income."""

    def __init__(self, tables: Optional[TaxTables] = None):
        """Initialize tax calculator.

        Args:
            tables: Bracket and payroll tables, defaults to the current year
        """
        self.tables = tables or TaxTables()

    def calculate_taxes(self, gross_income: Money, jurisdiction: Jurisdiction) -> TaxBreakdown:
        """Calculate a full tax breakdown.

        Every component is rounded to cents before summing and after-tax
        income is derived by subtraction, so after_tax_income + total_tax
        equals gross_income exactly.

        Args:
            gross_income: Gross annual income
            jurisdiction: Province or territory of residence

        Returns:
            TaxBreakdown with zero tax for non-positive income
        """
        currency = gross_income.currency
        income = gross_income.amount if gross_income.is_positive else Decimal(0)

        federal = Money.of(bracket_tax(income, self.tables.federal), currency)
        provincial = Money.of(
            bracket_tax(income, self.tables.brackets_for(jurisdiction)), currency
        )
        pension = Money.of(
            min(income * self.tables.pension_rate, self.tables.pension_max), currency
        )
        insurance = Money.of(
            min(income * self.tables.insurance_rate, self.tables.insurance_max), currency
        )
        total = federal + provincial + pension + insurance

        if income == 0:
            marginal_rate = average_rate = Decimal(0)
        else:
            marginal_rate = self.marginal_rate(gross_income, jurisdiction)
            average_rate = (
                Decimal(total.cents) / Decimal(gross_income.cents) * 100
            ).quantize(CENTS, rounding=ROUND_HALF_UP)

        return TaxBreakdown(
            gross_income=gross_income,
            jurisdiction=jurisdiction,
            federal_tax=federal,
            provincial_tax=provincial,
            pension_contribution=pension,
            insurance_premium=insurance,
            total_tax=total,
            after_tax_income=gross_income - total,
            marginal_rate=marginal_rate,
            average_rate=average_rate,
        )

    def marginal_rate(self, gross_income: Money, jurisdiction: Jurisdiction) -> Decimal:
        """Combined marginal rate (percent) read from the jurisdiction's table."""
        income = gross_income.amount
        tiers = self.tables.marginal_rates_for(jurisdiction)
        for tier in tiers:
            if tier.upper_bound is None or income <= tier.upper_bound:
                return tier.rate
        return tiers[-1].rate
