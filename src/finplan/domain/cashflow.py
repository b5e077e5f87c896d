"""Cash-flow figures derived from a financial profile."""

from decimal import Decimal

from finplan.domain.entities import AccountType, UserFinancialProfile
from finplan.domain.money import DateRange, Money, money_sum, to_decimal

EMERGENCY_FUND_KEYWORD = "emergency"


def spending_months(profile: UserFinancialProfile) -> Decimal:
    """Length of the observed spending period in months, at least one."""
    if profile.spending_analysis is not None:
        months = profile.spending_analysis.period.duration_in_months
    elif profile.transactions:
        months = DateRange.covering(t.date for t in profile.transactions).duration_in_months
    else:
        months = 1
    return max(to_decimal(months), Decimal(1))


def total_spending(profile: UserFinancialProfile) -> Money:
    currency = profile.gross_annual_income.currency
    if profile.spending_analysis is not None:
        return profile.spending_analysis.total_spent
    return money_sum(
        (t.amount.absolute_value for t in profile.transactions if t.is_debit), currency
    )


def monthly_income(profile: UserFinancialProfile) -> Money:
    return profile.gross_annual_income.divide(12)


def monthly_expenses(profile: UserFinancialProfile) -> Money:
    return total_spending(profile).divide(spending_months(profile))


def monthly_cash_flow(profile: UserFinancialProfile) -> Money:
    """Monthly income minus monthly expenses; may be negative."""
    return monthly_income(profile) - monthly_expenses(profile)


def savings_rate(profile: UserFinancialProfile) -> Decimal:
    income = monthly_income(profile)
    if not income.is_positive:
        return Decimal(0)
    return monthly_cash_flow(profile).ratio(income)


def total_debt(profile: UserFinancialProfile) -> Money:
    currency = profile.gross_annual_income.currency
    return money_sum((a.balance.absolute_value for a in profile.debt_accounts), currency)


def debt_to_income(profile: UserFinancialProfile) -> Decimal:
    if not profile.gross_annual_income.is_positive:
        return Decimal(0)
    return total_debt(profile).ratio(profile.gross_annual_income)


def emergency_fund_balance(profile: UserFinancialProfile) -> Money:
    """Savings held in accounts named as an emergency fund."""
    currency = profile.gross_annual_income.currency
    return money_sum(
        (
            a.balance
            for a in profile.accounts
            if a.account_type == AccountType.SAVINGS
            and EMERGENCY_FUND_KEYWORD in a.name.lower()
            and a.balance.is_positive
        ),
        currency,
    )
