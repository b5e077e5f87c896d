"""Assembly of user financial profiles from stored data."""

from decimal import Decimal
from typing import Optional

from finplan.database.base import AccountRepository, GoalRepository, TransactionHistoryProvider
from finplan.domain.entities import (
    Jurisdiction,
    RiskTolerance,
    TimeHorizon,
    UserFinancialProfile,
)
from finplan.domain.errors import ValidationError
from finplan.domain.money import DateRange, Money
from finplan.domain.spending import SpendingAnalyzer
from finplan.domain.tax import TaxCalculator


class ProfileBuilder:
    """Builds a UserFinancialProfile from repositories and caller-supplied facts."""

    def __init__(
        self,
        accounts: AccountRepository,
        goals: GoalRepository,
        history: TransactionHistoryProvider,
        spending_analyzer: SpendingAnalyzer,
        tax_calculator: Optional[TaxCalculator] = None,
    ):
        self.accounts = accounts
        self.goals = goals
        self.history = history
        self.spending_analyzer = spending_analyzer
        self.tax_calculator = tax_calculator or TaxCalculator()

    def build(
        self,
        user_id: str,
        age: int,
        jurisdiction: Jurisdiction,
        gross_annual_income: Money,
        risk_tolerance: RiskTolerance = RiskTolerance.MODERATE,
        time_horizon: TimeHorizon = TimeHorizon.MEDIUM,
        period: Optional[DateRange] = None,
        tax_deferred_room: Optional[Money] = None,
        tax_free_room: Optional[Money] = None,
    ) -> UserFinancialProfile:
        """Build a profile.

        Args:
            user_id: Profile owner
            age: Age in years
            jurisdiction: Province or territory of residence
            gross_annual_income: Gross yearly income
            risk_tolerance: Investment risk tolerance
            time_horizon: Planning horizon
            period: Period used for spending analysis; defaults to all history
            tax_deferred_room: Known tax-deferred room, estimated from income if None
            tax_free_room: Known tax-free room, estimated if None

        Returns:
            UserFinancialProfile with spending analysis and marginal rate filled in

        Raises:
            ValidationError: If age is negative
        """
        if age < 0:
            raise ValidationError(f"Age must not be negative, got {age}")

        if period is None:
            transactions = self.history.list_transactions()
        else:
            transactions = self.history.get_transactions_in_range(period.start, period.end)

        marginal_rate: Decimal = self.tax_calculator.marginal_rate(gross_annual_income, jurisdiction)
        return UserFinancialProfile(
            user_id=user_id,
            age=age,
            jurisdiction=jurisdiction,
            gross_annual_income=gross_annual_income,
            accounts=tuple(self.accounts.list_accounts()),
            transactions=tuple(transactions),
            goals=tuple(self.goals.list_goals()),
            risk_tolerance=risk_tolerance,
            time_horizon=time_horizon,
            tax_deferred_room=tax_deferred_room,
            tax_free_room=tax_free_room,
            marginal_tax_rate=marginal_rate if gross_annual_income.is_positive else Decimal(0),
            spending_analysis=self.spending_analyzer.analyze(transactions, period),
        )
