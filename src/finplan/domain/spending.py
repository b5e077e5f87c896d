"""Spending analysis domain service."""

from collections import defaultdict
from decimal import Decimal
from typing import Optional, Sequence

from finplan.database.base import CategoryRepository
from finplan.domain.defaults import UNCATEGORIZED_ID
from finplan.domain.entities import (
    CategorySpending,
    SpendingAnalysis,
    Transaction,
    TrendDirection,
)
from finplan.domain.money import DateRange, Money, money_sum

TREND_TOLERANCE = Decimal("0.10")


class SpendingAnalyzer:
    """Service for building spending breakdowns by top-level category."""

    def __init__(self, categories: CategoryRepository):
        """Initialize spending analyzer.

        Args:
            categories: Category repository used to resolve names and parents
        """
        self.categories = categories

    def get_top_level_category_id(self, category_id: Optional[str]) -> str:
        """Resolve a category to its top-level ancestor."""
        if category_id is None:
            return UNCATEGORIZED_ID
        category = self.categories.get_category(category_id)
        if category is None:
            return UNCATEGORIZED_ID
        if category.parent_id is not None and self.categories.get_category(category.parent_id):
            return category.parent_id
        return category.id

    def group_transactions_by_category(
        self, transactions: Sequence[Transaction]
    ) -> dict[str, list[Transaction]]:
        grouped: dict[str, list[Transaction]] = defaultdict(list)
        for transaction in transactions:
            grouped[self.get_top_level_category_id(transaction.category_id)].append(transaction)
        return grouped

    def group_transactions_by_month(
        self, transactions: Sequence[Transaction]
    ) -> dict[str, list[Transaction]]:
        grouped: dict[str, list[Transaction]] = defaultdict(list)
        for transaction in transactions:
            grouped[transaction.date.strftime("%Y-%m")].append(transaction)
        return grouped

    @staticmethod
    def detect_trend(transactions: Sequence[Transaction], period: DateRange) -> TrendDirection:
        """Compare spending in the second half of the period with the first half."""
        first_half, second_half = period.split()
        if first_half == second_half:
            return TrendDirection.STABLE
        first = sum(abs(t.amount.cents) for t in transactions if first_half.contains(t.date))
        second = sum(abs(t.amount.cents) for t in transactions if second_half.contains(t.date))
        if first == 0:
            return TrendDirection.INCREASING if second > 0 else TrendDirection.STABLE
        change = (Decimal(second) - Decimal(first)) / Decimal(first)
        if change > TREND_TOLERANCE:
            return TrendDirection.INCREASING
        if change < -TREND_TOLERANCE:
            return TrendDirection.DECREASING
        return TrendDirection.STABLE

    def analyze(
        self, transactions: Sequence[Transaction], period: Optional[DateRange] = None
    ) -> Optional[SpendingAnalysis]:
        """Build a spending analysis.

        Args:
            transactions: Transactions to analyze
            period: Period to analyze; defaults to the span of the transactions

        Returns:
            SpendingAnalysis, or None when there are no transactions and no period
        """
        if period is None:
            if not transactions:
                return None
            period = DateRange.covering(t.date for t in transactions)
        in_period = [t for t in transactions if period.contains(t.date)]
        debits = [t for t in in_period if t.is_debit]
        total_spent = money_sum(t.amount.absolute_value for t in debits)
        total_income = money_sum(t.amount for t in in_period if t.amount.is_positive)

        breakdown = []
        for category_id, group in self.group_transactions_by_category(debits).items():
            total = money_sum(t.amount.absolute_value for t in group)
            category = self.categories.get_category(category_id)
            share = float(total.ratio(total_spent) * 100) if total_spent.is_positive else 0.0
            breakdown.append(
                CategorySpending(
                    category_id=category_id,
                    category_name=category.name if category else category_id,
                    total_amount=total,
                    transaction_count=len(group),
                    average_amount=total.divide(len(group)) if group else Money.zero(),
                    percentage_of_total=share,
                    trend=self.detect_trend(group, period),
                )
            )
        breakdown.sort(key=lambda c: (-c.total_amount.cents, c.category_id))

        return SpendingAnalysis(
            period=period,
            total_spent=total_spent,
            total_income=total_income,
            categories=tuple(breakdown),
        )
