"""Tests for profile assembly and goal tracking."""

from datetime import date
from decimal import Decimal

import pytest

from conftest import make_debt, make_transaction
from finplan.domain.entities import AccountType, FinancialGoal, Jurisdiction
from finplan.domain.errors import ValidationError
from finplan.domain.money import DateRange, Money
from finplan.domain.profile import ProfileBuilder
from finplan.domain.spending import SpendingAnalyzer


@pytest.fixture
def builder(memory_store):
    memory_store.add_account(make_debt("visa", AccountType.CREDIT_CARD, "2000"))
    memory_store.add_transaction(make_transaction("feb", "-40.00", day=date(2024, 2, 10)))
    memory_store.add_transaction(make_transaction("mar", "-60.00", day=date(2024, 3, 10)))
    return ProfileBuilder(memory_store, memory_store, memory_store, SpendingAnalyzer(memory_store))


def test_build_fills_marginal_rate_and_spending(builder):
    """Test that the profile carries stored data and derived figures."""
    profile = builder.build("me", 40, Jurisdiction.ON, Money.of(80000))

    assert profile.marginal_tax_rate == Decimal("29.65")
    assert [a.id for a in profile.debt_accounts] == ["visa"]
    assert len(profile.transactions) == 2
    assert profile.spending_analysis.total_spent == Money.of(100)


def test_build_limits_transactions_to_period(builder):
    """Test that a period narrows transactions and spending analysis."""
    period = DateRange(date(2024, 3, 1), date(2024, 3, 31))

    profile = builder.build("me", 40, Jurisdiction.ON, Money.of(80000), period=period)

    assert [t.id for t in profile.transactions] == ["mar"]
    assert profile.spending_analysis.period == period


def test_zero_income_has_zero_marginal_rate(builder):
    """Test that zero income gets a zero marginal rate."""
    profile = builder.build("me", 40, Jurisdiction.ON, Money.zero())

    assert profile.marginal_tax_rate == Decimal(0)


def test_negative_age_rejected(builder):
    """Test that a negative age is rejected."""
    with pytest.raises(ValidationError):
        builder.build("me", -1, Jurisdiction.ON, Money.of(80000))


class TestGoalProgress:
    """Tests for FinancialGoal progress tracking."""

    def make_goal(self, saved):
        return FinancialGoal(
            id="house",
            title="House",
            target_amount=Money.of(10000),
            current_amount=Money.of(saved),
            target_date=date(2025, 1, 1),
            created_at=date(2024, 1, 1),
        )

    def test_progress(self):
        """Test progress as the saved share of the target."""
        assert self.make_goal(2500).progress == Decimal("0.25")

    def test_lagging_goal_is_off_track(self):
        """Test that saving well behind elapsed time is off track."""
        # Half the period has elapsed
        assert self.make_goal(1000).is_off_track(date(2024, 7, 2))

    def test_goal_within_tolerance_is_on_track(self):
        """Test that a small shortfall is still on track."""
        assert not self.make_goal(4600).is_off_track(date(2024, 7, 2))

    def test_missed_target_date(self):
        """Test that an unfunded goal past its date is off track."""
        assert self.make_goal(9999).is_off_track(date(2025, 2, 1))
        assert not self.make_goal(10000).is_off_track(date(2025, 2, 1))
