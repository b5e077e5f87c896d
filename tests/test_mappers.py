"""Tests for database mappers."""

from datetime import date, datetime, UTC
from decimal import Decimal

from finplan.database.models import (
    Account as ORMAccount,
    Category as ORMCategory,
    Feedback as ORMFeedback,
    Goal as ORMGoal,
    Transaction as ORMTransaction,
)
from finplan.database.mappers import (
    account_to_domain,
    category_to_domain,
    feedback_to_domain,
    goal_to_domain,
    transaction_to_domain,
)
from finplan.domain.entities import AccountType
from finplan.domain.money import Currency, Money


class TestAccountMapper:
    """Tests for Account mapper."""

    def test_account_to_domain(self):
        """Test converting ORM Account to domain Account."""
        orm_account = ORMAccount(
            id="visa",
            name="Visa",
            account_type="credit_card",
            balance_cents=-200000,
            currency="CAD",
            interest_rate=Decimal("19.990"),
            minimum_payment_cents=6000,
        )

        account = account_to_domain(orm_account)

        assert account.id == "visa"
        assert account.account_type == AccountType.CREDIT_CARD
        assert account.balance == Money.of("-2000")
        assert account.interest_rate == Decimal("19.99")
        assert account.minimum_payment == Money.of("60")

    def test_account_without_minimum(self):
        """Test that a missing minimum payment stays None."""
        orm_account = ORMAccount(
            id="chequing",
            name="Chequing",
            account_type="checking",
            balance_cents=250000,
            currency="USD",
        )

        account = account_to_domain(orm_account)

        assert account.minimum_payment is None
        assert account.balance.currency == Currency.USD


def test_category_to_domain_is_custom():
    """Test that stored categories always map to custom categories."""
    category = category_to_domain(
        ORMCategory(id="coffee", name="Coffee", parent_id="food", color="#8B4513", icon=None)
    )

    assert category.is_custom
    assert category.parent_id == "food"
    assert category.color == "#8B4513"


def test_transaction_to_domain():
    """Test converting ORM Transaction to domain Transaction."""
    orm_transaction = ORMTransaction(
        id="t1",
        account_id="chequing",
        date=date(2024, 3, 1),
        amount_cents=-8530,
        currency="CAD",
        description="LOBLAWS 1021",
        merchant_name="Loblaws",
        location="Toronto",
        category_id="groceries",
        is_recurring=False,
    )

    transaction = transaction_to_domain(orm_transaction)

    assert transaction.amount == Money.of("-85.30")
    assert transaction.merchant_name == "Loblaws"
    assert transaction.location == "Toronto"
    assert transaction.category_id == "groceries"
    assert not transaction.is_recurring


def test_feedback_to_domain_restores_utc():
    """Test that naive timestamps read back from SQLite are treated as UTC."""
    feedback = feedback_to_domain(
        ORMFeedback(
            transaction_id="t1",
            category_id="groceries",
            confidence=0.8,
            recorded_at=datetime(2024, 6, 15, 12, 0),
        )
    )

    assert feedback.recorded_at == datetime(2024, 6, 15, 12, 0, tzinfo=UTC)
    assert feedback.confidence == 0.8


def test_goal_to_domain():
    """Test converting ORM Goal to domain FinancialGoal."""
    goal = goal_to_domain(
        ORMGoal(
            id="house",
            title="House",
            target_cents=6000000,
            current_cents=1200000,
            currency="CAD",
            target_date=date(2030, 6, 1),
            created_at=date(2024, 1, 1),
        )
    )

    assert goal.target_amount == Money.of("60000")
    assert goal.current_amount == Money.of("12000")
    assert goal.target_date == date(2030, 6, 1)
