"""Mapper functions to convert between domain models and SQLAlchemy models.

Money is stored as integer cents plus a currency code; rates as Numeric.
"""

from datetime import datetime, UTC

from finplan.domain import entities as domain
from finplan.domain.money import Currency, Money
from finplan.database.models import (
    Account as ORMAccount,
    Category as ORMCategory,
    Feedback as ORMFeedback,
    Goal as ORMGoal,
    Transaction as ORMTransaction,
)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    currency = Currency(orm_account.currency)
    minimum = orm_account.minimum_payment_cents
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        account_type=domain.AccountType(orm_account.account_type),
        balance=Money(orm_account.balance_cents, currency),
        interest_rate=orm_account.interest_rate,
        minimum_payment=Money(minimum, currency) if minimum is not None else None,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        parent_id=orm_category.parent_id,
        color=orm_category.color,
        icon=orm_category.icon,
        is_custom=True,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        date=orm_transaction.date,
        amount=Money(orm_transaction.amount_cents, Currency(orm_transaction.currency)),
        description=orm_transaction.description,
        merchant_name=orm_transaction.merchant_name,
        location=orm_transaction.location,
        category_id=orm_transaction.category_id,
        is_recurring=orm_transaction.is_recurring,
    )


def feedback_to_domain(orm_feedback: ORMFeedback) -> domain.UserFeedback:
    """Convert SQLAlchemy Feedback model to domain UserFeedback entity."""
    return domain.UserFeedback(
        transaction_id=orm_feedback.transaction_id,
        category_id=orm_feedback.category_id,
        confidence=orm_feedback.confidence,
        recorded_at=_as_utc(orm_feedback.recorded_at),
    )


def goal_to_domain(orm_goal: ORMGoal) -> domain.FinancialGoal:
    """Convert SQLAlchemy Goal model to domain FinancialGoal entity."""
    currency = Currency(orm_goal.currency)
    return domain.FinancialGoal(
        id=orm_goal.id,
        title=orm_goal.title,
        target_amount=Money(orm_goal.target_cents, currency),
        current_amount=Money(orm_goal.current_cents, currency),
        target_date=orm_goal.target_date,
        created_at=orm_goal.created_at,
    )
