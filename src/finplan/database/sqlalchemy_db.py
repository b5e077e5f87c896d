"""SQLAlchemy implementation of every finplan repository."""

from typing import Optional
from datetime import date
from sqlalchemy import func
from sqlalchemy.orm import Session

from finplan.database.base import (
    AccountRepository,
    CategoryRepository,
    GoalRepository,
    TrainingDataProvider,
    TransactionHistoryProvider,
    UserFeedbackRepository,
)
from finplan.database.models import (
    Account,
    Category,
    Feedback,
    Goal,
    Transaction,
    create_session_factory,
)
from finplan.database.mappers import (
    account_to_domain,
    category_to_domain,
    feedback_to_domain,
    goal_to_domain,
    transaction_to_domain,
)
from finplan.domain.defaults import DEFAULT_CATEGORIES, DEFAULT_CATEGORY_IDS, seed_training_examples
from finplan.domain.entities import (
    Account as DomainAccount,
    Category as DomainCategory,
    FinancialGoal as DomainGoal,
    TrainingExample,
    Transaction as DomainTransaction,
    UserFeedback as DomainFeedback,
)
from finplan.domain.errors import NotFoundError, ValidationError, transaction_not_found


class SQLAlchemyStore(
    TransactionHistoryProvider,
    CategoryRepository,
    UserFeedbackRepository,
    TrainingDataProvider,
    AccountRepository,
    GoalRepository,
):
    """SQLAlchemy-based implementation of the repository interfaces."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy store.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def connect(self) -> None:
        """Connect to the database."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the database."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        # Schema is created automatically by create_session_factory
        pass

    # Account operations
    def add_account(self, account: DomainAccount) -> None:
        session = self._get_session()
        if session.get(Account, account.id) is not None:
            raise ValidationError(f"Account '{account.id}' already exists")
        session.add(
            Account(
                id=account.id,
                name=account.name,
                account_type=account.account_type.value,
                balance_cents=account.balance.cents,
                currency=account.balance.currency.value,
                interest_rate=account.interest_rate,
                minimum_payment_cents=(
                    account.minimum_payment.cents if account.minimum_payment is not None else None
                ),
            )
        )
        session.commit()

    def get_account(self, account_id: str) -> Optional[DomainAccount]:
        session = self._get_session()
        account = session.query(Account).filter(Account.id == account_id).first()
        if account is None:
            return None
        return account_to_domain(account)

    def list_accounts(self) -> list[DomainAccount]:
        session = self._get_session()
        accounts = session.query(Account).order_by(Account.name).all()
        return [account_to_domain(acc) for acc in accounts]

    # Category operations
    def list_default_categories(self) -> list[DomainCategory]:
        return list(DEFAULT_CATEGORIES)

    def list_custom_categories(self) -> list[DomainCategory]:
        session = self._get_session()
        categories = session.query(Category).order_by(Category.name).all()
        return [category_to_domain(cat) for cat in categories]

    def get_category(self, category_id: str) -> Optional[DomainCategory]:
        for category in DEFAULT_CATEGORIES:
            if category.id == category_id:
                return category
        session = self._get_session()
        cat = session.query(Category).filter(Category.id == category_id).first()
        if cat is None:
            return None
        return category_to_domain(cat)

    def save_category(self, category: DomainCategory) -> None:
        if category.id in DEFAULT_CATEGORY_IDS:
            raise ValidationError(f"Category '{category.id}' is a default category")
        session = self._get_session()
        cat = session.query(Category).filter(Category.id == category.id).first()
        if cat is None:
            cat = Category(id=category.id)
            session.add(cat)
        cat.name = category.name
        cat.parent_id = category.parent_id
        cat.color = category.color
        cat.icon = category.icon
        session.commit()

    def delete_category(self, category_id: str) -> None:
        session = self._get_session()
        cat = session.query(Category).filter(Category.id == category_id).first()
        if cat is None:
            raise NotFoundError(f"Category '{category_id}' not found")
        session.delete(cat)
        session.commit()

    # Transaction operations
    def add_transaction(self, transaction: DomainTransaction) -> None:
        session = self._get_session()
        if session.get(Transaction, transaction.id) is not None:
            raise ValidationError(f"Transaction '{transaction.id}' already exists")
        txn = Transaction(id=transaction.id)
        self._apply(txn, transaction)
        session.add(txn)
        session.commit()

    def update_transaction(self, transaction: DomainTransaction) -> None:
        session = self._get_session()
        txn = session.query(Transaction).filter(Transaction.id == transaction.id).first()
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction.id))
        self._apply(txn, transaction)
        session.commit()

    @staticmethod
    def _apply(txn: Transaction, transaction: DomainTransaction) -> None:
        txn.account_id = transaction.account_id
        txn.date = transaction.date
        txn.amount_cents = transaction.amount.cents
        txn.currency = transaction.amount.currency.value
        txn.description = transaction.description
        txn.merchant_name = transaction.merchant_name
        txn.location = transaction.location
        txn.category_id = transaction.category_id
        txn.is_recurring = transaction.is_recurring

    def get_transaction(self, transaction_id: str) -> Optional[DomainTransaction]:
        session = self._get_session()
        txn = session.query(Transaction).filter(Transaction.id == transaction_id).first()
        if txn is None:
            return None
        return transaction_to_domain(txn)

    def list_transactions(self) -> list[DomainTransaction]:
        session = self._get_session()
        transactions = session.query(Transaction).order_by(Transaction.date, Transaction.id).all()
        return [transaction_to_domain(txn) for txn in transactions]

    def get_transactions_by_category(self, category_id: str) -> list[DomainTransaction]:
        session = self._get_session()
        transactions = (
            session.query(Transaction)
            .filter(Transaction.category_id == category_id)
            .order_by(Transaction.date, Transaction.id)
            .all()
        )
        return [transaction_to_domain(txn) for txn in transactions]

    def get_transactions_in_range(self, start_date: date, end_date: date) -> list[DomainTransaction]:
        session = self._get_session()
        transactions = (
            session.query(Transaction)
            .filter(Transaction.date >= start_date, Transaction.date <= end_date)
            .order_by(Transaction.date, Transaction.id)
            .all()
        )
        return [transaction_to_domain(txn) for txn in transactions]

    def get_transactions_by_merchant(self, merchant_name: str) -> list[DomainTransaction]:
        session = self._get_session()
        transactions = (
            session.query(Transaction)
            .filter(func.lower(Transaction.merchant_name) == merchant_name.strip().lower())
            .order_by(Transaction.date, Transaction.id)
            .all()
        )
        return [transaction_to_domain(txn) for txn in transactions]

    def count_by_category(self, category_id: str) -> int:
        session = self._get_session()
        return session.query(Transaction).filter(Transaction.category_id == category_id).count()

    def reassign_category(self, from_category_id: str, to_category_id: Optional[str]) -> int:
        session = self._get_session()
        moved = (
            session.query(Transaction)
            .filter(Transaction.category_id == from_category_id)
            .update({Transaction.category_id: to_category_id}, synchronize_session=False)
        )
        session.commit()
        return moved

    # Feedback operations
    def save_feedback(self, feedback: DomainFeedback) -> None:
        session = self._get_session()
        session.add(
            Feedback(
                transaction_id=feedback.transaction_id,
                category_id=feedback.category_id,
                confidence=feedback.confidence,
                recorded_at=feedback.recorded_at,
            )
        )
        session.commit()

    def list_feedback(self) -> list[DomainFeedback]:
        session = self._get_session()
        rows = session.query(Feedback).order_by(Feedback.id).all()
        return [feedback_to_domain(row) for row in rows]

    def get_training_examples(self) -> list[TrainingExample]:
        return seed_training_examples()

    # Goal operations
    def add_goal(self, goal: DomainGoal) -> None:
        session = self._get_session()
        if session.get(Goal, goal.id) is not None:
            raise ValidationError(f"Goal '{goal.id}' already exists")
        session.add(
            Goal(
                id=goal.id,
                title=goal.title,
                target_cents=goal.target_amount.cents,
                current_cents=goal.current_amount.cents,
                currency=goal.target_amount.currency.value,
                target_date=goal.target_date,
                created_at=goal.created_at,
            )
        )
        session.commit()

    def list_goals(self) -> list[DomainGoal]:
        session = self._get_session()
        goals = session.query(Goal).order_by(Goal.target_date, Goal.id).all()
        return [goal_to_domain(goal) for goal in goals]
