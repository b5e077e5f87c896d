"""In-memory implementation of every finplan repository."""

from datetime import date
from typing import Optional

from finplan.database.base import (
    AccountRepository,
    CategoryRepository,
    GoalRepository,
    TrainingDataProvider,
    TransactionHistoryProvider,
    UserFeedbackRepository,
)
from finplan.domain.defaults import DEFAULT_CATEGORIES, DEFAULT_CATEGORY_IDS, seed_training_examples
from finplan.domain.entities import (
    Account,
    Category,
    FinancialGoal,
    TrainingExample,
    Transaction,
    UserFeedback,
)
from finplan.domain.errors import NotFoundError, ValidationError, transaction_not_found


def _by_date(transactions) -> list[Transaction]:
    return sorted(transactions, key=lambda t: (t.date, t.id))


class InMemoryStore(
    TransactionHistoryProvider,
    CategoryRepository,
    UserFeedbackRepository,
    TrainingDataProvider,
    AccountRepository,
    GoalRepository,
):
    """Dictionary-backed store for library use and tests."""

    def __init__(
        self,
        transactions: Optional[list[Transaction]] = None,
        training_examples: Optional[list[TrainingExample]] = None,
    ):
        """Initialize in-memory store.

        Args:
            transactions: Initial transaction history
            training_examples: Seed examples, defaults to the built-in seed set
        """
        self._transactions: dict[str, Transaction] = {}
        self._custom_categories: dict[str, Category] = {}
        self._feedback: list[UserFeedback] = []
        self._accounts: dict[str, Account] = {}
        self._goals: dict[str, FinancialGoal] = {}
        self._training_examples = (
            list(training_examples) if training_examples is not None else seed_training_examples()
        )
        for transaction in transactions or []:
            self.add_transaction(transaction)

    # Transaction operations
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self._transactions.get(transaction_id)

    def list_transactions(self) -> list[Transaction]:
        return _by_date(self._transactions.values())

    def get_transactions_by_category(self, category_id: str) -> list[Transaction]:
        return _by_date(t for t in self._transactions.values() if t.category_id == category_id)

    def get_transactions_in_range(self, start_date: date, end_date: date) -> list[Transaction]:
        return _by_date(
            t for t in self._transactions.values() if start_date <= t.date <= end_date
        )

    def get_transactions_by_merchant(self, merchant_name: str) -> list[Transaction]:
        wanted = merchant_name.strip().lower()
        return _by_date(
            t
            for t in self._transactions.values()
            if t.merchant_name is not None and t.merchant_name.strip().lower() == wanted
        )

    def add_transaction(self, transaction: Transaction) -> None:
        if transaction.id in self._transactions:
            raise ValidationError(f"Transaction '{transaction.id}' already exists")
        self._transactions[transaction.id] = transaction

    def update_transaction(self, transaction: Transaction) -> None:
        if transaction.id not in self._transactions:
            raise NotFoundError(transaction_not_found(transaction.id))
        self._transactions[transaction.id] = transaction

    def count_by_category(self, category_id: str) -> int:
        return sum(1 for t in self._transactions.values() if t.category_id == category_id)

    def reassign_category(self, from_category_id: str, to_category_id: Optional[str]) -> int:
        moved = 0
        for transaction in list(self._transactions.values()):
            if transaction.category_id == from_category_id:
                self._transactions[transaction.id] = transaction.with_category(to_category_id)
                moved += 1
        return moved

    # Category operations
    def list_default_categories(self) -> list[Category]:
        return list(DEFAULT_CATEGORIES)

    def list_custom_categories(self) -> list[Category]:
        return sorted(self._custom_categories.values(), key=lambda c: c.name)

    def get_category(self, category_id: str) -> Optional[Category]:
        for category in DEFAULT_CATEGORIES:
            if category.id == category_id:
                return category
        return self._custom_categories.get(category_id)

    def save_category(self, category: Category) -> None:
        if category.id in DEFAULT_CATEGORY_IDS:
            raise ValidationError(f"Category '{category.id}' is a default category")
        self._custom_categories[category.id] = category

    def delete_category(self, category_id: str) -> None:
        if category_id not in self._custom_categories:
            raise NotFoundError(f"Category '{category_id}' not found")
        del self._custom_categories[category_id]

    # Feedback and training data
    def save_feedback(self, feedback: UserFeedback) -> None:
        self._feedback.append(feedback)

    def list_feedback(self) -> list[UserFeedback]:
        return list(self._feedback)

    def get_training_examples(self) -> list[TrainingExample]:
        return list(self._training_examples)

    # Account and goal operations
    def add_account(self, account: Account) -> None:
        if account.id in self._accounts:
            raise ValidationError(f"Account '{account.id}' already exists")
        self._accounts[account.id] = account

    def get_account(self, account_id: str) -> Optional[Account]:
        return self._accounts.get(account_id)

    def list_accounts(self) -> list[Account]:
        return sorted(self._accounts.values(), key=lambda a: a.name)

    def add_goal(self, goal: FinancialGoal) -> None:
        if goal.id in self._goals:
            raise ValidationError(f"Goal '{goal.id}' already exists")
        self._goals[goal.id] = goal

    def list_goals(self) -> list[FinancialGoal]:
        return sorted(self._goals.values(), key=lambda g: (g.target_date, g.id))
