"""Abstract repository interfaces the engine reads and writes through."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from finplan.domain.entities import (
    Account,
    Category,
    FinancialGoal,
    TrainingExample,
    Transaction,
    UserFeedback,
)


class TransactionHistoryProvider(ABC):
    """Access to a user's transaction history."""

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(self) -> list[Transaction]:
        """List all transactions ordered by date."""
        pass

    @abstractmethod
    def get_transactions_by_category(self, category_id: str) -> list[Transaction]:
        """List transactions assigned to a category."""
        pass

    @abstractmethod
    def get_transactions_in_range(self, start_date: date, end_date: date) -> list[Transaction]:
        """List transactions dated within the inclusive range."""
        pass

    @abstractmethod
    def get_transactions_by_merchant(self, merchant_name: str) -> list[Transaction]:
        """List transactions for a merchant, matched case-insensitively."""
        pass

    @abstractmethod
    def add_transaction(self, transaction: Transaction) -> None:
        """Store a new transaction."""
        pass

    @abstractmethod
    def update_transaction(self, transaction: Transaction) -> None:
        """Replace a stored transaction with the same ID."""
        pass

    @abstractmethod
    def count_by_category(self, category_id: str) -> int:
        """Count transactions assigned to a category."""
        pass

    @abstractmethod
    def reassign_category(self, from_category_id: str, to_category_id: Optional[str]) -> int:
        """Move every transaction in one category to another. Returns count moved."""
        pass


class CategoryRepository(ABC):
    """Category storage layered over a fixed default set."""

    @abstractmethod
    def list_default_categories(self) -> list[Category]:
        """List the built-in categories."""
        pass

    @abstractmethod
    def list_custom_categories(self) -> list[Category]:
        """List user-created categories."""
        pass

    @abstractmethod
    def get_category(self, category_id: str) -> Optional[Category]:
        """Get a default or custom category by ID."""
        pass

    @abstractmethod
    def save_category(self, category: Category) -> None:
        """Insert or replace a custom category."""
        pass

    @abstractmethod
    def delete_category(self, category_id: str) -> None:
        """Delete a custom category."""
        pass

    def list_categories(self) -> list[Category]:
        """List default categories followed by custom ones."""
        return self.list_default_categories() + self.list_custom_categories()


class UserFeedbackRepository(ABC):
    """Storage for categorization corrections."""

    @abstractmethod
    def save_feedback(self, feedback: UserFeedback) -> None:
        """Record a correction."""
        pass

    @abstractmethod
    def list_feedback(self) -> list[UserFeedback]:
        """List all corrections in the order they were recorded."""
        pass


class TrainingDataProvider(ABC):
    """Source of labelled seed examples."""

    @abstractmethod
    def get_training_examples(self) -> list[TrainingExample]:
        """Return the seed training set."""
        pass


class AccountRepository(ABC):
    @abstractmethod
    def add_account(self, account: Account) -> None:
        pass

    @abstractmethod
    def get_account(self, account_id: str) -> Optional[Account]:
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        pass


class GoalRepository(ABC):
    @abstractmethod
    def add_goal(self, goal: FinancialGoal) -> None:
        pass

    @abstractmethod
    def list_goals(self) -> list[FinancialGoal]:
        pass
