"""Database layer for finplan."""

from finplan.database.base import (
    AccountRepository,
    CategoryRepository,
    GoalRepository,
    TrainingDataProvider,
    TransactionHistoryProvider,
    UserFeedbackRepository,
)
from finplan.database.factories import create_sqlite_store
from finplan.database.memory import InMemoryStore

__all__ = [
    "AccountRepository",
    "CategoryRepository",
    "GoalRepository",
    "InMemoryStore",
    "TrainingDataProvider",
    "TransactionHistoryProvider",
    "UserFeedbackRepository",
    "create_sqlite_store",
]
