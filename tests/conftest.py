"""Shared pytest fixtures for finplan tests."""

import tempfile
import os
from datetime import date, datetime, UTC
import pytest
from click.testing import CliRunner

from finplan.database.factories import create_sqlite_store
from finplan.database.memory import InMemoryStore
from finplan.domain.anomaly import AnomalyDetector
from finplan.domain.category import CategoryManager
from finplan.domain.engine import FinancialEngine
from finplan.domain.entities import Account, AccountType, Transaction
from finplan.domain.money import Money

FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


def make_transaction(
    transaction_id: str,
    amount: str,
    day: date = date(2024, 3, 1),
    description: str = "",
    merchant: str | None = None,
    category_id: str | None = None,
    account_id: str = "chequing",
    is_recurring: bool = False,
) -> Transaction:
    """Build a transaction with sensible defaults."""
    return Transaction(
        id=transaction_id,
        account_id=account_id,
        date=day,
        amount=Money.of(amount),
        description=description,
        merchant_name=merchant,
        category_id=category_id,
        is_recurring=is_recurring,
    )


def make_debt(account_id: str, account_type: AccountType, owed: str, rate=None, name=None) -> Account:
    """Build a debt account carrying a negative balance."""
    return Account(
        id=account_id,
        name=name or account_id,
        account_type=account_type,
        balance=-Money.of(owed),
        interest_rate=rate,
    )


@pytest.fixture
def clock():
    """Clock fixed at mid-June 2024."""
    return lambda: FIXED_NOW


@pytest.fixture
def memory_store():
    """Create an empty in-memory store with the built-in seed examples."""
    return InMemoryStore()


@pytest.fixture
def engine(memory_store, clock):
    """Create a FinancialEngine over the in-memory store."""
    return FinancialEngine(memory_store, memory_store, memory_store, memory_store, clock=clock)


@pytest.fixture
def category_manager(memory_store):
    """Create a CategoryManager over the in-memory store."""
    return CategoryManager(memory_store, memory_store)


@pytest.fixture
def anomaly_detector(clock):
    """Create an AnomalyDetector with default settings."""
    return AnomalyDetector(clock=clock)


@pytest.fixture
def temp_db():
    """Create a temporary SQLite store for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    store = create_sqlite_store(database_path=db_path)
    store.connect()
    store.initialize_schema()

    yield store

    # Cleanup
    store.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def cli_runner():
    """Create a click CliRunner."""
    return CliRunner()
