"""Database factory functions for creating store instances."""

import os
from pathlib import Path
from typing import Optional

from finplan.database.sqlalchemy_db import SQLAlchemyStore


def create_sqlite_store(database_path: Optional[str] = None) -> SQLAlchemyStore:
    """Create a SQLite-backed store.

    Args:
        database_path: Path to SQLite database file. If None, checks FINPLAN_DB_PATH
            environment variable, then defaults to ~/.finplan/finplan.db

    Returns:
        SQLAlchemyStore instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("FINPLAN_DB_PATH")

    if database_path is None:
        # Default to ~/.finplan/finplan.db
        home = Path.home()
        db_dir = home / ".finplan"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "finplan.db")

    database_url = f"sqlite:///{database_path}"
    store = SQLAlchemyStore(database_url)
    store.database_path = database_path
    return store
