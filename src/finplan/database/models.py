"""SQLAlchemy models for finplan database."""

from datetime import datetime, UTC
from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Account(Base):
    """Financial account model. Amounts are stored in cents."""

    __tablename__ = "accounts"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    account_type = Column(String, nullable=False)
    balance_cents = Column(BigInteger, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="CAD")
    interest_rate = Column(Numeric(6, 3), nullable=True)
    minimum_payment_cents = Column(BigInteger, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="account", cascade="all, delete-orphan")


class Category(Base):
    """Custom category model. Default categories are not stored."""

    __tablename__ = "categories"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    parent_id = Column(String, nullable=True)
    color = Column(String(7), nullable=True)
    icon = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(String, primary_key=True)
    account_id = Column(String, ForeignKey("accounts.id"), nullable=False)
    date = Column(Date, nullable=False, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    currency = Column(String(3), nullable=False, default="CAD")
    description = Column(String, nullable=False, default="")
    merchant_name = Column(String, nullable=True, index=True)
    location = Column(String, nullable=True)
    # Default categories live in code, so no foreign key
    category_id = Column(String, nullable=True, index=True)
    is_recurring = Column(Boolean, default=False, nullable=False)
    imported_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    account = relationship("Account", back_populates="transactions")


class Feedback(Base):
    """Categorization correction model."""

    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(String, nullable=False)
    category_id = Column(String, nullable=False)
    confidence = Column(Float, nullable=False)
    recorded_at = Column(DateTime, nullable=False)


class Goal(Base):
    """Savings goal model."""

    __tablename__ = "goals"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    target_cents = Column(BigInteger, nullable=False)
    current_cents = Column(BigInteger, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="CAD")
    target_date = Column(Date, nullable=False)
    created_at = Column(Date, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
