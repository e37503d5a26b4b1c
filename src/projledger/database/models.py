"""SQLAlchemy models for projledger database."""

from datetime import datetime, UTC
from decimal import Decimal
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    TypeDecorator,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Money(TypeDecorator):
    """Decimal amount stored as text so it reloads exactly on every backend."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Account(Base):
    """Chart of accounts model."""

    __tablename__ = "accounts"

    code = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    category = Column(String, nullable=False, default="")
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    entries = relationship("LedgerEntry", back_populates="account")
    cashflow_category = relationship(
        "CashflowCategory", back_populates="account", uselist=False, cascade="all, delete-orphan"
    )


class CashflowCategory(Base):
    """Cashflow classification of an account."""

    __tablename__ = "cashflow_categories"

    id = Column(Integer, primary_key=True)
    account_code = Column(String, ForeignKey("accounts.code"), unique=True, nullable=False)
    category = Column(String, nullable=False)
    subcategory = Column(String, nullable=True)

    account = relationship("Account", back_populates="cashflow_category")


class LedgerEntry(Base):
    """Posted ledger entry model."""

    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    account_code = Column(String, ForeignKey("accounts.code"), nullable=False)
    direction = Column(String, nullable=False)
    amount = Column(Money(), nullable=False)
    description = Column(String, nullable=False)
    correlation_id = Column(String, nullable=False)
    is_counter_entry = Column(Boolean, default=False, nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True)
    notes = Column(String, nullable=True)
    counterpart_code = Column(String, nullable=True)
    reverses_correlation_id = Column(String, nullable=True)
    source_type = Column(String, nullable=True)
    source_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_ledger_entries_correlation_id", "correlation_id"),
        Index("ix_ledger_entries_reverses", "reverses_correlation_id"),
        Index("ix_ledger_entries_source", "source_type", "source_id"),
    )

    # Relationships
    account = relationship("Account", back_populates="entries")
    project = relationship("Project")


class FixedAsset(Base):
    """Fixed asset model."""

    __tablename__ = "fixed_assets"

    id = Column(Integer, primary_key=True)
    asset_name = Column(String, nullable=False)
    category = Column(String, nullable=True)
    acquisition_date = Column(Date, nullable=False)
    value = Column(Money(), nullable=False)
    useful_life = Column(Integer, nullable=False)
    accumulated_depreciation = Column(Money(), nullable=False, default=0)
    book_value = Column(Money(), nullable=False)
    asset_account_code = Column(String, ForeignKey("accounts.code"), nullable=True)
    depreciation_expense_account_code = Column(String, ForeignKey("accounts.code"), nullable=True)
    accumulated_depreciation_account_code = Column(String, ForeignKey("accounts.code"), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)


class Project(Base):
    """Project model."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True)
    project_code = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    total_value = Column(Money(), nullable=False)
    status = Column(String, nullable=False, default="ongoing")
    progress = Column(Numeric(5, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    costs = relationship("ProjectCost", back_populates="project", cascade="all, delete-orphan")
    billings = relationship("Billing", back_populates="project", cascade="all, delete-orphan")


class ProjectCost(Base):
    """Project cost model."""

    __tablename__ = "project_costs"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    category = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    amount = Column(Money(), nullable=False)
    date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default="pending")
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    project = relationship("Project", back_populates="costs")


class Billing(Base):
    """Project billing model."""

    __tablename__ = "billings"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    billing_date = Column(Date, nullable=False)
    percentage = Column(Numeric(5, 2), nullable=True)
    amount = Column(Money(), nullable=False)
    status = Column(String, nullable=False, default="pending")
    invoice = Column(String, nullable=True)
    post_journal_entries = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    project = relationship("Project", back_populates="billings")


class StatusChange(Base):
    """Status history for billings and project costs."""

    __tablename__ = "status_changes"

    id = Column(Integer, primary_key=True)
    record_type = Column(String, nullable=False)
    record_id = Column(Integer, nullable=False)
    old_status = Column(String, nullable=False)
    new_status = Column(String, nullable=False)
    changed_at = Column(DateTime, default=_utcnow, nullable=False)
    notes = Column(String, nullable=True)

    __table_args__ = (Index("ix_status_changes_record", "record_type", "record_id"),)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
