"""SQLAlchemy models for the finops database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Time,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class Client(Base):
    """Ledger client model."""

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    email = Column(String, nullable=True)
    contact = Column(String, nullable=True)
    address = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    transactions = relationship("Transaction", back_populates="client", passive_deletes="all")


class Bank(Base):
    """Ledger bank model."""

    __tablename__ = "banks"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    transactions = relationship("Transaction", back_populates="bank", passive_deletes="all")


class Card(Base):
    """Ledger card model."""

    __tablename__ = "cards"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    transactions = relationship("Transaction", back_populates="card", passive_deletes="all")


class Transaction(Base):
    """Ledger transaction model.

    transaction_type is 0 for deposit and 1 for withdraw; withdraw_charges
    is a percentage.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    bank_id = Column(Integer, ForeignKey("banks.id"), nullable=True, index=True)
    card_id = Column(Integer, ForeignKey("cards.id"), nullable=True, index=True)
    transaction_type = Column(Integer, nullable=False)
    transaction_amount = Column(Numeric(14, 2), nullable=False)
    withdraw_charges = Column(Numeric(5, 2), default=0, nullable=False)
    remark = Column(String, nullable=True)
    create_date = Column(Date, default=lambda: _now().date(), nullable=False, index=True)
    create_time = Column(Time, default=lambda: _now().time().replace(microsecond=0), nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    client = relationship("Client", back_populates="transactions")
    bank = relationship("Bank", back_populates="transactions")
    card = relationship("Card", back_populates="transactions")


class ProfilerClient(Base):
    """Profiler client model."""

    __tablename__ = "profiler_clients"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    mobile_number = Column(String, nullable=True)
    aadhaar_card_number = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    profiles = relationship("ProfilerProfile", back_populates="client", passive_deletes="all")


class ProfilerBank(Base):
    """Profiler bank model."""

    __tablename__ = "profiler_banks"

    id = Column(Integer, primary_key=True)
    bank_name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    profiles = relationship("ProfilerProfile", back_populates="bank", passive_deletes="all")


class ProfilerProfile(Base):
    """Profiler profile model holding the running balance."""

    __tablename__ = "profiler_profiles"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("profiler_clients.id"), nullable=False, index=True)
    bank_id = Column(Integer, ForeignKey("profiler_banks.id"), nullable=False, index=True)
    credit_card_number = Column(String, nullable=True)
    pre_planned_deposit_amount = Column(Numeric(14, 2), nullable=False)
    current_balance = Column(Numeric(14, 2), nullable=False)
    total_withdrawn_amount = Column(Numeric(14, 2), default=0, nullable=False)
    carry_forward_enabled = Column(Boolean, default=False, nullable=False)
    status = Column(String(10), default="active", nullable=False, index=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)
    marked_done_at = Column(DateTime, nullable=True)

    client = relationship("ProfilerClient", back_populates="profiles")
    bank = relationship("ProfilerBank", back_populates="profiles")
    transactions = relationship("ProfilerTransaction", back_populates="profile", passive_deletes="all")


class ProfilerTransaction(Base):
    """Profiler transaction model; the charge amount is stored, not derived."""

    __tablename__ = "profiler_transactions"

    id = Column(Integer, primary_key=True)
    profile_id = Column(Integer, ForeignKey("profiler_profiles.id"), nullable=False, index=True)
    transaction_type = Column(String(10), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    withdraw_charges_percentage = Column(Numeric(5, 2), nullable=True)
    withdraw_charges_amount = Column(Numeric(14, 2), default=0, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    profile = relationship("ProfilerProfile", back_populates="transactions")


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


@event.listens_for(Engine, "connect")
def _configure_sqlite(dbapi_connection, connection_record):
    """Enforce foreign keys and make lower() fold non-ASCII text on SQLite."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory, creating missing tables."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
