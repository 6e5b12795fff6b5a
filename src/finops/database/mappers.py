"""Mapper functions converting SQLAlchemy models to domain entities.

Derived values (joined names, dependent counts) are passed in by the
caller because they come from the query, not from the row itself.
"""

from decimal import Decimal
from typing import Optional

from finops.domain import entities as domain
from finops.database.models import (
    Bank as ORMBank,
    Card as ORMCard,
    Client as ORMClient,
    ProfilerBank as ORMProfilerBank,
    ProfilerClient as ORMProfilerClient,
    ProfilerProfile as ORMProfilerProfile,
    ProfilerTransaction as ORMProfilerTransaction,
    Transaction as ORMTransaction,
)


def client_to_domain(orm_client: ORMClient, transaction_count: int = 0) -> domain.Client:
    """Convert SQLAlchemy Client model to domain Client entity."""
    return domain.Client(
        id=orm_client.id,
        name=orm_client.name,
        email=orm_client.email,
        contact=orm_client.contact,
        address=orm_client.address,
        created_at=orm_client.created_at,
        updated_at=orm_client.updated_at,
        transaction_count=int(transaction_count or 0),
    )


def bank_to_domain(orm_bank: ORMBank, transaction_count: int = 0) -> domain.Bank:
    """Convert SQLAlchemy Bank model to domain Bank entity."""
    return domain.Bank(
        id=orm_bank.id,
        name=orm_bank.name,
        created_at=orm_bank.created_at,
        updated_at=orm_bank.updated_at,
        transaction_count=int(transaction_count or 0),
    )


def card_to_domain(orm_card: ORMCard, transaction_count: int = 0) -> domain.Card:
    """Convert SQLAlchemy Card model to domain Card entity."""
    return domain.Card(
        id=orm_card.id,
        name=orm_card.name,
        created_at=orm_card.created_at,
        updated_at=orm_card.updated_at,
        transaction_count=int(transaction_count or 0),
    )


def transaction_to_domain(
    orm_transaction: ORMTransaction,
    client_name: str,
    bank_name: Optional[str] = None,
    card_name: Optional[str] = None,
) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        client_id=orm_transaction.client_id,
        bank_id=orm_transaction.bank_id,
        card_id=orm_transaction.card_id,
        transaction_type=domain.TransactionType(orm_transaction.transaction_type),
        transaction_amount=Decimal(orm_transaction.transaction_amount),
        withdraw_charges=Decimal(orm_transaction.withdraw_charges or 0),
        remark=orm_transaction.remark,
        create_date=orm_transaction.create_date,
        create_time=orm_transaction.create_time,
        client_name=client_name,
        bank_name=bank_name,
        card_name=card_name,
    )


def profiler_client_to_domain(
    orm_client: ORMProfilerClient, profile_count: int = 0
) -> domain.ProfilerClient:
    """Convert SQLAlchemy ProfilerClient model to domain entity."""
    return domain.ProfilerClient(
        id=orm_client.id,
        name=orm_client.name,
        email=orm_client.email,
        mobile_number=orm_client.mobile_number,
        aadhaar_card_number=orm_client.aadhaar_card_number,
        notes=orm_client.notes,
        created_at=orm_client.created_at,
        updated_at=orm_client.updated_at,
        profile_count=int(profile_count or 0),
    )


def profiler_bank_to_domain(orm_bank: ORMProfilerBank, profile_count: int = 0) -> domain.ProfilerBank:
    """Convert SQLAlchemy ProfilerBank model to domain entity."""
    return domain.ProfilerBank(
        id=orm_bank.id,
        bank_name=orm_bank.bank_name,
        created_at=orm_bank.created_at,
        updated_at=orm_bank.updated_at,
        profile_count=int(profile_count or 0),
    )


def profile_to_domain(
    orm_profile: ORMProfilerProfile,
    client_name: str,
    bank_name: str,
    transaction_count: int = 0,
) -> domain.ProfilerProfile:
    """Convert SQLAlchemy ProfilerProfile model to domain entity."""
    return domain.ProfilerProfile(
        id=orm_profile.id,
        client_id=orm_profile.client_id,
        bank_id=orm_profile.bank_id,
        credit_card_number=orm_profile.credit_card_number,
        pre_planned_deposit_amount=Decimal(orm_profile.pre_planned_deposit_amount),
        current_balance=Decimal(orm_profile.current_balance),
        total_withdrawn_amount=Decimal(orm_profile.total_withdrawn_amount or 0),
        carry_forward_enabled=bool(orm_profile.carry_forward_enabled),
        status=domain.ProfileStatus(orm_profile.status),
        notes=orm_profile.notes,
        created_at=orm_profile.created_at,
        updated_at=orm_profile.updated_at,
        marked_done_at=orm_profile.marked_done_at,
        client_name=client_name,
        bank_name=bank_name,
        transaction_count=int(transaction_count or 0),
    )


def profiler_transaction_to_domain(
    orm_transaction: ORMProfilerTransaction,
    orm_profile: ORMProfilerProfile,
    client_name: str,
    bank_name: str,
) -> domain.ProfilerTransaction:
    """Convert SQLAlchemy ProfilerTransaction model to domain entity."""
    percentage = orm_transaction.withdraw_charges_percentage
    return domain.ProfilerTransaction(
        id=orm_transaction.id,
        profile_id=orm_transaction.profile_id,
        transaction_type=domain.ProfilerTransactionType(orm_transaction.transaction_type),
        amount=Decimal(orm_transaction.amount),
        withdraw_charges_percentage=Decimal(percentage) if percentage is not None else None,
        withdraw_charges_amount=Decimal(orm_transaction.withdraw_charges_amount or 0),
        notes=orm_transaction.notes,
        created_at=orm_transaction.created_at,
        client_id=orm_profile.client_id,
        client_name=client_name,
        bank_id=orm_profile.bank_id,
        bank_name=bank_name,
        credit_card_number=orm_profile.credit_card_number,
    )
