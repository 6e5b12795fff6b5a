"""Base queries for each queryable entity.

A source is the unfiltered, joined query for one entity, the map from
logical field names to column expressions, and a row mapper. The
generic paginator applies a query plan on top of it.
"""

from typing import Any, Callable, NamedTuple

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from finops.database.mappers import (
    bank_to_domain,
    card_to_domain,
    client_to_domain,
    profile_to_domain,
    profiler_bank_to_domain,
    profiler_client_to_domain,
    profiler_transaction_to_domain,
    transaction_to_domain,
)
from finops.database.models import (
    Bank,
    Card,
    Client,
    ProfilerBank,
    ProfilerClient,
    ProfilerProfile,
    ProfilerTransaction,
    Transaction,
)
from finops.database.rendering import ColumnMap, money_text


class Source(NamedTuple):
    query: Query
    columns: ColumnMap
    to_domain: Callable[[Any], Any]


def _count_by(session: Session, key, counted):
    """Subquery of (key, n) used for derived dependent counts."""
    return (
        session.query(key.label("owner_id"), func.count(counted).label("n"))
        .group_by(key)
        .subquery()
    )


def transactions_source(session: Session) -> Source:
    query = (
        session.query(
            Transaction,
            Client.name.label("client_name"),
            Bank.name.label("bank_name"),
            Card.name.label("card_name"),
        )
        .join(Client, Transaction.client_id == Client.id)
        .outerjoin(Bank, Transaction.bank_id == Bank.id)
        .outerjoin(Card, Transaction.card_id == Card.id)
    )
    columns = {
        "id": Transaction.id,
        "client_id": Transaction.client_id,
        "bank_id": Transaction.bank_id,
        "card_id": Transaction.card_id,
        "transaction_type": Transaction.transaction_type,
        "transaction_amount": Transaction.transaction_amount,
        "withdraw_charges": Transaction.withdraw_charges,
        "remark": Transaction.remark,
        "create_date": Transaction.create_date,
        "create_time": Transaction.create_time,
        "client_name": Client.name,
        "bank_name": Bank.name,
        "card_name": Card.name,
        "transaction_amount_text": money_text(Transaction.transaction_amount),
        "withdraw_charges_text": money_text(Transaction.withdraw_charges),
    }
    return Source(query, columns, lambda row: transaction_to_domain(*row))


def _directory_source(session: Session, model, fk, mapper) -> Source:
    counts = _count_by(session, fk, Transaction.id)
    transaction_count = func.coalesce(counts.c.n, 0)
    query = session.query(model, transaction_count.label("transaction_count")).outerjoin(
        counts, counts.c.owner_id == model.id
    )
    columns = {
        "id": model.id,
        "name": model.name,
        "created_at": model.created_at,
        "transaction_count": transaction_count,
    }
    return Source(query, columns, lambda row: mapper(*row))


def clients_source(session: Session) -> Source:
    source = _directory_source(session, Client, Transaction.client_id, client_to_domain)
    columns = dict(source.columns)
    columns.update(email=Client.email, contact=Client.contact, address=Client.address)
    return source._replace(columns=columns)


def banks_source(session: Session) -> Source:
    return _directory_source(session, Bank, Transaction.bank_id, bank_to_domain)


def cards_source(session: Session) -> Source:
    return _directory_source(session, Card, Transaction.card_id, card_to_domain)


def profiler_clients_source(session: Session) -> Source:
    counts = _count_by(session, ProfilerProfile.client_id, ProfilerProfile.id)
    profile_count = func.coalesce(counts.c.n, 0)
    query = session.query(ProfilerClient, profile_count.label("profile_count")).outerjoin(
        counts, counts.c.owner_id == ProfilerClient.id
    )
    columns = {
        "id": ProfilerClient.id,
        "name": ProfilerClient.name,
        "email": ProfilerClient.email,
        "mobile_number": ProfilerClient.mobile_number,
        "aadhaar_card_number": ProfilerClient.aadhaar_card_number,
        "notes": ProfilerClient.notes,
        "created_at": ProfilerClient.created_at,
        "profile_count": profile_count,
    }
    return Source(query, columns, lambda row: profiler_client_to_domain(*row))


def profiler_banks_source(session: Session) -> Source:
    counts = _count_by(session, ProfilerProfile.bank_id, ProfilerProfile.id)
    profile_count = func.coalesce(counts.c.n, 0)
    query = session.query(ProfilerBank, profile_count.label("profile_count")).outerjoin(
        counts, counts.c.owner_id == ProfilerBank.id
    )
    columns = {
        "id": ProfilerBank.id,
        "bank_name": ProfilerBank.bank_name,
        "created_at": ProfilerBank.created_at,
        "profile_count": profile_count,
    }
    return Source(query, columns, lambda row: profiler_bank_to_domain(*row))


def profiles_source(session: Session) -> Source:
    counts = _count_by(session, ProfilerTransaction.profile_id, ProfilerTransaction.id)
    transaction_count = func.coalesce(counts.c.n, 0)
    query = (
        session.query(
            ProfilerProfile,
            ProfilerClient.name.label("client_name"),
            ProfilerBank.bank_name.label("bank_name"),
            transaction_count.label("transaction_count"),
        )
        .join(ProfilerClient, ProfilerProfile.client_id == ProfilerClient.id)
        .join(ProfilerBank, ProfilerProfile.bank_id == ProfilerBank.id)
        .outerjoin(counts, counts.c.owner_id == ProfilerProfile.id)
    )
    columns = {
        "id": ProfilerProfile.id,
        "client_id": ProfilerProfile.client_id,
        "bank_id": ProfilerProfile.bank_id,
        "status": ProfilerProfile.status,
        "carry_forward_enabled": ProfilerProfile.carry_forward_enabled,
        "credit_card_number": ProfilerProfile.credit_card_number,
        "pre_planned_deposit_amount": ProfilerProfile.pre_planned_deposit_amount,
        "current_balance": ProfilerProfile.current_balance,
        "total_withdrawn_amount": ProfilerProfile.total_withdrawn_amount,
        "remaining_balance": ProfilerProfile.current_balance - ProfilerProfile.total_withdrawn_amount,
        "created_at": ProfilerProfile.created_at,
        "client_name": ProfilerClient.name,
        "bank_name": ProfilerBank.bank_name,
        "transaction_count": transaction_count,
    }
    return Source(query, columns, lambda row: profile_to_domain(*row))


def profiler_transactions_source(session: Session) -> Source:
    query = (
        session.query(
            ProfilerTransaction,
            ProfilerProfile,
            ProfilerClient.name.label("client_name"),
            ProfilerBank.bank_name.label("bank_name"),
        )
        .join(ProfilerProfile, ProfilerTransaction.profile_id == ProfilerProfile.id)
        .join(ProfilerClient, ProfilerProfile.client_id == ProfilerClient.id)
        .join(ProfilerBank, ProfilerProfile.bank_id == ProfilerBank.id)
    )
    columns = {
        "id": ProfilerTransaction.id,
        "profile_id": ProfilerTransaction.profile_id,
        "client_id": ProfilerProfile.client_id,
        "bank_id": ProfilerProfile.bank_id,
        "transaction_type": ProfilerTransaction.transaction_type,
        "amount": ProfilerTransaction.amount,
        "withdraw_charges_amount": ProfilerTransaction.withdraw_charges_amount,
        "notes": ProfilerTransaction.notes,
        "created_at": ProfilerTransaction.created_at,
        "client_name": ProfilerClient.name,
        "bank_name": ProfilerBank.bank_name,
        "credit_card_number": ProfilerProfile.credit_card_number,
        "amount_text": money_text(ProfilerTransaction.amount),
        "withdraw_charges_percentage_text": money_text(ProfilerTransaction.withdraw_charges_percentage),
        "withdraw_charges_amount_text": money_text(ProfilerTransaction.withdraw_charges_amount),
    }
    return Source(query, columns, lambda row: profiler_transaction_to_domain(*row))


SOURCES: dict[str, Callable[[Session], Source]] = {
    "transactions": transactions_source,
    "clients": clients_source,
    "banks": banks_source,
    "cards": cards_source,
    "profiler_clients": profiler_clients_source,
    "profiler_banks": profiler_banks_source,
    "profiler_profiles": profiles_source,
    "profiler_transactions": profiler_transactions_source,
}
