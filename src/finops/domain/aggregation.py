"""Aggregation engine: fold ordered transaction rows into per-group totals.

Rows are expected to arrive sorted by group then time. Totals accumulate
as unrounded Decimals; rounding and thousands separators are applied only
by the formatting helpers at presentation time.

Sign convention per group:

* deposits add to ``transaction_amount``, withdrawals subtract;
* charges always add;
* ``final_amount = transaction_amount + charges``.

A group with no deposit at all is "only withdraw". For display, such a
group shows a transaction amount of 0 and a final amount equal to its
charges. Other groups show absolute values.
"""

from dataclasses import dataclass, field
from datetime import date, time, datetime
from decimal import Decimal
from typing import Any, Hashable, Iterable, Optional

from finops.domain.entities import (
    ProfilerTransaction,
    ProfilerTransactionType,
    Transaction,
    TransactionType,
)

ZERO = Decimal("0")


@dataclass(frozen=True)
class LedgerEntry:
    """One transaction reduced to what the engine needs."""

    group_key: Hashable
    group_label: str
    is_deposit: bool
    amount: Decimal
    charge_amount: Decimal
    charge_percentage: Optional[Decimal] = None
    occurred_on: Optional[date] = None
    occurred_at: Optional[time] = None
    bank_name: Optional[str] = None
    card_name: Optional[str] = None
    notes: Optional[str] = None

    @property
    def type_label(self) -> str:
        return "Deposit" if self.is_deposit else "Withdraw"


def entry_from_transaction(transaction: Transaction) -> LedgerEntry:
    """Ledger rows group by client name; charge = amount * pct / 100."""
    return LedgerEntry(
        group_key=transaction.client_name,
        group_label=transaction.client_name,
        is_deposit=transaction.transaction_type is TransactionType.DEPOSIT,
        amount=transaction.transaction_amount,
        charge_amount=transaction.charge_amount,
        charge_percentage=transaction.withdraw_charges,
        occurred_on=transaction.create_date,
        occurred_at=transaction.create_time,
        bank_name=transaction.bank_name,
        card_name=transaction.card_name,
        notes=transaction.remark,
    )


def entry_from_profiler_transaction(transaction: ProfilerTransaction) -> LedgerEntry:
    """Profiler rows group by profile and carry their frozen charge amount."""
    created: datetime = transaction.created_at
    return LedgerEntry(
        group_key=transaction.profile_id,
        group_label=transaction.client_name,
        is_deposit=transaction.transaction_type is ProfilerTransactionType.DEPOSIT,
        amount=transaction.amount,
        charge_amount=transaction.withdraw_charges_amount,
        charge_percentage=transaction.withdraw_charges_percentage,
        occurred_on=created.date() if created else None,
        occurred_at=created.time() if created else None,
        bank_name=transaction.bank_name,
        card_name=transaction.credit_card_number,
        notes=transaction.notes,
    )


@dataclass
class GroupTotals:
    """Running totals for one group."""

    key: Hashable
    label: str
    deposits: Decimal = ZERO
    withdrawals: Decimal = ZERO
    charges: Decimal = ZERO
    transaction_amount: Decimal = ZERO
    count: int = 0
    has_deposit: bool = False
    entries: list[LedgerEntry] = field(default_factory=list)

    def add(self, entry: LedgerEntry) -> None:
        if entry.is_deposit:
            self.has_deposit = True
            self.deposits += entry.amount
            self.transaction_amount += entry.amount
        else:
            self.withdrawals += entry.amount
            self.transaction_amount -= entry.amount
        self.charges += entry.charge_amount
        self.count += 1
        self.entries.append(entry)

    @property
    def is_only_withdraw(self) -> bool:
        return self.count > 0 and not self.has_deposit

    @property
    def final_amount(self) -> Decimal:
        return self.transaction_amount + self.charges

    @property
    def payment_difference(self) -> Decimal:
        """Withdrawals minus deposits; negative means receivable from the client."""
        return self.withdrawals - self.deposits

    @property
    def display_transaction_amount(self) -> Decimal:
        return ZERO if self.is_only_withdraw else abs(self.transaction_amount)

    @property
    def display_final_amount(self) -> Decimal:
        return self.charges if self.is_only_withdraw else abs(self.final_amount)


@dataclass
class Aggregation:
    """Groups in first-seen order plus grand totals."""

    groups: dict[Hashable, GroupTotals] = field(default_factory=dict)

    def add(self, entry: LedgerEntry) -> None:
        group = self.groups.get(entry.group_key)
        if group is None:
            group = GroupTotals(key=entry.group_key, label=entry.group_label)
            self.groups[entry.group_key] = group
        group.add(entry)

    def __iter__(self):
        return iter(self.groups.values())

    def __len__(self) -> int:
        return len(self.groups)

    @property
    def row_count(self) -> int:
        return sum(g.count for g in self.groups.values())

    @property
    def total_deposits(self) -> Decimal:
        return sum((g.deposits for g in self.groups.values()), ZERO)

    @property
    def total_withdrawals(self) -> Decimal:
        return sum((g.withdrawals for g in self.groups.values()), ZERO)

    @property
    def total_charges(self) -> Decimal:
        return sum((g.charges for g in self.groups.values()), ZERO)


def aggregate(entries: Iterable[LedgerEntry]) -> Aggregation:
    """Fold entries into per-group totals."""
    result = Aggregation()
    for entry in entries:
        result.add(entry)
    return result


def aggregate_transactions(transactions: Iterable[Any]) -> Aggregation:
    """Aggregate ledger or profiler transactions, adapting each row."""
    return aggregate(
        entry_from_profiler_transaction(t) if isinstance(t, ProfilerTransaction) else entry_from_transaction(t)
        for t in transactions
    )
