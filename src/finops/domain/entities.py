"""Domain model entities for finops.

These are pure data classes representing business concepts, independent of
the database schema. Derived counts (transaction_count, profile_count) are
computed by the store at read time and never persisted.
"""

from dataclasses import dataclass
from datetime import datetime, date, time
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Optional


class TransactionType(IntEnum):
    """Ledger transaction direction."""

    DEPOSIT = 0
    WITHDRAW = 1

    @property
    def label(self) -> str:
        return "Deposit" if self is TransactionType.DEPOSIT else "Withdraw"

    @classmethod
    def parse(cls, value: "str | int | TransactionType") -> "TransactionType":
        """Accept 0/1, 'deposit'/'withdraw' (any case) or a member."""
        if isinstance(value, TransactionType):
            return value
        text = str(value).strip().lower()
        if text in ("0", "deposit"):
            return cls.DEPOSIT
        if text in ("1", "withdraw"):
            return cls.WITHDRAW
        raise ValueError(f"Unknown transaction type '{value}'")


class ProfileStatus(str, Enum):
    """Profiler profile lifecycle: active -> done (terminal)."""

    ACTIVE = "active"
    DONE = "done"


class ProfilerTransactionType(str, Enum):
    """Profiler transaction direction."""

    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


@dataclass(frozen=True)
class Client:
    """Ledger client domain entity."""

    id: int
    name: str
    email: Optional[str]
    contact: Optional[str]
    address: Optional[str]
    created_at: datetime
    updated_at: datetime
    transaction_count: int = 0


@dataclass(frozen=True)
class Bank:
    """Ledger bank domain entity."""

    id: int
    name: str
    created_at: datetime
    updated_at: datetime
    transaction_count: int = 0


@dataclass(frozen=True)
class Card:
    """Ledger card domain entity."""

    id: int
    name: str
    created_at: datetime
    updated_at: datetime
    transaction_count: int = 0


@dataclass(frozen=True)
class Transaction:
    """Ledger transaction domain entity.

    ``withdraw_charges`` is a percentage in [0, 100]; the charge amount is
    derived from it on demand.
    """

    id: int
    client_id: int
    bank_id: Optional[int]
    card_id: Optional[int]
    transaction_type: TransactionType
    transaction_amount: Decimal
    withdraw_charges: Decimal
    remark: Optional[str]
    create_date: date
    create_time: time
    client_name: str
    bank_name: Optional[str] = None
    card_name: Optional[str] = None

    @property
    def charge_amount(self) -> Decimal:
        return self.transaction_amount * self.withdraw_charges / Decimal("100")


@dataclass(frozen=True)
class ProfilerClient:
    """Profiler client domain entity."""

    id: int
    name: str
    email: Optional[str]
    mobile_number: Optional[str]
    aadhaar_card_number: Optional[str]
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime
    profile_count: int = 0


@dataclass(frozen=True)
class ProfilerBank:
    """Profiler bank domain entity."""

    id: int
    bank_name: str
    created_at: datetime
    updated_at: datetime
    profile_count: int = 0


@dataclass(frozen=True)
class ProfilerProfile:
    """A financial profile tracking a running balance for one client/bank pair."""

    id: int
    client_id: int
    bank_id: int
    credit_card_number: Optional[str]
    pre_planned_deposit_amount: Decimal
    current_balance: Decimal
    total_withdrawn_amount: Decimal
    carry_forward_enabled: bool
    status: ProfileStatus
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime
    marked_done_at: Optional[datetime]
    client_name: str
    bank_name: str
    transaction_count: int = 0

    @property
    def remaining_balance(self) -> Decimal:
        return self.current_balance - self.total_withdrawn_amount

    @property
    def is_active(self) -> bool:
        return self.status is ProfileStatus.ACTIVE


@dataclass(frozen=True)
class ProfilerTransaction:
    """Profiler transaction domain entity.

    The charge amount is frozen at creation time and never recomputed.
    """

    id: int
    profile_id: int
    transaction_type: ProfilerTransactionType
    amount: Decimal
    withdraw_charges_percentage: Optional[Decimal]
    withdraw_charges_amount: Decimal
    notes: Optional[str]
    created_at: datetime
    client_id: int
    client_name: str
    bank_id: int
    bank_name: str
    credit_card_number: Optional[str] = None
