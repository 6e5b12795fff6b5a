"""Abstract database interface."""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Any, Iterator, Mapping, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from finops.domain.entities import (
    Bank,
    Card,
    Client,
    ProfilerBank,
    ProfilerClient,
    ProfilerProfile,
    ProfilerTransaction,
    ProfilerTransactionType,
    Transaction,
    TransactionType,
)
from finops.domain.query import Page, QueryPlan


class Database(ABC):
    """Abstract database interface for finops.

    Update methods take a mapping of the fields to change; fields absent
    from the mapping are left untouched.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Generic query operations
    @abstractmethod
    def paginate(self, plan: QueryPlan) -> Page:
        """Run the count and data queries for a plan and return one page."""
        pass

    @abstractmethod
    def count_matching(self, plan: QueryPlan) -> int:
        """Count rows matching a plan's predicates."""
        pass

    @abstractmethod
    def iter_matching(self, plan: QueryPlan, chunk_size: int = 500) -> Iterator[Any]:
        """Stream every row matching a plan, in plan order, ignoring paging."""
        pass

    # Client operations
    @abstractmethod
    def create_client(
        self,
        name: str,
        email: Optional[str] = None,
        contact: Optional[str] = None,
        address: Optional[str] = None,
    ) -> int:
        """Create a client. Returns client ID."""
        pass

    @abstractmethod
    def get_client(self, client_id: int) -> Optional[Client]:
        """Get client by ID."""
        pass

    @abstractmethod
    def get_client_by_name(self, name: str) -> Optional[Client]:
        """Get client by exact name."""
        pass

    @abstractmethod
    def update_client(self, client_id: int, fields: Mapping[str, Any]) -> None:
        """Apply a selective patch to a client."""
        pass

    @abstractmethod
    def delete_client(self, client_id: int) -> None:
        """Delete a client (caller checks dependents)."""
        pass

    # Bank operations
    @abstractmethod
    def create_bank(self, name: str) -> int:
        """Create a bank. Returns bank ID."""
        pass

    @abstractmethod
    def get_bank(self, bank_id: int) -> Optional[Bank]:
        """Get bank by ID."""
        pass

    @abstractmethod
    def update_bank(self, bank_id: int, fields: Mapping[str, Any]) -> None:
        """Apply a selective patch to a bank."""
        pass

    @abstractmethod
    def delete_bank(self, bank_id: int) -> None:
        """Delete a bank (caller checks dependents)."""
        pass

    # Card operations
    @abstractmethod
    def create_card(self, name: str) -> int:
        """Create a card. Returns card ID."""
        pass

    @abstractmethod
    def get_card(self, card_id: int) -> Optional[Card]:
        """Get card by ID."""
        pass

    @abstractmethod
    def update_card(self, card_id: int, fields: Mapping[str, Any]) -> None:
        """Apply a selective patch to a card."""
        pass

    @abstractmethod
    def delete_card(self, card_id: int, detach_transactions: bool = False) -> int:
        """Delete a card, optionally clearing it from transactions first.

        Returns the number of transactions detached.
        """
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        client_id: int,
        transaction_type: TransactionType,
        transaction_amount: Decimal,
        withdraw_charges: Decimal = Decimal("0"),
        bank_id: Optional[int] = None,
        card_id: Optional[int] = None,
        remark: Optional[str] = None,
        create_date: Optional[date] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID with joined client, bank and card names."""
        pass

    @abstractmethod
    def update_transaction(self, transaction_id: int, fields: Mapping[str, Any]) -> None:
        """Apply a selective patch to a transaction."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Hard-delete a transaction."""
        pass

    # Profiler client operations
    @abstractmethod
    def create_profiler_client(
        self,
        name: str,
        email: Optional[str] = None,
        mobile_number: Optional[str] = None,
        aadhaar_card_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a profiler client. Returns its ID."""
        pass

    @abstractmethod
    def get_profiler_client(self, client_id: int) -> Optional[ProfilerClient]:
        """Get profiler client by ID."""
        pass

    @abstractmethod
    def update_profiler_client(self, client_id: int, fields: Mapping[str, Any]) -> None:
        """Apply a selective patch to a profiler client."""
        pass

    @abstractmethod
    def delete_profiler_client(self, client_id: int) -> None:
        """Delete a profiler client (caller checks dependents)."""
        pass

    # Profiler bank operations
    @abstractmethod
    def create_profiler_bank(self, bank_name: str) -> int:
        """Create a profiler bank. Returns its ID."""
        pass

    @abstractmethod
    def get_profiler_bank(self, bank_id: int) -> Optional[ProfilerBank]:
        """Get profiler bank by ID."""
        pass

    @abstractmethod
    def update_profiler_bank(self, bank_id: int, fields: Mapping[str, Any]) -> None:
        """Apply a selective patch to a profiler bank."""
        pass

    @abstractmethod
    def delete_profiler_bank(self, bank_id: int) -> None:
        """Delete a profiler bank (caller checks dependents)."""
        pass

    # Profile operations
    @abstractmethod
    def create_profile(
        self,
        client_id: int,
        bank_id: int,
        pre_planned_deposit_amount: Decimal,
        credit_card_number: Optional[str] = None,
        carry_forward_enabled: bool = False,
        notes: Optional[str] = None,
    ) -> int:
        """Create an active profile whose opening balance is the pre-planned deposit."""
        pass

    @abstractmethod
    def get_profile(self, profile_id: int) -> Optional[ProfilerProfile]:
        """Get profile by ID with derived fields."""
        pass

    @abstractmethod
    def update_profile(self, profile_id: int, fields: Mapping[str, Any]) -> None:
        """Apply a selective patch to a profile."""
        pass

    @abstractmethod
    def mark_profile_done(self, profile_id: int) -> bool:
        """Move an active profile to done. Returns False if it was not active."""
        pass

    @abstractmethod
    def delete_profile(self, profile_id: int) -> None:
        """Delete a profile, refusing when it has transactions."""
        pass

    # Profiler transaction operations
    @abstractmethod
    def record_profiler_transaction(
        self,
        profile_id: int,
        transaction_type: ProfilerTransactionType,
        amount: Decimal,
        withdraw_charges_percentage: Optional[Decimal],
        withdraw_charges_amount: Decimal,
        notes: Optional[str] = None,
    ) -> int:
        """Insert a transaction and apply its balance effect atomically."""
        pass

    @abstractmethod
    def get_profiler_transaction(self, transaction_id: int) -> Optional[ProfilerTransaction]:
        """Get profiler transaction by ID."""
        pass

    @abstractmethod
    def delete_profiler_transaction(self, transaction_id: int) -> None:
        """Delete a transaction and reverse its balance effect atomically."""
        pass

    @abstractmethod
    def summarize_profiler_transactions(self, plan: QueryPlan) -> dict[str, Decimal]:
        """Deposit, withdrawal and charge totals over every row matching a plan."""
        pass
