"""Ledger transaction domain service."""

from decimal import Decimal
from typing import Any, Mapping, Optional

from finops.database.base import Database
from finops.domain import catalog
from finops.domain.entities import Transaction, TransactionType
from finops.domain.errors import NotFoundError, ValidationError, entity_not_found
from finops.domain.query import Page, QueryPlan
from finops.utils.params import build_patch, parse_date_value, parse_decimal, parse_positive_int

_HUNDRED = Decimal("100")


def _amount(value: Any) -> Decimal:
    amount = parse_decimal(value, "transaction_amount")
    if amount <= 0:
        raise ValidationError("transaction_amount must be greater than 0", field="transaction_amount")
    return amount


def _percentage(value: Any) -> Decimal:
    pct = parse_decimal(value, "withdraw_charges")
    if pct < 0 or pct > _HUNDRED:
        raise ValidationError("withdraw_charges must be between 0 and 100", field="withdraw_charges")
    return pct


def _type(value: Any) -> TransactionType:
    try:
        return TransactionType.parse(value)
    except ValueError:
        raise ValidationError(
            f"transaction_type must be deposit (0) or withdraw (1), got '{value}'",
            field="transaction_type",
        )


class TransactionService:
    """Service for managing ledger transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_references(
        self, client_id: Optional[int], bank_id: Optional[int], card_id: Optional[int]
    ) -> None:
        if client_id is not None and self.db.get_client(client_id) is None:
            raise NotFoundError(entity_not_found("Client", client_id))
        if bank_id is not None and self.db.get_bank(bank_id) is None:
            raise NotFoundError(entity_not_found("Bank", bank_id))
        if card_id is not None and self.db.get_card(card_id) is None:
            raise NotFoundError(entity_not_found("Card", card_id))

    def create_transaction(
        self,
        client_id: Any,
        transaction_type: Any,
        transaction_amount: Any,
        withdraw_charges: Any = 0,
        bank_id: Any = None,
        card_id: Any = None,
        remark: Optional[str] = None,
        create_date: Any = None,
    ) -> Transaction:
        """Create a transaction.

        Args:
            client_id: Owning client ID
            transaction_type: deposit/withdraw (or 0/1)
            transaction_amount: Positive amount
            withdraw_charges: Charge percentage in [0, 100]
            bank_id: Optional bank ID
            card_id: Optional card ID
            remark: Optional free-text remark
            create_date: Booking date (defaults to today)

        Returns:
            The created transaction with joined names

        Raises:
            ValidationError: On an invalid amount, percentage or type
            NotFoundError: If the client, bank or card doesn't exist
        """
        client_id = parse_positive_int(client_id, "client_id")
        bank_id = parse_positive_int(bank_id, "bank_id") if bank_id is not None else None
        card_id = parse_positive_int(card_id, "card_id") if card_id is not None else None
        kind = _type(transaction_type)
        amount = _amount(transaction_amount)
        pct = _percentage(withdraw_charges if withdraw_charges is not None else 0)
        booked = parse_date_value(create_date, "create_date") if create_date is not None else None

        self._require_references(client_id, bank_id, card_id)

        transaction_id = self.db.create_transaction(
            client_id=client_id,
            transaction_type=kind,
            transaction_amount=amount,
            withdraw_charges=pct,
            bank_id=bank_id,
            card_id=card_id,
            remark=remark.strip() if remark and remark.strip() else None,
            create_date=booked,
        )
        return self.db.get_transaction(transaction_id)

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def update_transaction(
        self,
        transaction_id: int,
        client_id: Any = None,
        transaction_type: Any = None,
        transaction_amount: Any = None,
        withdraw_charges: Any = None,
        bank_id: Any = None,
        card_id: Any = None,
        remark: Optional[str] = None,
        create_date: Any = None,
    ) -> Transaction:
        """Overwrite only the fields that are provided.

        Raises:
            NotFoundError: If the transaction or a referenced entity doesn't exist
            ValidationError: If no field is provided or a value is invalid
        """
        if self.db.get_transaction(transaction_id) is None:
            raise NotFoundError(entity_not_found("Transaction", transaction_id))

        patch = build_patch(
            "transaction",
            client_id=parse_positive_int(client_id, "client_id") if client_id is not None else None,
            transaction_type=_type(transaction_type) if transaction_type is not None else None,
            transaction_amount=_amount(transaction_amount) if transaction_amount is not None else None,
            withdraw_charges=_percentage(withdraw_charges) if withdraw_charges is not None else None,
            bank_id=parse_positive_int(bank_id, "bank_id") if bank_id is not None else None,
            card_id=parse_positive_int(card_id, "card_id") if card_id is not None else None,
            remark=remark,
            create_date=parse_date_value(create_date, "create_date") if create_date is not None else None,
        )
        self._require_references(patch.get("client_id"), patch.get("bank_id"), patch.get("card_id"))
        self.db.update_transaction(transaction_id, patch)
        return self.db.get_transaction(transaction_id)

    def delete_transaction(self, transaction_id: int) -> None:
        """Hard-delete a transaction.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        if self.db.get_transaction(transaction_id) is None:
            raise NotFoundError(entity_not_found("Transaction", transaction_id))
        self.db.delete_transaction(transaction_id)

    def plan_transactions(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: Any = None,
        limit: Any = None,
    ) -> QueryPlan:
        """Validate list parameters into a query plan without touching the store."""
        return catalog.TRANSACTIONS.plan(
            filters=filters,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )

    def list_transactions(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: Any = None,
        limit: Any = None,
    ) -> Page[Transaction]:
        """List transactions with filters, ranked search, sorting and pagination.

        Args:
            filters: Raw filter values keyed by filter name (transaction_type,
                min_amount, max_amount, start_date, end_date, bank_ids,
                card_ids, client_ids)
            search: Free-text term; blank disables search
            sort_by: Whitelisted sort key
            sort_order: asc or desc
            page: 1-based page number
            limit: Page size, clamped into [1, 100]

        Returns:
            One page of transactions
        """
        plan = self.plan_transactions(filters, search, sort_by, sort_order, page, limit)
        return self.db.paginate(plan)
