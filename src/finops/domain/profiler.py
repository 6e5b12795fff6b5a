"""Balance ledger for profiler profiles.

A profile starts ``active`` with its pre-planned deposit as the opening
balance and moves once to ``done``. While active:

* a deposit adds its amount to ``current_balance``;
* a withdrawal adds its amount to ``total_withdrawn_amount``, so the
  remaining balance (current - withdrawn) drops by the amount. Its charge
  is computed once from the percentage and stored on the transaction.

The balance update and the transaction insert commit together in the
store.
"""

import logging
from dataclasses import replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Mapping, Optional

from finops.database.base import Database
from finops.domain import catalog
from finops.domain.entities import ProfilerProfile, ProfilerTransaction, ProfilerTransactionType
from finops.domain.errors import (
    NotFoundError,
    ValidationError,
    active_profile_not_found,
    entity_not_found,
)
from finops.domain.query import Page
from finops.logging import get_logger
from finops.utils.params import (
    build_patch,
    choice,
    clean_text,
    parse_bool,
    parse_decimal,
    parse_non_negative_decimal,
    parse_positive_int,
)

_CENT = Decimal("0.01")
_HUNDRED = Decimal("100")

_transaction_type = choice([t.value for t in ProfilerTransactionType], ProfilerTransactionType)


def calculate_withdraw_charges(amount: Decimal, percentage: Optional[Decimal]) -> Decimal:
    """Charge for a withdrawal: amount * pct / 100, rounded half-up to cents.

    A missing percentage means no charge.
    """
    if percentage is None:
        return Decimal("0.00")
    return (amount * percentage / _HUNDRED).quantize(_CENT, rounding=ROUND_HALF_UP)


class ProfileService:
    """Service for managing profiler profiles."""

    def __init__(self, db: Database, logger: Optional[logging.Logger] = None):
        """Initialize profile service.

        Args:
            db: Database instance
            logger: Logger for lifecycle events
        """
        self.db = db
        self.logger = logger or get_logger(__name__)

    def create_profile(
        self,
        client_id: Any,
        bank_id: Any,
        pre_planned_deposit_amount: Any,
        credit_card_number: Optional[str] = None,
        carry_forward_enabled: Any = False,
        notes: Optional[str] = None,
    ) -> ProfilerProfile:
        """Open an active profile for a client/bank pair.

        Args:
            client_id: Profiler client ID
            bank_id: Profiler bank ID
            pre_planned_deposit_amount: Opening balance (>= 0)
            credit_card_number: Optional card number
            carry_forward_enabled: Whether the remaining balance rolls over
            notes: Optional notes

        Returns:
            The created profile

        Raises:
            ValidationError: On invalid input
            NotFoundError: If the client or bank doesn't exist
        """
        client_id = parse_positive_int(client_id, "client_id")
        bank_id = parse_positive_int(bank_id, "bank_id")
        opening = parse_non_negative_decimal(pre_planned_deposit_amount, "pre_planned_deposit_amount")
        carry_forward = parse_bool(carry_forward_enabled, "carry_forward_enabled")

        if self.db.get_profiler_client(client_id) is None:
            raise NotFoundError(entity_not_found("Profiler client", client_id))
        if self.db.get_profiler_bank(bank_id) is None:
            raise NotFoundError(entity_not_found("Profiler bank", bank_id))

        profile_id = self.db.create_profile(
            client_id=client_id,
            bank_id=bank_id,
            pre_planned_deposit_amount=opening,
            credit_card_number=clean_text(credit_card_number, "credit_card_number"),
            carry_forward_enabled=carry_forward,
            notes=clean_text(notes, "notes"),
        )
        self.logger.info(
            "Opened profiler profile %s", profile_id, extra={"profile_id": profile_id, "client_id": client_id}
        )
        return self.db.get_profile(profile_id)

    def get_profile(self, profile_id: int) -> Optional[ProfilerProfile]:
        return self.db.get_profile(profile_id)

    def require_profile(self, profile_id: int) -> ProfilerProfile:
        """Get a profile or raise NotFoundError."""
        profile = self.db.get_profile(profile_id)
        if profile is None:
            raise NotFoundError(entity_not_found("Profiler profile", profile_id))
        return profile

    def update_profile(
        self,
        profile_id: int,
        credit_card_number: Optional[str] = None,
        pre_planned_deposit_amount: Any = None,
        carry_forward_enabled: Any = None,
        notes: Optional[str] = None,
    ) -> ProfilerProfile:
        """Patch descriptive fields of a profile.

        Balances are never patched directly; they move only through
        transactions.

        Raises:
            NotFoundError: If the profile doesn't exist
            ValidationError: If no field is provided
        """
        self.require_profile(profile_id)
        patch = build_patch(
            "profiler profile",
            credit_card_number=credit_card_number,
            pre_planned_deposit_amount=(
                parse_non_negative_decimal(pre_planned_deposit_amount, "pre_planned_deposit_amount")
                if pre_planned_deposit_amount is not None
                else None
            ),
            carry_forward_enabled=(
                parse_bool(carry_forward_enabled, "carry_forward_enabled")
                if carry_forward_enabled is not None
                else None
            ),
            notes=notes,
        )
        self.db.update_profile(profile_id, patch)
        return self.db.get_profile(profile_id)

    def mark_done(self, profile_id: int) -> ProfilerProfile:
        """Move an active profile to done.

        Raises:
            NotFoundError: If no active profile has this ID
        """
        if not self.db.mark_profile_done(profile_id):
            raise NotFoundError(active_profile_not_found(profile_id))
        self.logger.info("Marked profiler profile %s done", profile_id, extra={"profile_id": profile_id})
        return self.db.get_profile(profile_id)

    def delete_profile(self, profile_id: int) -> None:
        """Delete a profile that has no transactions.

        Raises:
            NotFoundError: If the profile doesn't exist
            ConflictError: If it has transactions
        """
        self.db.delete_profile(profile_id)
        self.logger.info("Deleted profiler profile %s", profile_id, extra={"profile_id": profile_id})

    def list_profiles(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: Any = None,
        limit: Any = None,
    ) -> Page[ProfilerProfile]:
        plan = catalog.PROFILES.plan(
            filters=filters, search=search, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit
        )
        return self.db.paginate(plan)

    def autocomplete(
        self,
        search: Optional[str] = None,
        limit: Any = None,
        client_id: Any = None,
        status: Any = None,
    ) -> Page[ProfilerProfile]:
        """Profile lookup by client name, bank name or card number.

        Matches are ordered by client name; ``client_id`` and ``status``
        narrow the candidates.
        """
        plan = catalog.PROFILES.autocomplete_plan(
            search, limit, sort_by="client_name", filters={"client_id": client_id, "status": status}
        )
        return self.db.paginate(plan)


class ProfilerTransactionService:
    """Service for appending to and reading the balance ledger."""

    def __init__(self, db: Database, logger: Optional[logging.Logger] = None):
        self.db = db
        self.logger = logger or get_logger(__name__)

    def create_transaction(
        self,
        profile_id: Any,
        transaction_type: Any,
        amount: Any,
        withdraw_charges_percentage: Any = None,
        notes: Optional[str] = None,
    ) -> ProfilerTransaction:
        """Append a deposit or withdrawal to an active profile.

        Args:
            profile_id: Target profile
            transaction_type: deposit or withdraw
            amount: Positive amount
            withdraw_charges_percentage: Optional charge percentage in
                [0, 100]; ignored for deposits
            notes: Optional notes

        Returns:
            The recorded transaction

        Raises:
            ValidationError: On invalid input
            NotFoundError: If the profile doesn't exist
            ConflictError: If the profile is done
        """
        profile_id = parse_positive_int(profile_id, "profile_id")
        kind = _transaction_type(transaction_type, "transaction_type")
        value = parse_decimal(amount, "amount")
        if value <= 0:
            raise ValidationError("amount must be greater than 0", field="amount")

        percentage = None
        if kind is ProfilerTransactionType.WITHDRAW and withdraw_charges_percentage not in (None, ""):
            percentage = parse_decimal(withdraw_charges_percentage, "withdraw_charges_percentage")
            if percentage < 0 or percentage > _HUNDRED:
                raise ValidationError(
                    "withdraw_charges_percentage must be between 0 and 100",
                    field="withdraw_charges_percentage",
                )
        charge = calculate_withdraw_charges(value, percentage)

        transaction_id = self.db.record_profiler_transaction(
            profile_id=profile_id,
            transaction_type=kind,
            amount=value,
            withdraw_charges_percentage=percentage,
            withdraw_charges_amount=charge,
            notes=clean_text(notes, "notes"),
        )
        self.logger.info(
            "Recorded %s of %s on profiler profile %s",
            kind.value,
            value,
            profile_id,
            extra={"profile_id": profile_id, "transaction_id": transaction_id},
        )
        return self.db.get_profiler_transaction(transaction_id)

    def get_transaction(self, transaction_id: int) -> Optional[ProfilerTransaction]:
        return self.db.get_profiler_transaction(transaction_id)

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction and reverse its balance effect.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ConflictError: If its profile is done
        """
        self.db.delete_profiler_transaction(transaction_id)
        self.logger.info(
            "Deleted profiler transaction %s", transaction_id, extra={"transaction_id": transaction_id}
        )

    def list_transactions(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: Any = None,
        limit: Any = None,
    ) -> Page[ProfilerTransaction]:
        """List ledger transactions with a summary over every matching row.

        The page carries an extra ``summary`` with total deposits,
        withdrawals and charges plus ``net_amount`` (deposits - withdrawals
        - charges).
        """
        plan = catalog.PROFILER_TRANSACTIONS.plan(
            filters=filters, search=search, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit
        )
        result = self.db.paginate(plan)
        totals = self.db.summarize_profiler_transactions(plan)
        summary = dict(totals)
        summary["net_amount"] = (
            totals["total_deposits"] - totals["total_withdrawals"] - totals["total_charges"]
        )
        return replace(result, extra={"summary": summary})
