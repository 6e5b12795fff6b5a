"""Profiler client and bank domain services."""

from typing import Any, Mapping, Optional

from finops.database.base import Database
from finops.domain import catalog
from finops.domain.entities import ProfilerBank, ProfilerClient
from finops.domain.errors import ConflictError, NotFoundError, delete_blocked, entity_not_found
from finops.domain.query import Page
from finops.utils.params import build_patch, clean_text


class ProfilerClientService:
    """Service for managing profiler clients."""

    def __init__(self, db: Database):
        """Initialize profiler client service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_client(
        self,
        name: str,
        email: Optional[str] = None,
        mobile_number: Optional[str] = None,
        aadhaar_card_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ProfilerClient:
        """Create a profiler client.

        Returns:
            The created client

        Raises:
            ValidationError: If name is blank
        """
        client_id = self.db.create_profiler_client(
            name=clean_text(name, "name", required=True),
            email=clean_text(email, "email"),
            mobile_number=clean_text(mobile_number, "mobile_number"),
            aadhaar_card_number=clean_text(aadhaar_card_number, "aadhaar_card_number"),
            notes=clean_text(notes, "notes"),
        )
        return self.db.get_profiler_client(client_id)

    def get_client(self, client_id: int) -> Optional[ProfilerClient]:
        return self.db.get_profiler_client(client_id)

    def update_client(
        self,
        client_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        mobile_number: Optional[str] = None,
        aadhaar_card_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ProfilerClient:
        """Update only the provided fields of a profiler client.

        Raises:
            NotFoundError: If the client doesn't exist
            ValidationError: If no field is provided
        """
        if self.db.get_profiler_client(client_id) is None:
            raise NotFoundError(entity_not_found("Profiler client", client_id))
        patch = build_patch(
            "profiler client",
            name=clean_text(name, "name") if name is not None else None,
            email=email,
            mobile_number=mobile_number,
            aadhaar_card_number=aadhaar_card_number,
            notes=notes,
        )
        self.db.update_profiler_client(client_id, patch)
        return self.db.get_profiler_client(client_id)

    def delete_client(self, client_id: int) -> None:
        """Delete a profiler client without profiles.

        Raises:
            NotFoundError: If the client doesn't exist
            ConflictError: If profiles reference the client
        """
        client = self.db.get_profiler_client(client_id)
        if client is None:
            raise NotFoundError(entity_not_found("Profiler client", client_id))
        if client.profile_count > 0:
            raise ConflictError(delete_blocked("profiler client", client_id, client.profile_count, "profile"))
        self.db.delete_profiler_client(client_id)

    def list_clients(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: Any = None,
        limit: Any = None,
    ) -> Page[ProfilerClient]:
        """List profiler clients (filter: has_profiles)."""
        plan = catalog.PROFILER_CLIENTS.plan(
            filters=filters, search=search, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit
        )
        return self.db.paginate(plan)

    def autocomplete(self, search: Optional[str] = None, limit: Any = None) -> Page[ProfilerClient]:
        """Name lookup: up to ``limit`` (default 5, at most 10) matches by name."""
        return self.db.paginate(catalog.PROFILER_CLIENTS.autocomplete_plan(search, limit))


class ProfilerBankService:
    """Service for managing profiler banks."""

    def __init__(self, db: Database):
        self.db = db

    def create_bank(self, bank_name: str) -> ProfilerBank:
        """Create a profiler bank.

        Raises:
            ValidationError: If the name is blank
            ConflictError: If a bank with that name exists
        """
        bank_id = self.db.create_profiler_bank(bank_name=clean_text(bank_name, "bank_name", required=True))
        return self.db.get_profiler_bank(bank_id)

    def get_bank(self, bank_id: int) -> Optional[ProfilerBank]:
        return self.db.get_profiler_bank(bank_id)

    def update_bank(self, bank_id: int, bank_name: Optional[str] = None) -> ProfilerBank:
        if self.db.get_profiler_bank(bank_id) is None:
            raise NotFoundError(entity_not_found("Profiler bank", bank_id))
        patch = build_patch(
            "profiler bank",
            bank_name=clean_text(bank_name, "bank_name") if bank_name is not None else None,
        )
        self.db.update_profiler_bank(bank_id, patch)
        return self.db.get_profiler_bank(bank_id)

    def delete_bank(self, bank_id: int) -> None:
        """Delete a profiler bank without profiles.

        Raises:
            NotFoundError: If the bank doesn't exist
            ConflictError: If profiles reference the bank
        """
        bank = self.db.get_profiler_bank(bank_id)
        if bank is None:
            raise NotFoundError(entity_not_found("Profiler bank", bank_id))
        if bank.profile_count > 0:
            raise ConflictError(delete_blocked("profiler bank", bank_id, bank.profile_count, "profile"))
        self.db.delete_profiler_bank(bank_id)

    def list_banks(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: Any = None,
        limit: Any = None,
    ) -> Page[ProfilerBank]:
        plan = catalog.PROFILER_BANKS.plan(
            filters=filters, search=search, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit
        )
        return self.db.paginate(plan)

    def autocomplete(self, search: Optional[str] = None, limit: Any = None) -> Page[ProfilerBank]:
        return self.db.paginate(catalog.PROFILER_BANKS.autocomplete_plan(search, limit))
