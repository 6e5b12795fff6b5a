"""Client, bank and card domain services for the ledger."""

from typing import Any, Optional

from finops.database.base import Database
from finops.domain import catalog
from finops.domain.entities import Bank, Card, Client
from finops.domain.errors import ConflictError, NotFoundError, delete_blocked, entity_not_found
from finops.domain.query import Page
from finops.utils.params import build_patch, clean_text


class ClientService:
    """Service for managing ledger clients."""

    def __init__(self, db: Database):
        """Initialize client service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_client(
        self,
        name: str,
        email: Optional[str] = None,
        contact: Optional[str] = None,
        address: Optional[str] = None,
    ) -> int:
        """Create a client.

        Args:
            name: Client name (unique)
            email: Optional email address
            contact: Optional phone or other contact
            address: Optional postal address

        Returns:
            Client ID

        Raises:
            ValidationError: If name is blank
            ConflictError: If a client with the same name exists
        """
        name = clean_text(name, "name", required=True)
        if self.db.get_client_by_name(name) is not None:
            raise ConflictError(f"Client with name '{name}' already exists")
        return self.db.create_client(
            name=name,
            email=clean_text(email, "email"),
            contact=clean_text(contact, "contact"),
            address=clean_text(address, "address"),
        )

    def get_client(self, client_id: int) -> Optional[Client]:
        """Get client by ID, including its transaction count."""
        return self.db.get_client(client_id)

    def get_client_by_name(self, name: str) -> Optional[Client]:
        """Get client by exact name."""
        return self.db.get_client_by_name(name)

    def update_client(
        self,
        client_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        contact: Optional[str] = None,
        address: Optional[str] = None,
    ) -> Client:
        """Update only the provided fields of a client.

        Raises:
            NotFoundError: If the client doesn't exist
            ValidationError: If no field is provided
            ConflictError: If the new name is taken by another client
        """
        if self.db.get_client(client_id) is None:
            raise NotFoundError(entity_not_found("Client", client_id))
        patch = build_patch(
            "client",
            name=clean_text(name, "name") if name is not None else None,
            email=email,
            contact=contact,
            address=address,
        )
        if "name" in patch:
            existing = self.db.get_client_by_name(patch["name"])
            if existing is not None and existing.id != client_id:
                raise ConflictError(f"Client with name '{patch['name']}' already exists")
        self.db.update_client(client_id, patch)
        return self.db.get_client(client_id)

    def delete_client(self, client_id: int) -> None:
        """Delete a client that has no transactions.

        Raises:
            NotFoundError: If the client doesn't exist
            ConflictError: If transactions reference the client
        """
        client = self.db.get_client(client_id)
        if client is None:
            raise NotFoundError(entity_not_found("Client", client_id))
        if client.transaction_count > 0:
            raise ConflictError(delete_blocked("client", client_id, client.transaction_count, "transaction"))
        self.db.delete_client(client_id)

    def list_clients(
        self,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: Any = None,
        limit: Any = None,
    ) -> Page[Client]:
        """List clients with search, sorting and pagination."""
        plan = catalog.CLIENTS.plan(
            search=search, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit
        )
        return self.db.paginate(plan)

    def autocomplete(self, search: Optional[str] = None, limit: Any = None) -> Page[Client]:
        """Name lookup: up to ``limit`` (default 5, at most 10) matches by name."""
        return self.db.paginate(catalog.CLIENTS.autocomplete_plan(search, limit))

    def resolve_client(self, client: str | int) -> int:
        """Resolve a client name or ID to an ID.

        Raises:
            NotFoundError: If no client matches
        """
        if isinstance(client, int) or str(client).strip().isdigit():
            client_id = int(client)
            if self.db.get_client(client_id) is None:
                raise NotFoundError(entity_not_found("Client", client_id))
            return client_id
        found = self.db.get_client_by_name(str(client).strip())
        if found is None:
            raise NotFoundError(f"Client '{client}' not found")
        return found.id


class BankService:
    """Service for managing ledger banks."""

    def __init__(self, db: Database):
        self.db = db

    def create_bank(self, name: str) -> int:
        """Create a bank and return its ID."""
        return self.db.create_bank(name=clean_text(name, "name", required=True))

    def get_bank(self, bank_id: int) -> Optional[Bank]:
        return self.db.get_bank(bank_id)

    def update_bank(self, bank_id: int, name: Optional[str] = None) -> Bank:
        """Rename a bank.

        Raises:
            NotFoundError: If the bank doesn't exist
            ValidationError: If no field is provided
        """
        if self.db.get_bank(bank_id) is None:
            raise NotFoundError(entity_not_found("Bank", bank_id))
        patch = build_patch("bank", name=clean_text(name, "name") if name is not None else None)
        self.db.update_bank(bank_id, patch)
        return self.db.get_bank(bank_id)

    def delete_bank(self, bank_id: int) -> None:
        """Delete a bank that no transaction references.

        Raises:
            NotFoundError: If the bank doesn't exist
            ConflictError: If transactions reference the bank
        """
        bank = self.db.get_bank(bank_id)
        if bank is None:
            raise NotFoundError(entity_not_found("Bank", bank_id))
        if bank.transaction_count > 0:
            raise ConflictError(delete_blocked("bank", bank_id, bank.transaction_count, "transaction"))
        self.db.delete_bank(bank_id)

    def list_banks(
        self,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: Any = None,
        limit: Any = None,
    ) -> Page[Bank]:
        plan = catalog.BANKS.plan(
            search=search, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit
        )
        return self.db.paginate(plan)

    def autocomplete(self, search: Optional[str] = None, limit: Any = None) -> Page[Bank]:
        return self.db.paginate(catalog.BANKS.autocomplete_plan(search, limit))


class CardService:
    """Service for managing ledger cards."""

    def __init__(self, db: Database):
        self.db = db

    def create_card(self, name: str) -> int:
        """Create a card and return its ID."""
        return self.db.create_card(name=clean_text(name, "name", required=True))

    def get_card(self, card_id: int) -> Optional[Card]:
        return self.db.get_card(card_id)

    def update_card(self, card_id: int, name: Optional[str] = None) -> Card:
        """Rename a card.

        Raises:
            NotFoundError: If the card doesn't exist
            ValidationError: If no field is provided
        """
        if self.db.get_card(card_id) is None:
            raise NotFoundError(entity_not_found("Card", card_id))
        patch = build_patch("card", name=clean_text(name, "name") if name is not None else None)
        self.db.update_card(card_id, patch)
        return self.db.get_card(card_id)

    def delete_card(self, card_id: int, cascade: bool = False) -> int:
        """Delete a card.

        Without ``cascade`` the card must be unreferenced. With it, the
        card is first cleared from every referencing transaction.

        Returns:
            Number of transactions detached from the card

        Raises:
            NotFoundError: If the card doesn't exist
            ConflictError: If transactions reference the card and cascade is off
        """
        card = self.db.get_card(card_id)
        if card is None:
            raise NotFoundError(entity_not_found("Card", card_id))
        if card.transaction_count > 0 and not cascade:
            raise ConflictError(delete_blocked("card", card_id, card.transaction_count, "transaction"))
        return self.db.delete_card(card_id, detach_transactions=cascade)

    def list_cards(
        self,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: Any = None,
        limit: Any = None,
    ) -> Page[Card]:
        plan = catalog.CARDS.plan(
            search=search, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit
        )
        return self.db.paginate(plan)

    def autocomplete(self, search: Optional[str] = None, limit: Any = None) -> Page[Card]:
        return self.db.paginate(catalog.CARDS.autocomplete_plan(search, limit))
