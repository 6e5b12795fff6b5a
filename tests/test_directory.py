"""Tests for client, bank and card services."""

import pytest

from finops.domain.errors import ConflictError, NotFoundError, ValidationError


class TestClientService:
    def test_create_and_get(self, client_service):
        client_id = client_service.create_client(
            "  Acme Traders ", email="ops@acme.test", contact="555-0100"
        )

        client = client_service.get_client(client_id)
        assert client.name == "Acme Traders"
        assert client.email == "ops@acme.test"
        assert client.contact == "555-0100"
        assert client.address is None
        assert client.transaction_count == 0

    def test_duplicate_name_conflicts(self, client_service):
        client_service.create_client("Acme Traders")

        with pytest.raises(ConflictError, match="already exists"):
            client_service.create_client("Acme Traders")

    def test_blank_name_rejected(self, client_service):
        with pytest.raises(ValidationError):
            client_service.create_client("   ")

    def test_update_only_provided_fields(self, client_service):
        client_id = client_service.create_client("Acme", email="a@acme.test", contact="1")

        updated = client_service.update_client(client_id, contact="2")

        assert updated.contact == "2"
        assert updated.name == "Acme"
        assert updated.email == "a@acme.test"

    def test_update_without_fields_rejected(self, client_service):
        client_id = client_service.create_client("Acme")

        with pytest.raises(ValidationError, match="No fields provided"):
            client_service.update_client(client_id)

    def test_update_missing_client(self, client_service):
        with pytest.raises(NotFoundError):
            client_service.update_client(999, name="Ghost")

    def test_rename_to_taken_name_conflicts(self, client_service):
        client_service.create_client("Acme")
        other = client_service.create_client("Zen")

        with pytest.raises(ConflictError):
            client_service.update_client(other, name="Acme")

    def test_delete_blocked_by_transactions(self, client_service, sample_ledger):
        acme = sample_ledger["clients"]["acme"]

        with pytest.raises(ConflictError, match="2 transactions"):
            client_service.delete_client(acme)
        assert client_service.get_client(acme) is not None

    def test_delete_unreferenced(self, client_service):
        client_id = client_service.create_client("Temp")

        client_service.delete_client(client_id)

        assert client_service.get_client(client_id) is None

    def test_delete_missing(self, client_service):
        with pytest.raises(NotFoundError):
            client_service.delete_client(42)

    def test_resolve_by_name_or_id(self, client_service):
        client_id = client_service.create_client("Acme")

        assert client_service.resolve_client("Acme") == client_id
        assert client_service.resolve_client(str(client_id)) == client_id
        with pytest.raises(NotFoundError):
            client_service.resolve_client("Nobody")

    def test_list_with_counts_and_sort(self, client_service, sample_ledger):
        page = client_service.list_clients(sort_by="transaction_count", sort_order="desc")

        assert [c.name for c in page.rows] == ["Zen Stores", "Acme Traders"]
        assert [c.transaction_count for c in page.rows] == [3, 2]

    def test_list_search(self, client_service, sample_ledger):
        page = client_service.list_clients(search="acme.test")

        assert [c.name for c in page.rows] == ["Acme Traders"]
        assert page.total_count == 1


class TestBankAndCardServices:
    def test_rename_bank(self, bank_service):
        bank_id = bank_service.create_bank("HDFC")

        bank = bank_service.update_bank(bank_id, name="HDFC Bank")

        assert bank.name == "HDFC Bank"

    def test_duplicate_bank_conflicts(self, bank_service):
        bank_service.create_bank("HDFC")

        with pytest.raises(ConflictError):
            bank_service.create_bank("HDFC")

    def test_delete_referenced_bank_blocked(self, bank_service, sample_ledger):
        with pytest.raises(ConflictError):
            bank_service.delete_bank(sample_ledger["bank"])

    def test_delete_referenced_card_blocked(self, card_service, sample_ledger):
        with pytest.raises(ConflictError):
            card_service.delete_card(sample_ledger["card"])

    def test_cascade_detaches_transactions(self, card_service, transaction_service, sample_ledger):
        card_id = sample_ledger["card"]
        deposit = sample_ledger["transactions"][0]

        detached = card_service.delete_card(card_id, cascade=True)

        assert detached == 1
        assert card_service.get_card(card_id) is None
        reloaded = transaction_service.get_transaction(deposit.id)
        assert reloaded.card_id is None
        assert reloaded.card_name is None

    def test_list_banks_paginates(self, bank_service):
        for name in ("Axis", "Bandhan", "Canara", "DBS"):
            bank_service.create_bank(name)

        page = bank_service.list_banks(page=2, limit=3)

        assert [b.name for b in page.rows] == ["DBS"]
        assert page.total_count == 4
        assert page.total_pages == 2
        assert not page.has_next
        assert page.has_previous


class TestAutocomplete:
    def test_default_limit_and_name_order(self, client_service):
        for n in range(12, 0, -1):
            client_service.create_client(f"Shop {n:02d}")

        matches = client_service.autocomplete("shop")

        assert [c.name for c in matches.rows] == [f"Shop {n:02d}" for n in range(1, 6)]
        assert matches.total_count == 12

    @pytest.mark.parametrize("limit, expected", [("50", 10), (0, 1), (3, 3)])
    def test_limit_is_clamped(self, client_service, limit, expected):
        for n in range(12):
            client_service.create_client(f"Shop {n:02d}")

        assert len(client_service.autocomplete("shop", limit=limit).rows) == expected

    def test_exact_match_gets_no_priority(self, client_service):
        client_service.create_client("Gold")
        client_service.create_client("Alpha Gold")

        matches = client_service.autocomplete("gold")

        assert [c.name for c in matches.rows] == ["Alpha Gold", "Gold"]

    def test_banks_and_cards(self, bank_service, card_service, sample_ledger):
        bank_service.create_bank("Axis")

        assert [b.name for b in bank_service.autocomplete("hd").rows] == ["HDFC"]
        assert [b.name for b in bank_service.autocomplete(None).rows] == ["Axis", "HDFC"]
        assert [c.name for c in card_service.autocomplete("GOL").rows] == ["Gold"]
