"""Tests for profiler clients, banks, profiles and the balance ledger."""

from decimal import Decimal

import pytest

from finops.domain.entities import ProfileStatus, ProfilerTransactionType
from finops.domain.errors import ConflictError, NotFoundError, ValidationError
from finops.domain.profiler import calculate_withdraw_charges


class TestChargeCalculation:
    def test_rounds_half_up_to_cents(self):
        assert calculate_withdraw_charges(Decimal("333.33"), Decimal("1.5")) == Decimal("5.00")
        assert calculate_withdraw_charges(Decimal("100.50"), Decimal("2.5")) == Decimal("2.51")

    def test_missing_percentage_means_no_charge(self):
        assert calculate_withdraw_charges(Decimal("100"), None) == Decimal("0.00")


class TestProfilerDirectory:
    def test_client_names_need_not_be_unique(self, profiler_client_service):
        first = profiler_client_service.create_client("Ravi Kumar")
        second = profiler_client_service.create_client("Ravi Kumar")

        assert first.id != second.id

    def test_bank_names_are_unique(self, profiler_bank_service):
        profiler_bank_service.create_bank("ICICI")

        with pytest.raises(ConflictError):
            profiler_bank_service.create_bank("ICICI")

    def test_delete_client_with_profiles_blocked(self, profiler_client_service, sample_profile):
        with pytest.raises(ConflictError, match="1 profile"):
            profiler_client_service.delete_client(sample_profile.client_id)

    def test_delete_bank_with_profiles_blocked(self, profiler_bank_service, sample_profile):
        with pytest.raises(ConflictError):
            profiler_bank_service.delete_bank(sample_profile.bank_id)

    def test_has_profiles_filter(self, profiler_client_service, sample_profile):
        profiler_client_service.create_client("No Profile")

        with_profiles = profiler_client_service.list_clients(filters={"has_profiles": "true"})
        without_profiles = profiler_client_service.list_clients(filters={"has_profiles": "false"})

        assert [c.name for c in with_profiles.rows] == ["Ravi Kumar"]
        assert [c.name for c in without_profiles.rows] == ["No Profile"]

    def test_update_client_selectively(self, profiler_client_service):
        client = profiler_client_service.create_client("Ravi", email="r@x.test", notes="vip")

        updated = profiler_client_service.update_client(client.id, notes="regular")

        assert updated.notes == "regular"
        assert updated.email == "r@x.test"


class TestProfiles:
    def test_new_profile_opens_with_planned_deposit(self, sample_profile):
        assert sample_profile.status is ProfileStatus.ACTIVE
        assert sample_profile.current_balance == Decimal("10000")
        assert sample_profile.total_withdrawn_amount == Decimal("0")
        assert sample_profile.remaining_balance == Decimal("10000")
        assert sample_profile.client_name == "Ravi Kumar"
        assert sample_profile.bank_name == "ICICI"

    def test_create_requires_client_and_bank(self, profile_service, profiler_bank_service):
        bank = profiler_bank_service.create_bank("SBI")

        with pytest.raises(NotFoundError):
            profile_service.create_profile(client_id=77, bank_id=bank.id, pre_planned_deposit_amount="0")

    def test_negative_planned_deposit_rejected(self, profile_service, sample_profile):
        with pytest.raises(ValidationError):
            profile_service.create_profile(
                client_id=sample_profile.client_id,
                bank_id=sample_profile.bank_id,
                pre_planned_deposit_amount="-1",
            )

    def test_mark_done_once(self, profile_service, sample_profile):
        done = profile_service.mark_done(sample_profile.id)

        assert done.status is ProfileStatus.DONE
        assert done.marked_done_at is not None
        with pytest.raises(NotFoundError, match="Active profiler profile"):
            profile_service.mark_done(sample_profile.id)

    def test_update_profile_leaves_balances(self, profile_service, sample_profile):
        updated = profile_service.update_profile(sample_profile.id, notes="renewed", carry_forward_enabled="yes")

        assert updated.notes == "renewed"
        assert updated.carry_forward_enabled is True
        assert updated.current_balance == sample_profile.current_balance

    def test_delete_profile_with_transactions_blocked(
        self, profile_service, profiler_transaction_service, sample_profile
    ):
        profiler_transaction_service.create_transaction(sample_profile.id, "deposit", "10")

        with pytest.raises(ConflictError):
            profile_service.delete_profile(sample_profile.id)

    def test_delete_empty_profile(self, profile_service, sample_profile):
        profile_service.delete_profile(sample_profile.id)

        assert profile_service.get_profile(sample_profile.id) is None

    def test_filter_profiles_by_status_and_balance(
        self, profile_service, profiler_transaction_service, sample_profile
    ):
        second = profile_service.create_profile(
            client_id=sample_profile.client_id,
            bank_id=sample_profile.bank_id,
            pre_planned_deposit_amount="100",
        )
        profiler_transaction_service.create_transaction(second.id, "withdraw", "250")
        profile_service.mark_done(sample_profile.id)

        negative = profile_service.list_profiles(filters={"has_negative_balance": True})
        active = profile_service.list_profiles(filters={"status": "active"})

        assert [p.id for p in negative.rows] == [second.id]
        assert [p.id for p in active.rows] == [second.id]


class TestLedger:
    def test_deposit_raises_current_balance(self, profile_service, profiler_transaction_service, sample_profile):
        profiler_transaction_service.create_transaction(sample_profile.id, "deposit", "500")

        profile = profile_service.get_profile(sample_profile.id)
        assert profile.current_balance == Decimal("10500")
        assert profile.total_withdrawn_amount == Decimal("0")

    def test_withdrawal_raises_total_withdrawn(
        self, profile_service, profiler_transaction_service, sample_profile
    ):
        recorded = profiler_transaction_service.create_transaction(
            sample_profile.id, "withdraw", "2000", withdraw_charges_percentage="2.5"
        )

        profile = profile_service.get_profile(sample_profile.id)
        assert profile.current_balance == Decimal("10000")
        assert profile.total_withdrawn_amount == Decimal("2000")
        assert profile.remaining_balance == Decimal("8000")
        assert recorded.transaction_type is ProfilerTransactionType.WITHDRAW
        assert recorded.withdraw_charges_amount == Decimal("50.00")

    def test_deposit_ignores_charge_percentage(self, profiler_transaction_service, sample_profile):
        recorded = profiler_transaction_service.create_transaction(
            sample_profile.id, "deposit", "100", withdraw_charges_percentage="5"
        )

        assert recorded.withdraw_charges_percentage is None
        assert recorded.withdraw_charges_amount == Decimal("0")

    def test_invalid_percentage_rejected(self, profiler_transaction_service, sample_profile):
        with pytest.raises(ValidationError) as exc_info:
            profiler_transaction_service.create_transaction(
                sample_profile.id, "withdraw", "100", withdraw_charges_percentage="101"
            )

        assert exc_info.value.field == "withdraw_charges_percentage"

    def test_non_positive_amount_rejected(self, profiler_transaction_service, sample_profile):
        with pytest.raises(ValidationError):
            profiler_transaction_service.create_transaction(sample_profile.id, "deposit", "0")

    def test_missing_profile(self, profiler_transaction_service):
        with pytest.raises(NotFoundError):
            profiler_transaction_service.create_transaction(404, "deposit", "10")

    def test_done_profile_rejects_transactions(
        self, profile_service, profiler_transaction_service, sample_profile
    ):
        profile_service.mark_done(sample_profile.id)

        with pytest.raises(ConflictError):
            profiler_transaction_service.create_transaction(sample_profile.id, "deposit", "10")
        assert profile_service.get_profile(sample_profile.id).current_balance == Decimal("10000")

    def test_charge_is_frozen(self, profile_service, profiler_transaction_service, sample_profile):
        recorded = profiler_transaction_service.create_transaction(
            sample_profile.id, "withdraw", "1000", withdraw_charges_percentage="3"
        )
        profile_service.update_profile(sample_profile.id, notes="rates changed")

        reloaded = profiler_transaction_service.get_transaction(recorded.id)
        assert reloaded.withdraw_charges_amount == Decimal("30.00")

    def test_delete_reverses_balance_effect(
        self, profile_service, profiler_transaction_service, sample_profile
    ):
        deposit = profiler_transaction_service.create_transaction(sample_profile.id, "deposit", "700")
        withdrawal = profiler_transaction_service.create_transaction(sample_profile.id, "withdraw", "300")

        profiler_transaction_service.delete_transaction(deposit.id)
        profiler_transaction_service.delete_transaction(withdrawal.id)

        profile = profile_service.get_profile(sample_profile.id)
        assert profile.current_balance == Decimal("10000")
        assert profile.total_withdrawn_amount == Decimal("0")

    def test_delete_on_done_profile_blocked(
        self, profile_service, profiler_transaction_service, sample_profile
    ):
        recorded = profiler_transaction_service.create_transaction(sample_profile.id, "deposit", "10")
        profile_service.mark_done(sample_profile.id)

        with pytest.raises(ConflictError):
            profiler_transaction_service.delete_transaction(recorded.id)

    def test_delete_missing_transaction(self, profiler_transaction_service):
        with pytest.raises(NotFoundError):
            profiler_transaction_service.delete_transaction(5)

    def test_list_summary_covers_all_matches(self, profiler_transaction_service, sample_profile):
        profiler_transaction_service.create_transaction(sample_profile.id, "deposit", "1000")
        profiler_transaction_service.create_transaction(
            sample_profile.id, "withdraw", "400", withdraw_charges_percentage="2"
        )
        profiler_transaction_service.create_transaction(sample_profile.id, "withdraw", "100")

        page = profiler_transaction_service.list_transactions(
            filters={"profile_id": sample_profile.id}, limit=1
        )

        assert len(page.rows) == 1
        assert page.total_count == 3
        summary = page.extra["summary"]
        assert summary["total_deposits"] == Decimal("1000")
        assert summary["total_withdrawals"] == Decimal("500")
        assert summary["total_charges"] == Decimal("8")
        assert summary["net_amount"] == Decimal("492")

    def test_list_filters_by_type(self, profiler_transaction_service, sample_profile):
        profiler_transaction_service.create_transaction(sample_profile.id, "deposit", "1")
        profiler_transaction_service.create_transaction(sample_profile.id, "withdraw", "2")

        page = profiler_transaction_service.list_transactions(filters={"transaction_type": "withdraw"})

        assert [t.amount for t in page.rows] == [Decimal("2")]
        assert page.extra["summary"]["total_deposits"] == Decimal("0")


class TestAutocomplete:
    def test_clients_by_name_or_mobile(self, profiler_client_service, sample_profile):
        profiler_client_service.create_client("Ravi Shah")

        assert [c.name for c in profiler_client_service.autocomplete("ravi").rows] == ["Ravi Kumar", "Ravi Shah"]
        assert [c.name for c in profiler_client_service.autocomplete("98765").rows] == ["Ravi Kumar"]

    def test_banks(self, profiler_bank_service, sample_profile):
        profiler_bank_service.create_bank("Axis")

        assert [b.bank_name for b in profiler_bank_service.autocomplete("ici").rows] == ["ICICI"]

    def test_profiles_ordered_by_client_and_filtered(
        self, profile_service, profiler_client_service, sample_profile
    ):
        anil = profiler_client_service.create_client("Anil Mehta")
        other = profile_service.create_profile(
            client_id=anil.id, bank_id=sample_profile.bank_id, pre_planned_deposit_amount="500"
        )
        profile_service.mark_done(sample_profile.id)

        everything = profile_service.autocomplete("icici")
        active = profile_service.autocomplete("icici", status="active")
        ravi = profile_service.autocomplete("4111", client_id=sample_profile.client_id)

        assert [p.client_name for p in everything.rows] == ["Anil Mehta", "Ravi Kumar"]
        assert [p.id for p in active.rows] == [other.id]
        assert [p.id for p in ravi.rows] == [sample_profile.id]
