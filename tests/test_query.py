"""Tests for the query engine: conditions, sort resolution and paging."""

from datetime import date
from decimal import Decimal

import pytest

from finops.domain import catalog
from finops.domain.entities import ProfileStatus, TransactionType
from finops.domain.errors import ValidationError
from finops.domain.query import (
    DateRange,
    Equals,
    InSet,
    Page,
    PageRequest,
    Range,
    SortDirection,
)


def test_amount_bounds_merge_into_one_range():
    plan = catalog.TRANSACTIONS.plan(filters={"min_amount": "100", "max_amount": "500"})

    assert plan.conditions == (
        Range("transaction_amount", low=Decimal("100"), high=Decimal("500"), inclusive=True),
    )
    assert plan.params == (Decimal("100"), Decimal("500"))


def test_single_bound_range():
    plan = catalog.TRANSACTIONS.plan(filters={"max_amount": "250.50"})

    assert plan.conditions == (Range("transaction_amount", high=Decimal("250.50")),)


def test_inverted_amount_range_rejected():
    with pytest.raises(ValidationError) as exc_info:
        catalog.TRANSACTIONS.plan(filters={"min_amount": "500", "max_amount": "100"})

    assert exc_info.value.field == "min_amount"
    assert "greater than maximum" in str(exc_info.value)


def test_inverted_date_range_rejected():
    with pytest.raises(ValidationError):
        catalog.TRANSACTIONS.plan(filters={"start_date": "2024-02-01", "end_date": "2024-01-01"})


def test_date_bounds_merge_into_date_range():
    plan = catalog.TRANSACTIONS.plan(filters={"start_date": "2024-01-01", "end_date": "2024-01-31"})

    assert plan.conditions == (DateRange("create_date", date(2024, 1, 1), date(2024, 1, 31)),)
    assert plan.filters_applied == {"start_date": "2024-01-01", "end_date": "2024-01-31"}


def test_id_list_becomes_set_membership():
    plan = catalog.TRANSACTIONS.plan(filters={"client_ids": "3, 1,2"})

    assert plan.conditions == (InSet("client_id", (3, 1, 2)),)
    # The whole set binds as one parameter
    assert plan.params == ((3, 1, 2),)


def test_transaction_type_accepts_name_or_code():
    by_name = catalog.TRANSACTIONS.plan(filters={"transaction_type": "Withdraw"})
    by_code = catalog.TRANSACTIONS.plan(filters={"transaction_type": "1"})

    assert by_name.conditions == by_code.conditions == (
        Equals("transaction_type", TransactionType.WITHDRAW),
    )


def test_blank_filters_are_ignored():
    plan = catalog.TRANSACTIONS.plan(filters={"min_amount": "", "bank_ids": [], "card_ids": None})

    assert plan.conditions == ()
    assert plan.filters_applied == {}


def test_unknown_filter_key_rejected():
    with pytest.raises(ValidationError) as exc_info:
        catalog.TRANSACTIONS.plan(filters={"colour": "red"})

    assert exc_info.value.field == "colour"


def test_unparsable_filter_value_names_field():
    with pytest.raises(ValidationError) as exc_info:
        catalog.TRANSACTIONS.plan(filters={"min_amount": "lots"})

    assert exc_info.value.field == "min_amount"


def test_negative_amount_filter_rejected():
    with pytest.raises(ValidationError):
        catalog.TRANSACTIONS.plan(filters={"min_amount": "-5"})


def test_nonzero_flag_true_and_false():
    with_profiles = catalog.PROFILER_CLIENTS.plan(filters={"has_profiles": "true"})
    without_profiles = catalog.PROFILER_CLIENTS.plan(filters={"has_profiles": "false"})

    assert with_profiles.conditions == (Range("profile_count", low=0, inclusive=False),)
    assert without_profiles.conditions == (Equals("profile_count", 0),)


def test_positive_flag_only_applies_when_true():
    on = catalog.PROFILES.plan(filters={"has_positive_balance": True})
    off = catalog.PROFILES.plan(filters={"has_positive_balance": False})

    assert on.conditions == (Range("remaining_balance", low=0, inclusive=False),)
    assert off.conditions == ()


def test_exclusive_balance_bounds():
    plan = catalog.PROFILES.plan(filters={"balance_greater_than": "10", "balance_less_than": "90"})

    assert plan.conditions == (
        Range("remaining_balance", low=Decimal("10"), high=Decimal("90"), inclusive=False),
    )


def test_status_single_value_and_set():
    single = catalog.PROFILES.plan(filters={"status": "ACTIVE"})
    several = catalog.PROFILES.plan(filters={"status": "active,done"})

    assert single.conditions == (Equals("status", ProfileStatus.ACTIVE),)
    assert several.conditions == (InSet("status", (ProfileStatus.ACTIVE, ProfileStatus.DONE)),)
    assert several.filters_applied == {"status": ["active", "done"]}


def test_invalid_status_rejected():
    with pytest.raises(ValidationError) as exc_info:
        catalog.PROFILES.plan(filters={"status": "archived"})

    assert exc_info.value.details["allowed"] == ["active", "done"]


def test_default_sort_and_tie_breakers():
    plan = catalog.TRANSACTIONS.plan()

    assert plan.sort.key == "create_date"
    assert plan.sort.direction is SortDirection.DESC
    assert [(t.field, t.descending) for t in plan.sort.terms] == [
        ("create_date", True),
        ("create_time", True),
        ("id", True),
    ]


def test_client_name_sort_is_case_insensitive():
    plan = catalog.TRANSACTIONS.plan(sort_by="client_name", sort_order="ASC")

    first = plan.sort.terms[0]
    assert first.field == "client_name"
    assert first.case_insensitive
    assert not first.descending
    assert [t.field for t in plan.sort.terms[1:]] == ["create_date", "create_time", "id"]


def test_unknown_sort_key_rejected():
    with pytest.raises(ValidationError) as exc_info:
        catalog.TRANSACTIONS.plan(sort_by="password")

    assert exc_info.value.field == "sort_by"
    assert "transaction_amount" in exc_info.value.details["allowed"]


def test_invalid_sort_order_rejected():
    with pytest.raises(ValidationError):
        catalog.CLIENTS.plan(sort_order="sideways")


def test_search_sets_priority():
    plan = catalog.TRANSACTIONS.plan(search="  Acme  ")

    assert plan.search.term == "Acme"
    assert plan.sort.priority is plan.search
    assert plan.search.params == ("%acme%", "acme")


def test_blank_search_disabled():
    plan = catalog.TRANSACTIONS.plan(search="   ")

    assert plan.search is None
    assert plan.sort.priority is None


@pytest.mark.parametrize(
    "page, limit, expected",
    [
        (None, None, (1, 50)),
        ("0", "0", (1, 1)),
        (-3, 101, (1, 100)),
        ("4", "25", (4, 25)),
    ],
)
def test_page_request_clamps(page, limit, expected):
    request = PageRequest.from_params(page, limit)

    assert (request.page, request.limit) == expected


def test_page_request_rejects_non_numeric():
    with pytest.raises(ValidationError) as exc_info:
        PageRequest.from_params("two", None)

    assert exc_info.value.field == "page"


def test_page_request_offset():
    assert PageRequest(page=3, limit=20).offset == 40


def test_page_metadata():
    page = Page(rows=(1, 2), page=2, per_page=2, total_count=5)

    assert page.pagination() == {
        "current_page": 2,
        "per_page": 2,
        "total_count": 5,
        "total_pages": 3,
        "has_next_page": True,
        "has_previous_page": True,
    }


def test_empty_page_metadata():
    page = Page(rows=(), page=1, per_page=50, total_count=0)

    assert page.total_pages == 0
    assert not page.has_next
    assert not page.has_previous


def test_page_envelope_reports_applied_query():
    plan = catalog.TRANSACTIONS.plan(
        filters={"transaction_type": "deposit"}, search="acme", sort_by="transaction_amount"
    )
    page = Page(rows=("a",), page=1, per_page=50, total_count=1, plan=plan, extra={"note": 1})

    body = page.to_dict(str.upper)

    assert body["data"] == ["A"]
    assert body["filters_applied"] == {"transaction_type": 0}
    assert body["search_applied"] == "acme"
    assert body["sort_applied"] == {"sort_by": "transaction_amount", "sort_order": "desc"}
    assert body["note"] == 1
