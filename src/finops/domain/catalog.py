"""Per-entity filter, search and sort tables for the generic query engine.

Field names here are logical; the database layer maps each one to a
column or derived expression of the entity's source query.
"""

from finops.domain.errors import ValidationError
from finops.domain.entities import ProfileStatus, ProfilerTransactionType, TransactionType
from finops.domain.query import EntityQuery, FilterField, FilterKind, SortDirection, SortKey
from finops.utils.params import (
    choice_or_choices,
    parse_bool,
    parse_date_value,
    parse_decimal,
    parse_id_list,
    parse_id_or_ids,
    parse_non_negative_decimal,
)


def _transaction_type(value, field):
    try:
        return TransactionType.parse(value)
    except ValueError:
        raise ValidationError(
            f"{field} must be deposit (0) or withdraw (1), got '{value}'", field=field
        )


TRANSACTIONS = EntityQuery(
    name="transactions",
    filters=(
        FilterField("transaction_type", "transaction_type", FilterKind.EQUALS, _transaction_type),
        FilterField("min_amount", "transaction_amount", FilterKind.MIN, parse_non_negative_decimal),
        FilterField("max_amount", "transaction_amount", FilterKind.MAX, parse_non_negative_decimal),
        FilterField("start_date", "create_date", FilterKind.DATE_FROM, parse_date_value),
        FilterField("end_date", "create_date", FilterKind.DATE_TO, parse_date_value),
        FilterField("bank_ids", "bank_id", FilterKind.IN_SET, parse_id_list),
        FilterField("card_ids", "card_id", FilterKind.IN_SET, parse_id_list),
        FilterField("client_ids", "client_id", FilterKind.IN_SET, parse_id_list),
    ),
    search_fields=(
        "client_name",
        "bank_name",
        "card_name",
        "remark",
        "transaction_amount_text",
        "withdraw_charges_text",
    ),
    exact_fields=("client_name", "bank_name", "card_name", "remark"),
    sort_keys=(
        SortKey("create_date", "create_date", tie_breakers=("create_time",)),
        SortKey("transaction_amount", "transaction_amount"),
        SortKey(
            "client_name",
            "client_name",
            case_insensitive=True,
            tie_breakers=("create_date", "create_time"),
        ),
        SortKey("bank_name", "bank_name", case_insensitive=True),
        SortKey("card_name", "card_name", case_insensitive=True),
    ),
    default_sort="create_date",
    default_direction=SortDirection.DESC,
)

CLIENTS = EntityQuery(
    name="clients",
    filters=(),
    search_fields=("name", "email", "contact", "address"),
    exact_fields=("name", "email", "contact"),
    sort_keys=(
        SortKey("name", "name", case_insensitive=True),
        SortKey("email", "email", case_insensitive=True),
        SortKey("contact", "contact", case_insensitive=True),
        SortKey("create_date", "created_at"),
        SortKey("transaction_count", "transaction_count"),
    ),
    default_sort="name",
)

BANKS = EntityQuery(
    name="banks",
    filters=(),
    search_fields=("name",),
    exact_fields=("name",),
    sort_keys=(
        SortKey("name", "name", case_insensitive=True),
        SortKey("create_date", "created_at"),
        SortKey("transaction_count", "transaction_count"),
    ),
    default_sort="name",
)

CARDS = EntityQuery(
    name="cards",
    filters=(),
    search_fields=("name",),
    exact_fields=("name",),
    sort_keys=BANKS.sort_keys,
    default_sort="name",
)

PROFILER_CLIENTS = EntityQuery(
    name="profiler_clients",
    filters=(FilterField("has_profiles", "profile_count", FilterKind.NONZERO, parse_bool),),
    search_fields=("name", "email", "mobile_number", "aadhaar_card_number", "notes"),
    exact_fields=("name", "email", "mobile_number", "aadhaar_card_number"),
    sort_keys=(
        SortKey("name", "name", case_insensitive=True),
        SortKey("email", "email", case_insensitive=True),
        SortKey("created_at", "created_at"),
        SortKey("profile_count", "profile_count"),
    ),
    default_sort="name",
)

PROFILER_BANKS = EntityQuery(
    name="profiler_banks",
    filters=(FilterField("has_profiles", "profile_count", FilterKind.NONZERO, parse_bool),),
    search_fields=("bank_name",),
    exact_fields=("bank_name",),
    sort_keys=(
        SortKey("bank_name", "bank_name", case_insensitive=True),
        SortKey("created_at", "created_at"),
        SortKey("profile_count", "profile_count"),
    ),
    default_sort="bank_name",
)

PROFILES = EntityQuery(
    name="profiler_profiles",
    filters=(
        FilterField("client_id", "client_id", FilterKind.ONE_OF, parse_id_or_ids),
        FilterField("bank_id", "bank_id", FilterKind.ONE_OF, parse_id_or_ids),
        FilterField(
            "status",
            "status",
            FilterKind.ONE_OF,
            choice_or_choices([s.value for s in ProfileStatus], ProfileStatus),
        ),
        FilterField("carry_forward_enabled", "carry_forward_enabled", FilterKind.EQUALS, parse_bool),
        FilterField("has_positive_balance", "remaining_balance", FilterKind.POSITIVE, parse_bool),
        FilterField("has_negative_balance", "remaining_balance", FilterKind.NEGATIVE, parse_bool),
        FilterField("balance_greater_than", "remaining_balance", FilterKind.GREATER, parse_decimal),
        FilterField("balance_less_than", "remaining_balance", FilterKind.LESS, parse_decimal),
        FilterField("created_at_start", "created_at", FilterKind.DATE_FROM, parse_date_value),
        FilterField("created_at_end", "created_at", FilterKind.DATE_TO, parse_date_value),
        FilterField(
            "pre_planned_deposit_amount",
            "pre_planned_deposit_amount",
            FilterKind.EQUALS,
            parse_non_negative_decimal,
        ),
        FilterField("min_deposit_amount", "pre_planned_deposit_amount", FilterKind.MIN, parse_non_negative_decimal),
        FilterField("max_deposit_amount", "pre_planned_deposit_amount", FilterKind.MAX, parse_non_negative_decimal),
    ),
    search_fields=("client_name", "bank_name", "credit_card_number"),
    exact_fields=("client_name", "bank_name", "credit_card_number"),
    sort_keys=(
        SortKey("client_name", "client_name", case_insensitive=True),
        SortKey("bank_name", "bank_name", case_insensitive=True),
        SortKey("credit_card_number", "credit_card_number"),
        SortKey("pre_planned_deposit_amount", "pre_planned_deposit_amount"),
        SortKey("current_balance", "current_balance"),
        SortKey("total_withdrawn_amount", "total_withdrawn_amount"),
        SortKey("remaining_balance", "remaining_balance"),
        SortKey("created_at", "created_at"),
        SortKey("transaction_count", "transaction_count"),
    ),
    default_sort="created_at",
    default_direction=SortDirection.DESC,
)

PROFILER_TRANSACTIONS = EntityQuery(
    name="profiler_transactions",
    filters=(
        FilterField("profile_id", "profile_id", FilterKind.ONE_OF, parse_id_or_ids),
        FilterField("client_id", "client_id", FilterKind.ONE_OF, parse_id_or_ids),
        FilterField("bank_id", "bank_id", FilterKind.ONE_OF, parse_id_or_ids),
        FilterField(
            "transaction_type",
            "transaction_type",
            FilterKind.ONE_OF,
            choice_or_choices([t.value for t in ProfilerTransactionType], ProfilerTransactionType),
        ),
        FilterField("amount_greater_than", "amount", FilterKind.GREATER, parse_decimal),
        FilterField("amount_less_than", "amount", FilterKind.LESS, parse_decimal),
        FilterField("date_from", "created_at", FilterKind.DATE_FROM, parse_date_value),
        FilterField("date_to", "created_at", FilterKind.DATE_TO, parse_date_value),
    ),
    search_fields=(
        "client_name",
        "bank_name",
        "credit_card_number",
        "notes",
        "amount_text",
        "withdraw_charges_percentage_text",
        "withdraw_charges_amount_text",
    ),
    exact_fields=("client_name", "bank_name", "credit_card_number"),
    sort_keys=(
        SortKey("created_at", "created_at"),
        SortKey("amount", "amount"),
        SortKey("transaction_type", "transaction_type"),
        SortKey("client_name", "client_name", case_insensitive=True),
        SortKey("bank_name", "bank_name", case_insensitive=True),
    ),
    default_sort="created_at",
    default_direction=SortDirection.DESC,
)
