"""Generic query engine: typed conditions, ranked search, sort resolution and paging.

An ``EntityQuery`` is an entity-specific table of filter keys, searchable
fields and whitelisted sort keys. ``EntityQuery.plan`` turns a raw
parameter bag into an immutable ``QueryPlan`` that the database layer
renders into SQL. Nothing in this module touches the store.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar

from finops.domain.errors import ValidationError, invalid_range
from finops.utils.params import parse_int

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
AUTOCOMPLETE_LIMIT = 5
MAX_AUTOCOMPLETE_LIMIT = 10

T = TypeVar("T")


# Conditions --------------------------------------------------------------


@dataclass(frozen=True)
class Equals:
    """``field = value``"""

    field: str
    value: Any

    @property
    def params(self) -> tuple:
        return (self.value,)


@dataclass(frozen=True)
class Range:
    """Numeric range; either bound may be absent.

    Inclusive ranges render as ``>=``/``<=``, exclusive ones as ``>``/``<``.
    """

    field: str
    low: Any = None
    high: Any = None
    inclusive: bool = True

    @property
    def params(self) -> tuple:
        return tuple(v for v in (self.low, self.high) if v is not None)


@dataclass(frozen=True)
class InSet:
    """Set membership bound as a single array parameter."""

    field: str
    values: tuple

    @property
    def params(self) -> tuple:
        return (self.values,)


@dataclass(frozen=True)
class DateRange:
    """Date-only comparison; the stored timestamp is truncated to a date first."""

    field: str
    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def params(self) -> tuple:
        return tuple(v for v in (self.start, self.end) if v is not None)


@dataclass(frozen=True)
class TextSearch:
    """Case-insensitive search over several fields.

    Matches when any of ``fields`` contains the term, or any of
    ``exact_fields`` equals it. The exact-match test is also used by the
    sort stage to rank exact hits first.
    """

    term: str
    fields: tuple[str, ...]
    exact_fields: tuple[str, ...]

    @property
    def params(self) -> tuple:
        needle = self.term.lower()
        return (f"%{needle}%", needle)


Condition = Equals | Range | InSet | DateRange


# Filter table ------------------------------------------------------------


class FilterKind(Enum):
    """How one filter key maps onto a condition."""

    EQUALS = "equals"
    ONE_OF = "one_of"  # scalar -> Equals, collection -> InSet
    IN_SET = "in_set"
    MIN = "min"
    MAX = "max"
    GREATER = "greater"
    LESS = "less"
    DATE_FROM = "date_from"
    DATE_TO = "date_to"
    POSITIVE = "positive"  # flag: field > 0 when true
    NEGATIVE = "negative"  # flag: field < 0 when true
    NONZERO = "nonzero"  # flag: field > 0 when true, field = 0 when false


@dataclass(frozen=True)
class FilterField:
    """One accepted filter key.

    Args:
        key: Parameter name as it arrives from the caller
        field: Queryable field the condition applies to
        kind: Condition kind
        parse: Converts a raw (possibly string) value; raises ValidationError
    """

    key: str
    field: str
    kind: FilterKind
    parse: Callable[[Any, str], Any]


@dataclass(frozen=True)
class SortKey:
    """A whitelisted sort key and the fields it orders by."""

    name: str
    field: str
    case_insensitive: bool = False
    tie_breakers: tuple[str, ...] = ()


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: Optional[str], default: "SortDirection") -> "SortDirection":
        if value is None or str(value).strip() == "":
            return default
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(
                f"Invalid sort_order '{value}'. Must be 'asc' or 'desc'",
                field="sort_order",
            )


@dataclass(frozen=True)
class SortTerm:
    field: str
    descending: bool
    case_insensitive: bool = False


@dataclass(frozen=True)
class ResolvedSort:
    """Ordering produced by the sort resolver.

    When ``priority`` is set, rows matching it exactly sort first and
    ``terms`` only apply within each priority bucket.
    """

    key: str
    direction: SortDirection
    terms: tuple[SortTerm, ...]
    priority: Optional[TextSearch] = None


@dataclass(frozen=True)
class PageRequest:
    """Offset/limit window; page >= 1 and limit in [1, MAX_PAGE_SIZE]."""

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_params(
        cls,
        page: Any = None,
        limit: Any = None,
        default_limit: int = DEFAULT_PAGE_SIZE,
        max_limit: int = MAX_PAGE_SIZE,
    ) -> "PageRequest":
        """Parse and clamp raw page/limit values.

        Non-numeric input is a ValidationError; numeric input outside the
        allowed window is clamped.
        """
        page_value = parse_int(page, "page") if page not in (None, "") else 1
        limit_value = parse_int(limit, "limit") if limit not in (None, "") else default_limit
        return cls(
            page=max(1, page_value),
            limit=min(max(1, limit_value), max_limit),
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class QueryPlan:
    """Everything the store needs to run one paginated query."""

    entity: str
    conditions: tuple[Condition, ...]
    search: Optional[TextSearch]
    sort: ResolvedSort
    page: PageRequest
    filters_applied: Mapping[str, Any] = field(default_factory=dict)

    @property
    def params(self) -> tuple:
        """Positional parameters shared by the count and data queries."""
        values: list = []
        for condition in self.conditions:
            values.extend(condition.params)
        if self.search is not None:
            values.extend(self.search.params)
        return tuple(values)


# Page envelope -----------------------------------------------------------


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results.

    Only ``total_count`` is tracked; everything else is derived from it.
    """

    rows: tuple[T, ...]
    page: int
    per_page: int
    total_count: int
    plan: Optional[QueryPlan] = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.per_page) if self.per_page else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    def pagination(self) -> dict[str, Any]:
        return {
            "current_page": self.page,
            "per_page": self.per_page,
            "total_count": self.total_count,
            "total_pages": self.total_pages,
            "has_next_page": self.has_next,
            "has_previous_page": self.has_previous,
        }

    def to_dict(self, serialize: Callable[[T], Any]) -> dict[str, Any]:
        """Render the response envelope."""
        body: dict[str, Any] = {
            "data": [serialize(row) for row in self.rows],
            "pagination": self.pagination(),
        }
        if self.plan is not None:
            body["filters_applied"] = dict(self.plan.filters_applied)
            if self.plan.search is not None:
                body["search_applied"] = self.plan.search.term
            body["sort_applied"] = {
                "sort_by": self.plan.sort.key,
                "sort_order": self.plan.sort.direction.value,
            }
        body.update(self.extra)
        return body


# Entity query table ------------------------------------------------------


_RANGE_KINDS = {
    FilterKind.MIN: ("low", True),
    FilterKind.MAX: ("high", True),
    FilterKind.GREATER: ("low", False),
    FilterKind.LESS: ("high", False),
}


@dataclass(frozen=True)
class EntityQuery:
    """Filter, search and sort table for one entity."""

    name: str
    filters: tuple[FilterField, ...]
    search_fields: tuple[str, ...]
    exact_fields: tuple[str, ...]
    sort_keys: tuple[SortKey, ...]
    default_sort: str
    default_direction: SortDirection = SortDirection.ASC
    id_field: str = "id"

    def filter_field(self, key: str) -> FilterField:
        for spec in self.filters:
            if spec.key == key:
                return spec
        raise ValidationError(f"Unknown filter '{key}' for {self.name}", field=key)

    def parse_filters(self, raw: Optional[Mapping[str, Any]]) -> dict[str, Any]:
        """Parse raw filter values; unset (None/empty) keys are dropped."""
        parsed: dict[str, Any] = {}
        for key, value in (raw or {}).items():
            if value is None or (isinstance(value, str) and value.strip() == ""):
                continue
            if isinstance(value, (list, tuple, set, frozenset)) and not value:
                continue
            spec = self.filter_field(key)
            parsed[key] = spec.parse(value, key)
        return parsed

    def build_conditions(self, filters: Mapping[str, Any]) -> tuple[Condition, ...]:
        """Turn parsed filters into an ordered tuple of conditions.

        Range and date bounds on the same field merge into one condition.
        A lower bound above its upper bound is rejected.
        """
        conditions: list[Condition] = []
        ranges: dict[tuple[str, bool], dict[str, Any]] = {}
        dates: dict[str, dict[str, Any]] = {}
        slots: dict[Any, int] = {}

        for spec in self.filters:
            if spec.key not in filters:
                continue
            value = filters[spec.key]
            kind = spec.kind

            if kind in _RANGE_KINDS:
                side, inclusive = _RANGE_KINDS[kind]
                slot = (spec.field, inclusive)
                bounds = ranges.setdefault(slot, {"keys": []})
                bounds[side] = value
                bounds["keys"].append(spec.key)
                if slot not in slots:
                    slots[slot] = len(conditions)
                    conditions.append(None)  # placeholder
            elif kind in (FilterKind.DATE_FROM, FilterKind.DATE_TO):
                bounds = dates.setdefault(spec.field, {"keys": []})
                bounds["start" if kind is FilterKind.DATE_FROM else "end"] = value
                bounds["keys"].append(spec.key)
                if ("date", spec.field) not in slots:
                    slots[("date", spec.field)] = len(conditions)
                    conditions.append(None)
            elif kind is FilterKind.EQUALS:
                conditions.append(Equals(spec.field, value))
            elif kind is FilterKind.IN_SET:
                conditions.append(InSet(spec.field, tuple(value)))
            elif kind is FilterKind.ONE_OF:
                if isinstance(value, (list, tuple, set, frozenset)):
                    conditions.append(InSet(spec.field, tuple(value)))
                else:
                    conditions.append(Equals(spec.field, value))
            elif kind is FilterKind.POSITIVE:
                if value:
                    conditions.append(Range(spec.field, low=0, inclusive=False))
            elif kind is FilterKind.NEGATIVE:
                if value:
                    conditions.append(Range(spec.field, high=0, inclusive=False))
            elif kind is FilterKind.NONZERO:
                if value:
                    conditions.append(Range(spec.field, low=0, inclusive=False))
                else:
                    conditions.append(Equals(spec.field, 0))

        for (field_name, inclusive), bounds in ranges.items():
            low, high = bounds.get("low"), bounds.get("high")
            if low is not None and high is not None and low > high:
                raise ValidationError(
                    invalid_range(field_name, low, high),
                    field=bounds["keys"][0],
                    details={"keys": bounds["keys"], "min": str(low), "max": str(high)},
                )
            conditions[slots[(field_name, inclusive)]] = Range(
                field_name, low=low, high=high, inclusive=inclusive
            )

        for field_name, bounds in dates.items():
            start, end = bounds.get("start"), bounds.get("end")
            if start is not None and end is not None and start > end:
                raise ValidationError(
                    invalid_range(field_name, start, end),
                    field=bounds["keys"][0],
                    details={"keys": bounds["keys"], "min": str(start), "max": str(end)},
                )
            conditions[slots[("date", field_name)]] = DateRange(field_name, start=start, end=end)

        return tuple(conditions)

    def build_search(self, term: Optional[str]) -> Optional[TextSearch]:
        """Build the search condition; blank terms disable search."""
        if term is None or not str(term).strip():
            return None
        return TextSearch(
            term=str(term).strip(),
            fields=self.search_fields,
            exact_fields=self.exact_fields,
        )

    def resolve_sort(
        self,
        sort_by: Optional[str],
        sort_order: Optional[str],
        search: Optional[TextSearch] = None,
    ) -> ResolvedSort:
        """Resolve a whitelisted sort key into ordering terms.

        Unknown keys are rejected. Tie-breakers follow the primary key in the
        same direction; the id is always the final tie-breaker.
        """
        key_name = self.default_sort if sort_by in (None, "") else str(sort_by).strip()
        key = next((k for k in self.sort_keys if k.name == key_name), None)
        if key is None:
            allowed = ", ".join(k.name for k in self.sort_keys)
            raise ValidationError(
                f"Invalid sort_by '{key_name}'. Allowed values: {allowed}",
                field="sort_by",
                details={"allowed": [k.name for k in self.sort_keys]},
            )
        direction = SortDirection.parse(sort_order, self.default_direction)
        descending = direction is SortDirection.DESC

        terms = [SortTerm(key.field, descending, key.case_insensitive)]
        terms.extend(SortTerm(name, descending) for name in key.tie_breakers)
        if key.field != self.id_field and self.id_field not in key.tie_breakers:
            terms.append(SortTerm(self.id_field, descending))
        return ResolvedSort(
            key=key.name,
            direction=direction,
            terms=tuple(terms),
            priority=search,
        )

    def plan(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: Any = None,
        limit: Any = None,
        default_limit: int = DEFAULT_PAGE_SIZE,
    ) -> QueryPlan:
        """Validate a raw parameter bag and build a query plan.

        Raises:
            ValidationError: On unparsable values, inverted ranges, unknown
                filter or sort keys
        """
        parsed = self.parse_filters(filters)
        text = self.build_search(search)
        return QueryPlan(
            entity=self.name,
            conditions=self.build_conditions(parsed),
            search=text,
            sort=self.resolve_sort(sort_by, sort_order, text),
            page=PageRequest.from_params(page, limit, default_limit=default_limit),
            filters_applied=_applied(parsed),
        )

    def autocomplete_plan(
        self,
        search: Optional[str] = None,
        limit: Any = None,
        sort_by: Optional[str] = None,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> QueryPlan:
        """Build a plan for a short lookup list.

        Rows are substring matches on the search fields in ascending
        ``sort_by`` order (the default sort key when omitted), with no
        exact-match bias. Only the first page is fetched; ``limit``
        defaults to AUTOCOMPLETE_LIMIT and is clamped into
        [1, MAX_AUTOCOMPLETE_LIMIT].
        """
        parsed = self.parse_filters(filters)
        return QueryPlan(
            entity=self.name,
            conditions=self.build_conditions(parsed),
            search=self.build_search(search),
            sort=self.resolve_sort(sort_by, SortDirection.ASC.value),
            page=PageRequest.from_params(
                1, limit, default_limit=AUTOCOMPLETE_LIMIT, max_limit=MAX_AUTOCOMPLETE_LIMIT
            ),
            filters_applied=_applied(parsed),
        )


def _applied(parsed: Mapping[str, Any]) -> dict[str, Any]:
    applied: dict[str, Any] = {}
    for key, value in parsed.items():
        if isinstance(value, (tuple, list, set, frozenset)):
            applied[key] = [_plain(v) for v in value]
        else:
            applied[key] = _plain(value)
    return applied


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    return value
