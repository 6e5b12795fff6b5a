"""Render query-plan conditions into SQLAlchemy expressions.

This is the single place where logical field names become SQL. Every
value is passed as a bound parameter; sets bind as one expanding
parameter.
"""

from enum import Enum
from typing import Any, Mapping

from sqlalchemy import Date, Numeric, String, and_, case, cast, func, or_
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.sql.functions import FunctionElement

from finops.domain.query import (
    Condition,
    DateRange,
    Equals,
    InSet,
    QueryPlan,
    Range,
    ResolvedSort,
    TextSearch,
)

ColumnMap = Mapping[str, ColumnElement]


class money_text(FunctionElement):
    """A numeric column as fixed two-decimal text, e.g. 1000 -> "1000.00"."""

    type = String()
    name = "money_text"
    inherit_cache = True


@compiles(money_text)
def _money_text(element, compiler, **kw):
    (column,) = element.clauses
    return compiler.process(cast(cast(column, Numeric(18, 2)), String), **kw)


@compiles(money_text, "sqlite")
def _money_text_sqlite(element, compiler, **kw):
    (column,) = element.clauses
    return compiler.process(case((column.is_(None), None), else_=func.printf("%.2f", column)), **kw)


def _bind(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _column(columns: ColumnMap, name: str) -> ColumnElement:
    try:
        return columns[name]
    except KeyError:
        raise KeyError(f"Field '{name}' is not queryable on this source") from None


def _text(column: ColumnElement) -> ColumnElement:
    """Lower-cased, null-safe text form of a column."""
    if not isinstance(column.type, String):
        column = cast(column, String)
    return func.lower(func.coalesce(column, ""))


def render_condition(condition: Condition, columns: ColumnMap) -> ColumnElement:
    column = _column(columns, condition.field)

    if isinstance(condition, Equals):
        return column == _bind(condition.value)

    if isinstance(condition, InSet):
        return column.in_([_bind(v) for v in condition.values])

    if isinstance(condition, Range):
        parts = []
        if condition.low is not None:
            parts.append(column >= condition.low if condition.inclusive else column > condition.low)
        if condition.high is not None:
            parts.append(column <= condition.high if condition.inclusive else column < condition.high)
        return and_(*parts)

    if isinstance(condition, DateRange):
        day = func.date(column, type_=Date)
        parts = []
        if condition.start is not None:
            parts.append(day >= condition.start)
        if condition.end is not None:
            parts.append(day <= condition.end)
        return and_(*parts)

    raise TypeError(f"Unsupported condition {condition!r}")


def exact_match(search: TextSearch, columns: ColumnMap) -> ColumnElement:
    """True when any exact-match field equals the term (case-insensitive)."""
    needle = search.term.lower()
    return or_(*[_text(_column(columns, name)) == needle for name in search.exact_fields])


def render_search(search: TextSearch, columns: ColumnMap) -> ColumnElement:
    """Substring match on any search field, OR exact match on any exact field."""
    needle = search.term.lower()
    partial = [
        _text(_column(columns, name)).contains(needle, autoescape=True)
        for name in search.fields
    ]
    return or_(*partial, exact_match(search, columns))


def render_where(plan: QueryPlan, columns: ColumnMap) -> list[ColumnElement]:
    """Build the WHERE clauses shared by the count and data queries."""
    clauses = [render_condition(condition, columns) for condition in plan.conditions]
    if plan.search is not None:
        clauses.append(render_search(plan.search, columns))
    return clauses


def render_order(sort: ResolvedSort, columns: ColumnMap) -> list[ColumnElement]:
    """Build ORDER BY terms; exact search hits (priority 0) sort first."""
    order: list[ColumnElement] = []
    if sort.priority is not None:
        order.append(case((exact_match(sort.priority, columns), 0), else_=1).asc())
    for term in sort.terms:
        column = _column(columns, term.field)
        if term.case_insensitive:
            column = func.lower(func.coalesce(column, ""))
        order.append(column.desc() if term.descending else column.asc())
    return order
