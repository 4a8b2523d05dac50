"""Filter clause definitions.

Each recognized filter key maps to a clause function that takes the
current ComposedQuery and the caller's value and returns a new query.
Clause functions raise ValueError/TypeError for values they cannot use;
the QueryBuilder reports those as InvalidFilterValueError.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from pressroom.query.composed import AnyOf, ComposedQuery, Condition, RelatedCondition

ClauseFn = Callable[[ComposedQuery, Any], ComposedQuery]
Coerce = Callable[[Any], Any]

DEFAULT_PRECEDENCE = 100


@dataclass(frozen=True)
class FilterDefinition:
    """An allow-listed filter key.

    Attributes:
        key: Request parameter name (e.g., "status")
        apply: Clause function folding the value onto the query
        precedence: Lower values are applied first
        description: Human-readable description for the CLI
    """

    key: str
    apply: ClauseFn
    precedence: int = DEFAULT_PRECEDENCE
    description: str = ""


# =============================================================================
# Value coercion
# =============================================================================


def as_str(value: Any) -> str:
    if isinstance(value, (list, tuple, dict)):
        raise TypeError("expected a single value")
    return str(value)


def as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("expected an integer")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError("expected an integer")
    return int(value)


def as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    raise ValueError("expected a boolean")


def as_date(value: Any) -> str:
    """Normalize to an ISO date string, comparable with stored ISO values."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(str(value)).isoformat()


def as_list(value: Any, coerce: Coerce = as_str) -> list[Any]:
    """Accept a list, tuple, comma-separated string, or scalar."""
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",") if part.strip()]
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = list(value)
    else:
        items = [value]
    if not items:
        raise ValueError("expected at least one value")
    return [coerce(item) for item in items]


# =============================================================================
# Clause builders
# =============================================================================


def equals(
    key: str,
    field: str | None = None,
    coerce: Coerce = as_str,
    precedence: int = DEFAULT_PRECEDENCE,
) -> FilterDefinition:
    """``field = value``."""
    target = field or key

    def apply(query: ComposedQuery, value: Any) -> ComposedQuery:
        return query.where(Condition(target, "eq", coerce(value)))

    return FilterDefinition(key, apply, precedence, f"{target} equals value")


def one_of(
    key: str,
    field: str | None = None,
    coerce: Coerce = as_str,
    precedence: int = DEFAULT_PRECEDENCE,
) -> FilterDefinition:
    """``field IN (values)``; a single value is treated as a one-item list."""
    target = field or key

    def apply(query: ComposedQuery, value: Any) -> ComposedQuery:
        return query.where(Condition(target, "in", as_list(value, coerce)))

    return FilterDefinition(key, apply, precedence, f"{target} in values")


def search(
    key: str,
    fields: list[str],
    precedence: int = DEFAULT_PRECEDENCE,
) -> FilterDefinition:
    """Every word of the phrase must appear in at least one of ``fields``."""

    def apply(query: ComposedQuery, value: Any) -> ComposedQuery:
        words = as_str(value).split()
        for word in words:
            query = query.where(
                AnyOf(tuple(Condition(f, "contains", word) for f in fields))
            )
        return query

    return FilterDefinition(key, apply, precedence, f"words in {', '.join(fields)}")


def range_filter(
    key: str,
    field: str,
    operator: str,
    coerce: Coerce = as_str,
    precedence: int = DEFAULT_PRECEDENCE,
) -> FilterDefinition:
    """One side of a range, ``operator`` being one of gt/gte/lt/lte."""
    if operator not in ("gt", "gte", "lt", "lte"):
        raise ValueError(f"range_filter operator must be gt/gte/lt/lte, got '{operator}'")

    def apply(query: ComposedQuery, value: Any) -> ComposedQuery:
        return query.where(Condition(field, operator, coerce(value)))

    return FilterDefinition(key, apply, precedence, f"{field} {operator} value")


def flag(
    key: str,
    when_true: Callable[[], Any],
    when_false: Callable[[], Any] | None = None,
    precedence: int = DEFAULT_PRECEDENCE,
) -> FilterDefinition:
    """Boolean parameter selecting one of two predicates.

    ``when_true``/``when_false`` return a predicate to add; a missing
    ``when_false`` means a false value adds nothing.
    """

    def apply(query: ComposedQuery, value: Any) -> ComposedQuery:
        factory = when_true if as_bool(value) else when_false
        if factory is None:
            return query
        return query.where(factory())

    return FilterDefinition(key, apply, precedence, "boolean flag")


def related(
    key: str,
    entity_type: str,
    foreign_key: str,
    field: str,
    coerce: Coerce = as_str,
    precedence: int = DEFAULT_PRECEDENCE,
) -> FilterDefinition:
    """Match base records with a related ``entity_type`` record whose
    ``field`` is one of the supplied values."""

    def apply(query: ComposedQuery, value: Any) -> ComposedQuery:
        return query.where(
            RelatedCondition(
                entity_type=entity_type,
                foreign_key=foreign_key,
                conditions=(Condition(field, "in", as_list(value, coerce)),),
            )
        )

    return FilterDefinition(
        key, apply, precedence, f"related {entity_type}.{field} in values"
    )
