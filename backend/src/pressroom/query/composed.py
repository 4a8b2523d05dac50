"""Immutable query values produced by the QueryBuilder.

A ComposedQuery is never mutated: every builder step returns a new value,
so a query handed to a repository cannot change underneath it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Union

# Operator set understood by every repository
OPERATORS = frozenset(
    {
        "eq",
        "neq",
        "gt",
        "gte",
        "lt",
        "lte",
        "in",
        "notIn",
        "contains",
        "startsWith",
        "isNull",
        "isNotNull",
        "between",
    }
)

SORT_DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class Condition:
    """A single field predicate, e.g. ``Condition("status", "eq", "queued")``."""

    field: str
    operator: str
    value: Any = None

    def __post_init__(self) -> None:
        if self.operator not in OPERATORS:
            raise ValueError(f"Unsupported operator '{self.operator}'")
        if self.operator in ("in", "notIn", "between"):
            if isinstance(self.value, (str, bytes)) or not hasattr(self.value, "__iter__"):
                raise ValueError(f"Operator '{self.operator}' requires a sequence value")
            object.__setattr__(self, "value", tuple(self.value))
            if self.operator == "between" and len(self.value) != 2:
                raise ValueError("Operator 'between' requires exactly two values")

    def describe(self) -> dict[str, Any]:
        value = list(self.value) if isinstance(self.value, tuple) else self.value
        return {"field": self.field, "operator": self.operator, "value": value}


@dataclass(frozen=True)
class AnyOf:
    """Conditions OR-ed together as one predicate."""

    conditions: tuple[Condition, ...]

    def describe(self) -> dict[str, Any]:
        return {"anyOf": [c.describe() for c in self.conditions]}


@dataclass(frozen=True)
class RelatedCondition:
    """JOIN-equivalent: at least one related record must match.

    Attributes:
        entity_type: Related collection (e.g., "StageAssignment")
        foreign_key: Field on the related record pointing at ``local_key``
        conditions: Conditions the related record must satisfy (AND)
        local_key: Field on the base record the foreign key references
    """

    entity_type: str
    foreign_key: str
    conditions: tuple[Condition, ...] = ()
    local_key: str = "id"

    def describe(self) -> dict[str, Any]:
        return {
            "related": self.entity_type,
            "on": f"{self.foreign_key} = {self.local_key}",
            "conditions": [c.describe() for c in self.conditions],
        }


Predicate = Union[Condition, AnyOf, RelatedCondition]


@dataclass(frozen=True)
class OrderClause:
    field: str
    direction: str = "asc"

    def __post_init__(self) -> None:
        if self.direction not in SORT_DIRECTIONS:
            raise ValueError(f"Sort direction must be one of {SORT_DIRECTIONS}")


@dataclass(frozen=True)
class ComposedQuery:
    """An executable query for one entity type.

    Predicates are AND-combined; conflicting predicates produce a narrower
    (possibly empty) result rather than an error.
    """

    entity_type: str
    predicates: tuple[Predicate, ...] = ()
    order: tuple[OrderClause, ...] = ()
    offset: int = 0
    limit: int | None = None

    def where(self, *predicates: Predicate) -> ComposedQuery:
        """Return a copy with ``predicates`` appended."""
        return replace(self, predicates=self.predicates + tuple(predicates))

    def order_by(self, *clauses: OrderClause) -> ComposedQuery:
        """Return a copy whose ordering is replaced by ``clauses``."""
        return replace(self, order=tuple(clauses))

    def paginate(self, offset: int, limit: int | None) -> ComposedQuery:
        return replace(self, offset=offset, limit=limit)

    def without_pagination(self) -> ComposedQuery:
        """The same filters with no offset/limit, used for total counts."""
        return replace(self, offset=0, limit=None)

    def describe(self) -> dict[str, Any]:
        """JSON-safe description, for logging and the CLI."""
        return {
            "entityType": self.entity_type,
            "predicates": [p.describe() for p in self.predicates],
            "order": [{"field": o.field, "direction": o.direction} for o in self.order],
            "offset": self.offset,
            "limit": self.limit,
        }
