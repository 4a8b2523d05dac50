"""In-memory repository.

Evaluates ComposedQuery predicates against entities held in dicts. Used
by tests, the CLI demo, and as the default when no database is configured.
"""

import logging
from collections.abc import Iterable
from datetime import date
from typing import Any

from pressroom.core.types import Entity, EntityId, to_json_safe
from pressroom.persistence.adapter import QueryResult
from pressroom.query.composed import (
    AnyOf,
    ComposedQuery,
    Condition,
    Predicate,
    RelatedCondition,
)

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    return str(value).lower()


def _normalize(value: Any) -> Any:
    # date and datetime compare as ISO strings, like the SQL text columns
    if isinstance(value, date):
        return to_json_safe(value)
    return value


def _coerce(value: Any, actual: Any) -> Any:
    """Coerce a filter value towards the stored value's type, as SQL does."""
    value = _normalize(value)
    if isinstance(value, str) and isinstance(actual, (int, float)) and not isinstance(actual, bool):
        try:
            return type(actual)(value)
        except ValueError:
            return value
    return value


def _compare(op: str, actual: Any, value: Any) -> bool:
    if op in ("in", "notIn"):
        found = any(actual == _coerce(v, actual) for v in value)
        return found if op == "in" else not found
    if op == "between":
        low, high = _coerce(value[0], actual), _coerce(value[1], actual)
        return low <= actual <= high

    value = _coerce(value, actual)
    if op == "eq":
        return actual == value
    elif op == "neq":
        return actual != value
    elif op == "gt":
        return actual > value
    elif op == "gte":
        return actual >= value
    elif op == "lt":
        return actual < value
    elif op == "lte":
        return actual <= value

    raise ValueError(f"Unsupported operator '{op}'")


def match_condition(entity: Entity, cond: Condition) -> bool:
    """Evaluate one condition with SQL-like NULL semantics.

    Values of incomparable types never match.
    """
    op = cond.operator
    actual = entity.get(cond.field)

    if op == "isNull":
        return actual is None
    if op == "isNotNull":
        return actual is not None
    if actual is None:
        return False

    if op == "contains":
        return _text(cond.value) in _text(_normalize(actual))
    if op == "startsWith":
        return _text(_normalize(actual)).startswith(_text(cond.value))

    try:
        return _compare(op, _normalize(actual), cond.value)
    except TypeError:
        logger.debug("Cannot compare %s %r with %r", cond.field, actual, cond.value)
        return False


def _sort_key(entity: Entity, field: str) -> Any:
    return _normalize(entity.get(field))


class InMemoryRepository:
    """Simple dict-backed repository."""

    def __init__(self, entities: Iterable[Entity] = ()):
        self._collections: dict[str, dict[EntityId, Entity]] = {}
        for entity in entities:
            self.add(entity)

    def add(self, entity: Entity) -> Entity:
        """Insert or replace an entity."""
        self._collections.setdefault(entity.entity_type, {})[entity.id] = entity
        return entity

    def remove(self, entity_type: str, id: EntityId) -> bool:
        return self._collections.get(entity_type, {}).pop(id, None) is not None

    def get(self, entity_type: str, id: EntityId) -> Entity | None:
        return self._collections.get(entity_type, {}).get(id)

    def get_many(self, entity_type: str, ids: Iterable[EntityId]) -> list[Entity | None]:
        collection = self._collections.get(entity_type, {})
        return [collection.get(i) for i in ids]

    def all(self, entity_type: str) -> list[Entity]:
        return list(self._collections.get(entity_type, {}).values())

    def execute(self, query: ComposedQuery) -> QueryResult:
        """Run a composed query: filter, order, then slice.

        The total counts the same query without offset/limit.
        """
        matched = self._select(query.without_pagination())
        start = query.offset
        end = start + query.limit if query.limit is not None else None
        return QueryResult(items=matched[start:end], total=len(matched))

    def _select(self, query: ComposedQuery) -> list[Entity]:
        matched = [
            entity
            for entity in self.all(query.entity_type)
            if all(self._matches(entity, p) for p in query.predicates)
        ]

        # id is the final tie-breaker; sort keys are then applied in reverse
        # so the first clause ends up as the primary key
        matched.sort(key=lambda e: e.id)
        for clause in reversed(query.order):
            present = [e for e in matched if e.get(clause.field) is not None]
            missing = [e for e in matched if e.get(clause.field) is None]
            reverse = clause.direction == "desc"
            try:
                present = sorted(present, key=lambda e: _sort_key(e, clause.field), reverse=reverse)
            except TypeError:
                logger.warning(
                    "Mixed value types in %s.%s, ordering as text", query.entity_type, clause.field
                )
                present = sorted(present, key=lambda e: str(_sort_key(e, clause.field)), reverse=reverse)
            # NULLs last in both directions
            matched = present + missing
        return matched

    def _matches(self, entity: Entity, predicate: Predicate) -> bool:
        if isinstance(predicate, Condition):
            return match_condition(entity, predicate)
        if isinstance(predicate, AnyOf):
            return any(match_condition(entity, c) for c in predicate.conditions)
        if isinstance(predicate, RelatedCondition):
            key = entity.get(predicate.local_key)
            return any(
                other.get(predicate.foreign_key) == key
                and all(match_condition(other, c) for c in predicate.conditions)
                for other in self.all(predicate.entity_type)
            )
        raise TypeError(f"Unsupported predicate {type(predicate).__name__}")
