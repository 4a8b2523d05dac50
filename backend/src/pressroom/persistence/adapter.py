"""EntityRepository Protocol: shared interface for all repositories."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from pressroom.core.types import Entity, EntityId
from pressroom.query.composed import ComposedQuery


@dataclass
class QueryResult:
    """One page of entities plus the total matching count.

    ``total`` is computed from the same predicates without pagination.
    """

    items: list[Entity] = field(default_factory=list)
    total: int = 0


@runtime_checkable
class EntityRepository(Protocol):
    """Interface all repositories must implement.

    The core never issues raw storage commands; it hands a ComposedQuery to
    ``execute`` and reads entities back.
    """

    def execute(self, query: ComposedQuery) -> QueryResult: ...

    def get(self, entity_type: str, id: EntityId) -> Entity | None: ...

    def get_many(self, entity_type: str, ids: Iterable[EntityId]) -> list[Entity | None]: ...

    def add(self, entity: Entity) -> Entity: ...

    def remove(self, entity_type: str, id: EntityId) -> bool: ...
