"""Base class for per-entity-type services.

An EntityService answers "list / get / summarize / fully describe" for one
entity type by orchestrating the QueryBuilder, the repository and the
EntitySerializer. Related entity types are reached through the
ServiceRegistry, never by re-implementing their serialization.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import TYPE_CHECKING, Any, NamedTuple

from pressroom.core.types import (
    Entity,
    EntityId,
    RequestContext,
    SerializedRepresentation,
    Tier,
)
from pressroom.query.builder import QueryDefinition
from pressroom.query.composed import Condition, Predicate
from pressroom.query.spec import QuerySpec
from pressroom.serialization.constants import with_constants
from pressroom.serialization.schema import PropertySchema

if TYPE_CHECKING:
    from pressroom.services.registry import ServiceRegistry

logger = logging.getLogger(__name__)


class ListResult(NamedTuple):
    """A page of entities and the total number matching the same filters."""

    items: list[Entity]
    total: int


class EntityService:
    """Service for one entity type.

    Subclasses set ``entity_type`` and implement ``build_schema`` and
    ``build_query_definition``. ``scope_field`` names the attribute that
    ``list(scope_id, ...)`` restricts on (e.g., a journal's contextId).
    """

    entity_type: str = ""
    collection: str = ""
    scope_field: str | None = None

    def __init__(self, registry: ServiceRegistry):
        if not self.entity_type:
            raise ValueError(f"{type(self).__name__} does not declare an entity_type")
        self.registry = registry

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    @classmethod
    def build_schema(cls) -> PropertySchema:
        raise NotImplementedError("Subclasses must implement build_schema()")

    @classmethod
    def build_query_definition(cls) -> QueryDefinition:
        return QueryDefinition()

    def constants(self) -> dict[str, Any]:
        """Request-independent constants exposed under ``_constants``."""
        return {}

    def scope_filters(self, scope_id: EntityId | None) -> list[Predicate]:
        if scope_id is None or self.scope_field is None:
            return []
        return [Condition(self.scope_field, "eq", scope_id)]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(
        self,
        scope_id: EntityId | None = None,
        spec: QuerySpec | None = None,
        base_filters: Iterable[Predicate] = (),
    ) -> ListResult:
        """List entities in a scope.

        Returns:
            ListResult(items, total); ``total`` ignores offset/count

        Raises:
            PressroomError subclasses for invalid query construction
        """
        query = self.registry.query_builder.build(
            self.entity_type,
            [*self.scope_filters(scope_id), *base_filters],
            spec or QuerySpec(),
        )
        result = self.registry.repository.execute(query)
        logger.debug(
            "Listed %d of %d %s entities", len(result.items), result.total, self.entity_type
        )
        return ListResult(result.items, result.total)

    def is_visible(self, entity: Entity) -> bool:
        """Whether a stored entity may be returned by id lookups."""
        return True

    def get(self, id: EntityId) -> Entity | None:
        entity = self.registry.repository.get(self.entity_type, id)
        return entity if entity is not None and self.is_visible(entity) else None

    def get_many(self, ids: Iterable[EntityId]) -> list[Entity | None]:
        """Fetch entities by id, preserving order; missing or hidden ids yield None."""
        entities = self.registry.repository.get_many(self.entity_type, list(ids))
        return [e if e is not None and self.is_visible(e) else None for e in entities]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def serialize(
        self,
        entity: Entity,
        tier: Tier,
        context: RequestContext | None = None,
    ) -> SerializedRepresentation:
        return self.registry.serializer.serialize(entity, tier, self._context(context))

    def get_summary(self, entity: Entity, context: RequestContext | None = None) -> SerializedRepresentation:
        return self.serialize(entity, Tier.SUMMARY, context)

    def get_full(self, entity: Entity, context: RequestContext | None = None) -> SerializedRepresentation:
        return self.serialize(entity, Tier.FULL, context)

    def summarize_many(
        self,
        entities: Iterable[Entity],
        context: RequestContext | None = None,
    ) -> list[SerializedRepresentation]:
        context = self._context(context)
        return [self.get_summary(entity, context) for entity in entities]

    def describe_list(
        self,
        scope_id: EntityId | None = None,
        spec: QuerySpec | None = None,
        context: RequestContext | None = None,
    ) -> dict[str, Any]:
        """Top-level list payload shared by the API and page renderers.

        Returns:
            {"items": [...summaries], "itemsMax": total, "_constants": {...}}
        """
        items, total = self.list(scope_id, spec)
        payload = {"items": self.summarize_many(items, context), "itemsMax": total}
        return with_constants(payload, self.constants())

    def describe(
        self,
        id: EntityId,
        context: RequestContext | None = None,
    ) -> dict[str, Any] | None:
        """Full representation of one entity with ``_constants`` merged, or None."""
        entity = self.get(id)
        if entity is None:
            return None
        return with_constants(self.get_full(entity, context), self.constants())

    def _context(self, context: RequestContext | None) -> RequestContext:
        if context is None:
            return self.registry.context()
        if context.services is None:
            return replace(context, services=self.registry)
        return context
