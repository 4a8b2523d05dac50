"""Property schemas: which properties an entity type exposes, per tier.

A schema is built once per entity type at startup and is immutable
afterwards. Registration enforces tier containment: every summary
property must also be a full property.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from pressroom.core.errors import MissingRelatedEntityError, SchemaRegistrationError
from pressroom.core.types import Entity, RequestContext, Tier

logger = logging.getLogger(__name__)

# Getter signature: (entity, context) -> value
Getter = Callable[[Entity, RequestContext], Any]

SUMMARY_AND_FULL = frozenset({Tier.SUMMARY, Tier.FULL})
FULL_ONLY = frozenset({Tier.FULL})


@dataclass(frozen=True)
class Property:
    """A named property and the tiers it belongs to."""

    name: str
    getter: Getter
    tiers: frozenset[Tier] = SUMMARY_AND_FULL

    def in_tier(self, tier: Tier) -> bool:
        return tier in self.tiers


def _tiers(tiers: Iterable[Tier | str]) -> frozenset[Tier]:
    return frozenset(Tier(t) for t in tiers)


def attribute(
    name: str,
    source: str | None = None,
    tiers: Iterable[Tier | str] = SUMMARY_AND_FULL,
    default: Any = None,
) -> Property:
    """Property read straight from an entity attribute."""
    field_name = source or name

    def getter(entity: Entity, context: RequestContext) -> Any:
        return entity.get(field_name, default)

    return Property(name, getter, _tiers(tiers))


def computed(
    name: str,
    fn: Getter,
    tiers: Iterable[Tier | str] = SUMMARY_AND_FULL,
) -> Property:
    """Property computed from the entity and request context."""
    return Property(name, fn, _tiers(tiers))


class RelatedGetter:
    """Resolve related entities through the related type's service.

    Missing related entities resolve to None (list slots are preserved).
    Nesting is cut off at the configured max depth and whenever an entity
    already on the serialization path would be revisited.
    """

    def __init__(self, entity_type: str, source: str, many: bool = False, tier: Tier = Tier.SUMMARY):
        self.entity_type = entity_type
        self.source = source
        self.many = many
        self.tier = Tier(tier)

    def __call__(self, entity: Entity, context: RequestContext) -> Any:
        services = context.services
        if services is None:
            raise RuntimeError(
                f"Cannot resolve related {self.entity_type}: request context has no services"
            )

        if len(context.path) > services.settings.max_depth:
            logger.debug(
                "Max depth reached resolving %s.%s", entity.entity_type, self.source
            )
            return [] if self.many else None

        service = services.get(self.entity_type)
        raw = entity.get(self.source)

        if not self.many:
            if raw is None:
                return None
            related = service.get(raw)
            return self._serialize_one(service, related, raw, context)

        ids = list(raw or [])
        related_entities = service.get_many(ids)
        return [
            self._serialize_one(service, related, related_id, context)
            for related, related_id in zip(related_entities, ids)
        ]

    def _serialize_one(self, service: Any, related: Entity | None, related_id: Any, context: RequestContext) -> Any:
        if related is None:
            logger.debug("Related %s %r is missing", self.entity_type, related_id)
            return None
        if context.is_visiting(related.entity_type, related.id):
            logger.debug("Cycle detected at %s %r", related.entity_type, related.id)
            return None
        try:
            return service.serialize(related, self.tier, context)
        except MissingRelatedEntityError:
            return None


def related(
    name: str,
    entity_type: str,
    source: str,
    many: bool = False,
    tier: Tier | str = Tier.SUMMARY,
    tiers: Iterable[Tier | str] = FULL_ONLY,
) -> Property:
    """Property holding the serialized form of related entities.

    Args:
        name: Property name in the representation
        entity_type: Related entity type (its service name)
        source: Attribute holding the related id (or ids, if ``many``)
        many: Resolve a list of ids into a list of representations
        tier: Tier the related entities are serialized at
        tiers: Tiers this property appears in (full only by default)
    """
    return Property(name, RelatedGetter(entity_type, source, many, Tier(tier)), _tiers(tiers))


class PropertySchema:
    """Immutable property declarations for one entity type.

    Raises:
        SchemaRegistrationError: Duplicate property names, a property with no
            tiers, or a summary property missing from the full tier
    """

    def __init__(self, entity_type: str, properties: Iterable[Property]):
        self.entity_type = entity_type
        declared: dict[str, Property] = {}
        for prop in properties:
            if prop.name in declared:
                raise SchemaRegistrationError(
                    f"{entity_type}: property '{prop.name}' is declared twice"
                )
            if not prop.tiers:
                raise SchemaRegistrationError(
                    f"{entity_type}: property '{prop.name}' belongs to no tier"
                )
            if Tier.SUMMARY in prop.tiers and Tier.FULL not in prop.tiers:
                raise SchemaRegistrationError(
                    f"{entity_type}: summary property '{prop.name}' must also be in the full tier"
                )
            declared[prop.name] = prop
        self._properties = MappingProxyType(declared)

    @property
    def properties(self) -> MappingProxyType:
        return self._properties

    def properties_for(self, tier: Tier) -> list[Property]:
        """Properties in ``tier``, in declaration order."""
        return [p for p in self._properties.values() if p.in_tier(tier)]

    def names(self, tier: Tier) -> list[str]:
        return [p.name for p in self.properties_for(tier)]

    def describe(self) -> dict[str, list[str]]:
        """Property name -> tier names, for the CLI and debugging."""
        return {
            name: sorted(t.value for t in prop.tiers)
            for name, prop in self._properties.items()
        }


class SchemaRegistry:
    """One PropertySchema per entity type, registered once."""

    def __init__(self) -> None:
        self._schemas: dict[str, PropertySchema] = {}

    def register(self, schema: PropertySchema) -> None:
        if schema.entity_type in self._schemas:
            raise SchemaRegistrationError(
                f"Schema for '{schema.entity_type}' is already registered"
            )
        self._schemas[schema.entity_type] = schema

    def get(self, entity_type: str) -> PropertySchema:
        if entity_type not in self._schemas:
            raise SchemaRegistrationError(f"No schema registered for '{entity_type}'")
        return self._schemas[entity_type]

    def is_registered(self, entity_type: str) -> bool:
        return entity_type in self._schemas

    def list_registered(self) -> list[str]:
        return sorted(self._schemas)
