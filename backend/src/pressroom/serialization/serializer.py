"""Entity serialization.

Builds a fresh, JSON-safe property mapping for one entity at one tier:
1. Built-in properties from the entity type's PropertySchema
2. <Type>::getProperties::values hook (always)
3. <Type>::getProperties::summaryProperties or ::fullProperties hook

Hook listeners run after the built-ins and may overwrite them. Failures
during this phase degrade to null values and are logged; they never fail
the caller's request.
"""

import logging
from typing import Any

from pressroom.core.errors import MissingRelatedEntityError
from pressroom.core.types import (
    Entity,
    RequestContext,
    SerializedRepresentation,
    Tier,
    to_json_safe,
)
from pressroom.hooks.registry import HookRegistry
from pressroom.hooks.types import HookName, HookPoint, HookPolicy, PropertiesPayload
from pressroom.serialization.schema import Property, SchemaRegistry

logger = logging.getLogger(__name__)


class EntitySerializer:
    """Serializes entities using registered schemas and property hooks."""

    def __init__(self, schemas: SchemaRegistry, hooks: HookRegistry):
        self.schemas = schemas
        self.hooks = hooks

    def serialize(
        self,
        entity: Entity,
        tier: Tier,
        context: RequestContext | None = None,
    ) -> SerializedRepresentation:
        """Serialize ``entity`` at ``tier``.

        Args:
            entity: The entity to serialize
            tier: SUMMARY or FULL
            context: Request context; getters resolve related entities
                through ``context.services``

        Returns:
            A new property mapping; nothing is cached between calls
        """
        tier = Tier(tier)
        schema = self.schemas.get(entity.entity_type)
        context = (context or RequestContext()).descend(entity)

        values: dict[str, Any] = {}
        for prop in schema.properties_for(tier):
            values[prop.name] = self._resolve(prop, entity, context)

        payload = PropertiesPayload(entity=entity, context=context, tier=tier, values=values)
        for point in (HookPoint.VALUES, HookPoint.for_tier(tier)):
            self._run_hook(HookName(entity.entity_type, point), payload)

        return {key: self._json_safe(entity, key, value) for key, value in payload.values.items()}

    def _run_hook(self, name: HookName, payload: PropertiesPayload) -> None:
        last_good = dict(payload.values)
        self.hooks.invoke(name, payload, HookPolicy.BEST_EFFORT)
        if not isinstance(payload.values, dict):
            logger.warning(
                "Listener on '%s' replaced values with %s, keeping previous values",
                name,
                type(payload.values).__name__,
            )
            payload.values = last_good

    def _resolve(self, prop: Property, entity: Entity, context: RequestContext) -> Any:
        try:
            return prop.getter(entity, context)
        except MissingRelatedEntityError:
            return None
        except Exception as e:
            logger.warning(
                "Property '%s' of %s %r failed, returning null: %s",
                prop.name,
                entity.entity_type,
                entity.id,
                e,
                exc_info=True,
            )
            return None

    def _json_safe(self, entity: Entity, key: str, value: Any) -> Any:
        try:
            return to_json_safe(value)
        except TypeError as e:
            logger.warning(
                "Property '%s' of %s %r is not JSON-safe, returning null: %s",
                key,
                entity.entity_type,
                entity.id,
                e,
            )
            return None
