"""Core types shared across the query and serialization layers."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping, Union

if TYPE_CHECKING:
    from pressroom.services.registry import ServiceRegistry


# JSON-safe value produced by serialization
JSONValue = Union[None, bool, int, float, str, list["JSONValue"], dict[str, "JSONValue"]]

# Flat property name -> JSON value mapping for one serialized entity
SerializedRepresentation = dict[str, JSONValue]

EntityId = Union[int, str]


class Tier(str, Enum):
    """Representation detail level. Summary properties are a subset of full."""

    SUMMARY = "summary"
    FULL = "full"


@dataclass(frozen=True)
class Entity:
    """An opaque domain record of a given type.

    Attributes:
        entity_type: Type name (e.g., "Submission")
        id: Identity, unique within the type
        attributes: Stored field values, keyed by field name
    """

    entity_type: str
    id: EntityId
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        if name == "id":
            return self.id
        return self.attributes.get(name, default)

    def to_record(self) -> dict[str, Any]:
        """Flatten to a storage record including the id."""
        return {"id": self.id, **self.attributes}


@dataclass
class RequestContext:
    """Request-scoped state passed to getters and hook listeners.

    Attributes:
        user_id: The current user, if any
        locale: Requested locale (consumed by listeners, not the core)
        services: Registry used to resolve related entities
        extra: Free-form request data for extensions
    """

    user_id: EntityId | None = None
    locale: str | None = None
    services: "ServiceRegistry | None" = None
    extra: dict[str, Any] = field(default_factory=dict)
    # (entity_type, id) pairs currently being serialized, root first
    path: tuple[tuple[str, EntityId], ...] = ()

    @property
    def depth(self) -> int:
        """Nesting level of the entity currently being serialized (root is 0)."""
        return max(len(self.path) - 1, 0)

    def descend(self, entity: Entity) -> "RequestContext":
        """Return a copy of this context one level deeper, at ``entity``."""
        return RequestContext(
            user_id=self.user_id,
            locale=self.locale,
            services=self.services,
            extra=self.extra,
            path=self.path + ((entity.entity_type, entity.id),),
        )

    def is_visiting(self, entity_type: str, entity_id: EntityId) -> bool:
        return (entity_type, entity_id) in self.path


def to_json_safe(value: Any) -> JSONValue:
    """Normalize a getter result into a JSON-safe value."""
    if isinstance(value, Enum):
        return to_json_safe(value.value)
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Mapping):
        return {str(k): to_json_safe(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return [to_json_safe(v) for v in sorted(value, key=repr)]
    if isinstance(value, (list, tuple)):
        return [to_json_safe(v) for v in value]
    raise TypeError(f"Value of type {type(value).__name__} is not JSON-safe")
