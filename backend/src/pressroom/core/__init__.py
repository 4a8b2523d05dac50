"""Core types, errors and settings."""

from pressroom.core.config import Settings, configure_logging
from pressroom.core.errors import (
    HookListenerError,
    InvalidFilterValueError,
    InvalidPaginationError,
    MissingRelatedEntityError,
    PressroomError,
    SchemaRegistrationError,
    UnknownServiceError,
    UnrecognizedFilterError,
)
from pressroom.core.types import (
    Entity,
    EntityId,
    JSONValue,
    RequestContext,
    SerializedRepresentation,
    Tier,
    to_json_safe,
)

__all__ = [
    "Entity",
    "EntityId",
    "HookListenerError",
    "InvalidFilterValueError",
    "InvalidPaginationError",
    "JSONValue",
    "MissingRelatedEntityError",
    "PressroomError",
    "RequestContext",
    "SchemaRegistrationError",
    "SerializedRepresentation",
    "Settings",
    "Tier",
    "UnknownServiceError",
    "UnrecognizedFilterError",
    "configure_logging",
    "to_json_safe",
]
