"""Hook system types for Pressroom.

Defines the typed identifiers and payloads for the extension points:
- HookPoint / HookName: which hook is being invoked, for which entity type
- HookPolicy: whether a failing listener aborts the chain
- PropertiesPayload: in-flight serialized values for getProperties hooks
- QueryPayload: in-flight composed query for list hooks
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from pressroom.core.types import Entity, RequestContext, Tier

if TYPE_CHECKING:
    from pressroom.query.composed import ComposedQuery
    from pressroom.query.spec import QuerySpec


class HookPoint(str, Enum):
    """Extension points. Values are the stable string suffixes."""

    VALUES = "getProperties::values"
    SUMMARY_PROPERTIES = "getProperties::summaryProperties"
    FULL_PROPERTIES = "getProperties::fullProperties"
    QUERY_BUILDER = "list::queryBuilder"
    QUERY_OBJECT = "list::queryObject"

    @classmethod
    def for_tier(cls, tier: Tier) -> "HookPoint":
        if tier is Tier.SUMMARY:
            return cls.SUMMARY_PROPERTIES
        return cls.FULL_PROPERTIES


class HookPolicy(Enum):
    """How listener failures are handled.

    BEST_EFFORT: log and continue with the next listener
    PROPAGATE: raise HookListenerError, aborting the caller
    """

    BEST_EFFORT = "best_effort"
    PROPAGATE = "propagate"


@dataclass(frozen=True)
class HookName:
    """A hook point for one entity type.

    ``str(HookName("Submission", HookPoint.VALUES))`` is
    ``"Submission::getProperties::values"``, the name plugins register under.
    """

    entity_type: str
    point: HookPoint

    def __str__(self) -> str:
        return f"{self.entity_type}::{self.point.value}"


class StopHook(Exception):
    """Raised by a listener to skip the listeners registered after it."""


@dataclass
class PropertiesPayload:
    """Payload for getProperties hooks.

    Attributes:
        entity: The entity being serialized
        context: Request context for the serialization
        tier: Requested representation tier
        values: Current partial representation; listeners add or overwrite keys
    """

    entity: Entity
    context: RequestContext
    tier: Tier
    values: dict[str, Any]


@dataclass
class QueryPayload:
    """Payload for list hooks.

    ComposedQuery is immutable, so listeners extend it by replacing
    ``payload.query``, e.g. ``payload.query = payload.query.where(...)``.
    """

    entity_type: str
    query: "ComposedQuery"
    spec: "QuerySpec"
