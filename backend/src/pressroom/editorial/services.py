"""Editorial entity services: submissions and their authors."""

from enum import Enum
from typing import Any

from pressroom.core.types import Entity, RequestContext, Tier
from pressroom.query import (
    Condition,
    OrderClause,
    QueryDefinition,
    as_date,
    as_int,
    equals,
    flag,
    one_of,
    range_filter,
    related,
    search,
)
from pressroom.serialization import (
    FULL_ONLY,
    PropertySchema,
    attribute,
    computed,
)
from pressroom.serialization import related as related_property
from pressroom.services.base import EntityService


class SubmissionStatus(str, Enum):
    QUEUED = "queued"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    DECLINED = "declined"


def as_status(value: Any) -> str:
    return SubmissionStatus(str(value).lower()).value


def _full_name(entity: Entity, context: RequestContext) -> str:
    parts = [entity.get("givenName"), entity.get("familyName")]
    return " ".join(p for p in parts if p)


def _is_incomplete(entity: Entity, context: RequestContext) -> bool:
    return (entity.get("submissionProgress") or 0) > 0


class AuthorService(EntityService):
    """Authors of submissions. Summary is what every submission embeds."""

    entity_type = "Author"
    collection = "authors"

    @classmethod
    def build_schema(cls) -> PropertySchema:
        return PropertySchema(
            cls.entity_type,
            [
                attribute("id"),
                attribute("givenName"),
                attribute("familyName"),
                computed("fullName", _full_name),
                attribute("affiliation"),
                attribute("email", tiers=FULL_ONLY),
                attribute("submissionId", tiers=FULL_ONLY),
            ],
        )

    @classmethod
    def build_query_definition(cls) -> QueryDefinition:
        return QueryDefinition(
            filters=[
                one_of("submissionIds", "submissionId", coerce=as_int, precedence=10),
                equals("affiliation", precedence=20),
                search("searchPhrase", ["givenName", "familyName", "email"], precedence=90),
            ],
            order_fields=("id", "familyName", "givenName"),
        )


class SubmissionService(EntityService):
    """Submissions within a journal/press context."""

    entity_type = "Submission"
    collection = "submissions"
    scope_field = "contextId"

    @classmethod
    def build_schema(cls) -> PropertySchema:
        return PropertySchema(
            cls.entity_type,
            [
                attribute("id"),
                attribute("contextId"),
                attribute("title"),
                attribute("status"),
                attribute("dateSubmitted"),
                computed("isIncomplete", _is_incomplete),
                attribute("abstract", tiers=FULL_ONLY),
                attribute("keywords", tiers=FULL_ONLY, default=[]),
                related_property(
                    "authors",
                    entity_type="Author",
                    source="authorIds",
                    many=True,
                    tier=Tier.SUMMARY,
                ),
            ],
        )

    @classmethod
    def build_query_definition(cls) -> QueryDefinition:
        return QueryDefinition(
            filters=[
                one_of("status", coerce=as_status, precedence=10),
                related(
                    "assignedTo",
                    entity_type="StageAssignment",
                    foreign_key="submissionId",
                    field="userId",
                    coerce=as_int,
                    precedence=20,
                ),
                range_filter("dateSubmittedAfter", "dateSubmitted", "gte", as_date, precedence=30),
                range_filter("dateSubmittedBefore", "dateSubmitted", "lte", as_date, precedence=30),
                flag(
                    "isIncomplete",
                    when_true=lambda: Condition("submissionProgress", "gt", 0),
                    when_false=lambda: Condition("submissionProgress", "eq", 0),
                    precedence=40,
                ),
                search("searchPhrase", ["title", "abstract"], precedence=90),
            ],
            order_fields=("id", "title", "dateSubmitted", "status"),
            default_order=OrderClause("id", "asc"),
            base_conditions=(Condition("dateDeleted", "isNull"),),
        )

    def constants(self) -> dict[str, Any]:
        return {f"STATUS_{status.name}": status.value for status in SubmissionStatus}

    def is_visible(self, entity: Entity) -> bool:
        # Soft-deleted submissions are hidden from id lookups as well as lists
        return entity.get("dateDeleted") is None


def register_editorial_services(registry: Any) -> None:
    """Register the editorial services on a ServiceRegistry."""
    registry.register_entity(AuthorService)
    registry.register_entity(SubmissionService)
