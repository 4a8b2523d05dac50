"""Property schemas and entity serialization."""

from pressroom.serialization.constants import CONSTANTS_KEY, with_constants
from pressroom.serialization.loader import SchemaLoader
from pressroom.serialization.schema import (
    FULL_ONLY,
    SUMMARY_AND_FULL,
    Property,
    PropertySchema,
    RelatedGetter,
    SchemaRegistry,
    attribute,
    computed,
    related,
)
from pressroom.serialization.serializer import EntitySerializer

__all__ = [
    "CONSTANTS_KEY",
    "FULL_ONLY",
    "SUMMARY_AND_FULL",
    "EntitySerializer",
    "Property",
    "PropertySchema",
    "RelatedGetter",
    "SchemaLoader",
    "SchemaRegistry",
    "attribute",
    "computed",
    "related",
    "with_constants",
]
