"""Query composition: QuerySpec in, ComposedQuery out."""

from pressroom.query.builder import QueryBuilder, QueryDefinition
from pressroom.query.composed import (
    OPERATORS,
    AnyOf,
    ComposedQuery,
    Condition,
    OrderClause,
    Predicate,
    RelatedCondition,
)
from pressroom.query.filters import (
    FilterDefinition,
    as_bool,
    as_date,
    as_int,
    as_list,
    as_str,
    equals,
    flag,
    one_of,
    range_filter,
    related,
    search,
)
from pressroom.query.spec import RESERVED_PARAMS, QuerySpec

__all__ = [
    "OPERATORS",
    "RESERVED_PARAMS",
    "AnyOf",
    "ComposedQuery",
    "Condition",
    "FilterDefinition",
    "OrderClause",
    "Predicate",
    "QueryBuilder",
    "QueryDefinition",
    "QuerySpec",
    "RelatedCondition",
    "as_bool",
    "as_date",
    "as_int",
    "as_list",
    "as_str",
    "equals",
    "flag",
    "one_of",
    "range_filter",
    "related",
    "search",
]
