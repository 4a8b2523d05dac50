"""Query composition for entity lists.

The QueryBuilder folds a QuerySpec onto a base query in a fixed, declared
order so the same parameters always produce the same query shape,
regardless of the order the caller supplied them in.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from pressroom.core.config import Settings
from pressroom.core.errors import (
    HookListenerError,
    InvalidFilterValueError,
    InvalidPaginationError,
    UnrecognizedFilterError,
)
from pressroom.hooks.registry import HookRegistry
from pressroom.hooks.types import HookName, HookPoint, HookPolicy, QueryPayload
from pressroom.query.composed import ComposedQuery, OrderClause, Predicate
from pressroom.query.filters import FilterDefinition
from pressroom.query.spec import QuerySpec

logger = logging.getLogger(__name__)


@dataclass
class QueryDefinition:
    """Query configuration for one entity type.

    Attributes:
        filters: Allow-listed filter keys and their clause functions
        order_fields: Fields callers may order by
        default_order: Ordering used when the requested field is unknown
        base_conditions: Mandatory predicates (e.g., not soft-deleted)
    """

    filters: list[FilterDefinition] = field(default_factory=list)
    order_fields: tuple[str, ...] = ("id",)
    default_order: OrderClause = field(default_factory=lambda: OrderClause("id", "asc"))
    base_conditions: tuple[Predicate, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for definition in self.filters:
            if definition.key in seen:
                raise ValueError(f"Duplicate filter key '{definition.key}'")
            seen.add(definition.key)

    @property
    def ordered_filters(self) -> list[FilterDefinition]:
        # sorted() is stable, so equal precedence keeps declaration order
        return sorted(self.filters, key=lambda d: d.precedence)

    @property
    def keys(self) -> set[str]:
        return {d.key for d in self.filters}


class QueryBuilder:
    """Builds ComposedQuery values from QuerySpecs.

    Definitions are registered per entity type at startup; ``build`` is
    read-only with respect to the builder and safe to call per request.
    """

    def __init__(self, hooks: HookRegistry, settings: Settings | None = None):
        self.hooks = hooks
        self.settings = settings or Settings()
        self._definitions: dict[str, QueryDefinition] = {}

    def register(self, entity_type: str, definition: QueryDefinition) -> None:
        """Register the query definition for an entity type.

        Raises:
            ValueError: A definition is already registered for the type
        """
        if entity_type in self._definitions:
            raise ValueError(f"Query definition for '{entity_type}' is already registered")
        self._definitions[entity_type] = definition

    def get_definition(self, entity_type: str) -> QueryDefinition:
        if entity_type not in self._definitions:
            raise ValueError(f"No query definition registered for '{entity_type}'")
        return self._definitions[entity_type]

    def is_registered(self, entity_type: str) -> bool:
        return entity_type in self._definitions

    def build(
        self,
        entity_type: str,
        base_filters: Iterable[Predicate] = (),
        spec: QuerySpec | None = None,
    ) -> ComposedQuery:
        """Compose the query for a list request.

        Args:
            entity_type: Entity type being listed
            base_filters: Caller-mandated predicates (e.g., context scoping)
            spec: Filters, pagination and ordering from the request

        Returns:
            A new ComposedQuery owned by the caller

        Raises:
            UnrecognizedFilterError: Unknown keys in strict mode
            InvalidFilterValueError: A recognized key has an unusable value
            InvalidPaginationError: Non-integer or out-of-range paging with
                clamping disabled
            HookListenerError: A queryBuilder/queryObject listener failed
        """
        definition = self.get_definition(entity_type)
        spec = spec or QuerySpec()

        query = ComposedQuery(entity_type).where(
            *definition.base_conditions, *tuple(base_filters)
        )

        values = spec.filter_map
        unknown = [key for key in values if key not in definition.keys]
        if unknown:
            strict = spec.strict if spec.strict is not None else self.settings.strict_filters
            if strict:
                raise UnrecognizedFilterError(entity_type, unknown)
            logger.warning(
                "Dropping unrecognized filter(s) for %s: %s",
                entity_type,
                ", ".join(unknown),
            )

        for filter_def in definition.ordered_filters:
            if filter_def.key not in values:
                continue
            value = values[filter_def.key]
            try:
                query = filter_def.apply(query, value)
            except InvalidFilterValueError:
                raise
            except (TypeError, ValueError) as e:
                raise InvalidFilterValueError(filter_def.key, value, str(e)) from e

        query = query.order_by(self._resolve_order(definition, spec))
        offset, limit = self._resolve_page(spec)
        query = query.paginate(offset, limit)

        query = self._run_hook(HookPoint.QUERY_BUILDER, query, spec)
        query = self._run_hook(HookPoint.QUERY_OBJECT, query, spec)

        logger.debug("Composed %s query: %s", entity_type, query.describe())
        return query

    def _resolve_order(self, definition: QueryDefinition, spec: QuerySpec) -> OrderClause:
        if not spec.order_by:
            return definition.default_order
        if spec.order_by not in definition.order_fields:
            logger.info(
                "Unknown order field '%s', using default order %s %s",
                spec.order_by,
                definition.default_order.field,
                definition.default_order.direction,
            )
            return definition.default_order
        direction = spec.order_direction if spec.order_direction in ("asc", "desc") else "asc"
        return OrderClause(spec.order_by, direction)

    def _page_value(self, name: str, raw: Any, default: int) -> int:
        if raw is None:
            return default
        try:
            if isinstance(raw, bool):
                raise ValueError(raw)
            return int(raw)
        except (TypeError, ValueError):
            if not self.settings.clamp_pagination:
                raise InvalidPaginationError(f"'{name}' must be an integer", param=name)
            logger.warning("Ignoring non-integer %s %r, using %d", name, raw, default)
            return default

    def _resolve_page(self, spec: QuerySpec) -> tuple[int, int]:
        max_size = self.settings.max_page_size
        offset = self._page_value("offset", spec.offset, 0)
        count = self._page_value("count", spec.count, self.settings.default_page_size)

        if offset >= 0 and 1 <= count <= max_size:
            return offset, count

        if not self.settings.clamp_pagination:
            raise InvalidPaginationError(
                f"offset must be >= 0 and count within [1, {max_size}]",
                offset=offset,
                count=count,
            )
        return max(offset, 0), min(max(count, 1), max_size)

    def _run_hook(self, point: HookPoint, query: ComposedQuery, spec: QuerySpec) -> ComposedQuery:
        name = HookName(query.entity_type, point)
        if not self.hooks.is_registered(name):
            return query
        payload = self.hooks.invoke(
            name,
            QueryPayload(entity_type=query.entity_type, query=query, spec=spec),
            HookPolicy.PROPAGATE,
        )
        if not isinstance(payload.query, ComposedQuery):
            raise HookListenerError(
                str(name), TypeError("listener replaced the query with a non-query value")
            )
        if payload.query.entity_type != query.entity_type:
            raise HookListenerError(
                str(name), ValueError("listener changed the query's entity type")
            )
        return payload.query
