"""Caller-supplied list parameters."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

# Request parameters that control paging/ordering rather than filtering
RESERVED_PARAMS = ("offset", "count", "orderBy", "orderDirection", "strict")


def _optional(raw: Any) -> Any:
    return None if raw == "" else raw


def _optional_bool(raw: Any) -> bool | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        return raw
    return str(raw).lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class QuerySpec:
    """Filters, pagination and ordering for a list operation.

    Attributes:
        filters: (key, value) pairs in the order the caller supplied them
        offset: Requested offset, as given (None means start of the collection)
        count: Requested page size, as given (None means the configured default)
        order_by: Field to order by
        order_direction: "asc" or "desc"
        strict: Override the configured strict-filter mode for this query
    """

    filters: tuple[tuple[str, Any], ...] = ()
    offset: int | str | None = None
    count: int | str | None = None
    order_by: str | None = None
    order_direction: str | None = None
    strict: bool | None = None

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> QuerySpec:
        """Build a spec from sparse request parameters.

        Parameters with None or empty-string values are treated as absent,
        so partially filled forms can be passed straight through. offset
        and count are kept as given; the QueryBuilder parses and clamps them.
        """
        filters = tuple(
            (key, value)
            for key, value in params.items()
            if key not in RESERVED_PARAMS and value is not None and value != "" and value != []
        )
        direction = params.get("orderDirection")
        return cls(
            filters=filters,
            offset=_optional(params.get("offset")),
            count=_optional(params.get("count")),
            order_by=params.get("orderBy") or None,
            order_direction=str(direction).lower() if direction else None,
            strict=_optional_bool(params.get("strict")),
        )

    @property
    def filter_map(self) -> dict[str, Any]:
        """Filters as a dict; a repeated key keeps its last value."""
        return dict(self.filters)

    @property
    def keys(self) -> list[str]:
        return list(self.filter_map)

    def with_filters(self, **filters: Any) -> QuerySpec:
        merged = self.filter_map
        merged.update(filters)
        return replace(self, filters=tuple(merged.items()))

    def without(self, *keys: str) -> QuerySpec:
        """Return a copy with the named filter keys removed."""
        return replace(self, filters=tuple((k, v) for k, v in self.filters if k not in keys))
