"""REST endpoints for entity collections."""

from typing import Any, Callable

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from pressroom.core.types import EntityId, RequestContext
from pressroom.query.spec import QuerySpec
from pressroom.services.base import EntityService
from pressroom.services.registry import ServiceRegistry


class ErrorResponse(BaseModel):
    """Body of a 4xx response for a query construction error."""

    error: str
    message: str


class QueryRequest(BaseModel):
    """Request body for POST list queries."""

    filters: dict[str, Any] = {}
    offset: int | None = None
    count: int | None = None
    orderBy: str | None = None
    orderDirection: str | None = None
    strict: bool | None = None
    scopeId: int | str | None = None


def request_params(request: Request) -> dict[str, Any]:
    """Collapse query parameters into a dict.

    Repeated keys (``status=a&status=b``) and PHP-style ``status[]=a``
    become lists; single occurrences stay scalar.
    """
    params: dict[str, Any] = {}
    for key in request.query_params.keys():
        values = request.query_params.getlist(key)
        name = key[:-2] if key.endswith("[]") else key
        if key.endswith("[]") or len(values) > 1:
            params[name] = list(values)
        else:
            params[name] = values[0]
    return params


def request_context(request: Request, registry: ServiceRegistry) -> RequestContext:
    """Build the request context. Authentication is handled upstream."""
    language = request.headers.get("accept-language", "")
    locale = language.split(",")[0].strip() or None
    user_id = getattr(request.state, "user_id", None)
    return registry.context(user_id=user_id, locale=locale)


def _coerce_scope(raw: Any) -> EntityId | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, str) and raw.lstrip("-").isdigit():
        return int(raw)
    return raw


def pop_scope(service: EntityService, params: dict[str, Any]) -> EntityId | None:
    """Remove and return the service's scope parameter, if present."""
    if not service.scope_field:
        return None
    return _coerce_scope(params.pop(service.scope_field, None))


def create_entities_router(
    get_registry: Callable[[], ServiceRegistry | None],
) -> APIRouter:
    """Create the collections router with injected dependencies."""
    router = APIRouter(prefix="/api", tags=["entities"])
    error_responses = {400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}

    def _registry() -> ServiceRegistry:
        registry = get_registry()
        if not registry:
            raise HTTPException(500, "Service registry not initialized")
        return registry

    @router.get("/{collection}", responses=error_responses)
    async def list_collection(collection: str, http_request: Request) -> dict[str, Any]:
        """List a collection at the summary tier."""
        registry = _registry()
        service = registry.for_collection(collection)
        params = request_params(http_request)
        scope_id = pop_scope(service, params)
        spec = QuerySpec.from_params(params)
        return service.describe_list(scope_id, spec, request_context(http_request, registry))

    @router.post("/{collection}/query", responses=error_responses)
    async def query_collection(
        collection: str, query: QueryRequest, http_request: Request
    ) -> dict[str, Any]:
        """List a collection with filters given as a JSON body."""
        registry = _registry()
        service = registry.for_collection(collection)
        spec = QuerySpec.from_params(
            {
                **query.filters,
                "offset": query.offset,
                "count": query.count,
                "orderBy": query.orderBy,
                "orderDirection": query.orderDirection,
                "strict": query.strict,
            }
        )
        return service.describe_list(
            _coerce_scope(query.scopeId), spec, request_context(http_request, registry)
        )

    @router.get("/{collection}/{id}", responses=error_responses)
    async def get_item(collection: str, id: str, http_request: Request) -> dict[str, Any]:
        """Get one entity at the full tier."""
        registry = _registry()
        service = registry.for_collection(collection)
        payload = service.describe(_coerce_scope(id), request_context(http_request, registry))
        if payload is None:
            raise HTTPException(404, "Record not found")
        return payload

    return router
