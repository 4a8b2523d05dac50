"""Page-render boundary.

Server-rendered pages embed a one-time JSON snapshot of the same payload
the API returns, which a client-side component reads on initialization.
Template rendering itself lives outside this package; this module only
builds the state and makes it safe to place inside a ``<script>`` element.
"""

import json
from typing import Any, Callable

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse

from pressroom.api.endpoints import pop_scope, request_context, request_params
from pressroom.core.types import EntityId, RequestContext
from pressroom.query.spec import QuerySpec
from pressroom.services.base import EntityService
from pressroom.services.registry import ServiceRegistry

# Characters that could end a <script> block or break JS string parsing
_SCRIPT_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def build_page_state(
    service: EntityService,
    component: str,
    scope_id: EntityId | None = None,
    spec: QuerySpec | None = None,
    context: RequestContext | None = None,
) -> dict[str, Any]:
    """State for one list component, keyed by component name."""
    return {"components": {component: service.describe_list(scope_id, spec, context)}}


def embed_state(state: dict[str, Any]) -> str:
    """Serialize page state as JSON safe to inline in a ``<script>`` element."""
    text = json.dumps(state, separators=(",", ":"), sort_keys=True)
    for char, escaped in _SCRIPT_ESCAPES.items():
        text = text.replace(char, escaped)
    return text


def render_shell(title: str, state: dict[str, Any]) -> str:
    """Minimal HTML shell carrying the state; real pages use templates."""
    return (
        "<!DOCTYPE html>\n"
        f"<html><head><title>{_escape_html(title)}</title></head>\n"
        "<body><div id=\"app\"></div>\n"
        f"<script>window.pageInitConfig = {embed_state(state)};</script>\n"
        "</body></html>\n"
    )


def _escape_html(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def create_pages_router(
    get_registry: Callable[[], ServiceRegistry | None],
) -> APIRouter:
    """Create the page router with injected dependencies."""
    router = APIRouter(prefix="/pages", tags=["pages"])

    @router.get("/{collection}", response_class=HTMLResponse)
    async def collection_page(collection: str, http_request: Request) -> HTMLResponse:
        registry = get_registry()
        if not registry:
            raise HTTPException(500, "Service registry not initialized")

        service = registry.for_collection(collection)
        params = request_params(http_request)
        scope_id = pop_scope(service, params)
        state = build_page_state(
            service,
            component=f"{collection}ListPanel",
            scope_id=scope_id,
            spec=QuerySpec.from_params(params),
            context=request_context(http_request, registry),
        )
        return HTMLResponse(render_shell(collection.title(), state))

    return router
