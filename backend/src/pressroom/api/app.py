"""FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pressroom.api.endpoints import create_entities_router
from pressroom.api.pages import create_pages_router
from pressroom.bootstrap import create_registry
from pressroom.core.errors import PressroomError
from pressroom.services.registry import ServiceRegistry

logger = logging.getLogger(__name__)


def create_app(registry: ServiceRegistry | None = None) -> FastAPI:
    """Create the API app.

    Args:
        registry: A pre-built registry (tests, embedding). When omitted the
            registry is built from the environment at startup.
    """
    state: dict[str, ServiceRegistry | None] = {"registry": registry}

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize on startup, cleanup on shutdown."""
        if state["registry"] is None:
            state["registry"] = create_registry()
        yield
        close = getattr(state["registry"].repository, "close", None)
        if registry is None and close:
            close()

    app = FastAPI(title="Pressroom API", lifespan=lifespan)

    @app.exception_handler(PressroomError)
    async def pressroom_error_handler(request: Request, exc: PressroomError) -> JSONResponse:
        if exc.status >= 500:
            logger.error("Request to %s failed: %s", request.url.path, exc)
        return JSONResponse(status_code=exc.status, content=exc.to_dict())

    get_registry = lambda: state["registry"]  # noqa: E731
    app.include_router(create_entities_router(get_registry))
    app.include_router(create_pages_router(get_registry))

    return app


app = create_app()
