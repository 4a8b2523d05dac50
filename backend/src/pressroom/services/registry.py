"""Service registry for Pressroom.

A container constructed once at startup and passed explicitly to request
handling code. It owns the shared collaborators (hooks, query builder,
schemas, serializer, repository) and lazily creates one service instance
per name on first use.
"""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pressroom.core.config import Settings
from pressroom.core.errors import UnknownServiceError
from pressroom.core.types import EntityId, RequestContext
from pressroom.hooks.registry import HookRegistry
from pressroom.persistence.adapter import EntityRepository
from pressroom.query.builder import QueryBuilder
from pressroom.serialization.schema import SchemaRegistry
from pressroom.serialization.serializer import EntitySerializer

if TYPE_CHECKING:
    from pressroom.services.base import EntityService

logger = logging.getLogger(__name__)

# Factory signature: (registry) -> service instance
ServiceFactory = Callable[["ServiceRegistry"], Any]


class ServiceRegistry:
    """Maps service names to lazily-created, memoized instances.

    Services are shared for the lifetime of the registry, so they must not
    hold per-request state.

    Example:
        registry = ServiceRegistry(InMemoryRepository())
        registry.register_entity(AuthorService)
        authors = registry.get("Author")
    """

    def __init__(
        self,
        repository: EntityRepository,
        hooks: HookRegistry | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or Settings()
        self.hooks = hooks or HookRegistry()
        self.repository = repository
        self.query_builder = QueryBuilder(self.hooks, self.settings)
        self.schemas = SchemaRegistry()
        self.serializer = EntitySerializer(self.schemas, self.hooks)
        self._factories: dict[str, ServiceFactory] = {}
        self._instances: dict[str, Any] = {}
        self._collections: dict[str, str] = {}

    def register(self, name: str, factory: ServiceFactory) -> None:
        """Register (or replace) the factory for ``name``.

        Replacing a factory drops any instance already created from the
        previous one, so tests and extensions can substitute services.
        """
        if name in self._factories:
            logger.info("Replacing service factory for '%s'", name)
        self._factories[name] = factory
        self._instances.pop(name, None)

    def register_entity(self, service_cls: type["EntityService"]) -> None:
        """Register an EntityService subclass with its schema and query definition.

        The schema and query definition are registered the first time an
        entity type is seen; later calls only replace the service factory.
        """
        entity_type = service_cls.entity_type
        if not self.schemas.is_registered(entity_type):
            self.schemas.register(service_cls.build_schema())
        if not self.query_builder.is_registered(entity_type):
            self.query_builder.register(entity_type, service_cls.build_query_definition())
        if service_cls.collection:
            self._collections[service_cls.collection] = entity_type
        self.register(entity_type, service_cls)

    def get(self, name: str) -> Any:
        """Return the service for ``name``, creating it on first use.

        Raises:
            UnknownServiceError: No factory is registered under ``name``
        """
        if name not in self._instances:
            if name not in self._factories:
                raise UnknownServiceError(name)
            self._instances[name] = self._factories[name](self)
        return self._instances[name]

    def for_collection(self, collection: str) -> "EntityService":
        """Resolve a service by its URL collection name (e.g., "submissions")."""
        if collection not in self._collections:
            raise UnknownServiceError(collection)
        return self.get(self._collections[collection])

    def has(self, name: str) -> bool:
        return name in self._factories

    def names(self) -> list[str]:
        return sorted(self._factories)

    def collections(self) -> dict[str, str]:
        return dict(self._collections)

    def reset(self) -> None:
        """Drop created instances; factories stay registered."""
        self._instances.clear()

    def context(self, user_id: EntityId | None = None, locale: str | None = None, **extra: Any) -> RequestContext:
        """A new request context bound to this registry."""
        return RequestContext(user_id=user_id, locale=locale, services=self, extra=extra)
