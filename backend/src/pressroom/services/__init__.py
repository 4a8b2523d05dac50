"""Entity services and the registry that wires them together."""

from pressroom.services.base import EntityService, ListResult
from pressroom.services.registry import ServiceFactory, ServiceRegistry

__all__ = ["EntityService", "ListResult", "ServiceFactory", "ServiceRegistry"]
