"""Persistence layer - repositories executing composed queries."""

from pressroom.persistence.adapter import EntityRepository, QueryResult
from pressroom.persistence.config import DatabaseConfig, create_repository
from pressroom.persistence.memory import InMemoryRepository

__all__ = [
    "DatabaseConfig",
    "EntityRepository",
    "InMemoryRepository",
    "QueryResult",
    "create_repository",
]
