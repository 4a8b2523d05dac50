"""Database configuration and repository factory."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pressroom.persistence.adapter import EntityRepository
    from pressroom.persistence.sql import TableMapping

MEMORY_URL = "memory://"


@dataclass
class DatabaseConfig:
    """Database connection configuration.

    Supports memory://, sqlite:/// and postgresql:// URL schemes.
    """

    url: str

    @classmethod
    def from_env(cls) -> DatabaseConfig:
        """Create config from environment variables.

        Resolution order:
        1. DATABASE_URL env var (standard)
        2. PRESSROOM_DB_PATH env var (converted to sqlite:/// URL)
        3. Default: memory:// (in-process repository)
        """
        url = os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)

        db_path = os.environ.get("PRESSROOM_DB_PATH")
        if db_path:
            return cls(url=f"sqlite:///{db_path}")

        return cls(url=MEMORY_URL)

    @property
    def is_memory(self) -> bool:
        return self.url == MEMORY_URL

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_postgresql(self) -> bool:
        return self.url.startswith("postgresql")

    @property
    def sqlalchemy_url(self) -> str:
        """URL suitable for SQLAlchemy engine creation.

        Ensures postgresql:// URLs use the psycopg (v3) driver.
        """
        if self.url.startswith("postgresql://"):
            return self.url.replace("postgresql://", "postgresql+psycopg://", 1)
        return self.url


def create_repository(
    config: DatabaseConfig,
    mappings: Iterable[TableMapping] = (),
) -> EntityRepository:
    """Create a repository based on the database URL scheme.

    Args:
        config: Database configuration with URL.
        mappings: Table mappings for SQL-backed repositories.

    Returns:
        An EntityRepository. SQL tables are created if missing.

    Raises:
        ValueError: For unsupported URL schemes.
    """
    if config.is_memory:
        from pressroom.persistence.memory import InMemoryRepository

        return InMemoryRepository()

    if config.is_sqlite or config.is_postgresql:
        from pressroom.persistence.sql import SqlRepository

        repository = SqlRepository.from_url(config.sqlalchemy_url, mappings)
        repository.create_tables()
        return repository

    raise ValueError(f"Unsupported database URL scheme: {config.url}")
