"""Initialize Pressroom services.

Shared by the API lifespan and the CLI so both wire the registry the
same way.
"""

import logging
import os
from pathlib import Path

from pressroom.core.config import Settings
from pressroom.editorial import EDITORIAL_TABLES, register_editorial_services, seed_demo
from pressroom.hooks.registry import HookRegistry
from pressroom.persistence import DatabaseConfig, EntityRepository, create_repository
from pressroom.serialization.loader import SchemaLoader
from pressroom.services.registry import ServiceRegistry

logger = logging.getLogger(__name__)


def create_registry(
    settings: Settings | None = None,
    repository: EntityRepository | None = None,
    hooks: HookRegistry | None = None,
    seed: bool | None = None,
) -> ServiceRegistry:
    """Build the service registry with the editorial services registered.

    Args:
        settings: Limits and the optional YAML schema directory; defaults
            to Settings.from_env()
        repository: Backing store; defaults to one built from DATABASE_URL
        hooks: Pre-populated hook registry (plugins register before startup)
        seed: Load demo data. Defaults to PRESSROOM_SEED_DEMO, or True for
            the in-memory database when the variable is unset.
    """
    settings = settings or Settings.from_env()

    if repository is None:
        db_config = DatabaseConfig.from_env()
        repository = create_repository(db_config, EDITORIAL_TABLES)
        if seed is None:
            raw = os.environ.get("PRESSROOM_SEED_DEMO")
            seed = db_config.is_memory if raw is None else raw.lower() in ("1", "true", "yes")
        logger.info("Using %s repository", "in-memory" if db_config.is_memory else db_config.url.split(":", 1)[0])

    registry = ServiceRegistry(repository, hooks=hooks, settings=settings)

    # YAML schemas override the built-in schema of the same entity type
    if settings.schema_path:
        load_schemas(registry, Path(settings.schema_path))

    register_editorial_services(registry)

    if seed:
        seed_demo(repository)
        logger.info("Loaded demo data")

    return registry


def load_schemas(registry: ServiceRegistry, schemas_path: Path) -> None:
    """Register every schema declared under ``schemas_path`` on the registry."""
    loader = SchemaLoader(schemas_path)
    loader.load_all()
    for schema in loader.list_schemas():
        registry.schemas.register(schema)
    logger.info("Loaded %d schema(s) from %s", len(loader.list_schemas()), schemas_path)
