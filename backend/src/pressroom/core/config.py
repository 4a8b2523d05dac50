"""Runtime settings loaded from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return raw.lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class Settings:
    """Query and serialization limits.

    Attributes:
        max_page_size: Upper bound for a page of results
        default_page_size: Page size when the caller gives no count
        strict_filters: Reject unrecognized filter keys instead of dropping them
        clamp_pagination: Clamp out-of-range offset/count instead of failing
        max_depth: How many levels of related entities may be nested
        log_level: Root log level name
        schema_path: Directory of YAML schema files loaded at startup
    """

    max_page_size: int = 100
    default_page_size: int = 20
    strict_filters: bool = False
    clamp_pagination: bool = True
    max_depth: int = 1
    log_level: str = "INFO"
    schema_path: str | None = None

    def __post_init__(self) -> None:
        if self.max_page_size < 1:
            raise ValueError("max_page_size must be at least 1")
        if not 1 <= self.default_page_size <= self.max_page_size:
            raise ValueError("default_page_size must be within [1, max_page_size]")
        if self.max_depth < 0:
            raise ValueError("max_depth cannot be negative")

    @classmethod
    def from_env(cls) -> Settings:
        """Create settings from PRESSROOM_* environment variables."""
        return cls(
            max_page_size=_env_int("PRESSROOM_MAX_PAGE_SIZE", cls.max_page_size),
            default_page_size=_env_int(
                "PRESSROOM_DEFAULT_PAGE_SIZE", cls.default_page_size
            ),
            strict_filters=_env_bool("PRESSROOM_STRICT_FILTERS", cls.strict_filters),
            clamp_pagination=_env_bool(
                "PRESSROOM_CLAMP_PAGINATION", cls.clamp_pagination
            ),
            max_depth=_env_int("PRESSROOM_MAX_DEPTH", cls.max_depth),
            log_level=os.environ.get("PRESSROOM_LOG_LEVEL", cls.log_level).upper(),
            schema_path=os.environ.get("PRESSROOM_SCHEMA_PATH") or None,
        )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for CLI and dev-server entrypoints."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
