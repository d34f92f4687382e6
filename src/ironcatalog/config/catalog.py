"""Catalog source and seeding configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from ironcatalog import __version__

from .env import optional_env_int, optional_env_str
from .errors import ConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig
from .storage import get_storage_config

DEFAULT_CATALOG_URL: Final[str] = (
    "https://raw.githubusercontent.com/yuhonas/free-exercise-db/main/dist/exercises.json"
)
DEFAULT_CATALOG_FALLBACK_URL: Final[str] = (
    "https://cdn.jsdelivr.net/gh/yuhonas/free-exercise-db@main/dist/exercises.json"
)
DEFAULT_CATALOG_VERSION: Final[str] = "2026-01-14-free-exercise-db-v3"
DEFAULT_CATALOG_ORIGIN: Final[str] = "free-exercise-db"

SEED_MIN_COUNT: Final[int] = 300
SEED_BATCH_SIZE: Final[int] = 100
AUDIT_LOG_LIMIT: Final[int] = 20
SAMPLE_LIMIT: Final[int] = 10

PACKAGE_DATA_DIR: Final[Path] = Path(__file__).resolve().parents[1] / "data"
DEFAULT_STARTER_CATALOG: Final[Path] = PACKAGE_DATA_DIR / "starter_exercises.json"


def is_array_payload(payload: object) -> bool:
    """Cache only responses that already look like a catalog document."""

    return isinstance(payload, list) and len(payload) > 0


@dataclass(frozen=True, slots=True)
class CatalogSourceConfig:
    primary_url: str = DEFAULT_CATALOG_URL
    fallback_url: str | None = DEFAULT_CATALOG_FALLBACK_URL
    embedded_path: Path | None = None
    origin: str = DEFAULT_CATALOG_ORIGIN
    resilience: ResilienceConfig = field(
        default_factory=lambda: ResilienceConfig(name="exercise-catalog")
    )


@dataclass(frozen=True, slots=True)
class SeedConfig:
    version: str = DEFAULT_CATALOG_VERSION
    min_count: int = SEED_MIN_COUNT
    batch_size: int = SEED_BATCH_SIZE
    audit_log_limit: int = AUDIT_LOG_LIMIT
    sample_limit: int = SAMPLE_LIMIT
    starter_path: Path = DEFAULT_STARTER_CATALOG


def _cache_config() -> CacheConfig | None:
    backend = (optional_env_str("IRONCATALOG_HTTP_CACHE") or "memory").lower()
    if backend == "off":
        return None
    if backend not in {"memory", "sqlite"}:
        raise ConfigurationError(
            f"IRONCATALOG_HTTP_CACHE must be one of memory, sqlite, off; got {backend!r}"
        )
    return CacheConfig(
        backend="sqlite" if backend == "sqlite" else "memory",
        should_cache=is_array_payload,
    )


def get_catalog_source_config() -> CatalogSourceConfig:
    embedded = optional_env_str("IRONCATALOG_EMBEDDED_CATALOG")
    return CatalogSourceConfig(
        primary_url=optional_env_str("IRONCATALOG_CATALOG_URL") or DEFAULT_CATALOG_URL,
        fallback_url=(
            optional_env_str("IRONCATALOG_CATALOG_FALLBACK_URL") or DEFAULT_CATALOG_FALLBACK_URL
        ),
        embedded_path=Path(embedded) if embedded else get_storage_config().embedded_catalog_path(),
        resilience=ResilienceConfig(
            name="exercise-catalog",
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
            cache=_cache_config(),
            headers={
                "Accept": "application/json",
                "User-Agent": f"ironcatalog/{__version__}",
            },
        ),
    )


def get_seed_config() -> SeedConfig:
    return SeedConfig(
        version=optional_env_str("IRONCATALOG_CATALOG_VERSION") or DEFAULT_CATALOG_VERSION,
        min_count=optional_env_int(
            "IRONCATALOG_SEED_MIN_COUNT", default=SEED_MIN_COUNT, minimum=0
        ),
        batch_size=optional_env_int(
            "IRONCATALOG_SEED_BATCH_SIZE", default=SEED_BATCH_SIZE, minimum=1
        ),
    )
