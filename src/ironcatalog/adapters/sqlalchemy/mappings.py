"""SQLAlchemy mapping metadata for the exercise catalog."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import Final

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    MetaData,
    String,
    Table,
    TypeDecorator,
    Uuid,
    orm,
)

from ironcatalog.domain.model import EquipmentRecord, ExerciseRecord, MetaEntry

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]

NAMING_CONVENTION: Final[dict[str, str]] = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class StableIdType(TypeDecorator[str]):
    """Stores the empty ``stable_id`` of unhashed records as NULL.

    The unique index then only constrains hashed rows; NULLs never collide.
    """

    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value: str | None, dialect: Dialect) -> str | None:
        _ = dialect
        return value or None

    def process_result_value(self, value: str | None, dialect: Dialect) -> str:
        _ = dialect
        return value or ""


mapper_registry = orm.registry(metadata=MetaData(naming_convention=NAMING_CONVENTION))


def _list_column(name: str) -> Column[list[str]]:
    return Column(name, JSON, nullable=False, default=list)


exercise_table = Table(
    "exercise",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("stable_id", StableIdType(), unique=True, index=True),
    Column("name", String(255), nullable=False),
    Column("slug", String(255), nullable=False, index=True),
    _list_column("primary_muscles"),
    _list_column("secondary_muscles"),
    _list_column("equipment"),
    _list_column("optional_equipment"),
    _list_column("aliases"),
    _list_column("instructions"),
    _list_column("cautions"),
    _list_column("common_mistakes"),
    Column("category", String(64)),
    Column("pattern", String(64)),
    Column("status", String(32), nullable=False),
    Column("youtube_search_query", String(255)),
    Column("youtube_video_id", String(32)),
    Column("video_url", String(512)),
    Column("source", String(64), nullable=False, index=True),
    Column("external_id", String(255), index=True),
    Column("source_key", String(255), index=True),
    Column("is_custom", Boolean, nullable=False, default=False),
    Column("seed_version", String(64)),
    _list_column("progressions"),
    _list_column("regressions"),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
)

equipment_table = Table(
    "equipment",
    mapper_registry.metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String(128), nullable=False),
    Column("category", String(32), nullable=False),
    _list_column("aliases"),
    Column("is_portable", Boolean, nullable=False, default=False),
)

meta_table = Table(
    "meta",
    mapper_registry.metadata,
    Column("key", String(128), primary_key=True),
    Column("value", JSON),
    Column("updated_at", UTCDateTime(), nullable=False),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the catalog model."""

    log.info("Starting SQLAlchemy mappers")
    mapper_registry.map_imperatively(ExerciseRecord, exercise_table)
    mapper_registry.map_imperatively(EquipmentRecord, equipment_table)
    mapper_registry.map_imperatively(MetaEntry, meta_table)
    return mapper_registry
