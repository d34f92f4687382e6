"""Exercise catalog aggregate."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

from .enums import ExerciseSource, ExerciseStatus


def new_id() -> UUID:
    return uuid4()


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class ExerciseRecord:
    """One exercise definition in the local catalog.

    ``id`` is the internal row identity. ``stable_id`` is the content-derived identity
    shared between upstream payloads and persisted rows; it stays empty for records
    that have not been hashed yet (for example freshly normalized input).
    """

    id: UUID = field(default_factory=new_id)
    stable_id: str = ""
    name: str
    slug: str = ""

    primary_muscles: list[str] = field(default_factory=list[str])
    secondary_muscles: list[str] = field(default_factory=list[str])
    equipment: list[str] = field(default_factory=list[str])
    optional_equipment: list[str] = field(default_factory=list[str])
    aliases: list[str] = field(default_factory=list[str])
    instructions: list[str] = field(default_factory=list[str])
    cautions: list[str] = field(default_factory=list[str])
    common_mistakes: list[str] = field(default_factory=list[str])

    category: str | None = None
    pattern: str | None = None
    status: str = ExerciseStatus.EXTENDED
    youtube_search_query: str | None = None
    youtube_video_id: str | None = None
    video_url: str | None = None

    source: str = ExerciseSource.FREE_EXERCISE_DB
    external_id: str | None = None
    source_key: str | None = None
    is_custom: bool = False
    seed_version: str | None = None

    progressions: list[str] = field(default_factory=list[str])
    regressions: list[str] = field(default_factory=list[str])

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_user_owned(self) -> bool:
        """User-authored records are immune to every automated pass."""
        return self.source == ExerciseSource.USER or self.is_custom

    @property
    def has_links(self) -> bool:
        return bool(self.progressions or self.regressions)
