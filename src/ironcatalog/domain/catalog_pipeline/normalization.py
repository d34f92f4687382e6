"""Raw catalog records -> canonical ``ExerciseRecord`` shape.

Upstream catalogs disagree on field names (``primaryMuscles`` vs ``primary_muscles``
vs ``muscle_group``) and on container shapes (scalar vs list vs newline-joined text).
Everything downstream of this module only ever sees the canonical shape.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING, Final

from ironcatalog.domain.model import ExerciseRecord, ExerciseSource, ExerciseStatus

from .equipment import canonical_equipment_id

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from ironcatalog.domain.ports.fetching import RawExercise

log = getLogger(__name__)

NAME_KEYS: Final = ("name", "exercise_name", "exerciseName", "title")
EXTERNAL_ID_KEYS: Final = ("externalId", "external_id", "id", "_id", "exerciseId")
SLUG_KEYS: Final = ("slug",)
PRIMARY_MUSCLE_KEYS: Final = (
    "primaryMuscles",
    "primary_muscles",
    "primary_muscle",
    "primary",
    "muscle_group",
    "muscleGroup",
)
SECONDARY_MUSCLE_KEYS: Final = (
    "secondaryMuscles",
    "secondary_muscles",
    "secondary_muscle",
    "secondary",
)
EQUIPMENT_KEYS: Final = (
    "equipment",
    "equipmentList",
    "requiredEquipment",
    "required_equipment",
    "equipment_list",
    "equipment_required",
    "equipment_ids",
)
OPTIONAL_EQUIPMENT_KEYS: Final = ("optionalEquipment", "optional_equipment")
INSTRUCTION_KEYS: Final = ("instructions", "steps", "execution", "howTo")
CAUTION_KEYS: Final = ("gotchas", "tips", "cues")
MISTAKE_KEYS: Final = ("commonMistakes", "common_mistakes", "mistakes")
ALIAS_KEYS: Final = ("aliases", "alternativeNames", "aka")
CATEGORY_KEYS: Final = ("category", "type", "movement", "bodyPart")
PATTERN_KEYS: Final = ("pattern", "mechanic", "mechanics", "force")
VIDEO_URL_KEYS: Final = ("videoUrl", "video_url")

PLACEHOLDER_PATTERNS: Final[tuple[re.Pattern[str], ...]] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"^no (instructions|steps|tips|cues|notes)( are)? (available|provided)\.?$",
        r"^(instructions|details|content)( are)? coming soon\.?$",
        r"^(n/?a|tbd|todo|none|-+|\.+)$",
        r"^perform (the|this) exercise with (proper|good) form\.?$",
        r"^consult (a|your) (doctor|physician)( before beginning any exercise program)?\.?$",
        r"^lorem ipsum\b.*$",
    )
)

_SLUG_RE = re.compile(r"[^a-z0-9]+")
_WHITESPACE_RE = re.compile(r"\s+")


def slugify(value: str) -> str:
    return _SLUG_RE.sub("-", value.strip().lower()).strip("-")


def normalize_text(value: object) -> str:
    if value is None or isinstance(value, (Mapping, list, tuple, set)):
        return ""
    return _WHITESPACE_RE.sub(" ", str(value)).strip()


def normalize_name_key(value: str) -> str:
    """Case/whitespace-insensitive name form used for identity and fallback matching."""
    return normalize_text(value).lower()


def is_placeholder_text(value: str) -> bool:
    text = normalize_text(value)
    return any(pattern.match(text) for pattern in PLACEHOLDER_PATTERNS)


def is_placeholder_only(values: Iterable[str]) -> bool:
    """True for a non-empty list made up solely of boilerplate entries."""

    items = [item for item in values if normalize_text(item)]
    return bool(items) and all(is_placeholder_text(item) for item in items)


def strip_placeholders(values: Iterable[str]) -> list[str]:
    return [item for item in values if not is_placeholder_text(item)]


def _pick(raw: Mapping[str, object], keys: Iterable[str]) -> object:
    for key in keys:
        value = raw.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        if isinstance(value, (list, tuple)) and not value:
            continue
        return value
    return None


def _iter_items(value: object) -> Iterable[object]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple, set)):
        return value
    return (value,)


def normalize_list(
    value: object,
    *,
    split_lines: bool = False,
    split_commas: bool = False,
    lower: bool = False,
) -> list[str]:
    """Coerce scalars/lists to a trimmed, de-duplicated list preserving first occurrence."""

    result: list[str] = []
    for item in _iter_items(value):
        if isinstance(item, Mapping):
            item = _pick(item, ("name", "text", "value", "id"))  # noqa: PLW2901
        pieces = [str(item)] if item is not None else []
        if split_lines:
            pieces = [part for piece in pieces for part in piece.splitlines()]
        if split_commas:
            pieces = [part for piece in pieces for part in piece.split(",")]
        for piece in pieces:
            text = normalize_text(piece)
            if lower:
                text = text.lower()
            if text and text not in result:
                result.append(text)
    return result


def normalize_equipment(value: object) -> list[str]:
    equipment: list[str] = []
    for label in normalize_list(value, split_commas=True):
        equipment_id = canonical_equipment_id(label)
        if equipment_id and equipment_id not in equipment:
            equipment.append(equipment_id)
    return equipment


def _video_url(raw: Mapping[str, object]) -> str | None:
    media = raw.get("media")
    if isinstance(media, Mapping):
        url = normalize_text(_pick(media, VIDEO_URL_KEYS))
        if url:
            return url
    return normalize_text(_pick(raw, VIDEO_URL_KEYS)) or None


def _catalog_source(raw: Mapping[str, object], origin: str) -> str:
    # Payloads cannot claim user ownership.
    source = normalize_text(raw.get("source"))
    if not source or source.lower() == ExerciseSource.USER:
        return origin
    return source


def normalize_exercise(
    raw: RawExercise,
    *,
    now: datetime,
    origin: str = ExerciseSource.FREE_EXERCISE_DB,
) -> ExerciseRecord:
    """Return a transient canonical record (``stable_id`` is left empty)."""

    name = normalize_text(_pick(raw, NAME_KEYS))
    external_id = normalize_text(_pick(raw, EXTERNAL_ID_KEYS)) or None
    slug = slugify(normalize_text(_pick(raw, SLUG_KEYS)) or name or external_id or "")
    if not slug:
        slug = "exercise"

    # Missing equipment stays empty so validation rejects it.
    equipment = normalize_equipment(_pick(raw, EQUIPMENT_KEYS))
    optional_equipment = normalize_equipment(_pick(raw, OPTIONAL_EQUIPMENT_KEYS))

    cautions = strip_placeholders(normalize_list(_pick(raw, CAUTION_KEYS), split_lines=True))
    common_mistakes = strip_placeholders(
        normalize_list(_pick(raw, MISTAKE_KEYS), split_lines=True)
    )

    youtube_video_id = normalize_text(raw.get("youtubeVideoId")) or None
    search_query = normalize_text(raw.get("youtubeSearchQuery"))
    if not search_query and name:
        search_query = f"{name} exercise form cues"

    return ExerciseRecord(
        name=name,
        slug=slug,
        primary_muscles=normalize_list(_pick(raw, PRIMARY_MUSCLE_KEYS), lower=True),
        secondary_muscles=normalize_list(_pick(raw, SECONDARY_MUSCLE_KEYS), lower=True),
        equipment=equipment,
        optional_equipment=[item for item in optional_equipment if item not in equipment],
        aliases=[
            alias
            for alias in normalize_list(_pick(raw, ALIAS_KEYS))
            if alias.lower() != name.lower()
        ],
        instructions=strip_placeholders(
            normalize_list(_pick(raw, INSTRUCTION_KEYS), split_lines=True)
        ),
        cautions=cautions,
        common_mistakes=common_mistakes or list(cautions),
        category=normalize_text(_pick(raw, CATEGORY_KEYS)).lower() or None,
        pattern=normalize_text(_pick(raw, PATTERN_KEYS)).lower() or None,
        status=normalize_text(raw.get("status")).lower() or ExerciseStatus.EXTENDED,
        youtube_search_query=search_query or None,
        youtube_video_id=youtube_video_id,
        video_url=_video_url(raw),
        source=_catalog_source(raw, origin),
        external_id=external_id,
        source_key=normalize_text(raw.get("sourceKey")) or external_id,
        is_custom=False,
        created_at=now,
        updated_at=now,
    )


def normalize_catalog(
    raw_records: Iterable[RawExercise],
    *,
    now: datetime,
    origin: str = ExerciseSource.FREE_EXERCISE_DB,
) -> list[ExerciseRecord]:
    return [normalize_exercise(raw, now=now, origin=origin) for raw in raw_records]
