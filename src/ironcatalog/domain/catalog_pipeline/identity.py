"""Content-derived identity, completeness scoring and intra-batch deduplication."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .normalization import normalize_name_key, normalize_text

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ironcatalog.domain.model import ExerciseRecord

log = getLogger(__name__)


def _sha256(material: object) -> str:
    encoded = json.dumps(material, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


def _canonical_set(values: Iterable[str]) -> list[str]:
    return sorted({normalize_name_key(value) for value in values if normalize_text(value)})


def identity_material(record: ExerciseRecord) -> dict[str, object]:
    return {
        "externalId": normalize_text(record.external_id),
        "name": normalize_name_key(record.name),
        "equipment": _canonical_set(record.equipment),
        "primaryMuscles": _canonical_set(record.primary_muscles),
        "pattern": normalize_name_key(record.pattern or ""),
        "category": normalize_name_key(record.category or ""),
    }


def compute_stable_id(record: ExerciseRecord) -> str:
    """Order- and case-insensitive SHA-256 over the identity fields."""

    return _sha256(identity_material(record))


def assign_stable_ids(records: Iterable[ExerciseRecord]) -> None:
    for record in records:
        record.stable_id = compute_stable_id(record)


def completeness_score(record: ExerciseRecord) -> int:
    score = 4 if record.name else 0
    score += 2 * len(record.instructions)
    score += 2 * len(record.primary_muscles)
    score += len(record.secondary_muscles)
    score += 2 * len(record.equipment)
    score += len(record.aliases)
    score += len(record.cautions)
    score += len(record.common_mistakes)
    score += 1 if record.category else 0
    score += 1 if record.pattern else 0
    score += 1 if record.youtube_search_query else 0
    score += 1 if (record.youtube_video_id or record.video_url) else 0
    return score


@dataclass(slots=True)
class DeduplicationResult:
    records: list[ExerciseRecord]
    collapsed: int = 0
    replaced: list[str] = field(default_factory=list[str])


def deduplicate(records: Iterable[ExerciseRecord]) -> DeduplicationResult:
    """Collapse records sharing a ``stable_id``.

    The first-seen position is kept; a later duplicate takes it over only when its
    completeness score is strictly higher.
    """

    kept: dict[str, ExerciseRecord] = {}
    scores: dict[str, int] = {}
    result = DeduplicationResult(records=[])
    for record in records:
        if not record.stable_id:
            record.stable_id = compute_stable_id(record)
        key = record.stable_id
        score = completeness_score(record)
        if key not in kept:
            kept[key] = record
            scores[key] = score
            continue
        result.collapsed += 1
        if score > scores[key]:
            kept[key] = record
            scores[key] = score
            result.replaced.append(key)
    result.records = list(kept.values())
    if result.collapsed:
        log.info(
            "Collapsed %s duplicate records (%s replaced by a more complete copy)",
            result.collapsed,
            len(result.replaced),
        )
    return result


def content_digest(record: ExerciseRecord) -> str:
    """Digest of identity plus content fields; detects upstream text edits."""

    return _sha256(
        {
            "stableId": record.stable_id,
            "name": record.name,
            "slug": record.slug,
            "primaryMuscles": sorted(record.primary_muscles),
            "secondaryMuscles": sorted(record.secondary_muscles),
            "equipment": sorted(record.equipment),
            "optionalEquipment": sorted(record.optional_equipment),
            "aliases": sorted(record.aliases),
            "instructions": record.instructions,
            "cautions": sorted(record.cautions),
            "commonMistakes": sorted(record.common_mistakes),
            "category": record.category,
            "pattern": record.pattern,
            "youtubeSearchQuery": record.youtube_search_query,
            "youtubeVideoId": record.youtube_video_id,
            "videoUrl": record.video_url,
            "sourceKey": record.source_key,
        }
    )


def compute_corpus_hash(records: Iterable[ExerciseRecord]) -> str:
    """Hash-of-hashes over the deduplicated set, sorted by ``stable_id``."""

    ordered = sorted(records, key=lambda record: record.stable_id)
    return _sha256([content_digest(record) for record in ordered])
