"""Difficulty-ranked progression/regression links between catalog exercises."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from .equipment import infer_equipment
from .normalization import normalize_name_key

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from ironcatalog.domain.model import ExerciseRecord

log = getLogger(__name__)

EQUIPMENT_DIFFICULTY: Final[dict[str, float]] = {
    "bodyweight": 1,
    "resistance_band": 1,
    "band": 1,
    "dumbbell": 2,
    "kettlebell": 2,
    "cable_machine": 2,
    "machine": 2,
    "bench": 2,
    "squat_rack": 3,
    "barbell": 3,
    "trap_bar": 3,
    "ez_bar": 3,
}
UNKNOWN_EQUIPMENT_DIFFICULTY: Final[float] = 2
BASE_DIFFICULTY: Final[float] = 1
MIN_DIFFICULTY: Final[float] = 1
MAX_DIFFICULTY: Final[float] = 5

DIFFICULTY_KEYWORDS: Final[tuple[tuple[re.Pattern[str], float], ...]] = (
    (re.compile(r"assisted|banded|supported"), -1),
    (re.compile(r"machine|smith"), -0.5),
    (re.compile(r"single|unilateral|one[-\s]?arm|one[-\s]?leg"), 0.75),
    (re.compile(r"pause|tempo|deficit|weighted|plyo|explosive"), 0.75),
)

MIN_SIMILARITY: Final[int] = 6
MAX_LINKS: Final[int] = 3


def score_difficulty(record: ExerciseRecord) -> float:
    """Rate ``record`` from 1 to 5.

    Records stored without equipment (legacy or hand-entered rows) are scored on the
    equipment their name implies. The guess is never written back.
    """

    equipment = record.equipment or infer_equipment(record.name).required
    difficulty = BASE_DIFFICULTY
    for equipment_id in equipment:
        difficulty = max(
            difficulty,
            EQUIPMENT_DIFFICULTY.get(equipment_id.lower(), UNKNOWN_EQUIPMENT_DIFFICULTY),
        )
    name = normalize_name_key(record.name)
    for pattern, delta in DIFFICULTY_KEYWORDS:
        if pattern.search(name):
            difficulty += delta
    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, difficulty))


def _lowered(values: Iterable[str]) -> set[str]:
    return {normalize_name_key(value) for value in values}


def similarity_score(base: ExerciseRecord, candidate: ExerciseRecord) -> int:
    score = 0
    base_pattern = normalize_name_key(base.pattern or "")
    if base_pattern and base_pattern == normalize_name_key(candidate.pattern or ""):
        score += 4
    base_category = normalize_name_key(base.category or "")
    if base_category and base_category == normalize_name_key(candidate.category or ""):
        score += 2
    shared_muscles = _lowered(base.primary_muscles) & _lowered(candidate.primary_muscles)
    score += min(len(shared_muscles) * 2, 6)
    if _lowered(base.equipment) & _lowered(candidate.equipment):
        score += 1
    return score


@dataclass(slots=True)
class LinkSet:
    progressions: list[str] = field(default_factory=list[str])
    regressions: list[str] = field(default_factory=list[str])


@dataclass(slots=True)
class LinkerStats:
    considered: int = 0
    updated: int = 0
    skipped: int = 0


def _eligible(records: Iterable[ExerciseRecord]) -> list[ExerciseRecord]:
    eligible = [record for record in records if record.stable_id and not record.is_user_owned]
    return sorted(eligible, key=lambda record: record.stable_id)


def _top(candidates: list[tuple[int, str]], limit: int) -> list[str]:
    # Stable sort keeps stable-id order among equal scores.
    ordered = sorted(candidates, key=lambda item: item[0], reverse=True)
    return [key for _, key in ordered[:limit]]


def build_exercise_links(
    records: Iterable[ExerciseRecord],
    *,
    min_score: int = MIN_SIMILARITY,
    max_links: int = MAX_LINKS,
) -> dict[str, LinkSet]:
    """Compute links for every eligible record. Pure; nothing is written."""

    eligible = _eligible(records)
    difficulty = {record.stable_id: score_difficulty(record) for record in eligible}
    links: dict[str, LinkSet] = {}
    for base in eligible:
        base_difficulty = difficulty[base.stable_id]
        regressions: list[tuple[int, str]] = []
        progressions: list[tuple[int, str]] = []
        for candidate in eligible:
            if candidate is base or candidate.stable_id == base.stable_id:
                continue
            score = similarity_score(base, candidate)
            if score < min_score:
                continue
            candidate_difficulty = difficulty[candidate.stable_id]
            if candidate_difficulty < base_difficulty:
                regressions.append((score, candidate.stable_id))
            elif candidate_difficulty > base_difficulty:
                progressions.append((score, candidate.stable_id))
        links[base.stable_id] = LinkSet(
            progressions=_top(progressions, max_links),
            regressions=_top(regressions, max_links),
        )
    return links


def apply_exercise_links(
    records: Sequence[ExerciseRecord],
    links: Mapping[str, LinkSet],
    *,
    force: bool = False,
    dry_run: bool = False,
) -> LinkerStats:
    """Write computed links into records that have none yet (all eligible ones with ``force``)."""

    stats = LinkerStats()
    for record in _eligible(records):
        link_set = links.get(record.stable_id)
        if link_set is None:
            continue
        stats.considered += 1
        if record.has_links and not force:
            stats.skipped += 1
            continue
        if (
            record.progressions == link_set.progressions
            and record.regressions == link_set.regressions
        ):
            stats.skipped += 1
            continue
        stats.updated += 1
        if not dry_run:
            record.progressions = list(link_set.progressions)
            record.regressions = list(link_set.regressions)
    log.info(
        "Linker: considered=%s updated=%s skipped=%s (force=%s, dry_run=%s)",
        stats.considered,
        stats.updated,
        stats.skipped,
        force,
        dry_run,
    )
    return stats
