"""Field-level merge of incoming catalog records into persisted ones."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from .normalization import is_placeholder_only

if TYPE_CHECKING:
    from datetime import datetime

    from ironcatalog.domain.model import ExerciseRecord


class FieldPolicy(StrEnum):
    FILL_IF_MISSING = "fill_if_missing"
    NEVER_OVERWRITE = "never_overwrite"
    PREFER_INCOMING_IF_NEWER = "prefer_incoming_if_newer"


FIELD_POLICIES: Final[dict[str, FieldPolicy]] = {
    "stable_id": FieldPolicy.NEVER_OVERWRITE,
    "name": FieldPolicy.FILL_IF_MISSING,
    "slug": FieldPolicy.FILL_IF_MISSING,
    "primary_muscles": FieldPolicy.FILL_IF_MISSING,
    "secondary_muscles": FieldPolicy.FILL_IF_MISSING,
    "equipment": FieldPolicy.FILL_IF_MISSING,
    "optional_equipment": FieldPolicy.FILL_IF_MISSING,
    "aliases": FieldPolicy.FILL_IF_MISSING,
    "instructions": FieldPolicy.FILL_IF_MISSING,
    "cautions": FieldPolicy.FILL_IF_MISSING,
    "common_mistakes": FieldPolicy.FILL_IF_MISSING,
    "category": FieldPolicy.FILL_IF_MISSING,
    "pattern": FieldPolicy.FILL_IF_MISSING,
    "status": FieldPolicy.FILL_IF_MISSING,
    "youtube_search_query": FieldPolicy.FILL_IF_MISSING,
    "youtube_video_id": FieldPolicy.FILL_IF_MISSING,
    "video_url": FieldPolicy.FILL_IF_MISSING,
    "source": FieldPolicy.FILL_IF_MISSING,
    "external_id": FieldPolicy.FILL_IF_MISSING,
    "source_key": FieldPolicy.FILL_IF_MISSING,
    "seed_version": FieldPolicy.PREFER_INCOMING_IF_NEWER,
    "is_custom": FieldPolicy.NEVER_OVERWRITE,
    "progressions": FieldPolicy.NEVER_OVERWRITE,
    "regressions": FieldPolicy.NEVER_OVERWRITE,
    "created_at": FieldPolicy.NEVER_OVERWRITE,
}

# Lists whose content may consist of upstream boilerplate.
PLACEHOLDER_FIELDS: Final[frozenset[str]] = frozenset(
    {"instructions", "cautions", "common_mistakes"}
)


@dataclass(slots=True)
class MergeOutcome:
    changes: dict[str, object] = field(default_factory=dict[str, object])
    skipped: bool = False
    cleared_placeholders: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.changes)


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, list):
        return not value
    return False


def _copy(value: object) -> object:
    return list(value) if isinstance(value, list) else value


def merge_exercise(
    existing: ExerciseRecord,
    incoming: ExerciseRecord,
    *,
    clear_placeholders: bool = False,
) -> MergeOutcome:
    """Compute the field changes ``incoming`` contributes to ``existing``.

    Nothing is mutated here; see ``apply_merge``. User-owned records are never touched.
    With ``clear_placeholders`` a placeholder-only list that has no incoming replacement
    is reset to an empty list.
    """

    if existing.is_user_owned:
        return MergeOutcome(skipped=True)

    outcome = MergeOutcome()
    for name, policy in FIELD_POLICIES.items():
        current = getattr(existing, name)
        proposed = getattr(incoming, name)

        if policy is FieldPolicy.NEVER_OVERWRITE:
            continue

        if policy is FieldPolicy.PREFER_INCOMING_IF_NEWER:
            if not _is_missing(proposed) and (
                _is_missing(current) or str(proposed) > str(current)
            ):
                outcome.changes[name] = proposed
            continue

        placeholder = (
            name in PLACEHOLDER_FIELDS
            and isinstance(current, list)
            and is_placeholder_only(current)
        )
        if not (_is_missing(current) or placeholder):
            continue
        if not _is_missing(proposed) and proposed != current:
            outcome.changes[name] = _copy(proposed)
        elif placeholder and clear_placeholders:
            outcome.changes[name] = []
            outcome.cleared_placeholders += 1
    return outcome


def apply_merge(existing: ExerciseRecord, outcome: MergeOutcome, *, now: datetime) -> bool:
    """Write the outcome onto ``existing``. Returns whether anything changed."""

    if outcome.skipped or not outcome.changed:
        return False
    for name, value in outcome.changes.items():
        setattr(existing, name, value)
    existing.updated_at = now
    return True
