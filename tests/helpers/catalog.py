"""Builders for raw catalog payloads, records and fake sources."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from ironcatalog.domain.catalog_pipeline import (
    SourceUnavailableError,
    assign_stable_ids,
    normalize_exercise,
)
from ironcatalog.domain.ports.fetching import SourcePayload

if TYPE_CHECKING:
    from ironcatalog.domain.model import ExerciseRecord
    from ironcatalog.domain.ports.fetching import RawExercise

FIXED_NOW = datetime(2026, 1, 14, 12, 0, tzinfo=UTC)

_MUSCLES = ("quadriceps", "hamstrings", "glutes", "chest", "lats", "shoulders")
_PATTERNS = ("squat", "hinge", "lunge", "push", "pull", "carry")
_EQUIPMENT = ("barbell", "dumbbell", "kettlebells", "body only", "cable", "bands")


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_raw_exercise(index: int, **overrides: object) -> RawExercise:
    raw: RawExercise = {
        "id": f"Exercise_{index:03d}",
        "name": f"Exercise {index:03d}",
        "equipment": _EQUIPMENT[index % len(_EQUIPMENT)],
        "primaryMuscles": [_MUSCLES[index % len(_MUSCLES)]],
        "secondaryMuscles": [_MUSCLES[(index + 1) % len(_MUSCLES)]],
        "instructions": [f"Step one of exercise {index}.", f"Step two of exercise {index}."],
        "category": "strength",
        "pattern": _PATTERNS[index % len(_PATTERNS)],
        "gotchas": [f"Keep a neutral spine during exercise {index}."],
    }
    raw.update(overrides)
    return raw


def make_raw_catalog(count: int, *, start: int = 0) -> list[RawExercise]:
    return [make_raw_exercise(index) for index in range(start, start + count)]


def make_record(raw: RawExercise | None = None, **overrides: object) -> ExerciseRecord:
    """Normalize ``raw`` the way an import does, assign its stable id, then apply overrides."""

    record = normalize_exercise(raw or make_raw_exercise(0), now=FIXED_NOW)
    assign_stable_ids([record])
    for name, value in overrides.items():
        setattr(record, name, value)
    return record


class FakeSource:
    """In-memory catalog source; raises when constructed with ``error``."""

    def __init__(
        self,
        name: str,
        records: list[RawExercise] | None = None,
        *,
        error: str | None = None,
        warnings: list[str] | None = None,
    ) -> None:
        self._name = name
        self._records = records or []
        self._error = error
        self._warnings = warnings or []
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    def fetch(self) -> SourcePayload:
        self.calls += 1
        if self._error is not None:
            raise SourceUnavailableError(self._error)
        return SourcePayload(
            records=[dict(record) for record in self._records],
            source_name=self._name,
            warnings=list(self._warnings),
        )
