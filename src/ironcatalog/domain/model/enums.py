"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ExerciseSource(StrEnum):
    """Well-known provenance tags. Upstream catalogs may use their own origin string."""

    FREE_EXERCISE_DB = "free-exercise-db"
    STARTER = "starter"
    USER = "user"


class ExerciseStatus(StrEnum):
    CORE = "core"
    EXTENDED = "extended"


class EquipmentCategory(StrEnum):
    FREE_WEIGHTS = "free_weights"
    MACHINE = "machine"
    BODYWEIGHT = "bodyweight"
    CARDIO = "cardio"
    ACCESSORY = "accessory"
    OTHER = "other"


class SeedStatus(StrEnum):
    """Outcome of the most recent catalog run as recorded in the seed state."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    STARTER_ONLY = "STARTER_ONLY"
    SKIPPED = "SKIPPED"
