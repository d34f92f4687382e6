"""Domain model package."""

from __future__ import annotations

from .enums import EquipmentCategory, ExerciseSource, ExerciseStatus, SeedStatus
from .equipment import EquipmentRecord
from .exercise import ExerciseRecord, new_id, utcnow
from .meta import MetaEntry

__all__ = [
    "EquipmentCategory",
    "EquipmentRecord",
    "ExerciseRecord",
    "ExerciseSource",
    "ExerciseStatus",
    "MetaEntry",
    "SeedStatus",
    "new_id",
    "utcnow",
]
