"""Domain ports (protocols implemented by adapters)."""

from __future__ import annotations

from .fetching import CatalogSource, RawExercise, SourcePayload
from .persistence import EquipmentRepository, ExerciseRepository, MetaRepository, Repository
from .unit_of_work import CatalogRepositories, CatalogUnitOfWork

__all__ = [
    "CatalogRepositories",
    "CatalogSource",
    "CatalogUnitOfWork",
    "EquipmentRepository",
    "ExerciseRepository",
    "MetaRepository",
    "RawExercise",
    "Repository",
    "SourcePayload",
]
