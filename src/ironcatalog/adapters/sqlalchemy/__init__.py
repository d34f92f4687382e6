"""SQLAlchemy adapter package for the exercise catalog."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyEquipmentRepository,
    SqlAlchemyExerciseRepository,
    SqlAlchemyMetaRepository,
)
from .unit_of_work import SqlAlchemyCatalogUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "SqlAlchemyCatalogUnitOfWork",
    "SqlAlchemyEquipmentRepository",
    "SqlAlchemyExerciseRepository",
    "SqlAlchemyMetaRepository",
    "StartupError",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
