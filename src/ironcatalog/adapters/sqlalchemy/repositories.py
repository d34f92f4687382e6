"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from itertools import batched
from typing import TYPE_CHECKING, Final, cast

from sqlalchemy import func, select

from ironcatalog.adapters.sqlalchemy.mappings import equipment_table, exercise_table
from ironcatalog.domain.model import EquipmentRecord, ExerciseRecord, MetaEntry, utcnow

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.orm import Session

# Keeps ``IN (...)`` lists below SQLite's bound-parameter limit.
_LOOKUP_CHUNK: Final[int] = 500


class SqlAlchemyExerciseRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ExerciseRecord) -> None:
        self.session.add(entity)

    def add_all(self, entities: Iterable[ExerciseRecord]) -> None:
        self.session.add_all(list(entities))
        self.session.flush()

    def upsert_all(self, entities: Iterable[ExerciseRecord]) -> None:
        """Insert transient records and flush pending changes on persistent ones."""

        for entity in entities:
            if entity in self.session:
                continue
            existing = self.get_by_stable_id(entity.stable_id)
            if existing is None:
                self.session.add(entity)
            else:
                entity.id = existing.id
                self.session.merge(entity)
        self.session.flush()

    def count(self) -> int:
        stmt = select(func.count()).select_from(exercise_table)
        return int(self.session.execute(stmt).scalar_one())

    def get_by_stable_id(self, stable_id: str) -> ExerciseRecord | None:
        if not stable_id:
            return None
        stmt = select(ExerciseRecord).where(exercise_table.c.stable_id == stable_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def list_by_stable_ids(self, stable_ids: Iterable[str]) -> dict[str, ExerciseRecord]:
        wanted = sorted({stable_id for stable_id in stable_ids if stable_id})
        found: dict[str, ExerciseRecord] = {}
        for chunk in batched(wanted, _LOOKUP_CHUNK):
            stmt = select(ExerciseRecord).where(exercise_table.c.stable_id.in_(chunk))
            for record in self.session.execute(stmt).scalars():
                found[record.stable_id] = record
        return found

    def list_all(self) -> list[ExerciseRecord]:
        stmt = select(ExerciseRecord).order_by(exercise_table.c.stable_id)
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyEquipmentRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: EquipmentRecord) -> None:
        self.session.add(entity)

    def get(self, equipment_id: str) -> EquipmentRecord | None:
        return self.session.get(EquipmentRecord, equipment_id)

    def list_all(self) -> list[EquipmentRecord]:
        stmt = select(EquipmentRecord).order_by(equipment_table.c.id)
        return list(self.session.execute(stmt).scalars())

    def count(self) -> int:
        stmt = select(func.count()).select_from(equipment_table)
        return int(self.session.execute(stmt).scalar_one())


class SqlAlchemyMetaRepository:
    """JSON key/value rows in the ``meta`` table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, key: str) -> object | None:
        entry = self.session.get(MetaEntry, key)
        return None if entry is None else entry.value

    def put(self, key: str, value: object) -> None:
        entry = self.session.get(MetaEntry, key)
        if entry is None:
            self.session.add(MetaEntry(key=key, value=value))
        else:
            entry.value = value
            entry.updated_at = utcnow()
        self.session.flush()


if TYPE_CHECKING:
    from ironcatalog.domain.ports.persistence import (
        EquipmentRepository,
        ExerciseRepository,
        MetaRepository,
    )

    _session_stub = cast("Session", object())
    _exercise_repo: ExerciseRepository = SqlAlchemyExerciseRepository(_session_stub)
    _equipment_repo: EquipmentRepository = SqlAlchemyEquipmentRepository(_session_stub)
    _meta_repo: MetaRepository = SqlAlchemyMetaRepository(_session_stub)
