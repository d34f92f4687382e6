from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import inspect, text

from ironcatalog.adapters.sqlalchemy.repositories import (
    SqlAlchemyEquipmentRepository,
    SqlAlchemyExerciseRepository,
    SqlAlchemyMetaRepository,
)
from ironcatalog.domain.model import EquipmentRecord, ExerciseSource
from tests.helpers.catalog import FIXED_NOW, make_raw_exercise, make_record

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session


def test_migrations_create_catalog_tables(sqlite_engine: Engine) -> None:
    inspector = inspect(sqlite_engine)

    assert {"exercise", "equipment", "meta"} <= set(inspector.get_table_names())
    index_names = {index["name"] for index in inspector.get_indexes("exercise")}
    assert "ix_exercise_stable_id" in index_names


def test_exercise_repository_round_trip(sqlite_session: Session) -> None:
    repository = SqlAlchemyExerciseRepository(sqlite_session)
    records = [make_record(make_raw_exercise(index)) for index in range(3)]

    repository.add_all(records)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    assert repository.count() == 3
    stored = repository.get_by_stable_id(records[1].stable_id)
    assert stored is not None
    assert stored.name == "Exercise 001"
    assert stored.instructions == records[1].instructions
    assert stored.created_at == FIXED_NOW
    assert [r.stable_id for r in repository.list_all()] == sorted(r.stable_id for r in records)


def test_unhashed_user_records_share_the_unique_stable_id_column(sqlite_session: Session) -> None:
    repository = SqlAlchemyExerciseRepository(sqlite_session)
    authored = [
        make_record(make_raw_exercise(index), stable_id="", source=ExerciseSource.USER)
        for index in range(2)
    ]

    repository.add_all(authored)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    assert repository.count() == 2
    stored_nulls = sqlite_session.execute(
        text("SELECT count(*) FROM exercise WHERE stable_id IS NULL")
    ).scalar_one()
    assert stored_nulls == 2
    assert [record.stable_id for record in repository.list_all()] == ["", ""]
    assert repository.get_by_stable_id("") is None


def test_list_by_stable_ids_ignores_unknown_and_blank_ids(sqlite_session: Session) -> None:
    repository = SqlAlchemyExerciseRepository(sqlite_session)
    records = [make_record(make_raw_exercise(index)) for index in range(2)]
    repository.add_all(records)

    found = repository.list_by_stable_ids([records[0].stable_id, "unknown", ""])

    assert list(found) == [records[0].stable_id]
    assert found[records[0].stable_id] is records[0]


def test_upsert_inserts_new_and_merges_detached_records(sqlite_session: Session) -> None:
    repository = SqlAlchemyExerciseRepository(sqlite_session)
    original = make_record()
    repository.add_all([original])
    sqlite_session.commit()
    sqlite_session.expunge_all()

    replacement = make_record(category="conditioning")
    newcomer = make_record(make_raw_exercise(1))
    repository.upsert_all([replacement, newcomer])
    sqlite_session.commit()
    sqlite_session.expunge_all()

    assert repository.count() == 2
    stored = repository.get_by_stable_id(original.stable_id)
    assert stored is not None
    assert stored.id == original.id
    assert stored.category == "conditioning"


def test_equipment_repository(sqlite_session: Session) -> None:
    repository = SqlAlchemyEquipmentRepository(sqlite_session)
    repository.add(EquipmentRecord(id="trap_bar", name="Trap Bar", aliases=["hex bar"]))
    repository.add(EquipmentRecord(id="barbell", name="Barbell"))
    sqlite_session.flush()

    assert repository.count() == 2
    assert [record.id for record in repository.list_all()] == ["barbell", "trap_bar"]
    trap_bar = repository.get("trap_bar")
    assert trap_bar is not None
    assert trap_bar.aliases == ["hex bar"]
    assert repository.get("sled") is None


def test_meta_repository_creates_then_updates(sqlite_session: Session) -> None:
    repository = SqlAlchemyMetaRepository(sqlite_session)

    assert repository.get("seed.state") is None
    repository.put("seed.state", {"version": "a"})
    repository.put("seed.state", {"version": "b", "audit_log": []})
    sqlite_session.commit()
    sqlite_session.expunge_all()

    assert repository.get("seed.state") == {"version": "b", "audit_log": []}
