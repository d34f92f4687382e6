from __future__ import annotations

from ironcatalog.domain.catalog_pipeline.equipment import (
    BUILTIN_EQUIPMENT,
    EquipmentResolver,
    canonical_equipment_id,
    install_builtin_equipment,
)
from ironcatalog.domain.model import EquipmentCategory, EquipmentRecord


class InMemoryEquipmentRepository:
    def __init__(self, records: list[EquipmentRecord] | None = None) -> None:
        self.records = {record.id: record for record in records or []}

    def add(self, entity: EquipmentRecord) -> None:
        self.records[entity.id] = entity

    def get(self, equipment_id: str) -> EquipmentRecord | None:
        return self.records.get(equipment_id)

    def list_all(self) -> list[EquipmentRecord]:
        return list(self.records.values())

    def count(self) -> int:
        return len(self.records)


def test_canonical_ids_fold_aliases() -> None:
    assert canonical_equipment_id("Hex Bar") == "trap_bar"
    assert canonical_equipment_id("DUMBBELLS") == "dumbbell"
    assert canonical_equipment_id("Medicine Ball") == "medicine_ball"
    assert canonical_equipment_id("  ") is None


def test_install_builtin_equipment_is_idempotent() -> None:
    repository = InMemoryEquipmentRepository()

    assert install_builtin_equipment(repository) == len(BUILTIN_EQUIPMENT)
    assert install_builtin_equipment(repository) == 0
    assert repository.get("pullup_bar") is not None


def test_resolver_matches_persisted_names_and_aliases() -> None:
    repository = InMemoryEquipmentRepository(
        [EquipmentRecord(id="trap_bar", name="Trap Bar", aliases=["hex bar"])]
    )
    resolver = EquipmentResolver(repository)

    assert resolver.resolve(["Hex Bar", "trap_bar", "Trap Bar"]) == ["trap_bar"]
    assert resolver.created == []


def test_resolver_creates_unknown_equipment_once() -> None:
    repository = InMemoryEquipmentRepository()
    resolver = EquipmentResolver(repository)

    assert resolver.resolve(["medicine_ball", "Medicine Ball", "kettlebells"]) == [
        "medicine_ball",
        "kettlebell",
    ]
    assert [record.id for record in resolver.created] == ["medicine_ball", "kettlebell"]
    medicine_ball = repository.get("medicine_ball")
    assert medicine_ball is not None
    assert medicine_ball.name == "Medicine Ball"
    assert medicine_ball.category == EquipmentCategory.OTHER
    assert repository.get("kettlebell").category == EquipmentCategory.FREE_WEIGHTS
