"""Ports for persisting catalog aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ironcatalog.domain.model import EquipmentRecord, ExerciseRecord

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class ExerciseRepository(Repository[ExerciseRecord], Protocol):
    """Persistence contract for the exercise catalog."""

    def count(self) -> int: ...

    def get_by_stable_id(self, stable_id: str) -> ExerciseRecord | None: ...

    def list_by_stable_ids(self, stable_ids: Iterable[str]) -> dict[str, ExerciseRecord]: ...

    def list_all(self) -> Sequence[ExerciseRecord]: ...

    def add_all(self, entities: Iterable[ExerciseRecord]) -> None: ...

    def upsert_all(self, entities: Iterable[ExerciseRecord]) -> None: ...


@runtime_checkable
class EquipmentRepository(Repository[EquipmentRecord], Protocol):
    """Persistence contract for the equipment catalog."""

    def get(self, equipment_id: str) -> EquipmentRecord | None: ...

    def list_all(self) -> Sequence[EquipmentRecord]: ...

    def count(self) -> int: ...


@runtime_checkable
class MetaRepository(Protocol):
    """JSON key/value storage for pipeline bookkeeping."""

    def get(self, key: str) -> object | None: ...

    def put(self, key: str, value: object) -> None: ...
