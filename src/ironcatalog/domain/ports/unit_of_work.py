"""Transaction boundary the catalog pipeline writes through."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Self

if TYPE_CHECKING:
    from types import TracebackType

    from ironcatalog.domain.ports.persistence import (
        EquipmentRepository,
        ExerciseRepository,
        MetaRepository,
    )


@dataclass(slots=True)
class CatalogRepositories:
    exercises: ExerciseRepository
    equipment: EquipmentRepository
    meta: MetaRepository


class CatalogUnitOfWork(Protocol):
    """One transaction over :class:`CatalogRepositories`.

    Nothing is persisted until :meth:`commit`; leaving the context after an exception
    discards uncommitted work.
    """

    @property
    def repositories(self) -> CatalogRepositories: ...

    def __enter__(self) -> Self: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
