from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from ironcatalog.app import (
    build_importer,
    get_seed_diagnostics,
    import_exercises,
    seed_exercises_if_needed,
)
from ironcatalog.config import CatalogSourceConfig, SeedConfig
from ironcatalog.domain.catalog_pipeline import ResultStatus
from ironcatalog.domain.model import SeedStatus
from tests.helpers.catalog import FakeSource, make_raw_catalog

if TYPE_CHECKING:
    from collections.abc import Callable

    from ironcatalog.adapters.sqlalchemy.unit_of_work import SqlAlchemyCatalogUnitOfWork


class MonkeyPatch(Protocol):
    def setattr(self, target: str, value: object) -> None: ...


def test_build_importer_maps_configuration(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
) -> None:
    importer = build_importer(
        sources=[FakeSource("primary")],
        unit_of_work_factory=sqlite_unit_of_work,
        seed_config=SeedConfig(version="app-v1", min_count=5, batch_size=2),
        source_config=CatalogSourceConfig(origin="mirror-db"),
    )

    assert importer.settings.version == "app-v1"
    assert importer.settings.min_count == 5
    assert importer.settings.batch_size == 2
    assert importer.settings.origin == "mirror-db"


def test_build_importer_starts_the_adapter_once(monkeypatch: MonkeyPatch) -> None:
    started: list[bool] = []
    monkeypatch.setattr("ironcatalog.app.is_started", lambda: False)
    monkeypatch.setattr("ironcatalog.app.startup", lambda: started.append(True))

    build_importer(sources=[], seed_config=SeedConfig(), source_config=CatalogSourceConfig())

    assert started == [True]


def test_import_and_diagnostics_through_app(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
) -> None:
    importer = build_importer(
        sources=[FakeSource("primary", make_raw_catalog(20))],
        unit_of_work_factory=sqlite_unit_of_work,
        seed_config=SeedConfig(version="app-v1", min_count=20),
        source_config=CatalogSourceConfig(),
    )

    result = import_exercises(importer=importer)
    diagnostics = get_seed_diagnostics(importer=importer)

    assert result.status is ResultStatus.SUCCESS
    assert result.stats.inserted == 20
    assert diagnostics.up_to_date
    assert diagnostics.counts.total == 20


def test_seed_falls_back_to_bundled_starter_catalog(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
) -> None:
    importer = build_importer(
        sources=[FakeSource("primary", error="offline")],
        unit_of_work_factory=sqlite_unit_of_work,
        seed_config=SeedConfig(version="app-v1"),
        source_config=CatalogSourceConfig(),
    )

    result = seed_exercises_if_needed(importer=importer)
    diagnostics = get_seed_diagnostics(importer=importer)

    assert result.status is ResultStatus.ERROR
    assert result.bootstrapped == 12
    assert diagnostics.state.last_status is SeedStatus.STARTER_ONLY
    assert diagnostics.counts.total == 12
    assert diagnostics.counts.equipment >= 20
