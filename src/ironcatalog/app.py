"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from ironcatalog.adapters.catalog_source import build_default_sources, load_starter_records
from ironcatalog.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    is_started,
    startup,
)
from ironcatalog.config import get_catalog_source_config, get_seed_config
from ironcatalog.domain.catalog_pipeline import CatalogImporter, ImportSettings

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ironcatalog.config import CatalogSourceConfig, SeedConfig
    from ironcatalog.domain.catalog_pipeline import (
        ImportResult,
        LinkResult,
        ProgressEvent,
        RepairResult,
        SeedDiagnostics,
        SeedResult,
    )
    from ironcatalog.domain.ports import CatalogSource, CatalogUnitOfWork

    type UnitOfWorkFactory = Callable[[], CatalogUnitOfWork]


log = getLogger(__name__)


def log_progress(event: ProgressEvent) -> None:
    if event.batch is not None:
        log.info("Catalog %s: batch %s/%s", event.stage, event.batch, event.total_batches)
    else:
        log.info("Catalog stage: %s", event.stage)


def build_importer(
    *,
    sources: Sequence[CatalogSource] | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    seed_config: SeedConfig | None = None,
    source_config: CatalogSourceConfig | None = None,
) -> CatalogImporter:
    """Wire the catalog importer to the configured adapters."""

    if unit_of_work_factory is None and not is_started():
        startup()
    seed = seed_config or get_seed_config()
    catalog_sources = source_config or get_catalog_source_config()
    return CatalogImporter(
        sources=sources if sources is not None else build_default_sources(catalog_sources),
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyCatalogUnitOfWork,
        settings=ImportSettings(
            version=seed.version,
            origin=catalog_sources.origin,
            min_count=seed.min_count,
            batch_size=seed.batch_size,
            audit_log_limit=seed.audit_log_limit,
            sample_limit=seed.sample_limit,
        ),
        starter_loader=lambda: load_starter_records(seed.starter_path),
    )


def import_exercises(
    *,
    dry_run: bool = False,
    only_if_changed: bool = False,
    importer: CatalogImporter | None = None,
) -> ImportResult:
    """Fetch, validate and merge the upstream catalog."""

    active = importer or build_importer()
    log.info(
        "Starting catalog import: version=%s, dry_run=%s, only_if_changed=%s",
        active.settings.version,
        dry_run,
        only_if_changed,
    )
    result = active.import_exercises(
        dry_run=dry_run,
        only_if_changed=only_if_changed,
        on_progress=log_progress,
    )
    log.info(
        f"Finished catalog import: status={result.status}, inserted={result.stats.inserted}, "
        f"updated={result.stats.updated}, skipped={result.stats.skipped}, "
        f"source={result.source}"
    )
    return result


def repair_seeded_exercises(
    *,
    dry_run: bool = False,
    force: bool = False,
    importer: CatalogImporter | None = None,
) -> RepairResult:
    """Clear placeholder content and backfill gaps in already-seeded records."""

    active = importer or build_importer()
    log.info("Starting catalog repair: dry_run=%s, force=%s", dry_run, force)
    result = active.repair_seeded_exercises(
        dry_run=dry_run,
        force=force,
        on_progress=log_progress,
    )
    log.info(
        f"Finished catalog repair: status={result.status}, matched={result.stats.matched}, "
        f"updated={result.stats.updated}, cleared={result.stats.cleared_placeholders}"
    )
    return result


def recompute_exercise_links(
    *,
    dry_run: bool = False,
    force: bool = False,
    importer: CatalogImporter | None = None,
) -> LinkResult:
    active = importer or build_importer()
    result = active.recompute_exercise_links(dry_run=dry_run, force=force)
    log.info(
        f"Finished linking: status={result.status}, updated={result.stats.updated}, "
        f"skipped={result.stats.skipped}"
    )
    return result


def seed_exercises_if_needed(*, importer: CatalogImporter | None = None) -> SeedResult:
    active = importer or build_importer()
    result = active.seed_exercises_if_needed(on_progress=log_progress)
    log.info(
        f"Seed check finished: status={result.status}, bootstrapped={result.bootstrapped}"
    )
    return result


def get_seed_diagnostics(*, importer: CatalogImporter | None = None) -> SeedDiagnostics:
    return (importer or build_importer()).get_seed_diagnostics()
