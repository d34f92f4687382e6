"""Catalog import orchestration: retrieve, validate, hash, merge, persist, link."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from itertools import batched
from logging import getLogger
from typing import TYPE_CHECKING, Final

from ironcatalog.domain.model import ExerciseSource, SeedStatus, utcnow

from .equipment import EquipmentResolver, install_builtin_equipment
from .errors import (
    CatalogPipelineError,
    InvalidStageTransition,
    LinkError,
    PersistenceFailedError,
    SourceUnavailableError,
    ValidationFailedError,
)
from .identity import assign_stable_ids, compute_corpus_hash, deduplicate
from .linker import LinkerStats, apply_exercise_links, build_exercise_links
from .merge import apply_merge, merge_exercise
from .normalization import normalize_catalog, normalize_name_key
from .progress import PipelineStage, ProgressCallback, StageTracker
from .results import (
    CatalogCounts,
    ImportResult,
    LinkResult,
    RepairResult,
    RepairStats,
    ResultStatus,
    RunStats,
    SeedResult,
)
from .retrieval import retrieve_with_fallback
from .state import AuditEntry, LinkerState, RepairState, SeedState, load_state, save_state
from .validation import DEFAULT_MIN_COUNT, ValidationReport, validate_catalog, validate_records

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from datetime import datetime

    from ironcatalog.domain.model import ExerciseRecord
    from ironcatalog.domain.ports.fetching import CatalogSource, RawExercise, SourcePayload
    from ironcatalog.domain.ports.unit_of_work import CatalogRepositories, CatalogUnitOfWork

    type UnitOfWorkFactory = Callable[[], CatalogUnitOfWork]
    type StarterLoader = Callable[[], list[RawExercise]]

log = getLogger(__name__)

IMPORT_OPERATION: Final[str] = "import"
REPAIR_OPERATION: Final[str] = "repair"
LINK_OPERATION: Final[str] = "link"
BOOTSTRAP_OPERATION: Final[str] = "bootstrap"


@dataclass(frozen=True, slots=True)
class ImportSettings:
    version: str = "unversioned"
    origin: str = ExerciseSource.FREE_EXERCISE_DB
    min_count: int = DEFAULT_MIN_COUNT
    batch_size: int = 100
    audit_log_limit: int = 20
    sample_limit: int = 10


@dataclass(slots=True)
class PreparedCatalog:
    payload: SourcePayload
    records: list[ExerciseRecord]
    report: ValidationReport
    duplicates_collapsed: int
    content_hash: str


@dataclass(slots=True, kw_only=True)
class SeedDiagnostics:
    state: SeedState
    counts: CatalogCounts
    configured_version: str

    @property
    def up_to_date(self) -> bool:
        return (
            self.state.version == self.configured_version
            and self.state.last_status is SeedStatus.SUCCESS
        )


class _RepairIndex:
    """Lookup of persisted records by stable id, then source key, slug and name."""

    def __init__(self, records: Iterable[ExerciseRecord]) -> None:
        self.by_stable_id: dict[str, ExerciseRecord] = {}
        self.by_source_key: dict[str, ExerciseRecord] = {}
        self.by_slug: dict[str, ExerciseRecord] = {}
        self.by_name: dict[str, ExerciseRecord] = {}
        for record in records:
            if record.stable_id:
                self.by_stable_id.setdefault(record.stable_id, record)
            for key in (record.source_key, record.external_id):
                if key:
                    self.by_source_key.setdefault(key, record)
            if record.slug:
                self.by_slug.setdefault(record.slug, record)
            if record.name:
                self.by_name.setdefault(normalize_name_key(record.name), record)

    def match(self, incoming: ExerciseRecord) -> ExerciseRecord | None:
        candidates = (
            self.by_stable_id.get(incoming.stable_id),
            self.by_source_key.get(incoming.source_key or "") if incoming.source_key else None,
            self.by_source_key.get(incoming.external_id or "") if incoming.external_id else None,
            self.by_slug.get(incoming.slug) if incoming.slug else None,
            self.by_name.get(normalize_name_key(incoming.name)) if incoming.name else None,
        )
        return next((candidate for candidate in candidates if candidate is not None), None)


class CatalogImporter:
    """Single entry point for catalog imports, repairs, relinking and seeding.

    The importer is not re-entrant: callers must not start a second mutating
    operation while one is running.
    """

    def __init__(
        self,
        *,
        sources: Sequence[CatalogSource],
        unit_of_work_factory: UnitOfWorkFactory,
        settings: ImportSettings | None = None,
        starter_loader: StarterLoader | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._sources = tuple(sources)
        self._uow_factory = unit_of_work_factory
        self._settings = settings or ImportSettings()
        self._starter_loader = starter_loader
        self._clock = clock

    @property
    def settings(self) -> ImportSettings:
        return self._settings

    # Import -------------------------------------------------------------------

    def import_exercises(
        self,
        *,
        dry_run: bool = False,
        only_if_changed: bool = False,
        on_progress: ProgressCallback | None = None,
    ) -> ImportResult:
        tracker = StageTracker(clock=self._clock, on_progress=on_progress)
        try:
            prepared = self._prepare(tracker)
        except (SourceUnavailableError, ValidationFailedError) as exc:
            tracker.finish()
            return self._import_failure(exc, dry_run=dry_run)

        stats = RunStats(
            total=len(prepared.payload.records),
            duplicates_collapsed=prepared.duplicates_collapsed,
        )

        if only_if_changed and not dry_run:
            state = self._read_state()
            if (
                state.content_hash == prepared.content_hash
                and state.last_status is SeedStatus.SUCCESS
            ):
                tracker.finish()
                self._record_skip(prepared)
                log.info("Catalog unchanged (hash %s); skipping import", prepared.content_hash)
                return ImportResult(
                    status=ResultStatus.SKIPPED,
                    stats=stats,
                    report=prepared.report,
                    source=prepared.payload.source_name,
                    content_hash=prepared.content_hash,
                    message="Catalog unchanged since last successful import",
                    warnings=list(prepared.payload.warnings),
                )

        if dry_run:
            with self._uow_factory() as uow:
                self._project(uow.repositories, prepared.records, stats)
            tracker.finish()
            log.info(
                "Dry run: would insert=%s update=%s skip=%s",
                stats.inserted,
                stats.updated,
                stats.skipped,
            )
            return ImportResult(
                status=ResultStatus.DRY_RUN,
                stats=stats,
                report=prepared.report,
                source=prepared.payload.source_name,
                content_hash=prepared.content_hash,
                warnings=list(prepared.payload.warnings),
            )

        tracker.advance(PipelineStage.IMPORTING)
        try:
            self._persist(prepared, stats, tracker)
        except InvalidStageTransition:
            raise
        except Exception as exc:
            log.exception("Catalog import transaction failed and was rolled back")
            tracker.finish()
            error = PersistenceFailedError(f"Import transaction failed: {exc}")
            return self._import_failure(error, dry_run=False, source=prepared.payload.source_name)
        tracker.finish()

        log.info(
            "Imported catalog from %s: inserted=%s updated=%s skipped=%s collapsed=%s",
            prepared.payload.source_name,
            stats.inserted,
            stats.updated,
            stats.skipped,
            stats.duplicates_collapsed,
        )
        link_result = self._link_best_effort()
        return ImportResult(
            status=ResultStatus.SUCCESS,
            stats=stats,
            report=prepared.report,
            source=prepared.payload.source_name,
            content_hash=prepared.content_hash,
            linker=link_result.stats if link_result.ok else None,
            warnings=list(prepared.payload.warnings),
        )

    def _prepare(self, tracker: StageTracker, *, repair: bool = False) -> PreparedCatalog:
        tracker.advance(PipelineStage.FETCHING)
        payload = retrieve_with_fallback(self._sources)
        now = self._clock()

        if repair:
            tracker.advance(PipelineStage.NORMALIZING)
            normalized = normalize_catalog(payload.records, now=now, origin=self._settings.origin)
            tracker.advance(PipelineStage.VALIDATING)
            outcome = validate_records(
                normalized,
                min_count=self._settings.min_count,
                sample_limit=self._settings.sample_limit,
            )
        else:
            tracker.advance(PipelineStage.VALIDATING)
            outcome = validate_catalog(
                payload.records,
                min_count=self._settings.min_count,
                sample_limit=self._settings.sample_limit,
                now=now,
                origin=self._settings.origin,
            )
        if not outcome.ok:
            raise ValidationFailedError(
                f"Catalog from {payload.source_name} failed validation: "
                f"{outcome.report.summary()}",
                report=outcome.report,
            )

        tracker.advance(PipelineStage.HASHING)
        assign_stable_ids(outcome.normalized)
        dedup = deduplicate(outcome.normalized)
        return PreparedCatalog(
            payload=payload,
            records=dedup.records,
            report=outcome.report,
            duplicates_collapsed=dedup.collapsed,
            content_hash=compute_corpus_hash(dedup.records),
        )

    def _project(
        self,
        repositories: CatalogRepositories,
        records: Sequence[ExerciseRecord],
        stats: RunStats,
    ) -> None:
        existing = repositories.exercises.list_by_stable_ids(r.stable_id for r in records)
        for incoming in records:
            current = existing.get(incoming.stable_id)
            if current is None:
                stats.inserted += 1
            elif merge_exercise(current, incoming).changed:
                stats.updated += 1
            else:
                stats.skipped += 1

    def _persist(self, prepared: PreparedCatalog, stats: RunStats, tracker: StageTracker) -> None:
        now = self._clock()
        version = self._settings.version
        batches = list(batched(prepared.records, max(self._settings.batch_size, 1)))
        with self._uow_factory() as uow:
            repositories = uow.repositories
            existing = repositories.exercises.list_by_stable_ids(
                record.stable_id for record in prepared.records
            )
            resolver = EquipmentResolver(repositories.equipment)

            for index, batch in enumerate(batches, start=1):
                inserts: list[ExerciseRecord] = []
                updates: list[ExerciseRecord] = []
                for incoming in batch:
                    current = existing.get(incoming.stable_id)
                    if current is None:
                        incoming.equipment = resolver.resolve(incoming.equipment)
                        incoming.optional_equipment = resolver.resolve(incoming.optional_equipment)
                        incoming.seed_version = version
                        inserts.append(incoming)
                        continue
                    outcome = merge_exercise(current, incoming)
                    if outcome.skipped or not outcome.changed:
                        stats.skipped += 1
                        continue
                    for name in ("equipment", "optional_equipment"):
                        if name in outcome.changes:
                            outcome.changes[name] = resolver.resolve(getattr(incoming, name))
                    outcome.changes["seed_version"] = version
                    apply_merge(current, outcome, now=now)
                    updates.append(current)

                repositories.exercises.add_all(inserts)
                repositories.exercises.upsert_all(updates)
                stats.inserted += len(inserts)
                stats.updated += len(updates)
                tracker.batch(index, len(batches))

            stats.equipment_created = len(resolver.created)
            state = load_state(repositories.meta)
            state.version = version
            state.content_hash = prepared.content_hash
            state.last_status = SeedStatus.SUCCESS
            state.last_message = (
                f"Imported {stats.inserted} new and {stats.updated} updated exercises "
                f"from {prepared.payload.source_name}"
            )
            state.last_run_at = now
            state.last_stats = stats
            state.last_validation_report = prepared.report
            state.last_source = prepared.payload.source_name
            state.append_audit(
                AuditEntry(
                    at=now,
                    operation=IMPORT_OPERATION,
                    status=SeedStatus.SUCCESS,
                    message=state.last_message,
                    source=prepared.payload.source_name,
                    stats=asdict(stats),
                ),
                limit=self._settings.audit_log_limit,
            )
            save_state(repositories.meta, state)
            uow.commit()

    def _import_failure(
        self,
        error: CatalogPipelineError,
        *,
        dry_run: bool,
        source: str | None = None,
    ) -> ImportResult:
        report = error.report if isinstance(error, ValidationFailedError) else None
        log.error("Catalog import failed (%s): %s", error.kind, error)
        if not dry_run:
            self._record_outcome(
                operation=IMPORT_OPERATION,
                status=SeedStatus.FAILURE,
                message=str(error),
                source=source,
                report=report,
            )
        return ImportResult(
            status=ResultStatus.ERROR,
            report=report,
            source=source,
            message=str(error),
            error_kind=error.kind,
        )

    def _record_skip(self, prepared: PreparedCatalog) -> None:
        now = self._clock()

        def update(state: SeedState) -> None:
            state.last_run_at = now
            state.last_message = "Catalog unchanged; import skipped"
            state.last_source = prepared.payload.source_name
            state.append_audit(
                AuditEntry(
                    at=now,
                    operation=IMPORT_OPERATION,
                    status=SeedStatus.SKIPPED,
                    message=state.last_message,
                    source=prepared.payload.source_name,
                ),
                limit=self._settings.audit_log_limit,
            )

        self._update_state(update)

    def _record_outcome(
        self,
        *,
        operation: str,
        status: SeedStatus,
        message: str,
        source: str | None = None,
        report: ValidationReport | None = None,
    ) -> None:
        now = self._clock()

        def update(state: SeedState) -> None:
            state.last_status = status
            state.last_message = message
            state.last_run_at = now
            if source is not None:
                state.last_source = source
            if report is not None:
                state.last_validation_report = report
            state.append_audit(
                AuditEntry(
                    at=now,
                    operation=operation,
                    status=status,
                    message=message,
                    source=source,
                    report=report,
                ),
                limit=self._settings.audit_log_limit,
            )

        self._update_state(update)

    def _update_state(self, update: Callable[[SeedState], None]) -> None:
        """Apply ``update`` to the stored state in its own transaction (best effort)."""

        try:
            with self._uow_factory() as uow:
                state = load_state(uow.repositories.meta)
                update(state)
                save_state(uow.repositories.meta, state)
                uow.commit()
        except Exception:
            log.exception("Could not record seed state")

    def _read_state(self) -> SeedState:
        with self._uow_factory() as uow:
            return load_state(uow.repositories.meta)

    # Repair -------------------------------------------------------------------

    def repair_seeded_exercises(
        self,
        *,
        dry_run: bool = False,
        force: bool = False,
        on_progress: ProgressCallback | None = None,
    ) -> RepairResult:
        version = self._settings.version
        last_repair = self._read_state().last_repair
        if (
            not force
            and last_repair is not None
            and last_repair.version == version
            and last_repair.status is ResultStatus.SUCCESS
        ):
            log.info("Repair already ran for catalog version %s", version)
            return RepairResult(
                status=ResultStatus.SKIPPED,
                message=f"Repair already ran for catalog version {version}",
            )

        tracker = StageTracker(clock=self._clock, on_progress=on_progress)
        try:
            prepared = self._prepare(tracker, repair=True)
        except (SourceUnavailableError, ValidationFailedError) as exc:
            tracker.finish()
            return self._repair_failure(exc, dry_run=dry_run)

        tracker.advance(PipelineStage.IMPORTING)
        stats = RepairStats(total=len(prepared.records))
        try:
            self._repair(prepared, stats, tracker, dry_run=dry_run)
        except InvalidStageTransition:
            raise
        except Exception as exc:
            log.exception("Catalog repair transaction failed and was rolled back")
            tracker.finish()
            return self._repair_failure(
                PersistenceFailedError(f"Repair transaction failed: {exc}"),
                dry_run=dry_run,
            )
        tracker.finish()

        log.info(
            "Repair %s: matched=%s updated=%s skipped=%s unmatched=%s cleared=%s",
            "dry run" if dry_run else "finished",
            stats.matched,
            stats.updated,
            stats.skipped,
            stats.unmatched,
            stats.cleared_placeholders,
        )
        return RepairResult(
            status=ResultStatus.DRY_RUN if dry_run else ResultStatus.SUCCESS,
            stats=stats,
            report=prepared.report,
            source=prepared.payload.source_name,
        )

    def _repair(
        self,
        prepared: PreparedCatalog,
        stats: RepairStats,
        tracker: StageTracker,
        *,
        dry_run: bool,
    ) -> None:
        now = self._clock()
        batches = list(batched(prepared.records, max(self._settings.batch_size, 1)))
        with self._uow_factory() as uow:
            repositories = uow.repositories
            index = _RepairIndex(repositories.exercises.list_all())
            resolver = EquipmentResolver(repositories.equipment)
            for position, batch in enumerate(batches, start=1):
                updates: list[ExerciseRecord] = []
                for incoming in batch:
                    target = index.match(incoming)
                    if target is None:
                        stats.unmatched += 1
                        continue
                    stats.matched += 1
                    outcome = merge_exercise(target, incoming, clear_placeholders=True)
                    if outcome.skipped or not outcome.changed:
                        stats.skipped += 1
                        continue
                    stats.updated += 1
                    stats.cleared_placeholders += outcome.cleared_placeholders
                    if dry_run:
                        continue
                    for name in ("equipment", "optional_equipment"):
                        if name in outcome.changes:
                            outcome.changes[name] = resolver.resolve(getattr(incoming, name))
                    apply_merge(target, outcome, now=now)
                    updates.append(target)
                if not dry_run:
                    repositories.exercises.upsert_all(updates)
                tracker.batch(position, len(batches))

            if dry_run:
                return
            state = load_state(repositories.meta)
            message = (
                f"Repaired {stats.updated} exercises "
                f"({stats.cleared_placeholders} placeholder lists cleared)"
            )
            state.last_repair = RepairState(
                at=now,
                status=ResultStatus.SUCCESS,
                version=self._settings.version,
                message=message,
                stats=stats,
            )
            state.append_audit(
                AuditEntry(
                    at=now,
                    operation=REPAIR_OPERATION,
                    status=ResultStatus.SUCCESS,
                    message=message,
                    source=prepared.payload.source_name,
                    stats=asdict(stats),
                ),
                limit=self._settings.audit_log_limit,
            )
            save_state(repositories.meta, state)
            uow.commit()

    def _repair_failure(self, error: CatalogPipelineError, *, dry_run: bool) -> RepairResult:
        report = error.report if isinstance(error, ValidationFailedError) else None
        log.error("Catalog repair failed (%s): %s", error.kind, error)
        if not dry_run:
            now = self._clock()

            def update(state: SeedState) -> None:
                state.last_repair = RepairState(
                    at=now,
                    status=ResultStatus.ERROR,
                    version=self._settings.version,
                    message=str(error),
                )
                state.append_audit(
                    AuditEntry(
                        at=now,
                        operation=REPAIR_OPERATION,
                        status=ResultStatus.ERROR,
                        message=str(error),
                        report=report,
                    ),
                    limit=self._settings.audit_log_limit,
                )

            self._update_state(update)
        return RepairResult(
            status=ResultStatus.ERROR,
            report=report,
            message=str(error),
            error_kind=error.kind,
        )

    # Links --------------------------------------------------------------------

    def recompute_exercise_links(self, *, dry_run: bool = False, force: bool = False) -> LinkResult:
        try:
            stats = self._link(dry_run=dry_run, force=force)
        except Exception as exc:
            log.exception("Exercise linking failed")
            error = LinkError(f"Linking failed: {exc}")
            if not dry_run:
                self._record_link_error(error)
            return LinkResult(status=ResultStatus.ERROR, message=str(error), error_kind=error.kind)
        return LinkResult(
            status=ResultStatus.DRY_RUN if dry_run else ResultStatus.SUCCESS,
            stats=stats,
        )

    def _link_best_effort(self) -> LinkResult:
        """Linker pass after a committed import; failures never touch the import."""

        return self.recompute_exercise_links()

    def _link(self, *, dry_run: bool, force: bool) -> LinkerStats:
        now = self._clock()
        with self._uow_factory() as uow:
            repositories = uow.repositories
            records = list(repositories.exercises.list_all())
            links = build_exercise_links(records)
            stats = apply_exercise_links(records, links, force=force, dry_run=dry_run)
            if dry_run:
                return stats
            repositories.exercises.upsert_all(records)
            state = load_state(repositories.meta)
            state.last_linker = LinkerState(at=now, stats=stats)
            save_state(repositories.meta, state)
            uow.commit()
        return stats

    def _record_link_error(self, error: LinkError) -> None:
        now = self._clock()

        def update(state: SeedState) -> None:
            state.last_linker = LinkerState(at=now, error=str(error))
            state.append_audit(
                AuditEntry(
                    at=now,
                    operation=LINK_OPERATION,
                    status=ResultStatus.ERROR,
                    message=str(error),
                ),
                limit=self._settings.audit_log_limit,
            )

        self._update_state(update)

    # Seeding ------------------------------------------------------------------

    def seed_exercises_if_needed(
        self,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> SeedResult:
        bootstrapped = self._bootstrap_if_empty()
        state = self._read_state()
        version = self._settings.version
        if (
            state.version == version
            and state.content_hash
            and state.last_status is SeedStatus.SUCCESS
        ):
            log.info("Catalog already at version %s; nothing to seed", version)
            return SeedResult(
                status=ResultStatus.SKIPPED,
                bootstrapped=bootstrapped,
                message=f"Catalog already at version {version}",
            )

        imported = self.import_exercises(on_progress=on_progress)
        if imported.status is ResultStatus.ERROR:
            if self._only_starter_content():
                self._mark_starter_only(imported.message or "Import failed")
            return SeedResult(
                status=ResultStatus.ERROR,
                bootstrapped=bootstrapped,
                imported=imported,
                message=imported.message,
            )
        return SeedResult(
            status=imported.status,
            bootstrapped=bootstrapped,
            imported=imported,
            message=f"Catalog seeded at version {version}",
        )

    def _bootstrap_if_empty(self) -> int:
        with self._uow_factory() as uow:
            repositories = uow.repositories
            if repositories.exercises.count() > 0:
                return 0

            now = self._clock()
            install_builtin_equipment(repositories.equipment)
            raw_records = self._starter_loader() if self._starter_loader else []
            records = normalize_catalog(raw_records, now=now, origin=ExerciseSource.STARTER)
            outcome = validate_records(records, min_count=0, sample_limit=len(records))
            rejected = {issue.index for issue in outcome.report.invalid_samples}
            valid = [record for index, record in enumerate(records) if index not in rejected]
            if rejected:
                log.warning("Dropped %s malformed starter records", len(rejected))
            assign_stable_ids(valid)
            starter = deduplicate(valid).records
            resolver = EquipmentResolver(repositories.equipment)
            for record in starter:
                record.source = ExerciseSource.STARTER
                record.equipment = resolver.resolve(record.equipment)
                record.optional_equipment = resolver.resolve(record.optional_equipment)
            repositories.exercises.add_all(starter)

            state = load_state(repositories.meta)
            state.last_status = SeedStatus.STARTER_ONLY
            state.last_message = f"Bootstrapped {len(starter)} starter exercises"
            state.last_run_at = now
            state.append_audit(
                AuditEntry(
                    at=now,
                    operation=BOOTSTRAP_OPERATION,
                    status=SeedStatus.STARTER_ONLY,
                    message=state.last_message,
                    source=ExerciseSource.STARTER,
                ),
                limit=self._settings.audit_log_limit,
            )
            save_state(repositories.meta, state)
            uow.commit()
        log.info("Bootstrapped %s starter exercises", len(starter))
        return len(starter)

    def _only_starter_content(self) -> bool:
        with self._uow_factory() as uow:
            return all(
                record.source == ExerciseSource.STARTER or record.is_user_owned
                for record in uow.repositories.exercises.list_all()
            )

    def _mark_starter_only(self, message: str) -> None:
        def update(state: SeedState) -> None:
            state.last_status = SeedStatus.STARTER_ONLY
            state.last_message = f"Using starter catalog only: {message}"

        self._update_state(update)

    # Diagnostics --------------------------------------------------------------

    def get_seed_diagnostics(self) -> SeedDiagnostics:
        with self._uow_factory() as uow:
            repositories = uow.repositories
            state = load_state(repositories.meta)
            records = repositories.exercises.list_all()
            counts = CatalogCounts(
                total=len(records),
                seeded=sum(1 for record in records if record.stable_id),
                user_owned=sum(1 for record in records if record.is_user_owned),
                missing_instructions=sum(1 for record in records if not record.instructions),
                missing_equipment=sum(1 for record in records if not record.equipment),
                missing_primary_muscles=sum(
                    1 for record in records if not record.primary_muscles
                ),
                linked=sum(1 for record in records if record.has_links),
                equipment=repositories.equipment.count(),
            )
        return SeedDiagnostics(
            state=state,
            counts=counts,
            configured_version=self._settings.version,
        )
