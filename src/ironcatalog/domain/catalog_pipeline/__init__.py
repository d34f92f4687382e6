"""Exercise catalog reconciliation pipeline.

Raw upstream payloads flow through retrieval, normalization, validation, content
hashing and deduplication before the orchestrator merges them into the persisted
catalog inside a single unit of work. Relationship linking runs afterwards as a
best-effort step. Everything here is adapter-free; storage and HTTP arrive through
the ports in ``ironcatalog.domain.ports``.
"""

from __future__ import annotations

from .equipment import (
    BUILTIN_EQUIPMENT,
    EquipmentResolver,
    canonical_equipment_id,
    infer_equipment,
    install_builtin_equipment,
)
from .errors import (
    CatalogPipelineError,
    FailureKind,
    InvalidStageTransition,
    LinkError,
    PersistenceFailedError,
    SourceUnavailableError,
    ValidationFailedError,
)
from .identity import (
    assign_stable_ids,
    completeness_score,
    compute_corpus_hash,
    compute_stable_id,
    deduplicate,
)
from .linker import (
    LinkerStats,
    LinkSet,
    apply_exercise_links,
    build_exercise_links,
    score_difficulty,
    similarity_score,
)
from .merge import FieldPolicy, MergeOutcome, apply_merge, merge_exercise
from .normalization import normalize_catalog, normalize_exercise
from .orchestrator import CatalogImporter, ImportSettings, SeedDiagnostics
from .progress import PipelineStage, ProgressCallback, ProgressEvent, StageTracker
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
from .state import SeedState, load_state, save_state
from .validation import ValidationOutcome, ValidationReport, validate_catalog, validate_records

__all__ = [
    "BUILTIN_EQUIPMENT",
    "CatalogCounts",
    "CatalogImporter",
    "CatalogPipelineError",
    "EquipmentResolver",
    "FailureKind",
    "FieldPolicy",
    "ImportResult",
    "ImportSettings",
    "InvalidStageTransition",
    "LinkError",
    "LinkResult",
    "LinkSet",
    "LinkerStats",
    "MergeOutcome",
    "PersistenceFailedError",
    "PipelineStage",
    "ProgressCallback",
    "ProgressEvent",
    "RepairResult",
    "RepairStats",
    "ResultStatus",
    "RunStats",
    "SeedDiagnostics",
    "SeedResult",
    "SeedState",
    "SourceUnavailableError",
    "StageTracker",
    "ValidationFailedError",
    "ValidationOutcome",
    "ValidationReport",
    "apply_exercise_links",
    "apply_merge",
    "assign_stable_ids",
    "build_exercise_links",
    "canonical_equipment_id",
    "completeness_score",
    "compute_corpus_hash",
    "compute_stable_id",
    "deduplicate",
    "infer_equipment",
    "install_builtin_equipment",
    "load_state",
    "merge_exercise",
    "normalize_catalog",
    "normalize_exercise",
    "retrieve_with_fallback",
    "save_state",
    "score_difficulty",
    "similarity_score",
    "validate_catalog",
    "validate_records",
]
