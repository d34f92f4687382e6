"""Tagged results returned by the catalog operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from .errors import FailureKind  # noqa: TC001
from .linker import LinkerStats
from .validation import ValidationReport  # noqa: TC001


class ResultStatus(StrEnum):
    SUCCESS = "success"
    DRY_RUN = "dry-run"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass(slots=True)
class RunStats:
    total: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    duplicates_collapsed: int = 0
    equipment_created: int = 0


@dataclass(slots=True)
class RepairStats:
    total: int = 0
    matched: int = 0
    updated: int = 0
    skipped: int = 0
    unmatched: int = 0
    cleared_placeholders: int = 0


@dataclass(slots=True, kw_only=True)
class ImportResult:
    status: ResultStatus
    stats: RunStats = field(default_factory=RunStats)
    report: ValidationReport | None = None
    source: str | None = None
    content_hash: str | None = None
    message: str | None = None
    error_kind: FailureKind | None = None
    linker: LinkerStats | None = None
    warnings: list[str] = field(default_factory=list[str])

    @property
    def ok(self) -> bool:
        return self.status is not ResultStatus.ERROR


@dataclass(slots=True, kw_only=True)
class RepairResult:
    status: ResultStatus
    stats: RepairStats = field(default_factory=RepairStats)
    report: ValidationReport | None = None
    source: str | None = None
    message: str | None = None
    error_kind: FailureKind | None = None

    @property
    def ok(self) -> bool:
        return self.status is not ResultStatus.ERROR


@dataclass(slots=True, kw_only=True)
class LinkResult:
    status: ResultStatus
    stats: LinkerStats = field(default_factory=LinkerStats)
    message: str | None = None
    error_kind: FailureKind | None = None

    @property
    def ok(self) -> bool:
        return self.status is not ResultStatus.ERROR


@dataclass(slots=True, kw_only=True)
class SeedResult:
    status: ResultStatus
    bootstrapped: int = 0
    imported: ImportResult | None = None
    message: str | None = None


@dataclass(slots=True, kw_only=True)
class CatalogCounts:
    total: int = 0
    seeded: int = 0
    user_owned: int = 0
    missing_instructions: int = 0
    missing_equipment: int = 0
    missing_primary_muscles: int = 0
    linked: int = 0
    equipment: int = 0
