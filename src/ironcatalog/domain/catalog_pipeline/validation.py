"""Structural validation and the minimum-catalog-size gate."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Annotated, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .normalization import normalize_exercise

if TYPE_CHECKING:
    from ironcatalog.domain.model import ExerciseRecord

log = getLogger(__name__)

DEFAULT_MIN_COUNT: Final[int] = 300
DEFAULT_SAMPLE_LIMIT: Final[int] = 10

NonEmptyStr = Annotated[str, Field(min_length=1)]


class ExerciseSchema(BaseModel):
    """Shape every normalized record has to satisfy before it may be persisted."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: NonEmptyStr
    slug: NonEmptyStr
    primary_muscles: list[NonEmptyStr] = Field(min_length=1)
    equipment: list[NonEmptyStr] = Field(min_length=1)
    instructions: list[NonEmptyStr] = Field(min_length=1)
    secondary_muscles: list[str] = Field(default_factory=list[str])
    aliases: list[str] = Field(default_factory=list[str])
    cautions: list[str] = Field(default_factory=list[str])
    common_mistakes: list[str] = Field(default_factory=list[str])
    category: str | None = None
    pattern: str | None = None
    status: str | None = None
    youtube_search_query: str | None = None
    youtube_video_id: str | None = None
    video_url: str | None = None
    source: str | None = None
    source_key: str | None = None
    external_id: str | None = None


_RECOMMENDED_FIELDS: Final = ("secondary_muscles", "category", "pattern", "cautions")


@dataclass(slots=True, kw_only=True)
class RecordIssue:
    index: int
    name: str | None
    reasons: list[str] = field(default_factory=list[str])


@dataclass(slots=True, kw_only=True)
class ValidationReport:
    total: int = 0
    valid_count: int = 0
    invalid_count: int = 0
    normalized_count: int = 0
    min_count: int = DEFAULT_MIN_COUNT
    invalid_samples: list[RecordIssue] = field(default_factory=list[RecordIssue])
    warning_count: int = 0
    warning_samples: list[RecordIssue] = field(default_factory=list[RecordIssue])

    @property
    def meets_minimum(self) -> bool:
        return self.total >= self.min_count

    def summary(self) -> str:
        return (
            f"total={self.total} valid={self.valid_count} invalid={self.invalid_count} "
            f"min={self.min_count} warnings={self.warning_count}"
        )


@dataclass(slots=True, kw_only=True)
class ValidationOutcome:
    ok: bool
    normalized: list[ExerciseRecord]
    report: ValidationReport


def _schema_input(record: ExerciseRecord) -> dict[str, object]:
    return {name: getattr(record, name) for name in ExerciseSchema.model_fields}


def _reasons(error: ValidationError) -> list[str]:
    reasons: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue["loc"])
        reasons.append(f"{location}: {issue['msg']}" if location else issue["msg"])
    return reasons


def validate_records(
    records: list[ExerciseRecord],
    *,
    min_count: int = DEFAULT_MIN_COUNT,
    sample_limit: int = DEFAULT_SAMPLE_LIMIT,
) -> ValidationOutcome:
    """Check already-normalized records against the schema and the size gate."""

    report = ValidationReport(
        total=len(records),
        normalized_count=len(records),
        min_count=min_count,
    )
    for index, record in enumerate(records):
        try:
            ExerciseSchema.model_validate(_schema_input(record))
        except ValidationError as exc:
            report.invalid_count += 1
            if len(report.invalid_samples) < sample_limit:
                report.invalid_samples.append(
                    RecordIssue(index=index, name=record.name or None, reasons=_reasons(exc))
                )
            continue
        report.valid_count += 1

        missing = [name for name in _RECOMMENDED_FIELDS if not getattr(record, name)]
        if missing:
            report.warning_count += 1
            if len(report.warning_samples) < sample_limit:
                report.warning_samples.append(
                    RecordIssue(
                        index=index,
                        name=record.name,
                        reasons=[f"missing {name}" for name in missing],
                    )
                )

    ok = report.meets_minimum and report.invalid_count == 0
    if not ok:
        log.warning("Catalog validation failed: %s", report.summary())
    return ValidationOutcome(ok=ok, normalized=records, report=report)


def validate_catalog(
    payload: object,
    *,
    min_count: int = DEFAULT_MIN_COUNT,
    sample_limit: int = DEFAULT_SAMPLE_LIMIT,
    now: datetime | None = None,
    origin: str | None = None,
) -> ValidationOutcome:
    """Normalize and validate a raw payload. Never raises on malformed data."""

    if not isinstance(payload, list):
        report = ValidationReport(
            min_count=min_count,
            invalid_samples=[
                RecordIssue(index=-1, name=None, reasons=["Catalog payload must be an array."])
            ],
        )
        log.warning("Catalog payload is not an array: %s", type(payload).__name__)
        return ValidationOutcome(ok=False, normalized=[], report=report)

    timestamp = now or datetime.now(UTC)
    normalized: list[ExerciseRecord] = []
    non_objects: list[int] = []
    for index, raw in enumerate(payload):
        if not isinstance(raw, dict):
            non_objects.append(index)
            raw = {}  # noqa: PLW2901
        if origin is None:
            normalized.append(normalize_exercise(raw, now=timestamp))
        else:
            normalized.append(normalize_exercise(raw, now=timestamp, origin=origin))

    outcome = validate_records(normalized, min_count=min_count, sample_limit=sample_limit)
    for sample in outcome.report.invalid_samples:
        if sample.index in non_objects:
            sample.reasons.insert(0, "record is not an object")
    return outcome
