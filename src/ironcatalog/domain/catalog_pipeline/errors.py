"""Failure taxonomy for catalog pipeline operations."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .validation import ValidationReport


class FailureKind(StrEnum):
    SOURCE_UNAVAILABLE = "source_unavailable"
    VALIDATION_FAILED = "validation_failed"
    PERSISTENCE_FAILED = "persistence_failed"
    LINK_FAILED = "link_failed"


class CatalogPipelineError(RuntimeError):
    """Base class for expected, recoverable pipeline failures."""

    kind: FailureKind


class SourceUnavailableError(CatalogPipelineError):
    """Every payload candidate failed (network, parse, or empty)."""

    kind = FailureKind.SOURCE_UNAVAILABLE

    def __init__(self, message: str, *, attempts: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.attempts = tuple(attempts)


class ValidationFailedError(CatalogPipelineError):
    """Payload failed the structural schema or the minimum-size gate."""

    kind = FailureKind.VALIDATION_FAILED

    def __init__(self, message: str, *, report: ValidationReport) -> None:
        super().__init__(message)
        self.report = report


class PersistenceFailedError(CatalogPipelineError):
    """The import transaction was rolled back."""

    kind = FailureKind.PERSISTENCE_FAILED


class LinkError(CatalogPipelineError):
    """Best-effort relationship linking failed after a committed import."""

    kind = FailureKind.LINK_FAILED


class InvalidStageTransition(RuntimeError):  # noqa: N818
    """Internal fault: the orchestrator attempted an illegal stage transition."""
