"""Pipeline stages and progress notifications."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime  # noqa: TC003
from enum import StrEnum
from typing import Final

from .errors import InvalidStageTransition


class PipelineStage(StrEnum):
    IDLE = "idle"
    FETCHING = "fetching"
    NORMALIZING = "normalizing"
    VALIDATING = "validating"
    HASHING = "hashing"
    IMPORTING = "importing"
    DONE = "done"


_TRANSITIONS: Final[dict[PipelineStage, frozenset[PipelineStage]]] = {
    PipelineStage.IDLE: frozenset({PipelineStage.FETCHING, PipelineStage.DONE}),
    PipelineStage.FETCHING: frozenset(
        {PipelineStage.VALIDATING, PipelineStage.NORMALIZING, PipelineStage.DONE}
    ),
    PipelineStage.NORMALIZING: frozenset(
        {PipelineStage.VALIDATING, PipelineStage.HASHING, PipelineStage.DONE}
    ),
    PipelineStage.VALIDATING: frozenset({PipelineStage.HASHING, PipelineStage.DONE}),
    PipelineStage.HASHING: frozenset({PipelineStage.IMPORTING, PipelineStage.DONE}),
    PipelineStage.IMPORTING: frozenset({PipelineStage.DONE}),
    PipelineStage.DONE: frozenset(),
}


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    stage: PipelineStage
    started_at: datetime
    batch: int | None = None
    total_batches: int | None = None


type ProgressCallback = Callable[[ProgressEvent], None]


class StageTracker:
    """Explicit stage machine that forwards every transition to an optional callback."""

    def __init__(
        self,
        *,
        clock: Callable[[], datetime],
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._clock = clock
        self._on_progress = on_progress
        self.stage = PipelineStage.IDLE
        self.started_at = clock()
        self.history: list[PipelineStage] = [PipelineStage.IDLE]

    def advance(self, stage: PipelineStage) -> None:
        if stage not in _TRANSITIONS[self.stage]:
            raise InvalidStageTransition(f"Cannot move from {self.stage} to {stage}")
        self.stage = stage
        self.history.append(stage)
        self._emit(ProgressEvent(stage=stage, started_at=self.started_at))

    def batch(self, index: int, total: int) -> None:
        if self.stage is not PipelineStage.IMPORTING:
            raise InvalidStageTransition(f"Batch progress reported during {self.stage}")
        self._emit(
            ProgressEvent(
                stage=self.stage,
                started_at=self.started_at,
                batch=index,
                total_batches=total,
            )
        )

    def finish(self) -> None:
        if self.stage is not PipelineStage.DONE:
            self.advance(PipelineStage.DONE)

    def _emit(self, event: ProgressEvent) -> None:
        if self._on_progress is not None:
            self._on_progress(event)
