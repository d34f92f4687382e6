from __future__ import annotations

import pytest

from ironcatalog.domain.catalog_pipeline.errors import InvalidStageTransition
from ironcatalog.domain.catalog_pipeline.progress import (
    PipelineStage,
    ProgressEvent,
    StageTracker,
)
from tests.helpers.catalog import FIXED_NOW, fixed_clock


def test_tracker_emits_every_transition_and_batch() -> None:
    events: list[ProgressEvent] = []
    tracker = StageTracker(clock=fixed_clock, on_progress=events.append)

    tracker.advance(PipelineStage.FETCHING)
    tracker.advance(PipelineStage.VALIDATING)
    tracker.advance(PipelineStage.HASHING)
    tracker.advance(PipelineStage.IMPORTING)
    tracker.batch(1, 2)
    tracker.batch(2, 2)
    tracker.finish()

    assert [event.stage for event in events] == [
        PipelineStage.FETCHING,
        PipelineStage.VALIDATING,
        PipelineStage.HASHING,
        PipelineStage.IMPORTING,
        PipelineStage.IMPORTING,
        PipelineStage.IMPORTING,
        PipelineStage.DONE,
    ]
    assert [(event.batch, event.total_batches) for event in events[4:6]] == [(1, 2), (2, 2)]
    assert all(event.started_at == FIXED_NOW for event in events)
    assert tracker.history[0] is PipelineStage.IDLE


def test_any_stage_may_finish_early() -> None:
    tracker = StageTracker(clock=fixed_clock)
    tracker.advance(PipelineStage.FETCHING)

    tracker.finish()
    tracker.finish()

    assert tracker.history == [PipelineStage.IDLE, PipelineStage.FETCHING, PipelineStage.DONE]


def test_illegal_transitions_raise() -> None:
    tracker = StageTracker(clock=fixed_clock)

    with pytest.raises(InvalidStageTransition):
        tracker.advance(PipelineStage.IMPORTING)

    tracker.advance(PipelineStage.FETCHING)
    with pytest.raises(InvalidStageTransition):
        tracker.batch(1, 1)
