from __future__ import annotations

from ironcatalog.domain.catalog_pipeline.normalization import normalize_catalog
from ironcatalog.domain.catalog_pipeline.validation import validate_catalog, validate_records
from tests.helpers.catalog import FIXED_NOW, make_raw_catalog, make_raw_exercise


def test_valid_catalog_at_minimum_size_passes() -> None:
    outcome = validate_catalog(make_raw_catalog(300), min_count=300, now=FIXED_NOW)

    assert outcome.ok
    assert outcome.report.total == 300
    assert outcome.report.valid_count == 300
    assert outcome.report.invalid_count == 0
    assert len(outcome.normalized) == 300


def test_short_catalog_fails_even_when_every_record_is_valid() -> None:
    outcome = validate_catalog(make_raw_catalog(299), min_count=300, now=FIXED_NOW)

    assert not outcome.ok
    assert outcome.report.valid_count == 299
    assert outcome.report.invalid_count == 0
    assert not outcome.report.meets_minimum


def test_invalid_records_are_sampled_with_reasons() -> None:
    payload = make_raw_catalog(5)
    payload.append(make_raw_exercise(5, primaryMuscles=[], instructions=[]))
    payload.extend({"name": f"Bare {index}"} for index in range(12))

    outcome = validate_catalog(payload, min_count=1, sample_limit=3, now=FIXED_NOW)

    assert not outcome.ok
    assert outcome.report.invalid_count == 13
    assert len(outcome.report.invalid_samples) == 3
    first = outcome.report.invalid_samples[0]
    assert first.index == 5
    assert any(reason.startswith("primary_muscles") for reason in first.reasons)
    assert any(reason.startswith("instructions") for reason in first.reasons)


def test_records_without_equipment_fail_the_schema() -> None:
    payload = make_raw_catalog(300)
    for raw in payload:
        del raw["equipment"]

    outcome = validate_catalog(payload, min_count=300, now=FIXED_NOW)

    assert not outcome.ok
    assert outcome.report.valid_count == 0
    assert outcome.report.invalid_count == 300
    assert all(record.equipment == [] for record in outcome.normalized)
    assert any(
        reason.startswith("equipment") for reason in outcome.report.invalid_samples[0].reasons
    )


def test_non_array_payload_reports_single_sample() -> None:
    outcome = validate_catalog({"exercises": []}, min_count=0, now=FIXED_NOW)

    assert not outcome.ok
    assert outcome.normalized == []
    [sample] = outcome.report.invalid_samples
    assert sample.index == -1
    assert sample.reasons == ["Catalog payload must be an array."]


def test_non_object_items_are_flagged() -> None:
    payload: list[object] = [*make_raw_catalog(2), "not a record"]

    outcome = validate_catalog(payload, min_count=0, now=FIXED_NOW)

    assert not outcome.ok
    [sample] = outcome.report.invalid_samples
    assert sample.index == 2
    assert sample.reasons[0] == "record is not an object"


def test_missing_recommended_fields_only_warn() -> None:
    raw = make_raw_exercise(0, category=None, gotchas=None)
    records = normalize_catalog([raw], now=FIXED_NOW)

    outcome = validate_records(records, min_count=1)

    assert outcome.ok
    assert outcome.report.warning_count == 1
    assert "missing category" in outcome.report.warning_samples[0].reasons
    assert "missing cautions" in outcome.report.warning_samples[0].reasons
