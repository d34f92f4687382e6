from __future__ import annotations

from ironcatalog.domain.catalog_pipeline.identity import (
    assign_stable_ids,
    completeness_score,
    compute_corpus_hash,
    compute_stable_id,
    deduplicate,
)
from ironcatalog.domain.catalog_pipeline.normalization import normalize_catalog
from tests.helpers.catalog import FIXED_NOW, make_raw_catalog, make_raw_exercise, make_record


def test_stable_id_ignores_list_order_and_name_formatting() -> None:
    base = make_record(
        make_raw_exercise(
            1,
            name="Bench Press",
            equipment=["Barbell", "bench"],
            primaryMuscles=["chest", "triceps"],
        )
    )
    permuted = make_record(
        make_raw_exercise(
            1,
            name="  bench   PRESS ",
            equipment=["bench", "barbell"],
            primaryMuscles=["Triceps", "Chest"],
        )
    )

    assert base.stable_id == permuted.stable_id
    assert len(base.stable_id) == 64


def test_stable_id_changes_with_identity_fields() -> None:
    record = make_record()
    other_pattern = make_record(make_raw_exercise(0, pattern="lunge"))
    other_external = make_record(make_raw_exercise(0, id="another-id"))

    assert record.stable_id != other_pattern.stable_id
    assert record.stable_id != other_external.stable_id
    assert compute_stable_id(record) == record.stable_id


def test_deduplicate_keeps_strictly_more_complete_candidate() -> None:
    sparse = make_record(make_raw_exercise(0, gotchas=None, secondaryMuscles=None))
    rich = make_record(make_raw_exercise(0, aliases=["Alias"]))
    assert sparse.stable_id == rich.stable_id
    assert completeness_score(rich) > completeness_score(sparse)

    result = deduplicate([sparse, rich])

    assert result.records == [rich]
    assert result.collapsed == 1
    assert result.replaced == [rich.stable_id]


def test_deduplicate_keeps_first_seen_on_tie() -> None:
    first = make_record()
    second = make_record()
    other = make_record(make_raw_exercise(1))

    for _ in range(3):
        result = deduplicate([first, other, second])
        assert result.records == [first, other]
        assert result.collapsed == 1
        assert result.replaced == []


def test_corpus_hash_is_order_independent_and_content_sensitive() -> None:
    records = normalize_catalog(make_raw_catalog(5), now=FIXED_NOW)
    assign_stable_ids(records)
    reversed_records = list(reversed(records))

    edited_raw = make_raw_catalog(5)
    edited_raw[2]["instructions"] = ["A different cue."]
    edited = normalize_catalog(edited_raw, now=FIXED_NOW)
    assign_stable_ids(edited)

    assert compute_corpus_hash(records) == compute_corpus_hash(reversed_records)
    assert compute_corpus_hash(records) != compute_corpus_hash(edited)
