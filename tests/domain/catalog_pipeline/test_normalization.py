from __future__ import annotations

from ironcatalog.domain.catalog_pipeline.normalization import (
    is_placeholder_only,
    normalize_catalog,
    normalize_exercise,
    slugify,
)
from ironcatalog.domain.model import ExerciseSource
from tests.helpers.catalog import FIXED_NOW


def test_normalize_exercise_defaults_every_field() -> None:
    record = normalize_exercise({"name": "  Back   Squat "}, now=FIXED_NOW)

    assert record.name == "Back Squat"
    assert record.slug == "back-squat"
    assert record.primary_muscles == []
    assert record.instructions == []
    assert record.aliases == []
    assert record.stable_id == ""
    assert record.seed_version is None
    assert record.created_at == FIXED_NOW
    assert record.youtube_search_query == "Back Squat exercise form cues"


def test_normalize_exercise_reads_alternate_field_names() -> None:
    record = normalize_exercise(
        {
            "exercise_name": "Romanian Deadlift",
            "_id": "rdl-1",
            "muscle_group": "Hamstrings",
            "secondary": ["Glutes", "glutes", "Lower Back"],
            "requiredEquipment": "Barbell",
            "steps": "Hinge at the hips.\nStand tall.",
            "mechanic": "Hinge",
            "bodyPart": "Lower",
        },
        now=FIXED_NOW,
    )

    assert record.name == "Romanian Deadlift"
    assert record.external_id == "rdl-1"
    assert record.source_key == "rdl-1"
    assert record.primary_muscles == ["hamstrings"]
    assert record.secondary_muscles == ["glutes", "lower back"]
    assert record.equipment == ["barbell"]
    assert record.instructions == ["Hinge at the hips.", "Stand tall."]
    assert record.pattern == "hinge"
    assert record.category == "lower"


def test_normalize_exercise_strips_placeholder_text() -> None:
    record = normalize_exercise(
        {
            "name": "Plank",
            "instructions": ["No instructions available.", "Hold a straight line."],
            "gotchas": ["N/A"],
        },
        now=FIXED_NOW,
    )

    assert record.instructions == ["Hold a straight line."]
    assert record.cautions == []
    assert record.common_mistakes == []


def test_normalize_exercise_maps_equipment_aliases_without_guessing() -> None:
    aliased = normalize_exercise(
        {"name": "Swing", "equipment": ["Kettlebells", "body only"]},
        now=FIXED_NOW,
    )
    missing = normalize_exercise({"name": "Dumbbell Bench Press"}, now=FIXED_NOW)

    assert aliased.equipment == ["kettlebell", "bodyweight"]
    assert missing.equipment == []
    assert missing.optional_equipment == []


def test_normalize_exercise_never_trusts_user_source_from_payload() -> None:
    record = normalize_exercise({"name": "Curl", "source": "user"}, now=FIXED_NOW)

    assert record.source == ExerciseSource.FREE_EXERCISE_DB
    assert not record.is_user_owned


def test_normalize_catalog_applies_origin() -> None:
    records = normalize_catalog([{"name": "A"}, {"name": "B"}], now=FIXED_NOW, origin="mirror")

    assert [record.source for record in records] == ["mirror", "mirror"]


def test_slugify_and_placeholder_detection() -> None:
    assert slugify("Push-Up (Wide Grip)") == "push-up-wide-grip"
    assert is_placeholder_only(["TBD", "Coming soon"]) is False
    assert is_placeholder_only(["TBD", "Instructions coming soon."]) is True
    assert is_placeholder_only([]) is False
