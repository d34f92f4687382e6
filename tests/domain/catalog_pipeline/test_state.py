from __future__ import annotations

from ironcatalog.domain.catalog_pipeline.results import RunStats
from ironcatalog.domain.catalog_pipeline.state import (
    AuditEntry,
    SeedState,
    dump_state,
    parse_state,
)
from ironcatalog.domain.catalog_pipeline.validation import ValidationReport
from ironcatalog.domain.model import SeedStatus
from tests.helpers.catalog import FIXED_NOW


def _entry(operation: str) -> AuditEntry:
    return AuditEntry(at=FIXED_NOW, operation=operation, status="success")


def test_audit_log_keeps_most_recent_entries_first() -> None:
    state = SeedState()

    for index in range(5):
        state.append_audit(_entry(f"run-{index}"), limit=3)

    assert [entry.operation for entry in state.audit_log] == ["run-4", "run-3", "run-2"]


def test_state_survives_json_serialization() -> None:
    state = SeedState(
        version="2026.01",
        content_hash="abc",
        last_status=SeedStatus.SUCCESS,
        last_run_at=FIXED_NOW,
        last_stats=RunStats(total=3, inserted=3),
        last_validation_report=ValidationReport(total=3, valid_count=3, min_count=1),
    )
    state.append_audit(_entry("import"), limit=20)

    dumped = dump_state(state)
    restored = parse_state(dumped)

    assert isinstance(dumped, dict)
    assert dumped["last_status"] == "SUCCESS"
    assert restored.last_status is SeedStatus.SUCCESS
    assert restored.last_run_at == FIXED_NOW
    assert restored.last_stats == RunStats(total=3, inserted=3)
    assert restored.audit_log[0].operation == "import"


def test_missing_or_unreadable_state_starts_empty() -> None:
    assert parse_state(None) == SeedState()
    assert parse_state({"last_status": "NOT-A-STATUS"}).last_status is None
    assert parse_state({"schema_version": 99, "version": "2026.01"}).version is None
