"""Versioned seed state persisted as a single meta value."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pydantic import TypeAdapter, ValidationError

from ironcatalog.domain.model import SeedStatus

from .linker import LinkerStats  # noqa: TC001
from .results import RepairStats, ResultStatus, RunStats  # noqa: TC001
from .validation import ValidationReport  # noqa: TC001

if TYPE_CHECKING:
    from ironcatalog.domain.ports.persistence import MetaRepository

log = getLogger(__name__)

SEED_STATE_KEY: Final[str] = "seed.state"
SCHEMA_VERSION: Final[int] = 1


@dataclass(slots=True, kw_only=True)
class AuditEntry:
    at: datetime
    operation: str
    status: str
    message: str | None = None
    source: str | None = None
    stats: dict[str, int] | None = None
    report: ValidationReport | None = None


@dataclass(slots=True, kw_only=True)
class RepairState:
    at: datetime
    status: ResultStatus
    version: str | None = None
    message: str | None = None
    stats: RepairStats | None = None


@dataclass(slots=True, kw_only=True)
class LinkerState:
    at: datetime
    stats: LinkerStats | None = None
    error: str | None = None


@dataclass(slots=True, kw_only=True)
class SeedState:
    schema_version: int = SCHEMA_VERSION
    version: str | None = None
    content_hash: str | None = None
    last_status: SeedStatus | None = None
    last_message: str | None = None
    last_run_at: datetime | None = None
    last_stats: RunStats | None = None
    last_validation_report: ValidationReport | None = None
    last_source: str | None = None
    last_repair: RepairState | None = None
    last_linker: LinkerState | None = None
    audit_log: list[AuditEntry] = field(default_factory=list[AuditEntry])

    def append_audit(self, entry: AuditEntry, *, limit: int) -> None:
        """Most-recent-first ring buffer."""
        self.audit_log = [entry, *self.audit_log][: max(limit, 0)]


_ADAPTER: Final = TypeAdapter(SeedState)


def dump_state(state: SeedState) -> object:
    return _ADAPTER.dump_python(state, mode="json")


def parse_state(value: object) -> SeedState:
    if value is None:
        return SeedState()
    try:
        state = _ADAPTER.validate_python(value)
    except ValidationError:
        log.warning("Discarding unreadable seed state; starting from an empty state")
        return SeedState()
    if state.schema_version != SCHEMA_VERSION:
        log.warning(
            "Seed state schema %s differs from %s; starting from an empty state",
            state.schema_version,
            SCHEMA_VERSION,
        )
        return SeedState()
    return state


def load_state(meta: MetaRepository) -> SeedState:
    return parse_state(meta.get(SEED_STATE_KEY))


def save_state(meta: MetaRepository, state: SeedState) -> None:
    meta.put(SEED_STATE_KEY, dump_state(state))
