"""Key/value metadata rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003

from .exercise import utcnow


@dataclass(eq=False, kw_only=True)
class MetaEntry:
    key: str
    value: object = None
    updated_at: datetime = field(default_factory=utcnow)
