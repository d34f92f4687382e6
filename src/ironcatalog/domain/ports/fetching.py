"""Ports for retrieving raw catalog payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

type RawExercise = dict[str, object]


@dataclass(slots=True)
class SourcePayload:
    """Raw records produced by one catalog source."""

    records: list[RawExercise]
    source_name: str
    warnings: list[str] = field(default_factory=list[str])


@runtime_checkable
class CatalogSource(Protocol):
    """A single catalog candidate. Raises ``SourceUnavailableError`` when unusable."""

    @property
    def name(self) -> str: ...

    def fetch(self) -> SourcePayload: ...


__all__ = ["CatalogSource", "RawExercise", "SourcePayload"]
