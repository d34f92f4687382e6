"""Catalog source adapters: remote documents and the bundled fallback payload."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING, cast

from ironcatalog.domain.catalog_pipeline.errors import SourceUnavailableError
from ironcatalog.domain.ports.fetching import SourcePayload

from .client import CatalogDocumentClient, CatalogDocumentError, inspect_records, unwrap_payload

if TYPE_CHECKING:
    from pathlib import Path

    from ironcatalog.config import CatalogSourceConfig
    from ironcatalog.domain.ports.fetching import CatalogSource, RawExercise

log = getLogger(__name__)


class HttpCatalogSource:
    """Remote catalog document. Retries happen inside the client transport."""

    def __init__(self, *, name: str, url: str, client: CatalogDocumentClient) -> None:
        self._name = name
        self._url = url
        self._client = client

    @property
    def name(self) -> str:
        return self._name

    def fetch(self) -> SourcePayload:
        try:
            document = self._client.fetch_document(self._url)
        except CatalogDocumentError as exc:
            raise SourceUnavailableError(str(exc)) from exc
        return SourcePayload(
            records=cast("list[RawExercise]", document.records),
            source_name=self._name,
            warnings=list(document.warnings),
        )


def _read_json_array(path: Path, warnings: list[str]) -> list[object]:
    try:
        with path.open(encoding="utf-8") as handle:
            payload = json.load(handle)
    except FileNotFoundError as exc:
        raise SourceUnavailableError(f"Catalog file {path} does not exist") from exc
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SourceUnavailableError(f"Catalog file {path} is unreadable: {exc}") from exc
    try:
        return unwrap_payload(payload, warnings)
    except CatalogDocumentError as exc:
        raise SourceUnavailableError(str(exc)) from exc


class EmbeddedCatalogSource:
    """Last-resort catalog read from a local JSON file."""

    def __init__(self, *, path: Path, name: str = "embedded") -> None:
        self._path = path
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def fetch(self) -> SourcePayload:
        warnings: list[str] = []
        records = _read_json_array(self._path, warnings)
        inspect_records(records, warnings)
        return SourcePayload(
            records=cast("list[RawExercise]", records),
            source_name=self._name,
            warnings=warnings,
        )


def load_starter_records(path: Path) -> list[RawExercise]:
    """Read the bundled starter catalog; an unusable file yields no records."""

    try:
        records = _read_json_array(path, [])
    except SourceUnavailableError as exc:
        log.warning("Starter catalog unavailable: %s", exc)
        return []
    return [record for record in records if isinstance(record, dict)]


def build_default_sources(
    config: CatalogSourceConfig,
    *,
    client: CatalogDocumentClient | None = None,
) -> list[CatalogSource]:
    """Primary document, optional mirror, then the embedded file, in that order."""

    document_client = client or CatalogDocumentClient(resilience=config.resilience)
    sources: list[CatalogSource] = [
        HttpCatalogSource(name="primary", url=config.primary_url, client=document_client)
    ]
    if config.fallback_url:
        sources.append(
            HttpCatalogSource(name="fallback", url=config.fallback_url, client=document_client)
        )
    if config.embedded_path is not None:
        sources.append(EmbeddedCatalogSource(path=config.embedded_path))
    return sources
