from __future__ import annotations

import json
from pathlib import Path  # noqa: TC003

import pytest

from ironcatalog.adapters.catalog_source import (
    CatalogDocument,
    CatalogDocumentError,
    EmbeddedCatalogSource,
    HttpCatalogSource,
    build_default_sources,
    load_starter_records,
)
from ironcatalog.config import CatalogSourceConfig
from ironcatalog.config.catalog import DEFAULT_STARTER_CATALOG
from ironcatalog.domain.catalog_pipeline import SourceUnavailableError, validate_catalog
from tests.helpers.catalog import FIXED_NOW, make_raw_catalog


class _StubDocumentClient:
    def __init__(self, document: CatalogDocument | None = None, error: str | None = None) -> None:
        self.document = document
        self.error = error
        self.urls: list[str] = []

    def fetch_document(self, url: str) -> CatalogDocument:
        self.urls.append(url)
        if self.error is not None:
            raise CatalogDocumentError(self.error)
        assert self.document is not None
        return self.document


def test_http_source_wraps_document() -> None:
    records = make_raw_catalog(2)
    client = _StubDocumentClient(
        CatalogDocument(url="https://a.test", records=records, warnings=["note"])
    )
    source = HttpCatalogSource(name="primary", url="https://a.test", client=client)  # type: ignore[arg-type]

    payload = source.fetch()

    assert client.urls == ["https://a.test"]
    assert payload.source_name == "primary"
    assert payload.records == records
    assert payload.warnings == ["note"]


def test_http_source_reports_unavailability() -> None:
    client = _StubDocumentClient(error="Request to https://a.test failed: 503")
    source = HttpCatalogSource(name="primary", url="https://a.test", client=client)  # type: ignore[arg-type]

    with pytest.raises(SourceUnavailableError, match="503"):
        source.fetch()


def test_embedded_source_reads_local_file(tmp_path: Path) -> None:
    path = tmp_path / "exercises.json"
    path.write_text(json.dumps({"data": make_raw_catalog(3)}), encoding="utf-8")

    payload = EmbeddedCatalogSource(path=path).fetch()

    assert payload.source_name == "embedded"
    assert len(payload.records) == 3
    assert payload.warnings == ["payload is an object; using its 'data' array"]


@pytest.mark.parametrize(
    ("content", "message"),
    [
        (None, "does not exist"),
        ("{not json", "unreadable"),
        ('{"total": 3}', "must be an array"),
    ],
)
def test_embedded_source_unusable_file(tmp_path: Path, content: str | None, message: str) -> None:
    path = tmp_path / "exercises.json"
    if content is not None:
        path.write_text(content, encoding="utf-8")

    with pytest.raises(SourceUnavailableError, match=message):
        EmbeddedCatalogSource(path=path).fetch()


def test_starter_catalog_is_bundled_and_valid() -> None:
    records = load_starter_records(DEFAULT_STARTER_CATALOG)

    outcome = validate_catalog(records, min_count=10, now=FIXED_NOW, origin="starter")

    assert outcome.ok, outcome.report.invalid_samples
    assert all(record.source == "starter" for record in outcome.normalized)


def test_missing_starter_catalog_yields_no_records(tmp_path: Path) -> None:
    assert load_starter_records(tmp_path / "missing.json") == []


def test_default_sources_are_ordered(tmp_path: Path) -> None:
    config = CatalogSourceConfig(
        primary_url="https://primary.test/exercises.json",
        fallback_url="https://mirror.test/exercises.json",
        embedded_path=tmp_path / "exercises.json",
    )

    sources = build_default_sources(config, client=_StubDocumentClient())  # type: ignore[arg-type]

    assert [source.name for source in sources] == ["primary", "fallback", "embedded"]


def test_default_sources_without_mirror_or_file() -> None:
    config = CatalogSourceConfig(fallback_url=None, embedded_path=None)

    sources = build_default_sources(config, client=_StubDocumentClient())  # type: ignore[arg-type]

    assert [source.name for source in sources] == ["primary"]
