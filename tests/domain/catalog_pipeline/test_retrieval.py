from __future__ import annotations

import pytest

from ironcatalog.domain.catalog_pipeline.errors import SourceUnavailableError
from ironcatalog.domain.catalog_pipeline.retrieval import retrieve_with_fallback
from ironcatalog.domain.ports.fetching import SourcePayload  # noqa: TC001
from tests.helpers.catalog import FakeSource, make_raw_catalog


def test_first_usable_source_wins() -> None:
    primary = FakeSource("primary", make_raw_catalog(2))
    fallback = FakeSource("fallback", make_raw_catalog(3))

    payload = retrieve_with_fallback([primary, fallback])

    assert payload.source_name == "primary"
    assert len(payload.records) == 2
    assert payload.warnings == []
    assert fallback.calls == 0


def test_failed_and_empty_sources_fall_through_with_warnings() -> None:
    broken = FakeSource("primary", error="HTTP 503")
    empty = FakeSource("mirror")
    embedded = FakeSource("embedded", make_raw_catalog(1), warnings=["unwrapped 'exercises'"])

    payload = retrieve_with_fallback([broken, empty, embedded])

    assert payload.source_name == "embedded"
    assert payload.warnings == [
        "fell back past primary: HTTP 503",
        "fell back past mirror: empty payload",
        "unwrapped 'exercises'",
    ]


def test_all_sources_failing_raises_with_attempts() -> None:
    with pytest.raises(SourceUnavailableError) as exc_info:
        retrieve_with_fallback([FakeSource("primary", error="timeout"), FakeSource("mirror")])

    assert exc_info.value.attempts == ("primary: timeout", "mirror: empty payload")


def test_no_sources_configured() -> None:
    with pytest.raises(SourceUnavailableError, match="No catalog sources configured"):
        retrieve_with_fallback([])


class _CrashingSource:
    name = "primary"

    def fetch(self) -> SourcePayload:
        raise RuntimeError("event loop is closed")


def test_unexpected_exceptions_fall_through_to_the_next_source() -> None:
    embedded = FakeSource("embedded", make_raw_catalog(1))

    payload = retrieve_with_fallback([_CrashingSource(), embedded])

    assert payload.source_name == "embedded"
    assert payload.warnings == ["fell back past primary: RuntimeError: event loop is closed"]


def test_unexpected_exceptions_count_as_failed_attempts() -> None:
    with pytest.raises(SourceUnavailableError) as exc_info:
        retrieve_with_fallback([_CrashingSource(), FakeSource("embedded", error="missing file")])

    assert exc_info.value.attempts == (
        "primary: RuntimeError: event loop is closed",
        "embedded: missing file",
    )
