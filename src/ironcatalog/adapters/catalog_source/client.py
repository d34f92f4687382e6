"""HTTP client for remote catalog documents."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from json import JSONDecodeError
from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx
from pydantic import ValidationError

from ironcatalog.adapters.http_resilience import ResilientClient

from .schema import ExerciseDocument

if TYPE_CHECKING:
    from collections.abc import Callable

    from ironcatalog.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

# Wrapper keys some mirrors use instead of a bare top-level array.
WRAPPER_KEYS: Final[tuple[str, ...]] = ("exercises", "data", "items")


class CatalogDocumentError(RuntimeError):
    """Raised when a remote catalog document cannot be used."""


@dataclass(slots=True)
class CatalogDocument:
    url: str
    records: list[object]
    warnings: list[str] = field(default_factory=list[str])


def unwrap_payload(payload: object, warnings: list[str]) -> list[object]:
    """Return the record array of ``payload``, accepting a single wrapper object."""

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in WRAPPER_KEYS:
            nested = payload.get(key)
            if isinstance(nested, list):
                warnings.append(f"payload is an object; using its {key!r} array")
                return nested
    raise CatalogDocumentError(
        f"Catalog payload must be an array, got {type(payload).__name__}"
    )


def inspect_records(records: list[object], warnings: list[str]) -> None:
    """Check records against the upstream document shape; problems become warnings."""

    malformed = 0
    for record in records:
        if not isinstance(record, dict):
            malformed += 1
            continue
        try:
            ExerciseDocument.model_validate(record)
        except ValidationError:
            malformed += 1
    if malformed:
        warnings.append(f"{malformed} records do not match the expected document shape")


class CatalogDocumentClient:
    """Fetches catalog JSON documents through a resilient HTTP client."""

    def __init__(
        self,
        *,
        resilience: ResilienceConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._resilience = resilience
        self._client_factory = client_factory or ResilientClient

    def fetch_document(self, url: str) -> CatalogDocument:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self._fetch_document_async(url))
        raise CatalogDocumentError(
            f"Cannot fetch {url} synchronously from inside a running event loop"
        )

    async def _fetch_document_async(self, url: str) -> CatalogDocument:
        async with self._client_factory(self._resilience) as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                raise CatalogDocumentError(f"Request to {url} failed: {exc}") from exc
            return self._parse(url, response)

    @staticmethod
    def _parse(url: str, response: httpx.Response) -> CatalogDocument:
        warnings: list[str] = []
        content_type = response.headers.get("content-type", "")
        if "json" not in content_type.lower():
            warnings.append(f"unexpected content type {content_type or 'missing'!r}")
        try:
            payload = response.json()
        except (JSONDecodeError, UnicodeDecodeError) as exc:
            raise CatalogDocumentError(f"Response from {url} is not valid JSON: {exc}") from exc

        records = unwrap_payload(payload, warnings)
        inspect_records(records, warnings)
        log.debug("Fetched %s records from %s", len(records), url)
        return CatalogDocument(url=url, records=records, warnings=warnings)
