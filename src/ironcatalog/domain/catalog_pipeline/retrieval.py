"""Ordered catalog sources evaluated by a single fallback combinator."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .errors import SourceUnavailableError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ironcatalog.domain.ports.fetching import CatalogSource, SourcePayload

log = getLogger(__name__)


def retrieve_with_fallback(sources: Sequence[CatalogSource]) -> SourcePayload:
    """Return the first payload produced by ``sources`` in priority order.

    Per-candidate retries happen inside each source (the HTTP transport retries with
    backoff); this function only falls through to the next candidate. Any exception a
    candidate raises counts as a failed attempt.
    """

    attempts: list[str] = []
    for source in sources:
        try:
            payload = source.fetch()
        except SourceUnavailableError as exc:
            log.warning("Catalog source %s unavailable: %s", source.name, exc)
            attempts.append(f"{source.name}: {exc}")
            continue
        except Exception as exc:
            log.exception("Catalog source %s raised unexpectedly", source.name)
            attempts.append(f"{source.name}: {type(exc).__name__}: {exc}")
            continue
        if not payload.records:
            log.warning("Catalog source %s returned no records", source.name)
            attempts.append(f"{source.name}: empty payload")
            continue
        for warning in payload.warnings:
            log.warning("Catalog source %s: %s", source.name, warning)
        if attempts:
            skipped = [f"fell back past {attempt}" for attempt in attempts]
            payload.warnings = [*skipped, *payload.warnings]
        log.info("Retrieved %s raw records from %s", len(payload.records), source.name)
        return payload

    if not sources:
        raise SourceUnavailableError("No catalog sources configured")
    raise SourceUnavailableError(
        "All catalog sources failed: " + "; ".join(attempts),
        attempts=attempts,
    )
