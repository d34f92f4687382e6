"""Rate-limited, retrying and caching HTTP access for catalog documents."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING, TypedDict

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from ironcatalog.config import get_storage_config

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from ironcatalog.config.http_resilience import CacheConfig, ResilienceConfig, RetryPolicy
    from ironcatalog.config.http_resilience import ShouldCacheHook

log = getLogger(__name__)

# Catalog documents are only ever read.
_SAFE_METHODS = ("GET", "HEAD")


class _ClientOptions(TypedDict, total=False):
    timeout: float
    transport: httpx.AsyncBaseTransport
    follow_redirects: bool
    headers: dict[str, str]


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        allowed_methods=_SAFE_METHODS,
        status_forcelist=sorted(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
        backoff_factor=policy.backoff_factor,
        backoff_jitter=policy.backoff_jitter,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
    )


class ResilientClient:
    """``httpx`` client wrapped in a rate limiter, a retry transport and a response cache.

    Each layer is driven by :class:`~ironcatalog.config.ResilienceConfig`; a missing
    ``ratelimit`` or ``cache`` simply leaves that layer out. ``transport`` replaces the
    network transport underneath the retry layer, which is how tests inject
    :class:`httpx.MockTransport`.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit is not None
            else None
        )

        options: _ClientOptions = {
            "timeout": config.timeout_seconds,
            "transport": RetryTransport(transport=transport, retry=build_retry(config.retry)),
            "follow_redirects": True,
        }
        if config.headers:
            options["headers"] = dict(config.headers)

        if config.cache is None:
            self._client: httpx.AsyncClient = httpx.AsyncClient(**options)
        else:
            storage, policy = _cache_layer(config.cache)
            self._client = AsyncCacheClient(**options, storage=storage, policy=policy)
        log.debug(
            "HTTP client %s ready (cache=%s, ratelimit=%s)",
            config.name,
            config.cache.backend if config.cache else "off",
            config.ratelimit,
        )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: str, *, headers: Mapping[str, str] | None = None) -> httpx.Response:
        request_headers = dict(headers) if headers else None
        if self._limiter is None:
            return await self._client.get(url, headers=request_headers)
        async with self._limiter:
            return await self._client.get(url, headers=request_headers)


class _CatalogPayloadFilter(BaseFilter[HishelCacheResponse]):
    """Stores a response only when its decoded JSON body satisfies ``predicate``."""

    def __init__(self, predicate: ShouldCacheHook) -> None:
        self._predicate = predicate

    def needs_body(self) -> bool:
        return True

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        if body is None:
            return True
        try:
            payload = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError):
            return False
        return bool(self._predicate(payload))


def _cache_layer(config: CacheConfig) -> tuple[AsyncSqliteStorage, FilterPolicy | None]:
    if config.backend == "sqlite":
        database_path = config.sqlite_path or str(get_storage_config().http_cache_path())
    else:
        database_path = ":memory:"
    storage = AsyncSqliteStorage(database_path=database_path, default_ttl=config.ttl_seconds)
    if config.should_cache is None:
        return storage, None
    return storage, FilterPolicy(response_filters=[_CatalogPayloadFilter(config.should_cache)])
