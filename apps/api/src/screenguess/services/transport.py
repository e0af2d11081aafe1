from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional
import httpx

from .cache import ResponseCache, response_key
from .errors import NetworkError, NotFound, ProviderError, RateLimited, Unauthorized

logger = logging.getLogger(__name__)

QueryParams = Mapping[str, Any]


class RateLimiter:
    """Enforces a minimum interval between consecutive requests to one provider.

    The read-modify-write of the last request timestamp happens under a lock,
    so concurrent callers queue up instead of both observing a stale value.
    """

    def __init__(
        self,
        min_interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.min_interval = max(0.0, min_interval)
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_request: Optional[float] = None

    async def acquire(self) -> float:
        """Wait until a request may be issued and claim the slot.

        Returns the delay that was applied, in seconds.
        """
        async with self._lock:
            delay = 0.0
            if self._last_request is not None:
                elapsed = self._clock() - self._last_request
                if elapsed < self.min_interval:
                    delay = self.min_interval - elapsed
                    await self._sleep(delay)
            self._last_request = self._clock()
            return delay


@dataclass(frozen=True)
class ProviderConfig:
    name: str
    base_url: str
    min_interval: float
    cache_ttl: int
    timeout: float = 20.0
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)


class ProviderTransport:
    """Rate-limited JSON transport for a single catalog provider.

    One instance exists per provider; every client talking to that provider
    shares it, and with it the provider's rate-limit state.
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        cache: ResponseCache | None = None,
        limiter: RateLimiter | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._cache = cache
        self.limiter = limiter or RateLimiter(config.min_interval)
        self._http_transport = http_transport

    @property
    def name(self) -> str:
        return self.config.name

    async def send(
        self,
        path: str,
        *,
        params: Optional[QueryParams] = None,
        cacheable: bool = True,
    ) -> Any:
        """Perform a GET against the provider and return the decoded JSON body.

        ``cacheable=False`` always reaches the network; it is used for
        randomized discovery pages where a cached answer defeats the purpose.
        """
        if not cacheable or self._cache is None:
            return await self._request(path, params)

        key = response_key(self.name, path, params)
        try:
            cached = await self._cache.get(key)
        except Exception as exc:  # pragma: no cover - cache failures shouldn't block gameplay
            logger.debug("Unable to read %s cache entry %s: %s", self.name, key, exc)
            cached = None
        if cached is not None:
            return cached

        payload = await self._request(path, params)
        try:
            await self._cache.set(key, payload, self.config.cache_ttl)
        except Exception as exc:  # pragma: no cover - cache failures shouldn't block gameplay
            logger.debug("Unable to cache %s response %s: %s", self.name, key, exc)
        return payload

    async def _request(self, path: str, params: Optional[QueryParams]) -> Any:
        await self.limiter.acquire()
        try:
            async with httpx.AsyncClient(
                base_url=self.config.base_url,
                headers=self.config.headers,
                params=self.config.params,
                timeout=self.config.timeout,
                transport=self._http_transport,
            ) as client:
                response = await client.get(path, params=dict(params or {}))
        except httpx.HTTPError as exc:
            logger.warning("%s request to %s failed: %s", self.name, path, exc.__class__.__name__)
            raise NetworkError() from exc

        status = response.status_code
        if status == 429:
            raise RateLimited()
        if status == 401:
            raise Unauthorized()
        if status == 404:
            raise NotFound()
        if not response.is_success:
            raise ProviderError(status)
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(status, "Content provider returned an unreadable response") from exc
