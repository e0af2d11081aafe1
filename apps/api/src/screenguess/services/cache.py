from __future__ import annotations

import asyncio
import json
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, Callable, Mapping, Optional
from urllib.parse import urlencode

from redis.asyncio import Redis

KEY_PREFIX = "screenguess:"


def response_key(provider: str, path: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Stable cache key for a provider GET; parameter order does not matter."""
    query = urlencode(sorted((params or {}).items()))
    return f"{provider}:{path}?{query}"


class ResponseCache(ABC):
    """Store for decoded provider responses, each kept for the provider's freshness window."""

    @abstractmethod
    async def get(self, key: str) -> Any:
        raise NotImplementedError

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        raise NotImplementedError


class InMemoryCache(ResponseCache):
    """Process-local store; least recently used payloads go first once ``max_entries`` is hit."""

    def __init__(self, max_entries: int = 2048, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: OrderedDict[str, tuple[Any, Optional[float]]] = OrderedDict()
        self._max_entries = max(1, max_entries)
        self._clock = clock
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Any:
        async with self._lock:
            if key not in self._entries:
                return None
            payload, deadline = self._entries[key]
            if deadline is not None and deadline <= self._clock():
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return payload

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        async with self._lock:
            if value is None:
                self._entries.pop(key, None)
                return
            deadline = self._clock() + ttl if ttl else None
            self._entries[key] = (value, deadline)
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)


class RedisCache(ResponseCache):
    """Shares provider responses between API workers; payloads are stored as JSON."""

    def __init__(self, client: Redis, prefix: str = KEY_PREFIX) -> None:
        self._client = client
        self._prefix = prefix

    async def get(self, key: str) -> Any:
        raw = await self._client.get(self._prefix + key)
        return None if raw is None else json.loads(raw)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        if value is None:
            await self._client.delete(self._prefix + key)
            return
        await self._client.set(self._prefix + key, json.dumps(value, ensure_ascii=False), ex=ttl or None)


_cache: ResponseCache | None = None


def get_cache(redis_url: str | None = None) -> ResponseCache:
    """Process-wide response cache, backed by Redis when a URL is configured."""
    global _cache
    if _cache is None:
        _cache = RedisCache(Redis.from_url(redis_url, decode_responses=True)) if redis_url else InMemoryCache()
    return _cache
