from __future__ import annotations

import pytest

from screenguess.services.cache import InMemoryCache, get_cache, response_key


@pytest.mark.asyncio
async def test_entries_expire_after_ttl(fake_clock) -> None:
    cache = InMemoryCache(clock=fake_clock)
    await cache.set("tmdb:/genre/movie/list?", {"genres": []}, ttl=60)
    assert await cache.get("tmdb:/genre/movie/list?") == {"genres": []}

    fake_clock.now += 60
    assert await cache.get("tmdb:/genre/movie/list?") is None
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_least_recently_used_entry_is_evicted() -> None:
    cache = InMemoryCache(max_entries=2)
    await cache.set("a", 1)
    await cache.set("b", 2)
    await cache.get("a")
    await cache.set("c", 3)

    assert await cache.get("a") == 1
    assert await cache.get("b") is None
    assert await cache.get("c") == 3


@pytest.mark.asyncio
async def test_setting_none_removes_entry() -> None:
    cache = InMemoryCache()
    await cache.set("key", ["payload"])
    await cache.set("key", None)

    assert await cache.get("key") is None


def test_response_key_ignores_param_order() -> None:
    first = response_key("kinopoisk", "/api/v2.2/films", {"page": 2, "order": "RATING"})
    second = response_key("kinopoisk", "/api/v2.2/films", {"order": "RATING", "page": 2})

    assert first == second
    assert first.startswith("kinopoisk:/api/v2.2/films?")
    assert response_key("shikimori", "/genres") == "shikimori:/genres?"


def test_get_cache_defaults_to_memory() -> None:
    cache = get_cache(None)
    assert isinstance(cache, InMemoryCache)
    assert get_cache(None) is cache
