from __future__ import annotations

import json
from urllib.parse import quote

import httpx
import pytest
from fastapi import HTTPException
from starlette.requests import Request

from screenguess.content import registry as registry_module
from screenguess.content.models import ContentRecord, DynamicOption, SearchResult
from screenguess.content.registry import StrategyRegistry
from screenguess.core.config import Settings
from screenguess.routers import content as content_router
from screenguess.routers.content import VerifyAnswerPayload
from screenguess.services.cache import InMemoryCache
from screenguess.services.errors import RateLimited


def make_request(cookies: dict[str, str] | None = None) -> Request:
    headers = []
    if cookies:
        cookie_header = "; ".join(f"{name}={value}" for name, value in cookies.items())
        headers.append((b"cookie", cookie_header.encode("latin-1")))
    return Request(scope={"type": "http", "headers": headers, "app": None})


def make_record(category: str = "anime") -> ContentRecord:
    return ContentRecord(
        id=1,
        primary_name="Тетрадь смерти",
        secondary_name="Death Note",
        poster_image="https://img.test/poster.jpg",
        screenshots=tuple(f"https://img.test/{index}.jpg" for index in range(6)),
        detail_url="https://shikimori.one/animes/1535",
        category=category,
    )


@pytest.mark.asyncio
async def test_random_content_uses_cookie_preferences(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    async def fake_fetch(category, filters):
        captured["category"] = category
        captured["filters"] = filters
        return make_record(category)

    monkeypatch.setattr(content_router.content_service, "fetch_random_content", fake_fetch)

    request = make_request(
        {
            "content-type": "movie",
            "movie-filters": quote(json.dumps({"yearFrom": 2000})),
        }
    )
    response = await content_router.random_content(request, category=None)

    assert captured == {"category": "movie", "filters": {"yearFrom": 2000}}
    assert response.content.category == "movie"
    assert response.display_image == "https://img.test/0.jpg"


@pytest.mark.asyncio
async def test_explicit_category_overrides_cookie(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_fetch(category, filters):
        return make_record(category)

    monkeypatch.setattr(content_router.content_service, "fetch_random_content", fake_fetch)

    response = await content_router.random_content(make_request({"content-type": "movie"}), category="tv")

    assert response.content.category == "tv"


@pytest.mark.asyncio
async def test_content_errors_become_http_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_fetch(category, filters):
        raise RateLimited()

    monkeypatch.setattr(content_router.content_service, "fetch_random_content", fake_fetch)

    with pytest.raises(HTTPException) as excinfo:
        await content_router.random_content(make_request(), category="anime")

    assert excinfo.value.status_code == 429
    assert "Rate limit" in excinfo.value.detail


@pytest.mark.asyncio
async def test_suggestions_endpoint(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_search(query, category, filters):
        return [SearchResult(id=5, primary_name=query, category=category)]

    monkeypatch.setattr(content_router.content_service, "search_suggestions", fake_search)

    response = await content_router.suggestions(make_request(), q="bebop", category="anime")

    assert [result.primary_name for result in response.results] == ["bebop"]


@pytest.mark.asyncio
async def test_verify_endpoint() -> None:
    payload = VerifyAnswerPayload(
        answer="death note",
        correct_id=1535,
        primary_name="Тетрадь смерти",
        secondary_name="Death Note",
        category="anime",
    )

    response = await content_router.verify(make_request(), payload)
    assert response.correct

    picked = payload.model_copy(update={"answer": "", "selected_id": 99})
    response = await content_router.verify(make_request(), picked)
    assert not response.correct


@pytest.mark.asyncio
async def test_filters_endpoint_describes_panel() -> None:
    registry_module._registry = StrategyRegistry(
        Settings(),
        cache=InMemoryCache(),
        http_transport=httpx.MockTransport(lambda request: httpx.Response(500)),
    )

    response = await content_router.filters(make_request({"content-type": "anime"}), category=None)

    assert response.category == "anime"
    assert response.title == "Anime Filters"
    assert response.placeholder == "Enter anime name..."
    assert {descriptor.id for descriptor in response.filters} >= {"kind", "genre"}


@pytest.mark.asyncio
async def test_filter_options_endpoint(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_options(category, filter_id):
        return [DynamicOption(id=1, label=f"{category}:{filter_id}")]

    monkeypatch.setattr(content_router.content_service, "load_dynamic_options", fake_options)

    response = await content_router.filter_options(make_request(), "genres", category="movie")

    assert [option.label for option in response.results] == ["movie:genres"]
