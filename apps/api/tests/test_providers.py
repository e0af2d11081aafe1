from __future__ import annotations

import httpx
import pytest

from screenguess.services.errors import ProviderError
from screenguess.services.kinopoisk import KinopoiskClient
from screenguess.services.shikimori import ShikimoriClient
from screenguess.services.tmdb import TMDBClient, auth_options
from screenguess.services.transport import ProviderConfig, ProviderTransport


def make_transport(name: str, handler) -> ProviderTransport:
    return ProviderTransport(
        ProviderConfig(name=name, base_url=f"https://{name}.test", min_interval=0.0, cache_ttl=60),
        http_transport=httpx.MockTransport(handler),
    )


class Recorder:
    def __init__(self, routes) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        payload = self.routes[request.url.path]
        return httpx.Response(200, json=payload)


@pytest.mark.asyncio
async def test_shikimori_discover_applies_defaults_and_names() -> None:
    recorder = Recorder(
        {
            "/animes": [
                {
                    "id": 16498,
                    "name": "Shingeki no Kyojin",
                    "russian": "Атака титанов",
                    "image": {"original": "/system/animes/original/16498.jpg", "preview": "/p.jpg"},
                },
                {"id": 5, "name": "Cowboy Bebop", "russian": ""},
            ]
        }
    )
    client = ShikimoriClient(make_transport("shikimori", recorder))

    items = await client.discover_page({"kind": "movie"}, 7)

    params = recorder.requests[0].url.params
    assert params["kind"] == "movie"
    assert params["status"] == "released"
    assert params["order"] == "popularity"
    assert params["page"] == "7"
    assert params["limit"] == "5"

    assert items[0].primary_name == "Атака титанов"
    assert items[0].secondary_name == "Shingeki no Kyojin"
    assert items[0].poster_image == "https://shikimori.one/system/animes/original/16498.jpg"
    assert items[1].primary_name == "Cowboy Bebop"


@pytest.mark.asyncio
async def test_shikimori_screenshots_and_detail_url() -> None:
    recorder = Recorder(
        {
            "/animes/1/screenshots": [
                {"original": "/system/screenshots/original/a.jpg", "preview": "/x"},
                {"original": "https://cdn.test/b.jpg"},
                {"preview": "/only-preview.jpg"},
            ]
        }
    )
    client = ShikimoriClient(make_transport("shikimori", recorder))

    images = await client.fetch_images(1)

    assert images == [
        "https://shikimori.one/system/screenshots/original/a.jpg",
        "https://cdn.test/b.jpg",
    ]
    assert client.detail_url(1) == "https://shikimori.one/animes/1"


@pytest.mark.asyncio
async def test_shikimori_search_skips_short_queries() -> None:
    recorder = Recorder({"/animes": []})
    client = ShikimoriClient(make_transport("shikimori", recorder))

    assert await client.search(" a ", {}) == []
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_shikimori_genre_options_keep_anime_genres() -> None:
    recorder = Recorder(
        {
            "/genres": [
                {"id": 1, "name": "Action", "entry_type": "Anime"},
                {"id": 2, "name": "Shounen", "entry_type": "Manga"},
                {"id": 3, "name": "Comedy"},
            ]
        }
    )
    client = ShikimoriClient(make_transport("shikimori", recorder))

    options = await client.load_options("genre")

    assert [option.label for option in options] == ["Action", "Comedy"]
    assert await client.load_options("kind") == []


@pytest.mark.asyncio
async def test_unexpected_payload_shape_is_a_provider_error() -> None:
    recorder = Recorder({"/animes": {"error": "nope"}})
    client = ShikimoriClient(make_transport("shikimori", recorder))

    with pytest.raises(ProviderError):
        await client.discover_page({}, 1)


@pytest.mark.asyncio
async def test_kinopoisk_discover_and_images() -> None:
    recorder = Recorder(
        {
            "/api/v2.2/films": {
                "items": [
                    {
                        "kinopoiskId": 301,
                        "nameRu": "Матрица",
                        "nameOriginal": "The Matrix",
                        "posterUrl": "https://kp.test/301.jpg",
                        "posterUrlPreview": "https://kp.test/301-small.jpg",
                    }
                ]
            },
            "/api/v2.2/films/301/images": {
                "items": [{"imageUrl": "https://kp.test/s1.jpg"}, {"previewUrl": "x"}],
            },
        }
    )
    client = KinopoiskClient(make_transport("kinopoisk", recorder))

    items = await client.discover_page({"type": "FILM", "genres": 3}, 2)
    images = await client.fetch_images(301)

    discover_params = recorder.requests[0].url.params
    assert discover_params["order"] == "RATING"
    assert discover_params["type"] == "FILM"
    assert discover_params["genres"] == "3"
    assert discover_params["page"] == "2"
    assert recorder.requests[1].url.params["type"] == "STILL"

    assert items[0].primary_name == "Матрица"
    assert items[0].secondary_name == "The Matrix"
    assert items[0].preview_image == "https://kp.test/301-small.jpg"
    assert images == ["https://kp.test/s1.jpg"]
    assert client.detail_url(301) == "https://www.kinopoisk.ru/film/301/"
    assert client.max_page == 5


@pytest.mark.asyncio
async def test_kinopoisk_filter_options() -> None:
    recorder = Recorder(
        {
            "/api/v2.2/films/filters": {
                "genres": [{"id": 1, "genre": "триллер"}, {"id": 2, "genre": ""}],
                "countries": [{"id": 1, "country": "США"}],
            }
        }
    )
    client = KinopoiskClient(make_transport("kinopoisk", recorder))

    genres = await client.load_options("genres")
    countries = await client.load_options("countries")

    assert [(option.id, option.label) for option in genres] == [(1, "триллер")]
    assert [(option.id, option.label) for option in countries] == [(1, "США")]


@pytest.mark.asyncio
async def test_tmdb_backdrops_sorted_by_vote() -> None:
    recorder = Recorder(
        {
            "/movie/603/images": {
                "backdrops": [
                    {"file_path": "/low.jpg", "vote_average": 1.5},
                    {"file_path": "/high.jpg", "vote_average": 5.4},
                    {"file_path": None, "vote_average": 9.0},
                ]
            }
        }
    )
    client = TMDBClient(make_transport("tmdb", recorder), "movie", image_base_url="https://image.test/t/p/")

    images = await client.fetch_images(603)

    assert images == [
        "https://image.test/t/p/original/high.jpg",
        "https://image.test/t/p/original/low.jpg",
    ]


@pytest.mark.asyncio
async def test_tmdb_discover_default_sort_and_names() -> None:
    recorder = Recorder(
        {
            "/discover/tv": {
                "results": [
                    {"id": 1396, "name": "Breaking Bad", "original_name": "Breaking Bad", "poster_path": "/bb.jpg"}
                ]
            }
        }
    )
    client = TMDBClient(make_transport("tmdb", recorder), "tv")

    items = await client.discover_page({"with_genres": "18"}, 4)

    params = recorder.requests[0].url.params
    assert params["sort_by"] == "vote_average.desc"
    assert params["vote_count.gte"] == "100"
    assert params["with_genres"] == "18"
    assert items[0].primary_name == "Breaking Bad"
    assert items[0].poster_image == "https://image.tmdb.org/t/p/w500/bb.jpg"
    assert client.detail_url(1396) == "https://www.themoviedb.org/tv/1396"


@pytest.mark.asyncio
async def test_tmdb_search_is_capped() -> None:
    results = [{"id": index, "title": f"Movie {index}"} for index in range(25)]
    recorder = Recorder({"/search/movie": {"results": results}})
    client = TMDBClient(make_transport("tmdb", recorder), "movie")

    items = await client.search("movie", {})

    assert len(items) == 10
    assert recorder.requests[0].url.params["query"] == "movie"


@pytest.mark.asyncio
async def test_tmdb_country_options_are_static() -> None:
    recorder = Recorder({})
    client = TMDBClient(make_transport("tmdb", recorder), "movie")

    countries = await client.load_options("countries")

    assert countries
    assert recorder.requests == []


def test_tmdb_auth_options_detects_token_kind() -> None:
    headers, params = auth_options("a" * 32)
    assert params == {"api_key": "a" * 32}
    assert "Authorization" not in headers

    token = "eyJ" + "b" * 200
    headers, params = auth_options(token)
    assert headers["Authorization"] == f"Bearer {token}"
    assert params == {}


@pytest.mark.asyncio
async def test_shikimori_names_fall_back_to_unknown() -> None:
    recorder = Recorder({"/animes": [{"id": 9, "russian": "", "name": None}, {"id": 10, "russian": "  ", "name": "Mushishi"}]})
    client = ShikimoriClient(make_transport("shikimori", recorder))

    items = await client.discover_page({}, 1)

    assert items[0].primary_name == "Unknown"
    assert items[1].primary_name == "Mushishi"


@pytest.mark.asyncio
async def test_tmdb_names_fall_back_to_unknown() -> None:
    recorder = Recorder({"/discover/movie": {"results": [{"id": 12, "title": "", "original_title": None}]}})
    client = TMDBClient(make_transport("tmdb", recorder), "movie")

    items = await client.discover_page({}, 1)

    assert items[0].primary_name == "Unknown"


@pytest.mark.asyncio
async def test_kinopoisk_names_fall_back_to_unknown() -> None:
    recorder = Recorder(
        {
            "/api/v2.2/films": {
                "items": [
                    {"kinopoiskId": 41},
                    {"kinopoiskId": 42, "nameRu": None, "nameEn": "Heat", "nameOriginal": ""},
                ]
            }
        }
    )
    client = KinopoiskClient(make_transport("kinopoisk", recorder))

    items = await client.discover_page({}, 1)

    assert (items[0].primary_name, items[0].secondary_name) == ("Unknown", "Unknown")
    assert (items[1].primary_name, items[1].secondary_name) == ("Heat", "Heat")
