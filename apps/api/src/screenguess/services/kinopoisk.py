from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from ..content.models import DynamicOption
from .catalog import (
    MAX_SUGGESTIONS,
    CatalogItem,
    ProviderClient,
    ProviderParams,
    first_name,
    parse_models,
    prepare_query,
    response_field,
)
from .transport import ProviderTransport

KINOPOISK_SITE = "https://www.kinopoisk.ru"
FILMS_PATH = "/api/v2.2/films"


class KinopoiskFilm(BaseModel):
    kinopoiskId: int
    nameRu: Optional[str] = None
    nameEn: Optional[str] = None
    nameOriginal: Optional[str] = None
    posterUrl: Optional[str] = None
    posterUrlPreview: Optional[str] = None
    year: Optional[int] = None
    type: Optional[str] = None


class KinopoiskImage(BaseModel):
    imageUrl: Optional[str] = None
    previewUrl: Optional[str] = None


class KinopoiskGenre(BaseModel):
    id: int
    genre: str = ""


class KinopoiskCountry(BaseModel):
    id: int
    country: str = ""


class KinopoiskClient(ProviderClient):
    """Kinopoisk unofficial API; serves both films and series.

    The film/series split travels in the ``type`` filter, so one client (and
    one transport) backs both categories.
    """

    name = "kinopoisk"

    def __init__(self, transport: ProviderTransport, *, max_page: int = 5) -> None:
        super().__init__(transport)
        # The films endpoint never returns more than 5 pages for a query.
        self.max_page = max_page

    def _to_item(self, film: KinopoiskFilm) -> CatalogItem:
        return CatalogItem(
            id=film.kinopoiskId,
            primary_name=first_name(film.nameRu, film.nameEn, film.nameOriginal),
            secondary_name=first_name(film.nameOriginal, film.nameEn, film.nameRu),
            poster_image=film.posterUrl or "",
            preview_image=film.posterUrlPreview or film.posterUrl or "",
        )

    def _films(self, payload: object) -> List[KinopoiskFilm]:
        return parse_models(KinopoiskFilm, response_field(payload, "items", self.name), self.name)

    async def discover_page(self, filters: ProviderParams, page: int) -> List[CatalogItem]:
        params = {"order": "RATING", **filters, "page": page}
        payload = await self._transport.send(FILMS_PATH, params=params, cacheable=False)
        return [self._to_item(film) for film in self._films(payload)]

    async def fetch_images(self, item_id: int) -> List[str]:
        payload = await self._transport.send(
            f"{FILMS_PATH}/{item_id}/images",
            params={"type": "STILL", "page": 1},
        )
        images = parse_models(KinopoiskImage, response_field(payload, "items", self.name), self.name)
        return [image.imageUrl for image in images if image.imageUrl]

    async def search(self, query: str, filters: ProviderParams) -> List[CatalogItem]:
        term = prepare_query(query)
        if term is None:
            return []
        params = {"order": "RATING", **filters, "keyword": term, "page": 1}
        payload = await self._transport.send(FILMS_PATH, params=params)
        return [self._to_item(film) for film in self._films(payload)[:MAX_SUGGESTIONS]]

    def detail_url(self, item_id: int) -> str:
        return f"{KINOPOISK_SITE}/film/{item_id}/"

    async def load_options(self, filter_id: str) -> List[DynamicOption]:
        if filter_id not in ("genres", "countries"):
            return []
        payload = await self._transport.send(f"{FILMS_PATH}/filters")
        if filter_id == "genres":
            genres = parse_models(KinopoiskGenre, response_field(payload, "genres", self.name), self.name)
            return [DynamicOption(id=genre.id, label=genre.genre) for genre in genres if genre.genre]
        countries = parse_models(KinopoiskCountry, response_field(payload, "countries", self.name), self.name)
        return [DynamicOption(id=country.id, label=country.country) for country in countries if country.country]
