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
)
from .transport import ProviderTransport

SHIKIMORI_SITE = "https://shikimori.one"

DISCOVERY_DEFAULTS: ProviderParams = {
    "kind": "tv",
    "status": "released",
    "order": "popularity",
    "censored": "true",
}


class ShikimoriImage(BaseModel):
    original: Optional[str] = None
    preview: Optional[str] = None


class ShikimoriAnime(BaseModel):
    id: int
    name: Optional[str] = None
    russian: Optional[str] = None
    image: Optional[ShikimoriImage] = None
    url: Optional[str] = None
    kind: Optional[str] = None
    score: Optional[str] = None
    status: Optional[str] = None


class ShikimoriScreenshot(BaseModel):
    original: Optional[str] = None
    preview: Optional[str] = None


class ShikimoriGenre(BaseModel):
    id: int
    name: str
    russian: Optional[str] = None
    entry_type: Optional[str] = None


def full_image_url(url: Optional[str]) -> str:
    """Shikimori sometimes answers with site-relative image paths."""
    if not url:
        return ""
    if url.startswith("http"):
        return url
    return f"{SHIKIMORI_SITE}{url}"


class ShikimoriClient(ProviderClient):
    name = "shikimori"

    def __init__(self, transport: ProviderTransport, *, page_size: int = 5, max_page: int = 20) -> None:
        super().__init__(transport)
        self.page_size = page_size
        self.max_page = max_page

    def _to_item(self, anime: ShikimoriAnime) -> CatalogItem:
        image = anime.image or ShikimoriImage()
        return CatalogItem(
            id=anime.id,
            primary_name=first_name(anime.russian, anime.name),
            secondary_name=anime.name or "",
            poster_image=full_image_url(image.original),
            preview_image=full_image_url(image.preview),
        )

    async def discover_page(self, filters: ProviderParams, page: int) -> List[CatalogItem]:
        params = {**DISCOVERY_DEFAULTS, **filters, "page": page, "limit": self.page_size}
        payload = await self._transport.send("/animes", params=params, cacheable=False)
        return [self._to_item(anime) for anime in parse_models(ShikimoriAnime, payload, self.name)]

    async def fetch_images(self, item_id: int) -> List[str]:
        payload = await self._transport.send(f"/animes/{item_id}/screenshots")
        screenshots = parse_models(ShikimoriScreenshot, payload, self.name)
        return [full_image_url(shot.original) for shot in screenshots if shot.original]

    async def search(self, query: str, filters: ProviderParams) -> List[CatalogItem]:
        term = prepare_query(query)
        if term is None:
            return []
        params = {**filters, "search": term, "limit": MAX_SUGGESTIONS}
        payload = await self._transport.send("/animes", params=params)
        animes = parse_models(ShikimoriAnime, payload, self.name)
        return [self._to_item(anime) for anime in animes[:MAX_SUGGESTIONS]]

    def detail_url(self, item_id: int) -> str:
        return f"{SHIKIMORI_SITE}/animes/{item_id}"

    async def load_options(self, filter_id: str) -> List[DynamicOption]:
        if filter_id != "genre":
            return []
        payload = await self._transport.send("/genres")
        genres = parse_models(ShikimoriGenre, payload, self.name)
        return [
            DynamicOption(id=genre.id, label=genre.name)
            for genre in genres
            if genre.entry_type in (None, "Anime")
        ]
