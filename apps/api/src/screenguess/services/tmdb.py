from __future__ import annotations

from typing import List, Literal, Optional

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

TMDB_SITE = "https://www.themoviedb.org"

MediaType = Literal["movie", "tv"]

DISCOVERY_DEFAULTS: ProviderParams = {
    "language": "en-US",
    "include_adult": "false",
    "include_video": "false",
}

# TMDB has no endpoint for "countries that have titles"; these are ISO 3166-1 codes.
POPULAR_COUNTRIES = [
    ("US", "United States"),
    ("GB", "United Kingdom"),
    ("FR", "France"),
    ("DE", "Germany"),
    ("IT", "Italy"),
    ("ES", "Spain"),
    ("JP", "Japan"),
    ("KR", "South Korea"),
    ("CN", "China"),
    ("IN", "India"),
    ("RU", "Russia"),
    ("CA", "Canada"),
    ("AU", "Australia"),
    ("BR", "Brazil"),
    ("MX", "Mexico"),
    ("AR", "Argentina"),
    ("SE", "Sweden"),
    ("NO", "Norway"),
    ("DK", "Denmark"),
    ("NL", "Netherlands"),
    ("BE", "Belgium"),
    ("CH", "Switzerland"),
    ("AT", "Austria"),
    ("PL", "Poland"),
    ("TR", "Turkey"),
    ("TH", "Thailand"),
    ("HK", "Hong Kong"),
    ("TW", "Taiwan"),
    ("SG", "Singapore"),
    ("NZ", "New Zealand"),
]


class TMDBTitle(BaseModel):
    id: int
    title: Optional[str] = None
    original_title: Optional[str] = None
    name: Optional[str] = None
    original_name: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None


class TMDBImage(BaseModel):
    file_path: Optional[str] = None
    vote_average: float = 0.0


class TMDBGenre(BaseModel):
    id: int
    name: str


def auth_options(api_key: str) -> tuple[dict[str, str], dict[str, str]]:
    """Headers and query params for a TMDB credential.

    A v3 API key is 32 hex characters and travels as ``api_key``; anything
    longer is a v4 read access token sent as a bearer token.
    """
    headers = {"Accept": "application/json"}
    params: dict[str, str] = {}
    if not api_key:
        return headers, params
    if len(api_key) > 40:
        headers["Authorization"] = f"Bearer {api_key}"
    else:
        params["api_key"] = api_key
    return headers, params


class TMDBClient(ProviderClient):
    name = "tmdb"

    def __init__(
        self,
        transport: ProviderTransport,
        media_type: MediaType,
        *,
        image_base_url: str = "https://image.tmdb.org/t/p",
        max_page: int = 20,
    ) -> None:
        super().__init__(transport)
        self.media_type = media_type
        self.image_base_url = image_base_url.rstrip("/")
        self.max_page = max_page

    def image_url(self, path: Optional[str], size: str = "original") -> str:
        if not path:
            return ""
        return f"{self.image_base_url}/{size}{path}"

    def _to_item(self, entry: TMDBTitle) -> CatalogItem:
        poster_path = entry.poster_path or entry.backdrop_path
        return CatalogItem(
            id=entry.id,
            primary_name=first_name(entry.title, entry.name, entry.original_title, entry.original_name),
            secondary_name=entry.original_title or entry.original_name or "",
            poster_image=self.image_url(poster_path, "w500"),
            preview_image=self.image_url(poster_path, "w300"),
        )

    async def discover_page(self, filters: ProviderParams, page: int) -> List[CatalogItem]:
        params = {**DISCOVERY_DEFAULTS, **filters, "page": page}
        if "sort_by" not in filters:
            params["sort_by"] = "vote_average.desc"
            params["vote_count.gte"] = 100
        payload = await self._transport.send(f"/discover/{self.media_type}", params=params, cacheable=False)
        results = parse_models(TMDBTitle, response_field(payload, "results", self.name), self.name)
        return [self._to_item(entry) for entry in results]

    async def fetch_images(self, item_id: int) -> List[str]:
        payload = await self._transport.send(f"/{self.media_type}/{item_id}/images")
        images = parse_models(TMDBImage, response_field(payload, "backdrops", self.name), self.name)
        backdrops = sorted(images, key=lambda image: image.vote_average, reverse=True)
        return [self.image_url(image.file_path) for image in backdrops if image.file_path]

    async def search(self, query: str, filters: ProviderParams) -> List[CatalogItem]:
        # /search endpoints take no discover filters; only the text query applies.
        term = prepare_query(query)
        if term is None:
            return []
        params = {"query": term, "language": "en-US", "page": 1, "include_adult": "false"}
        payload = await self._transport.send(f"/search/{self.media_type}", params=params)
        results = parse_models(TMDBTitle, response_field(payload, "results", self.name), self.name)
        return [self._to_item(entry) for entry in results[:MAX_SUGGESTIONS]]

    def detail_url(self, item_id: int) -> str:
        return f"{TMDB_SITE}/{self.media_type}/{item_id}"

    async def load_options(self, filter_id: str) -> List[DynamicOption]:
        if filter_id == "countries":
            return [DynamicOption(id=code, label=label) for code, label in POPULAR_COUNTRIES]
        if filter_id != "genres":
            return []
        payload = await self._transport.send(f"/genre/{self.media_type}/list", params={"language": "en-US"})
        genres = parse_models(TMDBGenre, response_field(payload, "genres", self.name), self.name)
        return [DynamicOption(id=genre.id, label=genre.name) for genre in genres]
