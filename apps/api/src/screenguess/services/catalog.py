from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..content.models import DynamicOption
from .errors import ProviderError
from .transport import ProviderTransport

SEARCH_MIN_LENGTH = 2
MAX_SUGGESTIONS = 10
UNKNOWN_NAME = "Unknown"

ProviderParams = Dict[str, Any]

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class CatalogItem:
    """A provider title reduced to what the game needs."""

    id: int
    primary_name: str
    secondary_name: str
    poster_image: str = ""
    preview_image: str = ""


def first_name(*candidates: Optional[str]) -> str:
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate
    return UNKNOWN_NAME


def prepare_query(query: Optional[str]) -> Optional[str]:
    """Return the trimmed search term, or ``None`` when it is too short to send."""
    if not query:
        return None
    term = query.strip()
    if len(term) < SEARCH_MIN_LENGTH:
        return None
    return term


def parse_models(model: Type[ModelT], items: Any, provider: str) -> List[ModelT]:
    if items is None:
        return []
    if not isinstance(items, list):
        raise ProviderError(200, f"Unexpected {provider} response shape")
    try:
        return [model.model_validate(item) for item in items]
    except ValidationError as exc:
        raise ProviderError(200, f"Unexpected {provider} response shape") from exc


def response_field(payload: Any, key: str, provider: str) -> Any:
    if not isinstance(payload, dict):
        raise ProviderError(200, f"Unexpected {provider} response shape")
    return payload.get(key)


class ProviderClient(ABC):
    """Catalog, image and search calls for one provider.

    ``discover_page`` never advances pages on its own; the caller picks the
    page (``1..max_page``) so it can randomize.
    """

    name: str = "provider"
    max_page: int = 1

    def __init__(self, transport: ProviderTransport) -> None:
        self._transport = transport

    @property
    def transport(self) -> ProviderTransport:
        return self._transport

    @abstractmethod
    async def discover_page(self, filters: ProviderParams, page: int) -> List[CatalogItem]:
        raise NotImplementedError

    @abstractmethod
    async def fetch_images(self, item_id: int) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    async def search(self, query: str, filters: ProviderParams) -> List[CatalogItem]:
        raise NotImplementedError

    @abstractmethod
    def detail_url(self, item_id: int) -> str:
        raise NotImplementedError

    async def load_options(self, filter_id: str) -> List[DynamicOption]:
        return []
