from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping
from urllib.parse import unquote

from pydantic import BaseModel, Field, field_validator

from ..content.models import CATEGORIES, ContentCategory, FilterSet
from ..core.config import get_settings

logger = logging.getLogger(__name__)

CATEGORY_COOKIE = "content-type"

FILTER_COOKIES: Dict[ContentCategory, str] = {
    "anime": "anime-filters",
    "movie": "movie-filters",
    "tv": "tv-series-filters",
}


def _clean_filters(value: Any) -> FilterSet:
    if not isinstance(value, dict):
        return {}
    cleaned: FilterSet = {}
    for key, raw in value.items():
        if raw is None or raw == "" or raw == []:
            continue
        cleaned[str(key)] = raw
    return cleaned


class ClientPreferences(BaseModel):
    """Category and per-category filters the player last used, as stored in cookies."""

    category: ContentCategory = Field(default_factory=lambda: get_settings().default_category)
    filters: Dict[ContentCategory, FilterSet] = Field(default_factory=dict)

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: object) -> str:
        if isinstance(value, str) and value.strip() in CATEGORIES:
            return value.strip()
        return get_settings().default_category

    @field_validator("filters", mode="before")
    @classmethod
    def _coerce_filters(cls, value: object) -> Dict[str, FilterSet]:
        if not isinstance(value, dict):
            return {}
        return {key: _clean_filters(raw) for key, raw in value.items() if key in CATEGORIES}

    def filters_for(self, category: ContentCategory) -> FilterSet:
        return dict(self.filters.get(category, {}))


def _parse_filter_cookie(raw: str | None) -> FilterSet:
    if not raw:
        return {}
    try:
        return _clean_filters(json.loads(unquote(raw)))
    except ValueError:
        logger.debug("Ignoring unreadable filter cookie")
        return {}


def load_preferences(cookies: Mapping[str, str]) -> ClientPreferences:
    """Build preferences from request cookies, ignoring anything malformed."""

    filters = {
        category: _parse_filter_cookie(cookies.get(name))
        for category, name in FILTER_COOKIES.items()
    }
    return ClientPreferences(category=cookies.get(CATEGORY_COOKIE), filters=filters)
