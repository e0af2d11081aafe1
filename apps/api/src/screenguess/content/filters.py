"""Translate provider-agnostic filters into each provider's query parameters.

Every normalizer is a pure function of ``(filters, category)``. Keys a
provider does not understand are dropped without complaint so callers can
send filters meant for another provider or a newer client. Numeric filters
equal to 0 mean "no constraint" and are left out of the query entirely.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, List, Optional, Union

from .models import ContentCategory, FilterSet

ProviderFilters = Dict[str, Any]
Normalizer = Callable[[FilterSet, ContentCategory], ProviderFilters]

Number = Union[int, float]


def _as_number(value: Any) -> Optional[Number]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number) or number == 0:
        return None
    return int(number) if number.is_integer() else number


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (list, tuple, dict, bool)):
        return None
    text = str(value).strip()
    return text or None


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [item for item in value if _as_text(item) is not None]
    return [value] if _as_text(value) is not None else []


def _as_ids(value: Any) -> List[int]:
    ids: List[int] = []
    for item in _as_list(value):
        number = _as_number(item)
        if isinstance(number, int):
            ids.append(number)
    return ids


def _pick(filters: FilterSet, *keys: str) -> Any:
    for key in keys:
        if filters.get(key) is not None:
            return filters[key]
    return None


def normalize_shikimori(filters: FilterSet, category: ContentCategory) -> ProviderFilters:
    params: ProviderFilters = {}
    for key in ("kind", "status", "rating", "genre"):
        values = _as_list(filters.get(key))
        if values:
            params[key] = ",".join(str(value).strip() for value in values)
    for key in ("season", "duration", "order"):
        text = _as_text(filters.get(key))
        if text:
            params[key] = text
    score = _as_number(filters.get("score"))
    if score is not None and int(score) > 0:
        params["score"] = int(score)
    return params


def _year_bound(value: Any, *, end: bool) -> Optional[str]:
    year = _as_number(value)
    if not isinstance(year, int):
        return None
    return f"{year:04d}-12-31" if end else f"{year:04d}-01-01"


def normalize_tmdb(filters: FilterSet, category: ContentCategory) -> ProviderFilters:
    params: ProviderFilters = {}

    genres = _as_ids(_pick(filters, "with_genres", "genres"))
    if genres:
        params["with_genres"] = ",".join(str(genre) for genre in genres)

    # Discover accepts a single origin country; extra selections are dropped.
    countries = _as_list(_pick(filters, "with_origin_country", "countries"))
    if countries:
        params["with_origin_country"] = str(countries[0]).strip()

    for field, generic in (("vote_average.gte", "ratingFrom"), ("vote_average.lte", "ratingTo")):
        number = _as_number(_pick(filters, field, generic))
        if number is not None:
            params[field] = number

    date_field = "primary_release_date" if category == "movie" else "first_air_date"
    start = _as_text(filters.get(f"{date_field}.gte")) or _year_bound(filters.get("yearFrom"), end=False)
    end = _as_text(filters.get(f"{date_field}.lte")) or _year_bound(filters.get("yearTo"), end=True)
    if start:
        params[f"{date_field}.gte"] = start
    if end:
        params[f"{date_field}.lte"] = end

    for key in ("sort_by", "with_original_language"):
        text = _as_text(filters.get(key))
        if text:
            params[key] = text
    return params


KINOPOISK_TYPES = {"movie": "FILM", "tv": "TV_SERIES"}


def normalize_kinopoisk(filters: FilterSet, category: ContentCategory) -> ProviderFilters:
    params: ProviderFilters = {}

    # The category alone decides films vs series; a caller-supplied type never widens it.
    film_type = KINOPOISK_TYPES.get(category)
    if film_type:
        params["type"] = film_type

    # The films endpoint takes one genre and one country per request.
    for key in ("genres", "countries"):
        ids = _as_ids(filters.get(key))
        if ids:
            params[key] = ids[0]

    for key in ("ratingFrom", "ratingTo", "yearFrom", "yearTo"):
        number = _as_number(filters.get(key))
        if number is not None:
            params[key] = number

    for key in ("order", "keyword"):
        text = _as_text(filters.get(key))
        if text:
            params[key] = text
    return params


NORMALIZERS: Dict[str, Normalizer] = {
    "shikimori": normalize_shikimori,
    "tmdb": normalize_tmdb,
    "kinopoisk": normalize_kinopoisk,
}
