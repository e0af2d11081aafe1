from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Awaitable, Callable, Dict, List, Optional

from ..services.catalog import ProviderClient
from ..services.errors import ContentError
from . import answers
from .engine import AcquisitionEngine
from .filters import NORMALIZERS, Normalizer
from .models import (
    ContentCategory,
    ContentRecord,
    DynamicOption,
    FilterDescriptor,
    FilterOption,
    FilterSet,
    SearchResult,
)

logger = logging.getLogger(__name__)

OptionLoader = Callable[[str], Awaitable[List[DynamicOption]]]
FilterBuilder = Callable[[], List[FilterDescriptor]]

PROVIDER_LABELS = {
    "shikimori": "Shikimori",
    "tmdb": "TMDB",
    "kinopoisk": "Kinopoisk",
}

ANIME_KINDS = [
    ("tv", "TV"),
    ("movie", "Movie"),
    ("ova", "OVA"),
    ("ona", "ONA"),
    ("special", "Special"),
    ("music", "Music"),
]

ANIME_STATUSES = [
    ("released", "Released"),
    ("ongoing", "Ongoing"),
    ("anons", "Announced"),
]

ANIME_DURATIONS = [
    ("S", "Short (<10 min)"),
    ("D", "Medium (<30 min)"),
    ("F", "Full (>30 min)"),
]

ANIME_RATINGS = [
    ("g", "G - All Ages"),
    ("pg", "PG - Children"),
    ("pg_13", "PG-13 - Teens 13+"),
    ("r", "R - 17+"),
    ("r_plus", "R+ - Mild Nudity"),
]


def _options(pairs) -> List[FilterOption]:
    return [FilterOption(value=value, label=label) for value, label in pairs]


def anime_filters() -> List[FilterDescriptor]:
    return [
        FilterDescriptor(id="kind", label="Type", type="button-multi", options=_options(ANIME_KINDS)),
        FilterDescriptor(id="status", label="Status", type="button-multi", options=_options(ANIME_STATUSES)),
        FilterDescriptor(id="rating", label="Age Rating", type="button-multi", options=_options(ANIME_RATINGS)),
        FilterDescriptor(
            id="season",
            label='Season (e.g., "2020_2024", "summer_2023")',
            type="text",
            placeholder="e.g., 2020_2024",
        ),
        FilterDescriptor(id="score", label="Minimum Score", type="slider", min=0, max=9, step=1),
        FilterDescriptor(
            id="duration",
            label="Episode Duration",
            type="select",
            options=[FilterOption(value="", label="Any"), *_options(ANIME_DURATIONS)],
        ),
        FilterDescriptor(id="genre", label="Genre", type="dynamic-buttons", dynamic=True),
    ]


def film_filters() -> List[FilterDescriptor]:
    current_year = date.today().year
    return [
        FilterDescriptor(id="ratingFrom", label="Minimum Rating", type="slider", min=0, max=10, step=0.5),
        FilterDescriptor(
            id="yearFrom",
            label="Year From",
            type="number-range",
            min=1900,
            max=current_year,
            placeholder="e.g., 2020",
        ),
        FilterDescriptor(
            id="yearTo",
            label="Year To",
            type="number-range",
            min=1900,
            max=current_year,
            placeholder="e.g., 2024",
        ),
        FilterDescriptor(id="countries", label="Country", type="dynamic-buttons", dynamic=True),
        FilterDescriptor(id="genres", label="Genre", type="dynamic-buttons", dynamic=True),
    ]


@dataclass
class ContentStrategy:
    """Everything one content category needs: provider, filter dialect, copy and rules.

    Categories differ only in the data they are built with (see the
    ``*_strategy`` factories below); the behaviour is shared.
    """

    category: ContentCategory
    display_name: str
    question_text: str
    placeholder: str
    provider: ProviderClient
    normalizer: Normalizer
    engine: AcquisitionEngine
    filter_builder: FilterBuilder
    option_loader: Optional[OptionLoader] = None
    view_details_text: str = field(default="")

    @property
    def filter_panel_title(self) -> str:
        return f"{self.display_name} Filters"

    def normalize(self, filters: Optional[FilterSet]) -> Dict[str, object]:
        return self.normalizer(filters or {}, self.category)

    async def fetch_random(self, filters: Optional[FilterSet] = None) -> ContentRecord:
        return await self.engine.acquire(self.normalize(filters), self.category)

    async def search(self, query: str, filters: Optional[FilterSet] = None) -> List[SearchResult]:
        try:
            items = await self.provider.search(query, self.normalize(filters))
        except ContentError as exc:
            logger.warning("%s search failed: %s", self.category, exc)
            return []
        return [
            SearchResult(
                id=item.id,
                primary_name=item.primary_name,
                secondary_name=item.secondary_name,
                preview_image=item.preview_image,
                category=self.category,
            )
            for item in items
        ]

    def check_answer(self, user_answer: str, primary_name: str, secondary_name: str) -> bool:
        return answers.matches(user_answer, primary_name, secondary_name)

    def describe_filters(self) -> List[FilterDescriptor]:
        return self.filter_builder()

    async def load_dynamic_options(self, filter_id: str) -> List[DynamicOption]:
        if self.option_loader is None:
            return []
        dynamic_ids = {descriptor.id for descriptor in self.describe_filters() if descriptor.dynamic}
        if filter_id not in dynamic_ids:
            return []
        try:
            return await self.option_loader(filter_id)
        except ContentError as exc:
            logger.warning("Failed to load %s options for %s: %s", filter_id, self.category, exc)
            return []


def _build(
    category: ContentCategory,
    provider: ProviderClient,
    *,
    display_name: str,
    question_text: str,
    placeholder: str,
    filter_builder: FilterBuilder,
    engine: Optional[AcquisitionEngine] = None,
) -> ContentStrategy:
    return ContentStrategy(
        category=category,
        display_name=display_name,
        question_text=question_text,
        placeholder=placeholder,
        provider=provider,
        normalizer=NORMALIZERS[provider.name],
        engine=engine or AcquisitionEngine(provider),
        filter_builder=filter_builder,
        option_loader=provider.load_options,
        view_details_text=f"View on {PROVIDER_LABELS.get(provider.name, provider.name)}",
    )


def anime_strategy(provider: ProviderClient, engine: Optional[AcquisitionEngine] = None) -> ContentStrategy:
    return _build(
        "anime",
        provider,
        display_name="Anime",
        question_text="What anime is this?",
        placeholder="Enter anime name...",
        filter_builder=anime_filters,
        engine=engine,
    )


def movie_strategy(provider: ProviderClient, engine: Optional[AcquisitionEngine] = None) -> ContentStrategy:
    return _build(
        "movie",
        provider,
        display_name="Movies",
        question_text="What movie is this?",
        placeholder="Enter movie name...",
        filter_builder=film_filters,
        engine=engine,
    )


def tv_strategy(provider: ProviderClient, engine: Optional[AcquisitionEngine] = None) -> ContentStrategy:
    return _build(
        "tv",
        provider,
        display_name="TV Series",
        question_text="What TV series is this?",
        placeholder="Enter TV series name...",
        filter_builder=film_filters,
        engine=engine,
    )


STRATEGY_FACTORIES: Dict[ContentCategory, Callable[..., ContentStrategy]] = {
    "anime": anime_strategy,
    "movie": movie_strategy,
    "tv": tv_strategy,
}
