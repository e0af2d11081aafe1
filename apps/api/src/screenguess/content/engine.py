from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence, TypeVar

from ..services.catalog import CatalogItem, ProviderClient
from ..services.errors import ContentError, InsufficientContent
from .filters import ProviderFilters
from .models import ContentCategory, ContentRecord

MIN_SCREENSHOTS = 6
MAX_BATCH_RETRIES = 10

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _shuffled(items: Sequence[T], rng: random.Random) -> List[T]:
    shuffled = list(items)
    rng.shuffle(shuffled)
    return shuffled


def _dedupe_preserve_order(values: Sequence[str]) -> List[str]:
    seen: set[str] = set()
    result: List[str] = []
    for value in values:
        if not value or value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


class AcquisitionEngine:
    """Randomized catalog search that backtracks until a title has enough screenshots.

    Each attempt requests one random discovery page, shuffles it and checks the
    candidates one after another. A candidate whose image lookup fails or
    comes back short is skipped; only after ``max_batch_retries`` pages without
    a usable title does the engine give up with ``InsufficientContent``.
    Requests are issued strictly one at a time so the provider's rate limit
    is the only pacing mechanism.
    """

    def __init__(
        self,
        provider: ProviderClient,
        *,
        min_screenshots: int = MIN_SCREENSHOTS,
        max_batch_retries: int = MAX_BATCH_RETRIES,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.provider = provider
        self.min_screenshots = min_screenshots
        self.max_batch_retries = max_batch_retries
        self._rng = rng or random.Random()

    def _random_page(self) -> int:
        return self._rng.randint(1, max(1, self.provider.max_page))

    async def _usable_images(self, item: CatalogItem) -> List[str]:
        try:
            images = await self.provider.fetch_images(item.id)
        except ContentError as exc:
            logger.warning(
                "Error fetching images for %s %s: %s",
                self.provider.name,
                item.id,
                exc,
            )
            return []
        return _dedupe_preserve_order(images)

    def _build_record(
        self,
        item: CatalogItem,
        images: Sequence[str],
        category: ContentCategory,
    ) -> ContentRecord:
        screenshots = _shuffled(images, self._rng)[: self.min_screenshots]
        return ContentRecord(
            id=item.id,
            primary_name=item.primary_name,
            secondary_name=item.secondary_name,
            poster_image=item.poster_image or screenshots[0],
            screenshots=tuple(screenshots),
            detail_url=self.provider.detail_url(item.id),
            category=category,
        )

    async def acquire(self, filters: ProviderFilters, category: ContentCategory) -> ContentRecord:
        for attempt in range(1, self.max_batch_retries + 1):
            page = self._random_page()
            candidates = await self.provider.discover_page(filters, page)
            if not candidates:
                logger.info(
                    "Empty %s page %s (batch %s/%s)",
                    self.provider.name,
                    page,
                    attempt,
                    self.max_batch_retries,
                )
                continue

            for item in _shuffled(candidates, self._rng):
                images = await self._usable_images(item)
                if len(images) >= self.min_screenshots:
                    return self._build_record(item, images, category)
                logger.debug(
                    "%s %s has only %s images, checking next",
                    self.provider.name,
                    item.id,
                    len(images),
                )

            logger.info(
                "No suitable %s title in batch %s/%s, retrying",
                category,
                attempt,
                self.max_batch_retries,
            )

        raise InsufficientContent(f"Failed to find {category} content with enough screenshots")
