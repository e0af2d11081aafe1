"""Entry points the game UI talks to.

Everything here resolves a category to its strategy and delegates. Only
``fetch_random_content`` can fail with a ``ContentError``; suggestions and
option lookups degrade to empty lists, and answer checks are pure.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from ..core.config import get_settings
from ..services.errors import Cancelled
from . import answers
from .models import (
    CATEGORIES,
    ContentCategory,
    ContentRecord,
    DynamicOption,
    FilterDescriptor,
    FilterSet,
    SearchResult,
)
from .registry import StrategyRegistry, get_registry

logger = logging.getLogger(__name__)


def coerce_category(value: Optional[str]) -> ContentCategory:
    """Map a stored preference to a category, falling back to the configured default."""
    if value in CATEGORIES:
        return value  # type: ignore[return-value]
    return get_settings().default_category


def _registry(registry: Optional[StrategyRegistry]) -> StrategyRegistry:
    return registry if registry is not None else get_registry()


async def fetch_random_content(
    category: Optional[str] = None,
    filters: Optional[FilterSet] = None,
    *,
    timeout: Optional[float] = None,
    registry: Optional[StrategyRegistry] = None,
) -> ContentRecord:
    strategy = _registry(registry).get(category if category is not None else coerce_category(None))
    limit = timeout if timeout is not None else get_settings().acquisition_timeout_seconds
    try:
        if limit is None:
            return await strategy.fetch_random(filters)
        return await asyncio.wait_for(strategy.fetch_random(filters), limit)
    except asyncio.TimeoutError as exc:
        logger.warning("Timed out acquiring %s content after %ss", strategy.category, limit)
        raise Cancelled() from exc


async def search_suggestions(
    query: str,
    category: Optional[str] = None,
    filters: Optional[FilterSet] = None,
    *,
    registry: Optional[StrategyRegistry] = None,
) -> List[SearchResult]:
    strategy = _registry(registry).get(category if category is not None else coerce_category(None))
    return await strategy.search(query, filters)


def verify_answer(
    user_answer: str,
    correct_id: int,
    primary_name: str,
    secondary_name: str,
    selected_id: Optional[int] = None,
    category: Optional[str] = None,
    *,
    registry: Optional[StrategyRegistry] = None,
) -> bool:
    """Judge a guess.

    Picking a suggestion decides by id alone; otherwise the free text is
    matched against the title's names.
    """
    by_selection = answers.verify_selection(correct_id, selected_id)
    if by_selection is not None:
        return by_selection
    strategy = _registry(registry).get(category if category is not None else coerce_category(None))
    return strategy.check_answer(user_answer, primary_name, secondary_name)


def describe_filters(
    category: Optional[str] = None,
    *,
    registry: Optional[StrategyRegistry] = None,
) -> List[FilterDescriptor]:
    return _registry(registry).get(category if category is not None else coerce_category(None)).describe_filters()


async def load_dynamic_options(
    category: str,
    filter_id: str,
    *,
    registry: Optional[StrategyRegistry] = None,
) -> List[DynamicOption]:
    return await _registry(registry).get(category).load_dynamic_options(filter_id)
