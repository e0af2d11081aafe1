from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional

import httpx

from ..core.config import Settings, get_settings
from ..services.cache import ResponseCache, get_cache
from ..services.catalog import ProviderClient
from ..services.errors import UnknownCategory
from ..services.kinopoisk import KinopoiskClient
from ..services.shikimori import ShikimoriClient
from ..services.tmdb import TMDBClient, auth_options
from ..services.transport import ProviderConfig, ProviderTransport
from .engine import AcquisitionEngine
from .models import CATEGORIES, ContentCategory
from .strategies import STRATEGY_FACTORIES, ContentStrategy

logger = logging.getLogger(__name__)


class StrategyRegistry:
    """Resolves a category to its strategy, building each one at most once.

    Transports are memoized per provider rather than per category, so movie
    and TV lookups against the same provider share a single rate limiter.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        cache: Optional[ResponseCache] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._cache = cache
        self._http_transport = http_transport
        self._rng = rng
        self._transports: Dict[str, ProviderTransport] = {}
        self._clients: Dict[str, ProviderClient] = {}
        self._strategies: Dict[ContentCategory, ContentStrategy] = {}

    def provider_for(self, category: ContentCategory) -> str:
        if category == "anime":
            return "shikimori"
        if category == "movie":
            return self.settings.movie_provider
        return self.settings.tv_provider

    def _provider_config(self, provider: str) -> ProviderConfig:
        settings = self.settings
        ttl = settings.provider_cache_ttl_seconds
        timeout = settings.http_timeout_seconds
        if provider == "shikimori":
            return ProviderConfig(
                name=provider,
                base_url=settings.shikimori_base_url,
                min_interval=settings.shikimori_rate_limit_ms / 1000,
                cache_ttl=ttl,
                timeout=timeout,
                headers={"User-Agent": settings.shikimori_user_agent, "Accept": "application/json"},
            )
        if provider == "tmdb":
            if not settings.tmdb_api_key:
                logger.warning("TMDB_API_KEY is not set; TMDB requests will be rejected")
            headers, params = auth_options(settings.tmdb_api_key or "")
            return ProviderConfig(
                name=provider,
                base_url=settings.tmdb_base_url,
                min_interval=settings.tmdb_rate_limit_ms / 1000,
                cache_ttl=ttl,
                timeout=timeout,
                headers=headers,
                params=params,
            )
        if provider == "kinopoisk":
            if not settings.kinopoisk_api_key:
                logger.warning("KINOPOISK_API_KEY is not set; Kinopoisk requests will be rejected")
            return ProviderConfig(
                name=provider,
                base_url=settings.kinopoisk_base_url,
                min_interval=settings.kinopoisk_rate_limit_ms / 1000,
                cache_ttl=ttl,
                timeout=timeout,
                headers={"X-API-KEY": settings.kinopoisk_api_key or "", "Accept": "application/json"},
            )
        raise ValueError(f"Unsupported content provider: {provider}")

    def transport(self, provider: str) -> ProviderTransport:
        existing = self._transports.get(provider)
        if existing is not None:
            return existing
        cache = self._cache if self._cache is not None else get_cache(self.settings.redis_url)
        transport = ProviderTransport(
            self._provider_config(provider),
            cache=cache,
            http_transport=self._http_transport,
        )
        self._transports[provider] = transport
        return transport

    def client(self, category: ContentCategory) -> ProviderClient:
        provider = self.provider_for(category)
        # TMDB paths are per media type; Kinopoisk carries the film/series split in its filters.
        key = f"{provider}:{category}" if provider == "tmdb" else provider
        existing = self._clients.get(key)
        if existing is not None:
            return existing

        transport = self.transport(provider)
        client: ProviderClient
        if provider == "shikimori":
            client = ShikimoriClient(transport)
        elif provider == "tmdb":
            media_type = "tv" if category == "tv" else "movie"
            client = TMDBClient(transport, media_type, image_base_url=self.settings.tmdb_image_base_url)
        else:
            client = KinopoiskClient(transport)
        self._clients[key] = client
        return client

    def get(self, category: object) -> ContentStrategy:
        if category not in CATEGORIES:
            raise UnknownCategory(category)
        existing = self._strategies.get(category)  # type: ignore[arg-type]
        if existing is not None:
            return existing

        client = self.client(category)  # type: ignore[arg-type]
        engine = AcquisitionEngine(client, rng=self._rng)
        strategy = STRATEGY_FACTORIES[category](client, engine)  # type: ignore[index]
        self._strategies[category] = strategy  # type: ignore[index]
        logger.debug("Built %s strategy backed by %s", category, client.name)
        return strategy

    def all(self) -> List[ContentStrategy]:
        return [self.get(category) for category in CATEGORIES]


_registry: StrategyRegistry | None = None


def get_registry() -> StrategyRegistry:
    global _registry
    if _registry is None:
        _registry = StrategyRegistry()
    return _registry


def get_strategy(category: object) -> ContentStrategy:
    return get_registry().get(category)
