from __future__ import annotations

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration derived from environment variables."""

    api_port: int = Field(default=8000, alias="API_PORT")
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"], alias="CORS_ORIGINS")
    frontend_base_url: Optional[HttpUrl] = Field(default=None, alias="FRONTEND_BASE_URL")

    redis_url: Optional[str] = Field(default=None, alias="REDIS_URL")

    shikimori_base_url: str = Field(default="https://shikimori.one/api", alias="SHIKIMORI_BASE_URL")
    shikimori_user_agent: str = Field(default="screenguess", alias="SHIKIMORI_USER_AGENT")
    shikimori_rate_limit_ms: int = Field(default=1000, alias="SHIKIMORI_RATE_LIMIT_MS")

    tmdb_api_key: Optional[str] = Field(default=None, alias="TMDB_API_KEY")
    tmdb_base_url: str = Field(default="https://api.themoviedb.org/3", alias="TMDB_BASE_URL")
    tmdb_image_base_url: str = Field(default="https://image.tmdb.org/t/p", alias="TMDB_IMAGE_BASE_URL")
    tmdb_rate_limit_ms: int = Field(default=50, alias="TMDB_RATE_LIMIT_MS")

    kinopoisk_api_key: Optional[str] = Field(default=None, alias="KINOPOISK_API_KEY")
    kinopoisk_base_url: str = Field(default="https://kinopoiskapiunofficial.tech", alias="KINOPOISK_BASE_URL")
    kinopoisk_rate_limit_ms: int = Field(default=50, alias="KINOPOISK_RATE_LIMIT_MS")

    provider_cache_ttl_seconds: int = Field(default=3600, alias="PROVIDER_CACHE_TTL_SECONDS")
    http_timeout_seconds: float = Field(default=20.0, alias="HTTP_TIMEOUT_SECONDS")
    acquisition_timeout_seconds: Optional[float] = Field(default=120.0, alias="ACQUISITION_TIMEOUT_SECONDS")

    movie_provider: Literal["kinopoisk", "tmdb"] = Field(default="kinopoisk", alias="MOVIE_PROVIDER")
    tv_provider: Literal["kinopoisk", "tmdb"] = Field(default="kinopoisk", alias="TV_PROVIDER")
    default_category: Literal["anime", "movie", "tv"] = Field(default="anime", alias="DEFAULT_CATEGORY")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
