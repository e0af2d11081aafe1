from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .content.registry import get_registry
from .core.config import settings
from .routers import content, health


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="ScreenGuess API", version="0.1.0")

    origins = list(settings.cors_origins or ["*"])
    if settings.frontend_base_url:
        frontend_origin = str(settings.frontend_base_url).rstrip("/")
        if frontend_origin not in origins:
            origins.append(frontend_origin)
    allow_origins = ["*"] if "*" in origins else origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(content.router, prefix="/content", tags=["content"])

    return app


app = create_app()


@app.on_event("startup")
async def build_strategies() -> None:
    try:
        strategies = get_registry().all()
    except Exception as exc:
        logger.warning("Failed to build content strategies: %s", exc)
        return
    logger.info(
        "Content strategies ready: %s",
        ", ".join(f"{strategy.category}={strategy.provider.name}" for strategy in strategies),
    )
