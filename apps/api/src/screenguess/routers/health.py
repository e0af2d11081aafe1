from __future__ import annotations

from fastapi import APIRouter

from ..content.models import CATEGORIES
from ..content.registry import get_registry

router = APIRouter()


@router.get("/live", response_model=dict)
async def live() -> dict:
    return {"ok": True}


@router.get("/providers", response_model=dict)
async def providers() -> dict:
    registry = get_registry()
    return {category: registry.provider_for(category) for category in CATEGORIES}
