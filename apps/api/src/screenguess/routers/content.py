from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

from ..content import service as content_service
from ..content.models import (
    ContentCategory,
    ContentRecord,
    DynamicOption,
    FilterDescriptor,
    SearchResult,
)
from ..content.registry import get_registry
from ..services.errors import ContentError
from ..services.preferences import load_preferences

router = APIRouter()


class ContentResponse(BaseModel):
    content: ContentRecord
    display_image: str


class SuggestionsResponse(BaseModel):
    results: List[SearchResult] = Field(default_factory=list)


class VerifyAnswerPayload(BaseModel):
    answer: str = ""
    correct_id: int
    primary_name: str = ""
    secondary_name: str = ""
    selected_id: Optional[int] = None
    category: Optional[ContentCategory] = None


class VerifyAnswerResponse(BaseModel):
    correct: bool


class FilterPanelResponse(BaseModel):
    category: ContentCategory
    display_name: str
    title: str
    question_text: str
    placeholder: str
    view_details_text: str
    filters: List[FilterDescriptor]


class DynamicOptionsResponse(BaseModel):
    results: List[DynamicOption] = Field(default_factory=list)


def _resolve(request: Request, category: Optional[ContentCategory]) -> tuple[ContentCategory, dict]:
    preferences = load_preferences(request.cookies)
    resolved = category or preferences.category
    return resolved, preferences.filters_for(resolved)


@router.get("/random", response_model=ContentResponse)
async def random_content(
    request: Request,
    category: Optional[ContentCategory] = Query(default=None),
) -> ContentResponse:
    resolved, filters = _resolve(request, category)
    try:
        record = await content_service.fetch_random_content(resolved, filters)
    except ContentError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    return ContentResponse(content=record, display_image=record.display_image)


@router.get("/suggestions", response_model=SuggestionsResponse)
async def suggestions(
    request: Request,
    q: str = Query(default=""),
    category: Optional[ContentCategory] = Query(default=None),
) -> SuggestionsResponse:
    resolved, filters = _resolve(request, category)
    results = await content_service.search_suggestions(q, resolved, filters)
    return SuggestionsResponse(results=results)


@router.post("/verify", response_model=VerifyAnswerResponse)
async def verify(request: Request, payload: VerifyAnswerPayload) -> VerifyAnswerResponse:
    resolved, _ = _resolve(request, payload.category)
    correct = content_service.verify_answer(
        payload.answer,
        payload.correct_id,
        payload.primary_name,
        payload.secondary_name,
        selected_id=payload.selected_id,
        category=resolved,
    )
    return VerifyAnswerResponse(correct=correct)


@router.get("/filters", response_model=FilterPanelResponse)
async def filters(
    request: Request,
    category: Optional[ContentCategory] = Query(default=None),
) -> FilterPanelResponse:
    resolved, _ = _resolve(request, category)
    strategy = get_registry().get(resolved)
    return FilterPanelResponse(
        category=resolved,
        display_name=strategy.display_name,
        title=strategy.filter_panel_title,
        question_text=strategy.question_text,
        placeholder=strategy.placeholder,
        view_details_text=strategy.view_details_text,
        filters=strategy.describe_filters(),
    )


@router.get("/filters/{filter_id}/options", response_model=DynamicOptionsResponse)
async def filter_options(
    request: Request,
    filter_id: str,
    category: Optional[ContentCategory] = Query(default=None),
) -> DynamicOptionsResponse:
    resolved, _ = _resolve(request, category)
    results = await content_service.load_dynamic_options(resolved, filter_id)
    return DynamicOptionsResponse(results=results)
