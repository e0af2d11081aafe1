from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

ContentCategory = Literal["anime", "movie", "tv"]

CATEGORIES: Tuple[ContentCategory, ...] = ("anime", "movie", "tv")

# Provider-agnostic filters: key -> str, number or list. A missing key means "no constraint".
FilterSet = Dict[str, Any]

FilterType = Literal[
    "button-multi",
    "button-single",
    "slider",
    "text",
    "number-range",
    "select",
    "dynamic-buttons",
]


class ContentRecord(BaseModel):
    """One playable title: names to guess plus the screenshots revealed per attempt."""

    model_config = ConfigDict(frozen=True)

    id: int
    primary_name: str = ""
    secondary_name: str = ""
    poster_image: str = ""
    screenshots: Tuple[str, ...] = ()
    detail_url: str
    category: ContentCategory

    @model_validator(mode="after")
    def _require_a_name(self) -> "ContentRecord":
        if not self.primary_name and not self.secondary_name:
            raise ValueError("A content record needs a primary or secondary name")
        return self

    @property
    def display_image(self) -> str:
        """First image shown to the player; the poster when there are no screenshots."""
        if self.screenshots:
            return self.screenshots[0]
        return self.poster_image


class SearchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    primary_name: str = ""
    secondary_name: str = ""
    preview_image: str = ""
    category: ContentCategory


class FilterOption(BaseModel):
    value: Union[str, int, float]
    label: str


class FilterDescriptor(BaseModel):
    id: str
    label: str
    type: FilterType
    options: List[FilterOption] = Field(default_factory=list)
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    placeholder: Optional[str] = None
    dynamic: bool = False


class DynamicOption(BaseModel):
    id: Union[int, str]
    label: str
