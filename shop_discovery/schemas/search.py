"""Schemas for shop search."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SortBy(str, Enum):
    CREATED_AT_ASC = "created_at.asc"
    CREATED_AT_DESC = "created_at.desc"
    LIKES_DESC = "likes.desc"


class SearchFilters(BaseModel):
    keyword: Optional[str] = Field(None, description="name/카테고리/comments/station 부분 일치")
    location_keyword: Optional[str] = Field(None, description="location/formatted_address 부분 일치")
    category: Optional[list[str]] = Field(None, description="하나라도 겹치면 매칭 (OR)")
    search_lat: Optional[float] = Field(None, ge=-90, le=90)
    search_lng: Optional[float] = Field(None, ge=-180, le=180)
    search_radius: Optional[float] = Field(None, gt=0, description="meters; 기본 1000")
    sort_by: SortBy = SortBy.CREATED_AT_DESC
    limit: Optional[int] = Field(None, ge=1, le=200)
    offset: int = Field(0, ge=0)

    @property
    def has_geo_center(self) -> bool:
        return self.search_lat is not None and self.search_lng is not None
