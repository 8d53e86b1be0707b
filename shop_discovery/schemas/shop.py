"""Pydantic schemas for shops."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from shop_discovery.schemas.place import BusinessHours


class ShopBase(BaseModel):
    id: str = Field(..., description="Unique shop identifier")
    name: str
    location: Optional[str] = None
    formatted_address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    category: list[str] = Field(default_factory=list)
    detailed_category: Optional[str] = None
    comments: Optional[str] = None
    url: Optional[str] = None
    place_id: Optional[str] = None
    price_range: Optional[str] = None
    business_hours_weekly: Optional[list[BusinessHours]] = None
    phone_number: Optional[str] = None
    photo_url: Optional[str] = None
    api_last_updated: Optional[datetime] = None
    nearest_station_name: Optional[str] = None
    walk_time_from_station: Optional[int] = None
    user_id: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("category", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []


class ShopOut(ShopBase):
    pass


class ShopResult(ShopBase):
    """A search hit: shop fields plus aggregates and the poster's profile."""

    like_count: int = 0
    liked: bool = False
    rating: float = 0.0
    review_count: int = 0
    username: Optional[str] = None
    avatar_url: Optional[str] = None


class ShopSubmission(BaseModel):
    """What the submit form sends; everything else is filled by enrichment."""

    name: str = Field(..., min_length=1, max_length=255)
    location: Optional[str] = Field(None, description="주소 텍스트 (geocoding 대상)")
    place_id: Optional[str] = Field(None, description="Autocomplete에서 선택한 place id")
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    categories: list[str] = Field(default_factory=list)
    detailed_category: Optional[str] = None
    comments: Optional[str] = None
    url: Optional[str] = None
    photo_url: Optional[str] = Field(None, description="업로드한 사진 URL (없으면 API 사진 사용)")


class ShopUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    categories: Optional[list[str]] = None
    detailed_category: Optional[str] = None
    comments: Optional[str] = None
    url: Optional[str] = None
    photo_url: Optional[str] = None
    re_enrich: bool = False

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v):
        # 생략은 허용, 명시적 null은 거부
        if v is None:
            raise ValueError("name cannot be null")
        return v


class GeocodeStatus(str, Enum):
    PROVIDED = "provided"
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    SKIPPED = "skipped"


class PlaceDetailStatus(str, Enum):
    FRESH = "fresh"
    CACHED = "cached"
    FAILED = "failed"
    SKIPPED = "skipped"


class StationStatus(str, Enum):
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    SKIPPED = "skipped"


class EnrichmentStatus(BaseModel):
    geocode: GeocodeStatus = GeocodeStatus.SKIPPED
    place_detail: PlaceDetailStatus = PlaceDetailStatus.SKIPPED
    station: StationStatus = StationStatus.SKIPPED


class EnrichedShopPayload(BaseModel):
    """Submission plus whatever enrichment managed to resolve."""

    name: str
    location: Optional[str] = None
    formatted_address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    category: list[str] = Field(default_factory=list)
    detailed_category: Optional[str] = None
    comments: Optional[str] = None
    url: Optional[str] = None
    place_id: Optional[str] = None
    price_range: Optional[str] = None
    business_hours_weekly: Optional[list[BusinessHours]] = None
    api_rating: Optional[float] = None
    phone_number: Optional[str] = None
    photo_url: Optional[str] = None
    photo_url_api: Optional[str] = None
    types: Optional[list[str]] = None
    api_last_updated: Optional[datetime] = None
    nearest_station_name: Optional[str] = None
    walk_time_from_station: Optional[int] = None
    status: EnrichmentStatus = Field(default_factory=EnrichmentStatus)


class ShopCreated(BaseModel):
    shop: ShopOut
    enrichment: EnrichmentStatus


class LikeStatus(BaseModel):
    shop_id: str
    liked: bool
    like_count: int


class PhotoUploadResponse(BaseModel):
    photo_url: str
