"""Schemas for Google Maps lookups (geocode, place details, stations)."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class BusinessHours(BaseModel):
    day: str
    time: str


class PlaceDetail(BaseModel):
    """Place fields sourced from Places API and cached on the shop row."""

    place_id: str
    name: Optional[str] = None
    price_range: Optional[str] = None
    business_hours_weekly: Optional[list[BusinessHours]] = None
    rating: Optional[float] = None
    phone_number: Optional[str] = None
    photo_url_api: Optional[str] = None
    types: Optional[list[str]] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    formatted_address: Optional[str] = None
    api_last_updated: Optional[datetime] = None


class GeocodeResult(BaseModel):
    latitude: float
    longitude: float
    formatted_address: Optional[str] = None


class StationResult(BaseModel):
    station_name: str = Field(..., description="Nearest station name")
    walk_time: int = Field(..., ge=0, description="Walking minutes from the station")


class AutocompletePrediction(BaseModel):
    description: str
    place_id: str


class AutocompleteResponse(BaseModel):
    predictions: list[AutocompletePrediction] = Field(default_factory=list)
