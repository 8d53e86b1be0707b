"""Fill in a shop submission from geocoding, place details and transit data."""

from __future__ import annotations

import logging
from typing import Any, Generic, NamedTuple, TypeVar

from shop_discovery.schemas.place import GeocodeResult, PlaceDetail, StationResult
from shop_discovery.schemas.shop import (
    EnrichedShopPayload,
    EnrichmentStatus,
    GeocodeStatus,
    PlaceDetailStatus,
    ShopSubmission,
    StationStatus,
)
from shop_discovery.services.geocoder import Geocoder
from shop_discovery.services.place_details import PlaceDetailCache, categories_from_types
from shop_discovery.services.station import NearestStationResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StepResult(NamedTuple, Generic[T]):
    status: Any
    data: T | None = None


class EnrichmentOrchestrator:
    """Runs geocode → place detail → station; a failed step never stops the next.

    Each step returns a StepResult and contains its own errors, so the
    payload always carries whatever succeeded.
    """

    def __init__(
        self,
        geocoder: Geocoder,
        place_details: PlaceDetailCache,
        station_resolver: NearestStationResolver,
    ) -> None:
        self.geocoder = geocoder
        self.place_details = place_details
        self.station_resolver = station_resolver

    async def enrich(self, submission: ShopSubmission) -> EnrichedShopPayload:
        payload = EnrichedShopPayload(
            name=submission.name,
            location=submission.location,
            latitude=submission.latitude,
            longitude=submission.longitude,
            category=list(submission.categories),
            detailed_category=submission.detailed_category,
            comments=submission.comments,
            url=submission.url,
            place_id=submission.place_id,
        )
        status = EnrichmentStatus()

        geocoded = await self._geocode_step(submission)
        status.geocode = geocoded.status
        if geocoded.data is not None:
            payload.latitude = geocoded.data.latitude
            payload.longitude = geocoded.data.longitude
            payload.formatted_address = geocoded.data.formatted_address

        detailed = await self._place_detail_step(payload.place_id)
        status.place_detail = detailed.status
        if detailed.data is not None:
            self._apply_place_detail(payload, detailed.data)

        station = await self._station_step(payload.latitude, payload.longitude)
        status.station = station.status
        if station.data is not None:
            payload.nearest_station_name = station.data.station_name
            payload.walk_time_from_station = station.data.walk_time

        if not payload.detailed_category and payload.category:
            payload.detailed_category = ",".join(payload.category)
        payload.photo_url = submission.photo_url or payload.photo_url_api
        payload.status = status
        logger.info(
            "Enriched shop name=%r geocode=%s place_detail=%s station=%s",
            payload.name,
            status.geocode.value,
            status.place_detail.value,
            status.station.value,
        )
        return payload

    async def _geocode_step(self, submission: ShopSubmission) -> StepResult[GeocodeResult]:
        if submission.latitude is not None and submission.longitude is not None:
            return StepResult(GeocodeStatus.PROVIDED)
        # autocomplete로 place_id를 받았다면 주소 geocoding은 생략
        if submission.place_id or not submission.location:
            return StepResult(GeocodeStatus.SKIPPED)
        try:
            result = await self.geocoder.geocode(submission.location)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Geocoding failed for location=%r: %s", submission.location, exc)
            return StepResult(GeocodeStatus.FAILED)
        if result is None:
            return StepResult(GeocodeStatus.NOT_FOUND)
        return StepResult(GeocodeStatus.RESOLVED, result)

    async def _place_detail_step(self, place_id: str | None) -> StepResult[PlaceDetail]:
        if not place_id:
            return StepResult(PlaceDetailStatus.SKIPPED)
        try:
            detail, cache_hit = await self.place_details.lookup(place_id)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Place details failed for place_id=%s: %s", place_id, exc)
            return StepResult(PlaceDetailStatus.FAILED)
        return StepResult(PlaceDetailStatus.CACHED if cache_hit else PlaceDetailStatus.FRESH, detail)

    async def _station_step(self, latitude: float | None, longitude: float | None) -> StepResult[StationResult]:
        if latitude is None or longitude is None:
            return StepResult(StationStatus.SKIPPED)
        try:
            result = await self.station_resolver.nearest_station(latitude, longitude)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Station lookup failed at (%s, %s): %s", latitude, longitude, exc)
            return StepResult(StationStatus.FAILED)
        if result is None:
            return StepResult(StationStatus.NOT_FOUND)
        return StepResult(StationStatus.RESOLVED, result)

    @staticmethod
    def _apply_place_detail(payload: EnrichedShopPayload, detail: PlaceDetail) -> None:
        payload.price_range = detail.price_range
        payload.business_hours_weekly = detail.business_hours_weekly
        payload.api_rating = detail.rating
        payload.phone_number = detail.phone_number
        payload.photo_url_api = detail.photo_url_api
        payload.types = detail.types
        payload.api_last_updated = detail.api_last_updated
        if payload.latitude is None or payload.longitude is None:
            payload.latitude = detail.latitude
            payload.longitude = detail.longitude
        if not payload.formatted_address:
            payload.formatted_address = detail.formatted_address
        if not payload.category:
            payload.category = categories_from_types(detail.types)
