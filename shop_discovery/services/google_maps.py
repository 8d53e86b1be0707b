"""Thin async client for the Google Maps Platform endpoints we use."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from shop_discovery.core.config import Settings, settings as default_settings
from shop_discovery.core.errors import (
    GoogleMapsError,
    GoogleMapsTimeout,
    MapsNotConfigured,
    PlaceDetailsError,
)

logger = logging.getLogger(__name__)

GEOCODING_API_URL = "https://maps.googleapis.com/maps/api/geocode/json"
DIRECTIONS_API_URL = "https://maps.googleapis.com/maps/api/directions/json"
PLACES_API_BASE = "https://places.googleapis.com/v1"
PLACES_AUTOCOMPLETE_URL = f"{PLACES_API_BASE}/places:autocomplete"
PLACES_NEARBY_SEARCH_URL = f"{PLACES_API_BASE}/places:searchNearby"

PLACE_DETAILS_FIELD_MASK = (
    "displayName,regularOpeningHours,rating,photos,internationalPhoneNumber,"
    "priceLevel,types,location,formattedAddress"
)
NEARBY_FIELD_MASK = "places.displayName,places.location"
PHOTO_MAX_HEIGHT_PX = 400


class GoogleMapsClient:
    """Wrapper around a single aiohttp session.

    The session is opened on first use (it must live inside the running
    event loop) and closed by `close()` at application shutdown.
    """

    def __init__(
        self,
        api_key: str | None,
        places_api_key: str | None = None,
        language: str = "ja",
        region: str = "jp",
        timeout: float = 10.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.api_key = api_key
        self.places_api_key = places_api_key or api_key
        self.language = language
        self.region = region
        self.timeout = timeout
        self._session = session

    @classmethod
    def from_settings(cls, config: Settings = default_settings) -> "GoogleMapsClient":
        return cls(
            api_key=config.google_maps_api_key,
            places_api_key=config.places_api_key,
            language=config.maps_language,
            region=config.maps_region,
            timeout=config.maps_timeout_seconds,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def places_configured(self) -> bool:
        return bool(self.places_api_key)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _request(
        self,
        operation: str,
        method: str,
        url: str,
        key: str | None,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> tuple[int, dict[str, Any]]:
        """Send one request and return (HTTP status, decoded JSON body)."""
        if not key:
            raise MapsNotConfigured()
        session = self._get_session()
        logger.debug("Google Maps %s: %s %s", operation, method, url)
        try:
            async with session.request(method, url, params=params, json=json, headers=headers) as response:
                try:
                    payload = await response.json(content_type=None)
                except ValueError:
                    payload = None
                if not isinstance(payload, dict):
                    raise GoogleMapsError(
                        f"{operation} returned a non-JSON response",
                        status_code=response.status if response.status >= 400 else 500,
                    )
                return response.status, payload
        except asyncio.TimeoutError as exc:
            raise GoogleMapsTimeout(operation, self.timeout) from exc
        except aiohttp.ClientError as exc:
            raise GoogleMapsError(f"{operation} request failed", details=str(exc)) from exc

    def _places_headers(self, field_mask: str | None = None) -> dict[str, str]:
        headers = {"X-Goog-Api-Key": self.places_api_key or ""}
        if field_mask:
            headers["X-Goog-FieldMask"] = field_mask
        return headers

    async def geocode(self, address: str) -> dict[str, Any]:
        """Geocoding API; the caller interprets `status` / `results`."""
        _, payload = await self._request(
            "geocode",
            "GET",
            GEOCODING_API_URL,
            self.api_key,
            params={"address": address, "language": self.language, "key": self.api_key},
        )
        return payload

    async def place_details(self, place_id: str) -> dict[str, Any]:
        """Places API (New) details.

        Errors are detected from the payload shape: an `error` object means
        failure regardless of the transport status.
        """
        _, payload = await self._request(
            "place_details",
            "GET",
            f"{PLACES_API_BASE}/places/{place_id}",
            self.places_api_key,
            params={"languageCode": self.language},
            headers=self._places_headers(PLACE_DETAILS_FIELD_MASK),
        )
        error = payload.get("error")
        if error:
            if not isinstance(error, dict):
                error = {"message": str(error)}
            raise PlaceDetailsError(
                error.get("message") or "Failed to fetch from Google Places API",
                status_code=error.get("code") or 500,
                details=error,
            )
        return payload

    def photo_media_url(self, photo_name: str) -> str:
        return (
            f"{PLACES_API_BASE}/{photo_name}/media"
            f"?maxHeightPx={PHOTO_MAX_HEIGHT_PX}&key={self.places_api_key}"
        )

    async def autocomplete(self, text: str) -> dict[str, Any]:
        status, payload = await self._request(
            "autocomplete",
            "POST",
            PLACES_AUTOCOMPLETE_URL,
            self.places_api_key,
            json={
                "input": text,
                "languageCode": self.language,
                "includedRegionCodes": [self.region],
            },
            headers=self._places_headers(),
        )
        if status >= 400:
            raise GoogleMapsError("Failed to fetch from Google API", status_code=status, details=payload)
        return payload

    async def search_nearby(
        self,
        latitude: float,
        longitude: float,
        included_types: list[str],
        radius: float,
        max_results: int,
    ) -> dict[str, Any]:
        status, payload = await self._request(
            "search_nearby",
            "POST",
            PLACES_NEARBY_SEARCH_URL,
            self.places_api_key,
            json={
                "languageCode": self.language,
                "includedTypes": included_types,
                "maxResultCount": max_results,
                "locationRestriction": {
                    "circle": {
                        "center": {"latitude": latitude, "longitude": longitude},
                        "radius": radius,
                    },
                },
            },
            headers=self._places_headers(NEARBY_FIELD_MASK),
        )
        if status >= 400:
            # 실패 응답은 "근처 역 없음"으로 취급
            logger.warning("Nearby search returned status=%s: %s", status, payload.get("error"))
            return {"places": []}
        return payload

    async def directions(
        self,
        origin: tuple[float, float],
        destination: tuple[float, float],
        mode: str = "walking",
    ) -> dict[str, Any]:
        """Directions API; the caller interprets `status` / `routes`."""
        _, payload = await self._request(
            "directions",
            "GET",
            DIRECTIONS_API_URL,
            self.api_key,
            params={
                "origin": f"{origin[0]},{origin[1]}",
                "destination": f"{destination[0]},{destination[1]}",
                "mode": mode,
                "language": self.language,
                "key": self.api_key,
            },
        )
        return payload
