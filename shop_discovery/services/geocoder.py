"""Address text → coordinates via the Geocoding API."""

from __future__ import annotations

import logging

from shop_discovery.core.errors import GoogleMapsTimeout
from shop_discovery.schemas.place import GeocodeResult
from shop_discovery.services.google_maps import GoogleMapsClient

logger = logging.getLogger(__name__)


class Geocoder:
    def __init__(self, client: GoogleMapsClient) -> None:
        self._client = client

    async def geocode(self, address: str) -> GeocodeResult | None:
        """Resolve `address`; None when the provider has no match.

        One request, no retry. A timeout counts as "no match"; other upstream
        failures raise GoogleMapsError.
        """
        try:
            data = await self._client.geocode(address)
        except GoogleMapsTimeout:
            logger.warning("Geocoding timed out for address=%r", address)
            return None

        results = data.get("results") or []
        if data.get("status") != "OK" or not results:
            logger.warning(
                "Geocoding failed or no results for address=%r: status=%s message=%s",
                address,
                data.get("status"),
                data.get("error_message"),
            )
            return None

        first = results[0]
        location = (first.get("geometry") or {}).get("location") or {}
        if location.get("lat") is None or location.get("lng") is None:
            logger.warning("Geocoding result without location for address=%r", address)
            return None
        return GeocodeResult(
            latitude=float(location["lat"]),
            longitude=float(location["lng"]),
            formatted_address=first.get("formatted_address"),
        )
