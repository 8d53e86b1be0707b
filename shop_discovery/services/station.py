"""Nearest station and walking time for a coordinate."""

from __future__ import annotations

import logging
import math
from typing import Any

from shop_discovery.core.config import settings
from shop_discovery.core.errors import GoogleMapsTimeout
from shop_discovery.schemas.place import StationResult
from shop_discovery.services.google_maps import GoogleMapsClient

logger = logging.getLogger(__name__)

STATION_TYPES = ["train_station", "subway_station"]


def walk_minutes(duration_seconds: float) -> int:
    """Round a walking duration up to whole minutes (61s -> 2)."""
    return math.ceil(duration_seconds / 60)


def pick_closest(candidates: list[dict[str, Any]], latitude: float, longitude: float) -> dict[str, Any] | None:
    """Return the candidate with the smallest squared lat/lng difference.

    Planar approximation, not geodesic distance. Good enough inside the 2 km
    search circle; it over-weights longitude at high latitudes.
    """
    best: dict[str, Any] | None = None
    best_distance = math.inf
    for place in candidates:
        location = place.get("location") or {}
        lat = location.get("latitude")
        lng = location.get("longitude")
        if lat is None or lng is None:
            continue
        distance = (lat - latitude) ** 2 + (lng - longitude) ** 2
        if distance < best_distance:
            best, best_distance = place, distance
    return best


def _display_name(place: dict[str, Any]) -> str | None:
    name = place.get("displayName")
    if isinstance(name, dict):
        return name.get("text")
    return name


class NearestStationResolver:
    def __init__(
        self,
        client: GoogleMapsClient,
        radius: float = settings.station_search_radius,
        max_results: int = settings.station_max_results,
    ) -> None:
        self._client = client
        self.radius = radius
        self.max_results = max_results

    async def nearest_station(self, latitude: float, longitude: float) -> StationResult | None:
        """Closest station within the search radius and the walk time from it.

        None when there is no candidate, the directions lookup fails or any
        call times out.
        """
        try:
            nearby = await self._client.search_nearby(
                latitude,
                longitude,
                included_types=STATION_TYPES,
                radius=self.radius,
                max_results=self.max_results,
            )
        except GoogleMapsTimeout:
            logger.warning("Nearby station search timed out at (%s, %s)", latitude, longitude)
            return None

        station = pick_closest(nearby.get("places") or [], latitude, longitude)
        if station is None:
            logger.info("No nearby stations found at (%s, %s)", latitude, longitude)
            return None
        station_name = _display_name(station)
        location = station["location"]

        try:
            directions = await self._client.directions(
                origin=(location["latitude"], location["longitude"]),
                destination=(latitude, longitude),
                mode="walking",
            )
        except GoogleMapsTimeout:
            logger.warning("Directions timed out from station=%s", station_name)
            return None

        routes = directions.get("routes") or []
        if directions.get("status") != "OK" or not routes:
            logger.warning(
                "Could not calculate walking directions from station=%s: status=%s",
                station_name,
                directions.get("status"),
            )
            return None
        legs = routes[0].get("legs") or []
        duration = (legs[0].get("duration") or {}).get("value") if legs else None
        if duration is None:
            logger.warning("Directions route without leg duration from station=%s", station_name)
            return None

        minutes = walk_minutes(duration)
        logger.info("Nearest station=%s walk=%s min", station_name, minutes)
        return StationResult(station_name=station_name or "", walk_time=minutes)
