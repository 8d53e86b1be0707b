"""Direct Google Maps endpoints (geocode, place details, walk time, autocomplete).

Unlike search and enrichment, these surface upstream failures to the caller.
"""

from fastapi import APIRouter, Depends

from shop_discovery.api.deps import (
    get_geocoder,
    get_maps_client,
    get_place_detail_cache,
    get_station_resolver,
)
from shop_discovery.core.errors import (
    BadRequestError,
    GoogleMapsError,
    MapsNotConfigured,
    NotFoundError,
)
from shop_discovery.schemas.place import (
    AutocompletePrediction,
    AutocompleteResponse,
    GeocodeResult,
    PlaceDetail,
    StationResult,
)
from shop_discovery.services.geocoder import Geocoder
from shop_discovery.services.google_maps import GoogleMapsClient
from shop_discovery.services.place_details import PlaceDetailCache
from shop_discovery.services.station import NearestStationResolver

router = APIRouter(tags=["maps"])


def _upstream_error(message: str, exc: GoogleMapsError) -> GoogleMapsError:
    return GoogleMapsError(message, status_code=exc.status_code, details=exc.details or exc.message)


def _parse_coordinate(value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise BadRequestError("Latitude and longitude must be numbers") from exc


@router.get("/geocode", response_model=GeocodeResult)
async def geocode(
    address: str | None = None,
    client: GoogleMapsClient = Depends(get_maps_client),
    geocoder: Geocoder = Depends(get_geocoder),
) -> GeocodeResult:
    """Convert an address into latitude/longitude and a formatted address."""
    if not address:
        raise BadRequestError("Address parameter is required")
    if not client.configured:
        raise MapsNotConfigured()
    try:
        result = await geocoder.geocode(address)
    except GoogleMapsError as exc:
        raise _upstream_error("Failed to geocode address", exc) from exc
    if result is None:
        raise NotFoundError("Could not geocode address")
    return result


@router.get("/placedetails", response_model=PlaceDetail)
async def place_details(
    place_id: str | None = None,
    client: GoogleMapsClient = Depends(get_maps_client),
    cache: PlaceDetailCache = Depends(get_place_detail_cache),
) -> PlaceDetail:
    """Place details, served from the shop row while fresh."""
    if not place_id:
        raise BadRequestError("Place ID is required")
    if not client.places_configured:
        raise MapsNotConfigured()
    try:
        return await cache.get_details(place_id)
    except GoogleMapsError as exc:
        raise _upstream_error("Failed to fetch place details", exc) from exc


@router.get("/walk-time", response_model=StationResult)
async def walk_time(
    lat: str | None = None,
    lng: str | None = None,
    client: GoogleMapsClient = Depends(get_maps_client),
    resolver: NearestStationResolver = Depends(get_station_resolver),
) -> StationResult:
    """Nearest station to a point and the walking minutes from it."""
    if not lat or not lng:
        raise BadRequestError("Latitude and longitude are required")
    latitude = _parse_coordinate(lat)
    longitude = _parse_coordinate(lng)
    if not client.configured:
        raise MapsNotConfigured()
    try:
        result = await resolver.nearest_station(latitude, longitude)
    except GoogleMapsError as exc:
        raise _upstream_error("Failed to fetch walking time", exc) from exc
    if result is None:
        raise NotFoundError("No nearby station or walking route found")
    return result


@router.get("/autocomplete", response_model=AutocompleteResponse)
async def autocomplete(
    input: str | None = None,
    client: GoogleMapsClient = Depends(get_maps_client),
) -> AutocompleteResponse:
    """Place predictions for a partial name, limited to the configured region."""
    if not input:
        raise BadRequestError("Input is required")
    if not client.places_configured:
        raise MapsNotConfigured()
    try:
        data = await client.autocomplete(input)
    except GoogleMapsError as exc:
        raise _upstream_error("Failed to fetch autocomplete suggestions", exc) from exc

    predictions = []
    for suggestion in data.get("suggestions") or []:
        prediction = suggestion.get("placePrediction")
        if not prediction or not prediction.get("placeId"):
            continue
        predictions.append(
            AutocompletePrediction(
                description=(prediction.get("text") or {}).get("text", ""),
                place_id=prediction["placeId"],
            )
        )
    return AutocompleteResponse(predictions=predictions)
