"""Request-scoped dependencies shared by the endpoints."""

from __future__ import annotations

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from shop_discovery.core.config import settings
from shop_discovery.core.errors import ApiError, AuthenticationRequired
from shop_discovery.db.session import get_db
from shop_discovery.services.enrichment import EnrichmentOrchestrator
from shop_discovery.services.geocoder import Geocoder
from shop_discovery.services.google_maps import GoogleMapsClient
from shop_discovery.services.place_details import PlaceDetailCache
from shop_discovery.services.station import NearestStationResolver
from utils.s3_storage import S3StorageManager


def get_maps_client(request: Request) -> GoogleMapsClient:
    """Process-wide Maps client, created on first use and closed at shutdown."""
    client = getattr(request.app.state, "maps_client", None)
    if client is None:
        client = GoogleMapsClient.from_settings(settings)
        request.app.state.maps_client = client
    return client


def get_current_user_id(x_user_id: str | None = Header(None)) -> str | None:
    """Caller id forwarded by the auth gateway; None for anonymous callers."""
    if x_user_id is None:
        return None
    return x_user_id.strip() or None


def require_user_id(user_id: str | None = Depends(get_current_user_id)) -> str:
    if not user_id:
        raise AuthenticationRequired()
    return user_id


def get_geocoder(client: GoogleMapsClient = Depends(get_maps_client)) -> Geocoder:
    return Geocoder(client)


def get_place_detail_cache(
    db: Session = Depends(get_db),
    client: GoogleMapsClient = Depends(get_maps_client),
) -> PlaceDetailCache:
    return PlaceDetailCache(db, client)


def get_station_resolver(client: GoogleMapsClient = Depends(get_maps_client)) -> NearestStationResolver:
    return NearestStationResolver(client)


def get_orchestrator(
    geocoder: Geocoder = Depends(get_geocoder),
    place_details: PlaceDetailCache = Depends(get_place_detail_cache),
    station_resolver: NearestStationResolver = Depends(get_station_resolver),
) -> EnrichmentOrchestrator:
    return EnrichmentOrchestrator(geocoder, place_details, station_resolver)


def get_photo_storage() -> S3StorageManager:
    if not settings.s3_bucket_name:
        raise ApiError("Photo storage is not configured")
    return S3StorageManager(
        bucket_name=settings.s3_bucket_name,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
        region=settings.aws_region,
        public_base_url=settings.s3_public_base_url,
    )
