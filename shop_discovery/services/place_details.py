"""Place details with a freshness-window cache stored on the shop row."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from shop_discovery.core.config import settings
from shop_discovery.models.shop import Shop
from shop_discovery.schemas.place import BusinessHours, PlaceDetail
from shop_discovery.services.google_maps import GoogleMapsClient

logger = logging.getLogger(__name__)

PRICE_LEVEL_MAP = {
    "PRICE_LEVEL_FREE": "無料",
    "PRICE_LEVEL_INEXPENSIVE": "¥",
    "PRICE_LEVEL_MODERATE": "¥¥",
    "PRICE_LEVEL_EXPENSIVE": "¥¥¥",
    "PRICE_LEVEL_VERY_EXPENSIVE": "¥¥¥¥",
}

# Places API types → 앱 카테고리 (모르는 type은 버림)
GOOGLE_TYPE_CATEGORY_MAP = {
    "ramen_restaurant": "ラーメン",
    "sushi_restaurant": "寿司",
    "cafe": "カフェ",
    "coffee_shop": "カフェ",
    "japanese_restaurant": "和食",
    "italian_restaurant": "イタリアン",
    "pizza_restaurant": "イタリアン",
    "chinese_restaurant": "中華",
    "french_restaurant": "フレンチ",
    "fast_food_restaurant": "ファストフード",
    "hamburger_restaurant": "ファストフード",
    "japanese_izakaya_restaurant": "居酒屋",
    "bar": "バー",
    "wine_bar": "バー",
    "dessert_shop": "スイーツ",
    "confectionery": "スイーツ",
    "bakery": "ベーカリー",
}

_DAY_SEPARATOR = re.compile(r"[：:]")


def price_range_from_level(level: str | None) -> str | None:
    """Map a Places `priceLevel` enum to its display symbol; unknown → None."""
    if not level:
        return None
    return PRICE_LEVEL_MAP.get(level)


def parse_weekday_descriptions(descriptions: list[str] | None) -> list[BusinessHours] | None:
    """["月曜日: 11時00分～22時00分", ...] → [{day, time}, ...]; None when empty."""
    hours = []
    for text in descriptions or []:
        parts = _DAY_SEPARATOR.split(text, maxsplit=1)
        day = parts[0].strip()
        time = parts[1].strip() if len(parts) > 1 else ""
        hours.append(BusinessHours(day=day, time=time))
    return hours or None


def categories_from_types(types: list[str] | None) -> list[str]:
    """Translate Places types into app categories, keeping first-seen order."""
    categories: list[str] = []
    for place_type in types or []:
        category = GOOGLE_TYPE_CATEGORY_MAP.get(place_type)
        if category and category not in categories:
            categories.append(category)
    return categories


def _as_utc(value: datetime) -> datetime:
    # SQLite는 tzinfo를 버리므로 naive 값은 UTC로 간주
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class PlaceDetailCache:
    """Read-through cache for Places API details keyed by place id."""

    def __init__(
        self,
        db: Session,
        client: GoogleMapsClient,
        freshness: timedelta = timedelta(hours=settings.place_details_cache_hours),
    ) -> None:
        self._db = db
        self._client = client
        self.freshness = freshness

    async def get_details(self, place_id: str) -> PlaceDetail:
        detail, _ = await self.lookup(place_id)
        return detail

    async def lookup(self, place_id: str) -> tuple[PlaceDetail, bool]:
        """Return (detail, cache_hit). Upstream failures raise GoogleMapsError.

        Session I/O runs in the threadpool so the event loop stays free.
        """
        cached = await run_in_threadpool(self._cached, place_id)
        if cached is not None:
            logger.info("Returning cached data for place_id=%s", place_id)
            return cached, True

        logger.info("Fetching fresh data from Google Places API for place_id=%s", place_id)
        payload = await self._client.place_details(place_id)
        detail = self._map_payload(place_id, payload)
        await run_in_threadpool(self._store, detail)
        return detail, False

    def _find_row(self, place_id: str) -> Shop | None:
        return self._db.query(Shop).filter(Shop.place_id == place_id).first()

    def _cached(self, place_id: str) -> PlaceDetail | None:
        try:
            shop = self._find_row(place_id)
        except SQLAlchemyError:
            logger.exception("Cache lookup failed for place_id=%s", place_id)
            self._db.rollback()
            return None
        if shop is None or shop.api_last_updated is None:
            return None
        # 미래 시각도 stale 처리
        age = abs(datetime.now(timezone.utc) - _as_utc(shop.api_last_updated))
        if age >= self.freshness:
            return None
        return PlaceDetail(
            place_id=place_id,
            name=shop.name,
            price_range=shop.price_range,
            business_hours_weekly=shop.business_hours_weekly,
            rating=shop.api_rating,
            phone_number=shop.phone_number,
            photo_url_api=shop.photo_url_api,
            types=shop.types,
            latitude=shop.latitude,
            longitude=shop.longitude,
            formatted_address=shop.formatted_address,
            api_last_updated=_as_utc(shop.api_last_updated),
        )

    def _map_payload(self, place_id: str, result: dict[str, Any]) -> PlaceDetail:
        display_name = result.get("displayName")
        name = display_name.get("text") if isinstance(display_name, dict) else display_name

        photos = result.get("photos") or []
        photo_url = self._client.photo_media_url(photos[0]["name"]) if photos and photos[0].get("name") else None

        location = result.get("location") or {}
        return PlaceDetail(
            place_id=place_id,
            name=name,
            price_range=price_range_from_level(result.get("priceLevel")),
            business_hours_weekly=parse_weekday_descriptions(
                (result.get("regularOpeningHours") or {}).get("weekdayDescriptions")
            ),
            rating=result.get("rating"),
            phone_number=result.get("internationalPhoneNumber"),
            photo_url_api=photo_url,
            types=result.get("types") or None,
            latitude=location.get("latitude"),
            longitude=location.get("longitude"),
            formatted_address=result.get("formattedAddress"),
            api_last_updated=datetime.now(timezone.utc),
        )

    def _store(self, detail: PlaceDetail) -> None:
        """Upsert the provider fields onto the shop row for this place id.

        Write failures are logged and rolled back; the caller still gets the
        fresh detail.
        """
        hours = [h.model_dump() for h in detail.business_hours_weekly] if detail.business_hours_weekly else None
        try:
            shop = self._find_row(detail.place_id)
            if shop is None:
                # 아직 아무도 등록하지 않은 장소: 소유자 없는 캐시 행
                shop = Shop(place_id=detail.place_id, name=detail.name or detail.place_id)
                self._db.add(shop)
            shop.price_range = detail.price_range
            shop.business_hours_weekly = hours
            shop.api_rating = detail.rating
            shop.phone_number = detail.phone_number
            shop.photo_url_api = detail.photo_url_api
            shop.types = detail.types
            shop.api_last_updated = detail.api_last_updated
            if shop.latitude is None and shop.longitude is None:
                shop.latitude = detail.latitude
                shop.longitude = detail.longitude
            if not shop.formatted_address:
                shop.formatted_address = detail.formatted_address
            self._db.commit()
        except IntegrityError:
            # 동시에 같은 place_id를 갱신한 경우: 다른 쪽 결과가 남으면 충분
            self._db.rollback()
            logger.info("Concurrent cache refresh for place_id=%s; keeping the other write", detail.place_id)
        except SQLAlchemyError:
            self._db.rollback()
            logger.exception("Error upserting shop data for place_id=%s", detail.place_id)
