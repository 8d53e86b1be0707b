"""Shared fixtures: in-memory SQLite, a fake Maps client and an API client."""

import os

# settings는 import 시점에 env를 읽으므로 가장 먼저 설정
os.environ.setdefault("DATABASE_URL", "sqlite://")

from collections import defaultdict
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shop_discovery.db.init_db import init_db
from shop_discovery.models import Like, Profile, Rating, Review, Shop

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeMapsClient:
    """Stands in for GoogleMapsClient; responses may be dicts, exceptions or callables."""

    def __init__(
        self,
        geocode=None,
        place_details=None,
        nearby=None,
        directions=None,
        autocomplete=None,
        api_key="test-key",
    ):
        self.api_key = api_key
        self.places_api_key = api_key
        self.responses = {
            "geocode": geocode if geocode is not None else {"status": "ZERO_RESULTS", "results": []},
            "place_details": place_details if place_details is not None else {},
            "search_nearby": nearby if nearby is not None else {"places": []},
            "directions": directions if directions is not None else {"status": "ZERO_RESULTS", "routes": []},
            "autocomplete": autocomplete if autocomplete is not None else {"suggestions": []},
        }
        self.calls = defaultdict(list)

    @property
    def configured(self):
        return bool(self.api_key)

    @property
    def places_configured(self):
        return bool(self.places_api_key)

    def _respond(self, operation, *args, **kwargs):
        self.calls[operation].append((args, kwargs))
        response = self.responses[operation]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(*args, **kwargs)
        return response

    async def geocode(self, address):
        return self._respond("geocode", address)

    async def place_details(self, place_id):
        return self._respond("place_details", place_id)

    async def search_nearby(self, latitude, longitude, included_types, radius, max_results):
        return self._respond(
            "search_nearby",
            latitude,
            longitude,
            included_types=included_types,
            radius=radius,
            max_results=max_results,
        )

    async def directions(self, origin, destination, mode="walking"):
        return self._respond("directions", origin=origin, destination=destination, mode=mode)

    async def autocomplete(self, text):
        return self._respond("autocomplete", text)

    def photo_media_url(self, photo_name):
        return f"https://places.googleapis.com/v1/{photo_name}/media?maxHeightPx=400&key={self.places_api_key}"


def geocode_ok(lat=35.6812, lng=139.7671, formatted="日本、〒100-0005 東京都千代田区丸の内1丁目"):
    return {
        "status": "OK",
        "results": [
            {
                "formatted_address": formatted,
                "geometry": {"location": {"lat": lat, "lng": lng}},
                "place_id": "ChIJ-geocoded",
            }
        ],
    }


def nearby_stations(*stations):
    """stations: (name, lat, lng) tuples."""
    return {
        "places": [
            {"displayName": {"text": name, "languageCode": "ja"}, "location": {"latitude": lat, "longitude": lng}}
            for name, lat, lng in stations
        ]
    }


def directions_ok(seconds):
    return {"status": "OK", "routes": [{"legs": [{"duration": {"value": seconds, "text": "x"}}]}]}


PLACE_DETAILS_PAYLOAD = {
    "displayName": {"text": "喫茶ヒナタ", "languageCode": "ja"},
    "regularOpeningHours": {
        "weekdayDescriptions": [
            "月曜日: 8時00分～18時00分",
            "火曜日: 定休日",
        ]
    },
    "rating": 4.3,
    "photos": [{"name": "places/ChIJhinata/photos/abc123"}],
    "internationalPhoneNumber": "+81 3-1234-5678",
    "priceLevel": "PRICE_LEVEL_MODERATE",
    "types": ["cafe", "point_of_interest", "establishment"],
    "location": {"latitude": 35.6586, "longitude": 139.7454},
    "formattedAddress": "日本、〒105-0011 東京都港区芝公園4丁目2-8",
}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_maps():
    return FakeMapsClient()


@pytest.fixture
def make_shop(db):
    """Insert a posted shop; `minutes` offsets created_at from BASE_TIME."""
    counter = {"n": 0}

    def _make(name="Shop", user_id="owner-1", minutes=None, categories=None, **fields):
        counter["n"] += 1
        if user_id is not None and db.get(Profile, user_id) is None:
            db.add(Profile(id=user_id, username=f"user-{user_id}", avatar_url=f"https://avatars.example/{user_id}.png"))
        shop = Shop(
            name=name,
            user_id=user_id,
            created_at=BASE_TIME + timedelta(minutes=minutes if minutes is not None else counter["n"]),
            **fields,
        )
        shop.set_categories(categories)
        db.add(shop)
        db.commit()
        db.refresh(shop)
        return shop

    return _make


@pytest.fixture
def add_likes(db):
    def _add(shop, *user_ids):
        for user_id in user_ids:
            db.add(Like(shop_id=shop.id, user_id=user_id))
        db.commit()

    return _add


@pytest.fixture
def add_ratings(db):
    def _add(shop, *ratings):
        for i, value in enumerate(ratings):
            db.add(Rating(shop_id=shop.id, user_id=f"rater-{i}", rating=value))
        db.commit()

    return _add


@pytest.fixture
def add_reviews(db):
    def _add(shop, count):
        for i in range(count):
            db.add(Review(shop_id=shop.id, user_id=f"reviewer-{i}", content=f"review {i}"))
        db.commit()

    return _add


@pytest.fixture
def api_client(db, fake_maps):
    from fastapi.testclient import TestClient

    from shop_discovery.api.deps import get_maps_client
    from shop_discovery.db.session import get_db
    from shop_discovery.main import app

    def override_db():
        yield db

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_maps_client] = lambda: fake_maps
    # startup 이벤트는 실행하지 않도록 context manager 없이 사용
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
