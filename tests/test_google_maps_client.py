import asyncio
import re

import aiohttp
import pytest
import pytest_asyncio
from aioresponses import aioresponses

from shop_discovery.core.errors import GoogleMapsError, GoogleMapsTimeout, MapsNotConfigured, PlaceDetailsError
from shop_discovery.services.google_maps import (
    PLACE_DETAILS_FIELD_MASK,
    PLACES_AUTOCOMPLETE_URL,
    PLACES_NEARBY_SEARCH_URL,
    GoogleMapsClient,
)

GEOCODE_PATTERN = re.compile(r"^https://maps\.googleapis\.com/maps/api/geocode/json.*$")
DETAILS_PATTERN = re.compile(r"^https://places\.googleapis\.com/v1/places/ChIJhinata.*$")


@pytest_asyncio.fixture
async def client():
    client = GoogleMapsClient(api_key="maps-key", places_api_key="places-key", timeout=5)
    yield client
    await client.close()


def _only_call(mocked):
    [(key, calls)] = list(mocked.requests.items())
    [call] = calls
    return key, call.kwargs


@pytest.mark.asyncio
async def test_geocode_sends_address_language_and_key(client):
    with aioresponses() as mocked:
        mocked.get(GEOCODE_PATTERN, payload={"status": "OK", "results": []})

        payload = await client.geocode("東京駅")

        (method, url), _ = _only_call(mocked)
    assert payload == {"status": "OK", "results": []}
    assert method == "GET"
    assert url.query["address"] == "東京駅"
    assert url.query["language"] == "ja"
    assert url.query["key"] == "maps-key"


@pytest.mark.asyncio
async def test_place_details_uses_field_mask_header(client):
    with aioresponses() as mocked:
        mocked.get(DETAILS_PATTERN, payload={"displayName": {"text": "喫茶ヒナタ"}})

        payload = await client.place_details("ChIJhinata")

        (_, url), kwargs = _only_call(mocked)
    assert payload["displayName"]["text"] == "喫茶ヒナタ"
    assert url.query["languageCode"] == "ja"
    assert kwargs["headers"]["X-Goog-Api-Key"] == "places-key"
    assert kwargs["headers"]["X-Goog-FieldMask"] == PLACE_DETAILS_FIELD_MASK


@pytest.mark.asyncio
async def test_place_details_error_payload_raises_with_upstream_code(client):
    error = {"code": 403, "message": "API key not valid.", "status": "PERMISSION_DENIED"}
    with aioresponses() as mocked:
        mocked.get(DETAILS_PATTERN, status=403, payload={"error": error})

        with pytest.raises(PlaceDetailsError) as exc_info:
            await client.place_details("ChIJhinata")

    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "API key not valid."
    assert exc_info.value.details == error


@pytest.mark.asyncio
async def test_autocomplete_posts_region_restricted_body(client):
    with aioresponses() as mocked:
        mocked.post(PLACES_AUTOCOMPLETE_URL, payload={"suggestions": []})

        await client.autocomplete("ラーメン")

        _, kwargs = _only_call(mocked)
    assert kwargs["json"] == {"input": "ラーメン", "languageCode": "ja", "includedRegionCodes": ["jp"]}


@pytest.mark.asyncio
async def test_autocomplete_http_error_carries_status(client):
    with aioresponses() as mocked:
        mocked.post(PLACES_AUTOCOMPLETE_URL, status=400, payload={"error": {"message": "bad input"}})

        with pytest.raises(GoogleMapsError) as exc_info:
            await client.autocomplete("x")

    assert exc_info.value.status_code == 400
    assert exc_info.value.details == {"error": {"message": "bad input"}}


@pytest.mark.asyncio
async def test_search_nearby_restricts_to_circle(client):
    with aioresponses() as mocked:
        mocked.post(PLACES_NEARBY_SEARCH_URL, payload={"places": []})

        await client.search_nearby(35.68, 139.76, ["train_station"], radius=2000, max_results=5)

        _, kwargs = _only_call(mocked)
    body = kwargs["json"]
    assert body["includedTypes"] == ["train_station"]
    assert body["maxResultCount"] == 5
    assert body["locationRestriction"]["circle"] == {
        "center": {"latitude": 35.68, "longitude": 139.76},
        "radius": 2000,
    }


@pytest.mark.asyncio
async def test_timeout_is_reported_as_maps_timeout(client):
    with aioresponses() as mocked:
        mocked.get(GEOCODE_PATTERN, exception=asyncio.TimeoutError())

        with pytest.raises(GoogleMapsTimeout):
            await client.geocode("東京駅")


@pytest.mark.asyncio
async def test_connection_error_is_wrapped(client):
    with aioresponses() as mocked:
        mocked.get(GEOCODE_PATTERN, exception=aiohttp.ClientConnectionError("refused"))

        with pytest.raises(GoogleMapsError) as exc_info:
            await client.geocode("東京駅")

    assert not isinstance(exc_info.value, GoogleMapsTimeout)
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_missing_key_fails_before_any_request():
    client = GoogleMapsClient(api_key=None)

    assert client.configured is False
    with pytest.raises(MapsNotConfigured):
        await client.geocode("東京駅")
    await client.close()


def test_photo_media_url():
    client = GoogleMapsClient(api_key="maps-key", places_api_key="places-key")

    assert client.photo_media_url("places/abc/photos/xyz") == (
        "https://places.googleapis.com/v1/places/abc/photos/xyz/media?maxHeightPx=400&key=places-key"
    )


@pytest.mark.asyncio
async def test_search_nearby_http_error_means_no_candidates(client):
    with aioresponses() as mocked:
        mocked.post(
            PLACES_NEARBY_SEARCH_URL,
            status=403,
            payload={"error": {"code": 403, "message": "API key not valid."}},
        )

        payload = await client.search_nearby(35.68, 139.76, ["train_station"], radius=2000, max_results=5)

    assert payload == {"places": []}
