import pytest

from shop_discovery.core.errors import GoogleMapsError, GoogleMapsTimeout
from shop_discovery.services.geocoder import Geocoder

from .conftest import FakeMapsClient, geocode_ok


@pytest.mark.asyncio
async def test_first_result_is_used():
    client = FakeMapsClient(geocode=geocode_ok(35.6812, 139.7671, "東京都千代田区丸の内1丁目"))

    result = await Geocoder(client).geocode("東京駅")

    assert (result.latitude, result.longitude) == (35.6812, 139.7671)
    assert result.formatted_address == "東京都千代田区丸の内1丁目"
    assert client.calls["geocode"] == [(("東京駅",), {})]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"status": "ZERO_RESULTS", "results": []},
        {"status": "REQUEST_DENIED", "error_message": "The provided API key is invalid."},
        {"status": "OK", "results": []},
        {"status": "OK", "results": [{"formatted_address": "somewhere", "geometry": {}}]},
    ],
)
async def test_no_usable_result_returns_none(payload):
    assert await Geocoder(FakeMapsClient(geocode=payload)).geocode("zzzz-nowhere") is None


@pytest.mark.asyncio
async def test_timeout_returns_none():
    client = FakeMapsClient(geocode=GoogleMapsTimeout("geocode", 10))

    assert await Geocoder(client).geocode("東京駅") is None


@pytest.mark.asyncio
async def test_transport_error_propagates():
    client = FakeMapsClient(geocode=GoogleMapsError("geocode request failed", status_code=502))

    with pytest.raises(GoogleMapsError):
        await Geocoder(client).geocode("東京駅")
