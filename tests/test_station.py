import pytest

from shop_discovery.core.errors import GoogleMapsError, GoogleMapsTimeout
from shop_discovery.services.station import STATION_TYPES, NearestStationResolver, pick_closest, walk_minutes

from .conftest import FakeMapsClient, directions_ok, nearby_stations

SHOP = (35.6895, 139.6917)


@pytest.mark.parametrize("seconds,minutes", [(0, 0), (1, 1), (60, 1), (61, 2), (600, 10), (601, 11)])
def test_walk_minutes_rounds_up(seconds, minutes):
    assert walk_minutes(seconds) == minutes


def test_pick_closest_ignores_result_order():
    candidates = nearby_stations(
        ("Far", 35.70, 139.70),
        ("Closest", 35.6897, 139.6920),
        ("Middle", 35.692, 139.695),
    )["places"]
    candidates.append({"displayName": {"text": "No Location"}})

    assert pick_closest(candidates, *SHOP)["displayName"]["text"] == "Closest"
    assert pick_closest([], *SHOP) is None


@pytest.mark.asyncio
async def test_nearest_station_walks_from_closest_candidate():
    client = FakeMapsClient(
        nearby=nearby_stations(("都庁前駅", 35.6906, 139.6928), ("新宿駅", 35.6896, 139.7006)),
        directions=directions_ok(61),
    )

    result = await NearestStationResolver(client, radius=2000, max_results=5).nearest_station(*SHOP)

    assert result.station_name == "都庁前駅"
    assert result.walk_time == 2
    [(_, nearby_kwargs)] = client.calls["search_nearby"]
    assert nearby_kwargs == {"included_types": STATION_TYPES, "radius": 2000, "max_results": 5}
    [(_, directions_kwargs)] = client.calls["directions"]
    assert directions_kwargs == {"origin": (35.6906, 139.6928), "destination": SHOP, "mode": "walking"}


@pytest.mark.asyncio
async def test_no_candidates_returns_none_without_directions():
    client = FakeMapsClient(nearby={"places": []})

    assert await NearestStationResolver(client).nearest_station(*SHOP) is None
    assert client.calls["directions"] == []


@pytest.mark.asyncio
async def test_directions_without_route_returns_none():
    client = FakeMapsClient(
        nearby=nearby_stations(("都庁前駅", 35.6906, 139.6928)),
        directions={"status": "ZERO_RESULTS", "routes": []},
    )

    assert await NearestStationResolver(client).nearest_station(*SHOP) is None


@pytest.mark.asyncio
async def test_timeout_counts_as_not_found():
    client = FakeMapsClient(nearby=GoogleMapsTimeout("search_nearby", 10))

    assert await NearestStationResolver(client).nearest_station(*SHOP) is None


@pytest.mark.asyncio
async def test_other_upstream_errors_propagate():
    client = FakeMapsClient(nearby=GoogleMapsError("Nearby search failed", status_code=403))

    with pytest.raises(GoogleMapsError):
        await NearestStationResolver(client).nearest_station(*SHOP)
