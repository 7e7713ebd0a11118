from unittest.mock import AsyncMock, patch

import httpx
import pytest

from drivigo.services.geocoding.mapbox_provider import MapboxProvider

FEATURE = {
    "id": "address.123",
    "place_name": "Koramangala, Bengaluru, Karnataka 560034, India",
    "center": [77.6271, 12.9352],
    "relevance": 0.93,
    "context": [
        {"id": "postcode.1", "text": "560034"},
        {"id": "place.2", "text": "Bengaluru"},
        {"id": "region.3", "text": "Karnataka"},
        {"id": "country.4", "text": "India", "short_code": "in"},
    ],
}


@pytest.mark.asyncio
async def test_geocode_parses_first_feature():
    provider = MapboxProvider(access_token="pk.test", country="IN")
    response = httpx.Response(200, json={"features": [FEATURE]})

    with patch.object(httpx.AsyncClient, "get", AsyncMock(return_value=response)) as get:
        result = await provider.geocode("Koramangala, Bengaluru")

    assert get.await_args.kwargs["params"] == {
        "access_token": "pk.test",
        "limit": "1",
        "country": "in",
    }
    assert result.latitude == 12.9352
    assert result.longitude == 77.6271
    assert result.city == "Bengaluru"
    assert result.state == "Karnataka"
    assert result.postal_code == "560034"
    assert result.country == "IN"
    assert result.provider_id == "mapbox:address.123"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"features": []}),
        httpx.Response(401, json={"message": "Not Authorized"}),
    ],
)
async def test_geocode_returns_none_without_match(response):
    provider = MapboxProvider(access_token="pk.test")

    with patch.object(httpx.AsyncClient, "get", AsyncMock(return_value=response)):
        assert await provider.geocode("nowhere") is None


@pytest.mark.asyncio
async def test_geocode_network_error_returns_none():
    provider = MapboxProvider(access_token="pk.test")
    error = httpx.ConnectError("connection refused")

    with patch.object(httpx.AsyncClient, "get", AsyncMock(side_effect=error)):
        assert await provider.geocode("Indiranagar") is None


@pytest.mark.asyncio
async def test_geocode_without_token_skips_request():
    provider = MapboxProvider(access_token="")

    with patch.object(httpx.AsyncClient, "get", AsyncMock()) as get:
        assert await provider.geocode("Indiranagar") is None
    get.assert_not_called()
