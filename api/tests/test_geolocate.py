"""Geocoding client tests against a mocked transport."""

import httpx
import pytest

from shelfbook.utils.geolocate import geolocate


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_takes_first_match():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["q"] == "1 Dock Road, London"
        return httpx.Response(
            200,
            json=[
                {"lat": "51.5072", "lon": "-0.1276", "display_name": "Dock Road"},
                {"lat": "40.7128", "lon": "-74.0060", "display_name": "Dock Road, NY"},
            ],
        )

    async with _client(handler) as client:
        assert await geolocate("1 Dock Road, London", client) == {"lat": 51.5072, "lon": -0.1276}


@pytest.mark.asyncio
async def test_no_match_returns_none():
    async with _client(lambda request: httpx.Response(200, json=[])) as client:
        assert await geolocate("nowhere at all", client) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("address", [None, ""])
async def test_empty_address_skips_request(address):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("geocoder should not be called")

    async with _client(handler) as client:
        assert await geolocate(address, client) is None


@pytest.mark.asyncio
async def test_server_error_raises():
    async with _client(lambda request: httpx.Response(503)) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await geolocate("1 Dock Road", client)
