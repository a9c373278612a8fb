"""Address geocoding through the maps.co search API."""

import logging

import httpx

from shelfbook.core.config import settings

logger = logging.getLogger(__name__)


async def geolocate(address: str | None, client: httpx.AsyncClient | None = None) -> dict | None:
    """Return ``{"lat": float, "lon": float}`` for an address, or None.

    The search can return several matches when the address is vague; the first
    one is used.
    """
    if not address:
        return None

    if client is None:
        async with httpx.AsyncClient(timeout=settings.geocode_timeout_seconds) as own_client:
            return await geolocate(address, own_client)

    response = await client.get(settings.geocode_url, params={"q": address})
    response.raise_for_status()
    results = response.json()
    if not results:
        logger.info("No geocoding match for %r", address)
        return None

    first = results[0]
    return {"lat": float(first["lat"]), "lon": float(first["lon"])}
