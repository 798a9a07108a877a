"""Google Maps geocoding: postcode lookup and static map images."""

import logging
import re

import httpx

from woningjager.config import settings

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
STATIC_MAP_URL = "https://maps.googleapis.com/maps/api/staticmap"


class GoogleGeocoder:
    """
    Best-effort geocoding.

    Every failure (no API key, network error, no result) returns None; a
    missing postcode or map never stops a listing from being processed.
    """

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.google_maps_api_key
        self.timeout = timeout or settings.request_timeout
        self.transport = transport
        self.client: httpx.AsyncClient | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=self.timeout, transport=self.transport)
        return self.client

    async def close(self) -> None:
        """Close HTTP client."""
        if self.client:
            await self.client.aclose()
            self.client = None

    async def zipcode(self, address: str) -> str | None:
        """
        Look up the postcode of an address.

        Args:
            address: Free-text address, e.g. "Keizersgracht 10-2, Amsterdam, Netherlands"

        Returns:
            Numeric part of the postcode ("1015"), or None
        """
        if not self.enabled:
            logger.debug("No Google Maps API key, skipping geocode of %s", address)
            return None

        params = {"address": address, "region": "nl", "key": self.api_key}
        try:
            response = await self._get_client().get(GEOCODE_URL, params=params)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Geocoding %s failed: %s", address, e)
            return None

        status = payload.get("status", "")
        if status != "OK":
            if status != "ZERO_RESULTS":
                logger.warning(
                    "Geocoding API status=%s: %s", status, payload.get("error_message", "")
                )
            return None

        for result in payload.get("results", []):
            for component in result.get("address_components", []):
                if "postal_code" in component.get("types", []):
                    match = re.match(r"\d+", component.get("long_name", ""))
                    if match:
                        return match.group()
        return None

    async def static_map(self, address: str, zoom: int = 15) -> bytes | None:
        """Static map image (PNG bytes) centered on an address, or None."""
        if not self.enabled:
            return None

        params = {
            "center": address,
            "zoom": zoom,
            "size": "600x400",
            "markers": f"color:red|{address}",
            "key": self.api_key,
        }
        try:
            response = await self._get_client().get(STATIC_MAP_URL, params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Static map for %s failed: %s", address, e)
            return None

        if not response.headers.get("content-type", "").startswith("image/"):
            return None
        return response.content
