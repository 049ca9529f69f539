"""Geocoding adapter using OpenStreetMap Nominatim (keyless, rate limited)."""

import logging
from typing import Protocol

import httpx

from vivot.app.errors import GeocodeUnavailableError
from vivot.app.models.common import Coordinates
from vivot.app.utils.metrics import geocode_lookups_total

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    """Resolve a free-text place name to coordinates."""

    async def geocode(self, query: str) -> Coordinates | None:
        """Look up a place.

        Returns:
            Coordinates, or None when the place is unknown

        Raises:
            GeocodeUnavailableError: When the service cannot be reached or
                returns an unusable response
        """
        ...


class NominatimGeocoder:
    """Nominatim search client."""

    def __init__(
        self,
        base_url: str = "https://nominatim.openstreetmap.org/search",
        user_agent: str = "VivotTravelPlanner/0.1",
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize geocoder.

        Args:
            base_url: Nominatim search endpoint
            user_agent: Identifying User-Agent (required by Nominatim usage policy)
            timeout_seconds: Per-request timeout
            client: Optional httpx client (for testing with mocks)
        """
        self._base_url = base_url
        self._user_agent = user_agent
        self._timeout_seconds = timeout_seconds
        self._client = client

    async def geocode(self, query: str) -> Coordinates | None:
        """Look up the best match for a place name."""
        # Docs: https://nominatim.org/release-docs/develop/api/Search/
        params = {"q": query, "format": "json", "limit": "1"}
        headers = {"User-Agent": self._user_agent}

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self._timeout_seconds)
            close_client = True

        try:
            response = await client.get(self._base_url, params=params, headers=headers)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            geocode_lookups_total.labels(outcome="error").inc()
            raise GeocodeUnavailableError(
                f"Geocoder lookup failed for {query!r}: {type(e).__name__}"
            ) from e
        finally:
            if close_client:
                await client.aclose()

        # Response structure: [{lat: "48.85", lon: "2.29", display_name: ...}, ...]
        if not isinstance(data, list) or not data:
            geocode_lookups_total.labels(outcome="miss").inc()
            return None

        try:
            coords = Coordinates(lat=float(data[0]["lat"]), lng=float(data[0]["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            geocode_lookups_total.labels(outcome="error").inc()
            raise GeocodeUnavailableError(f"Unusable geocoder response for {query!r}") from e

        geocode_lookups_total.labels(outcome="hit").inc()
        return coords
