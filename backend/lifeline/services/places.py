"""
places.py — nearby-hospital lookup via the Google Places Nearby Search API.

Flow:
    1. parse_coordinates()  — presence, finite-number and range checks
    2. credential check     — GOOGLE_MAPS_API_KEY must be set
    3. one GET to {PLACES_BASE_URL}/nearbysearch/json
         location=<lat>,<lng>  radius=5000  type=hospital  key=<key>
    4. provider payload returned untouched

Failure mapping:
    bad input                       → InvalidArgumentError (400), no network call
    missing key                     → ConfigurationError (500)
    payload status != "OK"          → UpstreamError (400, details = status)
    HTTP error status from provider → UpstreamError (same status, details = body)
    no response (DNS, timeout, ...) → UpstreamUnavailableError (503)
    request could not be built      → InternalError (500)
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Optional, Tuple

import httpx

from backend.lifeline.core.config import Settings
from backend.lifeline.core.errors import (
    ConfigurationError,
    InternalError,
    InvalidArgumentError,
    UpstreamError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "Google Places API"


def parse_coordinates(lat: Optional[str], lng: Optional[str]) -> Tuple[float, float]:
    """Validate raw query values and return (latitude, longitude) as floats."""
    if not lat or not lng:
        raise InvalidArgumentError("Latitude and longitude are required")

    try:
        lat_num = float(lat)
        lng_num = float(lng)
    except (TypeError, ValueError):
        raise InvalidArgumentError(
            "Invalid coordinates provided", lat=lat, lng=lng,
        ) from None

    if not (math.isfinite(lat_num) and math.isfinite(lng_num)):
        raise InvalidArgumentError("Invalid coordinates provided", lat=lat, lng=lng)

    if not (-90 <= lat_num <= 90 and -180 <= lng_num <= 180):
        raise InvalidArgumentError(
            "Coordinates are out of valid range", lat=lat_num, lng=lng_num,
        )

    return lat_num, lng_num


class PlacesClient:
    """
    Thin async wrapper around the Nearby Search endpoint.

    The underlying httpx client is created on first use and reused for the
    life of the process; ``transport`` lets tests plug in a mock.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self.settings.HTTP_TIMEOUT_SECONDS,
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()

    async def search_nearby_hospitals(self, latitude: float, longitude: float) -> Dict[str, Any]:
        api_key = self.settings.GOOGLE_MAPS_API_KEY
        if not api_key:
            logger.error("Google Maps API key is not configured")
            raise ConfigurationError("GOOGLE_MAPS_API_KEY")

        params = {
            "location": f"{latitude},{longitude}",
            "radius": self.settings.PLACES_SEARCH_RADIUS,
            "type": self.settings.PLACES_SEARCH_TYPE,
            "key": api_key,
        }
        url = f"{self.settings.PLACES_BASE_URL.rstrip('/')}/nearbysearch/json"

        try:
            client = await self._get_client()
            response = await client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "%s returned HTTP %d", SERVICE_NAME, exc.response.status_code,
                extra={"provider": "google_places", "status_code": exc.response.status_code},
            )
            raise UpstreamError(
                SERVICE_NAME,
                "Failed to fetch hospitals",
                status_code=exc.response.status_code,
                details=_response_body(exc.response),
            ) from exc
        except httpx.TransportError as exc:
            logger.error("No response received from %s: %s", SERVICE_NAME, exc)
            raise UpstreamUnavailableError(SERVICE_NAME) from exc
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            logger.error("Error setting up request to %s: %s", SERVICE_NAME, exc)
            raise InternalError("Server error", details=str(exc)) from exc

        status = data.get("status")
        if status != "OK":
            logger.error("Google Places API error: %s", status)
            raise UpstreamError(
                SERVICE_NAME,
                "Failed to fetch hospitals",
                status_code=400,
                details=status,
            )

        logger.info(
            "Number of hospitals found: %d", len(data.get("results") or []),
            extra={"provider": "google_places"},
        )
        return data


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
