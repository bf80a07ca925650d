"""
FastAPI route: nearby hospital search.

    GET /api/nearby-hospitals?lat=..&lng=..  — Google Places payload, verbatim
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from backend.lifeline.api.dependencies import get_places_client
from backend.lifeline.services.places import PlacesClient, parse_coordinates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["hospitals"])


@router.get(
    "/nearby-hospitals",
    summary="Hospitals within 5 km of a coordinate",
    description=(
        "Validates the coordinates, then relays a Nearby Search request "
        "(type=hospital) to Google Places and returns its response unchanged."
    ),
)
async def nearby_hospitals(
    lat: Optional[str] = Query(None, examples=["12.9716"]),
    lng: Optional[str] = Query(None, examples=["77.5946"]),
    places: PlacesClient = Depends(get_places_client),
) -> Dict[str, Any]:
    logger.info("Received request for nearby hospitals: lat=%s lng=%s", lat, lng)
    latitude, longitude = parse_coordinates(lat, lng)
    return await places.search_nearby_hospitals(latitude, longitude)
