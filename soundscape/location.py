"""'Where am I' - IP geolocation + Google reverse geocoding."""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from soundscape.config import (
    GOOGLE_MAPS_API_KEY,
    HTTP_TIMEOUT_SECONDS,
    LOCATION_UNKNOWN_PHRASE,
)
from soundscape.models import LocationResult

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
IPINFO_URL = "https://ipinfo.io/json"

UNKNOWN = LocationResult(phrase=LOCATION_UNKNOWN_PHRASE)


def _street_name(result: Dict[str, Any]) -> Optional[str]:
    for component in result.get("address_components", []):
        if "route" in component.get("types", []):
            return component.get("long_name")
    return None


def _intersection(result: Dict[str, Any]) -> Optional[Tuple[str, str]]:
    if "intersection" not in result.get("types", []):
        return None
    routes = [
        c.get("long_name")
        for c in result.get("address_components", [])
        if "route" in c.get("types", [])
    ]
    if len(routes) >= 2:
        return routes[0], routes[1]
    return None


def phrase_from_geocode(data: Dict[str, Any]) -> LocationResult:
    """Intersection first, then street, else unknown."""
    results: List[Dict[str, Any]] = data.get("results") or []
    if data.get("status") != "OK" or not results:
        logger.warning("📍 Geocoding failed: %s", data.get("status"))
        return UNKNOWN

    for result in results:
        crossing = _intersection(result)
        if crossing:
            return LocationResult(
                phrase=f"At {crossing[0]} and {crossing[1]}.",
                intersection=crossing,
            )

    for result in results:
        street = _street_name(result)
        if street:
            return LocationResult(phrase=f"You are on {street}.", street=street)

    return UNKNOWN


class LocationService:
    def __init__(
        self,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ):
        self.api_key = api_key if api_key is not None else GOOGLE_MAPS_API_KEY
        self.session = session or requests.Session()
        self.timeout = timeout

    def current_coordinates(self) -> Optional[Tuple[float, float]]:
        try:
            res = self.session.get(IPINFO_URL, timeout=self.timeout)
            res.raise_for_status()
            lat, lon = res.json()["loc"].split(",")
            return float(lat), float(lon)
        except (requests.RequestException, KeyError, ValueError) as e:
            logger.error("📍 Error getting current location: %s", e)
            return None

    def reverse_geocode(self, latitude: float, longitude: float) -> LocationResult:
        if not self.api_key:
            logger.warning("📍 Google Maps API key not configured")
            return UNKNOWN
        try:
            res = self.session.get(
                GEOCODE_URL,
                params={
                    "latlng": f"{latitude},{longitude}",
                    "result_type": "intersection|street_address",
                    "key": self.api_key,
                },
                timeout=self.timeout,
            )
            res.raise_for_status()
            return phrase_from_geocode(res.json())
        except (requests.RequestException, ValueError) as e:
            logger.error("📍 Error reverse geocoding: %s", e)
            return UNKNOWN

    def _where_am_i_blocking(self) -> LocationResult:
        coords = self.current_coordinates()
        if coords is None:
            return UNKNOWN
        logger.info("📍 Got location: %.5f, %.5f", *coords)
        return self.reverse_geocode(*coords)

    async def where_am_i(self) -> LocationResult:
        """One-shot location phrase. Never raises."""
        return await asyncio.to_thread(self._where_am_i_blocking)
