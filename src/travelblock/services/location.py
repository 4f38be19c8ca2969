# services/location.py
"""
Where is the user? Providers return Coordinates or None, never raise.

The airport engine validates whatever coordinates it is handed, so a
provider only needs to get numbers out of its backend.
"""

import logging
from typing import Optional, Protocol

import requests

from travelblock.config import LOCATION_LOOKUP_URL, LOCATION_TIMEOUT_SECONDS
from travelblock.core.schemas import AirportRecord, Coordinates
from travelblock.services.airports import AirportRepository

logger = logging.getLogger(__name__)


class LocationProvider(Protocol):
    def get_current_location(self) -> Optional[Coordinates]:
        ...


class StaticLocationProvider:
    """Fixed position, e.g. from a client that already knows where it is."""

    def __init__(self, coordinates: Optional[Coordinates]):
        self.coordinates = coordinates

    def get_current_location(self) -> Optional[Coordinates]:
        return self.coordinates


class IpLocationProvider:
    """Approximate position from an IP geolocation JSON endpoint."""

    def __init__(self, url: str = LOCATION_LOOKUP_URL, timeout: float = LOCATION_TIMEOUT_SECONDS):
        self.url = url
        self.timeout = timeout

    def get_current_location(self) -> Optional[Coordinates]:
        try:
            resp = requests.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Location lookup via {self.url} failed: {e}")
            return None

        if not isinstance(payload, dict):
            logger.warning(f"Unexpected location payload from {self.url}: {payload!r}")
            return None
        # ipapi.co uses latitude/longitude, ip-api.com uses lat/lon
        lat = payload.get("latitude", payload.get("lat"))
        lon = payload.get("longitude", payload.get("lon"))
        if lat is None or lon is None:
            logger.warning(f"No coordinates in location payload from {self.url}")
            return None
        try:
            return Coordinates(latitude=lat, longitude=lon)
        except ValueError as e:
            logger.warning(f"Unusable coordinates from {self.url}: {e}")
            return None


def find_nearest_airport(
    repository: AirportRepository,
    provider: Optional[LocationProvider] = None,
    coordinates: Optional[Coordinates] = None,
) -> Optional[AirportRecord]:
    """
    Closest airport to `coordinates`, or to the provider's position when no
    coordinates are given. None when no position is available.
    """
    if coordinates is None:
        if provider is None:
            return None
        coordinates = provider.get_current_location()
        if coordinates is None:
            logger.info("No current location available; cannot pick nearest airport")
            return None
    return repository.nearest_one(coordinates)
