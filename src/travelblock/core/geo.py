# core/geo.py
"""
Great-circle distance and bounding-box pre-filtering.

Distances use the Haversine formula on a spherical Earth. Two entry points
are provided, one taking four raw degree values and one taking coordinate
objects (anything with `.latitude` / `.longitude`, e.g. Coordinates or
AirportRecord). Both validate their input and share one implementation.

The bounding box is a cheap rectangular test used to skip the trigonometry
for points that cannot be within a radius. It is always a superset of the
true circle, so it never rejects a point the Haversine check would accept.
"""

import math
from enum import Enum
from numbers import Real
from typing import NamedTuple

EARTH_RADIUS_MILES = 3959
EARTH_RADIUS_KM = 6371

# Planar approximation used to size the bounding box
MILES_PER_DEGREE = 69

# Longitude limit that lets every longitude through
FULL_CIRCLE = 360.0

_POLE_EPSILON = 1e-12


class DistanceUnit(Enum):
    MILES = "mi"
    KILOMETERS = "km"

    @property
    def earth_radius(self) -> int:
        return EARTH_RADIUS_MILES if self is DistanceUnit.MILES else EARTH_RADIUS_KM


class CoordinateError(ValueError):
    """Base class for rejected distance inputs."""


class InvalidCoordinatesError(CoordinateError):
    """Missing, non-numeric or non-finite coordinate arguments."""


class LatitudeOutOfRangeError(CoordinateError):
    pass


class LongitudeOutOfRangeError(CoordinateError):
    pass


class BoundingBoxLimits(NamedTuple):
    lat_diff_limit: float
    lon_diff_limit: float


def degrees_to_radians(degrees: float) -> float:
    return degrees * (math.pi / 180)


def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _validate(lat1, lon1, lat2, lon2) -> None:
    values = (lat1, lon1, lat2, lon2)
    if not all(_is_number(v) and math.isfinite(v) for v in values):
        raise InvalidCoordinatesError(f"Invalid numeric arguments: {values!r}")
    for lat in (lat1, lat2):
        if not -90 <= lat <= 90:
            raise LatitudeOutOfRangeError(f"Latitude must be between -90 and 90, got {lat}")
    for lon in (lon1, lon2):
        if not -180 <= lon <= 180:
            raise LongitudeOutOfRangeError(f"Longitude must be between -180 and 180, got {lon}")


def _unpack(point) -> tuple[float, float]:
    """Read (latitude, longitude) off a coordinate-like object."""
    lat = getattr(point, "latitude", None)
    lon = getattr(point, "longitude", None)
    if point is None or not _is_number(lat) or not _is_number(lon):
        raise InvalidCoordinatesError(
            f"Invalid arguments: expected an object with numeric latitude/longitude, got {point!r}"
        )
    return lat, lon


def validate_point(point) -> tuple[float, float]:
    """Return (latitude, longitude) of `point`, raising CoordinateError if unusable."""
    lat, lon = _unpack(point)
    _validate(lat, lon, lat, lon)
    return lat, lon


def _haversine(lat1: float, lon1: float, lat2: float, lon2: float, radius: float) -> float:
    phi1 = degrees_to_radians(lat1)
    phi2 = degrees_to_radians(lat2)
    dphi = degrees_to_radians(lat2 - lat1)
    dlambda = degrees_to_radians(lon2 - lon1)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # Rounding can push h a hair above 1 for antipodal points
    h = min(h, 1.0)
    return radius * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def distance_from_degrees(
    lat1: float, lon1: float, lat2: float, lon2: float,
    unit: DistanceUnit = DistanceUnit.MILES,
) -> float:
    """Great-circle distance between two points given in decimal degrees."""
    _validate(lat1, lon1, lat2, lon2)
    return _haversine(lat1, lon1, lat2, lon2, unit.earth_radius)


def distance_from_coordinates(a, b, unit: DistanceUnit = DistanceUnit.MILES) -> float:
    """Great-circle distance between two coordinate objects."""
    lat1, lon1 = _unpack(a)
    lat2, lon2 = _unpack(b)
    return distance_from_degrees(lat1, lon1, lat2, lon2, unit)


def distance_miles(a, b) -> float:
    return distance_from_coordinates(a, b, DistanceUnit.MILES)


def distance_km(a, b) -> float:
    return distance_from_coordinates(a, b, DistanceUnit.KILOMETERS)


def bounding_box_limits(origin, max_distance: float) -> BoundingBoxLimits:
    """
    Degree deltas around `origin` outside of which no point can be within
    `max_distance` miles.

    Latitude uses the flat 69 miles/degree estimate. Longitude divides that by
    cos(latitude), widened to the exact spherical bound where the circle bends
    towards a pole. If the circle reaches a pole every longitude passes.
    """
    lat, _ = validate_point(origin)
    lat_limit = max_distance / MILES_PER_DEGREE

    cos_lat = math.cos(degrees_to_radians(lat))
    if cos_lat < _POLE_EPSILON:
        return BoundingBoxLimits(lat_limit, FULL_CIRCLE)

    lon_limit = max_distance / (MILES_PER_DEGREE * cos_lat)

    angular = max_distance / EARTH_RADIUS_MILES
    if angular >= math.pi / 2:
        return BoundingBoxLimits(lat_limit, FULL_CIRCLE)
    if angular > 0:
        reach = math.sin(angular) / cos_lat
        if reach >= 1:
            return BoundingBoxLimits(lat_limit, FULL_CIRCLE)
        lon_limit = max(lon_limit, math.degrees(math.asin(reach)))

    return BoundingBoxLimits(lat_limit, min(lon_limit, FULL_CIRCLE))


def is_within_bounding_box(origin, point, limits: BoundingBoxLimits) -> bool:
    """Cheap rectangular test; handles boxes that straddle the antimeridian."""
    if abs(point.latitude - origin.latitude) > limits.lat_diff_limit:
        return False
    lon_diff = abs(point.longitude - origin.longitude)
    if lon_diff > 180:
        lon_diff = 360 - lon_diff
    return lon_diff <= limits.lon_diff_limit
