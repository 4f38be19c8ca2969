# services/radius.py
"""
Flight-time budget <-> reachable distance.

A flight is modelled as a fixed ground/overhead block (taxi, climb, descent)
plus cruise at a constant speed. Converting a time budget to a radius lets
the airport repository answer "where can I fly in 90 minutes?".
"""

import logging
import math
from typing import Optional

from travelblock.core.geo import distance_miles
from travelblock.core.schemas import Destination, FlightEstimate
from travelblock.services.airports import AirportRepository, get_repository

logger = logging.getLogger(__name__)

CRUISE_SPEED_MPH = 450
OVERHEAD_SECONDS = 25 * 60
DEFAULT_TOLERANCE = 0.05


def max_distance_for_time(total_seconds: float) -> float:
    """Miles coverable in `total_seconds`; 0 when the budget doesn't cover the overhead."""
    cruise_seconds = max(0, total_seconds - OVERHEAD_SECONDS)
    return cruise_seconds / 3600 * CRUISE_SPEED_MPH


def time_for_distance(distance: float) -> int:
    """Whole seconds to fly `distance` miles, overhead included. Halves round up."""
    return math.floor(distance * 3600 / CRUISE_SPEED_MPH + OVERHEAD_SECONDS + 0.5)


def flight_estimate(total_seconds: float) -> FlightEstimate:
    return FlightEstimate(
        time_seconds=total_seconds,
        distance_miles=max_distance_for_time(total_seconds),
        cruise_speed=CRUISE_SPEED_MPH,
        overhead_seconds=OVERHEAD_SECONDS,
    )


def _with_flight_times(repository: AirportRepository, origin, max_distance: float) -> list[Destination]:
    destinations = []
    for record in repository.within_distance(origin, max_distance):
        distance = distance_miles(origin, record)
        destinations.append(Destination(
            record=record,
            distance=distance,
            flight_time=time_for_distance(distance),
        ))
    return destinations


def destinations_within_time_window(
    origin,
    total_seconds: float,
    tolerance: float = DEFAULT_TOLERANCE,
    repository: Optional[AirportRepository] = None,
) -> list[Destination]:
    """
    Airports whose estimated flight time lands within ±tolerance of
    `total_seconds`, i.e. a band around the requested time rather than
    everything reachable. Sorted nearest first.
    """
    if repository is None:
        repository = get_repository()
    max_distance = max_distance_for_time(total_seconds) * (1 + tolerance)
    min_time = total_seconds * (1 - tolerance)
    max_time = total_seconds * (1 + tolerance)

    window = [
        d for d in _with_flight_times(repository, origin, max_distance)
        if min_time <= d.flight_time <= max_time
    ]
    logger.debug(f"{len(window)} destinations within {total_seconds}s ±{tolerance:.0%}")
    return sorted(window, key=lambda d: d.distance)


def destinations_up_to_time(
    origin,
    max_seconds: float,
    repository: Optional[AirportRepository] = None,
) -> list[Destination]:
    """Every airport reachable within `max_seconds`, sorted nearest first."""
    if repository is None:
        repository = get_repository()
    reachable = _with_flight_times(repository, origin, max_distance_for_time(max_seconds))
    return sorted(reachable, key=lambda d: d.distance)
