# core/schemas.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Coordinates(BaseModel):
    """A point on the globe in decimal degrees.

    Ranges are not enforced here; `core.geo` validates them before any
    distance math so callers get a specific latitude/longitude error.
    """
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class AirportRecord(BaseModel):
    """Public airport record, as returned by every repository query."""
    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=1)   # ICAO, canonical uppercase
    short_code: str = ""                   # IATA, may be empty
    name: str = ""
    city: str = ""
    region: str = ""
    country: str = ""
    elevation: float = 0
    latitude: Optional[float] = Field(default=None, allow_inf_nan=False)
    longitude: Optional[float] = Field(default=None, allow_inf_nan=False)
    timezone: str = ""

    @property
    def position(self) -> Optional[Coordinates]:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(latitude=self.latitude, longitude=self.longitude)


class Destination(BaseModel):
    """An airport reachable from an origin, with distance (miles) and flight time (seconds)."""
    record: AirportRecord
    distance: float
    flight_time: int


class FlightEstimate(BaseModel):
    time_seconds: float
    distance_miles: float
    cruise_speed: float
    overhead_seconds: int


class TimeRange(BaseModel):
    # All values in seconds
    min: int
    max: int
    interval: int

    @model_validator(mode='after')
    def check_bounds(self):
        if self.min >= self.max:
            raise ValueError("TimeRange min must be less than max")
        if self.interval <= 0:
            raise ValueError("TimeRange interval must be greater than 0")
        return self
