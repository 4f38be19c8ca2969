# webapp/app.py
import logging
from contextlib import asynccontextmanager
from typing import Literal, Optional

from fastapi import FastAPI, Depends, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from travelblock.core.geo import CoordinateError
from travelblock.core.schemas import AirportRecord, Coordinates, Destination
from travelblock.core.timeutils import clamp, default_time_range, parse_duration, snap_to_interval
from travelblock.database.engine import get_db, init_db
from travelblock.services.airports import AirportRepository, get_repository
from travelblock.services.location import IpLocationProvider, LocationProvider, find_nearest_airport
from travelblock.services.radius import (
    DEFAULT_TOLERANCE,
    destinations_up_to_time,
    destinations_within_time_window,
)
from travelblock.services.storage import HomeAirportStore, KeyValueStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    await get_repository().load()
    yield


app = FastAPI(lifespan=lifespan)


class HomeAirportUpdate(BaseModel):
    code: str


class OnboardingUpdate(BaseModel):
    complete: bool


def get_store(db: Session = Depends(get_db)) -> HomeAirportStore:
    return HomeAirportStore(KeyValueStore(db))


def get_location_provider() -> LocationProvider:
    return IpLocationProvider()


@app.exception_handler(CoordinateError)
async def handle_coordinate_error(request: Request, exc: CoordinateError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def _duration_seconds(duration: str) -> int:
    """Accept '5400' or '1h 30m'; snap to the slider interval and clamp to its range."""
    text = duration.strip()
    seconds = int(text) if text.isdecimal() else parse_duration(text)
    if seconds <= 0:
        raise HTTPException(status_code=422, detail=f"Invalid duration: {duration!r}")
    time_range = default_time_range()
    return int(clamp(snap_to_interval(seconds, time_range.interval), time_range.min, time_range.max))


# --- AIRPORT ROUTES ---

@app.get("/api/airports/search", response_model=list[AirportRecord])
def search_airports(
    q: str = "",
    limit: Optional[int] = Query(None, ge=1),
    repo: AirportRepository = Depends(get_repository),
):
    return repo.search(q, limit)


@app.get("/api/airports/nearby", response_model=list[AirportRecord])
def nearby_airports(
    lat: float,
    lon: float,
    radius: float = Query(50, ge=0),
    repo: AirportRepository = Depends(get_repository),
):
    """Airports within `radius` miles of (lat, lon), nearest first."""
    return repo.within_distance(Coordinates(latitude=lat, longitude=lon), radius)


@app.get("/api/airports/nearest", response_model=list[AirportRecord])
def nearest_airports(
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    limit: int = Query(1, ge=1, le=50),
    exclude: list[str] = Query([]),
    repo: AirportRepository = Depends(get_repository),
    provider: LocationProvider = Depends(get_location_provider),
):
    """Closest airports to (lat, lon), or to the caller's approximate location when omitted."""
    if lat is None or lon is None:
        origin = provider.get_current_location()
        if origin is None:
            raise HTTPException(status_code=503, detail="Current location unavailable")
    else:
        origin = Coordinates(latitude=lat, longitude=lon)
    return repo.nearest(origin, limit=limit, exclude=exclude)


@app.get("/api/airports/country/{country}", response_model=list[AirportRecord])
def airports_by_country(country: str, repo: AirportRepository = Depends(get_repository)):
    return repo.by_country(country)


@app.get("/api/airports/{code}", response_model=AirportRecord)
def airport_by_code(code: str, repo: AirportRepository = Depends(get_repository)):
    airport = repo.by_code(code)
    if airport is None:
        raise HTTPException(status_code=404, detail=f"Unknown airport {code!r}")
    return airport


@app.get("/api/destinations", response_model=list[Destination])
def destinations(
    duration: str,
    origin: Optional[str] = None,
    mode: Literal["window", "max"] = "window",
    tolerance: float = Query(DEFAULT_TOLERANCE, ge=0, lt=1),
    repo: AirportRepository = Depends(get_repository),
    store: HomeAirportStore = Depends(get_store),
):
    """
    Destinations for a flight-time budget from `origin` (ICAO), or from the
    saved home airport when no origin is given.

    mode=window: flight time within ±tolerance of the budget.
    mode=max: everything reachable within the budget.
    """
    if origin:
        origin_airport = repo.by_code(origin)
        if origin_airport is None:
            raise HTTPException(status_code=404, detail=f"Unknown airport {origin!r}")
    else:
        origin_airport = store.get_home_airport()
        if origin_airport is None:
            raise HTTPException(status_code=404, detail="No origin given and no home airport set")

    position = origin_airport.position
    if position is None:
        raise HTTPException(status_code=422, detail=f"Airport {origin_airport.code} has no coordinates")

    seconds = _duration_seconds(duration)
    if mode == "max":
        return destinations_up_to_time(position, seconds, repository=repo)
    return destinations_within_time_window(position, seconds, tolerance, repository=repo)


# --- HOME AIRPORT ROUTES ---

@app.get("/api/home-airport", response_model=AirportRecord)
def get_home_airport(store: HomeAirportStore = Depends(get_store)):
    airport = store.get_home_airport()
    if airport is None:
        raise HTTPException(status_code=404, detail="No home airport set")
    return airport


@app.put("/api/home-airport", response_model=AirportRecord)
def set_home_airport(
    update: HomeAirportUpdate,
    repo: AirportRepository = Depends(get_repository),
    store: HomeAirportStore = Depends(get_store),
):
    airport = repo.by_code(update.code)
    if airport is None:
        raise HTTPException(status_code=404, detail=f"Unknown airport {update.code!r}")
    store.save_home_airport(airport)
    logger.info(f"Home airport set to {airport.code}")
    return airport


@app.get("/api/home-airport/suggestion", response_model=AirportRecord)
def suggest_home_airport(
    repo: AirportRepository = Depends(get_repository),
    provider: LocationProvider = Depends(get_location_provider),
):
    airport = find_nearest_airport(repo, provider)
    if airport is None:
        raise HTTPException(status_code=404, detail="No airport near the current location")
    return airport


@app.delete("/api/home-airport", status_code=204)
def clear_home_airport(store: HomeAirportStore = Depends(get_store)):
    store.clear_home_airport()
    return Response(status_code=204)


@app.get("/api/onboarding")
def get_onboarding(store: HomeAirportStore = Depends(get_store)):
    return {"complete": store.is_onboarding_complete()}


@app.put("/api/onboarding")
def set_onboarding(update: OnboardingUpdate, store: HomeAirportStore = Depends(get_store)):
    store.set_onboarding_complete(update.complete)
    return {"complete": store.is_onboarding_complete()}
