"""Shared test fixtures and factory helpers."""

import asyncio

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from travelblock.core.schemas import Coordinates
from travelblock.database.engine import Base
from travelblock.services.airports import AirportRepository

NYC = Coordinates(latitude=40.7128, longitude=-74.0060)


def make_raw_airport(icao, *, iata="", name="", city="", state="", country="US",
                     elevation=0, lat=0.0, lon=0.0, tz="America/New_York"):
    """Raw row in the airports.json layout."""
    return {
        "icao": icao,
        "iata": iata,
        "name": name,
        "city": city,
        "state": state,
        "country": country,
        "elevation": elevation,
        "lat": lat,
        "lon": lon,
        "tz": tz,
    }


def airport_rows():
    """A small dataset: NYC area, Boston, LA, Europe, the Aleutians, the South Pole and some junk."""
    return {
        "KJFK": make_raw_airport(
            "KJFK", iata="JFK", name="John F Kennedy International Airport",
            city="New York", state="New-York", elevation=13,
            lat=40.63980103, lon=-73.77890015,
        ),
        "KLGA": make_raw_airport(
            "KLGA", iata="LGA", name="La Guardia Airport",
            city="New York", state="New-York", elevation=21,
            lat=40.77719879, lon=-73.87259674,
        ),
        "KEWR": make_raw_airport(
            "KEWR", iata="EWR", name="Newark Liberty International Airport",
            city="Newark", state="New-Jersey", elevation=18,
            lat=40.69250107, lon=-74.16870117,
        ),
        "KBOS": make_raw_airport(
            "KBOS", iata="BOS", name="General Edward Lawrence Logan International Airport",
            city="Boston", state="Massachusetts", elevation=20,
            lat=42.36429977, lon=-71.00520325,
        ),
        "KLAX": make_raw_airport(
            "KLAX", iata="LAX", name="Los Angeles International Airport",
            city="Los Angeles", state="California", elevation=125,
            lat=33.94250107, lon=-118.4079971, tz="America/Los_Angeles",
        ),
        "K00A": make_raw_airport(
            "K00A", iata="", name="Aero B Ranch Airport", city="Leoti",
            state="Kansas", elevation=3435, lat=38.704022, lon=-101.473911,
            tz="America/Chicago",
        ),
        "EGLL": make_raw_airport(
            "EGLL", iata="LHR", name="London Heathrow Airport", city="London",
            state="England", country="gb", elevation=83,
            lat=51.4706, lon=-0.461941, tz="Europe/London",
        ),
        "LSZH": make_raw_airport(
            "LSZH", iata="ZRH", name="Zürich Airport", city="Zürich",
            state="Zurich", country="CH", elevation=1417,
            lat=47.464699, lon=8.54917, tz="Europe/Zurich",
        ),
        "PADK": make_raw_airport(
            "PADK", iata="ADK", name="Adak Airport", city="Adak Island",
            state="Alaska", elevation=18, lat=51.87799835, lon=-176.6459961,
            tz="America/Adak",
        ),
        "PASY": make_raw_airport(
            "PASY", iata="SYA", name="Eareckson Air Station", city="Shemya",
            state="Alaska", elevation=98, lat=52.71229935, lon=174.1139984,
            tz="America/Adak",
        ),
        "NZSP": make_raw_airport(
            "NZSP", name="Amundsen-Scott South Pole Station", city="South Pole",
            country="AQ", elevation=9300, lat=-90.0, lon=0.0, tz="Antarctica/McMurdo",
        ),
        # Malformed rows: must load without raising
        "XBAD": {
            "icao": None, "iata": 42, "name": None, "city": ["x"],
            "country": None, "elevation": "high", "lat": "abc", "lon": None,
        },
        " xnul ": None,
        "XSTR": {
            "icao": "xstr", "name": "String Coordinates Field", "city": "Nowhere",
            "country": "qq", "elevation": "1200", "lat": "12.5", "lon": "-3.25",
        },
        "   ": make_raw_airport("", name="Blank Key Airport"),
    }


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def db():
    """In-memory SQLite session with all tables created (shareable across threads)."""
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    import travelblock.database.models  # noqa: F401
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def repo():
    """Repository loaded with the fixture dataset."""
    repository = AirportRepository(source=airport_rows)
    run(repository.load())
    yield repository
    repository.clear()
