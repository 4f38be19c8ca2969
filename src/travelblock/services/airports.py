# services/airports.py
"""
In-memory airport repository.

Loads the airport dataset once, precomputes normalized search keys for every
record and answers text search, radius, code and country queries against
that cached snapshot. Queries issued before `load()` (or after `clear()`)
return empty results instead of raising, so callers can query speculatively
(e.g. on every keystroke) without sequencing a load first.

The dataset is a mapping keyed by ICAO code in the airports.json layout:
    {"KJFK": {"icao": "KJFK", "iata": "JFK", "name": ..., "city": ...,
              "state": ..., "country": "US", "elevation": 13,
              "lat": 40.63, "lon": -73.77, "tz": "America/New_York"}, ...}
"""

import heapq
import json
import logging
import math
import time
from dataclasses import dataclass
from functools import lru_cache
from numbers import Real
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional

import airportsdata

from travelblock.config import (
    AIRPORTS_DATA_PATH,
    MAX_CODE_LENGTH,
    SEARCH_MAX_QUERY_LENGTH,
    SEARCH_RESULT_LIMIT,
)
from travelblock.core.geo import (
    bounding_box_limits,
    distance_miles,
    is_within_bounding_box,
    validate_point,
)
from travelblock.core.schemas import AirportRecord
from travelblock.core.scoring import SearchKeys, compute_score, normalize_for_search

logger = logging.getLogger(__name__)

AirportSource = Callable[[], Mapping[str, Any]]


@dataclass(frozen=True, slots=True)
class IndexedAirport:
    """A public record plus the search keys derived from it at load time."""
    record: AirportRecord
    keys: SearchKeys
    has_position: bool


@dataclass(frozen=True)
class _Snapshot:
    by_code: dict[str, IndexedAirport]
    records: tuple[IndexedAirport, ...]
    public: Mapping[str, AirportRecord]


def read_default_source() -> Mapping[str, Any]:
    """Raw dataset: AIRPORTS_DATA_PATH if configured, else the airportsdata ICAO set."""
    if AIRPORTS_DATA_PATH:
        with open(AIRPORTS_DATA_PATH, "r", encoding="utf-8") as f:
            return json.load(f)
    return airportsdata.load("ICAO")


def _text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _number(value) -> Optional[float]:
    """Finite float from a number or numeric string; None otherwise."""
    if isinstance(value, bool) or not isinstance(value, (Real, str)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def index_row(key, raw) -> Optional[IndexedAirport]:
    """
    Build one indexed record from a raw source row.

    Never raises: wrong-typed fields fall back to empty strings, elevation to 0
    and coordinates to None. Returns None only when the key itself is blank.
    """
    code_key = str(key).strip().upper()
    if not code_key:
        return None
    if not isinstance(raw, Mapping):
        raw = {}

    code = _text(raw.get("icao")).upper() or code_key
    short_code = _text(raw.get("iata")).upper()
    name = _text(raw.get("name"))
    city = _text(raw.get("city"))
    lat = _number(raw.get("lat"))
    lon = _number(raw.get("lon"))

    record = AirportRecord(
        code=code,
        short_code=short_code,
        name=name,
        city=city,
        region=_text(raw.get("state")) or _text(raw.get("subd")),
        country=_text(raw.get("country")).upper(),
        elevation=_number(raw.get("elevation")) or 0,
        latitude=lat,
        longitude=lon,
        timezone=_text(raw.get("tz")),
    )
    keys = SearchKeys(
        code=normalize_for_search(code),
        short_code=normalize_for_search(short_code),
        name=normalize_for_search(name),
        city=normalize_for_search(city),
    )
    has_position = (
        lat is not None and lon is not None
        and -90 <= lat <= 90 and -180 <= lon <= 180
    )
    return IndexedAirport(record=record, keys=keys, has_position=has_position)


class AirportRepository:
    """Owns the cached airport dataset and every read query over it."""

    def __init__(self, source: Optional[AirportSource] = None):
        self._source = source or read_default_source
        self._snapshot: Optional[_Snapshot] = None

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    def __len__(self) -> int:
        snapshot = self._snapshot
        return len(snapshot.records) if snapshot else 0

    async def load(self) -> Mapping[str, AirportRecord]:
        """
        Load and index the dataset on first call; later calls return the same
        read-only mapping (canonical code -> AirportRecord) without re-reading.

        Source-level failures (missing file, unreadable JSON) propagate.
        Malformed rows never do.
        """
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot.public

        started = time.perf_counter()
        raw_data = self._source()
        if not isinstance(raw_data, Mapping):
            raise TypeError(f"Airport source must be a mapping keyed by code, got {type(raw_data).__name__}")

        by_code: dict[str, IndexedAirport] = {}
        skipped = 0
        for key, raw in raw_data.items():
            item = index_row(key, raw)
            if item is None:
                skipped += 1
                continue
            by_code[str(key).strip().upper()] = item

        records = tuple(by_code.values())
        snapshot = _Snapshot(
            by_code=by_code,
            records=records,
            public=MappingProxyType({code: item.record for code, item in by_code.items()}),
        )
        # Single assignment: readers see either no data or the complete snapshot
        self._snapshot = snapshot

        unpositioned = sum(1 for item in records if not item.has_position)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"Loaded {len(records)} airports in {elapsed_ms:.0f} ms")
        if skipped or unpositioned:
            logger.warning(
                "Airport data: %d row(s) skipped for blank keys, %d without usable coordinates",
                skipped, unpositioned,
            )
        return snapshot.public

    def clear(self) -> None:
        """Drop the cached dataset. Intended for test isolation."""
        self._snapshot = None

    # --- queries ---

    def search(self, term: str, limit: Optional[int] = None) -> list[AirportRecord]:
        """
        Free-text search over code, short code, name and city.

        Results are ordered by relevance score (highest first) and capped at
        `limit` (SEARCH_RESULT_LIMIT by default). Records scoring 0 are never
        returned.
        """
        snapshot = self._snapshot
        if snapshot is None or not isinstance(term, str) or not term.strip():
            return []
        if limit is None:
            limit = SEARCH_RESULT_LIMIT
        if limit <= 0:
            return []

        needle = normalize_for_search(term.strip()[:SEARCH_MAX_QUERY_LENGTH])
        scored = []
        for item in snapshot.records:
            score = compute_score(item.keys, needle)
            if score > 0:
                scored.append((score, item))

        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [item.record for _, item in scored[:limit]]

    def _scan_radius(self, origin, max_distance: float) -> list[tuple[IndexedAirport, float]]:
        snapshot = self._snapshot
        if snapshot is None:
            return []
        validate_point(origin)
        if isinstance(max_distance, bool) or not isinstance(max_distance, Real) or not max_distance >= 0:
            return []

        limits = bounding_box_limits(origin, max_distance)
        hits = []
        for item in snapshot.records:
            if not item.has_position or not is_within_bounding_box(origin, item.record, limits):
                continue
            distance = distance_miles(origin, item.record)
            if distance <= max_distance:
                hits.append((item, distance))

        hits.sort(key=lambda pair: pair[1])
        return hits

    def within_distance(self, origin, max_distance: float) -> list[AirportRecord]:
        """
        Airports at most `max_distance` miles from `origin`, nearest first.

        `origin` is any object with latitude/longitude; a structurally invalid
        origin raises CoordinateError (once data is loaded).
        """
        return [item.record for item, _ in self._scan_radius(origin, max_distance)]

    def nearest(
        self,
        origin,
        limit: int = 1,
        max_distance: Optional[float] = None,
        exclude: Iterable[str] = (),
    ) -> list[AirportRecord]:
        """Closest `limit` airports to `origin`, optionally within a radius and skipping codes."""
        snapshot = self._snapshot
        if snapshot is None or limit <= 0:
            return []
        excluded = {c.strip().upper() for c in exclude if isinstance(c, str)}

        if max_distance is not None:
            hits = self._scan_radius(origin, max_distance)
            return [item.record for item, _ in hits if item.record.code not in excluded][:limit]

        validate_point(origin)
        candidates = (
            (item, distance_miles(origin, item.record))
            for item in snapshot.records
            if item.has_position and item.record.code not in excluded
        )
        closest = heapq.nsmallest(limit, candidates, key=lambda pair: pair[1])
        return [item.record for item, _ in closest]

    def nearest_one(self, origin) -> Optional[AirportRecord]:
        found = self.nearest(origin, limit=1)
        return found[0] if found else None

    def by_code(self, code: str) -> Optional[AirportRecord]:
        """O(1) case-insensitive lookup by ICAO code."""
        snapshot = self._snapshot
        if snapshot is None or not isinstance(code, str):
            return None
        key = code.strip().upper()
        if not key or len(key) > MAX_CODE_LENGTH:
            return None
        item = snapshot.by_code.get(key)
        return item.record if item else None

    def by_country(self, country: str) -> list[AirportRecord]:
        """All airports of a country (ISO alpha-2, case-insensitive), in dataset order."""
        snapshot = self._snapshot
        if snapshot is None or not isinstance(country, str):
            return []
        country_code = country.strip().upper()
        if not country_code or len(country_code) > MAX_CODE_LENGTH:
            return []
        return [item.record for item in snapshot.records if item.record.country == country_code]


@lru_cache(maxsize=1)
def get_repository() -> AirportRepository:
    """Process-wide repository over the default dataset."""
    return AirportRepository()
