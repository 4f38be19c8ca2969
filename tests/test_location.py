"""Tests for services/location.py: location providers and nearest-airport lookup."""

import pytest
import requests

from travelblock.core.schemas import Coordinates
from travelblock.services import location as location_module
from travelblock.services.location import (
    IpLocationProvider,
    StaticLocationProvider,
    find_nearest_airport,
)
from tests.conftest import NYC


class FakeResponse:
    def __init__(self, payload=None, status=200, error=None):
        self.payload = payload
        self.status = status
        self.error = error

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        if self.error:
            raise self.error
        return self.payload


@pytest.fixture
def fake_get(monkeypatch):
    """Replace requests.get; set `.response` (or `.exc`) before calling the provider."""
    class FakeGet:
        response = None
        exc = None
        calls = []

        def __call__(self, url, timeout=None):
            self.calls.append((url, timeout))
            if self.exc:
                raise self.exc
            return self.response

    getter = FakeGet()
    getter.calls = []
    monkeypatch.setattr(location_module.requests, "get", getter)
    return getter


# ---------------------------------------------------------------------------
# IpLocationProvider
# ---------------------------------------------------------------------------

def test_ip_provider_latitude_longitude(fake_get):
    fake_get.response = FakeResponse({"latitude": 40.7128, "longitude": -74.006, "city": "New York"})
    provider = IpLocationProvider(url="https://geo.example/json", timeout=3)
    assert provider.get_current_location() == Coordinates(latitude=40.7128, longitude=-74.006)
    assert fake_get.calls == [("https://geo.example/json", 3)]


def test_ip_provider_lat_lon(fake_get):
    fake_get.response = FakeResponse({"status": "success", "lat": 51.5, "lon": -0.12})
    assert IpLocationProvider().get_current_location() == Coordinates(latitude=51.5, longitude=-0.12)


def test_ip_provider_network_error(fake_get):
    fake_get.exc = requests.ConnectionError("offline")
    assert IpLocationProvider().get_current_location() is None


def test_ip_provider_http_error(fake_get):
    fake_get.response = FakeResponse({}, status=429)
    assert IpLocationProvider().get_current_location() is None


def test_ip_provider_bad_json(fake_get):
    fake_get.response = FakeResponse(error=ValueError("Expecting value"))
    assert IpLocationProvider().get_current_location() is None


@pytest.mark.parametrize("payload", [
    {"error": True, "reason": "RateLimited"},
    {"latitude": "north", "longitude": 3},
    ["not", "a", "dict"],
])
def test_ip_provider_unusable_payload(fake_get, payload):
    fake_get.response = FakeResponse(payload)
    assert IpLocationProvider().get_current_location() is None


# ---------------------------------------------------------------------------
# find_nearest_airport
# ---------------------------------------------------------------------------

def test_nearest_from_provider(repo):
    assert find_nearest_airport(repo, StaticLocationProvider(NYC)).code == "KLGA"


def test_nearest_from_explicit_coordinates(repo):
    boston = Coordinates(latitude=42.36, longitude=-71.06)
    assert find_nearest_airport(repo, StaticLocationProvider(NYC), coordinates=boston).code == "KBOS"


def test_nearest_without_location(repo):
    assert find_nearest_airport(repo) is None
    assert find_nearest_airport(repo, StaticLocationProvider(None)) is None
