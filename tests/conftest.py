"""
Pytest configuration and shared fixtures for hubmap tests.

This file provides:
- Entry builders and sample entry sets
- A fake geocoder standing in for the Google Geocoding API
- Environment setup
"""

import os
from typing import Dict, List, Optional, Union

import pytest

from hubmap.store import LocatedEntry, Position


# ==============================================================================
# Entry Builders
# ==============================================================================

def make_entry(
    lat: float,
    lng: float,
    *,
    radius: float = 5000,
    cars: Union[str, int, None] = "",
    address: Optional[str] = None,
    **kwargs,
) -> LocatedEntry:
    """Build an entry at ``(lat, lng)``; the address defaults to the coordinates."""
    return LocatedEntry(
        address=address or f"{lat},{lng}",
        position=Position(lat=lat, lng=lng),
        radius=radius,
        num_of_cars=cars,
        **kwargs,
    )


# 0.01 degree along the equator is about 1112 m
EQUATOR_STEP_DEG = 0.01


@pytest.fixture
def abc_entries() -> List[LocatedEntry]:
    """A and B about 1.1 km apart on the equator, C far away."""
    return [
        make_entry(0.0, 0.0, radius=2000, cars=3, address="A"),
        make_entry(0.0, EQUATOR_STEP_DEG, cars=4, address="B"),
        make_entry(10.0, 10.0, cars=100, address="C"),
    ]


@pytest.fixture
def chicago_entries() -> List[LocatedEntry]:
    """Depots around Chicago with car counts as typed into the form."""
    return [
        make_entry(41.8781, -87.6298, radius=3000, cars="12", address="Chicago Loop"),
        make_entry(41.8827, -87.6233, radius=3000, cars="8", address="Millennium Park"),
        make_entry(41.8916, -87.6079, radius=2000, cars="", address="Navy Pier"),
        make_entry(41.9742, -87.9073, radius=5000, cars="40 cars", address="O'Hare"),
        make_entry(41.7868, -87.7522, radius=5000, cars="abc", address="Midway"),
    ]


# ==============================================================================
# Mock Geocoder
# ==============================================================================

class MockGeocoder:
    """Resolve addresses from a lookup table; values may be exceptions to raise."""

    def __init__(self, known: Dict[str, Union[Position, Exception, None]]):
        self.known = dict(known)
        self.calls: List[str] = []

    async def resolve(self, address: str) -> Optional[Position]:
        self.calls.append(address)
        value = self.known.get(address)
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture
def mock_geocoder() -> MockGeocoder:
    return MockGeocoder(
        {
            "233 S Wacker Dr, Chicago": Position(41.8789, -87.6359),
            "875 N Michigan Ave, Chicago": Position(41.8989, -87.6229),
            "10000 W O'Hare Ave, Chicago": Position(41.9742, -87.9073),
        }
    )


# ==============================================================================
# Environment Setup
# ==============================================================================

@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Setup test environment variables."""
    # Dummy key so nothing in the suite reaches for a real one
    os.environ["GOOGLE_MAPS_API_KEY"] = "TEST_API_KEY_NOT_REAL"
    yield


# ==============================================================================
# Utilities
# ==============================================================================

def assert_approx_equal(a: float, b: float, tolerance: float = 0.01):
    """Assert two floats are approximately equal."""
    assert abs(a - b) < tolerance, f"{a} != {b} (tolerance={tolerance})"
