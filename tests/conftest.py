"""
Pytest configuration and shared fixtures for smartcharge tests.

This file provides:
- Sample stations and forecasts around a fixed user location
- In-memory and failing query collaborators
- A deterministic random generator stub for exploration tests
- Common test utilities
"""

from datetime import datetime
from typing import List, Optional

import numpy as np
import pytest

from smartcharge.queries import ForecastEntry, InMemoryStationQueries, Station
from smartcharge.scoring import ScoreRequest


# ==============================================================================
# Locations & Times
# ==============================================================================

USER_LAT = 41.0
USER_LNG = 29.0

# Degrees of latitude per kilometre on a 6371 km sphere
DEG_PER_KM = 1 / 111.19492664455873


@pytest.fixture
def night_slot() -> datetime:
    """Sunday 02:00 (inside the green window, day_of_week == 0)."""
    return datetime(2025, 10, 12, 2, 0, 0)


@pytest.fixture
def noon_slot() -> datetime:
    """Sunday 12:00 (outside the green window)."""
    return datetime(2025, 10, 12, 12, 0, 0)


@pytest.fixture
def make_request(night_slot):
    """Factory for ScoreRequests at the fixed user location."""
    def _make(user_id: int = 7, time_slot: Optional[datetime] = None, limit: int = 0) -> ScoreRequest:
        return ScoreRequest(
            user_id=user_id,
            user_lat=USER_LAT,
            user_lng=USER_LNG,
            time_slot=time_slot or night_slot,
            limit=limit,
        )
    return _make


# ==============================================================================
# Sample Stations & Forecasts
# ==============================================================================

@pytest.fixture
def sample_stations() -> List[Station]:
    """
    Four stations north of the user.

    1: at the user, density 20, price 5.0
    2: ~25 km away, density 80, price 12.0
    3: ~10 km away, density 50, price 8.0
    4: ~2.2 km away, density 40, price 6.5
    """
    return [
        Station(id=1, name="Kadikoy Hub", lat=USER_LAT, lng=USER_LNG, density=20, price=5.0),
        Station(id=2, name="Sariyer Park", lat=USER_LAT + 25 * DEG_PER_KM, lng=USER_LNG, density=80, price=12.0),
        Station(id=3, name="Besiktas Pier", lat=USER_LAT + 10 * DEG_PER_KM, lng=USER_LNG, density=50, price=8.0),
        Station(id=4, name="Moda Garage", lat=USER_LAT + 0.02, lng=USER_LNG, density=40, price=6.5),
    ]


@pytest.fixture
def sample_forecasts() -> List[ForecastEntry]:
    """
    Forecasts for Sunday 02:00 plus one for another hour.

    Station 1 is forecast at 70; station 4's forecast of 0 means "missing".
    """
    return [
        ForecastEntry(station_id=1, day_of_week=0, hour=2, predicted_load=70),
        ForecastEntry(station_id=4, day_of_week=0, hour=2, predicted_load=0),
        ForecastEntry(station_id=3, day_of_week=0, hour=12, predicted_load=90),
    ]


@pytest.fixture
def queries(sample_stations, sample_forecasts) -> InMemoryStationQueries:
    return InMemoryStationQueries(sample_stations, sample_forecasts)


@pytest.fixture
def many_stations() -> List[Station]:
    """Twelve stations spread along a meridian."""
    return [
        Station(
            id=100 + i,
            lat=USER_LAT + i * 0.01,
            lng=USER_LNG,
            density=10 + 5 * i,
            price=4.0 + i,
        )
        for i in range(12)
    ]


# ==============================================================================
# Collaborator Doubles
# ==============================================================================

class FailingForecastQueries(InMemoryStationQueries):
    """Stations load fine; the forecast call always fails."""

    async def get_forecasts(self, day_of_week: int, hour: int):
        raise RuntimeError("forecast service unavailable")


class FailingStationQueries(InMemoryStationQueries):
    """The station call fails with a fixed error instance."""

    def __init__(self, error: Exception):
        super().__init__([])
        self.error = error

    async def list_stations(self):
        raise self.error


class FixedRng:
    """
    Stand-in for numpy.random.Generator with fixed draws.

    ``random()`` returns ``draw``; ``random(n)`` returns ``n`` copies of ``bonus``.
    """

    def __init__(self, draw: float, bonus: float = 0.5):
        self.draw = draw
        self.bonus = bonus
        self.calls = 0

    def random(self, size=None):
        self.calls += 1
        if size is None:
            return self.draw
        return np.full(size, self.bonus)


@pytest.fixture
def never_explore() -> FixedRng:
    return FixedRng(draw=0.99)


@pytest.fixture
def always_explore() -> FixedRng:
    return FixedRng(draw=0.0, bonus=0.5)


# ==============================================================================
# Utilities
# ==============================================================================

def by_id(results):
    """Map station_id -> ScoredStation."""
    return {r.station_id: r for r in results}


def assert_sorted_descending(results):
    scores = [r.score for r in results]
    assert all(a >= b for a, b in zip(scores, scores[1:])), scores
