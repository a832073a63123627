"""Station and forecast access for the recommendation core."""

from .models import ForecastEntry, Station
from .base import InMemoryStationQueries, StationQueries
from .http import HttpStationQueries, exponential_backoff_with_jitter

__all__ = [
    "ForecastEntry",
    "Station",
    "StationQueries",
    "InMemoryStationQueries",
    "HttpStationQueries",
    "exponential_backoff_with_jitter",
]
