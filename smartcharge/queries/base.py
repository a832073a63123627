"""
Station query collaborator contract.

Scorers only ever read stations and load forecasts through this interface.
Both calls may hit the network or a database; cancellation and deadlines are
inherited from the awaiting task.
"""

from __future__ import annotations

from typing import Iterable, List, Protocol, runtime_checkable

from .models import ForecastEntry, Station


@runtime_checkable
class StationQueries(Protocol):
    """Read-only access to stations and their load forecasts."""

    async def list_stations(self) -> List[Station]:
        ...

    async def get_forecasts(self, day_of_week: int, hour: int) -> List[ForecastEntry]:
        ...


class InMemoryStationQueries:
    """
    StationQueries backed by in-process lists.

    Useful for local runs, demos and tests. Forecasts are filtered to the
    requested slot exactly as the query service does.
    """

    def __init__(
        self,
        stations: Iterable[Station],
        forecasts: Iterable[ForecastEntry] = (),
    ):
        self.stations: List[Station] = list(stations)
        self.forecasts: List[ForecastEntry] = list(forecasts)

    async def list_stations(self) -> List[Station]:
        return list(self.stations)

    async def get_forecasts(self, day_of_week: int, hour: int) -> List[ForecastEntry]:
        return [
            f for f in self.forecasts
            if f.day_of_week == day_of_week and f.hour == hour
        ]
