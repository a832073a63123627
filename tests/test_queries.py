"""
Tests for station query collaborators (in-memory and HTTP).

HTTP calls go through ``httpx.MockTransport``; backoff is patched to zero so
retries run instantly.
"""

import asyncio

import httpx
import pytest
from pydantic import ValidationError

from smartcharge.queries import (
    ForecastEntry,
    HttpStationQueries,
    InMemoryStationQueries,
    Station,
    StationQueries,
    exponential_backoff_with_jitter,
)
from smartcharge.queries.http import BACKOFF_MAX


def run(coro):
    return asyncio.run(coro)


STATIONS_PAYLOAD = [
    {"id": 1, "name": "Kadikoy Hub", "lat": 41.0, "lng": 29.0, "density": 20, "price": 5.0},
    {"id": 2, "lat": 41.2, "lng": 29.0, "density": 80, "price": 12.0},
]

FORECASTS_PAYLOAD = [
    {"stationId": 1, "dayOfWeek": 0, "hour": 2, "predictedLoad": 70},
]


@pytest.fixture
def no_backoff(monkeypatch):
    monkeypatch.setattr(
        "smartcharge.queries.http.exponential_backoff_with_jitter", lambda attempt: 0.0
    )


# ==============================================================================
# Model Tests
# ==============================================================================

class TestModels:
    """Test pydantic records."""

    def test_forecast_aliases(self):
        entry = ForecastEntry.model_validate(FORECASTS_PAYLOAD[0])
        assert (entry.station_id, entry.day_of_week, entry.hour, entry.predicted_load) == (1, 0, 2, 70)

    def test_forecast_field_names(self):
        entry = ForecastEntry(station_id=1, day_of_week=6, hour=23, predicted_load=5)
        assert entry.day_of_week == 6

    def test_forecast_slot_validation(self):
        with pytest.raises(ValidationError):
            ForecastEntry(station_id=1, day_of_week=7, hour=2)
        with pytest.raises(ValidationError):
            ForecastEntry(station_id=1, day_of_week=0, hour=24)

    def test_station_defaults(self):
        station = Station(id=5, lat=1.0, lng=2.0)
        assert station.name is None
        assert station.density == 0
        assert station.price == 0.0

    def test_station_frozen(self):
        station = Station(id=5, lat=1.0, lng=2.0)
        with pytest.raises(ValidationError):
            station.price = 3.0


# ==============================================================================
# In-Memory Queries
# ==============================================================================

class TestInMemoryStationQueries:
    """Test the in-process collaborator."""

    def test_satisfies_protocol(self, queries):
        assert isinstance(queries, StationQueries)

    def test_lists_stations(self, queries, sample_stations):
        assert run(queries.list_stations()) == sample_stations

    def test_filters_forecasts_by_slot(self, queries):
        forecasts = run(queries.get_forecasts(0, 2))
        assert {f.station_id for f in forecasts} == {1, 4}
        assert run(queries.get_forecasts(3, 2)) == []

    def test_returns_copies(self, queries):
        stations = run(queries.list_stations())
        stations.clear()
        assert len(run(queries.list_stations())) == 4


# ==============================================================================
# HTTP Queries
# ==============================================================================

class TestHttpStationQueries:
    """Test the HTTP collaborator against a mock transport."""

    def test_satisfies_protocol(self):
        assert isinstance(HttpStationQueries("http://svc"), StationQueries)

    def test_list_stations(self):
        def handler(request):
            assert request.url.path == "/api/stations"
            return httpx.Response(200, json=STATIONS_PAYLOAD)

        queries = HttpStationQueries("http://svc/api/", transport=httpx.MockTransport(handler))
        stations = run(queries.list_stations())

        assert [s.id for s in stations] == [1, 2]
        assert stations[0].name == "Kadikoy Hub"
        assert stations[1].name is None

    def test_get_forecasts_sends_slot(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(200, json=FORECASTS_PAYLOAD)

        queries = HttpStationQueries("http://svc", transport=httpx.MockTransport(handler))
        forecasts = run(queries.get_forecasts(0, 2))

        assert seen == {"day_of_week": "0", "hour": "2"}
        assert forecasts[0].predicted_load == 70

    def test_sends_headers(self):
        def handler(request):
            assert request.headers["authorization"] == "Bearer t0ken"
            return httpx.Response(200, json=[])

        queries = HttpStationQueries(
            "http://svc",
            headers={"Authorization": "Bearer t0ken"},
            transport=httpx.MockTransport(handler),
        )
        assert run(queries.list_stations()) == []

    def test_retries_server_errors(self, no_backoff):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) < 3:
                return httpx.Response(503)
            return httpx.Response(200, json=STATIONS_PAYLOAD)

        queries = HttpStationQueries("http://svc", transport=httpx.MockTransport(handler))
        stations = run(queries.list_stations())

        assert len(calls) == 3
        assert len(stations) == 2

    def test_gives_up_after_max_retries(self, no_backoff):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        queries = HttpStationQueries("http://svc", max_retries=2, transport=httpx.MockTransport(handler))

        with pytest.raises(httpx.HTTPStatusError):
            run(queries.list_stations())
        assert len(calls) == 2

    def test_client_error_not_retried(self, no_backoff):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(404)

        queries = HttpStationQueries("http://svc", transport=httpx.MockTransport(handler))

        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            run(queries.list_stations())
        assert exc_info.value.response.status_code == 404
        assert len(calls) == 1

    def test_transport_errors_retried(self, no_backoff):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        queries = HttpStationQueries("http://svc", max_retries=3, transport=httpx.MockTransport(handler))

        with pytest.raises(httpx.ConnectError):
            run(queries.get_forecasts(0, 2))
        assert len(calls) == 3

    def test_invalid_payload_rejected(self):
        def handler(request):
            return httpx.Response(200, json=[{"stationId": 1, "dayOfWeek": 9, "hour": 2}])

        queries = HttpStationQueries("http://svc", transport=httpx.MockTransport(handler))

        with pytest.raises(ValidationError):
            run(queries.get_forecasts(0, 2))

    def test_rejects_zero_retries(self):
        with pytest.raises(ValueError):
            HttpStationQueries("http://svc", max_retries=0)


class TestBackoff:
    """Test exponential backoff with jitter."""

    def test_grows_then_caps(self):
        assert 1.0 <= exponential_backoff_with_jitter(0) < 2.0
        assert 2.0 <= exponential_backoff_with_jitter(1) < 3.0
        assert 4.0 <= exponential_backoff_with_jitter(2) < 5.0
        assert exponential_backoff_with_jitter(5) == BACKOFF_MAX
