"""
Heuristic Station Scorer

Deterministic weighted sum over four normalized components:
- load: inverted congestion (forecast for the requested slot, density fallback)
- distance: proximity to the user, zero beyond a fixed cutoff
- green: flat bonus inside the off-peak tariff window
- price: inverted price

Station data and forecasts come from a StationQueries collaborator. A failed
station fetch aborts the request; a failed forecast fetch only degrades it to
density fallbacks.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from ..geo.distance import haversine_km
from ..queries.base import StationQueries
from ..queries.models import ForecastEntry, Station
from .explanation import DEFAULT_LOCALE, build_explanation, get_messages
from .models import ScoredStation, ScoreRequest
from .normalization import SCALE_MAX, normalize_array
from .selection import select_top_k
from .weights import HEURISTIC_WEIGHTS, ScoringWeights


logger = logging.getLogger(__name__)


DEFAULT_LIMIT = 10

# Component shaping
DISTANCE_CUTOFF_KM = 20.0
DISTANCE_STRETCH = 2.5   # stretches proximity past 100 before weighting
PRICE_CEILING = 15.0
PRICE_STRETCH = 1.5
GREEN_BONUS = 25.0
GREEN_START_HOUR = 23
GREEN_END_HOUR = 6

COMPONENT_COLUMNS: Dict[str, str] = {
    "load": "load_score",
    "distance": "distance_score",
    "green": "green_score",
    "price": "price_score",
}


def is_green_hour(hour: int) -> bool:
    """True for 23:00-06:59, the off-peak green tariff window."""
    return hour >= GREEN_START_HOUR or hour <= GREEN_END_HOUR


def build_forecast_map(forecasts: Iterable[ForecastEntry]) -> Dict[int, int]:
    """Station id -> predicted load. Later entries for a station win."""
    return {f.station_id: f.predicted_load for f in forecasts}


def build_station_frame(
    stations: List[Station],
    forecasts: Iterable[ForecastEntry],
    user_lat: float,
    user_lng: float,
) -> pd.DataFrame:
    """
    One row per station with effective load and distance to the user.

    A forecast of exactly 0 is treated as missing and replaced by the
    station's density, like an absent forecast.

    Returns:
        DataFrame with columns: id, lat, lng, density, price, load, distance_km
    """
    df = pd.DataFrame({
        "id": pd.Series([s.id for s in stations], dtype="int64"),
        "lat": pd.Series([s.lat for s in stations], dtype=float),
        "lng": pd.Series([s.lng for s in stations], dtype=float),
        "density": pd.Series([s.density for s in stations], dtype=float),
        "price": pd.Series([s.price for s in stations], dtype=float),
    })

    forecast = df["id"].map(build_forecast_map(forecasts)).astype(float)
    has_forecast = forecast.notna() & (forecast != 0)
    df["load"] = forecast.where(has_forecast, df["density"])

    df["distance_km"] = haversine_km(
        user_lat, user_lng, df["lat"].to_numpy(), df["lng"].to_numpy()
    )
    return df


def add_component_scores(df: pd.DataFrame, hour: int) -> pd.DataFrame:
    """Add load_score, distance_score, green_score and price_score columns."""
    df["load_score"] = normalize_array(SCALE_MAX - df["load"].to_numpy(), 0, SCALE_MAX)

    proximity = np.maximum(0.0, DISTANCE_CUTOFF_KM - df["distance_km"].to_numpy())
    df["distance_score"] = normalize_array(proximity, 0, DISTANCE_CUTOFF_KM) * DISTANCE_STRETCH

    df["green_score"] = GREEN_BONUS if is_green_hour(hour) else 0.0

    df["price_score"] = (
        normalize_array(PRICE_CEILING - df["price"].to_numpy(), 0, PRICE_CEILING) * PRICE_STRETCH
    )
    return df


class HeuristicScorer:
    """
    Deterministic multi-factor station scorer.

    Holds no mutable state; concurrent calls are safe.
    """

    def __init__(
        self,
        queries: StationQueries,
        weights: Optional[ScoringWeights] = None,
        locale: str = DEFAULT_LOCALE,
        default_limit: int = DEFAULT_LIMIT,
    ):
        """
        Args:
            queries: Source of stations and load forecasts
            weights: Weight set to combine components. Defaults to HEURISTIC_WEIGHTS
            locale: Explanation language ("tr" or "en")
            default_limit: Result count used when a request's limit is <= 0
        """
        get_messages(locale)  # fail fast on unknown locales
        self.queries = queries
        self.weights = weights or HEURISTIC_WEIGHTS
        self.locale = locale
        self.default_limit = default_limit

    def name(self) -> str:
        return "heuristic"

    async def score(self, request: ScoreRequest) -> List[ScoredStation]:
        stations, forecasts = await self._fetch(request)
        df = self._score_frame(stations, forecasts, request)

        scored = [
            ScoredStation(
                station_id=int(row.id),
                score=float(row.score),
                components=self._components(row),
                explanation=self._explain(row, request.hour),
            )
            for row in df.itertuples(index=False)
        ]

        logger.debug(
            f"{self.name()} scored {len(scored)} stations for user {request.user_id} "
            f"(day={request.day_of_week}, hour={request.hour})"
        )
        return select_top_k(scored, self._effective_limit(request))

    async def _fetch(self, request: ScoreRequest) -> Tuple[List[Station], List[ForecastEntry]]:
        """Stations are required; forecasts are optional enrichment."""
        stations = await self.queries.list_stations()
        try:
            forecasts = await self.queries.get_forecasts(request.day_of_week, request.hour)
        except Exception as e:
            logger.warning(
                f"Forecast fetch failed for day={request.day_of_week} hour={request.hour}, "
                f"falling back to station density: {e!r}"
            )
            forecasts = []
        return list(stations), list(forecasts)

    def _score_frame(
        self,
        stations: List[Station],
        forecasts: List[ForecastEntry],
        request: ScoreRequest,
    ) -> pd.DataFrame:
        df = build_station_frame(stations, forecasts, request.user_lat, request.user_lng)
        df = add_component_scores(df, request.hour)

        w = self.weights
        df["base_score"] = (
            w.w_load * df["load_score"]
            + w.w_distance * df["distance_score"]
            + w.w_green * df["green_score"]
            + w.w_price * df["price_score"]
        )
        df["score"] = df["base_score"]
        return df

    def _components(self, row) -> Dict[str, float]:
        return {name: float(getattr(row, column)) for name, column in COMPONENT_COLUMNS.items()}

    def _explain(self, row, hour: int) -> str:
        return build_explanation(
            row.load,
            is_green_hour(hour),
            row.distance_km,
            row.price,
            locale=self.locale,
        )

    def _effective_limit(self, request: ScoreRequest) -> int:
        return request.limit if request.limit > 0 else self.default_limit
