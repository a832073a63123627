"""
Personalized Station Scorer

Extends the heuristic score with a learned per-(user, station, hour) value
and epsilon-greedy exploration:

    score = base + q_value * w_rl [+ U(0, bonus_max) when exploring]

Exploration is decided once per scoring call: a single draw against the
current epsilon either adds an independent random bonus to every station in
the call or to none of them. Epsilon decays once per call towards its floor.

Learned values are updated by the reward-reporting side through
``update_value`` (or ``record_outcome``) with a one-step rule whose
next-state term is fixed at zero:

    Q <- Q + alpha * (reward + gamma * 0 - Q)
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from ..queries.base import StationQueries
from ..queries.models import ForecastEntry, Station
from ..tools.locks import ReadWriteLock
from .explanation import DEFAULT_LOCALE, build_explanation
from .heuristic import DEFAULT_LIMIT, HeuristicScorer, is_green_hour
from .models import ScoredStation, ScoreRequest
from .qtable import QEntry, QKey, QTableStore, utcnow
from .selection import select_top_k
from .weights import DEFAULT_LEARNING, PERSONALIZED_WEIGHTS, LearningConfig, ScoringWeights


logger = logging.getLogger(__name__)


# The update does not bootstrap from the next state
NEXT_STATE_VALUE = 0.0

# Reward shaping
CO2_REWARD_FACTOR = 10.0
GREEN_REWARD = 20.0
LOW_LOAD_REWARD = 15.0
HIGH_LOAD_PENALTY = -10.0
LOW_LOAD_THRESHOLD = 30
HIGH_LOAD_THRESHOLD = 65

# CO2 credited per completed session when the caller has no measurement (kg)
GREEN_SESSION_CO2_KG = 2.5
STANDARD_SESSION_CO2_KG = 0.5


def compute_reward(coins: int, co2_saved: float, is_green: bool, load: int) -> float:
    """
    Scalar reward for an observed charging outcome.

    reward = coins + 10 * co2_saved + (20 if green) + load term, where the
    load term is +15 below 30, -10 above 65 and 0 otherwise.

    Examples:
        >>> compute_reward(coins=5, co2_saved=2.0, is_green=True, load=20)
        60.0
    """
    reward = float(coins)
    reward += co2_saved * CO2_REWARD_FACTOR

    if is_green:
        reward += GREEN_REWARD

    if load < LOW_LOAD_THRESHOLD:
        reward += LOW_LOAD_REWARD
    elif load > HIGH_LOAD_THRESHOLD:
        reward += HIGH_LOAD_PENALTY

    return reward


def default_co2_saved(is_green: bool) -> float:
    return GREEN_SESSION_CO2_KG if is_green else STANDARD_SESSION_CO2_KG


@dataclass(frozen=True)
class ChargingOutcome:
    """
    What actually happened after a recommendation was followed.

    Attributes:
        user_id: User who charged
        station_id: Station used
        time_slot: When the session took place
        coins: Coins earned for the session
        is_green: Whether the session ran in the green tariff window
        load: Realized station load, 0-100
        co2_saved: CO2 saved in kg; None uses the per-session default
    """
    user_id: int
    station_id: int
    time_slot: datetime
    coins: int
    is_green: bool
    load: int
    co2_saved: Optional[float] = None

    @property
    def hour(self) -> int:
        return self.time_slot.hour

    @property
    def day_of_week(self) -> int:
        return (self.time_slot.weekday() + 1) % 7


class PersonalizedScorer(HeuristicScorer):
    """
    Online-learning scorer.

    Safe for concurrent use: learned values live in a QTableStore, and the
    exploration rate is guarded by its own reader/writer lock. The rate is
    decayed in a short exclusive section after all reads of a call are done.
    """

    def __init__(
        self,
        queries: StationQueries,
        weights: Optional[ScoringWeights] = None,
        learning: Optional[LearningConfig] = None,
        store: Optional[QTableStore] = None,
        rng: Optional[np.random.Generator] = None,
        locale: str = DEFAULT_LOCALE,
        default_limit: int = DEFAULT_LIMIT,
    ):
        """
        Args:
            queries: Source of stations and load forecasts
            weights: Weight set. Defaults to PERSONALIZED_WEIGHTS
            learning: Hyperparameters. Defaults to DEFAULT_LEARNING
            store: Q-value store. A fresh one sized by ``learning.max_users`` if None
            rng: Random generator for exploration; pass a seeded one for reproducibility
            locale: Explanation language ("tr" or "en")
            default_limit: Result count used when a request's limit is <= 0
        """
        super().__init__(
            queries,
            weights=weights or PERSONALIZED_WEIGHTS,
            locale=locale,
            default_limit=default_limit,
        )
        self.learning = learning or DEFAULT_LEARNING
        self.store = store if store is not None else QTableStore(max_users=self.learning.max_users)
        self._rng = rng if rng is not None else np.random.default_rng()
        self._epsilon = self.learning.epsilon
        self._epsilon_lock = ReadWriteLock()

    def name(self) -> str:
        return "personalized"

    # ----- scoring ----------------------------------------------------------

    async def score(self, request: ScoreRequest) -> List[ScoredStation]:
        stations, forecasts = await self._fetch(request)
        df = self._score_frame(stations, forecasts, request)

        explored = self._rng.random() < self.current_epsilon()
        if explored:
            df["score"] = df["score"] + (
                self._rng.random(len(df)) * self.learning.exploration_bonus_max
            )

        scored = [
            ScoredStation(
                station_id=int(row.id),
                score=float(row.score),
                components=self._components(row),
                explanation=self._explain(row, request.hour, explored=explored),
            )
            for row in df.itertuples(index=False)
        ]

        epsilon = self._decay_epsilon()

        logger.debug(
            f"{self.name()} scored {len(scored)} stations for user {request.user_id} "
            f"(day={request.day_of_week}, hour={request.hour}, explored={explored}, "
            f"epsilon={epsilon:.4f})"
        )
        return select_top_k(scored, self._effective_limit(request))

    def _score_frame(
        self,
        stations: List[Station],
        forecasts: List[ForecastEntry],
        request: ScoreRequest,
    ) -> pd.DataFrame:
        df = super()._score_frame(stations, forecasts, request)
        df["q_value"] = np.asarray(
            self.store.values_for(request.user_id, df["id"].tolist(), request.hour),
            dtype=float,
        )
        df["rl_bonus"] = df["q_value"] * self.weights.w_rl
        df["score"] = df["base_score"] + df["rl_bonus"]
        return df

    def _components(self, row) -> Dict[str, float]:
        components = super()._components(row)
        components["rl_bonus"] = float(row.rl_bonus)
        components["q_value"] = float(row.q_value)
        return components

    def _explain(self, row, hour: int, explored: bool = False) -> str:
        return build_explanation(
            row.load,
            is_green_hour(hour),
            row.distance_km,
            row.price,
            experienced=row.q_value > self.learning.experience_threshold,
            explored=explored,
            locale=self.locale,
        )

    # ----- exploration rate -------------------------------------------------

    def current_epsilon(self) -> float:
        with self._epsilon_lock.read_locked():
            return self._epsilon

    def _decay_epsilon(self) -> float:
        with self._epsilon_lock.write_locked():
            self._epsilon = max(
                self.learning.min_epsilon,
                self._epsilon * self.learning.epsilon_decay,
            )
            return self._epsilon

    # ----- learning ---------------------------------------------------------

    def update_value(
        self,
        user_id: int,
        station_id: int,
        hour: int,
        day_of_week: int,
        reward: float,
    ) -> None:
        """Apply one observed reward to the (user, station, hour) value."""
        alpha = self.learning.alpha
        gamma = self.learning.gamma

        def apply(entry: QEntry) -> None:
            old_q = entry.q_value
            entry.q_value = old_q + alpha * (reward + gamma * NEXT_STATE_VALUE - old_q)
            entry.visit_count += 1
            entry.day_of_week = day_of_week
            entry.last_updated = utcnow()

        updated = self.store.upsert(QKey(user_id, station_id, hour), apply)
        logger.debug(
            f"Q({user_id}, {station_id}, {hour}) -> {updated.q_value:.3f} "
            f"after reward {reward:.2f} (visits={updated.visit_count})"
        )

    compute_reward = staticmethod(compute_reward)

    def record_outcome(self, outcome: ChargingOutcome) -> float:
        """
        Turn an observed charging outcome into a reward and learn from it.

        Returns:
            The reward that was applied
        """
        co2_saved = (
            outcome.co2_saved if outcome.co2_saved is not None
            else default_co2_saved(outcome.is_green)
        )
        reward = compute_reward(outcome.coins, co2_saved, outcome.is_green, outcome.load)
        self.update_value(
            outcome.user_id,
            outcome.station_id,
            outcome.hour,
            outcome.day_of_week,
            reward,
        )
        return reward

    # ----- introspection ----------------------------------------------------

    def get_q_value(self, user_id: int, station_id: int, hour: int) -> float:
        entry = self.store.get(QKey(user_id, station_id, hour))
        return entry.q_value if entry is not None else 0.0

    def table_size(self) -> int:
        return self.store.size()
