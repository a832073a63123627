"""
Scoring Module for SmartCharge

Ranks charging stations for a user, time and place with:
- Min-max normalization of load, distance, tariff window and price
- A deterministic heuristic scorer
- A personalized scorer with per-(user, station, hour) learned values and
  epsilon-greedy exploration
- Deterministic top-K selection (ties by station id)

Usage:
    from smartcharge.queries import InMemoryStationQueries
    from smartcharge.scoring import (
        HeuristicScorer,
        PersonalizedScorer,
        RecommendationService,
        ScoreRequest,
    )

    queries = InMemoryStationQueries(stations, forecasts)
    service = RecommendationService(PersonalizedScorer(queries))
    ranked = await service.recommend(
        ScoreRequest(user_id=7, user_lat=41.01, user_lng=28.97, time_slot=when)
    )

    # Later, when the outcome of a session is known
    scorer = service.scorer
    reward = scorer.compute_reward(coins=50, co2_saved=2.5, is_green=True, load=25)
    scorer.update_value(7, ranked[0].station_id, when.hour, 3, reward)
"""

# Normalization
from .normalization import normalize, normalize_array

# Request/result types and the strategy contract
from .models import ScoredStation, Scorer, ScoreRequest

# Weights and learning configuration
from .weights import (
    DEFAULT_LEARNING,
    HEURISTIC_WEIGHTS,
    PERSONALIZED_WEIGHTS,
    WEIGHT_VARIANTS,
    LearningConfig,
    ScoringWeights,
    load_weights_from_yaml,
    save_weights_to_yaml,
    weights_from_dict,
)

# Selection and explanations
from .selection import select_top_k
from .explanation import build_explanation

# Scorers
from .heuristic import DEFAULT_LIMIT, HeuristicScorer, is_green_hour
from .qtable import QEntry, QKey, QTableStore
from .personalized import (
    ChargingOutcome,
    PersonalizedScorer,
    compute_reward,
    default_co2_saved,
)

# Service
from .service import (
    SCORER_NAMES,
    RecommendationService,
    create_queries,
    create_scorer,
    create_service,
)

__all__ = [
    # Normalization
    "normalize",
    "normalize_array",

    # Types
    "ScoredStation",
    "Scorer",
    "ScoreRequest",

    # Weights
    "DEFAULT_LEARNING",
    "HEURISTIC_WEIGHTS",
    "PERSONALIZED_WEIGHTS",
    "WEIGHT_VARIANTS",
    "LearningConfig",
    "ScoringWeights",
    "load_weights_from_yaml",
    "save_weights_to_yaml",
    "weights_from_dict",

    # Selection and explanations
    "select_top_k",
    "build_explanation",

    # Scorers
    "DEFAULT_LIMIT",
    "HeuristicScorer",
    "is_green_hour",
    "QEntry",
    "QKey",
    "QTableStore",
    "ChargingOutcome",
    "PersonalizedScorer",
    "compute_reward",
    "default_co2_saved",

    # Service
    "SCORER_NAMES",
    "RecommendationService",
    "create_queries",
    "create_scorer",
    "create_service",
]
