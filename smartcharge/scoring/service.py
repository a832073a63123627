"""
Recommendation service: holds the active scorer and applies request defaults.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional

from ..queries.base import StationQueries
from ..queries.http import DEFAULT_TIMEOUT_S, MAX_RETRIES, HttpStationQueries
from ..tools.config_loader import get_config
from .explanation import DEFAULT_LOCALE
from .heuristic import DEFAULT_LIMIT, HeuristicScorer
from .models import ScoredStation, Scorer, ScoreRequest
from .personalized import PersonalizedScorer
from .weights import LearningConfig, weights_from_dict


logger = logging.getLogger(__name__)


SCORER_NAMES = ("heuristic", "personalized")


class RecommendationService:
    """
    Entry point for recommendation requests.

    The active scorer can be swapped at runtime. Calls already in flight keep
    the scorer they started with.
    """

    def __init__(self, scorer: Scorer, default_limit: int = DEFAULT_LIMIT):
        if default_limit < 1:
            raise ValueError(f"default_limit must be >= 1, got {default_limit}")
        self._scorer = scorer
        self.default_limit = default_limit

    @property
    def scorer(self) -> Scorer:
        return self._scorer

    async def recommend(self, request: ScoreRequest) -> List[ScoredStation]:
        """
        Rank stations for ``request`` with the active scorer.

        A limit <= 0 is replaced by the service default. Errors from the
        scorer (e.g. a failed station fetch) propagate unchanged.
        """
        if request.limit <= 0:
            request = replace(request, limit=self.default_limit)
        scorer = self._scorer
        return await scorer.score(request)

    def set_scorer(self, scorer: Scorer) -> None:
        previous = self._scorer.name()
        self._scorer = scorer
        logger.info(f"Active scorer switched from '{previous}' to '{scorer.name()}'")

    def scorer_name(self) -> str:
        return self._scorer.name()


def create_scorer(
    name: str,
    queries: StationQueries,
    config: Optional[Mapping[str, Any]] = None,
) -> Scorer:
    """
    Build a scorer by name from a configuration mapping.

    Args:
        name: "heuristic" or "personalized"
        queries: Source of stations and forecasts
        config: Profile mapping (see configs/default.yaml). Built-in defaults if None

    Raises:
        ValueError: If the name is unknown
    """
    config = config or {}
    weights_cfg: Dict[str, Any] = config.get("weights") or {}
    locale = config.get("locale", DEFAULT_LOCALE)
    default_limit = config.get("default_limit", DEFAULT_LIMIT)

    if name == "heuristic":
        return HeuristicScorer(
            queries,
            weights=weights_from_dict(name, weights_cfg.get(name) or {}),
            locale=locale,
            default_limit=default_limit,
        )
    if name == "personalized":
        return PersonalizedScorer(
            queries,
            weights=weights_from_dict(name, weights_cfg.get(name) or {}),
            learning=LearningConfig.from_dict(config.get("learning")),
            locale=locale,
            default_limit=default_limit,
        )
    raise ValueError(f"Unknown scorer '{name}'. Available: {', '.join(SCORER_NAMES)}")


def create_queries(config: Optional[Mapping[str, Any]] = None) -> HttpStationQueries:
    """HTTP query client from the ``queries`` section of a profile."""
    queries_cfg = (config or {}).get("queries") or {}
    base_url = queries_cfg.get("base_url")
    if not base_url:
        raise ValueError("queries.base_url is required to reach the station query service")
    return HttpStationQueries(
        base_url,
        timeout_s=queries_cfg.get("timeout_s", DEFAULT_TIMEOUT_S),
        max_retries=queries_cfg.get("max_retries", MAX_RETRIES),
    )


def create_service(
    config: Optional[Mapping[str, Any]] = None,
    queries: Optional[StationQueries] = None,
) -> RecommendationService:
    """
    Wire a RecommendationService from a profile.

    Args:
        config: Profile mapping. ``get_config()`` (environment profile plus overrides) if None
        queries: Station source; an HttpStationQueries from the profile if None
    """
    if config is None:
        config = get_config()
    if queries is None:
        queries = create_queries(config)
    scorer = create_scorer(config.get("scorer", "personalized"), queries, config)
    return RecommendationService(scorer, default_limit=config.get("default_limit", DEFAULT_LIMIT))
