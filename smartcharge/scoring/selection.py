"""Top-K selection shared by all scorers."""

from typing import Iterable, List

from .models import ScoredStation


def select_top_k(scored: Iterable[ScoredStation], limit: int) -> List[ScoredStation]:
    """
    Sort stations by score (descending) and keep the first ``limit``.

    Equal scores are ordered by station id ascending so results are
    reproducible. Callers replace a non-positive limit with their default
    before calling; a non-positive limit here yields an empty list.

    Args:
        scored: Scored stations in any order
        limit: Maximum number of results

    Returns:
        At most ``limit`` stations, best first
    """
    ranked = sorted(scored, key=lambda s: (-s.score, s.station_id))
    if limit <= 0:
        return []
    return ranked[:limit]
