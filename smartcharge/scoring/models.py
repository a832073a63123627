"""
Request, result and strategy types shared by every scorer.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Protocol, runtime_checkable


@dataclass(frozen=True)
class ScoreRequest:
    """
    A single recommendation request.

    Attributes:
        user_id: Requesting user
        user_lat: User latitude in degrees
        user_lng: User longitude in degrees
        time_slot: Planned charging time; only hour and weekday are used
        limit: Number of results wanted (<= 0 means use the default)
    """
    user_id: int
    user_lat: float
    user_lng: float
    time_slot: datetime
    limit: int = 0

    @property
    def hour(self) -> int:
        return self.time_slot.hour

    @property
    def day_of_week(self) -> int:
        """Weekday with Sunday=0 ... Saturday=6, as stored by the forecast service."""
        return (self.time_slot.weekday() + 1) % 7


@dataclass
class ScoredStation:
    """
    One ranked station.

    Attributes:
        station_id: Station identifier
        score: Aggregate score (roughly 0-100, bonuses can exceed it)
        components: Component name -> normalized component score
        explanation: Human-readable, localized reason string
    """
    station_id: int
    score: float
    components: Dict[str, float] = field(default_factory=dict)
    explanation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@runtime_checkable
class Scorer(Protocol):
    """A strategy that ranks charging stations for a request."""

    async def score(self, request: ScoreRequest) -> List[ScoredStation]:
        ...

    def name(self) -> str:
        ...
