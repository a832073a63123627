"""
Scoring Weights and Learning Configuration Module

Holds the weight sets used to combine station score components and the
hyperparameters of the personalized (online-learning) scorer, with YAML
load/save helpers.
"""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml


DEFAULT_WEIGHTS_PATH = Path(__file__).parent.parent.parent / "configs" / "weights.yaml"


@dataclass(frozen=True)
class ScoringWeights:
    """
    Weights applied to normalized score components.

    Attributes:
        w_load: Weight for the (inverted) load score
        w_distance: Weight for the proximity score
        w_green: Weight for the green-tariff bonus
        w_price: Weight for the affordability score
        w_rl: Multiplier turning a learned Q-value into a score bonus
        variant_name: Name of the weight set (for logging)
    """
    w_load: float = 0.40
    w_distance: float = 0.20
    w_green: float = 0.25
    w_price: float = 0.15
    w_rl: float = 0.0
    variant_name: str = "heuristic"

    def __post_init__(self):
        for f in fields(self):
            if f.name.startswith("w_") and getattr(self, f.name) < 0:
                raise ValueError(f"{f.name} must be non-negative, got {getattr(self, f.name)}")

    def to_dict(self) -> Dict[str, float]:
        """Weight values only, without the variant name."""
        return {k: v for k, v in asdict(self).items() if k != "variant_name"}


HEURISTIC_WEIGHTS = ScoringWeights(
    w_load=0.40,
    w_distance=0.20,
    w_green=0.25,
    w_price=0.15,
    w_rl=0.0,
    variant_name="heuristic",
)

# 0.05 of the load weight moves to the learned bonus
PERSONALIZED_WEIGHTS = ScoringWeights(
    w_load=0.35,
    w_distance=0.20,
    w_green=0.25,
    w_price=0.15,
    w_rl=0.05,
    variant_name="personalized",
)

WEIGHT_VARIANTS: Dict[str, ScoringWeights] = {
    "heuristic": HEURISTIC_WEIGHTS,
    "personalized": PERSONALIZED_WEIGHTS,
}


@dataclass(frozen=True)
class LearningConfig:
    """
    Hyperparameters of the personalized scorer.

    Attributes:
        alpha: Learning rate of the Q-value update
        gamma: Discount factor (kept for completeness; next-state value is 0)
        epsilon: Initial exploration rate
        epsilon_decay: Multiplicative decay applied once per scoring call
        min_epsilon: Exploration floor
        exploration_bonus_max: Upper bound (exclusive) of the random bonus
        experience_threshold: Q-value above which "past experience" is explained
        max_users: Users kept in the Q-table before least recently used are evicted
    """
    alpha: float = 0.1
    gamma: float = 0.9
    epsilon: float = 0.3
    epsilon_decay: float = 0.995
    min_epsilon: float = 0.05
    exploration_bonus_max: float = 10.0
    experience_threshold: float = 10.0
    max_users: int = 100_000

    def __post_init__(self):
        if not 0.0 < self.alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {self.alpha}")
        if not 0.0 <= self.gamma <= 1.0:
            raise ValueError(f"gamma must be in [0, 1], got {self.gamma}")
        if not 0.0 <= self.min_epsilon <= self.epsilon <= 1.0:
            raise ValueError(
                f"expected 0 <= min_epsilon <= epsilon <= 1, "
                f"got min_epsilon={self.min_epsilon}, epsilon={self.epsilon}"
            )
        if not 0.0 < self.epsilon_decay <= 1.0:
            raise ValueError(f"epsilon_decay must be in (0, 1], got {self.epsilon_decay}")
        if self.max_users < 1:
            raise ValueError(f"max_users must be >= 1, got {self.max_users}")

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "LearningConfig":
        """Build from a config mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (data or {}).items() if k in known})


DEFAULT_LEARNING = LearningConfig()


def weights_from_dict(variant_name: str, data: Mapping[str, Any]) -> ScoringWeights:
    """Build a weight set, falling back to the built-in variant for missing keys."""
    base = WEIGHT_VARIANTS.get(variant_name, HEURISTIC_WEIGHTS)
    return ScoringWeights(
        w_load=data.get("w_load", base.w_load),
        w_distance=data.get("w_distance", base.w_distance),
        w_green=data.get("w_green", base.w_green),
        w_price=data.get("w_price", base.w_price),
        w_rl=data.get("w_rl", base.w_rl),
        variant_name=variant_name,
    )


def load_weights_from_yaml(yaml_path: Optional[str] = None) -> Dict[str, ScoringWeights]:
    """
    Load weight sets from a YAML file.

    Args:
        yaml_path: Path to weights.yaml. If None, looks in configs/weights.yaml

    Returns:
        Dictionary mapping variant names to ScoringWeights

    YAML Format:
        ```yaml
        heuristic:
          w_load: 0.40
          w_distance: 0.20
          w_green: 0.25
          w_price: 0.15

        personalized:
          w_load: 0.35
          w_rl: 0.05
          ...
        ```
    """
    yaml_path = Path(yaml_path) if yaml_path is not None else DEFAULT_WEIGHTS_PATH

    if not yaml_path.exists():
        return dict(WEIGHT_VARIANTS)

    with open(yaml_path, "r") as f:
        data = yaml.safe_load(f) or {}

    return {name: weights_from_dict(name, values or {}) for name, values in data.items()}


def save_weights_to_yaml(
    variants: Mapping[str, ScoringWeights],
    yaml_path: Optional[str] = None,
) -> str:
    """
    Save weight sets to a YAML file.

    Args:
        variants: Dictionary mapping variant names to ScoringWeights
        yaml_path: Destination. If None, saves to configs/weights.yaml

    Returns:
        Path where the file was saved
    """
    yaml_path = Path(yaml_path) if yaml_path is not None else DEFAULT_WEIGHTS_PATH
    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    data = {name: weights.to_dict() for name, weights in variants.items()}

    with open(yaml_path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    return str(yaml_path)
