"""
Configuration loader for recommendation profiles and environment variables.

A profile is a YAML file under ``configs/`` (``default.yaml``,
``heuristic.yaml``, ...). A few deployment-specific values can be overridden
from the environment, including a local ``.env`` file:

    SMARTCHARGE_PROFILE      profile name (default: "default")
    SMARTCHARGE_QUERIES_URL  queries.base_url
    SMARTCHARGE_LOCALE       locale
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from dotenv import load_dotenv


logger = logging.getLogger(__name__)


class ConfigLoader:
    """Load and manage configuration from YAML files and environment."""

    CONFIG_DIR = Path(__file__).parent.parent.parent / "configs"
    PROFILE_ENV_VAR = "SMARTCHARGE_PROFILE"
    DEFAULT_PROFILE = "default"

    # Files in CONFIG_DIR that are not profiles
    NON_PROFILES = frozenset({"weights"})

    @classmethod
    def available_profiles(cls) -> List[str]:
        return sorted(
            f.stem for f in cls.CONFIG_DIR.glob("*.yaml") if f.stem not in cls.NON_PROFILES
        )

    @classmethod
    def load_profile(cls, profile_name: str = DEFAULT_PROFILE) -> Dict[str, Any]:
        """
        Load a recommendation profile.

        Args:
            profile_name: Name of the profile (default, heuristic, ...)

        Raises:
            FileNotFoundError: If profile doesn't exist
        """
        profile_path = cls.CONFIG_DIR / f"{profile_name}.yaml"

        if profile_name in cls.NON_PROFILES or not profile_path.exists():
            raise FileNotFoundError(
                f"Profile '{profile_name}' not found. "
                f"Available profiles: {', '.join(cls.available_profiles())}"
            )

        with open(profile_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

        logger.info(f"Loaded recommendation profile '{profile_name}' from {profile_path}")
        return config

    @classmethod
    def get_profile_from_env(cls) -> Optional[str]:
        return os.getenv(cls.PROFILE_ENV_VAR)

    @classmethod
    def load_default_or_env_profile(cls) -> Dict[str, Any]:
        profile = cls.get_profile_from_env() or cls.DEFAULT_PROFILE
        return cls.load_profile(profile)


ENV_OVERRIDES = {
    "SMARTCHARGE_QUERIES_URL": ("queries", "base_url"),
    "SMARTCHARGE_LOCALE": ("locale",),
}


def apply_env_overrides(
    config: Mapping[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Copy of ``config`` with values from ENV_OVERRIDES applied.

    Args:
        config: Loaded profile
        environ: Environment to read; ``os.environ`` if None

    Returns:
        New configuration dictionary; ``config`` is left untouched
    """
    environ = os.environ if environ is None else environ
    result = copy.deepcopy(dict(config))

    for var, path in ENV_OVERRIDES.items():
        value = environ.get(var)
        if not value:
            continue
        section = result
        for key in path[:-1]:
            section = section.setdefault(key, {})
        section[path[-1]] = value
        logger.debug(f"{var} overrides {'.'.join(path)}")

    return result


def get_config() -> Dict[str, Any]:
    """Current configuration: profile from the environment plus overrides, honoring .env."""
    load_dotenv()
    return apply_env_overrides(ConfigLoader.load_default_or_env_profile())
