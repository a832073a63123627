"""
Great-circle distance helpers.

Haversine distance in kilometres, available both as a scalar function and as
a numpy-vectorized form used to measure a user's distance to every station
in one pass.
"""

from typing import Union

import numpy as np


EARTH_RADIUS_KM = 6371.0

ArrayLike = Union[float, np.ndarray]


def haversine_km(
    lat1: ArrayLike,
    lng1: ArrayLike,
    lat2: ArrayLike,
    lng2: ArrayLike,
) -> np.ndarray:
    """
    Vectorized haversine distance in kilometres.

    Any argument may be a scalar or an array; numpy broadcasting applies.

    Args:
        lat1: Latitude(s) of the first point(s) in degrees
        lng1: Longitude(s) of the first point(s) in degrees
        lat2: Latitude(s) of the second point(s) in degrees
        lng2: Longitude(s) of the second point(s) in degrees

    Returns:
        Array of distances in kilometres

    Examples:
        >>> # Distance from a user to three stations
        >>> haversine_km(41.01, 28.97, np.array([41.02, 41.05, 40.99]),
        ...              np.array([28.98, 29.01, 28.90]))
    """
    phi1 = np.radians(lat1)
    phi2 = np.radians(lat2)
    d_phi = np.radians(np.asarray(lat2, dtype=float) - np.asarray(lat1, dtype=float))
    d_lambda = np.radians(np.asarray(lng2, dtype=float) - np.asarray(lng1, dtype=float))

    a = (
        np.sin(d_phi / 2) ** 2
        + np.cos(phi1) * np.cos(phi2) * np.sin(d_lambda / 2) ** 2
    )
    # Rounding can push a a hair above 1 for antipodal points
    a = np.clip(a, 0.0, 1.0)
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance between two points, in kilometres."""
    return float(haversine_km(lat1, lng1, lat2, lng2))
