"""Geospatial helpers for station scoring."""

from .distance import EARTH_RADIUS_KM, distance_km, haversine_km

__all__ = [
    "EARTH_RADIUS_KM",
    "distance_km",
    "haversine_km",
]
