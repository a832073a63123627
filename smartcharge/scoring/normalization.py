"""
Scoring Normalization Module

Min-max normalization of raw station metrics onto the shared [0, 100] scale
used by every score component.
"""

import numpy as np


SCALE_MAX = 100.0

# Returned when the range is degenerate: no discriminating information
DEGENERATE_VALUE = 50.0


def normalize(value: float, min_value: float, max_value: float) -> float:
    """
    Linearly rescale ``value`` from [min_value, max_value] onto [0, 100].

    Results outside the range are clamped. When ``min_value == max_value``
    the midpoint 50 is returned for any input.

    Args:
        value: Raw metric value
        min_value: Value mapped to 0
        max_value: Value mapped to 100

    Returns:
        Normalized value in [0, 100]

    Examples:
        >>> normalize(75, 0, 100)
        75.0
        >>> normalize(-5, 0, 20)
        0.0
        >>> normalize(3, 7, 7)
        50.0
    """
    if max_value == min_value:
        return DEGENERATE_VALUE
    result = (value - min_value) / (max_value - min_value) * SCALE_MAX
    return min(SCALE_MAX, max(0.0, result))


def normalize_array(values: np.ndarray, min_value: float, max_value: float) -> np.ndarray:
    """
    Vectorized :func:`normalize`.

    Args:
        values: Array of raw metric values
        min_value: Value mapped to 0
        max_value: Value mapped to 100

    Returns:
        Array of normalized values in [0, 100]
    """
    values = np.asarray(values, dtype=float)
    if max_value == min_value:
        return np.full_like(values, DEGENERATE_VALUE)
    scaled = (values - min_value) / (max_value - min_value) * SCALE_MAX
    return np.clip(scaled, 0.0, SCALE_MAX)

