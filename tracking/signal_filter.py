"""
Dead-zone noise gate for raw acceleration readings.

Readings whose magnitude is below the threshold are treated as sensor noise or
stationary drift and replaced with exactly zero.
"""

from typing import Optional, Sequence, Union
import numpy as np


def filter_value(value: Optional[float], threshold: float) -> float:
    """
    Gate a single scalar reading.

    Args:
        value: Raw reading, or None if the platform did not report it
        threshold: Dead-zone half width (same units as value)

    Returns:
        0.0 if |value| < threshold (or value is None), otherwise value unchanged
    """
    v = float(value) if value is not None else 0.0
    if abs(v) < threshold:
        return 0.0
    return v


def filter_acceleration(
    components: Sequence[Optional[float]],
    thresholds: Union[float, Sequence[float], np.ndarray]
) -> np.ndarray:
    """
    Gate each axis of a reading independently.

    Args:
        components: (x, y, z) readings, any of which may be None
        thresholds: A single threshold for all axes or one per axis

    Returns:
        Length-3 array of filtered values
    """
    if len(components) != 3:
        raise ValueError("Acceleration must have 3 components: (x, y, z)")
    limits = np.broadcast_to(np.asarray(thresholds, dtype=float), (3,))
    return np.array([filter_value(v, t) for v, t in zip(components, limits)])
