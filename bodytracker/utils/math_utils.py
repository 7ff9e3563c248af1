"""
Geometry helpers for normalized keypoint data.

Provides functions for:
- Coordinate normalization at ingestion
- Vector angles
- Clamping and linear blending
"""

from enum import Enum
from typing import Iterable, Optional, Tuple, TypeVar

import numpy as np

T = TypeVar("T")


class CoordinateOrigin(Enum):
    """Where an estimator puts (0, 0) in its normalized output."""
    TOP_LEFT = "top_left"
    BOTTOM_LEFT = "bottom_left"


def normalize_point(
    x: float,
    y: float,
    origin: CoordinateOrigin = CoordinateOrigin.TOP_LEFT,
) -> Tuple[float, float]:
    """
    Convert an estimator point into the package convention.

    Everything downstream of ingestion uses normalized [0, 1] coordinates
    with a top-left origin (y grows downward).

    Args:
        x: Normalized x
        y: Normalized y in the estimator's convention
        origin: The estimator's origin

    Returns:
        (x, y) with a top-left origin
    """
    if origin is CoordinateOrigin.BOTTOM_LEFT:
        return float(x), 1.0 - float(y)
    return float(x), float(y)


def normalize_box(
    x: float,
    y: float,
    width: float,
    height: float,
    origin: CoordinateOrigin = CoordinateOrigin.TOP_LEFT,
) -> Tuple[float, float, float, float]:
    """Convert a normalized (x, y, w, h) box to a top-left origin."""
    if origin is CoordinateOrigin.BOTTOM_LEFT:
        return float(x), 1.0 - float(y) - float(height), float(width), float(height)
    return float(x), float(y), float(width), float(height)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp a scalar into [low, high]."""
    return float(min(high, max(low, value)))


def lerp(previous: float, current: float, weight: float) -> float:
    """Blend toward ``current`` by ``weight``."""
    return weight * current + (1.0 - weight) * previous


def angle_between_vectors(v1: np.ndarray, v2: np.ndarray) -> Optional[float]:
    """
    Calculate the angle between two vectors in degrees.

    Returns:
        Angle in degrees, or None if either vector has zero length
    """
    n1 = np.linalg.norm(v1)
    n2 = np.linalg.norm(v2)
    if n1 < 1e-10 or n2 < 1e-10:
        return None

    cos_angle = np.clip(np.dot(v1, v2) / (n1 * n2), -1.0, 1.0)
    return float(np.degrees(np.arccos(cos_angle)))


def joint_angle(a: Tuple[float, float], b: Tuple[float, float], c: Tuple[float, float]) -> float:
    """
    Angle at ``b`` formed by the segments b->a and b->c, in degrees.

    Degenerate segments count as a straight limb (180).
    """
    v1 = np.array([a[0] - b[0], a[1] - b[1]], dtype=np.float64)
    v2 = np.array([c[0] - b[0], c[1] - b[1]], dtype=np.float64)
    angle = angle_between_vectors(v1, v2)
    return 180.0 if angle is None else angle


def angle_from_vertical(top: Tuple[float, float], bottom: Tuple[float, float]) -> float:
    """Signed angle of the top->bottom vector from the downward vertical, in degrees."""
    dx = bottom[0] - top[0]
    dy = bottom[1] - top[1]
    return float(np.degrees(np.arctan2(dx, dy)))


def first_present(candidates: Iterable[Optional[T]]) -> Optional[T]:
    """Return the first candidate that is not None."""
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
