"""
Utility functions for BodyTracker.

Includes:
- Coordinate normalization
- Angle and blending helpers
"""

from bodytracker.utils.math_utils import (
    CoordinateOrigin,
    normalize_point,
    normalize_box,
    clamp,
    lerp,
    angle_between_vectors,
    joint_angle,
    angle_from_vertical,
    first_present,
)

__all__ = [
    "CoordinateOrigin",
    "normalize_point",
    "normalize_box",
    "clamp",
    "lerp",
    "angle_between_vectors",
    "joint_angle",
    "angle_from_vertical",
    "first_present",
]
