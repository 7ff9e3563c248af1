"""
Smile score heuristic from lip landmark geometry.

Lip points are face-relative and use a top-left origin, so a corner that
sits above the mouth's vertical center has a smaller y than the center.
"""

from typing import Optional, Sequence, Tuple

import numpy as np

from bodytracker.config.settings import SmileConfig
from bodytracker.utils.math_utils import clamp

PointLike = Tuple[float, float]


def smile_score(
    outer_lips: Optional[Sequence[PointLike]],
    inner_lips: Optional[Sequence[PointLike]] = None,
    config: Optional[SmileConfig] = None,
) -> float:
    """
    Compute a 0..1 smile score.

    Args:
        outer_lips: Outer lip contour points
        inner_lips: Inner lip contour points, used for mouth height if present
        config: Baselines and weights

    Returns:
        Smile score in [0, 1]; 0.0 when there are no outer lip points
    """
    config = config or SmileConfig()

    if not outer_lips:
        return 0.0

    outer = np.asarray(outer_lips, dtype=np.float64).reshape(-1, 2)

    # Mouth width from the corners
    left = outer[np.argmin(outer[:, 0])]
    right = outer[np.argmax(outer[:, 0])]
    width = max(0.0, float(right[0] - left[0]))

    # Mouth opening, preferring the inner contour
    if inner_lips:
        gap = np.asarray(inner_lips, dtype=np.float64).reshape(-1, 2)
    else:
        gap = outer
    height = max(0.0, float(gap[:, 1].max() - gap[:, 1].min()))

    center_y = float(outer[:, 1].mean())
    corner_y = float((left[1] + right[1]) / 2.0)
    corner_lift = max(0.0, center_y - corner_y)

    width_score = clamp((width - config.width_baseline) / config.width_span)
    corner_score = clamp(corner_lift / config.corner_lift_span)
    open_penalty = clamp((height - config.open_baseline) / config.open_span)

    raw = (
        config.width_weight * width_score
        + config.corner_weight * corner_score
        - config.open_penalty_weight * open_penalty
    )
    return clamp(raw)
