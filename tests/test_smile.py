"""Tests for the smile heuristic."""

import pytest

from bodytracker.config.settings import SmileConfig
from bodytracker.core.smile import smile_score


def mouth(width, lift=0.0, center_x=0.5, corner_y=0.5):
    """Outer lip contour with the given corner spread and corner lift."""
    half = width / 2.0
    # Two mid points placed so the contour mean sits ``lift`` below the corners
    mid_y = corner_y + 2.0 * lift
    return [
        (center_x - half, corner_y),
        (center_x - 0.1, mid_y),
        (center_x + 0.1, mid_y),
        (center_x + half, corner_y),
    ]


def gap(height, top=0.6):
    return [(0.4, top), (0.6, top + height)]


def test_wide_lifted_closed_mouth_saturates():
    outer = [(0.175, 0.5), (0.4, 0.74), (0.6, 0.74), (0.825, 0.5)]
    inner = [(0.4, 0.6), (0.6, 0.65)]

    assert smile_score(outer, inner) == pytest.approx(1.0)


def test_no_outer_lips_scores_zero():
    assert smile_score(None) == 0.0
    assert smile_score([], gap(0.05)) == 0.0


def test_neutral_mouth_scores_zero():
    assert smile_score(mouth(0.3), gap(0.02)) == 0.0


def test_score_is_bounded():
    for width in (0.0, 0.2, 0.5, 0.9, 1.5):
        for height in (0.0, 0.1, 0.5, 1.0):
            score = smile_score(mouth(width, lift=0.05), gap(height))
            assert 0.0 <= score <= 1.0


def test_wider_mouth_never_scores_lower():
    scores = [smile_score(mouth(w, lift=0.03), gap(0.05)) for w in (0.3, 0.45, 0.5, 0.55, 0.6, 0.7)]

    assert scores == sorted(scores)
    assert scores[-1] > scores[0]


def test_more_open_mouth_never_scores_higher():
    outer = mouth(0.6, lift=0.08)
    scores = [smile_score(outer, gap(h)) for h in (0.1, 0.22, 0.25, 0.28, 0.32, 0.4)]

    assert scores == sorted(scores, reverse=True)
    assert scores[0] > scores[-1]


def test_outer_lips_stand_in_for_missing_inner_lips():
    outer = mouth(0.6, lift=0.05)

    assert smile_score(outer) == pytest.approx(smile_score(outer, outer))


def test_config_changes_baselines():
    outer = mouth(0.45)
    strict = SmileConfig(width_baseline=0.5)

    assert smile_score(outer, gap(0.02)) > 0.0
    assert smile_score(outer, gap(0.02), strict) == 0.0
