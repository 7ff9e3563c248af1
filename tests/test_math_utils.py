"""Tests for geometry helpers."""

import numpy as np
import pytest

from bodytracker.utils.math_utils import (
    CoordinateOrigin,
    angle_between_vectors,
    angle_from_vertical,
    clamp,
    first_present,
    joint_angle,
    lerp,
    normalize_box,
    normalize_point,
)


def test_normalize_point_flips_bottom_left():
    assert normalize_point(0.2, 0.3) == (0.2, 0.3)
    assert normalize_point(0.2, 0.3, CoordinateOrigin.BOTTOM_LEFT) == pytest.approx((0.2, 0.7))


def test_normalize_box_keeps_size():
    x, y, w, h = normalize_box(0.1, 0.2, 0.3, 0.4, origin=CoordinateOrigin.BOTTOM_LEFT)

    assert (x, w, h) == pytest.approx((0.1, 0.3, 0.4))
    assert y == pytest.approx(0.4)


def test_clamp_and_lerp():
    assert clamp(1.5) == 1.0
    assert clamp(-0.2) == 0.0
    assert clamp(5.0, 0.0, 10.0) == 5.0
    assert lerp(0.0, 1.0, 0.25) == pytest.approx(0.25)
    assert lerp(0.3, 0.5, 1.0) == pytest.approx(0.5)


def test_angles():
    assert angle_between_vectors(np.array([1.0, 0.0]), np.array([0.0, 1.0])) == pytest.approx(90.0)
    assert angle_between_vectors(np.zeros(2), np.array([0.0, 1.0])) is None

    assert joint_angle((0.5, 0.3), (0.5, 0.5), (0.5, 0.7)) == pytest.approx(180.0)
    assert joint_angle((0.3, 0.5), (0.5, 0.5), (0.5, 0.7)) == pytest.approx(90.0)
    assert joint_angle((0.5, 0.5), (0.5, 0.5), (0.5, 0.7)) == 180.0


def test_angle_from_vertical():
    assert angle_from_vertical((0.5, 0.2), (0.5, 0.6)) == pytest.approx(0.0)
    assert angle_from_vertical((0.5, 0.2), (0.6, 0.3)) == pytest.approx(45.0)
    assert angle_from_vertical((0.5, 0.2), (0.4, 0.3)) == pytest.approx(-45.0)


def test_first_present():
    assert first_present([None, 2, 3]) == 2
    assert first_present([None, None]) is None
