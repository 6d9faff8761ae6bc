from __future__ import annotations

import math

import pytest

from kscml.core.data_structures import Affine
from kscml.core.transform import SpinTracker, decompose_matrix, display_angle
from tests._utils.matrices import (
    affine_from_matrix,
    create_rotation_matrix,
    create_scale_matrix,
    create_translation_matrix,
)


def test_identity() -> None:
    result = decompose_matrix(Affine())
    assert result.rotation == 0.0
    assert result.skew_x == 0.0
    assert (result.scale_x, result.scale_y) == (1.0, 1.0)
    assert result.angle == 0.0


def test_rotation_and_scale_are_recovered() -> None:
    matrix = create_translation_matrix(12.0, -4.5) @ create_rotation_matrix(30.0) @ create_scale_matrix(2.0, 3.0)
    result = decompose_matrix(affine_from_matrix(matrix))
    assert result.translate_x == pytest.approx(12.0)
    assert result.translate_y == pytest.approx(-4.5)
    assert result.rotation == pytest.approx(30.0)
    assert result.skew_x == pytest.approx(0.0, abs=1e-9)
    assert result.scale_x == pytest.approx(2.0)
    assert result.scale_y == pytest.approx(3.0)
    assert result.angle == pytest.approx(330.0)


def test_mirrored_matrix_flips_scale_x() -> None:
    result = decompose_matrix(Affine(a=-1.0, b=0.0, c=0.0, d=1.0))
    assert result.scale_x == -1.0
    assert result.scale_y == 1.0
    assert result.rotation == 0.0


def test_skew() -> None:
    result = decompose_matrix(Affine(a=1.0, b=0.0, c=1.0, d=1.0))
    assert result.skew_x == pytest.approx(45.0)
    assert result.scale_x == 1.0
    assert result.scale_y == pytest.approx(1.0)


def test_degenerate_matrix() -> None:
    result = decompose_matrix(Affine(a=0.0, b=0.0, c=0.0, d=0.0, tx=1.0, ty=2.0))
    assert (result.scale_x, result.scale_y) == (0.0, 0.0)
    assert not math.isnan(result.rotation)
    assert (result.translate_x, result.translate_y) == (1.0, 2.0)


@pytest.mark.parametrize("rotation, expected", [(0.0, 0.0), (90.0, 270.0), (-90.0, 90.0), (180.0, 180.0), (360.0, 0.0)])
def test_display_angle(rotation: float, expected: float) -> None:
    assert display_angle(rotation) == expected


def test_spin_rule() -> None:
    tracker = SpinTracker()
    assert tracker.next(90.0) == 1
    assert tracker.next(350.0) == -1
    assert tracker.next(10.0) == 1
    assert tracker.next(5.0) == -1
    assert tracker.next(5.0) == 1
