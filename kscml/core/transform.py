"""
Transform utilities for 2D affine transformations
Decomposes element matrices into editor keys and tracks key spin
"""

import math
from dataclasses import dataclass

from .data_structures import Affine


@dataclass(frozen=True)
class DecomposedTransform:
    """Human-readable parts of an affine matrix"""
    translate_x: float
    translate_y: float
    rotation: float  # degrees
    skew_x: float  # degrees
    scale_x: float
    scale_y: float

    @property
    def angle(self) -> float:
        """Angle as shown in the editor: clockwise, in [0, 360)"""
        return display_angle(self.rotation)


def decompose_matrix(matrix: Affine) -> DecomposedTransform:
    """
    Split an affine matrix into translation, rotation, skew and scale

    Args:
        matrix: Element matrix

    Returns:
        The decomposed transform; rotation and skew are in degrees
    """
    a, b, c, d = matrix.a, matrix.b, matrix.c, matrix.d

    scale_x = math.hypot(a, b)
    if scale_x:
        a /= scale_x
        b /= scale_x

    skew = a * c + b * d
    c -= a * skew
    d -= b * skew

    scale_y = math.hypot(c, d)
    if scale_y:
        c /= scale_y
        d /= scale_y
        skew /= scale_y

    # Mirrored matrix: flip x so rotation stays continuous
    if a * d < b * c:
        a = -a
        b = -b
        skew = -skew
        scale_x = -scale_x

    return DecomposedTransform(
        translate_x=matrix.tx,
        translate_y=matrix.ty,
        rotation=math.degrees(math.atan2(b, a)),
        skew_x=math.degrees(math.atan(skew)),
        scale_x=scale_x,
        scale_y=scale_y,
    )


def display_angle(rotation: float) -> float:
    """Convert a counter-clockwise rotation to the editor's [0, 360) angle."""
    return (360 - rotation) % 360


class SpinTracker:
    """
    Interpolation direction of consecutive keys in one timeline.

    Each key starts at +1, becomes -1 when it is more than 180 degrees
    away from the previous key, and is then negated again when its angle
    is smaller than the previous one.
    """

    def __init__(self, start_angle: float = 0.0):
        self.previous: float = start_angle

    def next(self, angle: float) -> int:
        spin = 1 if abs(angle - self.previous) <= 180 else -1
        if angle < self.previous:
            spin = -spin
        self.previous = angle
        return spin

