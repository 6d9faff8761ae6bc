"""3x3 matrix builders for composing element matrices in tests."""

from __future__ import annotations

import math

import numpy as np

from kscml.core.data_structures import Affine


def create_translation_matrix(x: float, y: float) -> np.ndarray:
    """
    Create a 3x3 translation matrix

    Args:
        x: Translation along X axis
        y: Translation along Y axis

    Returns:
        3x3 numpy array representing the translation matrix
    """
    return np.array([
        [1, 0, x],
        [0, 1, y],
        [0, 0, 1]
    ], dtype=np.float64)


def create_rotation_matrix(angle_degrees: float) -> np.ndarray:
    """
    Create a 3x3 rotation matrix

    Args:
        angle_degrees: Rotation angle in degrees

    Returns:
        3x3 numpy array representing the rotation matrix
    """
    angle_rad = math.radians(angle_degrees)
    cos_a = math.cos(angle_rad)
    sin_a = math.sin(angle_rad)
    return np.array([
        [cos_a, -sin_a, 0],
        [sin_a, cos_a, 0],
        [0, 0, 1]
    ], dtype=np.float64)


def create_scale_matrix(sx: float, sy: float) -> np.ndarray:
    """
    Create a 3x3 scale matrix

    Args:
        sx: Scale factor along X axis
        sy: Scale factor along Y axis

    Returns:
        3x3 numpy array representing the scale matrix
    """
    return np.array([
        [sx, 0, 0],
        [0, sy, 0],
        [0, 0, 1]
    ], dtype=np.float64)


def affine_from_matrix(matrix: np.ndarray) -> Affine:
    """Read the (a, b, c, d, tx, ty) entries of a 3x3 matrix."""
    return Affine(
        a=float(matrix[0, 0]),
        b=float(matrix[1, 0]),
        c=float(matrix[0, 1]),
        d=float(matrix[1, 1]),
        tx=float(matrix[0, 2]),
        ty=float(matrix[1, 2]),
    )
