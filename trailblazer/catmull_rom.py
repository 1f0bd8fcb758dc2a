"""Uniform Catmull-Rom basis (tension 0.5).

A segment is defined by four consecutive control points p0..p3 and passes
through p1 at t=0 and p2 at t=1. In matrix form:

    C(t)   = [1, t, t^2, t^3]   @ M @ P
    C'(t)  = [0, 1, 2t, 3t^2]   @ M @ P
    C''(t) = [0, 0, 2,  6t]     @ M @ P

with P the 4x2 array of control points and

    M = 0.5 * [[ 0,  2,  0,  0],
               [-1,  0,  1,  0],
               [ 2, -5,  4, -1],
               [-1,  3, -3,  1]]

The cubic is a polynomial in t, so values outside [0, 1] extrapolate the same
segment rather than moving on to a neighbor.
"""

from typing import Sequence, Tuple

import numpy as np
import numpy.typing as npt

from .geometry import Vector2D

CATMULL_ROM_BASIS = 0.5 * np.array(
    [
        [0.0, 2.0, 0.0, 0.0],
        [-1.0, 0.0, 1.0, 0.0],
        [2.0, -5.0, 4.0, -1.0],
        [-1.0, 3.0, -3.0, 1.0],
    ],
    dtype=np.float64,
)
"""Catmull-Rom blending matrix in monomial form (rows: 1, t, t^2, t^3)."""


def segment_matrix(points: Sequence[Vector2D]) -> npt.NDArray[np.float64]:
    """Stack four control points into a 4x2 array.

    Args:
        points: The four control points p0..p3 of one segment.

    Returns:
        Array of shape (4, 2).

    Raises:
        ValueError: If `points` does not hold exactly four points.
    """
    if len(points) != 4:
        raise ValueError(f"A Catmull-Rom segment needs 4 control points, got {len(points)}")
    return np.array([[p.x, p.y] for p in points], dtype=np.float64)


def coefficients(points: Sequence[Vector2D]) -> npt.NDArray[np.float64]:
    """Monomial coefficients [a0, a1, a2, a3] (4x2) of the segment's cubic."""
    return CATMULL_ROM_BASIS @ segment_matrix(points)


def _evaluate(coeffs: npt.NDArray[np.float64], row: npt.NDArray[np.float64]) -> Vector2D:
    value = row @ coeffs
    return Vector2D(float(value[0]), float(value[1]))


def point(t: float, points: Sequence[Vector2D]) -> Vector2D:
    """Curve position C(t)."""
    return _evaluate(coefficients(points), np.array([1.0, t, t * t, t * t * t]))


def derivative(t: float, points: Sequence[Vector2D]) -> Vector2D:
    """First derivative C'(t) with respect to the segment parameter."""
    return _evaluate(coefficients(points), np.array([0.0, 1.0, 2.0 * t, 3.0 * t * t]))


def second_derivative(t: float, points: Sequence[Vector2D]) -> Vector2D:
    """Second derivative C''(t)."""
    return _evaluate(coefficients(points), np.array([0.0, 0.0, 2.0, 6.0 * t]))


def evaluate_all(t: float, points: Sequence[Vector2D]) -> Tuple[Vector2D, Vector2D, Vector2D]:
    """Position, first and second derivative in one pass.

    The solver needs all three every iteration, so the coefficient matrix is
    built only once here.
    """
    coeffs = coefficients(points)
    rows = np.array(
        [
            [1.0, t, t * t, t * t * t],
            [0.0, 1.0, 2.0 * t, 3.0 * t * t],
            [0.0, 0.0, 2.0, 6.0 * t],
        ]
    )
    values = rows @ coeffs
    return (
        Vector2D(float(values[0, 0]), float(values[0, 1])),
        Vector2D(float(values[1, 0]), float(values[1, 1])),
        Vector2D(float(values[2, 0]), float(values[2, 1])),
    )


def sample(points: Sequence[Vector2D], num: int) -> npt.NDArray[np.float64]:
    """Sample `num` evenly spaced parameters in [0, 1] along one segment.

    Returns:
        Array of shape (num, 2).
    """
    t = np.linspace(0.0, 1.0, num)
    rows = np.vstack([np.ones_like(t), t, t**2, t**3]).T
    return rows @ coefficients(points)
