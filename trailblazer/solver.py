"""Closest point on a Catmull-Rom segment via damped Newton-Raphson.

The solver minimizes the squared distance

    f(t)   = |C(t) - p|^2
    f'(t)  = 2 (C(t) - p) . C'(t)
    f''(t) = 2 (C'(t) . C'(t) + (C(t) - p) . C''(t))

starting from t = 0.5 and clamping every iterate to [0, 1]. It never raises:
when the iteration cap is hit the last iterate is returned and the result is
flagged as not converged.

Where f'' is not a usable Newton denominator (non-finite, zero, or negative so
that the step would climb toward a maximum) a bisection step is taken instead:
halfway from t toward the segment bound in the descent direction.

When the minimizer lies beyond a segment end the iterate gets pinned to that
bound; the result then reports an `overshoot` of -1 or +1 so the caller can
continue the search in the neighboring segment.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from . import catmull_rom
from .config import (
    FINITE_DIFFERENCE_STEP,
    NEWTON_DDF_EPSILON,
    SOLVER_INITIAL_T,
    SOLVER_MAX_ITERATIONS,
    SOLVER_TOLERANCE,
)
from .geometry import Vector2D, VectorLike

DDF_METHODS = ("analytic", "finite_difference")


class SolverStatus(Enum):
    """How a closest-point solve terminated."""

    CONVERGED = "converged"
    BOUNDARY = "boundary"
    MAX_ITERATIONS = "max_iterations"


@dataclass(frozen=True)
class ClosestPointResult:
    """Outcome of a closest-point solve.

    Attributes:
        t: Best curve parameter found, always within [0, 1].
        iterations: Number of iterations performed.
        status: Termination reason.
        overshoot: -1 / +1 if the minimizer lies before the start / past the
            end of the segment, 0 otherwise.
        degenerate_steps: Iterations where Newton's denominator was unusable
            and a bisection step was taken.
        distance: |C(t) - p| at the returned parameter.
        segment: Segment index the parameter belongs to (-1 if unknown).
    """

    t: float
    iterations: int
    status: SolverStatus
    overshoot: int = 0
    degenerate_steps: int = 0
    distance: float = math.nan
    segment: int = -1

    @property
    def converged(self) -> bool:
        """False only if the iteration cap was exhausted."""
        return self.status is not SolverStatus.MAX_ITERATIONS

    def with_segment(self, segment: int) -> "ClosestPointResult":
        return ClosestPointResult(
            t=self.t,
            iterations=self.iterations,
            status=self.status,
            overshoot=self.overshoot,
            degenerate_steps=self.degenerate_steps,
            distance=self.distance,
            segment=segment,
        )


def distance_derivative(point: Vector2D, pos: Vector2D, d1: Vector2D) -> float:
    """d/dt |C(t) - p|^2."""
    return 2.0 * (point - pos).dot(d1)


def distance_second_derivative(point: Vector2D, pos: Vector2D, d1: Vector2D, d2: Vector2D) -> float:
    """d^2/dt^2 |C(t) - p|^2."""
    return 2.0 * (d1.dot(d1) + (point - pos).dot(d2))


def _finite_difference_ddf(
    t: float, pos: Vector2D, points: Sequence[Vector2D], step: float
) -> float:
    def df(s: float) -> float:
        c, d1, _ = catmull_rom.evaluate_all(s, points)
        return distance_derivative(c, pos, d1)

    return (df(t + step) - df(t - step)) / (2.0 * step)


def closest_point(
    pos: VectorLike,
    points: Sequence[Vector2D],
    max_iterations: int = SOLVER_MAX_ITERATIONS,
    tolerance: float = SOLVER_TOLERANCE,
    ddf_method: str = "analytic",
    step: float = FINITE_DIFFERENCE_STEP,
    initial_t: float = SOLVER_INITIAL_T,
) -> ClosestPointResult:
    """Find the segment parameter closest to `pos`.

    Args:
        pos: Query position: Vector2D, Pose2D (heading ignored) or (x, y).
        points: The segment's four control points p0..p3.
        max_iterations: Iteration cap.
        tolerance: Convergence threshold on |f'(t)|.
        ddf_method: "analytic" for the closed-form f'', "finite_difference"
            for a central difference of f' with step `step`.
        step: Finite-difference step.
        initial_t: Starting parameter, clamped to [0, 1].

    Returns:
        ClosestPointResult with `t` in [0, 1].

    Example:
        >>> pts = [Vector2D(0, 0), Vector2D(1, 0), Vector2D(2, 0), Vector2D(3, 0)]
        >>> closest_point(Vector2D(1.5, 1.0), pts).t
        0.5
    """
    if ddf_method not in DDF_METHODS:
        raise ValueError(f"Unknown ddf_method {ddf_method!r}; expected one of {DDF_METHODS}")

    pos = Vector2D.of(pos)

    t = min(max(initial_t, 0.0), 1.0)
    status = SolverStatus.MAX_ITERATIONS
    overshoot = 0
    degenerate_steps = 0
    iterations = 0

    for iterations in range(1, max_iterations + 1):
        c, d1, d2 = catmull_rom.evaluate_all(t, points)
        df = distance_derivative(c, pos, d1)

        if c == pos or abs(df) < tolerance:
            status = SolverStatus.CONVERGED
            break

        if ddf_method == "analytic":
            ddf = distance_second_derivative(c, pos, d1, d2)
        else:
            ddf = _finite_difference_ddf(t, pos, points, step)

        unclamped = t - df / ddf if math.isfinite(ddf) and ddf > NEWTON_DDF_EPSILON else math.nan
        if not math.isfinite(unclamped):
            degenerate_steps += 1
            if df > 0.0:
                unclamped = 0.5 * t if t > step else -step
            else:
                unclamped = t + 0.5 * (1.0 - t) if t < 1.0 - step else 1.0 + step

        new_t = min(max(unclamped, 0.0), 1.0)
        if new_t == t and unclamped != t:
            status = SolverStatus.BOUNDARY
            overshoot = -1 if unclamped < 0.0 else 1
            break
        t = new_t

    if status is SolverStatus.MAX_ITERATIONS:
        logging.debug(
            f"Closest-point solve hit {max_iterations} iterations without converging "
            f"(t={t:.6f}, pos={pos})"
        )
    if degenerate_steps:
        logging.debug(f"Closest-point solve took {degenerate_steps} bisection step(s)")

    distance = catmull_rom.point(t, points).distance_to(pos)
    return ClosestPointResult(
        t=t,
        iterations=iterations,
        status=status,
        overshoot=overshoot,
        degenerate_steps=degenerate_steps,
        distance=distance,
    )
