"""Piecewise Catmull-Rom spline with an active-segment cursor.

A spline with N control points has N - 3 segments. Segment i is the cubic
through control points i..i+3 and runs from point i+1 (t=0) to point i+2
(t=1), so the first and last control points only shape the curve.

Each tracking session should own its Spline: the active segment is mutable
state advanced by the closest-point search.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from . import catmull_rom
from . import curvature as curvature_eval
from .config import (
    CURVATURE_METHOD,
    FINITE_DIFFERENCE_STEP,
    SAMPLES_PER_SEGMENT,
    SOLVER_MAX_ITERATIONS,
    SOLVER_TOLERANCE,
)
from .curvature import LocalGeometry
from .errors import OutOfRange
from .geometry import Vector2D, VectorLike
from .solver import ClosestPointResult, closest_point

MIN_CONTROL_POINTS = 4


class Spline:
    """Ordered control points partitioned into overlapping 4-point segments.

    Evaluation methods act on the active segment unless a `segment` keyword is
    given. Parameters outside [0, 1] extrapolate that segment's cubic.

    Attributes:
        max_iterations: Iteration cap for each closest-point solve.
        tolerance: Convergence threshold for closest-point solves.
        ddf_method: Newton denominator, "analytic" or "finite_difference".
        curvature_method: Default method for `curvature()`.
        last_result: Result of the most recent closest-point search.
    """

    def __init__(
        self,
        control_points: Iterable[VectorLike],
        segment: int = 0,
        max_iterations: int = SOLVER_MAX_ITERATIONS,
        tolerance: float = SOLVER_TOLERANCE,
        ddf_method: str = "analytic",
        curvature_method: str = CURVATURE_METHOD,
    ):
        """Initialize the spline.

        Args:
            control_points: At least four points (Vector2D, (x, y) pairs or arrays).
            segment: Initial active segment, clamped to the valid range.
            max_iterations: Closest-point iteration cap.
            tolerance: Closest-point convergence threshold.
            ddf_method: Newton denominator used by the closest-point solver.
            curvature_method: Default curvature method.

        Raises:
            OutOfRange: If fewer than four control points are given.
        """
        self._points: List[Vector2D] = [Vector2D.of(p) for p in control_points]
        if len(self._points) < MIN_CONTROL_POINTS:
            raise OutOfRange(
                f"A spline needs at least {MIN_CONTROL_POINTS} control points, "
                f"got {len(self._points)}"
            )
        self._segment = 0
        self.set_segment(segment)

        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.ddf_method = ddf_method
        self.curvature_method = curvature_method
        self.last_result: Optional[ClosestPointResult] = None

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"Spline({len(self._points)} points, segment {self._segment}/{self.segment_count() - 1})"

    # ------------------------------------------------------------------
    # Control points
    # ------------------------------------------------------------------

    @property
    def control_points(self) -> Tuple[Vector2D, ...]:
        return tuple(self._points)

    def get_control_point(self, index: int) -> Vector2D:
        self._check_index(index, len(self._points))
        return self._points[index]

    def add_control_point(self, point: VectorLike, index: Optional[int] = None) -> None:
        """Append a control point, or insert it before `index`.

        Raises:
            OutOfRange: If `index` is not in [0, len(spline)].
        """
        if index is None:
            self._points.append(Vector2D.of(point))
            return
        self._check_index(index, len(self._points) + 1)
        self._points.insert(index, Vector2D.of(point))

    def set_control_point(self, index: int, point: VectorLike) -> None:
        """Replace the control point at `index`.

        Raises:
            OutOfRange: If `index` is not a valid control-point index.
        """
        self._check_index(index, len(self._points))
        self._points[index] = Vector2D.of(point)

    def remove_control_point(self, index: int) -> Vector2D:
        """Remove and return the control point at `index`.

        Raises:
            OutOfRange: If `index` is invalid or fewer than four points would remain.
        """
        self._check_index(index, len(self._points))
        if len(self._points) <= MIN_CONTROL_POINTS:
            raise OutOfRange(
                f"Cannot remove a control point: a spline needs at least "
                f"{MIN_CONTROL_POINTS} control points"
            )
        removed = self._points.pop(index)
        self.set_segment(self._segment)
        return removed

    @staticmethod
    def _check_index(index: int, size: int) -> None:
        if not 0 <= index < size:
            raise OutOfRange(f"Control point index {index} out of range [0, {size - 1}]")

    # ------------------------------------------------------------------
    # Segments
    # ------------------------------------------------------------------

    def segment_count(self) -> int:
        return len(self._points) - 3

    @property
    def segment(self) -> int:
        return self._segment

    def set_segment(self, segment: int) -> None:
        """Set the active segment, clamped to [0, segment_count() - 1]."""
        self._segment = self._clamp_segment(segment)

    def inc_segment(self) -> None:
        self.set_segment(self._segment + 1)

    def dec_segment(self) -> None:
        self.set_segment(self._segment - 1)

    def is_last_segment(self, segment: Optional[int] = None) -> bool:
        return self._resolve(segment) == self.segment_count() - 1

    def _clamp_segment(self, segment: int) -> int:
        return max(0, min(int(segment), self.segment_count() - 1))

    def _resolve(self, segment: Optional[int]) -> int:
        return self._segment if segment is None else self._clamp_segment(segment)

    def segment_points(self, segment: Optional[int] = None) -> Tuple[Vector2D, ...]:
        """The four control points of `segment` (default: the active one)."""
        start = self._resolve(segment)
        return tuple(self._points[start : start + 4])

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def point(self, t: float, segment: Optional[int] = None) -> Vector2D:
        return catmull_rom.point(t, self.segment_points(segment))

    def derivative(self, t: float, segment: Optional[int] = None) -> Vector2D:
        return catmull_rom.derivative(t, self.segment_points(segment))

    def second_derivative(self, t: float, segment: Optional[int] = None) -> Vector2D:
        return catmull_rom.second_derivative(t, self.segment_points(segment))

    def tangent(self, t: float, segment: Optional[int] = None) -> Vector2D:
        """Unnormalized tangent, i.e. the first derivative."""
        return self.derivative(t, segment)

    def curvature(
        self,
        t: float,
        segment: Optional[int] = None,
        method: Optional[str] = None,
        step: float = FINITE_DIFFERENCE_STEP,
    ) -> float:
        """Signed curvature at `t`.

        Raises:
            ZeroTangent: If the first derivative vanishes at `t`.
        """
        return curvature_eval.curvature(
            self.segment_points(segment), t, method or self.curvature_method, step
        )

    def geometry(
        self, t: float, segment: Optional[int] = None, strict: bool = True
    ) -> LocalGeometry:
        return curvature_eval.evaluate(
            self.segment_points(segment), t, self.curvature_method, strict=strict
        )

    # ------------------------------------------------------------------
    # Closest point
    # ------------------------------------------------------------------

    def locate(self, pos: VectorLike, max_hops: Optional[int] = None) -> ClosestPointResult:
        """Find the closest point to `pos`, moving across segments as needed.

        Solves on the active segment. If the minimizer lies beyond a segment
        end, the active segment moves one step in that direction and the solve
        repeats, until the minimizer is inside a segment, a path end is
        reached, a segment would be visited twice or `max_hops` moves have
        been made. The active segment is left on the returned result's segment.

        Args:
            pos: Query position (a Pose2D works too; heading is ignored).
            max_hops: Maximum segment moves, default segment_count().

        Returns:
            ClosestPointResult whose `segment` is the new active segment.
        """
        pos = Vector2D.of(pos)
        hops_left = self.segment_count() if max_hops is None else max_hops
        visited = {self._segment}
        result = self._solve(pos, self._segment)

        while result.overshoot and hops_left > 0:
            candidate = self._segment + result.overshoot
            if candidate < 0 or candidate >= self.segment_count() or candidate in visited:
                break
            logging.debug(f"Closest point beyond segment {self._segment}; moving to {candidate}")
            self._segment = candidate
            visited.add(candidate)
            hops_left -= 1
            result = self._solve(pos, candidate)

        self.last_result = result
        return result

    def closest_point(self, pos: VectorLike, max_hops: Optional[int] = None) -> float:
        """Parameter of the closest point on the (possibly updated) active segment."""
        return self.locate(pos, max_hops).t

    def _solve(self, pos: Vector2D, segment: int) -> ClosestPointResult:
        result = closest_point(
            pos,
            self.segment_points(segment),
            max_iterations=self.max_iterations,
            tolerance=self.tolerance,
            ddf_method=self.ddf_method,
        )
        return result.with_segment(segment)

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    def sample(self, samples_per_segment: int = SAMPLES_PER_SEGMENT) -> npt.NDArray[np.float64]:
        """Sample the whole curve, segment by segment.

        Shared segment joins appear once.

        Returns:
            Array of shape (segment_count() * (samples_per_segment - 1) + 1, 2).
        """
        if samples_per_segment < 2:
            raise ValueError("samples_per_segment must be at least 2")
        chunks = []
        for segment in range(self.segment_count()):
            samples = catmull_rom.sample(self.segment_points(segment), samples_per_segment)
            chunks.append(samples if segment == 0 else samples[1:])
        return np.vstack(chunks)

    def length(self, samples_per_segment: int = SAMPLES_PER_SEGMENT) -> float:
        """Approximate arc length from a polyline through the samples."""
        samples = self.sample(samples_per_segment)
        return float(np.sum(np.linalg.norm(np.diff(samples, axis=0), axis=1)))

    @property
    def start(self) -> Vector2D:
        return self._points[1]

    @property
    def end(self) -> Vector2D:
        return self._points[-2]


def from_waypoints(waypoints: Sequence[VectorLike], **kwargs) -> Spline:
    """Build a spline passing through every waypoint.

    The first and last segment need a phantom control point each; they are
    mirrored across the end waypoints so the curve leaves and arrives along
    the end chords.

    Args:
        waypoints: At least two points the curve must pass through.
        **kwargs: Forwarded to Spline.

    Raises:
        OutOfRange: With fewer than two waypoints.
    """
    points = [Vector2D.of(p) for p in waypoints]
    if len(points) < 2:
        raise OutOfRange(f"Need at least 2 waypoints, got {len(points)}")
    head = points[0] * 2.0 - points[1]
    tail = points[-1] * 2.0 - points[-2]
    return Spline([head, *points, tail], **kwargs)
