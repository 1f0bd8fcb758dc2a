import math

import numpy as np
import pytest

from trailblazer import catmull_rom
from trailblazer.geometry import Pose2D, Vector2D
from trailblazer.solver import (
    SolverStatus,
    closest_point,
    distance_derivative,
    distance_second_derivative,
)

STRAIGHT = [Vector2D(0, 0), Vector2D(1, 0), Vector2D(2, 0), Vector2D(3, 0)]
GENTLE_ARC = [Vector2D(0, 0), Vector2D(1, 0), Vector2D(2, 0.5), Vector2D(3, 1.5)]
LEFT_TURN = [Vector2D(0, 0), Vector2D(1, 0), Vector2D(2, 1), Vector2D(2, 2)]

# -----------------------------------------------------------------------------
# Tests for the distance derivatives
# -----------------------------------------------------------------------------

def test_distance_derivatives_on_line():
    point = Vector2D(1.5, 0.0)
    pos = Vector2D(1.0, 1.0)
    d1 = Vector2D(1.0, 0.0)
    d2 = Vector2D(0.0, 0.0)

    assert distance_derivative(point, pos, d1) == pytest.approx(1.0)
    assert distance_second_derivative(point, pos, d1, d2) == pytest.approx(2.0)


# -----------------------------------------------------------------------------
# Tests for convergence
# -----------------------------------------------------------------------------

def test_straight_line_scenario():
    """Robot at (1.5, 1.0) above a line along x: closest parameter maps to x=1.5."""
    result = closest_point(Vector2D(1.5, 1.0), STRAIGHT)

    assert result.t == pytest.approx(0.5)
    assert result.status is SolverStatus.CONVERGED
    assert result.converged
    assert result.overshoot == 0
    assert result.distance == pytest.approx(1.0)


def test_point_on_curve_recovers_parameter():
    for t0 in (0.1, 0.25, 0.4, 0.6, 0.75, 0.9):
        pos = catmull_rom.point(t0, GENTLE_ARC)
        result = closest_point(pos, GENTLE_ARC)

        assert result.converged
        assert result.t == pytest.approx(t0, abs=1e-4)
        assert result.distance < 1e-4


def test_exact_hit_stops_immediately():
    pos = catmull_rom.point(0.5, LEFT_TURN)
    result = closest_point(pos, LEFT_TURN)

    assert result.t == 0.5
    assert result.iterations == 1
    assert result.distance == 0.0


def test_exact_hit_with_pose_ignores_heading():
    hit = catmull_rom.point(0.5, LEFT_TURN)
    result = closest_point(Pose2D(hit.x, hit.y, 1.2), LEFT_TURN)

    assert result.t == 0.5
    assert result.iterations == 1
    assert result.status is SolverStatus.CONVERGED


def test_finite_difference_denominator_agrees():
    pos = Vector2D(1.4, 0.9)
    analytic = closest_point(pos, LEFT_TURN, ddf_method="analytic")
    numeric = closest_point(pos, LEFT_TURN, ddf_method="finite_difference")

    assert numeric.converged
    assert numeric.t == pytest.approx(analytic.t, abs=1e-5)


def test_off_curve_point_is_local_minimum():
    pos = Vector2D(1.8, -0.4)
    result = closest_point(pos, GENTLE_ARC)
    ts = np.linspace(0.0, 1.0, 2001)
    distances = [catmull_rom.point(float(t), GENTLE_ARC).distance_to(pos) for t in ts]

    assert result.distance == pytest.approx(min(distances), abs=1e-6)


# -----------------------------------------------------------------------------
# Tests for segment boundaries
# -----------------------------------------------------------------------------

def test_point_before_segment_start_reports_overshoot():
    result = closest_point(Vector2D(-1.0, 0.0), STRAIGHT)

    assert result.t == 0.0
    assert result.status is SolverStatus.BOUNDARY
    assert result.overshoot == -1
    assert result.converged


def test_point_past_segment_end_reports_overshoot():
    result = closest_point(Vector2D(5.0, 0.3), STRAIGHT)

    assert result.t == 1.0
    assert result.status is SolverStatus.BOUNDARY
    assert result.overshoot == 1


# -----------------------------------------------------------------------------
# Tests for degenerate cases
# -----------------------------------------------------------------------------

def test_concave_denominator_takes_bisection_step():
    """Far inside a left turn, f''(0.5) < 0 and a Newton step would climb."""
    pos = Vector2D(-1.3375, 3.5375)
    c, d1, d2 = catmull_rom.evaluate_all(0.5, LEFT_TURN)
    assert distance_second_derivative(c, pos, d1, d2) < 0

    result = closest_point(pos, LEFT_TURN)

    assert result.degenerate_steps >= 1
    assert math.isfinite(result.t)
    assert 0.0 <= result.t <= 1.0


def test_nan_position_never_produces_nan_parameter():
    result = closest_point(Vector2D(math.nan, math.nan), STRAIGHT)

    assert math.isfinite(result.t)
    assert 0.0 <= result.t <= 1.0
    assert result.degenerate_steps > 0


def test_zero_length_segment():
    pts = [Vector2D(2.0, 2.0)] * 4
    result = closest_point(Vector2D(0.0, 0.0), pts)

    assert result.converged
    assert result.t == 0.5
    assert result.distance == pytest.approx(math.hypot(2.0, 2.0))


def test_iteration_cap_returns_last_iterate():
    result = closest_point(Vector2D(1.2, 1.0), STRAIGHT, max_iterations=1)

    assert result.status is SolverStatus.MAX_ITERATIONS
    assert not result.converged
    assert result.iterations == 1
    assert result.t == pytest.approx(0.2)


def test_initial_parameter_is_clamped():
    result = closest_point(Vector2D(1.5, 1.0), STRAIGHT, initial_t=4.0)
    assert result.t == pytest.approx(0.5)


def test_unknown_denominator_method_rejected():
    with pytest.raises(ValueError, match="Unknown ddf_method"):
        closest_point(Vector2D(0.0, 0.0), STRAIGHT, ddf_method="secant")


def test_result_with_segment():
    result = closest_point(Vector2D(1.5, 1.0), STRAIGHT).with_segment(3)
    assert result.segment == 3
    assert result.t == pytest.approx(0.5)
