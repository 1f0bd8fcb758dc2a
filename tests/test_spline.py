import numpy as np
import pytest

from trailblazer.errors import OutOfRange, ZeroTangent
from trailblazer.geometry import Pose2D, Vector2D
from trailblazer.solver import SolverStatus
from trailblazer.spline import Spline, from_waypoints


def line_spline(n=7, **kwargs):
    """Evenly spaced points on the x-axis; segment i covers x in [i+1, i+2]."""
    return Spline([(float(i), 0.0) for i in range(n)], **kwargs)


# -----------------------------------------------------------------------------
# Tests for construction and control points
# -----------------------------------------------------------------------------

def test_needs_four_control_points():
    with pytest.raises(OutOfRange):
        Spline([(0, 0), (1, 0), (2, 0)])


def test_out_of_range_is_index_error():
    with pytest.raises(IndexError):
        Spline([])


def test_accepts_mixed_point_types():
    spline = Spline([Vector2D(0, 0), (1, 0), np.array([2.0, 0.0]), Pose2D(3, 0, 1.0)])

    assert len(spline) == 4
    assert all(type(p) is Vector2D for p in spline.control_points)


def test_segment_count():
    assert line_spline(4).segment_count() == 1
    assert line_spline(7).segment_count() == 4


def test_add_control_point_appends_and_inserts():
    spline = line_spline(4)
    spline.add_control_point((4.0, 0.0))
    spline.add_control_point((-1.0, 0.0), index=0)

    assert len(spline) == 6
    assert spline.get_control_point(0) == Vector2D(-1.0, 0.0)
    assert spline.get_control_point(5) == Vector2D(4.0, 0.0)

    spline.add_control_point((9.0, 9.0), index=len(spline))
    assert spline.get_control_point(6) == Vector2D(9.0, 9.0)


def test_add_control_point_bad_index():
    spline = line_spline(4)
    with pytest.raises(OutOfRange):
        spline.add_control_point((0.0, 0.0), index=6)
    with pytest.raises(OutOfRange):
        spline.add_control_point((0.0, 0.0), index=-1)


def test_set_control_point():
    spline = line_spline(4)
    spline.set_control_point(2, (2.0, 5.0))
    assert spline.get_control_point(2) == Vector2D(2.0, 5.0)

    with pytest.raises(OutOfRange):
        spline.set_control_point(4, (0.0, 0.0))


def test_get_control_point_bad_index():
    with pytest.raises(OutOfRange):
        line_spline(4).get_control_point(-1)


def test_remove_control_point():
    spline = line_spline(5)
    removed = spline.remove_control_point(0)

    assert removed == Vector2D(0.0, 0.0)
    assert len(spline) == 4


def test_remove_refuses_to_go_below_four_points():
    spline = line_spline(4)
    with pytest.raises(OutOfRange, match="at least 4"):
        spline.remove_control_point(0)
    assert len(spline) == 4


def test_remove_bad_index():
    with pytest.raises(OutOfRange):
        line_spline(6).remove_control_point(6)


def test_remove_reclamps_active_segment():
    spline = line_spline(5)
    spline.set_segment(1)
    spline.remove_control_point(4)

    assert spline.segment == 0


# -----------------------------------------------------------------------------
# Tests for segment navigation
# -----------------------------------------------------------------------------

def test_inc_segment_clamps_at_last_segment():
    spline = line_spline(7)
    for _ in range(10):
        spline.inc_segment()
        assert 0 <= spline.segment <= spline.segment_count() - 1
    assert spline.segment == 3
    assert spline.is_last_segment()


def test_dec_segment_clamps_at_zero():
    spline = line_spline(7, segment=2)
    for _ in range(10):
        spline.dec_segment()
        assert spline.segment >= 0
    assert spline.segment == 0


def test_set_segment_clamps():
    spline = line_spline(7)
    spline.set_segment(100)
    assert spline.segment == 3
    spline.set_segment(-5)
    assert spline.segment == 0


def test_segment_points():
    spline = line_spline(7, segment=2)

    assert spline.segment_points() == tuple(Vector2D(float(i), 0.0) for i in range(2, 6))
    assert spline.segment_points(0)[0] == Vector2D(0.0, 0.0)
    # out-of-range requests clamp like navigation
    assert spline.segment_points(99) == spline.segment_points(3)


# -----------------------------------------------------------------------------
# Tests for evaluation
# -----------------------------------------------------------------------------

def test_point_on_active_and_explicit_segment():
    spline = line_spline(7, segment=1)

    assert spline.point(0.0) == Vector2D(2.0, 0.0)
    assert spline.point(1.0) == Vector2D(3.0, 0.0)
    assert spline.point(0.5, segment=3) == Vector2D(4.5, 0.0)


def test_point_extrapolates_outside_unit_interval():
    spline = line_spline(4)
    assert spline.point(1.5) == Vector2D(2.5, 0.0)
    assert spline.point(-0.5) == Vector2D(0.5, 0.0)


def test_tangent_and_curvature_on_line():
    spline = line_spline(4)

    assert spline.tangent(0.3) == Vector2D(1.0, 0.0)
    assert spline.derivative(0.3) == spline.tangent(0.3)
    assert spline.second_derivative(0.3) == Vector2D(0.0, 0.0)
    assert spline.curvature(0.3) == 0.0
    assert spline.curvature(0.3, method="finite_difference") == pytest.approx(0.0, abs=1e-6)


def test_curvature_zero_tangent():
    spline = Spline([(1, 1)] * 4)
    with pytest.raises(ZeroTangent):
        spline.curvature(0.5)


def test_geometry_record():
    spline = Spline([(0, 0), (1, 0), (2, 1), (2, 2)])
    geo = spline.geometry(0.5)

    assert geo.point == spline.point(0.5)
    assert geo.tangent == spline.tangent(0.5)
    assert geo.curvature == pytest.approx(spline.curvature(0.5))


# -----------------------------------------------------------------------------
# Tests for the multi-segment closest-point search
# -----------------------------------------------------------------------------

def test_closest_point_on_active_segment():
    spline = Spline([(0, 0), (1, 0), (2, 0), (3, 0)])
    t = spline.closest_point(Pose2D(1.5, 1.0, 0.0))

    assert t == pytest.approx(0.5)
    assert spline.last_result.segment == 0


def test_search_moves_forward_across_segments():
    spline = line_spline(7)
    result = spline.locate(Vector2D(4.3, 0.5))

    assert result.segment == 3
    assert spline.segment == 3
    assert result.t == pytest.approx(0.3)
    assert result.status is SolverStatus.CONVERGED


def test_search_moves_backward_across_segments():
    spline = line_spline(7, segment=3)
    result = spline.locate(Vector2D(1.2, -0.3))

    assert result.segment == 0
    assert result.t == pytest.approx(0.2)


def test_search_stops_at_path_end():
    spline = line_spline(7)
    result = spline.locate(Vector2D(10.0, 0.0))

    assert spline.segment == 3
    assert result.t == 1.0
    assert result.overshoot == 1


def test_search_stops_at_path_start():
    spline = line_spline(7, segment=2)
    result = spline.locate(Vector2D(-4.0, 1.0))

    assert spline.segment == 0
    assert result.t == 0.0
    assert result.overshoot == -1


def test_search_respects_hop_limit():
    spline = line_spline(7)
    result = spline.locate(Vector2D(4.3, 0.0), max_hops=1)

    assert spline.segment == 1
    assert result.overshoot == 1


def test_search_at_segment_join_does_not_oscillate():
    spline = line_spline(7, segment=1)
    result = spline.locate(Vector2D(3.0, 1.0))

    assert result.converged
    assert spline.point(result.t) == Vector2D(3.0, 0.0)


# -----------------------------------------------------------------------------
# Tests for sampling and construction helpers
# -----------------------------------------------------------------------------

def test_sample_covers_all_segments_once():
    spline = line_spline(7)
    samples = spline.sample(samples_per_segment=5)

    assert samples.shape == (17, 2)
    assert np.allclose(samples[0], [1.0, 0.0])
    assert np.allclose(samples[-1], [5.0, 0.0])
    assert np.all(np.diff(samples[:, 0]) > 0)


def test_sample_needs_two_points_per_segment():
    with pytest.raises(ValueError):
        line_spline(4).sample(samples_per_segment=1)


def test_length_of_straight_line():
    assert line_spline(7).length() == pytest.approx(4.0)


def test_start_and_end():
    spline = line_spline(7)
    assert spline.start == Vector2D(1.0, 0.0)
    assert spline.end == Vector2D(5.0, 0.0)


def test_from_waypoints_passes_through_waypoints():
    waypoints = [(0.0, 0.0), (2.0, 1.0), (4.0, 0.0), (5.0, 3.0)]
    spline = from_waypoints(waypoints)

    assert len(spline) == len(waypoints) + 2
    assert spline.segment_count() == len(waypoints) - 1
    for i, (x, y) in enumerate(waypoints[:-1]):
        assert spline.point(0.0, segment=i).distance_to(Vector2D(x, y)) < 1e-9
    assert spline.point(1.0, segment=spline.segment_count() - 1).distance_to(Vector2D(5.0, 3.0)) < 1e-9


def test_from_waypoints_needs_two_points():
    with pytest.raises(OutOfRange):
        from_waypoints([(0.0, 0.0)])


def test_solver_settings_are_forwarded():
    spline = line_spline(4, max_iterations=1)
    result = spline.locate(Vector2D(1.2, 1.0))
    assert not result.converged
