"""Drive-vector composition for spline following.

Each control tick the robot pose is projected onto the spline and three
vector terms are added:

- forward: the path tangent at the closest point (progress along the path)
- correction: unit vector toward the closest point, scaled by the PIDF output
  on the cross-track distance
- centripetal: the tangent's left normal scaled by |tangent|^2 * curvature,
  clamped to +/- centripetal_cap

The returned Pose2D carries the summed vector in x/y and the path tangent
heading, wrapped to [0, 2*pi), in h.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional

from .config import CENTRIPETAL_CAP
from .errors import ZeroTangent
from .geometry import Pose2D, Vector2D, angle_wrap
from .pidf import PIDFController
from .solver import ClosestPointResult
from .spline import Spline

ZERO = Vector2D(0.0, 0.0)


@dataclass(frozen=True)
class DriveTerms:
    """All intermediate quantities of one drive-command computation.

    Attributes:
        t: Closest-point parameter on `segment`.
        segment: Active segment after the closest-point search.
        target: Closest point on the path.
        tangent: Forward term (path first derivative at t).
        correction: Feedback term.
        centripetal: Curvature feedforward term.
        cross_track_error: Distance from the robot to the closest point.
        curvature: Signed curvature at t (0 where undefined).
        path_angle: Tangent heading in [0, 2*pi).
        solver: Closest-point search result.
    """

    t: float
    segment: int
    target: Vector2D
    tangent: Vector2D
    correction: Vector2D
    centripetal: Vector2D
    cross_track_error: float
    curvature: float
    path_angle: float
    solver: ClosestPointResult

    @property
    def drive(self) -> Vector2D:
        return self.tangent + self.correction + self.centripetal

    @property
    def command(self) -> Pose2D:
        drive = self.drive
        return Pose2D(drive.x, drive.y, self.path_angle)

    def to_dict(self) -> Dict[str, float]:
        """Flatten to scalars for logging."""
        drive = self.drive
        return {
            "t": self.t,
            "segment": self.segment,
            "target_x": self.target.x,
            "target_y": self.target.y,
            "tangent_x": self.tangent.x,
            "tangent_y": self.tangent.y,
            "correction_x": self.correction.x,
            "correction_y": self.correction.y,
            "centripetal_x": self.centripetal.x,
            "centripetal_y": self.centripetal.y,
            "drive_x": drive.x,
            "drive_y": drive.y,
            "cross_track_error": self.cross_track_error,
            "curvature": self.curvature,
            "path_angle": self.path_angle,
            "solver_iterations": self.solver.iterations,
            "solver_converged": float(self.solver.converged),
        }


def _finite_or_zero(name: str, value: Vector2D) -> Vector2D:
    if value.is_finite():
        return value
    logging.warning(f"Non-finite {name} term {value}; substituting zero")
    return ZERO


def centripetal_term(tangent: Vector2D, curvature: float, cap: float = CENTRIPETAL_CAP) -> Vector2D:
    """Left normal of `tangent` scaled to clamp(|tangent|^2 * curvature, -cap, cap)."""
    magnitude = tangent.norm_squared() * curvature
    magnitude = max(-cap, min(cap, magnitude))
    return tangent.perpendicular().normalized() * magnitude


def compute_drive_terms(
    spline: Spline,
    pose: Pose2D,
    pidf: PIDFController,
    centripetal_cap: float = CENTRIPETAL_CAP,
    timestamp: Optional[float] = None,
) -> DriveTerms:
    """Compute every term of the drive command for one control tick.

    Moves the spline's active segment as the closest-point search requires
    and advances the PIDF controller by one update.

    Args:
        spline: Path to follow. Its active segment is the search start.
        pose: Current robot pose.
        pidf: Cross-track feedback controller.
        centripetal_cap: Clamp for the centripetal feedforward magnitude.
        timestamp: Forwarded to `pidf.update`.

    Returns:
        DriveTerms with finite vector terms.
    """
    result = spline.locate(pose)
    t = result.t

    target = spline.point(t)
    tangent = _finite_or_zero("tangent", spline.tangent(t))

    path_angle = angle_wrap(math.atan2(tangent.y, tangent.x))

    cross_track = target - pose.position
    cross_track_error = cross_track.norm()
    feedback = pidf.update(cross_track_error, timestamp)
    correction = _finite_or_zero("correction", cross_track.normalized() * feedback)

    try:
        k = spline.curvature(t)
    except ZeroTangent:
        logging.warning(f"Zero tangent at t={t:.4f} on segment {result.segment}; using zero curvature")
        k = 0.0
    if not math.isfinite(k):
        k = 0.0
    centripetal = _finite_or_zero("centripetal", centripetal_term(tangent, k, centripetal_cap))

    return DriveTerms(
        t=t,
        segment=result.segment,
        target=target,
        tangent=tangent,
        correction=correction,
        centripetal=centripetal,
        cross_track_error=cross_track_error,
        curvature=k,
        path_angle=path_angle,
        solver=result,
    )


def compute_drive_command(
    spline: Spline,
    pose: Pose2D,
    pidf: PIDFController,
    centripetal_cap: float = CENTRIPETAL_CAP,
    timestamp: Optional[float] = None,
) -> Pose2D:
    """Drive command for one control tick.

    Returns:
        Pose2D(drive.x, drive.y, path_angle) where drive is
        tangent + correction + centripetal.

    Example:
        >>> spline = Spline([(0, 0), (1, 0), (2, 0), (3, 0)])
        >>> pidf = PIDFController(kp=1.0, ki=0.0, kd=0.0, kf=0.0)
        >>> compute_drive_command(spline, Pose2D(1.5, 1.0, 0.0), pidf, timestamp=0.0)
        Pose2D(x=1.0, y=-1.0, h=0.0)
    """
    return compute_drive_terms(spline, pose, pidf, centripetal_cap, timestamp).command


class DriveVectorComposer:
    """Drive-command source for one tracking session.

    Owns a spline and a PIDF controller, and keeps the terms of the last tick
    for diagnostics.

    Attributes:
        spline: Path being followed.
        pidf: Cross-track feedback controller.
        centripetal_cap: Clamp for the centripetal feedforward magnitude.
        last_terms: DriveTerms of the most recent tick, None before the first.
    """

    def __init__(
        self,
        spline: Spline,
        pidf: Optional[PIDFController] = None,
        centripetal_cap: float = CENTRIPETAL_CAP,
    ):
        self.spline = spline
        self.pidf = pidf or PIDFController()
        self.centripetal_cap = centripetal_cap
        self.last_terms: Optional[DriveTerms] = None

    def compute(self, pose: Pose2D, timestamp: Optional[float] = None) -> Pose2D:
        """Compute the drive command for the current pose."""
        terms = compute_drive_terms(self.spline, pose, self.pidf, self.centripetal_cap, timestamp)
        self.last_terms = terms
        if not terms.solver.converged:
            logging.debug(
                f"Closest-point search did not converge on segment {terms.segment} "
                f"(t={terms.t:.4f}, {terms.solver.iterations} iterations)"
            )
        return terms.command

    def at_end(self, tolerance: float = 1e-3) -> bool:
        """True once the last tick's closest point is the end of the path."""
        if self.last_terms is None:
            return False
        return self.spline.is_last_segment(self.last_terms.segment) and self.last_terms.t >= 1.0 - tolerance

    def reset(self, segment: int = 0) -> None:
        """Start a new session: rewind the spline and clear the controller."""
        self.spline.set_segment(segment)
        self.pidf.reset()
        self.last_terms = None

    def get_diagnostics(self) -> Dict[str, float]:
        """Last tick's terms plus PIDF state, flattened for logging."""
        diagnostics: Dict[str, float] = {}
        if self.last_terms is not None:
            diagnostics.update(self.last_terms.to_dict())
        diagnostics.update({f"pidf_{key}": value for key, value in self.pidf.get_diagnostics().items()})
        return diagnostics
