"""Local geometry of a Catmull-Rom segment: tangent, curvature, normal.

Two curvature methods are available:

- "analytic": kappa = (C' x C'') / |C'|^3 from the closed-form derivatives.
- "finite_difference": the curvature of the circle through C(t-h), C(t), C(t+h).
  It needs only position samples and is kept as a cross-check for the analytic
  form.

Both are signed: positive for counter-clockwise (left) turns.
"""

import math
from dataclasses import dataclass
from typing import Callable, Sequence

from . import catmull_rom
from .config import FINITE_DIFFERENCE_STEP
from .errors import ZeroTangent
from .geometry import Vector2D, angle_wrap

CURVATURE_METHODS = ("analytic", "finite_difference")


def signed_curvature(d1: Vector2D, d2: Vector2D, t: float = math.nan) -> float:
    """Signed curvature from the first and second derivative.

    Args:
        d1: First derivative C'(t).
        d2: Second derivative C''(t).
        t: Curve parameter, only used in the error message.

    Returns:
        (d1 x d2) / |d1|^3

    Raises:
        ZeroTangent: If |d1| == 0.
    """
    speed = d1.norm()
    if speed == 0.0:
        raise ZeroTangent(t)
    return d1.cross(d2) / speed**3


def finite_difference_curvature(
    point_fn: Callable[[float], Vector2D], t: float, step: float = FINITE_DIFFERENCE_STEP
) -> float:
    """Signed curvature of the circle through three nearby curve samples.

    With p0 = C(t-h), p1 = C(t), p2 = C(t+h):

        kappa = 2 * ((p1 - p0) x (p2 - p0)) / (|p1 - p0| * |p2 - p1| * |p2 - p0|)

    Args:
        point_fn: Curve position as a function of the parameter.
        t: Parameter to evaluate at.
        step: Sampling offset h.

    Raises:
        ZeroTangent: If the samples coincide (zero chord).
    """
    p0 = point_fn(t - step)
    p1 = point_fn(t)
    p2 = point_fn(t + step)

    a = p1.distance_to(p0)
    b = p2.distance_to(p1)
    c = p2.distance_to(p0)
    denom = a * b * c
    if denom == 0.0:
        raise ZeroTangent(t)
    return 2.0 * (p1 - p0).cross(p2 - p0) / denom


@dataclass(frozen=True)
class LocalGeometry:
    """Geometry of the curve at one parameter value.

    Attributes:
        t: Segment parameter.
        point: Curve position C(t).
        tangent: First derivative C'(t) (not normalized).
        second_derivative: C''(t).
        curvature: Signed curvature, NaN when the tangent is zero.
    """

    t: float
    point: Vector2D
    tangent: Vector2D
    second_derivative: Vector2D
    curvature: float

    @property
    def heading(self) -> float:
        """Tangent direction in [0, 2*pi)."""
        return angle_wrap(math.atan2(self.tangent.y, self.tangent.x))

    @property
    def normal(self) -> Vector2D:
        """Unit left normal (tangent rotated +90 degrees)."""
        return self.tangent.perpendicular().normalized()

    @property
    def radius(self) -> float:
        if self.curvature == 0.0:
            return math.inf
        return 1.0 / abs(self.curvature)


def curvature(
    points: Sequence[Vector2D],
    t: float,
    method: str = "analytic",
    step: float = FINITE_DIFFERENCE_STEP,
) -> float:
    """Signed curvature of one segment at parameter `t`.

    Raises:
        ZeroTangent: If the curvature is undefined at `t`.
        ValueError: For an unknown method.
    """
    if method == "analytic":
        return signed_curvature(
            catmull_rom.derivative(t, points), catmull_rom.second_derivative(t, points), t
        )
    if method == "finite_difference":
        # the analytic tangent decides degeneracy for both methods
        if catmull_rom.derivative(t, points).norm() == 0.0:
            raise ZeroTangent(t)
        return finite_difference_curvature(lambda s: catmull_rom.point(s, points), t, step)
    raise ValueError(f"Unknown curvature method {method!r}; expected one of {CURVATURE_METHODS}")


def evaluate(
    points: Sequence[Vector2D],
    t: float,
    method: str = "analytic",
    strict: bool = True,
) -> LocalGeometry:
    """Evaluate position, derivatives and curvature of one segment at `t`.

    Args:
        points: The segment's four control points.
        t: Segment parameter.
        method: Curvature method, see module docstring.
        strict: If True, a zero tangent raises ZeroTangent. If False the
            record is returned with curvature set to NaN.
    """
    p, d1, d2 = catmull_rom.evaluate_all(t, points)
    try:
        kappa = curvature(points, t, method)
    except ZeroTangent:
        if strict:
            raise
        kappa = math.nan
    return LocalGeometry(t=t, point=p, tangent=d1, second_derivative=d2, curvature=kappa)
