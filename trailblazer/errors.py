"""Exceptions raised by the path-following core.

Only structural mistakes reach the caller. Numerical degeneracies inside a
control tick (flat Newton denominators, a zero PIDF time step, solver
non-convergence) are handled where they occur and reported through result
fields instead.
"""


class TrailblazerError(Exception):
    """Base class for all trailblazer errors."""


class OutOfRange(TrailblazerError, IndexError):
    """Control-point index is invalid, or an edit would leave fewer than 4 points."""


class ZeroTangent(TrailblazerError, ArithmeticError):
    """The curve's first derivative vanishes, so curvature is undefined."""

    def __init__(self, t: float, message: str = ""):
        self.t = t
        super().__init__(message or f"Zero tangent at t={t:.6f}; curvature is undefined")
