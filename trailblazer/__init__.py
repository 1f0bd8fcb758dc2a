"""Trailblazer - Spline Path Following for Mobile Robots

The motion-control core of a path-following library: given the robot's pose
and a piecewise Catmull-Rom path, compute the drive vector for the current
control tick.

## Architecture Overview

Leaves first:

### Geometry (geometry.py)
Immutable `Vector2D` / `Pose2D` value types and angle wrapping.

### Spline (catmull_rom.py, spline.py)
Control points partitioned into overlapping 4-point Catmull-Rom segments, an
active-segment cursor, point/derivative evaluation and structural edits.

### Closest-Point Solver (solver.py)
Damped Newton-Raphson on the squared distance to a segment, with bisection
fallback, an iteration cap, and segment-boundary reporting that lets the
spline continue the search in a neighboring segment.

### Curvature (curvature.py)
Signed curvature from analytic derivatives, or from three nearby samples.

### PIDF Controller (pidf.py)
Scalar feedback with integral anti-windup and explicit timestamps.

### Drive-Vector Composer (drive.py)
tangent + PIDF cross-track correction + centripetal feedforward.

## Quick Start

```python
from trailblazer import Pose2D, PIDFController, Spline, compute_drive_command

spline = Spline([(0, 0), (1, 0), (2, 1), (3, 1), (4, 1)])
pidf = PIDFController(kp=1.0)
command = compute_drive_command(spline, Pose2D(1.2, 0.3, 0.0), pidf, timestamp=0.0)
```

## Conventions

- Headings are radians in [0, 2*pi).
- Curvature is positive for left (counter-clockwise) turns.
- Numerical edge cases never raise out of a control tick; structural spline
  edits raise `OutOfRange`.

## Version

0.1.0 - Initial implementation
"""

__version__ = "0.1.0"

from .drive import DriveTerms, DriveVectorComposer, compute_drive_command, compute_drive_terms
from .errors import OutOfRange, TrailblazerError, ZeroTangent
from .geometry import Pose2D, Vector2D, angle_wrap, angle_wrap_signed
from .pidf import PIDFController
from .solver import ClosestPointResult, SolverStatus, closest_point
from .spline import Spline, from_waypoints

__all__ = [
    "Vector2D",
    "Pose2D",
    "angle_wrap",
    "angle_wrap_signed",
    "Spline",
    "from_waypoints",
    "closest_point",
    "ClosestPointResult",
    "SolverStatus",
    "PIDFController",
    "DriveVectorComposer",
    "DriveTerms",
    "compute_drive_command",
    "compute_drive_terms",
    "TrailblazerError",
    "OutOfRange",
    "ZeroTangent",
]
