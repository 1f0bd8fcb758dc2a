"""Configuration parameters for the trailblazer path-following core.

This module centralizes all default parameters including:
- Closest-point solver limits
- Curvature evaluation settings
- PIDF feedback gains
- Drive-vector composition limits
- Offline simulation and plotting settings

Every constructor in the package takes these as defaults and accepts
overrides, so nothing here is read at call time.
"""

import math
from typing import Optional

# ============================================================================
# Closest-Point Solver (Newton-Raphson)
# ============================================================================

SOLVER_INITIAL_T = 0.5
"""Starting curve parameter for every Newton-Raphson solve.

The middle of the segment keeps the first step symmetric with respect to
both segment ends.
"""

SOLVER_MAX_ITERATIONS = 1000
"""Hard iteration cap for one closest-point solve.

Bounds the worst-case latency of a control tick. The last iterate is
returned when the cap is hit.
"""

SOLVER_TOLERANCE = 1e-6
"""Convergence threshold on |d/dt |C(t) - p|^2|.

Smooth segments reach it in a handful of iterations.
"""

NEWTON_DDF_EPSILON = 1e-12
"""Smallest second derivative of squared distance accepted for a Newton step.

At or below this value (flat or concave distance profile) the solver takes a
bisection step toward the bound in the descent direction instead.
"""


# ============================================================================
# Curvature / Geometry Evaluation
# ============================================================================

FINITE_DIFFERENCE_STEP = 1e-4
"""Parameter step used by the finite-difference fallbacks.

Shared by the three-point curvature formula and the finite-difference
Newton denominator.
"""

CURVATURE_METHOD = "analytic"
"""Default curvature evaluation method: "analytic" or "finite_difference"."""


# ============================================================================
# PIDF Feedback Parameters
# ============================================================================

PIDF_KP = 1.0
"""Proportional gain on cross-track error (range: [0, 5]).

Scales the lateral correction vector per unit of distance from the path.
"""

PIDF_KI = 0.0
"""Integral gain on cross-track error (range: [0, 1]).

Off by default. Sustained offset from the path (e.g. a constant side load)
is the only case where it pays off.
"""

PIDF_KD = 0.0
"""Derivative gain on cross-track error (range: [0, 1])."""

PIDF_KF = 0.0
"""Static feedforward added to every PIDF output."""

PIDF_INTEGRAL_LIMIT: Optional[float] = None
"""Anti-windup bound for the integral accumulator (error * seconds), None for no clamp."""


# ============================================================================
# Drive-Vector Composition
# ============================================================================

CENTRIPETAL_CAP = 10.0
"""Maximum magnitude of the centripetal feedforward term.

|tangent|^2 * curvature grows without bound near cusps and tight control
point clusters; the term is clamped to [-CENTRIPETAL_CAP, CENTRIPETAL_CAP].
"""


# ============================================================================
# Offline Simulation
# ============================================================================

SIM_DT = 0.05
"""Simulation step (seconds). Matches a 20 Hz control loop."""

SIM_MAX_STEPS = 2000
"""Upper bound on simulation ticks for one tracking run."""

SIM_SPEED_LIMIT = 2.0
"""Maximum commanded speed of the simulated robot (units/s)."""

SIM_GOAL_TOLERANCE = 0.05
"""Distance to the final path point that ends a simulated run."""


# ============================================================================
# Sampling and Visualization
# ============================================================================

SAMPLES_PER_SEGMENT = 20
"""Number of curve samples per segment for plots and arc-length estimates."""

TWO_PI = 2.0 * math.pi

PLOT_ORANGE = "#f74823"
PLOT_BLUE = "#2374f7"
PLOT_CREAM = "#fffdee"
PLOT_TAUPE = "#686a5f"
PLOT_YELLOW_ORANGE = "#ffa726"
PLOT_DARK_BLUE = "#0d1b2a"
