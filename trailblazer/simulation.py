"""Offline tracking simulation for tuning gains without hardware.

The robot is modeled as a holonomic point: each tick its velocity is the drive
vector (clamped to a speed limit) and its heading is the commanded path angle.
Time is injected into the PIDF controller tick by tick, so runs are
deterministic.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np
import numpy.typing as npt

from .config import CENTRIPETAL_CAP, SIM_DT, SIM_GOAL_TOLERANCE, SIM_MAX_STEPS, SIM_SPEED_LIMIT
from .drive import DriveVectorComposer
from .geometry import Pose2D, VectorLike
from .pidf import PIDFController
from .spline import Spline


@dataclass
class TrackingRun:
    """Time series recorded by `simulate_tracking`.

    All arrays share the same length, one entry per tick (the initial pose is
    entry 0).
    """

    t: npt.NDArray[np.float64]
    x: npt.NDArray[np.float64]
    y: npt.NDArray[np.float64]
    heading: npt.NDArray[np.float64]
    cross_track_error: npt.NDArray[np.float64]
    segment: npt.NDArray[np.int64]
    reached_goal: bool

    def __len__(self) -> int:
        return len(self.t)

    @property
    def final_pose(self) -> Pose2D:
        return Pose2D(float(self.x[-1]), float(self.y[-1]), float(self.heading[-1]))

    def summary(self) -> Dict[str, float]:
        """Aggregate tracking metrics.

        Returns:
            Dictionary with duration, mean/max/RMS cross-track error and
            whether the goal was reached.
        """
        errors = self.cross_track_error[1:] if len(self) > 1 else self.cross_track_error
        return {
            "duration": float(self.t[-1] - self.t[0]),
            "mean_error": float(np.mean(errors)),
            "max_error": float(np.max(errors)),
            "rms_error": float(np.sqrt(np.mean(errors**2))),
            "reached_goal": float(self.reached_goal),
        }


def simulate_tracking(
    spline: Spline,
    start: VectorLike,
    pidf: Optional[PIDFController] = None,
    dt: float = SIM_DT,
    max_steps: int = SIM_MAX_STEPS,
    speed_limit: float = SIM_SPEED_LIMIT,
    goal_tolerance: float = SIM_GOAL_TOLERANCE,
    centripetal_cap: float = CENTRIPETAL_CAP,
) -> TrackingRun:
    """Drive a simulated point robot along `spline`.

    Args:
        spline: Path to follow. Its active segment is reset to 0.
        start: Initial position, or Pose2D.
        pidf: Feedback controller, reset before the run. Default: PIDFController().
        dt: Tick length in seconds.
        max_steps: Tick budget.
        speed_limit: Maximum speed of the robot.
        goal_tolerance: Distance to the path end that finishes the run.
        centripetal_cap: Forwarded to the composer.

    Returns:
        TrackingRun with one sample per tick.
    """
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")

    pose = start if isinstance(start, Pose2D) else Pose2D(float(start[0]), float(start[1]), 0.0)
    composer = DriveVectorComposer(spline, pidf or PIDFController(), centripetal_cap)
    composer.reset()

    times = [0.0]
    xs = [pose.x]
    ys = [pose.y]
    headings = [pose.h]
    errors = [pose.position.distance_to(spline.point(spline.closest_point(pose)))]
    segments = [spline.segment]
    reached_goal = False

    for step in range(1, max_steps + 1):
        timestamp = (step - 1) * dt
        command = composer.compute(pose, timestamp)

        velocity = command.position
        speed = velocity.norm()
        if speed > speed_limit:
            velocity = velocity * (speed_limit / speed)

        moved = pose.position + velocity * dt
        pose = Pose2D(moved.x, moved.y, command.h)

        terms = composer.last_terms
        times.append(step * dt)
        xs.append(pose.x)
        ys.append(pose.y)
        headings.append(pose.h)
        errors.append(terms.cross_track_error)
        segments.append(terms.segment)

        if pose.position.distance_to(spline.end) < goal_tolerance or composer.at_end():
            reached_goal = True
            break

    if reached_goal:
        logging.debug(f"Reached path end after {len(times) - 1} ticks")
    else:
        logging.info(f"Tracking run stopped after {max_steps} ticks without reaching the path end")

    return TrackingRun(
        t=np.array(times),
        x=np.array(xs),
        y=np.array(ys),
        heading=np.array(headings),
        cross_track_error=np.array(errors),
        segment=np.array(segments, dtype=np.int64),
        reached_goal=reached_goal,
    )
