"""PIDF feedback controller for a scalar error signal.

Time is explicit: pass the current timestamp to `update`. If it is omitted the
controller reads its own injected clock (time.monotonic by default), so two
controllers never share timing state.
"""

import math
import time
from typing import Callable, Dict, Optional

from .config import PIDF_INTEGRAL_LIMIT, PIDF_KD, PIDF_KF, PIDF_KI, PIDF_KP


class PIDFController:
    """Proportional + integral + derivative + static feedforward controller.

    Control law, with dt the time since the previous update:

        integral += error * dt            (clamped to +/- integral_limit)
        output = kp * error
               + ki * integral
               + kd * (error - last_error) / dt
               + kf

    When dt <= 0 the integral is not accumulated and the derivative term is 0.
    That covers the first call and a clock that moved backwards.
    Gains and `integral_limit` are plain attributes and may be changed between
    updates.

    Attributes:
        kp: Proportional gain.
        ki: Integral gain. While 0 the accumulator is left untouched.
        kd: Derivative gain.
        kf: Static feedforward added to every output.
        integral_limit: Anti-windup bound for the accumulator, None for no clamp.
        integral: Accumulated error * time.
        last_error: Error passed to the previous update.
        last_timestamp: Timestamp of the previous update, None before the first.
    """

    def __init__(
        self,
        kp: float = PIDF_KP,
        ki: float = PIDF_KI,
        kd: float = PIDF_KD,
        kf: float = PIDF_KF,
        integral_limit: Optional[float] = PIDF_INTEGRAL_LIMIT,
        clock: Optional[Callable[[], float]] = None,
        on_output: Optional[Callable[[float], None]] = None,
    ):
        """Initialize the controller.

        Args:
            kp: Proportional gain.
            ki: Integral gain.
            kd: Derivative gain.
            kf: Static feedforward.
            integral_limit: Anti-windup clamp (>= 0), or None to disable.
            clock: Time source used when `update` gets no timestamp.
                Default: time.monotonic.
            on_output: Optional callback receiving the P + I + D output of
                every update (feedforward excluded).

        Raises:
            ValueError: If integral_limit is negative.
        """
        self.kp = kp
        self.ki = ki
        self.kd = kd
        self.kf = kf

        if integral_limit is not None and integral_limit < 0:
            raise ValueError(f"integral_limit must be non-negative, got {integral_limit}")
        self.integral_limit = integral_limit

        self.clock = clock or time.monotonic
        self.on_output = on_output

        # Integral state (accumulated error)
        self.integral: float = 0.0

        # Previous sample for the derivative and dt
        self.last_error: float = 0.0
        self.last_timestamp: Optional[float] = None

        self.last_terms: Dict[str, float] = {"p": 0.0, "i": 0.0, "d": 0.0, "f": 0.0}

    def update(self, error: float, timestamp: Optional[float] = None) -> float:
        """Advance the controller by one sample.

        Args:
            error: Current error (setpoint - measurement).
            timestamp: Current time in seconds. Default: the controller's clock.

        Returns:
            kp*e + ki*integral + kd*de/dt + kf
        """
        if timestamp is None:
            timestamp = self.clock()

        dt = 0.0 if self.last_timestamp is None else timestamp - self.last_timestamp

        p = self.kp * error

        if self.ki != 0.0 and dt > 0:
            self.integral += error * dt
            if self.integral_limit is not None:
                self.integral = max(-self.integral_limit, min(self.integral_limit, self.integral))
        i = self.ki * self.integral

        # Zero or negative dt: first call, repeated timestamp or clock reset
        if dt > 0:
            d = self.kd * (error - self.last_error) / dt
        else:
            d = 0.0

        f = self.kf

        self.last_error = error
        self.last_timestamp = timestamp
        self.last_terms = {"p": p, "i": i, "d": d, "f": f}

        if self.on_output is not None:
            self.on_output(p + i + d)
        return p + i + d + f

    def calculate(self, target: float, measurement: float, timestamp: Optional[float] = None) -> float:
        """Update from a setpoint and a measurement instead of an error."""
        return self.update(target - measurement, timestamp)

    def set_gains(
        self,
        kp: Optional[float] = None,
        ki: Optional[float] = None,
        kd: Optional[float] = None,
        kf: Optional[float] = None,
    ) -> None:
        """Change any subset of the gains. State is kept."""
        if kp is not None:
            self.kp = kp
        if ki is not None:
            self.ki = ki
        if kd is not None:
            self.kd = kd
        if kf is not None:
            self.kf = kf

    def reset_integral(self) -> None:
        """Zero the integral accumulator. Derivative and timing state are kept."""
        self.integral = 0.0

    def reset(self) -> None:
        """Clear all state, as if the controller were new.

        Call this when starting a new tracking session.
        """
        self.integral = 0.0
        self.last_error = 0.0
        self.last_timestamp = None
        self.last_terms = {"p": 0.0, "i": 0.0, "d": 0.0, "f": 0.0}

    def get_diagnostics(self) -> Dict[str, float]:
        """Get the terms of the last update and the controller state for logging.

        Returns:
            Dictionary with keys p, i, d, f, integral, last_error, last_timestamp
            (NaN before the first update).
        """
        return {
            **self.last_terms,
            "integral": self.integral,
            "last_error": self.last_error,
            "last_timestamp": math.nan if self.last_timestamp is None else self.last_timestamp,
        }
