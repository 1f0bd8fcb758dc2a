"""2D vector and pose value types.

Vectors are immutable; every operator returns a new value. NaN and infinite
components are legal and propagate through the arithmetic, callers that need
finite output check `is_finite()`.

Headings are radians. `angle_wrap` maps them to [0, 2*pi), which is the
convention used for every heading the package produces.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Sequence, Union

import numpy as np
import numpy.typing as npt

from .config import TWO_PI

VectorLike = Union["Vector2D", Sequence[float], npt.NDArray[np.float64]]


def angle_wrap(angle: float, full_turn: float = TWO_PI) -> float:
    """Wrap an angle to [0, full_turn).

    Args:
        angle: Angle to wrap (radians, or degrees with full_turn=360).
        full_turn: Length of one revolution in the angle's unit.

    Returns:
        Equivalent angle in [0, full_turn). NaN stays NaN.

    Example:
        >>> angle_wrap(-math.pi / 2)
        4.71238898038469
        >>> angle_wrap(370.0, 360.0)
        10.0
    """
    wrapped = angle % full_turn
    # -1e-17 % 2pi rounds up to exactly 2pi
    return 0.0 if wrapped == full_turn else wrapped


def angle_wrap_signed(angle: float) -> float:
    """Wrap an angle in radians to [-pi, pi)."""
    return angle_wrap(angle + math.pi) - math.pi


@dataclass(frozen=True)
class Vector2D:
    """Immutable 2D vector.

    Supports the usual arithmetic (`+`, `-`, scalar `*` and `/`), component-wise
    `*` with another vector, component-wise `%` and magnitude comparison
    (`<`, `>`, `<=`, `>=` compare norms; `==` compares components).

    Attributes:
        x: X component.
        y: Y component.
    """

    x: float
    y: float

    @classmethod
    def of(cls, value: VectorLike) -> Vector2D:
        """Coerce a Vector2D, (x, y) sequence or numpy array to a Vector2D."""
        if isinstance(value, Vector2D):
            return Vector2D(value.x, value.y)
        x, y = value[0], value[1]
        return cls(float(x), float(y))

    @classmethod
    def from_array(cls, array: npt.ArrayLike) -> Vector2D:
        arr = np.asarray(array, dtype=np.float64)
        return cls(float(arr[0]), float(arr[1]))

    @classmethod
    def from_polar(cls, magnitude: float, angle: float) -> Vector2D:
        return cls(magnitude * math.cos(angle), magnitude * math.sin(angle))

    def __add__(self, other: Vector2D) -> Vector2D:
        return Vector2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2D) -> Vector2D:
        return Vector2D(self.x - other.x, self.y - other.y)

    def __neg__(self) -> Vector2D:
        return Vector2D(-self.x, -self.y)

    def __mul__(self, other: Union[float, Vector2D]) -> Vector2D:
        if isinstance(other, Vector2D):
            return Vector2D(self.x * other.x, self.y * other.y)
        return Vector2D(self.x * other, self.y * other)

    def __rmul__(self, other: float) -> Vector2D:
        return Vector2D(self.x * other, self.y * other)

    def __truediv__(self, value: float) -> Vector2D:
        return Vector2D(self.x / value, self.y / value)

    def __mod__(self, value: float) -> Vector2D:
        return Vector2D(math.fmod(self.x, value), math.fmod(self.y, value))

    def __lt__(self, other: Vector2D) -> bool:
        return self.norm() < other.norm()

    def __le__(self, other: Vector2D) -> bool:
        return self.norm() <= other.norm()

    def __gt__(self, other: Vector2D) -> bool:
        return self.norm() > other.norm()

    def __ge__(self, other: Vector2D) -> bool:
        return self.norm() >= other.norm()

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def dot(self, other: Vector2D) -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: Vector2D) -> float:
        """Z component of the 3D cross product of the two vectors."""
        return self.x * other.y - self.y * other.x

    def proj(self, onto: Vector2D) -> Vector2D:
        """Project this vector onto `onto`. Projection onto zero is zero."""
        denom = onto.dot(onto)
        if denom == 0.0:
            return Vector2D(0.0, 0.0)
        return onto * (self.dot(onto) / denom)

    def pow(self, n: float) -> Vector2D:
        return Vector2D(self.x**n, self.y**n)

    def sum(self) -> float:
        return self.x + self.y

    def norm(self) -> float:
        return math.hypot(self.x, self.y)

    def norm_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    def normalized(self) -> Vector2D:
        """Unit vector in the same direction; the zero vector maps to itself."""
        n = self.norm()
        if n == 0.0:
            return Vector2D(0.0, 0.0)
        return Vector2D(self.x / n, self.y / n)

    def rotate(self, angle: float) -> Vector2D:
        """Rotate counter-clockwise by `angle` radians."""
        c, s = math.cos(angle), math.sin(angle)
        return Vector2D(c * self.x - s * self.y, s * self.x + c * self.y)

    def perpendicular(self) -> Vector2D:
        """This vector rotated by +90 degrees (exact, no trig)."""
        return Vector2D(-self.y, self.x)

    def angle(self) -> float:
        """Direction of the vector in radians, wrapped to [0, 2*pi)."""
        return angle_wrap(math.atan2(self.y, self.x))

    def distance_to(self, other: Vector2D) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def as_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y], dtype=np.float64)

    def __str__(self) -> str:
        return f"{{{self.x}, {self.y}}}"


@dataclass(frozen=True)
class Pose2D(Vector2D):
    """Robot position plus heading.

    Arithmetic inherited from Vector2D acts on the position and returns a
    plain Vector2D.

    Attributes:
        h: Heading in radians.
    """

    h: float = 0.0

    @property
    def position(self) -> Vector2D:
        return Vector2D(self.x, self.y)

    def with_heading(self, h: float) -> Pose2D:
        return Pose2D(self.x, self.y, h)

    def is_finite(self) -> bool:
        return super().is_finite() and math.isfinite(self.h)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.h

    def __str__(self) -> str:
        return f"{super().__str__()} facing {self.h}"
