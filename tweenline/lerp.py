"""Interpolation of animatable values.

Every field animated by a timeline must support linear interpolation:

    lerp(a, b, t)   # a at t=0, b at t=1, extrapolates outside [0, 1]

Built in:
- real numbers: a + (b - a) * t
- integers: computed in float space and rounded back to int
- numpy arrays: element-wise
- tuples and namedtuples: element-wise
- any object with a lerp(other, t) method (see Quaternion, Color)

Third-party types that cannot grow a lerp method are registered instead:

    register_lerp(Vec3, lambda a, b, t: a + (b - a) * t)

bool is deliberately not interpolatable.
"""

from __future__ import annotations

import math
import numbers
from typing import Any, Callable, Iterator, Protocol, TypeVar, runtime_checkable

import numpy as np

from tweenline.errors import InterpolationError

T = TypeVar("T")

LerpFunction = Callable[[Any, Any, float], Any]

_LERP_FUNCTIONS: dict[type, LerpFunction] = {}


@runtime_checkable
class Lerp(Protocol):
    """Protocol for user types that interpolate themselves."""

    def lerp(self, other, t: float): ...


def register_lerp(cls: type, func: LerpFunction) -> None:
    """Register interpolation function for instances of cls (and subclasses)."""
    _LERP_FUNCTIONS[cls] = func


def unregister_lerp(cls: type) -> None:
    _LERP_FUNCTIONS.pop(cls, None)


def _registered(cls: type) -> LerpFunction | None:
    for klass in cls.__mro__:
        func = _LERP_FUNCTIONS.get(klass)
        if func is not None:
            return func
    return None


def _round_half_away(x: float) -> int:
    return int(math.floor(x + 0.5)) if x >= 0 else -int(math.floor(-x + 0.5))


def lerp(a: T, b: T, t: float) -> T:
    """Interpolate between a and b at t."""
    func = _registered(type(a))
    if func is not None:
        return func(a, b, t)

    if isinstance(a, bool) or isinstance(b, bool):
        raise TypeError("bool values cannot be interpolated")

    if isinstance(a, numbers.Integral) and isinstance(b, numbers.Integral):
        # Float space avoids overflow for narrow numpy integer types
        return type(a)(_round_half_away(float(a) * (1.0 - t) + float(b) * t))

    if isinstance(a, numbers.Complex) and isinstance(b, numbers.Complex):
        return a + (b - a) * t

    if isinstance(a, np.ndarray):
        a_arr = a.astype(np.float64) if a.dtype.kind in "iu" else a
        return a_arr + (np.asarray(b) - a_arr) * t

    if isinstance(a, tuple):
        if len(a) != len(b):
            raise ValueError(f"Cannot interpolate tuples of different length: {len(a)} and {len(b)}")
        items = [lerp(x, y, t) for x, y in zip(a, b)]
        if hasattr(a, "_fields"):
            return type(a)(*items)
        return tuple(items)

    if isinstance(a, Lerp):
        return a.lerp(b, t)

    raise TypeError(f"Cannot interpolate values of type {type(a).__name__}")


def is_interpolatable(value: Any) -> bool:
    """True if lerp() knows how to interpolate value."""
    if _registered(type(value)) is not None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, numbers.Complex):
        return True
    if isinstance(value, np.ndarray):
        return value.dtype.kind in "iufc"
    if isinstance(value, tuple):
        return len(value) > 0 and all(is_interpolatable(item) for item in value)
    return isinstance(value, Lerp)


def require_interpolatable(field: str, value: Any) -> None:
    """Raise InterpolationError unless value is interpolatable."""
    if not is_interpolatable(value):
        raise InterpolationError(field, value)


class Quaternion:
    """
    Rotation quaternion (x, y, z, w) interpolated along the shortest arc.

    Stored as a float64 numpy array.
    """

    __slots__ = ("_q",)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0, w: float = 1.0):
        self._q = np.array([x, y, z, w], dtype=np.float64)

    @classmethod
    def identity(cls) -> "Quaternion":
        return cls()

    @classmethod
    def from_array(cls, q) -> "Quaternion":
        x, y, z, w = np.asarray(q, dtype=np.float64)
        return cls(x, y, z, w)

    @classmethod
    def from_axis_angle(cls, axis, angle: float) -> "Quaternion":
        """Rotation by angle (radians) around axis."""
        axis = np.asarray(axis, dtype=np.float64)
        axis = axis / np.linalg.norm(axis)
        s = math.sin(angle / 2)
        return cls(axis[0] * s, axis[1] * s, axis[2] * s, math.cos(angle / 2))

    @property
    def x(self) -> float:
        return float(self._q[0])

    @property
    def y(self) -> float:
        return float(self._q[1])

    @property
    def z(self) -> float:
        return float(self._q[2])

    @property
    def w(self) -> float:
        return float(self._q[3])

    def as_array(self) -> np.ndarray:
        return self._q.copy()

    def __iter__(self) -> Iterator[float]:
        return iter(float(v) for v in self._q)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Quaternion):
            return NotImplemented
        return bool(np.array_equal(self._q, other._q))

    def __hash__(self) -> int:
        return hash(tuple(self._q))

    def __repr__(self) -> str:
        return f"Quaternion(x={self.x}, y={self.y}, z={self.z}, w={self.w})"

    def lerp(self, other: "Quaternion", t: float) -> "Quaternion":
        return Quaternion.from_array(_slerp(self._q, other._q, t))


def _slerp(q0: np.ndarray, q1: np.ndarray, t: float) -> np.ndarray:
    """Spherical linear interpolation between quaternions."""
    # Shortest path
    dot = float(np.dot(q0, q1))
    if dot < 0:
        q1 = -q1
        dot = -dot

    # Nearly parallel: plain lerp is stable and accurate enough
    if dot > 0.9995:
        result = q0 + t * (q1 - q0)
        return result / np.linalg.norm(result)

    theta_0 = np.arccos(dot)
    theta = theta_0 * t
    sin_theta = np.sin(theta)
    sin_theta_0 = np.sin(theta_0)

    s0 = np.cos(theta) - dot * sin_theta / sin_theta_0
    s1 = sin_theta / sin_theta_0

    result = s0 * q0 + s1 * q1
    return result / np.linalg.norm(result)


class Color:
    """RGBA color with float components, interpolated component-wise."""

    __slots__ = ("r", "g", "b", "a")

    def __init__(self, r: float, g: float, b: float, a: float = 1.0):
        self.r = float(r)
        self.g = float(g)
        self.b = float(b)
        self.a = float(a)

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        """Parse '#rrggbb' or '#rrggbbaa'."""
        text = value.lstrip("#")
        if len(text) not in (6, 8):
            raise ValueError(f"Invalid hex color: {value!r}")
        channels = [int(text[i:i + 2], 16) / 255.0 for i in range(0, len(text), 2)]
        return cls(*channels)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.r, self.g, self.b, self.a)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Color):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __hash__(self) -> int:
        return hash(self.as_tuple())

    def __repr__(self) -> str:
        return f"Color(r={self.r}, g={self.g}, b={self.b}, a={self.a})"

    def lerp(self, other: "Color", t: float) -> "Color":
        return Color(
            self.r + (other.r - self.r) * t,
            self.g + (other.g - self.g) * t,
            self.b + (other.b - self.b) * t,
            self.a + (other.a - self.a) * t,
        )
