"""Easing curves for keyframe segments.

An easing curve remaps the linear progress of a segment (0..1) into eased
progress. Every curve is anchored: progress 0 maps to exactly 0 and progress
1 maps to exactly 1, whatever happens in between. BACK and ELASTIC curves
overshoot outside [0, 1] between the anchors.

Terminology:
- IN: slow start, accelerating towards the end
- OUT: fast start, decelerating towards the end
- IN_OUT: slow start and end, fast middle

Curves are selected by value: either an Ease member from the fixed catalog or
a CubicBezier instance describing a CSS-style custom curve.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Union


class Ease(Enum):
    """
    Catalog of easing curves.

    Power curves (the higher the power, the sharper the transition):
    - QUAD, CUBIC, QUART, QUINT

    Trigonometric and friends:
    - SINE: the softest, most natural curve
    - EXPO: very sharp transition
    - CIRC: follows a circle arc

    Special effects:
    - BACK: pulls back before/after the motion
    - ELASTIC: spring oscillations
    - BOUNCE: bouncing ball

    CSS keywords (cubic bezier curves):
    - EASE, IN, OUT, IN_OUT
    """

    LINEAR = auto()

    # CSS timing keywords
    EASE = auto()
    IN = auto()
    OUT = auto()
    IN_OUT = auto()

    IN_QUAD = auto()
    OUT_QUAD = auto()
    IN_OUT_QUAD = auto()

    IN_CUBIC = auto()
    OUT_CUBIC = auto()
    IN_OUT_CUBIC = auto()

    IN_QUART = auto()
    OUT_QUART = auto()
    IN_OUT_QUART = auto()

    IN_QUINT = auto()
    OUT_QUINT = auto()
    IN_OUT_QUINT = auto()

    IN_SINE = auto()
    OUT_SINE = auto()
    IN_OUT_SINE = auto()

    IN_EXPO = auto()
    OUT_EXPO = auto()
    IN_OUT_EXPO = auto()

    IN_CIRC = auto()
    OUT_CIRC = auto()
    IN_OUT_CIRC = auto()

    # Leaves [0, 1] before/after the motion
    IN_BACK = auto()
    OUT_BACK = auto()
    IN_OUT_BACK = auto()

    # Oscillates around the endpoints
    IN_ELASTIC = auto()
    OUT_ELASTIC = auto()
    IN_OUT_ELASTIC = auto()

    IN_BOUNCE = auto()
    OUT_BOUNCE = auto()
    IN_OUT_BOUNCE = auto()

    def __call__(self, t: float) -> float:
        return evaluate(self, t)


@dataclass(frozen=True)
class CubicBezier:
    """
    CSS-style cubic bezier timing curve through (0, 0), (x1, y1), (x2, y2), (1, 1).

    x1 and x2 must lie in [0, 1] so that the curve is a function of time;
    y1 and y2 are free, which allows overshoot.
    """

    x1: float
    y1: float
    x2: float
    y2: float

    def __post_init__(self):
        if not (0.0 <= self.x1 <= 1.0 and 0.0 <= self.x2 <= 1.0):
            raise ValueError(
                f"CubicBezier x control points must be in [0, 1], got x1={self.x1}, x2={self.x2}"
            )

    def __call__(self, t: float) -> float:
        if t <= 0.0:
            return 0.0
        if t >= 1.0:
            return 1.0
        return self._sample_y(self._solve_s(t))

    def _coefficients(self, p1: float, p2: float) -> tuple[float, float, float]:
        c = 3.0 * p1
        b = 3.0 * (p2 - p1) - c
        a = 1.0 - c - b
        return a, b, c

    def _sample_x(self, s: float) -> float:
        a, b, c = self._coefficients(self.x1, self.x2)
        return ((a * s + b) * s + c) * s

    def _sample_y(self, s: float) -> float:
        a, b, c = self._coefficients(self.y1, self.y2)
        return ((a * s + b) * s + c) * s

    def _sample_dx(self, s: float) -> float:
        a, b, c = self._coefficients(self.x1, self.x2)
        return (3.0 * a * s + 2.0 * b) * s + c

    def _solve_s(self, x: float, epsilon: float = 1e-7) -> float:
        """Find curve parameter s with x(s) == x."""
        # Newton first, it converges in a few steps for most curves
        s = x
        for _ in range(8):
            err = self._sample_x(s) - x
            if abs(err) < epsilon:
                return s
            dx = self._sample_dx(s)
            if abs(dx) < 1e-6:
                break
            s -= err / dx

        # Bisection fallback, x(s) is monotonic on [0, 1]
        lo, hi = 0.0, 1.0
        s = x
        while hi - lo > epsilon:
            value = self._sample_x(s)
            if abs(value - x) < epsilon:
                return s
            if value < x:
                lo = s
            else:
                hi = s
            s = (lo + hi) / 2.0
        return s


EasingCurve = Union[Ease, CubicBezier]


# ============================================================================
# Curve implementations
# ============================================================================


def linear(t: float) -> float:
    """Uniform motion, no acceleration."""
    return t


# --- Quad ---

def in_quad(t: float) -> float:
    """Quadratic in: slow start, t^2."""
    return t * t


def out_quad(t: float) -> float:
    """Quadratic out: slow finish."""
    return 1 - (1 - t) * (1 - t)


def in_out_quad(t: float) -> float:
    """Quadratic in-out: slow start and finish."""
    return 2 * t * t if t < 0.5 else 1 - (-2 * t + 2) ** 2 / 2


# --- Cubic ---

def in_cubic(t: float) -> float:
    """Cubic in: t^3."""
    return t * t * t


def out_cubic(t: float) -> float:
    """Cubic out."""
    return 1 - (1 - t) ** 3


def in_out_cubic(t: float) -> float:
    """Cubic in-out."""
    return 4 * t * t * t if t < 0.5 else 1 - (-2 * t + 2) ** 3 / 2


# --- Quart ---

def in_quart(t: float) -> float:
    """Quartic in: t^4."""
    return t ** 4


def out_quart(t: float) -> float:
    """Quartic out."""
    return 1 - (1 - t) ** 4


def in_out_quart(t: float) -> float:
    """Quartic in-out."""
    return 8 * t ** 4 if t < 0.5 else 1 - (-2 * t + 2) ** 4 / 2


# --- Quint ---

def in_quint(t: float) -> float:
    """Quintic in: t^5."""
    return t ** 5


def out_quint(t: float) -> float:
    """Quintic out."""
    return 1 - (1 - t) ** 5


def in_out_quint(t: float) -> float:
    """Quintic in-out."""
    return 16 * t ** 5 if t < 0.5 else 1 - (-2 * t + 2) ** 5 / 2


# --- Sine ---

def in_sine(t: float) -> float:
    """Sine in: the softest curve."""
    return 1 - math.cos(t * math.pi / 2)


def out_sine(t: float) -> float:
    """Sine out."""
    return math.sin(t * math.pi / 2)


def in_out_sine(t: float) -> float:
    """Sine in-out."""
    return -(math.cos(math.pi * t) - 1) / 2


# --- Expo ---

def in_expo(t: float) -> float:
    """Very slow start followed by a sharp acceleration."""
    return 0.0 if t == 0 else 2 ** (10 * t - 10)


def out_expo(t: float) -> float:
    """Sharp start, very slow finish."""
    return 1.0 if t == 1 else 1 - 2 ** (-10 * t)


def in_out_expo(t: float) -> float:
    """Exponential in-out."""
    if t == 0 or t == 1:
        return float(t)
    if t < 0.5:
        return 2 ** (20 * t - 10) / 2
    return (2 - 2 ** (-20 * t + 10)) / 2


# --- Circ ---

def in_circ(t: float) -> float:
    """Circular in: follows a circle arc."""
    return 1 - math.sqrt(1 - t * t)


def out_circ(t: float) -> float:
    """Circular out."""
    return math.sqrt(1 - (t - 1) ** 2)


def in_out_circ(t: float) -> float:
    """Circular in-out."""
    if t < 0.5:
        return (1 - math.sqrt(1 - (2 * t) ** 2)) / 2
    return (math.sqrt(1 - (-2 * t + 2) ** 2) + 1) / 2


# --- Back ---

_BACK_C1 = 1.70158
_BACK_C2 = _BACK_C1 * 1.525
_BACK_C3 = _BACK_C1 + 1


def in_back(t: float) -> float:
    """Pulls back before moving forward."""
    return _BACK_C3 * t * t * t - _BACK_C1 * t * t


def out_back(t: float) -> float:
    """Overshoots the target and comes back."""
    return 1 + _BACK_C3 * (t - 1) ** 3 + _BACK_C1 * (t - 1) ** 2


def in_out_back(t: float) -> float:
    """Pulls back at both ends."""
    if t < 0.5:
        return ((2 * t) ** 2 * ((_BACK_C2 + 1) * 2 * t - _BACK_C2)) / 2
    return ((2 * t - 2) ** 2 * ((_BACK_C2 + 1) * (t * 2 - 2) + _BACK_C2) + 2) / 2


# --- Elastic ---

_ELASTIC_C4 = (2 * math.pi) / 3
_ELASTIC_C5 = (2 * math.pi) / 4.5


def in_elastic(t: float) -> float:
    """Spring oscillating around the start point."""
    if t == 0 or t == 1:
        return float(t)
    return -(2 ** (10 * t - 10)) * math.sin((t * 10 - 10.75) * _ELASTIC_C4)


def out_elastic(t: float) -> float:
    """Spring oscillating around the end point."""
    if t == 0 or t == 1:
        return float(t)
    return 2 ** (-10 * t) * math.sin((t * 10 - 0.75) * _ELASTIC_C4) + 1


def in_out_elastic(t: float) -> float:
    """Spring oscillations at both ends."""
    if t == 0 or t == 1:
        return float(t)
    if t < 0.5:
        return -(2 ** (20 * t - 10) * math.sin((20 * t - 11.125) * _ELASTIC_C5)) / 2
    return (2 ** (-20 * t + 10) * math.sin((20 * t - 11.125) * _ELASTIC_C5)) / 2 + 1


# --- Bounce ---

def out_bounce(t: float) -> float:
    """Falling ball bouncing on the floor."""
    n1 = 7.5625
    d1 = 2.75
    if t < 1 / d1:
        return n1 * t * t
    elif t < 2 / d1:
        t -= 1.5 / d1
        return n1 * t * t + 0.75
    elif t < 2.5 / d1:
        t -= 2.25 / d1
        return n1 * t * t + 0.9375
    else:
        t -= 2.625 / d1
        return n1 * t * t + 0.984375


def in_bounce(t: float) -> float:
    """Bounces at the start."""
    return 1 - out_bounce(1 - t)


def in_out_bounce(t: float) -> float:
    """Bounces at both ends."""
    if t < 0.5:
        return (1 - out_bounce(1 - 2 * t)) / 2
    return (1 + out_bounce(2 * t - 1)) / 2


# ============================================================================
# Ease -> function
# ============================================================================

CSS_EASE = CubicBezier(0.25, 0.1, 0.25, 1.0)
CSS_EASE_IN = CubicBezier(0.42, 0.0, 1.0, 1.0)
CSS_EASE_OUT = CubicBezier(0.0, 0.0, 0.58, 1.0)
CSS_EASE_IN_OUT = CubicBezier(0.42, 0.0, 0.58, 1.0)

_EASE_FUNCTIONS: dict[Ease, Callable[[float], float]] = {
    Ease.LINEAR: linear,
    Ease.EASE: CSS_EASE,
    Ease.IN: CSS_EASE_IN,
    Ease.OUT: CSS_EASE_OUT,
    Ease.IN_OUT: CSS_EASE_IN_OUT,
    Ease.IN_QUAD: in_quad,
    Ease.OUT_QUAD: out_quad,
    Ease.IN_OUT_QUAD: in_out_quad,
    Ease.IN_CUBIC: in_cubic,
    Ease.OUT_CUBIC: out_cubic,
    Ease.IN_OUT_CUBIC: in_out_cubic,
    Ease.IN_QUART: in_quart,
    Ease.OUT_QUART: out_quart,
    Ease.IN_OUT_QUART: in_out_quart,
    Ease.IN_QUINT: in_quint,
    Ease.OUT_QUINT: out_quint,
    Ease.IN_OUT_QUINT: in_out_quint,
    Ease.IN_SINE: in_sine,
    Ease.OUT_SINE: out_sine,
    Ease.IN_OUT_SINE: in_out_sine,
    Ease.IN_EXPO: in_expo,
    Ease.OUT_EXPO: out_expo,
    Ease.IN_OUT_EXPO: in_out_expo,
    Ease.IN_CIRC: in_circ,
    Ease.OUT_CIRC: out_circ,
    Ease.IN_OUT_CIRC: in_out_circ,
    Ease.IN_BACK: in_back,
    Ease.OUT_BACK: out_back,
    Ease.IN_OUT_BACK: in_out_back,
    Ease.IN_ELASTIC: in_elastic,
    Ease.OUT_ELASTIC: out_elastic,
    Ease.IN_OUT_ELASTIC: in_out_elastic,
    Ease.IN_BOUNCE: in_bounce,
    Ease.OUT_BOUNCE: out_bounce,
    Ease.IN_OUT_BOUNCE: in_out_bounce,
}


def is_easing(curve) -> bool:
    """True if curve can be passed to evaluate()."""
    return isinstance(curve, (Ease, CubicBezier))


def evaluate(curve: EasingCurve, t: float) -> float:
    """
    Evaluate easing curve at progress t.

    t is clamped to [0, 1]. The endpoints are exact: evaluate(c, 0) == 0 and
    evaluate(c, 1) == 1 for every curve.
    """
    if isinstance(curve, Ease):
        fn = _EASE_FUNCTIONS[curve]
    elif isinstance(curve, CubicBezier):
        fn = curve
    else:
        raise TypeError(f"Unknown easing curve: {curve!r}")

    if t <= 0.0:
        return 0.0
    if t >= 1.0:
        return 1.0
    return fn(t)
