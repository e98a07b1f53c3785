"""Easing curves for frame-accurate interpolation.

Provides a comprehensive set of easing curves for keyframe interpolation.
Every curve is a direct mathematical formula: a curve takes a normalized
time t (0.0 to 1.0) and returns a normalized value, which may leave [0, 1]
for overshooting families (back, elastic, some cubic-beziers).

Curves can be referenced by ``Easing`` enum member, by snake_case name
("ease_out_cubic"), by GSAP-style string ("power2.out", "back.out(1.7)",
"elastic.out(1, 0.3)", "cubic-bezier(0.4, 0, 0.2, 1)"), by preset name
("appleSwift"), or built explicitly with the factory helpers below.
Unknown names never raise; they resolve to ``DEFAULT_EASING``.
"""

from dataclasses import dataclass
from enum import Enum, auto
from functools import lru_cache
from typing import Callable, Union
import logging
import math
import re

import numpy as np
from numpy.typing import ArrayLike, NDArray

logger = logging.getLogger(__name__)


class Easing(Enum):
    """Available easing function types."""

    LINEAR = auto()

    # Quadratic
    EASE_IN_QUAD = auto()
    EASE_OUT_QUAD = auto()
    EASE_IN_OUT_QUAD = auto()

    # Cubic
    EASE_IN_CUBIC = auto()
    EASE_OUT_CUBIC = auto()
    EASE_IN_OUT_CUBIC = auto()

    # Quartic
    EASE_IN_QUART = auto()
    EASE_OUT_QUART = auto()
    EASE_IN_OUT_QUART = auto()

    # Quintic
    EASE_IN_QUINT = auto()
    EASE_OUT_QUINT = auto()
    EASE_IN_OUT_QUINT = auto()

    # Sine
    EASE_IN_SINE = auto()
    EASE_OUT_SINE = auto()
    EASE_IN_OUT_SINE = auto()

    # Exponential
    EASE_IN_EXPO = auto()
    EASE_OUT_EXPO = auto()
    EASE_IN_OUT_EXPO = auto()

    # Circular
    EASE_IN_CIRC = auto()
    EASE_OUT_CIRC = auto()
    EASE_IN_OUT_CIRC = auto()

    # Elastic
    EASE_IN_ELASTIC = auto()
    EASE_OUT_ELASTIC = auto()
    EASE_IN_OUT_ELASTIC = auto()

    # Back (overshoot)
    EASE_IN_BACK = auto()
    EASE_OUT_BACK = auto()
    EASE_IN_OUT_BACK = auto()

    # Bounce
    EASE_IN_BOUNCE = auto()
    EASE_OUT_BOUNCE = auto()
    EASE_IN_OUT_BOUNCE = auto()


# Type alias for easing functions
EasingFunc = Callable[[float], float]

IN = "in"
OUT = "out"
IN_OUT = "in_out"

BACK_OVERSHOOT = 1.70158
ELASTIC_AMPLITUDE = 1.0
ELASTIC_PERIOD = 0.3
ELASTIC_IN_OUT_PERIOD = 0.45


def _exp2(x: float) -> float:
    # 2 ** x raises OverflowError instead of returning inf
    return 2.0 ** min(x, 1000.0)


def _power(t: float, n: float) -> float:
    # Negative t only occurs when extrapolating; keep the result real
    try:
        if float(n).is_integer():
            return float(t) ** int(n)
        return math.copysign(abs(t) ** n, t)
    except (OverflowError, ZeroDivisionError):
        return math.inf


# Base "in" curves. Out and in-out variants are derived by mirroring.

def ease_in_linear(t: float) -> float:
    """Linear interpolation (no easing)."""
    return t


def ease_in_poly(t: float, power: float = 3.0) -> float:
    """Accelerate from zero velocity along t ** power."""
    return _power(t, power)


def ease_in_sine(t: float) -> float:
    """Accelerate using sine curve."""
    return 1 - math.cos((t * math.pi) / 2)


def ease_in_expo(t: float) -> float:
    """Accelerate exponentially."""
    return 0.0 if t == 0 else _exp2(10 * t - 10)


def ease_in_circ(t: float) -> float:
    """Accelerate along circular curve."""
    return 1 - math.sqrt(max(0.0, 1 - t * t))


def ease_in_back(t: float, overshoot: float = BACK_OVERSHOOT) -> float:
    """Accelerate with slight pull-back before moving."""
    return (overshoot + 1) * t * t * t - overshoot * t * t


def ease_in_elastic(
    t: float,
    amplitude: float = ELASTIC_AMPLITUDE,
    period: float = ELASTIC_PERIOD,
) -> float:
    """Accelerate with elastic effect.

    The amplitude is floored at 1; a smaller value cannot reach the target.
    """
    if t == 0:
        return 0.0
    if t == 1:
        return 1.0
    if not period > 0:
        period = ELASTIC_PERIOD
    amplitude = max(1.0, amplitude)
    shift = period / (2 * math.pi) * math.asin(1 / amplitude)
    return -(amplitude * _exp2(10 * (t - 1)) * math.sin((t - 1 - shift) * (2 * math.pi) / period))


def ease_out_bounce(t: float) -> float:
    """Decelerate with bounce effect.

    Four parabolic segments of decreasing height.
    """
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


def ease_in_bounce(t: float) -> float:
    """Accelerate with bounce effect."""
    return 1 - ease_out_bounce(1 - t)


def cubic_bezier_at(t: float, x1: float, y1: float, x2: float, y2: float) -> float:
    """Evaluate a CSS-style cubic-bezier timing curve at x = t.

    Solves for the curve parameter with Newton-Raphson, falling back to
    bisection when the derivative vanishes.
    """
    cx = 3 * x1
    bx = 3 * (x2 - x1) - cx
    ax = 1 - cx - bx

    cy = 3 * y1
    by = 3 * (y2 - y1) - cy
    ay = 1 - cy - by

    def sample_x(s: float) -> float:
        return ((ax * s + bx) * s + cx) * s

    def sample_dx(s: float) -> float:
        return (3 * ax * s + 2 * bx) * s + cx

    s = t
    for _ in range(8):
        error = sample_x(s) - t
        if abs(error) < 1e-7:
            return ((ay * s + by) * s + cy) * s
        derivative = sample_dx(s)
        if abs(derivative) < 1e-6:
            break
        s -= error / derivative

    # Bisection only makes sense inside the unit interval
    if 0.0 <= t <= 1.0:
        lo, hi = 0.0, 1.0
        s = t
        for _ in range(40):
            x = sample_x(s)
            if abs(x - t) < 1e-7:
                break
            if x < t:
                lo = s
            else:
                hi = s
            s = (lo + hi) / 2

    return ((ay * s + by) * s + cy) * s


_BASE_CURVES: dict[str, Callable[..., float]] = {
    "linear": ease_in_linear,
    "poly": ease_in_poly,
    "sine": ease_in_sine,
    "expo": ease_in_expo,
    "circ": ease_in_circ,
    "back": ease_in_back,
    "elastic": ease_in_elastic,
    "bounce": ease_in_bounce,
}


@dataclass(frozen=True)
class EasingCurve:
    """An immutable, parametrized easing curve.

    Attributes:
        family: Curve family ("linear", "poly", "sine", "expo", "circ",
            "back", "elastic", "bounce" or "bezier")
        direction: "in", "out" or "in_out"
        params: Family parameters (power, overshoot, amplitude/period,
            or the four bezier control values)
    """

    family: str
    direction: str = IN
    params: tuple[float, ...] = ()

    def __call__(self, t: float) -> float:
        if self.family == "bezier":
            return cubic_bezier_at(t, *self.params)

        base = _BASE_CURVES.get(self.family, ease_in_linear)
        params = self.params

        if self.direction == OUT:
            return 1 - base(1 - t, *params)
        if self.direction == IN_OUT:
            if t < 0.5:
                return base(2 * t, *params) / 2
            return 1 - base(2 - 2 * t, *params) / 2
        return base(t, *params)

    @property
    def name(self) -> str:
        """GSAP-style name of this curve."""
        direction = {IN: "in", OUT: "out", IN_OUT: "inOut"}[self.direction]
        if self.family == "linear":
            return "none"
        if self.family == "bezier":
            return "cubic-bezier({})".format(", ".join(f"{p:g}" for p in self.params))
        if self.params:
            return "{}.{}({})".format(
                self.family, direction, ", ".join(f"{p:g}" for p in self.params)
            )
        return f"{self.family}.{direction}"


# Explicit constructors

def _checked(value: float | None, default: float, what: str, positive: bool = False) -> float:
    # Zero periods divide by zero and NaN poisons every frame
    if value is None:
        return default
    value = float(value)
    if not math.isfinite(value) or (positive and value <= 0):
        logger.debug(f"Invalid {what} {value!r}, using {default:g}")
        return default
    return value


def linear() -> EasingCurve:
    return EasingCurve("linear")


def poly(power: float, direction: str = IN) -> EasingCurve:
    power = _checked(power, 3.0, "poly power", positive=True)
    return EasingCurve("poly", direction, (power,))


def sine(direction: str = IN) -> EasingCurve:
    return EasingCurve("sine", direction)


def expo(direction: str = IN) -> EasingCurve:
    return EasingCurve("expo", direction)


def circ(direction: str = IN) -> EasingCurve:
    return EasingCurve("circ", direction)


def back(overshoot: float = BACK_OVERSHOOT, direction: str = IN) -> EasingCurve:
    """Back curve; in-out scales the overshoot by 1.525 as GSAP does."""
    overshoot = _checked(overshoot, BACK_OVERSHOOT, "back overshoot")
    if direction == IN_OUT:
        overshoot *= 1.525
    return EasingCurve("back", direction, (float(overshoot),))


def elastic(
    amplitude: float = ELASTIC_AMPLITUDE,
    period: float | None = None,
    direction: str = OUT,
) -> EasingCurve:
    """Elastic curve. A missing or unusable period takes the GSAP default."""
    default_period = ELASTIC_IN_OUT_PERIOD if direction == IN_OUT else ELASTIC_PERIOD
    amplitude = _checked(amplitude, ELASTIC_AMPLITUDE, "elastic amplitude")
    period = _checked(period, default_period, "elastic period", positive=True)
    return EasingCurve("elastic", direction, (amplitude, period))


def bounce(direction: str = OUT) -> EasingCurve:
    return EasingCurve("bounce", direction)


def bezier(x1: float, y1: float, x2: float, y2: float) -> EasingCurve:
    """Cubic-bezier curve with CSS semantics (endpoints fixed at 0,0 and 1,1)."""
    params = (float(x1), float(y1), float(x2), float(y2))
    if not all(math.isfinite(p) for p in params):
        logger.debug(f"Invalid cubic-bezier {params}, using linear")
        return linear()
    return EasingCurve("bezier", IN, params)


def _power_family(power: int) -> dict[str, EasingCurve]:
    return {d: poly(power, d) for d in (IN, OUT, IN_OUT)}


_QUAD = _power_family(2)
_CUBIC = _power_family(3)
_QUART = _power_family(4)
_QUINT = _power_family(5)

# Mapping from enum to curve
_EASING_CURVES: dict[Easing, EasingCurve] = {
    Easing.LINEAR: linear(),

    Easing.EASE_IN_QUAD: _QUAD[IN],
    Easing.EASE_OUT_QUAD: _QUAD[OUT],
    Easing.EASE_IN_OUT_QUAD: _QUAD[IN_OUT],

    Easing.EASE_IN_CUBIC: _CUBIC[IN],
    Easing.EASE_OUT_CUBIC: _CUBIC[OUT],
    Easing.EASE_IN_OUT_CUBIC: _CUBIC[IN_OUT],

    Easing.EASE_IN_QUART: _QUART[IN],
    Easing.EASE_OUT_QUART: _QUART[OUT],
    Easing.EASE_IN_OUT_QUART: _QUART[IN_OUT],

    Easing.EASE_IN_QUINT: _QUINT[IN],
    Easing.EASE_OUT_QUINT: _QUINT[OUT],
    Easing.EASE_IN_OUT_QUINT: _QUINT[IN_OUT],

    Easing.EASE_IN_SINE: sine(IN),
    Easing.EASE_OUT_SINE: sine(OUT),
    Easing.EASE_IN_OUT_SINE: sine(IN_OUT),

    Easing.EASE_IN_EXPO: expo(IN),
    Easing.EASE_OUT_EXPO: expo(OUT),
    Easing.EASE_IN_OUT_EXPO: expo(IN_OUT),

    Easing.EASE_IN_CIRC: circ(IN),
    Easing.EASE_OUT_CIRC: circ(OUT),
    Easing.EASE_IN_OUT_CIRC: circ(IN_OUT),

    Easing.EASE_IN_ELASTIC: elastic(direction=IN),
    Easing.EASE_OUT_ELASTIC: elastic(direction=OUT),
    Easing.EASE_IN_OUT_ELASTIC: elastic(direction=IN_OUT),

    Easing.EASE_IN_BACK: back(direction=IN),
    Easing.EASE_OUT_BACK: back(direction=OUT),
    Easing.EASE_IN_OUT_BACK: back(direction=IN_OUT),

    Easing.EASE_IN_BOUNCE: bounce(IN),
    Easing.EASE_OUT_BOUNCE: bounce(OUT),
    Easing.EASE_IN_OUT_BOUNCE: bounce(IN_OUT),
}

# String name mapping: "ease_out_cubic" etc.
_EASING_BY_NAME: dict[str, Easing] = {member.name.lower(): member for member in Easing}
_EASING_BY_NAME["none"] = Easing.LINEAR

DEFAULT_EASING = Easing.EASE_OUT_CUBIC

# Motion-design presets expressed as GSAP ease strings
EASE_PRESETS: dict[str, str] = {
    # Apple-style
    "appleSwift": "power2.out",
    "appleBounce": "back.out(1.4)",
    "appleSnap": "expo.out",
    "appleGentle": "power1.inOut",

    # Material Design
    "materialStandard": "power2.inOut",
    "materialDecelerate": "circ.out",
    "materialAccelerate": "power2.in",
    "materialSharp": "power4.inOut",

    # Expressive/Playful
    "bouncy": "back.out(1.7)",
    "bouncyStrong": "back.out(2.5)",
    "elastic": "elastic.out(1, 0.3)",
    "elasticGentle": "elastic.out(0.8, 0.4)",
    "rubbery": "elastic.out(0.6, 0.5)",

    # Cinematic
    "dramaticIn": "power4.in",
    "dramaticOut": "power4.out",
    "dramaticInOut": "power4.inOut",
    "slowReveal": "expo.out",
    "epicIn": "power3.in",
    "epicOut": "power3.out",

    # Smooth/Natural
    "smooth": "power2.inOut",
    "smoothOut": "power2.out",
    "gentle": "sine.inOut",
    "gentleOut": "sine.out",
    "natural": "expo.out",
    "soft": "power1.out",

    # Snappy/UI
    "snappy": "power3.out",
    "quick": "power2.out",
    "instant": "power4.out",
    "responsive": "expo.out",

    "linear": "none",
}

# GSAP power naming: power1 = quad ... power4 = quint
_GSAP_FAMILIES: dict[str, tuple[str, tuple[float, ...]]] = {
    "power0": ("linear", ()),
    "linear": ("linear", ()),
    "power1": ("poly", (2.0,)),
    "quad": ("poly", (2.0,)),
    "power2": ("poly", (3.0,)),
    "cubic": ("poly", (3.0,)),
    "power3": ("poly", (4.0,)),
    "quart": ("poly", (4.0,)),
    "power4": ("poly", (5.0,)),
    "quint": ("poly", (5.0,)),
    "expo": ("expo", ()),
    "circ": ("circ", ()),
    "sine": ("sine", ()),
    "bounce": ("bounce", ()),
}

_GSAP_DIRECTIONS = {"in": IN, "out": OUT, "inout": IN_OUT}

_GSAP_PATTERN = re.compile(r"^(\w+)\.(in|out|inout)(?:\(([^)]*)\))?$")
_BEZIER_PATTERN = re.compile(r"^cubic-bezier\(([^)]*)\)$")

EasingLike = Union[Easing, str, EasingCurve, EasingFunc, None]


def _parse_params(text: str | None) -> list[float]:
    if not text or not text.strip():
        return []
    return [float(part) for part in text.split(",")]


def _parse_name(text: str) -> EasingCurve | None:
    """Parse a snake_case, preset or GSAP-style easing name."""
    key = text.strip()

    if key in EASE_PRESETS:
        key = EASE_PRESETS[key]

    member = _EASING_BY_NAME.get(key.lower())
    if member is not None:
        return _EASING_CURVES[member]

    compact = key.replace(" ", "").lower()

    match = _BEZIER_PATTERN.match(compact)
    if match:
        try:
            params = _parse_params(match.group(1))
        except ValueError:
            return None
        return bezier(*params) if len(params) == 4 else None

    match = _GSAP_PATTERN.match(compact)
    if not match:
        return None

    family, direction_name, params_text = match.groups()
    direction = _GSAP_DIRECTIONS[direction_name]
    try:
        params = _parse_params(params_text)
    except ValueError:
        return None

    if family == "back":
        return back(params[0] if params else BACK_OVERSHOOT, direction)
    if family == "elastic":
        amplitude = params[0] if params else ELASTIC_AMPLITUDE
        period = params[1] if len(params) > 1 else None
        return elastic(amplitude, period, direction)
    if family == "poly":
        return poly(params[0] if params else 3.0, direction)

    base = _GSAP_FAMILIES.get(family)
    if base is None:
        return None
    base_family, base_params = base
    if base_family == "linear":
        return linear()
    return EasingCurve(base_family, direction, base_params)


@lru_cache(maxsize=512)
def _resolve_name(text: str) -> EasingCurve:
    curve = _parse_name(text)
    if curve is None:
        logger.debug(f"Unknown easing {text!r}, using {DEFAULT_EASING.name.lower()}")
        return _EASING_CURVES[DEFAULT_EASING]
    return curve


def resolve_easing(easing: EasingLike, default: EasingLike = DEFAULT_EASING) -> EasingFunc:
    """Resolve any easing reference into a concrete curve.

    Args:
        easing: Easing enum value, name string, EasingCurve or callable.
            None resolves to ``default``.
        default: Used when easing is None

    Returns:
        An EasingCurve (or the callable itself when one was passed)
    """
    if easing is None:
        if default is None:
            return _EASING_CURVES[DEFAULT_EASING]
        return resolve_easing(default, DEFAULT_EASING)
    if isinstance(easing, EasingCurve):
        return easing
    if isinstance(easing, Easing):
        return _EASING_CURVES[easing]
    if isinstance(easing, str):
        return _resolve_name(easing)
    if callable(easing):
        return easing
    logger.debug(f"Unsupported easing {easing!r}, using {DEFAULT_EASING.name.lower()}")
    return _EASING_CURVES[DEFAULT_EASING]


def get_easing(easing: Easing | str) -> EasingFunc:
    """Get an easing function by enum or name.

    Args:
        easing: Easing enum value or string name (e.g., "ease_out_cubic",
            "power2.out", "appleSwift")

    Returns:
        The easing function. Unknown names give the ease-out-cubic curve.
    """
    return resolve_easing(easing)


def is_known_easing(name: str) -> bool:
    """Check whether a name parses to a curve without falling back."""
    return _parse_name(name) is not None


def evaluate(curve: EasingLike, t: float) -> float:
    """Evaluate a curve at normalized time t.

    Callers are responsible for clamping t; values outside [0, 1]
    extrapolate the curve's formula.
    """
    return resolve_easing(curve)(t)


def interpolate(start: float, end: float, t: float, easing: EasingLike = Easing.LINEAR) -> float:
    """Interpolate between two values using an easing function.

    Args:
        start: Starting value
        end: Ending value
        t: Progress (0.0 to 1.0), clamped
        easing: Easing function to use

    Returns:
        Interpolated value
    """
    easing_func = resolve_easing(easing)
    eased_t = easing_func(max(0.0, min(1.0, t)))
    return start + (end - start) * eased_t


def sample(easing: EasingLike, ts: ArrayLike) -> NDArray[np.float64]:
    """Evaluate a curve over an array of normalized times."""
    func = resolve_easing(easing)
    values = np.asarray(ts, dtype=np.float64)
    return np.vectorize(func, otypes=[np.float64])(values)
