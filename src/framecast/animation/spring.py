"""Deterministic spring physics.

Springs are evaluated from the closed-form solution of the damped harmonic
oscillator, so the value at any frame is computed directly from the elapsed
time. Nothing is integrated step by step and nothing is carried over between
calls: the same arguments always give the same result.

The spring is released from rest at 0 and settles on 1:

    m * x'' + c * x' + k * x = 0,   x(0) = -1,   x'(0) = v0

where x is the displacement from the target, k the stiffness, c the damping
and m the mass. The returned value is ``1 + x(t)``.
"""

from dataclasses import dataclass, replace
from typing import Optional
import logging
import math

import numpy as np
from numpy.typing import ArrayLike, NDArray

from framecast.errors import InvalidDefinitionError

logger = logging.getLogger(__name__)

# Damping ratios this close to 1 use the critically damped solution
CRITICAL_TOLERANCE = 1e-9

DEFAULT_THRESHOLD = 0.005
DEFAULT_MAX_FRAMES = 36_000


@dataclass(frozen=True)
class SpringConfig:
    """Physical parameters of a spring.

    Attributes:
        stiffness: Spring constant (> 0). Higher = snappier
        damping: Friction (>= 0). Higher = less overshoot
        mass: Mass of the animated object (> 0). Higher = slower
        overshoot_clamp: Clip the result to [0, 1] so it never bounces past the target
        velocity: Initial velocity in units per second
        duration: Optional duration in seconds; the spring's natural
            settle time is stretched or squeezed to fit it
    """

    stiffness: float = 100.0
    damping: float = 10.0
    mass: float = 1.0
    overshoot_clamp: bool = False
    velocity: float = 0.0
    duration: Optional[float] = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.stiffness) or self.stiffness <= 0:
            raise InvalidDefinitionError(f"Spring stiffness must be > 0, got {self.stiffness}")
        if not math.isfinite(self.damping) or self.damping < 0:
            raise InvalidDefinitionError(f"Spring damping must be >= 0, got {self.damping}")
        if not math.isfinite(self.mass) or self.mass <= 0:
            raise InvalidDefinitionError(f"Spring mass must be > 0, got {self.mass}")
        if not math.isfinite(self.velocity):
            raise InvalidDefinitionError(f"Spring velocity must be finite, got {self.velocity}")
        if self.duration is not None and (not math.isfinite(self.duration) or self.duration <= 0):
            raise InvalidDefinitionError(f"Spring duration must be > 0, got {self.duration}")

    @property
    def damping_ratio(self) -> float:
        """Dimensionless damping ratio zeta."""
        return self.damping / (2 * math.sqrt(self.stiffness * self.mass))

    @property
    def natural_frequency(self) -> float:
        """Undamped angular frequency in radians per second."""
        return math.sqrt(self.stiffness / self.mass)

    @property
    def regime(self) -> str:
        """Damping regime: "under", "critical" or "over"."""
        zeta = self.damping_ratio
        if abs(zeta - 1.0) < CRITICAL_TOLERANCE:
            return "critical"
        return "under" if zeta < 1.0 else "over"


def _displacement(config: SpringConfig, t: float) -> float:
    """Closed-form displacement from the target at time t seconds."""
    x0 = -1.0
    v0 = config.velocity
    omega = config.natural_frequency
    zeta = config.damping_ratio

    if abs(zeta - 1.0) < CRITICAL_TOLERANCE:
        return math.exp(-omega * t) * (x0 + (v0 + omega * x0) * t)

    if zeta < 1.0:
        omega_d = omega * math.sqrt(1.0 - zeta * zeta)
        envelope = math.exp(-zeta * omega * t)
        return envelope * (
            x0 * math.cos(omega_d * t)
            + (v0 + zeta * omega * x0) / omega_d * math.sin(omega_d * t)
        )

    root = omega * math.sqrt(zeta * zeta - 1.0)
    r1 = -zeta * omega + root  # slow mode
    r2 = -zeta * omega - root  # fast mode
    c2 = (v0 - r1 * x0) / (r2 - r1)
    c1 = x0 - c2
    return c1 * math.exp(r1 * t) + c2 * math.exp(r2 * t)


def _raw_value(config: SpringConfig, seconds: float) -> float:
    if seconds <= 0:
        return 0.0
    value = 1.0 + _displacement(config, seconds)
    if config.overshoot_clamp:
        value = max(0.0, min(1.0, value))
    return value


def measure_spring(
    config: SpringConfig,
    fps: float,
    threshold: float = DEFAULT_THRESHOLD,
    max_frames: int = DEFAULT_MAX_FRAMES,
) -> int:
    """Number of frames until the spring stays within threshold of rest.

    The natural (unstretched) motion is measured; ``config.duration`` is
    ignored here.

    Args:
        config: Spring configuration
        fps: Frames per second
        threshold: Distance from 1.0 considered settled
        max_frames: Upper bound for undamped or extremely slow springs

    Returns:
        Settle time in whole frames
    """
    if fps <= 0:
        raise InvalidDefinitionError(f"fps must be > 0, got {fps}")

    natural = replace(config, duration=None)
    settled_run = 0
    frame = 0
    while frame < max_frames:
        value = _raw_value(natural, frame / fps) if frame > 0 else 0.0
        if abs(1.0 - value) <= threshold:
            settled_run += 1
            # A full second inside the band counts as settled
            if settled_run >= max(1, int(math.ceil(fps))):
                return frame - settled_run + 1
        else:
            settled_run = 0
        frame += 1

    logger.debug(f"Spring {config} did not settle within {max_frames} frames")
    return max_frames


def duration_scale(
    config: SpringConfig,
    fps: float,
    threshold: float = DEFAULT_THRESHOLD,
    max_frames: int = DEFAULT_MAX_FRAMES,
) -> float:
    """Multiplier applied to elapsed time when a duration override is set.

    ``threshold`` and ``max_frames`` must match the ones the settle length
    was measured with, or the stretched spring settles off its duration.
    """
    if config.duration is None:
        return 1.0
    natural_frames = measure_spring(config, fps, threshold, max_frames)
    target_frames = config.duration * fps
    if natural_frames <= 0 or target_frames <= 0:
        return 1.0
    return natural_frames / target_frames


def evaluate(
    config: SpringConfig,
    elapsed_frames: float,
    fps: float,
    time_scale: Optional[float] = None,
) -> float:
    """Spring progress after ``elapsed_frames`` frames.

    Args:
        config: Spring configuration
        elapsed_frames: Frames since the spring was released; negative
            values return the rest value 0
        fps: Frames per second
        time_scale: Precomputed duration_scale(config, fps); computed
            on the fly when omitted

    Returns:
        Progress, 0 at release and approaching 1
    """
    if not elapsed_frames > 0 or fps <= 0:
        return 0.0
    if math.isinf(elapsed_frames):
        return 1.0
    if time_scale is None:
        time_scale = duration_scale(config, fps)
    seconds = elapsed_frames / fps * time_scale
    return _raw_value(config, seconds)


def spring_value(
    frame: float,
    fps: float,
    config: SpringConfig,
    from_value: float = 0.0,
    to_value: float = 1.0,
    delay_frames: float = 0.0,
) -> float:
    """Map spring progress at an absolute frame onto a value range."""
    progress = evaluate(config, frame - delay_frames, fps)
    return from_value + (to_value - from_value) * progress


def sample_spring(config: SpringConfig, frames: ArrayLike, fps: float) -> NDArray[np.float64]:
    """Vectorized spring progress over an array of elapsed frames."""
    elapsed = np.asarray(frames, dtype=np.float64)
    if fps <= 0:
        return np.zeros_like(elapsed)

    t = np.clip(elapsed, 0.0, None) / fps * duration_scale(config, fps)
    x0 = -1.0
    v0 = config.velocity
    omega = config.natural_frequency
    zeta = config.damping_ratio

    with np.errstate(over="ignore", invalid="ignore"):
        if abs(zeta - 1.0) < CRITICAL_TOLERANCE:
            x = np.exp(-omega * t) * (x0 + (v0 + omega * x0) * t)
        elif zeta < 1.0:
            omega_d = omega * math.sqrt(1.0 - zeta * zeta)
            x = np.exp(-zeta * omega * t) * (
                x0 * np.cos(omega_d * t)
                + (v0 + zeta * omega * x0) / omega_d * np.sin(omega_d * t)
            )
        else:
            root = omega * math.sqrt(zeta * zeta - 1.0)
            r1 = -zeta * omega + root
            r2 = -zeta * omega - root
            c2 = (v0 - r1 * x0) / (r2 - r1)
            c1 = x0 - c2
            x = c1 * np.exp(r1 * t) + c2 * np.exp(r2 * t)

    values = 1.0 + x
    if config.overshoot_clamp:
        values = np.clip(values, 0.0, 1.0)
    values = np.where(elapsed > 0, values, 0.0)
    return np.where(np.isposinf(elapsed), 1.0, values)
