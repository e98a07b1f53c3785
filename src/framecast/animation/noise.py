"""Deterministic noise for organic motion.

Layered sines instead of a random generator: the same (x, seed) always gives
the same value, on every machine and in every worker process.
"""

import math

import numpy as np
from numpy.typing import ArrayLike, NDArray


def noise1d(x: float, seed: float = 0.0) -> float:
    """Smooth pseudo-noise in [-1, 1]."""
    return (
        math.sin(x + seed * 12.9898)
        + math.sin(x * 2.3 + seed * 78.233) * 0.5
        + math.sin(x * 4.1 + seed * 43.758) * 0.25
    ) / 1.75


def fbm(x: float, seed: float = 0.0, octaves: int = 1) -> float:
    """Fractal noise: octaves of noise1d at doubling frequency, halving amplitude.

    Normalized back to [-1, 1].
    """
    value = 0.0
    amplitude = 1.0
    frequency = 1.0
    total = 0.0

    for i in range(max(1, int(octaves))):
        value += noise1d(x * frequency, seed + i * 100) * amplitude
        total += amplitude
        amplitude *= 0.5
        frequency *= 2.0

    return value / total


def wiggle(
    frame: float,
    fps: float,
    frequency: float = 2.0,
    amplitude: float = 10.0,
    seed: float = 0.0,
    octaves: int = 1,
) -> float:
    """Organic wobble at a frame.

    Args:
        frame: Current frame
        fps: Frames per second
        frequency: Oscillations per second
        amplitude: Maximum deviation
        seed: Seed; different seeds give unrelated motion
        octaves: Noise layers (1 = smooth, more = rougher)

    Returns:
        Offset in [-amplitude, amplitude]
    """
    if fps <= 0:
        return 0.0
    return fbm(frame / fps * frequency, seed, octaves) * amplitude


def wiggle_2d(
    frame: float,
    fps: float,
    frequency: float = 2.0,
    amplitude: float = 10.0,
    seed: float = 0.0,
    octaves: int = 1,
) -> tuple[float, float]:
    """Independent x and y wobble."""
    return (
        wiggle(frame, fps, frequency, amplitude, seed, octaves),
        wiggle(frame, fps, frequency, amplitude, seed + 1000, octaves),
    )


def sample_wiggle(
    frames: ArrayLike,
    fps: float,
    frequency: float = 2.0,
    amplitude: float = 10.0,
    seed: float = 0.0,
    octaves: int = 1,
) -> NDArray[np.float64]:
    """Vectorized wiggle over an array of frames."""
    x = np.asarray(frames, dtype=np.float64) / fps * frequency
    value = np.zeros_like(x)
    amp = 1.0
    freq = 1.0
    total = 0.0

    for i in range(max(1, int(octaves))):
        s = seed + i * 100
        xf = x * freq
        value += (
            np.sin(xf + s * 12.9898)
            + np.sin(xf * 2.3 + s * 78.233) * 0.5
            + np.sin(xf * 4.1 + s * 43.758) * 0.25
        ) / 1.75 * amp
        total += amp
        amp *= 0.5
        freq *= 2.0

    return value / total * amplitude
