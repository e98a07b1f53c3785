"""Named timing, easing and spring presets.

Durations, staggers and delays are in seconds. Spring presets keep the
classic tension/friction numbers, stored as stiffness/damping.
"""

from typing import Optional, Union
import logging

from framecast.animation.easing import EASE_PRESETS, EasingFunc, EasingLike, resolve_easing
from framecast.animation.spring import SpringConfig

logger = logging.getLogger(__name__)


DURATIONS: dict[str, float] = {
    # Micro interactions
    "micro": 0.05,
    "instant": 0.1,

    # Fast
    "fast": 0.15,
    "quick": 0.2,
    "snappy": 0.25,

    # Normal
    "normal": 0.3,
    "standard": 0.4,
    "medium": 0.5,

    # Slow
    "slow": 0.6,
    "relaxed": 0.7,
    "gentle": 0.8,

    # Dramatic
    "dramatic": 1.0,
    "cinematic": 1.2,
    "epic": 1.5,
    "glacial": 2.0,
}

STAGGERS: dict[str, float] = {
    "tight": 0.02,      # almost simultaneous
    "fast": 0.05,
    "normal": 0.08,
    "medium": 0.1,
    "relaxed": 0.15,
    "slow": 0.2,
    "very_slow": 0.3,
}

DELAYS: dict[str, float] = {
    "none": 0.0,
    "minimal": 0.1,
    "short": 0.2,
    "medium": 0.4,
    "long": 0.6,
    "very_long": 1.0,
}

SPRINGS: dict[str, SpringConfig] = {
    # Quick, responsive UI interactions
    "snappy": SpringConfig(stiffness=300, damping=20),
    # General purpose, balanced motion
    "smooth": SpringConfig(stiffness=170, damping=26),
    # Playful with noticeable overshoot
    "bouncy": SpringConfig(stiffness=200, damping=10),
    # Slow, elegant reveals
    "gentle": SpringConfig(stiffness=120, damping=14),
    # Fast and precise, minimal overshoot
    "stiff": SpringConfig(stiffness=400, damping=30),
    # Elastic, jelly-like
    "wobbly": SpringConfig(stiffness=180, damping=12),
    # Very slow, heavy
    "molasses": SpringConfig(stiffness=100, damping=30, mass=2),
    # Fast entrance, settles quickly
    "quick": SpringConfig(stiffness=250, damping=25),
    # Slow to start, slow to stop
    "sluggish": SpringConfig(stiffness=80, damping=20, mass=1.5),
    # Aggressive start with bounce
    "punchy": SpringConfig(stiffness=350, damping=15),
    # Smooth without any overshoot
    "no_bounce": SpringConfig(stiffness=200, damping=26, overshoot_clamp=True),
}
SPRINGS["default"] = SPRINGS["smooth"]

DEFAULT_DURATION = "normal"
DEFAULT_SPRING = "smooth"


def get_duration(name: Union[str, float, int]) -> float:
    """Get a duration in seconds by name, or return the number as given.

    Unknown names fall back to ``normal``.
    """
    if isinstance(name, str):
        if name not in DURATIONS:
            logger.debug(f"Unknown duration preset {name!r}, using {DEFAULT_DURATION}")
        return DURATIONS.get(name, DURATIONS[DEFAULT_DURATION])
    return float(name)


def get_stagger(name: Union[str, float, int]) -> float:
    """Get a stagger in seconds by name, or return the number as given."""
    if isinstance(name, str):
        return STAGGERS.get(name, STAGGERS["normal"])
    return float(name)


def get_delay(name: Union[str, float, int]) -> float:
    """Get a delay in seconds by name, or return the number as given."""
    if isinstance(name, str):
        return DELAYS.get(name, DELAYS["none"])
    return float(name)


def get_spring(name: Union[str, SpringConfig]) -> SpringConfig:
    """Get a spring config by name, or return the config if it already is one.

    Unknown names fall back to ``smooth``.
    """
    if isinstance(name, SpringConfig):
        return name
    config = SPRINGS.get(name)
    if config is None:
        logger.debug(f"Unknown spring preset {name!r}, using {DEFAULT_SPRING}")
        return SPRINGS[DEFAULT_SPRING]
    return config


def create_spring(
    stiffness: float,
    damping: float,
    mass: float = 1.0,
    overshoot_clamp: bool = False,
    velocity: float = 0.0,
    duration: Optional[float] = None,
) -> SpringConfig:
    """Create a custom spring configuration (validated)."""
    return SpringConfig(
        stiffness=stiffness,
        damping=damping,
        mass=mass,
        overshoot_clamp=overshoot_clamp,
        velocity=velocity,
        duration=duration,
    )


def get_ease(name: EasingLike) -> EasingFunc:
    """Resolve a preset name ("appleSwift"), GSAP string or curve."""
    return resolve_easing(name)


__all__ = [
    "DELAYS",
    "DURATIONS",
    "EASE_PRESETS",
    "SPRINGS",
    "STAGGERS",
    "create_spring",
    "get_delay",
    "get_duration",
    "get_ease",
    "get_spring",
    "get_stagger",
]
