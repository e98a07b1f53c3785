"""framecast - deterministic, frame-addressable animation values."""

__version__ = "0.1.0"

from framecast.errors import FramecastError, InvalidDefinitionError, OutOfRangeWarning
from framecast.animation import (
    AnimationDefinition,
    Plan,
    SequenceOrchestrator,
    TimelineBuilder,
    build_plan,
    constrain_camera,
    evaluate,
)

__all__ = [
    "FramecastError",
    "InvalidDefinitionError",
    "OutOfRangeWarning",
    "AnimationDefinition",
    "Plan",
    "SequenceOrchestrator",
    "TimelineBuilder",
    "build_plan",
    "constrain_camera",
    "evaluate",
]
