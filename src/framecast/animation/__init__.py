"""Animation evaluation for framecast.

Every value is a pure function of an explicit frame number.
"""

from framecast.animation.easing import (
    Easing,
    EasingCurve,
    EASE_PRESETS,
    get_easing,
    interpolate,
    is_known_easing,
    resolve_easing,
    evaluate as evaluate_curve,
)
from framecast.animation.spring import (
    SpringConfig,
    measure_spring,
    spring_value,
    evaluate as evaluate_spring,
)
from framecast.animation.keyframes import Keyframe, KeyframeTrack, MultiKeyframeTrack
from framecast.animation.timeline import (
    AnimationDefinition,
    FillMode,
    KeyframeChannel,
    LoopChannel,
    Plan,
    SpringChannel,
    TimelineBuilder,
    TweenChannel,
    build_plan,
    evaluate,
)
from framecast.animation.sequence import Beat, Scene, SequenceOrchestrator, frame_to_seconds
from framecast.animation.camera import (
    CAMERA_EASINGS,
    CameraKeyframe,
    CameraRig,
    CameraState,
    constrain_camera,
    max_pan,
    parse_position,
)
from framecast.animation.presets import DURATIONS, SPRINGS, get_duration, get_spring
from framecast.animation.progress import (
    ChainResult,
    ChainSegment,
    StaggerResult,
    chain,
    frame_progress,
    loop_progress,
    stagger,
)
from framecast.animation.noise import noise1d, wiggle

__all__ = [
    # Easing
    "Easing",
    "EasingCurve",
    "EASE_PRESETS",
    "get_easing",
    "interpolate",
    "is_known_easing",
    "resolve_easing",
    "evaluate_curve",
    # Springs
    "SpringConfig",
    "measure_spring",
    "spring_value",
    "evaluate_spring",
    # Keyframes
    "Keyframe",
    "KeyframeTrack",
    "MultiKeyframeTrack",
    # Timeline
    "AnimationDefinition",
    "FillMode",
    "KeyframeChannel",
    "LoopChannel",
    "Plan",
    "SpringChannel",
    "TimelineBuilder",
    "TweenChannel",
    "build_plan",
    "evaluate",
    # Sequencing
    "Beat",
    "Scene",
    "SequenceOrchestrator",
    "frame_to_seconds",
    # Camera
    "CAMERA_EASINGS",
    "CameraKeyframe",
    "CameraRig",
    "CameraState",
    "constrain_camera",
    "max_pan",
    "parse_position",
    # Presets
    "DURATIONS",
    "SPRINGS",
    "get_duration",
    "get_spring",
    # Helpers
    "ChainResult",
    "ChainSegment",
    "StaggerResult",
    "chain",
    "frame_progress",
    "loop_progress",
    "stagger",
    "noise1d",
    "wiggle",
]
