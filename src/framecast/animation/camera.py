"""Virtual camera: keyframed pan, zoom and rotation kept inside the frame.

The camera moves over a content layer the size of the viewport. Panning a
layer that is not zoomed in would reveal its edges, so ``constrain_camera``
limits the pan to what the current scale can cover:

    max_pan = ((1 - 1 / scale) / 2) * dimension

At scale 1 no pan is possible; at scale 2 the camera can move a quarter of
the viewport in either direction.
"""

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Union
import logging
import math

from framecast.animation.easing import (
    IN,
    IN_OUT,
    OUT,
    EasingFunc,
    EasingLike,
    bezier,
    bounce,
    elastic,
    linear,
    poly,
    resolve_easing,
)
from framecast.animation.keyframes import Keyframe, KeyframeTrack
from framecast.animation.noise import noise1d
from framecast.config import get_settings
from framecast.errors import InvalidDefinitionError

logger = logging.getLogger(__name__)


CAMERA_EASINGS = {
    "smooth": poly(3, IN_OUT),
    "push_in": poly(3, OUT),
    "pull_out": poly(3, IN),
    "bounce": bounce(OUT),
    "elastic": elastic(1.0, direction=OUT),
    "linear": linear(),
    "dramatic": bezier(0.25, 0.1, 0.25, 1),
    "snappy": bezier(0.68, -0.55, 0.265, 1.55),
    "gentle": bezier(0.4, 0, 0.2, 1),
}

Position = Union[float, int, str, None]


@dataclass(frozen=True)
class CameraState:
    """Camera parameters at one frame.

    Attributes:
        x: Horizontal pan in pixels (positive looks right)
        y: Vertical pan in pixels (positive looks down)
        scale: Zoom factor (1 = no zoom)
        rotation: Roll in degrees
        rotate_x: Tilt in degrees
        rotate_y: Yaw in degrees
    """

    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0
    rotation: float = 0.0
    rotate_x: float = 0.0
    rotate_y: float = 0.0


def parse_position(value: Position, dimension: float) -> float:
    """Resolve a pixel number or a percentage string like "50%" to pixels."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)

    text = value.strip()
    try:
        if text.endswith("%"):
            return float(text[:-1]) / 100.0 * dimension
        return float(text.removesuffix("px"))
    except ValueError:
        logger.debug(f"Unparseable camera position {value!r}, using 0")
        return 0.0


def max_pan(scale: float, dimension: float) -> float:
    """Largest pan along one axis that keeps the viewport covered."""
    if scale <= 1:
        return 0.0
    return (1.0 - 1.0 / scale) / 2.0 * dimension


def constrain_camera(
    x: float,
    y: float,
    scale: float,
    viewport_w: float,
    viewport_h: float,
    min_scale: float = 1.0,
) -> CameraState:
    """Clamp pan and zoom so the content always covers the viewport.

    Args:
        x: Requested horizontal pan in pixels
        y: Requested vertical pan in pixels
        scale: Requested zoom
        viewport_w: Viewport width in pixels
        viewport_h: Viewport height in pixels
        min_scale: Lowest allowed zoom

    Returns:
        CameraState with the constrained x, y and scale
    """
    constrained_scale = max(scale, min_scale)
    limit_x = max_pan(constrained_scale, viewport_w)
    limit_y = max_pan(constrained_scale, viewport_h)

    return CameraState(
        x=max(-limit_x, min(limit_x, x)),
        y=max(-limit_y, min(limit_y, y)),
        scale=constrained_scale,
    )


def shake_offset(
    frame: float,
    intensity: float = 5.0,
    speed: float = 3.0,
    start_frame: float = 0.0,
    duration: float = 30.0,
) -> tuple[float, float]:
    """Decaying impact shake, (dx, dy) in pixels. Zero outside the shake."""
    if not start_frame <= frame < start_frame + duration or speed <= 0:
        return 0.0, 0.0

    elapsed = frame - start_frame
    t = elapsed / speed
    decay = 1.0 - elapsed / duration
    dx = math.sin(t * math.pi * 2) * intensity * decay
    dy = math.cos(t * math.pi * 2.5) * intensity * 0.7 * decay
    return dx, dy


@dataclass(frozen=True)
class CameraKeyframe:
    """Camera pose at a frame. Unset fields fall back to the rig's static pose."""

    frame: float
    x: Position = None
    y: Position = None
    scale: Optional[float] = None
    rotation: Optional[float] = None
    rotate_x: Optional[float] = None
    rotate_y: Optional[float] = None
    easing: EasingLike = None


_PROPERTIES = ("x", "y", "scale", "rotation", "rotate_x", "rotate_y")

# Seeds and time offsets for each handheld wobble channel
_WIGGLE_CHANNELS = {
    "x": (1.0, 0.5, 0.0),
    "y": (2.0, 0.5, 100.0),
    "rotation": (3.0, 0.3, 200.0),
    "rotate_x": (4.0, 0.3, 300.0),
    "rotate_y": (5.0, 0.3, 400.0),
}


class CameraRig:
    """Keyframed camera with optional handheld wobble and bounds.

    Every property is interpolated independently between consecutive
    keyframes, using the arriving keyframe's easing or the rig's default.
    A keyframe that leaves a property unset contributes the static value.

    Example:
        rig = CameraRig(
            [
                CameraKeyframe(0, scale=1),
                CameraKeyframe(60, x="10%", scale=1.8, easing="push_in"),
            ],
            wiggle=0.5,
            constrain_to_bounds=True,
        )
        state = rig.evaluate(30)
    """

    def __init__(
        self,
        keyframes: Iterable[Union[CameraKeyframe, Mapping]] = (),
        x: Position = None,
        y: Position = None,
        scale: Optional[float] = None,
        rotation: Optional[float] = None,
        rotate_x: Optional[float] = None,
        rotate_y: Optional[float] = None,
        default_easing: EasingLike = "smooth",
        wiggle: float = 0.0,
        wiggle_speed: float = 1.0,
        constrain_to_bounds: bool = False,
        min_scale: float = 1.0,
        width: Optional[float] = None,
        height: Optional[float] = None,
        fps: Optional[float] = None,
    ) -> None:
        """
        Args:
            keyframes: CameraKeyframe objects or equivalent mappings
            x, y, scale, rotation, rotate_x, rotate_y: Static pose, used
                without keyframes and for properties a keyframe leaves unset
            default_easing: Camera easing name, any easing name, or curve
            wiggle: Handheld wobble intensity (0 = off)
            wiggle_speed: Wobble speed multiplier
            constrain_to_bounds: Keep content covering the viewport
            min_scale: Lowest zoom when constrained
            width, height, fps: Viewport and frame rate (settings defaults)
        """
        settings = get_settings()
        self.width = float(width if width is not None else settings.render.width)
        self.height = float(height if height is not None else settings.render.height)
        self.fps = float(fps if fps is not None else settings.render.fps)
        if self.width <= 0 or self.height <= 0 or self.fps <= 0:
            raise InvalidDefinitionError(
                f"Viewport and fps must be > 0, got {self.width}x{self.height} at {self.fps}"
            )
        if wiggle < 0 or wiggle_speed < 0:
            raise InvalidDefinitionError("wiggle and wiggle_speed must be >= 0")

        self.static = CameraState(
            x=parse_position(x, self.width),
            y=parse_position(y, self.height),
            scale=1.0 if scale is None else float(scale),
            rotation=0.0 if rotation is None else float(rotation),
            rotate_x=0.0 if rotate_x is None else float(rotate_x),
            rotate_y=0.0 if rotate_y is None else float(rotate_y),
        )
        self.default_easing = camera_easing(default_easing)
        self.wiggle = float(wiggle)
        self.wiggle_speed = float(wiggle_speed)
        self.constrain_to_bounds = constrain_to_bounds
        self.min_scale = float(min_scale)

        self.keyframes = tuple(
            kf if isinstance(kf, CameraKeyframe) else CameraKeyframe(**kf) for kf in keyframes
        )
        self.tracks = {prop: self._track(prop) for prop in _PROPERTIES}

    def _track(self, prop: str) -> KeyframeTrack:
        fallback = getattr(self.static, prop)
        lane = []
        for kf in self.keyframes:
            raw = getattr(kf, prop)
            if raw is None:
                value = fallback
            elif prop == "x":
                value = parse_position(raw, self.width)
            elif prop == "y":
                value = parse_position(raw, self.height)
            else:
                value = float(raw)
            easing = camera_easing(kf.easing) if kf.easing is not None else None
            lane.append(Keyframe(kf.frame, value, easing))
        return KeyframeTrack(lane, fallback, self.default_easing, name=prop)

    def _wiggle(self, frame: float) -> dict[str, float]:
        if self.wiggle <= 0:
            return {}
        time = frame / self.fps * self.wiggle_speed
        position = self.wiggle * 10
        rotation = self.wiggle * 0.5
        offsets = {}
        for prop, (seed, rate, shift) in _WIGGLE_CHANNELS.items():
            intensity = position if prop in ("x", "y") else rotation
            offsets[prop] = noise1d(time * rate + shift, seed) * intensity
        return offsets

    def evaluate(self, frame: float) -> CameraState:
        """Camera pose at ``frame``."""
        values = {prop: track.evaluate(frame) for prop, track in self.tracks.items()}
        for prop, offset in self._wiggle(frame).items():
            values[prop] += offset

        if self.constrain_to_bounds:
            bounded = constrain_camera(
                values["x"], values["y"], values["scale"],
                self.width, self.height, self.min_scale,
            )
            values.update(x=bounded.x, y=bounded.y, scale=bounded.scale)

        return CameraState(**values)

    # Shot helpers

    @classmethod
    def zoom(
        cls,
        start_frame: float,
        end_frame: float,
        from_scale: float = 1.2,
        to_scale: float = 1.4,
        easing: EasingLike = "linear",
        **kwargs,
    ) -> "CameraRig":
        """Zoom between two scales."""
        return cls(
            [
                CameraKeyframe(start_frame, scale=from_scale),
                CameraKeyframe(end_frame, scale=to_scale, easing=easing),
            ],
            **kwargs,
        )

    @classmethod
    def pan(
        cls,
        start_frame: float,
        end_frame: float,
        from_pos: tuple[Position, Position] = (0, 0),
        to_pos: tuple[Position, Position] = (0, 0),
        scale: float = 1.3,
        easing: EasingLike = "smooth",
        **kwargs,
    ) -> "CameraRig":
        """Pan across the content at a fixed zoom."""
        kwargs.setdefault("min_scale", scale)
        return cls(
            [
                CameraKeyframe(start_frame, x=from_pos[0], y=from_pos[1], scale=scale),
                CameraKeyframe(end_frame, x=to_pos[0], y=to_pos[1], scale=scale, easing=easing),
            ],
            **kwargs,
        )

    @classmethod
    def push_in(
        cls,
        start_frame: float = 0,
        duration: float = 60,
        start_scale: float = 1.1,
        target_scale: float = 1.8,
        target: tuple[Position, Position] = (0, 0),
        easing: EasingLike = "push_in",
        **kwargs,
    ) -> "CameraRig":
        """Dramatic move toward a point of interest."""
        return cls(
            [
                CameraKeyframe(start_frame, x=0, y=0, scale=start_scale),
                CameraKeyframe(
                    start_frame + duration,
                    x=target[0], y=target[1], scale=target_scale, easing=easing,
                ),
            ],
            **kwargs,
        )

    @classmethod
    def pull_out(
        cls,
        start_frame: float = 0,
        duration: float = 60,
        start_scale: float = 2.0,
        end_scale: float = 1.1,
        start: tuple[Position, Position] = (0, 0),
        easing: EasingLike = "pull_out",
        **kwargs,
    ) -> "CameraRig":
        """Reveal wider context, ending centered."""
        return cls(
            [
                CameraKeyframe(start_frame, x=start[0], y=start[1], scale=start_scale),
                CameraKeyframe(start_frame + duration, x=0, y=0, scale=end_scale, easing=easing),
            ],
            **kwargs,
        )


def camera_easing(easing: EasingLike) -> EasingFunc:
    """Resolve a camera easing name ("push_in", "pushIn") or any other easing."""
    if isinstance(easing, str):
        key = easing.strip()
        key = "".join(f"_{c.lower()}" if c.isupper() else c for c in key).lstrip("_")
        if key in CAMERA_EASINGS:
            return CAMERA_EASINGS[key]
    return resolve_easing(easing)
