"""Timeline adapter: imperative authoring, pure per-frame evaluation.

Animations are authored the natural way, by appending instructions to a
``TimelineBuilder`` ("move x to 100 over 0.5s, then fade in"). ``build()``
records those instructions once into an immutable ``Plan``. A plan never
changes after it is built; ``evaluate(plan, frame)`` reads it and returns
every property's value at that frame, for any frame, in any order, from any
thread or worker process.

A plan holds, per property, a tuple of channels of these kinds:

- ``TweenChannel``: from/to over a duration with an easing and a fill mode
- ``SpringChannel``: from/to driven by a spring
- ``KeyframeChannel``: a keyframe track in absolute frames
- ``LoopChannel``: an endless back-and-forth between two values

The channel that governs a frame is the latest-starting channel whose start
frame is <= frame; before every channel, the earliest one.

``build_plan(definition, fps)`` compiles a declarative ``AnimationDefinition``
(from/to values, duration, delay, easing or spring) into the same kind of plan.
"""

from bisect import bisect_right
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Literal, Mapping, Optional, Union
import logging
import math
import re
import warnings

import numpy as np
from numpy.typing import ArrayLike, NDArray
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from framecast.animation import spring as spring_physics
from framecast.animation.easing import EasingFunc, EasingLike, resolve_easing
from framecast.animation.keyframes import Keyframe, KeyframeLike, KeyframeTrack, _coerce
from framecast.animation.presets import get_duration, get_spring
from framecast.animation.spring import SpringConfig
from framecast.config import get_settings
from framecast.errors import InvalidDefinitionError, OutOfRangeWarning

logger = logging.getLogger(__name__)

# Properties whose neutral value is 1 rather than 0
UNIT_PROPERTIES = frozenset({"opacity", "scale", "scaleX", "scaleY", "scale_x", "scale_y"})


class FillMode(str, Enum):
    """What a tween's value is outside its active range."""

    FORWARDS = "forwards"    # hold the end value after the end
    BACKWARDS = "backwards"  # hold the start value before the start
    BOTH = "both"            # hold both
    NONE = "none"            # extrapolate the easing curve


def neutral_value(prop: str) -> float:
    """Value a property has when neither from nor to mention it."""
    return 1.0 if prop in UNIT_PROPERTIES else 0.0


def round_frame(value: float) -> int:
    """Round half up, so 0.5 frames becomes 1 like JavaScript's Math.round."""
    return int(math.floor(value + 0.5))


# =============================================================================
# Channels
# =============================================================================

@dataclass(frozen=True)
class TweenChannel:
    """Duration-based interpolation between two values."""

    property: str
    start_frame: float
    duration_frames: float
    from_value: float
    to_value: float
    easing: EasingFunc
    fill_mode: FillMode = FillMode.BOTH

    @property
    def end_frame(self) -> float:
        return self.start_frame + self.duration_frames

    def evaluate(self, frame: float) -> float:
        progress = (frame - self.start_frame) / self.duration_frames

        if progress <= 0.0:
            if progress == 0.0 or self.fill_mode in (FillMode.BACKWARDS, FillMode.BOTH):
                return self.from_value
        elif progress >= 1.0:
            if progress == 1.0 or self.fill_mode in (FillMode.FORWARDS, FillMode.BOTH):
                return self.to_value

        eased = self.easing(progress)
        return self.from_value + (self.to_value - self.from_value) * eased


@dataclass(frozen=True)
class SpringChannel:
    """Spring-driven interpolation between two values.

    ``fps`` is the effective rate: the composition fps divided by the
    timeline's time scale. ``time_scale`` is the precomputed duration
    stretch of the spring config.
    """

    property: str
    start_frame: float
    from_value: float
    to_value: float
    config: SpringConfig
    fps: float
    settle_frames: float
    time_scale: float = 1.0

    @property
    def end_frame(self) -> float:
        return self.start_frame + self.settle_frames

    def evaluate(self, frame: float) -> float:
        progress = spring_physics.evaluate(
            self.config, frame - self.start_frame, self.fps, self.time_scale
        )
        return self.from_value + (self.to_value - self.from_value) * progress


@dataclass(frozen=True)
class KeyframeChannel:
    """A keyframe track positioned in absolute frames."""

    property: str
    track: KeyframeTrack

    @property
    def start_frame(self) -> float:
        return self.track.start_frame

    @property
    def end_frame(self) -> float:
        return self.track.end_frame

    def evaluate(self, frame: float) -> float:
        return self.track.evaluate(frame)


@dataclass(frozen=True)
class LoopChannel:
    """Back and forth between two values, one full cycle every ``period_frames``.

    Holds ``from_value`` before the start. A loop never ends; its
    ``end_frame`` marks the end of the first cycle.
    """

    property: str
    start_frame: float
    period_frames: float
    from_value: float
    to_value: float

    @property
    def end_frame(self) -> float:
        return self.start_frame + self.period_frames

    def evaluate(self, frame: float) -> float:
        if frame < self.start_frame:
            return self.from_value
        phase = math.fmod(frame - self.start_frame, self.period_frames) / self.period_frames
        progress = 0.5 - 0.5 * math.cos(2 * math.pi * phase)
        return self.from_value + (self.to_value - self.from_value) * progress


@dataclass(frozen=True)
class ReversedEasing:
    """An easing played backwards: ``1 - curve(1 - t)``.

    With swapped from/to values this makes an exit tween trace its
    entrance curve in reverse.
    """

    curve: EasingFunc

    def __call__(self, t: float) -> float:
        return 1 - self.curve(1 - t)


Channel = Union[TweenChannel, SpringChannel, KeyframeChannel, LoopChannel]


# =============================================================================
# Plan
# =============================================================================

@dataclass(frozen=True)
class Plan:
    """Immutable, compiled animation ready for repeated pure evaluation.

    Attributes:
        fps: Composition frames per second the plan was built for
        channels: Per-property channel tuples, each sorted by start frame
        labels: Named frame positions recorded while building
        max_frame: Frames beyond +/- this are clamped with a warning
    """

    fps: float
    channels: tuple[tuple[str, tuple[Channel, ...]], ...]
    labels: tuple[tuple[str, float], ...] = ()
    max_frame: float = 10_000_000.0
    _index: dict[str, tuple[tuple[float, ...], tuple[Channel, ...]]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        index = {
            prop: (tuple(ch.start_frame for ch in chans), chans)
            for prop, chans in self.channels
        }
        object.__setattr__(self, "_index", index)

    @property
    def properties(self) -> list[str]:
        return [prop for prop, _ in self.channels]

    @property
    def duration_frames(self) -> float:
        """Frame at which the last channel finishes."""
        ends = [ch.end_frame for _, chans in self.channels for ch in chans]
        return max(ends, default=0.0)

    @property
    def duration_seconds(self) -> float:
        return self.duration_frames / self.fps

    def label_frame(self, name: str) -> float:
        """Absolute frame of a label recorded while building."""
        for label, frame in self.labels:
            if label == name:
                return frame
        raise KeyError(name)

    def evaluate_property(self, prop: str, frame: float, default: float = 0.0) -> float:
        """Value of one property; ``default`` for properties not in the plan."""
        entry = self._index.get(prop)
        if entry is None:
            return default
        return _evaluate_channels(entry, _safe_frame(frame, self.max_frame))

    def evaluate(self, frame: float) -> dict[str, float]:
        """Values of every property at ``frame``."""
        frame = _safe_frame(frame, self.max_frame)
        return {prop: _evaluate_channels(entry, frame) for prop, entry in self._index.items()}

    def sample(self, frames: ArrayLike) -> dict[str, NDArray[np.float64]]:
        """Evaluate every property over an array of frames."""
        values = np.asarray(frames, dtype=np.float64)
        return {
            prop: np.vectorize(
                lambda f, _prop=prop: self.evaluate_property(_prop, f), otypes=[np.float64]
            )(values)
            for prop in self._index
        }


def _evaluate_channels(
    entry: tuple[tuple[float, ...], tuple[Channel, ...]],
    frame: float,
) -> float:
    starts, channels = entry
    i = bisect_right(starts, frame) - 1
    return channels[max(i, 0)].evaluate(frame)


def _safe_frame(frame: float, max_frame: float) -> float:
    """Clamp non-finite and astronomically large frames, with a warning."""
    frame = float(frame)
    if frame != frame:
        message = "Frame is NaN; evaluating frame 0 instead"
        clamped = 0.0
    elif abs(frame) > max_frame:
        clamped = math.copysign(max_frame, frame)
        message = f"Frame {frame:g} is out of range; clamped to {clamped:g}"
    else:
        return frame

    logger.warning(message)
    warnings.warn(message, OutOfRangeWarning, stacklevel=3)
    return clamped


def evaluate(plan: Plan, frame: float) -> dict[str, float]:
    """Evaluate a plan at a frame. Never raises for numeric frames."""
    return plan.evaluate(frame)


# =============================================================================
# Builder
# =============================================================================

# "label", "+=0.5", "-=1", "label+=0.25", "label-=0.1"
_POSITION = re.compile(
    r"^(?P<label>[A-Za-z_][\w\-]*?)?(?:(?P<op>[+-]=)(?P<amount>\d+(?:\.\d*)?|\.\d+))?$"
)

Position = Union[float, int, str, None]


@dataclass
class _Instruction:
    kind: str  # "tween", "spring" or "keyframes"
    prop: str
    start: float  # frames, timeline-local and unscaled
    duration: float  # frames, unscaled
    from_value: float = 0.0
    to_value: float = 0.0
    easing: Optional[EasingFunc] = None
    fill_mode: FillMode = FillMode.BOTH
    spring: Optional[SpringConfig] = None
    keyframes: tuple[Keyframe, ...] = ()


class TimelineBuilder:
    """Records animation instructions and compiles them into a Plan.

    Positions and durations are in seconds. ``at`` accepts:

    - ``None``: append at the end of the timeline (default)
    - a number: absolute time in seconds
    - ``"<"`` / ``">"``: start / end of the previous instruction
    - ``"+=0.5"`` / ``"-=0.5"``: relative to the end of the timeline
    - ``"label"``, ``"label+=0.5"``: relative to a label

    Example:
        plan = (
            TimelineBuilder(fps=30)
            .from_to({"opacity": 0, "y": 40}, {"opacity": 1, "y": 0}, 0.5)
            .add_label("settled")
            .spring({"scale": 0.8}, {"scale": 1.0}, "bouncy", at="settled")
            .build()
        )
        plan.evaluate(12)
    """

    def __init__(
        self,
        fps: Optional[float] = None,
        time_scale: float = 1.0,
        delay_frames: float = 0.0,
        default_easing: EasingLike = None,
        fill_mode: Union[FillMode, str] = FillMode.BOTH,
    ) -> None:
        """
        Args:
            fps: Composition frames per second (settings default when None)
            time_scale: Playback speed; 2.0 plays twice as fast
            delay_frames: Extra delay added to every start frame
            default_easing: Easing for tweens that don't specify one
            fill_mode: Default fill mode for tweens
        """
        settings = get_settings()
        self.fps = float(fps if fps is not None else settings.render.fps)
        self.time_scale = float(time_scale)
        self.delay_frames = float(delay_frames)

        if not math.isfinite(self.fps) or self.fps <= 0:
            raise InvalidDefinitionError(f"fps must be > 0, got {fps}")
        if not math.isfinite(self.time_scale) or self.time_scale <= 0:
            raise InvalidDefinitionError(f"time_scale must be > 0, got {time_scale}")
        if not math.isfinite(self.delay_frames):
            raise InvalidDefinitionError(f"delay_frames must be finite, got {delay_frames}")

        self.default_easing = resolve_easing(
            default_easing if default_easing is not None else settings.evaluation.default_easing
        )
        self.fill_mode = _fill_mode(fill_mode)
        self._max_frame = settings.evaluation.max_frame
        self._spring_threshold = settings.evaluation.spring_threshold
        self._spring_max_frames = settings.evaluation.spring_max_frames
        self._default_spring = settings.evaluation.default_spring

        self._instructions: list[_Instruction] = []
        self._labels: dict[str, float] = {}
        self._values: dict[str, float] = {}
        self._end = 0.0
        self._previous_start = 0.0
        self._previous_end = 0.0

    # Position helpers

    def _seconds_to_frames(self, seconds: float, what: str) -> float:
        seconds = float(seconds)
        if not math.isfinite(seconds):
            raise InvalidDefinitionError(f"{what} must be finite, got {seconds}")
        return seconds * self.fps

    def _resolve_position(self, at: Position) -> float:
        if at is None:
            return self._end
        if isinstance(at, (int, float)):
            return self._seconds_to_frames(at, "Position")
        if at == "<":
            return self._previous_start
        if at == ">":
            return self._previous_end

        match = _POSITION.match(at.strip()) if isinstance(at, str) else None
        if not match or not (match.group("label") or match.group("op")):
            raise InvalidDefinitionError(f"Invalid position {at!r}")

        label = match.group("label")
        if label is None:
            base = self._end
        elif label in self._labels:
            base = self._labels[label]
        else:
            raise InvalidDefinitionError(
                f"Unknown label {label!r}; known labels: {sorted(self._labels)}"
            )

        offset = 0.0
        if match.group("op"):
            offset = float(match.group("amount")) * self.fps
            if match.group("op") == "-=":
                offset = -offset
        return base + offset

    def _duration_frames(self, duration: Union[float, str]) -> float:
        frames = self._seconds_to_frames(get_duration(duration), "Duration")
        if frames <= 0:
            raise InvalidDefinitionError(f"Duration must be > 0, got {duration!r}")
        return frames

    def _current(self, prop: str) -> float:
        return self._values.get(prop, neutral_value(prop))

    def _record(self, instructions: list[_Instruction], start: float, duration: float) -> None:
        self._instructions.extend(instructions)
        self._previous_start = start
        self._previous_end = start + duration
        self._end = max(self._end, start + duration)

    @staticmethod
    def _check_values(values: Mapping[str, float], what: str) -> dict[str, float]:
        checked = {}
        for prop, value in values.items():
            if not isinstance(prop, str) or not prop:
                raise InvalidDefinitionError(f"Property names must be non-empty strings, got {prop!r}")
            try:
                number = float(value)
            except (TypeError, ValueError) as e:
                raise InvalidDefinitionError(f"{what} value for {prop!r} must be a number, got {value!r}") from e
            if not math.isfinite(number):
                raise InvalidDefinitionError(f"{what} value for {prop!r} must be finite, got {value!r}")
            checked[prop] = number
        return checked

    # Instructions

    def add_label(self, name: str, at: Position = None) -> "TimelineBuilder":
        """Name a position so later instructions can refer to it."""
        if not name or not re.match(r"^[A-Za-z_][\w\-]*$", name):
            raise InvalidDefinitionError(f"Invalid label name {name!r}")
        self._labels[name] = self._resolve_position(at)
        return self

    def from_to(
        self,
        from_values: Mapping[str, float],
        to_values: Mapping[str, float],
        duration: Union[float, str] = 0.5,
        easing: EasingLike = None,
        at: Position = None,
        delay: float = 0.0,
        fill_mode: Union[FillMode, str, None] = None,
    ) -> "TimelineBuilder":
        """Tween properties between explicit start and end values.

        Properties present on only one side take their current value on
        the other side.
        """
        from_values = self._check_values(from_values, "From")
        to_values = self._check_values(to_values, "To")
        props = list(dict.fromkeys([*from_values, *to_values]))
        if not props:
            raise InvalidDefinitionError("A tween needs at least one property")

        start = self._resolve_position(at) + self._seconds_to_frames(delay, "Delay")
        frames = self._duration_frames(duration)
        curve = resolve_easing(easing, self.default_easing)
        mode = _fill_mode(fill_mode) if fill_mode is not None else self.fill_mode

        instructions = []
        for prop in props:
            begin = from_values.get(prop, self._current(prop))
            end = to_values.get(prop, self._current(prop))
            instructions.append(
                _Instruction("tween", prop, start, frames, begin, end, curve, mode)
            )
            self._values[prop] = end

        self._record(instructions, start, frames)
        return self

    def to(
        self,
        values: Mapping[str, float],
        duration: Union[float, str] = 0.5,
        easing: EasingLike = None,
        at: Position = None,
        delay: float = 0.0,
        fill_mode: Union[FillMode, str, None] = None,
    ) -> "TimelineBuilder":
        """Tween properties from their current value to ``values``."""
        return self.from_to({}, values, duration, easing, at, delay, fill_mode)

    def tween_from(
        self,
        values: Mapping[str, float],
        duration: Union[float, str] = 0.5,
        easing: EasingLike = None,
        at: Position = None,
        delay: float = 0.0,
        fill_mode: Union[FillMode, str, None] = None,
    ) -> "TimelineBuilder":
        """Tween properties from ``values`` back to their current value."""
        values = self._check_values(values, "From")
        targets = {prop: self._current(prop) for prop in values}
        return self.from_to(values, targets, duration, easing, at, delay, fill_mode)

    def set(self, values: Mapping[str, float], at: Position = None) -> "TimelineBuilder":
        """Jump properties to values at a position, without interpolation."""
        values = self._check_values(values, "Set")
        start = self._resolve_position(at)
        instructions = [
            _Instruction("keyframes", prop, start, 0.0, keyframes=(Keyframe(0.0, value),))
            for prop, value in values.items()
        ]
        self._values.update(values)
        self._record(instructions, start, 0.0)
        return self

    def spring(
        self,
        from_values: Mapping[str, float],
        to_values: Mapping[str, float],
        config: Union[SpringConfig, str, None] = None,
        at: Position = None,
        delay: float = 0.0,
    ) -> "TimelineBuilder":
        """Drive properties from start to end values with a spring.

        ``config`` is a SpringConfig or preset name; None uses the
        configured default spring.

        The spring occupies the timeline until it settles, so an appended
        instruction starts once the motion has come to rest.
        """
        from_values = self._check_values(from_values, "From")
        to_values = self._check_values(to_values, "To")
        props = list(dict.fromkeys([*from_values, *to_values]))
        if not props:
            raise InvalidDefinitionError("A spring needs at least one property")

        config = get_spring(config if config is not None else self._default_spring)
        start = self._resolve_position(at) + self._seconds_to_frames(delay, "Delay")
        if config.duration is not None:
            frames = config.duration * self.fps
        else:
            frames = float(spring_physics.measure_spring(
                config, self.fps, self._spring_threshold, self._spring_max_frames
            ))

        instructions = []
        for prop in props:
            begin = from_values.get(prop, self._current(prop))
            end = to_values.get(prop, self._current(prop))
            instructions.append(
                _Instruction("spring", prop, start, frames, begin, end, spring=config)
            )
            self._values[prop] = end

        self._record(instructions, start, frames)
        return self

    def keyframes(
        self,
        prop: str,
        keyframes: Iterable[KeyframeLike],
        at: Position = None,
    ) -> "TimelineBuilder":
        """Add a keyframe lane. Keyframe frames are offsets from the position.

        Keyframes must be declared in non-decreasing frame order.
        """
        if not isinstance(prop, str) or not prop:
            raise InvalidDefinitionError(f"Property names must be non-empty strings, got {prop!r}")

        lane = tuple(_coerce(kf) for kf in keyframes)
        lane = tuple(kf for kf in lane if kf.value is not None)
        if not lane:
            raise InvalidDefinitionError(f"Keyframe lane for {prop!r} has no values")
        _check_monotonic(prop, [kf.frame for kf in lane])

        start = self._resolve_position(at)
        duration = float(lane[-1].frame)
        self._values[prop] = float(lane[-1].value)
        self._record(
            [_Instruction("keyframes", prop, start, duration, keyframes=lane)],
            start,
            duration,
        )
        return self

    # Build

    def _absolute(self, frames: float) -> float:
        return self.delay_frames + frames / self.time_scale

    def _channel(self, ins: _Instruction) -> Channel:
        start = self._absolute(ins.start)

        if ins.kind == "tween":
            return TweenChannel(
                property=ins.prop,
                start_frame=start,
                duration_frames=ins.duration / self.time_scale,
                from_value=ins.from_value,
                to_value=ins.to_value,
                easing=ins.easing,
                fill_mode=ins.fill_mode,
            )

        if ins.kind == "spring":
            effective_fps = self.fps / self.time_scale
            return SpringChannel(
                property=ins.prop,
                start_frame=start,
                from_value=ins.from_value,
                to_value=ins.to_value,
                config=ins.spring,
                fps=effective_fps,
                settle_frames=ins.duration / self.time_scale,
                time_scale=spring_physics.duration_scale(
                    ins.spring, effective_fps, self._spring_threshold, self._spring_max_frames
                ),
            )

        track = KeyframeTrack(
            [
                Keyframe(start + kf.frame / self.time_scale, kf.value, kf.easing)
                for kf in ins.keyframes
            ],
            name=ins.prop,
        )
        return KeyframeChannel(ins.prop, track)

    def build(self) -> Plan:
        """Compile the recorded instructions into an immutable Plan.

        The builder is left untouched, so building twice gives equal plans.
        """
        if not self._instructions:
            raise InvalidDefinitionError("Timeline has no instructions")

        grouped: dict[str, list[Channel]] = {}
        for ins in self._instructions:
            grouped.setdefault(ins.prop, []).append(self._channel(ins))

        channels = tuple(
            (prop, tuple(sorted(chans, key=lambda ch: ch.start_frame)))
            for prop, chans in grouped.items()
        )
        labels = tuple((name, self._absolute(frame)) for name, frame in self._labels.items())

        plan = Plan(fps=self.fps, channels=channels, labels=labels, max_frame=self._max_frame)
        logger.debug(
            f"Built plan: {len(channels)} properties, "
            f"{len(self._instructions)} channels, {plan.duration_frames:g} frames"
        )
        return plan


def _fill_mode(value: Union[FillMode, str]) -> FillMode:
    try:
        return FillMode(value)
    except ValueError as e:
        raise InvalidDefinitionError(
            f"Unknown fill mode {value!r}; expected one of {[m.value for m in FillMode]}"
        ) from e


def _check_monotonic(prop: str, frames: list[float]) -> None:
    for previous, current in zip(frames, frames[1:]):
        if current < previous:
            raise InvalidDefinitionError(
                f"Keyframes for {prop!r} are out of order: frame {current:g} follows {previous:g}"
            )


# =============================================================================
# Declarative definitions
# =============================================================================

class SpringSpec(BaseModel):
    """Spring parameters as authored."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    stiffness: float = Field(gt=0)
    damping: float = Field(ge=0)
    mass: float = Field(default=1.0, gt=0)
    overshoot_clamp: bool = False
    velocity: float = 0.0
    duration: Optional[float] = Field(default=None, gt=0)

    def to_config(self) -> SpringConfig:
        return SpringConfig(**self.model_dump())


class KeyframeSpec(BaseModel):
    """One authored keyframe in absolute frames."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    frame: float
    value: float
    easing: Optional[str] = None


class AnimationDefinition(BaseModel):
    """Declarative description of one animated element.

    Attributes:
        from_: Start values per property (alias ``from``)
        to: End values per property
        duration: Seconds or a duration preset name
        delay: Seconds before the animation starts, counted from ``start_frame``
        easing: Easing name, GSAP string or preset (ignored with a spring)
        spring: Spring preset name or parameters; replaces the easing
        start_frame: Absolute frame the animation is placed at (default 0)
        fill_mode: Behaviour outside the active range
        keyframes: Per-property keyframe lanes in absolute frames
        time_scale: Playback speed multiplier; divides the delay, the
            duration and keyframe frames
        mode: ``"in"`` plays from -> to, ``"out"`` plays to -> from with
            the easing reversed, ``"loop"`` swings from -> to -> from
            forever, one cycle per duration
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    from_: dict[str, float] = Field(default_factory=dict, alias="from")
    to: dict[str, float] = Field(default_factory=dict)
    duration: Union[float, str] = 0.5
    delay: float = 0.0
    easing: Optional[str] = "smooth"
    spring: Union[str, SpringSpec, None] = None
    start_frame: Optional[float] = None
    fill_mode: FillMode = FillMode.BOTH
    keyframes: dict[str, list[KeyframeSpec]] = Field(default_factory=dict)
    time_scale: float = Field(default=1.0, gt=0)
    mode: Literal["in", "out", "loop"] = "in"

    @field_validator("duration")
    @classmethod
    def _positive_duration(cls, value: Union[float, str]) -> Union[float, str]:
        seconds = get_duration(value)
        if not math.isfinite(seconds) or seconds <= 0:
            raise ValueError(f"duration must be > 0, got {value!r}")
        return value

    @field_validator("delay", "start_frame")
    @classmethod
    def _finite(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and not math.isfinite(value):
            raise ValueError(f"must be finite, got {value!r}")
        return value

    @field_validator("from_", "to")
    @classmethod
    def _finite_values(cls, values: dict[str, float]) -> dict[str, float]:
        for prop, value in values.items():
            if not math.isfinite(value):
                raise ValueError(f"value for {prop!r} must be finite, got {value!r}")
        return values

    @model_validator(mode="after")
    def _consistent(self) -> "AnimationDefinition":
        tweened = set(self.from_) | set(self.to)
        if not tweened and not self.keyframes:
            raise ValueError("definition animates no properties")
        both = tweened & set(self.keyframes)
        if both:
            raise ValueError(f"properties defined by both from/to and keyframes: {sorted(both)}")
        for prop, lane in self.keyframes.items():
            if not lane:
                raise ValueError(f"keyframe lane for {prop!r} is empty")
        if self.mode == "loop" and self.spring is not None:
            raise ValueError("loop mode cannot be driven by a spring")
        return self

    @property
    def properties(self) -> list[str]:
        return list(dict.fromkeys([*self.from_, *self.to, *self.keyframes]))


def parse_definition(definition: Union[AnimationDefinition, Mapping[str, Any]]) -> AnimationDefinition:
    """Validate raw authored parameters into an AnimationDefinition."""
    if isinstance(definition, AnimationDefinition):
        return definition
    try:
        return AnimationDefinition.model_validate(definition)
    except ValidationError as e:
        raise InvalidDefinitionError(f"Invalid animation definition: {e}") from e


def build_plan(
    definition: Union[AnimationDefinition, Mapping[str, Any]],
    fps: Optional[float] = None,
) -> Plan:
    """Compile a declarative definition into a Plan.

    Delay and duration are rounded to whole frames. A positive duration
    shorter than one frame lasts one frame. The animation starts at
    ``start_frame + delay``; the time scale divides the delay, the duration
    and keyframe frames but not ``start_frame``, which places the whole
    animation in the composition.

    Args:
        definition: AnimationDefinition or the equivalent mapping
            (``{"from": {...}, "to": {...}, "duration": 0.5, ...}``)
        fps: Composition frames per second (settings default when None)

    Returns:
        The compiled plan

    Raises:
        InvalidDefinitionError: If the definition is malformed
    """
    definition = parse_definition(definition)
    settings = get_settings()
    fps = float(fps if fps is not None else settings.render.fps)
    if not math.isfinite(fps) or fps <= 0:
        raise InvalidDefinitionError(f"fps must be > 0, got {fps}")

    for prop, lane in definition.keyframes.items():
        _check_monotonic(prop, [kf.frame for kf in lane])

    time_scale = definition.time_scale
    delay_frames = round_frame(definition.delay * fps)
    start = (definition.start_frame or 0.0) + delay_frames / time_scale
    duration_frames = max(1, round_frame(get_duration(definition.duration) * fps)) / time_scale

    spring_config = None
    if definition.spring is not None:
        spring_config = (
            definition.spring.to_config()
            if isinstance(definition.spring, SpringSpec)
            else get_spring(definition.spring)
        )
    curve = resolve_easing(definition.easing)
    if definition.mode == "out":
        curve = ReversedEasing(curve)

    channels: list[tuple[str, tuple[Channel, ...]]] = []
    for prop in definition.properties:
        if prop in definition.keyframes:
            track = KeyframeTrack(
                [
                    (kf.frame / time_scale, kf.value, kf.easing)
                    for kf in definition.keyframes[prop]
                ],
                name=prop,
            )
            channels.append((prop, (KeyframeChannel(prop, track),)))
            continue

        begin = definition.from_.get(prop, neutral_value(prop))
        end = definition.to.get(prop, neutral_value(prop))
        if definition.mode == "out":
            begin, end = end, begin

        if definition.mode == "loop":
            channel: Channel = LoopChannel(
                property=prop,
                start_frame=start,
                period_frames=duration_frames,
                from_value=begin,
                to_value=end,
            )
        elif spring_config is not None:
            effective_fps = fps / time_scale
            if spring_config.duration is not None:
                settle = spring_config.duration * effective_fps
            else:
                settle = float(spring_physics.measure_spring(
                    spring_config,
                    effective_fps,
                    settings.evaluation.spring_threshold,
                    settings.evaluation.spring_max_frames,
                ))
            channel = SpringChannel(
                property=prop,
                start_frame=start,
                from_value=begin,
                to_value=end,
                config=spring_config,
                fps=effective_fps,
                settle_frames=settle,
                time_scale=spring_physics.duration_scale(
                    spring_config,
                    effective_fps,
                    settings.evaluation.spring_threshold,
                    settings.evaluation.spring_max_frames,
                ),
            )
        else:
            channel = TweenChannel(
                property=prop,
                start_frame=start,
                duration_frames=duration_frames,
                from_value=begin,
                to_value=end,
                easing=curve,
                fill_mode=definition.fill_mode,
            )
        channels.append((prop, (channel,)))

    plan = Plan(fps=fps, channels=tuple(channels), max_frame=settings.evaluation.max_frame)
    logger.debug(
        f"Built plan for {definition.properties} at {fps:g}fps: "
        f"start={start:g}, {plan.duration_frames:g} frames"
    )
    return plan
