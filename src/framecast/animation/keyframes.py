"""Keyframe tracks with per-segment easing."""

from bisect import bisect_right
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence, Union
import logging
import math

import numpy as np
from numpy.typing import ArrayLike, NDArray

from framecast.animation.easing import Easing, EasingFunc, EasingLike, resolve_easing
from framecast.errors import InvalidDefinitionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Keyframe:
    """A single keyframe in an animation track.

    Attributes:
        frame: Frame number where this value applies
        value: The value at this frame (None means the keyframe does not
            set this property)
        easing: Easing used when approaching this keyframe from the previous one
    """

    frame: float
    value: Optional[float] = None
    easing: EasingLike = None


KeyframeLike = Union[Keyframe, Sequence[Any]]


def _coerce(item: KeyframeLike) -> Keyframe:
    if isinstance(item, Keyframe):
        return item
    if isinstance(item, Mapping):
        return Keyframe(item["frame"], item.get("value"), item.get("easing"))
    if 2 <= len(item) <= 3:
        return Keyframe(*item)
    raise InvalidDefinitionError(f"Keyframe must be (frame, value[, easing]), got {item!r}")


class KeyframeTrack:
    """An immutable timeline of keyframes for a single numeric property.

    Keyframes are sorted by frame on construction. The sort is stable, and
    when several keyframes share a frame the last declared one wins.
    """

    __slots__ = ("name", "default", "_frames", "_values", "_easings")

    def __init__(
        self,
        keyframes: Iterable[KeyframeLike] = (),
        default: float = 0.0,
        default_easing: EasingLike = Easing.LINEAR,
        name: str = "",
    ) -> None:
        """
        Args:
            keyframes: Keyframe objects or (frame, value[, easing]) tuples
            default: Value of a track without keyframes
            default_easing: Easing for keyframes that don't specify one
            name: Property name, for diagnostics
        """
        by_frame: dict[float, Keyframe] = {}
        for item in keyframes:
            kf = _coerce(item)
            if kf.value is None:
                continue
            frame = float(kf.frame)
            if not math.isfinite(frame):
                raise InvalidDefinitionError(f"Keyframe frame must be finite, got {kf.frame!r}")
            if not math.isfinite(float(kf.value)):
                raise InvalidDefinitionError(
                    f"Keyframe value at frame {frame:g} must be finite, got {kf.value!r}"
                )
            # Later declarations replace earlier ones at the same frame
            by_frame.pop(frame, None)
            by_frame[frame] = kf

        ordered = sorted(by_frame.items(), key=lambda item: item[0])
        fallback = resolve_easing(default_easing, Easing.LINEAR)

        self.name = name
        self.default = float(default)
        self._frames: tuple[float, ...] = tuple(frame for frame, _ in ordered)
        self._values: tuple[float, ...] = tuple(float(kf.value) for _, kf in ordered)
        self._easings: tuple[EasingFunc, ...] = tuple(
            resolve_easing(kf.easing) if kf.easing is not None else fallback
            for _, kf in ordered
        )

    def __len__(self) -> int:
        return len(self._frames)

    def __repr__(self) -> str:
        points = ", ".join(f"({f:g}, {v:g})" for f, v in zip(self._frames, self._values))
        return f"KeyframeTrack({self.name!r}, [{points}])"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyframeTrack):
            return NotImplemented
        return (
            self._frames == other._frames
            and self._values == other._values
            and self._easings == other._easings
            and self.default == other.default
        )

    @property
    def frames(self) -> tuple[float, ...]:
        return self._frames

    @property
    def values(self) -> tuple[float, ...]:
        return self._values

    @property
    def start_frame(self) -> float:
        return self._frames[0] if self._frames else 0.0

    @property
    def end_frame(self) -> float:
        return self._frames[-1] if self._frames else 0.0

    @property
    def duration(self) -> float:
        """Frames between the first and last keyframe."""
        return self.end_frame - self.start_frame

    def keyframes(self) -> list[Keyframe]:
        """The normalized keyframes, in frame order."""
        return [
            Keyframe(f, v, e) for f, v, e in zip(self._frames, self._values, self._easings)
        ]

    def shifted(self, offset: float) -> "KeyframeTrack":
        """Copy of this track with every keyframe moved by ``offset`` frames."""
        track = KeyframeTrack.__new__(KeyframeTrack)
        track.name = self.name
        track.default = self.default
        track._frames = tuple(f + offset for f in self._frames)
        track._values = self._values
        track._easings = self._easings
        return track

    def evaluate(self, frame: float) -> float:
        """Get the interpolated value at a frame.

        Holds the first value before the first keyframe and the last value
        after the last one; never extrapolates.
        """
        frames = self._frames
        count = len(frames)

        if count == 0:
            return self.default
        if count == 1 or frame != frame or frame <= frames[0]:
            return self._values[0]
        if frame >= frames[-1]:
            return self._values[-1]

        i = bisect_right(frames, frame)
        prev_frame, next_frame = frames[i - 1], frames[i]
        prev_value, next_value = self._values[i - 1], self._values[i]

        local_t = (frame - prev_frame) / (next_frame - prev_frame)
        # The curve describes the transition arriving at the next keyframe
        eased_t = self._easings[i](local_t)
        return prev_value + (next_value - prev_value) * eased_t

    def sample(self, frames: ArrayLike) -> NDArray[np.float64]:
        """Evaluate the track over an array of frames."""
        values = np.asarray(frames, dtype=np.float64)
        return np.vectorize(self.evaluate, otypes=[np.float64])(values)


def evaluate(track: KeyframeTrack, frame: float) -> float:
    """Value of ``track`` at ``frame``."""
    return track.evaluate(frame)


class MultiKeyframeTrack:
    """Several property tracks sharing one keyframe list.

    Each keyframe may set any subset of the properties, like lanes on an
    After Effects timeline. Properties are interpolated independently and
    merged into one dict per frame.

    Example:
        tracks = MultiKeyframeTrack.from_keyframes(
            [
                {"frame": 0, "x": 0, "y": 0, "rotation": 0},
                {"frame": 30, "x": 100, "easing": "power2.out"},
                {"frame": 60, "y": 200, "rotation": 180},
            ],
            defaults={"x": 0, "y": 0, "rotation": 0},
        )
        tracks.evaluate(45)  # {"x": 100.0, "y": ..., "rotation": ...}
    """

    __slots__ = ("tracks",)

    def __init__(self, tracks: Mapping[str, KeyframeTrack]) -> None:
        self.tracks: dict[str, KeyframeTrack] = dict(tracks)

    @classmethod
    def from_keyframes(
        cls,
        keyframes: Iterable[Mapping[str, Any]],
        defaults: Mapping[str, float],
        default_easing: EasingLike = Easing.LINEAR,
    ) -> "MultiKeyframeTrack":
        """Split multi-property keyframes into one track per property.

        Args:
            keyframes: Mappings with a "frame", an optional "easing" and any
                number of property values
            defaults: Every property to produce, with its value when no
                keyframe sets it
            default_easing: Easing for keyframes without one
        """
        keyframes = list(keyframes)
        for kf in keyframes:
            if "frame" not in kf:
                raise InvalidDefinitionError(f"Keyframe is missing 'frame': {dict(kf)!r}")

        tracks = {}
        for prop, default in defaults.items():
            lane = [
                Keyframe(kf["frame"], kf[prop], kf.get("easing"))
                for kf in keyframes
                if kf.get(prop) is not None
            ]
            tracks[prop] = KeyframeTrack(lane, default, default_easing, name=prop)
        return cls(tracks)

    @property
    def properties(self) -> list[str]:
        return list(self.tracks)

    def evaluate(self, frame: float) -> dict[str, float]:
        return {prop: track.evaluate(frame) for prop, track in self.tracks.items()}
