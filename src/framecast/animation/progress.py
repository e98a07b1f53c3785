"""Progress helpers driven by an explicit frame number."""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union
import math

from framecast.animation.easing import Easing, EasingLike, resolve_easing
from framecast.errors import InvalidDefinitionError


def frame_progress(
    frame: float,
    start_frame: float,
    duration_frames: float,
    clamp: bool = True,
    easing: EasingLike = None,
) -> float:
    """Progress through a frame range.

    A non-positive duration is a step: 0 before ``start_frame``, 1 from it on.

    Args:
        frame: Current frame
        start_frame: Frame where progress is 0
        duration_frames: Frames until progress reaches 1
        clamp: Clamp raw progress to [0, 1] before easing
        easing: Optional easing applied to the progress

    Returns:
        Progress, eased when an easing is given
    """
    if duration_frames <= 0:
        return 1.0 if frame >= start_frame else 0.0

    progress = (frame - start_frame) / duration_frames
    if clamp:
        progress = max(0.0, min(1.0, progress))
    if easing is None:
        return progress
    return resolve_easing(easing)(progress)


def loop_progress(
    frame: float,
    duration_frames: float,
    start_frame: float = 0.0,
    easing: EasingLike = None,
) -> float:
    """Progress that restarts from 0 every ``duration_frames``. 0 before the start."""
    if duration_frames <= 0 or frame < start_frame:
        return 0.0
    elapsed = frame - start_frame
    progress = math.fmod(elapsed, duration_frames) / duration_frames
    if easing is None:
        return progress
    return resolve_easing(easing)(progress)


@dataclass(frozen=True)
class StaggerResult:
    """Per-item progress of a staggered animation.

    Attributes:
        progress: Eased progress of each item
        raw_progress: Linear progress of each item
        active_index: Highest index that has started (-1 before the first)
        is_complete: Every item has finished
    """

    progress: tuple[float, ...]
    raw_progress: tuple[float, ...]
    active_index: int
    is_complete: bool


def stagger(
    frame: float,
    count: int,
    delay: float = 5,
    start_frame: float = 0,
    duration_frames: float = 20,
    easing: EasingLike = Easing.EASE_OUT_CUBIC,
) -> StaggerResult:
    """Progress of ``count`` items that start ``delay`` frames apart."""
    curve = resolve_easing(easing)
    raw = []
    active_index = -1

    for i in range(max(0, int(count))):
        item_start = start_frame + i * delay
        if duration_frames > 0:
            p = max(0.0, min(1.0, (frame - item_start) / duration_frames))
        else:
            p = 1.0 if frame >= item_start else 0.0
        raw.append(p)
        if frame >= item_start:
            active_index = i

    return StaggerResult(
        progress=tuple(curve(p) for p in raw),
        raw_progress=tuple(raw),
        active_index=active_index,
        is_complete=all(p >= 1.0 for p in raw),
    )


@dataclass(frozen=True)
class ChainSegment:
    """One step of a chain, e.g. enter, hold or exit.

    Attributes:
        duration: Length in frames
        label: Optional name, usable with ``ChainResult.segment_progress_of``
        easing: Easing within the segment (linear when None)
    """

    duration: float
    label: Optional[str] = None
    easing: EasingLike = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.duration) or self.duration < 0:
            raise InvalidDefinitionError(
                f"Chain segment duration must be >= 0, got {self.duration}"
            )


def _segment_progress(frame: float, start: float, segment: ChainSegment) -> float:
    if segment.duration <= 0:
        raw = 1.0 if frame >= start else 0.0
    else:
        raw = max(0.0, min(1.0, (frame - start) / segment.duration))
    return resolve_easing(segment.easing, Easing.LINEAR)(raw)


@dataclass(frozen=True)
class ChainResult:
    """Where a frame falls in a chain of back-to-back segments.

    Attributes:
        progress: Linear progress through the whole chain
        active_index: Segment the frame is in (the last one once complete)
        active_label: Label of the active segment
        segment_progress: Eased progress within the active segment
        is_complete: The frame is at or past the end of the chain
        segments: The chain's segments
        start_frame: Frame the first segment starts at
        frame: Frame the result was computed for
    """

    progress: float
    active_index: int
    active_label: Optional[str]
    segment_progress: float
    is_complete: bool
    segments: tuple[ChainSegment, ...]
    start_frame: float
    frame: float

    def segment_progress_of(self, index_or_label: Union[int, str]) -> float:
        """Eased progress of any segment, by index or label. 0 when not found."""
        if isinstance(index_or_label, str):
            labels = [segment.label for segment in self.segments]
            if index_or_label not in labels:
                return 0.0
            index = labels.index(index_or_label)
        else:
            index = index_or_label

        if index < 0 or index >= len(self.segments):
            return 0.0
        start = self.start_frame + sum(s.duration for s in self.segments[:index])
        return _segment_progress(self.frame, start, self.segments[index])


def chain(
    frame: float,
    segments: Iterable[Union[ChainSegment, Mapping[str, Any]]],
    start_frame: float = 0,
) -> ChainResult:
    """Progress through segments that play one after another.

    Example:
        result = chain(frame, [
            ChainSegment(20, "enter", "power2.out"),
            ChainSegment(40, "hold"),
            ChainSegment(20, "exit", "power2.in"),
        ])
        if result.active_label == "exit":
            opacity = 1 - result.segment_progress

    Args:
        frame: Current frame
        segments: ChainSegments, or mappings with the same fields
        start_frame: Frame the first segment starts at

    Returns:
        ChainResult for the frame

    Raises:
        InvalidDefinitionError: If there are no segments or one is invalid
    """
    parts = tuple(
        segment if isinstance(segment, ChainSegment) else ChainSegment(**segment)
        for segment in segments
    )
    if not parts:
        raise InvalidDefinitionError("A chain needs at least one segment")

    total = sum(segment.duration for segment in parts)
    end = start_frame + total
    if total > 0:
        progress = max(0.0, min(1.0, (frame - start_frame) / total))
    else:
        progress = 1.0 if frame >= start_frame else 0.0

    active_index = 0
    segment_progress = 0.0
    segment_start = start_frame
    for i, segment in enumerate(parts):
        segment_end = segment_start + segment.duration
        if segment_start <= frame < segment_end:
            active_index = i
            segment_progress = _segment_progress(frame, segment_start, segment)
            break
        if frame >= segment_end:
            active_index = i
            segment_progress = 1.0
        segment_start = segment_end

    is_complete = frame >= end
    if is_complete:
        active_index = len(parts) - 1
        segment_progress = 1.0

    return ChainResult(
        progress=progress,
        active_index=active_index,
        active_label=parts[active_index].label,
        segment_progress=segment_progress,
        is_complete=is_complete,
        segments=parts,
        start_frame=start_frame,
        frame=frame,
    )
