"""Scene and beat orchestration over a shared time axis.

A ``SequenceOrchestrator`` is a static schedule: scenes are named time ranges,
beats are named instants. Rendering code asks it whether a scene is active at
a given time and how far through it is; the orchestrator never drives values
itself.
"""

from dataclasses import dataclass
from threading import Lock
from typing import Iterable, Optional, Union
import logging
import math

from framecast.errors import InvalidDefinitionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scene:
    """A named time range.

    Attributes:
        id: Unique identifier
        at: Start time in seconds
        duration: Length in seconds
        label: Optional alternative name, usable with ``time_of``
    """

    id: str
    at: float
    duration: float
    label: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise InvalidDefinitionError("Scene id must be a non-empty string")
        if not math.isfinite(self.at):
            raise InvalidDefinitionError(f"Scene {self.id!r} start must be finite, got {self.at}")
        if not math.isfinite(self.duration) or self.duration < 0:
            raise InvalidDefinitionError(
                f"Scene {self.id!r} duration must be >= 0, got {self.duration}"
            )

    @property
    def end(self) -> float:
        return self.at + self.duration


@dataclass(frozen=True)
class Beat:
    """A named instant, e.g. a music hit or a voice-over cue."""

    id: str
    at: float

    def __post_init__(self) -> None:
        if not self.id:
            raise InvalidDefinitionError("Beat id must be a non-empty string")
        if not math.isfinite(self.at):
            raise InvalidDefinitionError(f"Beat {self.id!r} time must be finite, got {self.at}")

    @property
    def duration(self) -> float:
        return 0.0

    @property
    def end(self) -> float:
        return self.at


Entry = Union[Scene, Beat]


def frame_to_seconds(frame: float, fps: float) -> float:
    """Convert a frame number to seconds."""
    if fps <= 0:
        raise InvalidDefinitionError(f"fps must be > 0, got {fps}")
    return frame / fps


class SequenceOrchestrator:
    """Named scenes and beats, queried by time in seconds.

    Registration is idempotent by id: registering an id again replaces the
    previous definition, whether it was a scene or a beat. Queries for unknown
    ids report an inactive entry with zero progress.

    Example:
        seq = SequenceOrchestrator([
            Scene("intro", at=0, duration=2),
            Scene("main", at=2, duration=5),
            Beat("drop", at=4.5),
        ])
        t = frame_to_seconds(frame, fps)
        if seq.is_active("intro", t):
            ...
    """

    def __init__(self, entries: Iterable[Entry] = ()) -> None:
        self._lock = Lock()
        self._entries: dict[str, Entry] = {}
        for entry in entries:
            self.register(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, id: str) -> bool:
        return id in self._entries

    # Registration

    def register(self, entry: Entry) -> Entry:
        """Register a Scene or Beat, replacing any entry with the same id."""
        if not isinstance(entry, (Scene, Beat)):
            raise InvalidDefinitionError(f"Expected a Scene or Beat, got {type(entry).__name__}")
        with self._lock:
            if entry.id in self._entries:
                logger.debug(f"Replacing sequence entry {entry.id!r}")
            self._entries[entry.id] = entry
        return entry

    def register_scene(self, scene: Scene) -> Scene:
        if not isinstance(scene, Scene):
            raise InvalidDefinitionError(f"Expected a Scene, got {type(scene).__name__}")
        return self.register(scene)

    def register_beat(self, beat: Beat) -> Beat:
        if not isinstance(beat, Beat):
            raise InvalidDefinitionError(f"Expected a Beat, got {type(beat).__name__}")
        return self.register(beat)

    def add_scene(
        self, id: str, at: float, duration: float, label: Optional[str] = None
    ) -> Scene:
        return self.register_scene(Scene(id, float(at), float(duration), label))

    def add_beat(self, id: str, at: float) -> Beat:
        return self.register_beat(Beat(id, float(at)))

    # Queries

    def _snapshot(self) -> list[Entry]:
        with self._lock:
            return list(self._entries.values())

    def scene(self, id: str) -> Optional[Entry]:
        """The entry registered under ``id``, or None."""
        return self._entries.get(id)

    def is_active(self, id: str, t: float) -> bool:
        """True while ``at <= t < at + duration``. Beats are never active."""
        entry = self._entries.get(id)
        if entry is None:
            return False
        return entry.at <= t < entry.end

    def progress(self, id: str, t: float) -> float:
        """Linear progress through an entry: 0 before it, 1 at or after its end.

        A NaN time reports 0.
        """
        entry = self._entries.get(id)
        if entry is None or math.isnan(t) or t < entry.at:
            return 0.0
        if t >= entry.end:
            return 1.0
        return (t - entry.at) / entry.duration

    def beat_passed(self, id: str, t: float) -> bool:
        """True once ``t`` has reached the entry's start time."""
        entry = self._entries.get(id)
        return entry is not None and t >= entry.at

    def time_of(self, name: str) -> Optional[float]:
        """Start time of an entry, looked up by id and then by scene label."""
        entry = self._entries.get(name)
        if entry is not None:
            return entry.at
        for candidate in self._snapshot():
            if isinstance(candidate, Scene) and candidate.label == name:
                return candidate.at
        return None

    def active_scenes(self, t: float) -> list[Scene]:
        """Scenes active at ``t``, ordered by start time."""
        active = [
            entry for entry in self._snapshot()
            if isinstance(entry, Scene) and entry.at <= t < entry.end
        ]
        return sorted(active, key=lambda scene: scene.at)

    def total_duration(self) -> float:
        """Latest end time of any scene or beat (0 when empty)."""
        return max((entry.end for entry in self._snapshot()), default=0.0)
