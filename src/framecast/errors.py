"""Error taxonomy for framecast.

Build-time problems raise immediately; evaluation-time problems are
reported as warnings and degraded gracefully.
"""


class FramecastError(Exception):
    """Base class for all framecast errors."""


class InvalidDefinitionError(FramecastError, ValueError):
    """An animation definition could not be compiled into a plan.

    Raised for non-positive durations, invalid spring parameters,
    out-of-order explicit keyframes, unknown labels and similar authoring
    mistakes. Always raised at build time, never from ``evaluate``.
    """


class OutOfRangeWarning(RuntimeWarning):
    """A frame number was too extreme to evaluate and has been clamped."""
