"""
Test suite for keyframe tracks.

Tests cover:
- Bracketing and per-segment easing
- Holding values outside the keyframe range
- Empty, single and duplicate keyframes
- Validation of keyframe data
- Multi-property keyframe lanes
"""

import math

import numpy as np
import pytest

from framecast.animation.keyframes import (
    Keyframe,
    KeyframeTrack,
    MultiKeyframeTrack,
    evaluate,
)
from framecast.errors import InvalidDefinitionError


class TestKeyframeTrackEvaluate:
    """Interpolation between keyframes."""

    def test_overshoot_then_descent(self):
        track = KeyframeTrack([(0, 0), (30, 100, "back.out"), (60, 0)])
        value = evaluate(track, 45)
        assert 0 < value < 100

    def test_arriving_keyframe_easing_drives_segment(self):
        track = KeyframeTrack([(0, 0), (30, 100, "back.out"), (60, 0)])
        # back.out overshoots on the way into frame 30
        assert track.evaluate(15) > 100

    def test_linear_by_default(self):
        track = KeyframeTrack([(0, 0), (10, 100)])
        assert track.evaluate(5) == pytest.approx(50.0)

    def test_segment_easing(self):
        track = KeyframeTrack([(0, 0), (10, 100, "ease_in_quad")])
        assert track.evaluate(5) == pytest.approx(25.0)

    def test_default_easing_applies_to_unset_keyframes(self):
        track = KeyframeTrack([(0, 0), (10, 100)], default_easing="ease_in_quad")
        assert track.evaluate(5) == pytest.approx(25.0)

    def test_exact_keyframe_values(self):
        track = KeyframeTrack([(0, 5), (10, 15), (20, -5)])
        assert track.evaluate(0) == 5
        assert track.evaluate(10) == 15
        assert track.evaluate(20) == -5

    def test_holds_before_first_and_after_last(self):
        track = KeyframeTrack([(10, 1), (20, 2)])
        assert track.evaluate(-100) == 1
        assert track.evaluate(5) == 1
        assert track.evaluate(1000) == 2

    def test_fractional_frames(self):
        track = KeyframeTrack([(0, 0), (1, 10)])
        assert track.evaluate(0.25) == pytest.approx(2.5)

    def test_nan_frame_returns_first_value(self):
        track = KeyframeTrack([(0, 3), (10, 7)])
        assert track.evaluate(math.nan) == 3


class TestKeyframeTrackConstruction:
    """Normalization of keyframe input."""

    def test_empty_track_returns_default(self):
        track = KeyframeTrack([], default=4.0)
        assert len(track) == 0
        assert track.evaluate(10) == 4.0

    def test_single_keyframe_is_constant(self):
        track = KeyframeTrack([(15, 9)])
        assert track.evaluate(0) == 9
        assert track.evaluate(100) == 9

    def test_keyframes_are_sorted(self):
        track = KeyframeTrack([(20, 2), (0, 0), (10, 1)])
        assert track.frames == (0.0, 10.0, 20.0)
        assert track.values == (0.0, 1.0, 2.0)

    def test_duplicate_frame_last_declared_wins(self):
        track = KeyframeTrack([(0, 0), (10, 5), (10, 7), (20, 0)])
        assert len(track) == 3
        assert track.evaluate(10) == 7

    def test_keyframes_without_value_are_skipped(self):
        track = KeyframeTrack([Keyframe(0, 0), Keyframe(5), Keyframe(10, 10)])
        assert track.frames == (0.0, 10.0)

    def test_accepts_mappings(self):
        track = KeyframeTrack([{"frame": 0, "value": 0}, {"frame": 10, "value": 20}])
        assert track.evaluate(5) == pytest.approx(10.0)

    def test_non_finite_value_raises(self):
        with pytest.raises(InvalidDefinitionError):
            KeyframeTrack([(0, 0), (10, math.inf)])

    def test_non_finite_frame_raises(self):
        with pytest.raises(InvalidDefinitionError):
            KeyframeTrack([(math.nan, 0)])

    def test_malformed_keyframe_raises(self):
        with pytest.raises(InvalidDefinitionError):
            KeyframeTrack([(0,)])

    def test_span_properties(self):
        track = KeyframeTrack([(5, 0), (25, 1)])
        assert track.start_frame == 5
        assert track.end_frame == 25
        assert track.duration == 20

    def test_shifted_moves_every_keyframe(self):
        track = KeyframeTrack([(0, 0), (10, 100)])
        moved = track.shifted(30)
        assert moved.frames == (30.0, 40.0)
        assert moved.evaluate(35) == pytest.approx(50.0)
        assert track.frames == (0.0, 10.0)

    def test_equal_tracks(self):
        a = KeyframeTrack([(0, 0), (10, 1, "power2.out")])
        b = KeyframeTrack([(10, 1, "power2.out"), (0, 0)])
        assert a == b

    def test_sample(self):
        track = KeyframeTrack([(0, 0), (10, 100)])
        values = track.sample(np.array([0, 5, 10, 20]))
        assert values.tolist() == pytest.approx([0.0, 50.0, 100.0, 100.0])


class TestMultiKeyframeTrack:
    """Multi-property keyframe lanes."""

    def test_properties_interpolate_independently(self):
        tracks = MultiKeyframeTrack.from_keyframes(
            [
                {"frame": 0, "x": 0, "y": 0},
                {"frame": 30, "x": 100},
                {"frame": 60, "y": 200},
            ],
            defaults={"x": 0, "y": 0},
        )
        values = tracks.evaluate(45)
        assert values["x"] == 100
        assert values["y"] == pytest.approx(150.0)

    def test_property_without_keyframes_uses_default(self):
        tracks = MultiKeyframeTrack.from_keyframes(
            [{"frame": 0, "x": 0}, {"frame": 10, "x": 10}],
            defaults={"x": 0, "opacity": 1},
        )
        assert tracks.evaluate(5)["opacity"] == 1
        assert tracks.properties == ["x", "opacity"]

    def test_keyframe_easing_applies_to_all_lanes(self):
        tracks = MultiKeyframeTrack.from_keyframes(
            [
                {"frame": 0, "a": 0, "b": 0},
                {"frame": 10, "a": 100, "b": 10, "easing": "ease_in_quad"},
            ],
            defaults={"a": 0, "b": 0},
        )
        values = tracks.evaluate(5)
        assert values["a"] == pytest.approx(25.0)
        assert values["b"] == pytest.approx(2.5)

    def test_missing_frame_raises(self):
        with pytest.raises(InvalidDefinitionError):
            MultiKeyframeTrack.from_keyframes([{"x": 1}], defaults={"x": 0})
