"""
Test suite for frame progress helpers and deterministic noise.

Tests cover:
- frame_progress, loop_progress and stagger
- Segment chains
- noise1d, fbm and wiggle ranges and determinism
"""

import math

import numpy as np
import pytest

from framecast.animation.noise import fbm, noise1d, sample_wiggle, wiggle, wiggle_2d
from framecast.animation.progress import (
    ChainSegment,
    StaggerResult,
    chain,
    frame_progress,
    loop_progress,
    stagger,
)
from framecast.errors import InvalidDefinitionError

ENTER_HOLD_EXIT = [
    ChainSegment(20, "enter"),
    ChainSegment(40, "hold"),
    ChainSegment(20, "exit"),
]


class TestFrameProgress:
    """Progress through a frame range."""

    def test_linear_progress(self):
        assert frame_progress(15, 0, 30) == pytest.approx(0.5)

    def test_clamped_by_default(self):
        assert frame_progress(-10, 0, 30) == 0.0
        assert frame_progress(90, 0, 30) == 1.0

    def test_unclamped(self):
        assert frame_progress(60, 0, 30, clamp=False) == pytest.approx(2.0)

    def test_with_start_offset(self):
        assert frame_progress(20, 10, 20) == pytest.approx(0.5)

    def test_with_easing(self):
        assert frame_progress(15, 0, 30, easing="ease_in_quad") == pytest.approx(0.25)

    def test_zero_duration_is_a_step(self):
        assert frame_progress(9, 10, 0) == 0.0
        assert frame_progress(10, 10, 0) == 1.0


class TestLoopProgress:
    """Repeating progress."""

    def test_wraps_every_cycle(self):
        assert loop_progress(15, 30) == pytest.approx(0.5)
        assert loop_progress(45, 30) == pytest.approx(0.5)
        assert loop_progress(60, 30) == 0.0

    def test_zero_before_start(self):
        assert loop_progress(5, 30, start_frame=10) == 0.0

    def test_zero_duration(self):
        assert loop_progress(5, 0) == 0.0

    def test_with_easing(self):
        assert loop_progress(45, 30, easing="ease_in_quad") == pytest.approx(0.25)


class TestStagger:
    """Staggered item progress."""

    def test_items_start_in_turn(self):
        result = stagger(10, count=3, delay=5, duration_frames=20, easing="linear")
        assert isinstance(result, StaggerResult)
        assert result.raw_progress == pytest.approx((0.5, 0.25, 0.0))
        assert result.progress == pytest.approx((0.5, 0.25, 0.0))
        assert result.active_index == 2
        assert not result.is_complete

    def test_nothing_started(self):
        result = stagger(-1, count=2)
        assert result.active_index == -1
        assert result.raw_progress == (0.0, 0.0)

    def test_complete(self):
        result = stagger(100, count=4)
        assert result.is_complete
        assert result.progress == pytest.approx((1.0, 1.0, 1.0, 1.0))

    def test_default_easing_is_ease_out_cubic(self):
        result = stagger(10, count=1)
        assert result.progress[0] == pytest.approx(0.875)

    def test_empty(self):
        result = stagger(10, count=0)
        assert result.progress == ()
        assert result.is_complete


class TestChain:
    """Back-to-back segments such as enter, hold and exit."""

    def test_before_start(self):
        result = chain(-5, ENTER_HOLD_EXIT)
        assert result.progress == 0.0
        assert result.active_index == 0
        assert result.active_label == "enter"
        assert result.segment_progress == 0.0
        assert not result.is_complete

    def test_inside_first_segment(self):
        result = chain(10, ENTER_HOLD_EXIT)
        assert result.active_label == "enter"
        assert result.segment_progress == pytest.approx(0.5)
        assert result.progress == pytest.approx(0.125)

    def test_segment_boundary_belongs_to_next_segment(self):
        result = chain(20, ENTER_HOLD_EXIT)
        assert result.active_index == 1
        assert result.segment_progress == 0.0

    def test_hold_segment(self):
        result = chain(30, ENTER_HOLD_EXIT)
        assert result.active_label == "hold"
        assert result.segment_progress == pytest.approx(0.25)

    def test_complete(self):
        result = chain(80, ENTER_HOLD_EXIT)
        assert result.is_complete
        assert result.active_label == "exit"
        assert result.segment_progress == 1.0
        assert result.progress == 1.0

    def test_start_frame_offset(self):
        result = chain(25, ENTER_HOLD_EXIT, start_frame=10)
        assert result.active_index == 0
        assert result.segment_progress == pytest.approx(0.75)

    def test_segment_easing(self):
        result = chain(10, [ChainSegment(20, "enter", "power2.out"), ChainSegment(10)])
        assert result.segment_progress == pytest.approx(0.875)

    def test_segment_progress_of(self):
        result = chain(30, ENTER_HOLD_EXIT)
        assert result.segment_progress_of("enter") == 1.0
        assert result.segment_progress_of("hold") == pytest.approx(0.25)
        assert result.segment_progress_of(2) == 0.0
        assert result.segment_progress_of("missing") == 0.0
        assert result.segment_progress_of(5) == 0.0
        assert result.segment_progress_of(-1) == 0.0

    def test_zero_length_segment(self):
        segments = [ChainSegment(20, "a"), ChainSegment(0, "flash"), ChainSegment(10, "b")]
        result = chain(20, segments)
        assert result.active_label == "b"
        assert result.segment_progress_of("flash") == 1.0
        assert chain(19, segments).segment_progress_of("flash") == 0.0

    def test_accepts_mappings(self):
        result = chain(5, [{"duration": 20, "label": "a"}, {"duration": 10}])
        assert result.active_label == "a"
        assert result.segment_progress == pytest.approx(0.25)

    @pytest.mark.parametrize(
        "segments",
        [[], [{"duration": -1}], [ChainSegment(10), {"duration": math.nan}]],
    )
    def test_rejects_invalid_chains(self, segments):
        with pytest.raises(InvalidDefinitionError):
            chain(0, segments)

    def test_is_deterministic(self):
        assert chain(37, ENTER_HOLD_EXIT) == chain(37, ENTER_HOLD_EXIT)


class TestNoise:
    """Deterministic layered-sine noise."""

    def test_noise_is_bounded(self):
        for i in range(500):
            assert -1.0 <= noise1d(i * 0.37, seed=3) <= 1.0

    def test_noise_is_deterministic(self):
        assert noise1d(12.5, 7) == noise1d(12.5, 7)

    def test_seed_changes_output(self):
        assert noise1d(1.0, 0) != noise1d(1.0, 1)

    def test_fbm_is_normalized(self):
        for i in range(200):
            assert -1.0 <= fbm(i * 0.11, seed=2, octaves=4) <= 1.0

    def test_single_octave_fbm_is_noise(self):
        assert fbm(3.3, 5, octaves=1) == pytest.approx(noise1d(3.3, 5))

    def test_wiggle_amplitude(self):
        for frame in range(120):
            assert abs(wiggle(frame, 30, frequency=2, amplitude=10, seed=1)) <= 10

    def test_wiggle_zero_fps(self):
        assert wiggle(10, 0) == 0.0

    def test_wiggle_2d_axes_differ(self):
        x, y = wiggle_2d(12, 30, seed=4)
        assert x != y

    def test_sample_wiggle_matches_scalar(self):
        frames = np.arange(60)
        values = sample_wiggle(frames, 30, frequency=1.5, amplitude=8, seed=2, octaves=3)
        expected = [wiggle(f, 30, 1.5, 8, 2, 3) for f in frames]
        assert values.tolist() == pytest.approx(expected, abs=1e-9)
