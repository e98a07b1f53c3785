"""
Test suite for the camera solver and rig.

Tests cover:
- constrain_camera closed-form bounds
- Position parsing
- Keyframed camera motion, wobble and bounds
- Shot helpers and camera easings
"""

import pytest

from framecast.animation.camera import (
    CAMERA_EASINGS,
    CameraKeyframe,
    CameraRig,
    CameraState,
    camera_easing,
    constrain_camera,
    max_pan,
    parse_position,
    shake_offset,
)
from framecast.animation.easing import get_easing
from framecast.errors import InvalidDefinitionError


class TestConstrainCamera:
    """Stateless bounds clamping."""

    def test_no_pan_at_unit_scale(self):
        assert constrain_camera(500, 0, 1, 1000, 1000, 1) == CameraState(0, 0, 1)

    def test_pan_limit_at_double_scale(self):
        state = constrain_camera(1000, -1000, 2, 1000, 800, 1)
        assert state.x == pytest.approx(250)
        assert state.y == pytest.approx(-200)
        assert state.scale == 2

    def test_small_pan_passes_through(self):
        state = constrain_camera(100, -50, 2, 1000, 1000, 1)
        assert (state.x, state.y) == (100, -50)

    def test_scale_raised_to_minimum(self):
        state = constrain_camera(0, 0, 0.5, 1000, 1000, 1.2)
        assert state.scale == 1.2

    def test_clamp_invariant(self):
        for scale in (0.2, 0.9, 1.0, 1.1, 1.5, 3.0):
            for min_scale in (0.5, 1.0, 1.3):
                for x in (-5000, -10, 0, 10, 5000):
                    state = constrain_camera(x, -x, scale, 1920, 1080, min_scale)
                    assert state.scale >= min_scale
                    assert abs(state.x) <= max_pan(state.scale, 1920)
                    assert abs(state.y) <= max_pan(state.scale, 1080)

    def test_max_pan(self):
        assert max_pan(1.0, 1000) == 0.0
        assert max_pan(0.5, 1000) == 0.0
        assert max_pan(2.0, 1000) == pytest.approx(250.0)
        assert max_pan(4.0, 1000) == pytest.approx(375.0)


class TestParsePosition:
    """Pixel and percentage positions."""

    def test_numbers(self):
        assert parse_position(12, 1000) == 12.0
        assert parse_position(-3.5, 1000) == -3.5

    def test_percent(self):
        assert parse_position("50%", 1000) == 500.0
        assert parse_position("-10%", 1920) == pytest.approx(-192.0)

    def test_pixel_strings(self):
        assert parse_position("12px", 1000) == 12.0
        assert parse_position("7", 1000) == 7.0

    def test_missing_or_garbage(self):
        assert parse_position(None, 1000) == 0.0
        assert parse_position("left", 1000) == 0.0


class TestCameraRig:
    """Keyframed camera motion."""

    def rig(self, keyframes, **kwargs):
        kwargs.setdefault("width", 1000)
        kwargs.setdefault("height", 1000)
        kwargs.setdefault("fps", 30)
        return CameraRig(keyframes, **kwargs)

    def test_static_pose_without_keyframes(self):
        rig = self.rig([], x="10%", scale=1.5, rotation=4)
        assert rig.evaluate(123) == CameraState(x=100, y=0, scale=1.5, rotation=4)

    def test_interpolates_with_smooth_default(self):
        rig = self.rig([CameraKeyframe(0, scale=1), CameraKeyframe(60, x=100, scale=2)])
        assert rig.evaluate(0) == CameraState(x=0, scale=1)
        assert rig.evaluate(60) == CameraState(x=100, scale=2)
        middle = rig.evaluate(30)
        assert middle.scale == pytest.approx(1.5)
        assert middle.x == pytest.approx(50)
        assert rig.evaluate(15).scale == pytest.approx(1.0625)

    def test_percent_keyframes(self):
        rig = self.rig([CameraKeyframe(0, x="0%"), CameraKeyframe(10, x="50%", y="-25%")])
        state = rig.evaluate(10)
        assert state.x == 500
        assert state.y == -250

    def test_keyframe_easing_by_camera_name(self):
        rig = self.rig(
            [CameraKeyframe(0, scale=1), CameraKeyframe(10, scale=2, easing="linear")]
        )
        assert rig.evaluate(5).scale == pytest.approx(1.5)

    def test_mapping_keyframes(self):
        rig = self.rig([{"frame": 0, "rotation": 0}, {"frame": 10, "rotation": 90, "easing": "linear"}])
        assert rig.evaluate(5).rotation == pytest.approx(45)

    def test_holds_outside_keyframes(self):
        rig = self.rig([CameraKeyframe(10, scale=1.2), CameraKeyframe(20, scale=1.4)])
        assert rig.evaluate(0).scale == 1.2
        assert rig.evaluate(100).scale == 1.4

    def test_constrain_to_bounds(self):
        rig = self.rig([CameraKeyframe(0, x=500, y=-500)], constrain_to_bounds=True)
        state = rig.evaluate(0)
        assert (state.x, state.y, state.scale) == (0, 0, 1)

    def test_constrain_keeps_rotation(self):
        rig = self.rig([], rotation=15, x=900, constrain_to_bounds=True)
        assert rig.evaluate(0).rotation == 15

    def test_constrain_respects_min_scale(self):
        rig = self.rig([], scale=0.8, constrain_to_bounds=True, min_scale=1.25)
        assert rig.evaluate(0).scale == 1.25

    def test_wiggle_is_deterministic_and_bounded(self):
        rig = self.rig([], wiggle=2.0, wiggle_speed=1.5)
        states = [rig.evaluate(f) for f in range(90)]
        assert states == [rig.evaluate(f) for f in range(90)]
        assert any(state.x != 0 for state in states)
        for state in states:
            assert abs(state.x) <= 20 + 1e-9
            assert abs(state.y) <= 20 + 1e-9
            assert abs(state.rotation) <= 1 + 1e-9
            assert state.scale == 1

    def test_wiggle_moves_axes_independently(self):
        rig = self.rig([], wiggle=1.0)
        state = rig.evaluate(17)
        assert state.x != state.y

    def test_invalid_viewport(self):
        with pytest.raises(InvalidDefinitionError):
            CameraRig([], width=0, height=100, fps=30)

    def test_negative_wiggle(self):
        with pytest.raises(InvalidDefinitionError):
            self.rig([], wiggle=-1)

    def test_push_in(self):
        rig = CameraRig.push_in(start_frame=10, duration=30, target=("10%", 0), width=1000, height=1000, fps=30)
        assert rig.evaluate(10).scale == pytest.approx(1.1)
        end = rig.evaluate(40)
        assert end.scale == pytest.approx(1.8)
        assert end.x == pytest.approx(100)

    def test_pull_out(self):
        rig = CameraRig.pull_out(duration=20, start=(50, 50), width=1000, height=1000, fps=30)
        assert rig.evaluate(0) == CameraState(x=50, y=50, scale=2.0)
        assert rig.evaluate(20) == CameraState(x=0, y=0, scale=1.1)

    def test_zoom(self):
        rig = CameraRig.zoom(0, 10, width=1000, height=1000, fps=30)
        assert rig.evaluate(5).scale == pytest.approx(1.3)

    def test_pan_keeps_scale_as_minimum(self):
        rig = CameraRig.pan(0, 10, to_pos=(1000, 0), scale=1.3, constrain_to_bounds=True, width=1000, height=1000, fps=30)
        assert rig.min_scale == 1.3
        assert rig.evaluate(10).x == pytest.approx(max_pan(1.3, 1000))


class TestCameraEasings:
    """Named camera curves."""

    def test_camel_and_snake_case(self):
        assert camera_easing("pushIn") == CAMERA_EASINGS["push_in"]
        assert camera_easing("push_in") == CAMERA_EASINGS["push_in"]
        assert camera_easing("pullOut") == CAMERA_EASINGS["pull_out"]

    def test_smooth_is_in_out_cubic(self):
        assert camera_easing("smooth") == get_easing("ease_in_out_cubic")

    def test_falls_through_to_general_names(self):
        assert camera_easing("power2.out") == get_easing("power2.out")

    def test_all_camera_easings_hit_endpoints(self):
        for curve in CAMERA_EASINGS.values():
            assert curve(0) == pytest.approx(0, abs=1e-6)
            assert curve(1) == pytest.approx(1, abs=1e-6)


class TestShake:
    """Impact shake offsets."""

    def test_zero_outside_window(self):
        assert shake_offset(5, start_frame=10) == (0.0, 0.0)
        assert shake_offset(40, start_frame=10, duration=30) == (0.0, 0.0)

    def test_decays_within_intensity(self):
        for frame in range(10, 40):
            dx, dy = shake_offset(frame, intensity=5, start_frame=10, duration=30)
            assert abs(dx) <= 5
            assert abs(dy) <= 3.5

    def test_starts_with_vertical_kick(self):
        dx, dy = shake_offset(0, intensity=4)
        assert dx == 0.0
        assert dy == pytest.approx(2.8)
