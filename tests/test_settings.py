"""
Test suite for library settings.
"""

import pytest

from framecast.animation.spring import SpringConfig, measure_spring
from framecast.animation.timeline import TimelineBuilder, build_plan, evaluate
from framecast.config import get_settings


class TestSettings:
    """Defaults and environment overrides."""

    def test_defaults(self):
        settings = get_settings()
        assert settings.render.fps == 30
        assert settings.render.width == 1920
        assert settings.evaluation.max_frame == 10_000_000
        assert settings.evaluation.default_easing == "ease_out_cubic"
        assert settings.evaluation.default_spring == "smooth"

    def test_settings_are_cached(self):
        assert get_settings() is get_settings()

    def test_nested_environment_override(self, monkeypatch):
        monkeypatch.setenv("FRAMECAST_RENDER__FPS", "60")
        monkeypatch.setenv("FRAMECAST_EVALUATION__MAX_FRAME", "1000")
        settings = get_settings()
        assert settings.render.fps == 60
        assert settings.evaluation.max_frame == 1000

    def test_build_plan_uses_settings_fps(self, monkeypatch):
        monkeypatch.setenv("FRAMECAST_RENDER__FPS", "24")
        plan = build_plan({"to": {"x": 1}, "duration": 1})
        assert plan.fps == 24
        assert plan.duration_frames == 24

    def test_builder_uses_settings_defaults(self, monkeypatch):
        monkeypatch.setenv("FRAMECAST_RENDER__FPS", "60")
        monkeypatch.setenv("FRAMECAST_EVALUATION__DEFAULT_EASING", "linear")
        plan = TimelineBuilder().from_to({"x": 0}, {"x": 10}, 1.0).build()
        assert plan.fps == 60
        assert plan.evaluate(30)["x"] == 5.0

    def test_spring_duration_follows_threshold_setting(self, monkeypatch):
        monkeypatch.setenv("FRAMECAST_EVALUATION__SPRING_THRESHOLD", "0.05")
        spring = {"stiffness": 100, "damping": 10, "duration": 1.0}
        plan = build_plan({"to": {"x": 1}, "spring": spring}, fps=30)
        channel = plan.channels[0][1][0]
        natural = measure_spring(SpringConfig(**spring), 30, threshold=0.05)
        assert channel.settle_frames == 30
        assert channel.time_scale == pytest.approx(natural / 30)
        assert abs(evaluate(plan, 30)["x"] - 1.0) <= 0.05 + 1e-9

    def test_builder_spring_duration_follows_threshold_setting(self, monkeypatch):
        monkeypatch.setenv("FRAMECAST_EVALUATION__SPRING_THRESHOLD", "0.05")
        config = SpringConfig(stiffness=100, damping=10, duration=1.0)
        plan = TimelineBuilder(fps=30).spring({"x": 0}, {"x": 1}, config).build()
        natural = measure_spring(config, 30, threshold=0.05)
        assert plan.channels[0][1][0].time_scale == pytest.approx(natural / 30)
