"""Configuration for framecast."""

from .settings import EvaluationSettings, RenderSettings, Settings, get_settings

__all__ = ["EvaluationSettings", "RenderSettings", "Settings", "get_settings"]
