"""
Library settings using Pydantic.

Settings are loaded from environment variables with .env file support.
They only provide defaults; every builder also takes explicit arguments.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RenderSettings(BaseSettings):
    """Composition-level settings shared with the renderer."""

    fps: int = Field(default=30, gt=0)
    width: int = Field(default=1920, gt=0)
    height: int = Field(default=1080, gt=0)


class EvaluationSettings(BaseSettings):
    """Evaluation defaults and safety limits."""

    # Frames beyond +/- this value are clamped with an OutOfRangeWarning
    max_frame: float = Field(default=10_000_000.0, gt=0)

    default_easing: str = "ease_out_cubic"
    default_spring: str = "smooth"

    # Spring is considered settled once it stays within this distance of rest
    spring_threshold: float = Field(default=0.005, gt=0.0, lt=1.0)
    spring_max_frames: int = Field(default=36_000, gt=0)  # 20 minutes at 30fps


class Settings(BaseSettings):
    """Main framecast settings."""

    model_config = SettingsConfigDict(
        env_prefix="FRAMECAST_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    render: RenderSettings = Field(default_factory=RenderSettings)
    evaluation: EvaluationSettings = Field(default_factory=EvaluationSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
