"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
Nested values use a double underscore, e.g. PRIZEWHEEL_PHYSICS__FRICTION=0.985.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PhysicsSettings(BaseModel):
    """Continuous decay model constants."""

    # Per-tick multiplicative decay at 60Hz-equivalent cadence
    friction: float = Field(default=0.99, gt=0.0, lt=1.0)

    # Degrees of rotation per pixel of vertical drag
    drag_sensitivity: float = 0.5

    # Reference frame for velocity normalization (ms)
    frame_ms: float = Field(default=16.0, gt=0.0)

    # Velocities are in degrees per reference frame
    max_velocity: float = Field(default=50.0, gt=0.0)
    spin_threshold: float = Field(default=2.0, ge=0.0)
    stop_velocity: float = Field(default=0.1, gt=0.0)
    rest_velocity: float = Field(default=0.01, gt=0.0)

    # Spin button impulse range
    impulse_min: float = Field(default=30.0, gt=0.0)
    impulse_max: float = Field(default=50.0, gt=0.0)

    @model_validator(mode="after")
    def _check_ranges(self) -> "PhysicsSettings":
        if self.impulse_min > self.impulse_max:
            raise ValueError("impulse_min must not exceed impulse_max")
        if self.rest_velocity > self.stop_velocity:
            raise ValueError("rest_velocity must not exceed stop_velocity")
        return self


class TimedSpinSettings(BaseModel):
    """Fixed-duration spin model constants."""

    duration_ms: float = Field(default=5000.0, gt=0.0)
    min_extra_turns: float = Field(default=7.0, ge=0.0)
    extra_turns_range: float = Field(default=5.0, ge=0.0)


class StorageSettings(BaseModel):
    """Prize list persistence."""

    prizes_path: Path = Field(default_factory=lambda: Path.cwd() / "prizes.json")
    record_key: str = "zeroday_prizes"


class AudioSettings(BaseModel):
    """Audio collaborator settings."""

    enabled: bool = True
    # Optional spin.* / win.* files override the generated sounds
    assets_path: Path = Field(default_factory=lambda: Path.cwd() / "assets" / "sounds")
    spin_volume: float = Field(default=0.5, ge=0.0, le=1.0)
    volume: float = Field(default=1.0, ge=0.0, le=1.0)


class SimulatorSettings(BaseModel):
    """Desktop simulator window."""

    width: int = 960
    height: int = 720
    fps: int = 60
    wheel_size: int = 480
    title: str = "Prize Wheel"
    fullscreen: bool = False


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="PRIZEWHEEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    debug: bool = False

    # Spin model, chosen once per controller
    policy: Literal["decay", "timed"] = "decay"

    # Fixed seed for reproducible spins (None = system entropy)
    seed: int | None = None

    # Nested settings
    physics: PhysicsSettings = Field(default_factory=PhysicsSettings)
    timed: TimedSpinSettings = Field(default_factory=TimedSpinSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    simulator: SimulatorSettings = Field(default_factory=SimulatorSettings)

    @property
    def is_timed(self) -> bool:
        """Check if the fixed-duration spin model is selected."""
        return self.policy == "timed"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
