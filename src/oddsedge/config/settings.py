"""Engine configuration schema and validation."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from oddsedge.odds.devig import DEFAULT_METHODS, DevigMethod
from oddsedge.odds.sharp import SHARP_PRESETS


class EngineConfig(BaseSettings):
    """Engine configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    env: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    devig_methods: list[DevigMethod] = Field(
        default=list(DEFAULT_METHODS),
        min_length=1,
        description="Devig methods to run; the displayed EV is the worst across these",
    )
    sharp_preset: str = Field(
        default="pinnacle",
        description="Sharp reference preset used as devig input",
    )
    kelly_fraction: float = Field(
        default=0.25,
        gt=0.0,
        le=1.0,
        description="Fractional Kelly multiplier (0.25 = quarter-Kelly)",
    )
    kelly_bankroll: float = Field(
        default=1000.0,
        gt=0.0,
        description="Bankroll used for recommended stakes",
    )
    min_ev: float = Field(
        default=0.0,
        description="Minimum worst-case EV% for an opportunity to be listed",
    )
    max_ev: float = Field(
        default=25.0,
        description="Maximum worst-case EV%; higher values are treated as data errors",
    )
    min_books_per_side: int = Field(
        default=2,
        ge=1,
        description="Minimum eligible books quoting a side before it is evaluated",
    )
    power_max_iterations: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Iteration cap for the power-method bisection",
    )
    power_tolerance: float = Field(
        default=1e-10,
        gt=0.0,
        description="Convergence tolerance for the power-method bisection",
    )
    ev_change_tolerance: float = Field(
        default=0.01,
        ge=0.0,
        description="EV% movement reported as a change between snapshots",
    )

    @field_validator("sharp_preset")
    @classmethod
    def validate_sharp_preset(cls, v: str) -> str:
        """Ensure the preset is known."""
        if v not in SHARP_PRESETS:
            raise ValueError(f"sharp_preset must be one of {sorted(SHARP_PRESETS)}")
        return v

    @field_validator("max_ev")
    @classmethod
    def validate_max_ev(cls, v: float, info) -> float:
        """Ensure max_ev >= min_ev."""
        if "min_ev" in info.data and v < info.data["min_ev"]:
            raise ValueError("max_ev must be >= min_ev")
        return v


_config: EngineConfig | None = None


def get_config() -> EngineConfig:
    """Get or create the singleton EngineConfig instance."""
    global _config
    if _config is None:
        _config = EngineConfig()
    return _config


def reset_config() -> None:
    """Drop the cached config so the next get_config() re-reads the environment."""
    global _config
    _config = None
