"""Configuration management using Pydantic Settings."""

from typing import ClassVar

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from devquest.shared.exceptions import ConfigError

# Singleton instance
_settings: "Settings | None" = None


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DEVQUEST_",
        case_sensitive=False,
        extra="ignore",
    )

    # Badge engine
    near_completion_threshold: float = 75.0

    # Challenge target recommendation
    daily_target_multiplier: float = 1.0
    weekly_target_multiplier: float = 1.1
    min_commits_target: int = 1
    min_prs_target: int = 1
    min_reviews_target: int = 1
    min_issues_target: int = 1
    historical_window_days: int = 28

    # Snapshot store
    snapshot_file_path: str = "data/snapshots.json"

    # Application settings
    log_level: str = "INFO"

    # Valid log levels
    VALID_LOG_LEVELS: ClassVar[set[str]] = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        v_upper = v.upper()
        if v_upper not in cls.VALID_LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level: {v}. Must be one of {', '.join(cls.VALID_LOG_LEVELS)}"
            )
        return v_upper

    @field_validator("near_completion_threshold")
    @classmethod
    def validate_near_completion_threshold(cls, v: float) -> float:
        """Validate near-completion threshold is a percentage (0-100)."""
        if not 0.0 <= v <= 100.0:
            raise ConfigError(f"Near completion threshold must be between 0 and 100, got {v}")
        return v

    @field_validator("daily_target_multiplier", "weekly_target_multiplier")
    @classmethod
    def validate_target_multiplier(cls, v: float) -> float:
        """Validate target multipliers (0.1-10.0)."""
        if not 0.1 <= v <= 10.0:
            raise ConfigError(f"Target multiplier must be between 0.1 and 10.0, got {v}")
        return v

    @field_validator(
        "min_commits_target",
        "min_prs_target",
        "min_reviews_target",
        "min_issues_target",
    )
    @classmethod
    def validate_min_targets(cls, v: int) -> int:
        """Validate minimum challenge targets (1-1000)."""
        if not 1 <= v <= 1000:
            raise ConfigError(f"Minimum challenge target must be between 1 and 1000, got {v}")
        return v

    @field_validator("historical_window_days")
    @classmethod
    def validate_historical_window(cls, v: int) -> int:
        """Validate historical window (7-365 days)."""
        if not 7 <= v <= 365:
            raise ConfigError(f"Historical window must be between 7 and 365 days, got {v}")
        return v


def get_settings() -> Settings:
    """Get or create the global Settings instance (cached singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
