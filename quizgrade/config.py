"""
Configuration management for Quiz Grader.

Uses Pydantic Settings for type-safe configuration loading from environment variables.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from quizgrade.models import TakeMode


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every field has a default so the CLI works out of the box
    against ./data/library.json.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Storage Configuration
    # ==========================================================================
    library_path: Path = Field(
        default=Path("./data/library.json"),
        description="Published lesson library (JSON)",
    )

    attempts_path: Path = Field(
        default=Path("./data/attempts.json"),
        description="Local attempt history file (JSON)",
    )

    max_library_size_mb: float = Field(
        default=5.0,
        ge=0.01,
        le=100.0,
        description="Maximum allowed library file size in megabytes",
    )

    # ==========================================================================
    # Grading Configuration
    # ==========================================================================
    default_take_mode: TakeMode = Field(
        default=TakeMode.UNLIMITED,
        description="Attempt policy for lessons that do not declare one",
    )

    pass_threshold_percent: int = Field(
        default=70,
        ge=0,
        le=100,
        description="Percentage at or above which a score is shown as passing",
    )

    @field_validator("attempts_path")
    @classmethod
    def validate_attempts_path(cls, v: Path) -> Path:
        """Ensure the attempt history directory exists or can be created."""
        v.parent.mkdir(parents=True, exist_ok=True)
        return v


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once.
    """
    return Settings()
