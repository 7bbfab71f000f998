"""Engine configuration with validation."""
from typing import Optional, Literal
from functools import lru_cache
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings. Every field has a default so no environment is required."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"

    # Respondent weighting
    WEIGHTING_TABLE_PATH: Optional[str] = Field(
        default=None,
        description="JSON weighting table replacing the bundled one"
    )
    DEFAULT_BASE_WEIGHT: float = Field(default=0.5, gt=0.0, le=1.0)
    DEFAULT_CONFIDENCE_BOOST: float = Field(default=25.0, ge=0.0, le=100.0)

    # Conflict detection (normalized [0, 1] scale)
    CONFLICT_MEDIUM_THRESHOLD: float = Field(default=0.2, gt=0.0, lt=1.0)
    CONFLICT_HIGH_THRESHOLD: float = Field(default=0.4, gt=0.0, lt=1.0)

    # Confidence accumulation
    CORROBORATION_BONUS: float = Field(default=20.0, ge=0.0, le=50.0)
    CONFLICT_DAMPING: float = Field(default=0.5, ge=0.0, le=1.0)

    # Completeness blending (percentage points)
    COMPLETENESS_SINGLE_CONTEXT: float = Field(default=60.0, ge=0.0, le=100.0)
    COMPLETENESS_FULL_CONTEXT: float = Field(default=90.0, ge=0.0, le=100.0)
    COMPLETENESS_EXTRA_CONTEXT_BONUS: float = Field(default=5.0, ge=0.0, le=20.0)

    # Derived profile fields
    STRENGTHS_COUNT: int = Field(default=3, ge=1, le=8)

    # Persistence
    MAX_SAVE_RETRIES: int = Field(default=3, ge=0, le=10)
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_KEY_PREFIX: str = "profile"

    @model_validator(mode="after")
    def validate_conflict_thresholds(self):
        """Medium threshold must sit below the high threshold."""
        if self.CONFLICT_MEDIUM_THRESHOLD >= self.CONFLICT_HIGH_THRESHOLD:
            raise ValueError(
                "CONFLICT_MEDIUM_THRESHOLD must be < CONFLICT_HIGH_THRESHOLD, got "
                f"{self.CONFLICT_MEDIUM_THRESHOLD} >= {self.CONFLICT_HIGH_THRESHOLD}"
            )
        return self

    @model_validator(mode="after")
    def validate_completeness_points(self):
        """Two contexts must score above one, and the ceiling must stay within 100."""
        if self.COMPLETENESS_SINGLE_CONTEXT >= self.COMPLETENESS_FULL_CONTEXT:
            raise ValueError("COMPLETENESS_SINGLE_CONTEXT must be < COMPLETENESS_FULL_CONTEXT")
        if self.COMPLETENESS_FULL_CONTEXT + self.COMPLETENESS_EXTRA_CONTEXT_BONUS > 100:
            raise ValueError("COMPLETENESS_FULL_CONTEXT + COMPLETENESS_EXTRA_CONTEXT_BONUS must be <= 100")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
