"""
Configuration settings for the quiz results analytics toolkit.

Uses Pydantic Settings for environment variable management with .env file support.
Heuristic thresholds live in a plain Pydantic model so the analytics engine can
take them as an argument without ever touching the environment.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalyticsThresholds(BaseModel):
    """Tunable thresholds for problem flags, mastery bands and trends."""

    # ========================================
    # Question problem flags
    # ========================================
    low_success_rate: float = Field(
        default=40.0,
        ge=0,
        le=100,
        description="Success rate below which a question gets the high 'low_success' flag",
    )
    moderate_success_rate: float = Field(
        default=60.0,
        ge=0,
        le=100,
        description="Success rate below which a question gets the 'moderate_success' flag",
    )
    slow_answer_seconds: float = Field(
        default=15.0,
        ge=0,
        description="Average time above which slow answers count as conceptual difficulty",
    )
    slow_answer_success_rate: float = Field(
        default=50.0,
        ge=0,
        le=100,
        description="Success rate below which slow answers raise 'time_vs_success'",
    )
    quick_answer_seconds: float = Field(
        default=8.0,
        ge=0,
        description="Average time below which answers count as quick",
    )
    quick_answer_success_rate: float = Field(
        default=70.0,
        ge=0,
        le=100,
        description="Success rate below which quick answers raise 'quick_wrong'",
    )
    common_wrong_answer_ratio: float = Field(
        default=0.4,
        gt=0,
        le=1,
        description="Share of responses a single wrong answer needs to be flagged",
    )

    # ========================================
    # Quiz summary
    # ========================================
    needs_review_ratio: float = Field(
        default=0.3,
        ge=0,
        le=1,
        description="Share of problematic questions above which a quiz needs review",
    )

    # ========================================
    # Concept mastery bands
    # ========================================
    mastered_rate: float = Field(default=80.0, ge=0, le=100)
    proficient_rate: float = Field(default=60.0, ge=0, le=100)
    developing_rate: float = Field(default=40.0, ge=0, le=100)

    # ========================================
    # Concept dependency inference
    # ========================================
    dependency_strong_rate: float = Field(
        default=70.0,
        ge=0,
        le=100,
        description="Pairs where both concepts are at or above this rate are skipped",
    )
    dependency_weak_rate: float = Field(
        default=40.0,
        ge=0,
        le=100,
        description="Pairs where both concepts are below this rate are skipped",
    )
    weak_performance: float = Field(
        default=0.5,
        ge=0,
        le=1,
        description="Per-player concept performance below which the player counts as weak",
    )
    min_valid_pairs: int = Field(
        default=3,
        ge=1,
        description="Minimum players with data for both concepts",
    )
    co_occurrence_ratio: float = Field(
        default=0.4,
        ge=0,
        le=1,
        description="Share of both-weak players above which a dependency is emitted",
    )
    dependency_high_severity_rate: float = Field(
        default=50.0,
        ge=0,
        le=100,
        description="Dependencies are high severity when either concept is below this rate",
    )

    # ========================================
    # Concept insights
    # ========================================
    focus_area_rate: float = Field(default=60.0, ge=0, le=100)
    critical_focus_rate: float = Field(default=40.0, ge=0, le=100)
    strength_rate: float = Field(default=80.0, ge=0, le=100)

    # ========================================
    # Session comparison
    # ========================================
    trend_band: float = Field(
        default=2.0,
        ge=0,
        description="Success-rate change (points) needed to call a trend improving/declining",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Saved results
    # ========================================
    results_dir: str = Field(
        default="results",
        description="Directory holding saved quiz session files",
    )
    results_file_pattern: str = Field(
        default="results_*.json",
        description="Glob pattern for saved quiz session files",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # CLI display
    # ========================================
    cli_text_width: int = Field(
        default=60,
        ge=10,
        description="Maximum question text characters shown in tables",
    )

    # ========================================
    # Analytics heuristics (ANALYTICS__LOW_SUCCESS_RATE=35, ...)
    # ========================================
    analytics: AnalyticsThresholds = Field(default_factory=AnalyticsThresholds)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
