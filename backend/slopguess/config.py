"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache), single instance per process
    - Provider selectors are closed enums: an unknown name fails at load, not at first use
    - default_difficulty is always a key of difficulty_word_counts

Design Decisions:
    - difficulty_word_counts is read as JSON from the environment
    - Defaults run the whole game offline (mock embeddings, mock images, template prompts)
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from slopguess.core.domain_types import (
    EmbeddingProviderKind, ImageProviderKind, ImageQuality, ScoringCurve,
)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://slopguess:slopguess@db:5432/slopguess"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Providers
    embedding_provider: EmbeddingProviderKind = EmbeddingProviderKind.MOCK
    image_provider: ImageProviderKind = ImageProviderKind.MOCK
    openai_api_key: str = ""
    openai_max_retries: int = 2
    openai_timeout_seconds: float = 120.0
    embedding_model: str = "text-embedding-3-small"
    mock_embedding_dimensions: int = Field(default=128, ge=8)
    image_model: str = "gpt-image-1"
    image_quality: ImageQuality = ImageQuality.LOW
    image_storage_dir: str = "static/images"
    image_public_prefix: str = "/images"

    # Anthropic (generative prompt path; empty key keeps prompts templated)
    anthropic_api_key: str = ""
    anthropic_max_retries: int = 2
    anthropic_timeout_seconds: int = 30
    anthropic_base_delay_ms: int = 1000
    anthropic_max_delay_ms: int = 10_000
    prompt_model: str = "claude-haiku-4-5"
    prompt_max_tokens: int = 200
    prompt_temperature: float = 1.0
    prompt_max_length: int = 500
    recent_prompt_count: int = 10

    # Rounds
    round_duration_hours: float = Field(default=1.0, gt=0)
    round_check_interval_minutes: float = Field(default=5.0, gt=0)
    default_difficulty: str = "normal"
    difficulty_word_counts: dict[str, int] = {"easy": 4, "normal": 7, "hard": 10}
    combination_lookback_rounds: int = Field(default=30, ge=1)
    combination_max_overlap: float = Field(default=0.5, gt=0, le=1)
    combination_max_attempts: int = Field(default=5, ge=1)
    word_cooldown_hours: float = Field(default=24.0, ge=0)
    scheduler_enabled: bool = True
    seed_word_bank: bool = True

    # Guesses
    max_guess_length: int = Field(default=200, ge=1)
    scoring_curve: ScoringCurve = ScoringCurve.CURVED

    # API
    cors_origins: list[str] = ["http://localhost:5173"]
    admin_api_key: str = ""

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @model_validator(mode="after")
    def check_difficulties(self) -> "Settings":
        if not self.difficulty_word_counts:
            raise ValueError("difficulty_word_counts must define at least one difficulty")
        bad = {k: v for k, v in self.difficulty_word_counts.items() if v < 1}
        if bad:
            raise ValueError(f"difficulty word counts must be >= 1: {bad}")
        if self.default_difficulty not in self.difficulty_word_counts:
            raise ValueError(
                f"default_difficulty '{self.default_difficulty}' is not one of "
                f"{sorted(self.difficulty_word_counts)}"
            )
        return self

    @property
    def round_duration(self) -> timedelta:
        return timedelta(hours=self.round_duration_hours)

    @property
    def word_cooldown(self) -> timedelta:
        return timedelta(hours=self.word_cooldown_hours)

    @property
    def round_check_interval(self) -> timedelta:
        return timedelta(minutes=self.round_check_interval_minutes)


@lru_cache
def get_settings() -> Settings:
    return Settings()
