"""
Configuration settings for the PII Redaction Layer.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.

Settings are frozen: components receive the instance in their constructor
and never mutate it. Build a new ``Settings(...)`` with keyword overrides
to derive a variant, so cross-field validation runs again.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PROMPTS_DIR = Path(__file__).parent / "prompts"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # === Application ===
    APP_NAME: str = "PII Redaction Layer"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Segmentation ===
    MAX_SEGMENT_SIZE: int = Field(default=5000, gt=0)  # chars per segment
    OVERLAP_SIZE: int = Field(default=500, ge=0)  # ~10% overlap for context
    CHUNK_THRESHOLD: int = Field(default=5000, ge=0)  # segment only at/above this length
    ENABLE_SEGMENTATION: bool = True

    # === Context detection (external text-analysis capability) ===
    ENABLE_CONTEXT_DETECTION: bool = True
    MAX_CONCURRENT_SEGMENTS: int = Field(default=5, ge=1)
    BASE_TIMEOUT_MS: int = Field(default=30000, ge=0)
    TIMEOUT_PER_KB_MS: int = Field(default=10000, ge=0)
    MAX_TIMEOUT_MS: int = Field(default=600000, gt=0)  # 10 minute absolute max
    ENABLE_ADAPTIVE_TIMEOUT: bool = True
    MAX_RETRIES: int = Field(default=2, ge=0)
    RETRY_BACKOFF_BASE_MS: int = Field(default=1000, ge=0)  # 1s, 2s, 4s...
    MIN_CONTEXT_TEXT_LENGTH: int = Field(default=20, ge=0)  # shorter text is never sent

    # === Pattern detection ===
    ENABLE_PATTERN_DETECTION: bool = True
    PATTERN_REQUIRE_LUHN: bool = False

    # === Reconciliation & redaction ===
    PROPAGATE_ENTITY_OCCURRENCES: bool = False
    REDACTION_STRATEGY: str = Field(default="replace", pattern="^(replace|hash|mask)$")
    REDACTION_HASH_KEY: str = "change-me"

    # === LLM provider ===
    LLM_PROVIDER: str = Field(default="ollama", pattern="^(ollama|openai)$")
    OLLAMA_BASE_URL: str = "http://ollama:11434"
    OLLAMA_MODEL: str = "qwen2.5:7b"
    OPENAI_BASE_URL: str = "https://api.openai.com"
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_API_KEY: str = ""

    # === LLM Generation Parameters ===
    LLM_TEMPERATURE: float = 0.0  # Deterministic generation
    LLM_SEED: int = 42
    LLM_MAX_TOKENS: int = 2048

    # === Prompts ===
    PROMPT_TEMPLATES_DIR: str = str(DEFAULT_PROMPTS_DIR)


    @model_validator(mode="after")
    def _check_cross_field_limits(self) -> "Settings":
        if self.OVERLAP_SIZE >= self.MAX_SEGMENT_SIZE:
            raise ValueError(
                f"OVERLAP_SIZE ({self.OVERLAP_SIZE}) must be smaller than "
                f"MAX_SEGMENT_SIZE ({self.MAX_SEGMENT_SIZE})"
            )
        if self.BASE_TIMEOUT_MS > self.MAX_TIMEOUT_MS:
            raise ValueError(
                f"BASE_TIMEOUT_MS ({self.BASE_TIMEOUT_MS}) exceeds "
                f"MAX_TIMEOUT_MS ({self.MAX_TIMEOUT_MS})"
            )
        return self


@lru_cache()
def get_settings() -> Settings:
    """
    Get settings singleton.

    Only entry points (CLI, service wiring) should call this; library
    components take a Settings instance in their constructor.
    """
    return Settings()
