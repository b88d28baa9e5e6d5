"""
Configuration management.

Loads settings from environment variables and .env file.
Prefix: MEMORIA_
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MEMORIA_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Tier capacities
    max_active_memories: int = Field(default=3, description="Active tier capacity")
    max_situational_memories: int = Field(default=20, description="Situational tier capacity")
    max_event_log_memories: int = Field(default=50, description="Event log tier capacity")
    situational_overflow_factor: float = Field(
        default=1.5,
        description="Situational backlog warning threshold, as a multiple of capacity",
    )

    # Decay (per trigger)
    situational_decay: float = Field(default=0.01, description="Situational activity decay")
    event_log_decay: float = Field(default=0.005, description="Event log activity decay")
    archive_decay: float = Field(default=0.001, description="Archive activity decay")
    situational_threshold: float = Field(default=0.1, description="Situational eviction threshold")
    event_log_threshold: float = Field(default=0.05, description="Event log eviction threshold")

    # Trigger cadence in simulation ticks
    decay_interval_ticks: int = Field(default=2500, description="Ticks between decay passes")
    summarization_interval_ticks: int = Field(
        default=60000, description="Ticks between situational drains"
    )
    cache_cleanup_interval_ticks: int = Field(
        default=2500, description="Ticks between conversation cache cleanups"
    )

    # Features
    enable_conversation_memory: bool = Field(default=True, description="Record conversations")
    use_ai_summarization: bool = Field(default=False, description="Use an LLM for summaries")
    deep_archive_fallback: bool = Field(
        default=False,
        description="Use the rule-based summary for archive drains instead of dropping groups",
    )

    # Summarizer backend
    summarizer_provider: str = Field(
        default="openai", description="Summarizer backend: openai, google or litellm"
    )
    summarizer_api_key: str = Field(default="", description="Summarizer API key")
    summarizer_base_url: str = Field(default="", description="Override provider base URL")
    summarizer_model: str = Field(default="gpt-3.5-turbo", description="Summarizer model")
    summarizer_timeout: float = Field(default=30.0, description="Request timeout in seconds")
    summarizer_max_tokens: int = Field(default=200, description="Max tokens per summary")
    summarizer_temperature: float = Field(default=0.7, description="Sampling temperature")
    summarizer_workers: int = Field(default=2, description="Background summarizer threads")

    # Storage
    data_dir: Path = Field(default=Path("data"), description="Log and scratch directory")

    @field_validator(
        "max_active_memories",
        "max_situational_memories",
        "max_event_log_memories",
        "summarizer_workers",
    )
    @classmethod
    def _clamp_capacity(cls, value: int) -> int:
        return max(1, value)

    @field_validator("situational_overflow_factor")
    @classmethod
    def _clamp_overflow_factor(cls, value: float) -> float:
        return max(1.0, value)

    @property
    def log_path(self) -> Path:
        return self.data_dir / "memoria.log"


def get_settings() -> Settings:
    """Get settings instance from the environment."""
    return Settings()
