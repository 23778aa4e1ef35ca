"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: the engine runs with no env at all
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from medsync.core.domain_types import HISTORY_CAPACITY, OperatingContext


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Bootstrap: JSON file with the initial network (None = empty network)
    seed_file: str | None = None

    # Sync engine
    history_capacity: int = Field(HISTORY_CAPACITY, ge=1)
    settle_delay_seconds: float = Field(1.5, ge=0)
    initial_context: OperatingContext = OperatingContext.OVERSIGHT

    # Consumption simulator
    simulator_interval_seconds: float = Field(3.0, gt=0)
    simulator_depletion_probability: float = Field(0.3, ge=0, le=1)
    simulator_seed: int | None = None

    # Anthropic (network analysis collaborator)
    anthropic_api_key: str = "sk-ant-placeholder"
    anthropic_max_retries: int = 3
    anthropic_timeout_seconds: int = 30
    anthropic_base_delay_ms: int = 1000
    anthropic_max_delay_ms: int = 60_000
    analysis_model: str = "claude-haiku-4-5-20251001"
    analysis_max_tokens: int = 300

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
