"""Application configuration via environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Blog Refresh API"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Blog fetching
    fetch_timeout_seconds: float = 10.0
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

    # Link checking
    link_check_max_links: int = Field(default=20, ge=0, le=20)  # Hard cap, never above 20
    link_head_timeout_seconds: float = 5.0
    link_get_timeout_seconds: float = 10.0
    link_max_redirects: int = 5

    # Structure analysis guardrails
    structure_strict_pairs: bool = True  # Every suggestion must name exactly 2 sections
    structure_max_merge_sections: int = 3  # Upper bound when strict pairs is off
    structure_require_confidence: bool = True
    structure_max_merge_ratio: float = 0.7  # Share of sections merges may touch

    # LLM API Keys
    openai_api_key: str | None = None
    anthropic_api_key: str | None = None
    llm_provider: Literal["openai", "anthropic"] = "openai"
    llm_model: str = "gpt-4o-mini"
    llm_timeout_seconds: float = 60.0
    llm_max_tokens: int = 8192


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
