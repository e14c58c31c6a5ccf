"""
config.py — Pitchly Settings

Purpose:
- One `settings` object for the quote fetch layer, the AI layer and logging.
- Values come from `backend/.env` (or `.env` in the working directory) and
  the process environment, which wins.

This module does NOT:
- Make external API calls.
- Hold any valuation assumptions (those live with the scenarios).
"""

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# backend/pitchly/core/config.py -> backend/.env
_BACKEND_ENV = Path(__file__).resolve().parents[2] / ".env"
_ENV_FILE_PATH = str(_BACKEND_ENV) if _BACKEND_ENV.exists() else ".env"


class Settings(BaseSettings):
    """
    Application settings.

    Only the fetch layer and the AI layer read these values; the valuation
    engines are configured exclusively through their assumption objects.
    """
    LOG_LEVEL: str = Field(
        "INFO",
        description="Root log level (DEBUG, INFO, WARNING, ERROR)",
    )

    # Quote summary API
    QUOTE_PROVIDER: str = Field(
        "api",
        description="Quote source: 'api' (ticker summary service) or 'yfinance'",
    )
    QUOTE_API_BASE_URL: str = Field(
        "https://flaskintrige.onrender.com/api",
        description="Base URL of the ticker summary service",
    )
    QUOTE_REQUEST_TIMEOUT_SECONDS: int = Field(
        30,
        description="HTTP timeout for ticker summary requests (seconds)",
    )
    QUOTE_MAX_RETRIES: int = Field(
        3,
        description="Retries after the first failed ticker summary request",
    )
    QUOTE_BACKOFF_BASE: float = Field(
        2.0,
        description="First retry delay in seconds; doubles on each attempt",
    )
    PEER_REQUEST_SLEEP_SECONDS: float = Field(
        0.25,
        description="Polite delay between sequential peer requests (seconds)",
    )
    REALTIME_REFRESH_SECONDS: int = Field(
        30,
        description="Suggested polling cadence for price refreshes (seconds)",
    )

    # LLM API - for SWOT, memo, news digest, pitch deck and LBO starting points
    LLM_ENABLED: bool = Field(
        True,
        description="Enable generative analysis (set False to disable for testing)",
    )
    OPENAI_API_KEY_PATH: str = Field(
        "",
        description="Path to file containing OpenAI API key (alternative to OPENAI_API_KEY)",
    )
    OPENAI_API_KEY: str = Field(
        "",
        description="OpenAI API key (optional; analysis endpoints degrade gracefully without it)",
    )
    OPENAI_MODEL: str = Field(
        "gpt-4o-mini",
        description="OpenAI model used for analysis generation",
    )
    LLM_TIMEOUT_SECONDS: int = Field(
        60,
        description="Timeout for LLM API calls (seconds)",
    )
    LLM_MAX_RETRIES: int = Field(
        3,
        description="Maximum retry attempts for LLM API calls",
    )
    ANALYSIS_CACHE_TTL_SECONDS: int = Field(
        0,
        description="Age after which cached generated analysis is regenerated (0 keeps it for the process lifetime)",
    )

    @field_validator('OPENAI_API_KEY', 'OPENAI_API_KEY_PATH', mode='before')
    @classmethod
    def strip_secret(cls, v: Any) -> str:
        return v.strip() if isinstance(v, str) else (v or "")

    @field_validator('QUOTE_PROVIDER', mode='before')
    @classmethod
    def normalize_provider(cls, v: Any) -> str:
        provider = str(v or "api").strip().lower()
        if provider not in {"api", "yfinance"}:
            raise ValueError(f"QUOTE_PROVIDER must be 'api' or 'yfinance', got {v!r}")
        return provider

    @field_validator('QUOTE_MAX_RETRIES', 'QUOTE_BACKOFF_BASE', 'PEER_REQUEST_SLEEP_SECONDS', 'ANALYSIS_CACHE_TTL_SECONDS')
    @classmethod
    def non_negative(cls, v: Any) -> Any:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @model_validator(mode='after')
    def read_key_file(self) -> 'Settings':
        """An explicit OPENAI_API_KEY takes precedence over OPENAI_API_KEY_PATH."""
        if self.OPENAI_API_KEY or not self.OPENAI_API_KEY_PATH:
            return self

        key_file = Path(self.OPENAI_API_KEY_PATH).expanduser()
        try:
            self.OPENAI_API_KEY = key_file.read_text(encoding='utf-8').strip()
        except OSError as e:
            raise ValueError(f"Cannot read OPENAI_API_KEY_PATH {key_file}: {e}") from e
        return self

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
