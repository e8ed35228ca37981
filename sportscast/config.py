"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ESPN site API (unofficial, no auth)
    ESPN_API_BASE: str = "https://site.api.espn.com/apis/site/v2/sports"
    ESPN_USER_AGENT: str = "Mozilla/5.0 (compatible; SportsPredictor/1.0)"
    ESPN_SCHEDULE_DAYS_AHEAD: int = 7
    ESPN_SCHEDULE_DAYS_BACK: int = 14  # Max scoreboards walked per team schedule
    ESPN_SOCCER_LEAGUE_LIMIT: int = 3  # Top N of SOCCER_LEAGUES are queried

    # Shared HTTP settings for data providers
    HTTP_TIMEOUT_SECONDS: float = 15.0

    # Open-Meteo (free, no API key)
    OPEN_METEO_URL: str = "https://api.open-meteo.com/v1/forecast"

    # Cache TTLs (seconds)
    TEAM_SCHEDULE_CACHE_TTL_SECONDS: int = 300
    INJURY_CACHE_TTL_SECONDS: int = 3600
    WEATHER_CACHE_TTL_SECONDS: int = 1800
    HISTORY_CACHE_TTL_SECONDS: int = 60

    # Narrative LLM (Anthropic Messages API)
    ANTHROPIC_API_KEY: str = ""
    ANTHROPIC_BASE_URL: str = "https://api.anthropic.com/v1/messages"
    ANTHROPIC_VERSION: str = "2023-06-01"
    LLM_ENABLED: bool = True  # Kill-switch; empty API key also disables
    LLM_MODEL: str = "claude-sonnet-4-20250514"
    LLM_MAX_TOKENS: int = 1024
    LLM_SUMMARY_MAX_TOKENS: int = 256
    LLM_TIMEOUT_SECONDS: int = 60

    # Rate limiting
    RATE_LIMIT_PER_MINUTE: str = "60/minute"

    # API Security
    API_KEY: str = ""  # Optional API key for admin endpoints
    API_KEY_HEADER: str = "X-API-Key"

    # Telemetry / Observability
    METRICS_BEARER_TOKEN: str = ""  # Bearer token for /metrics endpoint

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
