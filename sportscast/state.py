"""Shared singletons for the SportsCast application.

Singleton-by-import pattern: main.py and routers import from this module to
share the same provider instances, caches and telemetry counters. Routes get
them through the get_* dependencies so tests can override them.
"""

from sportscast.config import get_settings
from sportscast.etl.espn_provider import ESPNProvider
from sportscast.etl.injuries_provider import InjuryProvider
from sportscast.etl.open_meteo_provider import OpenMeteoProvider
from sportscast.llm.anthropic_client import AnthropicClient
from sportscast.utils.cache import TTLCache

settings = get_settings()

# =============================================================================
# CACHES
# =============================================================================

schedule_cache = TTLCache(settings.TEAM_SCHEDULE_CACHE_TTL_SECONDS, name="team_schedule")
injury_cache = TTLCache(settings.INJURY_CACHE_TTL_SECONDS, name="injuries")
weather_cache = TTLCache(settings.WEATHER_CACHE_TTL_SECONDS, name="weather")
history_cache = TTLCache(settings.HISTORY_CACHE_TTL_SECONDS, name="history")

CACHES = (schedule_cache, injury_cache, weather_cache, history_cache)

# =============================================================================
# PROVIDERS (one shared HTTP client each)
# =============================================================================

espn_provider = ESPNProvider(cache=schedule_cache)
injury_provider = InjuryProvider(cache=injury_cache)
weather_provider = OpenMeteoProvider(cache=weather_cache)
llm_client = AnthropicClient()

# =============================================================================
# TELEMETRY COUNTERS (aggregated, no high-cardinality labels)
# =============================================================================

_telemetry = {
    "analyze_enhanced": 0,
    "analyze_basic": 0,
    "analyze_context_fallback": 0,
    "predictions_single": 0,
    "predictions_batch": 0,
    "history_cache_hit": 0,
    "history_cache_miss": 0,
}


def _incr(key: str) -> None:
    """Increment a telemetry counter."""
    _telemetry[key] = _telemetry.get(key, 0) + 1


def get_espn_provider() -> ESPNProvider:
    return espn_provider


def get_injury_provider() -> InjuryProvider:
    return injury_provider


def get_weather_provider() -> OpenMeteoProvider:
    return weather_provider


def get_llm_client() -> AnthropicClient:
    return llm_client


def get_history_cache() -> TTLCache:
    return history_cache


def invalidate_caches() -> list:
    """Clear every provider cache; returns the stats from before clearing."""
    stats = [cache.stats() for cache in CACHES]
    for cache in CACHES:
        cache.invalidate()
    return stats


async def close_clients() -> None:
    await espn_provider.close()
    await injury_provider.close()
    await weather_provider.close()
    await llm_client.close()
