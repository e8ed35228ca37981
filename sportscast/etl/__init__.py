"""ETL module for sports data providers."""

from sportscast.etl.base import HTTPProvider, ProviderError
from sportscast.etl.espn_provider import ESPNProvider
from sportscast.etl.game_context import fetch_game_context
from sportscast.etl.injuries_provider import InjuryProvider
from sportscast.etl.open_meteo_provider import OpenMeteoProvider

__all__ = [
    "HTTPProvider",
    "ProviderError",
    "ESPNProvider",
    "InjuryProvider",
    "OpenMeteoProvider",
    "fetch_game_context",
]
