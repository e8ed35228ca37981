"""
Open-Meteo provider for game-time weather.

Open-Meteo is free and needs no API key. Indoor sports and dome teams never
hit the network; they get a fixed climate-controlled record.

Usage:
    provider = OpenMeteoProvider()
    weather = await provider.get_game_weather(kickoff, venue="Lambeau Field",
                                              home_team_id="nfl-gb", sport=Sport.NFL)

API: https://open-meteo.com/en/docs
"""

import logging
from datetime import datetime
from typing import Optional

import httpx

from sportscast.config import get_settings
from sportscast.etl.base import HTTPProvider, ProviderError
from sportscast.features.weather import INDOOR_CONDITIONS, WeatherConditions, is_outdoor_sport
from sportscast.models import Sport
from sportscast.utils.cache import TTLCache

logger = logging.getLogger(__name__)

HOURLY_VARIABLES = (
    "temperature_2m,apparent_temperature,wind_speed_10m,wind_direction_10m,"
    "relative_humidity_2m,precipitation,precipitation_probability,cloud_cover,weather_code"
)

# Slugs and ESPN ids of teams playing under a roof
DOME_TEAMS = {
    Sport.NFL: (
        "dallas-cowboys", "atlanta-falcons", "arizona-cardinals", "detroit-lions",
        "los-angeles-rams", "new-orleans-saints", "indianapolis-colts",
        "minnesota-vikings", "las-vegas-raiders",
        "6", "1", "22", "8", "14", "18", "11", "16", "13",
    ),
    Sport.MLB: (
        "tampa-bay-rays", "texas-rangers", "houston-astros",
        "arizona-diamondbacks", "toronto-blue-jays", "miami-marlins",
    ),
}

DEFAULT_COORDINATES = (40.7128, -74.0060)  # NYC

STADIUM_COORDINATES = {
    # NFL (outdoor)
    "Arrowhead Stadium": (39.0489, -94.4839),
    "Highmark Stadium": (42.7738, -78.7870),
    "Lambeau Field": (44.5013, -88.0622),
    "Gillette Stadium": (42.0909, -71.2643),
    "Soldier Field": (41.8623, -87.6167),
    "FirstEnergy Stadium": (41.5061, -81.6995),
    "Heinz Field": (40.4468, -80.0158),
    "M&T Bank Stadium": (39.2780, -76.6227),
    "FedExField": (38.9076, -76.8645),
    "Lincoln Financial Field": (39.9008, -75.1675),
    "MetLife Stadium": (40.8135, -74.0745),
    "Bank of America Stadium": (35.2258, -80.8528),
    "Raymond James Stadium": (27.9759, -82.5033),
    "Hard Rock Stadium": (25.9580, -80.2389),
    "Nissan Stadium": (36.1665, -86.7713),
    "TIAA Bank Field": (30.3239, -81.6373),
    "Empower Field at Mile High": (39.7439, -105.0201),
    "Levi's Stadium": (37.4033, -121.9694),
    "Lumen Field": (47.5952, -122.3316),
    # MLB
    "Fenway Park": (42.3467, -71.0972),
    "Wrigley Field": (41.9484, -87.6553),
    "Yankee Stadium": (40.8296, -73.9262),
    "Dodger Stadium": (34.0739, -118.2400),
    "Oracle Park": (37.7786, -122.3893),
    "Coors Field": (39.7559, -104.9942),
    "Petco Park": (32.7076, -117.1570),
}


def is_indoor_venue(team_id: str, sport: Sport) -> bool:
    if not is_outdoor_sport(sport):
        return True
    team = team_id.lower()
    return any(dome.lower() in team or dome == team_id for dome in DOME_TEAMS.get(sport, ()))


def venue_coordinates(venue: Optional[str]) -> tuple:
    """Exact venue match, then partial match either way, then the default."""
    if not venue:
        return DEFAULT_COORDINATES
    if venue in STADIUM_COORDINATES:
        return STADIUM_COORDINATES[venue]

    lowered = venue.lower()
    for name, coords in STADIUM_COORDINATES.items():
        if name.lower() in lowered or lowered in name.lower():
            return coords
    return DEFAULT_COORDINATES


def map_weather_code(code: Optional[int]) -> str:
    """WMO weather code to a condition name."""
    if code is None:
        return "cloudy"
    if code == 0:
        return "clear"
    if 1 <= code <= 3:
        return "partly_cloudy"
    if code in (45, 48):
        return "fog"
    if 51 <= code <= 55 or 61 <= code <= 65 or 80 <= code <= 82:
        return "rain"
    if 56 <= code <= 57 or 66 <= code <= 67:
        return "sleet"
    if 71 <= code <= 77 or 85 <= code <= 86:
        return "snow"
    if 95 <= code <= 99:
        return "heavy_rain"  # thunderstorm
    return "cloudy"


def _hourly_value(hourly: dict, key: str, index: int, default):
    values = hourly.get(key) or []
    if index >= len(values) or values[index] is None:
        return default
    return values[index]


def parse_forecast(data: dict, hour: int) -> WeatherConditions:
    """Hourly forecast at the given hour index, with neutral defaults for gaps."""
    hourly = data.get("hourly") or {}
    code = _hourly_value(hourly, "weather_code", hour, None)
    return WeatherConditions(
        temperature=_hourly_value(hourly, "temperature_2m", hour, 70),
        feels_like=_hourly_value(hourly, "apparent_temperature", hour, 70),
        wind_speed=_hourly_value(hourly, "wind_speed_10m", hour, 0),
        wind_direction=_hourly_value(hourly, "wind_direction_10m", hour, 0),
        humidity=_hourly_value(hourly, "relative_humidity_2m", hour, 50),
        precipitation=_hourly_value(hourly, "precipitation", hour, 0),
        precipitation_probability=int(_hourly_value(hourly, "precipitation_probability", hour, 0)),
        cloud_cover=_hourly_value(hourly, "cloud_cover", hour, 0),
        condition=map_weather_code(int(code) if code is not None else None),
        is_indoor=False,
    )


class OpenMeteoProvider(HTTPProvider):
    """
    Game-time weather from the Open-Meteo hourly forecast.

    Units requested: °F, mph, mm. The hour index is the kickoff hour of the
    start_time as given.
    """

    name = "open_meteo"

    def __init__(
        self,
        cache: Optional[TTLCache] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        settings = get_settings()
        super().__init__(client=client, timeout=settings.HTTP_TIMEOUT_SECONDS)
        self.url = settings.OPEN_METEO_URL
        self.cache_ttl = settings.WEATHER_CACHE_TTL_SECONDS
        self.cache = cache or TTLCache(self.cache_ttl, name="weather")

    async def get_game_weather(
        self,
        game_time: datetime,
        venue: Optional[str] = None,
        home_team_id: Optional[str] = None,
        sport: Sport = Sport.NFL,
    ) -> Optional[WeatherConditions]:
        """
        Weather at kickoff, or None when the forecast is unavailable.

        Indoor sports and dome teams return INDOOR_CONDITIONS without a request.
        """
        if not is_outdoor_sport(sport):
            return INDOOR_CONDITIONS
        if home_team_id and is_indoor_venue(home_team_id, sport):
            return INDOOR_CONDITIONS

        lat, lng = venue_coordinates(venue)
        date_str = game_time.strftime("%Y-%m-%d")
        cache_key = f"{lat}-{lng}-{date_str}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        params = {
            "latitude": lat,
            "longitude": lng,
            "hourly": HOURLY_VARIABLES,
            "temperature_unit": "fahrenheit",
            "wind_speed_unit": "mph",
            "precipitation_unit": "mm",
            "start_date": date_str,
            "end_date": date_str,
        }
        try:
            data = await self._get_json(self.url, params=params, entity="forecast")
        except ProviderError as e:
            logger.error(f"[WEATHER] Error fetching weather for {venue or 'default venue'}: {e}")
            return None

        weather = parse_forecast(data, game_time.hour)
        self.cache.put(cache_key, weather, ttl=self.cache_ttl)
        return weather
