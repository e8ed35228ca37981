"""Weather conditions and the weather factor.

Bad weather adds variance rather than favoring a side; the only signal is a
small home-familiarity nudge once the combined impact is significant.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

from sportscast.models import FactorResult, Sport

OUTDOOR_SPORTS = frozenset({Sport.NFL, Sport.MLB, Sport.SOCCER})

# Tunable modelling choice; not backed by data.
WEATHER_HOME_FAMILIARITY_NUDGE = 0.1
SIGNIFICANT_IMPACT = 0.2
WEATHER_CONFIDENCE = 0.8


@dataclass(frozen=True)
class WeatherThresholds:
    cold_temp: float
    hot_temp: float
    high_wind: float
    extreme_wind: float
    precipitation: float


# Indoor sports get thresholds that are never reached
WEATHER_THRESHOLDS = MappingProxyType({
    Sport.NFL: WeatherThresholds(32, 90, 15, 25, 0.1),
    Sport.MLB: WeatherThresholds(50, 95, 12, 20, 0.05),
    Sport.SOCCER: WeatherThresholds(40, 85, 20, 30, 0.2),
    Sport.NBA: WeatherThresholds(0, 100, 100, 100, 100),
    Sport.NHL: WeatherThresholds(0, 100, 100, 100, 100),
})

WEATHER_WEIGHTS = MappingProxyType({
    Sport.NFL: 0.08,
    Sport.MLB: 0.06,
    Sport.SOCCER: 0.05,
    Sport.NBA: 0.0,
    Sport.NHL: 0.0,
})

# condition -> (nfl, mlb, soccer); indoor sports and dry conditions are 0
CONDITION_IMPACT = MappingProxyType({
    "heavy_rain": (0.4, 0.5, 0.3),
    "rain": (0.25, 0.35, 0.2),
    "snow": (0.5, 0.6, 0.4),
    "sleet": (0.45, 0.55, 0.35),
    "fog": (0.15, 0.1, 0.1),
    "windy": (0.2, 0.15, 0.1),
})

WIND_DIRECTIONS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


@dataclass(frozen=True)
class WeatherConditions:
    temperature: float  # °F
    feels_like: float
    wind_speed: float  # mph
    wind_direction: float  # degrees, 0 = N
    humidity: float
    precipitation: float  # mm
    precipitation_probability: int
    cloud_cover: float
    condition: str
    is_indoor: bool = False


INDOOR_CONDITIONS = WeatherConditions(
    temperature=72,
    feels_like=72,
    wind_speed=0,
    wind_direction=0,
    humidity=50,
    precipitation=0,
    precipitation_probability=0,
    cloud_cover=0,
    condition="clear",
    is_indoor=True,
)


@dataclass(frozen=True)
class WeatherImpact:
    kind: str  # cold, heat, wind, precipitation
    severity: float
    description: str


def is_outdoor_sport(sport: Sport) -> bool:
    return sport in OUTDOOR_SPORTS


def wind_direction_name(degrees: float) -> str:
    return WIND_DIRECTIONS[round(degrees / 45) % 8]


def describe_weather(weather: WeatherConditions) -> str:
    if weather.is_indoor:
        return "Indoor/Dome (climate controlled)"

    parts = [f"{round(weather.temperature)}°F"]
    if abs(weather.feels_like - weather.temperature) >= 5:
        parts.append(f"(feels like {round(weather.feels_like)}°F)")
    if weather.wind_speed >= 10:
        parts.append(
            f"Wind: {round(weather.wind_speed)} mph {wind_direction_name(weather.wind_direction)}"
        )
    if weather.precipitation_probability >= 30:
        parts.append(f"{weather.precipitation_probability}% chance of {weather.condition}")
    return ", ".join(parts)


def condition_impact(condition: str, sport: Sport) -> float:
    if sport not in OUTDOOR_SPORTS or condition not in CONDITION_IMPACT:
        return 0.0
    nfl, mlb, soccer = CONDITION_IMPACT[condition]
    return {Sport.NFL: nfl, Sport.MLB: mlb, Sport.SOCCER: soccer}[sport]


def _precipitation_description(weather: WeatherConditions, sport: Sport) -> str:
    if weather.condition == "snow":
        target = "footing and ball handling" if sport == Sport.NFL else "field conditions"
        return f"Snow expected - major impact on {target}"
    if weather.condition == "heavy_rain":
        if sport == Sport.NFL:
            return "Heavy rain - passing and kicking affected"
        if sport == Sport.MLB:
            return "Heavy rain - game may be delayed"
        return "Heavy rain - slippery field conditions"
    if weather.condition == "rain":
        effect = "may favor run game" if sport == Sport.NFL else "wet conditions"
        return f"Rain expected ({weather.precipitation_probability}% chance) - {effect}"
    if weather.condition == "sleet":
        return "Sleet/freezing rain - hazardous playing conditions"
    return f"{weather.precipitation_probability}% precipitation chance"


def assess_weather_impacts(weather: WeatherConditions, sport: Sport) -> list:
    """Individual weather impacts for an outdoor game, unordered."""
    thresholds = WEATHER_THRESHOLDS[sport]
    impacts = []
    temp = weather.temperature
    wind = weather.wind_speed

    if temp <= thresholds.cold_temp:
        severity = min(0.5, (thresholds.cold_temp - temp) / 20 * 0.3)
        impacts.append(WeatherImpact("cold", severity, f"Cold weather ({round(temp)}°F) may affect play"))
    elif temp >= thresholds.hot_temp:
        severity = min(0.3, (temp - thresholds.hot_temp) / 15 * 0.2)
        impacts.append(WeatherImpact("heat", severity, f"Hot weather ({round(temp)}°F) could impact stamina"))

    if wind >= thresholds.extreme_wind:
        target = {Sport.NFL: "passing/kicking", Sport.MLB: "fly balls"}.get(sport, "ball control")
        impacts.append(WeatherImpact(
            "wind", 0.5, f"Extreme wind ({round(wind)} mph) will significantly affect {target}",
        ))
    elif wind >= thresholds.high_wind:
        span = thresholds.extreme_wind - thresholds.high_wind
        severity = 0.2 + (wind - thresholds.high_wind) / span * 0.2
        target = {Sport.NFL: "passing", Sport.MLB: "fly balls"}.get(sport, "play")
        impacts.append(WeatherImpact(
            "wind", severity, f"Windy conditions ({round(wind)} mph) may affect {target}",
        ))

    if (
        weather.precipitation >= thresholds.precipitation
        or weather.precipitation_probability >= 50
    ):
        impacts.append(WeatherImpact(
            "precipitation",
            condition_impact(weather.condition, sport),
            _precipitation_description(weather, sport),
        ))
    return impacts


def calculate_weather_factor(weather: Optional[WeatherConditions], sport: Sport) -> FactorResult:
    weight = WEATHER_WEIGHTS[sport]

    if weather is None:
        return FactorResult(
            name="Weather",
            value=0.0,
            normalized_score=0.0,
            weight=weight,
            description="No weather data available",
            confidence=0.0,
        )

    if weather.is_indoor or not is_outdoor_sport(sport):
        return FactorResult(
            name="Weather",
            value=0.0,
            normalized_score=0.0,
            weight=0.0,
            description="Indoor venue - weather not a factor",
            confidence=1.0,
        )

    impacts = assess_weather_impacts(weather, sport)
    total = sum(i.severity for i in impacts)

    if not impacts:
        description = f"Good conditions: {describe_weather(weather)}"
    elif len(impacts) == 1:
        description = impacts[0].description
    else:
        worst = max(impacts, key=lambda i: i.severity)
        description = f"{describe_weather(weather)}. {worst.description}"

    return FactorResult(
        name="Weather",
        value=total * 100,
        normalized_score=WEATHER_HOME_FAMILIARITY_NUDGE if total > SIGNIFICANT_IMPACT else 0.0,
        weight=weight if impacts else 0.0,
        description=description,
        confidence=WEATHER_CONFIDENCE,
    )


def weather_summary_for_llm(weather: Optional[WeatherConditions]) -> str:
    if weather is None:
        return "Weather data not available for this game."
    if weather.is_indoor:
        return "This game is being played in a dome/indoor venue. Weather will not be a factor."

    lines = [
        "Weather Conditions:",
        f"  Temperature: {round(weather.temperature)}°F (feels like {round(weather.feels_like)}°F)",
        f"  Wind: {round(weather.wind_speed)} mph",
        f"  Precipitation: {weather.precipitation_probability}% chance",
        f"  Conditions: {weather.condition.replace('_', ' ', 1)}",
    ]
    if weather.wind_speed >= 15:
        lines.append("  ⚠️ Wind may affect passing/kicking")
    if weather.temperature <= 32:
        lines.append("  ⚠️ Cold weather may affect ball handling")
    if weather.precipitation_probability >= 50:
        lines.append("  ⚠️ Precipitation likely - field conditions could be affected")
    return "\n".join(lines)
