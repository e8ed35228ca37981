"""Rest-days factor.

Days of rest are whole days between the previous game and this one.
Back-to-backs (one day or less) are always penalized, even in sports whose
optimal rest is a single day.
"""

from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Optional

from sportscast.models import FactorResult, Sport, clamp


@dataclass(frozen=True)
class RestConfig:
    optimal_days: int
    max_benefit_days: int
    back_to_back_penalty: float


REST_CONFIG = MappingProxyType({
    Sport.NFL: RestConfig(7, 14, 0.15),
    Sport.NBA: RestConfig(2, 4, 0.08),
    Sport.MLB: RestConfig(1, 2, 0.02),
    Sport.NHL: RestConfig(2, 4, 0.06),
    Sport.SOCCER: RestConfig(4, 7, 0.10),
})

REST_WEIGHTS = MappingProxyType({
    Sport.NFL: 0.10,
    Sport.NBA: 0.12,
    Sport.MLB: 0.05,
    Sport.NHL: 0.10,
    Sport.SOCCER: 0.08,
})


def days_between(earlier: datetime, later: datetime) -> int:
    return int(abs((later - earlier).total_seconds()) // 86400)


def rest_score(days: int, config: RestConfig) -> float:
    if days <= 1:
        return -config.back_to_back_penalty
    if days >= config.optimal_days:
        extra = min(days - config.optimal_days, config.max_benefit_days - config.optimal_days)
        return 0.5 + extra * 0.05
    return days / config.optimal_days * 0.5


def calculate_rest_factor(
    home_last_game: Optional[datetime],
    away_last_game: Optional[datetime],
    game_date: datetime,
    sport: Sport,
) -> FactorResult:
    config = REST_CONFIG[sport]
    home_rest = days_between(home_last_game, game_date) if home_last_game else config.optimal_days
    away_rest = days_between(away_last_game, game_date) if away_last_game else config.optimal_days

    diff = rest_score(home_rest, config) - rest_score(away_rest, config)

    home_b2b = home_rest <= 1
    away_b2b = away_rest <= 1
    if home_b2b and not away_b2b:
        description = f"Home team on back-to-back ({home_rest} day rest) vs away ({away_rest} days)"
    elif away_b2b and not home_b2b:
        description = f"Away team on back-to-back ({away_rest} day rest) vs home ({home_rest} days)"
    elif abs(home_rest - away_rest) >= 2:
        description = f"Rest advantage: Home ({home_rest} days) vs Away ({away_rest} days)"
    else:
        description = f"Similar rest: Home ({home_rest} days) vs Away ({away_rest} days)"

    return FactorResult(
        name="Rest Days",
        value=home_rest - away_rest,
        normalized_score=clamp(diff),
        weight=REST_WEIGHTS[sport],
        description=description,
        confidence=1.0 if home_last_game and away_last_game else 0.3,
    )


def get_rest_adjustment(
    home_last_game: Optional[datetime],
    away_last_game: Optional[datetime],
    game_date: datetime,
    sport: Sport,
) -> float:
    factor = calculate_rest_factor(home_last_game, away_last_game, game_date, sport)
    return factor.normalized_score * factor.weight
