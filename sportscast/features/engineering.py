"""Factor aggregation for a single game.

Every factor provider takes a GameContext and returns a FactorResult, or
None when the data it needs is absent. The combined score is the
confidence-weighted average of what remains; a zero-confidence factor adds
nothing to either side of the ratio.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from sportscast.features.head_to_head import (
    HeadToHeadRecord,
    calculate_head_to_head_factor,
    extract_head_to_head,
)
from sportscast.features.injuries import TeamInjuryReport, calculate_injury_factor
from sportscast.features.momentum import (
    calculate_defensive_trend_factor,
    calculate_momentum_factor,
    calculate_scoring_trend_factor,
)
from sportscast.features.rest import calculate_rest_factor
from sportscast.features.season_phase import calculate_season_phase_factor, get_early_season_penalty
from sportscast.features.streak import calculate_streak_factor
from sportscast.features.strength import (
    EMPTY_RECORD,
    calculate_home_advantage_factor,
    calculate_team_strength_factor,
)
from sportscast.features.weather import WeatherConditions, calculate_weather_factor
from sportscast.models import FactorResult, Game, GameFactors, PredictionFactor

logger = logging.getLogger(__name__)

# Max probability swing from combined factors in get_factor_adjustments
FACTOR_ADJUSTMENT_SCALE = 0.15


@dataclass(frozen=True)
class GameContext:
    """Everything known about a game beyond the two season records."""

    game: Game
    home_recent_games: list = field(default_factory=list)
    away_recent_games: list = field(default_factory=list)
    home_last_game_date: Optional[datetime] = None
    away_last_game_date: Optional[datetime] = None
    home_season_avg_score: Optional[float] = None
    away_season_avg_score: Optional[float] = None
    home_season_avg_allowed: Optional[float] = None
    away_season_avg_allowed: Optional[float] = None
    head_to_head: Optional[HeadToHeadRecord] = None
    home_injuries: Optional[TeamInjuryReport] = None
    away_injuries: Optional[TeamInjuryReport] = None
    weather: Optional[WeatherConditions] = None

    @property
    def has_recent_games(self) -> bool:
        return bool(self.home_recent_games or self.away_recent_games)


def _team_strength(ctx: GameContext) -> Optional[FactorResult]:
    return calculate_team_strength_factor(ctx.game)


def _home_advantage(ctx: GameContext) -> Optional[FactorResult]:
    return calculate_home_advantage_factor(ctx.game)


def _streak(ctx: GameContext) -> Optional[FactorResult]:
    if not ctx.has_recent_games:
        return None
    return calculate_streak_factor(ctx.home_recent_games, ctx.away_recent_games, ctx.game.sport)


def _rest(ctx: GameContext) -> Optional[FactorResult]:
    return calculate_rest_factor(
        ctx.home_last_game_date, ctx.away_last_game_date, ctx.game.start_time, ctx.game.sport,
    )


def _momentum(ctx: GameContext) -> Optional[FactorResult]:
    if not ctx.has_recent_games:
        return None
    return calculate_momentum_factor(ctx.home_recent_games, ctx.away_recent_games, ctx.game.sport)


def _scoring_trend(ctx: GameContext) -> Optional[FactorResult]:
    if not (ctx.home_season_avg_score and ctx.away_season_avg_score):
        return None
    return calculate_scoring_trend_factor(
        ctx.home_recent_games,
        ctx.away_recent_games,
        ctx.home_season_avg_score,
        ctx.away_season_avg_score,
        ctx.game.sport,
    )


def _defensive_trend(ctx: GameContext) -> Optional[FactorResult]:
    if not (ctx.home_season_avg_allowed and ctx.away_season_avg_allowed):
        return None
    return calculate_defensive_trend_factor(
        ctx.home_recent_games,
        ctx.away_recent_games,
        ctx.home_season_avg_allowed,
        ctx.away_season_avg_allowed,
        ctx.game.sport,
    )


def _season_phase(ctx: GameContext) -> Optional[FactorResult]:
    return calculate_season_phase_factor(
        ctx.game.home_team.record or EMPTY_RECORD,
        ctx.game.away_team.record or EMPTY_RECORD,
        ctx.game.sport,
    )


def _head_to_head(ctx: GameContext) -> Optional[FactorResult]:
    h2h = ctx.head_to_head or extract_head_to_head(
        ctx.game.home_team.name,
        ctx.game.away_team.name,
        ctx.home_recent_games,
        ctx.away_recent_games,
    )
    return calculate_head_to_head_factor(h2h, ctx.game.sport)


def _injuries(ctx: GameContext) -> Optional[FactorResult]:
    if ctx.home_injuries is None and ctx.away_injuries is None:
        return None
    return calculate_injury_factor(ctx.home_injuries, ctx.away_injuries, ctx.game.sport)


def _weather(ctx: GameContext) -> Optional[FactorResult]:
    if ctx.weather is None:
        return None
    return calculate_weather_factor(ctx.weather, ctx.game.sport)


FactorProvider = Callable[[GameContext], Optional[FactorResult]]

# Order is the display order of factors
FACTOR_PROVIDERS: tuple = (
    _team_strength,
    _home_advantage,
    _streak,
    _rest,
    _momentum,
    _scoring_trend,
    _defensive_trend,
    _season_phase,
    _head_to_head,
    _injuries,
    _weather,
)


def combine_factors(factors: list) -> float:
    """Confidence-weighted average of normalized scores; 0 with no weight."""
    weighted_sum = 0.0
    total_weight = 0.0
    for f in factors:
        weighted_sum += f.normalized_score * f.weight * f.confidence
        total_weight += f.weight * f.confidence
    return weighted_sum / total_weight if total_weight > 0 else 0.0


def calculate_all_factors(context: GameContext) -> GameFactors:
    factors = [result for result in (p(context) for p in FACTOR_PROVIDERS) if result is not None]
    combined = combine_factors(factors)

    logger.debug(
        f"[PREDICT] {context.game.id}: {len(factors)} factors, combined={combined:.3f}"
    )
    return GameFactors(
        game=context.game,
        factors=factors,
        combined_score=combined,
        home_advantage=combined if combined > 0 else 0.0,
        away_advantage=-combined if combined < 0 else 0.0,
    )


def get_factor_adjustments(context: GameContext) -> dict:
    """Probability adjustments (max ±15%) and early-season confidence penalty.

    Returns:
        dict: {"home_adjustment", "away_adjustment", "confidence_penalty"}
    """
    adjustment = calculate_all_factors(context).combined_score * FACTOR_ADJUSTMENT_SCALE
    game = context.game
    home_games = (game.home_team.record or EMPTY_RECORD).games_played
    away_games = (game.away_team.record or EMPTY_RECORD).games_played
    penalty = (
        get_early_season_penalty(home_games, game.sport)
        + get_early_season_penalty(away_games, game.sport)
    ) / 2

    return {
        "home_adjustment": adjustment if adjustment > 0 else 0.0,
        "away_adjustment": -adjustment if adjustment < 0 else 0.0,
        "confidence_penalty": penalty,
    }


def factors_to_display(factors: list) -> list:
    """Display form: value is the normalized score as a percentage."""
    return [
        PredictionFactor(
            name=f.name,
            value=f.normalized_score * 100,
            description=f.description,
            weight=f.weight,
        )
        for f in factors
    ]
