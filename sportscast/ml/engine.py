"""Prediction composer.

Basic mode uses the Elo baseline only. Enhanced mode shifts the baseline by
the aggregated factor score. In both modes the displayed confidence is the
winning outcome's probability, so the two never disagree.
"""

import logging
import math
import uuid
from typing import Optional

from sportscast.features.engineering import GameContext, calculate_all_factors, factors_to_display
from sportscast.ml.elo import SPORT_CONFIG, SportConfig, calculate_dynamic_elo, calculate_elo_probability
from sportscast.models import Game, Prediction, PredictionFactor, Sport, Team
from sportscast.telemetry.metrics import record_prediction

logger = logging.getLogger(__name__)

FACTOR_PROBABILITY_SCALE = 0.12  # Max swing from combined factors
MIN_SIDE_PROBABILITY = 0.1
MAX_SIDE_PROBABILITY = 0.9

# Enhanced mode takes the full factor context
EnhancedPredictionContext = GameContext


def apply_draw_probability(home: float, away: float, config: SportConfig) -> tuple:
    """Carve out draw mass for sports with draws; more likely when evenly matched.

    Returns:
        (home, away, draw) summing to 1.
    """
    if not config.draw_possible:
        return home, away, 0.0

    draw = config.base_draw_rate * (1 - abs(home - away) * 0.5)
    remaining = 1 - draw
    new_home = home / (home + away) * remaining
    return new_home, remaining - new_home, draw


def confidence_percent(probability: float) -> int:
    """Probability as a whole percentage, halves rounded up."""
    return int(math.floor(probability * 100 + 0.5))


def pick_winner(home: float, away: float, draw: float) -> tuple:
    """Draw only when strictly most likely; home wins ties with away."""
    if draw > home and draw > away:
        return "draw", draw
    if home >= away:
        return "home", home
    return "away", away


def _winner_team(game: Game, winner: str) -> Optional[Team]:
    if winner == "home":
        return game.home_team
    if winner == "away":
        return game.away_team
    return None


def _build_prediction(game: Game, home: float, away: float, draw: float, factors: list) -> Prediction:
    winner, winning_prob = pick_winner(home, away, draw)
    return Prediction(
        id=str(uuid.uuid4()),
        game_id=game.id,
        game=game,
        predicted_winner=winner,
        predicted_winner_team=_winner_team(game, winner),
        confidence=confidence_percent(winning_prob),
        ml_probability=winning_prob,
        home_win_probability=home,
        away_win_probability=away,
        draw_probability=draw if draw > 0 else None,
        factors=factors,
    )


def _basic_factors(game: Game, home_elo: float, away_elo: float, config: SportConfig) -> list:
    elo_diff = home_elo - away_elo
    stronger = game.home_team if elo_diff > 0 else game.away_team
    if abs(elo_diff) < 20:
        strength = "Teams are evenly matched based on season record"
    else:
        strength = f"{stronger.name} has a stronger season record (+{abs(elo_diff):.0f} rating)"

    home_pct = game.home_team.record.win_pct if game.home_team.record else 0.5
    away_pct = game.away_team.record.win_pct if game.away_team.record else 0.5
    pct_diff = home_pct - away_pct
    if abs(pct_diff) < 0.05:
        performance = "Similar win percentages this season"
    else:
        better = game.home_team if pct_diff > 0 else game.away_team
        performance = f"{better.name} has {abs(pct_diff * 100):.0f}% better win rate"

    return [
        PredictionFactor(name="Team Strength", value=elo_diff, description=strength, weight=0.45),
        PredictionFactor(
            name="Home Advantage",
            value=config.home_advantage,
            description=f"{game.home_team.name} playing at home (+{config.home_advantage} rating advantage)",
            weight=0.25,
        ),
        PredictionFactor(name="Season Performance", value=pct_diff, description=performance, weight=0.30),
    ]


def generate_prediction(game: Game) -> Prediction:
    """Elo-only prediction. Deterministic apart from id and timestamp."""
    config = SPORT_CONFIG[game.sport]
    home_elo = calculate_dynamic_elo(game.home_team)
    away_elo = calculate_dynamic_elo(game.away_team)

    home, away = calculate_elo_probability(home_elo, away_elo, config.home_advantage)
    home, away, draw = apply_draw_probability(home, away, config)

    record_prediction(Sport(game.sport).value, "basic")
    return _build_prediction(game, home, away, draw, _basic_factors(game, home_elo, away_elo, config))


def generate_predictions(games: list) -> list:
    return [generate_prediction(g) for g in games]


def generate_enhanced_prediction(context: EnhancedPredictionContext) -> Prediction:
    """Elo baseline shifted by up to 12 points from the combined factor score."""
    game = context.game
    config = SPORT_CONFIG[game.sport]
    home_elo = calculate_dynamic_elo(game.home_team)
    away_elo = calculate_dynamic_elo(game.away_team)
    elo_home, elo_away = calculate_elo_probability(home_elo, away_elo, config.home_advantage)

    game_factors = calculate_all_factors(context)
    shift = game_factors.combined_score * FACTOR_PROBABILITY_SCALE

    home = min(MAX_SIDE_PROBABILITY, max(MIN_SIDE_PROBABILITY, elo_home + shift))
    away = min(MAX_SIDE_PROBABILITY, max(MIN_SIDE_PROBABILITY, elo_away - shift))
    total = home + away
    home, away, draw = apply_draw_probability(home / total, away / total, config)

    logger.info(
        f"[PREDICT] {game.id} enhanced: elo_home={elo_home:.3f} "
        f"combined={game_factors.combined_score:.3f} home={home:.3f} away={away:.3f} draw={draw:.3f}"
    )
    record_prediction(Sport(game.sport).value, "enhanced")
    return _build_prediction(game, home, away, draw, factors_to_display(game_factors.factors))


def generate_enhanced_predictions(contexts: list) -> list:
    return [generate_enhanced_prediction(c) for c in contexts]
