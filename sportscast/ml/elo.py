"""Synthetic Elo ratings derived from season records."""

import math
from dataclasses import dataclass
from types import MappingProxyType

from sportscast.models import Sport, Team

BASE_ELO = 1500
HOME_ADVANTAGE = 65  # Default home bonus when no sport is given
DEFAULT_K_FACTOR = 32
ELO_SCALE = 300  # A .750 team lands near 1575 once fully weighted
GAMES_WEIGHT_SEASON_FRACTION = 0.3


@dataclass(frozen=True)
class SportConfig:
    home_advantage: int
    draw_possible: bool
    base_draw_rate: float
    avg_games_per_season: int


SPORT_CONFIG = MappingProxyType({
    Sport.NFL: SportConfig(48, False, 0.0, 17),
    Sport.NBA: SportConfig(100, False, 0.0, 82),
    Sport.MLB: SportConfig(24, False, 0.0, 162),
    Sport.NHL: SportConfig(50, True, 0.06, 82),
    Sport.SOCCER: SportConfig(80, True, 0.26, 38),
})


def calculate_dynamic_elo(team: Team) -> float:
    """Rating from win percentage, ramped in over the first 30% of a season.

    No record or no games played gives the base rating.
    """
    record = team.record
    if record is None or record.games_played == 0:
        return float(BASE_ELO)

    config = SPORT_CONFIG[team.sport]
    games_weight = min(1.0, record.games_played / (config.avg_games_per_season * GAMES_WEIGHT_SEASON_FRACTION))
    return BASE_ELO + (record.win_pct - 0.5) * ELO_SCALE * games_weight


def calculate_elo_probability(
    home_rating: float,
    away_rating: float,
    home_advantage: float = HOME_ADVANTAGE,
) -> tuple[float, float]:
    """Logistic Elo win probability with the home bonus added to the home side.

    Returns:
        (home, away) probabilities summing to 1.
    """
    exponent = (away_rating - (home_rating + home_advantage)) / 400
    home = 1 / (1 + 10 ** exponent)
    return home, 1 - home


def calculate_new_elo(
    winner_rating: float,
    loser_rating: float,
    k_factor: float = DEFAULT_K_FACTOR,
) -> tuple[float, float, int]:
    """Ratings after a decided game: (winner, loser, change)."""
    expected = 1 / (1 + 10 ** ((loser_rating - winner_rating) / 400))
    change = int(math.floor(k_factor * (1 - expected) + 0.5))
    return winner_rating + change, loser_rating - change, change
