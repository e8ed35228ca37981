"""Per-sport factor weight tables.

Read-only lookup tables indexed by Sport. Calculators that carry their own
weight tables (rest, momentum, injuries, weather) keep them beside the
calculator.
"""

from dataclasses import dataclass
from types import MappingProxyType

from sportscast.models import Sport


@dataclass(frozen=True)
class FactorWeights:
    team_strength: float
    home_advantage: float
    recent_form: float
    rest_days: float
    win_streak: float
    scoring_trend: float
    defensive_trend: float
    season_phase: float
    head_to_head: float
    betting_odds: float  # Reserved until odds feed is wired into scoring


FACTOR_WEIGHTS = MappingProxyType({
    Sport.NFL: FactorWeights(0.25, 0.12, 0.15, 0.10, 0.08, 0.05, 0.05, 0.05, 0.05, 0.10),
    Sport.NBA: FactorWeights(0.20, 0.15, 0.15, 0.12, 0.08, 0.05, 0.05, 0.05, 0.05, 0.10),
    Sport.MLB: FactorWeights(0.25, 0.08, 0.10, 0.05, 0.08, 0.07, 0.07, 0.10, 0.10, 0.10),
    Sport.NHL: FactorWeights(0.25, 0.12, 0.12, 0.10, 0.08, 0.05, 0.05, 0.08, 0.05, 0.10),
    Sport.SOCCER: FactorWeights(0.20, 0.15, 0.15, 0.08, 0.08, 0.05, 0.05, 0.06, 0.08, 0.10),
})

# Normalized home-field score by sport
HOME_ADVANTAGE_SCORES = MappingProxyType({
    Sport.NFL: 0.4,
    Sport.NBA: 0.55,
    Sport.MLB: 0.25,
    Sport.NHL: 0.45,
    Sport.SOCCER: 0.5,
})
