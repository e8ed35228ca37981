"""Season phase and playoff-motivation factor."""

from dataclasses import dataclass
from types import MappingProxyType

from sportscast.models import FactorResult, Sport, TeamRecord, clamp


@dataclass(frozen=True)
class SeasonConfig:
    regular_season_games: int
    early_season_games: int
    late_season_start: int


SEASON_CONFIG = MappingProxyType({
    Sport.NFL: SeasonConfig(17, 4, 13),
    Sport.NBA: SeasonConfig(82, 15, 65),
    Sport.MLB: SeasonConfig(162, 30, 130),
    Sport.NHL: SeasonConfig(82, 15, 65),
    Sport.SOCCER: SeasonConfig(38, 8, 30),  # relegation/title race
})

SEASON_PHASE_WEIGHTS = MappingProxyType({
    Sport.NFL: 0.05,
    Sport.NBA: 0.05,
    Sport.MLB: 0.10,
    Sport.NHL: 0.08,
    Sport.SOCCER: 0.06,
})

EARLY_SEASON_MAX_PENALTY = 0.15


def get_season_phase(games_played: int, config: SeasonConfig) -> str:
    if games_played <= config.early_season_games:
        return "early"
    if games_played >= config.late_season_start:
        return "late"
    return "mid"


def calculate_motivation(record: TeamRecord, games_played: int, config: SeasonConfig) -> float:
    """0-1 urgency. Bubble teams (.400-.600) peak late in the season."""
    if games_played < config.early_season_games:
        return 0.5
    if get_season_phase(games_played, config) != "late":
        return 0.5

    win_pct = record.win_pct
    if 0.4 <= win_pct <= 0.6:
        return 0.9
    if win_pct > 0.6:
        return 0.7
    return 0.3


def _phase_description(home_phase: str, away_phase: str) -> str:
    if home_phase == away_phase:
        return f"Both teams in {home_phase} season"
    return f"Home in {home_phase} season, away in {away_phase}"


def calculate_season_phase_factor(
    home_record: TeamRecord,
    away_record: TeamRecord,
    sport: Sport,
) -> FactorResult:
    config = SEASON_CONFIG[sport]
    home_games = home_record.games_played
    away_games = away_record.games_played

    home_motivation = calculate_motivation(home_record, home_games, config)
    away_motivation = calculate_motivation(away_record, away_games, config)
    diff = home_motivation - away_motivation

    phase = _phase_description(
        get_season_phase(home_games, config),
        get_season_phase(away_games, config),
    )
    if abs(diff) < 0.1:
        description = f"{phase}. Similar playoff positioning"
    elif diff > 0:
        description = f"{phase}. Home team more motivated (playoff race)"
    else:
        description = f"{phase}. Away team more motivated (playoff race)"

    avg_games = (home_games + away_games) / 2
    return FactorResult(
        name="Season Phase",
        value=diff,
        normalized_score=clamp(diff),
        weight=SEASON_PHASE_WEIGHTS[sport],
        description=description,
        confidence=min(1.0, avg_games / config.early_season_games),
    )


def get_early_season_penalty(games_played: int, sport: Sport) -> float:
    """Linear confidence penalty from 15% at game zero to 0 once past the early phase."""
    config = SEASON_CONFIG[sport]
    if games_played >= config.early_season_games:
        return 0.0
    return EARLY_SEASON_MAX_PENALTY * (1 - games_played / config.early_season_games)
