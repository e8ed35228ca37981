"""Season-record strength and home-field factors."""

from sportscast.features.weights import FACTOR_WEIGHTS, HOME_ADVANTAGE_SCORES
from sportscast.models import FactorResult, Game, Sport, TeamRecord, clamp

EMPTY_RECORD = TeamRecord(wins=0, losses=0)


def _record_win_pct(record: TeamRecord) -> float:
    # Zero games count as 0%, not 50%, so both sides stay comparable.
    return (record.wins + record.draws * 0.5) / max(1, record.games_played)


def calculate_team_strength_factor(game: Game) -> FactorResult:
    """Win-percentage differential between the two season records."""
    home_record = game.home_team.record or EMPTY_RECORD
    away_record = game.away_team.record or EMPTY_RECORD
    home_pct = _record_win_pct(home_record)
    away_pct = _record_win_pct(away_record)
    diff = home_pct - away_pct

    if abs(diff) < 0.1:
        description = "Teams are evenly matched based on season record"
    elif diff > 0:
        description = (
            f"{game.home_team.name} has stronger record "
            f"({home_pct * 100:.0f}% vs {away_pct * 100:.0f}%)"
        )
    else:
        description = (
            f"{game.away_team.name} has stronger record "
            f"({away_pct * 100:.0f}% vs {home_pct * 100:.0f}%)"
        )

    min_games = min(home_record.games_played, away_record.games_played)
    return FactorResult(
        name="Team Strength",
        value=diff * 100,
        normalized_score=clamp(diff * 2),
        weight=FACTOR_WEIGHTS[game.sport].team_strength,
        description=description,
        confidence=min(1.0, min_games / 10),
    )


def calculate_home_advantage_factor(game: Game) -> FactorResult:
    sport = Sport(game.sport)
    weight = FACTOR_WEIGHTS[sport].home_advantage
    return FactorResult(
        name="Home Advantage",
        value=weight * 100,
        normalized_score=HOME_ADVANTAGE_SCORES[sport],
        weight=weight,
        description=f"{game.home_team.name} playing at home ({game.venue or 'home venue'})",
        confidence=0.9,
    )
