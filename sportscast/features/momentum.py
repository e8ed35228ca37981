"""Recent form, scoring trend and defensive trend factors."""

from dataclasses import dataclass
from types import MappingProxyType

from sportscast.models import FactorResult, Sport, clamp

FORM_WINDOW = 5
TREND_WINDOW = 5
TREND_WEIGHT = 0.05

MOMENTUM_WEIGHTS = MappingProxyType({
    Sport.NFL: 0.15,
    Sport.NBA: 0.15,
    Sport.MLB: 0.10,
    Sport.NHL: 0.12,
    Sport.SOCCER: 0.15,
})


@dataclass(frozen=True)
class FormScore:
    score: float  # -1..1
    win_pct: float
    avg_margin: float
    games_used: int


def calculate_form_score(games: list, window: int = FORM_WINDOW) -> FormScore:
    """Form over the last `window` games: 70% win pct, 30% average margin."""
    if not games:
        return FormScore(score=0.0, win_pct=0.5, avg_margin=0.0, games_used=0)

    recent = sorted(games, key=lambda g: g.date, reverse=True)[:window]
    wins = sum(1 for g in recent if g.result == "win")
    draws = sum(1 for g in recent if g.result not in ("win", "loss"))
    margin = sum(g.team_score - g.opponent_score for g in recent)

    used = len(recent)
    win_pct = (wins + draws * 0.5) / used
    avg_margin = margin / used
    score = (win_pct - 0.5) * 2 * 0.7 + clamp(avg_margin / 15) * 0.3
    return FormScore(score=score, win_pct=win_pct, avg_margin=avg_margin, games_used=used)


def calculate_momentum_factor(
    home_games: list,
    away_games: list,
    sport: Sport,
    window: int = FORM_WINDOW,
) -> FactorResult:
    home = calculate_form_score(home_games, window)
    away = calculate_form_score(away_games, window)
    diff = home.score - away.score

    home_pct = f"{home.win_pct * 100:.0f}%"
    away_pct = f"{away.win_pct * 100:.0f}%"
    if abs(diff) < 0.1:
        description = f"Both teams similar form ({home_pct} vs {away_pct} last {window})"
    elif diff > 0:
        description = f"Home team in better form: {home_pct} vs {away_pct} last {window} games"
    else:
        description = f"Away team in better form: {away_pct} vs {home_pct} last {window} games"

    return FactorResult(
        name="Recent Form",
        value=diff,
        normalized_score=clamp(diff),
        weight=MOMENTUM_WEIGHTS[sport],
        description=description,
        confidence=min(1.0, min(home.games_used, away.games_used) / window),
    )


def _recent_average(games: list, attr: str, window: int = TREND_WINDOW) -> float:
    # Providers hand over games most-recent-first already.
    recent = games[:window]
    if not recent:
        return 0.0
    return sum(getattr(g, attr) for g in recent) / len(recent)


def _trend_confidence(home_games: list, away_games: list) -> float:
    return 0.8 if len(home_games) >= 3 and len(away_games) >= 3 else 0.4


def calculate_scoring_trend_factor(
    home_games: list,
    away_games: list,
    home_season_avg: float,
    away_season_avg: float,
    sport: Sport,
) -> FactorResult:
    """Are teams scoring above or below their season average lately?"""
    home_recent = _recent_average(home_games, "team_score")
    away_recent = _recent_average(away_games, "team_score")
    home_trend = (home_recent - home_season_avg) / home_season_avg if home_season_avg > 0 else 0.0
    away_trend = (away_recent - away_season_avg) / away_season_avg if away_season_avg > 0 else 0.0
    diff = home_trend - away_trend

    if abs(diff) < 0.05:
        description = "Both teams scoring near their season averages"
    elif diff > 0:
        description = f"Home team scoring {home_trend * 100:.0f}% above average recently"
    else:
        description = f"Away team scoring {away_trend * 100:.0f}% above average recently"

    return FactorResult(
        name="Scoring Trend",
        value=diff,
        normalized_score=clamp(diff * 5),
        weight=TREND_WEIGHT,
        description=description,
        confidence=_trend_confidence(home_games, away_games),
    )


def calculate_defensive_trend_factor(
    home_games: list,
    away_games: list,
    home_season_allowed: float,
    away_season_allowed: float,
    sport: Sport,
) -> FactorResult:
    """Fewer points allowed than the season average counts as improving."""
    home_recent = _recent_average(home_games, "opponent_score")
    away_recent = _recent_average(away_games, "opponent_score")
    home_trend = (
        (home_season_allowed - home_recent) / home_season_allowed if home_season_allowed > 0 else 0.0
    )
    away_trend = (
        (away_season_allowed - away_recent) / away_season_allowed if away_season_allowed > 0 else 0.0
    )
    diff = home_trend - away_trend

    if abs(diff) < 0.05:
        description = "Both defenses performing near season average"
    elif diff > 0:
        description = f"Home defense improving, allowing {home_trend * 100:.0f}% less than average"
    else:
        description = f"Away defense improving, allowing {away_trend * 100:.0f}% less than average"

    return FactorResult(
        name="Defensive Trend",
        value=diff,
        normalized_score=clamp(diff * 5),
        weight=TREND_WEIGHT,
        description=description,
        confidence=_trend_confidence(home_games, away_games),
    )


def get_momentum_adjustment(home_games: list, away_games: list, sport: Sport) -> float:
    factor = calculate_momentum_factor(home_games, away_games, sport)
    return factor.normalized_score * factor.weight
