"""Win/loss streak factor."""

from sportscast.models import FactorResult, Sport, clamp

STREAK_WEIGHT = 0.08
MAX_STREAK_ADJUSTMENT = 0.08


def get_streak(games: list) -> int:
    """Current streak from the most recent game backward.

    Positive for a win streak, negative for a losing streak, 0 when the
    latest result is a draw or there are no games.
    """
    if not games:
        return 0

    ordered = sorted(games, key=lambda g: g.date, reverse=True)
    first_result = ordered[0].result
    streak = 0
    for game in ordered:
        if game.result != first_result:
            break
        streak += 1

    if first_result == "win":
        return streak
    if first_result == "loss":
        return -streak
    return 0


def calculate_streak_factor(home_games: list, away_games: list, sport: Sport) -> FactorResult:
    home_streak = get_streak(home_games)
    away_streak = get_streak(away_games)
    diff = home_streak - away_streak

    if abs(diff) < 2:
        description = "Both teams have similar recent momentum"
    elif diff > 0:
        if home_streak > 0:
            description = f"Home team on {home_streak}-game win streak"
        else:
            description = f"Away team on {abs(away_streak)}-game losing streak"
    elif away_streak > 0:
        description = f"Away team on {away_streak}-game win streak"
    else:
        description = f"Home team on {abs(home_streak)}-game losing streak"

    return FactorResult(
        name="Win/Loss Streak",
        value=diff,
        normalized_score=clamp(diff / 10),
        weight=STREAK_WEIGHT,
        description=description,
        confidence=min(1.0, min(len(home_games), len(away_games)) / 5),
    )


def get_streak_adjustment(home_games: list, away_games: list) -> float:
    """About 1% probability per game of streak difference, capped at 8%."""
    adjustment = (get_streak(home_games) - get_streak(away_games)) * 0.01
    return clamp(adjustment, -MAX_STREAK_ADJUSTMENT, MAX_STREAK_ADJUSTMENT)
