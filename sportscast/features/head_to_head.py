"""Head-to-head history factor.

A record can be supplied directly or rebuilt from both teams' recent games.
All scores are expressed from the perspective of the team that is at home
in the upcoming game.
"""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Optional

from sportscast.features.weights import FACTOR_WEIGHTS
from sportscast.models import FactorResult, Sport, clamp

RECENCY_WEIGHTS = (1.0, 0.8, 0.6, 0.4, 0.3)
ROAD_WIN_SCALE = 0.8
MAX_LAST_MEETINGS = 10
SAME_DAY_SECONDS = 86400

TYPICAL_MARGINS = MappingProxyType({
    Sport.NFL: 10,
    Sport.NBA: 8,
    Sport.MLB: 2,
    Sport.NHL: 1.5,
    Sport.SOCCER: 1,
})

IDEAL_SAMPLE_SIZE = MappingProxyType({
    Sport.NFL: 4,
    Sport.NBA: 6,
    Sport.MLB: 10,
    Sport.NHL: 6,
    Sport.SOCCER: 4,
})


@dataclass(frozen=True)
class HeadToHeadGame:
    date: datetime
    home_team_score: int
    away_team_score: int
    winner: str  # home, away, draw
    was_home_team_home: bool


@dataclass(frozen=True)
class HeadToHeadRecord:
    total_games: int
    home_team_wins: int
    away_team_wins: int
    draws: int
    home_team_avg_score: float
    away_team_avg_score: float
    home_team_name: str
    away_team_name: str
    last_meetings: list = field(default_factory=list)


def recent_bias(meetings: list) -> float:
    """Recency-weighted result trend over the last five meetings.

    Wins by the side that was on the road count at 0.8 of a home win.
    """
    weighted_sum = 0.0
    total_weight = 0.0
    for meeting, weight in zip(meetings[:len(RECENCY_WEIGHTS)], RECENCY_WEIGHTS):
        total_weight += weight
        if meeting.winner == "home":
            weighted_sum += weight if meeting.was_home_team_home else weight * ROAD_WIN_SCALE
        elif meeting.winner == "away":
            weighted_sum -= weight * ROAD_WIN_SCALE if meeting.was_home_team_home else weight
    return weighted_sum / total_weight if total_weight > 0 else 0.0


def normalize_margin(margin: float, sport: Sport) -> float:
    return clamp(margin / (TYPICAL_MARGINS[sport] * 2))


def h2h_confidence(total_games: int, sport: Sport) -> float:
    ideal = IDEAL_SAMPLE_SIZE[sport]
    if total_games == 0:
        return 0.0
    if total_games >= ideal:
        return 1.0
    return 0.3 + 0.7 * total_games / ideal


def _describe(h2h: HeadToHeadRecord, score: float) -> str:
    draws = f"-{h2h.draws}" if h2h.draws > 0 else ""
    if abs(score) < 0.1:
        return (
            f"Even H2H record: {h2h.home_team_name} {h2h.home_team_wins}-{h2h.away_team_wins}{draws} "
            f"vs {h2h.away_team_name} (last {h2h.total_games} meetings)"
        )

    if score > 0:
        dominant, wins, other = h2h.home_team_name, h2h.home_team_wins, h2h.away_team_wins
    else:
        dominant, wins, other = h2h.away_team_name, h2h.away_team_wins, h2h.home_team_wins
    verb = "dominates" if abs(score) > 0.5 else "leads"
    return f"{dominant} {verb} H2H: {wins}-{other}{draws} in last {h2h.total_games} meetings"


def calculate_head_to_head_factor(h2h: Optional[HeadToHeadRecord], sport: Sport) -> FactorResult:
    weight = FACTOR_WEIGHTS[sport].head_to_head

    if h2h is None or h2h.total_games == 0:
        return FactorResult(
            name="Head-to-Head",
            value=0.0,
            normalized_score=0.0,
            weight=weight,
            description="No recent head-to-head history available",
            confidence=0.0,
        )

    win_rate_diff = (h2h.home_team_wins - h2h.away_team_wins) / h2h.total_games
    margin_norm = normalize_margin(h2h.home_team_avg_score - h2h.away_team_avg_score, sport)
    score = clamp(
        win_rate_diff * 0.5 + margin_norm * 0.3 + recent_bias(h2h.last_meetings) * 0.2
    )

    return FactorResult(
        name="Head-to-Head",
        value=win_rate_diff * 100,
        normalized_score=score,
        weight=weight,
        description=_describe(h2h, score),
        confidence=h2h_confidence(h2h.total_games, sport),
    )


def is_matching_opponent(opponent: str, team_name: str) -> bool:
    """Loose name match: exact, containment either way, or nickname."""
    opponent = opponent.lower().strip()
    team = team_name.lower().strip()
    if not opponent or not team:
        return False
    if opponent == team or team in opponent or opponent in team:
        return True

    nickname = team.split(" ")[-1]
    return len(nickname) > 3 and nickname in opponent


def _winner(home_score: int, away_score: int) -> str:
    if home_score > away_score:
        return "home"
    if home_score < away_score:
        return "away"
    return "draw"


def extract_head_to_head(
    home_team_name: str,
    away_team_name: str,
    home_recent_games: list,
    away_recent_games: list,
) -> HeadToHeadRecord:
    """Rebuild the head-to-head record from each team's recent results.

    Meetings found in the away team's history are flipped to the home
    team's perspective and skipped when the same day is already recorded.
    """
    meetings = []
    for game in home_recent_games:
        if is_matching_opponent(game.opponent, away_team_name):
            meetings.append(HeadToHeadGame(
                date=game.date,
                home_team_score=game.team_score,
                away_team_score=game.opponent_score,
                winner=_winner(game.team_score, game.opponent_score),
                was_home_team_home=game.is_home,
            ))

    for game in away_recent_games:
        if not is_matching_opponent(game.opponent, home_team_name):
            continue
        duplicate = any(
            abs((m.date - game.date).total_seconds()) < SAME_DAY_SECONDS for m in meetings
        )
        if duplicate:
            continue
        meetings.append(HeadToHeadGame(
            date=game.date,
            home_team_score=game.opponent_score,
            away_team_score=game.team_score,
            winner=_winner(game.opponent_score, game.team_score),
            was_home_team_home=not game.is_home,
        ))

    meetings.sort(key=lambda m: m.date, reverse=True)
    total = len(meetings)
    return HeadToHeadRecord(
        total_games=total,
        home_team_wins=sum(1 for m in meetings if m.winner == "home"),
        away_team_wins=sum(1 for m in meetings if m.winner == "away"),
        draws=sum(1 for m in meetings if m.winner == "draw"),
        home_team_avg_score=sum(m.home_team_score for m in meetings) / total if total else 0.0,
        away_team_avg_score=sum(m.away_team_score for m in meetings) / total if total else 0.0,
        home_team_name=home_team_name,
        away_team_name=away_team_name,
        last_meetings=meetings[:MAX_LAST_MEETINGS],
    )
