"""
Mock teams and simulated prediction history.

Records are random on every build; use an explicit random.Random for
reproducible output in tests. Used by /api/history, which has no graded
prediction store behind it.
"""

import dataclasses
import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Optional

from sportscast.ml.engine import generate_prediction
from sportscast.models import Game, GameStatus, Sport, Team, TeamRecord

logger = logging.getLogger(__name__)

# (id, name, abbreviation, league_id, elo, city)
_BASE_TEAMS = {
    Sport.NFL: (
        ("nfl-kc", "Kansas City Chiefs", "KC", "nfl", 1650, "Kansas City"),
        ("nfl-sf", "San Francisco 49ers", "SF", "nfl", 1620, "San Francisco"),
        ("nfl-phi", "Philadelphia Eagles", "PHI", "nfl", 1600, "Philadelphia"),
        ("nfl-buf", "Buffalo Bills", "BUF", "nfl", 1590, "Buffalo"),
        ("nfl-dal", "Dallas Cowboys", "DAL", "nfl", 1560, "Dallas"),
        ("nfl-det", "Detroit Lions", "DET", "nfl", 1580, "Detroit"),
        ("nfl-mia", "Miami Dolphins", "MIA", "nfl", 1550, "Miami"),
        ("nfl-bal", "Baltimore Ravens", "BAL", "nfl", 1610, "Baltimore"),
    ),
    Sport.NBA: (
        ("nba-bos", "Boston Celtics", "BOS", "nba", 1680, "Boston"),
        ("nba-den", "Denver Nuggets", "DEN", "nba", 1640, "Denver"),
        ("nba-okc", "Oklahoma City Thunder", "OKC", "nba", 1620, "Oklahoma City"),
        ("nba-min", "Minnesota Timberwolves", "MIN", "nba", 1600, "Minneapolis"),
        ("nba-lac", "LA Clippers", "LAC", "nba", 1580, "Los Angeles"),
        ("nba-lal", "LA Lakers", "LAL", "nba", 1550, "Los Angeles"),
        ("nba-gsw", "Golden State Warriors", "GSW", "nba", 1560, "San Francisco"),
        ("nba-phx", "Phoenix Suns", "PHX", "nba", 1570, "Phoenix"),
    ),
    Sport.MLB: (
        ("mlb-lad", "Los Angeles Dodgers", "LAD", "mlb", 1640, "Los Angeles"),
        ("mlb-atl", "Atlanta Braves", "ATL", "mlb", 1620, "Atlanta"),
        ("mlb-phi", "Philadelphia Phillies", "PHI", "mlb", 1600, "Philadelphia"),
        ("mlb-hou", "Houston Astros", "HOU", "mlb", 1590, "Houston"),
        ("mlb-tex", "Texas Rangers", "TEX", "mlb", 1580, "Arlington"),
        ("mlb-nyy", "New York Yankees", "NYY", "mlb", 1570, "New York"),
    ),
    Sport.NHL: (
        ("nhl-fla", "Florida Panthers", "FLA", "nhl", 1630, "Sunrise"),
        ("nhl-edm", "Edmonton Oilers", "EDM", "nhl", 1620, "Edmonton"),
        ("nhl-dal", "Dallas Stars", "DAL", "nhl", 1600, "Dallas"),
        ("nhl-van", "Vancouver Canucks", "VAN", "nhl", 1580, "Vancouver"),
        ("nhl-bos", "Boston Bruins", "BOS", "nhl", 1590, "Boston"),
        ("nhl-nyr", "New York Rangers", "NYR", "nhl", 1585, "New York"),
    ),
    Sport.SOCCER: (
        ("epl-mci", "Manchester City", "MCI", "epl", 1750, "Manchester"),
        ("epl-ars", "Arsenal", "ARS", "epl", 1720, "London"),
        ("epl-liv", "Liverpool", "LIV", "epl", 1700, "Liverpool"),
        ("epl-avl", "Aston Villa", "AVL", "epl", 1620, "Birmingham"),
        ("epl-tot", "Tottenham", "TOT", "epl", 1600, "London"),
        ("epl-mun", "Manchester United", "MUN", "epl", 1580, "Manchester"),
        ("epl-che", "Chelsea", "CHE", "epl", 1570, "London"),
        ("epl-new", "Newcastle United", "NEW", "epl", 1610, "Newcastle"),
    ),
}

# Inclusive (low, high) ranges for random season records
_RECORD_RANGES = {
    Sport.NFL: ((0, 9), (0, 5), None),
    Sport.NBA: ((20, 69), (10, 39), None),
    Sport.MLB: ((60, 119), (50, 89), None),
    Sport.NHL: ((30, 69), (20, 49), None),
    Sport.SOCCER: ((10, 29), (0, 9), (0, 7)),
}

# Inclusive per-side score ranges for simulated results
SCORE_RANGES = {
    Sport.NFL: (7, 41),
    Sport.NBA: (90, 129),
    Sport.MLB: (1, 8),
    Sport.NHL: (1, 5),
    Sport.SOCCER: (0, 3),
}

# (min confidence, probability the pick was right)
SIMULATED_ACCURACY = ((80, 0.78), (70, 0.68), (60, 0.58), (0, 0.48))


def _random_record(sport: Sport, rng: random.Random) -> TeamRecord:
    wins, losses, draws = _RECORD_RANGES[sport]
    return TeamRecord(
        wins=rng.randint(*wins),
        losses=rng.randint(*losses),
        draws=rng.randint(*draws) if draws else 0,
    )


def mock_teams(sport: Optional[Sport] = None, rng: Optional[random.Random] = None) -> list:
    """Static team list with freshly randomized records."""
    rng = rng or random.Random()
    teams = []
    for team_sport, rows in _BASE_TEAMS.items():
        if sport is not None and team_sport != sport:
            continue
        for team_id, name, abbr, league_id, elo, city in rows:
            teams.append(Team(
                id=team_id,
                name=name,
                abbreviation=abbr,
                sport=team_sport,
                league_id=league_id,
                elo_rating=float(elo),
                city=city,
                record=_random_record(team_sport, rng),
            ))
    return teams


def simulated_hit_rate(confidence: int) -> float:
    for threshold, rate in SIMULATED_ACCURACY:
        if confidence >= threshold:
            return rate
    return SIMULATED_ACCURACY[-1][1]


def generate_historical_predictions(
    days_back: int = 30,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> list:
    """
    Simulated graded predictions for the last days_back days, newest first.

    Each day gets 2-4 completed games with random scores. Whether a pick was
    right is drawn from its confidence tier's hit rate; wrong picks are
    flipped to the other side (any non-home pick becomes home).
    """
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    teams_by_sport = {sport: mock_teams(sport, rng) for sport in Sport}
    sports = list(Sport)

    predictions = []
    for i in range(1, days_back + 1):
        date = now - timedelta(days=i)
        for j in range(rng.randint(2, 4)):
            sport = rng.choice(sports)
            teams = teams_by_sport[sport]
            if len(teams) < 2:
                continue
            home_team, away_team = rng.sample(teams, 2)
            low, high = SCORE_RANGES[sport]

            game = Game(
                id=f"hist-{sport.value}-{date.date().isoformat()}-{j}",
                sport=sport,
                league_id=home_team.league_id,
                home_team=home_team,
                away_team=away_team,
                start_time=date,
                status=GameStatus.COMPLETED,
                home_score=rng.randint(low, high),
                away_score=rng.randint(low, high),
            )

            prediction = generate_prediction(game)
            correct = rng.random() < simulated_hit_rate(prediction.confidence)
            winner = prediction.predicted_winner
            winner_team = prediction.predicted_winner_team
            if not correct:
                winner = "away" if winner == "home" else "home"
                winner_team = home_team if winner == "home" else away_team
            predictions.append(dataclasses.replace(
                prediction,
                predicted_winner=winner,
                predicted_winner_team=winner_team,
                created_at=date,
                correct=correct,
            ))

    predictions.sort(key=lambda p: p.created_at, reverse=True)
    logger.info(f"[HISTORY] Generated {len(predictions)} simulated predictions over {days_back} days")
    return predictions
