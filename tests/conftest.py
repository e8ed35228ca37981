"""Shared fixtures: team/game factories and the anyio backend."""

from datetime import datetime, timedelta, timezone

import pytest

from sportscast.models import Game, RecentGame, Sport, Team, TeamRecord

KICKOFF = datetime(2025, 1, 15, 19, 0, tzinfo=timezone.utc)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def kickoff() -> datetime:
    return KICKOFF


@pytest.fixture
def make_team():
    def _make(
        abbreviation: str = "HOM",
        name: str = None,
        sport: Sport = Sport.NBA,
        wins: int = 10,
        losses: int = 10,
        draws: int = 0,
        with_record: bool = True,
    ) -> Team:
        return Team(
            id=f"{sport.value}-{abbreviation.lower()}",
            name=name or f"{abbreviation} Team",
            abbreviation=abbreviation,
            sport=sport,
            league_id=sport.value,
            record=TeamRecord(wins, losses, draws) if with_record else None,
        )

    return _make


@pytest.fixture
def make_game(make_team):
    def _make(
        sport: Sport = Sport.NBA,
        home_record: tuple = (10, 10),
        away_record: tuple = (10, 10),
        start_time: datetime = KICKOFF,
        venue: str = None,
        game_id: str = "game-1",
    ) -> Game:
        return Game(
            id=game_id,
            sport=sport,
            league_id=sport.value,
            home_team=make_team("HOM", "Home Hawks", sport, *home_record),
            away_team=make_team("AWY", "Away Wolves", sport, *away_record),
            start_time=start_time,
            venue=venue,
        )

    return _make


@pytest.fixture
def make_recent_games():
    """Recent games from one team's perspective, most recent first.

    results: sequence of "win", "loss" or "draw".
    """

    def _make(
        results: list,
        opponent: str = "Somebody",
        team_score: int = 100,
        margin: int = 5,
        last_date: datetime = KICKOFF - timedelta(days=2),
        spacing_days: int = 2,
    ) -> list:
        games = []
        for i, result in enumerate(results):
            if result == "win":
                opp_score = team_score - margin
            elif result == "loss":
                opp_score = team_score + margin
            else:
                opp_score = team_score
            games.append(RecentGame(
                date=last_date - timedelta(days=i * spacing_days),
                opponent=opponent,
                is_home=i % 2 == 0,
                team_score=team_score,
                opponent_score=opp_score,
                result=result,
            ))
        return games

    return _make
