"""Assemble the full factor context for one game from every provider."""

import asyncio
import logging

from sportscast.etl.espn_provider import ESPNProvider
from sportscast.etl.injuries_provider import InjuryProvider
from sportscast.etl.open_meteo_provider import OpenMeteoProvider
from sportscast.features.engineering import GameContext
from sportscast.models import Game

logger = logging.getLogger(__name__)


def team_slug(name: str) -> str:
    """'Dallas Cowboys' -> 'dallas-cowboys' (dome and venue lookups)."""
    return "-".join(name.lower().split())


async def fetch_game_context(
    game: Game,
    espn: ESPNProvider,
    injuries: InjuryProvider,
    weather: OpenMeteoProvider,
) -> GameContext:
    """
    Schedules, injury reports and kickoff weather, fetched concurrently.

    Injury and weather failures degrade inside their providers (healthy
    report, None). Unexpected schedule errors propagate so the caller can
    fall back to a basic prediction.
    """
    (home_schedule, away_schedule), (home_injuries, away_injuries), conditions = await asyncio.gather(
        espn.get_game_context(game),
        injuries.get_game_injury_reports(
            game.home_team.abbreviation.lower(),
            game.home_team.name,
            game.away_team.abbreviation.lower(),
            game.away_team.name,
            game.sport,
        ),
        weather.get_game_weather(
            game.start_time,
            venue=game.venue,
            home_team_id=team_slug(game.home_team.name),
            sport=game.sport,
        ),
    )

    logger.info(
        f"[CONTEXT] {game.id}: home_recent={len(home_schedule.recent_games)} "
        f"away_recent={len(away_schedule.recent_games)} weather={'yes' if conditions else 'no'}"
    )
    return GameContext(
        game=game,
        home_recent_games=home_schedule.recent_games,
        away_recent_games=away_schedule.recent_games,
        home_last_game_date=home_schedule.last_game_date,
        away_last_game_date=away_schedule.last_game_date,
        home_injuries=home_injuries,
        away_injuries=away_injuries,
        weather=conditions,
    )
