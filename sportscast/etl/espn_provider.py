"""
ESPN site API provider for scoreboards, schedules and team form.

The site API is unofficial and needs no key. Scoreboards are fetched per day
(`?dates=YYYYMMDD`) and fanned out concurrently.

Usage:
    provider = ESPNProvider(cache=TTLCache(300, name="team_schedule"))
    games = await provider.get_upcoming_games(Sport.NBA)
    home, away = await provider.get_game_context(games[0])
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Optional

import httpx

from sportscast.config import get_settings
from sportscast.etl.base import HTTPProvider, ProviderError
from sportscast.models import Game, GameStatus, RecentGame, Sport, Team, TeamRecord
from sportscast.utils.cache import TTLCache

logger = logging.getLogger(__name__)

ESPN_SPORT_PATHS = {
    Sport.NFL: "football/nfl",
    Sport.NBA: "basketball/nba",
    Sport.MLB: "baseball/mlb",
    Sport.NHL: "hockey/nhl",
    Sport.SOCCER: "soccer/eng.1",
}

SOCCER_LEAGUES = (
    ("soccer/eng.1", "Premier League"),
    ("soccer/esp.1", "La Liga"),
    ("soccer/ger.1", "Bundesliga"),
    ("soccer/ita.1", "Serie A"),
    ("soccer/fra.1", "Ligue 1"),
    ("soccer/usa.1", "MLS"),
    ("soccer/uefa.champions", "Champions League"),
)

MAX_SCHEDULE_DAYS_BACK = 14
MAX_RECENT_GAMES = 10
SPREAD_POINT_PROBABILITY = 0.03
_SPREAD_RE = re.compile(r"([A-Z]+)\s*([+-]?\d+\.?\d*)")


@dataclass(frozen=True)
class TeamSchedule:
    team_id: str
    team_name: str
    recent_games: list = field(default_factory=list)  # most recent first
    last_game_date: Optional[datetime] = None


@dataclass(frozen=True)
class GameOdds:
    over_under: Optional[float] = None
    spread: Optional[float] = None  # negative = home favored
    implied_home_probability: Optional[float] = None
    implied_away_probability: Optional[float] = None


def parse_record(summary: Optional[str]) -> Optional[TeamRecord]:
    """Parse "W-L" or "W-L-D"; unparseable parts count as 0."""
    if not summary:
        return None
    parts = summary.split("-")
    if len(parts) < 2:
        return None

    def _num(value: str) -> int:
        try:
            return int(value)
        except ValueError:
            return 0

    return TeamRecord(
        wins=_num(parts[0]),
        losses=_num(parts[1]),
        draws=_num(parts[2]) if len(parts) > 2 else 0,
    )


def parse_espn_date(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_score(value) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def _competitors(event: dict) -> tuple:
    competitions = event.get("competitions") or []
    if not competitions:
        return None, None, None
    competition = competitions[0]
    competitors = competition.get("competitors") or []
    home = next((c for c in competitors if c.get("homeAway") == "home"), None)
    away = next((c for c in competitors if c.get("homeAway") == "away"), None)
    return competition, home, away


def _convert_team(competitor: dict, sport: Sport, league: str) -> Team:
    team = competitor.get("team") or {}
    abbreviation = team.get("abbreviation", "")
    records = competitor.get("records") or []
    return Team(
        id=f"{sport.value}-{abbreviation.lower()}",
        name=team.get("displayName") or team.get("name", abbreviation),
        abbreviation=abbreviation,
        sport=sport,
        league_id=league,
        city=team.get("location"),
        logo_url=team.get("logo"),
        record=parse_record(records[0].get("summary") if records else None),
    )


def game_status(event: dict) -> GameStatus:
    status_type = (event.get("status") or {}).get("type") or {}
    if status_type.get("completed"):
        return GameStatus.COMPLETED
    if status_type.get("state") == "in":
        return GameStatus.LIVE
    return GameStatus.SCHEDULED


def convert_event(event: dict, sport: Sport, league: str) -> Optional[Game]:
    """Convert one scoreboard event to a Game; None when it is malformed."""
    competition, home, away = _competitors(event)
    if competition is None or home is None or away is None:
        return None
    try:
        start_time = parse_espn_date(event["date"])
    except (KeyError, ValueError):
        logger.warning(f"[ESPN] Event {event.get('id')} has no usable date")
        return None

    return Game(
        id=str(event.get("id")),
        sport=sport,
        league_id=league,
        home_team=_convert_team(home, sport, league),
        away_team=_convert_team(away, sport, league),
        start_time=start_time,
        status=game_status(event),
        venue=(competition.get("venue") or {}).get("fullName"),
        home_score=_parse_score(home.get("score")),
        away_score=_parse_score(away.get("score")),
    )


def extract_odds(event: dict) -> Optional[GameOdds]:
    """Spread and a rough implied probability (3% per point) from odds text like "LAL -5.5"."""
    competition, _, _ = _competitors(event)
    if competition is None or not competition.get("odds"):
        return None

    odds = competition["odds"][0]
    spread = None
    match = _SPREAD_RE.search(odds.get("details") or "")
    if match:
        spread = float(match.group(2))

    if spread is None:
        return GameOdds(over_under=odds.get("overUnder"))

    swing = abs(spread) * SPREAD_POINT_PROBABILITY
    home = 0.5 + swing if spread < 0 else 0.5 - swing
    return GameOdds(
        over_under=odds.get("overUnder"),
        spread=spread,
        implied_home_probability=home,
        implied_away_probability=1 - home,
    )


def _recent_game_for(event: dict, abbreviation: str) -> Optional[RecentGame]:
    """The event as a RecentGame for the given team, or None if it did not play."""
    if game_status(event) != GameStatus.COMPLETED or "date" not in event:
        return None
    competition, home, away = _competitors(event)
    if competition is None or home is None or away is None:
        return None

    abbr = abbreviation.lower()
    is_home = (home.get("team") or {}).get("abbreviation", "").lower() == abbr
    is_away = (away.get("team") or {}).get("abbreviation", "").lower() == abbr
    if not is_home and not is_away:
        return None

    own, other = (home, away) if is_home else (away, home)
    team_score = _parse_score(own.get("score")) or 0
    opponent_score = _parse_score(other.get("score")) or 0
    if team_score > opponent_score:
        result = "win"
    elif team_score < opponent_score:
        result = "loss"
    else:
        result = "draw"

    return RecentGame(
        date=parse_espn_date(event["date"]),
        opponent=(other.get("team") or {}).get("displayName", ""),
        is_home=is_home,
        team_score=team_score,
        opponent_score=opponent_score,
        result=result,
    )


def _leagues_for(sport: Optional[Sport], soccer_limit: int) -> list:
    """(path, sport, league label) triples to query."""
    soccer = [(path, Sport.SOCCER, name) for path, name in SOCCER_LEAGUES[:soccer_limit]]
    if sport == Sport.SOCCER:
        return soccer
    if sport is not None:
        return [(ESPN_SPORT_PATHS[sport], sport, sport.value.upper())]
    us = [(path, s, s.value.upper()) for s, path in ESPN_SPORT_PATHS.items() if s != Sport.SOCCER]
    return us + soccer


class ESPNProvider(HTTPProvider):
    """Scoreboard, schedule and team-form reader for the ESPN site API."""

    name = "espn"

    def __init__(
        self,
        cache: Optional[TTLCache] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        settings = get_settings()
        super().__init__(
            client=client,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
            headers={"User-Agent": settings.ESPN_USER_AGENT},
        )
        self.base_url = settings.ESPN_API_BASE.rstrip("/")
        self.days_ahead = settings.ESPN_SCHEDULE_DAYS_AHEAD
        self.days_back = settings.ESPN_SCHEDULE_DAYS_BACK
        self.soccer_limit = settings.ESPN_SOCCER_LEAGUE_LIMIT
        self.cache = cache or TTLCache(settings.TEAM_SCHEDULE_CACHE_TTL_SECONDS, name="team_schedule")
        self.schedule_ttl = settings.TEAM_SCHEDULE_CACHE_TTL_SECONDS

    async def _scoreboard(self, path: str, day: Optional[date] = None) -> list:
        """Events of one scoreboard. Raises ProviderError."""
        params = {"dates": day.strftime("%Y%m%d")} if day else None
        data = await self._get_json(f"{self.base_url}/{path}/scoreboard", params=params, entity="scoreboard")
        return data.get("events") or []

    async def _games_for_league(self, path: str, sport: Sport, league: str) -> list:
        try:
            events = await self._scoreboard(path)
        except ProviderError as e:
            logger.error(f"[ESPN] Scoreboard failed for {path}: {e}")
            return []
        return [g for g in (convert_event(ev, sport, league) for ev in events) if g is not None]

    async def _schedule_for_league(self, path: str, sport: Sport, league: str, start: date) -> list:
        days = [start + timedelta(days=i) for i in range(self.days_ahead)]
        results = await asyncio.gather(
            *(self._scoreboard(path, d) for d in days), return_exceptions=True,
        )

        games = []
        seen = set()
        for day, result in zip(days, results):
            if isinstance(result, ProviderError):
                logger.warning(f"[ESPN] Schedule failed for {path} on {day}: {result}")
                continue
            if isinstance(result, BaseException):
                raise result
            for event in result:
                game = convert_event(event, sport, league)
                if game is None or game.status == GameStatus.COMPLETED or game.id in seen:
                    continue
                seen.add(game.id)
                games.append(game)
        return games

    async def get_todays_games(self, sport: Optional[Sport] = None) -> list:
        """Games on today's default scoreboard, sorted by start time."""
        results = await asyncio.gather(*(
            self._games_for_league(path, s, league)
            for path, s, league in _leagues_for(sport, self.soccer_limit)
        ))
        games = [g for league_games in results for g in league_games]
        games.sort(key=lambda g: g.start_time)
        return games

    async def get_upcoming_games(self, sport: Optional[Sport] = None, start: Optional[date] = None) -> list:
        """Non-completed games over the next days, de-duplicated and sorted."""
        start = start or datetime.now(timezone.utc).date()
        results = await asyncio.gather(*(
            self._schedule_for_league(path, s, league, start)
            for path, s, league in _leagues_for(sport, self.soccer_limit)
        ))
        games = [g for league_games in results for g in league_games]
        games.sort(key=lambda g: g.start_time)
        logger.info(f"[ESPN] {len(games)} upcoming games (sport={sport.value if sport else 'all'})")
        return games

    async def get_team_schedule(
        self,
        abbreviation: str,
        sport: Sport,
        days_back: Optional[int] = None,
        today: Optional[date] = None,
    ) -> TeamSchedule:
        """Last completed games of a team from past scoreboards (cached per sport+team)."""
        cache_key = f"{sport.value}-{abbreviation}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        today = today or datetime.now(timezone.utc).date()
        span = min(days_back or self.days_back, MAX_SCHEDULE_DAYS_BACK)
        days = [today - timedelta(days=i) for i in range(1, span + 1)]
        results = await asyncio.gather(
            *(self._scoreboard(ESPN_SPORT_PATHS[sport], d) for d in days), return_exceptions=True,
        )

        recent = []
        for day, result in zip(days, results):
            if isinstance(result, ProviderError):
                logger.warning(f"[ESPN] Team schedule {cache_key} failed on {day}: {result}")
                continue
            if isinstance(result, BaseException):
                raise result
            for event in result:
                game = _recent_game_for(event, abbreviation)
                if game is not None:
                    recent.append(game)

        recent.sort(key=lambda g: g.date, reverse=True)
        schedule = TeamSchedule(
            team_id=f"{sport.value}-{abbreviation.lower()}",
            team_name=abbreviation,
            recent_games=recent[:MAX_RECENT_GAMES],
            last_game_date=recent[0].date if recent else None,
        )
        self.cache.put(cache_key, schedule, ttl=self.schedule_ttl)
        return schedule

    async def get_game_context(self, game: Game) -> tuple:
        """Schedules for both teams, fetched concurrently: (home, away)."""
        home, away = await asyncio.gather(
            self.get_team_schedule(game.home_team.abbreviation, game.sport),
            self.get_team_schedule(game.away_team.abbreviation, game.sport),
        )
        return home, away

    async def find_game(self, game_id: str, sport: Optional[Sport] = None) -> Optional[Game]:
        """Look up a game by id on today's scoreboards, then the upcoming schedule."""
        todays, upcoming = await asyncio.gather(
            self.get_todays_games(sport),
            self.get_upcoming_games(sport),
        )
        for game in todays + upcoming:
            if game.id == game_id:
                return game
        return None

    async def check_api_status(self) -> dict:
        """Probe each sport's scoreboard: {"working": bool, "sports": [...]}."""
        async def probe(sport: Sport, path: str) -> Optional[str]:
            try:
                await self._scoreboard(path)
            except ProviderError:
                return None
            return sport.value

        results = await asyncio.gather(*(probe(s, p) for s, p in ESPN_SPORT_PATHS.items()))
        working = [s for s in results if s is not None]
        return {"working": bool(working), "sports": working}
