"""
ESPN team injury reports.

A failed fetch yields an empty report (fully healthy) so the injury factor
degrades to neutral instead of failing the prediction. Reports are cached
per sport and team.
"""

import asyncio
import logging
from typing import Optional

import httpx

from sportscast.config import get_settings
from sportscast.etl.base import HTTPProvider, ProviderError
from sportscast.features.injuries import (
    PlayerInjury,
    TeamInjuryReport,
    build_injury_report,
    empty_injury_report,
    player_impact,
)
from sportscast.models import Sport
from sportscast.utils.cache import TTLCache

logger = logging.getLogger(__name__)

ESPN_LEAGUE_MAP = {
    Sport.NFL: ("football", "nfl"),
    Sport.NBA: ("basketball", "nba"),
    Sport.MLB: ("baseball", "mlb"),
    Sport.NHL: ("hockey", "nhl"),
    Sport.SOCCER: ("soccer", "usa.1"),  # MLS
}

POSITION_ALIASES = {
    "QUARTERBACK": "QB",
    "RUNNINGBACK": "RB",
    "WIDERECEIVER": "WR",
    "TIGHTEND": "TE",
    "OFFENSIVE": "OG",
    "DEFENSIVE": "DE",
    "LINEBACKER": "LB",
    "CORNERBACK": "CB",
    "SAFETY": "S",
    "GUARD": "G",
    "FORWARD": "F",
    "CENTER": "C",
    "POINTGUARD": "PG",
    "SHOOTINGGUARD": "SG",
    "SMALLFORWARD": "SF",
    "POWERFORWARD": "PF",
    "GOALKEEPER": "GK",
    "DEFENDER": "CB",
    "MIDFIELDER": "CM",
    "ATTACKER": "ST",
    "STRIKER": "ST",
}


def normalize_position(position: str) -> str:
    pos = position.upper().strip()
    return POSITION_ALIASES.get("".join(pos.split()), pos)


def normalize_status(status: str) -> str:
    """Map free-text ESPN status to a known status; first match wins."""
    s = status.lower().strip()
    if "out" in s or s == "o":
        return "out"
    if "doubtful" in s or s == "d":
        return "doubtful"
    if "questionable" in s or s == "q":
        return "questionable"
    if "probable" in s or s == "p":
        return "probable"
    if "day-to-day" in s or "dtd" in s:
        return "day-to-day"
    if "ir" in s or "injured reserve" in s or "il" in s:
        return "ir"
    return "unknown"


def parse_injury_response(data: dict, team_id: str, team_name: str, sport: Sport) -> TeamInjuryReport:
    injuries = []
    for item in (data.get("team") or {}).get("injuries") or []:
        athlete = item.get("athlete") or {}
        position = normalize_position((athlete.get("position") or {}).get("abbreviation", ""))
        is_starter = bool(athlete.get("starter", False))
        injuries.append(PlayerInjury(
            player_id=str(athlete.get("id", "")),
            player_name=athlete.get("displayName") or "Unknown",
            position=position,
            status=normalize_status(item.get("status") or ""),
            description=item.get("longComment") or item.get("shortComment") or "",
            is_starter=is_starter,
            impact_score=player_impact(position, is_starter, sport),
            return_date=item.get("returnDate"),
        ))
    return build_injury_report(team_id, team_name, sport, injuries)


class InjuryProvider(HTTPProvider):
    """Reads ESPN injury reports for a team."""

    name = "espn_injuries"

    def __init__(
        self,
        cache: Optional[TTLCache] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        settings = get_settings()
        super().__init__(
            client=client,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
            headers={"Accept": "application/json"},
        )
        self.base_url = settings.ESPN_API_BASE.rstrip("/")
        self.cache_ttl = settings.INJURY_CACHE_TTL_SECONDS
        self.cache = cache or TTLCache(self.cache_ttl, name="injuries")

    async def get_team_injuries(self, team_id: str, team_name: str, sport: Sport) -> TeamInjuryReport:
        cache_key = f"{sport.value}-{team_id}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        espn_sport, league = ESPN_LEAGUE_MAP[sport]
        url = f"{self.base_url}/{espn_sport}/{league}/teams/{team_id}/injuries"
        try:
            data = await self._get_json(url, entity="team_injuries")
        except ProviderError as e:
            logger.error(f"[INJURIES] Error fetching injuries for {team_name}: {e}")
            return empty_injury_report(team_id, team_name, sport)

        report = parse_injury_response(data, team_id, team_name, sport)
        self.cache.put(cache_key, report, ttl=self.cache_ttl)
        logger.info(
            f"[INJURIES] {team_name}: {len(report.injuries)} listed, health={report.health_score:.2f}"
        )
        return report

    async def get_game_injury_reports(
        self,
        home_team_id: str,
        home_team_name: str,
        away_team_id: str,
        away_team_name: str,
        sport: Sport,
    ) -> tuple:
        """Both teams' reports, fetched concurrently: (home, away)."""
        home, away = await asyncio.gather(
            self.get_team_injuries(home_team_id, home_team_name, sport),
            self.get_team_injuries(away_team_id, away_team_name, sport),
        )
        return home, away
