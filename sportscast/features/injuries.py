"""Injury report types and the roster-health factor.

Health is 1.0 for a fully healthy roster and falls toward 0 as weighted
absences pile up; about three fully weighted absences saturate it.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Optional

from sportscast.models import FactorResult, Sport, clamp

MAX_TOTAL_IMPACT = 3.0
STARTER_MULTIPLIER = 1.5
DEFAULT_POSITION_IMPORTANCE = 0.4
KEY_PLAYER_MIN_IMPACT = 0.6
KEY_PLAYER_MIN_STATUS_IMPACT = 0.5

POSITION_IMPORTANCE = MappingProxyType({
    Sport.NFL: MappingProxyType({
        "QB": 1.0, "LT": 0.7, "RT": 0.6, "RB": 0.5, "WR": 0.5, "TE": 0.4, "C": 0.5, "OG": 0.4,
        "DE": 0.5, "DT": 0.4, "LB": 0.5, "CB": 0.6, "S": 0.5, "K": 0.4, "P": 0.2,
    }),
    Sport.NBA: MappingProxyType({
        "PG": 0.8, "SG": 0.7, "SF": 0.7, "PF": 0.7, "C": 0.8, "G": 0.7, "F": 0.7,
    }),
    Sport.MLB: MappingProxyType({
        "SP": 1.0, "RP": 0.4, "CP": 0.6, "C": 0.5, "1B": 0.4, "2B": 0.5, "SS": 0.6,
        "3B": 0.5, "LF": 0.4, "CF": 0.5, "RF": 0.4, "DH": 0.4,
    }),
    Sport.NHL: MappingProxyType({
        "G": 1.0, "C": 0.7, "LW": 0.5, "RW": 0.5, "D": 0.6,
    }),
    Sport.SOCCER: MappingProxyType({
        "GK": 1.0, "CB": 0.6, "LB": 0.5, "RB": 0.5, "CDM": 0.6, "CM": 0.6, "CAM": 0.7,
        "LM": 0.5, "RM": 0.5, "LW": 0.6, "RW": 0.6, "ST": 0.8, "CF": 0.8,
    }),
})

# Likelihood the player misses the game
STATUS_IMPACT = MappingProxyType({
    "out": 1.0,
    "ir": 1.0,
    "doubtful": 0.75,
    "questionable": 0.5,
    "probable": 0.15,
    "day-to-day": 0.3,
    "unknown": 0.5,
})

INJURY_WEIGHTS = MappingProxyType({
    Sport.NFL: 0.12,
    Sport.NBA: 0.10,
    Sport.MLB: 0.08,
    Sport.NHL: 0.08,
    Sport.SOCCER: 0.08,
})

FRESH_REPORT_AGE = timedelta(hours=6)
STALE_REPORT_AGE = timedelta(days=1)


@dataclass(frozen=True)
class PlayerInjury:
    player_id: str
    player_name: str
    position: str
    status: str
    description: str
    is_starter: bool
    impact_score: float
    return_date: Optional[str] = None


@dataclass(frozen=True)
class TeamInjuryReport:
    team_id: str
    team_name: str
    sport: Sport
    last_updated: datetime
    injuries: list = field(default_factory=list)
    health_score: float = 1.0
    starters_out: int = 0
    key_players_out: list = field(default_factory=list)


def player_impact(position: str, is_starter: bool, sport: Sport) -> float:
    base = POSITION_IMPORTANCE[sport].get(position, DEFAULT_POSITION_IMPORTANCE)
    return min(1.0, base * (STARTER_MULTIPLIER if is_starter else 1.0))


def team_health_score(injuries: list) -> float:
    if not injuries:
        return 1.0
    total = sum(i.impact_score * STATUS_IMPACT[i.status] for i in injuries)
    return max(0.0, 1 - min(1.0, total / MAX_TOTAL_IMPACT))


def build_injury_report(
    team_id: str,
    team_name: str,
    sport: Sport,
    injuries: list,
    last_updated: Optional[datetime] = None,
) -> TeamInjuryReport:
    """Assemble a report with derived health, starters out and key absences."""
    starters_out = sum(1 for i in injuries if i.is_starter and i.status in ("out", "ir"))
    key_players_out = [
        f"{i.player_name} ({i.position})"
        for i in injuries
        if i.impact_score >= KEY_PLAYER_MIN_IMPACT
        and STATUS_IMPACT[i.status] >= KEY_PLAYER_MIN_STATUS_IMPACT
    ]
    return TeamInjuryReport(
        team_id=team_id,
        team_name=team_name,
        sport=sport,
        last_updated=last_updated or datetime.now(timezone.utc),
        injuries=list(injuries),
        health_score=team_health_score(injuries),
        starters_out=starters_out,
        key_players_out=key_players_out,
    )


def empty_injury_report(team_id: str, team_name: str, sport: Sport) -> TeamInjuryReport:
    """Healthy report used when no injury data can be fetched."""
    return build_injury_report(team_id, team_name, sport, [])


def injury_confidence(
    home: Optional[TeamInjuryReport],
    away: Optional[TeamInjuryReport],
    now: Optional[datetime] = None,
) -> float:
    if home is None and away is None:
        return 0.0
    if home is None or away is None:
        return 0.5

    now = now or datetime.now(timezone.utc)
    oldest = max(now - home.last_updated, now - away.last_updated)
    if oldest > STALE_REPORT_AGE:
        return 0.5
    if oldest > FRESH_REPORT_AGE:
        return 0.8
    return 1.0


def _describe(home: Optional[TeamInjuryReport], away: Optional[TeamInjuryReport], diff: float) -> str:
    parts = []
    for report in (home, away):
        if report is not None and report.key_players_out:
            parts.append(f"{report.team_name} missing: {', '.join(report.key_players_out[:3])}")

    if not parts:
        if abs(diff) >= 0.1:
            healthier = home if diff > 0 else away
            return f"{healthier.team_name} has healthier roster"
        return "Both teams relatively healthy"

    if abs(diff) >= 0.2:
        parts.append(f"{'Home' if diff > 0 else 'Away'} has health advantage")
    return ". ".join(parts)


def calculate_injury_factor(
    home: Optional[TeamInjuryReport],
    away: Optional[TeamInjuryReport],
    sport: Sport,
    now: Optional[datetime] = None,
) -> FactorResult:
    """Positive when the home roster is healthier."""
    weight = INJURY_WEIGHTS[sport]
    if home is None and away is None:
        return FactorResult(
            name="Injuries",
            value=0.0,
            normalized_score=0.0,
            weight=weight,
            description="No injury data available",
            confidence=0.0,
        )

    home_health = home.health_score if home is not None else 1.0
    away_health = away.health_score if away is not None else 1.0
    diff = home_health - away_health

    return FactorResult(
        name="Injuries",
        value=diff * 100,
        normalized_score=clamp(diff * 2),
        weight=weight,
        description=_describe(home, away, diff),
        confidence=injury_confidence(home, away, now),
    )


def _report_lines(report: Optional[TeamInjuryReport], side: str) -> list:
    if report is None:
        return [f"{side} Team: No injury data available"]

    lines = [f"{report.team_name} Injury Report:"]
    if not report.injuries:
        lines.append("  - Fully healthy")
        return lines

    lines.append(f"  - Team Health Score: {report.health_score * 100:.0f}%")
    lines.append(f"  - Starters Out: {report.starters_out}")
    if report.key_players_out:
        lines.append(f"  - Key Players Out: {', '.join(report.key_players_out)}")
    for injury in report.injuries[:5]:
        detail = f" - {injury.description}" if injury.description else ""
        lines.append(f"  - {injury.player_name} ({injury.position}): {injury.status.upper()}{detail}")
    if len(report.injuries) > 5:
        lines.append(f"  - ... and {len(report.injuries) - 5} more")
    return lines


def injury_summary_for_llm(
    home: Optional[TeamInjuryReport],
    away: Optional[TeamInjuryReport],
) -> str:
    return "\n".join(_report_lines(home, "Home") + [""] + _report_lines(away, "Away"))
