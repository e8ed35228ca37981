"""Domain models shared by the scoring pipeline, providers and routes."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class Sport(str, Enum):
    NFL = "nfl"
    NBA = "nba"
    MLB = "mlb"
    NHL = "nhl"
    SOCCER = "soccer"


class GameStatus(str, Enum):
    SCHEDULED = "scheduled"
    LIVE = "live"
    COMPLETED = "completed"
    POSTPONED = "postponed"


@dataclass(frozen=True)
class SportInfo:
    name: str
    icon: str
    color: str
    logo_url: str


SPORTS: dict = {
    Sport.NFL: SportInfo("NFL", "🏈", "#013369", "https://a.espncdn.com/i/teamlogos/leagues/500/nfl.png"),
    Sport.NBA: SportInfo("NBA", "🏀", "#C9082A", "https://a.espncdn.com/i/teamlogos/leagues/500/nba.png"),
    Sport.MLB: SportInfo("MLB", "⚾", "#002D72", "https://a.espncdn.com/i/teamlogos/leagues/500/mlb.png"),
    Sport.NHL: SportInfo("NHL", "🏒", "#000000", "https://a.espncdn.com/i/teamlogos/leagues/500/nhl.png"),
    Sport.SOCCER: SportInfo(
        "Soccer", "⚽", "#326295",
        "https://a.espncdn.com/i/teamlogos/soccer/500/default-team-logo-500.png",
    ),
}


@dataclass(frozen=True)
class League:
    id: str
    name: str
    sport: Sport
    country: Optional[str] = None


LEAGUES: list = [
    League("nfl", "NFL", Sport.NFL, "USA"),
    League("nba", "NBA", Sport.NBA, "USA"),
    League("mlb", "MLB", Sport.MLB, "USA"),
    League("nhl", "NHL", Sport.NHL, "USA"),
    League("epl", "Premier League", Sport.SOCCER, "England"),
    League("laliga", "La Liga", Sport.SOCCER, "Spain"),
    League("bundesliga", "Bundesliga", Sport.SOCCER, "Germany"),
    League("seriea", "Serie A", Sport.SOCCER, "Italy"),
    League("mls", "MLS", Sport.SOCCER, "USA"),
]


@dataclass(frozen=True)
class TeamRecord:
    """Season record. Draws count as half a win."""

    wins: int
    losses: int
    draws: int = 0

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.draws

    @property
    def win_pct(self) -> float:
        """Win percentage with draws as 0.5; 0.5 when no games played."""
        if self.games_played == 0:
            return 0.5
        return (self.wins + self.draws * 0.5) / self.games_played

    def summary(self) -> str:
        if self.draws:
            return f"{self.wins}-{self.losses}-{self.draws}"
        return f"{self.wins}-{self.losses}"


@dataclass(frozen=True)
class Team:
    id: str
    name: str
    abbreviation: str
    sport: Sport
    league_id: str
    elo_rating: float = 1500.0
    logo_url: Optional[str] = None
    city: Optional[str] = None
    record: Optional[TeamRecord] = None


@dataclass(frozen=True)
class Game:
    id: str
    sport: Sport
    league_id: str
    home_team: Team
    away_team: Team
    start_time: datetime
    status: GameStatus = GameStatus.SCHEDULED
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    venue: Optional[str] = None


@dataclass(frozen=True)
class RecentGame:
    """One past result from a team's perspective."""

    date: datetime
    opponent: str
    is_home: bool
    team_score: int
    opponent_score: int
    result: str  # win, loss, draw


def clamp(value: float, low: float = -1.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


@dataclass
class FactorResult:
    """Single weighted signal. Positive normalized_score favors the home team."""

    name: str
    value: float
    normalized_score: float
    weight: float
    description: str
    confidence: float

    def __post_init__(self):
        self.normalized_score = clamp(self.normalized_score)
        self.confidence = clamp(self.confidence, 0.0, 1.0)


@dataclass
class GameFactors:
    game: Game
    factors: list
    combined_score: float
    home_advantage: float
    away_advantage: float


@dataclass
class PredictionFactor:
    """Display form of a factor."""

    name: str
    value: float
    description: str
    weight: float


@dataclass
class EnhancedAnalysis:
    preview: str
    bullets: list
    risks: list
    key_matchup: Optional[str] = None
    x_factor: Optional[str] = None
    confidence_rationale: Optional[str] = None
    injury_impact: Optional[str] = None
    weather_impact: Optional[str] = None


@dataclass
class Prediction:
    id: str
    game_id: str
    game: Optional[Game]
    predicted_winner: str  # home, away, draw
    confidence: int  # 0-100
    ml_probability: float
    home_win_probability: float
    away_win_probability: float
    draw_probability: Optional[float] = None
    predicted_winner_team: Optional[Team] = None
    llm_analysis: Optional[str] = None
    enhanced_analysis: Optional[EnhancedAnalysis] = None
    factors: list = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    correct: Optional[bool] = None
