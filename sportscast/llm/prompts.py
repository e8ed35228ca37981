"""Per-sport prompt configuration for matchup analysis."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

from sportscast.models import Sport


@dataclass(frozen=True)
class ScoringTerms:
    unit: str  # points, runs, goals
    high_scoring: int
    low_scoring: int


@dataclass(frozen=True)
class SportPromptConfig:
    sport: Sport
    sport_name: str
    key_metrics: tuple
    risk_patterns: tuple
    analysis_focus: str
    scoring_terms: ScoringTerms
    position_importance: tuple
    home_advantage_context: str
    weather_relevance: bool
    custom_instructions: Optional[str] = None


NFL_PROMPT_CONFIG = SportPromptConfig(
    sport=Sport.NFL,
    sport_name="NFL Football",
    key_metrics=(
        "Quarterback performance (passer rating, completion %, turnovers)",
        "Turnover differential (takeaways vs giveaways)",
        "Red zone efficiency (TDs vs FGs inside the 20)",
        "Third down conversion rate",
        "Rushing attack effectiveness vs defensive run stop rate",
        "Pressure/sack rate for pass rush",
        "Points per game and points allowed",
        "Time of possession and play count",
    ),
    risk_patterns=(
        "Divisional games are often closer regardless of record",
        "Teams coming off bye weeks have a statistical advantage",
        "Cold weather significantly affects passing teams from warm climates",
        "West coast teams traveling east for early games (body clock)",
        "Thursday Night Football for non-bye teams (short rest)",
        "Backup quarterback situations drastically change spreads",
        "Late-season games with playoff implications vs eliminated teams",
    ),
    analysis_focus=(
        "NFL games are often decided by turnovers and red zone efficiency. "
        "Quarterback play is the most important factor. "
        "Weather affects passing more than rushing. "
        "Home field is worth approximately 2.5-3 points."
    ),
    scoring_terms=ScoringTerms("points", 50, 35),
    position_importance=(
        "QB (Quarterback) - Most important",
        "LT (Left Tackle) - Protects QB blind side",
        "EDGE/DE (Pass Rusher) - Disrupts offense",
        "CB (Cornerback) - Covers receivers",
    ),
    home_advantage_context=(
        "NFL home advantage is worth roughly 2.5-3 points. "
        "Dome teams have larger home edge. "
        "Crowd noise significantly impacts offense communication."
    ),
    weather_relevance=True,
    custom_instructions=(
        "Note any key injuries, especially at QB, OL, or primary pass rusher. "
        "Divisional games often defy records. "
        "Consider rest advantage from bye weeks."
    ),
)

NBA_PROMPT_CONFIG = SportPromptConfig(
    sport=Sport.NBA,
    sport_name="NBA Basketball",
    key_metrics=(
        "Offensive rating (points per 100 possessions)",
        "Defensive rating (points allowed per 100 possessions)",
        "Net rating (offensive - defensive rating)",
        "Pace (possessions per game)",
        "Three-point shooting percentage and volume",
        "Free throw rate and percentage",
        "Rebounding (offensive and defensive)",
        "Turnover rate and assists per game",
    ),
    risk_patterns=(
        "Back-to-back games significantly impact performance (-3 to -5 pts)",
        "Third game in four nights is particularly draining",
        "Altitude adjustment in Denver affects visiting teams",
        "Load management for star players in regular season",
        "West coast to east coast travel for early games",
        "Trap games before marquee matchups",
        "Teams clinching playoff spots may rest players",
        "End of season tank scenarios",
    ),
    analysis_focus=(
        "NBA is heavily influenced by rest and travel. "
        "Star player availability is crucial - one player can swing games 5+ points. "
        "Pace matchups matter: slow teams struggle vs uptempo. "
        "Three-point variance can cause upsets."
    ),
    scoring_terms=ScoringTerms("points", 230, 200),
    position_importance=(
        "Star players (top 2-3 scorers) - Most impactful",
        "Point Guard - Orchestrates offense",
        "Center - Paint protection and rebounding",
        "Primary defender on opposing star",
    ),
    home_advantage_context=(
        "NBA home court is worth 3-4 points. "
        "Some arenas have notably loud crowds (Memphis, Golden State). "
        "Altitude in Denver (5,280 ft) affects conditioning."
    ),
    weather_relevance=False,  # indoor
    custom_instructions=(
        "Always check for back-to-back scenarios. "
        "Star player rest or injury is critical. "
        "Late-season games may feature lineup changes. "
        "Playoff seeding can motivate or cause rest."
    ),
)

MLB_PROMPT_CONFIG = SportPromptConfig(
    sport=Sport.MLB,
    sport_name="MLB Baseball",
    key_metrics=(
        "Starting pitcher ERA and WHIP",
        "Starting pitcher strikeout rate (K/9) and walk rate (BB/9)",
        "Team batting average and on-base percentage",
        "Bullpen ERA and save conversion rate",
        "Home run rate (for and against)",
        "Run differential (runs scored - runs allowed)",
        "Batting average with runners in scoring position",
        "Fielding percentage and defensive runs saved",
    ),
    risk_patterns=(
        "Starting pitcher is 80%+ of the prediction for a game",
        "Day game after night game impacts hitters",
        "West coast to east coast travel is draining",
        "Bullpen usage in previous games (tired arms)",
        "Umpire tendencies (strike zone size affects pitchers)",
        "Ballpark factors (Coors Field, Yankee Stadium short porch)",
        "Platoon advantages (lefty vs righty matchups)",
        "Hot streaks and slumps for key hitters",
    ),
    analysis_focus=(
        "MLB is a pitching-dominant sport. "
        "The starting pitcher matchup is the most important factor. "
        "Over 162 games, randomness plays a large role in individual games. "
        "Even the best teams lose 60+ games per season."
    ),
    scoring_terms=ScoringTerms("runs", 10, 5),
    position_importance=(
        "Starting Pitcher - Single most important player",
        "Closer - Critical for holding leads",
        "Cleanup hitter (4th in order) - Run production",
        "Shortstop/Catcher - Defensive impact",
    ),
    home_advantage_context=(
        "MLB home advantage is modest (about 54% win rate). "
        "Batting last gives strategic advantage in close games. "
        "Some parks heavily favor pitchers or hitters."
    ),
    weather_relevance=True,
    custom_instructions=(
        "Always emphasize the starting pitcher matchup first. "
        "Note if a team is on a long road trip. "
        "Bullpen availability from recent games matters. "
        "Consider the specific ballpark dimensions."
    ),
)

NHL_PROMPT_CONFIG = SportPromptConfig(
    sport=Sport.NHL,
    sport_name="NHL Hockey",
    key_metrics=(
        "Goals for and goals against per game",
        "Power play percentage and penalty kill percentage",
        "Starting goalie save percentage and goals against average",
        "Shot differential (Corsi/Fenwick)",
        "Expected goals (xG) for and against",
        "Faceoff win percentage",
        "Hits and blocked shots",
        "Goals scored by period (1st/2nd/3rd)",
    ),
    risk_patterns=(
        "Goalie is crucial - starter vs backup is major difference",
        "Back-to-back games impact performance significantly",
        "Teams on long road trips see fatigue",
        "Playoff races increase intensity late season",
        "Revenge games after lopsided losses",
        "Special teams (PP/PK) often decide close games",
        "Overtime games have random outcomes (3v3 format)",
        "Teams resting players for playoffs",
    ),
    analysis_focus=(
        "NHL games are often decided by goaltending and special teams. "
        "Starting goalie confirmation is essential for prediction. "
        "Puck luck (bounces, deflections) adds randomness. "
        "Overtime is essentially a coin flip."
    ),
    scoring_terms=ScoringTerms("goals", 7, 4),
    position_importance=(
        "Starting Goalie - Most impactful single player",
        "Top-line center - Offensive driver",
        "First-pair defenseman - Both ends of ice",
        "Power play quarterback - PP specialist",
    ),
    home_advantage_context=(
        "NHL home advantage is worth about 0.15 goals. "
        "Last change allows favorable matchups. "
        "Altitude affects some players (Denver, Calgary)."
    ),
    weather_relevance=False,  # indoor
    custom_instructions=(
        "Always note which goalie is starting. "
        "Back-to-back situations heavily favor the rested team. "
        "Check power play and penalty kill stats for special teams battle. "
        "Late-season games may feature AHL call-ups."
    ),
)

SOCCER_PROMPT_CONFIG = SportPromptConfig(
    sport=Sport.SOCCER,
    sport_name="Soccer/Football",
    key_metrics=(
        "Expected goals (xG) for and against",
        "Goals scored and conceded per game",
        "Clean sheets percentage",
        "Possession percentage",
        "Shots on target per game",
        "Home vs away record split",
        "Points per game",
        "Goals from set pieces",
    ),
    risk_patterns=(
        "Draws are common (25-30% of games)",
        "Fixture congestion (European matches midweek)",
        "Cup games between league matches cause rotation",
        "Away form is often significantly worse than home",
        "Derbies/rivalries transcend form",
        "Teams with nothing to play for late season",
        "Newly promoted teams overperform early season",
        "Manager changes cause short-term volatility",
    ),
    analysis_focus=(
        "Soccer has the highest draw rate of major sports. "
        "Low-scoring nature means upsets are common. "
        "Squad rotation for fixture congestion is key. "
        "Away teams often play more defensively."
    ),
    scoring_terms=ScoringTerms("goals", 4, 2),
    position_importance=(
        "Goalkeeper - Clean sheets matter",
        "Striker - Goals are scarce",
        "Central midfielder - Controls tempo",
        "Center back - Defensive solidity",
    ),
    home_advantage_context=(
        "Soccer home advantage is substantial (60%+ home win rate historically). "
        "Crowd atmosphere directly impacts players. "
        "Travel fatigue for away European matches."
    ),
    weather_relevance=True,
    custom_instructions=(
        "Always consider the possibility of a draw. "
        "Check for midweek European/cup games causing rotation. "
        "Manager changes create unpredictable results. "
        "Note the competition (league vs cup vs European)."
    ),
)

PROMPT_CONFIGS = MappingProxyType({
    Sport.NFL: NFL_PROMPT_CONFIG,
    Sport.NBA: NBA_PROMPT_CONFIG,
    Sport.MLB: MLB_PROMPT_CONFIG,
    Sport.NHL: NHL_PROMPT_CONFIG,
    Sport.SOCCER: SOCCER_PROMPT_CONFIG,
})


def get_prompt_config(sport: Sport) -> SportPromptConfig:
    return PROMPT_CONFIGS[sport]


def build_sport_specific_instructions(sport: Sport) -> str:
    """Key metrics, risk patterns and focus block for the analysis prompt."""
    config = get_prompt_config(sport)

    lines = [
        f"As an expert {config.sport_name} analyst, focus on these key factors:",
        "",
        "KEY METRICS TO CONSIDER:",
        *[f"• {m}" for m in config.key_metrics],
        "",
        "RISK PATTERNS TO WATCH:",
        *[f"• {r}" for r in config.risk_patterns],
        "",
        f"ANALYSIS FOCUS: {config.analysis_focus}",
        "",
        f"HOME ADVANTAGE: {config.home_advantage_context}",
    ]

    if config.weather_relevance:
        lines.extend(["", "WEATHER IMPACT: Consider weather conditions for outdoor games"])

    if config.custom_instructions:
        lines.extend(["", config.custom_instructions])

    return "\n".join(lines)


def get_scoring_context(sport: Sport) -> str:
    terms = get_prompt_config(sport).scoring_terms
    return (
        f"Scoring is measured in {terms.unit}. Games above {terms.high_scoring} {terms.unit} "
        f"are considered high-scoring; below {terms.low_scoring} {terms.unit} is low-scoring."
    )
