"""
Matchup narratives from the Anthropic Messages API.

Every entry point degrades to a data-derived analysis when the LLM is
disabled, times out, or returns something that is not a JSON object, so
callers always get a usable result.
"""

import dataclasses
import json
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sportscast.config import get_settings
from sportscast.features.engineering import GameContext
from sportscast.features.injuries import TeamInjuryReport, injury_summary_for_llm
from sportscast.features.streak import get_streak
from sportscast.features.weather import WeatherConditions, weather_summary_for_llm
from sportscast.llm.anthropic_client import AnthropicClient, AnthropicError
from sportscast.llm.prompts import build_sport_specific_instructions, get_scoring_context
from sportscast.models import SPORTS, EnhancedAnalysis, Game, Prediction, Team

logger = logging.getLogger(__name__)

MIN_ADJUSTED_CONFIDENCE = 50
MAX_ADJUSTED_CONFIDENCE = 90
MAX_CONFIDENCE_ADJUSTMENT = 10
HIGH_CONFIDENCE = 75
TOSSUP_CONFIDENCE = 60
LAST_N_GAMES = 5
MAX_FALLBACK_BULLETS = 4
MAX_FALLBACK_RISKS = 2


@dataclass(frozen=True)
class StreakInfo:
    kind: str  # win, loss
    count: int


@dataclass(frozen=True)
class FormRecord:
    wins: int
    losses: int


@dataclass
class GameAnalysisContext:
    """Per-team form and situational data passed to the enhanced prompt."""

    home_streak: Optional[StreakInfo] = None
    away_streak: Optional[StreakInfo] = None
    home_rest_days: Optional[int] = None
    away_rest_days: Optional[int] = None
    home_last5: Optional[FormRecord] = None
    away_last5: Optional[FormRecord] = None
    home_avg_score: Optional[float] = None
    away_avg_score: Optional[float] = None
    factors: list = field(default_factory=list)
    home_injuries: Optional[TeamInjuryReport] = None
    away_injuries: Optional[TeamInjuryReport] = None
    weather: Optional[WeatherConditions] = None


@dataclass
class MatchupAnalysis:
    analysis: str
    key_factors: list
    risk_factors: list
    confidence_adjustment: int = 0  # -10 to +10


@dataclass
class EnhancedMatchupAnalysis:
    analysis: EnhancedAnalysis
    confidence_adjustment: int = 0


# =============================================================================
# CONTEXT
# =============================================================================


def streak_info(games: list) -> Optional[StreakInfo]:
    """Current win or loss streak; None with no games or a draw as latest result."""
    streak = get_streak(games)
    if streak > 0:
        return StreakInfo("win", streak)
    if streak < 0:
        return StreakInfo("loss", -streak)
    return None


def rest_days(last_game_date: Optional[datetime], game_time: datetime) -> Optional[int]:
    """Whole days between games, not counting game day itself."""
    if last_game_date is None:
        return None
    elapsed_days = int((game_time - last_game_date).total_seconds() // 86400)
    return max(0, elapsed_days - 1)


def last_n_record(games: list, n: int = LAST_N_GAMES) -> Optional[FormRecord]:
    if not games:
        return None
    recent = sorted(games, key=lambda g: g.date, reverse=True)[:n]
    return FormRecord(
        wins=sum(1 for g in recent if g.result == "win"),
        losses=sum(1 for g in recent if g.result == "loss"),
    )


def average_score(games: list) -> Optional[float]:
    if not games:
        return None
    return sum(g.team_score for g in games) / len(games)


def build_analysis_context(context: GameContext, factors: list) -> GameAnalysisContext:
    game = context.game
    return GameAnalysisContext(
        home_streak=streak_info(context.home_recent_games),
        away_streak=streak_info(context.away_recent_games),
        home_rest_days=rest_days(context.home_last_game_date, game.start_time),
        away_rest_days=rest_days(context.away_last_game_date, game.start_time),
        home_last5=last_n_record(context.home_recent_games),
        away_last5=last_n_record(context.away_recent_games),
        home_avg_score=average_score(context.home_recent_games),
        away_avg_score=average_score(context.away_recent_games),
        factors=factors,
        home_injuries=context.home_injuries,
        away_injuries=context.away_injuries,
        weather=context.weather,
    )


# =============================================================================
# PROMPTS
# =============================================================================


def _win_pct(team: Team) -> float:
    return team.record.win_pct * 100 if team.record else 50.0


def _record_line(team: Team) -> str:
    record = team.record
    wins = record.wins if record else 0
    losses = record.losses if record else 0
    draws = f" - {record.draws}D" if record and record.draws else ""
    return f"- {team.name}: {wins}W - {losses}L{draws} ({_win_pct(team):.1f}% win rate)"


def _predicted_name(game: Game, prediction: Prediction) -> str:
    if prediction.predicted_winner == "home":
        return game.home_team.name
    if prediction.predicted_winner == "away":
        return game.away_team.name
    return "Draw"


def _game_date(game: Game) -> str:
    return game.start_time.strftime("%m/%d/%Y")


def build_matchup_prompt(game: Game, prediction: Prediction) -> str:
    sport_name = SPORTS[game.sport].name
    draw_line = (
        f"- Draw Probability: {prediction.draw_probability * 100:.1f}%\n"
        if prediction.draw_probability else ""
    )
    return f"""You are an expert {sport_name} analyst. Analyze this matchup using ONLY the data provided. Be accurate and data-driven.

MATCHUP:
{game.home_team.name} (Home) vs {game.away_team.name} (Away)
Date: {_game_date(game)}
Venue: {game.venue or 'TBD'}

CURRENT SEASON RECORDS:
{_record_line(game.home_team)}
{_record_line(game.away_team)}

STATISTICAL PREDICTION (based on records + home advantage):
- Predicted Winner: {_predicted_name(game, prediction)}
- {game.home_team.name} Win Probability: {prediction.home_win_probability * 100:.1f}%
- {game.away_team.name} Win Probability: {prediction.away_win_probability * 100:.1f}%
{draw_line}- Model Confidence: {prediction.confidence}%

ANALYSIS GUIDELINES:
1. Base your analysis ONLY on the records and statistics provided
2. Consider home field advantage for {sport_name}
3. Note any significant record disparities
4. Be realistic about prediction uncertainty - no sports prediction is ever 100% certain
5. Only adjust confidence if the data strongly supports it

Respond in JSON format:
{{
  "analysis": "2-3 sentence analysis based on the records and matchup",
  "keyFactors": ["Factor based on data 1", "Factor based on data 2", "Factor based on data 3"],
  "confidenceAdjustment": 0,
  "riskFactors": ["Acknowledge any game can have surprises", "Any record-based concern"]
}}"""


def build_team_context(
    team: Team,
    streak: Optional[StreakInfo] = None,
    rest: Optional[int] = None,
    last5: Optional[FormRecord] = None,
    avg_score: Optional[float] = None,
) -> str:
    lines = []
    if team.record:
        lines.append(f"- Record: {team.record.summary()} ({_win_pct(team):.1f}%)")
    if streak:
        plural = "s" if streak.count > 1 else ""
        lines.append(f"- Current Streak: {streak.count} {streak.kind}{plural}")
    if last5:
        lines.append(f"- Last 5 Games: {last5.wins}-{last5.losses}")
    if rest is not None:
        if rest == 0:
            lines.append("- Rest: Back-to-back (0 days rest)")
        elif rest == 1:
            lines.append("- Rest: 1 day rest")
        else:
            lines.append(f"- Rest: {rest} days rest")
    if avg_score is not None:
        lines.append(f"- Avg Score: {avg_score:.1f} ppg")
    return "\n".join(lines) if lines else "- No additional context available"


def build_enhanced_prompt(game: Game, prediction: Prediction, context: GameAnalysisContext) -> str:
    sport_name = SPORTS[game.sport].name
    home_context = build_team_context(
        game.home_team, context.home_streak, context.home_rest_days,
        context.home_last5, context.home_avg_score,
    )
    away_context = build_team_context(
        game.away_team, context.away_streak, context.away_rest_days,
        context.away_last5, context.away_avg_score,
    )
    if context.factors:
        factors_summary = "\n".join(f"- {f.name}: {f.description}" for f in context.factors)
    else:
        factors_summary = "No additional factors available"

    return f"""You are an expert {sport_name} analyst. Generate a UNIQUE, game-specific analysis using the data provided.

MATCHUP: {game.away_team.name} @ {game.home_team.name}
Date: {_game_date(game)}
Venue: {game.venue or 'TBD'}

HOME TEAM PROFILE: {game.home_team.name}
{home_context}

AWAY TEAM PROFILE: {game.away_team.name}
{away_context}

MODEL PREDICTION:
- Favored: {_predicted_name(game, prediction)}
- {game.home_team.name} Win Probability: {prediction.home_win_probability * 100:.1f}%
- {game.away_team.name} Win Probability: {prediction.away_win_probability * 100:.1f}%
- Confidence: {prediction.confidence}%

PREDICTION FACTORS:
{factors_summary}

INJURY REPORT:
{injury_summary_for_llm(context.home_injuries, context.away_injuries)}

{weather_summary_for_llm(context.weather)}

SPORT-SPECIFIC ANALYSIS GUIDANCE:
{build_sport_specific_instructions(game.sport)}

{get_scoring_context(game.sport)}

INSTRUCTIONS:
1. Write a 2-sentence preview that mentions SPECIFIC stats (streak lengths, rest days, records, injuries)
2. Create 3-4 bullet points that are UNIQUE to THIS matchup - reference actual numbers and sport-specific insights
3. Identify 1-2 risk factors specific to this game using sport-specific risk patterns
4. Identify the key matchup that will decide this game
5. Name an X-factor (unexpected element that could swing the outcome)
6. Explain why you are or aren't confident in this prediction
7. Use actual data - never make up statistics
8. Consider the sport-specific metrics and patterns listed above

Respond in JSON format:
{{
  "preview": "2-sentence game preview with specific stats",
  "bullets": ["Bullet with specific stat 1", "Bullet with specific stat 2", "Bullet with specific stat 3"],
  "risks": ["Specific risk factor 1", "Specific risk factor 2"],
  "keyMatchup": "The key matchup that will decide this game",
  "xFactor": "An unexpected element that could swing the outcome",
  "confidenceRationale": "Why this prediction is confident or uncertain",
  "injuryImpact": "How injuries affect this game (if applicable)",
  "weatherImpact": "How weather affects this game (if applicable, for outdoor sports)",
  "confidenceAdjustment": 0
}}"""


# =============================================================================
# RESPONSE PARSING
# =============================================================================


def parse_json_response(text: str) -> Optional[dict]:
    """
    Parse the first JSON object from an LLM reply.

    Handles markdown code fences and prose around the object.

    Returns:
        Parsed dict or None if invalid.
    """
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    text = text.strip()

    start = text.find("{")
    if start < 0:
        logger.warning("No JSON object found in response")
        return None

    # Matching closing brace of the first object
    depth = 0
    end = start
    for i, char in enumerate(text[start:], start):
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                end = i + 1
                break
    if depth != 0:
        end = text.rfind("}") + 1

    try:
        data = json.loads(text[start:end])
    except json.JSONDecodeError as e:
        logger.warning(f"JSON parse failed: {e}")
        return None
    return data if isinstance(data, dict) else None


def _string_list(value) -> list:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v]


def _optional_str(value) -> Optional[str]:
    return str(value) if value else None


def _adjustment(data: dict) -> int:
    """confidenceAdjustment as an int within +/-10. Raises ValueError when not numeric."""
    value = float(data.get("confidenceAdjustment") or 0)
    if not math.isfinite(value):
        return 0
    value = max(-MAX_CONFIDENCE_ADJUSTMENT, min(MAX_CONFIDENCE_ADJUSTMENT, value))
    return int(math.floor(value + 0.5))


async def _complete(client: AnthropicClient, prompt: str, max_tokens: Optional[int] = None) -> dict:
    """Run the prompt and return the parsed JSON object. Raises AnthropicError."""
    result = await client.generate(prompt, max_tokens=max_tokens)
    if result.status != "COMPLETED":
        raise AnthropicError(result.error or result.status)
    data = parse_json_response(result.text)
    if data is None:
        raise AnthropicError("Could not parse JSON from response")
    return data


# =============================================================================
# FALLBACKS
# =============================================================================


def fallback_matchup_analysis(game: Game, prediction: Prediction) -> MatchupAnalysis:
    home_pct = _win_pct(game.home_team)
    away_pct = _win_pct(game.away_team)
    favored = game.home_team if prediction.home_win_probability > prediction.away_win_probability else game.away_team
    pct_diff = abs(home_pct - away_pct)

    if pct_diff > 20:
        disparity = f"The {pct_diff:.0f}% difference in win rates is significant."
    else:
        disparity = "Both teams have comparable records, making this a competitive matchup."

    return MatchupAnalysis(
        analysis=(
            f"Based on season records, {favored.name} has the statistical advantage. "
            f"{disparity} Home field advantage also factors into the prediction."
        ),
        key_factors=[
            f"{game.home_team.name} is {home_pct:.0f}% on the season",
            f"{game.away_team.name} is {away_pct:.0f}% on the season",
            f"Home advantage for {game.home_team.name}",
        ],
        risk_factors=[
            "Any game can produce unexpected results",
            "Season records may not reflect current team form",
        ],
    )


def _rest_bullet(game: Game, context: GameAnalysisContext) -> Optional[str]:
    home_rest = context.home_rest_days
    away_rest = context.away_rest_days
    if home_rest == 0:
        return f"{game.home_team.name} playing on zero days rest (back-to-back)"
    if away_rest == 0:
        return f"{game.away_team.name} playing on zero days rest (back-to-back)"
    if home_rest is not None and away_rest is not None:
        diff = abs(home_rest - away_rest)
        if diff >= 2:
            rested = game.home_team if home_rest > away_rest else game.away_team
            return f"{rested.name} has {diff}+ more days rest"
    return None


def fallback_enhanced_analysis(
    game: Game,
    prediction: Prediction,
    context: GameAnalysisContext,
) -> EnhancedMatchupAnalysis:
    favored = game.home_team if prediction.predicted_winner == "home" else game.away_team
    top_probability = max(prediction.home_win_probability, prediction.away_win_probability)

    preview = f"{favored.name} enters as the favorite with a {top_probability * 100:.0f}% win probability. "
    if context.home_streak:
        preview += (
            f"{game.home_team.name} on a {context.home_streak.count}-game "
            f"{context.home_streak.kind} streak"
        )
    elif context.away_streak:
        preview += (
            f"{game.away_team.name} on a {context.away_streak.count}-game "
            f"{context.away_streak.kind} streak"
        )
    else:
        preview += "Both teams looking to build momentum in this matchup."

    bullets = []
    home_record = game.home_team.record
    away_record = game.away_team.record
    if home_record and away_record:
        bullets.append(
            f"{game.home_team.name} is {home_record.wins}-{home_record.losses}, "
            f"{game.away_team.name} is {away_record.wins}-{away_record.losses}"
        )
    rest = _rest_bullet(game, context)
    if rest:
        bullets.append(rest)
    if context.home_last5:
        bullets.append(
            f"{game.home_team.name} is {context.home_last5.wins}-{context.home_last5.losses} in last 5 games"
        )
    if context.away_last5:
        bullets.append(
            f"{game.away_team.name} is {context.away_last5.wins}-{context.away_last5.losses} in last 5 games"
        )
    bullets.append(f"Home advantage factors into {game.home_team.name}'s probability")

    risks = []
    if prediction.confidence < 65:
        risks.append("Close matchup - either team can win")
    home_losing = context.home_streak is not None and context.home_streak.kind == "loss"
    away_losing = context.away_streak is not None and context.away_streak.kind == "loss"
    if home_losing or away_losing:
        losing_team = game.home_team if home_losing else game.away_team
        risks.append(f"{losing_team.name} may be due for a bounce-back performance")
    else:
        risks.append("Any game can produce unexpected results")

    return EnhancedMatchupAnalysis(
        analysis=EnhancedAnalysis(
            preview=preview,
            bullets=bullets[:MAX_FALLBACK_BULLETS],
            risks=risks[:MAX_FALLBACK_RISKS],
        ),
    )


# =============================================================================
# ANALYSIS
# =============================================================================


async def analyze_matchup(client: AnthropicClient, game: Game, prediction: Prediction) -> MatchupAnalysis:
    """Record-based analysis; data-derived fallback on any LLM failure."""
    try:
        data = await _complete(client, build_matchup_prompt(game, prediction))
        return MatchupAnalysis(
            analysis=str(data.get("analysis") or ""),
            key_factors=_string_list(data.get("keyFactors")),
            risk_factors=_string_list(data.get("riskFactors")),
            confidence_adjustment=_adjustment(data),
        )
    except (AnthropicError, ValueError, TypeError, OverflowError) as e:
        logger.warning(f"[LLM] Analysis fallback for {game.id}: {e}")
        return fallback_matchup_analysis(game, prediction)


async def analyze_matchup_enhanced(
    client: AnthropicClient,
    game: Game,
    prediction: Prediction,
    context: GameAnalysisContext,
) -> EnhancedMatchupAnalysis:
    """Game-specific analysis with form, factors, injuries and weather."""
    try:
        data = await _complete(client, build_enhanced_prompt(game, prediction, context))
        return EnhancedMatchupAnalysis(
            analysis=EnhancedAnalysis(
                preview=str(data.get("preview") or ""),
                bullets=_string_list(data.get("bullets")),
                risks=_string_list(data.get("risks")),
                key_matchup=_optional_str(data.get("keyMatchup")),
                x_factor=_optional_str(data.get("xFactor")),
                confidence_rationale=_optional_str(data.get("confidenceRationale")),
                injury_impact=_optional_str(data.get("injuryImpact")),
                weather_impact=_optional_str(data.get("weatherImpact")),
            ),
            confidence_adjustment=_adjustment(data),
        )
    except (AnthropicError, ValueError, TypeError, OverflowError) as e:
        logger.warning(f"[LLM] Enhanced analysis fallback for {game.id}: {e}")
        return fallback_enhanced_analysis(game, prediction, context)


def _adjusted_confidence(confidence: int, adjustment: int) -> int:
    return max(MIN_ADJUSTED_CONFIDENCE, min(MAX_ADJUSTED_CONFIDENCE, confidence + adjustment))


def _bullet_block(title: str, items: list) -> str:
    return f"{title}:\n" + "\n".join(f"• {item}" for item in items)


async def enrich_prediction_with_analysis(
    client: AnthropicClient,
    game: Game,
    prediction: Prediction,
    context: Optional[GameAnalysisContext] = None,
) -> Prediction:
    """
    Attach narrative analysis and the LLM confidence adjustment.

    With a context the enhanced analysis is used and stored as
    enhanced_analysis; llm_analysis is always filled with plain text.
    Returns a new Prediction; the input is not modified.
    """
    if context is not None:
        enhanced = await analyze_matchup_enhanced(client, game, prediction, context)
        analysis = enhanced.analysis
        text = "\n\n".join([
            analysis.preview,
            _bullet_block("Key Insights", analysis.bullets),
            _bullet_block("Risk Factors", analysis.risks),
        ])
        return dataclasses.replace(
            prediction,
            confidence=_adjusted_confidence(prediction.confidence, enhanced.confidence_adjustment),
            llm_analysis=text,
            enhanced_analysis=analysis,
        )

    basic = await analyze_matchup(client, game, prediction)
    text = "\n\n".join([
        basic.analysis,
        _bullet_block("Key Factors", basic.key_factors),
        _bullet_block("Risk Factors", basic.risk_factors),
    ])
    return dataclasses.replace(
        prediction,
        confidence=_adjusted_confidence(prediction.confidence, basic.confidence_adjustment),
        llm_analysis=text,
    )


def _pick_name(prediction: Prediction) -> str:
    game = prediction.game
    if game is None:
        return prediction.predicted_winner
    return game.home_team.name if prediction.predicted_winner == "home" else game.away_team.name


def _matchup_name(prediction: Prediction) -> str:
    game = prediction.game
    if game is None:
        return prediction.game_id
    return f"{game.home_team.name} vs {game.away_team.name}"


async def generate_predictions_summary(client: AnthropicClient, predictions: list) -> str:
    """Two or three sentence slate summary; templated text when the LLM fails."""
    high_confidence = [p for p in predictions if p.confidence >= HIGH_CONFIDENCE]
    tossups = [p for p in predictions if p.confidence < TOSSUP_CONFIDENCE]

    high_lines = "\n".join(
        f"- {_matchup_name(p)}: {_pick_name(p)} ({p.confidence}%)" for p in high_confidence
    )
    tossup_lines = "\n".join(f"- {_matchup_name(p)}: {p.confidence}% confidence" for p in tossups)
    prompt = f"""Summarize these sports predictions briefly and accurately:

High Confidence Picks ({len(high_confidence)}):
{high_lines}

Toss-ups ({len(tossups)}):
{tossup_lines}

Provide a 2-3 sentence factual summary based on the data. Do not make claims beyond what the data shows."""

    try:
        result = await client.generate(prompt, max_tokens=get_settings().LLM_SUMMARY_MAX_TOKENS)
        if result.status != "COMPLETED":
            raise AnthropicError(result.error or result.status)
        return result.text or "Analysis unavailable."
    except AnthropicError as e:
        logger.warning(f"[LLM] Summary fallback: {e}")
        return (
            f"Today's slate includes {len(high_confidence)} games where one team is clearly favored "
            f"based on record, and {len(tossups)} closely matched games. Predictions are based on "
            f"season records and home advantage."
        )
