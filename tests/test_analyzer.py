"""Tests for matchup analysis, LLM fallbacks and prediction enrichment."""

import json
from datetime import timedelta

import httpx
import pytest

from sportscast.features.engineering import GameContext
from sportscast.llm.analyzer import (
    FormRecord,
    GameAnalysisContext,
    StreakInfo,
    build_analysis_context,
    build_enhanced_prompt,
    build_matchup_prompt,
    build_team_context,
    enrich_prediction_with_analysis,
    fallback_enhanced_analysis,
    fallback_matchup_analysis,
    generate_predictions_summary,
    parse_json_response,
    rest_days,
    streak_info,
)
from sportscast.llm.anthropic_client import AnthropicClient
from sportscast.ml.engine import generate_prediction
from sportscast.models import Sport

pytestmark = pytest.mark.anyio


def _llm(reply: str = None, status: int = 200) -> AnthropicClient:
    """Client whose every request returns the given text (or an HTTP error)."""

    def handler(request: httpx.Request) -> httpx.Response:
        if status != 200:
            return httpx.Response(status, text="error")
        return httpx.Response(200, json={
            "content": [{"type": "text", "text": reply}],
            "usage": {"input_tokens": 10, "output_tokens": 10},
        })

    client = AnthropicClient(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    client.api_key = "test-key"
    client.llm_enabled = True
    return client


def _disabled_llm() -> AnthropicClient:
    client = AnthropicClient(client=httpx.AsyncClient(transport=httpx.MockTransport(
        lambda request: httpx.Response(500),
    )))
    client.api_key = ""
    return client


class TestParseJsonResponse:
    def test_plain(self):
        assert parse_json_response('{"a": 1}') == {"a": 1}

    def test_code_fence(self):
        assert parse_json_response('```json\n{"a": {"b": 2}}\n```') == {"a": {"b": 2}}

    def test_prose_around_object(self):
        text = 'Here you go: {"analysis": "ok"} Hope this helps {not json}'
        assert parse_json_response(text) == {"analysis": "ok"}

    def test_no_object(self):
        assert parse_json_response("no json here") is None

    def test_invalid(self):
        assert parse_json_response("{'single': quotes}") is None

    def test_object_inside_array(self):
        assert parse_json_response('[{"a": 1}]') == {"a": 1}
        assert parse_json_response("[1, 2]") is None


class TestContextHelpers:
    def test_streak_info(self, make_recent_games):
        assert streak_info(make_recent_games(["win", "win", "loss"])) == StreakInfo("win", 2)
        assert streak_info(make_recent_games(["loss"])) == StreakInfo("loss", 1)
        assert streak_info(make_recent_games(["draw"])) is None
        assert streak_info([]) is None

    def test_rest_days(self, kickoff):
        assert rest_days(None, kickoff) is None
        assert rest_days(kickoff - timedelta(days=1), kickoff) == 0
        assert rest_days(kickoff - timedelta(days=4), kickoff) == 3

    def test_build_analysis_context(self, make_game, make_recent_games, kickoff):
        games = make_recent_games(["win", "loss", "win"], team_score=100)
        context = GameContext(
            game=make_game(),
            home_recent_games=games,
            home_last_game_date=kickoff - timedelta(days=3),
        )
        analysis = build_analysis_context(context, [])
        assert analysis.home_streak == StreakInfo("win", 1)
        assert analysis.away_streak is None
        assert analysis.home_rest_days == 2
        assert analysis.away_rest_days is None
        assert analysis.home_last5 == FormRecord(2, 1)
        assert analysis.home_avg_score == 100.0


class TestPrompts:
    def test_matchup_prompt(self, make_game):
        game = make_game(sport=Sport.SOCCER, home_record=(10, 2), away_record=(4, 8))
        prompt = build_matchup_prompt(game, generate_prediction(game))
        assert "You are an expert Soccer analyst" in prompt
        assert "Home Hawks (Home) vs Away Wolves (Away)" in prompt
        assert "Draw Probability" in prompt
        assert '"confidenceAdjustment": 0' in prompt

    def test_team_context(self, make_team):
        text = build_team_context(
            make_team(wins=12, losses=4), StreakInfo("win", 3), 0, FormRecord(4, 1), 112.4,
        )
        assert "- Record: 12-4 (75.0%)" in text
        assert "- Current Streak: 3 wins" in text
        assert "- Last 5 Games: 4-1" in text
        assert "- Rest: Back-to-back (0 days rest)" in text
        assert "- Avg Score: 112.4 ppg" in text

    def test_team_context_empty(self, make_team):
        assert build_team_context(make_team(with_record=False)) == "- No additional context available"

    def test_enhanced_prompt_includes_sport_guidance(self, make_game):
        game = make_game(sport=Sport.NFL)
        prompt = build_enhanced_prompt(game, generate_prediction(game), GameAnalysisContext())
        assert "MATCHUP: Away Wolves @ Home Hawks" in prompt
        assert "As an expert NFL Football analyst" in prompt
        assert "Scoring is measured in points." in prompt
        assert "Weather data not available for this game." in prompt
        assert "No additional factors available" in prompt


class TestFallbacks:
    def test_matchup_fallback(self, make_game):
        game = make_game(sport=Sport.NFL, home_record=(10, 2), away_record=(4, 8))
        fallback = fallback_matchup_analysis(game, generate_prediction(game))
        assert fallback.analysis.startswith("Based on season records, Home Hawks has the statistical advantage.")
        assert "difference in win rates is significant" in fallback.analysis
        assert len(fallback.key_factors) == 3
        assert fallback.risk_factors == [
            "Any game can produce unexpected results",
            "Season records may not reflect current team form",
        ]
        assert fallback.confidence_adjustment == 0

    def test_enhanced_fallback(self, make_game):
        game = make_game(sport=Sport.NBA, home_record=(20, 20), away_record=(20, 20))
        prediction = generate_prediction(game)
        context = GameAnalysisContext(
            away_streak=StreakInfo("loss", 4),
            home_rest_days=3,
            away_rest_days=0,
            home_last5=FormRecord(3, 2),
            away_last5=FormRecord(1, 4),
        )
        result = fallback_enhanced_analysis(game, prediction, context).analysis
        assert result.preview == (
            f"Home Hawks enters as the favorite with a {prediction.home_win_probability * 100:.0f}% "
            "win probability. Away Wolves on a 4-game loss streak"
        )
        assert len(result.bullets) == 4
        assert result.bullets[1] == "Away Wolves playing on zero days rest (back-to-back)"
        assert result.risks == [
            "Close matchup - either team can win",
            "Away Wolves may be due for a bounce-back performance",
        ]


class TestEnrichPrediction:
    async def test_basic_enrichment_clamps_confidence(self, make_game):
        game = make_game(sport=Sport.NFL, home_record=(11, 1), away_record=(1, 11))
        prediction = generate_prediction(game)
        reply = json.dumps({
            "analysis": "Home Hawks should roll.",
            "keyFactors": ["Record gap"],
            "riskFactors": ["Turnovers"],
            "confidenceAdjustment": 10,
        })

        enriched = await enrich_prediction_with_analysis(_llm(reply), game, prediction)

        assert enriched is not prediction
        assert prediction.llm_analysis is None
        assert enriched.confidence == min(90, prediction.confidence + 10)
        assert enriched.llm_analysis == (
            "Home Hawks should roll.\n\nKey Factors:\n• Record gap\n\nRisk Factors:\n• Turnovers"
        )
        assert enriched.enhanced_analysis is None
        assert enriched.home_win_probability == prediction.home_win_probability

    async def test_enhanced_enrichment(self, make_game):
        game = make_game(sport=Sport.NBA)
        prediction = generate_prediction(game)
        reply = "```json\n" + json.dumps({
            "preview": "Even fight.",
            "bullets": ["A", "B"],
            "risks": ["C"],
            "keyMatchup": "Guards",
            "xFactor": "Bench",
            "confidenceAdjustment": -3,
        }) + "\n```"

        enriched = await enrich_prediction_with_analysis(_llm(reply), game, prediction, GameAnalysisContext())

        assert enriched.enhanced_analysis.key_matchup == "Guards"
        assert enriched.enhanced_analysis.injury_impact is None
        assert enriched.llm_analysis == "Even fight.\n\nKey Insights:\n• A\n• B\n\nRisk Factors:\n• C"
        assert enriched.confidence == max(50, prediction.confidence - 3)

    async def test_fallback_when_llm_disabled(self, make_game):
        game = make_game(sport=Sport.NFL, home_record=(10, 2), away_record=(4, 8))
        prediction = generate_prediction(game)

        enriched = await enrich_prediction_with_analysis(_disabled_llm(), game, prediction)

        assert enriched.llm_analysis.startswith("Based on season records")
        assert 50 <= enriched.confidence <= 90

    async def test_fallback_on_unparseable_reply(self, make_game):
        game = make_game()
        prediction = generate_prediction(game)
        enriched = await enrich_prediction_with_analysis(
            _llm("Sorry, I cannot help."), game, prediction, GameAnalysisContext(),
        )
        assert enriched.enhanced_analysis.preview.startswith("Home Hawks enters as the favorite")

    async def test_fallback_on_bad_adjustment(self, make_game):
        game = make_game()
        prediction = generate_prediction(game)
        reply = json.dumps({"analysis": "x", "confidenceAdjustment": "lots"})
        enriched = await enrich_prediction_with_analysis(_llm(reply), game, prediction)
        assert enriched.llm_analysis.startswith("Based on season records")

    @pytest.mark.parametrize("adjustment, delta", [(40, 10), (-40, -10), (7.6, 8)])
    async def test_adjustment_capped_at_ten_points(self, make_game, adjustment, delta):
        """The model can move confidence by at most 10 points either way."""
        game = make_game(sport=Sport.NBA, home_record=(10, 10), away_record=(10, 10))
        prediction = generate_prediction(game)
        reply = json.dumps({"analysis": "Coin flip.", "confidenceAdjustment": adjustment})

        enriched = await enrich_prediction_with_analysis(_llm(reply), game, prediction)

        expected = max(50, min(90, prediction.confidence + delta))
        assert enriched.confidence == expected
        assert enriched.llm_analysis.startswith("Coin flip.")

    @pytest.mark.parametrize("raw", ["Infinity", "-Infinity", "NaN", "1e400"])
    async def test_non_finite_adjustment_ignored(self, make_game, raw):
        game = make_game(sport=Sport.NBA, home_record=(10, 10), away_record=(10, 10))
        prediction = generate_prediction(game)
        reply = '{"analysis": "Coin flip.", "confidenceAdjustment": ' + raw + "}"

        enriched = await enrich_prediction_with_analysis(_llm(reply), game, prediction)

        assert enriched.confidence == max(50, min(90, prediction.confidence))
        assert enriched.llm_analysis.startswith("Coin flip.")

    async def test_oversized_integer_adjustment_falls_back(self, make_game):
        game = make_game()
        prediction = generate_prediction(game)
        reply = '{"analysis": "x", "confidenceAdjustment": 1' + "0" * 400 + "}"

        enriched = await enrich_prediction_with_analysis(_llm(reply), game, prediction)

        assert enriched.llm_analysis.startswith("Based on season records")
        assert 50 <= enriched.confidence <= 90


class TestSummary:
    async def test_llm_summary(self, make_game):
        predictions = [generate_prediction(make_game())]
        assert await generate_predictions_summary(_llm("Quiet slate."), predictions) == "Quiet slate."

    async def test_empty_reply(self, make_game):
        predictions = [generate_prediction(make_game())]
        assert await generate_predictions_summary(_llm(""), predictions) == "Analysis unavailable."

    async def test_fallback_counts(self, make_game):
        lopsided = generate_prediction(make_game(sport=Sport.NFL, home_record=(12, 0), away_record=(0, 12)))
        even = generate_prediction(make_game(sport=Sport.MLB, home_record=(50, 50), away_record=(50, 50)))
        summary = await generate_predictions_summary(_llm(status=500), [lopsided, even])
        assert summary == (
            "Today's slate includes 1 games where one team is clearly favored based on record, "
            "and 1 closely matched games. Predictions are based on season records and home advantage."
        )
