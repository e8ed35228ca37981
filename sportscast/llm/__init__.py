"""Narrative enrichment via the Anthropic Messages API."""

from sportscast.llm.analyzer import (
    GameAnalysisContext,
    analyze_matchup,
    analyze_matchup_enhanced,
    build_analysis_context,
    enrich_prediction_with_analysis,
    generate_predictions_summary,
)
from sportscast.llm.anthropic_client import AnthropicClient, AnthropicError

__all__ = [
    "AnthropicClient",
    "AnthropicError",
    "GameAnalysisContext",
    "analyze_matchup",
    "analyze_matchup_enhanced",
    "build_analysis_context",
    "enrich_prediction_with_analysis",
    "generate_predictions_summary",
]
