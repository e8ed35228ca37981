"""Prediction API routes.

- /api/games: upcoming or today's games from ESPN
- /api/predictions: single (enhanced by default) or batch basic predictions
- /api/analyze: prediction enriched with LLM analysis
- /api/history: simulated graded history with accuracy stats
- /api/summary: LLM slate summary
- /api/cache/invalidate: admin, API key protected
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, ConfigDict, Field

from sportscast.config import get_settings
from sportscast.etl.espn_provider import ESPNProvider
from sportscast.etl.game_context import fetch_game_context
from sportscast.etl.injuries_provider import InjuryProvider
from sportscast.etl.mock_data import generate_historical_predictions
from sportscast.etl.open_meteo_provider import OpenMeteoProvider
from sportscast.llm.analyzer import (
    build_analysis_context,
    enrich_prediction_with_analysis,
    generate_predictions_summary,
)
from sportscast.llm.anthropic_client import AnthropicClient
from sportscast.ml.engine import generate_enhanced_prediction, generate_prediction, generate_predictions
from sportscast.ml.metrics import (
    accuracy_stats,
    confidence_tier_stats,
    daily_accuracy,
    paginate,
    prediction_brier_score,
    sport_stats,
)
from sportscast.models import Game, Sport
from sportscast.routes.serializers import camel_keys, to_json
from sportscast.security import limiter, verify_api_key
from sportscast.state import (
    _incr,
    get_espn_provider,
    get_history_cache,
    get_injury_provider,
    get_llm_client,
    get_weather_provider,
    invalidate_caches,
)
from sportscast.utils.cache import TTLCache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["predictions"])
settings = get_settings()

BATCH_NOTE = "Use /api/analyze with gameId for enhanced 10+ factor predictions"


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    game_id: Optional[str] = Field(None, alias="gameId")
    use_enhanced: bool = Field(True, alias="useEnhanced")


async def _predict_game(
    game: Game,
    enhanced: bool,
    espn: ESPNProvider,
    injuries: InjuryProvider,
    weather: OpenMeteoProvider,
) -> tuple:
    """
    Enhanced prediction when requested and the context fetch succeeds,
    basic otherwise.

    Returns:
        (prediction, context or None)
    """
    if not enhanced:
        return generate_prediction(game), None
    try:
        context = await fetch_game_context(game, espn, injuries, weather)
    except Exception as e:
        logger.warning(f"[PREDICT] Context fetch failed for {game.id}, using basic prediction: {e}")
        _incr("analyze_context_fallback")
        return generate_prediction(game), None
    return generate_enhanced_prediction(context), context


def _parse_date_param(name: str, value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid '{name}' date: {value}")
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


@router.get("/games")
@limiter.limit(settings.RATE_LIMIT_PER_MINUTE)
async def list_games(
    request: Request,
    sport: Optional[Sport] = None,
    limit: Optional[int] = Query(None, ge=1),
    today: bool = False,
    espn: ESPNProvider = Depends(get_espn_provider),
):
    """Upcoming games for the next week, or today's scoreboard."""
    if today:
        games = await espn.get_todays_games(sport)
    else:
        games = await espn.get_upcoming_games(sport)
    if limit:
        games = games[:limit]
    return {"games": to_json(games), "total": len(games), "source": "ESPN"}


@router.get("/predictions")
@limiter.limit(settings.RATE_LIMIT_PER_MINUTE)
async def get_predictions(
    request: Request,
    sport: Optional[Sport] = None,
    game_id: Optional[str] = Query(None, alias="gameId"),
    enhanced: bool = True,
    espn: ESPNProvider = Depends(get_espn_provider),
    injuries: InjuryProvider = Depends(get_injury_provider),
    weather: OpenMeteoProvider = Depends(get_weather_provider),
):
    """
    Single-game prediction when gameId is given, else basic predictions for
    every upcoming game (batch stays basic to bound provider calls).
    """
    if game_id:
        game = await espn.find_game(game_id, sport)
        if game is None:
            raise HTTPException(status_code=404, detail="Game not found")
        prediction, _ = await _predict_game(game, enhanced, espn, injuries, weather)
        _incr("predictions_single")
        return {
            "prediction": to_json(prediction),
            "game": to_json(game),
            "factorsUsed": len(prediction.factors),
        }

    games = await espn.get_upcoming_games(sport)
    predictions = generate_predictions(games)
    _incr("predictions_batch")
    return {
        "predictions": [to_json(p) for p in predictions],
        "total": len(predictions),
        "note": BATCH_NOTE,
    }


@router.post("/analyze")
@limiter.limit(settings.RATE_LIMIT_PER_MINUTE)
async def analyze_game(
    request: Request,
    body: AnalyzeRequest,
    espn: ESPNProvider = Depends(get_espn_provider),
    injuries: InjuryProvider = Depends(get_injury_provider),
    weather: OpenMeteoProvider = Depends(get_weather_provider),
    llm: AnthropicClient = Depends(get_llm_client),
):
    """Prediction plus narrative analysis; enhanced unless useEnhanced is false."""
    if not body.game_id:
        raise HTTPException(status_code=400, detail="gameId is required")

    game = await espn.find_game(body.game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="Game not found")

    base, context = await _predict_game(game, body.use_enhanced, espn, injuries, weather)
    analysis_context = build_analysis_context(context, base.factors) if context is not None else None
    _incr("analyze_enhanced" if analysis_context is not None else "analyze_basic")

    enriched = await enrich_prediction_with_analysis(llm, game, base, analysis_context)
    return {
        "prediction": to_json(enriched),
        "game": to_json(game),
        "factorsUsed": len(base.factors),
        "enhanced": body.use_enhanced,
    }


def _history(days: int, cache: TTLCache) -> list:
    cache_key = f"history-{days}"
    predictions = cache.get(cache_key)
    if predictions is not None:
        _incr("history_cache_hit")
        return predictions
    _incr("history_cache_miss")
    predictions = generate_historical_predictions(days)
    cache.put(cache_key, predictions)
    return predictions


@router.get("/history")
@limiter.limit(settings.RATE_LIMIT_PER_MINUTE)
async def prediction_history(
    request: Request,
    sport: Optional[Sport] = None,
    days: int = Query(90, ge=1, le=365),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    cache: TTLCache = Depends(get_history_cache),
):
    """
    Graded prediction history with accuracy breakdowns.

    Stats cover every prediction that passes the filters, not just the
    returned page.
    """
    start = _parse_date_param("from", from_date)
    end = _parse_date_param("to", to_date)

    predictions = _history(days, cache)
    if sport is not None:
        predictions = [p for p in predictions if p.game is not None and p.game.sport == sport]
    if start or end:
        start = start or datetime.min.replace(tzinfo=timezone.utc)
        end = end or datetime.now(timezone.utc)
        predictions = [p for p in predictions if start <= p.created_at <= end]

    page_items, pagination = paginate(predictions, page, limit)
    return {
        "predictions": [to_json(p) for p in page_items],
        "pagination": camel_keys(pagination),
        "stats": accuracy_stats(predictions),
        "sportStats": sport_stats(predictions),
        "confidenceTiers": confidence_tier_stats(predictions),
        "dailyAccuracy": daily_accuracy(predictions),
        "brierScore": prediction_brier_score(predictions),
    }


@router.get("/summary")
@limiter.limit(settings.RATE_LIMIT_PER_MINUTE)
async def slate_summary(
    request: Request,
    sport: Optional[Sport] = None,
    espn: ESPNProvider = Depends(get_espn_provider),
    llm: AnthropicClient = Depends(get_llm_client),
):
    """Short LLM summary of the upcoming slate's basic predictions."""
    games = await espn.get_upcoming_games(sport)
    predictions = generate_predictions(games)
    summary = await generate_predictions_summary(llm, predictions)
    return {"summary": summary, "total": len(predictions)}


@router.post("/cache/invalidate", dependencies=[Depends(verify_api_key)])
async def clear_caches():
    """Drop every provider and history cache entry."""
    stats = invalidate_caches()
    logger.info(f"[CACHE] Invalidated {sum(s['entries'] for s in stats)} entries")
    return {"status": "ok", "cleared": stats}
