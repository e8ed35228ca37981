"""Core routes: health, telemetry, metrics.

Auth per-endpoint:
- /health: public, rate limited
- /telemetry: public, aggregated counters only
- /metrics: Bearer token (when METRICS_BEARER_TOKEN is set)
"""

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from sportscast.config import get_settings
from sportscast.etl.espn_provider import ESPNProvider
from sportscast.llm.anthropic_client import AnthropicClient
from sportscast.security import limiter
from sportscast.state import CACHES, _telemetry, get_espn_provider, get_llm_client
from sportscast.telemetry import get_metrics_text
from sportscast.telemetry.sentry import is_sentry_enabled

router = APIRouter(tags=["core"])
settings = get_settings()


class HealthResponse(BaseModel):
    status: str
    espn_available: bool
    espn_sports: list[str]
    llm_enabled: bool
    sentry_enabled: bool


@router.get("/health", response_model=HealthResponse)
@limiter.limit("120/minute")
async def health_check(
    request: Request,
    espn: ESPNProvider = Depends(get_espn_provider),
    llm: AnthropicClient = Depends(get_llm_client),
):
    """Health check endpoint. Probes each ESPN scoreboard."""
    espn_status = await espn.check_api_status()
    return HealthResponse(
        status="ok" if espn_status["working"] else "degraded",
        espn_available=espn_status["working"],
        espn_sports=espn_status["sports"],
        llm_enabled=llm.enabled,
        sentry_enabled=is_sentry_enabled(),
    )


@router.get("/telemetry")
async def get_telemetry():
    """
    Aggregated counters and cache hit rates.

    NOTE: Counters reset on restart. This is diagnostic telemetry, not
    historical observability. For persistent metrics, scrape /metrics.
    """
    caches = []
    for cache in CACHES:
        stats = cache.stats()
        lookups = stats["hits"] + stats["misses"]
        stats["hit_rate"] = round(stats["hits"] / lookups, 3) if lookups > 0 else 0
        caches.append(stats)

    analyze_total = _telemetry["analyze_enhanced"] + _telemetry["analyze_basic"]
    return {
        "counters": dict(_telemetry),
        "caches": caches,
        "analyze_enhanced_rate": round(_telemetry["analyze_enhanced"] / analyze_total, 3) if analyze_total else 0,
    }


@router.get("/metrics")
async def prometheus_metrics(
    authorization: str = Header(None, alias="Authorization"),
):
    """
    Prometheus metrics: provider requests/errors/latency, LLM usage and
    predictions generated.

    Requires Bearer token authentication via METRICS_BEARER_TOKEN env var.
    """
    expected_token = settings.METRICS_BEARER_TOKEN
    if expected_token:
        if not authorization:
            return PlainTextResponse(
                content="# Unauthorized: Missing Authorization header\n",
                status_code=401,
                media_type="text/plain",
            )
        # "Bearer <token>"
        parts = authorization.split(" ", 1)
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return PlainTextResponse(
                content="# Unauthorized: Invalid Authorization format\n",
                status_code=401,
                media_type="text/plain",
            )
        if parts[1] != expected_token:
            return PlainTextResponse(
                content="# Unauthorized: Invalid token\n",
                status_code=401,
                media_type="text/plain",
            )

    content, content_type = get_metrics_text()
    return PlainTextResponse(content=content, media_type=content_type)
