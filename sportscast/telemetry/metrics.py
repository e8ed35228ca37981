"""
Prometheus metrics for data providers, the LLM and prediction volume.

Design principles:
- Low cardinality (controlled labels)
- Best-effort (never block main flow)

ALLOWED LABELS (bounded sets):
- provider:     "espn", "espn_injuries", "open_meteo" (max ~5)
- entity:       "scoreboard", "team_injuries", "forecast" (max ~10)
- status_code:  "200", "404", "429", "500", "0" (max ~10)
- error_code:   "timeout", "http_4xx", "http_5xx", "request_error", "parse_error" (max ~10)
- sport:        the five Sport values
- mode:         "basic", "enhanced"

FORBIDDEN AS LABELS: game ids, team ids or names, URLs, dates, error messages.
Use logs for per-game debugging.
"""

import logging

from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
    REGISTRY,
)

logger = logging.getLogger(__name__)

# =============================================================================
# PROVIDER METRICS
# =============================================================================

provider_requests_total = Counter(
    "sportscast_provider_requests_total",
    "Total requests to data providers",
    ["provider", "entity", "status_code"],
)

provider_errors_total = Counter(
    "sportscast_provider_errors_total",
    "Total errors from data providers",
    ["provider", "entity", "error_code"],
)

provider_latency_ms = Histogram(
    "sportscast_provider_latency_ms",
    "Provider request latency in milliseconds",
    ["provider", "entity"],
    buckets=[10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000],
)

# =============================================================================
# LLM METRICS
# =============================================================================

llm_requests_total = Counter(
    "sportscast_llm_requests_total",
    "Total narrative LLM requests",
    ["status"],
)

llm_latency_ms = Histogram(
    "sportscast_llm_latency_ms",
    "Narrative LLM latency in milliseconds",
    buckets=[250, 500, 1000, 2500, 5000, 10000, 20000, 40000, 60000],
)

llm_tokens_total = Counter(
    "sportscast_llm_tokens_total",
    "Narrative LLM tokens",
    ["direction"],
)

# =============================================================================
# PREDICTION METRICS
# =============================================================================

predictions_generated_total = Counter(
    "sportscast_predictions_generated_total",
    "Predictions generated",
    ["sport", "mode"],
)


def record_provider_request(
    provider: str,
    entity: str,
    status_code: int,
    latency_ms: float,
) -> None:
    """Record a provider request count and latency."""
    try:
        provider_requests_total.labels(
            provider=provider,
            entity=entity,
            status_code=str(status_code),
        ).inc()
        provider_latency_ms.labels(provider=provider, entity=entity).observe(latency_ms)
    except Exception as e:
        logger.warning(f"Failed to record provider request metric: {e}")


def record_provider_error(provider: str, entity: str, error_code: str) -> None:
    """Record a provider error."""
    try:
        provider_errors_total.labels(
            provider=provider,
            entity=entity,
            error_code=error_code,
        ).inc()
    except Exception as e:
        logger.warning(f"Failed to record provider error metric: {e}")


def record_llm_request(
    status: str,
    latency_ms: float,
    input_tokens: int = 0,
    output_tokens: int = 0,
) -> None:
    """
    Record a narrative LLM request.

    Args:
        status: "ok", "error", "skipped"
        latency_ms: End-to-end latency in milliseconds
        input_tokens: Number of input tokens (0 if unknown)
        output_tokens: Number of output tokens (0 if unknown)
    """
    try:
        llm_requests_total.labels(status=status).inc()
        if status == "ok" and latency_ms > 0:
            llm_latency_ms.observe(latency_ms)
        if input_tokens > 0:
            llm_tokens_total.labels(direction="input").inc(input_tokens)
        if output_tokens > 0:
            llm_tokens_total.labels(direction="output").inc(output_tokens)
    except Exception as e:
        logger.warning(f"Failed to record LLM request metric: {e}")


def record_prediction(sport: str, mode: str) -> None:
    try:
        predictions_generated_total.labels(sport=sport, mode=mode).inc()
    except Exception as e:
        logger.warning(f"Failed to record prediction metric: {e}")


def get_metrics_text() -> tuple[str, str]:
    """
    Generate Prometheus metrics text output.

    Returns:
        Tuple of (content, content_type)
    """
    return generate_latest(REGISTRY).decode("utf-8"), CONTENT_TYPE_LATEST
