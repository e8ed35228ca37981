"""
Telemetry: Prometheus metrics and Sentry error tracking.
"""

from sportscast.telemetry.metrics import (
    record_provider_request,
    record_provider_error,
    record_llm_request,
    record_prediction,
    get_metrics_text,
)

__all__ = [
    "record_provider_request",
    "record_provider_error",
    "record_llm_request",
    "record_prediction",
    "get_metrics_text",
]
