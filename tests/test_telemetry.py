"""Tests for Sentry scrubbing and the serializers used by the API."""

from datetime import datetime, timezone

from prometheus_client import REGISTRY

from sportscast.models import FactorResult, Sport
from sportscast.routes.serializers import camel_keys, to_json
from sportscast.telemetry import get_metrics_text, record_prediction
from sportscast.telemetry.sentry import scrub_sensitive_data


class TestSentryScrubbing:
    def test_redacts_headers_and_query(self):
        event = {
            "request": {
                "headers": {"X-API-Key": "abc", "Authorization": "Bearer t", "Accept": "json"},
                "query_string": "gameId=1&api_key=abc",
                "data": {"gameId": "1"},
            }
        }
        scrubbed = scrub_sensitive_data(event, {})["request"]
        assert scrubbed["headers"]["X-API-Key"] == "[REDACTED]"
        assert scrubbed["headers"]["Authorization"] == "[REDACTED]"
        assert scrubbed["headers"]["Accept"] == "json"
        assert scrubbed["query_string"] == "gameId=1&api_key=[REDACTED]"
        assert scrubbed["data"] == "[SCRUBBED]"

    def test_event_without_request(self):
        assert scrub_sensitive_data({"message": "x"}, {})["request"]["headers"] == {}


class TestMetrics:
    def test_prediction_counter_exported(self):
        labels = {"sport": "nba", "mode": "basic"}
        before = REGISTRY.get_sample_value("sportscast_predictions_generated_total", labels) or 0.0
        record_prediction("nba", "basic")
        content, content_type = get_metrics_text()
        assert REGISTRY.get_sample_value("sportscast_predictions_generated_total", labels) == before + 1
        assert "sportscast_predictions_generated_total" in content
        assert content_type.startswith("text/plain")


class TestSerializers:
    def test_dataclass_to_camel(self):
        assert to_json(FactorResult("Rest Days", 2, 0.5, 0.12, "Rested", 1.0)) == {
            "name": "Rest Days",
            "value": 2,
            "normalizedScore": 0.5,
            "weight": 0.12,
            "description": "Rested",
            "confidence": 1.0,
        }

    def test_nested_values(self):
        value = {"when": datetime(2025, 1, 1, tzinfo=timezone.utc), "sports": (Sport.NBA, Sport.NHL)}
        assert to_json(value) == {"when": "2025-01-01T00:00:00+00:00", "sports": ["nba", "nhl"]}

    def test_camel_keys(self):
        assert camel_keys({"total_pages": 3, "has_more": False}) == {"totalPages": 3, "hasMore": False}
