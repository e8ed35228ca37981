"""Tests for ESPN injury reports."""

import httpx
import pytest

from sportscast.etl.injuries_provider import (
    InjuryProvider,
    normalize_position,
    normalize_status,
    parse_injury_response,
)
from sportscast.models import Sport

pytestmark = pytest.mark.anyio

INJURY_PAYLOAD = {
    "team": {
        "injuries": [
            {
                "athlete": {
                    "id": 4065648,
                    "displayName": "Jayson Tatum",
                    "position": {"abbreviation": "SF"},
                    "starter": True,
                },
                "status": "Out",
                "longComment": "Right ankle sprain",
            },
            {
                "athlete": {
                    "id": 3213,
                    "displayName": "Bench Guy",
                    "position": {"abbreviation": "Point Guard"},
                },
                "status": "Day-To-Day",
                "shortComment": "Rest",
            },
        ]
    }
}


class TestNormalization:
    @pytest.mark.parametrize("raw,expected", [
        ("Out", "out"),
        ("O", "out"),
        ("Doubtful", "doubtful"),
        ("Q", "questionable"),
        ("Probable", "probable"),
        ("Day-To-Day", "day-to-day"),
        ("Injured Reserve", "ir"),
        ("Suspension", "unknown"),
    ])
    def test_status(self, raw, expected):
        assert normalize_status(raw) == expected

    def test_position_aliases(self):
        assert normalize_position("Point Guard") == "PG"
        assert normalize_position("quarterback") == "QB"
        assert normalize_position("LW") == "LW"

    def test_parse_response(self):
        report = parse_injury_response(INJURY_PAYLOAD, "bos", "Boston Celtics", Sport.NBA)
        assert len(report.injuries) == 2
        assert report.injuries[0].player_id == "4065648"
        assert report.injuries[0].impact_score == 1.0
        assert report.injuries[1].position == "PG"
        assert report.injuries[1].description == "Rest"
        assert report.starters_out == 1
        assert report.key_players_out == ["Jayson Tatum (SF)"]
        assert report.health_score < 1.0

    def test_parse_empty_response(self):
        report = parse_injury_response({}, "bos", "Boston Celtics", Sport.NBA)
        assert report.injuries == []
        assert report.health_score == 1.0


class TestInjuryProvider:
    async def test_fetches_and_caches(self):
        paths = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(200, json=INJURY_PAYLOAD)

        provider = InjuryProvider(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        report = await provider.get_team_injuries("bos", "Boston Celtics", Sport.NBA)
        again = await provider.get_team_injuries("bos", "Boston Celtics", Sport.NBA)

        assert report is again
        assert paths == ["/apis/site/v2/sports/basketball/nba/teams/bos/injuries"]

    async def test_failure_returns_healthy_report(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        provider = InjuryProvider(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        report = await provider.get_team_injuries("bos", "Boston Celtics", Sport.NBA)
        assert report.health_score == 1.0
        assert report.injuries == []
        assert len(provider.cache) == 0

    async def test_game_reports_for_both_teams(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if "/teams/kc/" in request.url.path:
                return httpx.Response(200, json={"team": {"injuries": []}})
            return httpx.Response(200, json=INJURY_PAYLOAD)

        provider = InjuryProvider(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        home, away = await provider.get_game_injury_reports(
            "kc", "Kansas City Chiefs", "buf", "Buffalo Bills", Sport.NFL,
        )
        assert home.team_name == "Kansas City Chiefs"
        assert home.health_score == 1.0
        assert away.team_name == "Buffalo Bills"
        assert len(away.injuries) == 2
