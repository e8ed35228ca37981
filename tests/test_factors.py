"""Tests for the individual factor calculators."""

from datetime import datetime, timedelta, timezone

import pytest

from sportscast.features.head_to_head import (
    HeadToHeadRecord,
    calculate_head_to_head_factor,
    extract_head_to_head,
    h2h_confidence,
    is_matching_opponent,
)
from sportscast.features.injuries import (
    PlayerInjury,
    build_injury_report,
    calculate_injury_factor,
    injury_confidence,
    injury_summary_for_llm,
    player_impact,
    team_health_score,
)
from sportscast.features.momentum import calculate_form_score, calculate_momentum_factor
from sportscast.features.rest import calculate_rest_factor, days_between
from sportscast.features.season_phase import (
    calculate_season_phase_factor,
    get_early_season_penalty,
)
from sportscast.features.streak import calculate_streak_factor, get_streak, get_streak_adjustment
from sportscast.features.strength import (
    calculate_home_advantage_factor,
    calculate_team_strength_factor,
)
from sportscast.features.weather import (
    INDOOR_CONDITIONS,
    WEATHER_HOME_FAMILIARITY_NUDGE,
    WeatherConditions,
    calculate_weather_factor,
    describe_weather,
    weather_summary_for_llm,
)
from sportscast.models import FactorResult, Sport, TeamRecord

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def _weather(**overrides) -> WeatherConditions:
    values = dict(
        temperature=60, feels_like=60, wind_speed=5, wind_direction=0, humidity=50,
        precipitation=0, precipitation_probability=0, cloud_cover=20, condition="clear",
    )
    values.update(overrides)
    return WeatherConditions(**values)


def _injury(position="QB", status="out", starter=True, sport=Sport.NFL, name="Star Player"):
    return PlayerInjury(
        player_id=name.lower().replace(" ", "-"),
        player_name=name,
        position=position,
        status=status,
        description="Knee",
        is_starter=starter,
        impact_score=player_impact(position, starter, sport),
    )


class TestFactorResult:
    """Scores and confidences are clamped on construction."""

    def test_clamps_out_of_range_values(self):
        result = FactorResult("X", 0, 3.5, 0.1, "", 1.7)
        assert result.normalized_score == 1.0
        assert result.confidence == 1.0

        result = FactorResult("X", 0, -2.0, 0.1, "", -0.2)
        assert result.normalized_score == -1.0
        assert result.confidence == 0.0


class TestTeamStrength:
    def test_even_records(self, make_game):
        factor = calculate_team_strength_factor(make_game(home_record=(10, 10), away_record=(10, 10)))
        assert factor.normalized_score == 0
        assert factor.description == "Teams are evenly matched based on season record"
        assert factor.confidence == 1.0

    def test_stronger_home_record(self, make_game):
        factor = calculate_team_strength_factor(make_game(home_record=(10, 2), away_record=(4, 8)))
        assert factor.normalized_score > 0
        assert "Home Hawks has stronger record" in factor.description

    def test_stronger_away_record(self, make_game):
        factor = calculate_team_strength_factor(make_game(home_record=(2, 10), away_record=(9, 3)))
        assert factor.normalized_score < 0
        assert factor.description.startswith("Away Wolves")

    def test_confidence_scales_with_games(self, make_game):
        factor = calculate_team_strength_factor(make_game(home_record=(2, 1), away_record=(1, 1)))
        assert factor.confidence == pytest.approx(0.2)


class TestHomeAdvantage:
    @pytest.mark.parametrize("sport,score", [
        (Sport.NFL, 0.4),
        (Sport.NBA, 0.55),
        (Sport.MLB, 0.25),
        (Sport.NHL, 0.45),
        (Sport.SOCCER, 0.5),
    ])
    def test_per_sport_score(self, make_game, sport, score):
        factor = calculate_home_advantage_factor(make_game(sport=sport))
        assert factor.normalized_score == score
        assert factor.confidence == 0.9

    def test_description_uses_venue(self, make_game):
        factor = calculate_home_advantage_factor(make_game(venue="Hawk Arena"))
        assert factor.description == "Home Hawks playing at home (Hawk Arena)"


class TestStreak:
    def test_streak_counts_from_most_recent(self, make_recent_games):
        assert get_streak(make_recent_games(["win", "win", "loss", "win"])) == 2
        assert get_streak(make_recent_games(["loss", "loss", "loss"])) == -3
        assert get_streak(make_recent_games(["draw", "win"])) == 0
        assert get_streak([]) == 0

    def test_undefeated_vs_winless(self, make_recent_games):
        factor = calculate_streak_factor(
            make_recent_games(["win"] * 5), make_recent_games(["loss"] * 5), Sport.NBA,
        )
        assert factor.normalized_score > 0
        assert factor.confidence == 1
        assert factor.description == "Home team on 5-game win streak"

    def test_similar_momentum(self, make_recent_games):
        factor = calculate_streak_factor(
            make_recent_games(["win", "loss"]), make_recent_games(["win", "win"]), Sport.NBA,
        )
        assert factor.description == "Both teams have similar recent momentum"
        assert factor.confidence == pytest.approx(0.4)

    def test_adjustment_is_capped(self, make_recent_games):
        adjustment = get_streak_adjustment(
            make_recent_games(["win"] * 10), make_recent_games(["loss"] * 10),
        )
        assert adjustment == 0.08


class TestRest:
    def test_days_between_floors(self):
        assert days_between(NOW - timedelta(days=2, hours=20), NOW) == 2

    def test_rested_home_vs_back_to_back_away(self):
        factor = calculate_rest_factor(NOW - timedelta(days=7), NOW, NOW, Sport.NBA)
        assert factor.normalized_score == pytest.approx(0.68)
        assert factor.normalized_score > 0
        assert factor.confidence == 1.0
        assert factor.description.startswith("Away team on back-to-back")

    def test_home_back_to_back(self):
        factor = calculate_rest_factor(NOW - timedelta(days=1), NOW - timedelta(days=3), NOW, Sport.NBA)
        assert factor.normalized_score < 0
        assert factor.description.startswith("Home team on back-to-back")

    def test_missing_dates_are_neutral_and_low_confidence(self):
        factor = calculate_rest_factor(None, None, NOW, Sport.NFL)
        assert factor.normalized_score == 0
        assert factor.confidence == 0.3

    def test_one_missing_date_uses_optimal_rest(self):
        factor = calculate_rest_factor(NOW - timedelta(days=2), None, NOW, Sport.NBA)
        assert factor.normalized_score == 0
        assert factor.confidence == 0.3


class TestMomentum:
    def test_form_score_no_games(self):
        form = calculate_form_score([])
        assert form.score == 0.0
        assert form.games_used == 0

    def test_form_uses_last_five(self, make_recent_games):
        form = calculate_form_score(make_recent_games(["win"] * 5 + ["loss"] * 5))
        assert form.games_used == 5
        assert form.win_pct == 1.0

    def test_better_home_form(self, make_recent_games):
        factor = calculate_momentum_factor(
            make_recent_games(["win"] * 5), make_recent_games(["loss"] * 5), Sport.NBA,
        )
        assert factor.normalized_score > 0
        assert factor.confidence == 1.0
        assert factor.description.startswith("Home team in better form")


class TestSeasonPhase:
    def test_identical_records_neutral(self):
        record = TeamRecord(20, 20)
        factor = calculate_season_phase_factor(record, record, Sport.NBA)
        assert factor.normalized_score == 0
        assert factor.description.endswith("Similar playoff positioning")

    def test_late_bubble_team_more_motivated(self):
        factor = calculate_season_phase_factor(TeamRecord(35, 35), TeamRecord(20, 50), Sport.NBA)
        assert factor.normalized_score == pytest.approx(0.6)
        assert "Home team more motivated" in factor.description

    def test_early_season_penalty(self):
        assert get_early_season_penalty(0, Sport.NFL) == pytest.approx(0.15)
        assert get_early_season_penalty(2, Sport.NFL) == pytest.approx(0.075)
        assert get_early_season_penalty(4, Sport.NFL) == 0.0


class TestHeadToHead:
    def test_no_history(self):
        factor = calculate_head_to_head_factor(None, Sport.NBA)
        assert factor.normalized_score == 0
        assert factor.confidence == 0

    def test_matching_opponent(self):
        assert is_matching_opponent("Boston Celtics", "Boston Celtics")
        assert is_matching_opponent("Celtics", "Boston Celtics")
        assert is_matching_opponent("BOS Celtics", "Boston Celtics")
        assert not is_matching_opponent("Miami Heat", "Boston Celtics")
        assert not is_matching_opponent("", "Boston Celtics")

    def test_confidence_ramps_to_ideal_sample(self):
        assert h2h_confidence(0, Sport.NFL) == 0.0
        assert h2h_confidence(2, Sport.NFL) == pytest.approx(0.65)
        assert h2h_confidence(4, Sport.NFL) == 1.0

    def test_extract_dedupes_same_day_meetings(self, make_recent_games):
        home_games = make_recent_games(["win", "win"], opponent="Away Wolves")
        # Same two meetings seen from the away side: away lost both
        away_games = make_recent_games(["loss", "loss"], opponent="Home Hawks")
        h2h = extract_head_to_head("Home Hawks", "Away Wolves", home_games, away_games)
        assert h2h.total_games == 2
        assert h2h.home_team_wins == 2
        assert h2h.away_team_wins == 0

    def test_extract_flips_away_perspective(self, make_recent_games):
        away_games = make_recent_games(["win"], opponent="Home Hawks")
        h2h = extract_head_to_head("Home Hawks", "Away Wolves", [], away_games)
        assert h2h.total_games == 1
        assert h2h.away_team_wins == 1
        assert h2h.last_meetings[0].winner == "away"

    def test_dominant_home_team(self):
        h2h = HeadToHeadRecord(
            total_games=6, home_team_wins=6, away_team_wins=0, draws=0,
            home_team_avg_score=110, away_team_avg_score=95,
            home_team_name="Home Hawks", away_team_name="Away Wolves",
        )
        factor = calculate_head_to_head_factor(h2h, Sport.NBA)
        assert factor.normalized_score > 0.5
        assert factor.confidence == 1.0
        assert factor.description == "Home Hawks dominates H2H: 6-0 in last 6 meetings"


class TestInjuries:
    def test_no_reports(self):
        factor = calculate_injury_factor(None, None, Sport.NFL)
        assert factor.normalized_score == 0
        assert factor.confidence == 0

    def test_healthy_report(self):
        report = build_injury_report("kc", "Kansas City Chiefs", Sport.NFL, [])
        assert report.health_score == 1.0
        assert report.key_players_out == []

    def test_starting_qb_out(self):
        qb = _injury()
        assert qb.impact_score == 1.0
        report = build_injury_report("kc", "Kansas City Chiefs", Sport.NFL, [qb])
        assert report.health_score == pytest.approx(2 / 3)
        assert report.starters_out == 1
        assert report.key_players_out == ["Star Player (QB)"]

    def test_health_score_floor(self):
        injuries = [_injury(name=f"P{i}") for i in range(5)]
        assert team_health_score(injuries) == 0.0

    def test_injured_away_team_favors_home(self):
        home = build_injury_report("kc", "Kansas City Chiefs", Sport.NFL, [], last_updated=NOW)
        away = build_injury_report("buf", "Buffalo Bills", Sport.NFL, [_injury()], last_updated=NOW)
        factor = calculate_injury_factor(home, away, Sport.NFL, now=NOW)
        assert factor.normalized_score > 0
        assert factor.confidence == 1.0
        assert "Buffalo Bills missing: Star Player (QB)" in factor.description

    def test_confidence_by_freshness(self):
        fresh = build_injury_report("a", "A", Sport.NBA, [], last_updated=NOW)
        stale = build_injury_report("b", "B", Sport.NBA, [], last_updated=NOW - timedelta(days=2))
        aging = build_injury_report("c", "C", Sport.NBA, [], last_updated=NOW - timedelta(hours=12))
        assert injury_confidence(fresh, None, NOW) == 0.5
        assert injury_confidence(fresh, fresh, NOW) == 1.0
        assert injury_confidence(fresh, aging, NOW) == 0.8
        assert injury_confidence(fresh, stale, NOW) == 0.5

    def test_summary_for_llm(self):
        away = build_injury_report("buf", "Buffalo Bills", Sport.NFL, [_injury()])
        summary = injury_summary_for_llm(None, away)
        assert "Home Team: No injury data available" in summary
        assert "Star Player (QB): OUT - Knee" in summary


class TestWeather:
    def test_no_weather(self):
        factor = calculate_weather_factor(None, Sport.NFL)
        assert factor.confidence == 0

    def test_indoor_has_no_weight(self):
        factor = calculate_weather_factor(INDOOR_CONDITIONS, Sport.NFL)
        assert factor.weight == 0
        assert factor.confidence == 1.0

    def test_indoor_sport_ignores_outdoor_weather(self):
        factor = calculate_weather_factor(_weather(temperature=-10), Sport.NHL)
        assert factor.weight == 0

    def test_good_conditions(self):
        factor = calculate_weather_factor(_weather(), Sport.NFL)
        assert factor.normalized_score == 0
        assert factor.weight == 0
        assert factor.description.startswith("Good conditions")

    def test_severe_weather_nudges_home(self):
        weather = _weather(
            temperature=10, feels_like=0, wind_speed=30, precipitation=5,
            precipitation_probability=90, condition="snow",
        )
        factor = calculate_weather_factor(weather, Sport.NFL)
        assert factor.normalized_score == WEATHER_HOME_FAMILIARITY_NUDGE
        assert factor.weight == 0.08
        assert factor.value > 20

    def test_describe_weather(self):
        text = describe_weather(_weather(temperature=30, feels_like=20, wind_speed=18, wind_direction=90))
        assert text == "30°F, (feels like 20°F), Wind: 18 mph E"

    def test_summary_for_indoor(self):
        assert "dome/indoor" in weather_summary_for_llm(INDOOR_CONDITIONS)
