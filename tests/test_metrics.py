"""Tests for history accuracy statistics."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from sportscast.ml.metrics import (
    accuracy_stats,
    actual_outcome,
    calculate_brier_score,
    confidence_tier_stats,
    daily_accuracy,
    paginate,
    prediction_brier_score,
    sport_stats,
)
from sportscast.models import Prediction, Sport

DAY = datetime(2025, 1, 10, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_prediction(make_game):
    def _make(correct=True, confidence=65, sport=Sport.NBA, created_at=DAY, scores=None,
              probs=(0.6, 0.4, None)):
        game = make_game(sport=sport)
        if scores is not None:
            game = replace(game, home_score=scores[0], away_score=scores[1])
        return Prediction(
            id="p", game_id=game.id, game=game, predicted_winner="home",
            confidence=confidence, ml_probability=confidence / 100,
            home_win_probability=probs[0], away_win_probability=probs[1],
            draw_probability=probs[2], created_at=created_at, correct=correct,
        )

    return _make


class TestAccuracy:
    def test_empty(self):
        assert accuracy_stats([]) == {"total": 0, "correct": 0, "accuracy": 0.0}

    def test_overall(self, make_prediction):
        preds = [make_prediction(True), make_prediction(True), make_prediction(False), make_prediction(True)]
        assert accuracy_stats(preds) == {"total": 4, "correct": 3, "accuracy": 75.0}

    def test_by_sport_drops_empty_sports(self, make_prediction):
        preds = [make_prediction(sport=Sport.NFL), make_prediction(False, sport=Sport.NHL)]
        stats = sport_stats(preds)
        assert [s["sport"] for s in stats] == ["nfl", "nhl"]
        assert stats[1]["accuracy"] == 0.0

    def test_confidence_tiers(self, make_prediction):
        preds = [
            make_prediction(confidence=85),
            make_prediction(False, confidence=80),
            make_prediction(confidence=72),
            make_prediction(confidence=55),
        ]
        tiers = {t["name"]: t for t in confidence_tier_stats(preds)}
        assert tiers["Very High (80%+)"]["total"] == 2
        assert tiers["Very High (80%+)"]["accuracy"] == 50.0
        assert tiers["High (70-79%)"]["total"] == 1
        assert "Moderate (60-69%)" not in tiers
        assert tiers["Low (<60%)"]["min"] == 0

    def test_daily_oldest_first(self, make_prediction):
        preds = [
            make_prediction(created_at=DAY),
            make_prediction(False, created_at=DAY - timedelta(days=1)),
            make_prediction(created_at=DAY + timedelta(hours=3)),
        ]
        assert daily_accuracy(preds) == [
            {"date": "2025-01-09", "accuracy": 0.0, "total": 1},
            {"date": "2025-01-10", "accuracy": 100.0, "total": 2},
        ]


class TestPaginate:
    def test_first_page(self):
        items, meta = paginate(list(range(45)), 1, 20)
        assert items == list(range(20))
        assert meta == {"page": 1, "limit": 20, "total": 45, "total_pages": 3, "has_more": True}

    def test_last_page(self):
        items, meta = paginate(list(range(45)), 3, 20)
        assert items == list(range(40, 45))
        assert meta["has_more"] is False

    def test_past_the_end(self):
        items, meta = paginate([1, 2], 5, 20)
        assert items == []
        assert meta["total_pages"] == 1


class TestBrierScore:
    def test_outcome(self):
        assert actual_outcome(3, 1) == "home"
        assert actual_outcome(1, 3) == "away"
        assert actual_outcome(2, 2) == "draw"

    def test_perfect(self):
        y_true = np.array([0, 1, 2])
        assert calculate_brier_score(y_true, np.eye(3)) == 0.0

    def test_uniform(self):
        y_true = np.array([0, 2])
        y_proba = np.full((2, 3), 1 / 3)
        assert calculate_brier_score(y_true, y_proba) == pytest.approx(2 / 9)

    def test_single_class_labels(self):
        """Classes absent from y_true still contribute their squared error."""
        y_true = np.array([0, 0])
        y_proba = np.array([[0.5, 0.25, 0.25], [1.0, 0.0, 0.0]])
        expected = np.mean([(0.25 + 0.0) / 2, (0.0625 + 0.0) / 2, (0.0625 + 0.0) / 2])
        assert calculate_brier_score(y_true, y_proba) == pytest.approx(expected)

    def test_predictions_without_scores(self, make_prediction):
        assert prediction_brier_score([make_prediction()]) is None

    def test_from_predictions(self, make_prediction):
        preds = [make_prediction(scores=(100, 90), probs=(1.0, 0.0, None))]
        assert prediction_brier_score(preds) == 0.0
        preds = [make_prediction(scores=(90, 100), probs=(1.0, 0.0, None))]
        assert prediction_brier_score(preds) == pytest.approx(2 / 3)
