"""Accuracy statistics for graded predictions."""

import logging
import math
from typing import Optional

import numpy as np
from sklearn.metrics import brier_score_loss

from sportscast.models import Sport

logger = logging.getLogger(__name__)

# (name, min, max) confidence buckets, inclusive
CONFIDENCE_TIERS = (
    ("Very High (80%+)", 80, 100),
    ("High (70-79%)", 70, 79),
    ("Moderate (60-69%)", 60, 69),
    ("Low (<60%)", 0, 59),
)

OUTCOMES = ("home", "draw", "away")


def _accuracy(correct: int, total: int) -> float:
    return correct / total * 100 if total > 0 else 0.0


def accuracy_stats(predictions: list) -> dict:
    """Overall {total, correct, accuracy%} over graded predictions."""
    total = len(predictions)
    correct = sum(1 for p in predictions if p.correct)
    return {"total": total, "correct": correct, "accuracy": _accuracy(correct, total)}


def sport_stats(predictions: list) -> list:
    """Per-sport accuracy, sports without predictions dropped."""
    stats = []
    for sport in Sport:
        subset = [p for p in predictions if p.game is not None and p.game.sport == sport]
        if subset:
            stats.append({"sport": sport.value, **accuracy_stats(subset)})
    return stats


def confidence_tier_stats(predictions: list) -> list:
    tiers = []
    for name, low, high in CONFIDENCE_TIERS:
        subset = [p for p in predictions if low <= p.confidence <= high]
        if subset:
            tiers.append({"name": name, "min": low, "max": high, **accuracy_stats(subset)})
    return tiers


def daily_accuracy(predictions: list) -> list:
    """Accuracy per calendar day (UTC) of created_at, oldest first."""
    by_date: dict[str, list] = {}
    for p in predictions:
        by_date.setdefault(p.created_at.date().isoformat(), []).append(p)

    days = []
    for date, day_predictions in sorted(by_date.items()):
        stats = accuracy_stats(day_predictions)
        days.append({"date": date, "accuracy": stats["accuracy"], "total": stats["total"]})
    return days


def paginate(items: list, page: int, limit: int) -> tuple[list, dict]:
    """Slice one page (1-based) and describe the pagination."""
    start = (page - 1) * limit
    end = start + limit
    return items[start:end], {
        "page": page,
        "limit": limit,
        "total": len(items),
        "total_pages": math.ceil(len(items) / limit),
        "has_more": end < len(items),
    }


def actual_outcome(home_score: int, away_score: int) -> str:
    if home_score > away_score:
        return "home"
    if home_score < away_score:
        return "away"
    return "draw"


def calculate_brier_score(y_true: np.ndarray, y_proba: np.ndarray) -> float:
    """
    Multi-class Brier score, averaged over classes.

    Lower is better. Perfect predictions = 0.

    Args:
        y_true: True labels (0 home, 1 draw, 2 away).
        y_proba: Predicted probabilities, shape (n_samples, 3).
    """
    n_classes = y_proba.shape[1]
    brier_scores = []

    for cls in range(n_classes):
        y_true_binary = (y_true == cls).astype(int)
        score = brier_score_loss(y_true_binary, y_proba[:, cls], pos_label=1)
        brier_scores.append(score)

    return float(np.mean(brier_scores))


def prediction_brier_score(predictions: list) -> Optional[float]:
    """Brier score over predictions whose games have final scores.

    Returns None when no prediction can be scored.
    """
    labels = []
    probas = []
    for p in predictions:
        game = p.game
        if game is None or game.home_score is None or game.away_score is None:
            continue
        labels.append(OUTCOMES.index(actual_outcome(game.home_score, game.away_score)))
        probas.append([
            p.home_win_probability,
            p.draw_probability or 0.0,
            p.away_win_probability,
        ])

    if not labels:
        return None
    return calculate_brier_score(np.array(labels), np.array(probas))
