"""Elo baseline, prediction composer and accuracy metrics."""
