"""Confidence scoring for proposed tool calls."""

from .confidence import ConfidenceScorer, ScoringWeights

__all__ = ["ConfidenceScorer", "ScoringWeights"]
