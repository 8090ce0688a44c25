"""Sentiment services."""

from insight.services.sentiment.heuristic import HeuristicSentimentModel
from insight.services.sentiment.mock_provider import (
    MockNewsFeedProvider,
    MockSocialMetricsProvider,
)
from insight.services.sentiment.service import FeedScores, SentimentAggregator

__all__ = [
    "FeedScores",
    "HeuristicSentimentModel",
    "MockNewsFeedProvider",
    "MockSocialMetricsProvider",
    "SentimentAggregator",
]
