"""
Sentiment aggregation service.

Combines market trends from the indicator engine with external
qualitative feeds (social, news) into bounded sentiment scores.

Responsibilities:
1. Query the social and news feeds once per token (in parallel)
2. Replace failing feeds with a neutral 0.5 and report them as degraded
3. Score overall sentiment through a pluggable SentimentModel
4. Build the MarketSentiment breakdown

Qualitative feeds are non-critical: their failures never propagate.
"""

import asyncio
import logging
import math
from dataclasses import dataclass, field

from insight.core.models import MarketSentiment, TokenSeries
from insight.core.protocols import (
    NewsFeedProvider,
    SentimentModel,
    SocialMetricsProvider,
)
from insight.services.sentiment.heuristic import (
    HeuristicSentimentModel,
    normalized_trend,
)

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 0.5

# Default timeout for feed calls (seconds)
DEFAULT_FEED_TIMEOUT = 2.0

SOCIAL_FEED = "social"
NEWS_FEED = "news"


@dataclass
class FeedScores:
    """Feed results for one token, with the names of feeds that failed."""

    social: float = NEUTRAL_SCORE
    news: float = NEUTRAL_SCORE
    degraded: list[str] = field(default_factory=list)


class SentimentAggregator:
    """
    Service for sentiment scoring.

    It does NOT:
    - Fetch price history (that's HistoricalSeriesCache's job)
    - Retry failing feeds

    Usage:
        aggregator = SentimentAggregator(social_provider, news_provider)
        feeds = await aggregator.collect_feeds(address)
        score = aggregator.calculate_sentiment_score(series, feeds)
        market = aggregator.analyze_market_sentiment(series, feeds)
    """

    def __init__(
        self,
        social_provider: SocialMetricsProvider,
        news_provider: NewsFeedProvider,
        model: SentimentModel | None = None,
        timeout: float = DEFAULT_FEED_TIMEOUT,
    ):
        """
        Initialize with feed providers.

        Args:
            social_provider: SocialMetricsProvider implementation
            news_provider: NewsFeedProvider implementation
            model: Sentiment scoring strategy (heuristic if None)
            timeout: Timeout for each feed call in seconds
        """
        self._social_provider = social_provider
        self._news_provider = news_provider
        self._model = model or HeuristicSentimentModel()
        self._timeout = timeout

    async def collect_feeds(self, token_address: str) -> FeedScores:
        """
        Query social and news feeds, failing open to neutral.

        Args:
            token_address: Validated token address

        Returns:
            FeedScores; ``degraded`` lists feeds that were substituted
        """
        (social, social_ok), (news, news_ok) = await asyncio.gather(
            self._safe_score(SOCIAL_FEED, self._social_provider, token_address),
            self._safe_score(NEWS_FEED, self._news_provider, token_address),
        )

        degraded = []
        if not social_ok:
            degraded.append(SOCIAL_FEED)
        if not news_ok:
            degraded.append(NEWS_FEED)

        return FeedScores(social=social, news=news, degraded=degraded)

    def calculate_sentiment_score(
        self, series: TokenSeries, feeds: FeedScores
    ) -> float:
        """
        Overall sentiment in [0, 1] from market trends and the social feed.

        Args:
            series: Price/volume history
            feeds: Feed results from collect_feeds

        Returns:
            Sentiment score clamped to [0, 1]
        """
        score = self._model.score(series, feeds.social)
        if not math.isfinite(score):
            logger.warning(
                f"Sentiment model returned {score} for "
                f"{series.token_address[:8]}, using neutral"
            )
            return NEUTRAL_SCORE
        return max(0.0, min(1.0, score))

    def analyze_market_sentiment(
        self, series: TokenSeries, feeds: FeedScores
    ) -> MarketSentiment:
        """
        Build the social/news/volume sentiment breakdown.

        overall_score = (social + news + volume) / 3
        """
        volume_sentiment = normalized_trend(series.volumes)
        overall = (feeds.social + feeds.news + volume_sentiment) / 3

        return MarketSentiment(
            overall_score=overall,
            social_sentiment=feeds.social,
            news_sentiment=feeds.news,
            trading_volume_sentiment=volume_sentiment,
            degraded_sources=list(feeds.degraded),
        )

    async def _safe_score(
        self,
        name: str,
        provider: SocialMetricsProvider | NewsFeedProvider,
        token_address: str,
    ) -> tuple[float, bool]:
        """
        Call one feed with a timeout.

        Returns:
            (score, ok); ok is False when the neutral fallback was used
        """
        try:
            value = await asyncio.wait_for(
                provider.score(token_address),
                timeout=self._timeout,
            )
            value = float(value)
        except TimeoutError:
            logger.warning(
                f"{name} feed timeout after {self._timeout}s for "
                f"{token_address[:8]}, using neutral"
            )
            return NEUTRAL_SCORE, False
        except Exception as e:
            logger.warning(
                f"{name} feed failed for {token_address[:8]}, using neutral: "
                f"{type(e).__name__}: {e}"
            )
            return NEUTRAL_SCORE, False

        if not math.isfinite(value):
            logger.warning(f"{name} feed returned {value}, using neutral")
            return NEUTRAL_SCORE, False

        if not 0.0 <= value <= 1.0:
            logger.warning(f"{name} feed returned {value}, clamping to [0, 1]")
            value = max(0.0, min(1.0, value))

        return value, True
