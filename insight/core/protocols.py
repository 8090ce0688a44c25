"""
Protocol definitions (interfaces) for external collaborators.

Using typing.Protocol instead of ABC because:
1. Supports duck typing (no inheritance required)
2. Lighter weight
3. Better for dependency injection
4. Easier to mock in tests

Each protocol defines the contract that implementations must follow.
"""

from datetime import timedelta
from typing import Protocol, runtime_checkable

from insight.core.models import TokenSeries


@runtime_checkable
class MarketDataSource(Protocol):
    """
    Protocol for historical market data providers.

    Implementations fetch price/volume history from sources like:
    - Birdeye (OHLCV candles)

    For development, MockMarketDataSource returns a deterministic random walk.
    Retries and backoff, if any, belong to the implementation.
    """

    async def fetch_series(
        self, token_address: str, lookback: timedelta
    ) -> TokenSeries:
        """
        Fetch the price/volume history of a token.

        Args:
            token_address: Validated Solana token address
            lookback: How far back the history should reach

        Returns:
            TokenSeries ordered by timestamp

        Raises:
            UpstreamFailureError: On transport or provider errors
            NotFoundError: If the provider does not know the token
        """
        ...


@runtime_checkable
class SocialMetricsProvider(Protocol):
    """
    Protocol for social-media sentiment feeds.

    Failures are absorbed by SentimentAggregator (neutral 0.5).
    """

    async def score(self, token_address: str) -> float:
        """
        Social sentiment for a token.

        Returns:
            Score in [0, 1], 0.5 is neutral
        """
        ...


@runtime_checkable
class NewsFeedProvider(Protocol):
    """
    Protocol for news sentiment feeds.

    Failures are absorbed by SentimentAggregator (neutral 0.5).
    """

    async def score(self, token_address: str) -> float:
        """
        News sentiment for a token.

        Returns:
            Score in [0, 1], 0.5 is neutral
        """
        ...


@runtime_checkable
class SentimentModel(Protocol):
    """
    Pluggable sentiment scoring strategy.

    HeuristicSentimentModel (weighted EMA trends) is the default.
    A learned model can be dropped in without changing callers.
    """

    def score(self, series: TokenSeries, social_trend: float) -> float:
        """
        Combine market trends and social trend into one score.

        Args:
            series: Price/volume history of the token
            social_trend: Social sentiment in [0, 1]

        Returns:
            Sentiment score in [0, 1]
        """
        ...
