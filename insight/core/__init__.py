"""
Core module - models, protocols, and exceptions.

This module contains the fundamental building blocks of the application:
- Data models (Pydantic)
- Protocol definitions (interfaces)
- Custom exceptions
"""

from insight.core.exceptions import (
    DataUnavailableError,
    InsightError,
    InternalError,
    InvalidInputError,
    NotFoundError,
    UpstreamFailureError,
)
from insight.core.models import (
    MACD,
    MarketSentiment,
    MovingAverages,
    PortfolioMetrics,
    PricePoint,
    PricePrediction,
    RiskLevel,
    SeriesSnapshot,
    SuggestedAction,
    TechnicalIndicators,
    Token,
    TokenAnalysis,
    TokenBalance,
    TokenInsight,
    TokenSeries,
    Wallet,
    WalletAnalysis,
)
from insight.core.protocols import (
    MarketDataSource,
    NewsFeedProvider,
    SentimentModel,
    SocialMetricsProvider,
)

__all__ = [
    # Exceptions
    "InsightError",
    "DataUnavailableError",
    "UpstreamFailureError",
    "InvalidInputError",
    "NotFoundError",
    "InternalError",
    # Models
    "PricePoint",
    "TokenSeries",
    "SeriesSnapshot",
    "TokenBalance",
    "Wallet",
    "Token",
    "RiskLevel",
    "SuggestedAction",
    "TokenInsight",
    "WalletAnalysis",
    "PricePrediction",
    "MarketSentiment",
    "MACD",
    "MovingAverages",
    "TechnicalIndicators",
    "TokenAnalysis",
    "PortfolioMetrics",
    # Protocols
    "MarketDataSource",
    "SocialMetricsProvider",
    "NewsFeedProvider",
    "SentimentModel",
]
