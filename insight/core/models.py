"""
Pydantic models for the Insight analytics engine.

All data structures used throughout the application are defined here.
Models provide:
- Type safety
- Automatic validation
- JSON serialization/deserialization

Enums are ``str`` enums so they serialize as their plain tags
("Low", "ReduceExposure", ...).
"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


# =============================================================================
# Market data
# =============================================================================


class PricePoint(BaseModel):
    """
    One observation of a token's market.

    Immutable once recorded.
    """

    timestamp: datetime
    price: float = Field(ge=0)
    volume: float = Field(default=0.0, ge=0)

    model_config = {"frozen": True}


class TokenSeries(BaseModel):
    """
    Time-ordered price/volume history for one token.

    Timestamps are strictly increasing; gaps are allowed.
    """

    token_address: str
    points: tuple[PricePoint, ...] = ()

    model_config = {"frozen": True}

    @field_validator("points")
    @classmethod
    def _strictly_increasing(
        cls, points: tuple[PricePoint, ...]
    ) -> tuple[PricePoint, ...]:
        for prev, curr in zip(points, points[1:]):
            if curr.timestamp <= prev.timestamp:
                raise ValueError(
                    f"timestamps must be strictly increasing: "
                    f"{curr.timestamp.isoformat()} after {prev.timestamp.isoformat()}"
                )
        return points

    @property
    def prices(self) -> list[float]:
        """Prices in time order."""
        return [p.price for p in self.points]

    @property
    def volumes(self) -> list[float]:
        """Volumes in time order."""
        return [p.volume for p in self.points]


class SeriesSnapshot(BaseModel):
    """
    Series handed out by the cache.

    ``degraded`` is True when the refresh failed and a stale series was
    served instead.
    """

    series: TokenSeries
    fetched_at: datetime
    degraded: bool = False

    model_config = {"frozen": True}


# =============================================================================
# Wallet / token inputs
# =============================================================================


class TokenBalance(BaseModel):
    """
    A single holding inside a wallet.

    Bounds (amount >= 0, value_usd >= 0) are checked by
    ``insight.utils.validators.validate_wallet`` so that callers get an
    InvalidInputError instead of a pydantic error.
    """

    token_address: str
    amount: float
    value_usd: float


class Wallet(BaseModel):
    """
    Wallet with its materialized token holdings.

    ``total_value_usd`` should equal the sum of holding values; the engine
    recomputes it from ``tokens`` and does not trust this field.
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    address: str
    total_value_usd: float = 0.0
    tokens: list[TokenBalance] = Field(default_factory=list)
    risk_score: float = 0.0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = {"from_attributes": True}


class Token(BaseModel):
    """Token market summary as supplied by the surrounding system."""

    address: str
    symbol: str = ""
    name: str = ""
    decimals: int = 0
    total_supply: int = 0
    price_usd: float = 0.0
    market_cap_usd: float = 0.0
    volume_24h: float = 0.0
    price_change_24h: float = 0.0

    model_config = {"from_attributes": True}


# =============================================================================
# Classification enums
# =============================================================================


class RiskLevel(str, Enum):
    """Per-token risk level, from concentration and volatility."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "VeryHigh"


class SuggestedAction(str, Enum):
    """Action suggested for a single holding."""

    HOLD = "Hold"
    BUY = "Buy"
    SELL = "Sell"
    REDUCE_EXPOSURE = "ReduceExposure"
    INCREASE_POSITION = "IncreasePosition"


# =============================================================================
# Analysis results
# =============================================================================


class TokenInsight(BaseModel):
    """Classification of one holding within its wallet."""

    risk_level: RiskLevel
    concentration: float = Field(ge=0.0, le=1.0)
    suggested_action: SuggestedAction


class WalletAnalysis(BaseModel):
    """
    Portfolio-level result of ``analyze_wallet``.

    JSON example:
    {
        "risk_score": 0.5,
        "diversity_score": 0.5,
        "recommendations": ["Consider diversifying ..."],
        "token_insights": {
            "So111...": {
                "risk_level": "VeryHigh",
                "concentration": 0.5,
                "suggested_action": "ReduceExposure"
            }
        },
        "stale_tokens": []
    }
    """

    risk_score: float = Field(ge=0.0, le=1.0)
    diversity_score: float = Field(ge=0.0, le=1.0)
    recommendations: list[str] = Field(default_factory=list)
    token_insights: dict[str, TokenInsight] = Field(default_factory=dict)

    stale_tokens: list[str] = Field(default_factory=list)
    """Addresses whose price history came from a stale cache entry"""


class PricePrediction(BaseModel):
    """Forecast at 24h / 7d / 30d with averaged confidence."""

    price_24h: float = Field(ge=0.0)
    price_7d: float = Field(ge=0.0)
    price_30d: float = Field(ge=0.0)
    confidence: float = Field(ge=0.0, le=1.0)


class MarketSentiment(BaseModel):
    """Qualitative market mood for a token."""

    overall_score: float = Field(ge=0.0, le=1.0)
    social_sentiment: float = Field(ge=0.0, le=1.0)
    news_sentiment: float = Field(ge=0.0, le=1.0)
    trading_volume_sentiment: float = Field(ge=0.0, le=1.0)

    degraded_sources: list[str] = Field(default_factory=list)
    """Feeds that failed and were replaced by the neutral 0.5"""


class MACD(BaseModel):
    value: float
    signal: float
    histogram: float


class MovingAverages(BaseModel):
    ma_20: float
    ma_50: float
    ma_200: float


class TechnicalIndicators(BaseModel):
    rsi: float = Field(ge=0.0, le=100.0)
    macd: MACD
    moving_averages: MovingAverages


class TokenAnalysis(BaseModel):
    """Result of ``analyze_token``."""

    sentiment_score: float = Field(ge=0.0, le=1.0)
    price_prediction: PricePrediction
    market_sentiment: MarketSentiment
    technical_indicators: TechnicalIndicators

    stale_data: bool = False
    """True when the price history came from a stale cache entry"""


class PortfolioMetrics(BaseModel):
    """Headline numbers for a wallet."""

    total_value_usd: float = Field(ge=0.0)
    daily_change_percent: float
    risk_level: float = Field(ge=0.0, le=1.0)
