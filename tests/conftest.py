"""
Pytest configuration and fixtures.

Provides reusable test fixtures for:
- Deterministic price series and addresses
- Fake market data source / feeds with call counting
- Fully wired orchestrator
"""

import pytest

from insight.core.models import TokenBalance, Wallet
from insight.services.forecast.service import PriceForecaster
from insight.services.market_data.cache import HistoricalSeriesCache
from insight.services.orchestrator import AnalysisOrchestrator
from insight.services.risk.service import PortfolioRiskEngine
from insight.services.sentiment.service import SentimentAggregator
from tests.factories import (
    ConstantFeed,
    FakeClock,
    FakeMarketDataSource,
    make_address,
)

# =============================================================================
# Address / series fixtures
# =============================================================================


@pytest.fixture
def addr_a() -> str:
    return make_address(1)


@pytest.fixture
def addr_b() -> str:
    return make_address(2)


@pytest.fixture
def wallet_address() -> str:
    """Valid Solana address (wrapped SOL)."""
    return "So11111111111111111111111111111111111111112"


@pytest.fixture
def valid_solana_address() -> str:
    """Valid Solana address (USDC token)."""
    return "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


@pytest.fixture
def another_valid_address() -> str:
    """Another valid Solana address (Wrapped SOL)."""
    return "So11111111111111111111111111111111111111112"


@pytest.fixture
def rising_prices() -> list[float]:
    return [100.0 + i for i in range(250)]


@pytest.fixture
def flat_prices() -> list[float]:
    return [10.0] * 250


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def market_source() -> FakeMarketDataSource:
    return FakeMarketDataSource()


@pytest.fixture
def series_cache(
    market_source: FakeMarketDataSource, clock: FakeClock
) -> HistoricalSeriesCache:
    return HistoricalSeriesCache(market_source, timeout=1.0, clock=clock)


@pytest.fixture
def social_feed() -> ConstantFeed:
    return ConstantFeed(0.5)


@pytest.fixture
def news_feed() -> ConstantFeed:
    return ConstantFeed(0.5)


@pytest.fixture
def sentiment_aggregator(
    social_feed: ConstantFeed, news_feed: ConstantFeed
) -> SentimentAggregator:
    return SentimentAggregator(social_feed, news_feed, timeout=0.05)


@pytest.fixture
def risk_engine() -> PortfolioRiskEngine:
    """PortfolioRiskEngine with default thresholds."""
    return PortfolioRiskEngine()


@pytest.fixture
def orchestrator(
    series_cache: HistoricalSeriesCache,
    risk_engine: PortfolioRiskEngine,
    sentiment_aggregator: SentimentAggregator,
) -> AnalysisOrchestrator:
    """Fully configured orchestrator with fake collaborators."""
    return AnalysisOrchestrator(
        cache=series_cache,
        risk_engine=risk_engine,
        forecaster=PriceForecaster(),
        sentiment=sentiment_aggregator,
    )


# =============================================================================
# Wallet fixtures
# =============================================================================


@pytest.fixture
def two_token_wallet(wallet_address: str, addr_a: str, addr_b: str) -> Wallet:
    """$500 + $500 wallet."""
    return Wallet(
        address=wallet_address,
        total_value_usd=1000.0,
        tokens=[
            TokenBalance(token_address=addr_a, amount=100.0, value_usd=500.0),
            TokenBalance(token_address=addr_b, amount=200.0, value_usd=500.0),
        ],
    )
