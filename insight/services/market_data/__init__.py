"""Market data sources and the historical series cache."""

from insight.services.market_data.birdeye_provider import BirdeyeMarketDataSource
from insight.services.market_data.cache import HistoricalSeriesCache
from insight.services.market_data.mock_provider import MockMarketDataSource

__all__ = [
    "BirdeyeMarketDataSource",
    "HistoricalSeriesCache",
    "MockMarketDataSource",
]
