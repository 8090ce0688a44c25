"""
Service factory for dependency injection.

Creates and configures all services based on application settings.
Switches between mock and real implementations automatically.

This is the single point of service creation - all services
should be created through this factory.
"""

import logging
from datetime import timedelta

from insight.config.settings import Settings
from insight.core.protocols import (
    MarketDataSource,
    NewsFeedProvider,
    SocialMetricsProvider,
)
from insight.services.forecast.service import PriceForecaster
from insight.services.market_data.birdeye_provider import BirdeyeMarketDataSource
from insight.services.market_data.cache import HistoricalSeriesCache
from insight.services.market_data.mock_provider import MockMarketDataSource
from insight.services.orchestrator import AnalysisOrchestrator
from insight.services.risk.service import PortfolioRiskEngine
from insight.services.sentiment.mock_provider import (
    MockNewsFeedProvider,
    MockSocialMetricsProvider,
)
from insight.services.sentiment.service import SentimentAggregator

logger = logging.getLogger(__name__)


class ServiceFactory:
    """
    Factory for creating application services.

    Reads configuration and creates appropriate service implementations:
    - Mock implementations for development (USE_MOCK_SERVICES=true)
    - Real implementations for production (USE_MOCK_SERVICES=false)

    Social and news feeds have no production integration yet; the mock
    feeds are used in both modes.

    Usage:
        factory = ServiceFactory(settings)
        orchestrator = factory.create_orchestrator()
    """

    def __init__(self, settings: Settings):
        """
        Initialize factory with application settings.

        Args:
            settings: Application configuration
        """
        self._settings = settings
        self._log_mode()

    def _log_mode(self) -> None:
        """Log the current mode for debugging."""
        mode = "MOCK" if self._settings.use_mock_services else "PRODUCTION"
        logger.info(f"ServiceFactory initialized in {mode} mode")

    def create_market_data_source(self) -> MarketDataSource:
        """
        Create market data source.

        Returns:
            MarketDataSource implementation based on settings
        """
        if self._settings.use_mock_services:
            logger.debug("Creating MockMarketDataSource")
            return MockMarketDataSource()

        logger.debug("Creating BirdeyeMarketDataSource")
        return BirdeyeMarketDataSource(
            api_key=self._settings.birdeye_api_key,
            base_url=self._settings.birdeye_base_url,
            timeout=self._settings.api_timeout_seconds,
        )

    def create_series_cache(self) -> HistoricalSeriesCache:
        """
        Create the historical series cache.

        Returns:
            HistoricalSeriesCache wrapping the configured source
        """
        source = self.create_market_data_source()
        logger.debug("Creating HistoricalSeriesCache")
        return HistoricalSeriesCache(
            source,
            ttl=timedelta(seconds=self._settings.cache_ttl_seconds),
            eviction_horizon=timedelta(seconds=self._settings.cache_eviction_seconds),
            lookback=timedelta(hours=self._settings.history_lookback_hours),
            timeout=self._settings.api_timeout_seconds,
        )

    def create_social_provider(self) -> SocialMetricsProvider:
        logger.debug("Creating MockSocialMetricsProvider")
        return MockSocialMetricsProvider()

    def create_news_provider(self) -> NewsFeedProvider:
        logger.debug("Creating MockNewsFeedProvider")
        return MockNewsFeedProvider()

    def create_risk_engine(self) -> PortfolioRiskEngine:
        """
        Create portfolio risk engine.

        Risk engine uses the same logic for both mock and production.

        Returns:
            PortfolioRiskEngine with default thresholds
        """
        logger.debug("Creating PortfolioRiskEngine")
        return PortfolioRiskEngine()

    def create_forecaster(self) -> PriceForecaster:
        logger.debug("Creating PriceForecaster")
        return PriceForecaster()

    def create_sentiment_aggregator(self) -> SentimentAggregator:
        """
        Create sentiment aggregator.

        Returns:
            SentimentAggregator with the heuristic model
        """
        logger.debug("Creating SentimentAggregator")
        return SentimentAggregator(
            social_provider=self.create_social_provider(),
            news_provider=self.create_news_provider(),
            timeout=self._settings.provider_timeout_seconds,
        )

    def create_orchestrator(self) -> AnalysisOrchestrator:
        """
        Create the main analysis orchestrator.

        This is the primary service used by callers.
        Creates all dependencies automatically.

        Returns:
            AnalysisOrchestrator ready for use
        """
        logger.info("Creating AnalysisOrchestrator with all dependencies")

        return AnalysisOrchestrator(
            cache=self.create_series_cache(),
            risk_engine=self.create_risk_engine(),
            forecaster=self.create_forecaster(),
            sentiment=self.create_sentiment_aggregator(),
        )
