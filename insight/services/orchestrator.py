"""
Analysis orchestrator.

Coordinates the analysis workflow without containing business logic.
This is the entry point for wallet and token analysis - it calls the
services in the correct order and returns the final result.

Wallet workflow:
1. Validate input
2. HistoricalSeriesCache → one snapshot per distinct token
3. Indicator engine → volatility and price trend per token
4. PortfolioRiskEngine → insights, scores, recommendations

Token workflow:
1. Validate input
2. HistoricalSeriesCache → one snapshot
3. SentimentAggregator → feeds, sentiment score, market sentiment
4. PriceForecaster → 24h / 7d / 30d prediction
5. Indicator engine → RSI, MACD, moving averages
"""

import asyncio
import logging
from collections.abc import Iterator
from contextlib import contextmanager

from insight.core.exceptions import InsightError, InternalError
from insight.core.models import (
    PortfolioMetrics,
    SeriesSnapshot,
    Token,
    TokenAnalysis,
    Wallet,
    WalletAnalysis,
)
from insight.services.forecast.service import PriceForecaster
from insight.services.indicators.technical import (
    calculate_technical_indicators,
    percentage_change,
    trend,
    volatility,
)
from insight.services.market_data.cache import HistoricalSeriesCache
from insight.services.risk.service import PortfolioRiskEngine, TokenMetrics
from insight.services.sentiment.service import SentimentAggregator
from insight.utils.validators import validate_token, validate_wallet

logger = logging.getLogger(__name__)

# Hourly candles: 24 points back is one day
DAILY_LOOKBACK_POINTS = 24


@contextmanager
def _stage(origin: str) -> Iterator[None]:
    """
    Tag failures with the component they came from.

    Taxonomy errors keep their type; anything else is an invariant
    violation and becomes InternalError.
    """
    try:
        yield
    except InsightError as e:
        if e.origin is None:
            e.origin = origin
        raise
    except Exception as e:
        logger.exception(f"Unexpected error in {origin}: {e}")
        raise InternalError(
            technical_message=f"{origin} failed: {type(e).__name__}: {e}",
            origin=origin,
        ) from e


class AnalysisOrchestrator:
    """
    Orchestrates the wallet and token analysis workflows.

    This class coordinates between services but contains NO business logic.
    Each step is delegated to a specialized service:
    - Price history → HistoricalSeriesCache
    - Risk/diversity → PortfolioRiskEngine
    - Forecasts → PriceForecaster
    - Sentiment → SentimentAggregator

    The orchestrator owns the cache: ``close()`` tears it down.
    It never retries; the first failure propagates with ``origin`` set.

    Usage:
        orchestrator = AnalysisOrchestrator(cache, risk_engine, forecaster, sentiment)
        result = await orchestrator.analyze_wallet(wallet)
    """

    def __init__(
        self,
        cache: HistoricalSeriesCache,
        risk_engine: PortfolioRiskEngine,
        forecaster: PriceForecaster,
        sentiment: SentimentAggregator,
    ):
        """
        Initialize orchestrator with all required services.

        Args:
            cache: Shared historical series cache
            risk_engine: Service for portfolio risk and recommendations
            forecaster: Service for price forecasts
            sentiment: Service for sentiment scores
        """
        self._cache = cache
        self._risk_engine = risk_engine
        self._forecaster = forecaster
        self._sentiment = sentiment

    async def analyze_wallet(self, wallet: Wallet) -> WalletAnalysis:
        """
        Perform full wallet analysis.

        Args:
            wallet: Wallet with materialized holdings

        Returns:
            WalletAnalysis with scores, per-token insights and recommendations

        Raises:
            InvalidInputError: Malformed wallet
            DataUnavailableError / NotFoundError: Missing price history
            InternalError: Invariant violation
        """
        logger.info(
            f"Starting wallet analysis: {wallet.address[:8]}... "
            f"({len(wallet.tokens)} holdings)"
        )

        with _stage("validation"):
            validate_wallet(wallet)
        self._check_total_value(wallet)

        snapshots = await self._fetch_snapshots(wallet)

        with _stage("indicators"):
            metrics = {
                address: self._token_metrics(snapshot)
                for address, snapshot in snapshots.items()
            }

        with _stage("risk"):
            analysis = self._risk_engine.analyze(wallet.tokens, metrics)

        analysis.stale_tokens = sorted(
            address for address, snapshot in snapshots.items() if snapshot.degraded
        )

        logger.info(
            f"Wallet analysis complete for {wallet.address[:8]}: "
            f"risk={analysis.risk_score:.2f}, diversity={analysis.diversity_score:.2f}"
        )
        return analysis

    async def analyze_token(self, token: Token) -> TokenAnalysis:
        """
        Perform full token analysis.

        All numbers are computed from one snapshot of the series taken at
        the start of the request.

        Args:
            token: Token to analyze

        Returns:
            TokenAnalysis with sentiment, forecast and indicators

        Raises:
            InvalidInputError: Malformed token
            DataUnavailableError / NotFoundError: Missing price history
            InternalError: Invariant violation
        """
        logger.info(f"Starting token analysis: {token.address[:8]}...")

        with _stage("validation"):
            validate_token(token)

        with _stage("cache"):
            snapshot = await self._cache.get(token.address)
        series = snapshot.series

        with _stage("sentiment"):
            feeds = await self._sentiment.collect_feeds(token.address)
            sentiment_score = self._sentiment.calculate_sentiment_score(series, feeds)
            market_sentiment = self._sentiment.analyze_market_sentiment(series, feeds)

        with _stage("forecast"):
            price_prediction = self._forecaster.predict_token_price(series)

        with _stage("indicators"):
            technical_indicators = calculate_technical_indicators(series)

        logger.info(
            f"Token analysis complete for {token.symbol or token.address[:8]}: "
            f"sentiment={sentiment_score:.2f}, "
            f"confidence={price_prediction.confidence:.2f}"
            + (" (stale data)" if snapshot.degraded else "")
        )

        return TokenAnalysis(
            sentiment_score=sentiment_score,
            price_prediction=price_prediction,
            market_sentiment=market_sentiment,
            technical_indicators=technical_indicators,
            stale_data=snapshot.degraded,
        )

    async def get_portfolio_metrics(self, wallet: Wallet) -> PortfolioMetrics:
        """
        Total value, value-weighted 24h change and risk score of a wallet.

        Raises:
            Same as analyze_wallet
        """
        with _stage("validation"):
            validate_wallet(wallet)
        self._check_total_value(wallet)

        snapshots = await self._fetch_snapshots(wallet)

        with _stage("indicators"):
            metrics = {
                address: self._token_metrics(snapshot)
                for address, snapshot in snapshots.items()
            }
            daily_changes = {
                address: percentage_change(
                    snapshot.series.prices, DAILY_LOOKBACK_POINTS
                )
                for address, snapshot in snapshots.items()
            }

        with _stage("risk"):
            return self._risk_engine.calculate_metrics(
                wallet.tokens, metrics, daily_changes
            )

    async def close(self) -> None:
        """Release the series cache."""
        await self._cache.close()

    async def _fetch_snapshots(self, wallet: Wallet) -> dict[str, SeriesSnapshot]:
        """One snapshot per distinct token, fetched concurrently."""
        addresses = sorted({balance.token_address for balance in wallet.tokens})

        with _stage("cache"):
            results = await asyncio.gather(
                *(self._cache.get(address) for address in addresses)
            )
        return dict(zip(addresses, results))

    @staticmethod
    def _token_metrics(snapshot: SeriesSnapshot) -> TokenMetrics:
        prices = snapshot.series.prices
        return TokenMetrics(volatility=volatility(prices), price_trend=trend(prices))

    @staticmethod
    def _check_total_value(wallet: Wallet) -> None:
        """Log when the caller's total disagrees with the holdings."""
        local_total = sum(balance.value_usd for balance in wallet.tokens)
        if abs(local_total - wallet.total_value_usd) > 1e-6 * max(1.0, local_total):
            logger.warning(
                f"Wallet {wallet.address[:8]} reports total ${wallet.total_value_usd:,.2f}, "
                f"holdings sum to ${local_total:,.2f}; using holdings"
            )
