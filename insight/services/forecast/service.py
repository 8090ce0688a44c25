"""
Price forecasting service.

Extrapolates the short-term trend of a price series to several horizons.
No learned model: the forecast is a damped trend projection.

    drift = clamp(0.5 * (slope + momentum / 24), -max_drift, max_drift)
    predicted = current * (1 + drift * sqrt(horizon_hours))

where ``slope`` is the relative least-squares slope of the last prices and
``momentum`` is (EMA12 - EMA26) / EMA26. sqrt keeps the horizon scaling
monotonic but sub-linear.

Confidence starts at ``base_confidence`` and is reduced for short history,
volatile prices and long horizons, then clamped to [0, 1].
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from insight.core.models import PricePrediction, TokenSeries
from insight.services.indicators.technical import (
    MACD_FAST,
    MACD_SLOW,
    ema,
    relative_slope,
    volatility,
)

logger = logging.getLogger(__name__)

HORIZON_24H = 24
HORIZON_7D = 168
HORIZON_30D = 720


@dataclass(frozen=True)
class ForecastParams:
    """
    Tunable forecasting constants.

    Frozen dataclass ensures immutability.
    """

    slope_window: int = 24
    max_drift: float = 0.05

    base_confidence: float = 0.9
    # Longest indicator lookback (MA200); shorter history is penalized
    full_history_points: int = 200
    history_penalty: float = 0.3
    volatility_penalty: float = 0.3
    horizon_penalty: float = 0.05


class PriceForecaster:
    """
    Multi-horizon price forecaster.

    Usage:
        forecaster = PriceForecaster()
        price, confidence = forecaster.forecast(series.prices, 24)
        prediction = forecaster.predict_token_price(series)
    """

    def __init__(self, params: ForecastParams | None = None):
        """
        Initialize with optional custom parameters.

        Args:
            params: Custom forecast parameters (uses defaults if None)
        """
        self._params = params or ForecastParams()

    def forecast(
        self, prices: Sequence[float], horizon_hours: float
    ) -> tuple[float, float]:
        """
        Forecast the price ``horizon_hours`` ahead.

        Args:
            prices: Prices in time order
            horizon_hours: Forecast horizon (> 0)

        Returns:
            (predicted_price >= 0, confidence in [0, 1]); (0.0, 0.0) for an
            empty series
        """
        if not prices:
            return 0.0, 0.0

        horizon = max(float(horizon_hours), 0.0)
        current = float(prices[-1])
        drift = self._drift(prices)

        predicted = max(0.0, current * (1 + drift * math.sqrt(horizon)))
        confidence = self._confidence(prices, horizon)
        return predicted, confidence

    def predict_token_price(self, series: TokenSeries) -> PricePrediction:
        """
        Forecast at 24h, 7d and 30d and average the confidences.

        Args:
            series: Price history of the token

        Returns:
            PricePrediction
        """
        prices = series.prices
        price_24h, conf_24h = self.forecast(prices, HORIZON_24H)
        price_7d, conf_7d = self.forecast(prices, HORIZON_7D)
        price_30d, conf_30d = self.forecast(prices, HORIZON_30D)

        confidence = (conf_24h + conf_7d + conf_30d) / 3
        logger.debug(
            f"Forecast for {series.token_address[:8]}: "
            f"24h={price_24h:.6g}, 7d={price_7d:.6g}, 30d={price_30d:.6g}, "
            f"confidence={confidence:.2f}"
        )

        return PricePrediction(
            price_24h=price_24h,
            price_7d=price_7d,
            price_30d=price_30d,
            confidence=confidence,
        )

    def _drift(self, prices: Sequence[float]) -> float:
        """Per-hour relative drift blended from slope and EMA momentum."""
        p = self._params

        slope = relative_slope(prices[-p.slope_window :])

        ema_slow = ema(prices, MACD_SLOW)
        momentum = 0.0
        if ema_slow > 0:
            momentum = (ema(prices, MACD_FAST) - ema_slow) / ema_slow

        drift = 0.5 * (slope + momentum / 24)
        return max(-p.max_drift, min(p.max_drift, drift))

    def _confidence(self, prices: Sequence[float], horizon: float) -> float:
        p = self._params

        coverage = min(len(prices), p.full_history_points) / p.full_history_points
        confidence = p.base_confidence
        confidence -= p.history_penalty * (1 - coverage)
        confidence -= p.volatility_penalty * volatility(prices)
        if horizon > HORIZON_24H:
            confidence -= p.horizon_penalty * math.log2(horizon / HORIZON_24H)

        return max(0.0, min(1.0, confidence))
