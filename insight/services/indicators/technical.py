"""
Technical indicator engine.

Pure, deterministic functions over a time-ordered price list:
RSI, EMA, SMA, MACD, plus the return/volatility/trend helpers used by the
forecaster, the sentiment aggregator and the risk engine.

Insufficient-data fallbacks:
- RSI with fewer than period + 1 points -> 50.0 (neutral)
- EMA/SMA with fewer than period points -> last price (0.0 if empty)

No function divides by zero or indexes out of range.
"""

import math
import statistics
from collections.abc import Sequence

from insight.core.models import MACD, MovingAverages, TechnicalIndicators, TokenSeries

RSI_PERIOD = 14
RSI_NEUTRAL = 50.0

MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9
# Signal line is smoothed over the series minus its first 14 points
MACD_SIGNAL_OFFSET = 14

# Per-period stdev of returns that maps to volatility 1.0
VOLATILITY_SCALE = 0.05

# tanh(relative_slope * 100): a 1%/step slope gives a trend of ~0.76
TREND_SENSITIVITY = 100.0
TREND_WINDOW = 24
TREND_EMA_PERIOD = 12


def _last_or_zero(prices: Sequence[float]) -> float:
    return float(prices[-1]) if prices else 0.0


def rsi(prices: Sequence[float], period: int = RSI_PERIOD) -> float:
    """
    Relative Strength Index over the whole series.

    Gains and losses are averaged over all deltas (not a rolling window,
    not Wilder's smoothing).

    Args:
        prices: Prices in time order
        period: Minimum lookback; fewer than period + 1 points is neutral

    Returns:
        RSI in [0, 100]
    """
    if len(prices) < period + 1:
        return RSI_NEUTRAL

    gains = 0.0
    losses = 0.0
    for prev, curr in zip(prices, prices[1:]):
        delta = curr - prev
        if delta >= 0:
            gains += delta
        else:
            losses -= delta

    count = len(prices) - 1
    avg_gain = gains / count
    avg_loss = losses / count

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def ema_series(values: Sequence[float], period: int) -> list[float]:
    """
    Full EMA path seeded with the first value.

    Returns one smoothed value per input value (empty for empty input).
    """
    if not values:
        return []

    multiplier = 2.0 / (period + 1)
    path = [float(values[0])]
    for value in values[1:]:
        path.append((value - path[-1]) * multiplier + path[-1])
    return path


def ema(prices: Sequence[float], period: int) -> float:
    """
    Exponential moving average of the entire series.

    Seeded with the first price and smoothed across every point with
    multiplier 2 / (period + 1). Fewer than ``period`` points returns the
    last price.
    """
    if len(prices) < period or period <= 0:
        return _last_or_zero(prices)
    return ema_series(prices, period)[-1]


def sma(prices: Sequence[float], period: int) -> float:
    """Mean of the most recent ``period`` prices (last price if too short)."""
    if len(prices) < period or period <= 0:
        return _last_or_zero(prices)
    window = prices[-period:]
    return sum(window) / period


def macd(prices: Sequence[float]) -> MACD:
    """
    MACD value, signal and histogram.

    value = EMA12 - EMA26; signal = EMA9 over prices[14:].
    """
    value = ema(prices, MACD_FAST) - ema(prices, MACD_SLOW)
    signal = ema(prices[MACD_SIGNAL_OFFSET:], MACD_SIGNAL)
    return MACD(value=value, signal=signal, histogram=value - signal)


def returns(prices: Sequence[float]) -> list[float]:
    """Period-over-period simple returns, skipping zero-priced bases."""
    return [
        (curr - prev) / prev
        for prev, curr in zip(prices, prices[1:])
        if prev > 0
    ]


def return_stdev(prices: Sequence[float]) -> float:
    """Population standard deviation of simple returns (0.0 if < 2 returns)."""
    series_returns = returns(prices)
    if len(series_returns) < 2:
        return 0.0
    return statistics.pstdev(series_returns)


def volatility(prices: Sequence[float], scale: float = VOLATILITY_SCALE) -> float:
    """
    Normalized volatility in [0, 1].

    stdev of returns divided by ``scale`` and capped at 1.0.
    """
    if scale <= 0:
        return 0.0
    return min(1.0, return_stdev(prices) / scale)


def relative_slope(values: Sequence[float]) -> float:
    """
    Least-squares slope per step divided by the mean of ``values``.

    0.0 for fewer than 2 points or a non-positive mean.
    """
    n = len(values)
    if n < 2:
        return 0.0

    mean_y = sum(values) / n
    if mean_y <= 0:
        return 0.0

    mean_x = (n - 1) / 2
    num = 0.0
    den = 0.0
    for x, y in enumerate(values):
        dx = x - mean_x
        num += dx * (y - mean_y)
        den += dx * dx

    return (num / den) / mean_y


def trend(
    values: Sequence[float],
    window: int = TREND_WINDOW,
    period: int = TREND_EMA_PERIOD,
) -> float:
    """
    Direction and strength of an EMA-smoothed series, in (-1, 1).

    Positive = rising. Used for price and volume alike.
    """
    if len(values) < 2:
        return 0.0
    smoothed = ema_series(values, period)[-window:]
    return math.tanh(relative_slope(smoothed) * TREND_SENSITIVITY)


def percentage_change(prices: Sequence[float], lookback: int) -> float:
    """
    Percent change between the price ``lookback`` points ago and the last one.

    Uses the first price when the series is shorter; 0.0 when the base is 0.
    """
    if len(prices) < 2 or lookback <= 0:
        return 0.0
    old_value = prices[max(0, len(prices) - 1 - lookback)]
    if old_value == 0:
        return 0.0
    return (prices[-1] - old_value) / old_value * 100


def moving_averages(prices: Sequence[float]) -> MovingAverages:
    return MovingAverages(
        ma_20=sma(prices, 20),
        ma_50=sma(prices, 50),
        ma_200=sma(prices, 200),
    )


def calculate_technical_indicators(series: TokenSeries) -> TechnicalIndicators:
    """
    Compute RSI, MACD and the 20/50/200 moving averages for a series.

    Args:
        series: Price history (any length, including empty)

    Returns:
        TechnicalIndicators
    """
    prices = series.prices
    return TechnicalIndicators(
        rsi=min(100.0, max(0.0, rsi(prices))),
        macd=macd(prices),
        moving_averages=moving_averages(prices),
    )
