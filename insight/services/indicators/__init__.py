"""Technical indicators."""

from insight.services.indicators.technical import (
    calculate_technical_indicators,
    ema,
    macd,
    rsi,
    sma,
    trend,
    volatility,
)

__all__ = [
    "calculate_technical_indicators",
    "ema",
    "macd",
    "rsi",
    "sma",
    "trend",
    "volatility",
]
