"""
Heuristic sentiment model.

Default SentimentModel: a weighted blend of the EMA-smoothed price trend,
the EMA-smoothed volume trend and the social feed.

    score = clamp(price * 0.4 + volume * 0.3 + social * 0.3, 0, 1)

Trends from the indicator engine are in (-1, 1) and are mapped to [0, 1]
(0.5 = flat).
"""

from insight.core.models import TokenSeries
from insight.services.indicators.technical import trend

PRICE_WEIGHT = 0.4
VOLUME_WEIGHT = 0.3
SOCIAL_WEIGHT = 0.3


def normalized_trend(values: list[float]) -> float:
    """Map a trend in (-1, 1) onto [0, 1]."""
    return (trend(values) + 1) / 2


class HeuristicSentimentModel:
    """Deterministic weighted-trend implementation of SentimentModel."""

    def score(self, series: TokenSeries, social_trend: float) -> float:
        price_trend = normalized_trend(series.prices)
        volume_trend = normalized_trend(series.volumes)

        raw = (
            price_trend * PRICE_WEIGHT
            + volume_trend * VOLUME_WEIGHT
            + social_trend * SOCIAL_WEIGHT
        )
        return max(0.0, min(1.0, raw))
