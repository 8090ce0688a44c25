"""
Mock market data source for development.

Generates realistic-looking hourly price/volume history without making
actual API calls. Uses deterministic random generation based on address
for consistent results.
"""

import hashlib
import random
from collections.abc import Callable
from datetime import datetime, timedelta

from insight.core.models import PricePoint, TokenSeries, utcnow

# Upper bound on generated history (30 days of hourly candles)
MAX_POINTS = 720


class MockMarketDataSource:
    """
    Mock implementation of MarketDataSource protocol.

    Produces a geometric random walk per token. The same address always
    produces the same prices (timestamps follow the clock).

    Usage:
        source = MockMarketDataSource()
        series = await source.fetch_series("So111...", timedelta(days=7))
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._clock = clock

    async def fetch_series(
        self, token_address: str, lookback: timedelta
    ) -> TokenSeries:
        """
        Generate mock history for the given address.

        Args:
            token_address: Solana token address
            lookback: History window; one point per hour

        Returns:
            TokenSeries with mock values
        """
        # Create deterministic seed from address
        seed = int(hashlib.md5(token_address.encode()).hexdigest(), 16) % (2**32)
        rng = random.Random(seed)

        count = max(0, min(MAX_POINTS, int(lookback.total_seconds() // 3600)))

        # Per-token market character
        price = rng.uniform(0.001, 200.0)
        drift = rng.uniform(-0.002, 0.002)
        hourly_vol = rng.uniform(0.002, 0.06)
        base_volume = rng.uniform(1_000, 5_000_000)

        end = self._clock().replace(minute=0, second=0, microsecond=0)
        start = end - timedelta(hours=count - 1) if count else end

        points = []
        for i in range(count):
            price = max(price * (1 + rng.gauss(drift, hourly_vol)), 0.0)
            volume = base_volume * rng.uniform(0.5, 1.5)
            points.append(
                PricePoint(
                    timestamp=start + timedelta(hours=i),
                    price=round(price, 8),
                    volume=round(volume, 2),
                )
            )

        return TokenSeries(token_address=token_address, points=tuple(points))
