"""
Mock social and news feeds for development.

Return stable pseudo-random scores without calling any external API.
The same address always gets the same score from the same feed.
"""

import hashlib
import random


def _seeded_score(feed: str, token_address: str) -> float:
    seed = int(hashlib.md5(f"{feed}:{token_address}".encode()).hexdigest(), 16)
    rng = random.Random(seed % (2**32))
    # Most tokens sit near neutral
    return round(min(1.0, max(0.0, rng.gauss(0.5, 0.15))), 4)


class MockSocialMetricsProvider:
    """
    Mock implementation of SocialMetricsProvider protocol.

    Usage:
        provider = MockSocialMetricsProvider()
        score = await provider.score("So111...")
    """

    async def score(self, token_address: str) -> float:
        return _seeded_score("social", token_address)


class MockNewsFeedProvider:
    """Mock implementation of NewsFeedProvider protocol."""

    async def score(self, token_address: str) -> float:
        return _seeded_score("news", token_address)
