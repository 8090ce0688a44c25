"""
Historical series cache.

Holds one price/volume series per token address and refreshes it from a
MarketDataSource on demand.

This service:
1. Serves fresh entries straight from memory (TTL, default 5 minutes)
2. Issues at most one upstream fetch per address at a time (single-flight)
3. Falls back to the previous series when a refresh fails (degraded)
4. Purges entries nobody has read for a while (default 1 hour)

The cache is owned by the orchestrator; there is no module-level instance.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from insight.core.exceptions import (
    DataUnavailableError,
    NotFoundError,
    UpstreamFailureError,
)
from insight.core.models import SeriesSnapshot, TokenSeries, utcnow
from insight.core.protocols import MarketDataSource

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=5)
DEFAULT_EVICTION_HORIZON = timedelta(hours=1)
DEFAULT_LOOKBACK = timedelta(days=30)

# Default timeout for upstream calls (seconds)
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class _CacheEntry:
    """
    Stored series plus bookkeeping.

    Entries are replaced wholesale, never mutated, so a reader always sees
    one complete series.
    """

    series: TokenSeries
    fetched_at: datetime


class HistoricalSeriesCache:
    """
    Per-token series cache with staleness and single-flight control.

    Concurrent callers asking for the same missing or stale address join
    one in-flight fetch. Cancelling a caller only stops that caller from
    waiting; the fetch itself runs to completion and populates the cache.

    Usage:
        cache = HistoricalSeriesCache(source)
        snapshot = await cache.get("So111...")
        prices = snapshot.series.prices
    """

    def __init__(
        self,
        source: MarketDataSource,
        ttl: timedelta = DEFAULT_TTL,
        eviction_horizon: timedelta = DEFAULT_EVICTION_HORIZON,
        lookback: timedelta = DEFAULT_LOOKBACK,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize cache with a market data source.

        Args:
            source: MarketDataSource implementation (mock or real)
            ttl: Age after which an entry is refreshed
            eviction_horizon: Idle time after which an entry is dropped
            lookback: History window requested from the source
            timeout: Timeout for a single upstream fetch in seconds
            clock: Current-time function (injectable for tests)
        """
        self._source = source
        self._ttl = ttl
        self._eviction_horizon = eviction_horizon
        self._lookback = lookback
        self._timeout = timeout
        self._clock = clock

        self._entries: dict[str, _CacheEntry] = {}
        self._last_access: dict[str, datetime] = {}
        self._inflight: dict[str, asyncio.Task[SeriesSnapshot]] = {}

    @property
    def size(self) -> int:
        """Number of cached series."""
        return len(self._entries)

    def contains(self, token_address: str) -> bool:
        """Whether a series (fresh or stale) is cached for the address."""
        return token_address in self._entries

    async def get(
        self,
        token_address: str,
        as_of: datetime | None = None,
    ) -> SeriesSnapshot:
        """
        Get the series for a token, refreshing it if missing or stale.

        Args:
            token_address: Validated token address
            as_of: Reference time for staleness (defaults to now)

        Returns:
            SeriesSnapshot; ``degraded`` is True if a stale series was served
            because the refresh failed

        Raises:
            DataUnavailableError: Refresh failed and nothing is cached
            NotFoundError: Provider does not know the token and nothing is cached
        """
        now = as_of or self._clock()
        self._last_access[token_address] = now
        self._evict_idle(now)

        entry = self._entries.get(token_address)
        if entry is not None and now - entry.fetched_at < self._ttl:
            logger.debug(f"Cache hit for {token_address[:8]}")
            return SeriesSnapshot(series=entry.series, fetched_at=entry.fetched_at)

        task = self._inflight.get(token_address)
        if task is None:
            logger.debug(f"Cache miss for {token_address[:8]}, fetching")
            task = asyncio.create_task(self._refresh(token_address))
            self._inflight[token_address] = task
            task.add_done_callback(
                lambda done, address=token_address: self._on_refresh_done(
                    address, done
                )
            )
        else:
            logger.debug(f"Joining in-flight fetch for {token_address[:8]}")

        # shield: a cancelled caller must not cancel the shared fetch
        return await asyncio.shield(task)

    async def close(self) -> None:
        """Cancel in-flight fetches and drop every entry."""
        tasks = list(self._inflight.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        self._inflight.clear()
        self._entries.clear()
        self._last_access.clear()
        logger.info("Series cache closed")

    async def _refresh(self, token_address: str) -> SeriesSnapshot:
        """Fetch a series and store it, falling back to the stale entry."""
        try:
            series = await self._fetch(token_address)
        except (UpstreamFailureError, NotFoundError) as e:
            stale = self._entries.get(token_address)
            if stale is not None:
                logger.warning(
                    f"Refresh failed for {token_address[:8]}, serving stale "
                    f"series from {stale.fetched_at.isoformat()}: {e}"
                )
                return SeriesSnapshot(
                    series=stale.series,
                    fetched_at=stale.fetched_at,
                    degraded=True,
                )

            if isinstance(e, NotFoundError):
                raise

            logger.error(f"No series available for {token_address[:8]}: {e}")
            raise DataUnavailableError(
                technical_message=(
                    f"No cached series for {token_address} and refresh failed: "
                    f"{e.technical_message}"
                ),
            ) from e

        fetched_at = self._clock()
        self._entries[token_address] = _CacheEntry(series=series, fetched_at=fetched_at)
        logger.debug(
            f"Cached {len(series.points)} points for {token_address[:8]}"
        )
        return SeriesSnapshot(series=series, fetched_at=fetched_at)

    async def _fetch(self, token_address: str) -> TokenSeries:
        """Call the source with a timeout, normalizing its failures."""
        try:
            return await asyncio.wait_for(
                self._source.fetch_series(token_address, self._lookback),
                timeout=self._timeout,
            )

        except TimeoutError:
            logger.error(
                f"Market data timeout after {self._timeout}s for {token_address[:8]}"
            )
            raise UpstreamFailureError(
                technical_message=f"Market data timeout after {self._timeout}s",
            ) from None

        except (UpstreamFailureError, NotFoundError):
            # Re-raise our own exceptions
            raise

        except Exception as e:
            # Wrap unexpected errors
            logger.exception(f"Unexpected error fetching series: {e}")
            raise UpstreamFailureError(
                technical_message=f"Market data error: {type(e).__name__}: {e}",
            ) from e

    def _on_refresh_done(
        self, token_address: str, task: asyncio.Task[SeriesSnapshot]
    ) -> None:
        if self._inflight.get(token_address) is task:
            del self._inflight[token_address]
        # Mark the exception as retrieved even if every waiter was cancelled
        if not task.cancelled():
            task.exception()

    def _evict_idle(self, now: datetime) -> None:
        """Drop entries that have not been read within the eviction horizon."""
        idle = [
            address
            for address, last_access in self._last_access.items()
            if now - last_access > self._eviction_horizon
            and address not in self._inflight
        ]
        for address in idle:
            self._entries.pop(address, None)
            del self._last_access[address]
        if idle:
            logger.debug(f"Evicted {len(idle)} idle series")
