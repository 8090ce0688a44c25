"""
Birdeye market data source.

Fetches hourly OHLCV candles from the Birdeye public API.
This is the real implementation used in production.

Responsibilities:
1. Request candles for the lookback window via /defi/ohlcv
2. Normalize them into a TokenSeries (close price + volume)
3. Map HTTP and payload errors onto the engine's error taxonomy

NO caching, NO indicator math.
"""

import logging
import math
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import aiohttp
from pydantic import ValidationError as PydanticValidationError

from insight.core.exceptions import NotFoundError, UpstreamFailureError
from insight.core.models import PricePoint, TokenSeries, utcnow

logger = logging.getLogger(__name__)

# Birdeye public API root
BIRDEYE_API_URL = "https://public-api.birdeye.so"
OHLCV_PATH = "/defi/ohlcv"

# Candle resolution requested from Birdeye
CANDLE_TYPE = "1H"

# Default timeout (seconds)
DEFAULT_TIMEOUT = 10.0


class BirdeyeMarketDataSource:
    """
    Real implementation of MarketDataSource using the Birdeye API.

    Uses:
    - GET /defi/ohlcv (hourly candles) for price and volume history

    No retries: the cache serves stale data when a refresh fails.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = BIRDEYE_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize Birdeye source.

        Args:
            api_key: Birdeye API key
            base_url: API root (overridable for tests/proxies)
            timeout: Request timeout in seconds
            clock: Current-time function used for the time window
        """
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._clock = clock

    async def fetch_series(
        self, token_address: str, lookback: timedelta
    ) -> TokenSeries:
        """
        Fetch hourly price/volume history from Birdeye.

        Args:
            token_address: Solana token mint address
            lookback: History window to request

        Returns:
            TokenSeries ordered by timestamp (may be empty for untraded tokens)

        Raises:
            NotFoundError: Birdeye does not know the token
            UpstreamFailureError: Transport, HTTP or payload error
        """
        logger.info(f"Fetching OHLCV from Birdeye: {token_address[:8]}...")

        time_to = self._clock()
        time_from = time_to - lookback
        params = {
            "address": token_address,
            "type": CANDLE_TYPE,
            "time_from": str(int(time_from.timestamp())),
            "time_to": str(int(time_to.timestamp())),
        }
        headers = {
            "X-API-KEY": self._api_key,
            "x-chain": "solana",
            "accept": "application/json",
        }
        timeout = aiohttp.ClientTimeout(total=self._timeout)

        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    f"{self._base_url}{OHLCV_PATH}",
                    params=params,
                    headers=headers,
                    timeout=timeout,
                ) as resp:
                    if resp.status in (400, 404):
                        raise NotFoundError(
                            technical_message=(
                                f"Birdeye returned {resp.status} for {token_address}"
                            ),
                        )
                    if resp.status != 200:
                        raise UpstreamFailureError(
                            technical_message=f"Birdeye returned HTTP {resp.status}",
                        )

                    data = await resp.json()

            return self._build_series(token_address, data)

        except (NotFoundError, UpstreamFailureError):
            raise
        except TimeoutError:
            logger.error(f"Birdeye timeout after {self._timeout}s")
            raise UpstreamFailureError(
                message="Market data request timed out.",
                technical_message=f"Birdeye timeout after {self._timeout}s",
            ) from None
        except aiohttp.ClientError as e:
            logger.warning(f"Birdeye transport error: {e}")
            raise UpstreamFailureError(
                technical_message=f"Birdeye transport error: {type(e).__name__}: {e}",
            ) from e
        except Exception as e:
            logger.exception(f"Unexpected Birdeye error: {e}")
            raise UpstreamFailureError(
                technical_message=f"Birdeye error: {type(e).__name__}: {e}",
            ) from e

    def _build_series(self, token_address: str, data: dict) -> TokenSeries:
        """
        Build TokenSeries from an OHLCV response.

        Candles are sorted by time; a repeated timestamp keeps the last
        candle seen. Candles without a usable close price are skipped.

        An unsuccessful response that still carries an empty ``data`` block
        means Birdeye has no market for the token.
        """
        if not isinstance(data, dict) or not data.get("success", False):
            message = data.get("message") if isinstance(data, dict) else None
            if isinstance(data, dict) and "data" in data:
                if not (data["data"] or {}).get("items"):
                    raise NotFoundError(
                        technical_message=(
                            f"Birdeye has no data for {token_address}: {message}"
                        ),
                    )
            raise UpstreamFailureError(
                technical_message=f"Birdeye unsuccessful response: {message}",
            )

        items = (data.get("data") or {}).get("items") or []

        by_time: dict[int, PricePoint] = {}
        for item in items:
            close = item.get("c")
            unix_time = item.get("unixTime")
            if close is None or unix_time is None:
                continue
            close = float(close)
            volume = float(item.get("v") or 0.0)
            if not math.isfinite(close) or not math.isfinite(volume):
                continue

            try:
                by_time[int(unix_time)] = PricePoint(
                    timestamp=datetime.fromtimestamp(int(unix_time), tz=timezone.utc),
                    price=close,
                    volume=volume,
                )
            except PydanticValidationError as e:
                raise UpstreamFailureError(
                    technical_message=f"Birdeye returned an invalid candle: {e}",
                ) from e

        points = tuple(by_time[t] for t in sorted(by_time))
        logger.debug(f"Birdeye returned {len(points)} candles for {token_address[:8]}")
        return TokenSeries(token_address=token_address, points=points)
