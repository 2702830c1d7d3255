"""
Binance public REST API Client.
Handles retries, timeouts, and the market endpoints the report needs.
"""

from __future__ import annotations
import asyncio
from typing import Any, Dict, List, Optional
import aiohttp
import logging

from exchange.models import Candle, OrderBook, parse_klines, parse_orderbook

logger = logging.getLogger(__name__)


class BinanceRestClient:
    """Async Binance market-data wrapper. Acts as the report's candle source."""

    def __init__(
        self,
        base_url: str,
        timeout_sec: int = 30,
        retry_attempts: int = 2,
        retry_delay_ms: int = 200,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout_sec)
        self.retry_attempts = retry_attempts
        self.retry_delay_ms = retry_delay_ms
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def close(self):
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "BinanceRestClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    @staticmethod
    def pair_to_symbol(pair_symbol: str) -> str:
        """SOL_USDT -> SOLUSDT"""
        return pair_symbol.replace("_", "")

    async def _request(self, endpoint: str, params: Optional[Dict] = None) -> Any:
        """GET an endpoint, retrying on network errors and non-200 responses."""
        session = await self._get_session()
        url = f"{self.base_url}{endpoint}"

        last_error: Optional[BaseException] = None
        for attempt in range(self.retry_attempts + 1):
            if attempt > 0:
                logger.warning(
                    f"[REST] GET {endpoint} retry {attempt}/{self.retry_attempts} "
                    f"after error: {last_error}"
                )
                await asyncio.sleep(self.retry_delay_ms / 1000)

            try:
                async with session.get(url, params=params) as resp:
                    if resp.status != 200:
                        body = await resp.text()
                        logger.error(
                            f"[REST] GET {endpoint} Error: status={resp.status}, body={body[:200]}"
                        )
                        resp.raise_for_status()
                    return await resp.json()

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = e

        logger.error(f"[REST] GET {endpoint} failed after {self.retry_attempts + 1} attempts: {last_error}")
        raise last_error

    # ==================== Market Endpoints ====================

    async def get_klines(self, pair_symbol: str, interval: str, limit: int = 100) -> List[List]:
        """
        Get raw kline rows.
        Interval: 1s, 1m, 3m, 5m, 15m, 30m, 1h, 2h, 4h, 6h, 8h, 12h, 1d, 3d, 1w, 1M
        Returns oldest first.
        """
        data = await self._request(
            "/uiKlines",
            {
                "symbol": self.pair_to_symbol(pair_symbol),
                "interval": interval,
                "limit": str(limit),
            },
        )
        if not isinstance(data, list):
            raise ValueError(f"Unexpected kline payload: {str(data)[:200]}")
        return data

    async def get_candles(self, pair_symbol: str, interval: str, limit: int) -> List[Candle]:
        """Candle source contract: ordered Candle records, oldest first, at most `limit`."""
        raw = await self.get_klines(pair_symbol, interval, limit)
        candles = parse_klines(raw)
        logger.debug(f"[REST] {pair_symbol} {interval}: {len(candles)} candles (limit {limit})")
        return candles[-limit:]

    async def get_orderbook(self, pair_symbol: str, limit: int = 100) -> OrderBook:
        """Get order book depth."""
        data = await self._request(
            "/depth",
            {"symbol": self.pair_to_symbol(pair_symbol), "limit": str(limit)},
        )
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected depth payload: {str(data)[:200]}")
        return parse_orderbook(data)
