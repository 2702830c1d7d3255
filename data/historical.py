"""
Historical Data Module

Responsibilities:
- Merge interval requests from every report section into one fetch per interval name
  - Effective limit = max(explicit limit or default) across requesters
- Fetch all intervals concurrently, all-or-nothing
"""

from __future__ import annotations
import asyncio
from typing import Dict, Iterable, List, Protocol
from exchange.errors import KlineFetchError
from exchange.models import Candle, IntervalRequest
import logging

logger = logging.getLogger(__name__)


class CandleSource(Protocol):
    async def get_candles(self, pair_symbol: str, interval: str, limit: int) -> List[Candle]:
        ...


def plan_fetches(requests: Iterable[IntervalRequest], default_limit: int) -> Dict[str, int]:
    """Interval name -> limit to fetch. Names appear in first-request order."""
    plan: Dict[str, int] = {}
    for req in requests:
        required = req.limit if req.limit is not None else default_limit
        plan[req.name] = max(plan.get(req.name, required), required)
    return plan


class HistoricalData:
    """Fetches candle history for one symbol, one request per distinct interval."""

    def __init__(self, source: CandleSource, pair_symbol: str):
        self.source = source
        self.pair_symbol = pair_symbol

    async def _fetch_one(self, interval: str, limit: int) -> List[Candle]:
        logger.info(f"[FETCH] {self.pair_symbol}: {interval} limit {limit}")
        try:
            return await self.source.get_candles(self.pair_symbol, interval, limit)
        except Exception as e:
            logger.error(f"[FETCH] {self.pair_symbol}: {interval} limit {limit} failed: {e}")
            raise KlineFetchError(self.pair_symbol, interval, limit, str(e)) from e

    async def fetch(
        self,
        requests: Iterable[IntervalRequest],
        default_limit: int,
    ) -> Dict[str, List[Candle]]:
        """
        Fetch every distinct interval concurrently.
        The first failure propagates as KlineFetchError; sibling fetches are
        left to finish and their results dropped.
        """
        plan = plan_fetches(requests, default_limit)
        if not plan:
            return {}

        logger.info(f"[FETCH] {self.pair_symbol}: effective fetch params {plan}")

        names = list(plan)
        results = await asyncio.gather(
            *(self._fetch_one(name, plan[name]) for name in names)
        )
        data = dict(zip(names, results))

        logger.info(
            f"[FETCH] {self.pair_symbol}: fetched "
            f"{', '.join(f'{n}={len(c)}' for n, c in data.items())}"
        )
        return data
