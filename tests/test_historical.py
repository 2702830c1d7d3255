"""Tests for the fetch planner (mocked candle source)."""

from __future__ import annotations

import asyncio

import pytest

from data.historical import HistoricalData, plan_fetches
from exchange.errors import KlineFetchError
from exchange.models import IntervalRequest


class TestPlanFetches:
    def test_explicit_and_default_take_max(self):
        reqs = [IntervalRequest("1h", 50), IntervalRequest("1h")]
        assert plan_fetches(reqs, 100) == {"1h": 100}

    def test_explicit_above_default_wins(self):
        reqs = [IntervalRequest("4h"), IntervalRequest("4h", 300)]
        assert plan_fetches(reqs, 100) == {"4h": 300}

    def test_one_entry_per_name(self):
        reqs = [IntervalRequest("1h"), IntervalRequest("4h", 20), IntervalRequest("1h", 10)]
        assert plan_fetches(reqs, 30) == {"1h": 30, "4h": 20}

    def test_empty(self):
        assert plan_fetches([], 100) == {}


class TestHistoricalDataFetch:
    @pytest.mark.asyncio
    async def test_single_fetch_per_interval(self, fake_source):
        fake_source.series["1h"] = list(range(150))
        history = HistoricalData(fake_source, "SOL_USDT")

        data = await history.fetch([IntervalRequest("1h", 50), IntervalRequest("1h")], 100)

        fake_source.get_candles.assert_awaited_once_with("SOL_USDT", "1h", 100)
        assert len(data["1h"]) == 100

    @pytest.mark.asyncio
    async def test_returns_map_by_name(self, fake_source):
        fake_source.series["1h"] = list(range(10))
        fake_source.series["4h"] = list(range(5))
        history = HistoricalData(fake_source, "SOL_USDT")

        data = await history.fetch([IntervalRequest("4h"), IntervalRequest("1h")], 100)

        assert set(data) == {"1h", "4h"}
        assert len(data["1h"]) == 10
        assert len(data["4h"]) == 5

    @pytest.mark.asyncio
    async def test_no_requests_no_fetch(self, fake_source):
        history = HistoricalData(fake_source, "SOL_USDT")
        assert await history.fetch([], 100) == {}
        fake_source.get_candles.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_error_carries_context(self, fake_source):
        fake_source.error = ConnectionError("boom")
        history = HistoricalData(fake_source, "ETH_USDT")

        with pytest.raises(KlineFetchError) as exc:
            await history.fetch([IntervalRequest("4h", 60)], 100)

        assert exc.value.symbol == "ETH_USDT"
        assert exc.value.interval == "4h"
        assert exc.value.limit == 60
        assert isinstance(exc.value.__cause__, ConnectionError)
        assert "boom" in str(exc.value)

    @pytest.mark.asyncio
    async def test_fetches_run_concurrently(self):
        started = []
        both_started = asyncio.Event()

        class BarrierSource:
            async def get_candles(self, pair_symbol, interval, limit):
                started.append(interval)
                if len(started) == 2:
                    both_started.set()
                await both_started.wait()
                return []

        history = HistoricalData(BarrierSource(), "SOL_USDT")
        data = await asyncio.wait_for(
            history.fetch([IntervalRequest("1h"), IntervalRequest("4h")], 10),
            timeout=2,
        )
        assert data == {"1h": [], "4h": []}

    @pytest.mark.asyncio
    async def test_fail_fast(self):
        class HalfBrokenSource:
            async def get_candles(self, pair_symbol, interval, limit):
                if interval == "1d":
                    raise RuntimeError("provider down")
                await asyncio.sleep(0.05)
                return []

        history = HistoricalData(HalfBrokenSource(), "SOL_USDT")
        with pytest.raises(KlineFetchError) as exc:
            await history.fetch([IntervalRequest("1h"), IntervalRequest("1d")], 10)
        assert exc.value.interval == "1d"
