"""Shared fixtures for the kline report test suite."""

from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path
from typing import List
from unittest.mock import AsyncMock

import pytest

# Ensure project root is on sys.path so `core.*`, `exchange.*` etc. resolve
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

HOUR_MS = 3_600_000
START_MS = 1_700_000_000_000


def _make_candles(closes, start: int = START_MS, step: int = HOUR_MS):
    from exchange.models import Candle

    candles = []
    for i, close in enumerate(closes):
        c = Decimal(str(close))
        open_time = start + i * step
        candles.append(Candle(
            open_time=open_time,
            open=c,
            high=c + Decimal("1"),
            low=c - Decimal("1"),
            close=c,
            volume=Decimal("10.5"),
            close_time=open_time + step - 1,
        ))
    return candles


@pytest.fixture()
def make_candles():
    """Factory: closes -> hourly Candle series starting at START_MS."""
    return _make_candles


@pytest.fixture()
def rising_closes() -> List[float]:
    """50 closes: 20 choppy-but-rising, then 30 steady +2 steps."""
    closes = [100.0]
    for i in range(1, 20):
        closes.append(closes[-1] + (1.0 if i % 2 else -0.5))
    for _ in range(30):
        closes.append(closes[-1] + 2.0)
    return closes


@pytest.fixture()
def fake_source():
    """
    Candle source mock. Configure `fake_source.series[name] = closes`;
    get_candles returns the last `limit` candles for that interval.
    """
    source = AsyncMock()
    source.series = {}
    source.error = None

    async def get_candles(pair_symbol, interval, limit):
        if source.error is not None:
            raise source.error
        closes = source.series.get(interval, [])
        return _make_candles(closes)[-limit:]

    source.get_candles.side_effect = get_candles
    return source
