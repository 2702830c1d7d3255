"""
Data models for the kline report pipeline.
Uses Decimal for all prices and volumes. Decimal keeps the provider's text
exactly, so a CSV row reproduces what the exchange sent.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candle:
    """Standard OHLCV candle."""
    open_time: int          # Unix ms
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal
    close_time: int         # Unix ms


@dataclass(frozen=True)
class IntervalRequest:
    """One requested interval, e.g. "1h" or "1h:200"."""
    name: str
    limit: Optional[int] = None

    @property
    def display(self) -> str:
        if self.limit is not None:
            return f"{self.name}:{self.limit}"
        return self.name


@dataclass
class OrderBook:
    """Depth snapshot. Bids best-first (descending), asks best-first (ascending)."""
    last_update_id: int
    bids: List[Tuple[Decimal, Decimal]] = field(default_factory=list)
    asks: List[Tuple[Decimal, Decimal]] = field(default_factory=list)


def parse_klines(raw_klines: List) -> List[Candle]:
    """
    Parse raw Binance kline rows into Candle objects.
    Binance format: [openTime, open, high, low, close, volume, closeTime, ...]
    Rows already come oldest-first. Duplicate open times keep the first row.
    """
    candles: List[Candle] = []
    seen = set()
    for k in raw_klines:
        try:
            candle = Candle(
                open_time=int(k[0]),
                open=Decimal(str(k[1])),
                high=Decimal(str(k[2])),
                low=Decimal(str(k[3])),
                close=Decimal(str(k[4])),
                volume=Decimal(str(k[5])),
                close_time=int(k[6]),
            )
        except (IndexError, ValueError, TypeError, InvalidOperation) as e:
            logger.warning(f"[KLINE] Bad kline data: {k}: {e}")
            continue

        if candle.open_time in seen:
            logger.warning(f"[KLINE] Duplicate open_time {candle.open_time}, skipped")
            continue
        seen.add(candle.open_time)
        candles.append(candle)

    candles.sort(key=lambda c: c.open_time)
    return candles


def parse_orderbook(raw: dict) -> OrderBook:
    """Parse a Binance /depth payload. Malformed levels are dropped."""
    def _levels(rows) -> List[Tuple[Decimal, Decimal]]:
        levels = []
        for row in rows or []:
            if len(row) != 2:
                continue
            try:
                levels.append((Decimal(str(row[0])), Decimal(str(row[1]))))
            except (InvalidOperation, ValueError) as e:
                logger.warning(f"[DEPTH] Bad level {row}: {e}")
        return levels

    return OrderBook(
        last_update_id=int(raw.get("lastUpdateId", 0)),
        bids=_levels(raw.get("bids")),
        asks=_levels(raw.get("asks")),
    )
