"""
Stochastic RSI — Wilder RSI, stochastic normalization, double smoothing.
Closes are converted to float here; the oscillator does not need Decimal precision.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence
from exchange.errors import InsufficientDataError
from exchange.models import Candle
import logging

logger = logging.getLogger(__name__)


@dataclass
class StochRsiSeries:
    """
    Parallel arrays, one entry per input candle.
    None marks an entry that cannot be computed yet (not enough history).
    """
    open_times: List[int]
    k: List[Optional[float]]
    d: List[Optional[float]]

    def __len__(self) -> int:
        return len(self.open_times)

    def latest(self) -> tuple[Optional[float], Optional[float]]:
        if not self.open_times:
            return None, None
        return self.k[-1], self.d[-1]


def calculate_rsi(closes: Sequence[float], period: int) -> List[Optional[float]]:
    """
    Wilder RSI. Entries before index `period` are None.

    Seed:  avg_gain/avg_loss = sum over changes 1..period-1, divided by period
    Then:  avg = (avg * (period - 1) + x) / period
           RSI = 100 - 100 / (1 + avg_gain / avg_loss), 100 when avg_loss == 0
    """
    rsi: List[Optional[float]] = [None] * len(closes)
    avg_gain = 0.0
    avg_loss = 0.0

    for i in range(1, min(period, len(closes))):
        change = closes[i] - closes[i - 1]
        if change > 0:
            avg_gain += change
        else:
            avg_loss += -change
    avg_gain /= period
    avg_loss /= period

    for i in range(period, len(closes)):
        change = closes[i] - closes[i - 1]
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0

        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

        if avg_loss == 0:
            rsi[i] = 100.0
        else:
            rs = avg_gain / avg_loss
            rsi[i] = 100.0 - (100.0 / (1.0 + rs))

    return rsi


def _filled(values: Sequence[Optional[float]]) -> List[float]:
    return [0.0 if v is None else v for v in values]


def _trailing_mean(values: Sequence[Optional[float]], width: int) -> List[Optional[float]]:
    """SMA over a trailing window from index `width`. Unavailable inputs count as 0."""
    filled = _filled(values)
    out: List[Optional[float]] = [None] * len(values)
    for i in range(width, len(values)):
        out[i] = sum(filled[i - width + 1:i + 1]) / width
    return out


def _stochastic(values: Sequence[Optional[float]], period: int) -> List[Optional[float]]:
    """
    (v - min) / (max - min) * 100 over a trailing window from index `period`.
    Unavailable inputs count as 0; a flat window gives 0 or 100.
    """
    filled = _filled(values)
    out: List[Optional[float]] = [None] * len(values)
    for i in range(period, len(values)):
        window = filled[i - period + 1:i + 1]
        lowest = min(window)
        highest = max(window)
        current = filled[i]
        if highest == lowest:
            out[i] = 0.0 if current == lowest else 100.0
        else:
            out[i] = (current - lowest) / (highest - lowest) * 100.0
    return out


def calculate_stoch_rsi(
    candles: Sequence[Candle],
    rsi_period: int = 14,
    stoch_period: int = 14,
    smooth_k: int = 3,
    smooth_d: int = 3,
) -> StochRsiSeries:
    """
    Stochastic RSI (%K, %D) aligned to the input candles.
    Raises InsufficientDataError below rsi + stoch + k + d candles.
    """
    required = rsi_period + stoch_period + smooth_k + smooth_d
    if len(candles) < required:
        raise InsufficientDataError("Stoch RSI", required, len(candles))

    closes = [float(c.close) for c in candles]
    rsi = calculate_rsi(closes, rsi_period)
    stoch = _stochastic(rsi, stoch_period)
    k = _trailing_mean(stoch, smooth_k)
    d = _trailing_mean(k, smooth_d)

    return StochRsiSeries(
        open_times=[c.open_time for c in candles],
        k=k,
        d=d,
    )
