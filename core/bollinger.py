"""
Bollinger Bands and close-price moving averages.
Decimal arithmetic throughout, like the rest of the price math.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence
from exchange.errors import InsufficientDataError
from exchange.models import Candle
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BollingerPoint:
    """Mean and population standard deviation of one trailing window."""
    open_time: int
    avg: Decimal
    sigma: Decimal
    multiplier: int = 2

    @property
    def upper(self) -> Decimal:
        return self.avg + Decimal(self.multiplier) * self.sigma

    @property
    def lower(self) -> Decimal:
        return self.avg - Decimal(self.multiplier) * self.sigma


@dataclass
class BollingerSummary:
    """Latest band plus moving averages keyed by window size."""
    period: int
    band: BollingerPoint
    moving_averages: Dict[int, Optional[Decimal]] = field(default_factory=dict)

    def to_text(self) -> str:
        band = self.band
        lines = [
            f"BB {self.period} {band.multiplier} "
            f"avg={band.avg:.2f} upper={band.upper:.2f} lower={band.lower:.2f}"
        ]
        for window, value in self.moving_averages.items():
            lines.append(f"MA {window} {'n/a' if value is None else f'{value:.2f}'}")
        return "\n".join(lines)


def calculate_bollinger(
    candles: Sequence[Candle],
    period: int = 20,
    multiplier: int = 2,
) -> List[BollingerPoint]:
    """
    One BollingerPoint per candle from index period-1 onward.

    avg   = mean(close[i-period+1 .. i])
    sigma = sqrt(mean((close - avg)^2))
    """
    if len(candles) < period:
        raise InsufficientDataError("Bollinger Band", period, len(candles))

    n = Decimal(period)
    closes = [c.close for c in candles]
    points: List[BollingerPoint] = []
    for i in range(period - 1, len(closes)):
        window = closes[i - period + 1:i + 1]
        avg = sum(window) / n
        variance = sum((x - avg) ** 2 for x in window) / n
        points.append(BollingerPoint(
            open_time=candles[i].open_time,
            avg=avg,
            sigma=variance.sqrt(),
            multiplier=multiplier,
        ))
    return points


def moving_average(candles: Sequence[Candle], window: int) -> Optional[Decimal]:
    """Mean of the last `window` closes. None when the series is shorter than the window."""
    if window <= 0 or len(candles) < window:
        return None
    recent = [c.close for c in candles[-window:]]
    return sum(recent) / Decimal(window)


def latest_bollinger_summary(
    candles: Sequence[Candle],
    period: int = 20,
    multiplier: int = 2,
    ma_windows: Sequence[int] = (7, 25, 99),
) -> BollingerSummary:
    """Latest Bollinger band plus 7/25/99 moving averages."""
    band = calculate_bollinger(candles, period, multiplier)[-1]
    averages: Dict[int, Optional[Decimal]] = {}
    for window in ma_windows:
        value = moving_average(candles, window)
        if value is None:
            logger.debug(f"[BB] MA {window}: only {len(candles)} candles, not computed")
        averages[window] = value
    return BollingerSummary(period=period, band=band, moving_averages=averages)
