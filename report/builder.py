"""
Price History Builder — registers interval requests per indicator kind,
fetches the candles once, and renders the Markdown/CSV report.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Tuple
from config import IndicatorConfig
from core.intervals import parse_interval_specs
from data.historical import CandleSource, HistoricalData
from exchange.models import IntervalRequest
from report.formatter import (
    BOLLINGER_STYLE,
    KLINES_STYLE,
    LATEST_BB_MA_STYLE,
    STOCH_RSI_STYLE,
    Renderer,
    SectionStyle,
    format_section,
    make_bollinger_renderer,
    make_latest_bb_ma_renderer,
    make_stoch_rsi_renderer,
    render_klines,
)
import logging

logger = logging.getLogger(__name__)

NO_INTERVALS_MESSAGE = "No historical data intervals specified.\n"
NO_DATA_MESSAGE = "Warning: No kline data could be fetched for the requested intervals.\n"

# Output order of sections, regardless of registration order
KLINES = "klines"
STOCH_RSI = "stoch_rsi"
BOLLINGER = "bollinger"
LATEST_BB_MA = "latest_bb_ma"
SECTION_ORDER = (KLINES, STOCH_RSI, BOLLINGER, LATEST_BB_MA)


class PriceHistoryBuilder:
    """
    Usage:
        report = await (
            PriceHistoryBuilder("SOL_USDT", 100, client)
            .with_klines(["1h", "4h:60"])
            .with_stoch_rsi(["1h"])
            .build()
        )

    Requests for the same interval within one kind merge into one entry,
    keeping the larger effective limit.
    """

    def __init__(
        self,
        pair_symbol: str,
        default_limit: int,
        source: CandleSource,
        indicators: Optional[IndicatorConfig] = None,
    ):
        self.pair_symbol = pair_symbol
        self.default_limit = default_limit
        self.source = source
        self.indicators = indicators or IndicatorConfig()
        self._requests: Dict[str, Dict[str, IntervalRequest]] = {
            kind: {} for kind in SECTION_ORDER
        }

    # ==================== Registration ====================

    def _effective(self, req: IntervalRequest) -> int:
        return req.limit if req.limit is not None else self.default_limit

    def _register(self, kind: str, specs: Iterable[str]) -> "PriceHistoryBuilder":
        registered = self._requests[kind]
        for req in parse_interval_specs(specs):
            current = registered.get(req.name)
            if current is None or self._effective(req) > self._effective(current):
                registered[req.name] = req
        return self

    def with_klines(self, specs: Iterable[str]) -> "PriceHistoryBuilder":
        """Raw candle CSV per interval. Can be called multiple times."""
        return self._register(KLINES, specs)

    def with_stoch_rsi(self, specs: Iterable[str]) -> "PriceHistoryBuilder":
        """Stochastic RSI %K/%D CSV per interval."""
        return self._register(STOCH_RSI, specs)

    def with_bollinger(self, specs: Iterable[str]) -> "PriceHistoryBuilder":
        """Bollinger Band series CSV per interval."""
        return self._register(BOLLINGER, specs)

    def with_latest_bollinger_ma(self, specs: Iterable[str]) -> "PriceHistoryBuilder":
        """Latest Bollinger Band plus 7/25/99 moving averages per interval."""
        return self._register(LATEST_BB_MA, specs)

    def requests(self, kind: str) -> List[IntervalRequest]:
        return list(self._requests[kind].values())

    def all_requests(self) -> List[IntervalRequest]:
        return [req for kind in SECTION_ORDER for req in self._requests[kind].values()]

    # ==================== Build ====================

    def _sections(self) -> List[Tuple[str, SectionStyle, Renderer]]:
        cfg = self.indicators
        return [
            (KLINES, KLINES_STYLE, render_klines),
            (STOCH_RSI, STOCH_RSI_STYLE, make_stoch_rsi_renderer(cfg)),
            (BOLLINGER, BOLLINGER_STYLE, make_bollinger_renderer(cfg)),
            (LATEST_BB_MA, LATEST_BB_MA_STYLE, make_latest_bb_ma_renderer(cfg)),
        ]

    async def build(self) -> str:
        """
        Fetch every registered interval once and render the report.
        Fetch failures propagate (KlineFetchError); per-interval indicator
        failures are rendered inline.
        """
        requests = self.all_requests()
        if not requests:
            return NO_INTERVALS_MESSAGE

        history = HistoricalData(self.source, self.pair_symbol)
        data = await history.fetch(requests, self.default_limit)

        if not data:
            logger.warning(f"[REPORT] {self.pair_symbol}: no kline data fetched")
            return NO_DATA_MESSAGE

        output = []
        for kind, style, render in self._sections():
            if not self._requests[kind]:
                continue
            output.append(format_section(
                style, self._requests[kind].values(), data, render, self.default_limit
            ))

        report = "".join(output)
        logger.info(f"[REPORT] {self.pair_symbol}: built report ({len(report)} chars)")
        return report
