"""
Report Formatter — CSV renderers and Markdown sections.

Each section lists its requested intervals sorted by name. A failure while
computing or rendering one interval becomes an inline note for that interval;
the remaining intervals still render.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Sequence
from config import IndicatorConfig
from core.bollinger import BollingerPoint, calculate_bollinger, latest_bollinger_summary
from core.stoch_rsi import StochRsiSeries, calculate_stoch_rsi
from exchange.models import Candle, IntervalRequest
import logging

logger = logging.getLogger(__name__)

KLINE_CSV_HEADER = "open_time,open,high,low,close,volume,close_time"
STOCH_RSI_CSV_HEADER = "at,stoch_rsi_k,stoch_rsi_d"
BOLLINGER_CSV_HEADER = "at,bb_avg,bb_upper,bb_lower"

# (candles, rows to keep) -> rendered block body
Renderer = Callable[[Sequence[Candle], int], str]


# ==================== CSV Renderers ====================

def _decimal_text(value: Decimal) -> str:
    """Original decimal text; empty for NaN/Infinity."""
    if not isinstance(value, Decimal) or not value.is_finite():
        return ""
    return f"{value:f}"


def klines_to_csv(candles: Sequence[Candle]) -> str:
    lines = [KLINE_CSV_HEADER]
    for c in candles:
        lines.append(",".join([
            str(c.open_time),
            _decimal_text(c.open),
            _decimal_text(c.high),
            _decimal_text(c.low),
            _decimal_text(c.close),
            _decimal_text(c.volume),
            str(c.close_time),
        ]))
    return "\n".join(lines) + "\n"


def stoch_rsi_to_csv(series: StochRsiSeries) -> str:
    """Rows with an unavailable or non-positive %K/%D are not warmed up yet and are skipped."""
    lines = [STOCH_RSI_CSV_HEADER]
    for at, k, d in zip(series.open_times, series.k, series.d):
        if k is None or d is None or k <= 0 or d <= 0:
            continue
        lines.append(f"{at},{k:.2f},{d:.2f}")
    return "\n".join(lines) + "\n"


def bollinger_to_csv(points: Iterable[BollingerPoint]) -> str:
    lines = [BOLLINGER_CSV_HEADER]
    for p in points:
        lines.append(f"{p.open_time},{p.avg:.2f},{p.upper:.2f},{p.lower:.2f}")
    return "\n".join(lines) + "\n"


# ==================== Section Renderers ====================

def render_klines(candles: Sequence[Candle], rows: int) -> str:
    return klines_to_csv(candles[-rows:])


def make_stoch_rsi_renderer(cfg: IndicatorConfig) -> Renderer:
    def render(candles: Sequence[Candle], rows: int) -> str:
        series = calculate_stoch_rsi(
            candles, cfg.rsi_period, cfg.stoch_period, cfg.smooth_k, cfg.smooth_d
        )
        k, d = series.latest()
        logger.debug(f"[REPORT] Stoch RSI latest %K={k} %D={d} over {len(series)} candles")
        tail = StochRsiSeries(
            open_times=series.open_times[-rows:],
            k=series.k[-rows:],
            d=series.d[-rows:],
        )
        return stoch_rsi_to_csv(tail)
    return render


def make_bollinger_renderer(cfg: IndicatorConfig) -> Renderer:
    def render(candles: Sequence[Candle], rows: int) -> str:
        points = calculate_bollinger(candles, cfg.bb_period, cfg.bb_multiplier)
        start = candles[-rows:][0].open_time
        return bollinger_to_csv(p for p in points if p.open_time >= start)
    return render


def make_latest_bb_ma_renderer(cfg: IndicatorConfig) -> Renderer:
    def render(candles: Sequence[Candle], rows: int) -> str:
        summary = latest_bollinger_summary(
            candles, cfg.bb_period, cfg.bb_multiplier, cfg.ma_windows
        )
        return summary.to_text() + "\n"
    return render


# ==================== Sections ====================

@dataclass(frozen=True)
class SectionStyle:
    """Headings and notices for one indicator kind."""
    heading: str
    item_title: str
    fence: str
    empty_notice: str
    missing_notice: str
    error_label: str


KLINES_STYLE = SectionStyle(
    heading="Klines (Price History)",
    item_title="Price",
    fence="csv",
    empty_notice="No data found.",
    missing_notice="Data unexpectedly missing after fetch",
    error_label="Error formatting Klines to CSV",
)

STOCH_RSI_STYLE = SectionStyle(
    heading="Stochastic RSI",
    item_title="Stochastic RSI",
    fence="csv",
    empty_notice="No kline data available to calculate StochRSI.",
    missing_notice="Kline data unexpectedly missing for StochRSI calculation",
    error_label="Error calculating StochRSI",
)

BOLLINGER_STYLE = SectionStyle(
    heading="Bollinger Band",
    item_title="Bollinger Band",
    fence="csv",
    empty_notice="No kline data available to calculate Bollinger Band.",
    missing_notice="Kline data unexpectedly missing for Bollinger Band calculation",
    error_label="Error calculating Bollinger Band",
)

LATEST_BB_MA_STYLE = SectionStyle(
    heading="Bollinger Band and Moving Average",
    item_title="Bollinger Band and Moving Average",
    fence="",
    empty_notice="No kline data available to calculate Bollinger Band and Moving Average.",
    missing_notice="Kline data unexpectedly missing for Bollinger Band calculation",
    error_label="Error calculating Bollinger Band and Moving Average",
)


def format_section(
    style: SectionStyle,
    requests: Iterable[IntervalRequest],
    data: Dict[str, List[Candle]],
    render: Renderer,
    default_limit: int,
) -> str:
    """Heading plus one block per request, sorted by interval name."""
    requests = sorted(requests, key=lambda r: (r.name, r.limit or 0))
    if not requests:
        return ""

    out = [f"\n**{style.heading}:**\n"]
    for req in requests:
        display = req.display
        candles = data.get(req.name)

        if candles is None:
            out.append(f"\n* Interval: {display} ({style.missing_notice})\n")
            logger.warning(f"[REPORT] {style.heading}: no fetched data for {req.name}")
            continue

        if not candles:
            out.append(f" ({display}) {style.empty_notice}\n")
            continue

        rows = req.limit if req.limit is not None else default_limit
        try:
            body = render(candles, rows)
        except Exception as e:
            out.append(f"\n* Interval: {display} ({style.error_label}: {e})\n")
            logger.error(f"[REPORT] {style.error_label} for {display}: {e}")
            continue

        out.append(f"\n* {style.item_title}: {display}\n")
        out.append(f"```{style.fence}\n")
        out.append(body)
        out.append("```\n")

    return "".join(out)
