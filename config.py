"""
Kline Report — Configuration
All tunable parameters in one place.
"""

import os
from dataclasses import dataclass, field
from typing import List, Tuple


def _split_list(raw: str) -> List[str]:
    return [s.strip() for s in raw.split(",") if s.strip()]


@dataclass
class SourceConfig:
    base_url: str = "https://data-api.binance.vision/api/v3"
    timeout_sec: int = 30               # Per request
    retry_attempts: int = 2             # Retries after the first attempt
    retry_delay_ms: int = 200


@dataclass
class IndicatorConfig:
    rsi_period: int = 14
    stoch_period: int = 14
    smooth_k: int = 3
    smooth_d: int = 3
    bb_period: int = 20
    bb_multiplier: int = 2
    ma_windows: Tuple[int, ...] = (7, 25, 99)


@dataclass
class ReportConfig:
    symbol: str = "SOL_USDT"
    default_limit: int = 100            # Candles per interval unless "name:limit"
    kline_intervals: List[str] = field(default_factory=lambda: ["1h", "4h:84"])
    stoch_rsi_intervals: List[str] = field(default_factory=lambda: ["1h", "4h"])
    bollinger_intervals: List[str] = field(default_factory=list)
    latest_bb_ma_intervals: List[str] = field(default_factory=lambda: ["1d"])
    orderbook_limit: int = 1000
    orderbook_step: str = "1"           # 0.1 | 1 | 10 | 100
    source: SourceConfig = field(default_factory=SourceConfig)
    indicators: IndicatorConfig = field(default_factory=IndicatorConfig)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ReportConfig":
        """Load config with environment variable overrides."""
        config = cls()
        config.symbol = os.getenv("PAIR_SYMBOL", config.symbol)
        config.default_limit = int(os.getenv("DEFAULT_LIMIT", str(config.default_limit)))
        if os.getenv("KLINE_INTERVALS") is not None:
            config.kline_intervals = _split_list(os.getenv("KLINE_INTERVALS", ""))
        if os.getenv("STOCH_RSI_INTERVALS") is not None:
            config.stoch_rsi_intervals = _split_list(os.getenv("STOCH_RSI_INTERVALS", ""))
        if os.getenv("BOLLINGER_INTERVALS") is not None:
            config.bollinger_intervals = _split_list(os.getenv("BOLLINGER_INTERVALS", ""))
        if os.getenv("LATEST_BB_MA_INTERVALS") is not None:
            config.latest_bb_ma_intervals = _split_list(os.getenv("LATEST_BB_MA_INTERVALS", ""))
        config.orderbook_limit = int(os.getenv("ORDERBOOK_LIMIT", str(config.orderbook_limit)))
        config.orderbook_step = os.getenv("ORDERBOOK_STEP", config.orderbook_step)
        config.source.base_url = os.getenv("BINANCE_API_URL", config.source.base_url)
        config.source.timeout_sec = int(os.getenv("FETCH_TIMEOUT_SEC", str(config.source.timeout_sec)))
        config.source.retry_attempts = int(
            os.getenv("FETCH_RETRY_ATTEMPTS", str(config.source.retry_attempts))
        )
        config.log_level = os.getenv("LOG_LEVEL", "INFO")
        return config
