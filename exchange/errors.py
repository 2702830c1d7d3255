"""
Exceptions raised by the report pipeline.
"""


class ReportError(Exception):
    """Base class for report pipeline errors."""


class KlineFetchError(ReportError):
    """A candle fetch failed. Aborts the whole report build."""

    def __init__(self, symbol: str, interval: str, limit: int, reason: str = ""):
        self.symbol = symbol
        self.interval = interval
        self.limit = limit
        message = f"Failed fetching klines for {symbol} interval {interval} with limit {limit}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InsufficientDataError(ReportError, ValueError):
    """Indicator needs more candles than were provided."""

    def __init__(self, indicator: str, required: int, available: int):
        self.indicator = indicator
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient data for {indicator} calculation "
            f"(need {required} candles, got {available})"
        )
