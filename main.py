"""
Kline Report — Entry point.
Fetches candles and depth for one pair and prints the historical-data report.
"""

from __future__ import annotations
import asyncio
import sys
import logging

from dotenv import load_dotenv

# Load .env file before reading config
load_dotenv()

from config import ReportConfig
from core.orderbook import group_by_step, grouped_to_csv, top_levels
from exchange.binance_rest import BinanceRestClient
from report.builder import PriceHistoryBuilder

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


async def build_market_report(config: ReportConfig, client: BinanceRestClient) -> str:
    """Historical-data report followed by grouped order-book depth."""
    builder = (
        PriceHistoryBuilder(config.symbol, config.default_limit, client, config.indicators)
        .with_klines(config.kline_intervals)
        .with_stoch_rsi(config.stoch_rsi_intervals)
        .with_bollinger(config.bollinger_intervals)
        .with_latest_bollinger_ma(config.latest_bb_ma_intervals)
    )

    history, book = await asyncio.gather(
        builder.build(),
        client.get_orderbook(config.symbol, config.orderbook_limit),
    )

    bids, asks = group_by_step(book, config.orderbook_step)
    best_bid = top_levels(bids, 1, is_asks=False)
    best_ask = top_levels(asks, 1, is_asks=True)
    if best_bid and best_ask:
        logger.info(f"[BOOT] {config.symbol}: best bid {best_bid[0][0]}, best ask {best_ask[0][0]}")

    return (
        f"## Historical Data in CSV:\n{history}\n"
        f"## Consolidated Data in CSV:\n\n"
        f"**Bids:**\n{grouped_to_csv(bids)}\n"
        f"**Asks:**\n{grouped_to_csv(asks)}"
    )


async def main():
    """Entry point."""
    config = ReportConfig.from_env()
    setup_logging(config.log_level)

    logger.info(f"[BOOT] Building report for {config.symbol} (default limit {config.default_limit})")

    async with BinanceRestClient(
        base_url=config.source.base_url,
        timeout_sec=config.source.timeout_sec,
        retry_attempts=config.source.retry_attempts,
        retry_delay_ms=config.source.retry_delay_ms,
    ) as client:
        try:
            report = await build_market_report(config, client)
        except Exception as e:
            logger.critical(f"Fatal error: {e}", exc_info=True)
            sys.exit(1)

    print(report)


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
