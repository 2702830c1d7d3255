"""
Order book grouping — buckets depth levels by a price step.
Bids round down, asks round up, so a bucket never overstates the touch.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR
from typing import Dict, List, Tuple
from exchange.models import OrderBook
import logging

logger = logging.getLogger(__name__)

VALID_STEPS = ("0.1", "1", "10", "100")


def _bucket(price: Decimal, step: Decimal, rounding: str) -> Decimal:
    return (price / step).to_integral_value(rounding=rounding) * step


def group_by_step(
    book: OrderBook,
    step: str = "1",
) -> Tuple[Dict[Decimal, Decimal], Dict[Decimal, Decimal]]:
    """
    Sum quantities per price bucket.
    Returns (grouped_bids, grouped_asks) keyed by bucket price.
    """
    if step not in VALID_STEPS:
        raise ValueError(f"Unsupported price step '{step}', expected one of {VALID_STEPS}")
    size = Decimal(step)

    grouped_bids: Dict[Decimal, Decimal] = {}
    for price, qty in book.bids:
        key = _bucket(price, size, ROUND_FLOOR)
        grouped_bids[key] = grouped_bids.get(key, Decimal("0")) + qty

    grouped_asks: Dict[Decimal, Decimal] = {}
    for price, qty in book.asks:
        key = _bucket(price, size, ROUND_CEILING)
        grouped_asks[key] = grouped_asks.get(key, Decimal("0")) + qty

    logger.debug(
        f"[DEPTH] Grouped {len(book.bids)} bids -> {len(grouped_bids)}, "
        f"{len(book.asks)} asks -> {len(grouped_asks)} (step {step})"
    )
    return grouped_bids, grouped_asks


def top_levels(
    grouped: Dict[Decimal, Decimal],
    n: int,
    is_asks: bool,
) -> List[Tuple[Decimal, Decimal]]:
    """Best n levels: lowest prices for asks, highest for bids."""
    ordered = sorted(grouped.items(), key=lambda x: x[0], reverse=not is_asks)
    return ordered[:n]


def grouped_to_csv(grouped: Dict[Decimal, Decimal]) -> str:
    """price,cumulative_amount rows in ascending price order."""
    lines = ["price,cumulative_amount"]
    for price in sorted(grouped):
        lines.append(f"{price.normalize():f},{grouped[price]:.3f}")
    return "\n".join(lines) + "\n"
