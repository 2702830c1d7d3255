"""
Interval spec parsing: "1h" -> ("1h", None), "1h:200" -> ("1h", 200).
"""

from __future__ import annotations
from typing import Iterable, List
from exchange.models import IntervalRequest
import logging
import re

logger = logging.getLogger(__name__)

# Plain signed decimal digits; no whitespace or underscores
_INTEGER = re.compile(r"[+-]?[0-9]+")


def parse_interval_spec(spec: str) -> IntervalRequest:
    """
    Split on the last ':'. A positive integer suffix becomes the limit override.
    Anything else keeps the whole string as the interval name.
    """
    name, sep, limit_part = spec.rpartition(":")
    if sep:
        limit = int(limit_part) if _INTEGER.fullmatch(limit_part) else 0
        if limit > 0:
            return IntervalRequest(name, limit)
        logger.warning(
            f"[INTERVAL] Invalid limit '{limit_part}' in spec '{spec}'. "
            f"Treating whole as interval name."
        )
    return IntervalRequest(spec)


def parse_interval_specs(specs: Iterable[str]) -> List[IntervalRequest]:
    return [parse_interval_spec(s) for s in specs]
