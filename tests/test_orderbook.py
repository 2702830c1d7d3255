"""Tests for order book grouping."""

from __future__ import annotations

from decimal import Decimal

import pytest

from core.orderbook import group_by_step, grouped_to_csv, top_levels
from exchange.models import OrderBook

D = Decimal


@pytest.fixture()
def book():
    return OrderBook(
        last_update_id=1,
        bids=[(D("142.9"), D("1")), (D("142.1"), D("2")), (D("141.5"), D("0.5"))],
        asks=[(D("143.1"), D("1.25")), (D("143.9"), D("1")), (D("145.0"), D("3"))],
    )


class TestGroupByStep:
    def test_bids_floor_asks_ceil(self, book):
        bids, asks = group_by_step(book, "1")
        assert bids == {D("142"): D("3"), D("141"): D("0.5")}
        assert asks == {D("144"): D("2.25"), D("145"): D("3")}

    def test_tenth_step(self, book):
        bids, _ = group_by_step(book, "0.1")
        assert bids[D("142.1")] == D("2")

    def test_hundred_step(self, book):
        bids, asks = group_by_step(book, "100")
        assert bids == {D("100"): D("3.5")}
        assert asks == {D("200"): D("5.25")}

    def test_unsupported_step(self, book):
        with pytest.raises(ValueError):
            group_by_step(book, "5")


class TestTopLevels:
    def test_bids_highest_first(self, book):
        bids, _ = group_by_step(book, "1")
        assert top_levels(bids, 1, is_asks=False) == [(D("142"), D("3"))]

    def test_asks_lowest_first(self, book):
        _, asks = group_by_step(book, "1")
        assert top_levels(asks, 5, is_asks=True) == [(D("144"), D("2.25")), (D("145"), D("3"))]


class TestGroupedToCsv:
    def test_csv(self, book):
        bids, _ = group_by_step(book, "1")
        assert grouped_to_csv(bids) == "price,cumulative_amount\n141,0.500\n142,3.000\n"

    def test_empty(self):
        assert grouped_to_csv({}) == "price,cumulative_amount\n"
