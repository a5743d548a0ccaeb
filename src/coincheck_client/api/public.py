from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import msgspec

from ..client import CoincheckClient
from ..types import BaseOrderType, CoinPair, Number, Pagination, Params, to_wire


class Ticker(msgspec.Struct, kw_only=True):
    last: Decimal
    bid: Decimal
    ask: Decimal
    high: Decimal
    low: Decimal
    volume: Decimal
    timestamp: int  # milliseconds

    @property
    def time(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)


class Trade(msgspec.Struct, kw_only=True):
    id: int
    amount: Decimal
    rate: Decimal
    pair: str
    order_type: str
    created_at: datetime


class Trades(msgspec.Struct, kw_only=True):
    success: bool
    pagination: Pagination
    data: list[Trade]


class OrderBookEntry(msgspec.Struct, array_like=True):
    """One ``[rate, amount]`` row of the order book."""

    rate: Decimal
    amount: Decimal


class OrderBooks(msgspec.Struct, kw_only=True):
    asks: list[OrderBookEntry]
    bids: list[OrderBookEntry]


class CalculatedRate(msgspec.Struct, kw_only=True):
    success: bool
    rate: Decimal
    price: Decimal
    amount: Decimal


class ExchangeRate(msgspec.Struct, kw_only=True):
    rate: Decimal


class Public:
    """Public API: ticker, trades, order book and rates.

    https://coincheck.com/ja/documents/exchange/api#public
    """

    USE_AUTH = False

    def __init__(self, client: CoincheckClient):
        self.client = client

    def ticker(self, pair: CoinPair | None = None) -> Ticker:
        params: Params | None = None
        if pair is not None:
            params = {"pair": str(pair)}
        return self.client.request_json("GET", "/api/ticker", Ticker, params, self.USE_AUTH)

    def trades(self, pair: CoinPair) -> Trades:
        return self.client.request_json("GET", "/api/trades", Trades, {"pair": str(pair)}, self.USE_AUTH)

    def order_book(self) -> OrderBooks:
        return self.client.request_json("GET", "/api/order_books", OrderBooks, None, self.USE_AUTH)

    def order_rate_from_amount(self, order_type: BaseOrderType, pair: CoinPair, amount: Number) -> CalculatedRate:
        """Rate for an order of ``amount`` units, computed from the exchange's book."""
        params = {"order_type": str(order_type), "pair": str(pair), "amount": to_wire(amount)}
        return self.client.request_json(
            "GET", "/api/exchange/orders/rate", CalculatedRate, params, self.USE_AUTH
        )

    def order_rate_from_price(self, order_type: BaseOrderType, pair: CoinPair, price: Number) -> CalculatedRate:
        """Rate for an order worth ``price`` in the quote currency."""
        params = {"order_type": str(order_type), "pair": str(pair), "price": to_wire(price)}
        return self.client.request_json(
            "GET", "/api/exchange/orders/rate", CalculatedRate, params, self.USE_AUTH
        )

    def marketplace_buy_rate(self, pair: CoinPair) -> ExchangeRate:
        return self.client.request_json("GET", f"/api/rate/{pair}", ExchangeRate, None, self.USE_AUTH)
