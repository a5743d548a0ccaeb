from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

import msgspec

from ..client import CoincheckClient
from ..types import CoinPair, Number, OrderType, Pagination, Params, to_wire


class OrderResult(msgspec.Struct, kw_only=True):
    success: bool
    id: int
    rate: Optional[Decimal] = None
    amount: Optional[Decimal] = None
    order_type: str
    stop_loss_rate: Optional[Decimal] = None
    pair: str
    created_at: datetime


class OpenOrder(msgspec.Struct, kw_only=True):
    id: int
    order_type: str
    rate: Optional[Decimal] = None  # null for market orders
    pair: str
    pending_amount: Optional[Decimal] = None
    pending_market_buy_amount: Optional[Decimal] = None
    stop_loss_rate: Optional[Decimal] = None
    created_at: datetime


class OpenOrders(msgspec.Struct, kw_only=True):
    success: bool
    orders: list[OpenOrder]


class CancelResult(msgspec.Struct, kw_only=True):
    success: bool
    id: int


class CancelStatus(msgspec.Struct, kw_only=True):
    success: bool
    id: int
    cancel: bool
    created_at: datetime


class OrderTransaction(msgspec.Struct, kw_only=True):
    id: int
    order_id: int
    created_at: datetime
    funds: dict[str, Decimal]
    pair: str
    rate: Decimal
    fee_currency: Optional[str] = None
    fee: Decimal
    liquidity: str
    side: str


class OrderTransactions(msgspec.Struct, kw_only=True):
    success: bool
    transactions: list[OrderTransaction]


class OrderTransactionsPage(msgspec.Struct, kw_only=True):
    success: bool
    pagination: Pagination
    data: list[OrderTransaction]


class Order:
    """Private API - placing, listing and cancelling exchange orders.

    https://coincheck.com/ja/documents/exchange/api#order
    """

    USE_AUTH = True

    def __init__(self, client: CoincheckClient):
        self.client = client

    def new_any(self, params: Params) -> OrderResult:
        """Place an order with caller-built parameters.

        Orders outside the exchange's amount or price limits come back as
        HTTP 400.
        """
        return self.client.request_json("POST", "/api/exchange/orders", OrderResult, params, self.USE_AUTH)

    def _new_limit(
        self,
        order_type: OrderType,
        pair: CoinPair,
        rate: Number,
        amount: Number,
        stop_loss_rate: Number | None = None,
    ) -> OrderResult:
        params = {
            "pair": str(pair),
            "order_type": str(order_type),
            "rate": to_wire(rate),
            "amount": to_wire(amount),
        }
        if stop_loss_rate is not None:
            params["stop_loss_rate"] = to_wire(stop_loss_rate)
        return self.new_any(params)

    def new_limit_buy(self, pair: CoinPair, rate: Number, amount: Number) -> OrderResult:
        return self._new_limit(OrderType.LIMIT_BUY, pair, rate, amount)

    def new_limit_sell(self, pair: CoinPair, rate: Number, amount: Number) -> OrderResult:
        return self._new_limit(OrderType.LIMIT_SELL, pair, rate, amount)

    def new_stop_limit_buy(self, pair: CoinPair, rate: Number, amount: Number, stop_loss_rate: Number) -> OrderResult:
        return self._new_limit(OrderType.LIMIT_BUY, pair, rate, amount, stop_loss_rate)

    def new_stop_limit_sell(self, pair: CoinPair, rate: Number, amount: Number, stop_loss_rate: Number) -> OrderResult:
        return self._new_limit(OrderType.LIMIT_SELL, pair, rate, amount, stop_loss_rate)

    def new_market_buy(self, pair: CoinPair, amount_jpy: Number, stop_loss_rate: Number | None = None) -> OrderResult:
        """Market buy spending ``amount_jpy`` of the quote currency."""
        params = {
            "pair": str(pair),
            "order_type": str(OrderType.MARKET_BUY),
            "market_buy_amount": to_wire(amount_jpy),
        }
        if stop_loss_rate is not None:
            params["stop_loss_rate"] = to_wire(stop_loss_rate)
        return self.new_any(params)

    def new_market_sell(self, pair: CoinPair, amount: Number, stop_loss_rate: Number | None = None) -> OrderResult:
        params = {
            "pair": str(pair),
            "order_type": str(OrderType.MARKET_SELL),
            "amount": to_wire(amount),
        }
        if stop_loss_rate is not None:
            params["stop_loss_rate"] = to_wire(stop_loss_rate)
        return self.new_any(params)

    def new_stop_market_buy(self, pair: CoinPair, amount_jpy: Number, stop_loss_rate: Number) -> OrderResult:
        return self.new_market_buy(pair, amount_jpy, stop_loss_rate)

    def new_stop_market_sell(self, pair: CoinPair, amount: Number, stop_loss_rate: Number) -> OrderResult:
        return self.new_market_sell(pair, amount, stop_loss_rate)

    def opens(self) -> OpenOrders:
        return self.client.request_json("GET", "/api/exchange/orders/opens", OpenOrders, None, self.USE_AUTH)

    def cancel(self, id: int) -> CancelResult:
        return self.client.request_json("DELETE", f"/api/exchange/orders/{id}", CancelResult, None, self.USE_AUTH)

    def cancel_status(self, id: int) -> CancelStatus:
        return self.client.request_json(
            "GET", "/api/exchange/orders/cancel_status", CancelStatus, {"id": str(id)}, self.USE_AUTH
        )

    def transactions(self) -> OrderTransactions:
        return self.client.request_json(
            "GET", "/api/exchange/orders/transactions", OrderTransactions, None, self.USE_AUTH
        )

    def transactions_pagination(self, pagination: Pagination) -> OrderTransactionsPage:
        return self.client.request_json(
            "GET",
            "/api/exchange/orders/transactions_pagination",
            OrderTransactionsPage,
            pagination.to_params(),
            self.USE_AUTH,
        )
