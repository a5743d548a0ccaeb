from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Union

import msgspec

from .errors import UnsupportedMethodError

# Query parameters, insertion-ordered; encoded into the URL as given.
Params = dict[str, str]

# Amounts and rates accepted by the facades.
Number = Union[Decimal, int, str]


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, value: HTTPMethod | str) -> HTTPMethod:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.upper())
            except ValueError:
                pass
        raise UnsupportedMethodError(value)


class Currency(str, Enum):
    JPY = "JPY"
    BTC = "BTC"

    def __str__(self) -> str:
        return self.value


class CoinPair(str, Enum):
    BTC_JPY = "btc_jpy"
    ETC_JPY = "etc_jpy"
    FCT_JPY = "fct_jpy"
    MONA_JPY = "mona_jpy"
    PLT_JPY = "plt_jpy"

    def __str__(self) -> str:
        return self.value


class BaseOrderType(str, Enum):
    """Side of an order or a rate query."""

    BUY = "buy"
    SELL = "sell"

    def __str__(self) -> str:
        return self.value


class OrderType(str, Enum):
    """Value of the ``order_type`` parameter for new orders.

    Limit orders reuse the plain side tokens.
    """

    LIMIT_BUY = "buy"
    LIMIT_SELL = "sell"
    MARKET_BUY = "market_buy"
    MARKET_SELL = "market_sell"

    def __str__(self) -> str:
        return self.value


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, token: str) -> SortOrder:
        for order in cls:
            if order.value == token:
                return order
        raise ValueError(f"undefined sort order: {token!r}")


class Pagination(msgspec.Struct, kw_only=True):
    """Cursor for list endpoints.

    https://coincheck.com/ja/documents/exchange/api#pagination
    """

    limit: int
    order: SortOrder
    starting_after: Optional[int] = None
    ending_before: Optional[int] = None

    def to_params(self) -> Params:
        params: Params = {"limit": str(self.limit), "order": str(self.order)}
        if self.starting_after is not None:
            params["starting_after"] = str(self.starting_after)
        if self.ending_before is not None:
            params["ending_before"] = str(self.ending_before)
        return params


def to_wire(value: Number) -> str:
    """Format an amount or rate as a plain decimal string.

    Floats are refused: their repr is not a faithful decimal value.
    """
    if isinstance(value, (bool, float)):
        raise TypeError(f"expected Decimal, int or str, got {type(value).__name__}; use Decimal")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        try:
            value = Decimal(value.strip())
        except InvalidOperation as e:
            raise ValueError(f"not a decimal number: {value!r}") from e
    if not isinstance(value, Decimal):
        raise TypeError(f"expected Decimal, int or str, got {type(value).__name__}")
    if not value.is_finite():
        raise ValueError(f"not a finite number: {value}")
    return format(value, "f")
