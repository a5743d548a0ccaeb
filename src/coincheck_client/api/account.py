from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

import msgspec

from ..client import CoincheckClient
from ..types import Currency, Number, to_wire


class Balance(msgspec.Struct, kw_only=True):
    """Account balance.

    ``jpy`` and ``btc`` exclude the amounts reserved by open orders
    (``jpy_reserved`` / ``btc_reserved``).
    """

    success: bool
    jpy: Decimal
    btc: Decimal
    jpy_reserved: Decimal
    btc_reserved: Decimal
    jpy_lend_in_use: Decimal
    btc_lend_in_use: Decimal
    jpy_lent: Decimal
    btc_lent: Decimal
    jpy_debt: Decimal
    btc_debt: Decimal


class SendResult(msgspec.Struct, kw_only=True):
    success: bool
    id: str
    address: str
    amount: Decimal
    fee: Decimal


class SendRecord(msgspec.Struct, kw_only=True):
    id: int
    amount: Decimal
    currency: str
    fee: Decimal
    address: str
    created_at: datetime


class SendHistory(msgspec.Struct, kw_only=True):
    success: bool
    sends: list[SendRecord]


class DepositRecord(msgspec.Struct, kw_only=True):
    id: int
    amount: Decimal
    currency: str
    address: str
    status: str
    confirmed_at: Optional[str] = None
    created_at: datetime


class DepositHistory(msgspec.Struct, kw_only=True):
    success: bool
    deposits: list[DepositRecord]


class Fee(msgspec.Struct, kw_only=True):
    taker_fee: Decimal
    maker_fee: Decimal


class AccountInfo(msgspec.Struct, kw_only=True):
    success: bool
    id: int
    email: str
    identity_status: str
    bitcoin_address: str
    taker_fee: Decimal
    maker_fee: Decimal
    exchange_fees: dict[str, Fee]


class Account:
    """Private API - balances, BTC transfers and account details.

    https://coincheck.com/ja/documents/exchange/api#account
    """

    USE_AUTH = True

    def __init__(self, client: CoincheckClient):
        self.client = client

    def balance(self) -> Balance:
        return self.client.request_json("GET", "/api/accounts/balance", Balance, None, self.USE_AUTH)

    def send_money(self, address: str, amount: Number) -> SendResult:
        """Send ``amount`` BTC to ``address``."""
        params = {"address": address, "amount": to_wire(amount)}
        return self.client.request_json("POST", "/api/send_money", SendResult, params, self.USE_AUTH)

    def sends(self) -> SendHistory:
        params = {"currency": str(Currency.BTC)}
        return self.client.request_json("GET", "/api/send_money", SendHistory, params, self.USE_AUTH)

    def deposits(self) -> DepositHistory:
        params = {"currency": str(Currency.BTC)}
        return self.client.request_json("GET", "/api/deposit_money", DepositHistory, params, self.USE_AUTH)

    def info(self) -> AccountInfo:
        return self.client.request_json("GET", "/api/accounts", AccountInfo, None, self.USE_AUTH)
