from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import msgspec

from ..client import CoincheckClient
from ..types import Currency, Number, Pagination, to_wire


class BankAccount(msgspec.Struct, kw_only=True):
    id: int
    bank_name: str
    branch_name: str
    bank_account_type: str  # "futsu" or "toza"
    number: str
    name: str


class BankAccounts(msgspec.Struct, kw_only=True):
    success: bool
    data: list[BankAccount]


class BankAccountResult(msgspec.Struct, kw_only=True):
    success: bool
    data: BankAccount


class Withdraw(msgspec.Struct, kw_only=True):
    id: int
    status: str
    amount: Decimal
    currency: str
    created_at: datetime
    bank_account_id: int
    fee: Decimal
    is_fast: bool


class Withdraws(msgspec.Struct, kw_only=True):
    success: bool
    pagination: Pagination
    data: list[Withdraw]


class WithdrawResult(msgspec.Struct, kw_only=True):
    success: bool
    data: Withdraw


class SuccessResult(msgspec.Struct, kw_only=True):
    success: bool


class WithdrawsJpy:
    """Private API - JPY bank withdrawals.

    https://coincheck.com/ja/documents/exchange/api#withdraws-jpy
    """

    USE_AUTH = True

    def __init__(self, client: CoincheckClient):
        self.client = client

    def bank_accounts(self) -> BankAccounts:
        return self.client.request_json("GET", "/api/bank_accounts", BankAccounts, None, self.USE_AUTH)

    def create_bank_account(
        self,
        bank_name: str,
        branch_name: str,
        bank_account_type: str,
        number: str,
        name: str,
    ) -> BankAccountResult:
        params = {
            "bank_name": bank_name,
            "branch_name": branch_name,
            "bank_account_type": bank_account_type,
            "number": number,
            "name": name,
        }
        return self.client.request_json("POST", "/api/bank_accounts", BankAccountResult, params, self.USE_AUTH)

    def delete_bank_account(self, id: int) -> SuccessResult:
        return self.client.request_json("DELETE", f"/api/bank_accounts/{id}", SuccessResult, None, self.USE_AUTH)

    def withdraws(self) -> Withdraws:
        return self.client.request_json("GET", "/api/withdraws", Withdraws, None, self.USE_AUTH)

    def create_withdraw(self, bank_account_id: int, amount: Number, currency: Currency = Currency.JPY) -> WithdrawResult:
        params = {
            "bank_account_id": str(bank_account_id),
            "amount": to_wire(amount),
            "currency": str(currency),
        }
        return self.client.request_json("POST", "/api/withdraws", WithdrawResult, params, self.USE_AUTH)

    def cancel_withdraw(self, id: int) -> SuccessResult:
        return self.client.request_json("DELETE", f"/api/withdraws/{id}", SuccessResult, None, self.USE_AUTH)
