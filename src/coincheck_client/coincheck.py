"""
Entry points for the Coincheck REST API.

    coincheck = Coincheck.from_env()        # COINCHECK_ACCESS_KEY / COINCHECK_SECRET_KEY
    coincheck.public.ticker()
    coincheck.private.account.balance()

    public_only = Coincheck.without_keys()
    public_only.public.trades(CoinPair.BTC_JPY)
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import requests
from dotenv import load_dotenv

from .api.account import Account
from .api.order import Order
from .api.public import Public
from .api.withdraws_jpy import WithdrawsJpy
from .client import ClientConfig, CoincheckClient, Credentials
from .errors import MissingCredentialsError

ENV_ACCESS_KEY = "COINCHECK_ACCESS_KEY"
ENV_SECRET_KEY = "COINCHECK_SECRET_KEY"


def load_credentials(env_file: str | os.PathLike[str] | None = None) -> Credentials | None:
    """Credentials from the environment (and ``.env``), or None if either key is unset."""
    load_dotenv(env_file)
    access_key = os.getenv(ENV_ACCESS_KEY)
    secret_key = os.getenv(ENV_SECRET_KEY)
    if not access_key or not secret_key:
        return None
    return Credentials(access_key=access_key, secret_key=secret_key)


@dataclass
class Private:
    order: Order
    account: Account
    withdraws_jpy: WithdrawsJpy


class _Facade:
    def __init__(self, client: CoincheckClient):
        self.client = client
        self.public = Public(client)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    @property
    def last_request_time(self) -> float:
        return self.client.last_request_time


class CoincheckNoAuth(_Facade):
    """Public API only; built without API keys."""


class Coincheck(_Facade):
    """Public and private API sharing one signed HTTP client."""

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        *,
        config: ClientConfig = ClientConfig(),
        session: requests.Session | None = None,
    ):
        super().__init__(CoincheckClient(Credentials(access_key, secret_key), config=config, session=session))
        self.private = Private(
            order=Order(self.client),
            account=Account(self.client),
            withdraws_jpy=WithdrawsJpy(self.client),
        )

    @classmethod
    def from_env(
        cls,
        env_file: str | os.PathLike[str] | None = None,
        *,
        config: ClientConfig = ClientConfig(),
        session: requests.Session | None = None,
    ) -> Coincheck:
        credentials = load_credentials(env_file)
        if credentials is None:
            raise MissingCredentialsError(f"{ENV_ACCESS_KEY} and {ENV_SECRET_KEY} must be set")
        return cls(credentials.access_key, credentials.secret_key, config=config, session=session)

    @staticmethod
    def without_keys(
        *,
        config: ClientConfig = ClientConfig(),
        session: requests.Session | None = None,
    ) -> CoincheckNoAuth:
        return CoincheckNoAuth(CoincheckClient(None, config=config, session=session))
