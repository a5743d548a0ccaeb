from __future__ import annotations
from typing import Any


class CoincheckClientError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class ClockError(CoincheckClientError):
    """System clock reports a time before the Unix epoch; no nonce can be issued."""


class SecretKeyError(CoincheckClientError):
    """Secret key cannot initialize the HMAC primitive."""


class UnsupportedMethodError(CoincheckClientError):
    """HTTP method outside GET/POST/DELETE."""

    def __init__(self, method: Any):
        super().__init__(f"Unsupported HTTP method: {method!r}")
        self.method = method


class MissingCredentialsError(CoincheckClientError):
    """Authenticated call attempted on a client built without API keys."""


class TransportError(CoincheckClientError):
    """The request or its response body failed in transit, or Coincheck answered with a redirect."""


class ApiStatusError(CoincheckClientError):
    """HTTP 4xx/5xx returned by the exchange."""

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        method: str | None = None,
        path: str | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.method = method
        self.path = path
        self.body = body


class ApiAuthError(ApiStatusError):
    """Coincheck rejected the API key or the request signature (HTTP 401/403)."""


class ApiRateLimitError(ApiStatusError):
    """Rate limit exceeded (HTTP 429)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        retry_after: float | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(status_code=429, message=message, **kwargs)
        self.retry_after = retry_after


class DecodeError(CoincheckClientError):
    """Response body did not match the expected shape."""

    def __init__(
        self,
        shape: str,
        message: str,
        *,
        body: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(f"Cannot decode {shape}: {message}", cause=cause)
        self.shape = shape
        self.body = body
