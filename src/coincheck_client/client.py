from __future__ import annotations

import logging
import threading
import time
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Any, TypeVar
from urllib.parse import urlsplit

import msgspec
import requests
from requests.exceptions import RequestException, Timeout
from requests.utils import get_encoding_from_headers

from . import auth
from .errors import (
    ApiAuthError,
    ApiRateLimitError,
    ApiStatusError,
    DecodeError,
    MissingCredentialsError,
    TransportError,
)
from .types import HTTPMethod, Params

logger = logging.getLogger(__name__)

T = TypeVar("T")

API_BASE = "https://coincheck.com"
CONTENT_TYPE_JSON = "application/json"


@dataclass(frozen=True)
class Credentials:
    access_key: str
    secret_key: str

    def __repr__(self) -> str:
        return f"Credentials(access_key={self.access_key!r}, secret_key='***')"


@dataclass(frozen=True)
class ClientConfig:
    base_url: str = API_BASE
    timeout: float | None = 10.0  # seconds; None waits forever
    # hold a per-client lock from nonce issuance until the request is sent
    serialize_auth: bool = True

    def __post_init__(self) -> None:
        if urlsplit(self.base_url).scheme != "https":
            raise ValueError(f"base_url must use https: {self.base_url!r}")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive or None")


@dataclass(frozen=True)
class ApiRequest:
    method: HTTPMethod | str
    path: str
    params: Params | None = None
    use_auth: bool = False


class CoincheckClient:
    """Shared HTTP core for every Coincheck endpoint.

    Builds the final URL, signs it when asked to, sends exactly one request
    and turns 4xx/5xx into typed errors. Redirects are never followed and
    nothing is retried.
    """

    def __init__(
        self,
        credentials: Credentials | None = None,
        *,
        config: ClientConfig = ClientConfig(),
        session: requests.Session | None = None,
    ):
        self._credentials = credentials
        self.config = config
        self.session = session or requests.Session()

        self._state_lock = threading.Lock()
        self._auth_lock = threading.Lock()
        self._last_request_time = time.monotonic()

    def __enter__(self) -> CoincheckClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    @property
    def has_credentials(self) -> bool:
        return self._credentials is not None

    @property
    def last_request_time(self) -> float:
        """``time.monotonic()`` of the most recent dispatch."""
        with self._state_lock:
            return self._last_request_time

    def _touch(self) -> None:
        with self._state_lock:
            self._last_request_time = time.monotonic()

    def _nonce(self) -> str:
        return auth.next_nonce()

    # ---------- request core ----------
    def dispatch(self, request: ApiRequest) -> requests.Response:
        """Send one request and return the live, unread response."""
        method = HTTPMethod.parse(request.method)
        path = request.path

        credentials = self._credentials
        if request.use_auth and credentials is None:
            raise MissingCredentialsError(f"{method.value} {path} requires API keys")

        prepared = self.session.prepare_request(
            requests.Request(
                method.value,
                f"{self.config.base_url.rstrip('/')}{path}",
                params=dict(request.params) if request.params else None,
            )
        )
        if method in (HTTPMethod.POST, HTTPMethod.DELETE):
            prepared.headers["Content-Type"] = CONTENT_TYPE_JSON

        self._touch()
        logger.debug("%s %s (auth=%s)", method.value, path, request.use_auth)

        serialize = request.use_auth and self.config.serialize_auth
        with self._auth_lock if serialize else nullcontext():
            if request.use_auth and credentials is not None:
                prepared.headers.update(
                    auth.auth_headers(
                        credentials.access_key,
                        credentials.secret_key.encode("utf-8"),
                        self._nonce(),
                        prepared.url,
                    )
                )
            response = self._send(prepared, method, path)

        self._raise_for_status(response, method, path)
        return response

    def _send(self, prepared: requests.PreparedRequest, method: HTTPMethod, path: str) -> requests.Response:
        settings = self.session.merge_environment_settings(prepared.url, {}, True, None, None)
        try:
            return self.session.send(prepared, timeout=self.config.timeout, allow_redirects=False, **settings)
        except Timeout as e:
            logger.error("%s %s timed out", method.value, path)
            raise TransportError(f"Timeout calling {prepared.url}", cause=e) from e
        except RequestException as e:
            logger.error("%s %s network error: %s", method.value, path, e)
            raise TransportError(f"Network error calling {prepared.url}: {e}", cause=e) from e

    def _raise_for_status(self, response: requests.Response, method: HTTPMethod, path: str) -> None:
        status = response.status_code
        if status < 300:
            return

        if status < 400:
            response.close()
            location = response.headers.get("Location")
            logger.error("%s %s redirected to %s; not followed", method.value, path, location)
            raise TransportError(f"Refusing HTTP {status} redirect from {path} to {location}")

        try:
            body = read_body(response).decode("utf-8", "replace")
        finally:
            response.close()
        msg = body.strip()[:300] or "Unknown error"

        if status in (401, 403):
            logger.error("%s %s auth error: HTTP %d", method.value, path, status)
            raise ApiAuthError(status_code=status, message=msg, method=method.value, path=path, body=body)

        if status == 429:
            retry_after = response.headers.get("Retry-After")
            parsed: float | None = None
            if retry_after is not None:
                try:
                    parsed = float(retry_after)
                except ValueError:
                    parsed = None
            logger.warning("%s %s rate limited; Retry-After=%s", method.value, path, parsed)
            raise ApiRateLimitError(msg, retry_after=parsed, method=method.value, path=path, body=body)

        logger.warning("%s %s failed: HTTP %d", method.value, path, status)
        raise ApiStatusError(status_code=status, message=msg, method=method.value, path=path, body=body)

    # ---------- dispatch + decode ----------
    def request_json(
        self,
        method: HTTPMethod | str,
        path: str,
        shape: type[T],
        params: Params | None = None,
        use_auth: bool = False,
    ) -> T:
        response = self.dispatch(ApiRequest(method, path, params, use_auth))
        try:
            return decode_json(response, shape)
        finally:
            response.close()

    def request_text(
        self,
        method: HTTPMethod | str,
        path: str,
        params: Params | None = None,
        use_auth: bool = False,
    ) -> str:
        response = self.dispatch(ApiRequest(method, path, params, use_auth))
        try:
            return decode_text(response)
        finally:
            response.close()


def _shape_name(shape: Any) -> str:
    return shape.__name__ if isinstance(shape, type) else repr(shape)


def read_body(response: requests.Response) -> bytes:
    """Read the whole body; a connection dropped mid-body is a transport failure."""
    try:
        return response.content or b""
    except RequestException as e:
        logger.error("reading response body failed: %s", e)
        raise TransportError(f"Failed reading response body: {e}", cause=e) from e


def decode_json(response: requests.Response, shape: type[T]) -> T:
    """Strictly decode the body into ``shape``; no field is ever defaulted."""
    content = read_body(response)
    try:
        return msgspec.json.decode(content, type=shape)
    except (msgspec.ValidationError, msgspec.DecodeError) as e:
        raise DecodeError(
            _shape_name(shape),
            str(e),
            body=content[:300].decode("utf-8", "replace"),
            cause=e,
        ) from e


def decode_text(response: requests.Response) -> str:
    content = read_body(response)
    # requests assumes ISO-8859-1 for bare text/*; only trust an explicit charset
    content_type = response.headers.get("Content-Type", "")
    encoding = "utf-8"
    if "charset" in content_type.lower():
        encoding = get_encoding_from_headers(response.headers) or encoding
    try:
        return content.decode(encoding)
    except (UnicodeDecodeError, LookupError) as e:
        raise DecodeError("str", f"body is not valid {encoding}", cause=e) from e
