from __future__ import annotations

import hashlib
import hmac
import time

from .errors import ClockError, SecretKeyError

NONCE_HEADER = "ACCESS-NONCE"
SIGNATURE_HEADER = "ACCESS-SIGNATURE"
KEY_HEADER = "ACCESS-KEY"


def next_nonce() -> str:
    """Microseconds since the Unix epoch, as decimal text.

    Reads the clock on every call; two calls inside the same microsecond
    return the same value.
    """
    now_ns = time.time_ns()
    if now_ns < 0:
        raise ClockError("System clock is before the Unix epoch")
    return str(now_ns // 1000)


def sign(secret_key: bytes, message: str) -> str:
    """HMAC-SHA256 of ``message`` under ``secret_key``, lowercase hex."""
    try:
        mac = hmac.new(secret_key, digestmod=hashlib.sha256)
    except (TypeError, ValueError) as e:
        raise SecretKeyError("Secret key cannot initialize HMAC-SHA256", cause=e) from e
    mac.update(message.encode("utf-8"))
    return mac.hexdigest()


def auth_headers(access_key: str, secret_key: bytes, nonce: str, url: str) -> dict[str, str]:
    # signed message is the nonce followed by the exact URL on the wire
    signature = sign(secret_key, f"{nonce}{url}")
    return {
        NONCE_HEADER: nonce,
        SIGNATURE_HEADER: signature,
        KEY_HEADER: access_key,
    }
