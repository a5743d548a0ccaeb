import io

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers


class FakeResponse:
    def __init__(self, status_code=200, body="{}", headers=None, encoding="utf-8"):
        self.status_code = status_code
        self.content = body.encode("utf-8") if isinstance(body, str) else body
        self.headers = headers or {}
        self.encoding = encoding
        self.closed = False

    @property
    def text(self):
        return self.content.decode(self.encoding or "utf-8", "replace")

    def close(self):
        self.closed = True


@pytest.fixture
def make_response():
    return FakeResponse


@pytest.fixture
def fake_send(monkeypatch):
    """Replace ``session.send``; returns the list of (prepared, kwargs) sent."""

    def install(session, *responses):
        sent = []
        pending = list(responses)

        def send(prepared, **kwargs):
            sent.append((prepared, kwargs))
            return pending.pop(0)

        monkeypatch.setattr(session, "send", send)
        return sent

    return install


class StubAdapter(BaseAdapter):
    """Transport adapter answering with real ``requests.Response`` objects."""

    def __init__(self, *replies):
        super().__init__()
        self.replies = list(replies)
        self.requests = []

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.requests.append((request, stream))
        status, headers, raw = self.replies.pop(0)
        response = requests.Response()
        response.status_code = status
        response.headers = CaseInsensitiveDict(headers)
        response.raw = raw
        response.url = request.url
        response.request = request
        response.encoding = get_encoding_from_headers(response.headers)
        response.connection = self
        return response

    def close(self):
        pass


class TrackingRaw(io.BytesIO):
    """Body stream that records when requests hands the connection back."""

    released = False

    def release_conn(self):
        self.released = True


class DroppedRaw:
    """Body stream whose connection dies before the first chunk."""

    closed = False

    def stream(self, chunk_size, decode_content=True):
        raise requests.exceptions.ChunkedEncodingError("Connection broken: IncompleteRead(0 bytes read)")
        yield b""

    def close(self):
        self.closed = True


@pytest.fixture
def mount_stub():
    """Mount a ``StubAdapter`` on ``session`` for ``prefix``."""

    def install(session, prefix, *replies):
        adapter = StubAdapter(*replies)
        session.mount(prefix, adapter)
        return adapter

    return install


@pytest.fixture
def tracking_raw():
    return TrackingRaw


@pytest.fixture
def dropped_raw():
    return DroppedRaw
