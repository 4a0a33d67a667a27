"""Fixtures for reporting tests — a scripted in-memory transport."""

from __future__ import annotations

import json
from collections import deque
from dataclasses import dataclass
from typing import Any

import pytest
import requests

from rpclient.reporting.models import PendingRequest, ReportConfig
from rpclient.reporting.transport import Transport


class TrackedResponse(requests.Response):
    """requests.Response that remembers whether it was closed."""

    closed = False

    def close(self) -> None:
        self.closed = True
        super().close()


def make_response(status: int = 200, body: Any = None) -> TrackedResponse:
    """Build a response with an in-memory body (dict/list as JSON, str, or bytes)."""
    if body is None:
        content = b""
    elif isinstance(body, bytes):
        content = body
    elif isinstance(body, str):
        content = body.encode("utf-8")
    else:
        content = json.dumps(body).encode("utf-8")
    resp = TrackedResponse()
    resp.status_code = status
    resp.reason = "OK" if status < 400 else "Error"
    resp.encoding = "utf-8"
    resp._content = content
    resp._content_consumed = True
    return resp


@dataclass
class SentRequest:
    request: PendingRequest
    url: str
    headers: dict[str, str]
    timeout: float

    def json(self) -> Any:
        assert self.request.body is not None
        return json.loads(self.request.body)


class FakeTransport(Transport):
    """Transport replaying queued responses or exceptions, recording every send."""

    def __init__(self) -> None:
        self.sent: list[SentRequest] = []
        self.responses: list[TrackedResponse] = []
        self._queue: deque[TrackedResponse | Exception] = deque()
        self._fallback: tuple[int, Any] | None = None
        self.closed = False

    def reply(self, status: int = 200, body: Any = None) -> FakeTransport:
        self._queue.append(make_response(status, body))
        return self

    def fail(self, error: Exception) -> FakeTransport:
        self._queue.append(error)
        return self

    def always(self, status: int = 200, body: Any = None) -> FakeTransport:
        self._fallback = (status, body)
        return self

    def send(
        self,
        request: PendingRequest,
        url: str,
        headers: dict[str, str],
        timeout: float,
    ) -> requests.Response:
        self.sent.append(SentRequest(request, url, headers, timeout))
        if self._queue:
            item = self._queue.popleft()
        elif self._fallback is not None:
            item = make_response(*self._fallback)
        else:
            raise AssertionError(f"unexpected request: {request.method} {url}")
        if isinstance(item, Exception):
            raise item
        self.responses.append(item)
        return item

    def close(self) -> None:
        self.closed = True


def make_config(**overrides: Any) -> ReportConfig:
    """Factory for test ReportConfig."""
    values: dict[str, Any] = {
        "endpoint": "http://rp.test",
        "project": "testproj",
        "token": "secret-token",
        "bts_project": "BTS",
        "bts_url": "http://jira.test",
        "retries": 3,
    }
    values.update(overrides)
    return ReportConfig(**values)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def config_factory():
    return make_config


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def session(transport: FakeTransport):
    from rpclient.reporting.session import ReportSession

    return ReportSession(make_config(), transport=transport)
