"""Tests for RequestsTransport — the requests-backed default transport."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest
import requests

from rpclient.reporting.base import TransportError
from rpclient.reporting.models import PendingRequest
from rpclient.reporting.transport import RequestsTransport

HEADERS = {"Authorization": "bearer secret-token", "Content-Type": "application/json"}


def _request() -> PendingRequest:
    return PendingRequest(
        method="POST",
        path="/api/v1/p/launch",
        body=b'{"name": "run"}',
        content_type="application/json",
    )


def test_send_delegates_to_session() -> None:
    """Send forwards method, url, body, headers and timeout."""
    mock_session = MagicMock(spec=requests.Session)
    transport = RequestsTransport(session=mock_session)

    result = transport.send(_request(), "http://rp.test/api/v1/p/launch", HEADERS, 12.0)

    assert result is mock_session.request.return_value
    mock_session.request.assert_called_once_with(
        "POST",
        "http://rp.test/api/v1/p/launch",
        params=None,
        data=b'{"name": "run"}',
        headers=HEADERS,
        timeout=12.0,
    )


def test_send_passes_query_params() -> None:
    """Query params reach the session."""
    mock_session = MagicMock(spec=requests.Session)
    transport = RequestsTransport(session=mock_session)
    request = PendingRequest(method="GET", path="/item", params={"filter.eq.uniqueId": "u"})

    transport.send(request, "http://rp.test/item", {}, 1.0)

    assert mock_session.request.call_args.kwargs["params"] == {"filter.eq.uniqueId": "u"}
    assert mock_session.request.call_args.kwargs["data"] is None


@pytest.mark.parametrize(
    "raised",
    [requests.ConnectionError("refused"), requests.Timeout("slow"), requests.RequestException()],
)
def test_send_wraps_requests_errors(raised: Exception) -> None:
    """requests errors are wrapped with their cause."""
    mock_session = MagicMock(spec=requests.Session)
    mock_session.request.side_effect = raised
    transport = RequestsTransport(session=mock_session)

    with pytest.raises(TransportError) as exc_info:
        transport.send(_request(), "http://rp.test/x", HEADERS, 1.0)
    assert exc_info.value.__cause__ is raised


def test_timeout_message_mentions_timeout() -> None:
    """Timeouts name the configured timeout."""
    mock_session = MagicMock(spec=requests.Session)
    mock_session.request.side_effect = requests.Timeout("slow")
    transport = RequestsTransport(session=mock_session)

    with pytest.raises(TransportError, match="timed out after 3.0s"):
        transport.send(_request(), "http://rp.test/x", HEADERS, 3.0)


def test_dump_logs_exchange_without_token(caplog: pytest.LogCaptureFixture) -> None:
    """Dumped traffic never shows the token."""
    mock_session = MagicMock(spec=requests.Session)
    response = mock_session.request.return_value
    response.status_code = 201
    response.reason = "Created"
    response.text = '{"id": "L"}'
    transport = RequestsTransport(session=mock_session, dump=True)

    with caplog.at_level(logging.DEBUG, logger="rpclient"):
        transport.send(_request(), "http://rp.test/x", HEADERS, 1.0)

    assert "POST http://rp.test/x" in caplog.text
    assert '{"name": "run"}' in caplog.text
    assert '{"id": "L"}' in caplog.text
    assert "secret-token" not in caplog.text


def test_close_closes_session() -> None:
    """Close closes the underlying session."""
    mock_session = MagicMock(spec=requests.Session)
    RequestsTransport(session=mock_session).close()
    mock_session.close.assert_called_once()


def test_default_session_is_created() -> None:
    """A session is created when none is given."""
    transport = RequestsTransport()
    assert repr(transport) == "RequestsTransport(dump=False)"
    transport.close()
