"""Transports — perform a single HTTP exchange for the request executor.

The executor only needs one request/response round trip per attempt; retrying,
classification and decoding live one layer up. Custom transports subclass
``Transport`` and are handed to ``ReportSession``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import requests

from rpclient.reporting.base import TransportError
from rpclient.reporting.models import PendingRequest

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Abstract base class for HTTP transports."""

    @abstractmethod
    def send(
        self,
        request: PendingRequest,
        url: str,
        headers: dict[str, str],
        timeout: float,
    ) -> requests.Response:
        """Perform one exchange and return the raw response.

        Raises:
            TransportError: If no response could be obtained.
        """
        ...

    def close(self) -> None:
        """Release pooled connections. No-op by default."""


class RequestsTransport(Transport):
    """Transport backed by a ``requests.Session``."""

    def __init__(self, session: requests.Session | None = None, dump: bool = False) -> None:
        """Initialize the transport.

        Args:
            session: Optional preconfigured requests session.
            dump: If True, debug-log every request and response.
        """
        self._session = session or requests.Session()
        self._dump = dump

    def send(
        self,
        request: PendingRequest,
        url: str,
        headers: dict[str, str],
        timeout: float,
    ) -> requests.Response:
        if self._dump:
            self._dump_request(request, url, headers)
        try:
            response = self._session.request(
                request.method,
                url,
                params=request.params or None,
                data=request.body,
                headers=headers,
                timeout=timeout,
            )
        except requests.Timeout as e:
            raise TransportError(f"request timed out after {timeout}s: {e}") from e
        except requests.RequestException as e:
            raise TransportError(f"request failed: {e}") from e
        if self._dump:
            logger.debug("<- %s %s\n%s", response.status_code, response.reason, response.text)
        return response

    def close(self) -> None:
        self._session.close()

    @staticmethod
    def _dump_request(request: PendingRequest, url: str, headers: dict[str, str]) -> None:
        shown = {k: ("<redacted>" if k.lower() == "authorization" else v) for k, v in headers.items()}
        body = request.body.decode("utf-8", errors="replace") if request.body else ""
        logger.debug("-> %s %s %s\n%s", request.method, url, shown, body)

    def __repr__(self) -> str:
        return f"RequestsTransport(dump={self._dump})"
