"""RequestExecutor — bounded retries and response classification.

Each attempt ends in exactly one AttemptOutcome:

- transport_failure: no response obtained; logged, next attempt.
- remote_rejected: status >= 400; body drained and logged, next attempt.
  Client and server errors are retried alike.
- success: body decoded into the caller's model and returned at once. A body
  that fails to decode raises DecodeError without further attempts.

When no attempt succeeds RetriesExhausted is raised with the last failure.
"""

from __future__ import annotations

import logging
import random
import time
from typing import TypeVar
from urllib.parse import urljoin

import requests
from pydantic import BaseModel, ValidationError

from rpclient.reporting.base import DecodeError, RemoteRejected, RetriesExhausted, TransportError
from rpclient.reporting.models import AttemptOutcome, PendingRequest
from rpclient.reporting.transport import Transport

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class RequestExecutor:
    """Performs PendingRequests through a Transport with bounded retries."""

    def __init__(
        self,
        transport: Transport,
        endpoint: str,
        headers: dict[str, str] | None = None,
        timeout: float = 120.0,
        max_retries: int = 3,
        backoff: float = 0.0,
        backoff_max: float = 10.0,
    ) -> None:
        """Initialize RequestExecutor.

        Args:
            transport: Transport performing single exchanges.
            endpoint: Base address every request path is resolved against.
            headers: Headers sent with every request (auth, user agent).
            timeout: Per-attempt transport timeout in seconds.
            max_retries: Retries after the initial attempt.
            backoff: Base delay in seconds for exponential backoff (0 disables).
            backoff_max: Upper bound for a single backoff delay.
        """
        self._transport = transport
        self._endpoint = endpoint
        self._headers = dict(headers or {})
        self._timeout = timeout
        self.max_retries = max_retries
        self._backoff = backoff
        self._backoff_max = backoff_max

    def url_for(self, request: PendingRequest) -> str:
        return urljoin(self._endpoint, request.path)

    def _headers_for(self, request: PendingRequest) -> dict[str, str]:
        headers = dict(self._headers)
        if request.content_type:
            headers["Content-Type"] = request.content_type
        return headers

    def _delay(self, attempt: int) -> float:
        """Full-jitter exponential delay before the next attempt."""
        if self._backoff <= 0:
            return 0.0
        ceiling = min(self._backoff_max, self._backoff * (2**attempt))
        return random.uniform(0, ceiling)

    def execute(
        self,
        request: PendingRequest,
        model: type[ModelT],
        max_retries: int | None = None,
    ) -> ModelT:
        """Perform a request, retrying failures, and decode the success body.

        Args:
            request: The request to perform.
            model: Pydantic model the success body is decoded into.
            max_retries: Override of the configured retry bound.

        Returns:
            The decoded response model.

        Raises:
            DecodeError: If a successful response body does not decode.
            RetriesExhausted: If every attempt failed.
        """
        retries = self.max_retries if max_retries is None else max_retries
        url = self.url_for(request)
        headers = self._headers_for(request)
        outcomes: list[AttemptOutcome] = []
        last_error: TransportError | RemoteRejected | None = None

        for attempt in range(retries + 1):
            if attempt and (delay := self._delay(attempt - 1)):
                time.sleep(delay)

            try:
                response = self._transport.send(request, url, headers, self._timeout)
            except TransportError as e:
                last_error = e
            except requests.RequestException as e:
                last_error = TransportError(f"request failed: {e}")
            else:
                try:
                    if response.status_code >= 400:
                        last_error = RemoteRejected(response.status_code, response.text)
                    else:
                        decoded = self._decode(response, model)
                        outcomes.append(AttemptOutcome.success)
                        return decoded
                finally:
                    response.close()

            if isinstance(last_error, RemoteRejected):
                outcomes.append(AttemptOutcome.remote_rejected)
                logger.error(
                    "request failed: %s %s status: %s, body: %s",
                    request.method,
                    url,
                    last_error.status,
                    last_error.body,
                )
            else:
                outcomes.append(AttemptOutcome.transport_failure)
                logger.error("request failed: %s %s: %s", request.method, url, last_error)

        raise RetriesExhausted(last_error, outcomes)

    @staticmethod
    def _decode(response: requests.Response, model: type[ModelT]) -> ModelT:
        body = response.content or b""
        try:
            if not body.strip():
                return model.model_validate({})
            return model.model_validate_json(body)
        except ValidationError as e:
            raise DecodeError(
                f"failed to decode {model.__name__} from status {response.status_code}: {e}"
            ) from e
