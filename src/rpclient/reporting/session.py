"""ReportSession — launches, items and logs over the retrying executor.

Typical run, nesting resolved by the session's item tracker::

    with ReportSession(ReportConfig.from_env()) as rp:
        rp.start_launch("nightly")
        rp.start_item("api", ItemType.SUITE)
        rp.start_item("test_login", ItemType.STEP)
        rp.log("logged in", LogLevel.INFO)
        rp.finish_item(ItemStatus.PASSED)
        rp.finish_item(ItemStatus.PASSED)
        rp.finish_launch(ItemStatus.PASSED)

Operations taking ``parent_id``/``item_id`` use that id when given and the
tracker top otherwise. A session is meant for one thread; share it only behind
an external lock.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel
from urllib3 import encode_multipart_formdata

from rpclient.reporting.base import (
    DecodeError,
    EmptyStackError,
    LogNotAttachableError,
    NoLaunchStartedError,
)
from rpclient.reporting.executor import RequestExecutor
from rpclient.reporting.logger import configure_logging
from rpclient.reporting.models import (
    FinishItemPayload,
    FinishLaunchPayload,
    IssueLink,
    ItemInfo,
    ItemPage,
    ItemStarted,
    ItemStatus,
    LaunchFinished,
    LaunchMode,
    LaunchStarted,
    LinkIssuePayload,
    LogCreated,
    LogEntry,
    LogLevel,
    OperationResult,
    PendingRequest,
    ReportConfig,
    StartItemPayload,
    StartLaunchPayload,
    format_timestamp,
)
from rpclient.reporting.tracker import ItemTracker
from rpclient.reporting.transport import RequestsTransport, Transport

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
BATCH_PART_NAME = "json_request_part"
SKIPPED_ISSUE: dict[str, Any] = {"issue_type": "NOT_ISSUE"}


class ReportSession:
    """Reports one launch at a time to the test-reporting service."""

    def __init__(self, config: ReportConfig, transport: Transport | None = None) -> None:
        """Initialize ReportSession.

        Args:
            config: Service address, credentials and retry settings.
            transport: Optional transport; defaults to a requests-backed one.
        """
        if config.verbosity is not None:
            configure_logging(config.verbosity)
        self._config = config
        self._transport = transport or RequestsTransport(dump=config.dump_transport)
        self._executor = RequestExecutor(
            self._transport,
            endpoint=config.endpoint,
            headers={
                "Accept": JSON_CONTENT_TYPE,
                "User-Agent": config.user_agent,
                "Authorization": f"bearer {config.token}",
            },
            timeout=config.timeout,
            max_retries=config.retries,
            backoff=config.retry_backoff,
            backoff_max=config.retry_backoff_max,
        )
        self.tracker = ItemTracker()
        self.launch_id = ""

    def __enter__(self) -> ReportSession:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def config(self) -> ReportConfig:
        return self._config

    @property
    def executor(self) -> RequestExecutor:
        return self._executor

    def close(self) -> None:
        """Release the transport."""
        self._transport.close()

    def _path(self, *parts: str) -> str:
        escaped = [quote(part, safe="") for part in (self._config.project, *parts)]
        return "/".join([self._config.api_path.rstrip("/"), *escaped])

    @staticmethod
    def _json_request(method: str, path: str, payload: BaseModel) -> PendingRequest:
        return PendingRequest(
            method=method,
            path=path,
            body=payload.model_dump_json(by_alias=True).encode("utf-8"),
            content_type=JSON_CONTENT_TYPE,
        )

    # --- Launches ---

    def start_launch(
        self,
        name: str,
        description: str = "",
        start_time: datetime | str | None = None,
        tags: list[str] | None = None,
        mode: LaunchMode | str = LaunchMode.DEFAULT,
    ) -> LaunchStarted:
        """Start a launch and open its root slot.

        Raises:
            DecodeError: If the acknowledgement does not decode or has no id.
            RetriesExhausted: If the service could not be reached.
        """
        payload = StartLaunchPayload(
            name=name,
            description=description,
            tags=tags or [],
            start_time=format_timestamp(start_time),
            mode=mode,
        )
        started = self._executor.execute(
            self._json_request("POST", self._path("launch"), payload), LaunchStarted
        )
        if not started.id:
            raise DecodeError("launch acknowledgement carries no launch id")
        if not self.tracker.is_empty:
            logger.warning(
                "discarding %d slots left open by launch %s", len(self.tracker), self.launch_id
            )
            self.tracker.clear()
        self.launch_id = started.id
        self.tracker.push(None)
        logger.debug("created new test launch: %s", started.id)
        return started

    def resume_launch(self, launch_id: str) -> None:
        """Adopt a launch started elsewhere, with no items open."""
        self.tracker.clear()
        self.launch_id = launch_id
        self.tracker.push(None)
        logger.debug("resumed test launch: %s", launch_id)

    def finish_launch(
        self,
        status: ItemStatus | str,
        end_time: datetime | str | None = None,
    ) -> LaunchFinished:
        """Finish the active launch and close its root slot.

        Raises:
            NoLaunchStartedError: If no launch was started (nothing is sent).
            DecodeError: If the acknowledgement does not decode.
            RetriesExhausted: If the service could not be reached.
        """
        if not self.launch_id:
            raise NoLaunchStartedError()
        payload = FinishLaunchPayload(status=status, end_time=format_timestamp(end_time))
        finished = self._executor.execute(
            self._json_request("PUT", self._path("launch", self.launch_id, "finish"), payload),
            LaunchFinished,
        )
        # Slot may already be gone after mismatched finishes.
        if not self.tracker.is_empty:
            self.tracker.pop()
        logger.debug("launch finished: %s", self.launch_id)
        return finished

    # --- Items ---

    def start_item(
        self,
        name: str,
        item_type: str,
        start_time: datetime | str | None = None,
        description: str = "",
        tags: list[str] | None = None,
        parameters: list[dict[str, str]] | None = None,
        parent_id: str | None = None,
    ) -> ItemStarted:
        """Start an item under ``parent_id``, or under the innermost open item.

        With no explicit parent and no open item the item is created at the
        launch root. The new item becomes the innermost open item.

        Raises:
            DecodeError: If the acknowledgement does not decode or has no id.
            RetriesExhausted: If the service could not be reached.
        """
        if parent_id is None and not self.tracker.is_empty:
            parent_id = self.tracker.peek()
        payload = StartItemPayload(
            name=name,
            description=description,
            tags=tags or [],
            start_time=format_timestamp(start_time),
            launch_id=self.launch_id,
            type=item_type,
            parameters=parameters or [],
        )
        logger.debug("starting test item of type: %s", item_type)
        path = self._path("item", parent_id) if parent_id else self._path("item")
        started = self._executor.execute(self._json_request("POST", path, payload), ItemStarted)
        if not started.id:
            raise DecodeError("item acknowledgement carries no item id")
        self.tracker.push(started.id)
        logger.debug("started test item: %s", started.id)
        return started

    def finish_item(
        self,
        status: ItemStatus | str,
        end_time: datetime | str | None = None,
        issue: dict[str, Any] | None = None,
        item_id: str | None = None,
    ) -> str:
        """Finish ``item_id``, or the innermost open item.

        The implicit target is taken off the tracker before the request is
        sent, so it stays consumed even if the request then fails. Finish by
        explicit id to retry.

        Returns:
            The service message.

        Raises:
            EmptyStackError: If no explicit id is given and no item is open.
            DecodeError: If the acknowledgement does not decode.
            RetriesExhausted: If the service could not be reached.
        """
        if issue is None and status == ItemStatus.SKIPPED:
            issue = dict(SKIPPED_ISSUE)
        if item_id is None:
            if self.tracker.is_empty or self.tracker.peek() is None:
                raise EmptyStackError("no open test item to finish")
            item_id = self.tracker.pop()
        payload = FinishItemPayload(status=status, end_time=format_timestamp(end_time), issue=issue)
        logger.debug("finishing test item: %s, status: %s, issue: %s", item_id, status, issue)
        result = self._executor.execute(
            self._json_request("PUT", self._path("item", item_id), payload), OperationResult
        )
        logger.debug("finished test item: %s", result.msg)
        return result.msg

    def get_item(self, uuid: str) -> ItemInfo:
        """Look up an item by its service uuid."""
        item = self._executor.execute(
            PendingRequest(method="GET", path=self._path("item", uuid)), ItemInfo
        )
        logger.debug("get item id by uuid %s: %s", uuid, item.id)
        return item

    def find_item_id(self, unique_id: str, launch_id: str | None = None) -> int | None:
        """Find the numeric id of an item by its unique id within a launch.

        Returns:
            The first matching item id, or None if nothing matched.
        """
        request = PendingRequest(
            method="GET",
            path=self._path("item"),
            params={
                "filter.eq.launch": launch_id or self.launch_id,
                "filter.eq.uniqueId": unique_id,
            },
        )
        page = self._executor.execute(request, ItemPage)
        if not page.content:
            return None
        return page.content[0].id

    def link_issue(self, item_id: int, ticket_id: str, link: str) -> str:
        """Link an external defect ticket to an item.

        Returns:
            The service message.
        """
        payload = LinkIssuePayload(
            issues=[
                IssueLink(
                    bts_project=self._config.bts_project,
                    bts_url=self._config.bts_url,
                    # Tickets are linked after they were parsed out of logs, so
                    # the real submit date is unknown here.
                    submit_date=int(time.time()),
                    ticket_id=ticket_id,
                    url=link,
                )
            ],
            test_item_ids=[item_id],
        )
        logger.debug("linking item %s with ticket %s: %s", item_id, ticket_id, link)
        result = self._executor.execute(
            self._json_request("PUT", self._path("item", "issue", "link"), payload),
            OperationResult,
        )
        logger.debug("linked item issues: %s", result.msg)
        return result.msg

    # --- Logs ---

    def log(
        self,
        message: str,
        level: LogLevel | str = LogLevel.INFO,
        item_id: str | None = None,
    ) -> str:
        """Attach a log line to ``item_id``, or the innermost open item.

        Returns:
            The id of the created log entry.

        Raises:
            LogNotAttachableError: If no explicit id is given and no item is open.
            DecodeError: If the acknowledgement does not decode.
            RetriesExhausted: If the service could not be reached.
        """
        if item_id is None:
            if self.tracker.is_empty or self.tracker.peek() is None:
                raise LogNotAttachableError()
            item_id = self.tracker.peek()
        entry = LogEntry(item_id=item_id, message=message, level=level)
        logger.debug("attaching log to test item: %s, lvl: %s", item_id, level)
        created = self._executor.execute(
            self._json_request("POST", self._path("log"), entry), LogCreated
        )
        logger.debug("log attached id: %s", created.id)
        return created.id

    def log_batch(self, entries: list[LogEntry]) -> str:
        """Send several pre-targeted log entries in one multipart request.

        Returns:
            The id reported for the batch.
        """
        batch = json.dumps([e.model_dump(mode="json") for e in entries])
        body, content_type = encode_multipart_formdata(
            {BATCH_PART_NAME: (None, batch, JSON_CONTENT_TYPE)}
        )
        request = PendingRequest(
            method="POST", path=self._path("log"), body=body, content_type=content_type
        )
        created = self._executor.execute(request, LogCreated)
        logger.debug("log batch of %d attached id: %s", len(entries), created.id)
        return created.id

    def __repr__(self) -> str:
        return (
            f"ReportSession(endpoint={self._config.endpoint!r}, "
            f"launch_id={self.launch_id!r}, depth={self.tracker.depth})"
        )
