"""Reporting models — config, wire payloads, responses, and request plumbing."""

from __future__ import annotations

import os
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rpclient.reporting.logger import VERBOSITY_LEVELS


class ItemStatus(StrEnum):
    """Final status of a launch or test item."""

    PASSED = "PASSED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"
    STOPPED = "STOPPED"
    INTERRUPTED = "INTERRUPTED"
    CANCELLED = "CANCELLED"


class ItemType(StrEnum):
    """Kinds of test items the service accepts."""

    SUITE = "SUITE"
    STORY = "STORY"
    TEST = "TEST"
    SCENARIO = "SCENARIO"
    STEP = "STEP"
    BEFORE_CLASS = "BEFORE_CLASS"
    BEFORE_GROUPS = "BEFORE_GROUPS"
    BEFORE_METHOD = "BEFORE_METHOD"
    BEFORE_SUITE = "BEFORE_SUITE"
    BEFORE_TEST = "BEFORE_TEST"
    AFTER_CLASS = "AFTER_CLASS"
    AFTER_GROUPS = "AFTER_GROUPS"
    AFTER_METHOD = "AFTER_METHOD"
    AFTER_SUITE = "AFTER_SUITE"
    AFTER_TEST = "AFTER_TEST"


class LogLevel(StrEnum):
    """Log levels the service accepts."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    FATAL = "FATAL"


class LaunchMode(StrEnum):
    """Launch visibility mode."""

    DEFAULT = "DEFAULT"
    DEBUG = "DEBUG"


class AttemptOutcome(StrEnum):
    """Classification of a single request attempt."""

    success = "success"
    transport_failure = "transport_failure"
    remote_rejected = "remote_rejected"


def format_timestamp(value: datetime | str | None = None) -> str:
    """Render a timestamp as RFC 3339 with second precision.

    Strings pass through untouched, None means now (local offset).
    """
    if isinstance(value, str) and value:
        return value
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.astimezone()
    else:
        moment = datetime.now().astimezone()
    return moment.isoformat(timespec="seconds")


class ReportConfig(BaseModel):
    """Configuration for a reporting session.

    ``verbosity`` left as None keeps the process logging setup untouched.
    """

    endpoint: str
    project: str
    token: str = ""
    bts_project: str = ""
    bts_url: str = ""
    retries: int = Field(default=3, ge=0)
    verbosity: str | None = None
    timeout: float = Field(default=120.0, gt=0)
    api_path: str = "/api/v1"
    user_agent: str = "rpclient"
    retry_backoff: float = Field(default=0.0, ge=0)
    retry_backoff_max: float = Field(default=10.0, ge=0)
    dump_transport: bool = False

    @field_validator("endpoint")
    @classmethod
    def _endpoint_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("endpoint must not be empty")
        return value

    @field_validator("verbosity")
    @classmethod
    def _known_verbosity(cls, value: str | None) -> str | None:
        if value is None:
            return None
        level = value.lower()
        if level not in VERBOSITY_LEVELS:
            raise ValueError(f"unknown verbosity: {value}")
        return level

    @classmethod
    def from_env(cls) -> ReportConfig:
        """Load config from environment variables.

        Raises:
            ValueError: If required environment variables are missing or empty.
        """
        endpoint = os.environ.get("RP_ENDPOINT", "")
        project = os.environ.get("RP_PROJECT", "")
        token = os.environ.get("RP_TOKEN", "")

        if not endpoint:
            raise ValueError("RP_ENDPOINT environment variable is required")
        if not project:
            raise ValueError("RP_PROJECT environment variable is required")
        if not token:
            raise ValueError("RP_TOKEN environment variable is required")

        optional: dict[str, Any] = {}
        for env_name, field_name in (
            ("RP_BTS_PROJECT", "bts_project"),
            ("RP_BTS_URL", "bts_url"),
            ("RP_RETRIES", "retries"),
            ("RP_VERBOSITY", "verbosity"),
            ("RP_TIMEOUT", "timeout"),
        ):
            value = os.environ.get(env_name)
            if value:
                optional[field_name] = value

        return cls(endpoint=endpoint, project=project, token=token, **optional)


class PendingRequest(BaseModel):
    """One request to perform: built per call, never retained."""

    method: str
    path: str
    body: bytes | None = None
    content_type: str = ""
    params: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


# --- Payloads ---


class StartLaunchPayload(BaseModel):
    name: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    start_time: str
    mode: str = LaunchMode.DEFAULT


class FinishLaunchPayload(BaseModel):
    status: str
    end_time: str


class StartItemPayload(BaseModel):
    name: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    start_time: str
    launch_id: str
    type: str
    parameters: list[dict[str, str]] = Field(default_factory=list)


class FinishItemPayload(BaseModel):
    status: str
    end_time: str
    issue: dict[str, Any] | None = None


class LogEntry(BaseModel):
    """A single log line, already targeted at an item."""

    item_id: str
    time: str = Field(default_factory=format_timestamp)
    message: str
    level: str = LogLevel.INFO


class IssueLink(BaseModel):
    """An external defect ticket to link to items."""

    bts_project: str = Field(alias="btsProject")
    bts_url: str = Field(alias="btsUrl")
    submit_date: int = Field(alias="submitDate")
    ticket_id: str = Field(alias="ticketId")
    url: str

    model_config = ConfigDict(populate_by_name=True)


class LinkIssuePayload(BaseModel):
    issues: list[IssueLink]
    test_item_ids: list[int] = Field(alias="testItemIds")

    model_config = ConfigDict(populate_by_name=True)


# --- Responses ---


class LaunchStarted(BaseModel):
    """Service acknowledgement of a started launch."""

    id: str = ""
    number: int = 0


class LaunchFinished(BaseModel):
    """Service acknowledgement of a finished launch."""

    id: str = ""
    link: str = ""
    number: int = 0


class ItemStarted(BaseModel):
    """Service acknowledgement of a started item."""

    id: str = ""
    unique_id: str = Field(default="", alias="uniqueId")

    model_config = ConfigDict(populate_by_name=True)


class OperationResult(BaseModel):
    """Generic acknowledgement carrying a message."""

    msg: str = ""


class LogCreated(BaseModel):
    id: str = ""


class ItemInfo(BaseModel):
    id: int = 0


class ItemPage(BaseModel):
    """A page of items returned by a filtered lookup."""

    content: list[ItemInfo] = Field(default_factory=list)
