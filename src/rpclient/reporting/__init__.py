"""rpclient reporting — launches, items and logs with implicit nesting."""

from rpclient.reporting.base import (
    DecodeError,
    EmptyStackError,
    LogNotAttachableError,
    NoLaunchStartedError,
    RemoteRejected,
    ReportingError,
    RetriesExhausted,
    TransportError,
)
from rpclient.reporting.executor import RequestExecutor
from rpclient.reporting.logger import configure_logging
from rpclient.reporting.models import (
    AttemptOutcome,
    ItemInfo,
    ItemStarted,
    ItemStatus,
    ItemType,
    LaunchFinished,
    LaunchMode,
    LaunchStarted,
    LogEntry,
    LogLevel,
    PendingRequest,
    ReportConfig,
)
from rpclient.reporting.session import ReportSession
from rpclient.reporting.tracker import ItemTracker
from rpclient.reporting.transport import RequestsTransport, Transport

__all__ = [
    "AttemptOutcome",
    "DecodeError",
    "EmptyStackError",
    "ItemInfo",
    "ItemStarted",
    "ItemStatus",
    "ItemTracker",
    "ItemType",
    "LaunchFinished",
    "LaunchMode",
    "LaunchStarted",
    "LogEntry",
    "LogLevel",
    "LogNotAttachableError",
    "NoLaunchStartedError",
    "PendingRequest",
    "RemoteRejected",
    "ReportConfig",
    "ReportSession",
    "ReportingError",
    "RequestExecutor",
    "RequestsTransport",
    "RetriesExhausted",
    "Transport",
    "TransportError",
    "configure_logging",
]
