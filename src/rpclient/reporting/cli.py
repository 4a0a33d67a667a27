"""Reporting CLI commands — one-shot calls with explicit ids, for shell scripts."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from rich import print as rprint

from rpclient.reporting.base import ReportingError
from rpclient.reporting.models import ReportConfig
from rpclient.reporting.session import ReportSession


def _load_session() -> ReportSession | None:
    """Build a session from the environment, printing setup help on failure."""
    try:
        config = ReportConfig.from_env()
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        rprint("\n[yellow]Setup instructions:[/yellow]")
        rprint("  export RP_ENDPOINT=<service-url>")
        rprint("  export RP_PROJECT=<project-name>")
        rprint("  export RP_TOKEN=<api-token>")
        rprint("  export RP_RETRIES=<n>  # optional, defaults to 3")
        return None
    return ReportSession(config)


def _run(
    operation: Callable[[ReportSession], Any],
    label: str,
    format: str = "human",
) -> int:
    """Run one session operation and print its result.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    session = _load_session()
    if session is None:
        return 1

    try:
        with session:
            result = operation(session)
    except ReportingError as e:
        if format == "json":
            print(json.dumps({"error": type(e).__name__, "message": e.message}))
        else:
            rprint(f"[red]Error:[/red] {e.message}")
        return 1

    if format == "json":
        print(json.dumps({label: result}))
    else:
        # Bare value on stdout so shell scripts can capture it.
        print(result)
    return 0


def start_launch_command(
    name: str,
    description: str = "",
    tags: list[str] | None = None,
    mode: str = "DEFAULT",
    format: str = "human",
) -> int:
    """Start a launch and print its id."""
    return _run(
        lambda s: s.start_launch(name, description=description, tags=tags, mode=mode).id,
        "launch_id",
        format,
    )


def finish_launch_command(launch_id: str, status: str = "PASSED", format: str = "human") -> int:
    """Finish a launch started by an earlier call."""

    def operation(session: ReportSession) -> str:
        session.resume_launch(launch_id)
        return session.finish_launch(status).link or launch_id

    return _run(operation, "launch", format)


def start_item_command(
    launch_id: str,
    name: str,
    item_type: str = "STEP",
    parent_id: str | None = None,
    description: str = "",
    tags: list[str] | None = None,
    format: str = "human",
) -> int:
    """Start an item in a launch, optionally under a parent, and print its id."""

    def operation(session: ReportSession) -> str:
        session.resume_launch(launch_id)
        return session.start_item(
            name, item_type, description=description, tags=tags, parent_id=parent_id
        ).id

    return _run(operation, "item_id", format)


def finish_item_command(item_id: str, status: str = "PASSED", format: str = "human") -> int:
    """Finish an item by id and print the service message."""
    return _run(lambda s: s.finish_item(status, item_id=item_id), "message", format)


def log_command(item_id: str, message: str, level: str = "INFO", format: str = "human") -> int:
    """Attach a log line to an item and print the log id."""
    return _run(lambda s: s.log(message, level, item_id=item_id), "log_id", format)


def link_issue_command(item_id: int, ticket_id: str, link: str, format: str = "human") -> int:
    """Link a defect ticket to an item and print the service message."""
    return _run(lambda s: s.link_issue(item_id, ticket_id, link), "message", format)


def get_item_command(uuid: str, format: str = "human") -> int:
    """Print the numeric id of an item looked up by uuid."""
    return _run(lambda s: s.get_item(uuid).id, "item_id", format)
