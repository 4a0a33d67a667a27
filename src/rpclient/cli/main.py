"""rpclient CLI application."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated

import typer
from rich import print as rprint

import rpclient as rpclient_pkg


class OutputFormat(StrEnum):
    """Output format for CLI commands."""

    human = "human"
    json = "json"


app = typer.Typer(
    name="rpclient",
    help="Report test launches, items and logs to a test-reporting service.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    if value:
        rprint(f"rpclient {rpclient_pkg.__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """rpclient — test-reporting service client."""
    from dotenv import load_dotenv

    load_dotenv()


FormatOption = Annotated[
    OutputFormat,
    typer.Option("--format", "-f", help="Output format"),
]


@app.command("start-launch")
def start_launch(
    name: Annotated[str, typer.Argument(help="Launch name")],
    description: Annotated[str, typer.Option("--description", "-d", help="Launch description")] = "",
    tag: Annotated[list[str] | None, typer.Option("--tag", "-t", help="Launch tag")] = None,
    mode: Annotated[str, typer.Option("--mode", help="DEFAULT or DEBUG")] = "DEFAULT",
    format: FormatOption = OutputFormat.human,
) -> None:
    """Start a launch and print its id."""
    from rpclient.reporting.cli import start_launch_command

    exit_code = start_launch_command(
        name, description=description, tags=tag, mode=mode, format=format.value
    )
    raise typer.Exit(exit_code)


@app.command("finish-launch")
def finish_launch(
    launch_id: Annotated[str, typer.Argument(help="Launch id")],
    status: Annotated[str, typer.Option("--status", "-s", help="Final status")] = "PASSED",
    format: FormatOption = OutputFormat.human,
) -> None:
    """Finish a launch."""
    from rpclient.reporting.cli import finish_launch_command

    raise typer.Exit(finish_launch_command(launch_id, status=status, format=format.value))


@app.command("start-item")
def start_item(
    name: Annotated[str, typer.Argument(help="Item name")],
    launch_id: Annotated[str, typer.Option("--launch-id", "-l", help="Launch id")],
    item_type: Annotated[str, typer.Option("--type", help="Item type")] = "STEP",
    parent_id: Annotated[
        str | None, typer.Option("--parent-id", help="Parent item id (default: launch root)")
    ] = None,
    description: Annotated[str, typer.Option("--description", "-d", help="Item description")] = "",
    tag: Annotated[list[str] | None, typer.Option("--tag", "-t", help="Item tag")] = None,
    format: FormatOption = OutputFormat.human,
) -> None:
    """Start a test item and print its id."""
    from rpclient.reporting.cli import start_item_command

    exit_code = start_item_command(
        launch_id,
        name,
        item_type=item_type,
        parent_id=parent_id,
        description=description,
        tags=tag,
        format=format.value,
    )
    raise typer.Exit(exit_code)


@app.command("finish-item")
def finish_item(
    item_id: Annotated[str, typer.Argument(help="Item id")],
    status: Annotated[str, typer.Option("--status", "-s", help="Final status")] = "PASSED",
    format: FormatOption = OutputFormat.human,
) -> None:
    """Finish a test item."""
    from rpclient.reporting.cli import finish_item_command

    raise typer.Exit(finish_item_command(item_id, status=status, format=format.value))


@app.command("log")
def log(
    item_id: Annotated[str, typer.Argument(help="Item id")],
    message: Annotated[str, typer.Argument(help="Log message")],
    level: Annotated[str, typer.Option("--level", help="Log level")] = "INFO",
    format: FormatOption = OutputFormat.human,
) -> None:
    """Attach a log line to a test item."""
    from rpclient.reporting.cli import log_command

    raise typer.Exit(log_command(item_id, message, level=level, format=format.value))


@app.command("link-issue")
def link_issue(
    item_id: Annotated[int, typer.Argument(help="Numeric item id")],
    ticket_id: Annotated[str, typer.Argument(help="Ticket id in the defect tracker")],
    link: Annotated[str, typer.Argument(help="Ticket URL")],
    format: FormatOption = OutputFormat.human,
) -> None:
    """Link a defect ticket to a test item."""
    from rpclient.reporting.cli import link_issue_command

    raise typer.Exit(link_issue_command(item_id, ticket_id, link, format=format.value))


@app.command("get-item")
def get_item(
    uuid: Annotated[str, typer.Argument(help="Item uuid")],
    format: FormatOption = OutputFormat.human,
) -> None:
    """Print the numeric id of an item."""
    from rpclient.reporting.cli import get_item_command

    raise typer.Exit(get_item_command(uuid, format=format.value))
