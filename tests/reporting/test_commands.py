"""Tests for reporting CLI command functions."""

from __future__ import annotations

import json
import os
from unittest.mock import patch

import pytest

from rpclient.reporting.cli import (
    finish_item_command,
    finish_launch_command,
    get_item_command,
    link_issue_command,
    log_command,
    start_item_command,
    start_launch_command,
)
from rpclient.reporting.session import ReportSession

ENV = {"RP_ENDPOINT": "http://rp.test", "RP_PROJECT": "testproj", "RP_TOKEN": "tok"}


@pytest.fixture
def wired(transport):
    """Route every command's session through the fake transport."""
    with (
        patch.dict(os.environ, ENV, clear=True),
        patch(
            "rpclient.reporting.cli.ReportSession",
            side_effect=lambda config: ReportSession(config, transport=transport),
        ),
    ):
        yield transport


def test_missing_env_prints_setup_help(capsys: pytest.CaptureFixture[str]) -> None:
    """Missing env prints setup help and exits 1."""
    with patch.dict(os.environ, {}, clear=True):
        assert start_launch_command("run") == 1
    out = capsys.readouterr().out
    assert "RP_ENDPOINT" in out
    assert "Setup instructions" in out


def test_start_launch_prints_id(wired, capsys: pytest.CaptureFixture[str]) -> None:
    """Human output is the bare launch id."""
    wired.reply(201, {"id": "launch-1"})
    assert start_launch_command("run", tags=["ci"]) == 0
    assert capsys.readouterr().out.strip() == "launch-1"
    assert wired.sent[0].json()["tags"] == ["ci"]
    assert wired.closed


def test_start_launch_json_format(wired, capsys: pytest.CaptureFixture[str]) -> None:
    """JSON output wraps the launch id."""
    wired.reply(201, {"id": "launch-1"})
    assert start_launch_command("run", format="json") == 0
    assert json.loads(capsys.readouterr().out) == {"launch_id": "launch-1"}


def test_finish_launch_uses_given_id(wired) -> None:
    """Finish launch targets the id given."""
    wired.reply(200, {"id": "launch-1", "link": "http://rp.test/ui/1"})
    assert finish_launch_command("launch-1", status="FAILED") == 0
    assert wired.sent[0].url == "http://rp.test/api/v1/testproj/launch/launch-1/finish"
    assert wired.sent[0].json()["status"] == "FAILED"


def test_start_item_under_parent(wired, capsys: pytest.CaptureFixture[str]) -> None:
    """Start item nests under the given parent."""
    wired.reply(201, {"id": "item-9"})
    assert start_item_command("launch-1", "case", parent_id="suite-1") == 0
    assert wired.sent[0].url == "http://rp.test/api/v1/testproj/item/suite-1"
    assert wired.sent[0].json()["launch_id"] == "launch-1"
    assert capsys.readouterr().out.strip() == "item-9"


def test_start_item_at_root(wired) -> None:
    """Start item without parent goes to the root."""
    wired.reply(201, {"id": "item-9"})
    assert start_item_command("launch-1", "suite", item_type="SUITE") == 0
    assert wired.sent[0].url == "http://rp.test/api/v1/testproj/item"


def test_finish_item_and_log(wired, capsys: pytest.CaptureFixture[str]) -> None:
    """Log and finish item print their results."""
    wired.reply(201, {"id": "log-1"}).reply(200, {"msg": "done"})
    assert log_command("item-9", "hello", level="DEBUG") == 0
    assert finish_item_command("item-9", status="SKIPPED") == 0
    assert wired.sent[0].json()["item_id"] == "item-9"
    assert wired.sent[1].json()["issue"] == {"issue_type": "NOT_ISSUE"}
    assert capsys.readouterr().out.split() == ["log-1", "done"]


def test_link_issue_and_get_item(wired, capsys: pytest.CaptureFixture[str]) -> None:
    """Link issue and get item print their results."""
    wired.reply(200, {"msg": "linked"}).reply(200, {"id": 368})
    assert link_issue_command(368, "BUG-1", "http://jira/BUG-1") == 0
    assert get_item_command("uuid-1") == 0
    assert capsys.readouterr().out.split() == ["linked", "368"]


def test_errors_exit_nonzero(wired, capsys: pytest.CaptureFixture[str]) -> None:
    """Failures exit 1 and report the error kind."""
    wired.always(500, "down")
    assert log_command("item-9", "hello", format="json") == 1
    error = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert error["error"] == "RetriesExhausted"
