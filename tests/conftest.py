"""Shared test fixtures."""

import pytest
import requests


@pytest.fixture(autouse=True)
def _prevent_real_http_calls(monkeypatch: pytest.MonkeyPatch) -> None:
    """Safety: block real HTTP calls in all tests."""

    def _blocked(*args: object, **kwargs: object) -> None:
        raise RuntimeError("real HTTP calls are blocked in tests")

    monkeypatch.setattr(requests.Session, "request", _blocked)
