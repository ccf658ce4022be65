"""Shared fixtures for the flyproxy test suite."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from flyproxy.engine.configuration import Engine
from flyproxy.testing import ALL_ENGINES, engine_scope


@pytest.fixture(autouse=True)
def _no_engine_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FLYPROXY_ENGINE", raising=False)


@pytest.fixture(params=ALL_ENGINES, ids=lambda engine: engine.value)
def engine(request: pytest.FixtureRequest) -> Iterator[Engine]:
    """Run the test once per engine, restoring the selection afterwards."""
    with engine_scope(request.param) as selected:
        yield selected
