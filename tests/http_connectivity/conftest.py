from __future__ import annotations

from collections.abc import Iterator

import pytest

from http_connectivity import ConnectionManager, set_connection_manager
from tests.http_connectivity.support.fakes import FakeClock, FakeLogger


@pytest.fixture
def fake_logger() -> FakeLogger:
    """Provide a fresh structured logger test double per test."""
    return FakeLogger()


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a deterministic clock per test."""
    return FakeClock()


@pytest.fixture
def manager(
    fake_logger: FakeLogger, fake_clock: FakeClock
) -> Iterator[ConnectionManager]:
    """Provide an isolated connection manager, shut down after the test."""
    instance = ConnectionManager(logger=fake_logger, now=fake_clock.now)
    yield instance
    instance.shutdown()


@pytest.fixture(autouse=True)
def _isolate_default_manager(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep the process-wide manager and environment from leaking across tests."""
    for name in (
        "HTTP_CONNECTIVITY_LOGGING_ENABLED",
        "HTTP_CONNECTIVITY_EXTRA_UNREACHABLE_MARKERS",
    ):
        monkeypatch.delenv(name, raising=False)
    previous = set_connection_manager(None)
    yield
    current = set_connection_manager(previous)
    if current is not None and current is not previous:
        current.shutdown()
