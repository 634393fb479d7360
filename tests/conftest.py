"""Shared test fixtures for linkerd-await tests."""

import io
from collections.abc import Callable

import pytest
from rich.console import Console
from structlog.typing import FilteringBoundLogger

from linkerd_await.utils import create_logger


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def console() -> Console:
    return Console(
        width=70,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
        file=io.StringIO(),
    )


@pytest.fixture
def console_output(console: Console) -> Callable[[], str]:
    """Return a reader for everything printed to the console fixture."""

    def _read() -> str:
        file = console.file
        assert isinstance(file, io.StringIO)
        return file.getvalue()

    return _read


@pytest.fixture
def log_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def logger(log_stream: io.StringIO) -> FilteringBoundLogger:
    return create_logger(level="debug", log_format="json", file=log_stream)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's linkerd-await settings out of the tests."""
    for name in (
        "LINKERD_AWAIT_DISABLED",
        "LINKERD_DISABLED",
        "LINKERD_AWAIT_VERBOSE",
        "LINKERD_AWAIT_DEBUG",
        "LINKERD_AWAIT_LOG_LEVEL",
        "LINKERD_AWAIT_LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
