import os
import subprocess
import sys
import threading
from collections.abc import Iterator
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


@dataclass(slots=True)
class AdminServerState:
    """Behaviour and request log of the stand-in admin server."""

    ready_status: int = 200
    ready_requests: int = 0
    shutdown_requests: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock)


@dataclass(frozen=True, slots=True)
class AdminServer:
    port: int
    state: AdminServerState


def _handler_for(state: AdminServerState) -> type[BaseHTTPRequestHandler]:
    class Handler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:  # noqa: N802
            if self.path != "/ready":
                self._reply(404)
                return
            with state.lock:
                state.ready_requests += 1
            self._reply(state.ready_status)

        def do_POST(self) -> None:  # noqa: N802
            if self.path != "/shutdown":
                self._reply(404)
                return
            with state.lock:
                state.shutdown_requests += 1
            self._reply(200)

        def _reply(self, status: int) -> None:
            self.send_response(status)
            self.send_header("Content-Length", "0")
            self.end_headers()

        def log_message(self, format: str, *args: object) -> None:  # noqa: A002
            pass

    return Handler


@pytest.fixture
def admin_server() -> Iterator[AdminServer]:
    """Run a local HTTP server answering /ready and /shutdown."""
    state = AdminServerState()
    server = ThreadingHTTPServer(("127.0.0.1", 0), _handler_for(state))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield AdminServer(port=server.server_address[1], state=state)
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


def run_linkerd_await(
    *args: str,
    env: dict[str, str] | None = None,
    timeout: float = 30,
) -> subprocess.CompletedProcess[str]:
    """Run the linkerd-await entry point in a subprocess."""
    base_env = {
        name: value
        for name, value in os.environ.items()
        if not name.startswith("LINKERD_")
    }
    base_env.update(env or {})
    return subprocess.run(
        [sys.executable, "-m", "linkerd_await", *args],
        capture_output=True,
        text=True,
        env=base_env,
        timeout=timeout,
        check=False,
    )
