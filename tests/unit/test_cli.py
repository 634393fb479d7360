"""Tests for the linkerd-await command-line interface."""

from collections.abc import Callable
from typing import TYPE_CHECKING, cast
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from linkerd_await._exit_codes import EXIT_OSERR, EXIT_USAGE
from linkerd_await.cli import create_app
from linkerd_await.dispatch import AwaitOptions, DisableState
from linkerd_await.exceptions import LaunchError
from linkerd_await.supervisor import ChildSpec

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.fixture
def dispatcher_cls(mocker: "MockerFixture") -> MagicMock:  # noqa: UP037
    mock = mocker.patch("linkerd_await.cli._app.Dispatcher")
    mock.return_value.run.return_value = 0
    return mock


@pytest.fixture
def run_cli(console: Console) -> Callable[..., int]:
    """Run the CLI and return its exit code."""

    app = create_app(console=console, error_console=console)

    def _run(*args: str) -> int:
        try:
            result = app(args)
        except SystemExit as e:
            return e.code if isinstance(e.code, int) else 1
        return result if isinstance(result, int) else 0

    return _run


def _options(dispatcher_cls: MagicMock) -> AwaitOptions:
    return cast("AwaitOptions", dispatcher_cls.call_args.args[0])


def _disable_state(dispatcher_cls: MagicMock) -> DisableState:
    return cast("DisableState", dispatcher_cls.call_args.args[1])


class TestOptions:
    def test_defaults(
        self, run_cli: Callable[..., int], dispatcher_cls: MagicMock
    ) -> None:
        assert run_cli() == 0

        options = _options(dispatcher_cls)
        assert options.readiness.port == 4191
        assert options.readiness.backoff == 1.0
        assert options.readiness.timeout is None
        assert options.command is None
        assert options.shutdown is False
        assert options.verbose is False
        assert options.timeout_fatal is True

    def test_all_options(
        self, run_cli: Callable[..., int], dispatcher_cls: MagicMock
    ) -> None:
        code = run_cli(
            "--port",
            "9990",
            "--backoff",
            "250ms",
            "--timeout",
            "2m",
            "--shutdown",
            "--verbose",
            "--no-timeout-fatal",
            "--",
            "myjob",
            "--flag",
            "value",
        )

        assert code == 0
        options = _options(dispatcher_cls)
        assert options.readiness.port == 9990
        assert options.readiness.backoff == pytest.approx(0.25)
        assert options.readiness.timeout == pytest.approx(120.0)
        assert options.shutdown is True
        assert options.verbose is True
        assert options.timeout_fatal is False
        assert options.command == ChildSpec("myjob", ("--flag", "value"))

    def test_short_options(
        self, run_cli: Callable[..., int], dispatcher_cls: MagicMock
    ) -> None:
        assert run_cli("-p", "5000", "-b", "10ms", "-t", "50ms", "-S", "--", "job") == 0

        options = _options(dispatcher_cls)
        assert options.readiness.port == 5000
        assert options.readiness.backoff == pytest.approx(0.01)
        assert options.readiness.timeout == pytest.approx(0.05)
        assert options.shutdown is True

    def test_explicit_timeout_fatal_with_command(
        self, run_cli: Callable[..., int], dispatcher_cls: MagicMock
    ) -> None:
        assert run_cli("--timeout-fatal", "-t", "5s", "--", "job") == 0
        assert _options(dispatcher_cls).timeout_fatal is True

    def test_propagates_dispatcher_exit_code(
        self, run_cli: Callable[..., int], dispatcher_cls: MagicMock
    ) -> None:
        dispatcher_cls.return_value.run.return_value = 7
        assert run_cli("--", "job") == 7

    def test_verbose_from_environment(
        self,
        run_cli: Callable[..., int],
        dispatcher_cls: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("LINKERD_AWAIT_VERBOSE", "true")
        assert run_cli() == 0
        assert _options(dispatcher_cls).verbose is True


class TestDisableSwitch:
    def test_reads_disable_switch(
        self,
        run_cli: Callable[..., int],
        dispatcher_cls: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("LINKERD_AWAIT_DISABLED", "testing")
        assert run_cli("--", "job") == 0
        assert _disable_state(dispatcher_cls) == DisableState(reason="testing")

    def test_enabled_without_switch(
        self, run_cli: Callable[..., int], dispatcher_cls: MagicMock
    ) -> None:
        assert run_cli("--", "job") == 0
        assert _disable_state(dispatcher_cls).disabled is False


class TestUsageErrors:
    @pytest.mark.parametrize(
        "args",
        [
            ("--backoff", "1"),
            ("--timeout", "soon"),
            ("--port", "70000"),
            ("--shutdown",),
            ("--timeout-fatal",),
            ("--no-timeout-fatal", "-t", "5s"),
        ],
    )
    def test_exits_with_usage_code(
        self,
        run_cli: Callable[..., int],
        dispatcher_cls: MagicMock,
        console_output: Callable[[], str],
        args: tuple[str, ...],
    ) -> None:
        assert run_cli(*args) == EXIT_USAGE
        assert dispatcher_cls.call_count == 0
        assert "Error:" in console_output()


class TestLaunchError:
    def test_exits_with_oserr(
        self,
        run_cli: Callable[..., int],
        dispatcher_cls: MagicMock,
        console_output: Callable[[], str],
    ) -> None:
        dispatcher_cls.return_value.run.side_effect = LaunchError(
            "nope: command not found", command="nope"
        )

        assert run_cli("--", "nope") == EXIT_OSERR
        assert "nope: command not found" in console_output()
