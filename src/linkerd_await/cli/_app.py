"""The command-line interface for linkerd-await."""

import sys
from typing import Annotated, Literal

from cyclopts import App, Parameter
from rich.console import Console
from rich.text import Text

from linkerd_await import __version__
from linkerd_await._exit_codes import EXIT_OSERR, EXIT_USAGE
from linkerd_await.dispatch import AwaitOptions, DisableState, Dispatcher
from linkerd_await.duration import parse_duration
from linkerd_await.exceptions import InvalidDurationError, LaunchError
from linkerd_await.readiness import DEFAULT_ADMIN_PORT, ReadinessConfig
from linkerd_await.supervisor import ChildSpec
from linkerd_await.utils import DEFAULT_LOG_LEVEL, LogFormatType, create_logger

LogLevel = Literal["debug", "info", "warning", "error", "critical"]

HELP = "Wait for linkerd to become ready before running a program."


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name="linkerd-await",
        help=HELP,
        version=__version__,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.default
    def _default(  # noqa: PLR0913  # pyright: ignore[reportUnusedFunction]
        *command: Annotated[
            str,
            Parameter(
                name="CMD",
                help="The command to run after linkerd is ready, and its arguments.",
                allow_leading_hyphen=True,
            ),
        ],
        port: Annotated[
            int,
            Parameter(
                name=["--port", "-p"],
                help="The port of the local Linkerd proxy admin server.",
            ),
        ] = DEFAULT_ADMIN_PORT,
        backoff: Annotated[
            str,
            Parameter(
                name=["--backoff", "-b"],
                help="Time to wait after a failed readiness check.",
            ),
        ] = "1s",
        timeout: Annotated[
            str | None,
            Parameter(
                name=["--timeout", "-t"],
                help="Fail when the timeout elapses before the proxy becomes ready.",
            ),
        ] = None,
        timeout_fatal: Annotated[
            bool | None,
            Parameter(
                name="--timeout-fatal",
                help="Whether a readiness timeout prevents CMD from running.",
            ),
        ] = None,
        shutdown: Annotated[
            bool,
            Parameter(
                name=["--shutdown", "-S"],
                negative="",
                help="Fork CMD and trigger proxy shutdown when it completes.",
            ),
        ] = False,
        verbose: Annotated[
            bool,
            Parameter(
                name=["--verbose", "-v"],
                negative="",
                env_var="LINKERD_AWAIT_VERBOSE",
                help="Print a message when readiness checking is disabled.",
            ),
        ] = False,
        log_level: Annotated[
            LogLevel,
            Parameter(
                name="--log-level",
                env_var="LINKERD_AWAIT_LOG_LEVEL",
                help="Diagnostic log level.",
            ),
        ] = DEFAULT_LOG_LEVEL,
        log_format: Annotated[
            LogFormatType,
            Parameter(
                name="--log-format",
                env_var="LINKERD_AWAIT_LOG_FORMAT",
                help="Diagnostic log format.",
            ),
        ] = "text",
    ) -> int:
        """Wait for linkerd to become ready, then run CMD.

        Args:
            command: The command to run and its arguments.
            port: The port of the local proxy admin server.
            backoff: Time to wait after a failed readiness check.
            timeout: Overall readiness deadline.
            timeout_fatal: Whether a readiness timeout prevents CMD from running.
            shutdown: Fork CMD and trigger proxy shutdown when it completes.
            verbose: Print a message when readiness checking is disabled.
            log_level: Diagnostic log level.
            log_format: Diagnostic log format.
        """
        logger = create_logger(level=log_level, log_format=log_format)

        try:
            if timeout_fatal is not None and not command:
                msg = "A command must be specified with --timeout-fatal"
                raise ValueError(msg)  # noqa: TRY301
            readiness = ReadinessConfig(
                port=port,
                backoff=parse_duration(backoff),
                timeout=parse_duration(timeout) if timeout is not None else None,
            )
            options = AwaitOptions(
                readiness=readiness,
                command=ChildSpec(command[0], tuple(command[1:])) if command else None,
                shutdown=shutdown,
                verbose=verbose,
                timeout_fatal=True if timeout_fatal is None else timeout_fatal,
            )
        except (InvalidDurationError, ValueError) as e:
            error_console.print(Text(f"Error: {e}", style="red"))
            return EXIT_USAGE

        # The disable switch is read once, here, and passed down
        dispatcher = Dispatcher(
            options,
            DisableState.from_environ(),
            logger,
            console=error_console,
        )

        try:
            return dispatcher.run()
        except LaunchError as e:
            logger.error("launch_failed", command=e.command, error=str(e))
            error_console.print(Text(str(e), style="red"))
            return EXIT_OSERR

    return app


def main() -> None:
    """Default entrypoint for the `linkerd-await` CLI."""
    app = create_app()
    result = app()
    sys.exit(result if isinstance(result, int) else 0)
