"""Entry logic that waits for the proxy and then runs the command.

This module ties the readiness poller and the process supervisor together:
- DisableState: Whether readiness checking was switched off
- AwaitOptions: Immutable options for one invocation
- DispatchState: States of the dispatch state machine
- Dispatcher: Walks the state machine and returns an exit code
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Self, final

import anyio
import httpx
from rich.console import Console
from rich.text import Text

from linkerd_await._exit_codes import EXIT_SUCCESS, EXIT_UNAVAILABLE
from linkerd_await.readiness import (
    AdminClient,
    PollOutcome,
    PollStatus,
    ReadinessConfig,
    ReadinessPoller,
)
from linkerd_await.supervisor import (
    ChildExit,
    ChildSpec,
    ProcessSupervisor,
    SupervisionMode,
)

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

# Checked in order; the first non-empty value wins
DISABLE_ENV_VARS: tuple[str, ...] = ("LINKERD_AWAIT_DISABLED", "LINKERD_DISABLED")


@dataclass(frozen=True, slots=True)
class DisableState:
    """Whether readiness checking is switched off for this invocation.

    Attributes:
        reason: The value of the disable switch, or None when enabled.
    """

    reason: str | None = None

    @property
    def disabled(self) -> bool:
        """Return True if readiness checking should be skipped."""
        return self.reason is not None

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> Self:
        """Read the disable switch from the environment.

        Args:
            environ: Environment to read. Defaults to os.environ.

        Returns:
            Disabled with the switch's value as reason, or enabled.
        """
        env = os.environ if environ is None else environ
        for name in DISABLE_ENV_VARS:
            value = env.get(name)
            if value:
                return cls(reason=value)
        return cls()


@dataclass(frozen=True, slots=True)
class AwaitOptions:
    """Options for a single wrapper invocation.

    Attributes:
        readiness: Admin endpoint and timing configuration.
        command: The command to run, or None to only wait.
        shutdown: Fork the command and shut the proxy down after it exits.
        verbose: Report why readiness checking was skipped.
        timeout_fatal: Whether a readiness failure prevents the command from
            running.
    """

    readiness: ReadinessConfig
    command: ChildSpec | None = None
    shutdown: bool = False
    verbose: bool = False
    timeout_fatal: bool = True

    def __post_init__(self) -> None:
        if self.shutdown and self.command is None:
            msg = "A command must be specified with --shutdown"
            raise ValueError(msg)


class DispatchState(StrEnum):
    """States of the dispatch state machine.

    - START: Nothing has happened yet
    - DISABLED: Readiness checking was switched off
    - POLLING: Waiting for the proxy
    - READY: The proxy reported ready
    - FAILED: The proxy did not become ready
    - SUPERVISING: Control has been handed to the process supervisor
    """

    START = "start"
    DISABLED = "disabled"
    POLLING = "polling"
    READY = "ready"
    FAILED = "failed"
    SUPERVISING = "supervising"


@final
class Dispatcher:
    """Waits for the proxy, then hands control to the command.

    The disable switch is passed in rather than read here, so the decision
    is made once at startup.
    """

    __slots__ = (
        "_console",
        "_logger",
        "_supervisor",
        "_transport",
        "disable_state",
        "options",
        "outcome",
        "state",
    )

    def __init__(  # noqa: PLR0913
        self,
        options: AwaitOptions,
        disable_state: DisableState,
        logger: "FilteringBoundLogger",  # noqa: UP037
        *,
        console: Console | None = None,
        supervisor: ProcessSupervisor | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            options: Options for this invocation.
            disable_state: Whether readiness checking is switched off.
            logger: Logger for diagnostics.
            console: Rich Console for user-facing messages. Writes to stderr
                if None.
            supervisor: Supervisor used to run the command.
            transport: Optional httpx transport for the admin client.
        """
        self.options = options
        self.disable_state = disable_state
        self.state = DispatchState.START
        self.outcome: PollOutcome | None = None
        self._logger = logger
        self._console = console or Console(stderr=True)
        self._supervisor = supervisor or ProcessSupervisor(
            logger, console=self._console
        )
        self._transport = transport

    def _transition(self, state: DispatchState) -> None:
        self._logger.debug("dispatch_transition", source=self.state, target=state)
        self.state = state

    def _admin_client(self) -> AdminClient:
        return AdminClient(
            self.options.readiness, self._logger, transport=self._transport
        )

    async def _poll(self) -> PollOutcome:
        async with self._admin_client() as admin:
            poller = ReadinessPoller(self.options.readiness, admin, self._logger)
            return await poller.poll()

    async def _fork(self, command: ChildSpec) -> ChildExit:
        async with self._admin_client() as admin:
            return await self._supervisor.fork_then_shutdown(command, admin)

    def _report_failure(self, outcome: PollOutcome) -> None:
        if outcome.status == PollStatus.TIMED_OUT:
            deadline = self.options.readiness.deadline
            message = (
                f"linkerd-proxy failed to become ready within {deadline:g}s timeout"
            )
        else:
            message = f"linkerd-proxy readiness check failed: {outcome.cause}"
        self._console.print(Text(message, style="red"))

    def run(self) -> int:
        """Run the state machine.

        Returns:
            The exit code for the wrapper. Does not return in exec mode.

        Raises:
            LaunchError: If the command cannot be found or started.
        """
        command = self.options.command

        # Fail before probing if the command cannot possibly run
        if command is not None:
            _ = command.resolve()

        if self.disable_state.disabled:
            self._transition(DispatchState.DISABLED)
            if self.options.verbose:
                self._console.print(
                    f"Linkerd readiness check skipped: {self.disable_state.reason}",
                    markup=False,
                    highlight=False,
                )
            mode = SupervisionMode.EXEC_REPLACE
        else:
            self._transition(DispatchState.POLLING)
            self.outcome = anyio.run(self._poll)

            if self.outcome.ready:
                self._transition(DispatchState.READY)
            else:
                self._transition(DispatchState.FAILED)
                self._report_failure(self.outcome)
                if self.options.timeout_fatal:
                    return EXIT_UNAVAILABLE

            mode = (
                SupervisionMode.FORK_THEN_SHUTDOWN
                if self.options.shutdown
                else SupervisionMode.EXEC_REPLACE
            )

        if command is None:
            return EXIT_SUCCESS

        self._transition(DispatchState.SUPERVISING)
        self._logger.debug("supervision_mode", mode=mode)

        if mode == SupervisionMode.EXEC_REPLACE:
            self._supervisor.exec_replace(command)

        child_exit = anyio.run(self._fork, command)
        return child_exit.exit_status
