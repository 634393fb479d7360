"""Process supervisor for handing control to the child command.

This module provides the ProcessSupervisor class that either replaces the
wrapper with the child, or runs the child and then shuts the proxy down.
"""

import contextlib
import os
import signal
import sys
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, NoReturn, final

import anyio
import anyio.abc
from rich.console import Console
from rich.text import Text

from linkerd_await.exceptions import LaunchError, ShutdownRequestError

from ._models import ChildExit, ChildSpec

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from linkerd_await.readiness import AdminClient

ExecFunction = Callable[[str, Sequence[str]], NoReturn]

# Signals relayed to a forked child while the wrapper waits on it
FORWARDED_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGTERM,)


@final
class ProcessSupervisor:
    """Hands control to the child command.

    In exec mode the wrapper's process image is replaced, so the child
    inherits the pid, stdio and environment, and its exit status is observed
    directly by whoever started the wrapper. In fork mode the child runs as a
    subprocess with inherited stdio; once it exits, the proxy is asked to
    shut down and the child's status is returned.
    """

    __slots__ = ("_console", "_execvp", "_logger")

    def __init__(
        self,
        logger: "FilteringBoundLogger",  # noqa: UP037
        *,
        console: Console | None = None,
        execvp: ExecFunction = os.execvp,
    ) -> None:
        """Initialize the supervisor.

        Args:
            logger: Logger for child lifecycle diagnostics.
            console: Rich Console for user-facing messages. Writes to stderr
                if None.
            execvp: Process replacement primitive.
        """
        self._logger = logger
        self._console = console or Console(stderr=True)
        self._execvp = execvp

    def exec_replace(self, spec: ChildSpec) -> NoReturn:
        """Replace the current process with the child.

        Args:
            spec: The command to execute.

        Raises:
            LaunchError: If the command could not be executed.
        """
        self._logger.info("exec_child", argv=list(spec.argv))

        # Buffered output would be lost when the image is replaced
        sys.stdout.flush()
        sys.stderr.flush()

        try:
            self._execvp(spec.executable, spec.argv)
        except OSError as e:
            msg = f"Failed to exec child program: {spec.executable}: {e}"
            raise LaunchError(msg, command=spec.executable, cause=e) from e

        msg = f"Exec of {spec.executable} returned unexpectedly"
        raise LaunchError(msg, command=spec.executable)

    async def fork_then_shutdown(
        self,
        spec: ChildSpec,
        admin: "AdminClient",  # noqa: UP037
    ) -> ChildExit:
        """Run the child to completion, then ask the proxy to shut down.

        The shutdown request is best-effort: a failure is reported but never
        changes the returned exit. It is sent whether the child exited
        normally or was killed by a signal.

        Args:
            spec: The command to run.
            admin: Client used to send the shutdown request.

        Returns:
            How the child terminated.

        Raises:
            LaunchError: If the child could not be started. No shutdown
                request is sent in that case.
        """
        child_exit = await self.wait_child(spec)
        await self.send_shutdown(admin)
        return child_exit

    async def wait_child(self, spec: ChildSpec) -> ChildExit:
        """Spawn the child and wait for it, relaying SIGTERM to it.

        Args:
            spec: The command to run.

        Returns:
            How the child terminated.

        Raises:
            LaunchError: If the child could not be started.
        """
        try:
            process = await anyio.open_process(
                spec.argv, stdin=None, stdout=None, stderr=None
            )
        except OSError as e:
            msg = f"Failed to fork child program: {spec.executable}: {e}"
            raise LaunchError(msg, command=spec.executable, cause=e) from e

        self._logger.info("child_started", pid=process.pid, argv=list(spec.argv))

        async with anyio.create_task_group() as tg:
            # Install the handler before waiting so kubelet's SIGTERM reaches the child
            await tg.start(self._forward_signals, process)
            returncode = await process.wait()
            tg.cancel_scope.cancel()

        child_exit = ChildExit(returncode=returncode)
        self._logger.info(
            "child_exited",
            pid=process.pid,
            returncode=returncode,
            signal=child_exit.signal.name if child_exit.signal else None,
        )
        return child_exit

    async def _forward_signals(
        self,
        process: anyio.abc.Process,
        *,
        task_status: anyio.abc.TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        with anyio.open_signal_receiver(*FORWARDED_SIGNALS) as signals:
            task_status.started()
            async for signum in signals:
                self._logger.info(
                    "forwarding_signal", pid=process.pid, signal=signum.name
                )
                # The child may already have exited
                with contextlib.suppress(ProcessLookupError):
                    process.send_signal(signum)

    async def send_shutdown(self, admin: "AdminClient") -> bool:  # noqa: UP037
        """Send a single shutdown request to the proxy.

        Args:
            admin: Client used to send the request.

        Returns:
            True if the proxy accepted the request, False otherwise.
        """
        try:
            await admin.request_shutdown()
        except ShutdownRequestError as e:
            self._logger.warning(
                "proxy_shutdown_failed",
                url=e.url,
                status_code=e.status_code,
                error=str(e),
            )
            self._console.print(Text(str(e), style="yellow"))
            return False
        return True
