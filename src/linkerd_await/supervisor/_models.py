"""Data models for the process supervisor.

This module defines the core data types for handing control to the child:
- SupervisionMode: How the child is run
- ChildSpec: The command to run
- ChildExit: How the child terminated
"""

import os
import shutil
from dataclasses import dataclass
from enum import StrEnum
from signal import Signals

from linkerd_await._exit_codes import EXIT_SIGNAL_BASE
from linkerd_await.exceptions import LaunchError


class SupervisionMode(StrEnum):
    """Strategies for running the child command.

    - EXEC_REPLACE: Replace the wrapper's process image with the child
    - FORK_THEN_SHUTDOWN: Spawn the child, wait, then shut the proxy down
    """

    EXEC_REPLACE = "exec_replace"
    FORK_THEN_SHUTDOWN = "fork_then_shutdown"


@dataclass(frozen=True, slots=True)
class ChildSpec:
    """The command to run once the proxy is ready.

    The executable and arguments are passed through unmodified.

    Attributes:
        executable: Program name or path, looked up on PATH if it has no slash.
        arguments: Arguments passed to the program.
    """

    executable: str
    arguments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.executable:
            msg = "Child executable must not be empty"
            raise ValueError(msg)

    @property
    def argv(self) -> tuple[str, ...]:
        """Return the full argument vector, including the program name."""
        return (self.executable, *self.arguments)

    def resolve(self) -> str:
        """Locate the executable.

        Returns:
            The path that will be executed.

        Raises:
            LaunchError: If the executable cannot be found or is not executable.
        """
        if os.sep in self.executable:
            if os.path.isfile(self.executable) and os.access(self.executable, os.X_OK):
                return self.executable
            msg = f"{self.executable}: not an executable file"
            raise LaunchError(msg, command=self.executable)

        path = shutil.which(self.executable)
        if path is None:
            msg = f"{self.executable}: command not found"
            raise LaunchError(msg, command=self.executable)
        return path


@dataclass(frozen=True, slots=True)
class ChildExit:
    """How a child process terminated.

    Attributes:
        returncode: Return code as reported by the OS; negative when the
            child was killed by a signal.
    """

    returncode: int

    @property
    def signal(self) -> Signals | None:
        """Return the signal that killed the child, if any."""
        if self.returncode >= 0:
            return None
        try:
            return Signals(-self.returncode)
        except ValueError:
            return None

    @property
    def exit_status(self) -> int:
        """Return the status the wrapper should exit with.

        Signal deaths are reported the way shells do, as 128 plus the
        signal number.
        """
        if self.returncode < 0:
            return EXIT_SIGNAL_BASE - self.returncode
        return self.returncode
