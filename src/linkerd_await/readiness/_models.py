"""Data models for the readiness poller.

This module defines the core data types for waiting on the proxy:
- ReadinessConfig: Admin endpoint and timing configuration
- PollStatus: Terminal states of a poll
- PollOutcome: Immutable result of a poll
"""

from dataclasses import dataclass
from enum import StrEnum

DEFAULT_ADMIN_PORT: int = 4191
DEFAULT_BACKOFF: float = 1.0
DEFAULT_PROBE_TIMEOUT: float = 5.0

ADMIN_HOST: str = "127.0.0.1"
READY_PATH: str = "/ready"
SHUTDOWN_PATH: str = "/shutdown"


@dataclass(frozen=True, slots=True)
class ReadinessConfig:
    """Configuration for polling the proxy admin server.

    Immutable configuration that defines where the proxy is probed and how
    long to keep trying.

    Attributes:
        port: Port of the local proxy admin server.
        backoff: Seconds to wait after a failed readiness check.
        timeout: Overall deadline in seconds. None or 0 waits forever.
        probe_timeout: Deadline in seconds for a single probe request.
    """

    port: int = DEFAULT_ADMIN_PORT
    backoff: float = DEFAULT_BACKOFF
    timeout: float | None = None
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT

    def __post_init__(self) -> None:
        if not 1 <= self.port <= 65535:  # noqa: PLR2004
            msg = f"Admin port must be between 1 and 65535, got {self.port}"
            raise ValueError(msg)
        if self.backoff < 0:
            msg = f"Backoff must not be negative, got {self.backoff}"
            raise ValueError(msg)
        if self.timeout is not None and self.timeout < 0:
            msg = f"Timeout must not be negative, got {self.timeout}"
            raise ValueError(msg)
        if self.probe_timeout <= 0:
            msg = f"Probe timeout must be positive, got {self.probe_timeout}"
            raise ValueError(msg)

    @property
    def deadline(self) -> float | None:
        """Return the overall deadline, or None when polling is unbounded."""
        if self.timeout is None or self.timeout == 0:
            return None
        return self.timeout

    @property
    def admin_url(self) -> str:
        """Return the base URL of the proxy admin server."""
        return f"http://{ADMIN_HOST}:{self.port}"

    @property
    def ready_url(self) -> str:
        """Return the readiness probe URL."""
        return f"{self.admin_url}{READY_PATH}"

    @property
    def shutdown_url(self) -> str:
        """Return the proxy shutdown URL."""
        return f"{self.admin_url}{SHUTDOWN_PATH}"


class PollStatus(StrEnum):
    """Terminal states of a readiness poll.

    - READY: The proxy answered the probe with 200
    - TIMED_OUT: The overall deadline elapsed first
    - PROBE_ERROR: The probe failed in a way that is not retried
    """

    READY = "ready"
    TIMED_OUT = "timed_out"
    PROBE_ERROR = "probe_error"


@dataclass(frozen=True, slots=True)
class PollOutcome:
    """Immutable result of a single poll loop.

    Attributes:
        status: How the poll ended.
        attempts: Number of probes issued.
        elapsed: Seconds from the first probe until the poll ended.
        cause: The error behind a PROBE_ERROR outcome.
    """

    status: PollStatus
    attempts: int = 0
    elapsed: float = 0.0
    cause: BaseException | None = None

    @property
    def ready(self) -> bool:
        """Return True if the proxy became ready."""
        return self.status == PollStatus.READY
