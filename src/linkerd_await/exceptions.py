"""linkerd-await exceptions."""


class AwaitError(Exception):
    """Base exception for linkerd-await errors."""


class InvalidDurationError(AwaitError, ValueError):
    """Raised when a duration string cannot be parsed.

    Attributes:
        value: The text that failed to parse.
    """

    def __init__(self, message: str, *, value: str) -> None:
        """Initialize with error message and the offending text."""
        super().__init__(message)
        self.value: str = value


# =============================================================================
# Supervisor Exceptions
# =============================================================================


class LaunchError(AwaitError):
    """Raised when the child command cannot be located or started.

    Attributes:
        command: The executable that failed to launch.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and launch context.

        Args:
            message: Human-readable error message.
            command: The executable that failed to launch.
            cause: The underlying exception that caused the failure.
        """
        super().__init__(message)
        self.command: str | None = command
        self.cause: Exception | None = cause


class ShutdownRequestError(AwaitError):
    """Raised when the proxy shutdown request fails.

    Attributes:
        url: The shutdown endpoint that was requested.
        status_code: HTTP status returned by the proxy, if any.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and request context.

        Args:
            message: Human-readable error message.
            url: The shutdown endpoint that was requested.
            status_code: HTTP status returned by the proxy, if any.
            cause: The underlying exception that caused the failure.
        """
        super().__init__(message)
        self.url: str = url
        self.status_code: int | None = status_code
        self.cause: Exception | None = cause
