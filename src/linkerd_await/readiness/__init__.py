"""Readiness package for waiting on the local proxy.

Key Components:
    - ReadinessConfig: Admin endpoint and timing configuration
    - PollStatus: Terminal states of a poll
    - PollOutcome: Immutable poll result
    - AdminClient: HTTP client for the proxy admin server
    - ReadinessPoller: Fixed-interval poll loop with an optional deadline

Example:
    >>> from linkerd_await.readiness import AdminClient, ReadinessConfig, ReadinessPoller
    >>> config = ReadinessConfig(port=4191, backoff=1.0, timeout=30.0)
    >>> async with AdminClient(config, logger) as admin:
    ...     outcome = await ReadinessPoller(config, admin, logger).poll()
"""

from ._client import AdminClient
from ._models import (
    DEFAULT_ADMIN_PORT,
    DEFAULT_BACKOFF,
    PollOutcome,
    PollStatus,
    ReadinessConfig,
)
from ._poller import ReadinessPoller

__all__ = [
    "DEFAULT_ADMIN_PORT",
    "DEFAULT_BACKOFF",
    "AdminClient",
    "PollOutcome",
    "PollStatus",
    "ReadinessConfig",
    "ReadinessPoller",
]
