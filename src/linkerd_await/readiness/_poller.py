"""Readiness poller for the proxy admin server.

This module provides the ReadinessPoller class that probes the proxy at a
fixed interval until it is ready or the overall deadline elapses.
"""

from typing import TYPE_CHECKING, final

import anyio
from tenacity import AsyncRetrying, RetryCallState, retry_if_result, stop_never, wait_fixed

from ._models import PollOutcome, PollStatus, ReadinessConfig

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from ._client import AdminClient


def _not_ready(ready: bool) -> bool:  # noqa: FBT001
    return not ready


@final
class ReadinessPoller:
    """Polls the proxy until it reports ready.

    Each iteration issues one probe. A failed probe of any kind is followed
    by a fixed backoff sleep and another attempt; there is no retry cap. When
    a deadline is configured, the whole loop runs inside a cancel scope so an
    in-flight probe or sleep is interrupted as soon as it expires.
    """

    __slots__ = ("_admin", "_attempts", "_logger", "config")

    def __init__(
        self,
        config: ReadinessConfig,
        admin: "AdminClient",  # noqa: UP037
        logger: "FilteringBoundLogger",  # noqa: UP037
    ) -> None:
        """Initialize the poller.

        Args:
            config: Timing configuration for the poll loop.
            admin: Client used to probe the proxy.
            logger: Logger for poll diagnostics.
        """
        self.config = config
        self._admin = admin
        self._logger = logger
        self._attempts = 0

    @property
    def attempts(self) -> int:
        """Return the number of probes issued so far."""
        return self._attempts

    async def _probe(self) -> bool:
        self._attempts += 1
        return await self._admin.probe_ready()

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        self._logger.debug(
            "proxy_not_ready",
            attempt=retry_state.attempt_number,
            backoff=self.config.backoff,
        )

    async def poll(self) -> PollOutcome:
        """Poll the proxy until it is ready or the deadline elapses.

        Returns:
            READY once a probe returns 200, TIMED_OUT if the deadline elapsed
            first, or PROBE_ERROR if a probe raised a non-HTTP error.
        """
        retrying = AsyncRetrying(
            retry=retry_if_result(_not_ready),
            wait=wait_fixed(self.config.backoff),
            stop=stop_never,
            sleep=anyio.sleep,
            before_sleep=self._before_sleep,
        )

        started = anyio.current_time()
        status = PollStatus.TIMED_OUT
        cause: BaseException | None = None

        # A deadline of None disables the scope's timeout
        with anyio.move_on_after(self.config.deadline):
            try:
                _ = await retrying(self._probe)
                status = PollStatus.READY
            except Exception as e:  # noqa: BLE001
                status = PollStatus.PROBE_ERROR
                cause = e

        elapsed = anyio.current_time() - started
        outcome = PollOutcome(
            status=status, attempts=self._attempts, elapsed=elapsed, cause=cause
        )

        if outcome.ready:
            self._logger.info(
                "proxy_ready", attempts=outcome.attempts, elapsed=round(elapsed, 3)
            )
        elif status == PollStatus.TIMED_OUT:
            self._logger.error(
                "proxy_readiness_timeout",
                timeout=self.config.deadline,
                attempts=outcome.attempts,
            )
        else:
            self._logger.error(
                "proxy_readiness_probe_error",
                attempts=outcome.attempts,
                error=repr(cause),
            )

        return outcome
