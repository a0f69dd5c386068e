"""RetryingFetcher — one adjacency lookup with bounded, gated retry.

Retry policy:

* :class:`~venuecrawl.domain.errors.TransientFetchError` is retried with
  exponential backoff, up to ``max_attempts`` attempts in total.
* Before every retry the failure is put to the round's
  :class:`~venuecrawl.services.gate.ConfirmationGate`; a "no" stops the
  fetch with :class:`~venuecrawl.domain.errors.RetryDeclinedError`.
* :class:`~venuecrawl.domain.errors.PermanentFetchError` is never retried.
* Running out of attempts raises
  :class:`~venuecrawl.domain.errors.RetriesExhaustedError`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from venuecrawl.domain.errors import (
    RetriesExhaustedError,
    RetryDeclinedError,
    TransientFetchError,
)

if TYPE_CHECKING:
    from venuecrawl.config.models import RetryConfig
    from venuecrawl.domain.ports import AdjacencySource
    from venuecrawl.domain.types import Node
    from venuecrawl.services.gate import ConfirmationGate

logger = structlog.get_logger(__name__)


def _log_retry(retry_state: RetryCallState) -> None:
    """tenacity ``before_sleep`` hook: one event per scheduled retry."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    sleep = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.warning(
        "fetch.retry",
        error=str(exc),
        attempt=retry_state.attempt_number,
        sleep_s=round(sleep, 2),
    )


class RetryingFetcher:
    """Wraps an :class:`AdjacencySource` with the retry policy above.

    Parameters:
        source: The adjacency lookup to call.
        max_attempts: Total attempts per node, including the first.
        backoff_multiplier / backoff_min / backoff_max: ``wait_exponential``
            parameters, in seconds.
    """

    def __init__(
        self,
        source: AdjacencySource,
        *,
        max_attempts: int = 10,
        backoff_multiplier: float = 1.0,
        backoff_min: float = 1.0,
        backoff_max: float = 30.0,
    ) -> None:
        if max_attempts < 1:
            msg = f"max_attempts must be positive, got {max_attempts}"
            raise ValueError(msg)
        self._source = source
        self._max_attempts = max_attempts
        self._wait = wait_exponential(
            multiplier=backoff_multiplier, min=backoff_min, max=backoff_max
        )

    @classmethod
    def from_config(cls, source: AdjacencySource, config: RetryConfig) -> RetryingFetcher:
        return cls(
            source,
            max_attempts=config.max_attempts,
            backoff_multiplier=config.backoff_multiplier,
            backoff_min=config.backoff_min,
            backoff_max=config.backoff_max,
        )

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=self._wait,
            retry=retry_if_exception_type(TransientFetchError),
            before_sleep=_log_retry,
        )

    async def fetch(self, node: Node, gate: ConfirmationGate) -> list[Node]:
        """Return the neighbors of *node*.

        Raises:
            PermanentFetchError: on the first non-retryable failure.
            RetryDeclinedError: when the gate answers "no".
            RetriesExhaustedError: after ``max_attempts`` transient failures.
        """
        try:
            async for attempt in self._retrying():
                with attempt:
                    try:
                        return await self._source.lookup_neighbors(node.id)
                    except TransientFetchError as exc:
                        number = attempt.retry_state.attempt_number
                        if number < self._max_attempts and not await gate.confirm(exc):
                            raise RetryDeclinedError(node.id) from exc
                        raise
        except RetryError as exc:
            raise RetriesExhaustedError(node.id, self._max_attempts) from (
                exc.last_attempt.exception()
            )
        raise AssertionError("unreachable: AsyncRetrying yields until success or error")
