"""Fetch failure taxonomy.

Every failure that can stop a traversal round is a :class:`FetchError`.
The engine catches exactly this base class at the traversal boundary;
anything else is a programming error and propagates.
"""

from __future__ import annotations


class FetchError(Exception):
    """Base class for adjacency lookup failures."""

    code = "FETCH_FAILED"

    def __init__(self, node_id: str, message: str) -> None:
        super().__init__(message)
        self.node_id = node_id
        self.message = message


class TransientFetchError(FetchError):
    """A lookup failed for a reason that retrying may fix."""

    code = "TRANSIENT"


class PermanentFetchError(FetchError):
    """A lookup failed for a reason retrying cannot fix (e.g. HTTP 403)."""

    code = "PERMANENT"

    def __init__(self, node_id: str, message: str, *, status_code: int | None = None) -> None:
        super().__init__(node_id, message)
        self.status_code = status_code


class RetryDeclinedError(FetchError):
    """The operator declined to keep retrying after a transient failure."""

    code = "RETRY_DECLINED"

    def __init__(self, node_id: str) -> None:
        super().__init__(node_id, f"Retry declined for node {node_id!r}")


class RetriesExhaustedError(FetchError):
    """The attempt ceiling was reached without a successful lookup."""

    code = "RETRIES_EXHAUSTED"

    def __init__(self, node_id: str, attempts: int) -> None:
        super().__init__(node_id, f"Gave up on node {node_id!r} after {attempts} attempts")
        self.attempts = attempts
