"""ConfirmationGate — one operator prompt per batch of concurrent failures.

When many fetches of the same round fail at nearly the same moment, each
of them wants to ask "keep retrying?". The gate lets the first caller
start the prompt and makes every other caller wait for, and reuse, that
answer.

States::

    IDLE ──first confirm()──> PROMPTING ──prompt returns──> RESOLVED(answer)

The IDLE -> PROMPTING transition happens without an intervening await,
so on a single event loop exactly one caller wins the race. A resolved
gate keeps answering with the same value until it is discarded; the
engine builds a fresh gate per round (or one per traversal, depending on
:class:`~venuecrawl.domain.types.GatePolicy`).
"""

from __future__ import annotations

import asyncio
from enum import StrEnum

import structlog

from venuecrawl.domain.ports import ConfirmationPrompt
from venuecrawl.domain.types import is_affirmative

logger = structlog.get_logger(__name__)

RETRY_PROMPT = "Retry? (yes) "


class GateState(StrEnum):
    IDLE = "idle"
    PROMPTING = "prompting"
    RESOLVED = "resolved"


class GateCapacityError(RuntimeError):
    """More callers waited on the gate at once than it was sized for."""


class ConfirmationGate:
    """Shared, at-most-once retry confirmation.

    Parameters:
        prompt: Blocking prompt used to ask the operator. When None the gate
            never prompts and resolves to *default_answer*.
        capacity: Maximum number of concurrent callers (normally the
            number of fetches in the round). None means unbounded.
        default_answer: Answer used when no prompt is available.
    """

    def __init__(
        self,
        prompt: ConfirmationPrompt | None,
        *,
        capacity: int | None = None,
        default_answer: bool = False,
    ) -> None:
        if capacity is not None and capacity < 1:
            msg = f"Gate capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self._prompt = prompt
        self._capacity = capacity
        self._default_answer = default_answer
        self._state = GateState.IDLE
        self._answer: asyncio.Future[bool] | None = None
        self._prompt_task: asyncio.Task[None] | None = None
        self._waiters = 0
        self.prompt_count = 0

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def capacity(self) -> int | None:
        return self._capacity

    async def confirm(self, error: BaseException) -> bool:
        """Return whether the caller should keep retrying after *error*.

        The first caller starts the prompt; everyone else awaits the same
        answer. If the prompt itself raises, every caller sees that error.
        """
        if self._state is GateState.RESOLVED:
            assert self._answer is not None
            return self._answer.result()

        if self._capacity is not None and self._waiters >= self._capacity:
            msg = f"ConfirmationGate sized for {self._capacity} callers was exceeded"
            raise GateCapacityError(msg)

        if self._state is GateState.IDLE:
            loop = asyncio.get_running_loop()
            self._state = GateState.PROMPTING
            self._answer = loop.create_future()
            self._prompt_task = loop.create_task(self._resolve(error))

        assert self._answer is not None
        self._waiters += 1
        try:
            return await asyncio.shield(self._answer)
        finally:
            self._waiters -= 1

    async def _resolve(self, error: BaseException) -> None:
        assert self._answer is not None
        try:
            answer = await self._ask(error)
        except asyncio.CancelledError:
            self._answer.cancel()
            raise
        except Exception as exc:
            self._answer.set_exception(exc)
        else:
            self._answer.set_result(answer)
            logger.debug("gate.resolved", answer=answer)
        finally:
            self._state = GateState.RESOLVED

    async def _ask(self, error: BaseException) -> bool:
        if self._prompt is None:
            logger.warning("gate.auto_answer", error=str(error), answer=self._default_answer)
            return self._default_answer
        self.prompt_count += 1
        logger.warning("gate.prompt", error=str(error))
        raw = await asyncio.to_thread(self._prompt.ask, RETRY_PROMPT)
        return is_affirmative(raw)
