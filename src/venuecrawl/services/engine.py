"""FrontierEngine — round-by-round breadth-first expansion.

One round::

    current = frontier; frontier = []
    neighbors = bounded_map(fetch, current)        # concurrent, all-or-nothing
    merge(current, neighbors)                      # single-threaded, ordered
    yield RoundState(...)

Only the merge step touches the visited set and edge list, and it runs
after every fetch of the round has resolved, so no locking is needed and
the edge order is reproducible regardless of fetch completion order.

A :class:`~venuecrawl.domain.errors.FetchError` anywhere in a round stops
the traversal: nothing from that round is merged and :attr:`outcome`
records the error together with the last fully merged state.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from venuecrawl.domain.errors import FetchError
from venuecrawl.domain.types import (
    Edge,
    GatePolicy,
    Node,
    RoundState,
    StopReason,
    TraversalOutcome,
)
from venuecrawl.services.gate import ConfirmationGate
from venuecrawl.services.mapper import bounded_map
from venuecrawl.services.telemetry import trace_span

if TYPE_CHECKING:
    from venuecrawl.domain.ports import ConfirmationPrompt
    from venuecrawl.services.fetch import RetryingFetcher

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RoundContext:
    """Everything one round's concurrent fetches share."""

    iteration: int
    nodes: tuple[Node, ...]
    gate: ConfirmationGate


class FrontierEngine:
    """Breadth-first traversal over a :class:`RetryingFetcher`.

    Parameters:
        fetcher: Retrying adjacency lookup.
        prompt: Operator prompt for retry confirmation; None never prompts.
        concurrency: Maximum fetches in flight within a round.
        max_iterations: Stop after this many rounds (None: until exhausted).
        gate_policy: ``ROUND`` builds a fresh gate per round; ``TRAVERSAL``
            shares one gate, and therefore one answer, across all rounds.
        assume_yes: Answer the gate gives when *prompt* is None.
    """

    def __init__(
        self,
        fetcher: RetryingFetcher,
        *,
        prompt: ConfirmationPrompt | None = None,
        concurrency: int = 10,
        max_iterations: int | None = None,
        gate_policy: GatePolicy = GatePolicy.ROUND,
        assume_yes: bool = False,
    ) -> None:
        if concurrency < 1:
            msg = f"concurrency must be positive, got {concurrency}"
            raise ValueError(msg)
        if max_iterations is not None and max_iterations < 1:
            msg = f"max_iterations must be positive, got {max_iterations}"
            raise ValueError(msg)
        self._fetcher = fetcher
        self._prompt = prompt
        self._concurrency = concurrency
        self._max_iterations = max_iterations
        self._gate_policy = gate_policy
        self._assume_yes = assume_yes
        self._traversal_gate: ConfirmationGate | None = None
        self.outcome: TraversalOutcome | None = None

    def _gate_for(self, size: int) -> ConfirmationGate:
        if self._gate_policy is GatePolicy.TRAVERSAL:
            if self._traversal_gate is None:
                self._traversal_gate = ConfirmationGate(
                    self._prompt, default_answer=self._assume_yes
                )
            return self._traversal_gate
        return ConfirmationGate(self._prompt, capacity=size, default_answer=self._assume_yes)

    async def _expand(self, ctx: RoundContext) -> list[list[Node]]:
        """Fetch the neighbors of every node in the round, in frontier order."""

        async def fetch(node: Node) -> list[Node]:
            return await self._fetcher.fetch(node, ctx.gate)

        return await bounded_map(ctx.nodes, fetch, concurrency=self._concurrency)

    async def traverse(self, start: Node) -> AsyncIterator[RoundState]:
        """Yield one :class:`RoundState` per completed round.

        :attr:`outcome` is set once the generator is exhausted.
        """
        self.outcome = None
        self._traversal_gate = None
        visited: dict[str, Node] = {start.id: start}
        edges: list[Edge] = []
        frontier: list[Node] = [start]
        iteration = 0
        request_count = 0
        state = RoundState.capture(iteration, request_count, visited, edges)

        while True:
            ctx = RoundContext(
                iteration=iteration + 1,
                nodes=tuple(frontier),
                gate=self._gate_for(len(frontier)),
            )
            frontier = []

            with trace_span(f"round.{ctx.iteration}") as span:
                try:
                    results = await self._expand(ctx)
                except FetchError as exc:
                    logger.error(
                        "round.failed",
                        iteration=ctx.iteration,
                        node_id=exc.node_id,
                        code=exc.code,
                        error=str(exc),
                    )
                    self.outcome = TraversalOutcome(StopReason.FAILED, state, error=exc)
                    return

                for node, neighbors in zip(ctx.nodes, results, strict=True):
                    for neighbor in neighbors:
                        known = visited.get(neighbor.id)
                        if known is None:
                            visited[neighbor.id] = neighbor
                            edges.append(Edge(node, neighbor))
                            frontier.append(neighbor)
                        else:
                            edges.append(Edge(node, known))

                iteration += 1
                request_count += len(ctx.nodes)
                state = RoundState.capture(iteration, request_count, visited, edges)
                if span:
                    span.annotate("requests", len(ctx.nodes))
                    span.annotate("discovered", len(frontier))

            logger.info(
                "round.complete",
                iteration=iteration,
                requests=request_count,
                nodes=len(visited),
                edges=len(edges),
            )
            yield state

            if not frontier:
                self.outcome = TraversalOutcome(StopReason.COMPLETE, state)
                return
            if self._max_iterations is not None and iteration >= self._max_iterations:
                self.outcome = TraversalOutcome(StopReason.ITERATION_LIMIT, state)
                return
