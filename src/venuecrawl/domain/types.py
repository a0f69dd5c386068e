"""Graph value types and traversal policies.

Nodes are immutable once received from the adjacency source. A
:class:`RoundState` is a self-contained checkpoint: it owns copies of the
visited set and edge list, so consumers may keep it after the engine has
moved on to the next round.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from venuecrawl.domain.errors import FetchError


@dataclass(frozen=True)
class Node:
    """A graph vertex: opaque identifier plus a display label."""

    id: str
    label: str


@dataclass(frozen=True)
class Edge:
    """One observed adjacency. ``target`` is always the first-seen instance."""

    source: Node
    target: Node


@dataclass(frozen=True)
class RoundState:
    """Checkpoint emitted once per completed round.

    Attributes:
        iteration: Number of fully merged rounds (0 before the first round).
        request_count: Cumulative adjacency lookups issued so far.
        nodes: Read-only visited set, keyed by node id, in discovery order.
        edges: Edge list in merge order.
    """

    iteration: int
    request_count: int
    nodes: Mapping[str, Node]
    edges: tuple[Edge, ...]

    @classmethod
    def capture(
        cls,
        iteration: int,
        request_count: int,
        nodes: dict[str, Node],
        edges: list[Edge],
    ) -> RoundState:
        """Copy the live traversal state into an independent checkpoint."""
        return cls(
            iteration=iteration,
            request_count=request_count,
            nodes=MappingProxyType(dict(nodes)),
            edges=tuple(edges),
        )


class GatePolicy(StrEnum):
    """Scope of a retry-confirmation answer."""

    ROUND = "round"
    TRAVERSAL = "traversal"


class SnapshotCadence(StrEnum):
    """When intermediate round states are written to the snapshot sink."""

    POWER_OF_TWO = "power-of-two"
    EVERY = "every"
    FINAL = "final"


class StopReason(StrEnum):
    """Why a traversal stopped."""

    COMPLETE = "complete"
    ITERATION_LIMIT = "iteration_limit"
    FAILED = "failed"


@dataclass(frozen=True)
class TraversalOutcome:
    """Terminal summary of a traversal.

    ``final_state`` reflects every fully merged round; nothing from a
    failed round is ever included.
    """

    reason: StopReason
    final_state: RoundState
    error: FetchError | None = None


def is_power_of_two(n: int) -> bool:
    """True for 1, 2, 4, 8, ...

    Examples:
        >>> is_power_of_two(8)
        True
        >>> is_power_of_two(6)
        False
        >>> is_power_of_two(0)
        False
    """
    return n > 0 and n & (n - 1) == 0


def is_affirmative(answer: str) -> bool:
    """Interpret an operator's answer to a yes/no confirmation.

    Empty input or anything starting with ``y``/``Y`` counts as yes.
    """
    answer = answer.strip()
    return answer == "" or answer[0].lower() == "y"
