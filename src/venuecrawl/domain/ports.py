"""Collaborator protocols consumed by the traversal services."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from venuecrawl.domain.types import Node, RoundState


class AdjacencySource(Protocol):
    """Returns the nodes adjacent to a node id.

    Raises TransientFetchError or PermanentFetchError.
    """

    async def lookup_neighbors(self, node_id: str) -> list[Node]: ...


class NodeSource(Protocol):
    """Resolves a single node id (used once for the start node)."""

    async def lookup_node(self, node_id: str) -> Node: ...


class ConfirmationPrompt(Protocol):
    """Blocking line-read shown to the operator."""

    def ask(self, prompt_text: str) -> str: ...


class SnapshotSink(Protocol):
    """Durably records a round checkpoint and returns where it went."""

    def write(self, state: RoundState) -> Path: ...


class GraphSource(AdjacencySource, NodeSource, Protocol):
    """A source offering both lookups, as the crawl service needs."""
