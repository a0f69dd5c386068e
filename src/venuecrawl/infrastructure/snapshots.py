"""CSV snapshot writer.

Layout under the run directory::

    {run_dir}/{iteration}/nodes.csv       # id,label
    {run_dir}/{iteration}/edge-list.csv   # source_id,target_id

No header rows; one file pair per written checkpoint.
"""

from __future__ import annotations

import csv
from pathlib import Path

import structlog

from venuecrawl.domain.types import RoundState

logger = structlog.get_logger(__name__)

NODES_FILENAME = "nodes.csv"
EDGES_FILENAME = "edge-list.csv"


class CsvSnapshotWriter:
    """Writes node and edge tables for a round checkpoint."""

    def __init__(self, run_dir: Path) -> None:
        self.run_dir = run_dir

    def write(self, state: RoundState) -> Path:
        """Write *state* and return the checkpoint directory."""
        target = self.run_dir / str(state.iteration)
        target.mkdir(parents=True, exist_ok=True)

        with (target / NODES_FILENAME).open("w", encoding="utf-8", newline="") as fh:
            writer = csv.writer(fh)
            writer.writerows((node_id, node.label) for node_id, node in state.nodes.items())

        with (target / EDGES_FILENAME).open("w", encoding="utf-8", newline="") as fh:
            writer = csv.writer(fh)
            writer.writerows((edge.source.id, edge.target.id) for edge in state.edges)

        logger.debug(
            "crawl.snapshot",
            path=str(target),
            nodes=len(state.nodes),
            edges=len(state.edges),
        )
        return target


def read_snapshot(path: Path) -> tuple[list[tuple[str, str]], list[tuple[str, str]]]:
    """Read a checkpoint directory back as ``(nodes, edges)`` row lists."""
    with (path / NODES_FILENAME).open(encoding="utf-8", newline="") as fh:
        nodes = [(row[0], row[1]) for row in csv.reader(fh)]
    with (path / EDGES_FILENAME).open(encoding="utf-8", newline="") as fh:
        edges = [(row[0], row[1]) for row in csv.reader(fh)]
    return nodes, edges
