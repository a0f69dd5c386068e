"""Shared pytest fixtures and test doubles for venuecrawl tests."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from venuecrawl.config.settings import CrawlSettings
from venuecrawl.domain.errors import PermanentFetchError
from venuecrawl.domain.types import Node, RoundState
from venuecrawl.services.engine import FrontierEngine
from venuecrawl.services.fetch import RetryingFetcher

# A -> [B, C], B -> [C, D], C -> [], D -> []
EXAMPLE_GRAPH: dict[str, list[str]] = {"A": ["B", "C"], "B": ["C", "D"], "C": [], "D": []}


class FakeGraphSource:
    """In-memory adjacency + node source.

    *failures* maps a node id to exceptions raised, in order, by the next
    lookups of that node before the real neighbors are returned.
    """

    def __init__(
        self,
        graph: dict[str, list[str]],
        *,
        failures: dict[str, list[Exception]] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.graph = graph
        self.failures = {k: list(v) for k, v in (failures or {}).items()}
        self.delays = delays or {}
        self.calls: list[str] = []
        self.closed = False

    @staticmethod
    def node(node_id: str) -> Node:
        return Node(id=node_id, label=f"Venue {node_id}")

    async def lookup_neighbors(self, node_id: str) -> list[Node]:
        self.calls.append(node_id)
        await asyncio.sleep(self.delays.get(node_id, 0))
        pending = self.failures.get(node_id)
        if pending:
            raise pending.pop(0)
        return [self.node(n) for n in self.graph.get(node_id, [])]

    async def lookup_node(self, node_id: str) -> Node:
        if node_id not in self.graph:
            raise PermanentFetchError(node_id, f"HTTP 403 for /venues/{node_id}", status_code=403)
        return self.node(node_id)

    async def __aenter__(self) -> FakeGraphSource:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.closed = True


class FakePrompt:
    """Scripted operator. Thread-safe: the gate calls it from a worker thread."""

    def __init__(self, *answers: str, release: threading.Event | None = None) -> None:
        self._answers = list(answers) or ["y"]
        self._release = release
        self._lock = threading.Lock()
        self.asked: list[str] = []

    def ask(self, prompt_text: str) -> str:
        if self._release is not None:
            self._release.wait(timeout=5)
        with self._lock:
            self.asked.append(prompt_text)
            if len(self._answers) > 1:
                return self._answers.pop(0)
            return self._answers[0]


def fast_fetcher(source: Any, *, max_attempts: int = 3) -> RetryingFetcher:
    """RetryingFetcher with zero backoff."""
    return RetryingFetcher(
        source,
        max_attempts=max_attempts,
        backoff_multiplier=0,
        backoff_min=0,
        backoff_max=0,
    )


def collect_rounds(engine: FrontierEngine, start: Node) -> list[RoundState]:
    """Drive a traversal to completion and return every emitted state."""

    async def run() -> list[RoundState]:
        return [state async for state in engine.traverse(start)]

    return asyncio.run(run())


def edge_ids(state: RoundState) -> list[tuple[str, str]]:
    return [(e.source.id, e.target.id) for e in state.edges]


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Undo logging configuration done by CLI invocations."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    app_level = logging.getLogger("venuecrawl").level
    yield
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("venuecrawl").setLevel(app_level)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer VENUECRAWL_* variables out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("VENUECRAWL_"):
            monkeypatch.delenv(key)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def settings(tmp_path: Path) -> CrawlSettings:
    """Settings rooted at a temp directory with zero retry backoff."""
    return CrawlSettings.from_cli(work_dir=tmp_path).with_overrides(
        retry={"backoff_multiplier": 0, "backoff_min": 0, "backoff_max": 0, "max_attempts": 3},
    )


@pytest.fixture
def example_source() -> FakeGraphSource:
    return FakeGraphSource(EXAMPLE_GRAPH)


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    """`-v` invocations enable telemetry for the rest of the process."""
    yield
    from venuecrawl.services.telemetry import _current_span, disable_telemetry

    disable_telemetry()
    _current_span.set(None)
