"""Tests for CrawlService — start lookup, checkpoint cadence, snapshots."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from tests.conftest import EXAMPLE_GRAPH, FakeGraphSource, FakePrompt
from venuecrawl.config.settings import CrawlSettings
from venuecrawl.domain.errors import PermanentFetchError, TransientFetchError
from venuecrawl.domain.types import SnapshotCadence
from venuecrawl.infrastructure.snapshots import read_snapshot
from venuecrawl.services.crawl import CrawlService, should_checkpoint
from venuecrawl.services.result import ServiceResult


def _crawl(
    settings: CrawlSettings,
    source: FakeGraphSource,
    start_id: str = "A",
    prompt: FakePrompt | None = None,
) -> ServiceResult:
    return asyncio.run(CrawlService(settings, source, prompt=prompt).crawl(start_id))


def _iterations(result: ServiceResult) -> list[int]:
    return [int(Path(p).name) for p in result.data["snapshots"]]


class TestShouldCheckpoint:
    @pytest.mark.parametrize(
        ("cadence", "written"),
        [
            (SnapshotCadence.POWER_OF_TWO, [1, 2, 4, 8]),
            (SnapshotCadence.EVERY, list(range(1, 10))),
            (SnapshotCadence.FINAL, []),
        ],
    )
    def test_cadences(self, cadence: SnapshotCadence, written: list[int]) -> None:
        assert [i for i in range(1, 10) if should_checkpoint(cadence, i)] == written


class TestCrawl:
    def test_complete_crawl_summary(
        self, settings: CrawlSettings, example_source: FakeGraphSource
    ) -> None:
        result = _crawl(settings, example_source)
        assert result.ok
        assert result.op == "crawl"
        assert result.warnings == []
        data = result.data
        assert data["start"] == {"id": "A", "label": "Venue A"}
        assert data["stop_reason"] == "complete"
        assert data["iterations"] == 3
        assert data["requests"] == 4
        assert data["node_count"] == 4
        assert data["edge_count"] == 4
        assert "error" not in data

    def test_run_directory_layout(
        self, settings: CrawlSettings, example_source: FakeGraphSource, tmp_path: Path
    ) -> None:
        result = _crawl(settings, example_source)
        run_dir = Path(result.data["output_dir"])
        assert run_dir.parent == tmp_path / "out"
        assert run_dir.name.endswith("-Venue-A")
        assert run_dir.name[8] == "T"

    def test_power_of_two_cadence_plus_final(
        self, settings: CrawlSettings, example_source: FakeGraphSource
    ) -> None:
        assert _iterations(_crawl(settings, example_source)) == [1, 2, 3]

    def test_final_not_written_twice(self, settings: CrawlSettings) -> None:
        # Two rounds: round 2 is both a power of two and the final round.
        source = FakeGraphSource({"A": ["B"], "B": []})
        assert _iterations(_crawl(settings, source)) == [1, 2]

    def test_final_only_cadence(
        self, settings: CrawlSettings, example_source: FakeGraphSource
    ) -> None:
        final_only = settings.with_overrides(snapshot={"cadence": "final"})
        assert _iterations(_crawl(final_only, example_source)) == [3]

    def test_snapshot_contents(
        self, settings: CrawlSettings, example_source: FakeGraphSource
    ) -> None:
        result = _crawl(settings, example_source)
        nodes, edges = read_snapshot(Path(result.data["snapshots"][-1]))
        assert nodes == [
            ("A", "Venue A"),
            ("B", "Venue B"),
            ("C", "Venue C"),
            ("D", "Venue D"),
        ]
        assert edges == [("A", "B"), ("A", "C"), ("B", "C"), ("B", "D")]

    def test_iteration_limit_warning(
        self, settings: CrawlSettings, example_source: FakeGraphSource
    ) -> None:
        limited = settings.with_overrides(crawl={"max_iterations": 1})
        result = _crawl(limited, example_source)
        assert result.ok
        assert result.data["stop_reason"] == "iteration_limit"
        assert result.data["iterations"] == 1
        assert len(result.warnings) == 1

    def test_absolute_output_dir(
        self, settings: CrawlSettings, example_source: FakeGraphSource, tmp_path: Path
    ) -> None:
        elsewhere = tmp_path / "elsewhere"
        moved = settings.with_overrides(snapshot={"output_dir": str(elsewhere)})
        result = _crawl(moved, example_source)
        assert Path(result.data["output_dir"]).parent == elsewhere


class TestFailures:
    def test_unknown_start_node(self, settings: CrawlSettings) -> None:
        result = _crawl(settings, FakeGraphSource(EXAMPLE_GRAPH), start_id="nope")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "START_LOOKUP_FAILED"
        assert result.error.detail["cause"] == "PERMANENT"

    def test_failed_round_keeps_partial_snapshot(self, settings: CrawlSettings) -> None:
        graph = {"A": ["B"], "B": ["C"], "C": ["D"], "D": []}
        source = FakeGraphSource(graph, failures={"C": [PermanentFetchError("C", "HTTP 403")]})
        result = _crawl(settings, source)

        assert result.ok
        assert result.data["stop_reason"] == "failed"
        assert result.data["iterations"] == 2
        assert result.data["error"]["code"] == "PERMANENT"
        assert result.data["error"]["node_id"] == "C"
        assert "round 3" in result.warnings[0]
        assert _iterations(result) == [1, 2]
        nodes, _ = read_snapshot(Path(result.data["snapshots"][-1]))
        assert [n for n, _ in nodes] == ["A", "B", "C"]

    def test_failure_after_unwritten_round_writes_final(self, settings: CrawlSettings) -> None:
        graph = {"A": ["B"], "B": ["C"], "C": ["D"], "D": ["E"], "E": []}
        source = FakeGraphSource(graph, failures={"D": [PermanentFetchError("D", "HTTP 403")]})
        result = _crawl(settings, source)
        assert _iterations(result) == [1, 2, 3]

    def test_failure_in_first_round_writes_start_only(self, settings: CrawlSettings) -> None:
        source = FakeGraphSource(EXAMPLE_GRAPH, failures={"A": [PermanentFetchError("A", "403")]})
        result = _crawl(settings, source)
        assert result.data["iterations"] == 0
        assert _iterations(result) == [0]
        nodes, edges = read_snapshot(Path(result.data["snapshots"][0]))
        assert nodes == [("A", "Venue A")]
        assert edges == []

    def test_declined_prompt(self, settings: CrawlSettings) -> None:
        source = FakeGraphSource(EXAMPLE_GRAPH, failures={"B": [TransientFetchError("B", "503")]})
        prompt = FakePrompt("no")
        result = _crawl(settings, source, prompt=prompt)
        assert result.data["error"]["code"] == "RETRY_DECLINED"
        assert len(prompt.asked) == 1

    def test_non_interactive_assume_yes(self, settings: CrawlSettings) -> None:
        source = FakeGraphSource(EXAMPLE_GRAPH, failures={"B": [TransientFetchError("B", "503")]})
        yes = settings.with_overrides(retry={"assume_yes": True})
        result = _crawl(yes, source, prompt=None)
        assert result.data["stop_reason"] == "complete"


class TestLookup:
    def test_found(self, settings: CrawlSettings, example_source: FakeGraphSource) -> None:
        result = asyncio.run(CrawlService(settings, example_source).lookup("B"))
        assert result.ok
        assert result.data == {"id": "B", "label": "Venue B"}

    def test_not_found(self, settings: CrawlSettings, example_source: FakeGraphSource) -> None:
        result = asyncio.run(CrawlService(settings, example_source).lookup("zzz"))
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "PERMANENT"
