"""CrawlService — resolve a start node, run the traversal, write snapshots.

Checkpoint cadence is decided here, not in the engine: with the default
``power-of-two`` cadence, rounds 1, 2, 4, 8, ... are written as they
complete, and the final state is always written once at termination.
A crawl that stops on a fetch failure still writes that final state.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from venuecrawl.domain.errors import FetchError
from venuecrawl.domain.types import (
    RoundState,
    SnapshotCadence,
    StopReason,
    is_power_of_two,
)
from venuecrawl.services._helpers import now_compact, safe_dirname
from venuecrawl.services.engine import FrontierEngine
from venuecrawl.services.fetch import RetryingFetcher
from venuecrawl.services.result import ServiceError, ServiceResult
from venuecrawl.services.telemetry import get_current_span, traced

if TYPE_CHECKING:
    from collections.abc import Callable

    from venuecrawl.config.settings import CrawlSettings
    from venuecrawl.domain.ports import (
        ConfirmationPrompt,
        GraphSource,
        SnapshotSink,
    )
    from venuecrawl.domain.types import Node

logger = structlog.get_logger(__name__)


def should_checkpoint(cadence: SnapshotCadence, iteration: int) -> bool:
    """Whether an intermediate round is written under *cadence*."""
    if cadence is SnapshotCadence.EVERY:
        return True
    if cadence is SnapshotCadence.POWER_OF_TWO:
        return is_power_of_two(iteration)
    return False


def _node_dict(node: Node) -> dict[str, str]:
    return {"id": node.id, "label": node.label}


class CrawlService:
    """Runs crawls against a source that provides both lookups.

    Parameters:
        settings: Resolved settings (crawl, retry and snapshot sections).
        source: Adjacency + node source (e.g. FoursquareSource).
        prompt: Operator prompt, or None for non-interactive runs.
        sink_factory: Builds the snapshot sink for a run directory.
    """

    def __init__(
        self,
        settings: CrawlSettings,
        source: GraphSource,
        *,
        prompt: ConfirmationPrompt | None = None,
        sink_factory: Callable[[Path], SnapshotSink] | None = None,
    ) -> None:
        if sink_factory is None:
            from venuecrawl.infrastructure.snapshots import CsvSnapshotWriter

            sink_factory = CsvSnapshotWriter
        self._settings = settings
        self._source = source
        self._prompt = prompt
        self._sink_factory = sink_factory

    def _run_dir(self, start: Node) -> Path:
        base = Path(self._settings.snapshot.output_dir)
        if not base.is_absolute():
            base = self._settings.work_dir / base
        return base / f"{now_compact()}-{safe_dirname(start.label or start.id)}"

    def build_engine(self) -> FrontierEngine:
        crawl = self._settings.crawl
        retry = self._settings.retry
        return FrontierEngine(
            RetryingFetcher.from_config(self._source, retry),
            prompt=self._prompt,
            concurrency=crawl.concurrency,
            max_iterations=crawl.max_iterations,
            gate_policy=crawl.gate_policy,
            assume_yes=retry.assume_yes,
        )

    @traced
    async def lookup(self, node_id: str) -> ServiceResult:
        """Resolve a single node through the node source."""
        try:
            node = await self._source.lookup_node(node_id)
        except FetchError as exc:
            return ServiceResult(
                ok=False,
                op="lookup",
                error=ServiceError(
                    code=exc.code,
                    message=str(exc),
                    detail={"node_id": node_id},
                ),
            )
        return ServiceResult(ok=True, op="lookup", data=_node_dict(node))

    @traced
    async def crawl(self, start_id: str) -> ServiceResult:
        """Crawl outward from *start_id* until exhausted, capped, or failed."""
        try:
            start = await self._source.lookup_node(start_id)
        except FetchError as exc:
            return ServiceResult(
                ok=False,
                op="crawl",
                error=ServiceError(
                    code="START_LOOKUP_FAILED",
                    message=f"Could not resolve start node {start_id!r}: {exc}",
                    detail={"node_id": start_id, "cause": exc.code},
                ),
            )

        run_dir = self._run_dir(start)
        sink = self._sink_factory(run_dir)
        cadence = self._settings.snapshot.cadence
        engine = self.build_engine()
        log = logger.bind(start_id=start.id)
        log.info("crawl.start", label=start.label, run_dir=str(run_dir))

        snapshots: list[str] = []
        written: int | None = None
        async for state in engine.traverse(start):
            if should_checkpoint(cadence, state.iteration):
                snapshots.append(str(sink.write(state)))
                written = state.iteration

        outcome = engine.outcome
        assert outcome is not None
        final: RoundState = outcome.final_state
        if written != final.iteration:
            snapshots.append(str(sink.write(final)))

        span = get_current_span()
        if span:
            span.annotate("rounds", final.iteration)
            span.annotate("requests", final.request_count)

        data: dict[str, Any] = {
            "start": _node_dict(start),
            "stop_reason": outcome.reason.value,
            "iterations": final.iteration,
            "requests": final.request_count,
            "node_count": len(final.nodes),
            "edge_count": len(final.edges),
            "output_dir": str(run_dir),
            "snapshots": snapshots,
        }
        warnings: list[str] = []
        if outcome.reason is StopReason.FAILED and outcome.error is not None:
            err = outcome.error
            data["error"] = {"code": err.code, "message": str(err), "node_id": err.node_id}
            warnings.append(
                f"Crawl stopped during round {final.iteration + 1} ({err.code}); "
                f"partial results through round {final.iteration} were kept"
            )
        elif outcome.reason is StopReason.ITERATION_LIMIT:
            warnings.append(f"Stopped at the iteration limit ({final.iteration})")

        log.info(
            "crawl.stopped",
            reason=outcome.reason.value,
            iterations=final.iteration,
            requests=final.request_count,
        )
        return ServiceResult(ok=True, op="crawl", data=data, warnings=warnings)
