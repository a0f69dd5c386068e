"""Standalone command: crawl outward from a start venue."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import click

from venuecrawl.commands._base import CrawlCommand
from venuecrawl.domain.types import GatePolicy, SnapshotCadence
from venuecrawl.services.crawl import CrawlService

if TYPE_CHECKING:
    from venuecrawl.commands._context import AppContext
    from venuecrawl.config.settings import CrawlSettings
    from venuecrawl.services.result import ServiceResult


_CRAWL_EXAMPLES = """\
  venuecrawl crawl 4b19f917f964a520abe623e3
  venuecrawl crawl 4b19f917f964a520abe623e3 --max-iterations 8
  venuecrawl crawl 4b19f917f964a520abe623e3 --concurrency 4 --cadence every
  venuecrawl --no-interact crawl 4b19f917f964a520abe623e3 --gate-policy traversal
  venuecrawl --json crawl 4b19f917f964a520abe623e3 -o /tmp/crawls"""


async def _run(app: AppContext, settings: CrawlSettings, start_id: str) -> ServiceResult:
    async with app.open_source(settings) as source:
        service = CrawlService(settings, source, prompt=app.prompt())
        return await service.crawl(start_id)


@click.command(cls=CrawlCommand, examples=_CRAWL_EXAMPLES)
@click.argument("start_id")
@click.option(
    "--max-iterations", type=click.IntRange(min=1), default=None, help="Stop after N rounds."
)
@click.option(
    "--concurrency", type=click.IntRange(min=1), default=None, help="Concurrent lookups per round."
)
@click.option(
    "--gate-policy",
    type=click.Choice([p.value for p in GatePolicy]),
    default=None,
    help="Scope of a retry confirmation answer.",
)
@click.option(
    "--cadence",
    type=click.Choice([c.value for c in SnapshotCadence]),
    default=None,
    help="Which rounds get a snapshot written.",
)
@click.option("-o", "--output-dir", default=None, help="Directory for run snapshots.")
@click.pass_obj
def crawl(
    app: AppContext,
    start_id: str,
    max_iterations: int | None,
    concurrency: int | None,
    gate_policy: str | None,
    cadence: str | None,
    output_dir: str | None,
) -> None:
    """Breadth-first crawl of next venues, starting at START_ID."""
    settings = app.settings.with_overrides(
        crawl={
            "max_iterations": max_iterations,
            "concurrency": concurrency,
            "gate_policy": gate_policy,
        },
        snapshot={"cadence": cadence, "output_dir": output_dir},
    )
    app.emit(asyncio.run(_run(app, settings, start_id)))
