"""Standalone command: resolve a single venue."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import click

from venuecrawl.commands._base import CrawlCommand
from venuecrawl.services.crawl import CrawlService

if TYPE_CHECKING:
    from venuecrawl.commands._context import AppContext
    from venuecrawl.services.result import ServiceResult


async def _run(app: AppContext, node_id: str) -> ServiceResult:
    async with app.open_source() as source:
        return await CrawlService(app.settings, source).lookup(node_id)


@click.command(
    cls=CrawlCommand,
    examples="""\
  venuecrawl lookup 4b19f917f964a520abe623e3
  venuecrawl --json lookup 4b19f917f964a520abe623e3""",
)
@click.argument("node_id")
@click.pass_obj
def lookup(app: AppContext, node_id: str) -> None:
    """Show the id and name of one venue."""
    app.emit(asyncio.run(_run(app, node_id)))
