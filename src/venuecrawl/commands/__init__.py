"""Subcommand modules for venuecrawl.

Provides register_commands() which uses deferred imports to keep
``venuecrawl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from venuecrawl.commands.crawl import crawl
    from venuecrawl.commands.lookup import lookup

    cli.add_command(crawl)
    cli.add_command(lookup)
