"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Builds the HTTP source and prompt on demand and
centralizes result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from venuecrawl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from venuecrawl.config.settings import CrawlSettings
    from venuecrawl.domain.ports import ConfirmationPrompt
    from venuecrawl.infrastructure.foursquare import FoursquareSource
    from venuecrawl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: CrawlSettings) -> None:
        self.settings = settings

        from venuecrawl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from venuecrawl.services.telemetry import enable_telemetry

            enable_telemetry()

    def open_source(self, settings: CrawlSettings | None = None) -> FoursquareSource:
        """A new Foursquare source; use it as an async context manager."""
        from venuecrawl.infrastructure.foursquare import FoursquareSource

        return FoursquareSource((settings or self.settings).source)

    def prompt(self) -> ConfirmationPrompt | None:
        """Terminal prompt, or None under ``--no-interact``."""
        if self.settings.no_interact:
            return None
        from venuecrawl.infrastructure.prompt import TerminalPrompt

        return TerminalPrompt()

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings go to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
