"""Terminal confirmation prompt."""

from __future__ import annotations

import click


class TerminalPrompt:
    """Reads one line from the terminal via :func:`click.prompt`.

    An aborted prompt (end of input, Ctrl-C) reads as ``"no"`` so the crawl
    stops cleanly and keeps its results.
    """

    def ask(self, prompt_text: str) -> str:
        try:
            return click.prompt(
                prompt_text.rstrip(),
                default="",
                show_default=False,
                err=True,
            )
        except click.Abort:
            return "no"
