"""Rich Console factory and theme for venuecrawl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract. In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

CRAWL_THEME = Theme(
    {
        "crawl.ok": "bold green",
        "crawl.error": "bold red",
        "crawl.warning": "bold yellow",
        "crawl.op": "bold cyan",
        "crawl.key": "dim",
        "crawl.id": "bold blue",
        "crawl.path": "dim",
        "crawl.label": "bold",
        "crawl.count": "magenta",
    }
)

_STOP_STYLES: dict[str, str] = {
    "complete": "crawl.ok",
    "iteration_limit": "crawl.warning",
    "failed": "crawl.error",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=CRAWL_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_stop_reason(reason: str) -> str:
    """Return the Rich style name for a crawl stop reason."""
    return _STOP_STYLES.get(reason, "")
