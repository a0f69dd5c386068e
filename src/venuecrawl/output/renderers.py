"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from venuecrawl.output.console import create_console, get_output, style_for_stop_reason

if TYPE_CHECKING:
    from rich.console import Console

    from venuecrawl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    if result.op == "crawl":
        return str(result.data.get("output_dir", ""))
    if result.op == "lookup":
        return str(result.data.get("id", ""))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="crawl.ok")
    op = Text(f"  {result.op}", style="crawl.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any, *, style: str | None = None) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="crawl.key")
    if style is None:
        if key == "id" or key.endswith("_id"):
            style = "crawl.id"
        elif key.endswith("_dir") or key == "path":
            style = "crawl.path"
        elif key == "label":
            style = "crawl.label"
        else:
            style = ""
    console.print(k, Text(str(value), style=style), end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 10_000:
        style = "bold red"
    elif duration > 1000:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>10.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="crawl.error")
    op = Text(f"  {result.op}", style="crawl.op")
    console.print(label, op, Text(" — "), msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Operation renderers ───────────────────────────────────────────────


def _render_crawl(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a crawl summary: start node, counts, stop reason, snapshots."""
    d = result.data
    _status_line(console, result)
    start = d.get("start", {})
    _field(console, "start_id", start.get("id", ""))
    _field(console, "label", start.get("label", ""))
    reason = str(d.get("stop_reason", ""))
    _field(console, "stop_reason", reason, style=style_for_stop_reason(reason))

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Rounds", style="crawl.count", justify="right")
    table.add_column("Requests", style="crawl.count", justify="right")
    table.add_column("Nodes", style="crawl.count", justify="right")
    table.add_column("Edges", style="crawl.count", justify="right")
    table.add_row(
        str(d.get("iterations", 0)),
        str(d.get("requests", 0)),
        str(d.get("node_count", 0)),
        str(d.get("edge_count", 0)),
    )
    console.print(table)

    error = d.get("error")
    if error:
        console.print(
            f"  [crawl.error]{error.get('code')}[/crawl.error] "
            f"node={error.get('node_id')}: {error.get('message')}"
        )

    _field(console, "output_dir", d.get("output_dir", ""))
    snapshots = d.get("snapshots", [])
    if verbose:
        for path in snapshots:
            console.print(f"    [crawl.path]{path}[/crawl.path]")
        _render_meta(console, result)
    else:
        _field(console, "snapshots", len(snapshots))


def _render_lookup(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "id", result.data.get("id", ""))
    _field(console, "label", result.data.get("label", ""))
    if verbose:
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "crawl": _render_crawl,
    "lookup": _render_lookup,
}
