"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO); renderers are
dispatched by ``result.op`` in :func:`render_result`. Unknown ops fall
through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from gqlorm.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from gqlorm.services.result import ServiceResult

type Renderer = Callable[..., None]


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
    """Minimal output for ``--quiet``: written paths, or the status line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {msg}"
    written = result.data.get("written")
    if written:
        return "\n".join(written)
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult, note: str = "") -> None:
    label = Text("OK", style="gql.ok")
    op = Text(f"  {result.op}", style="gql.op")
    if note:
        console.print(label, op, Text(f"  ({note})", style="dim"), end="")
    else:
        console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="gql.key")
    if key.endswith(("_dir", "_path", "_config")):
        v = Text(str(value), style="gql.path")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta, including the telemetry span tree (verbose only)."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
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
    label = Text("ERROR", style="gql.error")
    op = Text(f"  {result.op}", style="gql.op")
    console.print(label, op, Text(" - "), Text(msg))
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Generate / plan ───────────────────────────────────────────────────


def _render_generate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result, "dry run" if d.get("dry_run") else "")
    _field(console, "orm", d.get("orm", ""))
    _field(console, "db", d.get("db", ""))
    _field(console, "output_dir", d.get("output_dir", ""))

    summary = d.get("summary", {})
    for key in ("entities", "relationships", "migrations", "deferred_constraints", "files"):
        if key in summary:
            _field(console, key, summary[key])

    if d.get("dry_run"):
        for path in d.get("files", []):
            console.print(f"    [gql.path]{path}[/gql.path]")
    else:
        written = d.get("written", [])
        _field(console, "written", len(written))
        if verbose:
            for path in written:
                console.print(f"    [gql.path]{path}[/gql.path]")
    if verbose:
        _render_meta(console, result)


def _render_plan(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "orm", d.get("orm", ""))
    _field(console, "db", d.get("db", ""))

    entities = d.get("entities", [])
    if entities:
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("#", justify="right")
        table.add_column("Entity", style="gql.entity")
        table.add_column("Table", style="gql.table")
        table.add_column("Columns", justify="right")
        table.add_column("References")
        for entity in entities:
            refs = ", ".join(
                fk["references"] + (" (deferred)" if fk["deferred"] else "")
                for fk in entity["foreign_keys"]
            )
            table.add_row(
                str(entity["sequence"]),
                entity["name"],
                entity["table"],
                str(len(entity["columns"])),
                refs,
            )
        console.print(table)

    if verbose:
        for entity in entities:
            console.print(f"\n[gql.entity]{entity['name']}[/gql.entity]")
            for col in entity["columns"]:
                pk = " PK" if col["primary_key"] else ""
                console.print(
                    f"  {col['name']}: [gql.type]{col['sql_type']}[/gql.type]"
                    f" / {col['rust_type']}{pk}"
                )

    enums = d.get("enums", [])
    if enums:
        console.print()
        for enum in enums:
            console.print(
                f"  [gql.type]{enum['name']}[/gql.type] ({enum['storage']}): "
                + ", ".join(enum["values"])
            )

    deferred = d.get("deferred", [])
    if deferred:
        console.print(f"\n  [gql.deferred]deferred:[/gql.deferred] {', '.join(deferred)}")

    migrations = d.get("migrations", [])
    if migrations:
        console.print()
        for name in migrations:
            console.print(f"  [gql.path]{name}[/gql.path]")
    if verbose:
        _render_meta(console, result)


# ── Init / integrate ──────────────────────────────────────────────────


def _render_init(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "config_path", d.get("config_path", ""))
    generated = d.get("generated")
    if generated:
        _field(console, "output_dir", generated.get("output_dir", ""))
        summary = generated.get("summary", {})
        for key in ("entities", "migrations", "files"):
            if key in summary:
                _field(console, key, summary[key])
    if verbose:
        _render_meta(console, result)


def _render_integrate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "codegen_config", d.get("codegen_config", ""))
    _field(console, "section_added", d.get("section_added", False))
    scripts = d.get("scripts_added", [])
    if scripts:
        _field(console, "scripts_added", ", ".join(scripts))
    console.print("\n  Run 'gqlorm generate' to generate your Rust database code.")


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    "generate": _render_generate,
    "plan": _render_plan,
    "init": _render_init,
    "integrate": _render_integrate,
}
