"""Rich Console factory and theme for gqlorm output.

Consoles render to a StringIO buffer so renderers return strings.
In non-TTY environments (tests, pipes) Rich disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

GQL_THEME = Theme(
    {
        "gql.ok": "bold green",
        "gql.error": "bold red",
        "gql.warning": "bold yellow",
        "gql.op": "bold cyan",
        "gql.key": "dim",
        "gql.path": "dim",
        "gql.entity": "bold blue",
        "gql.table": "bold",
        "gql.type": "magenta",
        "gql.deferred": "yellow",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    return Console(
        file=StringIO(),
        theme=GQL_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    file = console.file
    if not isinstance(file, StringIO):
        msg = "console is not backed by a StringIO buffer"
        raise TypeError(msg)
    return file.getvalue()
