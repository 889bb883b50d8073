"""Shared Click pieces for gqlorm commands.

:class:`GqlCommand` adds an eager ``--examples`` flag so ``--help`` stays
short. :func:`source_options` and :func:`target_options` declare the flags
every schema-reading command accepts.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import click

F = TypeVar("F", bound=Callable[..., Any])

DB_CHOICES = ["sqlite", "postgres", "postgresql", "mysql"]


def parse_header_option(
    _ctx: click.Context, _param: click.Parameter, values: tuple[str, ...]
) -> dict[str, str]:
    """Click callback turning repeated ``-H key:value`` into a dict."""
    from gqlorm.infrastructure.introspection import parse_headers

    try:
        return parse_headers(values)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


def header_option(func: F) -> F:
    return click.option(
        "-H",
        "--header",
        "headers",
        multiple=True,
        callback=parse_header_option,
        help="Request header as key:value (repeatable).",
    )(func)


def source_options(*, headers: bool = True) -> Callable[[F], F]:
    """``--schema`` and ``--url`` (plus ``-H`` unless *headers* is off)."""

    def decorator(func: F) -> F:
        if headers:
            func = header_option(func)
        func = click.option("--url", default=None, help="GraphQL endpoint to introspect.")(func)
        return click.option(
            "--schema",
            type=click.Path(exists=True),
            help="SDL file, directory of SDL files, or introspection JSON.",
        )(func)

    return decorator


def target_options(func: F) -> F:
    """``--orm`` and ``--db``, overriding the configured target when given."""
    func = click.option(
        "--db",
        type=click.Choice(DB_CHOICES, case_sensitive=False),
        default=None,
        help="SQL dialect.",
    )(func)
    return click.option(
        "--orm", default=None, help="ORM backend (diesel, sea_orm, or a plugin emitter)."
    )(func)


class GqlCommand(click.Command):
    """A command whose ``examples`` text is shown by ``--examples``."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=self._show_examples,
                    help="Show usage examples and exit.",
                )
            )

    def _show_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(self.examples)
        ctx.exit(0)
