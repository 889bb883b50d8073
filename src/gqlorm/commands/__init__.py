"""Subcommand modules for gqlorm.

:func:`register_commands` uses deferred imports to keep ``gqlorm --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from gqlorm.commands.generate import generate
    from gqlorm.commands.init_cmd import init_cmd
    from gqlorm.commands.integrate import integrate
    from gqlorm.commands.plan import plan

    cli.add_command(generate)
    cli.add_command(plan)
    cli.add_command(init_cmd)
    cli.add_command(integrate)
