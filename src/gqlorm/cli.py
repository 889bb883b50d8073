"""``gqlorm`` entry point: global flags, then one of the registered commands."""

from __future__ import annotations

import click

from gqlorm import __version__
from gqlorm.commands import register_commands
from gqlorm.commands._context import AppContext
from gqlorm.config.settings import GqlormSettings


def _run_default(ctx: click.Context, settings: GqlormSettings) -> None:
    """Bare ``gqlorm`` regenerates a configured project, else prints help."""
    if settings.config_path is None:
        click.echo(ctx.get_help())
        return
    from gqlorm.commands.generate import generate

    ctx.invoke(generate)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="gqlorm")
@click.option("-c", "--config", "config_path", default=None, help="Path to gqlorm.toml.")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Only print written paths or a status line.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logs, error detail and stage timings.")
@click.option("--log-json", is_flag=True, help="Emit logs on stderr as JSON lines.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
) -> None:
    """gqlorm: GraphQL schema to Rust ORM entities and SQL migrations.

    Without a subcommand, runs ``generate`` when a config file is found.
    """
    settings = GqlormSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        _run_default(ctx, settings)


register_commands(cli)
