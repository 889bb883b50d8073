"""Command: project initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from gqlorm.commands._base import DB_CHOICES, GqlCommand, header_option

if TYPE_CHECKING:
    from gqlorm.commands._context import AppContext

_INIT_EXAMPLES = """\
  gqlorm init --url https://api.example.com/graphql
  gqlorm init --schema schema.graphql --orm sea_orm --db postgres
  gqlorm init app/ --url http://localhost:4000/graphql -H "Authorization:Bearer ${TOKEN}"
  gqlorm init --schema schema.graphql --no-generate"""


@click.command("init", cls=GqlCommand, examples=_INIT_EXAMPLES)
@click.argument("path", required=False, default=".")
@click.option("--url", default=None, help="GraphQL endpoint to introspect.")
@click.option("--schema", default=None, help="SDL or introspection JSON file (relative to PATH).")
@click.option("--orm", default="diesel", show_default=True, help="ORM backend.")
@click.option(
    "--db",
    type=click.Choice(DB_CHOICES, case_sensitive=False),
    default="sqlite",
    show_default=True,
    help="SQL dialect.",
)
@click.option(
    "-o",
    "--output",
    "output_dir",
    default="./generated",
    show_default=True,
    help="Output directory.",
)
@header_option
@click.option("--force", is_flag=True, help="Overwrite an existing gqlorm.toml.")
@click.option("--no-generate", is_flag=True, help="Only write the config file.")
@click.pass_obj
def init_cmd(
    app: AppContext,
    path: str,
    url: str | None,
    schema: str | None,
    orm: str,
    db: str,
    output_dir: str,
    headers: dict[str, str],
    force: bool,
    no_generate: bool,
) -> None:
    """Write gqlorm.toml and run a first generation."""
    from gqlorm.services.init import InitService

    app.emit(
        InitService.init(
            Path(path),
            url=url,
            schema=schema,
            orm=orm,
            db=db,
            output_dir=Path(output_dir),
            headers=headers,
            force=force,
            generate=not no_generate,
        )
    )
