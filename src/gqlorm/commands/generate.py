"""Command: generate Rust entities and SQL migrations."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gqlorm.commands._base import GqlCommand, source_options, target_options

if TYPE_CHECKING:
    from gqlorm.commands._context import AppContext


@click.command(
    cls=GqlCommand,
    examples="""\
  gqlorm generate
  gqlorm generate --schema schema.graphql --db postgres
  gqlorm generate --url https://api.example.com/graphql -H "Authorization:Bearer $TOKEN"
  gqlorm generate --orm sea_orm --output src-tauri/src/db
  gqlorm generate --dry-run --json""",
)
@source_options()
@target_options
@click.option("-o", "--output", "output_dir", default=None, help="Output directory.")
@click.option("--dry-run", is_flag=True, help="Report what would be written without writing.")
@click.pass_obj
def generate(
    app: AppContext,
    schema: str | None,
    url: str | None,
    headers: dict[str, str],
    orm: str | None,
    db: str | None,
    output_dir: str | None,
    dry_run: bool,
) -> None:
    """Generate entities and migrations from the configured schema."""
    from gqlorm.services.generate import GenerateService

    codegen = app.codegen_with(orm=orm, db=db, output_dir=output_dir)
    source = app.source_with(url=url, schema=schema, headers=headers)
    app.emit(GenerateService(app.project).generate(dry_run=dry_run, codegen=codegen, source=source))
