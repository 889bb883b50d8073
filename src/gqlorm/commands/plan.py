"""Command: preview tables, foreign keys and migration order."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gqlorm.commands._base import GqlCommand, source_options, target_options

if TYPE_CHECKING:
    from gqlorm.commands._context import AppContext


@click.command(
    cls=GqlCommand,
    examples="""\
  gqlorm plan
  gqlorm plan --schema schema.graphql --db postgres
  gqlorm -v plan""",
)
@source_options()
@target_options
@click.pass_obj
def plan(
    app: AppContext,
    schema: str | None,
    url: str | None,
    headers: dict[str, str],
    orm: str | None,
    db: str | None,
) -> None:
    """Show what generate would produce, in dependency order."""
    from gqlorm.services.plan import PlanService

    codegen = app.codegen_with(orm=orm, db=db)
    source = app.source_with(url=url, schema=schema, headers=headers)
    app.emit(PlanService(app.project).plan(codegen=codegen, source=source))
