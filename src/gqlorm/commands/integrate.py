"""Command: add gqlorm to an existing GraphQL Code Generator project."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from gqlorm.commands._base import GqlCommand

if TYPE_CHECKING:
    from gqlorm.commands._context import AppContext


@click.command(
    cls=GqlCommand,
    examples="""\
  gqlorm integrate
  gqlorm integrate --output src-tauri/src
  gqlorm integrate --force --no-scripts""",
)
@click.option(
    "-o",
    "--output",
    "output_dir",
    default="./generated",
    show_default=True,
    help="Base directory; generated code goes under <output>/db.",
)
@click.option("--force", is_flag=True, help="Overwrite an existing rust_codegen section.")
@click.option("--no-scripts", is_flag=True, help="Do not add scripts to package.json.")
@click.pass_obj
def integrate(app: AppContext, output_dir: str, force: bool, no_scripts: bool) -> None:
    """Add a rust_codegen section to codegen.yml and npm scripts to package.json."""
    from gqlorm.services.integrate import IntegrateService

    app.emit(
        IntegrateService.integrate(
            Path.cwd(),
            output_dir=Path(output_dir),
            force=force,
            add_scripts=not no_scripts,
        )
    )
