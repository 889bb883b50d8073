"""Jinja2 template loading with per-project override support."""

from __future__ import annotations

import json
from pathlib import Path

from jinja2 import (
    BaseLoader,
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    StrictUndefined,
)

OVERRIDE_DIR = Path(".gqlorm") / "templates"


def build_template_environment(group: str, *, project_root: Path | None = None) -> Environment:
    """Build a Jinja2 environment with project overrides before packaged defaults.

    Overrides are looked up in ``.gqlorm/templates/<group>/`` first, then in
    the shared ``.gqlorm/templates/`` root, so a project can replace a single
    template without copying the rest.
    """
    loaders: list[BaseLoader] = []
    if project_root is not None:
        template_root = project_root / OVERRIDE_DIR
        loaders.append(FileSystemLoader([str(template_root / group), str(template_root)]))

    loaders.append(PackageLoader("gqlorm", f"templates/{group}"))
    env = Environment(
        loader=ChoiceLoader(loaders),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
        autoescape=False,
    )
    # TOML basic strings share JSON escaping.
    env.filters["toml"] = json.dumps
    return env
