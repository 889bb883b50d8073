"""Read schema files from disk: SDL text, a directory of SDL files, or saved introspection JSON."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from graphql.language import DocumentNode

from gqlorm.codegen.builder import build_schema_graph, parse_sdl
from gqlorm.domain.errors import SchemaSourceError
from gqlorm.domain.schema import SchemaGraph

SDL_SUFFIXES = (".graphql", ".graphqls", ".gql")


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read schema file {path}: {exc.strerror or exc}"
        raise SchemaSourceError(msg, subject=str(path)) from exc


def read_sdl(path: Path) -> DocumentNode:
    """Parse SDL from *path*.

    A directory is read as every SDL file inside it, sorted by name and
    concatenated, so type extensions may live in separate files.
    """
    if path.is_dir():
        files = sorted(p for p in path.rglob("*") if p.suffix in SDL_SUFFIXES)
        if not files:
            msg = f"No GraphQL schema files found in {path}"
            raise SchemaSourceError(msg, subject=str(path))
        text = "\n\n".join(_read_text(p) for p in files)
    else:
        text = _read_text(path)
    return parse_sdl(text, source_name=path.name)


def read_introspection_file(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(_read_text(path))
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in {path}: {exc.msg} (line {exc.lineno})"
        raise SchemaSourceError(msg, subject=str(path)) from exc
    if not isinstance(data, dict):
        msg = f"{path} does not contain an introspection result object"
        raise SchemaSourceError(msg, subject=str(path))
    return data


def load_schema_file(path: Path) -> SchemaGraph:
    """Build a schema graph from an SDL file/directory or a ``.json`` introspection dump."""
    if not path.exists():
        msg = f"Schema file not found: {path}"
        raise SchemaSourceError(msg, subject=str(path))
    if path.suffix == ".json":
        return build_schema_graph(introspection=read_introspection_file(path))
    return build_schema_graph(document=read_sdl(path))
