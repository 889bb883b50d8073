"""Config file discovery and loading.

Walk-up finder locates ``gqlorm.toml`` (or a GraphQL Code Generator
``codegen.yml``), similar to how git finds ``.git/``. Supports the
``GQLORM_CONFIG`` env var and the ``--config`` CLI flag.

Every file is normalized to the ``gqlorm.toml`` layout
(``{"source": ..., "codegen": ..., "plugins": ...}``) and ``${VAR}`` /
``${VAR:-default}`` references in string values are expanded.
"""

from __future__ import annotations

import os
import re
import tomllib
from pathlib import Path
from typing import Any

import click
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

CONFIG_FILENAME = "gqlorm.toml"
YAML_FILENAMES = ("codegen.yml", "codegen.yaml")
CONFIG_FILENAMES = (CONFIG_FILENAME, *YAML_FILENAMES)
CONFIG_ENV_VAR = "GQLORM_CONFIG"
YAML_SECTION = "rust_codegen"

_SECTIONS = frozenset({"source", "codegen", "plugins"})
_SOURCE_KEYS = frozenset({"url", "path", "headers", "timeout"})
_ENV_REF = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for a config file.

    ``gqlorm.toml`` wins over ``codegen.yml`` in the same directory.
    Checks the ``GQLORM_CONFIG`` env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p
        return None

    current = (start or Path.cwd()).resolve()
    while True:
        for name in CONFIG_FILENAMES:
            candidate = current / name
            if candidate.is_file():
                return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def find_yaml_config(root: Path) -> Path | None:
    """The ``codegen.yml``/``codegen.yaml`` directly inside *root*, if any."""
    for name in YAML_FILENAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def substitute_env(value: Any, *, environ: dict[str, str] | None = None) -> Any:
    """Expand ``${VAR}`` and ``${VAR:-default}`` in every string inside *value*."""
    env = os.environ if environ is None else environ

    def expand(text: str) -> str:
        def repl(match: re.Match[str]) -> str:
            name, default = match.group(1), match.group(2)
            if name in env:
                return env[name]
            if default is not None:
                return default
            msg = f"Environment variable {name!r} is not set and has no default"
            raise click.ClickException(msg)

        return _ENV_REF.sub(repl, text)

    if isinstance(value, str):
        return expand(value)
    if isinstance(value, dict):
        return {k: substitute_env(v, environ=env) for k, v in value.items()}
    if isinstance(value, list):
        return [substitute_env(v, environ=env) for v in value]
    return value


def _split_flat(data: dict[str, Any]) -> dict[str, Any]:
    """Move a flat single-table config into ``[source]``/``[codegen]`` sections."""
    if _SECTIONS & data.keys():
        return data
    source = {k: v for k, v in data.items() if k in _SOURCE_KEYS}
    codegen = {k: v for k, v in data.items() if k not in _SOURCE_KEYS}
    return {"source": source, "codegen": codegen}


def _yaml_schema_source(schema: Any) -> dict[str, Any]:
    """Translate a Code Generator ``schema:`` entry into a ``[source]`` table."""
    if isinstance(schema, list):
        schema = schema[0] if schema else None
    if schema is None:
        return {}
    if isinstance(schema, str):
        if schema.startswith(("http://", "https://")):
            return {"url": schema}
        return {"path": schema}
    if isinstance(schema, dict):
        if _SOURCE_KEYS & schema.keys():
            return {k: v for k, v in schema.items() if k in _SOURCE_KEYS}
        # ``{"https://api/graphql": {"headers": {...}}}``
        if len(schema) == 1:
            ((location, options),) = schema.items()
            source = _yaml_schema_source(str(location))
            if isinstance(options, dict) and "headers" in options:
                source["headers"] = dict(options["headers"])
            return source
    msg = f"Unsupported 'schema' entry in codegen config: {schema!r}"
    raise click.ClickException(msg)


def load_yaml_data(path: Path) -> dict[str, Any]:
    try:
        raw = YAML(typ="safe").load(path.read_text(encoding="utf-8"))
    except YAMLError as exc:
        msg = f"Invalid YAML in {path}: {exc}"
        raise click.ClickException(msg) from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        msg = f"Invalid YAML in {path}: expected a mapping at the top level"
        raise click.ClickException(msg)
    return raw


def read_config_file(path: Path) -> dict[str, Any]:
    """Load *path* into the ``gqlorm.toml`` section layout, env vars expanded."""
    if path.suffix in (".yml", ".yaml"):
        raw = load_yaml_data(path)
        data: dict[str, Any] = {
            "source": _yaml_schema_source(raw.get("schema")),
            "codegen": dict(raw.get(YAML_SECTION) or {}),
        }
    else:
        try:
            data = _split_flat(tomllib.loads(path.read_text(encoding="utf-8")))
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {path}: {exc}"
            raise click.ClickException(msg) from exc
    return substitute_env(data)
