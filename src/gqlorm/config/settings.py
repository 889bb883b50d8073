"""Unified settings: CLI flags, env vars, and the config file in one object.

Priority chain (highest to lowest):
  1. Init kwargs: CLI flags passed by Click
  2. Env vars: ``GQLORM_*`` prefix, ``__`` for nesting
     (``GQLORM_CODEGEN__DB=postgres``)
  3. Config file: ``gqlorm.toml`` or ``codegen.yml`` discovered via walk-up
  4. Code defaults: baked into the section models
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from gqlorm.config.discovery import find_config, read_config_file
from gqlorm.config.models import CodegenConfig, PluginsConfig, SourceConfig


class ConfigFileSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a discovered ``gqlorm.toml`` or ``codegen.yml``."""

    def __init__(self, settings_cls: type[BaseSettings], config_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if config_path and config_path.is_file():
            self._data = read_config_file(config_path)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for the config path during construction.
_tls = threading.local()


class GqlormSettings(BaseSettings):
    """Unified settings for the gqlorm CLI.

    Attributes:
        project_root: Directory generation paths are relative to (parent of
            the config file, or CWD if none was found).
        config_path: The config file in effect, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "GQLORM_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- config file sections ---
    source: SourceConfig = Field(default_factory=SourceConfig)
    codegen: CodegenConfig = Field(default_factory=CodegenConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the config file source between env vars and defaults."""
        config_path = getattr(_tls, "config_path", None)
        return (
            init_settings,
            env_settings,
            ConfigFileSettingsSource(settings_cls, config_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> GqlormSettings:
        """Construct settings from a CLI invocation.

        Discovers the config file via walk-up (or explicit *config_path*),
        resolves *project_root* from its parent directory, and merges CLI
        flags as highest-priority overrides.
        """
        found: Path | None
        if config_path:
            found = Path(config_path)
            if not found.is_file():
                msg = f"Config file not found: {config_path}"
                raise click.ClickException(msg)
        else:
            found = find_config(project_root)

        resolved_root = project_root
        if resolved_root is None:
            resolved_root = found.parent.resolve() if found else Path.cwd()

        _tls.config_path = found
        try:
            return cls(project_root=resolved_root, config_path=found, **cli_flags)
        finally:
            _tls.config_path = None

    def resolve_path(self, path: Path) -> Path:
        """*path* relative to the project root unless already absolute."""
        return path if path.is_absolute() else self.project_root / path
