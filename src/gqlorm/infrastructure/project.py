"""Project: settings, schema acquisition, plugins, and output for one run."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from gqlorm.codegen.builder import build_schema_graph
from gqlorm.domain.errors import SchemaSourceError
from gqlorm.domain.files import GeneratedFile
from gqlorm.infrastructure.filesystem import write_generated_files
from gqlorm.infrastructure.introspection import fetch_introspection
from gqlorm.infrastructure.sdl import load_schema_file

if TYPE_CHECKING:
    from gqlorm.config.models import CodegenConfig, SourceConfig
    from gqlorm.codegen.emitters import EmitterRegistry
    from gqlorm.config.settings import GqlormSettings
    from gqlorm.domain.schema import SchemaGraph
    from gqlorm.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

PROJECT_DIR = ".gqlorm"


class Project:
    """Everything a service needs about the project being generated.

    Constructed at CLI startup from :class:`GqlormSettings` and stored in
    ``click.Context.obj``. The plugin manager and the emitter registry it
    fills are created on first use and belong to this project alone.
    """

    def __init__(self, settings: GqlormSettings) -> None:
        self._settings = settings
        self._plugins: PluginManager | None = None
        self._emitters: EmitterRegistry | None = None

    @property
    def root(self) -> Path:
        return self._settings.project_root

    @property
    def settings(self) -> GqlormSettings:
        return self._settings

    @property
    def codegen(self) -> CodegenConfig:
        return self._settings.codegen

    @property
    def source(self) -> SourceConfig:
        return self._settings.source

    def output_dir(self, codegen: CodegenConfig | None = None) -> Path:
        return self._settings.resolve_path((codegen or self.codegen).output_dir)

    def _load_plugins(self) -> tuple[PluginManager, EmitterRegistry]:
        if self._plugins is None or self._emitters is None:
            from gqlorm.codegen.emitters import EmitterRegistry
            from gqlorm.plugins.manager import PluginManager

            pm = PluginManager(disabled=self._settings.plugins.disabled)
            pm.discover_and_load(local_dir=self.root / PROJECT_DIR / "plugins")
            registry = EmitterRegistry()
            pm.register_emitters(registry)
            self._plugins, self._emitters = pm, registry
        return self._plugins, self._emitters

    @property
    def plugins(self) -> PluginManager:
        """Plugin manager, loaded (and its emitters registered) on first access."""
        return self._load_plugins()[0]

    @property
    def emitters(self) -> EmitterRegistry:
        """Built-in emitters plus those this project's plugins registered."""
        return self._load_plugins()[1]

    def load_schema(self, source: SourceConfig | None = None) -> SchemaGraph:
        """Acquire and build the schema graph from the configured source."""
        source = source or self.source
        source.check()
        if source.url:
            response = fetch_introspection(
                source.url, headers=source.headers, timeout=source.timeout
            )
            return build_schema_graph(introspection=response)
        if source.path is not None:
            path = self._settings.resolve_path(source.path)
            logger.debug("Reading schema from %s", path)
            return load_schema_file(path)
        msg = "No schema source configured; set [source] url or path, or pass --url/--schema"
        raise SchemaSourceError(msg, subject="source")

    def write(self, output_dir: Path, files: tuple[GeneratedFile, ...]) -> list[Path]:
        return write_generated_files(output_dir, files)
