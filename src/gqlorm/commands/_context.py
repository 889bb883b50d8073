"""AppContext: shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Provides lazy Project construction, CLI override
merging, and centralized result emission (stdout/stderr + exit codes).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from gqlorm.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from gqlorm.config.models import CodegenConfig, SourceConfig
    from gqlorm.config.settings import GqlormSettings
    from gqlorm.infrastructure.project import Project
    from gqlorm.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The project is created on first use so ``--help`` and ``--version``
    never touch plugins or the schema source.
    """

    def __init__(self, settings: GqlormSettings) -> None:
        self.settings = settings
        self._project: Project | None = None

        from gqlorm.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose, quiet=settings.quiet, log_json=settings.log_json
        )

        if settings.verbose:
            from gqlorm.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def project(self) -> Project:
        if self._project is None:
            from gqlorm.infrastructure.project import Project

            self._project = Project(self.settings)
        return self._project

    def codegen_with(self, **overrides: Any) -> CodegenConfig:
        """Configured codegen section with non-None CLI *overrides* applied.

        Values go through validation again so aliases like ``SeaOrm`` or
        ``postgresql`` are normalized. Paths are taken relative to the CWD.
        """
        from gqlorm.config.models import CodegenConfig

        update = {k: v for k, v in overrides.items() if v is not None}
        if not update:
            return self.settings.codegen
        if "output_dir" in update:
            update["output_dir"] = Path(update["output_dir"]).resolve()
        return CodegenConfig.model_validate({**self.settings.codegen.model_dump(), **update})

    def source_with(
        self,
        *,
        url: str | None = None,
        schema: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> SourceConfig:
        """A source from ``--url``/``--schema`` if given, else the configured one."""
        from gqlorm.config.models import SourceConfig

        configured = self.settings.source
        if url is None and schema is None:
            if headers:
                return configured.model_copy(update={"headers": {**configured.headers, **headers}})
            return configured
        return SourceConfig(
            url=url,
            path=Path(schema).resolve() if schema else None,
            headers={**configured.headers, **(headers or {})},
            timeout=configured.timeout,
        )

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout; warnings go to stderr outside JSON mode.
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
