"""InitService: write a starter ``gqlorm.toml`` and optionally generate."""

from __future__ import annotations

import logging
from pathlib import Path

from gqlorm.config.discovery import CONFIG_FILENAME
from gqlorm.config.models import DEFAULT_OUTPUT_DIR, normalize_db, normalize_orm
from gqlorm.infrastructure.templates import build_template_environment
from gqlorm.services.result import ServiceError, ServiceResult
from gqlorm.services.telemetry import traced

logger = logging.getLogger(__name__)


def render_config(
    *,
    url: str | None,
    schema: str | None,
    orm: str,
    db: str,
    output_dir: Path,
    headers: dict[str, str],
    generate_migrations: bool = True,
    generate_entities: bool = True,
) -> str:
    env = build_template_environment("config")
    return env.get_template("gqlorm.toml.j2").render(
        url=url,
        schema=schema,
        orm=normalize_orm(orm),
        db=normalize_db(db),
        output_dir=output_dir.as_posix(),
        headers=headers,
        generate_migrations=generate_migrations,
        generate_entities=generate_entities,
    )


class InitService:
    """Bootstrap a project: config file first, then an optional first generation."""

    @staticmethod
    @traced
    def init(
        root: Path,
        *,
        url: str | None = None,
        schema: str | None = None,
        orm: str = "diesel",
        db: str = "sqlite",
        output_dir: Path = DEFAULT_OUTPUT_DIR,
        headers: dict[str, str] | None = None,
        force: bool = False,
        generate: bool = True,
    ) -> ServiceResult:
        op = "init"
        root = root.resolve()
        config_path = root / CONFIG_FILENAME

        if bool(url) == bool(schema):
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="INVALID_SOURCE",
                    message="Pass exactly one of --url or --schema",
                ),
            )
        if config_path.exists() and not force:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="ALREADY_INITIALIZED",
                    message=f"{config_path} already exists; use --force to overwrite",
                    detail={"path": str(config_path)},
                ),
            )

        content = render_config(
            url=url,
            schema=schema,
            orm=orm,
            db=db,
            output_dir=output_dir,
            headers=headers or {},
        )
        root.mkdir(parents=True, exist_ok=True)
        config_path.write_text(content, encoding="utf-8")
        logger.debug("Wrote %s", config_path)

        data: dict[str, object] = {"config_path": str(config_path), "generated": None}
        if not generate:
            return ServiceResult(ok=True, op=op, data=data)

        from gqlorm.config.settings import GqlormSettings
        from gqlorm.infrastructure.project import Project
        from gqlorm.services.generate import GenerateService

        settings = GqlormSettings.from_cli(config_path=str(config_path), project_root=root)
        result = GenerateService(Project(settings)).generate()
        if not result.ok:
            return ServiceResult(
                ok=False, op=op, data=data, error=result.error, warnings=result.warnings
            )
        data["generated"] = result.data
        return ServiceResult(ok=True, op=op, data=data, warnings=result.warnings)
