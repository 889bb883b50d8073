"""GenerateService: schema in, entity sources and migrations on disk.

Pipeline: CONFIG → BUILD → RESOLVE → INFER → ORDER → EMIT → WRITE → HOOKS → RESPOND
"""

from __future__ import annotations

import logging

from gqlorm.config.models import CodegenConfig, SourceConfig
from gqlorm.domain.errors import GenerationError
from gqlorm.services._helpers import build_plan_traced
from gqlorm.services.base import BaseService
from gqlorm.services.result import ServiceError, ServiceResult
from gqlorm.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


class GenerateService(BaseService):
    """Runs a full generation and writes the result."""

    @traced
    def generate(
        self,
        *,
        dry_run: bool = False,
        codegen: CodegenConfig | None = None,
        source: SourceConfig | None = None,
    ) -> ServiceResult:
        """Generate every file; with *dry_run* nothing is written.

        Either every file is written or none is: errors surface before any
        file is touched, and a failed write rolls back the files written so far.
        """
        op = "generate"
        codegen = codegen or self._project.codegen
        warnings: list[str] = list(self._project.plugins.warnings)

        try:
            pipeline, plan = build_plan_traced(self._project, codegen, source)
            with trace_span("emit") as span:
                result = pipeline.emit(plan)
                if span:
                    span.annotate("files", len(result.files))
        except GenerationError as exc:
            logger.debug("Generation failed at %s: %s", exc.stage, exc.message)
            return ServiceResult.failure(op, exc, warnings=warnings)

        warnings.extend(result.summary.warnings)
        output_dir = self._project.output_dir(codegen)
        summary = result.summary.to_dict()

        written: list[str] = []
        if not dry_run:
            with trace_span("write"):
                try:
                    paths = self._project.write(output_dir, result.files)
                except (OSError, ValueError) as exc:
                    return ServiceResult(
                        ok=False,
                        op=op,
                        error=ServiceError(
                            code="WRITE_ERROR",
                            message=f"Could not write generated files to {output_dir}: {exc}",
                            detail={"stage": "write", "subject": str(output_dir)},
                        ),
                        warnings=warnings,
                    )
            written = [p.relative_to(output_dir).as_posix() for p in paths]
            self._dispatch_post_generate(
                {"output_dir": output_dir, "files": paths, "summary": summary},
                warnings,
            )

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "orm": plan.orm,
                "db": str(plan.dialect),
                "output_dir": str(output_dir),
                "dry_run": dry_run,
                "summary": summary,
                "files": [f.relative_path for f in result.files],
                "written": written,
            },
            warnings=warnings,
        )
