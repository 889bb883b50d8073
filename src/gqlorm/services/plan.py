"""PlanService: preview tables, keys, and migrations without emitting."""

from __future__ import annotations

from typing import Any

from gqlorm.codegen.migrations import build_migrations
from gqlorm.codegen.plan import EntityPlan, GenerationPlan
from gqlorm.config.models import CodegenConfig, SourceConfig
from gqlorm.domain.errors import GenerationError
from gqlorm.services._helpers import build_plan_traced
from gqlorm.services.base import BaseService
from gqlorm.services.result import ServiceResult
from gqlorm.services.telemetry import traced


def _entity_data(entity: EntityPlan) -> dict[str, Any]:
    return {
        "name": entity.name,
        "table": entity.table,
        "sequence": entity.sequence,
        "columns": [
            {
                "name": c.column,
                "sql_type": c.sql_type,
                "rust_type": c.rust_type,
                "nullable": c.nullable,
                "primary_key": c.primary_key,
                "origin": str(c.resolved.origin),
            }
            for c in entity.columns
        ],
        "foreign_keys": [
            {
                "column": fk.column,
                "references": f"{fk.target_table}.{fk.target_column}",
                "deferred": fk.deferred,
            }
            for fk in entity.foreign_keys
        ],
        "relations": [
            {"accessor": r.accessor, "kind": str(r.cardinality), "target": r.target_entity}
            for r in entity.relations
        ],
    }


def plan_data(plan: GenerationPlan, migration_prefix: str = "") -> dict[str, Any]:
    """JSON-friendly view of *plan*."""
    migrations = (
        [m.name for m in build_migrations(plan, prefix=migration_prefix)]
        if plan.generate_migrations
        else []
    )
    return {
        "orm": plan.orm,
        "db": str(plan.dialect),
        "entities": [_entity_data(e) for e in plan.entities],
        "enums": [
            {"name": e.name, "storage": str(e.storage), "values": list(e.values)}
            for e in plan.enums
        ],
        "deferred": [f"{fk.owner_table}.{fk.column}" for fk in plan.deferred],
        "migrations": migrations,
    }


class PlanService(BaseService):
    """Dry analysis of a schema: what would be generated, in which order."""

    @traced
    def plan(
        self,
        *,
        codegen: CodegenConfig | None = None,
        source: SourceConfig | None = None,
    ) -> ServiceResult:
        op = "plan"
        warnings: list[str] = list(self._project.plugins.warnings)
        try:
            pipeline, plan = build_plan_traced(
                self._project, codegen or self._project.codegen, source
            )
        except GenerationError as exc:
            return ServiceResult.failure(op, exc, warnings=warnings)

        prefix = getattr(pipeline.emitter, "migration_prefix", "")
        warnings.extend(plan.warnings)
        return ServiceResult(ok=True, op=op, data=plan_data(plan, prefix), warnings=warnings)
