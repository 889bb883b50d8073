"""Emitter capability and the template-driven base shared by built-in emitters."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, ClassVar, Protocol, runtime_checkable

from gqlorm.codegen.migrations import MIGRATIONS_DIR, build_migrations
from gqlorm.codegen.plan import GenerationPlan
from gqlorm.codegen.typemap import ScalarMapping
from gqlorm.domain.files import GeneratedFile
from gqlorm.domain.types import DatabaseType
from gqlorm.infrastructure.templates import build_template_environment

GENERATED_HEADER = "// @generated by gqlorm. Do not edit by hand."

# Rust types that are Copy and can be passed to query builders by value.
COPY_TYPES = frozenset({"i16", "i32", "i64", "u32", "u64", "f32", "f64", "bool", "uuid::Uuid"})


@runtime_checkable
class Emitter(Protocol):
    """What the pipeline needs from an ORM backend."""

    name: str
    supported_dialects: frozenset[DatabaseType]
    type_defaults: Mapping[tuple[str, DatabaseType], ScalarMapping]

    def emit(self, plan: GenerationPlan) -> list[GeneratedFile]: ...


class TemplateEmitter:
    """Renders a plan through the Jinja2 templates in ``templates/<name>/``.

    Subclasses implement :meth:`emit_sources`; migrations are shared.
    """

    name: ClassVar[str] = ""
    supported_dialects: frozenset[DatabaseType] = frozenset(DatabaseType)
    type_defaults: Mapping[tuple[str, DatabaseType], ScalarMapping] = MappingProxyType({})
    migration_prefix: ClassVar[str] = ""

    def __init__(self, *, project_root: Path | None = None) -> None:
        self.env = build_template_environment(self.name, project_root=project_root)
        self.env.globals["header"] = GENERATED_HEADER

    def render(self, template: str, **context: Any) -> str:
        return self.env.get_template(template).render(**context)

    def emit(self, plan: GenerationPlan) -> list[GeneratedFile]:
        files: list[GeneratedFile] = []
        if plan.generate_migrations:
            for migration in build_migrations(plan, prefix=self.migration_prefix):
                files.extend(migration.files(MIGRATIONS_DIR))
        files.extend(self.emit_sources(plan))
        return files

    def emit_sources(self, plan: GenerationPlan) -> list[GeneratedFile]:
        raise NotImplementedError


def base_sql_type(sql_type: str) -> str:
    """Upper-cased SQL type without array suffix or length arguments.

    ``TINYINT(1)`` keeps its argument since it means boolean on MySQL.
    """
    base = sql_type.strip().upper().removesuffix("[]")
    if base.startswith("TINYINT(1)"):
        return "TINYINT(1)"
    return base.split("(", 1)[0].strip()


def value_expr(ident: str, rust_type: str) -> str:
    """``self.<field>`` for Copy types, ``self.<field>.clone()`` otherwise."""
    if rust_type in COPY_TYPES:
        return f"self.{ident}"
    return f"self.{ident}.clone()"
