"""Sea-ORM emitter: ``DeriveEntityModel`` entities, active enums, SQL migrations."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

from gqlorm.codegen.emitters.base import TemplateEmitter, base_sql_type
from gqlorm.codegen.plan import ColumnPlan, EntityPlan, EnumPlan, GenerationPlan, is_enum_column
from gqlorm.codegen.typemap import DEFAULT_SCALAR_TYPES, EnumStorage, ScalarMapping
from gqlorm.domain.files import GeneratedFile
from gqlorm.domain.naming import to_pascal_case
from gqlorm.domain.types import DatabaseType

ENTITIES_DIR = "src/entities"

_INTEGER_TYPES = frozenset({"i16", "i32", "i64", "u32", "u64"})
_FLOAT_TYPES = frozenset({"f32", "f64"})

_COLUMN_TYPES = {
    "TEXT": "Text",
    "DOUBLE": "Double",
    "DOUBLE PRECISION": "Double",
    "REAL": "Double",
    "TIMESTAMPTZ": "TimestampWithTimeZone",
    "JSON": "Json",
    "JSONB": "JsonBinary",
}


def _prelude_defaults() -> MappingProxyType[tuple[str, DatabaseType], ScalarMapping]:
    # Prefer the aliases re-exported by sea_orm::entity::prelude.
    defaults: dict[tuple[str, DatabaseType], ScalarMapping] = {}
    for db in DatabaseType:
        json_sql = DEFAULT_SCALAR_TYPES[("JSON", db)].sql_type
        defaults[("JSON", db)] = ScalarMapping("Json", json_sql)
        dt_sql = DEFAULT_SCALAR_TYPES[("DateTime", db)].sql_type
        alias = "DateTimeUtc" if db is DatabaseType.POSTGRES else "DateTime"
        defaults[("DateTime", db)] = ScalarMapping(alias, dt_sql)
    defaults[("ID", DatabaseType.POSTGRES)] = ScalarMapping("Uuid", "UUID")
    return MappingProxyType(defaults)


def _column_variant(rust_name: str) -> str:
    return to_pascal_case(rust_name.removeprefix("r#"))


class SeaOrmEmitter(TemplateEmitter):
    name = "sea_orm"
    type_defaults = _prelude_defaults()
    migration_prefix = "m"

    def field_attributes(self, column: ColumnPlan) -> list[str]:
        attrs: list[str] = []
        target = column.resolved.target_type
        if column.primary_key:
            attrs.append("primary_key")
            if target not in _INTEGER_TYPES:
                attrs.append("auto_increment = false")
        if column.column != column.rust_name.removeprefix("r#"):
            attrs.append(f'column_name = "{column.column}"')
        if not is_enum_column(column) and not column.resolved.is_list:
            column_type = _COLUMN_TYPES.get(base_sql_type(column.sql_type))
            if column_type == "Text" and target != "String":
                column_type = None
            if column_type:
                attrs.append(f'column_type = "{column_type}"')
        return attrs

    def emit_sources(self, plan: GenerationPlan) -> list[GeneratedFile]:
        if not plan.generate_entities:
            return []
        files = [
            GeneratedFile(f"{ENTITIES_DIR}/{e.module.removeprefix('r#')}.rs", self.render_entity(e))
            for e in plan.entities
        ]
        if plan.enums:
            enums = [self._enum_context(e) for e in plan.enums]
            files.append(
                GeneratedFile(
                    f"{ENTITIES_DIR}/sea_orm_active_enums.rs",
                    self.render("sea_orm_active_enums.rs.j2", enums=enums),
                )
            )
        files.append(
            GeneratedFile(
                f"{ENTITIES_DIR}/prelude.rs", self.render("prelude.rs.j2", entities=plan.entities)
            )
        )
        files.append(
            GeneratedFile(
                f"{ENTITIES_DIR}/mod.rs",
                self.render("mod.rs.j2", entities=plan.entities, has_enums=bool(plan.enums)),
            )
        )
        return files

    @staticmethod
    def _enum_context(enum: EnumPlan) -> dict[str, Any]:
        if enum.storage is EnumStorage.NATIVE_TYPE:
            db_type = f'db_type = "Enum", enum_name = "{enum.sql_name}"'
        else:
            db_type = 'db_type = "String(StringLen::None)"'
        return {
            "name": enum.name,
            "description": enum.description,
            "db_type": db_type,
            "variants": enum.variants,
        }

    def render_entity(self, entity: EntityPlan) -> str:
        fields = [
            {"ident": c.rust_name, "type": c.rust_type, "attrs": self.field_attributes(c)}
            for c in entity.columns
        ]
        eq = not any(c.resolved.target_type in _FLOAT_TYPES for c in entity.columns)

        relations: list[dict[str, Any]] = []
        related: list[dict[str, str]] = []
        related_targets: set[str] = set()
        for rel in entity.relations:
            path = "Entity" if rel.self_referential else f"super::{rel.target_module}::Entity"
            if rel.belongs_to:
                to_column = (
                    "Column::Id"
                    if rel.self_referential
                    else f"super::{rel.target_module}::Column::Id"
                )
                relations.append(
                    {
                        "variant": rel.variant,
                        "belongs_to": True,
                        "entity": path,
                        "from": f"Column::{_column_variant(rel.fk_rust)}",
                        "to": to_column,
                    }
                )
            elif rel.unique_pair and not rel.self_referential:
                relations.append({"variant": rel.variant, "belongs_to": False, "entity": path})
            else:
                continue
            if rel.unique_pair and not rel.self_referential and path not in related_targets:
                related_targets.add(path)
                related.append({"entity": path, "variant": rel.variant})

        return self.render(
            "entity.rs.j2",
            entity=entity,
            fields=fields,
            eq=eq,
            enum_names=entity.enum_names(),
            relations=relations,
            related=related,
        )
