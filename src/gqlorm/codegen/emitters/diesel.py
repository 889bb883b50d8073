"""Diesel emitter: ``table!`` schema, Queryable/Insertable structs, SQL migrations."""

from __future__ import annotations

from typing import Any

from gqlorm.codegen.emitters.base import COPY_TYPES, TemplateEmitter, base_sql_type, value_expr
from gqlorm.codegen.plan import ColumnPlan, EntityPlan, GenerationPlan, is_enum_column
from gqlorm.domain.files import GeneratedFile
from gqlorm.domain.naming import rust_ident
from gqlorm.domain.types import DatabaseType

SCHEMA_PATH = "src/schema.rs"
ENTITIES_DIR = "src/entities"

# (module, backend type, connection type)
_BACKENDS: dict[DatabaseType, tuple[str, str, str]] = {
    DatabaseType.SQLITE: ("sqlite", "Sqlite", "SqliteConnection"),
    DatabaseType.POSTGRES: ("pg", "Pg", "PgConnection"),
    DatabaseType.MYSQL: ("mysql", "Mysql", "MysqlConnection"),
}

_RUST_TO_DSL = {
    "bool": "Bool",
    "i16": "SmallInt",
    "i32": "Integer",
    "i64": "BigInt",
    "u32": "Unsigned<Integer>",
    "u64": "Unsigned<BigInt>",
    "f32": "Float",
    "f64": "Double",
    "String": "Text",
    "Vec<u8>": "Binary",
    "uuid::Uuid": "Uuid",
    "chrono::NaiveDate": "Date",
    "chrono::NaiveTime": "Time",
    "chrono::NaiveDateTime": "Timestamp",
    "chrono::DateTime<chrono::Utc>": "Timestamptz",
    "bigdecimal::BigDecimal": "Numeric",
}

_SQL_TO_DSL = {
    "TINYINT(1)": "Bool",
    "BOOLEAN": "Bool",
    "BOOL": "Bool",
    "SMALLINT": "SmallInt",
    "INTEGER": "Integer",
    "INT": "Integer",
    "BIGINT": "BigInt",
    "REAL": "Float",
    "FLOAT": "Float",
    "DOUBLE": "Double",
    "DOUBLE PRECISION": "Double",
    "NUMERIC": "Numeric",
    "DECIMAL": "Numeric",
    "TEXT": "Text",
    "VARCHAR": "Text",
    "CHAR": "Text",
    "UUID": "Uuid",
    "DATE": "Date",
    "TIME": "Time",
    "TIMESTAMP": "Timestamp",
    "DATETIME": "Timestamp",
    "TIMESTAMPTZ": "Timestamptz",
    "JSON": "Json",
    "JSONB": "Jsonb",
    "BYTEA": "Binary",
    "BLOB": "Binary",
}


def _strip_raw(ident: str) -> str:
    return ident.removeprefix("r#")


class DieselEmitter(TemplateEmitter):
    name = "diesel"

    def column_dsl(self, column: ColumnPlan, plan: GenerationPlan) -> tuple[str, str | None]:
        """Diesel SQL type for *column* and the ``use`` path it needs, if any."""
        resolved = column.resolved
        use: str | None = None
        if is_enum_column(column):
            enum = resolved.enum_name or ""
            if plan.dialect is DatabaseType.POSTGRES:
                dsl, use = enum, f"super::sql_types::{enum}"
            elif plan.generate_entities:
                dsl, use = f"{enum}Mapping", f"crate::entities::enums::{enum}Mapping"
            else:
                dsl = "Text"
            if resolved.is_list and plan.dialect is DatabaseType.POSTGRES:
                dsl = f"Array<{dsl}>"
        else:
            element = resolved.target_type
            is_array = (
                resolved.is_list
                and element.startswith("Vec<")
                and plan.dialect is DatabaseType.POSTGRES
            )
            if is_array:
                element = element[4:-1]
            dsl = self._scalar_dsl(element, resolved.sql_type)
            if is_array:
                dsl = f"Array<{dsl}>"
        if column.nullable:
            dsl = f"Nullable<{dsl}>"
        return dsl, use

    @staticmethod
    def _scalar_dsl(rust_type: str, sql_type: str) -> str:
        base = base_sql_type(sql_type)
        if rust_type == "serde_json::Value":
            return "Jsonb" if base == "JSONB" else "Json"
        return _RUST_TO_DSL.get(rust_type) or _SQL_TO_DSL.get(base, "Text")

    def emit_sources(self, plan: GenerationPlan) -> list[GeneratedFile]:
        files = [GeneratedFile(SCHEMA_PATH, self.render_schema(plan))]
        if not plan.generate_entities:
            return files
        for entity in plan.entities:
            path = f"{ENTITIES_DIR}/{_strip_raw(entity.module)}.rs"
            files.append(GeneratedFile(path, self.render_entity(entity, plan)))
        if plan.enums:
            files.append(GeneratedFile(f"{ENTITIES_DIR}/enums.rs", self.render_enums(plan)))
        files.append(GeneratedFile(f"{ENTITIES_DIR}/mod.rs", self.render_mod(plan)))
        return files

    def render_schema(self, plan: GenerationPlan) -> str:
        tables: list[dict[str, Any]] = []
        for entity in plan.entities:
            columns: list[dict[str, Any]] = []
            uses: list[str] = []
            for col in entity.columns:
                dsl, use = self.column_dsl(col, plan)
                if use and use not in uses:
                    uses.append(use)
                ident = col.rust_name
                columns.append(
                    {
                        "ident": ident,
                        "dsl": dsl,
                        "sql_name": col.column if col.column != _strip_raw(ident) else None,
                    }
                )
            ident = rust_ident(entity.table)
            tables.append(
                {
                    "ident": ident,
                    "sql_name": entity.table if entity.table != _strip_raw(ident) else None,
                    "pk": entity.primary_key.rust_name,
                    "columns": columns,
                    "uses": uses,
                }
            )

        joinables: list[dict[str, str]] = []
        joined: set[frozenset[str]] = set()
        for entity in plan.entities:
            for rel in entity.relations:
                if not rel.belongs_to or not rel.unique_pair or rel.self_referential:
                    continue
                pair = frozenset({entity.table, rel.target_table})
                if pair in joined:
                    continue
                joined.add(pair)
                joinables.append(
                    {
                        "child": rust_ident(entity.table),
                        "parent": rust_ident(rel.target_table),
                        "column": rel.fk_rust,
                    }
                )

        sql_types = [e for e in plan.enums if plan.dialect is DatabaseType.POSTGRES]
        return self.render("schema.rs.j2", tables=tables, joinables=joinables, sql_types=sql_types)

    def render_entity(self, entity: EntityPlan, plan: GenerationPlan) -> str:
        backend_mod, backend, connection = _BACKENDS[plan.dialect]
        table_ident = rust_ident(entity.table)
        schema_tables = [table_ident]
        uses: list[str] = []
        for name in entity.enum_names():
            uses.append(f"super::enums::{name}")

        associations: list[dict[str, str]] = []
        accessors: list[dict[str, Any]] = []
        for rel in entity.relations:
            target_table = rust_ident(rel.target_table)
            if target_table not in schema_tables:
                schema_tables.append(target_table)
            if not rel.self_referential:
                path = f"super::{_strip_raw(rel.target_module)}::{rel.target_entity}"
                if path not in uses:
                    uses.append(path)
            if rel.belongs_to and rel.unique_pair and not rel.self_referential:
                associations.append({"parent": rel.target_entity, "fk": rel.fk_rust})

            if rel.belongs_to:
                rust_type = next(
                    c.resolved.target_type for c in entity.columns if c.column == rel.fk_column
                )
                copyable = rust_type in COPY_TYPES
                if rel.fk_nullable:
                    subject = f"self.{rel.fk_rust}" if copyable else f"&self.{rel.fk_rust}"
                    key = "key" if copyable else "key.clone()"
                else:
                    subject, key = "", value_expr(rel.fk_rust, rust_type)
                accessors.append(
                    {
                        "name": rel.accessor,
                        "belongs_to": True,
                        "target": rel.target_entity,
                        "table": target_table,
                        "fk": rel.fk_rust,
                        "nullable": rel.fk_nullable,
                        "subject": subject,
                        "key": key,
                    }
                )
            else:
                pk = entity.primary_key
                accessors.append(
                    {
                        "name": rel.accessor,
                        "belongs_to": False,
                        "target": rel.target_entity,
                        "table": target_table,
                        "fk": rel.fk_rust,
                        "nullable": rel.fk_nullable,
                        "key": value_expr(pk.rust_name, pk.resolved.target_type),
                    }
                )

        return self.render(
            "entity.rs.j2",
            entity=entity,
            table_ident=table_ident,
            schema_tables=schema_tables,
            uses=uses,
            backend=f"diesel::{backend_mod}::{backend}",
            connection=connection,
            primary_key=entity.primary_key.rust_name,
            associations=associations,
            accessors=accessors,
            fields=[{"ident": c.rust_name, "type": c.rust_type} for c in entity.columns],
            insert_fields=[
                {"ident": c.rust_name, "type": c.rust_type} for c in entity.insertable_columns
            ],
        )

    def render_enums(self, plan: GenerationPlan) -> str:
        return self.render(
            "enums.rs.j2",
            enums=plan.enums,
            postgres=plan.dialect is DatabaseType.POSTGRES,
        )

    def render_mod(self, plan: GenerationPlan) -> str:
        modules = [{"module": e.module, "name": e.name} for e in plan.entities]
        return self.render("mod.rs.j2", modules=modules, has_enums=bool(plan.enums))
