"""Dialect-specific SQL for table migrations.

One migration per entity, numbered in dependency order, each an
``up.sql``/``down.sql`` pair. Foreign keys inside a cycle cannot be created
inline on PostgreSQL or MySQL, so they go into a single trailing
``add_deferred_foreign_keys`` migration; SQLite has no
``ALTER TABLE ... ADD CONSTRAINT`` and declares them inline as
``DEFERRABLE INITIALLY DEFERRED`` instead.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from gqlorm.codegen.plan import ColumnPlan, EntityPlan, EnumPlan, ForeignKeyPlan, GenerationPlan
from gqlorm.codegen.typemap import SYNTHETIC_PRIMARY_KEY, EnumStorage
from gqlorm.domain.files import GeneratedFile
from gqlorm.domain.types import DatabaseType, TypeOrigin

MIGRATIONS_DIR = "migrations"
DEFERRED_SLUG = "add_deferred_foreign_keys"

_PLAIN_IDENT = re.compile(r"^[a-z_][a-z0-9_]*$")
_RESERVED = frozenset(
    {
        "all", "and", "as", "by", "check", "column", "constraint", "create", "default",
        "delete", "desc", "distinct", "drop", "from", "group", "having", "in", "index",
        "insert", "into", "key", "limit", "not", "null", "or", "order", "primary",
        "references", "select", "table", "to", "union", "unique", "update", "user",
        "values", "where",
    }
)  # fmt: skip


@dataclass(frozen=True)
class Migration:
    name: str
    up: str
    down: str

    def files(self, root: str = MIGRATIONS_DIR) -> list[GeneratedFile]:
        return [
            GeneratedFile(f"{root}/{self.name}/up.sql", self.up),
            GeneratedFile(f"{root}/{self.name}/down.sql", self.down),
        ]


def quote_ident(name: str, dialect: DatabaseType) -> str:
    """Quote *name* only when it is not a plain lowercase identifier."""
    if _PLAIN_IDENT.match(name) and name not in _RESERVED:
        return name
    if dialect is DatabaseType.MYSQL:
        return f"`{name}`"
    return f'"{name}"'


def sequence_width(count: int) -> int:
    """Zero padding for migration numbers: three digits, wider when needed."""
    return max(3, len(str(count)))


def migration_name(sequence: int, slug: str, width: int, *, prefix: str = "") -> str:
    return f"{prefix}{sequence:0{width}d}_{slug}"


def _type_sql(column: ColumnPlan, dialect: DatabaseType) -> str:
    """Column type, with native enum type names quoted like their CREATE TYPE."""
    resolved = column.resolved
    native = resolved.enum_storage is EnumStorage.NATIVE_TYPE
    if resolved.origin is not TypeOrigin.ENUM or not native:
        return column.sql_type
    base = column.sql_type.removesuffix("[]")
    return quote_ident(base, dialect) + column.sql_type[len(base) :]


def column_sql(column: ColumnPlan, dialect: DatabaseType) -> str:
    q = quote_ident(column.column, dialect)
    if column.synthetic:
        if column.resolved.origin is TypeOrigin.DEFAULT:
            return f"{q} {SYNTHETIC_PRIMARY_KEY[dialect]}"
        return f"{q} {column.sql_type} PRIMARY KEY"
    parts = [q, _type_sql(column, dialect)]
    if not column.nullable:
        parts.append("NOT NULL")
    if column.primary_key:
        parts.append("PRIMARY KEY")
    return " ".join(parts)


def foreign_key_clause(fk: ForeignKeyPlan, dialect: DatabaseType) -> str:
    clause = (
        f"FOREIGN KEY ({quote_ident(fk.column, dialect)}) "
        f"REFERENCES {quote_ident(fk.target_table, dialect)} "
        f"({quote_ident(fk.target_column, dialect)})"
    )
    if fk.deferred and dialect is not DatabaseType.MYSQL:
        clause += " DEFERRABLE INITIALLY DEFERRED"
    return clause


def _inline_foreign_keys(entity: EntityPlan, dialect: DatabaseType) -> list[ForeignKeyPlan]:
    if dialect is DatabaseType.SQLITE:
        return list(entity.foreign_keys)
    return [fk for fk in entity.foreign_keys if not fk.deferred]


def create_enum_sql(enum: EnumPlan, dialect: DatabaseType) -> str:
    values = ", ".join("'{}'".format(v.replace("'", "''")) for v in enum.values)
    return f"CREATE TYPE {quote_ident(enum.sql_name, dialect)} AS ENUM ({values});"


def create_table_sql(entity: EntityPlan, dialect: DatabaseType) -> str:
    table = quote_ident(entity.table, dialect)
    lines = [f"    {column_sql(col, dialect)}" for col in entity.columns]
    lines.extend(
        f"    CONSTRAINT {quote_ident(fk.constraint_name, dialect)} "
        f"{foreign_key_clause(fk, dialect)}"
        for fk in _inline_foreign_keys(entity, dialect)
    )
    statements = [f"CREATE TABLE {table} (\n" + ",\n".join(lines) + "\n);"]
    statements.extend(
        f"CREATE INDEX {quote_ident(fk.index_name, dialect)} "
        f"ON {table} ({quote_ident(fk.column, dialect)});"
        for fk in entity.foreign_keys
    )
    return "\n\n".join(statements)


def _native_enums_for(entity: EntityPlan, plan: GenerationPlan) -> list[EnumPlan]:
    return [
        enum
        for enum in plan.enums
        if enum.storage is EnumStorage.NATIVE_TYPE and enum.owner_table == entity.table
    ]


def table_migration(entity: EntityPlan, plan: GenerationPlan) -> tuple[str, str]:
    """``(up, down)`` SQL for one entity, including any enum types it introduces."""
    dialect = plan.dialect
    enums = _native_enums_for(entity, plan)
    up = [create_enum_sql(e, dialect) for e in enums]
    up.append(create_table_sql(entity, dialect))
    down = [f"DROP TABLE {quote_ident(entity.table, dialect)};"]
    down.extend(f"DROP TYPE {quote_ident(e.sql_name, dialect)};" for e in enums)
    return "\n\n".join(up) + "\n", "\n".join(down) + "\n"


def deferred_migration(plan: GenerationPlan) -> tuple[str, str] | None:
    """``ALTER TABLE`` statements for cyclic foreign keys, or None when not needed."""
    dialect = plan.dialect
    if dialect is DatabaseType.SQLITE or not plan.deferred:
        return None
    up: list[str] = []
    down: list[str] = []
    for fk in plan.deferred:
        table = quote_ident(fk.owner_table, dialect)
        name = quote_ident(fk.constraint_name, dialect)
        up.append(f"ALTER TABLE {table} ADD CONSTRAINT {name} {foreign_key_clause(fk, dialect)};")
        if dialect is DatabaseType.MYSQL:
            down.append(f"ALTER TABLE {table} DROP FOREIGN KEY {name};")
        else:
            down.append(f"ALTER TABLE {table} DROP CONSTRAINT {name};")
    down.reverse()
    return "\n".join(up) + "\n", "\n".join(down) + "\n"


def build_migrations(plan: GenerationPlan, *, prefix: str = "") -> list[Migration]:
    """All migrations for *plan*, in apply order."""
    deferred = deferred_migration(plan)
    total = len(plan.entities) + (1 if deferred else 0)
    width = sequence_width(total)
    migrations = [
        Migration(
            migration_name(entity.sequence, f"create_{entity.table.lower()}", width, prefix=prefix),
            *table_migration(entity, plan),
        )
        for entity in plan.entities
    ]
    if deferred is not None:
        migrations.append(
            Migration(migration_name(total, DEFERRED_SLUG, width, prefix=prefix), *deferred)
        )
    return migrations
