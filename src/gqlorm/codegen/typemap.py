"""Built-in scalar and enum type tables.

Immutable process-wide constants keyed by ``(scalar, dialect)``. The scalar
table is exhaustive for the five GraphQL built-ins plus the recognized
extended scalars ``DateTime``, ``JSON`` and ``BigInt``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

from gqlorm.domain.types import DatabaseType

_SQLITE = DatabaseType.SQLITE
_POSTGRES = DatabaseType.POSTGRES
_MYSQL = DatabaseType.MYSQL


@dataclass(frozen=True)
class ScalarMapping:
    """Target-language type and SQL column type for one scalar in one dialect."""

    target_type: str
    sql_type: str


def _same(target: str, sql: str) -> dict[DatabaseType, ScalarMapping]:
    return {db: ScalarMapping(target, sql) for db in DatabaseType}


_TABLE: dict[str, dict[DatabaseType, ScalarMapping]] = {
    "ID": {
        _SQLITE: ScalarMapping("i32", "INTEGER"),
        _POSTGRES: ScalarMapping("uuid::Uuid", "UUID"),
        _MYSQL: ScalarMapping("u32", "INT UNSIGNED"),
    },
    "String": _same("String", "TEXT"),
    "Int": _same("i32", "INTEGER"),
    "Float": {
        _SQLITE: ScalarMapping("f64", "REAL"),
        _POSTGRES: ScalarMapping("f64", "DOUBLE PRECISION"),
        _MYSQL: ScalarMapping("f64", "DOUBLE"),
    },
    "Boolean": {
        _SQLITE: ScalarMapping("bool", "INTEGER"),
        _POSTGRES: ScalarMapping("bool", "BOOLEAN"),
        _MYSQL: ScalarMapping("bool", "TINYINT(1)"),
    },
    "DateTime": {
        _SQLITE: ScalarMapping("chrono::NaiveDateTime", "TEXT"),
        _POSTGRES: ScalarMapping("chrono::DateTime<chrono::Utc>", "TIMESTAMPTZ"),
        _MYSQL: ScalarMapping("chrono::NaiveDateTime", "DATETIME"),
    },
    "JSON": {
        _SQLITE: ScalarMapping("serde_json::Value", "TEXT"),
        _POSTGRES: ScalarMapping("serde_json::Value", "JSONB"),
        _MYSQL: ScalarMapping("serde_json::Value", "JSON"),
    },
    "BigInt": _same("i64", "BIGINT"),
}

DEFAULT_SCALAR_TYPES: MappingProxyType[tuple[str, DatabaseType], ScalarMapping] = (
    MappingProxyType(
        {
            (scalar, db): mapping
            for scalar, per_db in _TABLE.items()
            for db, mapping in per_db.items()
        }
    )
)

RECOGNIZED_SCALARS: frozenset[str] = frozenset(_TABLE)


class EnumStorage(StrEnum):
    """How a GraphQL enum is stored in a dialect."""

    NATIVE_TYPE = "native_type"  # CREATE TYPE ... AS ENUM
    INLINE_ENUM = "inline_enum"  # column-level ENUM('A', 'B')
    TEXT = "text"


ENUM_STORAGE: MappingProxyType[DatabaseType, EnumStorage] = MappingProxyType(
    {
        _SQLITE: EnumStorage.TEXT,
        _POSTGRES: EnumStorage.NATIVE_TYPE,
        _MYSQL: EnumStorage.INLINE_ENUM,
    }
)

# Scalar and enum lists: PostgreSQL has native arrays; elsewhere lists are JSON text.
LIST_FALLBACK: MappingProxyType[DatabaseType, ScalarMapping] = MappingProxyType(
    {
        _SQLITE: ScalarMapping("serde_json::Value", "TEXT"),
        _MYSQL: ScalarMapping("serde_json::Value", "JSON"),
    }
)

# Primary key column definitions used when an entity declares no ``id`` field.
SYNTHETIC_PRIMARY_KEY: MappingProxyType[DatabaseType, str] = MappingProxyType(
    {
        _SQLITE: "INTEGER PRIMARY KEY AUTOINCREMENT",
        _POSTGRES: "UUID PRIMARY KEY DEFAULT gen_random_uuid()",
        _MYSQL: "INT UNSIGNED PRIMARY KEY AUTO_INCREMENT",
    }
)
