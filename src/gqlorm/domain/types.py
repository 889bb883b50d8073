"""Classification enums shared across the pipeline."""

from __future__ import annotations

from enum import StrEnum


class DatabaseType(StrEnum):
    """Supported SQL dialects."""

    SQLITE = "sqlite"
    POSTGRES = "postgres"
    MYSQL = "mysql"


class NamingConvention(StrEnum):
    """Identifier style applied to generated table and column names."""

    SNAKE_CASE = "snake_case"
    CAMEL_CASE = "camel_case"
    PASCAL_CASE = "pascal_case"


class TypeKind(StrEnum):
    """GraphQL named-type kinds kept in the schema graph."""

    OBJECT = "OBJECT"
    INTERFACE = "INTERFACE"
    UNION = "UNION"
    ENUM = "ENUM"
    SCALAR = "SCALAR"


class Cardinality(StrEnum):
    """Direction of an inferred relationship edge."""

    BELONGS_TO = "belongs_to"
    HAS_MANY = "has_many"


class TypeOrigin(StrEnum):
    """Which layer of the type table produced a resolved type."""

    DEFAULT = "default"
    SCALAR_OVERRIDE = "scalar_override"
    FIELD_OVERRIDE = "field_override"
    ENUM = "enum"
