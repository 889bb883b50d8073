"""Pydantic configuration models with code-baked defaults.

Sparse contract: defaults live here, ``gqlorm.toml`` only contains overrides.
A fresh project needs only ``[source] url`` (or ``path``).

Enum-like fields accept the spellings older ``codegen.yml`` files use
(``Diesel``, ``SeaOrm``, ``Postgres``, ``postgresql``, ``SnakeCase`` ...).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from gqlorm.domain.errors import ConfigConflictError
from gqlorm.domain.naming import to_snake_case
from gqlorm.domain.types import DatabaseType, NamingConvention

DEFAULT_OUTPUT_DIR = Path("./generated")
DEFAULT_TIMEOUT = 30.0

_ORM_ALIASES = {"seaorm": "sea_orm", "sea-orm": "sea_orm"}
_DB_ALIASES = {"postgresql": "postgres", "pg": "postgres", "sqlite3": "sqlite", "mariadb": "mysql"}
_NAMING_ALIASES = {"snake": "snake_case", "camel": "camel_case", "pascal": "pascal_case"}


def normalize_orm(value: str) -> str:
    """``SeaOrm`` / ``sea-orm`` / ``sea_orm`` -> ``sea_orm``."""
    lowered = value.strip().lower()
    if lowered in _ORM_ALIASES:
        return _ORM_ALIASES[lowered]
    return to_snake_case(value.strip()).replace("-", "_")


def normalize_db(value: str) -> str:
    lowered = value.strip().lower()
    return _DB_ALIASES.get(lowered, lowered)


def normalize_naming(value: str) -> str:
    snake = to_snake_case(value.strip()).replace("-", "_")
    return _NAMING_ALIASES.get(snake, snake)


# --- gqlorm.toml sections ---


class SourceConfig(BaseModel):
    """[source] section: where the schema comes from."""

    model_config = {"frozen": True}

    url: str | None = None
    path: Path | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: float = DEFAULT_TIMEOUT

    @property
    def configured(self) -> bool:
        return self.url is not None or self.path is not None

    def check(self) -> None:
        """Raise :class:`ConfigConflictError` when both a URL and a file are set."""
        if self.url and self.path:
            msg = "Configure either a schema URL or a schema file, not both"
            raise ConfigConflictError(msg, subject="source")


class CodegenConfig(BaseModel):
    """[codegen] section: what to generate and how."""

    model_config = {"frozen": True}

    orm: str = "diesel"
    db: DatabaseType = DatabaseType.SQLITE
    output_dir: Path = DEFAULT_OUTPUT_DIR
    generate_migrations: bool = True
    generate_entities: bool = True
    table_naming: NamingConvention = NamingConvention.SNAKE_CASE
    type_mappings: dict[str, str] = Field(default_factory=dict)
    field_overrides: dict[str, str] = Field(default_factory=dict)
    include_types: frozenset[str] | None = None
    exclude_types: frozenset[str] | None = None

    @model_validator(mode="before")
    @classmethod
    def _merge_scalar_mappings(cls, data: Any) -> Any:
        # ``scalar_mappings`` is the older name for scalar-wide overrides.
        if isinstance(data, dict) and "scalar_mappings" in data:
            data = dict(data)
            legacy = data.pop("scalar_mappings") or {}
            data["type_mappings"] = {**legacy, **(data.get("type_mappings") or {})}
        return data

    @field_validator("orm", mode="before")
    @classmethod
    def _normalize_orm(cls, value: Any) -> Any:
        return normalize_orm(value) if isinstance(value, str) else value

    @field_validator("db", mode="before")
    @classmethod
    def _normalize_db(cls, value: Any) -> Any:
        return normalize_db(value) if isinstance(value, str) else value

    @field_validator("table_naming", mode="before")
    @classmethod
    def _normalize_naming(cls, value: Any) -> Any:
        return normalize_naming(value) if isinstance(value, str) else value

    def check_type_filters(self) -> None:
        """Raise :class:`ConfigConflictError` for a type both included and excluded."""
        both = (self.include_types or frozenset()) & (self.exclude_types or frozenset())
        if both:
            names = ", ".join(sorted(both))
            msg = f"Types both included and excluded: {names}"
            raise ConfigConflictError(msg, subject=names)


class PluginsConfig(BaseModel):
    """[plugins] section: plugins to block by name."""

    model_config = {"frozen": True}

    disabled: frozenset[str] = frozenset()

