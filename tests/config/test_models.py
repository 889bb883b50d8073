"""Tests for configuration section models."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from gqlorm.config.models import (
    DEFAULT_OUTPUT_DIR,
    CodegenConfig,
    SourceConfig,
    normalize_db,
    normalize_naming,
    normalize_orm,
)
from gqlorm.domain.errors import ConfigConflictError
from gqlorm.domain.types import DatabaseType, NamingConvention


class TestDefaults:
    def test_codegen_defaults(self) -> None:
        config = CodegenConfig()
        assert config.orm == "diesel"
        assert config.db is DatabaseType.SQLITE
        assert config.output_dir == DEFAULT_OUTPUT_DIR
        assert config.generate_migrations and config.generate_entities
        assert config.table_naming is NamingConvention.SNAKE_CASE
        assert config.include_types is None

    def test_frozen(self) -> None:
        config = CodegenConfig()
        with pytest.raises(ValidationError):
            config.orm = "sea_orm"  # type: ignore[misc]


class TestAliases:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("Diesel", "diesel"), ("SeaOrm", "sea_orm"), ("sea-orm", "sea_orm"), ("sea_orm", "sea_orm")],
    )
    def test_orm(self, value: str, expected: str) -> None:
        assert normalize_orm(value) == expected
        assert CodegenConfig(orm=value).orm == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("Postgres", DatabaseType.POSTGRES),
            ("postgresql", DatabaseType.POSTGRES),
            ("SQLite", DatabaseType.SQLITE),
            ("MySQL", DatabaseType.MYSQL),
            ("mariadb", DatabaseType.MYSQL),
        ],
    )
    def test_db(self, value: str, expected: DatabaseType) -> None:
        assert CodegenConfig(db=value).db is expected

    def test_normalize_db_passthrough(self) -> None:
        assert normalize_db(" Oracle ") == "oracle"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("SnakeCase", "snake_case"), ("camelCase", "camel_case"), ("pascal", "pascal_case")],
    )
    def test_naming(self, value: str, expected: str) -> None:
        assert normalize_naming(value) == expected

    def test_unknown_db_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CodegenConfig(db="oracle")


class TestTypeMappings:
    def test_scalar_mappings_merge(self) -> None:
        config = CodegenConfig.model_validate(
            {
                "scalar_mappings": {"DateTime": "String", "JSON": "String"},
                "type_mappings": {"DateTime": "chrono::NaiveDateTime"},
            }
        )
        assert config.type_mappings == {"DateTime": "chrono::NaiveDateTime", "JSON": "String"}

    def test_type_filters_coerced(self) -> None:
        config = CodegenConfig(include_types=["User", "Post"])
        assert config.include_types == frozenset({"User", "Post"})

    def test_filter_conflict(self) -> None:
        config = CodegenConfig(include_types=["User"], exclude_types=["User", "Post"])
        with pytest.raises(ConfigConflictError) as exc_info:
            config.check_type_filters()
        assert exc_info.value.subject == "User"
        assert exc_info.value.stage == "config"


class TestSourceConfig:
    def test_unconfigured(self) -> None:
        assert not SourceConfig().configured

    def test_path(self) -> None:
        source = SourceConfig(path="schema.graphql")
        assert source.configured
        assert source.path == Path("schema.graphql")
        source.check()

    def test_url_and_path_conflict(self) -> None:
        source = SourceConfig(url="http://localhost/graphql", path="schema.graphql")
        with pytest.raises(ConfigConflictError, match="not both"):
            source.check()
