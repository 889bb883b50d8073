"""Tests for PlanService."""

from __future__ import annotations

from pathlib import Path

from gqlorm.config.models import CodegenConfig
from gqlorm.infrastructure.project import Project
from gqlorm.services.plan import PlanService

TEAM_SDL = """\
type Team {
  id: ID!
  memberId: ID
}

type Member {
  id: ID!
  teamId: ID!
}
"""


class TestPlan:
    def test_entities_in_dependency_order(self, project: Project) -> None:
        result = PlanService(project).plan()
        assert result.ok, result.error
        assert result.data["orm"] == "diesel"
        assert result.data["db"] == "sqlite"
        assert [e["name"] for e in result.data["entities"]] == ["User", "Post"]
        assert [e["table"] for e in result.data["entities"]] == ["users", "posts"]

    def test_columns_and_keys(self, project: Project) -> None:
        post = PlanService(project).plan().data["entities"][1]
        columns = {c["name"]: c for c in post["columns"]}
        assert list(columns) == ["id", "title", "body", "author_id"]
        assert columns["id"]["primary_key"] is True
        assert columns["body"]["nullable"] is True
        assert columns["title"]["origin"] == "default"
        assert post["foreign_keys"] == [
            {"column": "author_id", "references": "users.id", "deferred": False}
        ]
        assert {"accessor": "author", "kind": "belongs_to", "target": "User"} in post["relations"]

    def test_migration_names(self, project: Project) -> None:
        result = PlanService(project).plan()
        assert result.data["migrations"] == ["001_create_users", "002_create_posts"]
        assert result.data["deferred"] == []

    def test_sea_orm_prefix(self, project: Project) -> None:
        result = PlanService(project).plan(codegen=CodegenConfig(orm="sea_orm"))
        assert result.data["migrations"] == ["m001_create_users", "m002_create_posts"]

    def test_no_migrations(self, project: Project) -> None:
        result = PlanService(project).plan(codegen=CodegenConfig(generate_migrations=False))
        assert result.data["migrations"] == []

    def test_cycle_reports_deferred(self, project: Project, project_root: Path) -> None:
        (project_root / "schema.graphql").write_text(TEAM_SDL, encoding="utf-8")
        result = PlanService(project).plan(codegen=CodegenConfig(db="postgres"))
        assert result.ok
        assert result.data["deferred"] == ["teams.member_id", "members.team_id"]
        assert result.data["migrations"][-1] == "003_add_deferred_foreign_keys"

    def test_enums(self, project: Project, project_root: Path) -> None:
        (project_root / "schema.graphql").write_text(
            "enum Role { ADMIN MEMBER }\ntype Account { id: ID! role: Role! }",
            encoding="utf-8",
        )
        result = PlanService(project).plan(codegen=CodegenConfig(db="postgres"))
        assert result.data["enums"] == [
            {"name": "Role", "storage": "native_type", "values": ["ADMIN", "MEMBER"]}
        ]

    def test_failure(self, project: Project, project_root: Path) -> None:
        (project_root / "schema.graphql").write_text("type Broken {", encoding="utf-8")
        result = PlanService(project).plan()
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "SCHEMA_ERROR"
