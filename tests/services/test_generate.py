"""Tests for GenerateService."""

from __future__ import annotations

from pathlib import Path

import pytest

from gqlorm.config.models import CodegenConfig, SourceConfig
from gqlorm.infrastructure.project import Project
from gqlorm.services.generate import GenerateService
from gqlorm.services.telemetry import enable_telemetry

POST_GENERATE_PLUGIN = '''\
import json
from pathlib import Path

from gqlorm.plugins import hookimpl


class RecordPlugin:
    @hookimpl
    def post_generate(self, output_dir, files, summary):
        record = Path(output_dir).parent / "post_generate.json"
        record.write_text(json.dumps({"files": len(files), "summary": summary}))
'''

FAILING_PLUGIN = '''\
from gqlorm.plugins import hookimpl


class Broken:
    @hookimpl
    def post_generate(self, output_dir, files, summary):
        raise RuntimeError("boom")
'''


def _add_plugin(root: Path, name: str, source: str) -> None:
    plugins = root / ".gqlorm" / "plugins"
    plugins.mkdir(parents=True, exist_ok=True)
    (plugins / name).write_text(source, encoding="utf-8")


class TestGenerate:
    def test_writes_files(self, project: Project, project_root: Path) -> None:
        result = GenerateService(project).generate()
        assert result.ok, result.error
        out = project_root / "generated"
        assert (out / "src" / "schema.rs").is_file()
        assert (out / "migrations" / "002_create_posts" / "up.sql").is_file()
        assert result.data["orm"] == "diesel"
        assert result.data["db"] == "sqlite"
        assert result.data["output_dir"] == str(out)
        assert result.data["summary"]["entities"] == 2
        assert sorted(result.data["written"]) == sorted(result.data["files"])
        assert "src/entities/user.rs" in result.data["written"]

    def test_dry_run_writes_nothing(self, project: Project, project_root: Path) -> None:
        result = GenerateService(project).generate(dry_run=True)
        assert result.ok
        assert result.data["dry_run"] is True
        assert result.data["written"] == []
        assert "src/schema.rs" in result.data["files"]
        assert not (project_root / "generated").exists()

    def test_second_run_rewrites_nothing(self, project: Project) -> None:
        service = GenerateService(project)
        assert service.generate().ok
        second = service.generate()
        assert second.ok
        assert second.data["written"] == []

    def test_codegen_override(self, project: Project, project_root: Path) -> None:
        codegen = CodegenConfig(orm="sea_orm", db="postgres", output_dir=Path("out"))
        result = GenerateService(project).generate(codegen=codegen)
        assert result.ok
        assert result.data["orm"] == "sea_orm"
        assert (project_root / "out" / "migrations" / "m001_create_users" / "up.sql").is_file()

    def test_source_override(self, project: Project, project_root: Path) -> None:
        (project_root / "other.graphql").write_text("type Tag { id: ID! }", encoding="utf-8")
        result = GenerateService(project).generate(
            dry_run=True, source=SourceConfig(path=Path("other.graphql"))
        )
        assert result.ok
        assert result.data["summary"]["entities"] == 1

    def test_warnings_surface(self, project: Project, project_root: Path) -> None:
        (project_root / "schema.graphql").write_text(
            "type Comment { id: ID! threadId: ID! }", encoding="utf-8"
        )
        result = GenerateService(project).generate(dry_run=True)
        assert result.ok
        assert any("Comment.threadId" in w for w in result.warnings)


class TestFailures:
    def test_unmapped_scalar(self, project: Project, project_root: Path) -> None:
        (project_root / "schema.graphql").write_text(
            "scalar Money\ntype Order { id: ID! total: Money! }", encoding="utf-8"
        )
        result = GenerateService(project).generate()
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "UNMAPPED_SCALAR"
        assert result.error.detail == {"stage": "resolve", "subject": "Money"}
        assert not (project_root / "generated").exists()

    def test_missing_schema_file(self, project: Project, project_root: Path) -> None:
        (project_root / "schema.graphql").unlink()
        result = GenerateService(project).generate()
        assert result.error is not None
        assert result.error.code == "SCHEMA_SOURCE"

    def test_conflicting_config(self, project: Project) -> None:
        codegen = CodegenConfig(include_types=["User"], exclude_types=["User"])
        result = GenerateService(project).generate(codegen=codegen)
        assert result.error is not None
        assert result.error.code == "CONFIG_CONFLICT"

    def test_write_failure_rolls_back(self, project: Project, project_root: Path) -> None:
        # A directory where schema.rs should go makes the write fail midway.
        (project_root / "generated" / "src" / "schema.rs").mkdir(parents=True)
        result = GenerateService(project).generate()
        assert result.error is not None
        assert result.error.code == "WRITE_ERROR"
        assert result.error.detail["stage"] == "write"
        assert not (project_root / "generated" / "migrations").exists() or not any(
            (project_root / "generated" / "migrations").rglob("*.sql")
        )


class TestPlugins:
    def test_post_generate_receives_written_files(
        self, project: Project, project_root: Path
    ) -> None:
        _add_plugin(project_root, "record.py", POST_GENERATE_PLUGIN)
        result = GenerateService(project).generate()
        assert result.ok
        record = (project_root / "post_generate.json").read_text(encoding="utf-8")
        assert f'"files": {len(result.data["written"])}' in record

    def test_post_generate_skipped_on_dry_run(self, project: Project, project_root: Path) -> None:
        _add_plugin(project_root, "record.py", POST_GENERATE_PLUGIN)
        assert GenerateService(project).generate(dry_run=True).ok
        assert not (project_root / "post_generate.json").exists()

    def test_failing_hook_is_a_warning(self, project: Project, project_root: Path) -> None:
        _add_plugin(project_root, "broken.py", FAILING_PLUGIN)
        result = GenerateService(project).generate()
        assert result.ok
        assert any("failed in post_generate" in w for w in result.warnings)


class TestTelemetry:
    @pytest.mark.usefixtures("_reset_telemetry")
    def test_stage_spans(self, project: Project) -> None:
        enable_telemetry()
        result = GenerateService(project).generate(dry_run=True)
        assert result.meta is not None
        tree = result.meta["telemetry"]
        assert tree["name"] == "GenerateService.generate"
        assert [c["name"] for c in tree["children"]] == [
            "build_schema",
            "resolve",
            "infer",
            "order",
            "emit",
        ]
        assert tree["children"][0]["annotations"] == {"types": 3, "entities": 2}
