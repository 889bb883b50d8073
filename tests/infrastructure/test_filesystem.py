"""Tests for all-or-nothing writes of generated files."""

from __future__ import annotations

from pathlib import Path

import pytest

from gqlorm.domain.files import GeneratedFile
from gqlorm.infrastructure.filesystem import (
    output_transaction,
    resolve_output_path,
    write_generated_files,
)


class TestResolveOutputPath:
    def test_nested(self, tmp_path: Path) -> None:
        assert resolve_output_path(tmp_path, "src/entities/user.rs") == (
            tmp_path / "src" / "entities" / "user.rs"
        )

    @pytest.mark.parametrize("path", ["../escape.rs", "/etc/passwd", "src/../../x.rs"])
    def test_escape_rejected(self, tmp_path: Path, path: str) -> None:
        with pytest.raises(ValueError, match="escapes the output directory"):
            resolve_output_path(tmp_path, path)


class TestWriteGeneratedFiles:
    def test_creates_directories(self, tmp_path: Path) -> None:
        out = tmp_path / "generated"
        files = [
            GeneratedFile("src/schema.rs", "// schema\n"),
            GeneratedFile("migrations/001_create_users/up.sql", "CREATE TABLE users ();\n"),
        ]
        written = write_generated_files(out, files)
        assert written == [out / "src" / "schema.rs", out / "migrations" / "001_create_users" / "up.sql"]
        assert (out / "src" / "schema.rs").read_text(encoding="utf-8") == "// schema\n"

    def test_identical_content_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "a.rs").write_text("same\n", encoding="utf-8")
        written = write_generated_files(
            tmp_path, [GeneratedFile("a.rs", "same\n"), GeneratedFile("b.rs", "new\n")]
        )
        assert written == [tmp_path / "b.rs"]

    def test_failure_rolls_back(self, tmp_path: Path) -> None:
        (tmp_path / "existing.rs").write_text("old\n", encoding="utf-8")
        (tmp_path / "blocked").mkdir()
        files = [
            GeneratedFile("new.rs", "new\n"),
            GeneratedFile("existing.rs", "changed\n"),
            GeneratedFile("blocked", "cannot write over a directory\n"),
        ]
        with pytest.raises(OSError):
            write_generated_files(tmp_path, files)
        assert not (tmp_path / "new.rs").exists()
        assert (tmp_path / "existing.rs").read_text(encoding="utf-8") == "old\n"

    def test_escape_rolls_back(self, tmp_path: Path) -> None:
        out = tmp_path / "out"
        with pytest.raises(ValueError):
            write_generated_files(out, [GeneratedFile("ok.rs", "x"), GeneratedFile("../bad.rs", "y")])
        assert not (out / "ok.rs").exists()
        assert not (tmp_path / "bad.rs").exists()


class TestOutputTransaction:
    def test_commit_keeps_files(self, tmp_path: Path) -> None:
        with output_transaction(tmp_path) as txn:
            txn.write_file("a.rs", "a")
        assert (tmp_path / "a.rs").exists()
        assert txn.written == [tmp_path / "a.rs"]

    def test_exception_in_block_rolls_back(self, tmp_path: Path) -> None:
        with pytest.raises(RuntimeError), output_transaction(tmp_path) as txn:
            txn.write_file("a.rs", "a")
            raise RuntimeError("stop")
        assert not (tmp_path / "a.rs").exists()
