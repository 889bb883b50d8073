"""Shared pytest fixtures for gqlorm tests."""

from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from gqlorm.codegen import build_schema_graph, generate, parse_sdl
from gqlorm.config.models import CodegenConfig
from gqlorm.config.settings import GqlormSettings
from gqlorm.domain.schema import SchemaGraph
from gqlorm.infrastructure.project import Project

USER_POST_SDL = """\
type Query {
  users: [User!]!
}

type User {
  id: ID!
  name: String!
  email: String
  posts: [Post!]!
}

type Post {
  id: ID!
  title: String!
  body: String
  authorId: ID!
  author: User!
}
"""

BLOG_SDL = """\
\"\"\"Publication state\"\"\"
enum Status {
  DRAFT
  PUBLISHED
}

scalar DateTime

type Category {
  id: ID!
  name: String!
  parentId: ID
}

type Author {
  id: ID!
  name: String!
  tags: [String!]
}

type Article {
  id: ID!
  title: String!
  status: Status!
  publishedAt: DateTime
  score: Float
  authorId: ID!
  categoryId: ID
}
"""


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep GQLORM_* variables from the developer's shell out of tests."""
    import os

    for name in list(os.environ):
        if name.startswith("GQLORM_"):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    yield
    from gqlorm.services.telemetry import _current_span, disable_telemetry

    disable_telemetry()
    _current_span.set(None)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def user_post_sdl() -> str:
    return USER_POST_SDL


@pytest.fixture
def blog_sdl() -> str:
    """Enums, a custom scalar, a float, a list, an unmatched key and a nullable key."""
    return BLOG_SDL


@pytest.fixture
def user_post_graph() -> SchemaGraph:
    return build_schema_graph(document=parse_sdl(USER_POST_SDL))


@pytest.fixture
def run_codegen() -> Callable[..., dict[str, str]]:
    """Run the core pipeline on SDL text; returns ``{relative_path: content}``."""

    def run(sdl: str, **config: Any) -> dict[str, str]:
        result = generate(CodegenConfig(**config), document=parse_sdl(sdl))
        return {f.relative_path: f.content for f in result.files}

    return run


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """A project directory with ``schema.graphql`` and a minimal ``gqlorm.toml``."""
    (tmp_path / "schema.graphql").write_text(USER_POST_SDL, encoding="utf-8")
    (tmp_path / "gqlorm.toml").write_text(
        '[source]\npath = "schema.graphql"\n\n[codegen]\noutput_dir = "generated"\n',
        encoding="utf-8",
    )
    return tmp_path


@pytest.fixture
def project(project_root: Path) -> Project:
    settings = GqlormSettings.from_cli(project_root=project_root)
    return Project(settings)


@pytest.fixture
def _in_project(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the project root so the CLI discovers its config.

    Use via ``@pytest.mark.usefixtures("_in_project")`` on command test classes.
    """
    monkeypatch.chdir(project_root)
