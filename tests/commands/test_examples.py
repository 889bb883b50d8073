"""Tests for the --examples flag on CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from gqlorm.cli import cli

EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["generate", "--examples"], ["gqlorm generate --dry-run --json", "--orm sea_orm"]),
    (["plan", "--examples"], ["gqlorm plan --schema schema.graphql"]),
    (["init", "--examples"], ["--no-generate", "gqlorm init --url"]),
    (["integrate", "--examples"], ["gqlorm integrate --force --no-scripts"]),
]


class TestExamples:
    @pytest.mark.parametrize(("args", "keywords"), EXAMPLES_COMMANDS)
    def test_examples(self, cli_runner: CliRunner, args: list[str], keywords: list[str]) -> None:
        result = cli_runner.invoke(cli, args)
        assert result.exit_code == 0
        assert result.output.startswith("Examples for '")
        for keyword in keywords:
            assert keyword in result.output

    def test_help_stays_short(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["generate", "--help"])
        assert result.exit_code == 0
        assert "--examples" in result.output
        assert "gqlorm generate --dry-run --json" not in result.output
