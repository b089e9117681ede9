"""Tests for the dpl validate command."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from click.testing import CliRunner

from docplane.cli.main import cli

if TYPE_CHECKING:
    from conftest import ProjectBuilder

runner = CliRunner()


def _valid(project: ProjectBuilder) -> None:
    project.feature("auth", body="Provides 01--02.", dependencies=["users"])
    project.feature("users")
    project.interface("01--02", "auth", "users")
    project.code("src/auth.ts")
    project.code("src/users.ts")


class TestValidateCommand:
    """Exit status follows errors; warnings never fail."""

    def test_given_valid_project_when_validated_then_exit_zero(
        self, project: ProjectBuilder
    ) -> None:
        _valid(project)

        result = runner.invoke(cli, ["validate", str(project.root)])

        assert result.exit_code == 0, result.output
        assert "0 errors" in result.stderr

    def test_given_cycle_when_validated_then_exit_one_and_grouped_by_file(
        self, project: ProjectBuilder
    ) -> None:
        # Given
        _valid(project)
        project.feature("users", dependencies=["auth"])

        # When
        result = runner.invoke(cli, ["validate", str(project.root)])

        # Then
        assert result.exit_code == 1
        assert "tasks/features/auth.md" in result.stderr
        assert "[circular_dependency]" in result.stderr

    def test_given_json_flag_when_validated_then_report_on_stdout(
        self, project: ProjectBuilder
    ) -> None:
        _valid(project)
        project.shared("02--03_01--02")

        result = runner.invoke(cli, ["validate", str(project.root), "--json"])

        assert result.exit_code == 1
        report = json.loads(result.stdout)
        assert report["summary"]["success"] is False
        sorting = [e for e in report["errors"] if e["kind"] == "sorting"]
        assert sorting[0]["suggestion"] == "01--02_02--03"

    def test_given_orphan_when_fail_on_orphans_then_exit_one(
        self, project: ProjectBuilder
    ) -> None:
        _valid(project)
        project.code("src/stray.ts")

        relaxed = runner.invoke(cli, ["validate", str(project.root), "--json"])
        strict = runner.invoke(
            cli, ["validate", str(project.root), "--json", "--fail-on-orphans"]
        )

        assert relaxed.exit_code == 0
        assert strict.exit_code == 1
        assert json.loads(strict.stdout)["orphans"][0]["path"] == "src/stray.ts"

    def test_given_only_filter_when_validated_then_other_validators_skipped(
        self, project: ProjectBuilder
    ) -> None:
        _valid(project)
        project.feature("users", dependencies=["auth"])

        result = runner.invoke(
            cli, ["validate", str(project.root), "--json", "--only", "naming", "--only", "terms"]
        )

        assert result.exit_code == 0
        assert json.loads(result.stdout)["errors"] == []

    def test_given_unknown_category_when_validated_then_usage_error(
        self, project: ProjectBuilder
    ) -> None:
        result = runner.invoke(cli, ["validate", str(project.root), "--only", "style"])
        assert result.exit_code == 2
