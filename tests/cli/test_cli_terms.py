"""Tests for the dpl terms commands."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner

from docplane.cli.main import cli

if TYPE_CHECKING:
    from conftest import ProjectBuilder

runner = CliRunner()


@pytest.fixture
def glossary(project: ProjectBuilder) -> ProjectBuilder:
    project.write(
        "docs/GLOSSARY.md",
        "# Glossary\n\n"
        "## [[Session]]\n**Aliases**: Login Session\n\nAn authenticated visit.\n\n"
        "## [[Token]]\n\nA signed credential.\n",
    )
    project.feature("auth", body="Issues a [[Token]] per [[Session]].\n")
    return project


class TestTermsList:
    def test_given_glossary_when_listed_as_json_then_sorted_with_usage(
        self, glossary: ProjectBuilder
    ) -> None:
        result = runner.invoke(cli, ["terms", "list", str(glossary.root), "--json"])

        assert result.exit_code == 0, result.output
        terms = json.loads(result.stdout)
        assert [t["name"] for t in terms] == ["Session", "Token"]
        assert terms[0]["aliases"] == ["Login Session"]
        assert all(t["usage_count"] == 1 for t in terms)

    def test_given_glossary_when_listed_then_one_line_per_term(
        self, glossary: ProjectBuilder
    ) -> None:
        result = runner.invoke(cli, ["terms", "list", str(glossary.root)])

        assert result.exit_code == 0, result.output
        assert "Session (Login Session)  [global] docs/GLOSSARY.md:3" in result.stdout
        assert "2 global terms" in result.stderr

    def test_given_document_filter_when_listed_then_only_its_definitions(
        self, glossary: ProjectBuilder
    ) -> None:
        """--in accepts a ./ prefixed path and counts the references in that file."""
        # Given
        glossary.write("docs/notes.md", "## [[Ledger]]\nA record of entries.\n")

        # When
        result = runner.invoke(
            cli, ["terms", "list", str(glossary.root), "--in", "./tasks/features/auth.md"]
        )
        notes = runner.invoke(
            cli, ["terms", "list", str(glossary.root), "--in", "docs/notes.md", "--json"]
        )

        # Then
        assert result.exit_code == 0, result.output
        assert "0 definitions, 2 references in tasks/features/auth.md" in result.stderr
        assert notes.exit_code == 0, notes.output
        assert [t["name"] for t in json.loads(notes.stdout)] == ["Ledger"]


class TestTermsFind:
    def test_given_alias_query_when_found_then_term_listed(self, glossary: ProjectBuilder) -> None:
        result = runner.invoke(cli, ["terms", "find", "login", str(glossary.root), "--json"])

        assert result.exit_code == 0, result.output
        assert [t["name"] for t in json.loads(result.stdout)] == ["Session"]

    def test_given_no_match_when_searched_then_error(self, glossary: ProjectBuilder) -> None:
        result = runner.invoke(cli, ["terms", "find", "zebra", str(glossary.root)])
        assert result.exit_code == 1
        assert "No term matches" in result.stderr
