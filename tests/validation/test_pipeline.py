"""Tests for the end-to-end validation pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

from docplane.config.models import DocPlaneConfig
from docplane.validation.models import Category, IssueKind
from docplane.validation.pipeline import run_validation

if TYPE_CHECKING:
    from conftest import ProjectBuilder


def _clean_project(project: ProjectBuilder) -> None:
    project.feature("auth", body="Provides 01--02. Uses [[Session]].\n", dependencies=["users"])
    project.feature("users")
    project.interface("01--02", "auth", "users", shared_types=["01--02_02--03"])
    project.interface("02--03", "users", "auth", shared_types=["01--02_02--03"])
    project.shared("01--02_02--03")
    project.write("docs/GLOSSARY.md", "## [[Session]]\nA login session.\n")
    project.code("src/auth.ts")
    project.code("src/users.ts")


class TestRunValidation:
    """One build, every validator, one report."""

    def test_given_clean_project_when_validated_then_success(
        self, project: ProjectBuilder, config: DocPlaneConfig
    ) -> None:
        """Every feature mentions the interfaces it sends."""
        # Given
        _clean_project(project)
        project.feature("users", body="Sends 02--03 events.\n")

        # When
        report = run_validation(project.root, config)

        # Then
        assert report.success
        assert report.errors == []
        assert report.warnings == []
        assert report.orphans == []

    def test_given_problems_in_every_category_when_validated_then_all_reported(
        self, project: ProjectBuilder, config: DocPlaneConfig
    ) -> None:
        # Given
        _clean_project(project)
        project.feature("users", dependencies=["auth"], body="Uses [[Nowhere]].\n")
        project.shared("02--03_01--02")
        project.code("src/stray.ts")

        # When
        report = run_validation(project.root, config)

        # Then
        kinds = {issue.kind for issue in report.issues()}
        assert {
            IssueKind.SORTING,
            IssueKind.CIRCULAR_DEPENDENCY,
            IssueKind.INTERFACE_MISMATCH,
            IssueKind.UNDEFINED_TERM,
            IssueKind.ORPHAN,
        } <= kinds
        assert not report.success
        assert [o.path for o in report.orphans] == ["src/stray.ts"]

    def test_given_category_filter_when_validated_then_only_selected_run(
        self, project: ProjectBuilder, config: DocPlaneConfig
    ) -> None:
        _clean_project(project)
        project.feature("users", dependencies=["auth"])
        project.code("src/stray.ts")

        report = run_validation(project.root, config, only=[Category.ORPHANS])

        assert {i.kind for i in report.issues()} == {IssueKind.ORPHAN}
        assert report.success

    def test_given_warnings_only_when_validated_then_still_success(
        self, project: ProjectBuilder, config: DocPlaneConfig
    ) -> None:
        """Orphans and unused definitions never fail a run."""
        _clean_project(project)
        project.feature("users", body="Sends 02--03 events.\n")
        project.write("docs/terms/extra.md", "## [[Unused Thing]]\nNever cited.\n")
        project.code("src/stray.ts")

        report = run_validation(project.root, config)

        assert report.success
        assert {i.kind for i in report.warnings} == {
            IssueKind.ORPHAN,
            IssueKind.UNUSED_DEFINITION,
        }
