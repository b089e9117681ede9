"""Tests for structural validation: cycles, interface endpoints, required fields."""

from __future__ import annotations

from typing import TYPE_CHECKING

from docplane.config.models import DocPlaneConfig
from docplane.graph.builder import build_project
from docplane.validation.models import Category, IssueKind
from docplane.validation.structure import (
    StructureChecker,
    check_dependency_cycles,
    check_interfaces,
    check_required_fields,
    find_cycles,
)

if TYPE_CHECKING:
    from conftest import ProjectBuilder


class TestFindCycles:
    """Each distinct cycle is reported once, closed on its first node."""

    def test_given_two_node_loop_when_searched_then_single_cycle(self) -> None:
        assert find_cycles({"X": ["Y"], "Y": ["X"]}) == [("X", "Y", "X")]

    def test_given_self_dependency_when_searched_then_reported(self) -> None:
        assert find_cycles({"a": ["a"]}) == [("a", "a")]

    def test_given_acyclic_graph_when_searched_then_nothing(self) -> None:
        graph = {"a": ["b", "c"], "b": ["c"], "c": [], "d": ["a"]}
        assert find_cycles(graph) == []

    def test_given_edges_to_unknown_nodes_when_searched_then_ignored(self) -> None:
        assert find_cycles({"a": ["missing"], "b": ["a"]}) == []

    def test_given_two_disjoint_cycles_when_searched_then_both(self) -> None:
        graph = {"a": ["b"], "b": ["c"], "c": ["a"], "x": ["y"], "y": ["x"]}
        assert find_cycles(graph) == [("a", "b", "c", "a"), ("x", "y", "x")]

    def test_given_long_chain_when_searched_then_no_recursion_limit(self) -> None:
        """Traversal uses an explicit stack."""
        graph = {f"n{i:05d}": [f"n{i + 1:05d}"] for i in range(5000)}
        graph["n05000"] = ["n00000"]
        cycles = find_cycles(graph)
        assert len(cycles) == 1
        assert len(cycles[0]) == 5002


class TestDependencyCycles:
    def test_given_mutual_dependencies_when_checked_then_one_circular_dependency(
        self, project: ProjectBuilder, config: DocPlaneConfig
    ) -> None:
        # Given
        project.feature("X", dependencies=["Y"])
        project.feature("Y", dependencies=["X"])

        # When
        issues = check_dependency_cycles(build_project(project.root, config).index)

        # Then
        assert len(issues) == 1
        assert issues[0].kind is IssueKind.CIRCULAR_DEPENDENCY
        assert issues[0].cycle == ("X", "Y", "X")
        assert issues[0].file == "tasks/features/X.md"

    def test_given_related_features_loop_when_checked_then_no_cycle(
        self, project: ProjectBuilder, config: DocPlaneConfig
    ) -> None:
        """related_features is not directional."""
        project.feature("X", related_features=["Y"])
        project.feature("Y", related_features=["X"])
        assert check_dependency_cycles(build_project(project.root, config).index) == []


class TestInterfaceEndpoints:
    def test_given_unmentioned_interface_when_checked_then_not_referenced(
        self, project: ProjectBuilder, config: DocPlaneConfig
    ) -> None:
        # Given
        project.feature("a")
        project.feature("b")
        project.interface("01--02", "a", "b")

        # When
        build = build_project(project.root, config)
        issues = check_interfaces(build.index, build.corpus)

        # Then
        assert [(i.subject, i.detail) for i in issues] == [("01--02", "not_referenced")]
        assert "tasks/features/a.md" in issues[0].message

    def test_given_mentioned_interface_when_checked_then_clean(
        self, project: ProjectBuilder, config: DocPlaneConfig
    ) -> None:
        project.feature("a", body="Exposes interface 01--02 to b.")
        project.feature("b")
        project.interface("01--02", "a", "b")
        build = build_project(project.root, config)
        assert check_interfaces(build.index, build.corpus) == []

    def test_given_unknown_endpoints_when_checked_then_both_reported(
        self, project: ProjectBuilder, config: DocPlaneConfig
    ) -> None:
        project.interface("01--02", "ghost", "phantom")
        build = build_project(project.root, config)
        details = [i.detail for i in check_interfaces(build.index, build.corpus)]
        assert details == ["from_not_found", "to_not_found"]


class TestRequiredFields:
    def test_given_incomplete_documents_when_checked_then_each_missing_field(
        self, project: ProjectBuilder, config: DocPlaneConfig
    ) -> None:
        """Missing fields are frontmatter issues in the structure category."""
        # Given
        project.write("tasks/features/a.md", "---\nfeature: a\n---\n# a\n")
        project.write("tasks/interfaces/01--02.md", "---\nfrom: a\ntype:\n---\n")

        # When
        build = build_project(project.root, config)
        issues = check_required_fields(build.corpus)

        # Then
        assert [(i.file, i.subject) for i in issues] == [
            ("tasks/features/a.md", "status"),
            ("tasks/features/a.md", "entry_point"),
            ("tasks/interfaces/01--02.md", "to"),
            ("tasks/interfaces/01--02.md", "type"),
        ]
        assert all(i.kind is IssueKind.FRONTMATTER for i in issues)
        assert all(i.resolved_category is Category.STRUCTURE for i in issues)


class TestStructureChecker:
    def test_given_valid_corpus_when_validated_then_no_issues(
        self, project: ProjectBuilder, config: DocPlaneConfig
    ) -> None:
        project.feature("a", body="Provides 01--02.", dependencies=["b"])
        project.feature("b")
        project.interface("01--02", "a", "b")
        build = build_project(project.root, config)
        assert StructureChecker().validate(build.index, build.corpus) == []
