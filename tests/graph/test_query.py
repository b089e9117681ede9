"""Tests for the read-only index query surface."""

import pytest

from docplane.graph.models import (
    CodeKind,
    CodeRecord,
    FeatureRecord,
    InterfaceEdge,
    ReferenceIndex,
    TermEntry,
    TermScope,
)
from docplane.graph.query import IndexQuery, canonical_group_id, group_tokens


@pytest.fixture
def query() -> IndexQuery:
    index = ReferenceIndex(
        version="1.0",
        generated="2026-01-01T00:00:00.000Z",
        features={
            "auth": FeatureRecord(feature_id="auth", file="tasks/features/auth.md"),
            "users": FeatureRecord(
                feature_id="users", file="tasks/features/users.md", used_by=["auth"]
            ),
        },
        code={
            "src/auth.ts": CodeRecord(
                path="src/auth.ts", kind=CodeKind.SOURCE, documented_in=["auth", "ghost"]
            ),
        },
        interfaces={
            "01--02": InterfaceEdge(
                interface_id="01--02",
                file="tasks/interfaces/01--02.md",
                from_feature="auth",
                to_feature="users",
                interface_type="api",
                shared_types=["01--02_02--03"],
            ),
            "02--03": InterfaceEdge(
                interface_id="02--03",
                file="tasks/interfaces/02--03.md",
                from_feature="users",
                to_feature="auth",
                interface_type="event",
                shared_types=["02--03_01--02"],
            ),
        },
        terms={
            "Session": TermEntry(
                name="Session",
                file="docs/GLOSSARY.md",
                line=3,
                scope=TermScope.GLOBAL,
                aliases=["Login Session"],
            ),
            "tasks/features/auth.md#Token": TermEntry(
                name="Token", file="tasks/features/auth.md", line=9, scope=TermScope.DOCUMENT
            ),
        },
    )
    return IndexQuery(index)


class TestGroupIds:
    def test_given_unsorted_tokens_when_canonicalized_then_sorted_and_unique(self) -> None:
        assert canonical_group_id(["02--03", "01--02", "02--03"]) == "01--02_02--03"

    def test_given_group_id_when_split_then_tokens_in_authored_order(self) -> None:
        assert group_tokens("02--03_01--02") == ["02--03", "01--02"]


class TestIndexQuery:
    """Lookups return records or None, never raise."""

    def test_given_known_ids_when_queried_then_records_returned(self, query: IndexQuery) -> None:
        assert query.feature("auth").file == "tasks/features/auth.md"  # type: ignore[union-attr]
        assert query.code("./src/auth.ts") is query.code("src/auth.ts")
        assert query.interface("01--02").interface_type == "api"  # type: ignore[union-attr]
        assert query.feature("nope") is None

    def test_given_alias_when_term_queried_then_canonical_entry(self, query: IndexQuery) -> None:
        # When
        entry = query.term("Login Session")

        # Then
        assert entry is not None
        assert entry.name == "Session"

    def test_given_local_term_when_queried_with_file_then_found(self, query: IndexQuery) -> None:
        """Local terms are only reachable through their document."""
        assert query.term("Token") is None
        entry = query.term("Token", file="tasks/features/auth.md")
        assert entry is not None
        assert entry.scope is TermScope.DOCUMENT

    def test_given_interface_when_groups_requested_then_found_from_ids_alone(
        self, query: IndexQuery
    ) -> None:
        """Authored and canonical ids of the same group both come back."""
        groups = query.groups_for_interface("01--02")
        assert [g.group_id for g in groups] == ["01--02_02--03", "02--03_01--02"]
        assert {g.canonical_id for g in groups} == {"01--02_02--03"}
        assert groups[0].interfaces == ("01--02", "02--03")

    def test_given_group_id_when_interfaces_requested_then_edges_returned(
        self, query: IndexQuery
    ) -> None:
        edges = query.interfaces_for_group("02--03_01--02_09--10")
        assert [e.interface_id for e in edges] == ["01--02", "02--03"]

    def test_given_code_path_when_documenting_features_requested_then_unknown_skipped(
        self, query: IndexQuery
    ) -> None:
        assert [f.feature_id for f in query.features_documenting("src/auth.ts")] == ["auth"]
        assert query.features_documenting("src/missing.ts") == []

    def test_given_feature_when_dependents_requested_then_used_by(self, query: IndexQuery) -> None:
        assert query.dependents("users") == ["auth"]
        assert query.dependents("nope") == []
