"""Structural consistency checks over the assembled graph.

- Dependency cycles between features (``dependencies`` edges only)
- Interface endpoints: both features exist, and the ``from`` feature's
  document mentions the interface id
- Required frontmatter fields per document kind
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from docplane.graph.corpus import Corpus
from docplane.graph.models import Document, ReferenceIndex
from docplane.validation.models import Category, IssueKind, ValidationIssue

REQUIRED_FEATURE_FIELDS: tuple[str, ...] = ("feature", "status", "entry_point")
REQUIRED_INTERFACE_FIELDS: tuple[str, ...] = ("from", "to", "type")


def _rotation_key(cycle: Sequence[str]) -> tuple[str, ...]:
    """Identity of a closed cycle regardless of where the walk entered it."""
    loop = list(cycle[:-1])
    pivot = loop.index(min(loop))
    return tuple(loop[pivot:] + loop[:pivot])


def find_cycles(graph: Mapping[str, Sequence[str]]) -> list[tuple[str, ...]]:
    """Cycles in a directed graph, each as ``(a, b, ..., a)``.

    Depth-first with an explicit stack and an on-stack set. Nodes whose
    descendants are fully explored are memoized and never re-entered, so
    dense graphs stay linear. Edges to nodes outside ``graph`` are ignored.
    Every strongly connected component with a cycle yields at least one.
    """
    done: set[str] = set()
    seen: set[tuple[str, ...]] = set()
    cycles: list[tuple[str, ...]] = []

    for root in sorted(graph):
        if root in done:
            continue
        path = [root]
        on_stack = {root}
        pending = [iter(sorted(set(graph[root])))]

        while pending:
            nxt = next(pending[-1], None)
            if nxt is None:
                pending.pop()
                node = path.pop()
                on_stack.discard(node)
                done.add(node)
                continue
            if nxt not in graph or nxt in done:
                continue
            if nxt in on_stack:
                cycle = (*path[path.index(nxt) :], nxt)
                key = _rotation_key(cycle)
                if key not in seen:
                    seen.add(key)
                    cycles.append(cycle)
                continue
            path.append(nxt)
            on_stack.add(nxt)
            pending.append(iter(sorted(set(graph[nxt]))))

    return cycles


def check_dependency_cycles(index: ReferenceIndex) -> list[ValidationIssue]:
    graph = {fid: record.depends_on for fid, record in index.features.items()}
    issues: list[ValidationIssue] = []
    for cycle in find_cycles(graph):
        issues.append(
            ValidationIssue.error(
                IssueKind.CIRCULAR_DEPENDENCY,
                index.features[cycle[0]].file,
                f"Circular dependency: {' -> '.join(cycle)}",
                subject=cycle[0],
                cycle=cycle,
            )
        )
    return issues


def check_interfaces(index: ReferenceIndex, corpus: Corpus) -> list[ValidationIssue]:
    """Both endpoints exist; the ``from`` document mentions the interface."""
    features = corpus.feature_map
    issues: list[ValidationIssue] = []

    for interface_id, edge in index.interfaces.items():
        source, target = edge.from_feature, edge.to_feature
        if source is not None:
            doc = features.get(source)
            if doc is None:
                issues.append(
                    ValidationIssue.error(
                        IssueKind.INTERFACE_MISMATCH,
                        edge.file,
                        f"'from' feature not found ({source})",
                        subject=interface_id,
                        detail="from_not_found",
                    )
                )
            elif interface_id not in doc.text:
                issues.append(
                    ValidationIssue.error(
                        IssueKind.INTERFACE_MISMATCH,
                        edge.file,
                        f"Interface is not referenced in {source} ({doc.path})",
                        subject=interface_id,
                        detail="not_referenced",
                    )
                )
        if target is not None and target not in features:
            issues.append(
                ValidationIssue.error(
                    IssueKind.INTERFACE_MISMATCH,
                    edge.file,
                    f"'to' feature not found ({target})",
                    subject=interface_id,
                    detail="to_not_found",
                )
            )
    return issues


def _missing_fields(doc: Document, required: tuple[str, ...]) -> list[ValidationIssue]:
    return [
        ValidationIssue.error(
            IssueKind.FRONTMATTER,
            doc.path,
            f"Required field '{name}' is missing",
            subject=name,
            category=Category.STRUCTURE,
        )
        for name in required
        if not doc.frontmatter.has(name)
    ]


def check_required_fields(corpus: Corpus) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for feature in corpus.features:
        issues.extend(_missing_fields(feature, REQUIRED_FEATURE_FIELDS))
    for interface in corpus.interfaces:
        issues.extend(_missing_fields(interface, REQUIRED_INTERFACE_FIELDS))
    return issues


class StructureChecker:
    """Runs all structural checks. Read-only over index and corpus."""

    def validate(self, index: ReferenceIndex, corpus: Corpus) -> list[ValidationIssue]:
        return [
            *check_dependency_cycles(index),
            *check_interfaces(index, corpus),
            *check_required_fields(corpus),
        ]
