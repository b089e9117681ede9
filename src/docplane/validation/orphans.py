"""Orphan detection.

A file is an orphan when it is classified source or config and nothing
reaches it: no feature documents it and no code imports it. Test and
generated files are exempt. Results are advisory.
"""

from __future__ import annotations

from docplane.graph.corpus import Corpus
from docplane.graph.models import FileClass, ReferenceIndex
from docplane.graph.scanner import ScannedFile
from docplane.validation.models import IssueKind, Orphan, ValidationIssue

_CANDIDATES = frozenset({FileClass.SOURCE, FileClass.CONFIG})


def mentioned_paths(corpus: Corpus) -> set[str]:
    """Paths written out in feature and interface prose."""
    found: set[str] = set()
    for feature in corpus.features:
        found.update(feature.mentioned_paths)
    for interface in corpus.interfaces:
        found.update(interface.mentioned_paths)
    return found


def find_orphans(
    files: list[ScannedFile],
    index: ReferenceIndex,
    mentioned: set[str] | None = None,
) -> list[Orphan]:
    mentioned = mentioned or set()
    orphans: list[Orphan] = []
    for scanned in files:
        if scanned.classification not in _CANDIDATES:
            continue
        record = index.code.get(scanned.path)
        if record is not None and (record.documented_in or record.imported_by):
            continue
        orphans.append(
            Orphan(
                path=scanned.path,
                classification=scanned.classification,
                referenced=scanned.path in mentioned,
            )
        )
    return sorted(orphans, key=lambda o: o.path)


def orphan_issues(orphans: list[Orphan]) -> list[ValidationIssue]:
    """Orphans as warnings, for reports grouped by file."""
    return [
        ValidationIssue.warning(
            IssueKind.ORPHAN,
            orphan.path,
            f"{orphan.classification.value.capitalize()} file is not documented by any "
            "feature and not imported by any code"
            + (" (mentioned in prose only)" if orphan.referenced else ""),
        )
        for orphan in orphans
    ]
