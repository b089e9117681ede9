"""Naming and shared-type validation.

Filenames and frontmatter must move in lockstep: a shared type named
``01--02_02--03.md`` lists exactly ``01--02`` and ``02--03`` in its
``interfaces`` array, in that order. That is what lets a tool resolve a group
from either direction without opening the file.
"""

from __future__ import annotations

import re

from docplane.config.constants import MIN_SHARED_PAIRS, PAIR_TOKEN_PATTERN, TOKEN_SEPARATOR
from docplane.config.models import NamingConfig
from docplane.graph.corpus import Corpus
from docplane.graph.models import InterfaceDocument, SharedTypeDocument
from docplane.graph.query import canonical_group_id
from docplane.validation.models import IssueKind, ValidationIssue

_PAIR_TOKEN = re.compile(PAIR_TOKEN_PATTERN)


def is_pair_token(token: str) -> bool:
    return _PAIR_TOKEN.fullmatch(token) is not None


def suggested_name(tokens: list[str]) -> str:
    """The canonical filename stem for ``tokens``."""
    return canonical_group_id(tokens)


def check_shared_filename(
    stem: str, path: str, naming: NamingConfig
) -> list[ValidationIssue]:
    """Filename grammar, duplicates, ordering and complexity for one shared type."""
    issues: list[ValidationIssue] = []
    tokens = stem.split(TOKEN_SEPARATOR) if stem else []

    if len(tokens) < MIN_SHARED_PAIRS:
        issues.append(
            ValidationIssue.error(
                IssueKind.FORMAT,
                path,
                f"Shared type '{stem}' must join at least {MIN_SHARED_PAIRS} pair tokens "
                f"with '{TOKEN_SEPARATOR}'",
                subject=stem,
            )
        )

    malformed = [token for token in tokens if not is_pair_token(token)]
    for token in malformed:
        issues.append(
            ValidationIssue.error(
                IssueKind.FORMAT,
                path,
                f"Token '{token}' is not a pair token (expected AA--BB)",
                subject=stem,
            )
        )
    if malformed:
        return issues

    duplicates = sorted({token for token in tokens if tokens.count(token) > 1})
    if duplicates:
        issues.append(
            ValidationIssue.error(
                IssueKind.DUPLICATE,
                path,
                f"Duplicate pair tokens: {', '.join(duplicates)}",
                subject=stem,
                suggestion=suggested_name(tokens),
            )
        )

    if tokens != sorted(tokens):
        fixed = suggested_name(tokens)
        issues.append(
            ValidationIssue.error(
                IssueKind.SORTING,
                path,
                f"Pair tokens are not in ascending order (rename to {fixed}.md)",
                subject=stem,
                suggestion=fixed,
            )
        )

    pairs = len(set(tokens))
    if pairs >= naming.max_pairs:
        issues.append(
            ValidationIssue.error(
                IssueKind.COMPLEXITY,
                path,
                f"Shared type spans {pairs} interface pairs (limit {naming.max_pairs}); "
                "promote it to a project-global type",
                subject=stem,
            )
        )
    elif pairs >= naming.warn_at_pairs:
        issues.append(
            ValidationIssue.warning(
                IssueKind.COMPLEXITY,
                path,
                f"Shared type spans {pairs} interface pairs; consider promoting it to a "
                "project-global type",
                subject=stem,
            )
        )
    return issues


def check_shared_frontmatter(doc: SharedTypeDocument) -> list[ValidationIssue]:
    """``interfaces``, ``type`` and ``status`` against the filename."""
    path, stem = doc.path, doc.group_id
    fm = doc.frontmatter
    if not fm.present:
        return [
            ValidationIssue.error(
                IssueKind.FRONTMATTER, path, "Shared type has no frontmatter", subject=stem
            )
        ]

    issues: list[ValidationIssue] = []
    if not fm.is_array("interfaces"):
        issues.append(
            ValidationIssue.error(
                IssueKind.FRONTMATTER,
                path,
                "Field 'interfaces' is missing or not a list",
                subject=stem,
            )
        )
    else:
        interfaces = doc.interfaces
        tokens = set(doc.tokens)
        listed = set(interfaces)
        if listed != tokens:
            missing = sorted(tokens - listed)
            extra = sorted(listed - tokens)
            parts: list[str] = []
            if missing:
                parts.append(f"missing {', '.join(missing)}")
            if extra:
                parts.append(f"unexpected {', '.join(extra)}")
            issues.append(
                ValidationIssue.error(
                    IssueKind.REFERENCE,
                    path,
                    f"'interfaces' does not match the filename tokens ({'; '.join(parts)})",
                    subject=stem,
                )
            )
        if len(listed) != len(interfaces):
            issues.append(
                ValidationIssue.error(
                    IssueKind.FRONTMATTER,
                    path,
                    "'interfaces' contains duplicate entries",
                    subject=stem,
                )
            )
        if interfaces != sorted(interfaces):
            issues.append(
                ValidationIssue.error(
                    IssueKind.FRONTMATTER,
                    path,
                    "'interfaces' is not sorted ascending",
                    subject=stem,
                    suggestion=", ".join(sorted(listed)),
                )
            )

    if doc.type_field != "shared":
        issues.append(
            ValidationIssue.error(
                IssueKind.FRONTMATTER,
                path,
                f"Field 'type' must be \"shared\" (found {doc.type_field!r})",
                subject=stem,
            )
        )
    if not doc.status:
        issues.append(
            ValidationIssue.error(
                IssueKind.FRONTMATTER, path, "Field 'status' is missing", subject=stem
            )
        )
    return issues


def check_interface_filename(doc: InterfaceDocument) -> list[ValidationIssue]:
    if is_pair_token(doc.interface_id):
        return []
    return [
        ValidationIssue.error(
            IssueKind.FORMAT,
            doc.path,
            f"Interface filename '{doc.interface_id}' is not a single pair token (AA--BB)",
            subject=doc.interface_id,
        )
    ]


def check_cross_links(
    interfaces: list[InterfaceDocument], shared: list[SharedTypeDocument]
) -> list[ValidationIssue]:
    """Interface ``shared_types`` and group ``interfaces`` must point at each other."""
    groups = {doc.group_id: doc for doc in shared}
    by_id = {doc.interface_id: doc for doc in interfaces}
    issues: list[ValidationIssue] = []

    for doc in interfaces:
        for group_id in doc.shared_types:
            group = groups.get(group_id)
            if group is None:
                issues.append(
                    ValidationIssue.error(
                        IssueKind.REFERENCE,
                        doc.path,
                        f"shared_types names '{group_id}' but no such shared type exists",
                        subject=doc.interface_id,
                    )
                )
            elif doc.interface_id not in group.interfaces:
                issues.append(
                    ValidationIssue.error(
                        IssueKind.REFERENCE,
                        doc.path,
                        f"shared_types names '{group_id}' but {group_id} does not list "
                        f"'{doc.interface_id}' in its interfaces",
                        subject=doc.interface_id,
                    )
                )

    for group in shared:
        for interface_id in dict.fromkeys(group.interfaces):
            interface = by_id.get(interface_id)
            if interface is None or not interface.frontmatter.is_array("shared_types"):
                issues.append(
                    ValidationIssue.warning(
                        IssueKind.REFERENCE,
                        group.path,
                        f"interfaces lists '{interface_id}' but that interface is missing "
                        "or declares no shared_types",
                        subject=group.group_id,
                    )
                )
            elif group.group_id not in interface.shared_types:
                issues.append(
                    ValidationIssue.error(
                        IssueKind.REFERENCE,
                        group.path,
                        f"interfaces lists '{interface_id}' but {interface_id} does not list "
                        f"'{group.group_id}' in its shared_types",
                        subject=group.group_id,
                    )
                )
    return issues


class NamingValidator:
    """Runs every naming check over a parsed corpus. Read-only."""

    def __init__(self, naming: NamingConfig) -> None:
        self.naming = naming

    def validate(self, corpus: Corpus) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for interface in corpus.interfaces:
            issues.extend(check_interface_filename(interface))
        for doc in corpus.shared:
            issues.extend(check_shared_filename(doc.group_id, doc.path, self.naming))
            issues.extend(check_shared_frontmatter(doc))
        issues.extend(check_cross_links(corpus.interfaces, corpus.shared))
        return issues
