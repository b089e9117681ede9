"""Validation models - issues, orphans and the aggregated report."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from docplane.graph.models import FileClass, ParseDiagnostic


class Severity(Enum):
    """Issue severity. Only errors affect success."""

    ERROR = "error"
    WARNING = "warning"


class IssueKind(Enum):
    """Kind of validation finding."""

    # Naming / shared types
    FORMAT = "format"
    SORTING = "sorting"
    DUPLICATE = "duplicate"
    FRONTMATTER = "frontmatter"
    REFERENCE = "reference"
    COMPLEXITY = "complexity"
    # Structure
    CIRCULAR_DEPENDENCY = "circular_dependency"
    INTERFACE_MISMATCH = "interface_mismatch"
    # Terms
    UNDEFINED_TERM = "undefined_term"
    CONFLICTING_DEFINITION = "conflicting_definition"
    UNUSED_DEFINITION = "unused_definition"
    CIRCULAR_REFERENCE = "circular_reference"
    # Orphans
    ORPHAN = "orphan"
    # Coverage
    MISSING_FILE = "missing_file"
    MISSING_METHOD = "missing_method"
    UNDOCUMENTED_EXPORT = "undocumented_export"


class Category(Enum):
    """Which validator produced an issue."""

    NAMING = "naming"
    STRUCTURE = "structure"
    TERMS = "terms"
    ORPHANS = "orphans"
    COVERAGE = "coverage"


CATEGORY_BY_KIND: dict[IssueKind, Category] = {
    IssueKind.FORMAT: Category.NAMING,
    IssueKind.SORTING: Category.NAMING,
    IssueKind.DUPLICATE: Category.NAMING,
    IssueKind.REFERENCE: Category.NAMING,
    IssueKind.COMPLEXITY: Category.NAMING,
    IssueKind.FRONTMATTER: Category.NAMING,
    IssueKind.CIRCULAR_DEPENDENCY: Category.STRUCTURE,
    IssueKind.INTERFACE_MISMATCH: Category.STRUCTURE,
    IssueKind.UNDEFINED_TERM: Category.TERMS,
    IssueKind.CONFLICTING_DEFINITION: Category.TERMS,
    IssueKind.UNUSED_DEFINITION: Category.TERMS,
    IssueKind.CIRCULAR_REFERENCE: Category.TERMS,
    IssueKind.ORPHAN: Category.ORPHANS,
    IssueKind.MISSING_FILE: Category.COVERAGE,
    IssueKind.MISSING_METHOD: Category.COVERAGE,
    IssueKind.UNDOCUMENTED_EXPORT: Category.COVERAGE,
}


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation finding.

    ``category`` defaults from ``kind``; the structure checker overrides it
    for missing required frontmatter fields.
    """

    kind: IssueKind
    severity: Severity
    file: str
    message: str
    line: int | None = None
    subject: str | None = None  # term, feature, interface or group id
    detail: str | None = None  # "from_not_found", "not_referenced", ...
    suggestion: str | None = None
    cycle: tuple[str, ...] | None = None
    category: Category | None = None

    @property
    def resolved_category(self) -> Category:
        return self.category or CATEGORY_BY_KIND[self.kind]

    def sort_key(self) -> tuple[str, int, str, str, str]:
        return (self.file, self.line or 0, self.kind.value, self.subject or "", self.message)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "kind": self.kind.value,
            "severity": self.severity.value,
            "category": self.resolved_category.value,
            "file": self.file,
            "message": self.message,
        }
        if self.line is not None:
            data["line"] = self.line
        if self.subject is not None:
            data["subject"] = self.subject
        if self.detail is not None:
            data["detail"] = self.detail
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        if self.cycle is not None:
            data["cycle"] = list(self.cycle)
        return data

    @classmethod
    def error(cls, kind: IssueKind, file: str, message: str, **kwargs: Any) -> ValidationIssue:
        return cls(kind=kind, severity=Severity.ERROR, file=file, message=message, **kwargs)

    @classmethod
    def warning(cls, kind: IssueKind, file: str, message: str, **kwargs: Any) -> ValidationIssue:
        return cls(kind=kind, severity=Severity.WARNING, file=file, message=message, **kwargs)


@dataclass(frozen=True)
class Orphan:
    """A source or config file unreachable from docs and from imports."""

    path: str
    classification: FileClass
    referenced: bool = False  # mentioned in doc prose without being formally documented

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "classification": self.classification.value,
            "referenced": self.referenced,
        }


@dataclass
class CoverageSummary:
    """Counts behind the coverage findings."""

    components: int = 0
    components_found: int = 0
    methods: int = 0
    methods_found: int = 0
    exports: int = 0
    exports_documented: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "components": self.components,
            "components_found": self.components_found,
            "methods": self.methods,
            "methods_found": self.methods_found,
            "exports": self.exports,
            "exports_documented": self.exports_documented,
        }


@dataclass
class ValidationReport:
    """Aggregated result of one validation run."""

    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)
    orphans: list[Orphan] = field(default_factory=list)
    coverage: CoverageSummary | None = None  # set when the coverage pass ran

    def add(self, issue: ValidationIssue) -> None:
        if issue.severity is Severity.ERROR:
            self.errors.append(issue)
        else:
            self.warnings.append(issue)

    def extend(self, issues: list[ValidationIssue]) -> None:
        for issue in issues:
            self.add(issue)

    def finalize(self) -> None:
        """Sort every collection so reports are stable run to run."""
        self.errors.sort(key=ValidationIssue.sort_key)
        self.warnings.sort(key=ValidationIssue.sort_key)
        self.diagnostics.sort(key=lambda d: (d.path, d.line, d.code))
        self.orphans.sort(key=lambda o: o.path)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    @property
    def success(self) -> bool:
        return self.error_count == 0

    def issues(self) -> list[ValidationIssue]:
        return sorted([*self.errors, *self.warnings], key=ValidationIssue.sort_key)

    def of_kind(self, kind: IssueKind) -> list[ValidationIssue]:
        return [i for i in self.issues() if i.kind is kind]

    def by_file(self) -> dict[str, list[ValidationIssue]]:
        grouped: dict[str, list[ValidationIssue]] = defaultdict(list)
        for issue in self.issues():
            grouped[issue.file].append(issue)
        return dict(sorted(grouped.items()))

    def summary(self) -> dict[str, Any]:
        by_kind: dict[str, int] = defaultdict(int)
        for issue in self.issues():
            by_kind[issue.kind.value] += 1
        data: dict[str, Any] = {
            "success": self.success,
            "errors": self.error_count,
            "warnings": self.warning_count,
            "diagnostics": len(self.diagnostics),
            "orphans": len(self.orphans),
            "by_kind": dict(sorted(by_kind.items())),
        }
        if self.coverage is not None:
            data["coverage"] = self.coverage.to_dict()
        return data

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary(),
            "errors": [i.to_dict() for i in self.errors],
            "warnings": [i.to_dict() for i in self.warnings],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "orphans": [o.to_dict() for o in self.orphans],
        }
