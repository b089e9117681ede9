"""Validation: naming, structure, terms, orphans and coverage over one built graph."""

from docplane.validation.models import (
    Category,
    CoverageSummary,
    IssueKind,
    Orphan,
    Severity,
    ValidationIssue,
    ValidationReport,
)

__all__ = [
    "Category",
    "CoverageSummary",
    "IssueKind",
    "Orphan",
    "Severity",
    "ValidationIssue",
    "ValidationReport",
]
