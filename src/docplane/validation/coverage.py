"""Implementation coverage.

Compares what features document against what the scan and the import graph
found: documented files that do not exist, documented component methods a
file does not export, and exported symbols no feature documents. Every
finding is a warning.
"""

from __future__ import annotations

from docplane.graph.corpus import Corpus
from docplane.graph.models import CodeKind, Component, FeatureDocument, ReferenceIndex
from docplane.graph.scanner import ScannedFile
from docplane.validation.models import CoverageSummary, IssueKind, ValidationIssue


class CoverageChecker:
    """Documented components, methods and exports against the scanned tree."""

    def __init__(self, code_files: list[ScannedFile], index: ReferenceIndex) -> None:
        self._present = {f.path for f in code_files}
        self._index = index
        self.summary = CoverageSummary()

    def validate(self, corpus: Corpus) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for feature in corpus.features:
            issues.extend(self._missing_files(feature))
            for component in feature.components:
                issues.extend(self._component(feature, component))
        issues.extend(self._undocumented_exports())
        return issues

    def _missing_files(self, feature: FeatureDocument) -> list[ValidationIssue]:
        """Declared paths absent from the scan. Component files are reported per component."""
        declared: dict[str, str] = {}
        for path in feature.test_files:
            declared.setdefault(path, "test_file")
        if feature.entry_point:
            declared[feature.entry_point] = "entry_point"
        for path in feature.code_references:
            declared[path] = "code_reference"
        for component in feature.components:
            declared.pop(component.file_path, None)

        return [
            ValidationIssue.warning(
                IssueKind.MISSING_FILE,
                feature.path,
                f"Feature '{feature.feature_id}' documents {path} "
                f"({kind.replace('_', ' ')}) but the file does not exist",
                subject=path,
                detail=kind,
            )
            for path, kind in sorted(declared.items())
            if path not in self._present
        ]

    def _component(
        self, feature: FeatureDocument, component: Component
    ) -> list[ValidationIssue]:
        self.summary.components += 1
        self.summary.methods += len(component.methods)
        if component.file_path not in self._present:
            return [
                ValidationIssue.warning(
                    IssueKind.MISSING_FILE,
                    feature.path,
                    f"Component '{component.name}' is documented in "
                    f"{component.file_path} but the file does not exist",
                    line=component.line,
                    subject=component.file_path,
                    detail="component",
                )
            ]
        self.summary.components_found += 1

        record = self._index.code.get(component.file_path)
        if record is None or record.exports is None:
            # Without export data the methods cannot be checked either way
            self.summary.methods_found += len(component.methods)
            return []

        exported = {symbol.name for symbol in record.exports}
        issues: list[ValidationIssue] = []
        for method in component.methods:
            if method in exported or f"{component.name}.{method}" in exported:
                self.summary.methods_found += 1
                continue
            issues.append(
                ValidationIssue.warning(
                    IssueKind.MISSING_METHOD,
                    feature.path,
                    f"Method '{method}' of component '{component.name}' is not "
                    f"exported by {component.file_path}",
                    line=component.line,
                    subject=method,
                    detail=component.file_path,
                )
            )
        return issues

    def _undocumented_exports(self) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for path, record in sorted(self._index.code.items()):
            if record.exports is None or record.kind is CodeKind.TEST:
                continue
            self.summary.exports += len(record.exports)
            if record.documented_in:
                self.summary.exports_documented += len(record.exports)
                continue
            issues.extend(
                ValidationIssue.warning(
                    IssueKind.UNDOCUMENTED_EXPORT,
                    path,
                    f"Exported {symbol.symbol_type} '{symbol.name}' is not documented "
                    "by any feature",
                    line=symbol.line,
                    subject=symbol.name,
                )
                for symbol in record.exports
            )
        return issues
