"""Validation pipeline: build the graph once, run every validator over it."""

from __future__ import annotations

from collections.abc import Collection
from pathlib import Path

from docplane.config.models import DocPlaneConfig
from docplane.core.logging import get_logger
from docplane.graph.builder import BuildResult, build_project
from docplane.graph.imports import ImportGraph
from docplane.validation.coverage import CoverageChecker
from docplane.validation.models import Category, ValidationReport
from docplane.validation.naming import NamingValidator
from docplane.validation.orphans import find_orphans, mentioned_paths, orphan_issues
from docplane.validation.structure import StructureChecker

log = get_logger(__name__)


def validate_build(
    build: BuildResult,
    config: DocPlaneConfig,
    *,
    only: Collection[Category] | None = None,
) -> ValidationReport:
    """Run the selected validators over an existing build.

    Validators never mutate the index; each returns issues that are routed
    into the report by severity.
    """
    selected = set(only) if only else set(Category)
    report = ValidationReport(diagnostics=build.corpus.all_diagnostics())

    if Category.NAMING in selected:
        report.extend(NamingValidator(config.naming).validate(build.corpus))
    if Category.STRUCTURE in selected:
        report.extend(StructureChecker().validate(build.index, build.corpus))
    if Category.TERMS in selected:
        report.extend(build.registry.validate())
    if Category.ORPHANS in selected:
        report.orphans = find_orphans(
            build.code_files, build.index, mentioned_paths(build.corpus)
        )
        report.extend(orphan_issues(report.orphans))
    if Category.COVERAGE in selected:
        coverage = CoverageChecker(build.code_files, build.index)
        report.extend(coverage.validate(build.corpus))
        report.coverage = coverage.summary

    report.finalize()
    log.info(
        "validation_complete",
        errors=report.error_count,
        warnings=report.warning_count,
        diagnostics=len(report.diagnostics),
        orphans=len(report.orphans),
        success=report.success,
    )
    return report


def run_validation(
    project_root: Path,
    config: DocPlaneConfig,
    imports: ImportGraph | None = None,
    *,
    only: Collection[Category] | None = None,
) -> ValidationReport:
    """Parse, build and validate the project at ``project_root``."""
    build = build_project(project_root, config, imports=imports)
    return validate_build(build, config, only=only)
