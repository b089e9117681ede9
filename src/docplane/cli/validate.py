"""dpl validate command - run every validator and report by file."""

import json
from pathlib import Path

import click
from rich.markup import escape

from docplane.cli.utils import fatal, load_imports, load_project
from docplane.core.errors import DocPlaneError
from docplane.core.progress import pluralize, print_rule, spinner, status
from docplane.validation.models import Category, Severity, ValidationReport
from docplane.validation.pipeline import run_validation


def _print_report(report: ValidationReport) -> None:
    for file, issues in report.by_file().items():
        status(escape(file), style="none")
        for issue in issues:
            style = "error" if issue.severity is Severity.ERROR else "warning"
            where = f"L{issue.line} " if issue.line else ""
            status(
                escape(f"{where}[{issue.kind.value}] {issue.message}"), style=style, indent=2
            )

    if report.diagnostics:
        print_rule()
        status(f"{pluralize(len(report.diagnostics), 'parse diagnostic')}", style="none")
        for diagnostic in report.diagnostics:
            status(
                escape(
                    f"{diagnostic.path}:{diagnostic.line} [{diagnostic.code}] {diagnostic.message}"
                ),
                style="warning",
                indent=2,
            )

    print_rule()
    if report.coverage is not None and (report.coverage.components or report.coverage.exports):
        cov = report.coverage
        status(
            f"Coverage: {cov.components_found}/{cov.components} components, "
            f"{cov.methods_found}/{cov.methods} methods, "
            f"{cov.exports_documented}/{cov.exports} exports documented",
            style="none",
        )
    summary = (
        f"{pluralize(report.error_count, 'error')}, {pluralize(report.warning_count, 'warning')}, "
        f"{pluralize(len(report.orphans), 'orphan')}"
    )
    status(summary, style="success" if report.success else "error")


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "--imports",
    "imports_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON import graph produced by a language tool",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--fail-on-orphans", is_flag=True, help="Exit non-zero when orphans are found")
@click.option(
    "--only",
    type=click.Choice([c.value for c in Category]),
    multiple=True,
    help="Run only these validators (repeatable)",
)
@click.pass_context
def validate_command(
    ctx: click.Context,
    path: Path,
    imports_file: Path | None,
    as_json: bool,
    fail_on_orphans: bool,
    only: tuple[str, ...],
) -> None:
    """Validate naming, structure, terms, orphans and coverage.

    PATH is the project root (default: current directory). Exits 1 when any
    error is found; warnings never fail the run.
    """
    root, config = load_project(ctx, path)
    imports = load_imports(imports_file)
    categories = [Category(value) for value in only] or None

    try:
        with spinner("Validating documentation"):
            report = run_validation(root, config, imports, only=categories)
    except DocPlaneError as e:
        raise fatal(e) from e

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2, sort_keys=True))
    else:
        _print_report(report)

    failed = not report.success or (fail_on_orphans and bool(report.orphans))
    if failed:
        ctx.exit(1)
