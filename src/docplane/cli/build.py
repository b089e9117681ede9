"""dpl build command - build and write the reference index."""

from pathlib import Path

import click
from rich.markup import escape

from docplane.cli.utils import fatal, load_imports, load_project
from docplane.core.errors import DocPlaneError
from docplane.core.progress import pluralize, spinner, status
from docplane.graph.builder import build_project, index_path, resolve_imports, write_index


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "--imports",
    "imports_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON import graph produced by a language tool",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Where to write the index (default: .docplane/references.json)",
)
@click.pass_context
def build_command(
    ctx: click.Context, path: Path, imports_file: Path | None, output: Path | None
) -> None:
    """Build the reference index for a documentation corpus.

    PATH is the project root (default: current directory).
    """
    root, config = load_project(ctx, path)
    imports = load_imports(imports_file)
    destination = output if output is not None else index_path(root, config)

    try:
        with spinner("Building reference index"):
            if imports is None:
                imports = resolve_imports(root, config, None)
            result = build_project(root, config, imports=imports)
        write_index(result.index, destination)
    except DocPlaneError as e:
        raise fatal(e) from e

    stats = result.stats
    status(f"Index written to {escape(str(destination))}", style="success")
    status(
        f"{pluralize(stats.features, 'feature')}, {pluralize(stats.interfaces, 'interface')}, "
        f"{pluralize(stats.code_files, 'code file')}, {pluralize(stats.terms, 'term')} "
        f"({stats.build_time_ms} ms)",
        indent=2,
    )
    diagnostics = result.corpus.all_diagnostics()
    if diagnostics:
        status(f"{pluralize(len(diagnostics), 'parse diagnostic')}", style="warning", indent=2)
