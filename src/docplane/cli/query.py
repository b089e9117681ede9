"""dpl query command - look up a record in the written index."""

import json
from pathlib import Path

import click

from docplane.cli.utils import fatal, load_project
from docplane.core.errors import DocPlaneError
from docplane.graph.builder import index_path, load_index
from docplane.graph.query import IndexQuery


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--feature", "feature_id", help="Feature id")
@click.option("--code", "code_path", help="Code file path, relative to the project root")
@click.option("--term", "term_name", help="Term name or alias")
@click.option("--index", "index_file", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def query_command(
    ctx: click.Context,
    path: Path,
    feature_id: str | None,
    code_path: str | None,
    term_name: str | None,
    index_file: Path | None,
) -> None:
    """Print one record from the reference index as JSON.

    PATH is the project root (default: current directory). Run 'dpl build'
    first.
    """
    chosen = [value for value in (feature_id, code_path, term_name) if value is not None]
    if len(chosen) != 1:
        raise click.UsageError("Pass exactly one of --feature, --code or --term")

    root, config = load_project(ctx, path)
    try:
        index = load_index(index_file or index_path(root, config))
    except DocPlaneError as e:
        raise fatal(e) from e

    query = IndexQuery(index)
    record: dict | None
    if feature_id is not None:
        found = query.feature(feature_id)
        record = None if found is None else {"id": feature_id, **found.to_dict()}
    elif code_path is not None:
        found_code = query.code(code_path)
        record = None if found_code is None else {"path": found_code.path, **found_code.to_dict()}
    else:
        entry = query.term(term_name or "")
        record = None if entry is None else entry.to_dict()

    if record is None:
        raise click.ClickException(f"No record for {chosen[0]!r}")
    click.echo(json.dumps(record, indent=2, sort_keys=True))
