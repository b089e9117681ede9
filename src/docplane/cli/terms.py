"""dpl terms commands - list and search term definitions."""

import json
from pathlib import Path

import click
from rich.markup import escape

from docplane.cli.utils import fatal, load_project
from docplane.core.errors import DocPlaneError
from docplane.core.progress import pluralize, status
from docplane.graph.context import ParseContext
from docplane.graph.corpus import parse_corpus
from docplane.graph.models import TermDefinition, normalize_path
from docplane.graph.registry import TermRegistry


def _registry(ctx: click.Context, path: Path) -> TermRegistry:
    root, config = load_project(ctx, path)
    try:
        corpus = parse_corpus(root, config, ParseContext.from_config(config))
    except DocPlaneError as e:
        raise fatal(e) from e
    return TermRegistry.from_documents(corpus.documents)


def _as_dict(definition: TermDefinition, registry: TermRegistry) -> dict:
    return {
        "name": definition.name,
        "scope": definition.scope.value,
        "file": definition.file,
        "line": definition.line,
        "aliases": list(definition.aliases),
        "definition": definition.definition,
        "usage_count": len(registry.references_to(definition)),
    }


def _echo(definitions: list[TermDefinition], registry: TermRegistry, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps([_as_dict(d, registry) for d in definitions], indent=2))
        return
    for definition in definitions:
        aliases = f" ({', '.join(definition.aliases)})" if definition.aliases else ""
        click.echo(
            f"{definition.name}{aliases}  [{definition.scope.value}] "
            f"{definition.file}:{definition.line}"
        )


@click.group()
def terms_group() -> None:
    """Inspect term definitions."""


@terms_group.command("list")
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option(
    "--in",
    "in_file",
    default=None,
    metavar="DOC",
    help="Only terms defined in DOC (a path relative to the project root)",
)
@click.pass_context
def list_command(ctx: click.Context, path: Path, as_json: bool, in_file: str | None) -> None:
    """List every term definition, sorted by name."""
    registry = _registry(ctx, path)
    if in_file is not None:
        in_file = normalize_path(in_file)
        definitions = sorted(registry.definitions_in(in_file), key=lambda d: d.line)
    else:
        definitions = registry.list_all()
    _echo(definitions, registry, as_json)
    if as_json:
        return
    if in_file is not None:
        status(
            f"{pluralize(len(definitions), 'definition')}, "
            f"{pluralize(len(registry.references_in(in_file)), 'reference')} in {escape(in_file)}",
            style="none",
        )
        return
    stats = registry.stats()
    status(
        f"{pluralize(stats.global_definitions, 'global term')}, "
        f"{pluralize(stats.local_definitions, 'local term')}, "
        f"{pluralize(stats.undefined, 'undefined reference')}",
        style="none",
    )


@terms_group.command("find")
@click.argument("query")
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def find_command(ctx: click.Context, query: str, path: Path, as_json: bool) -> None:
    """Search names, aliases and definition text for QUERY."""
    registry = _registry(ctx, path)
    hits = registry.search(query)
    if not hits and not as_json:
        raise click.ClickException(f"No term matches {query!r}")
    _echo(hits, registry, as_json)
