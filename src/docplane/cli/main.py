"""DocPlane CLI - dpl command."""

from pathlib import Path

import click

from docplane import __version__
from docplane.cli.build import build_command
from docplane.cli.query import query_command
from docplane.cli.terms import terms_group
from docplane.cli.validate import validate_command


@click.group()
@click.version_option(version=__version__, prog_name="dpl")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging on the console")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Repo config file to use instead of .docplane/config.yaml",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_file: Path | None) -> None:
    """DocPlane - cross-reference index and validator for architecture docs."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_file"] = config_file


cli.add_command(build_command, name="build")
cli.add_command(validate_command, name="validate")
cli.add_command(query_command, name="query")
cli.add_command(terms_group, name="terms")


if __name__ == "__main__":
    cli()
