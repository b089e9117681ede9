"""CLI utilities."""

from pathlib import Path

import click

from docplane.config.loader import load_config
from docplane.config.models import DocPlaneConfig
from docplane.core.errors import DocPlaneError
from docplane.core.logging import (
    configure_logging,
    get_logger,
    get_run_id,
    log_file_path,
    reset_logging,
    set_run_id,
)
from docplane.graph.imports import ImportGraph, load_import_graph

log = get_logger(__name__)


def load_project(ctx: click.Context, path: Path) -> tuple[Path, DocPlaneConfig]:
    """Resolve the project root, load its config and configure logging.

    Config failures are fatal and surface as ``click.ClickException``.
    """
    reset_logging()
    root = path.resolve()
    options = ctx.find_root().obj or {}
    try:
        config = load_config(root, config_file=options.get("config_file"))
    except DocPlaneError as e:
        raise fatal(e) from e

    configure_logging(config.logging, verbose=bool(options.get("verbose")))
    set_run_id()
    return root, config


def load_imports(imports: Path | None) -> ImportGraph | None:
    """Explicit ``--imports`` file, or None to fall back to config."""
    if imports is None:
        return None
    try:
        return load_import_graph(imports)
    except DocPlaneError as e:
        raise fatal(e) from e


def fatal(error: DocPlaneError) -> click.ClickException:
    """CLI failure for ``error``.

    When the run logs to a file, the error is recorded there and the message
    points at it. Errors outside the config and filesystem ranges are defects
    and say so.
    """
    lines = [str(error)]
    if not error.is_fatal_io:
        lines.append("This is a bug in docplane; please report it.")
    log_file = log_file_path()
    if log_file is not None:
        log.error("run_failed", **error.to_dict())
        lines.append(f"Log: {log_file} (run {get_run_id()})")
    return click.ClickException("\n".join(lines))
