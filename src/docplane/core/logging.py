"""Structured logging for one DocPlane run.

structlog renders through stdlib ``logging``: every configured output becomes
one handler with its own level and renderer. Records carry the run
correlation id. The first file output is remembered so a fatal CLI error can
point at the full log of the run that failed.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from docplane.config.models import LoggingConfig, LogOutputConfig

_run_id: ContextVar[str | None] = ContextVar("run_id", default=None)
_log_file: Path | None = None

_CONSOLE_DESTINATIONS = ("stderr", "stdout")


def get_run_id() -> str | None:
    return _run_id.get()


def set_run_id(run_id: str | None = None) -> str:
    """Set or generate the run correlation id."""
    rid = run_id or uuid4().hex[:12]
    _run_id.set(rid)
    return rid


def clear_run_id() -> None:
    _run_id.set(None)


def log_file_path() -> Path | None:
    """First file output of the active configuration, if any."""
    return _log_file


def _add_run_id(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if rid := get_run_id():
        event_dict["run_id"] = rid
    return event_dict


_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
    _add_run_id,  # type: ignore[list-item]
]


class ConsoleSuppressingFilter(logging.Filter):
    """Drops console records while a spinner owns the terminal."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: ARG002
        from docplane.core.progress import is_console_suppressed

        return not is_console_suppressed()


def _level(name: str) -> int:
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


def _is_console(output: LogOutputConfig) -> bool:
    return output.destination in _CONSOLE_DESTINATIONS


def _handler(output: LogOutputConfig) -> logging.Handler:
    handler: logging.Handler
    if output.destination == "stdout":
        handler = logging.StreamHandler(sys.stdout)
    elif output.destination == "stderr":
        handler = logging.StreamHandler(sys.stderr)
    else:
        path = Path(output.destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")

    if _is_console(output):
        handler.addFilter(ConsoleSuppressingFilter())
        stream = sys.stdout if output.destination == "stdout" else sys.stderr
        renderer: structlog.types.Processor = (
            structlog.processors.JSONRenderer(sort_keys=True)
            if output.format == "json"
            else structlog.dev.ConsoleRenderer(
                colors=stream.isatty(), pad_event_to=0, pad_level=False
            )
        )
    elif output.format == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=False, pad_event_to=0, pad_level=False)
    else:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)

    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_SHARED_PROCESSORS,
        )
    )
    return handler


def configure_logging(config: LoggingConfig | None = None, *, verbose: bool = False) -> None:
    """Install one handler per configured output.

    ``verbose`` lowers every console output to DEBUG, adding a stderr output
    when the config has none. File outputs keep their configured levels.
    """
    global _log_file
    from docplane.config.models import LoggingConfig, LogOutputConfig

    config = config or LoggingConfig()
    outputs = list(config.outputs)
    if verbose and not any(_is_console(o) for o in outputs):
        outputs.append(LogOutputConfig())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    _log_file = None

    levels: list[int] = []
    for output in outputs:
        level = (
            logging.DEBUG
            if verbose and _is_console(output)
            else _level(output.level or config.level)
        )
        handler = _handler(output)
        handler.setLevel(level)
        root_logger.addHandler(handler)
        levels.append(level)
        if _log_file is None and not _is_console(output):
            _log_file = Path(output.destination)

    # Records below every handler's level are dropped before rendering
    floor = min(levels, default=_level(config.level))
    root_logger.setLevel(floor)
    structlog.configure(
        processors=[*_SHARED_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(floor),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def reset_logging() -> None:
    """Forget handlers, the log file pointer and the run id of a previous run."""
    global _log_file
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()
    _log_file = None
    clear_run_id()


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger  # type: ignore[no-any-return]
