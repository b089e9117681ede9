"""Core module exports."""

from docplane.core.errors import (
    ConfigError,
    DocPlaneError,
    ErrorCode,
    IndexIOError,
    InternalError,
)
from docplane.core.logging import (
    clear_run_id,
    configure_logging,
    reset_logging,
    get_logger,
    get_run_id,
    set_run_id,
)
from docplane.core.progress import spinner, status

__all__ = [
    # Errors
    "DocPlaneError",
    "ConfigError",
    "ErrorCode",
    "IndexIOError",
    "InternalError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "reset_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
    # Progress
    "spinner",
    "status",
]
