"""Config module exports."""

from docplane.config.loader import load_config
from docplane.config.models import (
    DocPlaneConfig,
    DocsConfig,
    IndexConfig,
    LoggingConfig,
    NamingConfig,
    OrphanConfig,
    TerminologyConfig,
)

__all__ = [
    "load_config",
    "DocPlaneConfig",
    "DocsConfig",
    "IndexConfig",
    "LoggingConfig",
    "NamingConfig",
    "OrphanConfig",
    "TerminologyConfig",
]
