"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (DOCPLANE__SECTION__KEY)
3. Repo YAML (.docplane/config.yaml)
4. Global YAML (~/.config/docplane/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    DOCPLANE__<SECTION>__<KEY>=<VALUE>

Examples:
    DOCPLANE__LOGGING__LEVEL=DEBUG
    DOCPLANE__DOCS__BASE_DIR=docs/tasks
    DOCPLANE__NAMING__MAX_PAIRS=10
    DOCPLANE__INDEX__MAX_WORKERS=8

A loaded config is an immutable snapshot for one run: every model is frozen.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from docplane.config.constants import (
    DEFAULT_INDEX_FILENAME,
    DOCPLANE_DIR,
    MARKDOWN_SUFFIX,
    MIN_SHARED_PAIRS,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class LogOutputConfig(_Frozen):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(_Frozen):
    """Logging configuration.

    Env vars:
        DOCPLANE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG also logs every parse diagnostic.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class DocsConfig(_Frozen):
    """Documentation corpus layout.

    Env vars:
        DOCPLANE__DOCS__BASE_DIR: Corpus root relative to the project (default: tasks)
        DOCPLANE__DOCS__FEATURES: Feature document subdirectory
        DOCPLANE__DOCS__INTERFACES: Interface document subdirectory
        DOCPLANE__DOCS__SHARED: Shared-type document subdirectory
    """

    base_dir: str = Field(default="tasks", description="Corpus root, relative to project root.")
    features: str = "features"
    interfaces: str = "interfaces"
    shared: str = "shared"

    def typed_dirs(self) -> dict[str, str]:
        """Relative POSIX directory -> document kind ("feature", "interface", "shared")."""
        base = self.base_dir.strip().replace("\\", "/").strip("/")
        prefix = f"{base}/" if base else ""
        return {
            f"{prefix}{self.features.strip('/')}": "feature",
            f"{prefix}{self.interfaces.strip('/')}": "interface",
            f"{prefix}{self.shared.strip('/')}": "shared",
        }


class TerminologyConfig(_Frozen):
    """Term scope configuration.

    Env vars:
        DOCPLANE__TERMINOLOGY__GLOBAL_SCOPE_PATHS: JSON list of paths
    """

    global_scope_paths: list[str] = Field(
        default_factory=lambda: ["docs/GLOSSARY.md", "docs/terms/"],
        description="Definitions in these files are global. Markdown file entries "
        "match exactly; any other entry is a directory prefix.",
    )

    @field_validator("global_scope_paths")
    @classmethod
    def normalize_scope_paths(cls, v: list[str]) -> list[str]:
        """POSIX relative entries; directories always carry a trailing '/'."""
        normalized: list[str] = []
        for raw in v:
            entry = raw.strip().replace("\\", "/")
            while entry.startswith("./"):
                entry = entry[2:]
            entry = entry.lstrip("/")
            if not entry:
                raise ValueError(f"Empty global scope path: {raw!r}")
            if not entry.endswith(MARKDOWN_SUFFIX) and not entry.endswith("/"):
                entry += "/"
            normalized.append(entry)
        return normalized


class NamingConfig(_Frozen):
    """Shared-type complexity thresholds.

    Env vars:
        DOCPLANE__NAMING__WARN_AT_PAIRS: Warn when a group reaches this many pairs
        DOCPLANE__NAMING__MAX_PAIRS: Error when a group reaches this many pairs
    """

    warn_at_pairs: int = Field(
        default=8,
        description="Pair count at which a shared type should be promoted to a global type.",
    )
    max_pairs: int = Field(
        default=12,
        description="Pair count at which a shared type is rejected.",
    )

    @model_validator(mode="after")
    def validate_thresholds(self) -> "NamingConfig":
        if self.warn_at_pairs < MIN_SHARED_PAIRS or self.max_pairs < MIN_SHARED_PAIRS:
            raise ValueError(f"Pair thresholds must be at least {MIN_SHARED_PAIRS}")
        if self.warn_at_pairs > self.max_pairs:
            raise ValueError(
                f"warn_at_pairs ({self.warn_at_pairs}) exceeds max_pairs ({self.max_pairs})"
            )
        return self


class OrphanConfig(_Frozen):
    """Orphan scan configuration.

    Env vars:
        DOCPLANE__ORPHANS__INCLUDE_BUILD_DIRS: Scan dist/, build/, out/ ...
        DOCPLANE__ORPHANS__INCLUDE_DEPENDENCY_DIRS: Scan node_modules/, vendor/ ...
    """

    include_build_dirs: bool = False
    include_dependency_dirs: bool = False
    extra_excludes: list[str] = Field(
        default_factory=list,
        description="Additional globs (relative POSIX paths) left out of the scan.",
    )


class IndexConfig(_Frozen):
    """Reference index configuration.

    Env vars:
        DOCPLANE__INDEX__OUTPUT_PATH: Artifact location relative to project root
        DOCPLANE__INDEX__MAX_WORKERS: Parallel document parsing workers
        DOCPLANE__INDEX__IMPORTS_PATH: JSON import graph produced by a language tool
    """

    output_path: str = Field(default=f"{DOCPLANE_DIR}/{DEFAULT_INDEX_FILENAME}")
    max_workers: int = Field(
        default=4,
        description="Parse workers for the map phase. 1 parses sequentially.",
    )
    imports_path: str | None = Field(
        default=None,
        description="Optional import graph file. Without it, imports/imported_by stay empty.",
    )

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_workers must be >= 1, got {v}")
        return v


class DocPlaneConfig(_Frozen):
    """Root configuration for DocPlane."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    docs: DocsConfig = Field(default_factory=DocsConfig)
    terminology: TerminologyConfig = Field(default_factory=TerminologyConfig)
    naming: NamingConfig = Field(default_factory=NamingConfig)
    orphans: OrphanConfig = Field(default_factory=OrphanConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
