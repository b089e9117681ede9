"""DocPlane error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Index / filesystem
- 9xxx: Internal

Only fatal conditions are raised. Per-document parse diagnostics and
validation issues are collected as data (see ``docplane.graph.models`` and
``docplane.validation.models``) and never thrown.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Index / filesystem (3xxx)
    INDEX_UNREADABLE_PATH = 3001
    INDEX_WRITE_FAILED = 3002
    INDEX_ARTIFACT_NOT_FOUND = 3003
    INDEX_ARTIFACT_INVALID = 3004
    INDEX_IMPORT_GRAPH_INVALID = 3005

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class DocPlaneError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    @property
    def is_fatal_io(self) -> bool:
        """Config and filesystem failures abort a run before any index write."""
        return 2000 <= self.code.value < 4000

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(DocPlaneError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class IndexIOError(DocPlaneError):
    """Filesystem and artifact errors. Always fatal for the current run."""

    @classmethod
    def unreadable_path(cls, path: str, reason: str) -> "IndexIOError":
        return cls(
            code=ErrorCode.INDEX_UNREADABLE_PATH,
            message=f"Cannot read {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def write_failed(cls, path: str, reason: str) -> "IndexIOError":
        return cls(
            code=ErrorCode.INDEX_WRITE_FAILED,
            message=f"Failed to write index to {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def artifact_not_found(cls, path: str) -> "IndexIOError":
        return cls(
            code=ErrorCode.INDEX_ARTIFACT_NOT_FOUND,
            message=f"Reference index not found at {path}. Run 'dpl build' first.",
            details={"path": path},
        )

    @classmethod
    def artifact_invalid(cls, path: str, reason: str) -> "IndexIOError":
        return cls(
            code=ErrorCode.INDEX_ARTIFACT_INVALID,
            message=f"Invalid reference index at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def import_graph_invalid(cls, path: str, reason: str) -> "IndexIOError":
        return cls(
            code=ErrorCode.INDEX_IMPORT_GRAPH_INVALID,
            message=f"Invalid import graph at {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class InternalError(DocPlaneError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
