"""Canonical file classification tables.

This module defines the authoritative mapping of:
- File extensions -> source languages
- Test file patterns per language
- Configuration filenames and patterns
- Generated-file patterns

The orphan detector only needs to know *what kind* of file something is, not
how to parse it, so languages carry extensions and test patterns only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import PurePosixPath


@dataclass(frozen=True, slots=True)
class Language:
    """Canonical definition for a source language.

    Attributes:
        name: Unique identifier (lowercase, e.g., "python", "typescript")
        extensions: File extensions including dot (e.g., ".py", ".ts")
        test_patterns: fnmatch globs for test files; a pattern containing
            ``/`` is matched against the full path
    """

    name: str
    extensions: frozenset[str]
    test_patterns: tuple[str, ...] = field(default_factory=tuple)


ALL_LANGUAGES: tuple[Language, ...] = (
    Language(
        name="python",
        extensions=frozenset({".py", ".pyi"}),
        test_patterns=("test_*.py", "*_test.py", "conftest.py"),
    ),
    Language(
        name="javascript",
        extensions=frozenset({".js", ".jsx", ".mjs", ".cjs"}),
        test_patterns=("*.test.js", "*.spec.js", "*.test.jsx", "*.spec.jsx"),
    ),
    Language(
        name="typescript",
        extensions=frozenset({".ts", ".tsx", ".mts", ".cts"}),
        test_patterns=("*.test.ts", "*.spec.ts", "*.test.tsx", "*.spec.tsx"),
    ),
    Language(name="go", extensions=frozenset({".go"}), test_patterns=("*_test.go",)),
    Language(name="rust", extensions=frozenset({".rs"})),
    Language(
        name="java",
        extensions=frozenset({".java"}),
        test_patterns=("*Test.java", "Test*.java"),
    ),
    Language(
        name="kotlin",
        extensions=frozenset({".kt", ".kts"}),
        test_patterns=("*Test.kt", "Test*.kt"),
    ),
    Language(
        name="csharp",
        extensions=frozenset({".cs"}),
        test_patterns=("*Tests.cs", "*Test.cs"),
    ),
    Language(name="c_cpp", extensions=frozenset({".c", ".h", ".cc", ".cpp", ".hpp", ".cxx"})),
    Language(name="ruby", extensions=frozenset({".rb"}), test_patterns=("*_spec.rb", "*_test.rb")),
    Language(name="php", extensions=frozenset({".php"}), test_patterns=("*Test.php",)),
    Language(name="swift", extensions=frozenset({".swift"}), test_patterns=("*Tests.swift",)),
    Language(name="vue", extensions=frozenset({".vue", ".svelte"})),
    Language(name="shell", extensions=frozenset({".sh", ".bash"})),
)

# Directory-style test patterns shared by every language
TEST_DIR_PATTERNS: tuple[str, ...] = (
    "tests/*",
    "*/tests/*",
    "test/*",
    "*/test/*",
    "__tests__/*",
    "*/__tests__/*",
    "spec/*",
    "*/spec/*",
)

CONFIG_FILENAMES: frozenset[str] = frozenset(
    {
        "package.json",
        "package-lock.json",
        "bun.lockb",
        "yarn.lock",
        "pnpm-lock.yaml",
        "tsconfig.json",
        "jsconfig.json",
        "pyproject.toml",
        "setup.cfg",
        "setup.py",
        "tox.ini",
        "requirements.txt",
        "cargo.toml",
        "go.mod",
        "go.sum",
        "makefile",
        "dockerfile",
        "docker-compose.yml",
        "docker-compose.yaml",
        "biome.json",
    }
)

CONFIG_PATTERNS: tuple[str, ...] = (
    "*.config.js",
    "*.config.ts",
    "*.config.mjs",
    "*.config.cjs",
    "*.d.ts",
    ".env",
    ".env.*",
    "*.toml",
    "*.ini",
    "*.cfg",
    "*.yaml",
    "*.yml",
)

GENERATED_PATTERNS: tuple[str, ...] = (
    "*.min.js",
    "*.min.css",
    "*.map",
    "*.generated.*",
    "*_pb2.py",
    "*_pb2_grpc.py",
    "*.pb.go",
    "*.lock",
)

EXTENSION_TO_NAME: dict[str, str] = {
    ext: lang.name for lang in ALL_LANGUAGES for ext in lang.extensions
}


def detect_language(path: str | PurePosixPath) -> str | None:
    """Language name for a path, by extension (case-insensitive)."""
    suffix = PurePosixPath(path).suffix.lower()
    return EXTENSION_TO_NAME.get(suffix)


def is_test_file(path: str) -> bool:
    """Check if a relative POSIX path is a test file.

    Language test patterns are matched against the filename; directory-style
    patterns are matched against the full path.
    """
    name = PurePosixPath(path).name
    for lang in ALL_LANGUAGES:
        for pattern in lang.test_patterns:
            if fnmatch(name, pattern):
                return True
    return any(fnmatch(path, pattern) for pattern in TEST_DIR_PATTERNS)


def is_config_file(path: str) -> bool:
    name = PurePosixPath(path).name
    lowered = name.lower()
    if lowered in CONFIG_FILENAMES:
        return True
    # dotfiles such as .eslintrc, .prettierrc, .editorconfig
    if name.startswith("."):
        return True
    return any(fnmatch(name, pattern) for pattern in CONFIG_PATTERNS)


def is_generated_file(path: str) -> bool:
    name = PurePosixPath(path).name
    return any(fnmatch(name, pattern) for pattern in GENERATED_PATTERNS)
