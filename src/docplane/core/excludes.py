"""Canonical exclude patterns with tiered architecture.

Tier 0 (HARDCODED_DIRS): Never traversed, not configurable.
    - VCS internals, DocPlane data directory

Tier 1 (CACHE_DIRS): Tool caches and editor state. Never useful for
    documentation reachability, always pruned.

Tier 2 (DEPENDENCY_DIRS, BUILD_DIRS): Pruned by default. The orphan scan can
    opt in with ``orphans.include_dependency_dirs`` / ``orphans.include_build_dirs``.
"""

from __future__ import annotations

from fnmatch import fnmatch

# =============================================================================
# Tier 0: HARDCODED - Never traverse
# =============================================================================

HARDCODED_DIRS: frozenset[str] = frozenset(
    (
        # VCS internals
        ".git",
        ".svn",
        ".hg",
        ".bzr",
        # DocPlane data
        ".docplane",
    )
)

# =============================================================================
# Tier 1: CACHES - Always pruned
# =============================================================================

CACHE_DIRS: frozenset[str] = frozenset(
    (
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
        ".hypothesis",
        ".ipynb_checkpoints",
        ".tox",
        ".nox",
        ".turbo",
        ".cache",
        ".idea",
        ".vscode",
        ".vs",
        ".vite",
        ".gradle",
        ".terraform",
        "htmlcov",
        ".nyc_output",
        "coverage",
    )
)

# =============================================================================
# Tier 2: DEPENDENCIES - Pruned unless include_dependency_dirs
# =============================================================================

DEPENDENCY_DIRS: frozenset[str] = frozenset(
    (
        # JavaScript/Node.js ecosystem
        "node_modules",
        "bower_components",
        ".npm",
        ".yarn",
        ".pnpm-store",
        # Python ecosystem
        "venv",
        ".venv",
        "virtualenv",
        ".virtualenv",
        "site-packages",
        "eggs",
        ".eggs",
        # Other ecosystems
        "vendor",
        "deps",
        "pods",
        ".bundle",
        ".m2",
    )
)

# =============================================================================
# Tier 2: BUILD OUTPUT - Pruned unless include_build_dirs
# =============================================================================

BUILD_DIRS: frozenset[str] = frozenset(
    (
        "dist",
        "build",
        "out",
        "target",
        "_build",
        "bin",
        "obj",
        ".next",
        ".nuxt",
    )
)

# Directories pruned by the markdown corpus walk
DOC_WALK_PRUNED_DIRS: frozenset[str] = HARDCODED_DIRS | CACHE_DIRS | DEPENDENCY_DIRS | BUILD_DIRS


def is_hardcoded_dir(dirname: str) -> bool:
    """Check if directory is hardcoded (never traversable, not overridable)."""
    return dirname in HARDCODED_DIRS


def prunable_dirs(
    *,
    include_build_dirs: bool = False,
    include_dependency_dirs: bool = False,
) -> frozenset[str]:
    """Directory names to skip when walking the project for code files."""
    pruned = HARDCODED_DIRS | CACHE_DIRS
    if not include_build_dirs:
        pruned |= BUILD_DIRS
    if not include_dependency_dirs:
        pruned |= DEPENDENCY_DIRS
    return pruned


def matches_any(path: str, patterns: list[str] | tuple[str, ...]) -> bool:
    """Check a POSIX relative path against fnmatch globs.

    A pattern ending in ``/`` matches everything below that directory.
    """
    for pattern in patterns:
        if pattern.endswith("/"):
            prefix = pattern.rstrip("/")
            if path == prefix or path.startswith(prefix + "/"):
                return True
        elif fnmatch(path, pattern):
            return True
    return False
