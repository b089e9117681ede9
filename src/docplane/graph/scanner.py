"""Filesystem scanning: markdown corpus discovery and code file listing."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from docplane.config.constants import MARKDOWN_SUFFIX
from docplane.config.models import DocPlaneConfig
from docplane.core.errors import IndexIOError
from docplane.core.excludes import DOC_WALK_PRUNED_DIRS, matches_any, prunable_dirs
from docplane.core.languages import (
    detect_language,
    is_config_file,
    is_generated_file,
    is_test_file,
)
from docplane.graph.models import DocumentKind, FileClass


@dataclass(frozen=True)
class ScannedFile:
    path: str  # POSIX, relative to project root
    classification: FileClass


def _walk_with_pruning(root: Path, pruned: frozenset[str]) -> list[str]:
    """Walk all files below ``root``, pruning ``pruned`` directory names.

    Returns sorted POSIX paths relative to ``root``. Any directory that cannot
    be listed aborts the walk.
    """

    def _raise(error: OSError) -> None:
        path = error.filename or str(root)
        raise IndexIOError.unreadable_path(path, error.strerror or str(error))

    if not root.is_dir():
        raise IndexIOError.unreadable_path(str(root), "not a directory")

    results: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames[:] = sorted(d for d in dirnames if d not in pruned)
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        prefix = "" if rel_dir == "." else rel_dir + "/"
        results.extend(prefix + name for name in filenames)
    return sorted(results)


def classify_file(path: str) -> FileClass:
    """Classify a relative path. Generated beats config beats test beats source."""
    if is_generated_file(path):
        return FileClass.GENERATED
    if is_config_file(path):
        return FileClass.CONFIG
    if is_test_file(path):
        return FileClass.TEST if detect_language(path) else FileClass.OTHER
    if detect_language(path):
        return FileClass.SOURCE
    return FileClass.OTHER


def scan_code_files(root: Path, config: DocPlaneConfig) -> list[ScannedFile]:
    """List non-markdown project files with their classification.

    Honors ``orphans.include_build_dirs``, ``orphans.include_dependency_dirs``
    and ``orphans.extra_excludes``.
    """
    pruned = prunable_dirs(
        include_build_dirs=config.orphans.include_build_dirs,
        include_dependency_dirs=config.orphans.include_dependency_dirs,
    )
    excludes = list(config.orphans.extra_excludes)
    files: list[ScannedFile] = []
    for path in _walk_with_pruning(root, pruned):
        if path.endswith(MARKDOWN_SUFFIX) or matches_any(path, excludes):
            continue
        files.append(ScannedFile(path=path, classification=classify_file(path)))
    return files


def _document_kind(path: str, typed_dirs: dict[str, str]) -> DocumentKind:
    parent = path.rsplit("/", 1)[0] if "/" in path else ""
    kind = typed_dirs.get(parent)
    return DocumentKind(kind) if kind is not None else DocumentKind.OTHER


def discover_documents(root: Path, config: DocPlaneConfig) -> list[tuple[str, DocumentKind]]:
    """Every markdown document under ``root`` with its kind, sorted by path.

    Typed documents live directly under ``<base_dir>/<features|interfaces|shared>``.
    Everything else is still read for term definitions and references.
    """
    typed_dirs = config.docs.typed_dirs()
    return [
        (path, _document_kind(path, typed_dirs))
        for path in _walk_with_pruning(root, DOC_WALK_PRUNED_DIRS)
        if path.endswith(MARKDOWN_SUFFIX)
    ]
