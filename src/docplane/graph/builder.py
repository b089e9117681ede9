"""Reference index builder and artifact I/O.

``build_index`` is a pure function of parsed documents, the term registry, a
code file listing and an import graph. All reverse edges (``documented_in``,
``imported_by``, ``used_by``, interface provides/uses) are derived here.

The artifact is written with sorted keys and sorted lists, so two builds over
the same inputs differ only in ``generated``.
"""

from __future__ import annotations

import json
import os
import tempfile
import time
from collections import defaultdict
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from docplane.config.constants import INDEX_VERSION, SUPPORTED_INDEX_VERSIONS
from docplane.config.models import DocPlaneConfig
from docplane.core.errors import IndexIOError
from docplane.core.logging import get_logger
from docplane.graph.context import ParseContext
from docplane.graph.corpus import Corpus, parse_corpus
from docplane.graph.imports import ImportGraph, load_import_graph
from docplane.graph.models import (
    CodeKind,
    CodeRecord,
    FeatureRecord,
    FileClass,
    InterfaceEdge,
    ReferenceIndex,
)
from docplane.graph.registry import TermRegistry, term_key
from docplane.graph.scanner import ScannedFile, classify_file, scan_code_files

log = get_logger(__name__)

_KIND_BY_CLASS = {
    FileClass.SOURCE: CodeKind.SOURCE,
    FileClass.TEST: CodeKind.TEST,
    FileClass.CONFIG: CodeKind.CONFIG,
}


@dataclass(frozen=True)
class IndexStats:
    features: int
    code_files: int
    interfaces: int
    terms: int
    total_references: int
    build_time_ms: int

    def to_dict(self) -> dict[str, int]:
        return {
            "features": self.features,
            "code_files": self.code_files,
            "interfaces": self.interfaces,
            "terms": self.terms,
            "total_references": self.total_references,
            "build_time_ms": self.build_time_ms,
        }


@dataclass
class BuildResult:
    """Everything one build produced. Validators read from here."""

    corpus: Corpus
    registry: TermRegistry
    imports: ImportGraph
    code_files: list[ScannedFile]
    index: ReferenceIndex
    stats: IndexStats


def timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _code_kind(path: str) -> CodeKind:
    return _KIND_BY_CLASS.get(classify_file(path), CodeKind.SOURCE)


def build_index(
    corpus: Corpus,
    registry: TermRegistry,
    code_files: list[ScannedFile],
    imports: ImportGraph,
    *,
    generated: str | None = None,
) -> ReferenceIndex:
    """Assemble the bidirectional graph."""
    features = corpus.feature_map

    # Code records: scanned files, plus any path a feature documents
    code: dict[str, CodeRecord] = {}
    for scanned in code_files:
        kind = _KIND_BY_CLASS.get(scanned.classification)
        if kind is not None:
            code[scanned.path] = CodeRecord(path=scanned.path, kind=kind)

    for feature_id, doc in features.items():
        for path in [*doc.documented_paths(), *doc.test_files]:
            record = code.get(path)
            if record is None:
                record = code[path] = CodeRecord(path=path, kind=_code_kind(path))
            record.documented_in.append(feature_id)

    imported_by = imports.imported_by()
    for path, record in code.items():
        record.imports = imports.imports_of(path)
        record.imported_by = list(imported_by.get(path, []))
        record.exports = imports.exports_of(path)
        record.normalize()

    # Feature records
    records: dict[str, FeatureRecord] = {}
    for feature_id, doc in features.items():
        documented = doc.documented_paths()
        users = {
            importer
            for path in documented
            for importer in imported_by.get(path, [])
            if importer not in documented
        }
        defines = [term_key(d) for d in doc.definitions]
        uses: list[str] = []
        for reference in doc.references:
            resolved = registry.resolve(reference)
            uses.append(term_key(resolved) if resolved is not None else reference.name)
        records[feature_id] = FeatureRecord(
            feature_id=feature_id,
            file=doc.path,
            status=doc.status,
            entry_point=doc.entry_point,
            code_uses=documented,
            code_used_by=sorted(users),
            related=list(doc.related_features),
            depends_on=list(doc.dependencies),
            provides=list(doc.interfaces),
            terms_defines=defines,
            terms_uses=uses,
            tested_by=list(doc.test_files),
            components=list(doc.components),
        )

    # used_by follows dependencies only; related_features is not directional
    for feature_id, record in records.items():
        for dependency in record.depends_on:
            target = records.get(dependency)
            if target is not None and dependency != feature_id:
                target.used_by.append(feature_id)

    # Interface edges register on both endpoints
    groups_by_interface: dict[str, set[str]] = defaultdict(set)
    for group in corpus.shared:
        for interface_id in group.interfaces:
            groups_by_interface[interface_id].add(group.group_id)

    interfaces: dict[str, InterfaceEdge] = {}
    for doc in corpus.interfaces:
        edge = InterfaceEdge(
            interface_id=doc.interface_id,
            file=doc.path,
            from_feature=doc.from_feature,
            to_feature=doc.to_feature,
            interface_type=doc.interface_type or "unknown",
            shared_types=[*doc.shared_types, *groups_by_interface.get(doc.interface_id, ())],
        )
        edge.normalize()
        interfaces[doc.interface_id] = edge
        if doc.from_feature in records:
            records[doc.from_feature].provides.append(doc.interface_id)
        if doc.to_feature in records:
            records[doc.to_feature].uses.append(doc.interface_id)

    for record in records.values():
        record.normalize()

    return ReferenceIndex(
        version=INDEX_VERSION,
        generated=generated or timestamp(),
        features=dict(sorted(records.items())),
        code=dict(sorted(code.items())),
        interfaces=dict(sorted(interfaces.items())),
        terms=registry.entries(),
    )


def compute_stats(index: ReferenceIndex, build_time_ms: int = 0) -> IndexStats:
    references = sum(len(r.documented_in) + len(r.imports) for r in index.code.values())
    references += sum(entry.usage_count for entry in index.terms.values())
    return IndexStats(
        features=len(index.features),
        code_files=len(index.code),
        interfaces=len(index.interfaces),
        terms=len(index.terms),
        total_references=references,
        build_time_ms=build_time_ms,
    )


# =============================================================================
# Artifact I/O
# =============================================================================


def _current_umask() -> int:
    # The umask can only be read by setting it
    mask = os.umask(0)
    os.umask(mask)
    return mask


def serialize_index(index: ReferenceIndex) -> str:
    return json.dumps(index.to_dict(), sort_keys=True, indent=2, ensure_ascii=False) + "\n"


def write_index(index: ReferenceIndex, path: Path) -> None:
    """Write the artifact atomically.

    The JSON goes to a temporary file in the destination directory and is
    renamed over ``path``; a failure leaves any previous artifact untouched.
    """
    payload = serialize_index(index)
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(payload)
            tmp.flush()
            os.fsync(tmp.fileno())
        # mkstemp creates 0600; the artifact gets the mode a plain open() would
        os.chmod(tmp_name, 0o666 & ~_current_umask())
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
        raise IndexIOError.write_failed(str(path), e.strerror or str(e)) from e
    log.info("index_written", path=str(path), bytes=len(payload.encode("utf-8")))


def load_index(path: Path) -> ReferenceIndex:
    """Reload a written artifact."""
    if not path.is_file():
        raise IndexIOError.artifact_not_found(str(path))
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise IndexIOError.unreadable_path(str(path), e.strerror or str(e)) from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise IndexIOError.artifact_invalid(str(path), str(e)) from e

    if not isinstance(data, dict):
        raise IndexIOError.artifact_invalid(str(path), "top level is not an object")
    version = data.get("version")
    if version not in SUPPORTED_INDEX_VERSIONS:
        raise IndexIOError.artifact_invalid(str(path), f"unsupported version {version!r}")
    try:
        return ReferenceIndex.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise IndexIOError.artifact_invalid(str(path), f"malformed record: {e}") from e


# =============================================================================
# Orchestration
# =============================================================================


def resolve_imports(root: Path, config: DocPlaneConfig, imports_path: Path | None) -> ImportGraph:
    """Import graph from an explicit path, the configured path, or empty."""
    if imports_path is None and config.index.imports_path:
        imports_path = root / config.index.imports_path
    if imports_path is None:
        return ImportGraph()
    return load_import_graph(imports_path)


def build_project(
    root: Path,
    config: DocPlaneConfig,
    *,
    imports: ImportGraph | None = None,
    ctx: ParseContext | None = None,
) -> BuildResult:
    """Parse the corpus under ``root`` and assemble its index.

    Raises ``IndexIOError`` on unreadable paths; nothing is written.
    """
    started = time.perf_counter()
    ctx = ctx or ParseContext.from_config(config)
    imports = imports if imports is not None else resolve_imports(root, config, None)

    corpus = parse_corpus(root, config, ctx)
    registry = TermRegistry.from_documents(corpus.documents)
    code_files = scan_code_files(root, config)
    index = build_index(corpus, registry, code_files, imports)

    stats = compute_stats(index, int((time.perf_counter() - started) * 1000))
    cache = ctx.cache_stats()
    log.info(
        "index_built",
        **stats.to_dict(),
        pattern_cache_hits=cache.hits,
        pattern_cache_misses=cache.misses,
    )
    return BuildResult(
        corpus=corpus,
        registry=registry,
        imports=imports,
        code_files=code_files,
        index=index,
        stats=stats,
    )


def index_path(root: Path, config: DocPlaneConfig) -> Path:
    output = Path(config.index.output_path)
    return output if output.is_absolute() else root / output
