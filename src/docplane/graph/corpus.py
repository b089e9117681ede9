"""Corpus loading: the map phase.

Reads and parses every discovered document independently, optionally on a
thread pool, then restores path order so the reduce phase sees a total,
stable ordering regardless of worker scheduling.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from docplane.config.models import DocPlaneConfig
from docplane.core.errors import IndexIOError, InternalError
from docplane.core.logging import get_logger
from docplane.graph.context import ParseContext
from docplane.graph.models import (
    Document,
    DocumentKind,
    FeatureDocument,
    InterfaceDocument,
    ParseDiagnostic,
    SharedTypeDocument,
)
from docplane.graph.parser import parse_document
from docplane.graph.scanner import discover_documents

log = get_logger(__name__)


@dataclass
class Corpus:
    """All parsed documents for one run, each list sorted by path."""

    features: list[FeatureDocument] = field(default_factory=list)
    interfaces: list[InterfaceDocument] = field(default_factory=list)
    shared: list[SharedTypeDocument] = field(default_factory=list)
    others: list[Document] = field(default_factory=list)
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)  # corpus-level

    @property
    def documents(self) -> list[Document]:
        docs: list[Document] = [*self.features, *self.interfaces, *self.shared, *self.others]
        return sorted(docs, key=lambda d: d.path)

    @property
    def feature_map(self) -> dict[str, FeatureDocument]:
        """Features by id. First by path wins when ids collide."""
        result: dict[str, FeatureDocument] = {}
        for doc in self.features:
            result.setdefault(doc.feature_id, doc)
        return result

    @property
    def interface_map(self) -> dict[str, InterfaceDocument]:
        return {doc.interface_id: doc for doc in self.interfaces}

    @property
    def shared_map(self) -> dict[str, SharedTypeDocument]:
        return {doc.group_id: doc for doc in self.shared}

    def all_diagnostics(self) -> list[ParseDiagnostic]:
        found = [d for doc in self.documents for d in doc.diagnostics] + self.diagnostics
        return sorted(found, key=lambda d: (d.path, d.line, d.code))


def _load_one(root: Path, path: str, kind: DocumentKind, ctx: ParseContext) -> Document:
    try:
        text = (root / path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        # Present but unreadable as text: contributes nothing beyond the diagnostic
        doc = parse_document("", path, kind, ctx)
        doc.diagnostics = [
            ParseDiagnostic(
                path=path, line=1, code="undecodable", message=f"Not valid UTF-8: {e.reason}"
            )
        ]
        return doc
    except OSError as e:
        raise IndexIOError.unreadable_path(path, e.strerror or str(e)) from e
    try:
        return parse_document(text, path, kind, ctx)
    except Exception as e:
        # A parser defect; pool.map would otherwise lose which document hit it
        raise InternalError.unexpected(
            f"parsing {path} failed: {e}", path=path, kind=kind.value
        ) from e


def parse_corpus(root: Path, config: DocPlaneConfig, ctx: ParseContext) -> Corpus:
    """Discover and parse every document under ``root``."""
    discovered = discover_documents(root, config)
    workers = config.index.max_workers

    if workers > 1 and len(discovered) > 1:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="docplane-parse") as pool:
            documents = list(
                pool.map(lambda item: _load_one(root, item[0], item[1], ctx), discovered)
            )
    else:
        documents = [_load_one(root, path, kind, ctx) for path, kind in discovered]

    corpus = Corpus()
    seen_features: dict[str, str] = {}
    for doc in sorted(documents, key=lambda d: d.path):
        if isinstance(doc, FeatureDocument):
            first = seen_features.setdefault(doc.feature_id, doc.path)
            if first != doc.path:
                corpus.diagnostics.append(
                    ParseDiagnostic(
                        path=doc.path,
                        line=1,
                        code="duplicate_feature_id",
                        message=f"Feature id '{doc.feature_id}' already declared in {first}",
                    )
                )
            corpus.features.append(doc)
        elif isinstance(doc, InterfaceDocument):
            corpus.interfaces.append(doc)
        elif isinstance(doc, SharedTypeDocument):
            corpus.shared.append(doc)
        else:
            corpus.others.append(doc)

    for diagnostic in corpus.all_diagnostics():
        log.debug(
            "parse_diagnostic",
            path=diagnostic.path,
            line=diagnostic.line,
            code=diagnostic.code,
            message=diagnostic.message,
        )
    log.info(
        "documents_parsed",
        features=len(corpus.features),
        interfaces=len(corpus.interfaces),
        shared=len(corpus.shared),
        other=len(corpus.others),
        diagnostics=len(corpus.all_diagnostics()),
    )
    return corpus
