"""Graph engine: parse documents, register terms, assemble the reference index."""

from docplane.graph.builder import (
    BuildResult,
    IndexStats,
    build_index,
    build_project,
    load_index,
    write_index,
)
from docplane.graph.context import ParseContext
from docplane.graph.corpus import Corpus, parse_corpus
from docplane.graph.imports import ImportGraph, load_import_graph
from docplane.graph.query import IndexQuery
from docplane.graph.registry import TermRegistry

__all__ = [
    "BuildResult",
    "Corpus",
    "ImportGraph",
    "IndexQuery",
    "IndexStats",
    "ParseContext",
    "TermRegistry",
    "build_index",
    "build_project",
    "load_import_graph",
    "load_index",
    "parse_corpus",
    "write_index",
]
