"""External code-import graph.

Language-specific import analysis happens outside DocPlane. A tool writes a
JSON file in one of two shapes:

    {"src/a.ts": ["src/b.ts", ...], ...}

    {"imports": {"src/a.ts": ["src/b.ts"]},
     "exports": {"src/b.ts": [{"name": "B", "type": "class", "line": 3}]}}

Paths are POSIX and relative to the project root.
"""

from __future__ import annotations

import json
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from docplane.core.errors import IndexIOError
from docplane.graph.models import ExportSymbol, normalize_path


class _ExportModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    type: Literal["function", "class", "interface", "type", "const", "enum"]
    line: int
    end_line: int | None = None


class _ImportFileModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    imports: dict[str, list[str]] = {}
    exports: dict[str, list[_ExportModel]] = {}


_FLAT_ADAPTER = TypeAdapter(dict[str, list[str]])


@dataclass
class ImportGraph:
    """Directed import edges plus optional exported symbols per file."""

    imports: dict[str, list[str]] = field(default_factory=dict)
    exports: dict[str, list[ExportSymbol]] = field(default_factory=dict)

    def imports_of(self, path: str) -> list[str]:
        return sorted(set(self.imports.get(path, [])))

    def imported_by(self) -> dict[str, list[str]]:
        """Reverse edges: target path -> sorted importing paths."""
        reverse: dict[str, set[str]] = defaultdict(set)
        for source, targets in self.imports.items():
            for target in targets:
                if target != source:
                    reverse[target].add(source)
        return {target: sorted(sources) for target, sources in sorted(reverse.items())}

    def exports_of(self, path: str) -> list[ExportSymbol] | None:
        return self.exports.get(path)

    @classmethod
    def from_data(cls, data: object, source: str = "<data>") -> ImportGraph:
        """Build from decoded JSON in either supported shape."""
        try:
            if isinstance(data, dict) and ("imports" in data or "exports" in data):
                model = _ImportFileModel.model_validate(data)
                imports = model.imports
                exports = {
                    normalize_path(path): [
                        ExportSymbol(
                            name=e.name, symbol_type=e.type, line=e.line, end_line=e.end_line
                        )
                        for e in symbols
                    ]
                    for path, symbols in model.exports.items()
                }
            else:
                imports = _FLAT_ADAPTER.validate_python(data)
                exports = {}
        except ValidationError as e:
            raise IndexIOError.import_graph_invalid(source, str(e.errors()[0]["msg"])) from e

        return cls(
            imports={
                normalize_path(path): sorted({normalize_path(t) for t in targets})
                for path, targets in imports.items()
            },
            exports=exports,
        )


def load_import_graph(path: Path) -> ImportGraph:
    """Read an import graph file. Missing or malformed files are fatal."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise IndexIOError.unreadable_path(str(path), e.strerror or str(e)) from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise IndexIOError.import_graph_invalid(str(path), e.msg) from e
    return ImportGraph.from_data(data, str(path))
