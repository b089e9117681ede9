"""Tests for loading the external import graph."""

import json
from pathlib import Path

import pytest

from docplane.core.errors import ErrorCode, IndexIOError
from docplane.graph.imports import ImportGraph, load_import_graph


class TestImportGraphShapes:
    """Both file shapes load into the same graph."""

    def test_given_flat_mapping_when_loaded_then_edges_normalized(self) -> None:
        # Given
        data = {"./src/a.ts": ["src\\b.ts", "src/b.ts", "src/c.ts"]}

        # When
        graph = ImportGraph.from_data(data)

        # Then
        assert graph.imports == {"src/a.ts": ["src/b.ts", "src/c.ts"]}
        assert graph.exports == {}

    def test_given_structured_file_when_loaded_then_exports_kept(self) -> None:
        graph = ImportGraph.from_data(
            {
                "imports": {"src/a.ts": ["src/b.ts"]},
                "exports": {
                    "src/b.ts": [{"name": "B", "type": "class", "line": 3, "end_line": 9}]
                },
            }
        )
        symbols = graph.exports_of("src/b.ts")
        assert symbols is not None
        assert (symbols[0].name, symbols[0].symbol_type, symbols[0].end_line) == ("B", "class", 9)
        assert graph.exports_of("src/a.ts") is None

    def test_given_edges_when_reversed_then_self_imports_dropped(self) -> None:
        graph = ImportGraph.from_data(
            {"src/a.ts": ["src/b.ts", "src/a.ts"], "src/c.ts": ["src/b.ts"]}
        )
        assert graph.imported_by() == {"src/b.ts": ["src/a.ts", "src/c.ts"]}
        assert graph.imports_of("src/missing.ts") == []

    @pytest.mark.parametrize(
        "data",
        [
            ["src/a.ts"],
            {"src/a.ts": "src/b.ts"},
            {"exports": {"src/b.ts": [{"name": "B", "type": "macro", "line": 1}]}},
        ],
    )
    def test_given_wrong_shape_when_loaded_then_import_graph_invalid(self, data: object) -> None:
        with pytest.raises(IndexIOError) as exc_info:
            ImportGraph.from_data(data, "imports.json")
        assert exc_info.value.code is ErrorCode.INDEX_IMPORT_GRAPH_INVALID


class TestLoadImportGraph:
    def test_given_file_when_loaded_then_graph_returned(self, tmp_path: Path) -> None:
        path = tmp_path / "imports.json"
        path.write_text(json.dumps({"src/a.ts": ["src/b.ts"]}))
        assert load_import_graph(path).imports_of("src/a.ts") == ["src/b.ts"]

    def test_given_missing_file_when_loaded_then_unreadable(self, tmp_path: Path) -> None:
        with pytest.raises(IndexIOError) as exc_info:
            load_import_graph(tmp_path / "imports.json")
        assert exc_info.value.code is ErrorCode.INDEX_UNREADABLE_PATH

    def test_given_bad_json_when_loaded_then_invalid(self, tmp_path: Path) -> None:
        path = tmp_path / "imports.json"
        path.write_text("{nope")
        with pytest.raises(IndexIOError) as exc_info:
            load_import_graph(path)
        assert exc_info.value.code is ErrorCode.INDEX_IMPORT_GRAPH_INVALID
