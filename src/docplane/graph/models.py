"""Graph data model.

Two layers live here:

- Raw parse output (``*Document`` classes): one per source document, owned by
  that document, produced independently in the map phase.
- Index records (``FeatureRecord``, ``CodeRecord``, ``InterfaceEdge``,
  ``TermEntry``): the assembled, serializable graph. Reverse edges on these
  are computed by the builder and never authored.

Every index record round-trips through ``to_dict`` / ``from_dict``, and every
list it serializes is sorted so output is byte-stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

# =============================================================================
# Enums
# =============================================================================


class DocumentKind(Enum):
    """Which conventional corpus directory a document lives in."""

    FEATURE = "feature"
    INTERFACE = "interface"
    SHARED = "shared"
    OTHER = "other"


class TermScope(Enum):
    GLOBAL = "global"
    DOCUMENT = "document"


class CodeKind(Enum):
    """Kind recorded on a code record in the index."""

    SOURCE = "source"
    TEST = "test"
    CONFIG = "config"


class FileClass(Enum):
    """Filesystem classification used by the scanner and orphan detector."""

    SOURCE = "source"
    TEST = "test"
    CONFIG = "config"
    GENERATED = "generated"
    OTHER = "other"


def normalize_path(path: str) -> str:
    """Project-relative POSIX form: forward slashes, no leading ``./`` or ``/``.

    Every code path entering the graph goes through here, so authored
    ``./src/a.py`` and scanned ``src/a.py`` key the same record.
    """
    path = path.strip().replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path.lstrip("/")


# =============================================================================
# Parse output
# =============================================================================


@dataclass(frozen=True)
class ParseDiagnostic:
    """A problem found while parsing one document. Never aborts the run."""

    path: str
    line: int
    code: str  # "frontmatter_unterminated", "component_missing_path", ...
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "line": self.line, "code": self.code, "message": self.message}


@dataclass
class Frontmatter:
    """Fields scanned from the ``---`` delimited block at the top of a document."""

    fields: dict[str, str | list[str]] = field(default_factory=dict)
    present: bool = False
    body_start: int = 1  # 1-based line number of the first body line

    def has(self, key: str) -> bool:
        value = self.fields.get(key)
        if value is None:
            return False
        return bool(value) if isinstance(value, list) else value.strip() != ""

    def scalar(self, key: str) -> str | None:
        value = self.fields.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    def array(self, key: str) -> list[str]:
        value = self.fields.get(key)
        if isinstance(value, list):
            return list(value)
        if isinstance(value, str) and value.strip():
            return [value.strip()]
        return []

    def is_array(self, key: str) -> bool:
        return isinstance(self.fields.get(key), list)


@dataclass(frozen=True)
class Component:
    """A component documented in an Architecture/Components/Implementation section."""

    name: str
    file_path: str
    line: int
    description: str = ""
    methods: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "file": self.file_path,
            "line": self.line,
            "description": self.description,
            "methods": list(self.methods),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Component:
        return cls(
            name=data["name"],
            file_path=data["file"],
            line=data["line"],
            description=data.get("description", ""),
            methods=tuple(data.get("methods", [])),
        )


@dataclass(frozen=True)
class TermDefinition:
    """A ``[[Name]]`` heading definition."""

    name: str
    file: str
    line: int
    scope: TermScope
    heading: str
    level: int
    term_type: str | None = None
    declared_scope: str | None = None
    aliases: tuple[str, ...] = ()
    related: tuple[str, ...] = ()
    not_to_confuse: str | None = None
    parent: str | None = None
    definition: str | None = None


@dataclass(frozen=True)
class TermReference:
    """A ``[[Name]]`` occurrence outside headings and fences."""

    name: str
    file: str
    line: int
    context: str

    def to_dict(self) -> dict[str, Any]:
        return {"file": self.file, "line": self.line, "context": self.context}


@dataclass(kw_only=True)
class Document:
    """Common parse output for any markdown document."""

    path: str  # POSIX path relative to project root
    kind: DocumentKind
    text: str
    frontmatter: Frontmatter = field(default_factory=Frontmatter)
    definitions: list[TermDefinition] = field(default_factory=list)
    references: list[TermReference] = field(default_factory=list)
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)

    @property
    def stem(self) -> str:
        name = self.path.rsplit("/", 1)[-1]
        return name[:-3] if name.endswith(".md") else name


@dataclass(kw_only=True)
class FeatureDocument(Document):
    feature_id: str
    status: str | None = None
    entry_point: str | None = None
    code_references: list[str] = field(default_factory=list)
    related_features: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    interfaces: list[str] = field(default_factory=list)
    test_files: list[str] = field(default_factory=list)
    components: list[Component] = field(default_factory=list)
    mentioned_paths: list[str] = field(default_factory=list)

    def documented_paths(self) -> list[str]:
        """Code paths this feature formally documents.

        ``code_references``, the ``entry_point`` and every component file.
        Loose path mentions in prose are not included.
        """
        paths = set(self.code_references)
        if self.entry_point:
            paths.add(self.entry_point)
        paths.update(c.file_path for c in self.components)
        return sorted(paths)


@dataclass(kw_only=True)
class InterfaceDocument(Document):
    interface_id: str
    from_feature: str | None = None
    to_feature: str | None = None
    interface_type: str | None = None
    shared_types: list[str] = field(default_factory=list)
    mentioned_paths: list[str] = field(default_factory=list)


@dataclass(kw_only=True)
class SharedTypeDocument(Document):
    group_id: str  # filename stem as authored
    tokens: list[str] = field(default_factory=list)  # filename tokens, authored order
    interfaces: list[str] = field(default_factory=list)  # frontmatter, authored order
    type_field: str | None = None
    status: str | None = None


# =============================================================================
# Index records
# =============================================================================


def _sorted_unique(values: list[str] | set[str] | tuple[str, ...]) -> list[str]:
    return sorted(set(values))


@dataclass
class FeatureRecord:
    feature_id: str
    file: str
    status: str | None = None
    entry_point: str | None = None
    code_uses: list[str] = field(default_factory=list)
    code_used_by: list[str] = field(default_factory=list)
    related: list[str] = field(default_factory=list)
    depends_on: list[str] = field(default_factory=list)
    used_by: list[str] = field(default_factory=list)
    provides: list[str] = field(default_factory=list)
    uses: list[str] = field(default_factory=list)
    terms_defines: list[str] = field(default_factory=list)
    terms_uses: list[str] = field(default_factory=list)
    tested_by: list[str] = field(default_factory=list)
    components: list[Component] = field(default_factory=list)

    def normalize(self) -> None:
        """Sort and de-duplicate every edge list in place."""
        for name in (
            "code_uses",
            "code_used_by",
            "related",
            "depends_on",
            "used_by",
            "provides",
            "uses",
            "terms_defines",
            "terms_uses",
            "tested_by",
        ):
            setattr(self, name, _sorted_unique(getattr(self, name)))
        self.components = sorted(self.components, key=lambda c: (c.line, c.name))

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "status": self.status,
            "entry_point": self.entry_point,
            "code": {"uses": self.code_uses, "used_by": self.code_used_by},
            "features": {
                "related": self.related,
                "depends_on": self.depends_on,
                "used_by": self.used_by,
            },
            "interfaces": {"provides": self.provides, "uses": self.uses},
            "terms": {"defines": self.terms_defines, "uses": self.terms_uses},
            "tests": {"tested_by": self.tested_by},
            "components": [c.to_dict() for c in self.components],
        }

    @classmethod
    def from_dict(cls, feature_id: str, data: dict[str, Any]) -> FeatureRecord:
        return cls(
            feature_id=feature_id,
            file=data["file"],
            status=data.get("status"),
            entry_point=data.get("entry_point"),
            code_uses=list(data["code"]["uses"]),
            code_used_by=list(data["code"]["used_by"]),
            related=list(data["features"]["related"]),
            depends_on=list(data["features"]["depends_on"]),
            used_by=list(data["features"]["used_by"]),
            provides=list(data["interfaces"]["provides"]),
            uses=list(data["interfaces"]["uses"]),
            terms_defines=list(data["terms"]["defines"]),
            terms_uses=list(data["terms"]["uses"]),
            tested_by=list(data["tests"]["tested_by"]),
            components=[Component.from_dict(c) for c in data.get("components", [])],
        )


@dataclass(frozen=True)
class ExportSymbol:
    name: str
    symbol_type: Literal["function", "class", "interface", "type", "const", "enum"]
    line: int
    end_line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "type": self.symbol_type, "line": self.line}
        if self.end_line is not None:
            data["end_line"] = self.end_line
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExportSymbol:
        return cls(
            name=data["name"],
            symbol_type=data["type"],
            line=int(data["line"]),
            end_line=data.get("end_line"),
        )


@dataclass
class CodeRecord:
    path: str
    kind: CodeKind
    documented_in: list[str] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)
    imported_by: list[str] = field(default_factory=list)
    exports: list[ExportSymbol] | None = None

    def normalize(self) -> None:
        self.documented_in = _sorted_unique(self.documented_in)
        self.imports = _sorted_unique(self.imports)
        self.imported_by = _sorted_unique(self.imported_by)
        if self.exports is not None:
            self.exports = sorted(self.exports, key=lambda s: (s.line, s.name))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.kind.value,
            "documented_in": self.documented_in,
            "imports": self.imports,
            "imported_by": self.imported_by,
        }
        if self.exports is not None:
            data["exports"] = [s.to_dict() for s in self.exports]
        return data

    @classmethod
    def from_dict(cls, path: str, data: dict[str, Any]) -> CodeRecord:
        exports = data.get("exports")
        return cls(
            path=path,
            kind=CodeKind(data["type"]),
            documented_in=list(data["documented_in"]),
            imports=list(data["imports"]),
            imported_by=list(data["imported_by"]),
            exports=[ExportSymbol.from_dict(s) for s in exports] if exports is not None else None,
        )


@dataclass
class InterfaceEdge:
    interface_id: str
    file: str
    from_feature: str | None
    to_feature: str | None
    interface_type: str
    shared_types: list[str] = field(default_factory=list)

    def normalize(self) -> None:
        self.shared_types = _sorted_unique(self.shared_types)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "from": self.from_feature,
            "to": self.to_feature,
            "type": self.interface_type,
            "shared_types": self.shared_types,
        }

    @classmethod
    def from_dict(cls, interface_id: str, data: dict[str, Any]) -> InterfaceEdge:
        return cls(
            interface_id=interface_id,
            file=data["file"],
            from_feature=data.get("from"),
            to_feature=data.get("to"),
            interface_type=data["type"],
            shared_types=list(data["shared_types"]),
        )


@dataclass(frozen=True)
class SharedTypeGroup:
    """A shared type addressed by its canonical id.

    The canonical id is the sorted, de-duplicated pair tokens joined by ``_``;
    the group can be found from any member interface without opening the file.
    """

    canonical_id: str
    group_id: str  # filename stem as authored
    interfaces: tuple[str, ...]


@dataclass
class TermEntry:
    name: str
    file: str
    line: int
    scope: TermScope
    aliases: list[str] = field(default_factory=list)
    related: list[str] = field(default_factory=list)
    parent: str | None = None
    term_type: str | None = None
    definition: str | None = None
    references: list[TermReference] = field(default_factory=list)

    @property
    def usage_count(self) -> int:
        return len(self.references)

    def normalize(self) -> None:
        self.aliases = _sorted_unique(self.aliases)
        self.related = _sorted_unique(self.related)
        self.references = sorted(
            set(self.references), key=lambda r: (r.file, r.line, r.name, r.context)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "definition": {
                "name": self.name,
                "file": self.file,
                "line": self.line,
                "scope": self.scope.value,
                "aliases": self.aliases,
                "related": self.related,
                "parent": self.parent,
                "type": self.term_type,
                "text": self.definition,
            },
            "references": [
                {"name": r.name, "file": r.file, "line": r.line, "context": r.context}
                for r in self.references
            ],
            "usage_count": self.usage_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TermEntry:
        definition = data["definition"]
        return cls(
            name=definition["name"],
            file=definition["file"],
            line=definition["line"],
            scope=TermScope(definition["scope"]),
            aliases=list(definition.get("aliases", [])),
            related=list(definition.get("related", [])),
            parent=definition.get("parent"),
            term_type=definition.get("type"),
            definition=definition.get("text"),
            references=[
                TermReference(name=r["name"], file=r["file"], line=r["line"], context=r["context"])
                for r in data["references"]
            ],
        )


@dataclass
class ReferenceIndex:
    """The assembled, serializable cross-reference graph.

    A disposable cache: rebuilt wholesale from source documents each run.
    """

    version: str
    generated: str
    features: dict[str, FeatureRecord] = field(default_factory=dict)
    code: dict[str, CodeRecord] = field(default_factory=dict)
    interfaces: dict[str, InterfaceEdge] = field(default_factory=dict)
    terms: dict[str, TermEntry] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "generated": self.generated,
            "features": {k: self.features[k].to_dict() for k in sorted(self.features)},
            "code": {k: self.code[k].to_dict() for k in sorted(self.code)},
            "interfaces": {k: self.interfaces[k].to_dict() for k in sorted(self.interfaces)},
            "terms": {k: self.terms[k].to_dict() for k in sorted(self.terms)},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReferenceIndex:
        return cls(
            version=data["version"],
            generated=data["generated"],
            features={k: FeatureRecord.from_dict(k, v) for k, v in data["features"].items()},
            code={k: CodeRecord.from_dict(k, v) for k, v in data["code"].items()},
            interfaces={k: InterfaceEdge.from_dict(k, v) for k, v in data["interfaces"].items()},
            terms={k: TermEntry.from_dict(v) for k, v in data["terms"].items()},
        )
