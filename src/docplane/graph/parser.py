"""Document parser.

Turns one document's text into a raw record for its kind. Stateless per file:
everything a parse needs comes in through arguments, and everything it finds
(including diagnostics) goes out in the returned record.
"""

from __future__ import annotations

from docplane.graph.components import extract_components
from docplane.graph.context import ParseContext
from docplane.graph.frontmatter import scan_frontmatter, strip_frontmatter
from docplane.graph.models import (
    Document,
    DocumentKind,
    FeatureDocument,
    InterfaceDocument,
    ParseDiagnostic,
    SharedTypeDocument,
    normalize_path,
)
from docplane.graph.terms import extract_definitions, extract_references, fenced_lines

_MARKDOWN_LINK = r"\[[^\]]*\]\(([^)\s#]+)(?:#[^)]*)?\)"
_BARE_PATH = r"(?<![\w/.-])((?:src|lib|app|packages|tests?|scripts)/[\w./-]*\w)"


def _stem(path: str) -> str:
    name = path.rsplit("/", 1)[-1]
    return name[:-3] if name.endswith(".md") else name


def _paths(values: list[str]) -> list[str]:
    return list(dict.fromkeys(p for p in map(normalize_path, values) if p))


def _mentioned_paths(lines: list[str], fenced: set[int], ctx: ParseContext) -> list[str]:
    """Relative file paths linked or written out in prose."""
    link_re = ctx.pattern(_MARKDOWN_LINK)
    bare_re = ctx.pattern(_BARE_PATH)
    found: set[str] = set()
    for index, line in enumerate(lines):
        if index in fenced:
            continue
        for target in link_re.findall(line):
            if "://" in target or target.startswith("mailto:"):
                continue
            found.add(normalize_path(target))
        found.update(normalize_path(p) for p in bare_re.findall(line))
    return sorted(found)


def _parse_common(
    text: str, path: str, kind: DocumentKind, ctx: ParseContext
) -> tuple[Document, list[str], set[int]]:
    frontmatter, diagnostics = scan_frontmatter(text, path, ctx)
    lines = strip_frontmatter(text, frontmatter)
    fenced = fenced_lines(lines, ctx)
    if kind is not DocumentKind.OTHER and not frontmatter.present and not diagnostics:
        diagnostics.append(
            ParseDiagnostic(
                path=path,
                line=1,
                code="missing_frontmatter",
                message=f"{kind.value.capitalize()} document has no frontmatter block",
            )
        )
    document = Document(
        path=path,
        kind=kind,
        text=text,
        frontmatter=frontmatter,
        definitions=extract_definitions(lines, path, ctx, fenced),
        references=extract_references(lines, path, ctx, fenced),
        diagnostics=diagnostics,
    )
    return document, lines, fenced


def _common_fields(document: Document) -> dict:
    return {
        "path": document.path,
        "kind": document.kind,
        "text": document.text,
        "frontmatter": document.frontmatter,
        "definitions": document.definitions,
        "references": document.references,
        "diagnostics": document.diagnostics,
    }


def parse_feature(text: str, path: str, ctx: ParseContext) -> FeatureDocument:
    base, lines, fenced = _parse_common(text, path, DocumentKind.FEATURE, ctx)
    fm = base.frontmatter
    components, component_diagnostics = extract_components(lines, path, ctx)
    base.diagnostics.extend(component_diagnostics)

    # ``depends_on`` is the older spelling of ``dependencies``
    dependencies = fm.array("dependencies") + fm.array("depends_on")
    entry_point = fm.scalar("entry_point")

    return FeatureDocument(
        **_common_fields(base),
        feature_id=fm.scalar("feature") or _stem(path),
        status=fm.scalar("status"),
        entry_point=normalize_path(entry_point) if entry_point else None,
        code_references=_paths(fm.array("code_references")),
        related_features=fm.array("related_features"),
        dependencies=list(dict.fromkeys(dependencies)),
        interfaces=fm.array("interfaces"),
        test_files=_paths(fm.array("test_files")),
        components=components,
        mentioned_paths=_mentioned_paths(lines, fenced, ctx),
    )


def parse_interface(text: str, path: str, ctx: ParseContext) -> InterfaceDocument:
    base, lines, fenced = _parse_common(text, path, DocumentKind.INTERFACE, ctx)
    fm = base.frontmatter
    return InterfaceDocument(
        **_common_fields(base),
        interface_id=_stem(path),
        from_feature=fm.scalar("from"),
        to_feature=fm.scalar("to"),
        interface_type=fm.scalar("type"),
        shared_types=fm.array("shared_types"),
        mentioned_paths=_mentioned_paths(lines, fenced, ctx),
    )


def parse_shared_type(text: str, path: str, ctx: ParseContext) -> SharedTypeDocument:
    base, _, _ = _parse_common(text, path, DocumentKind.SHARED, ctx)
    fm = base.frontmatter
    stem = _stem(path)
    return SharedTypeDocument(
        **_common_fields(base),
        group_id=stem,
        tokens=stem.split("_") if stem else [],
        interfaces=fm.array("interfaces"),
        type_field=fm.scalar("type"),
        status=fm.scalar("status"),
    )


def parse_other(text: str, path: str, ctx: ParseContext) -> Document:
    document, _, _ = _parse_common(text, path, DocumentKind.OTHER, ctx)
    return document


_PARSERS = {
    DocumentKind.FEATURE: parse_feature,
    DocumentKind.INTERFACE: parse_interface,
    DocumentKind.SHARED: parse_shared_type,
    DocumentKind.OTHER: parse_other,
}


def parse_document(text: str, path: str, kind: DocumentKind, ctx: ParseContext) -> Document:
    """Parse ``text`` (stored at relative ``path``) as a document of ``kind``."""
    return _PARSERS[kind](text, path, ctx)
