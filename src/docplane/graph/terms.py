"""Term definition and reference extraction.

A definition is a level 1-3 heading whose text starts with ``[[Name]]``. It
may be followed by a metadata block (``**Type**:``, ``**Scope**:``,
``**Aliases**:``, ``**Related**:``, ``**Not to Confuse**:``, ``**Parent**:``)
and then a paragraph that becomes the definition text.

A reference is any ``[[Name]]`` outside headings and fenced code blocks.
"""

from __future__ import annotations

from docplane.config.constants import TERM_DEFINITION_MAX_LEVEL
from docplane.graph.context import ParseContext
from docplane.graph.models import TermDefinition, TermReference, TermScope

_FENCE = r"^[ \t]*(```|~~~)"
_DEFINITION = r"^(#{1,%d})[ \t]+\[\[([^\]]+)\]\](.*)$" % TERM_DEFINITION_MAX_LEVEL
_ANY_HEADING = r"^#{1,6}[ \t]"
_RULE = r"^[ \t]*([-*_])([ \t]*\1){2,}[ \t]*$"
_METADATA_FIELDS = "Type|Scope|Aliases|Related|Not to Confuse|Parent"
_METADATA = r"^[ \t]*(?:[-*][ \t]+)?\*\*(" + _METADATA_FIELDS + r"):?\*\*:?[ \t]*(.*)$"
_LINK = r"\[\[([^\]]+)\]\]"


def fenced_lines(lines: list[str], ctx: ParseContext) -> set[int]:
    """0-based indices of lines inside fenced code blocks, fences included.

    An unterminated fence runs to the end of the document.
    """
    fence_re = ctx.pattern(_FENCE)
    fenced: set[int] = set()
    opener: str | None = None
    for index, line in enumerate(lines):
        match = fence_re.match(line)
        if opener is None:
            if match:
                opener = match.group(1)
                fenced.add(index)
            continue
        fenced.add(index)
        if match and match.group(1) == opener:
            opener = None
    return fenced


def _link_name(raw: str) -> str:
    # [[Name|label]] cites Name
    return raw.split("|", 1)[0].strip()


def _split_list(value: str, ctx: ParseContext) -> tuple[str, ...]:
    links = [_link_name(m) for m in ctx.pattern(_LINK).findall(value)]
    if links:
        return tuple(name for name in links if name)
    items = (item.strip().strip("`").strip() for item in value.split(","))
    return tuple(item for item in items if item)


def _single(value: str, ctx: ParseContext) -> str | None:
    items = _split_list(value, ctx)
    return items[0] if items else None


def extract_definitions(
    lines: list[str], path: str, ctx: ParseContext, fenced: set[int] | None = None
) -> list[TermDefinition]:
    """Term definitions declared in one document."""
    if fenced is None:
        fenced = fenced_lines(lines, ctx)
    definition_re = ctx.pattern(_DEFINITION)
    scope = TermScope.GLOBAL if ctx.is_global_scope(path) else TermScope.DOCUMENT

    definitions: list[TermDefinition] = []
    for index, line in enumerate(lines):
        if index in fenced:
            continue
        match = definition_re.match(line)
        if match is None:
            continue
        name = _link_name(match.group(2))
        if not name:
            continue
        metadata, text = _read_body(lines, index + 1, fenced, ctx)
        definitions.append(
            TermDefinition(
                name=name,
                file=path,
                line=index + 1,
                scope=scope,
                heading=line.lstrip("#").strip(),
                level=len(match.group(1)),
                term_type=metadata.get("Type") or None,
                declared_scope=metadata.get("Scope") or None,
                aliases=_split_list(metadata.get("Aliases", ""), ctx),
                related=_split_list(metadata.get("Related", ""), ctx),
                not_to_confuse=metadata.get("Not to Confuse") or None,
                parent=_single(metadata.get("Parent", ""), ctx),
                definition=text,
            )
        )
    return definitions


def _read_body(
    lines: list[str], start: int, fenced: set[int], ctx: ParseContext
) -> tuple[dict[str, str], str | None]:
    """Metadata fields and definition paragraph following a definition heading."""
    metadata_re = ctx.pattern(_METADATA)
    heading_re = ctx.pattern(_ANY_HEADING)
    rule_re = ctx.pattern(_RULE)

    metadata: dict[str, str] = {}
    paragraph: list[str] = []
    index = start
    while index < len(lines):
        line = lines[index]
        if index in fenced or heading_re.match(line) or rule_re.match(line):
            break
        if not line.strip():
            if paragraph:
                break
            index += 1
            continue
        field = metadata_re.match(line)
        if field and not paragraph:
            metadata[field.group(1)] = field.group(2).strip()
        else:
            paragraph.append(line.strip())
        index += 1

    return metadata, (" ".join(paragraph) if paragraph else None)


def extract_references(
    lines: list[str], path: str, ctx: ParseContext, fenced: set[int] | None = None
) -> list[TermReference]:
    """Every ``[[Name]]`` citation outside headings and fences."""
    if fenced is None:
        fenced = fenced_lines(lines, ctx)
    heading_re = ctx.pattern(_ANY_HEADING)
    link_re = ctx.pattern(_LINK)

    references: list[TermReference] = []
    for index, line in enumerate(lines):
        if index in fenced or heading_re.match(line):
            continue
        context = line.strip()
        for raw in link_re.findall(line):
            name = _link_name(raw)
            if name:
                references.append(
                    TermReference(name=name, file=path, line=index + 1, context=context)
                )
    return references
