"""Line-oriented frontmatter scanner.

Not a YAML parser. Recognizes exactly:

- ``key: value`` scalars, bare or quoted
- ``key: [a, b]`` flow lists
- ``key:`` followed by ``- value`` lines, until the first non-bullet line

Anything else inside the block is skipped.
"""

from __future__ import annotations

from docplane.graph.context import ParseContext
from docplane.graph.models import Frontmatter, ParseDiagnostic

_DELIMITER = "---"
_KEY_PATTERN = r"^([A-Za-z_][\w-]*):[ \t]*(.*?)[ \t]*$"
_BULLET_PATTERN = r"^[ \t]*-[ \t]+(.*?)[ \t]*$"


def unquote(value: str) -> str:
    """Strip one pair of matching surrounding quotes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _flow_list(value: str) -> list[str]:
    inner = value[1:-1].strip()
    if not inner:
        return []
    return [unquote(item.strip()) for item in inner.split(",") if item.strip()]


def scan_frontmatter(
    text: str,
    path: str,
    ctx: ParseContext,
) -> tuple[Frontmatter, list[ParseDiagnostic]]:
    """Scan the frontmatter block at the top of ``text``.

    Returns the scanned fields and any diagnostics. An unterminated block is
    reported and treated as absent, so the whole text stays body.
    """
    lines = text.splitlines()
    if not lines or lines[0].strip() != _DELIMITER:
        return Frontmatter(), []

    end = next((i for i in range(1, len(lines)) if lines[i].strip() == _DELIMITER), None)
    if end is None:
        return Frontmatter(), [
            ParseDiagnostic(
                path=path,
                line=1,
                code="frontmatter_unterminated",
                message="Frontmatter opened with '---' is never closed",
            )
        ]

    key_re = ctx.pattern(_KEY_PATTERN)
    bullet_re = ctx.pattern(_BULLET_PATTERN)

    fields: dict[str, str | list[str]] = {}
    diagnostics: list[ParseDiagnostic] = []
    pending: list[str] | None = None  # items of the key being read

    for offset, line in enumerate(lines[1:end], start=2):
        if not line.strip() or line.lstrip().startswith("#"):
            # Blank and comment lines are non-bullet lines: they close a list
            pending = None
            continue

        bullet = bullet_re.match(line)
        if bullet:
            if pending is None:
                diagnostics.append(
                    ParseDiagnostic(
                        path=path,
                        line=offset,
                        code="orphan_array_item",
                        message=f"List item '{bullet.group(1)}' has no preceding 'key:' line",
                    )
                )
                continue
            item = unquote(bullet.group(1))
            if item:
                pending.append(item)
            continue

        pending = None
        match = key_re.match(line)
        if match is None:
            continue

        key, value = match.group(1), match.group(2)
        if not value:
            pending = []
            fields[key] = pending
        elif value.startswith("[") and value.endswith("]"):
            fields[key] = _flow_list(value)
        else:
            fields[key] = unquote(value)

    return Frontmatter(fields=fields, present=True, body_start=end + 2), diagnostics


def strip_frontmatter(text: str, frontmatter: Frontmatter) -> list[str]:
    """Body lines with frontmatter lines blanked, so line numbers stay true."""
    lines = text.splitlines()
    if not frontmatter.present:
        return lines
    cut = frontmatter.body_start - 1
    return [""] * cut + lines[cut:]
