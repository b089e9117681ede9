"""Component extraction from feature documents.

Components are only recognized inside level-2 ``Architecture``,
``Components`` or ``Implementation`` sections. Three authoring patterns are
accepted, tried in order by independent matchers:

1. ``1. **Name** (`path/to/file`) - description``
2. ``### Name`` followed within a few lines by ``**File**: `path```
3. ``### Name`` followed within a few lines by ``**Location**: `path```

Scanning is a small state machine (OUTSIDE, IN_SECTION, IN_COMPONENT). A
component is emitted when the machine leaves IN_COMPONENT.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

from docplane.config.constants import COMPONENT_LOOKAHEAD_LINES, COMPONENT_SECTION_NAMES
from docplane.graph.context import ParseContext
from docplane.graph.models import Component, ParseDiagnostic, normalize_path

_SECTION_HEADING = r"^##[ \t]+(.+?)[ \t]*#*[ \t]*$"
_TOP_HEADING = r"^#{1,2}[ \t]+\S"
_SUB_HEADING = r"^###[ \t]+(.+?)[ \t]*#*[ \t]*$"
_NUMBERED_ITEM = r"^[ \t]*\d+\.[ \t]+\*\*(.+?)\*\*[ \t]*\(`([^`]+)`\)[ \t]*(.*)$"
_FIELD = r"^[ \t]*[-*]?[ \t]*\*\*{name}:?\*\*:?[ \t]*`?([^`\s]+)`?"
_METHOD_BULLET = r"^[ \t]*[-*][ \t]+`?([A-Za-z_][\w.]*)[ \t]*[(:]"
_FENCE = r"^[ \t]*(```|~~~)"


class State(Enum):
    OUTSIDE = auto()
    IN_SECTION = auto()
    IN_COMPONENT = auto()


@dataclass(frozen=True)
class ComponentStart:
    """What a matcher found: enough to open a component."""

    name: str
    file_path: str
    line: int
    description: str = ""


class ComponentMatcher(Protocol):
    def attempt(
        self, lines: list[str], index: int, ctx: ParseContext
    ) -> ComponentStart | None: ...


class NumberedItemMatcher:
    """``1. **Name** (`path`) - description``"""

    def attempt(self, lines: list[str], index: int, ctx: ParseContext) -> ComponentStart | None:
        match = ctx.pattern(_NUMBERED_ITEM).match(lines[index])
        if match is None:
            return None
        description = match.group(3).strip().lstrip("-:–").strip()
        return ComponentStart(
            name=match.group(1).strip(),
            file_path=normalize_path(match.group(2)),
            line=index + 1,
            description=description,
        )


@dataclass(frozen=True)
class HeadingFieldMatcher:
    """``### Name`` with a ``**<field_name>**:`` line inside the lookahead window."""

    field_name: str
    lookahead: int = COMPONENT_LOOKAHEAD_LINES

    def attempt(self, lines: list[str], index: int, ctx: ParseContext) -> ComponentStart | None:
        heading = ctx.pattern(_SUB_HEADING).match(lines[index])
        if heading is None:
            return None
        field_re = ctx.pattern(_FIELD.format(name=self.field_name))
        for offset in range(index + 1, min(index + 1 + self.lookahead, len(lines))):
            if ctx.pattern(_TOP_HEADING).match(lines[offset]) or ctx.pattern(
                _SUB_HEADING
            ).match(lines[offset]):
                break
            found = field_re.match(lines[offset])
            if found:
                return ComponentStart(
                    name=heading.group(1).strip(),
                    file_path=normalize_path(found.group(1)),
                    line=index + 1,
                )
        return None


DEFAULT_MATCHERS: tuple[ComponentMatcher, ...] = (
    NumberedItemMatcher(),
    HeadingFieldMatcher("File"),
    HeadingFieldMatcher("Location"),
)


@dataclass
class _Open:
    """The component currently in IN_COMPONENT."""

    start: ComponentStart
    description: str
    methods: list[str] = field(default_factory=list)

    def close(self) -> Component:
        return Component(
            name=self.start.name,
            file_path=self.start.file_path,
            line=self.start.line,
            description=self.description,
            methods=tuple(self.methods),
        )


class ComponentExtractor:
    """Runs the section state machine over one document body."""

    def __init__(
        self,
        ctx: ParseContext,
        matchers: tuple[ComponentMatcher, ...] = DEFAULT_MATCHERS,
        lookahead: int = COMPONENT_LOOKAHEAD_LINES,
    ) -> None:
        self._ctx = ctx
        self._matchers = matchers
        self._lookahead = lookahead

    def extract(
        self, lines: list[str], path: str
    ) -> tuple[list[Component], list[ParseDiagnostic]]:
        ctx = self._ctx
        section_re = ctx.pattern(_SECTION_HEADING)
        top_re = ctx.pattern(_TOP_HEADING)
        sub_re = ctx.pattern(_SUB_HEADING)
        fence_re = ctx.pattern(_FENCE)
        method_re = ctx.pattern(_METHOD_BULLET)

        components: list[Component] = []
        diagnostics: list[ParseDiagnostic] = []
        state = State.OUTSIDE
        current: _Open | None = None
        in_fence = False

        def leave_component() -> None:
            nonlocal current
            if current is not None:
                components.append(current.close())
                current = None

        for index, line in enumerate(lines):
            if fence_re.match(line):
                in_fence = not in_fence
                continue
            if in_fence:
                continue

            section = section_re.match(line)
            if section or top_re.match(line):
                leave_component()
                state = (
                    State.IN_SECTION
                    if section and _is_component_section(section.group(1))
                    else State.OUTSIDE
                )
                continue

            if state is State.OUTSIDE:
                continue

            start = self._attempt(lines, index)
            if start is not None:
                leave_component()
                current = _Open(start=start, description=start.description)
                state = State.IN_COMPONENT
                continue

            heading = sub_re.match(line)
            if heading:
                leave_component()
                state = State.IN_SECTION
                if self._has_methods_without_path(lines, index):
                    diagnostics.append(
                        ParseDiagnostic(
                            path=path,
                            line=index + 1,
                            code="component_missing_path",
                            message=f"Component '{heading.group(1).strip()}' lists methods "
                            "but has no **File** or **Location** field",
                        )
                    )
                continue

            if state is State.IN_COMPONENT and current is not None:
                method = method_re.match(line)
                if method:
                    current.methods.append(method.group(1))
                elif not current.description and _is_prose(line):
                    current.description = line.strip()

        leave_component()
        return components, diagnostics

    def _attempt(self, lines: list[str], index: int) -> ComponentStart | None:
        for matcher in self._matchers:
            start = matcher.attempt(lines, index, self._ctx)
            if start is not None:
                return start
        return None

    def _has_methods_without_path(self, lines: list[str], index: int) -> bool:
        ctx = self._ctx
        method_re = ctx.pattern(_METHOD_BULLET)
        end = min(index + 1 + self._lookahead, len(lines))
        for offset in range(index + 1, end):
            line = lines[offset]
            if ctx.pattern(_TOP_HEADING).match(line) or ctx.pattern(_SUB_HEADING).match(line):
                return False
            if method_re.match(line):
                return True
        return False


def _is_component_section(title: str) -> bool:
    first = title.split()[0].strip(":").lower() if title.split() else ""
    return first in {name.lower() for name in COMPONENT_SECTION_NAMES}


def _is_prose(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith(("**", "-", "*", "|", ">", "#", "<"))


def extract_components(
    lines: list[str], path: str, ctx: ParseContext
) -> tuple[list[Component], list[ParseDiagnostic]]:
    """Extract components from document body lines using the default matchers."""
    return ComponentExtractor(ctx).extract(lines, path)
