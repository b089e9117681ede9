"""Tests for component extraction."""

from docplane.graph.components import (
    ComponentExtractor,
    HeadingFieldMatcher,
    NumberedItemMatcher,
    State,
    extract_components,
)
from docplane.graph.context import ParseContext


def _lines(text: str) -> list[str]:
    return text.splitlines()


class TestMatchers:
    """Each authoring pattern is an independent matcher."""

    def test_given_numbered_item_when_attempted_then_name_and_path(
        self, ctx: ParseContext
    ) -> None:
        """``1. **Name** (`path`) - text`` yields a start at that line."""
        lines = ["1. **TokenStore** (`src/auth/store.ts`) - persists tokens"]
        start = NumberedItemMatcher().attempt(lines, 0, ctx)
        assert start is not None
        assert (start.name, start.file_path, start.line) == (
            "TokenStore",
            "src/auth/store.ts",
            1,
        )
        assert start.description == "persists tokens"

    def test_given_file_field_within_window_when_attempted_then_matches(
        self, ctx: ParseContext
    ) -> None:
        """The field may appear a few lines below the heading."""
        lines = ["### Session", "", "Some intro.", "**File**: `src/session.ts`"]
        start = HeadingFieldMatcher("File").attempt(lines, 0, ctx)
        assert start is not None
        assert start.file_path == "src/session.ts"

    def test_given_field_beyond_window_when_attempted_then_no_match(
        self, ctx: ParseContext
    ) -> None:
        """Fields past the lookahead window are not attributed to the heading."""
        lines = ["### Session", "a", "b", "c", "d", "e", "**File**: `src/session.ts`"]
        assert HeadingFieldMatcher("File", lookahead=5).attempt(lines, 0, ctx) is None

    def test_given_location_field_when_file_matcher_attempted_then_no_match(
        self, ctx: ParseContext
    ) -> None:
        """Matchers only accept their own field name."""
        lines = ["### Session", "**Location**: `src/session.ts`"]
        assert HeadingFieldMatcher("File").attempt(lines, 0, ctx) is None
        assert HeadingFieldMatcher("Location").attempt(lines, 0, ctx) is not None


class TestExtraction:
    """Section-scoped state machine."""

    def test_given_three_patterns_in_section_when_extracted_then_all_found(
        self, ctx: ParseContext
    ) -> None:
        """Numbered, File and Location components are all recognized."""
        # Given
        text = """# Auth

## Architecture

1. **Router** (`src/router.ts`) - routes requests

### TokenStore

**File**: `src/store.ts`

Keeps tokens.

- save(token)
- load: reads a token

### Cache
**Location**: `src/cache.ts`

## Notes

### NotAComponent
**File**: `src/ignored.ts`
"""
        # When
        components, diagnostics = extract_components(_lines(text), "f.md", ctx)

        # Then
        assert diagnostics == []
        assert [(c.name, c.file_path) for c in components] == [
            ("Router", "src/router.ts"),
            ("TokenStore", "src/store.ts"),
            ("Cache", "src/cache.ts"),
        ]
        store = components[1]
        assert store.description == "Keeps tokens."
        assert store.methods == ("save", "load")

    def test_given_heading_outside_sections_when_extracted_then_ignored(
        self, ctx: ParseContext
    ) -> None:
        """Components are only recognized inside designated sections."""
        text = "## Overview\n\n### Thing\n**File**: `src/thing.ts`\n"
        components, _ = extract_components(_lines(text), "f.md", ctx)
        assert components == []

    def test_given_heading_with_methods_but_no_path_when_extracted_then_diagnostic(
        self, ctx: ParseContext
    ) -> None:
        """Method bullets without a file field are flagged as missing path."""
        # Given
        text = "## Components\n\n### Parser\n\n- parse(text)\n- reset()\n"

        # When
        components, diagnostics = extract_components(_lines(text), "f.md", ctx)

        # Then
        assert components == []
        assert [(d.code, d.line) for d in diagnostics] == [("component_missing_path", 3)]

    def test_given_prose_subsection_when_extracted_then_no_diagnostic(
        self, ctx: ParseContext
    ) -> None:
        """Ordinary subsections are not false positives."""
        text = "## Implementation\n\n### Rationale\n\nWe chose this because it is simple.\n"
        components, diagnostics = extract_components(_lines(text), "f.md", ctx)
        assert components == []
        assert diagnostics == []

    def test_given_headings_in_fence_when_extracted_then_ignored(
        self, ctx: ParseContext
    ) -> None:
        """Fenced examples do not produce components."""
        text = "## Components\n\n```md\n### Fake\n**File**: `src/fake.ts`\n```\n"
        components, _ = extract_components(_lines(text), "f.md", ctx)
        assert components == []

    def test_given_section_name_with_suffix_when_extracted_then_section_recognized(
        self, ctx: ParseContext
    ) -> None:
        """``## Implementation Details`` still opens a component section."""
        text = "## Implementation Details\n\n1. **A** (`src/a.ts`)\n"
        components, _ = extract_components(_lines(text), "f.md", ctx)
        assert [c.name for c in components] == ["A"]


class TestMatcherOrder:
    """First successful matcher wins."""

    def test_given_custom_matchers_when_extracted_then_only_those_apply(
        self, ctx: ParseContext
    ) -> None:
        """An extractor built with one matcher ignores the other patterns."""
        text = "## Architecture\n\n1. **A** (`src/a.ts`)\n\n### B\n**File**: `src/b.ts`\n"
        extractor = ComponentExtractor(ctx, matchers=(NumberedItemMatcher(),))
        components, _ = extractor.extract(_lines(text), "f.md")
        assert [c.name for c in components] == ["A"]

    def test_states_are_distinct(self) -> None:
        assert len({State.OUTSIDE, State.IN_SECTION, State.IN_COMPONENT}) == 3
