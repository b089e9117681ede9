"""Configuration constants.

Values here are format contracts and implementation details, not user
settings. For configurable values, see models.py.
"""

# =============================================================================
# Reference Index Artifact
# =============================================================================

INDEX_VERSION = "1.0"
"""Version written into every reference index artifact."""

SUPPORTED_INDEX_VERSIONS = frozenset({"1.0"})
"""Artifact versions ``load_index`` accepts."""

DOCPLANE_DIR = ".docplane"
"""Per-project data directory (config, derived artifacts)."""

DEFAULT_INDEX_FILENAME = "references.json"

# =============================================================================
# Shared-Type Naming
# =============================================================================

PAIR_TOKEN_PATTERN = r"[0-9]{2}--[0-9]{2}"
"""Fixed-width two-digit zero-padded interface pair, e.g. ``01--02``."""

TOKEN_SEPARATOR = "_"
"""Joins pair tokens in a shared-type filename."""

MIN_SHARED_PAIRS = 2
"""A shared type groups at least this many interface pairs."""

# =============================================================================
# Document Parsing
# =============================================================================

COMPONENT_SECTION_NAMES = ("Architecture", "Components", "Implementation")
"""Level-2 section headings that hold component definitions."""

COMPONENT_LOOKAHEAD_LINES = 5
"""Lines scanned after a component heading for its **File**/**Location** field."""

TERM_DEFINITION_MAX_LEVEL = 3
"""Deepest heading level that can define a term."""

MARKDOWN_SUFFIX = ".md"
