"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages, and
provides a small builder for on-disk documentation corpora.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of docplane modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("docplane"):
        del sys.modules[module_name]

from docplane.config.models import DocPlaneConfig, IndexConfig  # noqa: E402
from docplane.graph.context import ParseContext  # noqa: E402


def render_frontmatter(fields: dict[str, str | list[str]]) -> str:
    """Frontmatter block in the line-oriented form the scanner reads."""
    lines = ["---"]
    for key, value in fields.items():
        if isinstance(value, list):
            lines.append(f"{key}:")
            lines.extend(f"  - {item}" for item in value)
        else:
            lines.append(f"{key}: {value}")
    lines.append("---")
    return "\n".join(lines) + "\n"


class ProjectBuilder:
    """Writes a project tree under a temporary root."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def write(self, rel_path: str, text: str) -> Path:
        path = self.root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def feature(self, feature_id: str, body: str = "", **fields: str | list[str]) -> Path:
        frontmatter: dict[str, str | list[str]] = {
            "feature": feature_id,
            "status": "active",
            "entry_point": f"src/{feature_id}.ts",
        }
        frontmatter.update(fields)
        text = render_frontmatter(frontmatter) + f"\n# {feature_id}\n\n{body}\n"
        return self.write(f"tasks/features/{feature_id}.md", text)

    def interface(
        self, interface_id: str, source: str, target: str, body: str = "", **fields: str | list[str]
    ) -> Path:
        frontmatter: dict[str, str | list[str]] = {"from": source, "to": target, "type": "api"}
        frontmatter.update(fields)
        text = render_frontmatter(frontmatter) + f"\n# {interface_id}\n\n{body}\n"
        return self.write(f"tasks/interfaces/{interface_id}.md", text)

    def shared(
        self, stem: str, interfaces: list[str] | None = None, **fields: str | list[str]
    ) -> Path:
        frontmatter: dict[str, str | list[str]] = {
            "interfaces": interfaces if interfaces is not None else stem.split("_"),
            "type": "shared",
            "status": "active",
        }
        frontmatter.update(fields)
        text = render_frontmatter(frontmatter) + f"\n# {stem}\n"
        return self.write(f"tasks/shared/{stem}.md", text)

    def code(self, rel_path: str, text: str = "export {};\n") -> Path:
        return self.write(rel_path, text)


@pytest.fixture
def project(tmp_path: Path) -> ProjectBuilder:
    """Empty project root with a builder for documents and code files."""
    root = tmp_path / "project"
    root.mkdir()
    return ProjectBuilder(root)


@pytest.fixture
def config() -> DocPlaneConfig:
    """Default config, parsing sequentially for deterministic logs."""
    return DocPlaneConfig(index=IndexConfig(max_workers=1))


@pytest.fixture
def ctx() -> Iterator[ParseContext]:
    """Parse context with the default global scope paths."""
    context = ParseContext(global_scope_paths=("docs/GLOSSARY.md", "docs/terms/"))
    yield context
    context.clear()
