"""Shared state resets for CLI tests."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from docplane.core.logging import reset_logging


@pytest.fixture(autouse=True)
def reset_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Reset logging, env and the global config path between tests."""
    reset_logging()
    for key in [k for k in os.environ if k.startswith("DOCPLANE__")]:
        monkeypatch.delenv(key)
    monkeypatch.setattr(
        "docplane.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "no-global-config.yaml"
    )
    yield
    reset_logging()
