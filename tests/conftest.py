import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from porter.config import get_settings
from porter.logging import PACKAGE_LOGGER

BASIC_MANIFEST = """\
name: test-agent
version: 1.0.0
description: A test agent
engine:
  clawdbot: ">=1.0.0"
context:
  soul: SOUL.md
env:
  required:
    - API_KEY
"""


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    monkeypatch.delenv("PORTER_OUTPUT_DIR", raising=False)
    monkeypatch.delenv("PORTER_GITHUB_BASE_URL", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers.clear()
    package_logger.propagate = True


@pytest.fixture
def make_workspace(tmp_path: Path) -> Callable[..., Path]:
    """Build an agent workspace from a {relative_path: content} mapping."""

    def _make(
        files: dict[str, str] | None = None,
        *,
        manifest: str | None = BASIC_MANIFEST,
        name: str = "workspace",
    ) -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        if manifest is not None:
            (root / "porter.yaml").write_text(manifest, encoding="utf-8")
        for relative, content in (files or {"SOUL.md": "# Test Soul\n"}).items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _make
