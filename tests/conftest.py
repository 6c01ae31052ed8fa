from __future__ import annotations

from pathlib import Path

import pytest

from codegauge.engine.tree_sitter import GrammarRegistry, get_registry


@pytest.fixture(scope="session")
def registry() -> GrammarRegistry:
    return get_registry()


@pytest.fixture()
def project_dir(tmp_path: Path) -> Path:
    (tmp_path / "pyproject.toml").write_text("[project]\nname = 'sample'\n", encoding="utf-8")
    return tmp_path
