from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.decl_builder import DeclarationBuilder


@pytest.fixture
def decl_builder(tmp_path: Path) -> DeclarationBuilder:
    """Provide a declaration tree builder rooted at the pytest tmp_path."""
    return DeclarationBuilder(tmp_path)
