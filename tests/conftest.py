"""Shared pytest fixtures for the dyntemplate test suite.

Provides reusable fixtures for:
- A host state whose editor actions are recorded instead of executed
- A scripted selector standing in for the terminal UI
- Recording template helpers and a fixed clock
- Writing configuration sources into temporary directories
"""

from __future__ import annotations

import textwrap
from datetime import datetime
from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from dyntemplate.engine.context import Helpers, HostState


# ---------------------------------------------------------------------------
# Host & UI
# ---------------------------------------------------------------------------

@pytest.fixture
def host(tmp_path: Path) -> HostState:
    """Host with one workspace folder; ``open_path`` is a MagicMock."""
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    state = HostState(workspace_folders=[str(workspace)])
    state.open_path = MagicMock()
    return state


@pytest.fixture
def selector() -> MagicMock:
    """Selector whose methods are AsyncMocks that cancel by default."""
    sel = MagicMock()
    sel.pick = AsyncMock(return_value=None)
    sel.pick_or_edit = AsyncMock(return_value=None)
    sel.confirm = AsyncMock(return_value=False)
    return sel


@pytest.fixture
def helpers() -> Helpers:
    """Template helpers that record calls instead of touching the system."""
    return Helpers(
        vsopen=MagicMock(),
        vsadd=MagicMock(),
        vsexec=MagicMock(),
        vsget=AsyncMock(return_value="<html>remote</html>"),
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 1, 5, 9, 7, 30)


# ---------------------------------------------------------------------------
# Configuration sources
# ---------------------------------------------------------------------------

@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str, str], str]:
    """Factory writing dedented configuration *code* to ``tmp_path/<name>``.

    Returns the absolute path of the written file as a string.
    """

    def _write(name: str, code: str) -> str:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(code), encoding="utf-8")
        return str(path)

    return _write
