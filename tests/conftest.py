"""flowcanvas test bootstrap.

Tests import both `flowcanvas` and the `web.backend` host package. When the
project is not installed (plain checkout), make the repository root importable
so both resolve to the working tree.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _prepend_sys_path(path: Path) -> None:
    p = str(path)
    if p and p not in sys.path:
        sys.path.insert(0, p)


HERE = Path(__file__).resolve()
REPO_ROOT = HERE.parents[1]

_prepend_sys_path(REPO_ROOT)


@pytest.fixture(autouse=True)
def _isolated_server_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "FLOWCANVAS_FLOW_PATH",
        "FLOWCANVAS_SHOW_START_END_NODE",
        "FLOWCANVAS_EXECUTOR_URL",
        "FLOWCANVAS_EXECUTOR_TOKEN",
        "FLOWCANVAS_EXECUTOR_TIMEOUT_S",
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
        "GITHUB_PLAYGROUND_PAT",
    ):
        monkeypatch.delenv(name, raising=False)
