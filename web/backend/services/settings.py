"""Environment-backed settings for the flow viewer backend.

`flowcanvas serve` writes its flags into the environment before starting
uvicorn, so the app (and its reloader workers) read everything from here.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional


DEFAULT_EXECUTOR_TIMEOUT_S = 300.0

# provider name -> env var holding its credential
PROVIDER_CREDENTIALS: Dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "github_playground_openai": "GITHUB_PLAYGROUND_PAT",
}


def _flag_enabled(value: str | None) -> bool:
    s = str(value or "").strip().lower()
    return s in {"1", "true", "yes", "on"}


def _float_env(name: str, default: float) -> float:
    raw = str(os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class ServerSettings:
    flow_path: Optional[Path]
    show_start_end_node: bool
    executor_url: Optional[str]
    executor_token: Optional[str]
    executor_timeout_s: float


def load_settings() -> ServerSettings:
    flow_raw = str(os.getenv("FLOWCANVAS_FLOW_PATH") or "").strip()
    url = str(os.getenv("FLOWCANVAS_EXECUTOR_URL") or "").strip().rstrip("/")
    token = str(os.getenv("FLOWCANVAS_EXECUTOR_TOKEN") or "").strip()
    return ServerSettings(
        flow_path=Path(flow_raw).expanduser() if flow_raw else None,
        show_start_end_node=_flag_enabled(os.getenv("FLOWCANVAS_SHOW_START_END_NODE")),
        executor_url=url or None,
        executor_token=token or None,
        executor_timeout_s=_float_env("FLOWCANVAS_EXECUTOR_TIMEOUT_S", DEFAULT_EXECUTOR_TIMEOUT_S),
    )


def available_providers() -> List[str]:
    """Providers whose credential env var is set, sorted by name."""
    return sorted(name for name, var in PROVIDER_CREDENTIALS.items() if str(os.getenv(var) or "").strip())
