"""Client for the remote flow execution service.

Flows are not executed in this process. The backend forwards
`{"flow": ..., "inputs": ...}` to `<executor_url>/api/flow/execute` and hands
back the service's `ExecutionResult`. Transport problems become a failed
result rather than an exception, so callers always get something to show.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from pydantic import ValidationError

from flowcanvas.visual.models import ExecuteFlowRequest, ExecutionResult

logger = logging.getLogger(__name__)


def _failed(message: str, *, flow_name: Optional[str], started: float) -> ExecutionResult:
    return ExecutionResult(
        success=False,
        error=message,
        flow_name=flow_name,
        duration=time.monotonic() - started,
    )


def execute_flow_remote(
    request: ExecuteFlowRequest,
    *,
    executor_url: Optional[str],
    token: Optional[str] = None,
    timeout_s: float = 300.0,
) -> ExecutionResult:
    started = time.monotonic()
    flow_name = request.flow.name or None
    base = str(executor_url or "").strip().rstrip("/")
    if not base:
        return _failed("No execution service configured (set FLOWCANVAS_EXECUTOR_URL)", flow_name=flow_name, started=started)

    url = f"{base}/api/flow/execute"
    body = json.dumps(request.model_dump(mode="json", by_alias=True, exclude_none=True)).encode("utf-8")
    headers = {"Content-Type": "application/json"}
    if isinstance(token, str) and token.strip():
        headers["Authorization"] = f"Bearer {token.strip()}"

    req = Request(url=url, data=body, method="POST", headers=headers)
    try:
        with urlopen(req, timeout=float(timeout_s)) as resp:
            raw = resp.read().decode("utf-8")
    except HTTPError as e:
        detail = ""
        try:
            detail = e.read().decode("utf-8")
        except Exception:
            detail = ""
        logger.warning(f"Execution service returned HTTP {e.code} for flow '{flow_name}'")
        return _failed(f"HTTP {e.code}: {detail or e.reason}", flow_name=flow_name, started=started)
    except (URLError, TimeoutError) as e:
        logger.warning(f"Execution service unreachable at {url}: {e}")
        return _failed(f"Request failed: {e}", flow_name=flow_name, started=started)

    try:
        data: Dict[str, Any] = json.loads(raw)
        return ExecutionResult.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Invalid response from execution service: {e}")
        return _failed(f"Invalid response: {e}", flow_name=flow_name, started=started)
